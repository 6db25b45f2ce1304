import argparse
import logging
import os
import sys

from matplotlib.figure import Figure

from .chart import CFD
from .chart_styling_utils import set_chart_context
from .config import ChartGenerationError, ConfigError, config_to_settings
from .utils import get_extension

logger = logging.getLogger(__name__)


def configure_argument_parser():
    """Configure an ArgumentParser that manages command line options."""

    parser = argparse.ArgumentParser(
        description="Draw a cumulative flow diagram as SVG from a YAML configuration."
    )

    parser.add_argument("config", metavar="config.yml", nargs="?", help="Configuration file")
    parser.add_argument("-v", dest="verbose", action="store_true", help="Verbose output")
    parser.add_argument(
        "-vv",
        dest="very_verbose",
        action="store_true",
        help="Even more verbose output",
    )
    parser.add_argument(
        "--output",
        "-o",
        metavar="cfd.svg",
        help="Write the chart to this file rather than standard output.",
    )
    parser.add_argument(
        "--data-uri",
        action="store_true",
        help="Output a base64 data: URI instead of SVG markup.",
    )
    parser.add_argument("--title", metavar="TITLE", help="Chart title")
    parser.add_argument(
        "--predict",
        metavar="2020-01-01",
        help="Project the completion date from this date",
    )

    return parser


def main(argv=None):
    """Parse the command line, draw the chart and return the exit code."""
    parser = configure_argument_parser()
    args = parser.parse_args(argv)

    if not args.config:
        parser.print_usage()
        return 0

    logging.basicConfig(
        format="[%(asctime)s %(levelname)s] %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        level=(
            logging.DEBUG
            if args.very_verbose
            else logging.INFO if args.verbose else logging.WARNING
        ),
    )

    try:
        return run_command_line(args)
    except (ConfigError, ChartGenerationError) as e:
        logger.error("%s", e)
        print(f"Error: {e}", file=sys.stderr)
        return 1


def run_command_line(args):
    """Load the configuration in `args`, render it and write the output.

    Raises:
        ConfigError: if the configuration file is missing or invalid.
        ChartGenerationError: if drawing or writing the chart fails.
    """
    logger.debug("Parsing settings from %s", args.config)
    try:
        with open(args.config, encoding="utf-8") as config:
            settings = config_to_settings(
                config.read(), cwd=os.path.dirname(os.path.abspath(args.config))
            )
    except FileNotFoundError:
        raise ConfigError(f"Configuration file '{args.config}' not found") from None

    # Command line arguments override config file options
    override_options(settings, args)

    # Set charting context, which determines how charts are rendered
    set_chart_context("paper")
    settings["surface"] = Figure()

    chart = CFD(settings)
    output = chart.image() if args.data_uri else chart.svg()

    if not args.output:
        sys.stdout.write(output)
        sys.stdout.write("\n")
        return 0

    if not args.data_uri and get_extension(args.output) != ".svg":
        logger.warning("Writing SVG markup to %s", args.output)

    output_dir = os.path.dirname(args.output)
    if output_dir:
        os.makedirs(output_dir, exist_ok=True)

    logger.info("Writing CFD chart to %s", args.output)
    try:
        with open(args.output, "w", encoding="utf-8") as output_file:
            output_file.write(output)
    except OSError as e:
        raise ChartGenerationError(f"Failed to save chart file: {e}") from e
    return 0


def override_options(settings, arguments):
    """Update `settings` with the command line options that were given."""
    for key in ("title", "predict"):
        if getattr(arguments, key, None) is not None:
            settings[key] = getattr(arguments, key)


if __name__ == "__main__":
    sys.exit(main())
