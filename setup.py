"""Package configuration for cfd-chart.

This file defines installation metadata and console entry points.
"""

import os

import setuptools


def _read_requirements(here, filename):
    """Requirement lines of `filename`, without comments or includes."""
    try:
        with open(os.path.join(here, filename), encoding="utf-8") as f:
            return [
                line.strip()
                for line in f.read().splitlines()
                if line.strip()
                and not line.strip().startswith("#")
                and not line.strip().startswith("-r ")
            ]
    except OSError:
        return []


def main():
    """Entrypoint for invoking setuptools.setup with package metadata."""

    here = os.path.abspath(os.path.dirname(__file__))

    try:
        with open(os.path.join(here, "README.md"), encoding="utf-8") as f:
            long_description = f.read()
    except OSError:
        long_description = ""

    setuptools.setup(
        name="cfd-chart",
        version="0.1",
        description="Cumulative Flow Diagrams rendered to SVG with matplotlib",
        long_description=long_description,
        long_description_content_type="text/markdown",
        license="MIT",
        keywords="agile kanban cumulative flow diagram chart svg",
        packages=setuptools.find_packages(include=["cfd_chart", "cfd_chart.*"]),
        install_requires=_read_requirements(here, "requirements-prod.txt"),
        extras_require={"test": _read_requirements(here, "requirements-dev.txt")},
        python_requires=">=3.9",
        entry_points={
            "console_scripts": [
                "cfd-chart=cfd_chart.cli:main",
            ],
        },
    )


if __name__ == "__main__":
    main()
