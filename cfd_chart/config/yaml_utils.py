"""YAML loading for cfd-chart configuration files.

Every mapping in the document, at any depth, is built as a pydicti
``odicti``: insertion-ordered and case-insensitive, so ``Data``, ``data`` and
``DATA`` name the same key.
"""

import yaml
from pydicti import odicti


def ordered_load(stream, loader=yaml.SafeLoader, mapping_type=odicti):
    """
    Load a YAML document, building every mapping as `mapping_type`.
    """

    def construct_mapping(loader, node, _deep=False):
        loader.flatten_mapping(node)
        return mapping_type(loader.construct_pairs(node))

    # Register on a subclass with its own constructor table, leaving `loader` as is
    CaseInsensitiveLoader = type(
        "CaseInsensitiveLoader",
        (loader,),
        {"yaml_constructors": dict(loader.yaml_constructors)},
    )
    CaseInsensitiveLoader.add_constructor(
        yaml.resolver.BaseResolver.DEFAULT_MAPPING_TAG, construct_mapping
    )

    return yaml.load(stream, CaseInsensitiveLoader)
