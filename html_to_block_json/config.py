"""Default extraction configuration."""

from copy import deepcopy
from typing import Any, Dict, Optional


DEFAULT_CONFIG: Dict[str, Any] = {
    # None means any block name is tried against the schema source
    "supported_blocks": None,
    # HTML tag -> base element schema name
    "base_elements": {
        "h1": "h1",
        "h2": "h2",
        "h3": "h3",
        "p": "paragraph",
        "a": "link",
        "picture": "picture",
        "ul": "list",
        "ol": "list",
    },
    "section_metadata_class": "section-metadata",
    "schema_timeout": 30,
    "transformer": None,
}


def build_config(overrides: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    """Merge user config with defaults."""
    config = deepcopy(DEFAULT_CONFIG)
    if overrides:
        config.update(overrides)
    return config
