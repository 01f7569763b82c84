"""
Post-processing transformers for the schema-less page output.

Each transformer takes the ``{"head", "content"}`` document and returns a new
one; the input is never modified.
"""

import logging
from typing import Any, Callable, Dict

logger = logging.getLogger(__name__)

Transformer = Callable[[Any], Any]


def _has_sections(data: Any) -> bool:
    return isinstance(data, dict) and isinstance(data.get('content'), list)


def flatten_transformer(data: Any) -> Any:
    """Flatten nested lists inside each section's content by one level."""
    if not _has_sections(data):
        return data

    content = []
    for section in data['content']:
        if isinstance(section, dict) and isinstance(section.get('section'), list):
            flat = []
            for item in section['section']:
                if isinstance(item, list):
                    flat.extend(item)
                else:
                    flat.append(item)
            section = {**section, 'section': flat}
        content.append(section)

    return {**data, 'content': content}


def strip_metadata_transformer(data: Any) -> Any:
    """Drop section metadata, keeping only section content."""
    if not _has_sections(data):
        return data

    content = [
        {'section': section.get('section')} if isinstance(section, dict) else section
        for section in data['content']
    ]
    return {**data, 'content': content}


def _compact(value: Any) -> Any:
    if isinstance(value, list):
        return [item for item in map(_compact, value) if item is not None]

    if isinstance(value, dict):
        compacted = {}
        for key, item in value.items():
            item = _compact(item)
            if item is None:
                continue
            # skip empty arrays and empty objects
            if isinstance(item, (list, dict)) and not item:
                continue
            compacted[key] = item
        return compacted

    return value


def compact_transformer(data: Any) -> Any:
    """Remove None values, empty lists and empty objects recursively."""
    if data is None:
        return data
    return _compact(data)


TRANSFORMERS: Dict[str, Transformer] = {
    'flatten': flatten_transformer,
    'strip-metadata': strip_metadata_transformer,
    'compact': compact_transformer,
}


def apply_transformer(data: Any, transformer_name: str) -> Any:
    """Apply a named transformer; unknown names and failures leave data unchanged."""
    transformer = TRANSFORMERS.get(transformer_name)
    if transformer is None:
        logger.warning(f'Unknown transformer: {transformer_name}')
        return data

    try:
        return transformer(data)
    except Exception as e:
        logger.warning(f'Error applying transformer {transformer_name}: {e}')
        return data
