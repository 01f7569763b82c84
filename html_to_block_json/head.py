"""Document head extraction."""

from typing import Any, Dict, Optional

from bs4 import Tag

from .dom import element_children, get_attribute, get_text

KEY_ATTRIBUTES = {
    'link': ('rel',),
    'meta': ('name', 'property'),
}

TEXT_TAGS = ('title', 'script', 'style')


def get_attrs(node: Tag) -> Optional[Dict[str, str]]:
    """Attributes of an element as strings (multi-valued ones joined)."""
    attrs = {name: get_attribute(node, name) for name in node.attrs}
    return attrs if attrs else None


def _key_for(node: Tag, attrs: Optional[Dict[str, str]]) -> Optional[str]:
    if not attrs:
        return None
    for attribute in KEY_ATTRIBUTES.get(node.name, ()):
        if attrs.get(attribute):
            return attrs[attribute]
    return None


def extract_head(head: Optional[Tag]) -> Dict[str, Any]:
    """Extract <head> children to JSON.

    ``link`` elements are keyed by ``rel``, ``meta`` elements are collected
    under ``"meta"`` as ``{tag, text}``, anything else is keyed by tag name.
    """
    if head is None:
        return {}

    result: Dict[str, Any] = {}
    for child in element_children(head):
        attrs = get_attrs(child)
        key = _key_for(child, attrs)

        if child.name == 'link' and key and attrs.get('href') is not None:
            result[key] = {"href": attrs['href']}
        elif child.name == 'meta' and key and attrs.get('content') is not None:
            result.setdefault("meta", []).append({
                "tag": key,
                "text": attrs['content']
            })
        else:
            entry: Dict[str, Any] = {}
            if attrs:
                entry["attrs"] = attrs
            if child.name in TEXT_TAGS:
                entry["text"] = get_text(child)
            result[child.name] = entry
    return result
