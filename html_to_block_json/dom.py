"""
DOM helpers over BeautifulSoup trees.

Everything that touches the node tree goes through these functions: tag names,
attribute lookup, element children, parent lookup, text content and CSS
selector queries. Selector matching itself is soupsieve's (BeautifulSoup's
select backend); queries are scoped to the descendants of the node passed in,
so ``:scope > div`` means "direct div children of this node".
"""

from typing import List, Optional

from bs4 import BeautifulSoup, NavigableString, Tag


def is_element(node) -> bool:
    """True for element nodes (the document object itself is not an element)."""
    return isinstance(node, Tag) and not isinstance(node, BeautifulSoup)


def tag_name(node) -> Optional[str]:
    if not is_element(node):
        return None
    return node.name


def get_attribute(node, name: str) -> Optional[str]:
    """Return an attribute value as a string, or None when the attribute is absent.

    Multi-valued attributes (class, rel, ...) are joined with single spaces.
    An attribute present with an empty value returns ''.
    """
    if not is_element(node):
        return None
    value = node.attrs.get(name.lower())
    if value is None:
        return None
    if isinstance(value, (list, tuple)):
        return ' '.join(str(v) for v in value)
    return str(value)


def has_attribute(node, name: str) -> bool:
    return is_element(node) and name.lower() in node.attrs


def class_list(node) -> List[str]:
    """Ordered class tokens of an element."""
    if not is_element(node):
        return []
    classes = node.get('class')
    if not classes:
        return []
    if isinstance(classes, str):
        return classes.split()
    return [str(c) for c in classes if c]


def element_children(node) -> List[Tag]:
    """Direct element children in document order (text nodes skipped)."""
    if not isinstance(node, Tag):
        return []
    return [child for child in node.children if is_element(child)]


def parent_element(node) -> Optional[Tag]:
    parent = getattr(node, 'parent', None)
    if is_element(parent):
        return parent
    return None


def get_text(node) -> str:
    """Flattened text content of a node (text nodes concatenated, unstripped)."""
    if node is None:
        return ''
    if isinstance(node, NavigableString):
        return str(node)
    if isinstance(node, Tag):
        return node.get_text()
    return ''


def select_one(selector: str, scope) -> Optional[Tag]:
    """First descendant of ``scope`` matching ``selector`` in document order."""
    if not isinstance(scope, Tag):
        return None
    return scope.select_one(selector)


def select_all(selector: str, scope) -> List[Tag]:
    """All descendants of ``scope`` matching ``selector`` in document order."""
    if not isinstance(scope, Tag):
        return []
    return list(scope.select(selector))
