"""
Structural role annotation.

Roles are written onto the tree as ``data-*`` attributes so an annotated page
can be serialised back to HTML. Two passes:

1. tag roles: every element whose tag has an intrinsic meaning (headings,
   lists, links, tables, ...) gets that role, independent of position;
2. structure roles: ``div`` elements get section / block / row / cell purely
   from their parent's role, one level per nesting depth below ``main``.

The second pass depends on ``main`` being tagged by the first.
"""

import re
from typing import List, Optional

from bs4 import Tag

from .dom import class_list, is_element

ROLE_ATTRIBUTE = 'data-role'
LEVEL_ATTRIBUTE = 'data-level'
ORDERED_ATTRIBUTE = 'data-ordered'
BLOCK_NAME_ATTRIBUTE = 'data-block-name'
BLOCK_OPTIONS_ATTRIBUTE = 'data-block-options'

ROLES = (
    'page', 'metadata', 'content', 'main', 'section', 'block', 'row', 'cell',
    'heading', 'paragraph', 'list', 'list-item', 'link', 'image', 'table',
    'table-row', 'table-cell', 'emphasis', 'code', 'code-block', 'quote',
)

TAG_ROLES = {
    'html': 'page',
    'head': 'metadata',
    'body': 'content',
    'main': 'main',
    'p': 'paragraph',
    'ul': 'list',
    'ol': 'list',
    'li': 'list-item',
    'a': 'link',
    'picture': 'image',
    'table': 'table',
    'tr': 'table-row',
    'td': 'table-cell',
    'th': 'table-cell',
    'strong': 'emphasis',
    'b': 'emphasis',
    'em': 'emphasis',
    'i': 'emphasis',
    'code': 'code',
    'pre': 'code-block',
    'blockquote': 'quote',
}

# parent role -> role of a div directly below it
STRUCTURE_ROLES = {
    'main': 'section',
    'section': 'block',
    'block': 'row',
    'row': 'cell',
}

HEADING_PATTERN = re.compile(r'^h[1-6]$')

_STRUCTURE_ATTRIBUTES = (ROLE_ATTRIBUTE, BLOCK_NAME_ATTRIBUTE, BLOCK_OPTIONS_ATTRIBUTE)
_ROLE_ATTRIBUTES = _STRUCTURE_ATTRIBUTES + (LEVEL_ATTRIBUTE, ORDERED_ATTRIBUTE)


def get_role(node) -> Optional[str]:
    if not is_element(node):
        return None
    return node.attrs.get(ROLE_ATTRIBUTE)


def block_options(classes: Optional[List[str]], block_name: Optional[str]) -> List[str]:
    """Class tokens of a block other than its name, in order."""
    if not classes:
        return []
    return [cls for cls in classes if cls != block_name]


def _set_role(node: Tag, role: str):
    node[ROLE_ATTRIBUTE] = role


def _iter_elements(root: Tag):
    if is_element(root):
        yield root
    yield from root.find_all(True)


def annotate_tag_roles(root: Tag):
    """First pass: roles that follow from the tag name alone.

    Role attributes already present in the markup are dropped first, so only
    tag names and ancestor roles decide the result.
    """
    for node in _iter_elements(root):
        for attribute in _ROLE_ATTRIBUTES:
            if attribute in node.attrs:
                del node[attribute]

        name = node.name
        if HEADING_PATTERN.match(name):
            _set_role(node, 'heading')
            node[LEVEL_ATTRIBUTE] = name[1]
        elif name in TAG_ROLES:
            _set_role(node, TAG_ROLES[name])
            if name in ('ul', 'ol'):
                node[ORDERED_ATTRIBUTE] = 'true' if name == 'ol' else 'false'


def _annotate_structure_div(node: Tag, parent_role: Optional[str]):
    for attribute in _STRUCTURE_ATTRIBUTES:
        if attribute in node.attrs:
            del node[attribute]

    role = STRUCTURE_ROLES.get(parent_role)
    if not role:
        return

    _set_role(node, role)
    if role == 'block':
        classes = class_list(node)
        name = classes[0] if classes else None
        if name:
            node[BLOCK_NAME_ATTRIBUTE] = name
        options = block_options(classes, name)
        if options:
            node[BLOCK_OPTIONS_ATTRIBUTE] = ' '.join(options)


def annotate_structure(node, parent_role: Optional[str] = None):
    """Second pass: section / block / row / cell from the parent's role."""
    if not isinstance(node, Tag):
        return

    if is_element(node) and node.name == 'div':
        _annotate_structure_div(node, parent_role)

    # children see this node's resulting role, not its parent's
    current_role = get_role(node)
    for child in node.children:
        if isinstance(child, Tag):
            annotate_structure(child, current_role)


def classify(root: Tag):
    """Annotate ``root`` and all its descendants with roles, in place."""
    annotate_tag_roles(root)
    annotate_structure(root)
