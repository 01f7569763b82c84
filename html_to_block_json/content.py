"""
Schema-less content extraction.

Maps page elements 1:1 onto JSON (headings, paragraphs, images, lists, links,
blocks) and groups them by section. Used when a page is rendered without
schemas.
"""

import re
from typing import Any, Dict, List, Optional

from bs4 import Comment, NavigableString, Tag

from .dom import class_list, element_children, get_attribute, get_text, select_one, tag_name

SECTION_METADATA_CLASS = 'section-metadata'

HEADING_PATTERN = re.compile(r'^h[1-6]$')


def is_block_div(node, marker: str = SECTION_METADATA_CLASS) -> bool:
    """A div with classes that is not section metadata."""
    if tag_name(node) != 'div':
        return False
    classes = class_list(node)
    return bool(classes) and marker not in classes


def _is_blank_text(node) -> bool:
    return isinstance(node, NavigableString) and not str(node).strip()


def extract_list_items(list_node: Tag) -> List[Any]:
    """Extract list items, preserving nested structure."""
    items = []
    for li in element_children(list_node):
        if li.name != 'li':
            continue
        content = []
        for child in li.children:
            extracted = extract_content_element(child)
            if isinstance(extracted, list):
                content.extend(extracted)
            elif extracted:
                content.append(extracted)

        if len(content) == 1:
            items.append(content[0])
        elif content:
            items.append(content)
        else:
            items.append(get_text(li).strip())
    return items


def _extract_image(img: Tag) -> Dict[str, Any]:
    return {
        "type": "image",
        "src": get_attribute(img, 'src') or '',
        "alt": get_attribute(img, 'alt') or '',
    }


def _extract_inline(node: Tag, node_type: str) -> Dict[str, Any]:
    children = list(node.children)
    if len(children) == 1 and isinstance(children[0], NavigableString) and not isinstance(children[0], Comment):
        return {
            "type": node_type,
            "text": get_text(node).strip()
        }

    content = []
    for child in children:
        if isinstance(child, Comment):
            continue
        if isinstance(child, NavigableString):
            text = str(child)
            if text.strip():
                content.append(text)
            continue
        extracted = extract_content_element(child)
        if isinstance(extracted, list):
            content.extend(item for item in extracted if item)
        elif extracted:
            content.append(extracted)

    return {
        "type": node_type,
        "content": content
    }


def _table_rows(table: Tag) -> List[Tag]:
    tbody = next((c for c in element_children(table) if c.name == 'tbody'), None)
    container = tbody if tbody is not None else table
    return [row for row in element_children(container) if row.name == 'tr']


def _extract_block_table(table: Tag) -> Optional[Dict[str, Any]]:
    """Tables whose first row starts with a header cell are authored blocks."""
    rows = _table_rows(table)
    if not rows:
        return None
    headers = [c for c in element_children(rows[0]) if c.name == 'th']
    if not headers:
        return None

    return {
        "type": "block",
        "name": get_text(headers[0]).strip().lower(),
        "rows": [[get_text(cell) for cell in element_children(tr)] for tr in rows[1:]]
    }


def extract_content_element(node) -> Any:
    """Main content extraction dispatcher."""
    if node is None or isinstance(node, Comment):
        return None
    if isinstance(node, NavigableString):
        if _is_blank_text(node):
            return None
        return {"type": "text", "text": str(node)}
    if not isinstance(node, Tag):
        return None

    name = node.name

    if HEADING_PATTERN.match(name):
        return {
            "type": "heading",
            "level": int(name[1]),
            "text": get_text(node).strip()
        }

    if name in ('p', 'strong', 'em'):
        return _extract_inline(node, 'paragraph' if name == 'p' else name)

    if name == 'picture':
        img = next((c for c in element_children(node) if c.name == 'img'), None)
        if img is not None:
            return _extract_image(img)

    if name == 'img':
        return _extract_image(node)

    if name in ('ul', 'ol'):
        return {
            "type": "list",
            "ordered": name == 'ol',
            "items": extract_list_items(node)
        }

    if name == 'a':
        return {
            "type": "link",
            "href": get_attribute(node, 'href') or '',
            "text": get_text(node).strip()
        }

    if name == 'table':
        block = _extract_block_table(node)
        if block:
            return block

    if is_block_div(node):
        classes = class_list(node)
        block_name = classes[0]
        block = {
            "type": "block",
            "name": block_name,
            "content": [c for c in map(extract_content_element, node.children) if c]
        }
        options = [cls for cls in classes if cls != block_name]
        if options:
            block["options"] = options
        return block

    # plain divs are flattened into their children
    if name == 'div':
        return [c for c in map(extract_content_element, node.children) if c]

    return {"tag": name}


def extract_section_metadata(section: Tag, marker: str = SECTION_METADATA_CLASS) -> Optional[Dict[str, str]]:
    """Read ``<div class="section-metadata">`` key/value rows."""
    meta_div = select_one(f'div.{marker}', section)
    if meta_div is None:
        return None

    meta = {}
    for row in element_children(meta_div):
        cells = element_children(row)
        if row.name != 'div' or len(cells) != 2:
            continue
        key = get_text(cells[0]).strip().lower()
        if key:
            meta[key] = get_text(cells[1]).strip()
    return meta if meta else None


def extract_main(main: Optional[Tag], marker: str = SECTION_METADATA_CLASS) -> List[Dict[str, Any]]:
    """One ``{metadata?, section}`` entry per direct div of main."""
    if main is None:
        return []

    sections = []
    for section_div in element_children(main):
        if section_div.name != 'div':
            continue

        content = []
        for child in section_div.children:
            if tag_name(child) == 'div' and marker in class_list(child):
                continue
            extracted = extract_content_element(child)
            if isinstance(extracted, list):
                content.extend(item for item in extracted if item)
            elif extracted:
                content.append(extracted)

        section: Dict[str, Any] = {}
        metadata = extract_section_metadata(section_div, marker)
        if metadata:
            section["metadata"] = metadata
        section["section"] = content
        sections.append(section)
    return sections
