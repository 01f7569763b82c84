"""
Section-level schema extraction.

Every direct ``div`` of ``<main>`` is a section. Each direct child of a
section is either a block (a ``div`` with classes: name, then variant) or a
primitive element (``h1``, ``p``, ``picture``, ...), and is extracted with the
matching schema. Results are merged into one object per section in document
order.
"""

import asyncio
import logging
from typing import Any, Dict, List, NamedTuple, Optional, Tuple

from bs4 import Tag

from .config import build_config
from .dom import class_list, element_children, select_all, tag_name
from .resolver import SchemaResolver
from .schema import Schema
from .values import extract_block, extract_value

logger = logging.getLogger(__name__)

BLOCK = 'block'
PRIMITIVE = 'primitive'


class SectionChild(NamedTuple):
    element: Tag
    kind: str
    name: str
    variant: Optional[str] = None


def is_section_metadata(element: Tag, marker: str) -> bool:
    return tag_name(element) == 'div' and marker in class_list(element)


def classify_section_child(element: Tag, resolver: SchemaResolver) -> Optional[SectionChild]:
    """Decide how a section child is extracted, or None to skip it."""
    name = tag_name(element)
    classes = class_list(element)

    if name == 'div' and classes:
        block_name = classes[0]
        variant = classes[1] if len(classes) > 1 else None
        if resolver.is_supported_block(block_name):
            return SectionChild(element, BLOCK, block_name, variant)
        return None

    if resolver.is_supported_base_element(name):
        return SectionChild(element, PRIMITIVE, resolver.base_element_name(name))

    return None


async def load_child_schema(child: Optional[SectionChild], resolver: SchemaResolver) -> Optional[Schema]:
    if child is None:
        return None
    if child.kind == BLOCK:
        return await resolver.load_block_schema(child.name, child.variant)
    return await resolver.load_base_element_schema(child.name)


def extract_block_entry(child: SectionChild, schema: Schema) -> Optional[Dict[str, Any]]:
    """Extract a block and wrap it as {data, option?}."""
    try:
        data = extract_value(child.element, schema, None, child.name)
    except Exception as e:
        logger.error(f'Error extracting block {child.name}: {e}')
        return None

    if data is None:
        return None

    entry: Dict[str, Any] = {'data': data}
    if child.variant:
        entry['option'] = child.variant
    return entry


async def extract_section_elements(section: Tag, resolver: SchemaResolver,
                                   config: Optional[Dict[str, Any]] = None) -> List[Tuple[str, Any]]:
    """Extract the blocks and primitives of one section as (key, value) pairs."""
    config = config or build_config()
    marker = config.get('section_metadata_class') or 'section-metadata'

    children = [
        classify_section_child(element, resolver)
        for element in element_children(section)
        if not is_section_metadata(element, marker)
    ]

    # independent schema loads run concurrently; order comes from `children`
    schemas = await asyncio.gather(*(load_child_schema(child, resolver) for child in children))

    entries: List[Tuple[str, Any]] = []
    for child, schema in zip(children, schemas):
        if child is None or schema is None:
            continue

        if child.kind == BLOCK:
            entry = extract_block_entry(child, schema)
            if entry is not None:
                entries.append((child.name, entry))
        else:
            # primitives are unwrapped: their own keys go into the section
            data = extract_block(child.element, schema, child.name)
            if data:
                entries.extend(data.items())

    return entries


def merge_section_entries(entries: List[Tuple[str, Any]]) -> Dict[str, Any]:
    """Merge pairs into one object; repeated keys become key_2, key_3, ..."""
    section: Dict[str, Any] = {}
    for key, value in entries:
        if key in section:
            index = 2
            new_key = f'{key}_{index}'
            while new_key in section:
                index += 1
                new_key = f'{key}_{index}'
            section[new_key] = value
        else:
            section[key] = value
    return section


async def extract_sections(main: Tag, resolver: SchemaResolver,
                           config: Optional[Dict[str, Any]] = None) -> List[Dict[str, Any]]:
    """One merged object per direct ``div`` child of ``main``, in document order."""
    config = config or build_config()
    section_divs = select_all(':scope > div', main)

    section_entries = await asyncio.gather(
        *(extract_section_elements(section, resolver, config) for section in section_divs)
    )
    return [merge_section_entries(entries) for entries in section_entries]
