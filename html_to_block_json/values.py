"""
Schema-driven value extraction.

``extract_value`` turns an element plus a resolved schema node into a JSON
value: a string, an object or a list. ``None`` means "absent" everywhere;
empty strings are real values and are kept.
"""

import logging
from typing import Any, Dict, List, Optional

from bs4 import Tag

from .dom import get_attribute, get_text, select_all, select_one
from .schema import TEXT, ArraySchema, ObjectSchema, SchemaNode, StringSchema

logger = logging.getLogger(__name__)


def extract_value_from_element(element: Tag, attribute_name: str) -> str:
    """Attribute value of an element, or its trimmed text.

    The text sentinel and missing attributes both fall back to text content.
    An attribute present with an empty value returns ''.
    """
    if attribute_name == TEXT:
        return get_text(element).strip()

    value = get_attribute(element, attribute_name)
    if value is not None:
        return value

    return get_text(element).strip()


def find_element_with_selector(context: Tag, selector: str) -> Optional[Tag]:
    return select_one(selector, context)


def find_element(context: Tag, selector: Optional[str] = None,
                 shared_element: Optional[Tag] = None) -> Optional[Tag]:
    """Element a property reads from: selector match, else the shared element."""
    if selector:
        return find_element_with_selector(context, selector)
    return shared_element


def extract_string_value(context: Tag, schema: StringSchema, shared_element: Optional[Tag] = None,
                         property_name: Optional[str] = None) -> Optional[str]:
    attribute_name = schema.attribute or property_name or TEXT
    element = find_element(context, schema.selector, shared_element)

    if element is None:
        # no selector and nothing shared: read the context element itself
        if not schema.selector and shared_element is None:
            return extract_value_from_element(context, attribute_name)
        return None

    return extract_value_from_element(element, attribute_name)


def extract_array_value(context: Tag, schema: ArraySchema) -> Optional[List[Any]]:
    if not schema.selector or schema.items is None:
        return None

    elements = select_all(schema.selector, context)
    if not elements:
        return None

    results = [extract_value(element, schema.items) for element in elements]
    results = [value for value in results if value is not None]

    return results if results else None


def extract_object_value(context: Tag, schema: ObjectSchema) -> Optional[Dict[str, Any]]:
    shared_element = None

    # A selector on the object scopes every sub-property. If it matches
    # nothing, the whole object is absent.
    if schema.selector:
        shared_element = find_element(context, schema.selector)
        if shared_element is None:
            return None

    extraction_context = shared_element if shared_element is not None else context
    result: Dict[str, Any] = {}

    for name, property_schema in schema.properties.items():
        try:
            value = extract_value(extraction_context, property_schema, shared_element, name)
        except Exception as e:
            logger.warning(f'Error extracting property {name}: {e}')
            continue
        if value is not None:
            result[name] = value

    # all or nothing: a missing required property invalidates the object
    if schema.required and any(name not in result for name in schema.required):
        return None

    return result if result else None


def extract_value(context: Optional[Tag], schema: Optional[SchemaNode], shared_element: Optional[Tag] = None,
                  property_name: Optional[str] = None) -> Any:
    """Extract one value from ``context`` according to ``schema``."""
    if context is None or schema is None:
        return None

    if isinstance(schema, StringSchema):
        return extract_string_value(context, schema, shared_element, property_name)

    if isinstance(schema, ArraySchema):
        return extract_array_value(context, schema)

    if isinstance(schema, ObjectSchema):
        result = extract_object_value(context, schema)
        # a referenced base element's single wrapper key disappears when embedded
        if schema.from_ref and isinstance(result, dict) and len(result) == 1:
            return next(iter(result.values()))
        return result

    # unresolved $ref or unsupported type
    return None


def extract_block(element: Tag, schema: Optional[SchemaNode], block_name: str) -> Optional[Dict[str, Any]]:
    """Apply a schema's top-level properties directly to an element.

    Each property is extracted independently; a failing property is logged
    and skipped.
    """
    if element is None or not isinstance(schema, ObjectSchema) or not schema.properties:
        return None

    data: Dict[str, Any] = {}
    for name, property_schema in schema.properties.items():
        try:
            value = extract_value(element, property_schema, None, name)
        except Exception as e:
            logger.warning(f'Error extracting property {name} for block {block_name}: {e}')
            continue
        if value is not None:
            data[name] = value

    return data if data else None
