"""
Block JSON extraction for block-structured HTML pages.

Most callers need only:
- HTMLToBlockJSON: parse a page, extract with or without schemas
- SchemaResolver: load and cache block schemas for one render
- extract_sections / extract_value: apply schemas to elements
"""

from .exceptions import (
    BlockJSONError,
    ExtractionError,
    MissingMainError,
    PageFetchError,
    SchemaError,
    SchemaFetchError,
    SchemaFormatError,
)
from .page import HTMLToBlockJSON, convert_html, render_page
from .resolver import SchemaResolver
from .roles import classify
from .sections import extract_sections
from .sources import FileSchemaSource, HttpSchemaSource, SchemaSource, create_schema_source
from .values import extract_block, extract_value

__all__ = [
    'BlockJSONError',
    'ExtractionError',
    'MissingMainError',
    'PageFetchError',
    'SchemaError',
    'SchemaFetchError',
    'SchemaFormatError',
    'HTMLToBlockJSON',
    'convert_html',
    'render_page',
    'SchemaResolver',
    'classify',
    'extract_sections',
    'FileSchemaSource',
    'HttpSchemaSource',
    'SchemaSource',
    'create_schema_source',
    'extract_block',
    'extract_value',
]
