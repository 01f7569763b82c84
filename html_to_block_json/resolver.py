"""
Schema resolver.

Loads block and base element schemas from a SchemaSource, resolves ``$ref``
indirection and caches the resolved schemas for the lifetime of the resolver.
Create one resolver per page render.

Reference resolution works on the raw JSON documents and follows three rules:

* a node with a concrete ``type`` keeps its own definition;
* a node with only a ``$ref`` is replaced by the referenced base element
  schema (itself resolved first), keeping only the extraction fields of the
  target and laying the node's own fields on top, flagged with
  ``x-aem-base-ref``;
* object and array nodes are resolved through ``properties`` / ``items``.

The chain of schema identities being resolved is passed down explicitly. A
node already on the chain is returned unresolved, which is what makes cyclic
references terminate; such a node ends up as a RefSchema and extracts to None.
"""

import asyncio
import json
import logging
import re
from typing import Any, Dict, FrozenSet, Iterable, List, Mapping, Optional

from .config import DEFAULT_CONFIG
from .exceptions import SchemaError
from .schema import BASE_REF, REF, Schema, parse_schema, unresolved_refs
from .sources import SchemaSource, base_schema_path, block_schema_path

logger = logging.getLogger(__name__)

# Fields of a referenced schema that survive the merge
REF_FIELDS = (
    'type',
    'properties',
    'items',
    'required',
    'x-aem-selector',
    'x-aem-attribute',
    'description',
    'format',
)

# "../base/text.schema.json", "text.schema.json", ...
REF_PATTERN = re.compile(r'([^/]+)\.schema\.json$')


def schema_identity(schema: Dict[str, Any]) -> str:
    """Identity used for cycle detection: $id when present, else the content."""
    schema_id = schema.get('$id')
    if isinstance(schema_id, str) and schema_id:
        return schema_id
    return json.dumps(schema, sort_keys=True, default=str)


def merge_ref(schema: Dict[str, Any], target: Dict[str, Any]) -> Dict[str, Any]:
    """Merge a resolved reference target under the referencing node."""
    clean = {key: target[key] for key in REF_FIELDS if key in target}
    merged = {**clean, **schema}
    merged[BASE_REF] = True
    merged.pop(REF, None)
    return merged


class SchemaResolver:
    """Per-render schema loader with $ref resolution and caching."""

    def __init__(self, source: SchemaSource, supported_blocks: Optional[Iterable[str]] = None,
                 base_elements: Optional[Mapping[str, str]] = None):
        self.source = source
        self.supported_blocks = set(supported_blocks) if supported_blocks is not None else None
        if base_elements is None:
            base_elements = DEFAULT_CONFIG['base_elements']
        self.base_elements = dict(base_elements)
        self._schema_cache: Dict[str, Schema] = {}
        # raw documents by path, None for "not found"
        self._document_cache: Dict[str, Optional[Dict[str, Any]]] = {}

    @classmethod
    def from_config(cls, source: SchemaSource, config: Dict[str, Any]) -> 'SchemaResolver':
        return cls(
            source,
            supported_blocks=config.get('supported_blocks'),
            base_elements=config.get('base_elements'),
        )

    # Loading

    async def load_block_schema(self, block_name: str, variant_name: Optional[str] = None) -> Optional[Schema]:
        """Load a block schema, preferring ``<name>.<variant>`` when a variant is given."""
        if variant_name:
            variant_key = f'block:{block_name}.{variant_name}'
            if variant_key in self._schema_cache:
                return self._schema_cache[variant_key]
            try:
                schema = await self._load(block_schema_path(block_name, variant_name))
            except SchemaError as e:
                # fall back to the default schema
                logger.debug(f'Variant schema {block_name}.{variant_name} unavailable: {e}')
                schema = None
            if schema is not None:
                self._schema_cache[variant_key] = schema
                return schema

        cache_key = f'block:{block_name}'
        if cache_key in self._schema_cache:
            return self._schema_cache[cache_key]

        try:
            schema = await self._load(block_schema_path(block_name))
        except SchemaError as e:
            logger.warning(f'Failed to load block schema for {block_name}: {e}')
            return None

        if schema is not None:
            self._schema_cache[cache_key] = schema
        return schema

    async def load_base_element_schema(self, element_name: str) -> Optional[Schema]:
        """Load a base element schema (``schema/base/<name>.schema.json``)."""
        cache_key = f'base:{element_name}'
        if cache_key in self._schema_cache:
            return self._schema_cache[cache_key]

        try:
            schema = await self._load(base_schema_path(element_name))
        except SchemaError as e:
            logger.warning(f'Failed to load base element schema for {element_name}: {e}')
            return None

        if schema is not None:
            self._schema_cache[cache_key] = schema
        return schema

    async def _load(self, path: str) -> Optional[Schema]:
        document = await self._fetch_document(path)
        if document is None:
            return None

        resolved = await self.resolve_refs(document)
        schema = parse_schema(resolved)

        cyclic = unresolved_refs(schema)
        if cyclic:
            logger.debug(f'Schema {path} keeps unresolved references: {cyclic}')
        return schema

    async def _fetch_document(self, path: str) -> Optional[Dict[str, Any]]:
        if path in self._document_cache:
            return self._document_cache[path]
        # concurrent loads of the same uncached path may both fetch; last write wins
        document = await asyncio.to_thread(self.source.fetch, path)
        self._document_cache[path] = document
        return document

    # Reference resolution

    async def resolve_refs(self, schema: Any, visited: FrozenSet[str] = frozenset()) -> Any:
        """Resolve every $ref in a schema document. Returns a new document."""
        if not isinstance(schema, dict):
            return schema

        identity = schema_identity(schema)
        if identity in visited:
            return schema
        visited = visited | {identity}

        if REF in schema and not schema.get('type'):
            resolved = await self._resolve_ref_node(schema, visited)
            if resolved is schema:
                return schema
            return await self.resolve_refs(resolved, visited)

        properties = schema.get('properties')
        if isinstance(properties, dict) and properties:
            names = list(properties)
            values = await asyncio.gather(
                *(self.resolve_refs(properties[name], visited) for name in names)
            )
            schema = {**schema, 'properties': dict(zip(names, values))}

        items = schema.get('items')
        if isinstance(items, dict):
            schema = {**schema, 'items': await self.resolve_refs(items, visited)}

        return schema

    async def _resolve_ref_node(self, schema: Dict[str, Any], visited: FrozenSet[str]) -> Dict[str, Any]:
        ref = schema.get(REF)
        if not isinstance(ref, str):
            return schema
        try:
            target = await self.resolve_base_element_ref(ref, visited)
        except SchemaError as e:
            logger.warning(f'Error resolving nested $ref {ref}: {e}')
            return schema

        # a target without a concrete type is itself an unresolved reference
        if not target or not target.get('type'):
            return schema
        return merge_ref(schema, target)

    async def resolve_base_element_ref(self, ref: str,
                                       visited: FrozenSet[str] = frozenset()) -> Optional[Dict[str, Any]]:
        """Load and resolve the base element schema a $ref points at."""
        match = REF_PATTERN.search(ref)
        if not match:
            logger.warning(f'Cannot resolve base element reference: {ref}')
            return None

        document = await self._fetch_document(base_schema_path(match.group(1)))
        if document is None:
            logger.debug(f'Referenced base element schema not found: {ref}')
            return None
        return await self.resolve_refs(document, visited)

    # Supported names

    def get_supported_blocks(self) -> Optional[List[str]]:
        if self.supported_blocks is None:
            return None
        return sorted(self.supported_blocks)

    def get_supported_base_elements(self) -> List[str]:
        return list(self.base_elements)

    def is_supported_block(self, block_name: Optional[str]) -> bool:
        if not block_name:
            return False
        return self.supported_blocks is None or block_name in self.supported_blocks

    def is_supported_base_element(self, tag: Optional[str]) -> bool:
        return tag in self.base_elements

    def base_element_name(self, tag: str) -> Optional[str]:
        return self.base_elements.get(tag)

    def clear_cache(self):
        self._schema_cache.clear()
        self._document_cache.clear()
