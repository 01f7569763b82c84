"""
Schema sources.

A source maps a relative schema path (``blocks/hero/hero.schema.json``) to a
parsed JSON document. ``None`` means "not found"; transport problems raise
SchemaFetchError and malformed documents raise SchemaFormatError.
"""

import json
import logging
import os
import threading
from typing import Any, Dict, Optional

import requests

from .exceptions import SchemaFetchError, SchemaFormatError

logger = logging.getLogger(__name__)


def block_schema_path(block_name: str, variant: Optional[str] = None) -> str:
    if variant:
        return f'blocks/{block_name}/{block_name}.{variant}.schema.json'
    return f'blocks/{block_name}/{block_name}.schema.json'


def base_schema_path(element_name: str) -> str:
    return f'schema/base/{element_name}.schema.json'


def _decode_document(text: str, location: str) -> Dict[str, Any]:
    try:
        document = json.loads(text)
    except json.JSONDecodeError as e:
        raise SchemaFormatError(f'Invalid JSON in schema {location}: {e}') from e
    if not isinstance(document, dict):
        raise SchemaFormatError(f'Schema {location} is not a JSON object')
    return document


class SchemaSource:
    """Key-addressable store of schema documents."""

    def fetch(self, path: str) -> Optional[Dict[str, Any]]:
        raise NotImplementedError


class HttpSchemaSource(SchemaSource):
    """Loads schemas over HTTP from a site's domain (or any base URL)."""

    def __init__(self, base_url: str, session: Optional[requests.Session] = None, timeout: float = 30):
        self.base_url = base_url.rstrip('/')
        self.session = session or requests.Session()
        self.timeout = timeout
        # fetch runs in worker threads; requests.Session is not thread-safe
        self._lock = threading.Lock()

    def url_for(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def fetch(self, path: str) -> Optional[Dict[str, Any]]:
        url = self.url_for(path)
        try:
            with self._lock:
                response = self.session.get(url, timeout=self.timeout)
        except requests.RequestException as e:
            raise SchemaFetchError(f'Schema loading failed: {url}: {e}') from e

        if not response.ok:
            logger.debug(f'Schema not found: {url} ({response.status_code})')
            return None

        return _decode_document(response.text, url)


class FileSchemaSource(SchemaSource):
    """Loads schemas from a local directory laid out like the site."""

    def __init__(self, root: str):
        self.root = root

    def fetch(self, path: str) -> Optional[Dict[str, Any]]:
        file_path = os.path.join(self.root, *path.split('/'))
        if not os.path.isfile(file_path):
            logger.debug(f'Schema not found: {file_path}')
            return None
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                text = f.read()
        except OSError as e:
            raise SchemaFetchError(f'Schema loading failed: {file_path}: {e}') from e
        return _decode_document(text, file_path)


def create_schema_source(location: str, session: Optional[requests.Session] = None,
                         timeout: float = 30) -> SchemaSource:
    """HTTP source for http(s) URLs, file source for anything else."""
    if location.startswith(('http://', 'https://')):
        return HttpSchemaSource(location, session=session, timeout=timeout)
    return FileSchemaSource(location)
