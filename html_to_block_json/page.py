"""
HTML to Block JSON

Converts a rendered page into JSON, either with block schemas (one object per
section) or with the schema-less content mapping, and renders pages fetched
from a site for the HTTP entry points.
"""

import asyncio
import logging
from typing import Any, Dict, NamedTuple, Optional

import requests
from bs4 import BeautifulSoup

from .config import build_config
from .content import extract_main
from .context import ExtractionContext
from .exceptions import MissingMainError, PageFetchError
from .head import extract_head
from .resolver import SchemaResolver
from .roles import classify
from .sections import extract_sections
from .sources import create_schema_source
from .transformers import apply_transformer

logger = logging.getLogger(__name__)


class HTMLToBlockJSON:
    """Extracts block JSON from a page's HTML."""

    def __init__(self, html_content: str, config: Optional[Dict[str, Any]] = None):
        self.soup = BeautifulSoup(html_content, 'lxml')
        self.config = build_config(config)

    @property
    def main(self):
        return self.soup.find('main')

    @property
    def head(self):
        return self.soup.find('head')

    def extract(self) -> Dict[str, Any]:
        """Schema-less extraction: head plus sections of mapped content."""
        result = {
            "head": extract_head(self.head),
            "content": extract_main(self.main, self.config['section_metadata_class'])
        }

        transformer = self.config.get('transformer')
        if transformer:
            result = apply_transformer(result, transformer)
        return result

    async def extract_with_schema(self, resolver: SchemaResolver) -> Dict[str, Any]:
        """Schema extraction: one object per section of <main>."""
        main = self.main
        if main is None:
            raise MissingMainError()

        sections = await extract_sections(main, resolver, self.config)
        return {"sections": sections}

    def annotated_html(self) -> str:
        """The page with role annotations, serialised back to HTML."""
        classify(self.soup)
        return str(self.soup)


class RenderResult(NamedTuple):
    content_type: str
    body: Any


async def convert_html(html_content: str, schema_location: Optional[str] = None,
                       config: Optional[Dict[str, Any]] = None,
                       session: Optional[requests.Session] = None) -> Dict[str, Any]:
    """Convert HTML with schemas from ``schema_location``, or without schemas when None."""
    converter = HTMLToBlockJSON(html_content, config=config)
    if not schema_location:
        return converter.extract()

    source = create_schema_source(
        schema_location, session=session, timeout=converter.config['schema_timeout']
    )
    resolver = SchemaResolver.from_config(source, converter.config)
    return await converter.extract_with_schema(resolver)


async def fetch_page(url: str, session: requests.Session, timeout: float) -> str:
    try:
        response = await asyncio.to_thread(session.get, url, timeout=timeout)
    except requests.RequestException as e:
        raise PageFetchError(f"Failed to fetch EDS page: {url}: {e}") from e

    if not response.ok:
        raise PageFetchError(f"Failed to fetch EDS page: {url}", status=response.status_code)
    return response.text


async def render_page(ctx: ExtractionContext, session: Optional[requests.Session] = None,
                      config: Optional[Dict[str, Any]] = None) -> RenderResult:
    """Fetch the page a context points at and render it as requested."""
    config = build_config(config)
    if ctx.transformer:
        config['transformer'] = ctx.transformer
    session = session or requests.Session()

    logger.info(f"Rendering {ctx.page_url} (schema={ctx.use_schema}, html={ctx.html})")
    html_content = await fetch_page(ctx.page_url, session, config['schema_timeout'])

    if ctx.html:
        converter = HTMLToBlockJSON(html_content, config=config)
        return RenderResult("text/html; charset=utf-8", converter.annotated_html())

    schema_location = ctx.schema_location if ctx.use_schema else None
    result = await convert_html(html_content, schema_location, config=config, session=session)
    return RenderResult("application/json; charset=utf-8", result)
