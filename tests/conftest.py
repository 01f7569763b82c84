from __future__ import annotations

import copy
import json
from typing import Any

import pytest
from bs4 import BeautifulSoup

from html_to_block_json.resolver import SchemaResolver
from html_to_block_json.sources import SchemaSource


class MemorySchemaSource(SchemaSource):
    """Schema documents served from a dict, with per-path failures."""

    def __init__(self, documents: dict[str, Any], errors: dict[str, Exception] | None = None) -> None:
        self.documents = documents
        self.errors = errors or {}
        self.calls: list[str] = []

    def fetch(self, path: str):
        self.calls.append(path)
        if path in self.errors:
            raise self.errors[path]
        document = self.documents.get(path)
        return copy.deepcopy(document) if document is not None else None


class FakeResponse:
    def __init__(self, status_code: int = 200, text: str = "") -> None:
        self.status_code = status_code
        self.text = text

    @property
    def ok(self) -> bool:
        return 200 <= self.status_code < 400


class FakeSession:
    """Stands in for requests.Session: URL -> FakeResponse or exception."""

    def __init__(self, routes: dict[str, Any]) -> None:
        self.routes = routes
        self.requested: list[str] = []

    def get(self, url: str, timeout: float | None = None):
        self.requested.append(url)
        route = self.routes.get(url)
        if route is None:
            return FakeResponse(404, "Not found")
        if isinstance(route, Exception):
            raise route
        if isinstance(route, FakeResponse):
            return route
        if isinstance(route, (dict, list)):
            return FakeResponse(200, json.dumps(route))
        return FakeResponse(200, route)


HERO_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "title": "Hero Block",
    "type": "object",
    "properties": {
        "title": {"type": "string", "x-aem-selector": "h1"},
        "image": {
            "type": "object",
            "x-aem-selector": "picture img",
            "properties": {
                "src": {"type": "string", "format": "uri"},
                "alt": {"type": "string"},
            },
        },
    },
    "required": ["title", "image"],
}

CARDS_SCHEMA = {
    "title": "Cards Block",
    "type": "object",
    "properties": {
        "heading": {"type": "string", "x-aem-selector": "h2"},
        "cards": {
            "type": "array",
            "x-aem-selector": ":scope > div",
            "items": {
                "type": "object",
                "properties": {
                    "title": {"type": "string", "x-aem-selector": "strong"},
                    "link": {"$ref": "../base/link.schema.json"},
                },
                "required": ["title"],
            },
        },
    },
}

LINK_SCHEMA = {
    "$id": "https://schemas.example/base/link",
    "title": "Link",
    "type": "object",
    "x-aem-selector": "a",
    "properties": {
        "href": {"type": "string", "x-aem-attribute": "href"},
    },
    "required": ["href"],
}

H1_SCHEMA = {
    "title": "Heading 1",
    "type": "object",
    "properties": {"h1": {"type": "string"}},
}

PICTURE_SCHEMA = {
    "title": "Picture",
    "type": "object",
    "properties": {
        "image": {
            "type": "object",
            "x-aem-selector": "img",
            "properties": {
                "src": {"type": "string"},
                "alt": {"type": "string"},
            },
        },
    },
}


def schema_documents() -> dict[str, Any]:
    return {
        "blocks/hero/hero.schema.json": HERO_SCHEMA,
        "blocks/cards/cards.schema.json": CARDS_SCHEMA,
        "schema/base/link.schema.json": LINK_SCHEMA,
        "schema/base/h1.schema.json": H1_SCHEMA,
        "schema/base/picture.schema.json": PICTURE_SCHEMA,
    }


def first_element(html: str):
    """First element inside <body> of a parsed fragment."""
    return BeautifulSoup(html, "lxml").body.find(True)


def main_of(html: str):
    return BeautifulSoup(html, "lxml").find("main")


@pytest.fixture
def source() -> MemorySchemaSource:
    return MemorySchemaSource(schema_documents())


@pytest.fixture
def resolver(source: MemorySchemaSource) -> SchemaResolver:
    return SchemaResolver(source)
