from __future__ import annotations

import pytest

from html_to_block_json.config import build_config
from html_to_block_json.resolver import SchemaResolver
from html_to_block_json.sections import extract_sections, merge_section_entries

from conftest import MemorySchemaSource, main_of, schema_documents

HERO_PAGE = """
<main>
  <div>
    <div class="hero">
      <div><div><h1>Welcome</h1><picture><img src="/a.png" alt="A"></picture></div></div>
    </div>
    <div class="hero dark">
      <div><div><h1>Again</h1><picture><img src="/b.png" alt="B"></picture></div></div>
    </div>
    <div class="section-metadata">
      <div><div>style</div><div>highlight</div></div>
    </div>
  </div>
</main>
"""


@pytest.mark.asyncio
async def test_hero_blocks_are_extracted_and_repeated_keys_suffixed(resolver: SchemaResolver) -> None:
    sections = await extract_sections(main_of(HERO_PAGE), resolver)

    assert sections == [{
        "hero": {"data": {"title": "Welcome", "image": {"src": "/a.png", "alt": "A"}}},
        "hero_2": {"data": {"title": "Again", "image": {"src": "/b.png", "alt": "B"}}, "option": "dark"},
    }]


@pytest.mark.asyncio
async def test_primitives_are_unwrapped_into_the_section(resolver: SchemaResolver) -> None:
    main = main_of("""
    <main>
      <div>
        <h1>First</h1>
        <picture><img src="/p.png" alt="P"></picture>
        <h1>Second</h1>
        <span>ignored</span>
      </div>
      <div><h1>Next section</h1></div>
    </main>
    """)

    sections = await extract_sections(main, resolver)

    assert sections == [
        {"h1": "First", "image": {"src": "/p.png", "alt": "P"}, "h1_2": "Second"},
        {"h1": "Next section"},
    ]


@pytest.mark.asyncio
async def test_blocks_without_schema_or_support_are_skipped(source: MemorySchemaSource) -> None:
    resolver = SchemaResolver(source, supported_blocks=["hero"])
    main = main_of("""
    <main><div>
      <div class="cards"><div><div><strong>x</strong></div></div></div>
      <div class="unknown"><div><div>y</div></div></div>
    </div></main>
    """)

    assert await extract_sections(main, resolver) == [{}]
    assert not any(path.startswith("blocks/") for path in source.calls)


@pytest.mark.asyncio
async def test_array_without_matches_is_omitted_from_block(resolver: SchemaResolver) -> None:
    main = main_of('<main><div><div class="cards"><h2>Cards</h2></div></div></main>')

    sections = await extract_sections(main, resolver)

    assert sections == [{"cards": {"data": {"heading": "Cards"}}}]


@pytest.mark.asyncio
async def test_cards_with_referenced_links(resolver: SchemaResolver) -> None:
    main = main_of("""
    <main><div><div class="cards">
      <div><div><strong>One</strong><a href="/one">Read</a></div></div>
      <div><div><strong>Two</strong></div></div>
      <div><div><a href="/orphan">No title</a></div></div>
    </div></div></main>
    """)

    sections = await extract_sections(main, resolver)

    assert sections[0]["cards"]["data"]["cards"] == [
        {"title": "One", "link": "/one"},
        {"title": "Two"},
    ]


@pytest.mark.asyncio
async def test_custom_section_metadata_marker_is_excluded() -> None:
    documents = schema_documents()
    documents["blocks/meta/meta.schema.json"] = {
        "type": "object",
        "properties": {"text": {"type": "string"}},
    }
    resolver = SchemaResolver(MemorySchemaSource(documents))
    main = main_of('<main><div><div class="meta"><div><div>k</div><div>v</div></div></div></div></main>')

    sections = await extract_sections(main, resolver, build_config({"section_metadata_class": "meta"}))

    assert sections == [{}]


def test_merge_section_entries_suffixes_in_order() -> None:
    merged = merge_section_entries([("h1", "a"), ("p", "b"), ("h1", "c"), ("h1", "d")])

    assert list(merged.items()) == [("h1", "a"), ("p", "b"), ("h1_2", "c"), ("h1_3", "d")]


@pytest.mark.asyncio
async def test_property_of_unknown_type_is_dropped_alone() -> None:
    documents = schema_documents()
    documents["blocks/teaser/teaser.schema.json"] = {
        "type": "object",
        "properties": {
            "title": {"type": "string", "x-aem-selector": "h2"},
            "rating": {"type": "number", "x-aem-selector": ".rating"},
        },
    }
    resolver = SchemaResolver(MemorySchemaSource(documents))
    main = main_of('<main><div><div class="teaser"><h2>Hello</h2><span class="rating">4</span></div></div></main>')

    sections = await extract_sections(main, resolver)

    assert sections == [{"teaser": {"data": {"title": "Hello"}}}]
