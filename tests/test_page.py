from __future__ import annotations

import json
from pathlib import Path

import pytest

from html_to_block_json.context import get_context
from html_to_block_json.exceptions import MissingMainError, PageFetchError
from html_to_block_json.page import HTMLToBlockJSON, convert_html, render_page

from conftest import HERO_SCHEMA, FakeSession

PAGE = """
<html>
  <head><title>Hello</title></head>
  <body>
    <main>
      <div>
        <h1>Heading</h1>
        <div class="hero"><div><div><h1>Welcome</h1><picture><img src="/a.png" alt="A"></picture></div></div></div>
      </div>
    </main>
  </body>
</html>
"""

DOMAIN = "https://main--site--org.aem.live"


@pytest.mark.asyncio
async def test_missing_main_raises(resolver) -> None:
    converter = HTMLToBlockJSON("<html><body><p>no main</p></body></html>")

    with pytest.raises(MissingMainError):
        await converter.extract_with_schema(resolver)


@pytest.mark.asyncio
async def test_extract_with_schema(resolver) -> None:
    result = await HTMLToBlockJSON(PAGE).extract_with_schema(resolver)

    assert result == {"sections": [{
        "h1": "Heading",
        "hero": {"data": {"title": "Welcome", "image": {"src": "/a.png", "alt": "A"}}},
    }]}


def test_schema_less_extraction_applies_configured_transformer() -> None:
    result = HTMLToBlockJSON(PAGE, config={"transformer": "strip-metadata"}).extract()

    assert result["head"] == {"title": {"text": "Hello"}}
    assert result["content"][0]["section"][0] == {"type": "heading", "level": 1, "text": "Heading"}


def test_annotated_html_carries_roles() -> None:
    html = HTMLToBlockJSON(PAGE).annotated_html()

    assert 'data-role="section"' in html
    assert 'data-block-name="hero"' in html


@pytest.mark.asyncio
async def test_convert_html_with_schema_directory(tmp_path: Path) -> None:
    schema_file = tmp_path / "blocks" / "hero" / "hero.schema.json"
    schema_file.parent.mkdir(parents=True)
    schema_file.write_text(json.dumps(HERO_SCHEMA), encoding="utf-8")

    result = await convert_html(PAGE, str(tmp_path))

    # no base element schemas in the directory: the h1 is skipped
    assert list(result["sections"][0]) == ["hero"]


@pytest.mark.asyncio
async def test_convert_html_without_schemas() -> None:
    result = await convert_html(PAGE)

    assert set(result) == {"head", "content"}


@pytest.mark.asyncio
async def test_render_page_with_schemas(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("SCHEMA_BASE_URL", raising=False)
    session = FakeSession({
        f"{DOMAIN}/en/page": PAGE,
        f"{DOMAIN}/blocks/hero/hero.schema.json": HERO_SCHEMA,
    })

    result = await render_page(get_context("/org/site/en/page?schema=true"), session=session)

    assert result.content_type.startswith("application/json")
    assert result.body == {"sections": [{
        "hero": {"data": {"title": "Welcome", "image": {"src": "/a.png", "alt": "A"}}},
    }]}
    assert f"{DOMAIN}/schema/base/h1.schema.json" in session.requested


@pytest.mark.asyncio
async def test_render_page_as_html() -> None:
    session = FakeSession({f"{DOMAIN}/en/page": PAGE})

    result = await render_page(get_context("/org/site/en/page?html=true"), session=session)

    assert result.content_type.startswith("text/html")
    assert 'data-role="main"' in result.body


@pytest.mark.asyncio
async def test_render_page_fetch_failure_keeps_status() -> None:
    with pytest.raises(PageFetchError) as excinfo:
        await render_page(get_context("/org/site/missing"), session=FakeSession({}))

    assert excinfo.value.status == 404
