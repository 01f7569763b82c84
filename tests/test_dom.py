from __future__ import annotations

from bs4 import BeautifulSoup

from html_to_block_json.dom import (
    class_list,
    element_children,
    get_attribute,
    get_text,
    has_attribute,
    is_element,
    parent_element,
    select_all,
    select_one,
    tag_name,
)

from conftest import first_element


def test_get_attribute_distinguishes_missing_from_empty() -> None:
    img = first_element('<img src="/a.png" alt="">')

    assert get_attribute(img, "src") == "/a.png"
    assert get_attribute(img, "alt") == ""
    assert get_attribute(img, "title") is None
    assert has_attribute(img, "alt")
    assert not has_attribute(img, "title")


def test_get_attribute_joins_multi_valued_attributes() -> None:
    div = first_element('<div class="hero dark wide"></div>')

    assert get_attribute(div, "class") == "hero dark wide"
    assert class_list(div) == ["hero", "dark", "wide"]


def test_document_object_is_not_an_element() -> None:
    soup = BeautifulSoup("<p>x</p>", "lxml")

    assert not is_element(soup)
    assert tag_name(soup) is None
    assert parent_element(soup.html) is None
    assert tag_name(parent_element(soup.p)) == "body"


def test_element_children_skip_text_nodes() -> None:
    div = first_element("<div>lead <span>a</span> mid <em>b</em> tail</div>")

    assert [child.name for child in element_children(div)] == ["span", "em"]
    assert get_text(div) == "lead a mid b tail"


def test_scope_selector_matches_direct_children_only() -> None:
    outer = first_element(
        '<div id="outer"><div id="a"><div id="nested"></div></div><p></p><div id="b"></div></div>'
    )

    assert [d["id"] for d in select_all(":scope > div", outer)] == ["a", "b"]
    assert select_one(":scope > div", outer)["id"] == "a"
    assert select_one("section", outer) is None
    assert select_all("div", None) == []
