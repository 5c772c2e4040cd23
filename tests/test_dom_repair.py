#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""Tests for dom_repair - the DOM passes applied to Notion page bodies."""

import pytest

from notionsiyuan.converters.dom_repair import (
    add_checkboxes,
    clean_invalid_dom,
    fix_equations,
    fix_normal_toggle,
    fix_notion_callouts,
    fix_notion_dates,
    fix_notion_embeds,
    fix_notion_lists,
    fix_toggle_headings,
    format_databases,
    lowercase_code_languages,
    replace_elements_with_children,
    replace_nested_tags,
    replace_table_of_contents,
    run_repair_passes,
    split_brs,
    strip_to_sentence,
    wrap_headings,
)
from notionsiyuan.notion_utils import element_children


@pytest.fixture
def make_body(make_soup):
    def _make_body(html):
        return make_soup(f'<div class="page-body">{html}</div>').find("div")
    return _make_body


class TestCleanupPasses:
    """Tests for clean_invalid_dom, wrap_headings and replace_nested_tags."""

    def test_removes_scripts_and_styles(self, make_body):
        body = make_body('<style>.x{}</style><script src="a.js"></script><p>keep</p>')
        clean_invalid_dom(body)
        assert body.find("style") is None
        assert body.find("script") is None
        assert body.find("p").get_text() == "keep"

    def test_wraps_headings_once(self, make_body):
        body = make_body("<h1>Title</h1><p>text</p>")
        wrap_headings(body)
        wrap_headings(body)
        heading = body.find("h1")
        assert heading.parent.name == "div"
        assert heading.parent is not body
        assert len(body.find_all("div")) == 1

    def test_hoists_nested_strong(self, make_body):
        body = make_body("<p><strong>a<strong>b</strong>c</strong></p>")
        replace_nested_tags(body, "strong")
        assert len(body.find_all("strong")) == 1
        assert body.find("strong").get_text() == "abc"

    def test_hoists_deeply_nested_em(self, make_body):
        body = make_body("<p><em>a<span><em>b<em>c</em></em></span></em></p>")
        replace_nested_tags(body, "em")
        assert len(body.find_all("em")) == 1
        assert body.find("em").get_text() == "abc"


class TestBlockPasses:
    """Tests for bookmarks, callouts, equations and toggles."""

    def test_strip_to_sentence(self):
        assert strip_to_sentence("First one. Second one.") == "First one."
        assert strip_to_sentence("No terminator") == "No terminator"

    def test_bookmark_becomes_blockquote(self, make_body):
        body = make_body(
            '<figure><a href="https://example.com" class="bookmark source">'
            '<div class="bookmark-info"><div class="bookmark-text">'
            '<div class="bookmark-title">Example</div>'
            '<div class="bookmark-description">First sentence. Second sentence.</div>'
            "</div></div></a></figure>"
        )
        fix_notion_embeds(body)

        blockquote = body.find("blockquote")
        lines = [div.get_text() for div in element_children(blockquote)]
        assert lines[:3] == ["[!bookmark]🔖", "Example", "First sentence."]
        assert blockquote.find("a")["href"] == "https://example.com"
        assert blockquote.find("a").get_text() == "https://example.com"
        assert "Second sentence" not in blockquote.get_text()

    def test_bookmark_without_description_drops_empty_line(self, make_body):
        body = make_body(
            '<a href="https://example.com" class="bookmark source">'
            '<div class="bookmark-title">Example</div></a>'
        )
        fix_notion_embeds(body)
        assert len(element_children(body.find("blockquote"))) == 3

    def test_callout_becomes_blockquote(self, make_body):
        body = make_body(
            '<figure class="block-color-gray_background callout">'
            '<div><span class="icon">💡</span></div><div>Remember this</div></figure>'
        )
        fix_notion_callouts(body)

        assert body.find("figure") is None
        blockquote = body.find("blockquote")
        first = element_children(blockquote)[0]
        assert first.name == "span"
        assert first.get_text() == "[!important]"
        assert "Remember this" in blockquote.get_text()

    def test_dates_lose_at_sign(self, make_body):
        body = make_body("<p><time>@March 1, 2024</time></p>")
        fix_notion_dates(body)
        assert body.find("time").get_text() == "March 1, 2024"

    def test_equation_keeps_tex_as_align_block(self, make_body):
        body = make_body(
            '<figure class="equation"><div class="equation-container">'
            '<span class="katex-display"><span class="katex"><span class="katex-mathml">'
            "<math><semantics><mrow></mrow>"
            '<annotation encoding="application/x-tex">E = mc^2</annotation>'
            '</semantics></math></span><span class="katex-html">rendered</span>'
            "</span></span></div></figure>"
        )
        fix_equations(body)
        fix_equations(body)

        assert body.find("math") is None
        assert "rendered" not in body.get_text()
        assert body.find("annotation").get_text() == "\\begin{align}\nE = mc^2\n\\end{align}"

    def test_equation_block_tex_is_not_wrapped(self, make_body):
        tex = "\\begin{cases} a \\\\ b \\end{cases}"
        body = make_body(f"<math><annotation>{tex}</annotation></math>")
        fix_equations(body)
        assert body.find("annotation").get_text() == tex

    def test_replace_elements_with_children(self, make_body):
        body = make_body('<div class="indented"><p>child</p></div>')
        replace_elements_with_children(body, "div.indented")
        assert body.select("div.indented") == []
        assert body.find("p").parent is body

    def test_toggle_heading(self, make_body):
        body = make_body(
            '<ul class="toggle"><li><details open="">'
            '<summary style="font-weight:600;font-size:1.5em;line-height:1.3">Heading</summary>'
            "<p>content</p></details></li></ul>"
        )
        fix_toggle_headings(body)
        assert body.find("summary") is None
        assert body.find("h2").get_text() == "Heading"

    def test_normal_toggle_becomes_list_item(self, make_body):
        body = make_body(
            '<ul class="toggle"><li><details open=""><summary>Toggle</summary>'
            "<p>child</p></details></li></ul>"
        )
        fix_normal_toggle(body)
        assert body.find("summary") is None
        assert body.find("li").get_text() == "Toggle"
        assert body.find("p").get_text() == "child"


class TestFixNotionLists:
    """Tests for fix_notion_lists function."""

    def test_merges_adjacent_lists(self, make_body):
        body = make_body(
            '<ul class="bulleted-list"><li>a</li></ul>'
            '<ul class="bulleted-list"><li>b</li></ul>'
            '<ul class="bulleted-list"><li>c</li></ul>'
        )
        fix_notion_lists(body, "ul")

        lists = body.find_all("ul")
        assert len(lists) == 1
        assert [li.get_text() for li in lists[0].find_all("li")] == ["a", "b", "c"]

    def test_keeps_lists_of_different_class_apart(self, make_body):
        body = make_body(
            '<ul class="bulleted-list"><li>a</li></ul>'
            '<ul class="bulleted-list"><li>b</li></ul>'
            '<ul class="to-do-list"><li>todo</li></ul>'
            '<ul class="bulleted-list"><li>c</li></ul>'
        )
        fix_notion_lists(body, "ul")

        lists = body.find_all("ul")
        assert len(lists) == 3
        assert [li.get_text() for li in lists[0].find_all("li")] == ["a", "b"]

    def test_whitespace_between_lists_does_not_split_run(self, make_body):
        body = make_body(
            '<ol class="numbered-list" start="1"><li>one</li></ol>\n'
            '<ol class="numbered-list" start="2"><li>two</li></ol>'
        )
        fix_notion_lists(body, "ol")
        assert len(body.find_all("ol")) == 1
        assert len(body.find("ol").find_all("li")) == 2

    def test_is_idempotent(self, make_body):
        body = make_body(
            '<ul class="bulleted-list"><li>a</li></ul>'
            '<ul class="bulleted-list"><li>b</li></ul>'
        )
        fix_notion_lists(body, "ul")
        once = str(body)
        fix_notion_lists(body, "ul")
        assert str(body) == once


class TestInlinePasses:
    """Tests for checkboxes, table of contents and database formatting."""

    def test_checkboxes(self, make_body):
        body = make_body(
            '<ul class="to-do-list"><li><div class="checkbox checkbox-on"></div>'
            '<span class="to-do-children-checked">Done</span></li>'
            '<li><div class="checkbox checkbox-off"></div>'
            '<span class="to-do-children-unchecked">Open</span></li></ul>'
        )
        add_checkboxes(body)
        items = [li.get_text() for li in body.find_all("li")]
        assert items == ["[x] Done", "[ ] Open"]

    def test_table_of_contents_links_use_heading_text(self, make_body):
        body = make_body(
            '<nav class="table_of_contents"><div><a href="#3f2a-block">Intro</a></div></nav>'
            '<p><a href="https://example.com/#frag">external</a></p>'
        )
        replace_table_of_contents(body)
        links = body.find_all("a")
        assert links[0]["href"] == "#Intro"
        assert links[1]["href"] == "https://example.com/#frag"

    def test_format_databases(self, make_body):
        body = make_body(
            "<table><tbody><tr>"
            '<td><span class="user"><img src="avatar.png"/>Alice</span></td>'
            '<td><div class="checkbox"></div></td>'
            '<td><span class="selected-value">a</span><span class="selected-value">b</span></td>'
            '<td><a href="Other%20Page.html">Other Page</a></td>'
            '<td><a href="https://example.com">Example</a></td>'
            "</tr></tbody></table>"
        )
        format_databases(body)
        format_databases(body)

        cells = body.find_all("td")
        assert cells[0].find("img") is None
        assert cells[0].get_text() == "Alice"
        assert cells[1].find("div") is None
        assert [span.get_text() for span in cells[2].find_all("span")] == ["a, ", "b"]
        assert cells[3].find("a") is None
        assert cells[3].get_text() == "Other Page"
        assert cells[4].find("a")["href"] == "https://example.com"

    def test_lowercase_code_languages(self, make_body):
        body = make_body('<pre><code class="language-Mermaid">graph TD</code></pre>')
        lowercase_code_languages(body)
        assert body.find("code")["class"] == ["language-mermaid"]


class TestSplitBrs:
    """Tests for split_brs function."""

    def test_splits_strong_at_line_breaks(self, make_body):
        body = make_body("<p><strong>line one<br/>line two</strong></p>")
        split_brs(body)

        strongs = body.find_all("strong")
        assert [strong.get_text() for strong in strongs] == ["line one", "line two"]
        assert body.find("p").find("br", recursive=False) is not None

    def test_splits_nested_formatting(self, make_body):
        body = make_body("<p><strong><em>a<br/>b</em></strong></p>")
        split_brs(body)

        assert len(body.find_all("strong")) == 2
        assert len(body.find_all("em")) == 2
        for el in body.find_all(["strong", "em"]):
            assert el.find("br") is None

    def test_is_idempotent(self, make_body):
        body = make_body("<p><em>a<br/>b<br/>c</em></p>")
        split_brs(body)
        once = str(body)
        split_brs(body)
        assert str(body) == once
        assert len(body.find_all("em")) == 3


class TestRunRepairPasses:
    """Tests for the ordered pass sequence."""

    def test_full_sequence_is_idempotent(self, make_body):
        body = make_body(
            "<p><strong>a<strong>b</strong></strong> <time>@May 2, 2024</time></p>"
            '<figure class="callout"><div>Note</div></figure>'
            '<div class="indented"><p>indented</p></div>'
            '<ul class="toggle"><li><details><summary>Toggle</summary><p>x</p></details></li></ul>'
            '<ul class="bulleted-list"><li>one</li></ul><ul class="bulleted-list"><li>two</li></ul>'
            '<ul class="to-do-list"><li><div class="checkbox checkbox-on"></div>done</li></ul>'
            '<nav><a href="#abc">Intro</a></nav>'
            '<table><tr><td><span class="selected-value">a</span>'
            '<span class="selected-value">b</span></td></tr></table>'
        )
        run_repair_passes(body)
        once = str(body)
        run_repair_passes(body)
        assert str(body) == once

    def test_empty_body_is_untouched(self, make_body):
        body = make_body("<p>plain text</p>")
        before = str(body)
        run_repair_passes(body)
        assert str(body) == before
