#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""Tests for link_resolver - relation, attachment and image links."""

import logging

from conftest import IMAGE_ASSET, MISSING_PAGE_ID, OTHER_BLOCK_ID, OTHER_PAGE_ID, PDF_ASSET, page_href

from notionsiyuan.extractors.link_resolver import (
    convert_html_links_to_urls,
    convert_links_to_siyuan,
    find_attachment,
    get_decoded_uri,
    get_notion_links,
)


class TestFindAttachment:
    """Tests for get_decoded_uri and find_attachment."""

    def test_decodes_and_strips_parent_directories(self, make_soup):
        a = make_soup('<a href="../Page/My%20File.pdf">file</a>').find("a")
        assert get_decoded_uri(a) == "Page/My File.pdf"

    def test_finds_by_partial_path(self, info):
        assert find_attachment(info, "diagram.png").path_in_siyuan_md == IMAGE_ASSET

    def test_unknown_path(self, info):
        assert find_attachment(info, "missing.png") is None

    def test_empty_path_matches_nothing(self, info):
        assert find_attachment(info, "") is None


class TestGetNotionLinks:
    """Tests for get_notion_links function."""

    def test_classifies_links(self, info, make_soup):
        scope = make_soup(
            f'<div><a href="{page_href("Other Page", OTHER_PAGE_ID)}">Other Page</a>'
            '<a href="diagram.png"><img src="diagram.png"/></a>'
            '<a href="report.pdf">report.pdf</a>'
            '<a href="https://example.com">external</a></div>'
        )
        links = get_notion_links(info, scope)

        assert [link.type for link in links] == ["relation", "image", "attachment"]
        assert links[0].id == OTHER_PAGE_ID
        assert links[1].path == "Export/Page/diagram.png"
        assert links[2].path == "Export/Page/report.pdf"


class TestConvertLinksToSiyuan:
    """Tests for convert_links_to_siyuan function."""

    def test_known_relation_becomes_block_ref(self, info, make_soup):
        scope = make_soup(f'<p><a href="{page_href("Other Page", OTHER_PAGE_ID)}">Other Page</a></p>')
        convert_links_to_siyuan(info, get_notion_links(info, scope))

        assert scope.find("a") is None
        assert scope.find("span").get_text() == f"(({OTHER_BLOCK_ID} 'Other Page'))"

    def test_unknown_relation_falls_back_to_wikilink(self, info, make_soup, caplog):
        scope = make_soup(f'<p><a href="{page_href("Missing Page", MISSING_PAGE_ID)}">Missing</a></p>')
        with caplog.at_level(logging.WARNING, logger="LinkResolver"):
            convert_links_to_siyuan(info, get_notion_links(info, scope))

        assert scope.find("span").get_text() == "[[Missing Page]]"
        assert "missing relation data" in caplog.text

    def test_relation_with_empty_block_id_falls_back(self, info, make_soup):
        info.record_page(MISSING_PAGE_ID, "", "Pending")
        scope = make_soup(f'<p><a href="{page_href("Pending", MISSING_PAGE_ID)}">Pending</a></p>')
        convert_links_to_siyuan(info, get_notion_links(info, scope))
        assert scope.find("span").get_text() == "[[Pending]]"

    def test_image_becomes_img(self, info, make_soup):
        scope = make_soup('<figure><a href="diagram.png"><img src="diagram.png"/></a></figure>')
        convert_links_to_siyuan(info, get_notion_links(info, scope))

        img = scope.find("img")
        assert img["src"] == IMAGE_ASSET
        assert img["alt"] == "diagram.png"
        assert scope.find("a") is None

    def test_attachment_becomes_markdown_link(self, info, make_soup):
        scope = make_soup('<p><a href="report.pdf">report.pdf</a></p>')
        convert_links_to_siyuan(info, get_notion_links(info, scope))
        assert scope.find("span").get_text() == f"[report.pdf]({PDF_ASSET})"

    def test_external_links_untouched(self, info, make_soup):
        scope = make_soup('<p><a href="https://example.com">external</a></p>')
        convert_links_to_siyuan(info, get_notion_links(info, scope))
        assert scope.find("a")["href"] == "https://example.com"


class TestConvertHtmlLinksToUrls:
    """Tests for convert_html_links_to_urls function."""

    def test_replaces_anchor_with_href(self, make_soup):
        scope = make_soup('<td><a href="https://example.com">Example</a></td>')
        convert_html_links_to_urls(scope)
        assert scope.find("a") is None
        assert scope.get_text() == "https://example.com"
