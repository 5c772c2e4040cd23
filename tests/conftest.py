#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""Shared fixtures: a resolver context and builders for exported Notion HTML."""

import pytest
from bs4 import BeautifulSoup

from notionsiyuan.notion_types import ResolverContext

OTHER_PAGE_ID = "0f9e8d7c6b5a49382716f5e4d3c2b1a0"
OTHER_BLOCK_ID = "20240101120000-abcdefg"
MISSING_PAGE_ID = "a1b2c3d4e5f60718293a4b5c6d7e8f90"

IMAGE_ASSET = "assets/diagram-20240101120000-img0001.png"
PDF_ASSET = "assets/report-20240101120000-pdf0001.pdf"


@pytest.fixture
def info():
    """Resolver context with one known page and two attachments."""
    context = ResolverContext()
    context.record_page(OTHER_PAGE_ID, OTHER_BLOCK_ID, "Other Page")
    context.record_attachment("Export/Page/diagram.png", "diagram.png", IMAGE_ASSET)
    context.record_attachment("Export/Page/report.pdf", "report.pdf", PDF_ASSET)
    return context


@pytest.fixture
def make_soup():
    def _make_soup(html):
        return BeautifulSoup(html, "html.parser")
    return _make_soup


@pytest.fixture
def make_page():
    """Build the HTML of an exported Notion page."""
    def _make_page(body, title="Test Page", properties="", description=""):
        header = f'<h1 class="page-title">{title}</h1>'
        if description:
            header += f'<p class="page-description">{description}</p>'
        if properties:
            header += f'<table class="properties"><tbody>{properties}</tbody></table>'
        return (
            "<html><head><title>{title}</title></head><body>"
            '<article class="page sans"><header>{header}</header>'
            '<div class="page-body">{body}</div>'
            "</article></body></html>"
        ).format(title=title, header=header, body=body)
    return _make_page


def header_cell(svg_class, name):
    return f'<th><span class="icon property-icon"><svg class="{svg_class}"></svg></span>{name}</th>'


def page_href(title, notion_id):
    return f"{title.replace(' ', '%20')}%20{notion_id}.html"
