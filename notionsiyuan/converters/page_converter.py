#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""
Convert one exported Notion page (HTML) to SiYuan markdown
Databases are extracted first, then links, then the DOM is repaired and rendered
"""

import logging
from typing import Dict

from bs4 import BeautifulSoup, Tag

from ..extractors.database_extractor import get_databases
from ..extractors.link_resolver import convert_html_links_to_urls, convert_links_to_siyuan, get_notion_links
from ..extractors.property_parser import parse_property
from ..notion_types import MarkdownInfo, ResolverContext
from .dom_repair import clean_invalid_dom, lowercase_code_languages, run_repair_passes, split_brs, wrap_headings
from .markdown_utils import (
    escape_hashtags,
    expand_av_placeholders,
    fix_double_backslash,
    html_to_markdown,
    normalize_line_breaks,
)

logger = logging.getLogger('PageConverter')


class PageBodyNotFoundError(ValueError):
    """The HTML has no <div class="page-body">, so it is not a Notion page export."""


def _front_matter(info: ResolverContext, dom: BeautifulSoup) -> Dict[str, str]:
    """Convert the properties table to front matter attributes."""
    front_matter: Dict[str, str] = {}

    properties = dom.select_one('table[class="properties"]')
    if properties is None:
        return front_matter
    rows_parent: Tag = properties.find('tbody') or properties

    property_links = get_notion_links(info, rows_parent)
    convert_links_to_siyuan(info, property_links)
    # YAML only takes raw URLs
    convert_html_links_to_urls(rows_parent)

    for row in rows_parent.find_all('tr', recursive=False):
        parsed = parse_property(row)
        if parsed is None:
            continue
        title, content = parsed
        title = title.strip().replace(' ', '-')
        if title == 'Tags':
            title = 'tags'
        front_matter[title] = content

    return front_matter


def read_to_markdown(info: ResolverContext, text: str) -> MarkdownInfo:
    """Convert the HTML of one Notion page to markdown, attributes and databases.

    Raises:
        PageBodyNotFoundError: if the page has no body
        PropertyTypeError: if a page property has an unknown type
    """
    dom = BeautifulSoup(text, 'html.parser')
    body = dom.select_one('div[class="page-body"]')
    if body is None:
        raise PageBodyNotFoundError('page body was not found')

    clean_invalid_dom(body)
    wrap_headings(body)

    # Database rows are matched to pages through their <a href>, so this must
    # happen before links are rewritten
    attribute_views = get_databases(info, dom)

    notion_links = get_notion_links(info, body)
    convert_links_to_siyuan(info, notion_links)

    front_matter = _front_matter(info, dom)

    run_repair_passes(body)
    lowercase_code_languages(dom)
    split_brs(body)

    markdown_body = html_to_markdown(body.decode_contents())
    if info.single_line_breaks:
        # Keep the blank line before blockquotes, consecutive callouts would merge otherwise
        markdown_body = normalize_line_breaks(markdown_body)

    markdown_body = escape_hashtags(markdown_body)
    markdown_body = fix_double_backslash(markdown_body)

    description = dom.select_one('p[class*="page-description"]')
    if description is not None and description.get_text():
        markdown_body = description.get_text() + '\n\n' + markdown_body

    markdown_body = expand_av_placeholders(markdown_body)

    logger.debug(
        f"Converted page: {len(notion_links)} link(s), {len(front_matter)} attribute(s), "
        f"{len(attribute_views)} database(s)"
    )

    return MarkdownInfo(
        content=markdown_body.strip(),
        attrs=front_matter,
        attribute_views=attribute_views,
    )
