#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""
Notion Link Resolver - Classify anchors and rewrite them as SiYuan references
Relation links become block references, attachments become asset links or images
"""

import logging
from typing import List, Optional
from urllib.parse import unquote

from bs4 import Tag

from ..notion_types import AttachmentInfo, NotionLink, ResolverContext
from ..notion_utils import create_el, get_notion_id, is_image_path, parse_file_path, strip_notion_id, strip_parent_directories

logger = logging.getLogger('LinkResolver')


def get_decoded_uri(a: Tag) -> str:
    return strip_parent_directories(unquote(a.get('href') or ''))


def find_attachment(info: ResolverContext, path: str) -> Optional[AttachmentInfo]:
    """Find the attachment whose export path contains the given path."""
    if not path:
        return None
    for filename, attachment in info.paths_to_attachment_info.items():
        if path in filename:
            return attachment
    return None


def get_notion_links(info: ResolverContext, scope: Tag) -> List[NotionLink]:
    """Collect relation, attachment and image links below scope.

    Anchors that are none of these (external URLs etc.) are not returned.
    """
    links = []

    for a in scope.find_all('a'):
        decoded_uri = get_decoded_uri(a)
        notion_id = get_notion_id(decoded_uri)

        if notion_id and decoded_uri.endswith('.html'):
            links.append(NotionLink(type='relation', a=a, id=notion_id))
            continue

        attachment = find_attachment(info, decoded_uri)
        if attachment:
            link_type = 'image' if is_image_path(decoded_uri) else 'attachment'
            links.append(NotionLink(type=link_type, a=a, path=attachment.path))

    return links


def _relation_element(info: ResolverContext, link: NotionLink) -> Tag:
    file_info = info.ids_to_file_info.get(link.id)
    if file_info and file_info.block_id:
        return create_el('span', text=f"(({file_info.block_id} '{file_info.title}'))")

    logger.warning(f"missing relation data for id: {link.id}")
    basename = parse_file_path(unquote(link.a.get('href') or ''))['basename']
    return create_el('span', text=f"[[{strip_notion_id(basename)}]]")


def convert_links_to_siyuan(info: ResolverContext, notion_links: List[NotionLink]) -> None:
    """Replace each classified anchor with its SiYuan equivalent."""
    for link in notion_links:
        if link.type == 'relation':
            siyuan_link = _relation_element(info, link)

        elif link.type == 'attachment':
            attachment = info.paths_to_attachment_info.get(link.path)
            if not attachment:
                logger.warning(f"missing attachment data for: {link.path}")
                continue
            siyuan_link = create_el(
                'span',
                text=f"[{attachment.name_with_extension}]({attachment.path_in_siyuan_md})"
            )

        elif link.type == 'image':
            image = info.paths_to_attachment_info.get(link.path)
            if not image:
                logger.warning(f"missing image file for: {link.path}")
                continue
            siyuan_link = create_el('img', src=image.path_in_siyuan_md, alt=image.name_with_extension)

        else:
            logger.warning(f"unknown link type: {link.type}")
            continue

        link.a.replace_with(siyuan_link)


def convert_html_links_to_urls(scope: Tag) -> None:
    """Replace anchors with their raw href; front matter only takes plain URLs."""
    for a in scope.find_all('a'):
        a.replace_with(create_el('span', text=a.get('href') or ''))
