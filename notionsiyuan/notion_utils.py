#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""
Helpers for Notion export paths, IDs and dates, and SiYuan ID generation.
"""

import random
import re
import string
from datetime import datetime, timedelta, timezone
from pathlib import PurePosixPath
from typing import Dict, List, Optional

from bs4 import BeautifulSoup, Tag

NOTION_ID_PATTERN = re.compile(r'([a-z0-9]{32})(\?|\.|$)')
NOTION_ID_IN_NAME = re.compile(r'[ -]?[a-z0-9]{32}(\.|$)')
IMAGE_PATH_PATTERN = re.compile(r'(\.png|\.jpg|\.webp|\.gif|\.bmp|\.jpeg)!?\S*$', re.IGNORECASE)
SIYUAN_ID_ALPHABET = string.ascii_lowercase + string.digits
# Trailing zone comment, e.g. '(GMT+8)' or '(UTC-05:30)'
ZONE_COMMENT_PATTERN = re.compile(r'\s*\(([^)]*)\)\s*$')
GMT_OFFSET_PATTERN = re.compile(r'^(?:GMT|UTC)(?:([+-])(\d{1,2})(?::?(\d{2}))?)?$')

# Date formats seen in Notion exports (the leading '@' is already stripped)
NOTION_DATE_FORMATS = [
    '%B %d, %Y %I:%M %p',
    '%B %d, %Y %H:%M',
    '%B %d, %Y',
    '%b %d, %Y %I:%M %p',
    '%b %d, %Y %H:%M',
    '%b %d, %Y',
    '%d %B %Y %H:%M',
    '%d %B %Y',
    '%Y/%m/%d %H:%M',
    '%Y/%m/%d',
    '%m/%d/%Y %I:%M %p',
    '%m/%d/%Y %H:%M',
    '%m/%d/%Y',
    '%Y-%m-%d %H:%M',
    '%Y-%m-%d',
    '%Y年%m月%d日 %H:%M',
    '%Y年%m月%d日',
]


def get_notion_id(path: str) -> Optional[str]:
    """Extract the 32-character Notion ID from a path or URL, if any."""
    match = NOTION_ID_PATTERN.search(path.replace('-', ''))
    return match.group(1) if match else None


def strip_notion_id(name: str) -> str:
    """Remove the Notion ID Notion appends to exported file names.

    >>> strip_notion_id('My Page 0123456789abcdef0123456789abcdef')
    'My Page'
    """
    return NOTION_ID_IN_NAME.sub(r'\1', name, count=1)


def strip_parent_directories(relative_uri: str) -> str:
    return re.sub(r'^(\.\./)+', '', relative_uri)


def parse_file_path(file_path: str) -> Dict[str, str]:
    """Split a path into parent, name, basename (no extension) and extension."""
    path = PurePosixPath(file_path)
    parent = str(path.parent)
    return {
        'parent': '' if parent == '.' else parent,
        'name': path.name,
        'basename': path.stem,
        'extension': path.suffix.lstrip('.').lower(),
    }


def is_image_path(path: str) -> bool:
    return bool(IMAGE_PATH_PATTERN.search(path))


def hoist_children(el: Tag) -> None:
    """Replace an element with its own children, in place."""
    el.unwrap()


# Detached tags are created from this document and inserted into page trees
_TAG_FACTORY = BeautifulSoup('', 'html.parser')


def create_el(name: str, text: Optional[str] = None, **attrs) -> Tag:
    el = _TAG_FACTORY.new_tag(name, attrs=attrs)
    if text is not None:
        el.string = text
    return el


def element_children(el: Tag) -> List[Tag]:
    return [child for child in el.children if isinstance(child, Tag)]


def next_element_sibling(el: Tag) -> Optional[Tag]:
    for sibling in el.next_siblings:
        if isinstance(sibling, Tag):
            return sibling
    return None


def generate_siyuan_id() -> str:
    """Generate a SiYuan node ID, e.g. '20240902133057-ioqa2mz'."""
    timestamp = datetime.now().strftime('%Y%m%d%H%M%S')
    suffix = ''.join(random.choices(SIYUAN_ID_ALPHABET, k=7))
    return f"{timestamp}-{suffix}"


def _zone_from_comment(comment: str) -> Optional[timezone]:
    match = GMT_OFFSET_PATTERN.match(comment.strip().upper())
    if not match:
        return None
    sign, hours, minutes = match.groups()
    if not sign:
        return timezone.utc
    offset = timedelta(hours=int(hours), minutes=int(minutes or 0))
    return timezone(-offset if sign == '-' else offset)


def to_timestamp(date_text: str) -> Optional[int]:
    """Parse a Notion date as a millisecond timestamp.

    Dates are local time unless they carry a GMT offset comment such as
    '(GMT+8)'. Any other parenthesized comment is ignored.
    Returns None when the text matches no known date format.
    """
    date_text = date_text.replace('@', '').strip()
    zone = None
    match = ZONE_COMMENT_PATTERN.search(date_text)
    if match:
        zone = _zone_from_comment(match.group(1))
        date_text = date_text[:match.start()]
    if not date_text:
        return None

    for date_format in NOTION_DATE_FORMATS:
        try:
            dt = datetime.strptime(date_text, date_format)
        except ValueError:
            continue
        if zone is not None:
            dt = dt.replace(tzinfo=zone)
        return int(dt.timestamp() * 1000)

    try:
        dt = datetime.fromisoformat(date_text.replace('Z', '+00:00'))
    except ValueError:
        return None
    if zone is not None and dt.tzinfo is None:
        dt = dt.replace(tzinfo=zone)
    return int(dt.timestamp() * 1000)


def timestamp_is_pure_date(timestamp: int) -> bool:
    """True when a timestamp falls exactly on local midnight (no time of day)."""
    dt = datetime.fromtimestamp(timestamp / 1000)
    return dt.hour == 0 and dt.minute == 0 and dt.second == 0 and dt.microsecond == 0
