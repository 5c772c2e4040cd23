#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""
Notion Property Parser - Read page properties from the properties table
Each <tr class="property-row property-row-<type>"> becomes one front matter value
"""

import math
import re
from typing import Dict, List, Optional, Tuple

from bs4 import Tag

from ..notion_utils import element_children

PROPERTY_TYPE_PATTERN = re.compile(r'property-row-(\S+)')

# Semantic kind -> Notion property types rendered that way
TYPES_MAP: Dict[str, List[str]] = {
    'checkbox': ['checkbox'],
    'date': ['created_time', 'last_edited_time', 'date'],
    'list': ['file', 'multi_select', 'relation'],
    'number': ['number', 'auto_increment_id'],
    'text': [
        'email',
        'person',
        'phone_number',
        'text',
        'url',
        'status',
        'select',
        'formula',
        'rollup',
        'last_edited_by',
        'created_by',
    ],
}


class PropertyTypeError(ValueError):
    """A property row has no type, or a type this converter does not know."""


def get_property_type(row: Tag) -> Optional[str]:
    match = PROPERTY_TYPE_PATTERN.search(' '.join(row.get('class', [])))
    return match.group(1) if match else None


def get_property_kind(notion_type: str) -> Optional[str]:
    for kind, notion_types in TYPES_MAP.items():
        if notion_type in notion_types:
            return kind
    return None


def _format_number(text: str) -> Optional[str]:
    try:
        number = float(text.strip())
    except ValueError:
        return None
    if not math.isfinite(number):
        return None
    if number.is_integer():
        return str(int(number))
    return repr(number)


def parse_property(row: Tag) -> Optional[Tuple[str, str]]:
    """Parse one property row into (title, content).

    Returns None when the property has no value and should be left out
    of the front matter.

    Raises:
        PropertyTypeError: if the row type is missing or unknown
    """
    notion_type = get_property_type(row)
    if not notion_type:
        raise PropertyTypeError(f"property type not found for: {row}")

    cells = row.find_all(['th', 'td'], recursive=False)
    if len(cells) < 2:
        raise PropertyTypeError(f"property row has no value cell: {row}")

    title = cells[0].get_text().strip()
    body = cells[1]

    kind = get_property_kind(notion_type)
    if not kind:
        raise PropertyTypeError(f"type not found for: {notion_type}")

    if kind == 'checkbox':
        # checkbox-on: checked, checkbox-off: unchecked
        content = str('checkbox-on' in body.decode_contents()).lower()

    elif kind == 'number':
        # a blank cell is absent rather than 0
        content = _format_number(body.get_text())
        if content is None:
            return None

    elif kind == 'date':
        time = body.find('time')
        # Notion dates always start with @
        content = time.get_text().replace('@', '') if time else ''
        if not content:
            return None

    elif kind == 'list':
        items = [child.get_text() for child in element_children(body)]
        content = '\n'.join(item for item in items if item)
        if not content:
            return None

    else:
        content = body.get_text()
        if not content:
            return None

    return title, content
