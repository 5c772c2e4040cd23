#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""
Notion Database Extractor - Rebuild Notion collection tables as SiYuan attribute views
Handles page-level databases and databases embedded in a page

Each table found in the DOM is parsed column by column, converted into a
SiYuan attribute view (typed keys + values + one table view), and replaced
in the DOM by a [:av:<id>:] placeholder that survives markdown rendering.
"""

import logging
import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from bs4 import Tag

from ..notion_types import ResolverContext
from ..notion_utils import (
    ZONE_COMMENT_PATTERN,
    create_el,
    generate_siyuan_id,
    get_notion_id,
    is_image_path,
    timestamp_is_pure_date,
    to_timestamp,
)
from .link_resolver import find_attachment, get_decoded_uri

logger = logging.getLogger('DatabaseExtractor')

TABLE_SELECTOR = 'table[class="collection-content"]'
EMBEDDED_SELECTOR = 'div[class="collection-content"]'
DATE_RANGE_SEPARATOR = '→'
DEFAULT_PAGE_SIZE = 50
DEFAULT_VIEW_NAME = '表格'

# Notion header icon class -> SiYuan key type
COLUMN_TYPES = {
    'typesTitle': 'block',
    'typesDate': 'date',
    'typesSelect': 'select',
    'typesMultipleSelect': 'mSelect',
    'typesCheckbox': 'checkbox',
    'typesFile': 'mAsset',
}


@dataclass
class Cell:
    rowid: str
    has_rel_block: bool
    value: Any


@dataclass
class Column:
    type: str
    name: str
    select_values: List[str] = field(default_factory=list)
    values: List[Cell] = field(default_factory=list)

    def add_option(self, option: str) -> None:
        if option not in self.select_values:
            self.select_values.append(option)


@dataclass
class Table:
    title: str
    cols: List[Column]


def _now_ms() -> int:
    return int(time.time() * 1000)


def _text(el: Optional[Tag]) -> str:
    return el.get_text().strip() if el is not None else ''


def find_tables(dom: Tag) -> List[Dict[str, Any]]:
    """Locate database tables and their titles.

    Returns an empty list when the page has no database.
    """
    if dom.select_one(TABLE_SELECTOR) is None:
        return []

    embedded = dom.select(EMBEDDED_SELECTOR)
    if embedded:
        return [
            {
                'title': _text(div.select_one('.collection-title')),
                'table_node': div.select_one(TABLE_SELECTOR),
                'replace_node': div,
            }
            for div in embedded
        ]

    return [
        {
            'title': _text(dom.select_one('.page-title')),
            'table_node': table,
            'replace_node': table,
        }
        for table in dom.select(TABLE_SELECTOR)
    ]


def _column_type(th: Tag) -> str:
    svg = th.select_one('span > svg')
    if svg is None:
        return ''
    classes = svg.get('class', [])
    return classes[0] if classes else ''


def _title_column_index(cols: List[Column]) -> int:
    """Index of the title column; the first column becomes the title when none is marked."""
    for index, col in enumerate(cols):
        if col.type == 'typesTitle':
            return index
    if cols:
        cols[0].type = 'typesTitle'
    return 0


def _row_identity(info: ResolverContext, title_cell: Optional[Tag]):
    anchor = title_cell.find('a') if title_cell is not None else None
    row_notion_id = get_notion_id(get_decoded_uri(anchor)) if anchor is not None else None
    block_id = info.block_id_for(row_notion_id)
    if block_id:
        return block_id, True
    return generate_siyuan_id(), False


def _parse_cell(col: Column, td: Tag) -> Any:
    if col.type == 'typesTitle':
        anchor = td.find('a')
        return _text(anchor) if anchor is not None else _text(td)

    if col.type == 'typesDate':
        text = td.get_text().strip().replace('@', '', 1)
        parts = [part.strip() for part in text.split(DATE_RANGE_SEPARATOR) if part.strip()]
        # a range carries its zone comment only once, at the end
        zone = ZONE_COMMENT_PATTERN.search(parts[-1]) if parts else None
        if zone:
            parts = [part if ZONE_COMMENT_PATTERN.search(part) else part + zone.group(0) for part in parts]
        return parts

    if col.type in ('typesSelect', 'typesMultipleSelect'):
        options = []
        for span in td.select('span.selected-value'):
            option = span.get_text().strip()
            col.add_option(option)
            options.append(option)
        return options

    if col.type == 'typesCheckbox':
        return td.select_one('div.checkbox-on') is not None

    if col.type == 'typesFile':
        return [get_decoded_uri(a) for a in td.find_all('a')]

    return td.get_text().strip()


def parse_table(info: ResolverContext, title: str, table_node: Tag) -> Table:
    """Read headers and rows of one Notion collection table."""
    cols = [
        Column(type=_column_type(th), name=th.get_text().strip())
        for th in table_node.select('thead > tr > th')
    ]
    title_index = _title_column_index(cols)

    for tr in table_node.select('tbody > tr'):
        tds = tr.find_all('td', recursive=False)
        title_cell = tds[title_index] if title_index < len(tds) else None
        rowid, has_rel_block = _row_identity(info, title_cell)

        for col, td in zip(cols, tds):
            col.values.append(Cell(rowid=rowid, has_rel_block=has_rel_block, value=_parse_cell(col, td)))

    return Table(title=title, cols=cols)


def generate_column_key(name: str, col_type: str, options: List[Dict[str, str]]) -> Dict[str, Any]:
    return {
        'id': generate_siyuan_id(),
        'name': name,
        'type': col_type,
        'icon': '',
        'numberFormat': '',
        'template': '',
        'options': options,
    }


def _base_value(key: Dict[str, Any], cell: Cell, col_type: str) -> Dict[str, Any]:
    now = _now_ms()
    return {
        'id': generate_siyuan_id(),
        'keyID': key['id'],
        'blockID': cell.rowid,
        'type': col_type,
        'createdAt': now,
        'updatedAt': now,
    }


def _date_values(key, col: Column) -> List[Dict[str, Any]]:
    values = []
    for cell in col.values:
        if not cell.value:
            continue
        times = [to_timestamp(part) for part in cell.value]
        if any(timestamp is None for timestamp in times):
            logger.warning(f"unparseable date in column '{col.name}': {cell.value}")
            continue

        value = _base_value(key, cell, 'date')
        value['date'] = {
            'content': times[0],
            'isNotEmpty': True,
            'hasEndDate': False,
            'isNotTime': timestamp_is_pure_date(times[0]),
            'content2': 0,
            'isNotEmpty2': False,
            'formattedContent': '',
        }
        if len(times) == 2:
            value['date']['hasEndDate'] = True
            value['date']['content2'] = times[1]
            value['date']['isNotEmpty2'] = True
        values.append(value)
    return values


def _select_values(key, col: Column, col_type: str, colors: Dict[str, str]) -> List[Dict[str, Any]]:
    values = []
    for cell in col.values:
        if not cell.value:
            continue
        value = _base_value(key, cell, col_type)
        value['mSelect'] = [{'content': option, 'color': colors[option]} for option in cell.value]
        values.append(value)
    return values


def _block_values(key, col: Column, row_ids: List[str]) -> List[Dict[str, Any]]:
    values = []
    for cell in col.values:
        row_ids.append(cell.rowid)
        now = _now_ms()
        value = _base_value(key, cell, 'block')
        value['isDetached'] = not cell.has_rel_block
        value['block'] = {
            'id': cell.rowid,
            'content': cell.value,
            'created': now,
            'updated': now,
        }
        values.append(value)
    return values


def _checkbox_values(key, col: Column) -> List[Dict[str, Any]]:
    values = []
    for cell in col.values:
        if not cell.value:
            continue
        value = _base_value(key, cell, 'checkbox')
        value['checkbox'] = {'checked': True}
        values.append(value)
    return values


def _asset_values(info: ResolverContext, key, col: Column) -> List[Dict[str, Any]]:
    values = []
    for cell in col.values:
        if not cell.value:
            continue
        assets = []
        for path in cell.value:
            asset_path = path
            attachment = find_attachment(info, path)
            if attachment:
                asset_path = attachment.path_in_siyuan_md
            else:
                logger.warning(f"missing attachment data for database file: {path}")
            assets.append({
                'type': 'image' if is_image_path(path) else 'file',
                'name': asset_path,
                'content': asset_path,
            })
        value = _base_value(key, cell, 'mAsset')
        value['mAsset'] = assets
        values.append(value)
    return values


def _text_values(key, col: Column) -> List[Dict[str, Any]]:
    values = []
    for cell in col.values:
        if not cell.value:
            continue
        value = _base_value(key, cell, 'text')
        value['text'] = {'content': cell.value}
        values.append(value)
    return values


def build_attribute_view(info: ResolverContext, table: Table) -> Dict[str, Any]:
    """Convert a parsed table into a SiYuan attribute view document."""
    key_values = []
    row_ids: List[str] = []

    for col in table.cols:
        col_type = COLUMN_TYPES.get(col.type, 'text')

        if col_type in ('select', 'mSelect'):
            colors = {option: str(i + 1) for i, option in enumerate(col.select_values)}
            options = [{'name': name, 'color': color} for name, color in colors.items()]
            key = generate_column_key(col.name, col_type, options)
            values = _select_values(key, col, col_type, colors)
        else:
            key = generate_column_key(col.name, col_type, [])
            if col_type == 'block':
                values = _block_values(key, col, row_ids)
            elif col_type == 'date':
                values = _date_values(key, col)
            elif col_type == 'checkbox':
                values = _checkbox_values(key, col)
            elif col_type == 'mAsset':
                values = _asset_values(info, key, col)
            else:
                values = _text_values(key, col)

        key_values.append({'key': key, 'values': values})

    av_id = generate_siyuan_id()
    view_id = generate_siyuan_id()
    return {
        'spec': 0,
        'id': av_id,
        'name': table.title,
        'keyValues': key_values,
        'keyIDs': None,
        'viewID': view_id,
        'views': [
            {
                'id': view_id,
                'icon': '',
                'name': DEFAULT_VIEW_NAME,
                'hideAttrViewName': False,
                'type': 'table',
                'table': {
                    'spec': 0,
                    'id': generate_siyuan_id(),
                    'columns': [
                        {
                            'id': key_value['key']['id'],
                            'wrap': False,
                            'hidden': False,
                            'pin': False,
                            'width': '',
                        }
                        for key_value in key_values
                    ],
                    'rowIds': row_ids,
                    'filters': [],
                    'sorts': [],
                    'pageSize': DEFAULT_PAGE_SIZE,
                },
            }
        ],
    }


def get_databases(info: ResolverContext, dom: Tag) -> List[Dict[str, Any]]:
    """Extract every database in the page as an attribute view.

    Each database element is replaced by a <div>[:av:<id>:]</div>
    placeholder in the DOM.
    """
    attribute_views = []

    for table_info in find_tables(dom):
        table_node = table_info['table_node']
        if table_node is None:
            continue

        table = parse_table(info, table_info['title'], table_node)
        attribute_view = build_attribute_view(info, table)
        logger.info(
            f"Database '{table.title}': {len(table.cols)} column(s), "
            f"{len(attribute_view['views'][0]['table']['rowIds'])} row(s)"
        )

        table_info['replace_node'].replace_with(create_el('div', text=f"[:av:{attribute_view['id']}:]"))
        attribute_views.append(attribute_view)

    return attribute_views
