#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""
Notion Extractors Module.

Provides extractors that read structured data out of exported
Notion HTML.

Available extractors:
    - parse_property: Read one row of a page properties table
    - get_notion_links: Classify links to pages, attachments and relations
    - get_databases: Rebuild collection tables as attribute views
"""

__all__ = [
    "parse_property",
    "get_notion_links",
    "get_databases",
]

from .property_parser import parse_property
from .link_resolver import get_notion_links
from .database_extractor import get_databases
