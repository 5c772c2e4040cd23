#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""
Notion Converters Module.

Repairs the DOM of exported Notion pages and renders it as
SiYuan markdown.

Available converters:
    - read_to_markdown: Convert one page to markdown, attributes and databases
    - SiYuanConverter: SiYuan import folder generation
    - dom_repair: DOM repair passes for Notion HTML
    - markdown_utils: Shared markdown rendering and sanitization utilities
"""

__all__ = [
    "read_to_markdown",
    "SiYuanConverter",
]

from .page_converter import read_to_markdown
from .siyuan_converter import SiYuanConverter
