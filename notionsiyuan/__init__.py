#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""
NotionSiYuan - Convert Notion HTML exports to SiYuan markdown.

This package turns exported Notion pages into SiYuan markdown documents
and rebuilds Notion databases as SiYuan attribute views.

Modules:
    - extractors: Property, link and database extraction
    - converters: DOM repair and markdown rendering
    - pipeline_base: Export reading and shared pipeline utilities
    - siyuan_pipeline: SiYuan import folder generation
"""

__version__ = "1.0.0"
__author__ = "Denis Darkin"
__license__ = "MIT"

__all__ = [
    "extractors",
    "converters",
    "pipeline_base",
    "siyuan_pipeline",
]
