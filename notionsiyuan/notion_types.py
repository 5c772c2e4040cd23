#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""
Shared data types for Notion to SiYuan conversion.

ResolverContext is created once per conversion batch and passed explicitly
to every page conversion. Page-level results are returned as MarkdownInfo.
"""

import threading
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from bs4 import Tag


@dataclass
class FileInfo:
    """A converted (or scheduled) page: its SiYuan block ID and title."""
    block_id: str
    title: str


@dataclass
class AttachmentInfo:
    """An attachment found in the export archive."""
    path: str
    name_with_extension: str
    path_in_siyuan_md: str


@dataclass
class ResolverContext:
    """Batch-scoped lookup state shared by all page conversions.

    ids_to_file_info maps Notion page IDs to converted pages.
    paths_to_attachment_info maps normalized export paths to attachments
    and is read-only while pages are being converted.
    """
    ids_to_file_info: Dict[str, FileInfo] = field(default_factory=dict)
    paths_to_attachment_info: Dict[str, AttachmentInfo] = field(default_factory=dict)
    single_line_breaks: bool = False
    _lock: threading.Lock = field(default_factory=threading.Lock, repr=False, compare=False)

    def record_page(self, notion_id: str, block_id: str, title: str) -> FileInfo:
        """Register the SiYuan block ID of a page so later pages can link to it."""
        with self._lock:
            file_info = FileInfo(block_id=block_id, title=title)
            self.ids_to_file_info[notion_id] = file_info
            return file_info

    def record_attachment(self, path: str, name_with_extension: str,
                          path_in_siyuan_md: str) -> AttachmentInfo:
        with self._lock:
            attachment = AttachmentInfo(
                path=path,
                name_with_extension=name_with_extension,
                path_in_siyuan_md=path_in_siyuan_md,
            )
            self.paths_to_attachment_info[path] = attachment
            return attachment

    def block_id_for(self, notion_id: Optional[str]) -> str:
        """Known block ID for a Notion page, or '' when none is recorded."""
        if not notion_id:
            return ''
        file_info = self.ids_to_file_info.get(notion_id)
        return file_info.block_id if file_info else ''


@dataclass
class NotionLink:
    """An anchor classified as a relation, attachment or image link."""
    type: str  # 'relation', 'attachment' or 'image'
    a: Tag
    id: Optional[str] = None
    path: Optional[str] = None


@dataclass
class MarkdownInfo:
    """Result of converting one page."""
    content: str
    attrs: Dict[str, str] = field(default_factory=dict)
    attribute_views: List[Dict[str, Any]] = field(default_factory=list)
