#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""
Write converted Notion pages to a SiYuan import folder
"""

import json
import re
from pathlib import Path
from typing import Any, Dict, List

from ..notion_types import MarkdownInfo

# Values that must be quoted to stay valid YAML scalars
YAML_SPECIAL = re.compile(r'(^[\s\-?:,\[\]{}#&*!|>\'"%@`])|(: )|( #)|(\s$)')


class SiYuanConverter:
    """Write MarkdownInfo results as an import folder for SiYuan.

    Layout:
        <output>/<notebook>/            markdown documents (export folders kept)
        <output>/<notebook>/assets/     attachments
        <output>/<notebook>/storage/av/ attribute view JSON, one file per database
    """

    def __init__(self, output_dir: Path, notebook_name: str = "Notion"):
        self.notebook_root = Path(output_dir) / notebook_name
        self.notebook_root.mkdir(parents=True, exist_ok=True)

        self.assets_dir = self.notebook_root / "assets"
        self.av_dir = self.notebook_root / "storage" / "av"

        for dir_path in [self.assets_dir, self.av_dir]:
            dir_path.mkdir(parents=True, exist_ok=True)

        self.documents = []  # Written pages, saved to the manifest

    def write_page(self, title: str, markdown_info: MarkdownInfo, folders: List[str] = None,
                   block_id: str = '') -> Path:
        """Write one page and its attribute views; returns the markdown path."""
        page_dir = self.notebook_root
        for folder in folders or []:
            page_dir = page_dir / self._sanitize_filename(folder)
        page_dir.mkdir(parents=True, exist_ok=True)

        note_path = self._unique_path(page_dir / f"{self._sanitize_filename(title)}.md")

        content_lines = [self._generate_frontmatter(title, markdown_info.attrs), markdown_info.content, ""]
        with open(note_path, 'w', encoding='utf-8') as f:
            f.write('\n'.join(content_lines))

        for attribute_view in markdown_info.attribute_views:
            self.write_attribute_view(attribute_view)

        self.documents.append({
            'title': title,
            'blockID': block_id,
            'path': note_path.relative_to(self.notebook_root).as_posix(),
            'attributeViews': [av['id'] for av in markdown_info.attribute_views],
        })

        print(f"  Created: {note_path.name}")
        return note_path

    def write_attribute_view(self, attribute_view: Dict[str, Any]) -> Path:
        av_path = self.av_dir / f"{attribute_view['id']}.json"
        with open(av_path, 'w', encoding='utf-8') as f:
            json.dump(attribute_view, f, indent=2, ensure_ascii=False)
        return av_path

    def write_asset(self, path_in_siyuan_md: str, data: bytes) -> Path:
        """Copy an attachment to the location the markdown links point at."""
        asset_path = self.notebook_root / path_in_siyuan_md
        asset_path.parent.mkdir(parents=True, exist_ok=True)
        with open(asset_path, 'wb') as f:
            f.write(data)
        return asset_path

    def save_manifest(self, output_path: Path = None) -> Path:
        """Save the list of written documents and their block IDs."""
        if output_path is None:
            output_path = self.notebook_root / "manifest.json"

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump({'documents': self.documents}, f, indent=2, ensure_ascii=False)

        return output_path

    def _generate_frontmatter(self, title: str, attrs: Dict[str, str]) -> str:
        """Generate YAML front matter from the page title and Notion properties."""
        frontmatter_data = {'title': title}
        frontmatter_data.update(attrs)

        lines = ['---']
        for key, value in frontmatter_data.items():
            key = self._yaml_scalar(key)
            if '\n' in value:
                lines.append(f'{key}: |-')
                lines.extend(f'  {line}' for line in value.split('\n'))
            else:
                lines.append(f'{key}: {self._yaml_scalar(value)}')
        lines.append('---')
        lines.append('')

        return '\n'.join(lines)

    def _yaml_scalar(self, value: str) -> str:
        if value == '' or YAML_SPECIAL.search(value):
            return json.dumps(value, ensure_ascii=False)
        return value

    def _unique_path(self, path: Path) -> Path:
        """Append a counter when two pages share a title in the same folder."""
        if not path.exists():
            return path
        counter = 1
        while True:
            candidate = path.parent / f"{path.stem} ({counter}){path.suffix}"
            if not candidate.exists():
                return candidate
            counter += 1

    def _sanitize_filename(self, filename: str) -> str:
        """Sanitize a page title or folder name for the file system."""
        # Handle non-string inputs
        if not isinstance(filename, str):
            filename = str(filename) if filename is not None else 'untitled'

        # Remove characters invalid on common file systems
        filename = re.sub(r'[<>:"/\\|?*\x00-\x1f]', '-', filename)

        # Collapse whitespace
        filename = re.sub(r'\s+', ' ', filename)

        # Trim dots/spaces from start/end and limit length
        filename = filename.strip('. ')[:100].strip('. ')

        # Ensure not empty
        if not filename:
            filename = 'untitled'

        return filename
