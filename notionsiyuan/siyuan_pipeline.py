#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""
NotionSiYuan - SiYuan Import Folder Generator
Convert a Notion HTML export (zip or folder) into markdown documents,
attribute views and assets ready for import into SiYuan
"""

import logging
import sys
import traceback
from pathlib import Path
from typing import Dict, List

from .converters.page_converter import PageBodyNotFoundError, read_to_markdown
from .converters.siyuan_converter import SiYuanConverter
from .notion_types import ResolverContext
from .pipeline_base import (
    NotionExport,
    build_resolver_context,
    discover_export_files,
    group_pages_by_folder,
    log_conversion_summary,
    log_pipeline_start,
    page_folders,
    page_title,
    setup_logging,
)


class PipelineResult:
    """Counters collected while converting an export."""

    def __init__(self):
        self.converted = 0
        self.skipped = 0
        self.failed = 0
        self.databases = 0

    @property
    def total(self) -> int:
        return self.converted + self.skipped + self.failed


def process_folder(folder: str, page_paths: List[str], export: NotionExport, info: ResolverContext,
                   page_block_ids: Dict[str, str], converter: SiYuanConverter,
                   logger: logging.Logger, result: PipelineResult):
    """Convert all pages of one export folder."""
    logger.info(f"Processing folder: {folder}")

    for page_path in page_paths:
        try:
            logger.info(f"  Converting: {page_path}")

            markdown_info = read_to_markdown(info, export.read_text(page_path))

            logger.info(f"    - Attributes: {len(markdown_info.attrs)}")
            logger.info(f"    - Databases: {len(markdown_info.attribute_views)}")

            converter.write_page(
                page_title(page_path),
                markdown_info,
                folders=page_folders(page_path),
                block_id=page_block_ids.get(page_path, ''),
            )
            result.converted += 1
            result.databases += len(markdown_info.attribute_views)

        except PageBodyNotFoundError:
            logger.warning(f"Skipping {page_path}: not a Notion page (no page body)")
            result.skipped += 1

        except Exception as e:
            logger.error(f"Error converting {page_path}: {e}")
            logger.error(traceback.format_exc())
            result.failed += 1


def copy_attachments(export: NotionExport, info: ResolverContext, converter: SiYuanConverter,
                     logger: logging.Logger) -> int:
    copied = 0
    for attachment in info.paths_to_attachment_info.values():
        try:
            converter.write_asset(attachment.path_in_siyuan_md, export.read_bytes(attachment.path))
            copied += 1
        except (KeyError, OSError) as e:
            logger.error(f"Failed to copy attachment {attachment.path}: {e}")
    return copied


def run_pipeline(export_path: Path, output_dir: Path, notebook_name: str = None,
                 single_line_breaks: bool = False) -> PipelineResult:
    """Convert a whole Notion export; returns conversion counters."""
    export_path = Path(export_path)
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)
    notebook_name = notebook_name or export_path.stem

    logger = setup_logging(output_dir, 'NotionSiYuan')
    log_pipeline_start(logger, "SiYuan Import Folder Generator", export_path, output_dir)

    result = PipelineResult()
    converter = SiYuanConverter(output_dir, notebook_name)

    with NotionExport(export_path) as export:
        pages, attachments = discover_export_files(export, logger)
        info, page_block_ids = build_resolver_context(pages, attachments, single_line_breaks)

        folders = group_pages_by_folder(pages)
        logger.info(f"Found {len(folders)} folder(s)")

        for folder, folder_pages in folders.items():
            process_folder(folder, folder_pages, export, info, page_block_ids, converter, logger, result)

        copied = copy_attachments(export, info, converter, logger)
        logger.info(f"Copied {copied}/{len(attachments)} attachment(s)")

    manifest = converter.save_manifest()
    logger.info(f"Manifest saved: {manifest}")

    log_conversion_summary(logger, result.converted, result.total, result.databases)
    if result.skipped:
        print(f"Skipped {result.skipped} file(s) without a page body")

    return result


def main(argv: List[str] = None) -> int:
    """Pipeline entry point: siyuan_pipeline.py <export_path> <output_dir>"""
    argv = sys.argv[1:] if argv is None else argv
    if len(argv) < 2:
        print("Usage: python -m notionsiyuan.siyuan_pipeline <export_path> <output_dir>")
        print("Example: python -m notionsiyuan.siyuan_pipeline Export.zip output")
        return 1

    result = run_pipeline(Path(argv[0]), Path(argv[1]))
    return 0 if result.failed == 0 and result.converted > 0 else 1


if __name__ == "__main__":
    sys.exit(main())
