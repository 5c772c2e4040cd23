#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""
Shared utilities for the Notion to SiYuan conversion pipeline.
Export reading, discovery of pages and attachments, and logging helpers.
"""

import sys
import logging
import zipfile
from pathlib import Path, PurePosixPath
from datetime import datetime
from collections import defaultdict
from typing import Dict, List, Tuple

from .notion_types import ResolverContext
from .notion_utils import generate_siyuan_id, get_notion_id, parse_file_path, strip_notion_id

PAGE_EXTENSION = '.html'


def setup_logging(output_dir: Path, logger_name: str) -> logging.Logger:
    """
    Set up logging configuration with UTF-8 encoding.

    Args:
        output_dir: Base output directory for logs
        logger_name: Name for the logger (e.g., 'NotionSiYuan')

    Returns:
        Configured logger instance
    """
    log_dir = output_dir / 'logs'
    log_dir.mkdir(parents=True, exist_ok=True)

    timestamp = datetime.now().strftime('%Y%m%d_%H%M%S')
    log_file = log_dir / f'{logger_name.lower()}_{timestamp}.log'

    logging.basicConfig(
        level=logging.INFO,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler(sys.stdout)
        ]
    )

    # Set console output encoding to UTF-8 for Windows
    if sys.stdout.encoding != 'utf-8':
        sys.stdout.reconfigure(encoding='utf-8')
        sys.stderr.reconfigure(encoding='utf-8')

    return logging.getLogger(logger_name)


class NotionExport:
    """Read files from a Notion HTML export, zipped or already extracted.

    Paths are POSIX paths relative to the export root.
    """

    def __init__(self, export_path: Path):
        self.export_path = Path(export_path)
        self.is_zip = self.export_path.is_file() and zipfile.is_zipfile(self.export_path)
        self._zip = zipfile.ZipFile(self.export_path) if self.is_zip else None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        if self._zip is not None:
            self._zip.close()
            self._zip = None

    def list_files(self) -> List[str]:
        if self._zip is not None:
            return [name for name in self._zip.namelist() if not name.endswith('/')]
        return [
            path.relative_to(self.export_path).as_posix()
            for path in self.export_path.rglob('*')
            if path.is_file()
        ]

    def read_bytes(self, path: str) -> bytes:
        if self._zip is not None:
            return self._zip.read(path)
        return (self.export_path / path).read_bytes()

    def read_text(self, path: str) -> str:
        return self.read_bytes(path).decode('utf-8', errors='replace')


def page_title(page_path: str) -> str:
    """Page title from an exported file name, without the Notion ID."""
    return strip_notion_id(parse_file_path(page_path)['basename']).strip() or 'Untitled'


def page_folders(page_path: str) -> List[str]:
    """Parent folders of a page with Notion IDs stripped."""
    return [strip_notion_id(part).strip() or part for part in PurePosixPath(page_path).parent.parts]


def discover_export_files(export: NotionExport, logger: logging.Logger) -> Tuple[List[str], List[str]]:
    """
    Split the files of an export into pages and attachments.

    Args:
        export: Opened Notion export
        logger: Logger instance for reporting

    Returns:
        Tuple of (page paths, attachment paths)

    Raises:
        SystemExit: If no pages are found
    """
    pages = []
    attachments = []

    for path in sorted(export.list_files()):
        if path.lower().endswith(PAGE_EXTENSION):
            pages.append(path)
        else:
            attachments.append(path)

    if not pages:
        logger.warning(f"No HTML pages found in {export.export_path}")
        print(f"\nNo HTML pages found in {export.export_path}")
        print("Export the Notion workspace as 'HTML' (not 'Markdown & CSV').")
        sys.exit(1)

    logger.info(f"Found {len(pages)} page(s) and {len(attachments)} attachment(s)")

    return pages, attachments


def build_resolver_context(pages: List[str], attachments: List[str],
                           single_line_breaks: bool = False) -> Tuple[ResolverContext, Dict[str, str]]:
    """
    Register every page and attachment before any page is converted.

    Minting a block ID for every page up front means relation links
    resolve no matter in which order pages are converted.

    Returns:
        Tuple of (resolver context, page path -> block ID)
    """
    info = ResolverContext(single_line_breaks=single_line_breaks)
    page_block_ids = {}

    for page_path in pages:
        block_id = generate_siyuan_id()
        page_block_ids[page_path] = block_id
        notion_id = get_notion_id(page_path)
        if notion_id:
            info.record_page(notion_id, block_id, page_title(page_path))

    for attachment_path in attachments:
        parts = parse_file_path(attachment_path)
        asset_name = f"{parts['basename']}-{generate_siyuan_id()}"
        if parts['extension']:
            asset_name += f".{parts['extension']}"
        info.record_attachment(attachment_path, parts['name'], f"assets/{asset_name}")

    return info, page_block_ids


def group_pages_by_folder(pages: List[str]) -> Dict[str, List[str]]:
    """Group page paths by their parent folder, preserving order."""
    folders = defaultdict(list)
    for page_path in pages:
        folders[str(PurePosixPath(page_path).parent)].append(page_path)
    return dict(folders)


def log_pipeline_start(logger: logging.Logger, pipeline_name: str,
                       export_path: Path, output_dir: Path):
    """
    Log the start of a pipeline execution.

    Args:
        logger: Logger instance
        pipeline_name: Name of the pipeline
        export_path: Notion export being processed
        output_dir: Output directory path
    """
    logger.info(f"NotionSiYuan - {pipeline_name}")
    logger.info("=" * 70)
    logger.info(f"Export: {export_path}")
    logger.info(f"Output Directory: {output_dir}")


def log_conversion_summary(logger: logging.Logger, total_success: int,
                           total_files: int, database_count: int):
    """
    Log the final conversion summary.

    Args:
        logger: Logger instance
        total_success: Number of successfully converted pages
        total_files: Total number of pages
        database_count: Number of attribute views written
    """
    logger.info("=" * 70)
    logger.info(f"Processing complete: {total_success}/{total_files} pages converted successfully")

    if total_success > 0:
        print(f"\nSuccessfully converted {total_success} page(s)")
        print(f"Rebuilt {database_count} database(s)")
    else:
        print("\nNo pages converted successfully")
