#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""
Notion2SiYuan - Convert a Notion HTML export to a SiYuan import folder

Usage:
    python notion2siyuan.py EXPORT [options]

Examples:
    python notion2siyuan.py Export-1234.zip
    python notion2siyuan.py ./Export-1234 --output ./siyuan-import
    python notion2siyuan.py Export-1234.zip --single-line-breaks

Requirements:
    - Notion export in HTML format (zip or extracted folder)
    - Python 3.8+
"""

import sys
import argparse
from pathlib import Path


def check_python_version():
    """Verify Python 3.8+."""
    if sys.version_info < (3, 8):
        print(f"ERROR: Python 3.8+ required (you have {sys.version_info.major}.{sys.version_info.minor})")
        return False
    return True


def check_libraries():
    """Verify the HTML and markdown libraries are installed."""
    try:
        import bs4  # noqa: F401
        import markdownify  # noqa: F401
        print("OK: beautifulsoup4 and markdownify available")
        return True
    except ImportError as e:
        print(f"ERROR: {e}")
        print("   Install: pip install beautifulsoup4 markdownify")
        return False


def check_export(export_path: Path):
    """Verify the export exists."""
    if not export_path.exists():
        print(f"ERROR: Export not found: {export_path}")
        return False
    print(f"OK: Export found ({'folder' if export_path.is_dir() else 'file'})")
    return True


def check_requirements(export_path: Path):
    """Run all requirement checks."""
    print("Notion2SiYuan - Checking requirements...")
    print("=" * 60)

    checks = [
        ("Python version", check_python_version()),
        ("Libraries", check_libraries()),
        ("Export", check_export(export_path)),
    ]

    all_passed = all(result for _, result in checks)

    print("=" * 60)
    if all_passed:
        print("All requirements met\n")
    else:
        print("Requirements not met. Please fix errors above.\n")

    return all_passed


def main():
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Notion2SiYuan - Convert a Notion HTML export to SiYuan markdown and databases",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    python notion2siyuan.py Export-1234.zip
    python notion2siyuan.py ./Export-1234 --output ./siyuan-import
    python notion2siyuan.py Export-1234.zip --notebook "Work"

Output:
    <output>/<notebook>/            markdown documents with front matter
    <output>/<notebook>/assets/     attachments
    <output>/<notebook>/storage/av/ databases as attribute views
        """
    )

    parser.add_argument(
        'export',
        type=Path,
        help='Notion HTML export (.zip or extracted folder)'
    )

    parser.add_argument(
        '--output',
        type=Path,
        default=Path('./output'),
        help='Output directory (default: ./output)'
    )

    parser.add_argument(
        '--notebook',
        default=None,
        help='Notebook folder name (default: export file name)'
    )

    parser.add_argument(
        '--single-line-breaks',
        action='store_true',
        help='Collapse blank lines between paragraphs'
    )

    parser.add_argument(
        '--check-only',
        action='store_true',
        help='Only check requirements, do not convert'
    )

    args = parser.parse_args()

    if not check_requirements(args.export):
        return 1

    if args.check_only:
        print("Requirements check passed. Ready to convert.")
        return 0

    from notionsiyuan.siyuan_pipeline import run_pipeline

    print(f"\nExport:   {args.export}")
    print(f"Output:   {args.output}")
    if args.single_line_breaks:
        print("Breaks:   single line")

    result = run_pipeline(args.export, args.output, args.notebook, args.single_line_breaks)

    if result.converted > 0 and result.failed == 0:
        print("\n" + "=" * 60)
        print("SUCCESS: Conversion complete!")
        print("=" * 60)

        notebook_path = args.output / (args.notebook or args.export.stem)
        print(f"\nSiYuan import folder is ready:")
        print(f"  {notebook_path}")

        print(f"\nLogs saved to:")
        print(f"  {args.output / 'logs'}")
        return 0

    print("\n" + "=" * 60)
    print(f"FAILED: {result.failed} page(s) could not be converted, check errors above")
    print("=" * 60)
    return 1


if __name__ == '__main__':
    sys.exit(main())
