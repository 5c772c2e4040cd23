#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""
Shared utilities for markdown rendering and text-level post-processing.
"""

import re
from typing import List, Optional, Tuple

from bs4 import Tag
from markdownify import MarkdownConverter as MarkdownifyConverter

HASHTAG_PATTERN = re.compile(r'#[a-z0-9\-]+', re.IGNORECASE)
AV_PLACEHOLDER_PATTERN = re.compile(r'\[:av:(.*?):\]')
DOUBLE_BACKSLASH_LINK_PATTERN = re.compile(r'\[\[[^\]]*(\\\\)\|[^\]]*\]\]')


def _extract_code_blocks(text: str) -> List[Tuple[int, int, str]]:
    """Extract positions of code blocks and inline code.

    Returns:
        List of (start, end, type) tuples where type is 'fence' or 'inline'
    """
    code_regions = []

    # Find fenced code blocks (```...```)
    for match in re.finditer(r'```[\s\S]*?```', text):
        code_regions.append((match.start(), match.end(), 'fence'))

    # Find inline code (`...`)
    for match in re.finditer(r'`[^`\n]+?`', text):
        code_regions.append((match.start(), match.end(), 'inline'))

    # Sort by start position
    code_regions.sort(key=lambda x: x[0])
    return code_regions


def _is_in_code_context(position: int, code_regions: List[Tuple[int, int, str]]) -> bool:
    """Check if a position is inside a code block or inline code."""
    for start, end, _ in code_regions:
        if start <= position < end:
            return True
    return False


def _line_bounds(text: str, position: int) -> Tuple[int, int]:
    start = text.rfind('\n', 0, position) + 1
    end = text.find('\n', position)
    return start, len(text) if end == -1 else end


def _hashtag_in_link(line: str, hashtag: str) -> bool:
    """Check whether a hashtag appears inside a [[wikilink]] or [text](url) on a line."""
    tag = re.escape(hashtag)
    pattern = (
        rf'\[\[[^\]]*{tag}[^\]]*\]\]'
        rf'|\[[^\]]*{tag}[^\]]*\]\([^\)]*\)'
        rf'|\[[^\]]*\]\([^\)]*{tag}[^\)]*\)'
    )
    return bool(re.search(pattern, line))


def escape_hashtags(text: str) -> str:
    """Escape tag-like words (#word) so SiYuan does not read them as tags.

    Hashtags inside code, inside links and already escaped ones are kept.

    Examples:
        >>> escape_hashtags("Plan #todo")
        'Plan \\\\#todo'

        >>> escape_hashtags("See [notes](#todo)")
        'See [notes](#todo)'
    """
    if not HASHTAG_PATTERN.search(text):
        return text

    code_regions = _extract_code_blocks(text)
    result = text

    # Work backwards so earlier positions stay valid
    for match in reversed(list(HASHTAG_PATTERN.finditer(text))):
        start = match.start()
        if _is_in_code_context(start, code_regions):
            continue
        if start > 0 and text[start - 1] == '\\':
            continue
        line_start, line_end = _line_bounds(text, start)
        if _hashtag_in_link(text[line_start:line_end], match.group()):
            continue
        result = result[:start] + '\\' + result[start:]

    return result


def fix_double_backslash(text: str) -> str:
    """Turn '\\\\|' back into '\\|' inside [[...]] links.

    Table cells need '\\|' in internal links; rendering doubles the backslash.
    """
    def fix_link(match):
        return match.group(0).replace('\\\\|', '\\|')

    return DOUBLE_BACKSLASH_LINK_PATTERN.sub(fix_link, text)


def normalize_line_breaks(text: str) -> str:
    """Collapse blank lines to single breaks, except before blockquotes."""
    return re.sub(r'\n\n(?!>)', '\n', text)


def expand_av_placeholders(text: str) -> str:
    """Replace [:av:<id>:] tokens with SiYuan attribute view embed blocks."""
    return AV_PLACEHOLDER_PATTERN.sub(
        lambda match: (
            f'<div data-type="NodeAttributeView" data-av-id="{match.group(1)}" '
            f'data-av-type="table"></div>'
        ),
        text,
    )


def _code_language(pre: Tag) -> Optional[str]:
    """Read the fence language from <pre><code class="language-xxx">."""
    code = pre.find('code')
    if code is None:
        return None
    for class_name in code.get('class', []):
        if class_name.startswith('language-'):
            return class_name[len('language-'):]
    return None


class SiYuanMarkdownConverter(MarkdownifyConverter):
    """markdownify converter tuned for SiYuan's markdown dialect.

    - ATX headings and '-' bullets
    - underscores and brackets are left alone so [[refs]] and
      ((block 'refs')) survive
    - <annotation> (TeX source of a formula) becomes a $$ math block
    - fenced code keeps the language from the code class
    """

    def __init__(self, **kwargs):
        markdownify_options = {
            'heading_style': 'ATX',
            'bullets': '-',
            'escape_underscores': False,
            'escape_misc': False,
            'code_language_callback': _code_language,
        }
        markdownify_options.update(kwargs)
        super().__init__(**markdownify_options)

    def convert_annotation(self, el, text, parent_tags=None, **kwargs):
        tex = el.get_text().strip()
        if not tex:
            return ''
        return f'\n\n$$\n{tex}\n$$\n\n'


def html_to_markdown(html_text: str, **options) -> str:
    """Convert an HTML fragment to SiYuan markdown."""
    return SiYuanMarkdownConverter(**options).convert(html_text)
