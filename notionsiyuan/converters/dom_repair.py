#!/usr/bin/env python3
# Copyright (c) 2025 Denis Darkin
# SPDX-License-Identifier: MIT
"""
DOM repair passes for Notion HTML exports.

Each pass mutates the page body in place, does nothing when its pattern is
absent, and leaves its own output unchanged when run again. The order in
run_repair_passes matters: toggles must become headings/list items before
adjacent lists are merged, and everything runs before markdown rendering.
"""

import re
from typing import List

from bs4 import NavigableString, Tag

from ..notion_utils import create_el, element_children, hoist_children, next_element_sibling

HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']

# Inline font sizes Notion uses on toggle headings
FONT_SIZE_TO_HEADINGS = {
    '1.875em': 'h1',
    '1.5em': 'h2',
    '1.25em': 'h3',
}

BLOCK_TEX_PATTERN = re.compile(r'\\begin\{.*?\}[\s\S]+\\end\{.*?\}', re.IGNORECASE)
VALID_URL_PATTERN = re.compile(r'^(https?://|www\.)')


def clean_invalid_dom(body: Tag) -> None:
    """Remove scripts, stylesheets and <style> blocks (KaTeX ships one per formula)."""
    for el in body.select('script[src]'):
        el.decompose()
    for el in body.select('link[rel="stylesheet"]'):
        el.decompose()
    for el in body.find_all('style'):
        el.decompose()


def wrap_headings(body: Tag) -> None:
    """Wrap headings in a <div> so they never run into the following text."""
    for heading in body.find_all(HEADING_TAGS):
        parent = heading.parent
        if parent is not None and parent.name == 'div' and element_children(parent) == [heading]:
            continue
        heading.wrap(create_el('div'))


def replace_nested_tags(body: Tag, tag: str) -> None:
    """Hoist <strong> inside <strong> (or <em> inside <em>)."""
    for el in body.find_all(tag):
        if el.parent is None or el.parent.name == tag:
            continue
        nested = el.find(tag)
        while nested is not None:
            hoist_children(nested)
            nested = el.find(tag)


def strip_to_sentence(paragraph: str) -> str:
    match = re.match(r'^[^.?!\n]*[.?!]?', paragraph)
    return match.group(0) if match else ''


def _text_div(text: str) -> Tag:
    div = create_el('div')
    for i, line in enumerate(text.split('\n')):
        if i > 0:
            div.append(create_el('br'))
        div.append(line)
    return div


def fix_notion_embeds(body: Tag) -> None:
    """Simplify bookmark boxes to a quote: label, title, one sentence, link."""
    for embed in body.select('a.bookmark.source'):
        link = embed.get('href', '')
        title_el = embed.select_one('div.bookmark-title')
        description_el = embed.select_one('div.bookmark-description')
        title = title_el.get_text() if title_el else ''
        description = strip_to_sentence(description_el.get_text() if description_el else '')

        blockquote = create_el('blockquote')
        for info in ['[!bookmark]🔖', title, description]:
            if info.strip():
                blockquote.append(_text_div(info))

        link_div = create_el('div')
        link_div.append(create_el('a', text=link, href=link))
        blockquote.append(link_div)

        embed.replace_with(blockquote)


def fix_notion_callouts(body: Tag) -> None:
    for callout in body.select('figure.callout'):
        blockquote = create_el('blockquote')
        for child in list(callout.contents):
            blockquote.append(child.extract())
        blockquote.insert(0, create_el('span', text='[!important]'))
        callout.replace_with(blockquote)


def strip_link_formatting(body: Tag) -> None:
    for link in body.find_all('link'):
        if link.contents:
            link.string = link.get_text()


def fix_notion_dates(body: Tag) -> None:
    # Notion dates always start with @
    for time in body.find_all('time'):
        text = time.get_text()
        if '@' in text:
            time.string = text.replace('@', '')


def fix_equations(body: Tag) -> None:
    """Keep only the TeX source of KaTeX formulas, as block (align) math."""
    for el in body.select('.katex-html'):
        el.decompose()

    for math in body.find_all('math'):
        annotation = math.find('annotation')
        if annotation is None:
            continue
        tex = annotation.get_text().strip()
        if not BLOCK_TEX_PATTERN.search(tex):
            tex = f'\\begin{{align}}\n{tex}\n\\end{{align}}'
        annotation.string = tex
        math.replace_with(annotation.extract())


def replace_elements_with_children(body: Tag, selector: str) -> None:
    for el in body.select(selector):
        hoist_children(el)


def fix_toggle_headings(body: Tag) -> None:
    for summary in body.find_all('summary'):
        style = summary.get('style')
        if not style:
            continue

        for font_size, heading in FONT_SIZE_TO_HEADINGS.items():
            if font_size in style:
                summary.replace_with(create_el(heading, text=summary.get_text()))
                break


def fix_normal_toggle(body: Tag) -> None:
    """Turn plain toggles into list items.

    Notion exports a toggle as an otherwise empty <li> around the toggle,
    which is dropped here by hoisting its children.
    """
    for summary in body.find_all('summary'):
        if summary.get('style'):
            continue

        parent_li = summary.find_parent('li')
        if parent_li is not None:
            hoist_children(parent_li)
        summary.replace_with(create_el('li', text=summary.get_text()))


def fix_notion_lists(body: Tag, tag_name: str) -> None:
    """Merge runs of adjacent same-class <ul>/<ol> into the first list of the run.

    Notion wraps every list item in its own list element.
    """
    for html_list in body.find_all(tag_name):
        if html_list.parent is None:
            continue

        run = []
        current = html_list
        while True:
            following = next_element_sibling(current)
            # classes are always "to-do-list", "bulleted-list" or "numbered-list"
            if (following is None or following.name != tag_name
                    or current.get('class') != following.get('class')):
                break
            run.append(following)
            current = following

        for adjacent in run:
            for item in element_children(adjacent):
                html_list.append(item.extract())
            adjacent.extract()


def add_checkboxes(body: Tag) -> None:
    for checkbox in body.select('.checkbox.checkbox-on'):
        checkbox.replace_with('[x] ')
    for checkbox in body.select('.checkbox.checkbox-off'):
        checkbox.replace_with('[ ] ')


def replace_table_of_contents(body: Tag) -> None:
    """Point table-of-contents links at the heading text instead of Notion's block IDs."""
    for link in body.select('a[href*="#"]'):
        if link.get('href', '').startswith('#'):
            link['href'] = '#' + link.get_text()


def format_databases(body: Tag) -> None:
    """Flatten what is left of database markup in tables to plain text."""
    # Notion includes user avatars, keep only the names
    for user in body.select('span[class="user"]'):
        user.string = user.get_text()

    for checkbox in body.select('td div[class*="checkbox"]'):
        checked = 'checkbox-on' in checkbox.get('class', [])
        checkbox.replace_with(create_el('span', text='X' if checked else ''))

    for select in body.select('table span[class*="selected-value"]'):
        parent = select.parent
        if parent is None or element_children(parent)[-1] is select:
            continue
        text = select.get_text()
        if not text.endswith(', '):
            select.string = text + ', '

    for a in body.select('table a[href]'):
        if not VALID_URL_PATTERN.match(a['href']):
            a.replace_with(create_el('span', text=a.get_text()))


def _split_at_brs(el: Tag) -> None:
    segments: List[list] = [[]]
    for child in list(el.contents):
        if isinstance(child, Tag) and child.name == 'br':
            segments.append([])
        else:
            segments[-1].append(child.extract())

    pieces = []
    for i, segment in enumerate(segments):
        if i > 0:
            pieces.append(create_el('br'))
        if not segment:
            continue
        if all(isinstance(node, NavigableString) for node in segment) and not ''.join(segment).strip():
            pieces.extend(segment)
            continue
        part = create_el(el.name)
        part.attrs = dict(el.attrs)
        for node in segment:
            part.append(node)
        pieces.append(part)

    el.replace_with(*pieces)


def split_brs_in_formatting(body: Tag, tag: str) -> bool:
    """Split <tag>a<br/>b</tag> into <tag>a</tag><br/><tag>b</tag>.

    Returns True if anything was split.
    """
    changed = False
    for el in body.find_all(tag):
        if el.parent is None or el.find('br', recursive=False) is None:
            continue
        _split_at_brs(el)
        changed = True
    return changed


def split_brs(body: Tag) -> None:
    """Split bold and italic runs at line breaks, including nested ones."""
    changed = True
    while changed:
        changed = split_brs_in_formatting(body, 'strong')
        changed = split_brs_in_formatting(body, 'em') or changed


def lowercase_code_languages(body: Tag) -> None:
    # <code class="language-Mermaid"> -> <code class="language-mermaid">
    for code in body.select('code[class^="language-"]'):
        code['class'] = [class_name.lower() for class_name in code.get('class', [])]


def run_repair_passes(body: Tag) -> None:
    """Run the ordered repair passes that follow link conversion."""
    replace_nested_tags(body, 'strong')
    replace_nested_tags(body, 'em')
    fix_notion_embeds(body)
    fix_notion_callouts(body)
    strip_link_formatting(body)
    fix_notion_dates(body)
    fix_equations(body)

    # Wrappers Notion adds that only get in the way of markdown
    replace_elements_with_children(body, 'div.indented')
    replace_elements_with_children(body, 'details')
    fix_toggle_headings(body)
    fix_normal_toggle(body)
    fix_notion_lists(body, 'ul')
    fix_notion_lists(body, 'ol')

    add_checkboxes(body)
    replace_table_of_contents(body)
    format_databases(body)
