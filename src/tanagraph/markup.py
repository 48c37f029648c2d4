"""Inline markup translation and text helpers."""

import html
import json
import re
from typing import Callable, Optional

INLINE_REF_RE = re.compile(r'<span data-inlineref-node="([^"]*)"[^>]*>([^<]*)</span>')
INLINE_DATE_RE = re.compile(r'<span data-inlineref-date="([^"]*)"[^>]*>([^<]*)</span>')
LINK_RE = re.compile(r'<a href="([^"]+)"[^>]*>([^<]*)</a>')
BOLD_RE = re.compile(r'<b>(.*?)</b>')
ITALIC_RE = re.compile(r'<i>(.*?)</i>')
STRIKE_RE = re.compile(r'<strike>(.*?)</strike>')
CODE_RE = re.compile(r'<code>(.*?)</code>')
TAG_RE = re.compile(r'<[^>]+>')

YAML_SPECIAL_CHARS = ':#{}[]|>&*!"'


def inline_reference_ids(text: Optional[str]) -> list:
    """Return the node ids referenced inline by a piece of markup."""
    if not text:
        return []
    return [m.group(1) for m in INLINE_REF_RE.finditer(text)]


def parse_date_reference(attribute: str) -> str:
    """Extract the date string from a data-inlineref-date attribute."""
    try:
        date_json = json.loads(html.unescape(attribute))
    except (json.JSONDecodeError, TypeError):
        return ''
    if isinstance(date_json, dict):
        return date_json.get('dateTimeString', '') or ''
    return ''


def clean_node_name(name: str) -> str:
    """Remove HTML tags and clean up node names."""
    if not name:
        return ''

    # Keep alias text of references, drop the markup
    name = INLINE_REF_RE.sub(lambda m: m.group(2), name)
    name = INLINE_DATE_RE.sub(lambda m: parse_date_reference(m.group(1)) or m.group(2), name)
    name = TAG_RE.sub('', name)
    name = html.unescape(name)

    # Clean up whitespace
    name = ' '.join(name.split())

    return name.strip()


def sanitize_filename(name: str) -> str:
    """Create a safe filename from a node name."""
    if not name:
        return 'Untitled'

    # Remove/replace invalid filename characters
    invalid_chars = '<>:"/\\|?*\n\r\t#^[]'
    for char in invalid_chars:
        name = name.replace(char, '-')

    # Collapse multiple dashes and spaces
    name = re.sub(r'-+', '-', name)
    name = re.sub(r'\s+', ' ', name)

    # Remove leading/trailing dashes, dots, and spaces
    name = name.strip('-. ')

    # Truncate by byte length (Linux max is 255 bytes, keep short for safety)
    max_bytes = 150
    while len(name.encode('utf-8')) > max_bytes:
        name = name[:-1]

    name = name.strip('-. ')

    return name if name else 'Untitled'


def safe_tag(tag_name: str) -> str:
    """Make a tag name usable as an inline #hashtag."""
    tag = clean_node_name(tag_name).replace(' ', '-')
    return re.sub(r'[^\w\-/]', '', tag)


def format_property(name: str, value) -> str:
    """Format one property as a YAML front matter line.

    Handles:
    - Lists -> YAML list format (a single item collapses to a scalar)
    - Strings with special chars -> quoted (with inner quotes escaped)
    """
    if isinstance(value, list):
        if len(value) == 1:
            return format_property(name, value[0])
        lines = [f'{name}:']
        for val in value:
            lines.append(f'  - {_quote_yaml(val)}')
        return '\n'.join(lines)
    return f'{name}: {_quote_yaml(value)}'


def _quote_yaml(value) -> str:
    val_str = str(value)
    if any(c in val_str for c in YAML_SPECIAL_CHARS) or val_str.startswith(("'", ' ')):
        escaped_val = val_str.replace('\\', '\\\\').replace('"', '\\"')
        return f'"{escaped_val}"'
    return val_str


class MarkupTranslator:
    """Turns Tana's HTML-like inline markup into Markdown.

    Substitutions run as independent passes in a fixed order. References are
    resolved first so that references wrapped in formatting still resolve.
    """

    def __init__(self, link_for: Callable[[str, Optional[str]], str]):
        self.link_for = link_for

    def translate(self, text: Optional[str]) -> str:
        if not text:
            return ''

        def replace_node_ref(match):
            alias_text = match.group(2).strip()
            return self.link_for(match.group(1), alias_text or None)

        def replace_date_ref(match):
            date_str = parse_date_reference(match.group(1))
            if date_str:
                return f'[[{date_str}]]'
            return match.group(2)

        def replace_link(match):
            url, link_text = match.group(1), match.group(2)
            if not link_text or link_text == url:
                return url
            return f'[{link_text}]({url})'

        text = INLINE_REF_RE.sub(replace_node_ref, text)
        text = INLINE_DATE_RE.sub(replace_date_ref, text)
        text = LINK_RE.sub(replace_link, text)
        text = BOLD_RE.sub(r'**\1**', text)
        text = ITALIC_RE.sub(r'*\1*', text)
        text = STRIKE_RE.sub(r'~~\1~~', text)
        text = CODE_RE.sub(r'`\1`', text)

        return html.unescape(text)
