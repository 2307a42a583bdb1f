"""
Markdown helpers for issue documents.

Narrow, line-based extraction: headings, the section under a heading,
fenced code blocks, list/checklist items and unfilled template placeholders.
Headings and list markers inside fenced blocks are never treated as structure.
"""

import re
from dataclasses import dataclass

HEADING_RE = re.compile(r'^(#{1,6})\s+(.*?)\s*#*\s*$')
FENCE_RE = re.compile(r'^\s{0,3}(`{3,}|~{3,})\s*([^`]*)$')
LIST_ITEM_RE = re.compile(r'^\s*(?:[-*+]|\d+[.)])\s+(.*)$')
CHECKBOX_RE = re.compile(r'^\s*[-*+]\s+\[([ xX])\]\s*(.*)$')
COMMENT_RE = re.compile(r'<!--.*?-->', re.DOTALL)
INLINE_CODE_RE = re.compile(r'`[^`\n]*`')

# [Describe the problem], {{title}}, TODO:, TBD
# Checkboxes, links ([x](url), [x][ref]) and reference definitions are not placeholders.
PLACEHOLDER_RE = re.compile(
    r'\[(?![ xX]\])[^\[\]\n]{2,}\](?![(\[:])'
    r'|\{\{[^{}\n]*\}\}'
    r'|\bTODO:'
    r'|\bTBD\b'
)

# Bracketed step data in gherkin, e.g. [id, name] or [admin]. Template tokens are phrases.
STEP_DATA_RE = re.compile(r'^\[(?:[^\s,\[\]]+|[^\[\]]*,[^\[\]]*)\]$')


@dataclass
class Heading:
    level: int
    title: str
    line_index: int


@dataclass
class FencedBlock:
    info: str  # Info string after the opening fence, e.g. "gherkin"
    content: str
    line_index: int  # Index of the opening fence line


def scan_lines(text: str) -> list[tuple[str, bool]]:
    """Return (line, in_fence) for every line.

    Fence delimiter lines count as inside the fence. A fence only closes on
    the same character repeated at least as many times, so a ```` block can
    contain ``` examples.
    """
    result = []
    fence_char = None
    fence_len = 0

    for line in text.splitlines():
        m = FENCE_RE.match(line)
        if fence_char is None:
            if m:
                fence_char = m.group(1)[0]
                fence_len = len(m.group(1))
                result.append((line, True))
            else:
                result.append((line, False))
        else:
            result.append((line, True))
            if m and m.group(1)[0] == fence_char and len(m.group(1)) >= fence_len and not m.group(2).strip():
                fence_char = None
                fence_len = 0

    return result


def fenced_blocks(text: str) -> list[FencedBlock]:
    """Top-level fenced blocks. Fences nested inside another block are content."""
    blocks = []
    fence_char = None
    fence_len = 0
    info = ""
    start = 0
    body: list[str] = []

    for i, line in enumerate(text.splitlines()):
        m = FENCE_RE.match(line)
        if fence_char is None:
            if m:
                fence_char = m.group(1)[0]
                fence_len = len(m.group(1))
                info = m.group(2).strip()
                start = i
                body = []
        elif m and m.group(1)[0] == fence_char and len(m.group(1)) >= fence_len and not m.group(2).strip():
            blocks.append(FencedBlock(info=info, content="\n".join(body), line_index=start))
            fence_char = None
        else:
            body.append(line)

    # Unterminated fence runs to end of document
    if fence_char is not None:
        blocks.append(FencedBlock(info=info, content="\n".join(body), line_index=start))

    return blocks


def _normalize_title(title: str) -> str:
    title = re.sub(r'[*_`]', '', title)
    return title.strip().rstrip(':').strip().lower()


def headings(text: str) -> list[Heading]:
    found = []
    for i, (line, in_fence) in enumerate(scan_lines(text)):
        if in_fence:
            continue
        m = HEADING_RE.match(line)
        if m:
            found.append(Heading(level=len(m.group(1)), title=m.group(2), line_index=i))
    return found


def get_section(text: str, *titles: str) -> str | None:
    """Content under the first heading matching any of titles (case-insensitive).

    The section runs until the next heading of the same or a higher level.
    Returns None if no such heading exists.
    """
    wanted = {_normalize_title(t) for t in titles}
    lines = text.splitlines()
    all_headings = headings(text)

    for idx, heading in enumerate(all_headings):
        if _normalize_title(heading.title) not in wanted:
            continue
        end = len(lines)
        for later in all_headings[idx + 1:]:
            if later.level <= heading.level:
                end = later.line_index
                break
        return "\n".join(lines[heading.line_index + 1:end]).strip("\n")

    return None


def strip_comments(text: str) -> str:
    return COMMENT_RE.sub("", text)


def list_items(section: str) -> list[str]:
    """Bullet and numbered list items outside code fences."""
    items = []
    for line, in_fence in scan_lines(strip_comments(section)):
        if in_fence:
            continue
        m = LIST_ITEM_RE.match(line)
        if m and m.group(1).strip():
            items.append(m.group(1).strip())
    return items


def checklist(section: str) -> list[tuple[bool, str]]:
    """(checked, label) for every ``- [ ]`` / ``- [x]`` item."""
    items = []
    for line, in_fence in scan_lines(strip_comments(section)):
        if in_fence:
            continue
        m = CHECKBOX_RE.match(line)
        if m:
            items.append((m.group(1).lower() == "x", m.group(2).strip()))
    return items


def find_placeholders(text: str, skip_fences: bool = False, allow_step_data: bool = False) -> list[str]:
    """Distinct unfilled template tokens, in order of appearance.

    With allow_step_data, bracketed lists and single words such as [id, name]
    or [admin] are read as gherkin step data rather than placeholders.
    """
    text = strip_comments(text)
    if skip_fences:
        text = "\n".join(line for line, in_fence in scan_lines(text) if not in_fence)
    text = INLINE_CODE_RE.sub("", text)

    seen = []
    for m in PLACEHOLDER_RE.finditer(text):
        token = m.group(0)
        if allow_step_data and STEP_DATA_RE.match(token):
            continue
        if token not in seen:
            seen.append(token)
    return seen


def has_content(section: str | None) -> bool:
    """True if section holds something other than whitespace, comments and placeholders."""
    if section is None:
        return False
    text = PLACEHOLDER_RE.sub("", INLINE_CODE_RE.sub("x", strip_comments(section)))
    # List markers alone ("- ") are not content
    text = re.sub(r'^\s*(?:[-*+]|\d+[.)])\s*$', '', text, flags=re.MULTILINE)
    return bool(text.strip())
