"""
Frontmatter codec for issue, spec and guidance documents.

Only a fixed set of keys is recognized, each matched line by line in the
leading ``---`` block. This is not a YAML parser: hand-edited files must keep
working, so a value that does not parse falls back to the field's default
instead of raising.

    ---
    status: in-progress
    created: 2025-03-14
    completed:
    dependencies: [parser, storage]
    ---
"""

import re
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from agileflow.lib import timeutil

DELIMITER = "---"


@dataclass(frozen=True)
class Field:
    """One recognized frontmatter key.

    kind is one of "str", "date", "enum", "list". default may be a callable
    (e.g. today's date) evaluated at read time.
    """
    key: str
    kind: str = "str"
    default: Any = None
    choices: tuple[str, ...] = ()

    def resolve_default(self) -> Any:
        if callable(self.default):
            return self.default()
        if self.kind == "list":
            return list(self.default or ())
        return self.default


def _key_re(key: str) -> re.Pattern:
    return re.compile(rf'^{re.escape(key)}\s*:(.*)$')


def split_frontmatter(text: str) -> tuple[list[str] | None, str]:
    """Split text into (frontmatter lines, body).

    Block lines come back without line endings; the body is returned
    verbatim. Returns (None, text) if the document has no well-formed
    leading block.
    """
    raw = text.splitlines(keepends=True)
    lines = [line.rstrip("\r\n") for line in raw]
    if not lines or lines[0].strip() != DELIMITER:
        return None, text
    for i in range(1, len(lines)):
        if lines[i].strip() == DELIMITER:
            return lines[1:i], "".join(raw[i + 1:])
    # Opening delimiter but no closing one
    return None, text


def _unquote(value: str) -> str:
    value = value.strip()
    if len(value) >= 2 and value[0] == value[-1] and value[0] in ("'", '"'):
        return value[1:-1]
    return value


def read_raw(text: str, key: str) -> str | None:
    """Return the raw (unquoted) value of key, or None if absent."""
    block, _ = split_frontmatter(text)
    if block is None:
        return None
    pattern = _key_re(key)
    for line in block:
        m = pattern.match(line)
        if m:
            return _unquote(m.group(1))
    return None


def _parse_list(raw: str) -> list[str] | None:
    raw = raw.strip()
    if not raw:
        return []
    if not (raw.startswith("[") and raw.endswith("]")):
        return None
    inner = raw[1:-1]
    return [_unquote(item) for item in inner.split(",") if _unquote(item)]


def _decode(field: Field, raw: str | None) -> Any:
    if raw is None:
        return field.resolve_default()

    if field.kind == "date":
        parsed = timeutil.parse_date(raw)
        return parsed if parsed is not None else field.resolve_default()

    if field.kind == "enum":
        value = raw.strip().lower()
        return value if value in field.choices else field.resolve_default()

    if field.kind == "list":
        parsed = _parse_list(raw)
        return parsed if parsed is not None else field.resolve_default()

    value = raw.strip()
    if not value and field.default is not None:
        return field.resolve_default()
    return value


def read_fields(fields: list[Field], text: str) -> dict[str, Any]:
    """Decode the given fields from text, defaulting anything absent or malformed."""
    return {f.key: _decode(f, read_raw(text, f.key)) for f in fields}


def format_value(value: Any) -> str:
    if value is None:
        return ""
    if isinstance(value, (list, tuple)):
        return "[" + ", ".join(str(v) for v in value) + "]"
    return str(value)


def detect_newline(text: str) -> str:
    """Line ending the document already uses."""
    return "\r\n" if "\r\n" in text else "\n"


def write_field(text: str, key: str, value: Any) -> str:
    """Return text with key set to value.

    Replaces the key's line in place, appends it to an existing block, or
    synthesizes a new block at the top of the document. Only frontmatter
    lines are touched; the body and its line endings are kept as they are.
    """
    rendered = f"{key}: {format_value(value)}".rstrip()
    newline = detect_newline(text)

    block, _ = split_frontmatter(text)
    if block is None:
        new_text = f"{DELIMITER}{newline}{rendered}{newline}{DELIMITER}{newline}"
        if text:
            new_text += newline + text
        return new_text

    lines = text.splitlines(keepends=True)
    closing = len(block) + 1
    pattern = _key_re(key)
    for i in range(1, closing):
        if pattern.match(lines[i].rstrip("\r\n")):
            ending = lines[i][len(lines[i].rstrip("\r\n")):]
            lines[i] = rendered + ending
            break
    else:
        lines.insert(closing, rendered + newline)

    return "".join(lines)


def write_fields(text: str, updates: dict[str, Any]) -> str:
    for key, value in updates.items():
        text = write_field(text, key, value)
    return text


def read_document(path: Path) -> str:
    """Read a document without translating its line endings."""
    with open(path, newline="") as f:
        return f.read()


def write_document(path: Path, text: str) -> None:
    with open(path, "w", newline="") as f:
        f.write(text)


def update_document(path: Path, updates: dict[str, Any]) -> None:
    """Rewrite frontmatter keys of the file at path in place."""
    write_document(path, write_fields(read_document(path), updates))


def strip_frontmatter(text: str) -> str:
    """Body of the document without its leading block."""
    return split_frontmatter(text)[1]

