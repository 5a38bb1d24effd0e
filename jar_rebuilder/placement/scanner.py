"""Recover package and primary type name from decompiled Java text.

A lightweight token scan rather than a parser: comments, string/char
literals and text blocks are skipped, braces are counted, and only
declarations at nesting depth 0 are considered. Member classes, anonymous
classes and ``Foo.class`` literals therefore never win over the top-level
type.
"""

from __future__ import annotations

import re
from typing import Iterator, NamedTuple

PLACEHOLDER_TYPE = "Unknown"

_TYPE_KEYWORDS = frozenset({"class", "interface", "enum", "record"})
_RESERVED = frozenset({
    "abstract", "class", "enum", "extends", "final", "implements", "interface",
    "native", "non", "permits", "private", "protected", "public", "record",
    "sealed", "static", "strictfp", "synchronized", "transient", "volatile",
})

_IDENT_RE = re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*")


class Token(NamedTuple):
    text: str
    depth: int


class DeclaredNames(NamedTuple):
    package: str  # "" when no package declaration is present
    type_name: str  # PLACEHOLDER_TYPE when no top-level type is found


def _skip_string(text: str, pos: int, quote: str) -> int:
    """Return the index just past the literal starting at *pos*."""
    if text.startswith('"""', pos):
        end = text.find('"""', pos + 3)
        return len(text) if end == -1 else end + 3
    i = pos + 1
    while i < len(text):
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if ch == quote or ch == "\n":
            return i + 1
        i += 1
    return i


def tokenize(text: str) -> Iterator[Token]:
    """Yield identifiers and punctuation with their brace depth."""
    depth = 0
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch.isspace():
            i += 1
        elif text.startswith("//", i):
            end = text.find("\n", i)
            i = n if end == -1 else end + 1
        elif text.startswith("/*", i):
            end = text.find("*/", i + 2)
            i = n if end == -1 else end + 2
        elif ch in "\"'":
            i = _skip_string(text, i, ch)
        elif ch == "{":
            yield Token(ch, depth)
            depth += 1
            i += 1
        elif ch == "}":
            depth = max(depth - 1, 0)
            yield Token(ch, depth)
            i += 1
        else:
            m = _IDENT_RE.match(text, i)
            if m:
                yield Token(m.group(0), depth)
                i = m.end()
            else:
                yield Token(ch, depth)
                i += 1


def scan_declarations(text: str) -> DeclaredNames:
    """Find the package declaration and the first top-level type."""
    tokens = list(tokenize(text))
    package = ""
    type_name = ""
    for idx, tok in enumerate(tokens):
        if tok.depth != 0:
            continue
        if not package and not type_name and tok.text == "package":
            package = _qualified_name(tokens, idx + 1)
        elif tok.text in _TYPE_KEYWORDS and idx + 1 < len(tokens):
            if tok.text == "interface" and idx > 0 and tokens[idx - 1].text == "@":
                pass  # annotation type: "@interface Name"
            elif idx > 0 and tokens[idx - 1].text == ".":
                continue  # "Foo.class" outside a body
            candidate = tokens[idx + 1].text
            if _IDENT_RE.fullmatch(candidate) and candidate not in _RESERVED:
                type_name = candidate
                break
    return DeclaredNames(package, type_name or PLACEHOLDER_TYPE)


def _qualified_name(tokens: list[Token], start: int) -> str:
    """Read ``a.b.c`` followed by ``;``; return "" if malformed."""
    parts: list[str] = []
    idx = start
    expect_ident = True
    while idx < len(tokens):
        text = tokens[idx].text
        if expect_ident:
            if not _IDENT_RE.fullmatch(text):
                return ""
            parts.append(text)
        elif text == ";":
            return ".".join(parts)
        elif text != ".":
            return ""
        expect_ident = not expect_ident
        idx += 1
    return ""
