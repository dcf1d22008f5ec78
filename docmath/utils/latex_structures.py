# docmath/utils/latex_structures.py
# -*- coding: utf-8 -*-
"""
Structural parsers for the LaTeX-subset renderer.

- scan_group: brace-balanced argument reader (nested groups, escaped braces)
- rewrite_commands: walk a string and rewrite \\cmd{..}{..} with a builder
- matrix / fraction / root builders
"""

from __future__ import annotations
import re
from typing import Callable, Iterable, List, Optional, Sequence, Tuple

# A `\\` pair is consumed first so `\\frac` is a line break followed by text.
_COMMAND_RE = re.compile(r"\\\\|\\([A-Za-z]+)")

# Entities produced by the escape stage must not split matrix cells.
_CELL_SEP_RE = re.compile(r"(?<!\\)&(?!(?:lt|gt|amp|#\d+);)")
_ROW_SEP = "\\\\"

Builder = Callable[[str, List[str], Optional[str]], str]


def scan_group(text: str, pos: int, opening: str = "{", closing: str = "}") -> Optional[Tuple[str, int]]:
    """
    Read the balanced group that starts at *pos* (spaces before it are skipped).
    Returns (content, index just past the closing delimiter) or None when there
    is no group at *pos* or it never closes.
    """
    n = len(text)
    i = pos
    while i < n and text[i] in " \t":
        i += 1
    if i >= n or text[i] != opening:
        return None

    start = i + 1
    depth = 0
    braces = 0  # nested {..} inside a [..] group
    while i < n:
        ch = text[i]
        if ch == "\\":
            i += 2
            continue
        if opening != "{" and ch == "{":
            braces += 1
        elif opening != "{" and ch == "}":
            braces -= 1
        elif ch == opening and braces == 0:
            depth += 1
        elif ch == closing and braces == 0:
            depth -= 1
            if depth == 0:
                return text[start:i], i + 1
        i += 1
    return None


def rewrite_commands(
    text: str,
    names: Iterable[str],
    arity: int,
    build: Builder,
    optional: bool = False,
) -> str:
    """
    Replace every `\\name` in *names* followed by *arity* brace groups with
    build(name, args, optional_arg). With optional=True a leading [..] group is read
    first and passed as optional_arg. Commands whose arguments are missing or
    unbalanced are left untouched.
    """
    names = frozenset(names)
    out: List[str] = []
    pos = 0
    while True:
        m = _COMMAND_RE.search(text, pos)
        if not m:
            out.append(text[pos:])
            break
        if m.group(1) not in names:
            out.append(text[pos:m.end()])
            pos = m.end()
            continue

        cursor = m.end()
        opt = None
        if optional:
            found = scan_group(text, cursor, "[", "]")
            if found:
                opt, cursor = found

        args: List[str] = []
        for _ in range(arity):
            found = scan_group(text, cursor)
            if not found:
                break
            arg, cursor = found
            args.append(arg)

        if len(args) < arity:
            out.append(text[pos:m.end()])
            pos = m.end()
            continue

        out.append(text[pos:m.start()])
        out.append(build(m.group(1), args, opt))
        pos = cursor
    return "".join(out)


# ---------- matrices ----------

def split_matrix(body: str) -> List[List[str]]:
    """Rows on `\\\\`, cells on `&`. Empty body -> no rows; blank rows are kept."""
    body = body.strip()
    if not body:
        return []
    return [
        [cell.strip() for cell in _CELL_SEP_RE.split(row.strip())]
        for row in body.split(_ROW_SEP)
    ]


def matrix_table(rows: Sequence[Sequence[str]], css_class: str) -> str:
    body = "".join(
        "<tr>" + "".join(f"<td>{cell}</td>" for cell in row) + "</tr>"
        for row in rows
    )
    return f'<table class="math-matrix {css_class}"><tbody>{body}</tbody></table>'


# ---------- fractions / roots ----------

def fraction_markup(numerator: str, denominator: str) -> str:
    return (
        '<span class="math-frac">'
        f'<span class="math-num">{numerator}</span>'
        f'<span class="math-den">{denominator}</span>'
        "</span>"
    )


def root_markup(radicand: str, index: Optional[str] = None) -> str:
    sup = f"<sup>{index}</sup>" if index else ""
    return f'<span class="math-root">{sup}√<span class="math-sqrt">{radicand}</span></span>'
