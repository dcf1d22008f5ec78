# docmath/utils/latex_render.py
# -*- coding: utf-8 -*-
"""
LaTeX-subset + light markdown -> HTML markup for model output.

Goals:
- Wrap \\[..\\] / $$..$$ as display math and \\(..\\) / $..$ as inline math
- Turn pmatrix/bmatrix/matrix/vmatrix/Vmatrix bodies into tables
- Accents, \\mathbb, \\frac/\\dfrac and \\sqrt with brace-balanced arguments
- Replace bare commands (Greek, operators, arrows, ...) with glyphs
- Tag function names, convert ^ / _ scripts and emphasis
- Headings, lists, paragraphs and line breaks, then make sure the result is
  wrapped in a block element

The stages run in the order of PIPELINE. Math delimiters and environments are
resolved before symbol substitution; glyphs and tags produced by a stage are
never re-read as LaTeX by the stages after it.
"""

from __future__ import annotations
import logging
import re
from typing import Callable, List, Optional, Tuple

from docmath.utils.latex_structures import (
    fraction_markup,
    matrix_table,
    rewrite_commands,
    root_markup,
    scan_group,
    split_matrix,
)
from docmath.utils.latex_symbols import (
    ACCENTS,
    EMPHASIS,
    ESCAPES,
    FRACTIONS,
    FUNCTIONS,
    MATRIX_KINDS,
    SYMBOLS,
    TEXT_WRAPPERS,
    blackboard_glyph,
)

logger = logging.getLogger(__name__)

EMPTY_PLACEHOLDER = '<div class="latex-empty">No content to render</div>'

Stage = Callable[[str], str]

# --- (a) math delimiters ---
# `\\[` and `\\(` right after a backslash belong to a `\\\\` line break.
_DISPLAY_BRACKET_RE = re.compile(r"(?<!\\)\\\[(.+?)\\\]", re.S)
_DISPLAY_DOLLAR_RE = re.compile(r"(?<!\\)\$\$(.+?)\$\$", re.S)
_INLINE_PAREN_RE = re.compile(r"(?<!\\)\\\((.+?)\\\)", re.S)
_INLINE_DOLLAR_RE = re.compile(r"(?<![\\$])\$(?!\$)((?:(?!\n\s*\n)[^$])+)\$")

# --- (b) environments ---
_MATRIX_RE = re.compile(
    r"\\begin\{(" + "|".join(MATRIX_KINDS) + r")\}(.*?)\\end\{\1\}",
    re.S,
)

# --- (e)/(f) bare commands ---
_SYMBOL_RE = re.compile(r"\\\\|\\([A-Za-z]+)|\\([{}$%#,;:! _&])")
_FUNCTION_RE = re.compile(r"\\\\|\\([A-Za-z]+)")

# --- (h) markdown emphasis, never across lines ---
_BOLD_MD_RE = re.compile(r"\*\*(?=\S)([^*\n]+?)(?<=\S)\*\*")
_ITALIC_MD_RE = re.compile(r"(?<!\*)\*(?=\S)([^*\n]+?)(?<=\S)\*(?!\*)")

# --- (i) blocks ---
_HEADING_RE = re.compile(r"^(#{1,3}) +(.+?)\s*$")
_BULLET_RE = re.compile(r"^\s*[-*•] +(.+)$")
_NUMBERED_RE = re.compile(r"^\s*\d+[.)] +(.+)$")
_PARAGRAPH_BREAK_RE = re.compile(r"\n\s*\n")
_DISPLAY_OPEN = '<div class="math-display">'

# --- (j) normalization ---
_EMPTY_PARAGRAPH_RE = re.compile(r"<p>\s*</p>(?=.)", re.S)
_BLOCK_OPENERS = ("<p", "<h", "<div", "<table", "<ul", "<ol")
_BLOCK_CLOSERS = ("</p>", "</div>", "</table>", "</ul>", "</ol>")

# Nested arguments deeper than this are left as literal text.
MAX_NESTING = 50


def escape_markup(text: str) -> str:
    """Keep user text from opening tags; `&` stays, it separates matrix cells."""
    return text.replace("<", "&lt;").replace(">", "&gt;")


def resolve_math_delimiters(text: str) -> str:
    """Display forms first: `$$` would otherwise be eaten by the `$` rule."""
    text = _DISPLAY_BRACKET_RE.sub(r'<div class="math-display">\1</div>', text)
    text = _DISPLAY_DOLLAR_RE.sub(r'<div class="math-display">\1</div>', text)
    text = _INLINE_PAREN_RE.sub(r'<span class="math-inline">\1</span>', text)
    text = _INLINE_DOLLAR_RE.sub(r'<span class="math-inline">\1</span>', text)
    return text


def render_matrices(text: str) -> str:
    def _table(m: re.Match) -> str:
        return matrix_table(split_matrix(m.group(2)), MATRIX_KINDS[m.group(1)])

    return _MATRIX_RE.sub(_table, text)


def render_accents(text: str, depth: int = 0) -> str:
    """\\hat{x}, \\vec{v}, \\overline{z}, \\text{..} -> tagged spans (nested ones too)."""
    if depth >= MAX_NESTING:
        return text

    def _span(name: str, args: List[str], _opt: Optional[str]) -> str:
        css = ACCENTS.get(name) or TEXT_WRAPPERS[name]
        return f'<span class="{css}">{render_accents(args[0], depth + 1)}</span>'

    return rewrite_commands(text, list(ACCENTS) + list(TEXT_WRAPPERS), 1, _span)


def render_blackboard(text: str) -> str:
    def _bb(_name: str, args: List[str], _opt: Optional[str]) -> str:
        letter = args[0].strip()
        return f'<span class="math-bb">{blackboard_glyph(letter) or letter}</span>'

    return rewrite_commands(text, ("mathbb",), 1, _bb)


def render_fractions(text: str, depth: int = 0) -> str:
    """\\frac / \\dfrac and \\sqrt[n]{x}. Arguments are rendered recursively."""
    if depth >= MAX_NESTING:
        return text

    def _frac(_name: str, args: List[str], _opt: Optional[str]) -> str:
        return fraction_markup(
            render_fractions(args[0], depth + 1),
            render_fractions(args[1], depth + 1),
        )

    def _root(_name: str, args: List[str], index: Optional[str]) -> str:
        return root_markup(
            render_fractions(args[0], depth + 1),
            render_fractions(index, depth + 1) if index else None,
        )

    text = rewrite_commands(text, FRACTIONS, 2, _frac)
    return rewrite_commands(text, ("sqrt",), 1, _root, optional=True)


def substitute_symbols(text: str) -> str:
    """One pass over the symbol table; the whole identifier is looked up."""
    def _sub(m: re.Match) -> str:
        if m.group(1):
            return SYMBOLS.get(m.group(1), m.group(0))
        if m.group(2):
            return ESCAPES[m.group(2)]
        return m.group(0)  # `\\\\` line break, handled in render_blocks

    return _SYMBOL_RE.sub(_sub, text)


def wrap_functions(text: str) -> str:
    def _sub(m: re.Match) -> str:
        name = m.group(1)
        if name in FUNCTIONS:
            return f'<span class="{FUNCTIONS[name]}">{name}</span>'
        return m.group(0)

    return _FUNCTION_RE.sub(_sub, text)


def render_scripts(text: str, depth: int = 0) -> str:
    """`^` / `_` + one digit or a balanced {group} -> <sup> / <sub>."""
    if depth >= MAX_NESTING:
        return text
    out: List[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == "\\":
            out.append(text[i:i + 2])
            i += 2
            continue
        if ch in "^_" and i + 1 < n:
            tag = "sup" if ch == "^" else "sub"
            nxt = text[i + 1]
            if nxt in "0123456789":
                out.append(f"<{tag}>{nxt}</{tag}>")
                i += 2
                continue
            if nxt == "{":
                found = scan_group(text, i + 1)
                if found:
                    inner, i = found
                    out.append(f"<{tag}>{render_scripts(inner, depth + 1)}</{tag}>")
                    continue
        out.append(ch)
        i += 1
    return "".join(out)


def render_emphasis(text: str, depth: int = 0) -> str:
    def _tag(name: str, args: List[str], _opt: Optional[str]) -> str:
        tag = EMPHASIS[name]
        return f"<{tag}>{render_emphasis(args[0], depth + 1)}</{tag}>"

    if depth < MAX_NESTING:
        text = rewrite_commands(text, EMPHASIS, 1, _tag)
    text = _BOLD_MD_RE.sub(r"<strong>\1</strong>", text)
    return _ITALIC_MD_RE.sub(r"<em>\1</em>", text)


def _flush_list(buf: List[str], out: List[str], tag: Optional[str]) -> None:
    if not buf:
        return
    items = "".join(f"<li>{item}</li>" for item in buf)
    out.append(f"</p><{tag}>{items}</{tag}><p>")
    buf.clear()


def _inside_display(line: str, was_inside: bool) -> bool:
    """Whether a display-math div is still open after *line*."""
    opens = line.rfind(_DISPLAY_OPEN)
    if opens != -1:
        return "</div>" not in line[opens:]
    return was_inside and "</div>" not in line


def render_blocks(text: str) -> str:
    """
    Headings and list runs close the running paragraph and reopen one after
    themselves; blank lines become paragraph boundaries and `\\\\` a <br>.
    """
    out: List[str] = []
    list_buf: List[str] = []
    list_tag: Optional[str] = None
    in_display = False

    for line in text.split("\n"):
        # Lines of a multi-line display body are math, not markdown.
        if in_display:
            if line.strip():
                out.append(line)
            in_display = _inside_display(line, True)
            continue
        if _inside_display(line, False):
            _flush_list(list_buf, out, list_tag)
            out.append(line)
            in_display = True
            continue

        heading = _HEADING_RE.match(line)
        if heading:
            _flush_list(list_buf, out, list_tag)
            level = len(heading.group(1))
            out.append(f"</p><h{level}>{heading.group(2)}</h{level}><p>")
            continue

        mb = _BULLET_RE.match(line)
        mn = _NUMBERED_RE.match(line)
        if mb or mn:
            tag = "ol" if mn else "ul"
            if list_buf and tag != list_tag:
                _flush_list(list_buf, out, list_tag)
            list_tag = tag
            list_buf.append((mn or mb).group(1).strip())
            continue

        _flush_list(list_buf, out, list_tag)
        out.append(line)

    _flush_list(list_buf, out, list_tag)

    text = "\n".join(out)
    text = _PARAGRAPH_BREAK_RE.sub("</p><p>", text)
    return text.replace("\\\\", "<br>")


def normalize_output(markup: str) -> str:
    """
    Best-effort wrapping: the markup should open and close with a block
    element. A forced line break anywhere suppresses the closing </p>.
    """
    markup = markup.strip()
    if markup.startswith("</p>"):
        markup = markup[len("</p>"):]
    markup = _EMPTY_PARAGRAPH_RE.sub("", markup)
    if not markup.startswith(_BLOCK_OPENERS):
        markup = "<p>" + markup
    if not markup.endswith(_BLOCK_CLOSERS) and "<br" not in markup:
        markup += "</p>"
    return markup


PIPELINE: Tuple[Tuple[str, Stage], ...] = (
    ("escape", escape_markup),
    ("math", resolve_math_delimiters),
    ("matrices", render_matrices),
    ("accents", render_accents),
    ("blackboard", render_blackboard),
    ("fractions", render_fractions),
    ("symbols", substitute_symbols),
    ("functions", wrap_functions),
    ("scripts", render_scripts),
    ("emphasis", render_emphasis),
    ("blocks", render_blocks),
    ("normalize", normalize_output),
)


def render(text: Optional[str]) -> str:
    """Render model/user text to HTML. Empty input gives EMPTY_PLACEHOLDER."""
    if not isinstance(text, str) or not text.strip():
        return EMPTY_PLACEHOLDER

    markup = text.strip()
    for _name, stage in PIPELINE:
        markup = stage(markup)

    has_fractions = "\\frac" in text or "\\dfrac" in text
    logger.debug(f"render: {len(text)} chars in, {len(markup)} chars out, fractions={has_fractions}")
    return markup
