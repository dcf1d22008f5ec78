# docmath/utils/latex_symbols.py
# -*- coding: utf-8 -*-
"""
Lookup tables for the LaTeX-subset renderer.

Every table is keyed by the bare command name (no backslash). The renderer
reads the whole identifier after a backslash and looks it up exactly, so
entries that share a prefix (eta/theta, in/int/infty, to/top) never clash.
"""

from __future__ import annotations
from types import MappingProxyType

# --- integration / calculus ---
_CALCULUS = {
    "int": "∫", "iint": "∬", "iiint": "∭", "oint": "∮",
    "partial": "∂", "nabla": "∇",
}

# --- big operators ---
_BIG_OPERATORS = {
    "sum": "∑", "prod": "∏", "coprod": "∐",
    "bigcup": "⋃", "bigcap": "⋂", "bigoplus": "⨁", "bigotimes": "⨂",
}

_GREEK_LOWER = {
    "alpha": "α", "beta": "β", "gamma": "γ", "delta": "δ",
    "epsilon": "ε", "varepsilon": "ε", "zeta": "ζ", "eta": "η",
    "theta": "θ", "vartheta": "ϑ", "iota": "ι", "kappa": "κ",
    "lambda": "λ", "mu": "μ", "nu": "ν", "xi": "ξ", "omicron": "ο",
    "pi": "π", "varpi": "ϖ", "rho": "ρ", "varrho": "ϱ",
    "sigma": "σ", "varsigma": "ς", "tau": "τ", "upsilon": "υ",
    "phi": "φ", "varphi": "ϕ", "chi": "χ", "psi": "ψ", "omega": "ω",
}

_GREEK_UPPER = {
    "Gamma": "Γ", "Delta": "Δ", "Theta": "Θ", "Lambda": "Λ",
    "Xi": "Ξ", "Pi": "Π", "Sigma": "Σ", "Upsilon": "Υ",
    "Phi": "Φ", "Psi": "Ψ", "Omega": "Ω",
}

_BINARY = {
    "pm": "±", "mp": "∓", "times": "×", "div": "÷", "cdot": "·",
    "ast": "∗", "star": "⋆", "circ": "∘", "bullet": "•",
    "cap": "∩", "cup": "∪", "setminus": "∖",
    "oplus": "⊕", "ominus": "⊖", "otimes": "⊗", "oslash": "⊘",
    "odot": "⊙", "ocirc": "⊚", "obar": "⌽",
    "wedge": "∧", "vee": "∨",
}

_RELATIONS = {
    "leq": "≤", "le": "≤", "geq": "≥", "ge": "≥", "neq": "≠", "ne": "≠",
    "ll": "≪", "gg": "≫", "lt": "&lt;", "gt": "&gt;",
    "approx": "≈", "equiv": "≡", "sim": "∼", "simeq": "≃",
    "cong": "≅", "propto": "∝",
    "doteq": "≐", "doteqdot": "≑", "fallingdotseq": "≒", "risingdotseq": "≓",
    "coloneq": "≔", "eqcolon": "≕", "eqcirc": "≖", "circeq": "≗",
    "arceq": "≘", "wedgeq": "≙", "veeeq": "≚", "stareq": "≛",
    "triangleq": "≜", "measeq": "≞", "questeq": "≟",
    "parallel": "∥", "perp": "⊥", "mid": "∣",
}

_SETS_AND_LOGIC = {
    "subset": "⊂", "subseteq": "⊆", "supset": "⊃", "supseteq": "⊇",
    "in": "∈", "notin": "∉", "ni": "∋",
    "forall": "∀", "exists": "∃", "nexists": "∄",
    "neg": "¬", "lnot": "¬", "land": "∧", "lor": "∨",
    "implies": "⇒", "impliedby": "⇐", "iff": "⇔",
    "emptyset": "∅", "varnothing": "∅",
    "complement": "∁", "symmetricdifference": "△", "triangle": "△",
    "top": "⊤", "bot": "⊥", "vdash": "⊢", "dashv": "⊣", "models": "⊨",
    "therefore": "∴", "because": "∵",
}

_ARROWS = {
    "to": "→", "rightarrow": "→", "leftarrow": "←", "gets": "←",
    "uparrow": "↑", "downarrow": "↓", "leftrightarrow": "↔",
    "Rightarrow": "⇒", "Leftarrow": "⇐", "Leftrightarrow": "⇔",
    "longrightarrow": "⟶", "longleftarrow": "⟵", "Longrightarrow": "⟹",
    "mapsto": "↦", "hookrightarrow": "↪", "hookleftarrow": "↩",
    "rightrightarrows": "⇉", "leftleftarrows": "⇇",
    "nearrow": "↗", "searrow": "↘", "swarrow": "↙", "nwarrow": "↖",
}

# Literal braces are emitted as entities so later stages never read them as groups.
_DELIMITERS = {
    "lbrace": "&#123;", "rbrace": "&#125;",
    "langle": "⟨", "rangle": "⟩",
    "lfloor": "⌊", "rfloor": "⌋", "lceil": "⌈", "rceil": "⌉",
    "vert": "|", "Vert": "‖",
    "left": "", "right": "",
}

_SPECIAL = {
    "infty": "∞", "aleph": "ℵ", "hbar": "ℏ", "ell": "ℓ", "wp": "℘",
    "Re": "ℜ", "Im": "ℑ", "angle": "∠", "measuredangle": "∡",
    "sphericalangle": "∢", "degree": "°", "prime": "′",
    "QED": "∎", "blacksquare": "∎", "square": "□", "Box": "□",
    "ldots": "…", "dots": "…", "cdots": "⋯", "vdots": "⋮", "ddots": "⋱",
}

_SPACING = {
    "quad": " ", "qquad": "  ",
}


def _merge(*tables: dict) -> MappingProxyType:
    merged: dict = {}
    for table in tables:
        merged.update(table)
    return MappingProxyType(merged)


SYMBOLS = _merge(
    _CALCULUS, _BIG_OPERATORS, _GREEK_LOWER, _GREEK_UPPER, _BINARY,
    _RELATIONS, _SETS_AND_LOGIC, _ARROWS, _DELIMITERS, _SPECIAL, _SPACING,
)

# Non-letter control symbols: \{ \} \$ ...
ESCAPES = MappingProxyType({
    "{": "&#123;", "}": "&#125;", "$": "&#36;", "%": "%", "#": "&#35;",
    "_": "&#95;", "&": "&amp;",
    ",": " ", ";": " ", ":": " ", "!": "", " ": " ",
})

# The letterlike forms; other capitals come from the Mathematical Double-Struck block.
BLACKBOARD = MappingProxyType({
    "R": "ℝ", "N": "ℕ", "Z": "ℤ", "Q": "ℚ", "C": "ℂ", "H": "ℍ", "P": "ℙ",
})


def blackboard_glyph(letter: str) -> str | None:
    if letter in BLACKBOARD:
        return BLACKBOARD[letter]
    if len(letter) == 1 and "A" <= letter <= "Z":
        return chr(0x1D538 + ord(letter) - ord("A"))
    return None


FUNCTIONS = MappingProxyType({
    **{name: "math-func" for name in (
        "det", "dim", "ker", "deg", "arg", "exp", "log", "ln", "lg",
        "sin", "cos", "tan", "sec", "csc", "cot",
        "sinh", "cosh", "tanh", "arcsin", "arccos", "arctan",
        "max", "min", "sup", "inf", "gcd", "Pr",
    )},
    "lim": "math-lim",
})

# command -> css class of the wrapper span
ACCENTS = MappingProxyType({
    "overline": "math-overline", "bar": "math-overline",
    "underline": "math-underline",
    "hat": "math-hat", "widehat": "math-hat",
    "tilde": "math-tilde", "widetilde": "math-tilde",
    "vec": "math-vec", "dot": "math-dot", "ddot": "math-ddot",
})

# Upright text inside math.
TEXT_WRAPPERS = MappingProxyType({
    "text": "math-text", "mathrm": "math-text", "textrm": "math-text",
    "operatorname": "math-func", "mathbf": "math-bold", "boldsymbol": "math-bold",
    "mathcal": "math-cal",
})

EMPHASIS = MappingProxyType({
    "textbf": "strong", "textit": "em", "emph": "em",
})

MATRIX_KINDS = MappingProxyType({
    "pmatrix": "math-pmatrix",
    "bmatrix": "math-bmatrix",
    "matrix": "math-plain-matrix",
    "vmatrix": "math-vmatrix",
    "Vmatrix": "math-Vmatrix",
})

FRACTIONS = ("frac", "dfrac")
