import re

import pytest

from docmath.utils.latex_render import (
    EMPTY_PLACEHOLDER,
    MAX_NESTING,
    PIPELINE,
    escape_markup,
    render,
    render_accents,
    render_blocks,
    render_emphasis,
    render_fractions,
    render_matrices,
    render_scripts,
    resolve_math_delimiters,
    substitute_symbols,
    wrap_functions,
)
from docmath.utils.latex_structures import fraction_markup


def _cells(html: str) -> list:
    return re.findall(r"<td>(.*?)</td>", html)


# ---------- degenerate input ----------

@pytest.mark.parametrize("text", ["", "   ", "\n\t\n", None, 42])
def test_empty_input_gives_placeholder(text) -> None:
    assert render(text) == EMPTY_PLACEHOLDER


# ---------- math delimiters ----------

def test_inline_dollar_math() -> None:
    html = render("Energy: $E = mc^2$")
    assert html.startswith("<p>Energy: ")
    assert '<span class="math-inline">E = mc<sup>2</sup></span>' in html


def test_delimiter_stage_keeps_body_unchanged() -> None:
    out = resolve_math_delimiters(r"Energy: $E = mc^2$ and \(\alpha\)")
    assert out == (
        'Energy: <span class="math-inline">E = mc^2</span> and '
        '<span class="math-inline">\\alpha</span>'
    )


def test_double_dollar_is_one_display_block() -> None:
    html = render("Sum: $$a + b$$ done")
    assert html.count('class="math-display"') == 1
    assert "math-inline" not in html
    assert '<div class="math-display">a + b</div>' in html


def test_bracket_display_math_is_processed_inside() -> None:
    html = render(r"\[ \sum_{i=1}^{n} i \]")
    assert html == '<div class="math-display"> ∑<sub>i=1</sub><sup>n</sup> i </div>'


def test_unterminated_dollar_is_literal() -> None:
    assert render("costs $5") == "<p>costs $5</p>"


def test_escaped_dollars_are_not_delimiters() -> None:
    html = render(r"costs \$5 and \$6")
    assert "math-inline" not in html
    assert html == "<p>costs &#36;5 and &#36;6</p>"


def test_inline_dollar_does_not_cross_paragraphs() -> None:
    html = render("pay $5\n\nthen $6")
    assert "math-inline" not in html


# ---------- matrices ----------

_KINDS = [
    ("pmatrix", "math-pmatrix"),
    ("bmatrix", "math-bmatrix"),
    ("matrix", "math-plain-matrix"),
    ("vmatrix", "math-vmatrix"),
    ("Vmatrix", "math-Vmatrix"),
]


@pytest.mark.parametrize("kind,css", _KINDS)
def test_matrix_rows_and_cells(kind: str, css: str) -> None:
    src = rf"\begin{{{kind}}} 1 & 2 & 3 \\ 4 & 5 & 6 \end{{{kind}}}"
    html = render_matrices(src)
    assert f'<table class="math-matrix {css}">' in html
    assert html.count("<tr>") == 2
    assert html.count("<td>") == 6
    assert _cells(html) == ["1", "2", "3", "4", "5", "6"]


def test_pmatrix_end_to_end() -> None:
    html = render(r"\begin{pmatrix} 1 & 2 \\ 3 & 4 \end{pmatrix}")
    assert html.startswith('<table class="math-matrix math-pmatrix">')
    assert html.count("<tr>") == 2
    assert _cells(html) == ["1", "2", "3", "4"]


def test_empty_matrix_has_no_rows() -> None:
    html = render_matrices(r"\begin{bmatrix}   \end{bmatrix}")
    assert html == '<table class="math-matrix math-bmatrix"><tbody></tbody></table>'


def test_trailing_row_separator_keeps_blank_row() -> None:
    html = render_matrices(r"\begin{matrix} a \\ b \\ \end{matrix}")
    assert html.count("<tr>") == 3
    assert html.endswith("<tr><td></td></tr></tbody></table>")


def test_row_without_ampersand_is_single_cell() -> None:
    html = render_matrices(r"\begin{vmatrix} x \\ y & z \end{vmatrix}")
    assert "<tr><td>x</td></tr><tr><td>y</td><td>z</td></tr>" in html


def test_matrix_cells_go_through_later_stages() -> None:
    html = render(r"\begin{bmatrix} \alpha & \frac{1}{2} \end{bmatrix}")
    assert "<td>α</td>" in html
    assert "<td>" + fraction_markup("1", "2") + "</td>" in html


def test_escaped_angle_bracket_does_not_split_cells() -> None:
    html = render_matrices(escape_markup(r"\begin{matrix} a < b & c \end{matrix}"))
    assert _cells(html) == ["a &lt; b", "c"]


# ---------- accents, roots, fractions ----------

@pytest.mark.parametrize("command,css", [
    ("overline", "math-overline"),
    ("underline", "math-underline"),
    ("hat", "math-hat"),
    ("tilde", "math-tilde"),
    ("vec", "math-vec"),
    ("dot", "math-dot"),
    ("ddot", "math-ddot"),
])
def test_single_argument_accents(command: str, css: str) -> None:
    html = render(rf"$\{command}{{ab}}$")
    assert f'<span class="{css}">ab</span>' in html


def test_accent_argument_with_nested_braces() -> None:
    assert render_accents(r"\hat{x{y}}") == '<span class="math-hat">x{y}</span>'


def test_nested_accents() -> None:
    assert render_accents(r"\hat{\vec{v}}") == (
        '<span class="math-hat"><span class="math-vec">v</span></span>'
    )


def test_square_root_forms() -> None:
    assert render_fractions(r"\sqrt{x+1}") == (
        '<span class="math-root">√<span class="math-sqrt">x+1</span></span>'
    )
    assert render_fractions(r"\sqrt[3]{8}") == (
        '<span class="math-root"><sup>3</sup>√<span class="math-sqrt">8</span></span>'
    )
    assert '<span class="math-sqrt">ab</span>' in render(r"\sqrt{ab}")


def test_simple_fraction_end_to_end() -> None:
    html = render(r"\frac{1}{2}")
    assert '<span class="math-frac"><span class="math-num">1</span><span class="math-den">2</span></span>' in html


def test_dfrac_renders_like_frac() -> None:
    assert render_fractions(r"\dfrac{a}{b}") == render_fractions(r"\frac{a}{b}")


def test_nested_fraction_is_fully_formed() -> None:
    inner = fraction_markup("a", "b")
    assert render_fractions(r"\frac{\frac{a}{b}}{c}") == fraction_markup(inner, "c")


def test_fraction_inside_root_and_root_inside_fraction() -> None:
    assert render_fractions(r"\frac{\sqrt{2}}{2}") == fraction_markup(
        '<span class="math-root">√<span class="math-sqrt">2</span></span>', "2"
    )


def test_malformed_fraction_is_left_alone() -> None:
    assert render_fractions(r"\frac{a}{b") == r"\frac{a}{b"
    assert render_fractions(r"\frac{a}") == r"\frac{a}"


def test_scripts_inside_fraction_arguments() -> None:
    html = render(r"$\frac{x^2}{2}$")
    assert '<span class="math-num">x<sup>2</sup></span>' in html


# ---------- blackboard ----------

@pytest.mark.parametrize("letter,glyph", [
    ("R", "ℝ"), ("N", "ℕ"), ("Z", "ℤ"), ("Q", "ℚ"), ("C", "ℂ"), ("H", "ℍ"), ("P", "ℙ"),
])
def test_blackboard_letters(letter: str, glyph: str) -> None:
    html = render(rf"$x \in \mathbb{{{letter}}}$")
    assert f'<span class="math-bb">{glyph}</span>' in html
    assert "∈" in html


def test_blackboard_other_capital() -> None:
    assert '<span class="math-bb">\U0001D542</span>' in render(r"$\mathbb{K}$")


# ---------- symbols ----------

def test_symbols_prefix_sharing_commands_alone() -> None:
    assert substitute_symbols(r"\eta") == "η"
    assert substitute_symbols(r"\theta") == "θ"
    assert substitute_symbols(r"\epsilon") == "ε"
    assert substitute_symbols(r"\varepsilon") == "ε"
    assert substitute_symbols(r"\in") == "∈"
    assert substitute_symbols(r"\int") == "∫"
    assert substitute_symbols(r"\infty") == "∞"


def test_symbols_prefix_sharing_commands_adjacent() -> None:
    assert substitute_symbols(r"\eta\theta \theta\eta") == "ηθ θη"
    assert substitute_symbols(r"\in\int\infty") == "∈∫∞"
    assert substitute_symbols(r"\to \top \subset\subseteq") == "→ ⊤ ⊂⊆"


def test_unknown_command_is_left_alone() -> None:
    assert substitute_symbols(r"\etaz + \foo") == r"\etaz + \foo"


def test_escaped_braces_become_entities() -> None:
    assert substitute_symbols(r"\{a\}") == "&#123;a&#125;"


def test_line_break_pair_is_not_a_command_prefix() -> None:
    assert substitute_symbols(r"a \\alpha") == r"a \\alpha"


def test_sizing_commands_are_dropped() -> None:
    assert substitute_symbols(r"\left( x \right)") == "( x )"


# ---------- functions & scripts ----------

def test_function_names_are_tagged() -> None:
    out = wrap_functions(r"\sin x + \sinh y + \lim_{n}")
    assert out == (
        '<span class="math-func">sin</span> x + '
        '<span class="math-func">sinh</span> y + '
        '<span class="math-lim">lim</span>_{n}'
    )


def test_inf_and_infty_are_distinct() -> None:
    html = render(r"$\inf S \le \infty$")
    assert '<span class="math-func">inf</span>' in html
    assert "∞" in html


def test_scripts() -> None:
    assert render_scripts("x^2 + y_{i+1}") == "x<sup>2</sup> + y<sub>i+1</sub>"
    assert render_scripts("e^{x^{2}}") == "e<sup>x<sup>2</sup></sup>"
    assert render_scripts("snake_case") == "snake_case"
    assert render_scripts("x^{open") == "x^{open"


# ---------- emphasis ----------

def test_emphasis_forms() -> None:
    out = render_emphasis(r"\textbf{bold} and **strong** and *soft* and \textit{it}")
    assert out == "<strong>bold</strong> and <strong>strong</strong> and <em>soft</em> and <em>it</em>"


def test_lone_asterisks_are_not_emphasis() -> None:
    assert render_emphasis("a * b * c") == "a * b * c"


# ---------- blocks & normalization ----------

def test_heading_reopens_paragraph() -> None:
    assert render("## Title") == "<h2>Title</h2><p></p>"
    assert render("## Title\nBody text") == "<h2>Title</h2><p>\nBody text</p>"


def test_heading_between_paragraphs() -> None:
    assert render("Intro\n\n# Top\n\nMore") == "<p>Intro</p><h1>Top</h1><p>More</p>"


def test_four_hashes_is_not_a_heading() -> None:
    assert "<h" not in render("#### deep")


def test_lists_are_grouped() -> None:
    html = render("Steps:\n- one\n- two\n1. first\n2. second")
    assert "<ul><li>one</li><li>two</li></ul>" in html
    assert "<ol><li>first</li><li>second</li></ol>" in html
    assert html.startswith("<p>Steps:")


def test_blank_lines_make_paragraphs() -> None:
    assert render_blocks("a\n\nb") == "a</p><p>b"


def test_forced_line_break_skips_closing_paragraph() -> None:
    assert render(r"line one \\ line two") == "<p>line one <br> line two"


def test_angle_brackets_are_escaped() -> None:
    assert render("a < b > c") == "<p>a &lt; b &gt; c</p>"


# ---------- pipeline ----------

def test_pipeline_order() -> None:
    names = [name for name, _ in PIPELINE]
    assert names == [
        "escape", "math", "matrices", "accents", "blackboard", "fractions",
        "symbols", "functions", "scripts", "emphasis", "blocks", "normalize",
    ]


def test_rendering_rendered_markup_does_not_raise() -> None:
    # Re-rendering is not expected to be stable, only safe to call.
    once = render(r"$\frac{a}{b}$")
    assert isinstance(render(once), str)


# ---------- deep nesting ----------

def test_deeply_nested_fractions_degrade_to_literal_text() -> None:
    html = render("\\frac{" * 400 + "a" + "}{b}" * 400)
    assert html.count('class="math-frac"') == MAX_NESTING
    assert "\\frac{" in html


@pytest.mark.parametrize("text,marker", [
    ("x" + "^{" * 1000 + "y" + "}" * 1000, "<sup>"),
    ("\\hat{" * 600 + "x" + "}" * 600, 'class="math-hat"'),
    ("\\textbf{" * 600 + "x" + "}" * 600, "<strong>"),
    ("\\sqrt{" * 600 + "x" + "}" * 600, 'class="math-root"'),
])
def test_deep_nesting_does_not_raise(text: str, marker: str) -> None:
    html = render(text)
    assert marker in html
    assert html.count(marker) <= MAX_NESTING


def test_nesting_below_limit_is_fully_rendered() -> None:
    assert render_scripts("x" + "^{" * 3 + "y" + "}" * 3) == "x<sup><sup><sup>y</sup></sup></sup>"


# ---------- multi-line display bodies ----------

def test_list_marker_inside_display_math_is_kept() -> None:
    html = render("$$\n- x\n$$")
    assert html == '<div class="math-display">\n- x\n</div>'


def test_heading_marker_inside_display_math_is_kept() -> None:
    html = render("Before\n\\[\n# x\n\\]\n- after")
    assert "<h1>" not in html
    assert '<div class="math-display">\n# x\n</div>' in html
    assert "<ul><li>after</li></ul>" in html


def test_blank_line_inside_display_math_is_not_a_paragraph() -> None:
    assert render("$$a\n\nb$$") == '<div class="math-display">a\nb</div>'
