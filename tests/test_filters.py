"""Tests for asset_packer.filters."""

from __future__ import annotations

import pytest

from asset_packer import MarkupError
from asset_packer.filters import (
    adopt_version_and_repo,
    apply_filter,
    check_markup,
    minify_css,
    minify_markup,
    wrap_lines,
)
from asset_packer.specs import RenderContext


def test_adopt_version_and_repo_replaces_tokens(context: RenderContext) -> None:
    html = (
        "<p>##VERSION##</p>"
        '<a href="https://github.com/Aircoookie/WLED">a</a>'
        '<a href="https://github.com/atuline/WLED">b</a>'
    )

    result = adopt_version_and_repo(html, context)

    assert "<p>1.2.3</p>" in result
    assert "Aircoookie" not in result
    assert "atuline" not in result
    assert result.count("https://github.com/example/fork") == 2


def test_adopt_version_and_repo_empty_context_is_noop() -> None:
    html = "<p>##VERSION##</p>https://github.com/Aircoookie/WLED"
    assert adopt_version_and_repo(html, RenderContext()) == html


def test_apply_filter_without_filter_only_substitutes(context: RenderContext) -> None:
    text = "  keep   all\nwhitespace ##VERSION##  \n"
    assert apply_filter(text, None, context) == "  keep   all\nwhitespace 1.2.3  \n"


def test_apply_filter_unknown_name_passes_through(context: RenderContext, capsys: pytest.CaptureFixture[str]) -> None:
    text = "body {  color: red; }"

    assert apply_filter(text, "js-minify", context) == text
    assert "Unknown filter: js-minify" in capsys.readouterr().err


def test_minify_css_strips_comments_and_whitespace() -> None:
    css = "/* header */\nbody {\n  color: red;\n  margin: 0;\n}\n"

    result = minify_css(css)

    assert "/*" not in result
    assert "\n" not in result
    assert "color:red" in result


def test_style_minify_and_css_minify_are_the_same_filter(context: RenderContext) -> None:
    css = "a {  color: blue;  }"
    assert apply_filter(css, "style-minify", context) == apply_filter(css, "css-minify", context)


def test_check_markup_accepts_implicitly_closed_elements() -> None:
    check_markup(
        "<!DOCTYPE html><html><head><title>x</title></head>"
        "<body><ul><li>a<li>b</ul><p>c<br><p>d</body></html>"
    )


def test_check_markup_rejects_stray_closing_tag() -> None:
    with pytest.raises(MarkupError, match="</span>"):
        check_markup("<div><p>text</span></div>")


def test_check_markup_rejects_unterminated_tag() -> None:
    with pytest.raises(MarkupError):
        check_markup('<div><p>text</p><img src="a.png"')


def test_check_markup_rejects_unclosed_script() -> None:
    with pytest.raises(MarkupError, match="script"):
        check_markup("<body><script>var a = 1;")


def test_markup_minify_fails_fast(context: RenderContext) -> None:
    with pytest.raises(MarkupError):
        apply_filter("<div></form></div>", "markup-minify", context)


def test_minify_markup_collapses_whitespace_and_comments() -> None:
    html = "<html><body>\n  <!-- note -->\n  <p>  Hello   world </p>\n</body></html>"

    result = minify_markup(html)

    assert "<!--" not in result
    assert "Hello world" in result
    assert "   " not in result


def test_wrap_lines_limits_line_length_at_tag_boundaries() -> None:
    html = "<div>" + "<span>xxxxxxxxx</span>" * 20 + "</div>"

    result = wrap_lines(html)

    assert result.replace("\n", "") == html
    assert result.count("\n") >= 5
    assert all(len(line) <= 80 for line in result.split("\n"))


def test_wrap_lines_keeps_short_markup_untouched() -> None:
    html = "<p>short</p><p>page</p>"
    assert wrap_lines(html) == html


def test_wrap_lines_never_splits_scripts() -> None:
    script = "<script>" + "if(a<b){c()}" * 20 + "</script>"
    html = "<div>" + "<span>xxxxxxxxx</span>" * 4 + script + "<p>end</p></div>"

    result = wrap_lines(html)

    assert script in result
    assert result.replace("\n", "") == html


def test_wrap_lines_never_breaks_inside_attribute_values() -> None:
    html = "<div>" + '<span title="a><b">xxxx</span>' * 10 + "</div>"

    result = wrap_lines(html)

    assert result.replace("\n", "") == html
    assert result.count('title="a><b"') == 10
    assert "\n" in result


def test_minify_markup_keeps_utf8_bytes() -> None:
    one_byte = "<p>a&nbsp;b café</p>".encode("utf-8").decode("latin-1")

    result = minify_markup(one_byte)

    assert "café" in result.encode("latin-1").decode("utf-8")
