"""Text filters applied to the web UI sources before they are embedded."""

from __future__ import annotations

import re
import sys
from html.parser import HTMLParser
from typing import Callable, Dict, List, Optional

import minify_html
import rcssmin

from asset_packer import MarkupError
from asset_packer.specs import RenderContext

VERSION_PLACEHOLDER = "##VERSION##"

# Upstream repository links that are rewritten to the configured repository
UPSTREAM_REPO_URLS = (
    "https://github.com/atuline/WLED",
    "https://github.com/Aircoookie/WLED",
)

MAX_LINE_LENGTH = 80

VOID_ELEMENTS = {
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "param", "source", "track", "wbr",
}
RAW_TEXT_ELEMENTS = ("script", "style", "pre", "textarea")

_RAW_BLOCK_RE = re.compile(
    r"(<(%s)\b.*?</\2\s*>)" % "|".join(RAW_TEXT_ELEMENTS),
    re.IGNORECASE | re.DOTALL,
)
# A whole tag; quoted attribute values may contain '<' and '>'
_TAG_RE = re.compile(r"""(<(?:[^>"']|"[^"]*"|'[^']*')*>)""")


def adopt_version_and_repo(text: str, context: RenderContext) -> str:
    """Replace the version placeholder and upstream repository links."""
    if context.repo_url:
        for url in UPSTREAM_REPO_URLS:
            text = text.replace(url, context.repo_url)
    if context.version:
        text = text.replace(VERSION_PLACEHOLDER, context.version)
    return text


def minify_css(text: str) -> str:
    return rcssmin.cssmin(text)


class _MarkupChecker(HTMLParser):
    """Tracks open elements and rejects closing tags that close nothing."""

    def __init__(self):
        super().__init__(convert_charrefs=True)
        self.open_tags: List[str] = []

    def handle_starttag(self, tag, attrs):
        if tag not in VOID_ELEMENTS:
            self.open_tags.append(tag)

    def handle_endtag(self, tag):
        if tag in VOID_ELEMENTS:
            return
        if tag not in self.open_tags:
            line, col = self.getpos()
            raise MarkupError(f"Unexpected </{tag}> at line {line}, column {col + 1}")
        # Elements with optional end tags (p, li, td...) are closed implicitly
        while self.open_tags.pop() != tag:
            pass


def check_markup(html: str) -> None:
    """Raise MarkupError when the markup cannot be minified without guessing."""
    checker = _MarkupChecker()
    checker.feed(html)
    leftover = checker.rawdata.lstrip()
    if leftover.startswith("<"):
        raise MarkupError(f"Unterminated tag at end of input: {leftover[:40]!r}")
    for tag in RAW_TEXT_ELEMENTS:
        if tag in checker.open_tags:
            raise MarkupError(f"Unclosed <{tag}> element")
    checker.close()


def split_tag_boundaries(segment: str) -> List[str]:
    """Split markup between two adjacent tags, never inside a tag."""
    pieces: List[str] = []
    current = ""
    prev_tag = False
    for i, token in enumerate(_TAG_RE.split(segment)):
        if not token:
            continue
        is_tag = i % 2 == 1
        if current and prev_tag and is_tag:
            pieces.append(current)
            current = ""
        current += token
        prev_tag = is_tag
    if current:
        pieces.append(current)
    return pieces


def wrap_lines(html: str, max_length: int = MAX_LINE_LENGTH) -> str:
    """Break lines longer than max_length between two tags.

    Content of script, style, pre and textarea elements is never split.
    """
    pieces: List[str] = []
    for i, segment in enumerate(_RAW_BLOCK_RE.split(html)):
        # split() with two groups yields text, block, tag name, text, ...
        if i % 3 == 2:
            continue
        if i % 3 == 1:
            pieces.append(segment)
        else:
            pieces.extend(split_tag_boundaries(segment))

    out: List[str] = []
    line_length = 0
    for piece in pieces:
        head = piece.split("\n", 1)[0]
        if (
            out
            and line_length > 0
            and line_length + len(head) > max_length
            and out[-1].endswith(">")
            and piece.startswith("<")
        ):
            out.append("\n")
            line_length = 0
        out.append(piece)
        if "\n" in piece:
            line_length = len(piece) - piece.rfind("\n") - 1
        else:
            line_length += len(piece)
    return "".join(out)


def _decode_utf8(text: str) -> str:
    try:
        return text.encode("latin-1").decode("utf-8")
    except UnicodeEncodeError:
        # already real unicode text
        return text
    except UnicodeDecodeError as e:
        raise MarkupError(f"Markup is not valid UTF-8: {e}") from e


def minify_markup(html: str) -> str:
    """Minify one-byte-per-character markup holding UTF-8 bytes.

    minify_html decodes entities such as &nbsp; into real characters, so
    the page is minified as unicode and handed back as its UTF-8 bytes.
    """
    html = _decode_utf8(html)
    check_markup(html)
    minified = minify_html.minify(
        html,
        minify_css=True,
        minify_js=True,
        keep_closing_tags=True,
        keep_html_and_head_opening_tags=True,
    )
    return wrap_lines(minified).encode("utf-8").decode("latin-1")


FILTERS: Dict[str, Callable[[str], str]] = {
    "style-minify": minify_css,
    "markup-minify": minify_markup,
    # names used by the npm build scripts
    "css-minify": minify_css,
    "html-minify": minify_markup,
}


def apply_filter(text: str, name: Optional[str], context: RenderContext) -> str:
    """Substitute the render context, then run the named filter.

    An unknown filter name only prints a warning and returns the text
    unfiltered so the rest of the header is still generated.
    """
    text = adopt_version_and_repo(text, context)
    if name is None:
        return text
    minify = FILTERS.get(name)
    if minify is None:
        print(f"WARN Unknown filter: {name}", file=sys.stderr)
        return text
    return minify(text)
