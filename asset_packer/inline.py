"""
Inline the stylesheets, scripts and images referenced by an HTML page so
the firmware can serve it as a single gzipped document.
"""

from __future__ import annotations

import base64
import mimetypes
import re
from pathlib import Path

import bs4
import minify_html

from asset_packer import InlineError

ICON_RELS = {"icon", "shortcut icon", "apple-touch-icon"}


def is_local(ref: str) -> bool:
    """True for references that point into the source tree."""
    if not ref or ref.startswith("//") or ref.startswith("#"):
        return False
    # http:, https:, data:, mailto: ...
    head = ref.split("/", 1)[0]
    return ":" not in head


def resolve(base_dir: Path, ref: str) -> Path:
    path = base_dir / ref.split("?", 1)[0].split("#", 1)[0]
    if not path.is_file():
        raise InlineError(f"Referenced resource not found: {ref} (looked in {path})")
    return path


def data_uri(path: Path) -> str:
    mime = mimetypes.guess_type(path.name)[0] or "application/octet-stream"
    encoded = base64.b64encode(path.read_bytes()).decode("ascii")
    return f"data:{mime};base64,{encoded}"


_CSS_IMPORT_RE = re.compile(
    r"""@import\s+(?:url\(\s*)?(["']?)([^"')\s;]+)\1\s*\)?\s*([^;]*);"""
)
_CSS_URL_RE = re.compile(r"""url\(\s*(["']?)([^"')]+?)\1\s*\)""")


def inline_css(css: str, base_dir: Path, seen=None) -> str:
    """Embed @import rules and url() references of a stylesheet.

    References resolve against base_dir, the stylesheet's own directory.
    """
    seen = set() if seen is None else seen

    def import_rule(match):
        ref, media = match.group(2), match.group(3).strip()
        if not is_local(ref):
            return match.group(0)
        path = resolve(base_dir, ref).resolve()
        if path in seen:
            raise InlineError(f"Circular @import of {ref}")
        imported = inline_css(path.read_text(encoding="utf-8"), path.parent, seen | {path})
        return f"@media {media}{{{imported}}}" if media else imported

    def url_ref(match):
        ref = match.group(2)
        if not is_local(ref):
            return match.group(0)
        return f'url("{data_uri(resolve(base_dir, ref))}")'

    css = _CSS_IMPORT_RE.sub(import_rule, css)
    return _CSS_URL_RE.sub(url_ref, css)


def _rel(tag) -> str:
    rel = tag.get("rel") or []
    if isinstance(rel, str):
        rel = rel.split()
    return " ".join(r.lower() for r in rel)


def inline_document(source_file: Path, minify: bool = True) -> str:
    """Return the page at source_file with every local reference embedded.

    Raises InlineError when a referenced local file is missing; the main
    page is never emitted half inlined.
    """
    source_file = Path(source_file)
    if not source_file.is_file():
        raise InlineError(f"Source document not found: {source_file}")
    base_dir = source_file.parent
    soup = bs4.BeautifulSoup(source_file.read_text(encoding="utf-8"), "html.parser")

    for style_tag in soup.find_all("style"):
        if style_tag.string:
            style_tag.string = inline_css(style_tag.string, base_dir)

    for link in soup.find_all("link", href=True):
        rel = _rel(link)
        href = link["href"]
        if not is_local(href):
            continue
        if rel == "stylesheet":
            path = resolve(base_dir, href)
            style_tag = soup.new_tag("style")
            style_tag.string = inline_css(
                path.read_text(encoding="utf-8"), path.parent, {path.resolve()}
            )
            link.replace_with(style_tag)
        elif rel in ICON_RELS:
            link["href"] = data_uri(resolve(base_dir, href))

    for script_tag in soup.find_all("script", src=True):
        src = script_tag["src"]
        if not is_local(src):
            continue
        script_tag.string = resolve(base_dir, src).read_text(encoding="utf-8")
        del script_tag["src"]

    for img in soup.find_all("img", src=True):
        if is_local(img["src"]):
            img["src"] = data_uri(resolve(base_dir, img["src"]))

    html = str(soup)
    if minify:
        html = minify_html.minify(
            html,
            minify_css=True,
            minify_js=True,
            keep_closing_tags=True,
            keep_html_and_head_opening_tags=True,
        )
    return html
