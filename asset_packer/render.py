"""Render assets as C array / raw string literals and write the headers."""

from __future__ import annotations

import gzip
import sys
from pathlib import Path
from typing import Iterable, Optional

from asset_packer import PackError
from asset_packer.filters import adopt_version_and_repo, apply_filter
from asset_packer.inline import inline_document
from asset_packer.specs import AssetSpec, Method, RenderContext

BYTES_PER_LINE = 16
SOURCE_ENCODING = "latin-1"

HTML_UI_BANNER = """/*
 * Binary array for the Web UI.
 * gzip is used for smaller size and improved speeds.
 *
 * Please see https://github.com/Aircoookie/WLED/wiki/Add-own-functionality#web-ui
 * to find out how to easily modify the web UI source!
 */
"""

CHUNKS_BANNER = """/*
 * More web UI HTML source arrays.
 * This file is auto generated, please don't make any changes manually.
 * Instead, see https://github.com/Aircoookie/WLED/wiki/Add-own-functionality#web-ui
 * to find out how to easily modify the web UI source!
 */
"""


def hexdump(data: bytes) -> str:
    lines = []
    for i in range(0, len(data), BYTES_PER_LINE):
        block = data[i:i + BYTES_PER_LINE]
        lines.append("  " + ", ".join(f"0x{b:02x}" for b in block))
    return ",\n".join(lines)


def gzip_bytes(data: bytes) -> bytes:
    """Gzip at best compression with a zeroed timestamp (reproducible output)."""
    return gzip.compress(data, compresslevel=9, mtime=0)


def _truncate(message: str, limit: int = 60) -> str:
    return message[:limit] if len(message) > limit else message


def spec_to_chunk(src_dir: Path, spec: AssetSpec, context: RenderContext) -> str:
    source = Path(src_dir) / spec.file

    if spec.method is Method.PLAINTEXT:
        text = source.read_bytes().decode(SOURCE_ENCODING)
        body = apply_filter(text, spec.filter, context)
        chunk = (
            f"\n// Autogenerated from {source.as_posix()}, do not edit!!\n"
            f'const char {spec.name}[] PROGMEM = R"{spec.prepend}{body}{spec.append}";\n\n'
        )
    elif spec.method is Method.BINARY:
        data = source.read_bytes()
        chunk = (
            f"\n// Autogenerated from {source.as_posix()}, do not edit!!\n"
            f"const uint16_t {spec.name}_length = {len(data)};\n"
            f"const uint8_t {spec.name}[] PROGMEM = {{\n"
            f"{hexdump(data)}\n"
            f"}};\n\n"
        )
    else:
        raise ValueError(f"Unknown method: {spec.method}")

    return spec.mangle(chunk) if spec.mangle else chunk


def render_chunks(src_dir: Path, specs: Iterable[AssetSpec], context: RenderContext) -> str:
    """Render every spec in order; a failing asset is reported and skipped."""
    src = CHUNKS_BANNER
    for spec in specs:
        source = (Path(src_dir) / spec.file).as_posix()
        try:
            print(f"Reading {source} as {spec.name}")
            src += spec_to_chunk(src_dir, spec, context)
        except Exception as e:
            print(f"WARN Failed {spec.name} from {source}: {_truncate(str(e))}", file=sys.stderr)
    return src


def write_chunks(
    src_dir: Path,
    specs: Iterable[AssetSpec],
    result_file: Path,
    context: Optional[RenderContext] = None,
) -> str:
    src = render_chunks(src_dir, specs, context or RenderContext())
    result_file = Path(result_file)
    print(f"Writing {len(src)} characters into {result_file}")
    result_file.parent.mkdir(parents=True, exist_ok=True)
    # a mangle may add characters beyond one byte; keep them as references
    result_file.write_bytes(src.encode(SOURCE_ENCODING, errors="xmlcharrefreplace"))
    return src


def render_html_gzipped(source_file: Path, context: RenderContext) -> str:
    source_file = Path(source_file)
    print(f"Reading {source_file}")
    html = inline_document(source_file)
    print(f"Inlined {len(html)} characters")

    html = adopt_version_and_repo(html, context)
    try:
        result = gzip_bytes(html.encode("utf-8"))
    except (OSError, ValueError) as e:
        raise PackError(f"Compression of {source_file} failed: {e}") from e
    print(f"Compressed {len(result)} bytes")
    if html:
        print("  Compression: {:.1f}%".format((1 - len(result) / len(html.encode("utf-8"))) * 100))

    return (
        f"{HTML_UI_BANNER}\n"
        f"// Autogenerated from {source_file.as_posix()}, do not edit!!\n"
        f"const uint16_t PAGE_index_L = {len(result)};\n"
        f"const uint8_t PAGE_index[] PROGMEM = {{\n"
        f"{hexdump(result)}\n"
        f"}};\n"
    )


def write_html_gzipped(
    source_file: Path, result_file: Path, context: Optional[RenderContext] = None
) -> str:
    """Inline, substitute and gzip the main page into result_file.

    Any failure here is fatal: this page is the only UI the firmware has.
    """
    src = render_html_gzipped(source_file, context or RenderContext())
    result_file = Path(result_file)
    print(f"Writing {result_file}")
    result_file.parent.mkdir(parents=True, exist_ok=True)
    result_file.write_text(src, encoding="utf-8")
    return src
