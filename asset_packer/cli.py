#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Writes the web UI sources as C arrays for the firmware build.

Usage:
    python -m asset_packer
    python -m asset_packer --source-dir wled00/data --output-dir wled00
    python -m asset_packer --watch

In watch mode every change under the source directory triggers a full
rebuild of the three headers.
"""

from __future__ import annotations

import argparse
import io
import os
import sys
import time
import traceback
from pathlib import Path
from typing import Dict

from asset_packer import pages
from asset_packer.render import write_chunks, write_html_gzipped
from asset_packer.specs import RenderContext, load_render_context

# Fix encoding for Windows console
if sys.platform == 'win32':
    sys.stdout = io.TextIOWrapper(sys.stdout.buffer, encoding='utf-8')
    sys.stderr = io.TextIOWrapper(sys.stderr.buffer, encoding='utf-8')


def parse_args(argv=None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="Inline, minify and gzip the web UI into firmware headers."
    )
    parser.add_argument(
        "--source-dir",
        default=pages.SOURCE_DIR,
        help=f"Web UI source directory (default: {pages.SOURCE_DIR})",
    )
    parser.add_argument(
        "--output-dir",
        default="wled00",
        help="Directory receiving the generated headers (default: wled00)",
    )
    parser.add_argument(
        "--package-json",
        default="package.json",
        help="Project metadata providing version and repository.url (default: package.json)",
    )
    parser.add_argument(
        "--version",
        dest="version",
        default=None,
        help="Override the version substituted for ##VERSION##",
    )
    parser.add_argument(
        "--watch",
        action="store_true",
        help="Rebuild every time a file in the source directory changes",
    )
    parser.add_argument(
        "--interval",
        type=float,
        default=1.0,
        help="Polling interval in seconds for --watch (default: 1.0)",
    )
    return parser.parse_args(argv)


def build(source_dir: Path, output_dir: Path, context: RenderContext) -> None:
    """Regenerate html_ui.h, html_settings.h and html_other.h."""
    source_dir = Path(source_dir)
    output_dir = Path(output_dir)

    write_html_gzipped(source_dir / pages.MAIN_PAGE, output_dir / pages.HTML_UI_HEADER, context)
    write_chunks(source_dir, pages.SETTINGS_SPECS, output_dir / pages.HTML_SETTINGS_HEADER, context)
    write_chunks(source_dir, pages.OTHER_SPECS, output_dir / pages.HTML_OTHER_HEADER, context)


def snapshot(source_dir: Path) -> Dict[str, float]:
    """Modification times of every file below source_dir."""
    mtimes = {}
    for root, _, files in os.walk(source_dir):
        for filename in files:
            path = os.path.join(root, filename)
            try:
                mtimes[path] = os.path.getmtime(path)
            except OSError:
                # deleted between walk and stat
                continue
    return mtimes


def watch(args: argparse.Namespace) -> None:
    source_dir = Path(args.source_dir)
    print(f"👀 Watching {source_dir} (Ctrl+C to stop)")
    last = snapshot(source_dir)
    while True:
        time.sleep(args.interval)
        current = snapshot(source_dir)
        if current == last:
            continue
        last = current
        print("\n🔄 Change detected, rebuilding...")
        try:
            context = load_render_context(Path(args.package_json), args.version)
            build(source_dir, Path(args.output_dir), context)
        except Exception as e:
            # keep watching, the next save may fix it
            print(f"❌ Error: {e}", file=sys.stderr)


def main(argv=None) -> int:
    args = parse_args(argv)

    try:
        context = load_render_context(Path(args.package_json), args.version)
        build(Path(args.source_dir), Path(args.output_dir), context)
    except Exception as e:
        print(f"❌ Error: {e}", file=sys.stderr)
        traceback.print_exc()
        return 1

    if args.watch:
        try:
            watch(args)
        except KeyboardInterrupt:
            print("\nStopped watching.")

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
