from __future__ import annotations

from pathlib import Path

import pytest

from asset_packer.specs import RenderContext

# 1x1 transparent PNG
PNG_BYTES = bytes.fromhex(
    "89504e470d0a1a0a0000000d4948445200000001000000010806000000"
    "1f15c4890000000d49444154789c6360000002000154a24f5d0000000049454e44ae426082"
)

INDEX_HTM = """<!DOCTYPE html>
<html>
<head>
<title>WLED</title>
<link rel="stylesheet" href="index.css">
<link rel="icon" href="favicon.ico">
</head>
<body>
<p>Version ##VERSION##</p>
<a href="https://github.com/Aircoookie/WLED">Source</a>
<img src="logo.png" alt="logo">
<script src="https://cdn.example.com/lib.js"></script>
<script src="index.js"></script>
</body>
</html>
"""


@pytest.fixture
def context() -> RenderContext:
    return RenderContext(version="1.2.3", repo_url="https://github.com/example/fork")


@pytest.fixture
def web_dir(tmp_path: Path) -> Path:
    """A small web UI source tree with a main page and its resources."""
    data = tmp_path / "data"
    data.mkdir()
    (data / "index.htm").write_text(INDEX_HTM, encoding="utf-8")
    (data / "index.css").write_text("body { color: #fff; }\n", encoding="utf-8")
    (data / "index.js").write_text("var answer = 42;\n", encoding="utf-8")
    (data / "logo.png").write_bytes(PNG_BYTES)
    (data / "favicon.ico").write_bytes(bytes(range(40)))
    return data
