"""Asset specs and the render context shared by every chunk."""

from __future__ import annotations

import json
import sys
from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Callable, Optional

from asset_packer import PackError

Mangle = Callable[[str], str]


class Method(str, Enum):
    PLAINTEXT = "plaintext"
    BINARY = "binary"


@dataclass(frozen=True)
class AssetSpec:
    """One source file and how it ends up in a generated header."""

    file: str
    name: str
    method: Method = Method.PLAINTEXT
    prepend: str = ""
    append: str = ""
    filter: Optional[str] = None
    mangle: Optional[Mangle] = None

    def __post_init__(self) -> None:
        # Method("...") raises ValueError for anything but the two known methods
        object.__setattr__(self, "method", Method(self.method))


@dataclass(frozen=True)
class RenderContext:
    """Values substituted into every page: firmware version and repository URL."""

    version: Optional[str] = None
    repo_url: Optional[str] = None


def normalize_repo_url(url: str) -> str:
    if url.startswith("git+"):
        url = url[len("git+"):]
    if url.endswith(".git"):
        url = url[: -len(".git")]
    return url


def load_render_context(package_json: Path, version: Optional[str] = None) -> RenderContext:
    """Build the render context from package.json.

    A missing file only yields an empty context (with a warning), but a
    file that exists and cannot be parsed stops the build.
    """
    package_json = Path(package_json)
    if not package_json.exists():
        print(f"WARN {package_json} not found, version and repository left as-is", file=sys.stderr)
        return RenderContext(version=version)

    try:
        with open(package_json, "r", encoding="utf-8") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise PackError(f"Cannot parse {package_json}: {e}") from e

    repo_url = None
    repository = data.get("repository")
    if isinstance(repository, dict) and repository.get("url"):
        repo_url = normalize_repo_url(repository["url"])
    elif isinstance(repository, str) and repository:
        repo_url = normalize_repo_url(repository)

    return RenderContext(version=version or data.get("version"), repo_url=repo_url)
