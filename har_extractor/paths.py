from __future__ import annotations

from pathlib import Path
from typing import List, Tuple
from urllib.parse import urlsplit

from .config import LayoutMode, OutputConfig
from .models import HarEntry

RESPONSE_DIR = "response-data"
POST_DIR = "post-data"
ROOT_TOKEN = "ROOT"


def _safe_segment(segment: str) -> str:
    if segment in ("", "."):
        return ROOT_TOKEN
    if segment == "..":
        return "%2E%2E"
    return segment


def host_segment(url: str) -> str:
    parts = urlsplit(url)
    host = parts.hostname or ROOT_TOKEN
    try:
        port = parts.port
    except ValueError:
        port = None
    return f"{host}:{port}" if port else host


def mirror_segments(url: str) -> List[str]:
    """把 URL 还原为 ``scheme/host:port/path[?query]`` 形式的路径片段。"""
    parts = urlsplit(url)
    scheme = parts.scheme or ROOT_TOKEN
    path = parts.path.strip("/")
    segments = [_safe_segment(s) for s in path.split("/")] if path else [ROOT_TOKEN]
    if parts.query:
        segments[-1] = f"{segments[-1]}?{parts.query.replace('/', '%2F')}"
    return [scheme, host_segment(url)] + segments


class PathBuilder:
    def __init__(self, base_dir: Path, config: OutputConfig):
        self.base_dir = Path(base_dir)
        self.config = config

    @property
    def response_root(self) -> Path:
        return self.base_dir / RESPONSE_DIR

    @property
    def post_root(self) -> Path:
        return self.base_dir / POST_DIR

    def _sequential_name(self, counter: int, extension: str) -> str:
        return f"{self.config.prefix}-{counter:04d}{extension}"

    def build(self, entry: HarEntry, counter: int, extension: str) -> Tuple[Path, Path]:
        layout = self.config.layout
        if layout == LayoutMode.MIRROR:
            file_path = self.response_root.joinpath(*mirror_segments(entry.url))
        elif layout == LayoutMode.BY_HOST:
            file_path = self.response_root / host_segment(entry.url) / self._sequential_name(counter, extension)
        else:
            file_path = self.response_root / self._sequential_name(counter, extension)
        return file_path, file_path.parent

    def build_post(self, counter: int, extension: str) -> Tuple[Path, Path]:
        file_path = self.post_root / f"post-{counter:04d}{extension}"
        return file_path, file_path.parent
