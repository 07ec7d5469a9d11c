from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional, Tuple


@dataclass(frozen=True)
class PostData:
    mime_type: str
    text: Optional[str]


@dataclass(frozen=True)
class HarEntry:
    """HAR 中单个请求/响应条目的只读视图。"""

    index: int
    method: str
    url: str
    status: int
    mime_type: str
    text: Optional[str]
    encoding: Optional[str]
    post_data: Optional[PostData] = None

    def has_post_body(self) -> bool:
        return self.method.upper() == "POST" and self.post_data is not None and bool(self.post_data.text)


@dataclass(frozen=True)
class MimeResolution:
    mime_type: Optional[str]
    extensions: Tuple[str, ...]

    @property
    def extension(self) -> str:
        for ext in self.extensions:
            if ext:
                return ext
        return ""


@dataclass
class ResolvedEntry:
    entry: HarEntry
    counter: int
    effective_mime_type: Optional[str]
    extension: str
    output_path: Path
    output_dir: Path
    binary: bool = False


@dataclass
class IndexRecord:
    path: str
    binary: bool
    mime_type: Optional[str]
    method: str
    url: str


@dataclass
class ExtractionSummary:
    output_dir: Path
    total: int = 0
    extracted: int = 0
    skipped: int = 0
    posts: int = 0
    records: List[IndexRecord] = field(default_factory=list)
