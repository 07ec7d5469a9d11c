from __future__ import annotations

import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from .errors import HarFormatError
from .models import HarEntry, PostData

logger = logging.getLogger(__name__)

STDIN = "-"


def _as_int(value: Any) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def parse_entry(index: int, entry: Dict[str, Any]) -> HarEntry:
    req = entry.get("request") or {}
    resp = entry.get("response") or {}
    content = resp.get("content") or {}
    post = req.get("postData")
    post_data = None
    if isinstance(post, dict):
        post_data = PostData(mime_type=post.get("mimeType") or "", text=post.get("text"))
    return HarEntry(
        index=index,
        method=req.get("method", "GET"),
        url=req.get("url", ""),
        status=_as_int(resp.get("status")) or 0,
        mime_type=content.get("mimeType") or "",
        text=content.get("text"),
        encoding=content.get("encoding") or None,
        post_data=post_data,
    )


class HarLoader:
    """读取单个 HAR 文档，路径为 ``-`` 时从标准输入读取。"""

    def __init__(self, path: str = STDIN):
        self.path = path

    @property
    def is_stdin(self) -> bool:
        return self.path == STDIN

    def _read_text(self) -> str:
        if self.is_stdin:
            return sys.stdin.read()
        with Path(self.path).open("r", encoding="utf-8-sig") as handle:
            return handle.read()

    def load(self) -> List[HarEntry]:
        try:
            text = self._read_text()
        except UnicodeDecodeError as exc:
            raise HarFormatError(f"{self.path} 不是 UTF-8 文本：{exc}") from exc
        try:
            data = json.loads(text)
        except json.JSONDecodeError as exc:
            raise HarFormatError(f"{self.path} 不是合法的 JSON：{exc}") from exc
        if not isinstance(data, dict):
            raise HarFormatError(f"{self.path} 的顶层必须是 JSON 对象")
        entries = (data.get("log") or {}).get("entries") or []
        wrapped = [parse_entry(idx, entry) for idx, entry in enumerate(entries) if isinstance(entry, dict)]
        logger.debug("从 %s 读取到 %d 个条目", self.path, len(wrapped))
        return wrapped
