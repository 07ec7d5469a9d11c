from __future__ import annotations

import fnmatch
import logging
import re
from typing import List

from .config import FilterConfig
from .models import HarEntry, MimeResolution

logger = logging.getLogger(__name__)

INTERNAL_REDIRECT = 307


def normalize_exclusion(pattern: str) -> str:
    """``*.jpg``、``.jpg`` 与 ``jpg`` 归一化为同一个模式。"""
    pattern = pattern.strip().lower()
    if pattern.startswith("*."):
        pattern = pattern[2:]
    return pattern.lstrip(".") or pattern


class EntryFilter:
    def __init__(self, config: FilterConfig):
        self.config = config
        self._url_regex = [re.compile(p) for p in config.url_regex]
        self._exclusions: List[str] = [normalize_exclusion(p) for p in config.exclude if p.strip()]

    def should_skip(self, entry: HarEntry, resolution: MimeResolution) -> bool:
        if self._url_regex and not any(r.search(entry.url) for r in self._url_regex):
            logger.debug("跳过 %s：不匹配任何 URL 过滤条件", entry.url)
            return True
        if entry.status == INTERNAL_REDIRECT or entry.status > 399 or entry.status < 100:
            logger.debug("跳过 %s：状态码 %s", entry.url, entry.status)
            return True
        if not entry.text:
            logger.debug("跳过 %s：响应没有内容", entry.url)
            return True
        if self._is_excluded(resolution):
            logger.debug("跳过 %s：类型 %s 被排除", entry.url, resolution.mime_type)
            return True
        return False

    def _is_excluded(self, resolution: MimeResolution) -> bool:
        if not self._exclusions:
            return False
        mime = (resolution.mime_type or "").lower()
        if mime and any(fnmatch.fnmatchcase(mime, p) for p in self._exclusions):
            return True
        for ext in resolution.extensions:
            bare = ext.lstrip(".").lower()
            if bare and any(fnmatch.fnmatchcase(bare, p) for p in self._exclusions):
                return True
        return False
