from __future__ import annotations

import mimetypes
import posixpath
from typing import Dict, List, Optional
from urllib.parse import urlparse

from .models import MimeResolution

GENERIC_MIME_TYPE = "application/octet-stream"

# 系统 MIME 数据库给出的首选扩展名不一定是常用的那个
EXTENSION_TABLE: Dict[str, str] = {
    "application/javascript": ".js",
    "application/x-javascript": ".js",
    "text/javascript": ".js",
    "application/json": ".json",
    "application/x-amz-json-1.1": ".json",
    "application/manifest+json": ".json",
    # 表单数据会被解码为 JSON 写出
    "application/x-www-form-urlencoded": ".json",
    "application/xml": ".xml",
    "text/xml": ".xml",
    "text/html": ".html",
    "text/css": ".css",
    "text/plain": ".txt",
    "text/csv": ".csv",
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
    "image/x-icon": ".ico",
    "image/vnd.microsoft.icon": ".ico",
    "font/woff": ".woff",
    "font/woff2": ".woff2",
    "application/font-woff": ".woff",
    "font/ttf": ".ttf",
    "audio/mpeg": ".mp3",
    "video/mp4": ".mp4",
    "application/pdf": ".pdf",
    "application/wasm": ".wasm",
}


def strip_mime_parameters(mime_type: Optional[str]) -> str:
    """``text/html; charset=utf-8`` -> ``text/html``"""
    if not mime_type:
        return ""
    return mime_type.split(";", 1)[0].strip().lower()


def url_extension(url: str) -> str:
    path = urlparse(url).path if url else ""
    return posixpath.splitext(path)[1]


class MimeResolver:
    def __init__(self, table: Optional[Dict[str, str]] = None, mime_db: Optional[mimetypes.MimeTypes] = None):
        self.table = EXTENSION_TABLE if table is None else table
        self.mime_db = mime_db or mimetypes.MimeTypes()

    def guess_from_url(self, url: str) -> Optional[str]:
        if not url:
            return None
        mime_type, _ = self.mime_db.guess_type(urlparse(url).path or url, strict=False)
        return mime_type

    def resolve(self, declared_mime_type: Optional[str], url: str = "") -> MimeResolution:
        mime_type: Optional[str] = strip_mime_parameters(declared_mime_type)
        if not mime_type or mime_type == GENERIC_MIME_TYPE:
            mime_type = self.guess_from_url(url)
        candidates: List[str] = []
        if mime_type:
            if mime_type in self.table:
                candidates.append(self.table[mime_type])
            candidates.extend(self.mime_db.guess_all_extensions(mime_type, strict=False))
        candidates.append(url_extension(url))
        extensions: List[str] = []
        for ext in candidates:
            if ext and ext not in extensions:
                extensions.append(ext)
        return MimeResolution(mime_type=mime_type or None, extensions=tuple(extensions))
