"""
tests/conftest.py

Shared fixtures for building HAR entries and documents.
"""

import json
from pathlib import Path
from typing import Any, Callable, Dict, List

import pytest

from har_extractor.har_loader import parse_entry
from har_extractor.models import HarEntry


def har_entry_dict(
    url: str = "http://example.com/a.json",
    method: str = "GET",
    status: int = 200,
    mime_type: str = "application/json",
    text: Any = '{"b":1,"a":2}',
    encoding: Any = None,
    post: Any = None,
) -> Dict[str, Any]:
    content: Dict[str, Any] = {"mimeType": mime_type, "size": len(text or "")}
    if text is not None:
        content["text"] = text
    if encoding is not None:
        content["encoding"] = encoding
    request: Dict[str, Any] = {"method": method, "url": url, "headers": []}
    if post is not None:
        request["postData"] = post
    return {"request": request, "response": {"status": status, "content": content}}


@pytest.fixture
def make_entry() -> Callable[..., HarEntry]:
    """
    Build a HarEntry from keyword overrides of a minimal HAR entry.
    """

    def _make(index: int = 0, **kwargs: Any) -> HarEntry:
        return parse_entry(index, har_entry_dict(**kwargs))

    return _make


@pytest.fixture
def write_har(tmp_path: Path) -> Callable[..., Path]:
    """
    Write a HAR document made of the given entry dicts under tmp_path.
    """

    def _write(entries: List[Dict[str, Any]], name: str = "capture.har") -> Path:
        path = tmp_path / name
        path.write_text(json.dumps({"log": {"version": "1.2", "entries": entries}}), encoding="utf-8")
        return path

    return _write
