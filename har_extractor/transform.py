from __future__ import annotations

import base64
import binascii
import json
import logging
from typing import Dict, List, Optional, Tuple, Union
from urllib.parse import parse_qsl, urlparse

from .config import TransformConfig
from .errors import BodyTransformError
from .mime import strip_mime_parameters
from .models import PostData

logger = logging.getLogger(__name__)

JsonValue = Union[None, bool, int, float, str, List["JsonValue"], Dict[str, "JsonValue"]]

PRETTY_MIME_TYPES = {"application/json", "application/x-amz-json-1.1"}
FORM_MIME_TYPE = "application/x-www-form-urlencoded"
BASE64 = "base64"


def _short(value: str, limit: int = 80) -> str:
    return value if len(value) <= limit else value[:limit] + "..."


def is_pretty_target(mime_type: Optional[str], url: str) -> bool:
    if mime_type:
        return mime_type in PRETTY_MIME_TYPES
    return urlparse(url).path.endswith(".json")


def dump_pretty(value: JsonValue) -> str:
    return json.dumps(value, indent=2, sort_keys=True, ensure_ascii=True) + "\n"


def unescape_json(value: JsonValue, url: str = "") -> JsonValue:
    """递归展开以字符串形式嵌入的 JSON。

    字符串值若本身是 JSON 数组、对象或带引号的字符串字面量，则替换为解析结果，
    并继续向下处理；解析失败时保留原值。
    """
    if isinstance(value, dict):
        expanded = {key: unescape_json(item, url) for key, item in value.items()}
        return value if all(expanded[key] is value[key] for key in value) else expanded
    if isinstance(value, list):
        items = [unescape_json(item, url) for item in value]
        return value if all(new is old for new, old in zip(items, value)) else items
    if isinstance(value, str):
        candidate = value.strip()
        if candidate[:1] not in ("{", "[", '"'):
            return value
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as exc:
            logger.warning("%s 中的值无法按 JSON 展开（%s）：%s", url, exc, _short(value))
            return value
        return unescape_json(parsed, url)
    return value


def unescape_text(text: str, url: str = "") -> str:
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError:
        return text
    expanded = unescape_json(parsed, url)
    # 没有展开任何值时保留原文
    if expanded is parsed:
        return text
    return json.dumps(expanded, ensure_ascii=False)


def pretty_print(text: str, url: str = "") -> str:
    try:
        parsed = json.loads(text)
    except json.JSONDecodeError as exc:
        raise BodyTransformError(url, str(exc)) from exc
    return dump_pretty(parsed)


def decode_form(text: str) -> Dict[str, Union[str, List[str]]]:
    """解码 ``application/x-www-form-urlencoded``，重复的字段名合并为列表。"""
    result: Dict[str, Union[str, List[str]]] = {}
    for name, value in parse_qsl(text, keep_blank_values=True):
        if name not in result:
            result[name] = value
            continue
        existing = result[name]
        if isinstance(existing, list):
            existing.append(value)
        else:
            result[name] = [existing, value]
    return result


class BodyTransformer:
    def __init__(self, config: TransformConfig):
        self.config = config

    def decode(self, text: str, encoding: Optional[str], url: str = "") -> Tuple[bytes, bool]:
        if not encoding:
            return text.encode("utf-8"), False
        if encoding.lower() == BASE64:
            try:
                return base64.b64decode(text), True
            except (binascii.Error, ValueError) as exc:
                logger.warning("%s 的 base64 内容无法解码，按原样写出：%s", url, exc)
                return text.encode("utf-8"), False
        logger.warning("%s 使用了无法识别的编码 %r，按原样写出", url, encoding)
        return text.encode("utf-8"), False

    def _json_stages(self, data: bytes, mime_type: Optional[str], url: str) -> bytes:
        pretty = self.config.pretty_json and is_pretty_target(mime_type, url)
        if not (self.config.unescape_json or pretty):
            return data
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError:
            if pretty:
                raise BodyTransformError(url, "内容不是 UTF-8 文本")
            return data
        if self.config.unescape_json:
            text = unescape_text(text, url)
        if pretty:
            text = pretty_print(text, url)
        return text.encode("utf-8")

    def transform(
        self, text: str, encoding: Optional[str], mime_type: Optional[str], url: str = ""
    ) -> Tuple[bytes, bool]:
        """返回处理后的内容，以及内容是否经过 base64 解码。"""
        data, decoded = self.decode(text, encoding, url)
        return self._json_stages(data, mime_type, url), decoded

    def transform_post(self, post: PostData, url: str = "") -> bytes:
        mime_type = strip_mime_parameters(post.mime_type)
        text = post.text or ""
        if mime_type == FORM_MIME_TYPE:
            text = json.dumps(decode_form(text), ensure_ascii=False)
            if self.config.unescape_json:
                text = unescape_text(text, url)
            if self.config.pretty_json:
                text = pretty_print(text, url)
            return text.encode("utf-8")
        if "json" not in mime_type:
            logger.warning("%s 的 POST 内容类型 %r 无法识别，按原样写出", url, post.mime_type)
        return self._json_stages(text.encode("utf-8"), mime_type or None, url)
