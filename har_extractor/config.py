from __future__ import annotations

import re
from dataclasses import dataclass, field, fields, replace
from enum import Enum
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, Tuple

import yaml

from .errors import ConfigError


class LayoutMode(str, Enum):
    SEQUENTIAL = "sequential"
    BY_HOST = "by-host"
    MIRROR = "mirror"


@dataclass(frozen=True)
class FilterConfig:
    url_regex: Tuple[str, ...] = ()
    exclude: Tuple[str, ...] = ()


@dataclass(frozen=True)
class OutputConfig:
    output_dir: Optional[str] = None
    layout: LayoutMode = LayoutMode.SEQUENTIAL
    prefix: str = "harx"
    clean: bool = True


@dataclass(frozen=True)
class TransformConfig:
    pretty_json: bool = False
    unescape_json: bool = False


@dataclass(frozen=True)
class Config:
    filter: FilterConfig = field(default_factory=FilterConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
    transform: TransformConfig = field(default_factory=TransformConfig)


_SECTIONS = {
    "filter": FilterConfig,
    "output": OutputConfig,
    "transform": TransformConfig,
}


def _section_for(key: str) -> str:
    for name, cls in _SECTIONS.items():
        if key in {f.name for f in fields(cls)}:
            return name
    raise ConfigError(f"未知的配置项：{key}")


def _coerce(key: str, value: Any) -> Any:
    if key in {"url_regex", "exclude"}:
        if value is None:
            return ()
        if isinstance(value, str):
            return (value,)
        return tuple(str(v) for v in value)
    if key == "layout":
        try:
            return LayoutMode(value)
        except ValueError as exc:
            raise ConfigError(f"未知的输出布局：{value}") from exc
    if key in {"clean", "pretty_json", "unescape_json"}:
        if not isinstance(value, bool):
            raise ConfigError(f"配置项 {key} 必须是布尔值：{value!r}")
        return value
    if key == "output_dir":
        return None if value is None else str(value)
    return value


def _build_section(cls, raw: Mapping[str, Any]):
    known = {f.name for f in fields(cls)}
    unknown = set(raw) - known
    if unknown:
        raise ConfigError(f"未知的配置项：{', '.join(sorted(unknown))}")
    return cls(**{k: _coerce(k, v) for k, v in raw.items()})


def _validate(config: Config) -> None:
    for pattern in config.filter.url_regex:
        try:
            re.compile(pattern)
        except re.error as exc:
            raise ConfigError(f"URL 正则表达式无效 {pattern!r}：{exc}") from exc
    if not config.output.prefix:
        raise ConfigError("文件名前缀不能为空")


def load_config(path: Optional[str] = None, overrides: Optional[Dict[str, Any]] = None) -> Config:
    raw: Dict[str, Any] = {}
    if path:
        config_path = Path(path)
        if not config_path.is_file():
            raise ConfigError(f"配置文件不存在：{config_path}")
        with config_path.open("r", encoding="utf-8") as handle:
            try:
                raw = yaml.safe_load(handle) or {}
            except yaml.YAMLError as exc:
                raise ConfigError(f"配置文件解析失败：{exc}") from exc
        if not isinstance(raw, dict):
            raise ConfigError("配置文件顶层必须是映射")
    unknown = set(raw) - set(_SECTIONS)
    if unknown:
        raise ConfigError(f"未知的配置段：{', '.join(sorted(unknown))}")
    sections = {
        name: _build_section(cls, raw.get(name) or {}) for name, cls in _SECTIONS.items()
    }
    for key, value in (overrides or {}).items():
        name = _section_for(key)
        sections[name] = replace(sections[name], **{key: _coerce(key, value)})
    config = Config(**sections)
    _validate(config)
    return config
