from __future__ import annotations


class HarExtractError(Exception):
    """所有提取错误的基类。"""


class ConfigError(HarExtractError):
    pass


class HarFormatError(HarExtractError):
    """HAR 文档不是合法的 JSON 对象。"""


class BodyTransformError(HarExtractError):
    """格式化 JSON 时重新解析失败。"""

    def __init__(self, url: str, reason: str):
        super().__init__(f"无法格式化 {url} 的 JSON 内容：{reason}")
        self.url = url
        self.reason = reason


class OutputPathError(HarExtractError):
    """输出路径中的某一级已存在但不是目录。"""
