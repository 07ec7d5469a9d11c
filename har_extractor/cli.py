from __future__ import annotations

import argparse
import logging
import sys
from typing import Any, Dict, Optional

from .config import LayoutMode, load_config
from .errors import ConfigError, HarExtractError
from .extractor import HarExtractor
from .har_loader import STDIN

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="把 HAR 中的响应与 POST 内容逐个提取为文件")
    parser.add_argument("inputs", nargs="*", default=[STDIN], help="HAR 文件路径，省略或为 - 时读取标准输入")
    parser.add_argument("--config", help="YAML 配置文件路径")
    parser.add_argument("-o", "--output-dir", dest="output_dir", help="输出目录的父目录，默认与输入文件相同")
    parser.add_argument("-u", "--url-regex", dest="url_regex", action="append", help="只提取匹配该正则的 URL，可重复")
    parser.add_argument("-x", "--exclude", action="append", help="排除的扩展名或 MIME 通配符，如 *.jpg、image/*，可重复")
    parser.add_argument("-p", "--pretty", dest="pretty_json", action="store_true", default=None, help="格式化 JSON 内容")
    parser.add_argument("-r", "--unescape", dest="unescape_json", action="store_true", default=None, help="递归展开嵌入字符串中的 JSON")
    layout = parser.add_mutually_exclusive_group()
    layout.add_argument("--by-host", dest="layout", action="store_const", const=LayoutMode.BY_HOST.value, help="按主机名分目录")
    layout.add_argument("--mirror", dest="layout", action="store_const", const=LayoutMode.MIRROR.value, help="按 URL 还原目录结构")
    parser.add_argument("--prefix", help="顺序文件名前缀，默认 harx")
    parser.add_argument("--no-clean", dest="clean", action="store_false", default=None, help="不删除上一次生成的文件")
    parser.add_argument("--log-level", default="INFO", help="日志级别")
    verbosity = parser.add_mutually_exclusive_group()
    verbosity.add_argument("-v", "--verbose", action="store_true", help="输出调试信息")
    verbosity.add_argument("-q", "--quiet", action="store_true", help="只输出警告和错误")
    return parser


def _log_level(args: argparse.Namespace) -> int:
    if args.verbose:
        return logging.DEBUG
    if args.quiet:
        return logging.WARNING
    return getattr(logging, args.log_level.upper(), logging.INFO)


def main(argv: Optional[list[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    logging.basicConfig(level=_log_level(args), format="%(asctime)s [%(levelname)s] %(name)s: %(message)s")
    overrides: Dict[str, Any] = {}
    for key in ("output_dir", "url_regex", "exclude", "pretty_json", "unescape_json", "layout", "prefix", "clean"):
        value = getattr(args, key)
        if value is not None:
            overrides[key] = value
    try:
        config = load_config(args.config, overrides=overrides)
    except ConfigError as exc:
        logger.error("%s", exc)
        return 2
    extractor = HarExtractor(config)
    failed = 0
    for source in args.inputs:
        try:
            extractor.extract(source)
        except (HarExtractError, OSError) as exc:
            logger.error("处理 %s 失败：%s", source, exc)
            failed += 1
    return 1 if failed else 0


if __name__ == "__main__":
    sys.exit(main())
