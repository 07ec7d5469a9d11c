from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Iterable, Optional

from .config import Config
from .errors import OutputPathError
from .filtering import EntryFilter
from .har_loader import STDIN, HarLoader
from .mime import MimeResolver, strip_mime_parameters
from .models import ExtractionSummary, HarEntry, IndexRecord, MimeResolution, ResolvedEntry
from .paths import POST_DIR, RESPONSE_DIR, PathBuilder
from .reporting import INDEX_FILE, IndexWriter
from .transform import BodyTransformer

logger = logging.getLogger(__name__)

_STRIPPED_SUFFIXES = (".har", ".json")


def document_dir_name(source: str) -> str:
    if source == STDIN:
        return "stdin.har.d"
    name = Path(source).name
    for suffix in _STRIPPED_SUFFIXES:
        if name.lower().endswith(suffix) and len(name) > len(suffix):
            name = name[: -len(suffix)]
            break
    return f"{name}.har.d"


def document_dir(source: str, output_dir: Optional[str] = None) -> Path:
    if output_dir:
        parent = Path(output_dir)
    elif source == STDIN:
        parent = Path(".")
    else:
        parent = Path(source).parent
    return parent / document_dir_name(source)


def ensure_directory(path: Path) -> None:
    try:
        path.mkdir(parents=True, exist_ok=True)
    except (FileExistsError, NotADirectoryError) as exc:
        raise OutputPathError(f"无法创建目录 {path}：路径中的某一级已作为文件存在") from exc


def write_file(path: Path, data: bytes) -> None:
    ensure_directory(path.parent)
    if path.is_dir():
        raise OutputPathError(f"无法写入 {path}：同名目录已存在")
    path.write_bytes(data)


def clean_previous(out_dir: Path) -> None:
    """删除上一次运行生成的文件，目录中的其他文件保持不变。"""
    for name in (RESPONSE_DIR, POST_DIR):
        target = out_dir / name
        if target.is_dir():
            shutil.rmtree(target)
        elif target.exists():
            target.unlink()


class HarExtractor:
    def __init__(self, config: Config, resolver: Optional[MimeResolver] = None):
        self.config = config
        self.resolver = resolver or MimeResolver()
        self.entry_filter = EntryFilter(config.filter)
        self.transformer = BodyTransformer(config.transform)

    def extract(self, source: str = STDIN) -> ExtractionSummary:
        entries = HarLoader(source).load()
        out_dir = document_dir(source, self.config.output.output_dir)
        logger.info("正在提取 %s -> %s", source, out_dir)
        return self.extract_entries(entries, out_dir)

    def extract_entries(self, entries: Iterable[HarEntry], out_dir: Path) -> ExtractionSummary:
        out_dir = Path(out_dir)
        ensure_directory(out_dir)
        index_path = out_dir / INDEX_FILE
        if index_path.exists():
            index_path.unlink()
        if self.config.output.clean:
            clean_previous(out_dir)
        paths = PathBuilder(out_dir, self.config.output)
        index = IndexWriter(index_path)
        summary = ExtractionSummary(output_dir=out_dir)
        counter = 0
        for entry in entries:
            summary.total += 1
            resolution = self.resolver.resolve(entry.mime_type, entry.url)
            if self.entry_filter.should_skip(entry, resolution):
                summary.skipped += 1
                continue
            counter += 1
            resolved = self._write_response(entry, counter, resolution, paths)
            self._record(index, summary, resolved)
            summary.extracted += 1
            if entry.has_post_body():
                self._record(index, summary, self._write_post(entry, counter, paths))
                summary.posts += 1
        logger.info(
            "%s：共 %d 个条目，提取 %d 个，跳过 %d 个，POST 内容 %d 个",
            out_dir,
            summary.total,
            summary.extracted,
            summary.skipped,
            summary.posts,
        )
        return summary

    def _write_response(
        self, entry: HarEntry, counter: int, resolution: MimeResolution, paths: PathBuilder
    ) -> ResolvedEntry:
        file_path, dir_path = paths.build(entry, counter, resolution.extension)
        data, decoded = self.transformer.transform(entry.text or "", entry.encoding, resolution.mime_type, entry.url)
        write_file(file_path, data)
        logger.debug("#%d %s -> %s", counter, entry.url, file_path)
        return ResolvedEntry(
            entry=entry,
            counter=counter,
            effective_mime_type=resolution.mime_type,
            extension=resolution.extension,
            output_path=file_path,
            output_dir=dir_path,
            binary=decoded,
        )

    def _write_post(self, entry: HarEntry, counter: int, paths: PathBuilder) -> ResolvedEntry:
        post = entry.post_data
        mime_type = strip_mime_parameters(post.mime_type)
        resolution = self.resolver.resolve(mime_type)
        file_path, dir_path = paths.build_post(counter, resolution.extension)
        write_file(file_path, self.transformer.transform_post(post, entry.url))
        logger.debug("#%d POST %s -> %s", counter, entry.url, file_path)
        return ResolvedEntry(
            entry=entry,
            counter=counter,
            effective_mime_type=mime_type or None,
            extension=resolution.extension,
            output_path=file_path,
            output_dir=dir_path,
        )

    def _record(self, index: IndexWriter, summary: ExtractionSummary, resolved: ResolvedEntry) -> None:
        record = IndexRecord(
            path=resolved.output_path.relative_to(summary.output_dir).as_posix(),
            binary=resolved.binary,
            mime_type=resolved.effective_mime_type,
            method=resolved.entry.method,
            url=resolved.entry.url,
        )
        index.append(record)
        summary.records.append(record)
