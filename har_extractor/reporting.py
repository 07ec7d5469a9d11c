from __future__ import annotations

from pathlib import Path

from .models import IndexRecord

INDEX_FILE = "00INDEX.txt"
BINARY_FLAG = "(bin)"
TEXT_FLAG = "-"


def format_record(record: IndexRecord) -> str:
    flag = BINARY_FLAG if record.binary else TEXT_FLAG
    mime_type = record.mime_type or TEXT_FLAG
    return f"{record.path:<40} {flag:<5} {mime_type:<32} {record.method:<7} {record.url}"


class IndexWriter:
    """逐行追加写入 ``00INDEX.txt``。"""

    def __init__(self, path: Path):
        self.path = Path(path)

    def append(self, record: IndexRecord) -> None:
        if self.path.parent and not self.path.parent.exists():
            self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open("a", encoding="utf-8") as handle:
            handle.write(format_record(record) + "\n")
