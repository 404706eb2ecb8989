from __future__ import annotations

import zipfile
import zlib
from pathlib import Path
from types import TracebackType

from .errors import ArchiveNotFoundError, ArchiveReadError, CorruptArchiveError


def normalize_name(name: str) -> str:
    return name.replace("\\", "/")


class ArchiveReader:
    """Read-only view of a zip archive with lookup by normalized entry name."""

    def __init__(self, zipf: zipfile.ZipFile) -> None:
        self._zipf = zipf
        self._entries: dict[str, zipfile.ZipInfo] = {}
        for info in zipf.infolist():
            # first entry wins when an archive carries duplicate names
            self._entries.setdefault(normalize_name(info.filename), info)

    @classmethod
    def open(cls, path: str | Path) -> ArchiveReader:
        path = Path(path)
        if not path.is_file():
            raise ArchiveNotFoundError(f"failed to open EPUB file: {path} not found")
        try:
            zipf = zipfile.ZipFile(path, "r")
        except (zipfile.BadZipFile, OSError) as e:
            raise CorruptArchiveError(f"failed to open EPUB file: {path}: {e}") from e
        return cls(zipf)

    def __enter__(self) -> ArchiveReader:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    def close(self) -> None:
        self._zipf.close()

    def __len__(self) -> int:
        return len(self._entries)

    def names(self) -> list[str]:
        return list(self._entries)

    def find_entry(self, name: str) -> zipfile.ZipInfo | None:
        return self._entries.get(normalize_name(name))

    def read(self, entry: zipfile.ZipInfo) -> bytes:
        try:
            return self._zipf.read(entry)
        except (zipfile.BadZipFile, zlib.error, OSError, RuntimeError, EOFError) as e:
            raise ArchiveReadError(f"failed to read {entry.filename}: {e}") from e
