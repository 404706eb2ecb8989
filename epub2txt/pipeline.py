from __future__ import annotations

import logging
from dataclasses import dataclass, field
from pathlib import Path

from .archive import ArchiveReader
from .config import ConvertConfig
from .epub import resolve_package
from .errors import EpubError, OutputWriteError
from .html_text import html_to_text

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class SkippedDocument:
    path: str
    reason: str


@dataclass(frozen=True)
class ConversionResult:
    text: str
    documents: list[str] = field(default_factory=list)
    skipped: list[SkippedDocument] = field(default_factory=list)


def convert_epub_to_text(
    epub_path: str | Path,
    config: ConvertConfig | None = None,
) -> ConversionResult:
    """Extract the text of every spine document, in reading order.

    Errors while locating the package document are fatal and propagate.
    A content document that is missing from the archive, or that cannot be
    read or parsed, is logged and skipped.
    """
    if config is None:
        config = ConvertConfig()
    texts: list[str] = []
    documents: list[str] = []
    skipped: list[SkippedDocument] = []

    with ArchiveReader.open(epub_path) as archive:
        logger.debug("%s: %d archive entries", epub_path, len(archive))
        _, content_paths = resolve_package(archive, marker=config.media_type_marker)
        for doc_path in content_paths:
            entry = archive.find_entry(doc_path)
            if entry is None:
                logger.warning("content file not found: %s", doc_path)
                skipped.append(SkippedDocument(doc_path, "content file not found"))
                continue
            try:
                text = html_to_text(archive.read(entry))
            except EpubError as e:
                logger.warning("error processing %s: %s", doc_path, e)
                skipped.append(SkippedDocument(doc_path, str(e)))
                continue
            documents.append(doc_path)
            if not text:
                logger.debug("no text in %s", doc_path)
            texts.append(text)

    return ConversionResult(
        text=config.document_separator.join(texts),
        documents=documents,
        skipped=skipped,
    )


def write_text(text: str, out_path: str | Path, *, encoding: str = "utf-8") -> Path:
    out_path = Path(out_path)
    try:
        if out_path.parent != Path("."):
            out_path.parent.mkdir(parents=True, exist_ok=True)
        out_path.write_text(text, encoding=encoding)
    except (OSError, UnicodeEncodeError) as e:
        raise OutputWriteError(f"failed to write output file: {e}") from e
    return out_path


def epub_to_txt(
    epub_path: str | Path,
    out_path: str | Path,
    config: ConvertConfig | None = None,
) -> ConversionResult:
    if config is None:
        config = ConvertConfig()
    result = convert_epub_to_text(epub_path, config)
    write_text(result.text, out_path, encoding=config.output_encoding)
    return result
