from __future__ import annotations

import zipfile
from pathlib import Path
from typing import Callable

import pytest


CONTAINER_XML = """<?xml version="1.0" encoding="UTF-8"?>
<container version="1.0" xmlns="urn:oasis:names:tc:opendocument:xmlns:container">
  <rootfiles>
    <rootfile full-path="{opf_path}" media-type="application/oebps-package+xml"/>
  </rootfiles>
</container>
"""


def build_opf(items: list[tuple[str, str, str]], spine: list[str]) -> str:
    manifest = "\n".join(
        f'    <item id="{item_id}" href="{href}" media-type="{media_type}"/>'
        for item_id, href, media_type in items
    )
    itemrefs = "\n".join(f'    <itemref idref="{idref}"/>' for idref in spine)
    return f"""<?xml version="1.0" encoding="UTF-8"?>
<package xmlns="http://www.idpf.org/2007/opf" version="3.0" unique-identifier="uid">
  <metadata xmlns:dc="http://purl.org/dc/elements/1.1/">
    <dc:title>Test Book</dc:title>
  </metadata>
  <manifest>
{manifest}
  </manifest>
  <spine>
{itemrefs}
  </spine>
</package>
"""


def xhtml(body: str) -> str:
    return (
        '<?xml version="1.0" encoding="UTF-8"?>\n'
        '<html xmlns="http://www.w3.org/1999/xhtml"><head><title></title></head>'
        f"<body>{body}</body></html>"
    )


def write_zip(
    path: Path,
    files: dict[str, str | bytes],
    compress_type: int = zipfile.ZIP_DEFLATED,
) -> Path:
    with zipfile.ZipFile(path, "w") as zf:
        zf.writestr("mimetype", "application/epub+zip", compress_type=zipfile.ZIP_STORED)
        for name, content in files.items():
            zf.writestr(name, content, compress_type=compress_type)
    return path


@pytest.fixture
def make_epub(tmp_path: Path) -> Callable[..., Path]:
    """Write a minimal EPUB with the given chapters into tmp_path.

    ``chapters`` maps manifest id to (href, body markup); every chapter is
    declared as application/xhtml+xml and listed in the spine unless ``spine``
    is given explicitly.
    """

    def _make(
        chapters: dict[str, tuple[str, str]],
        *,
        spine: list[str] | None = None,
        opf_path: str = "OEBPS/content.opf",
        extra_items: list[tuple[str, str, str]] | None = None,
        extra_files: dict[str, str | bytes] | None = None,
        name: str = "book.epub",
        compress_type: int = zipfile.ZIP_DEFLATED,
    ) -> Path:
        opf_dir = opf_path.rsplit("/", 1)[0] + "/" if "/" in opf_path else ""
        items = [(cid, href, "application/xhtml+xml") for cid, (href, _) in chapters.items()]
        items.extend(extra_items or [])
        files: dict[str, str | bytes] = {
            "META-INF/container.xml": CONTAINER_XML.format(opf_path=opf_path),
            opf_path: build_opf(items, list(chapters) if spine is None else spine),
        }
        for href, body in chapters.values():
            files[opf_dir + href] = xhtml(body)
        files.update(extra_files or {})
        return write_zip(tmp_path / name, files, compress_type)

    return _make


@pytest.fixture
def make_zip(tmp_path: Path) -> Callable[..., Path]:
    """Write an arbitrary set of archive entries into tmp_path."""

    def _make(files: dict[str, str | bytes], *, name: str = "raw.epub") -> Path:
        return write_zip(tmp_path / name, files)

    return _make


@pytest.fixture
def opf_factory() -> Callable[..., str]:
    return build_opf


@pytest.fixture
def container_xml() -> Callable[[str], str]:
    return lambda opf_path: CONTAINER_XML.format(opf_path=opf_path)
