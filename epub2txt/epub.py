from __future__ import annotations

import logging
import posixpath
import zipfile
from dataclasses import dataclass, field
from typing import Iterable, Mapping
from urllib.parse import unquote
from xml.etree import ElementTree as ET

from .archive import ArchiveReader
from .errors import (
    ContainerNotFoundError,
    MalformedContainerError,
    MalformedPackageDocumentError,
    NoRootFileError,
    PackageDocumentNotFoundError,
)

logger = logging.getLogger(__name__)

CONTAINER_PATH = "META-INF/container.xml"
HTML_MARKER = "html"


@dataclass(frozen=True)
class ManifestItem:
    id: str
    href: str
    media_type: str


@dataclass(frozen=True)
class SpineEntry:
    idref: str


@dataclass(frozen=True)
class PackageDocument:
    path: str
    manifest: dict[str, ManifestItem] = field(default_factory=dict)
    spine: list[SpineEntry] = field(default_factory=list)

    @property
    def base_dir(self) -> str:
        return posixpath.dirname(self.path)


def _local_name(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def locate_container(archive: ArchiveReader) -> zipfile.ZipInfo:
    entry = archive.find_entry(CONTAINER_PATH)
    if entry is None:
        raise ContainerNotFoundError("container.xml file not found in EPUB")
    return entry


def parse_container(data: bytes) -> str:
    """Return the ``full-path`` of the first rootfile listed in container.xml."""
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise MalformedContainerError(f"failed to parse container.xml: {e}") from e
    if _local_name(root.tag) != "container":
        raise MalformedContainerError(
            f"failed to parse container.xml: unexpected root element <{_local_name(root.tag)}>"
        )

    rootfile = root.find("{*}rootfiles/{*}rootfile")
    if rootfile is None:
        raise NoRootFileError("no rootfile found in container.xml")
    full_path = rootfile.attrib.get("full-path", "")
    if not full_path:
        raise MalformedContainerError("invalid container.xml: rootfile missing full-path")
    return full_path


def locate_package_document(archive: ArchiveReader, path: str) -> zipfile.ZipInfo:
    entry = archive.find_entry(path)
    if entry is None:
        raise PackageDocumentNotFoundError(f"OPF file not found at path: {path}")
    return entry


def parse_package_document(data: bytes, path: str = "") -> PackageDocument:
    try:
        root = ET.fromstring(data)
    except ET.ParseError as e:
        raise MalformedPackageDocumentError(f"failed to parse OPF file {path}: {e}") from e
    if _local_name(root.tag) != "package":
        raise MalformedPackageDocumentError(
            f"failed to parse OPF file {path}: unexpected root element <{_local_name(root.tag)}>"
        )

    manifest: dict[str, ManifestItem] = {}
    for item in root.findall("{*}manifest/{*}item"):
        item_id = item.attrib.get("id")
        href = item.attrib.get("href")
        if not item_id or not href:
            continue
        manifest[item_id] = ManifestItem(
            id=item_id,
            href=href,
            media_type=item.attrib.get("media-type", ""),
        )

    spine_el = root.find("{*}spine")
    if spine_el is None:
        logger.warning("OPF file %s has no spine; nothing to read", path)
        return PackageDocument(path=path, manifest=manifest)

    spine: list[SpineEntry] = []
    for itemref in spine_el.findall("{*}itemref"):
        idref = itemref.attrib.get("idref")
        if idref:
            spine.append(SpineEntry(idref=idref))
    return PackageDocument(path=path, manifest=manifest, spine=spine)


def _href_path(href: str) -> str:
    return unquote(href.split("#", 1)[0])


def resolve_content_order(
    manifest: Mapping[str, ManifestItem],
    spine: Iterable[SpineEntry],
    base_dir: str,
    *,
    marker: str = HTML_MARKER,
) -> list[str]:
    """Map spine entries to archive paths of their (X)HTML content documents.

    Entries pointing at unknown manifest ids, or at items whose media type
    does not contain ``marker``, are dropped. Order and duplicates are kept.
    """
    paths: list[str] = []
    for entry in spine:
        item = manifest.get(entry.idref)
        if item is None:
            logger.debug("spine references unknown manifest id %r", entry.idref)
            continue
        if marker not in item.media_type:
            logger.debug("skipping %s (%s)", item.href, item.media_type or "no media type")
            continue
        href = _href_path(item.href)
        if not href:
            continue
        if href.startswith("/"):
            # absolute hrefs are relative to the archive root
            paths.append(posixpath.normpath(href.lstrip("/")))
        else:
            paths.append(posixpath.normpath(posixpath.join(base_dir, href)))
    return paths


def resolve_package(
    archive: ArchiveReader, *, marker: str = HTML_MARKER
) -> tuple[PackageDocument, list[str]]:
    container = locate_container(archive)
    opf_path = parse_container(archive.read(container))
    logger.debug("package document: %s", opf_path)

    opf_entry = locate_package_document(archive, opf_path)
    package = parse_package_document(archive.read(opf_entry), opf_path)
    paths = resolve_content_order(package.manifest, package.spine, package.base_dir, marker=marker)
    logger.debug(
        "manifest has %d items, spine %d entries, %d content documents",
        len(package.manifest),
        len(package.spine),
        len(paths),
    )
    return package, paths
