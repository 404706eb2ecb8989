from __future__ import annotations


class EpubError(RuntimeError):
    pass


class ArchiveNotFoundError(EpubError):
    pass


class CorruptArchiveError(EpubError):
    pass


class ArchiveReadError(EpubError):
    pass


class ContainerNotFoundError(EpubError):
    pass


class MalformedContainerError(EpubError):
    pass


class NoRootFileError(EpubError):
    pass


class PackageDocumentNotFoundError(EpubError):
    pass


class MalformedPackageDocumentError(EpubError):
    pass


class MarkupError(EpubError):
    pass


class OutputWriteError(EpubError):
    pass
