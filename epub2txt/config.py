from __future__ import annotations

import codecs
import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any


@dataclass(frozen=True)
class ConvertConfig:
    document_separator: str = "\n\n"
    output_encoding: str = "utf-8"
    media_type_marker: str = "html"  # substring a manifest media type must contain


def parse_convert_config(data: dict[str, Any]) -> ConvertConfig:
    defaults = ConvertConfig()

    separator = data.get("document_separator", defaults.document_separator)
    if not isinstance(separator, str):
        raise ValueError("document_separator must be a string")

    encoding = data.get("output_encoding", defaults.output_encoding)
    if not isinstance(encoding, str) or not encoding:
        raise ValueError("output_encoding must be a non-empty string")
    try:
        codecs.lookup(encoding)
    except LookupError as e:
        raise ValueError(f"Unknown output_encoding: {encoding}") from e

    marker = data.get("media_type_marker", defaults.media_type_marker)
    if not isinstance(marker, str) or not marker:
        raise ValueError("media_type_marker must be a non-empty string")

    return ConvertConfig(
        document_separator=separator,
        output_encoding=encoding,
        media_type_marker=marker,
    )


def load_convert_config(path: str | Path) -> ConvertConfig:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if not isinstance(data, dict):
        raise ValueError("config file must be a JSON object")
    return parse_convert_config(data)
