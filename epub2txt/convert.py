from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .config import ConvertConfig, load_convert_config
from .errors import EpubError
from .pipeline import epub_to_txt


class ConsoleFormatter(logging.Formatter):
    """Render records as ``Warning: message`` lines."""

    def format(self, record: logging.LogRecord) -> str:
        return f"{record.levelname.capitalize()}: {record.getMessage()}"


def configure_logging(verbose: bool = False) -> None:
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(ConsoleFormatter())
    root = logging.getLogger("epub2txt")
    root.handlers[:] = [handler]
    root.setLevel(logging.DEBUG if verbose else logging.INFO)


def default_output_path(epub_path: str | Path) -> Path:
    name = Path(epub_path).name
    stem, dot, _ = name.rpartition(".")
    return Path((stem if dot else name) + ".txt")


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="python -m epub2txt.convert",
        description="Convert an EPUB into a single plain-text file in spine reading order.",
    )
    p.add_argument("-i", "--input", help="Path to EPUB file (required)")
    p.add_argument(
        "-o",
        "--output",
        help="Path to output text file. Default: <input stem>.txt in the current directory",
    )
    p.add_argument("--config", help="Optional JSON file with conversion options")
    p.add_argument("-v", "--verbose", action="store_true", help="Log resolution details")
    return p


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.input:
        print("Error: input file is required")
        parser.print_usage(sys.stdout)
        return 1

    configure_logging(args.verbose)
    try:
        config = load_convert_config(args.config) if args.config else ConvertConfig()
    except (OSError, ValueError) as e:
        print(f"Error: invalid config {args.config}: {e}")
        return 1

    out_path = Path(args.output) if args.output else default_output_path(args.input)
    print(f"Converting {args.input} to {out_path}")
    try:
        epub_to_txt(args.input, out_path, config)
    except EpubError as e:
        print(f"Error: {e}")
        return 1

    print("Conversion completed successfully")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
