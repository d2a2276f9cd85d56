from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from . import markdown_parser, markdown_serializer, renderer_docx
from .config import load_settings
from .utils import configure_logging, read_markdown, resolve_output_path


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="NoteMark",
        description="Normalize Markdown notes or export them to DOCX.",
    )
    parser.add_argument("input", type=str, help="Path to Markdown file")
    parser.add_argument("-o", "--output", type=str, help="Output path (stdout for Markdown if omitted)")
    parser.add_argument("--docx", action="store_true", help="Export to DOCX instead of Markdown")
    parser.add_argument("--check", action="store_true", help="Exit with status 1 if the note is not canonical")
    parser.add_argument("--config", type=str, help="YAML settings file")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(verbose=args.verbose)
    settings = load_settings(args.config)
    input_path = Path(args.input).expanduser()
    if not input_path.exists():
        raise FileNotFoundError(f"Input file not found: {input_path}")

    logging.info("Reading %s", input_path)
    markdown_text = read_markdown(input_path)
    logging.debug("Markdown length: %d chars", len(markdown_text))

    logging.info("Parsing markdown...")
    document = markdown_parser.parse_markdown(markdown_text, settings=settings)

    if args.docx:
        output_path = resolve_output_path(input_path, args.output, suffix=".docx")
        logging.info("Rendering DOCX to %s", output_path)
        renderer_docx.render_document(document, output_path=output_path, theme=settings.theme())
        logging.info("Done. Saved to %s", output_path)
        return 0

    canonical = markdown_serializer.serialize_document(document)
    if args.check:
        if canonical != markdown_text:
            logging.info("%s is not in canonical form", input_path)
            return 1
        logging.info("%s is canonical", input_path)
        return 0

    if args.output:
        output_path = resolve_output_path(input_path, args.output)
        output_path.write_text(canonical, encoding="utf-8")
        logging.info("Done. Saved to %s", output_path)
    else:
        sys.stdout.write(canonical)
    return 0


if __name__ == "__main__":
    sys.exit(main())
