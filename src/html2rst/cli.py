"""Command-line interface for html2rst."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

from .version import __version__


def _get_usage() -> str:
    return (
        f"html2rst {__version__}\n"
        "Usage:\n"
        "  html2rst [--help] [--version|--ver]\n"
        "  html2rst --from-file FILE [--to-dir TO_DIR] [options]\n\n"
        "Options:\n"
        "  --to-dir DIR                 Write <name>.rst and images to DIR (default: print RST)\n"
        "  --line-width N               Wrap paragraphs and list items at N columns (default: 0, no wrap)\n"
        "  --indent-size N              Block quote indentation (default: 3)\n"
        "  --no-title-overline          Do not overline level 1 headings\n"
        "  --image-dir DIR              Relative directory for extracted images (default: images/)\n"
        "  --include-metadata           Prefix the document title/author/language as a field list\n"
        "  --add-generated-comment      Prefix a generation comment with the current date\n"
        "  --validate                   Report suspicious RST constructs as warnings\n"
        "  --verbose                    Verbose progress logs\n"
        "  --debug                      Debug logs"
    )


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(add_help=False)
    parser.add_argument("--help", action="store_true")
    parser.add_argument("--version", action="store_true")
    parser.add_argument("--ver", action="store_true")
    parser.add_argument("--from-file", help="Word HTML export to convert")
    parser.add_argument("--to-dir", help="Output directory")
    parser.add_argument("--verbose", action="store_true", help="Verbose progress logs")
    parser.add_argument("--debug", action="store_true", help="Debug logs")
    parser.add_argument(
        "--line-width",
        type=int,
        default=0,
        help="Wrap paragraphs and list items at N columns, 0 disables wrapping (default: 0)",
    )
    parser.add_argument(
        "--indent-size",
        type=int,
        default=3,
        help="Indentation of block quotes (default: 3)",
    )
    parser.add_argument(
        "--no-title-overline",
        action="store_true",
        help="Render level 1 headings with an underline only",
    )
    parser.add_argument(
        "--image-dir",
        default="images/",
        help="Relative directory used for extracted image files (default: images/)",
    )
    parser.add_argument(
        "--include-metadata",
        action="store_true",
        help="Prefix the output with :title:, :author: and :language: fields",
    )
    parser.add_argument(
        "--add-generated-comment",
        action="store_true",
        help="Prefix the output with a generation comment",
    )
    parser.add_argument(
        "--validate",
        action="store_true",
        help="Append lint warnings about the generated RST",
    )
    return parser


def _validate_numeric_args(args: argparse.Namespace) -> str | None:
    if args.line_width is None or args.line_width < 0:
        return "Invalid value for --line-width: must be >= 0"
    if args.indent_size is None or args.indent_size <= 0:
        return "Invalid value for --indent-size: must be > 0"
    return None


def main(argv: list[str] | None = None) -> int:
    if argv is None:
        argv = sys.argv[1:]

    parser = _build_parser()
    try:
        args, unknown = parser.parse_known_args(argv)
    except SystemExit:
        # argparse exits on malformed values such as --line-width abc
        print(_get_usage())
        return 6
    if unknown:
        print(_get_usage())
        return 2

    if not argv or args.help:
        print(_get_usage())
        return 0

    if args.version or args.ver:
        print(__version__)
        return 0

    numeric_error = _validate_numeric_args(args)
    if numeric_error:
        print(numeric_error, file=sys.stderr)
        return 6

    if not args.from_file:
        print(_get_usage())
        print("Option --from-file is required unless --help or --version/--ver is used", file=sys.stderr)
        return 6

    from_file = Path(args.from_file).expanduser().resolve()
    if not from_file.exists() or not from_file.is_file():
        print(f"Input file not found: {from_file}", file=sys.stderr)
        return 6

    to_dir = Path(args.to_dir).expanduser().resolve() if args.to_dir else None
    if to_dir is not None and to_dir.exists() and not to_dir.is_dir():
        print(f"Output path is not a directory: {to_dir}", file=sys.stderr)
        return 7

    try:
        from html2rst import core
    except Exception as exc:
        print(f"Unable to import html2rst core: {exc}", file=sys.stderr)
        return 6

    core.setup_logging(args.verbose, args.debug)

    options = core.ConversionOptions(
        line_width=int(args.line_width),
        title_overline=not args.no_title_overline,
        indent_size=int(args.indent_size),
        image_dir=str(args.image_dir or "images/"),
        include_metadata=bool(args.include_metadata),
        add_generated_comment=bool(args.add_generated_comment),
        validate=bool(args.validate),
    )

    if to_dir is None:
        try:
            raw_html = core.read_html(from_file)
        except OSError as exc:
            print(f"Unable to read {from_file}: {exc}", file=sys.stderr)
            return core.EXIT_INVALID_ARGS
        result = core.convert_html_to_rst(raw_html, options)
        for warning in result.warnings:
            core.LOG.warning(warning)
        print(result.text)
        return 0

    try:
        result, rst_path = core.run_conversion_pipeline(
            input_path=from_file,
            out_dir=to_dir,
            options=options,
            verbose=bool(args.verbose),
        )
    except RuntimeError as exc:
        print(str(exc), file=sys.stderr)
        return core.EXIT_OUTPUT_DIR

    for warning in result.warnings:
        core.LOG.warning(warning)
    if args.verbose:
        print(f"RST written to {rst_path}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
