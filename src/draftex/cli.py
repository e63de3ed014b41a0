"""Command-line interface for DrafTeX."""

from __future__ import annotations

import argparse
import logging
import sys
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from draftex.errors import LexError, StructuralError
from draftex.expand import DEFAULT_MAX_CALL_DEPTH

logger = logging.getLogger(__name__)

CONFIG_NAME = "draftex.toml"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    keep_comments: bool
    max_call_depth: int
    title: str | None
    css_files: list[str]
    strict: bool
    watch: bool
    debug: bool


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="draftex",
        description="Render LaTeX-like draft markup to HTML",
    )
    p.add_argument("input", help="Input .tex file")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_NAME})",
    )
    p.add_argument(
        "--no-comments",
        action="store_true",
        help="Drop comments instead of keeping them as annotations",
    )
    p.add_argument(
        "--max-depth",
        type=int,
        default=None,
        metavar="N",
        help=f"Macro call depth limit (default: {DEFAULT_MAX_CALL_DEPTH})",
    )
    p.add_argument(
        "--css",
        action="append",
        default=[],
        metavar="FILE",
        help="CSS file to link (repeatable)",
    )
    p.add_argument("--title", help="HTML page title")
    p.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 2 when structural errors were found",
    )
    p.add_argument("--watch", action="store_true", help="Watch for changes and recompile")
    p.add_argument("--debug", action="store_true", help="Dump token and output trees to stderr")
    p.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    logger.debug("loading config from %s", path)
    with open(path, "rb") as f:
        return tomllib.load(f)


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else None
    config = load_config(config_path, input_dir)

    cfg_parse = config.get("parse")
    if not isinstance(cfg_parse, dict):
        cfg_parse = {}
    cfg_render = config.get("render")
    if not isinstance(cfg_render, dict):
        cfg_render = {}

    keep_comments = True
    if isinstance(cfg_parse.get("keep_comments"), bool):
        keep_comments = cfg_parse["keep_comments"]
    if args.no_comments:
        keep_comments = False

    max_call_depth = DEFAULT_MAX_CALL_DEPTH
    cfg_depth = cfg_parse.get("max_call_depth")
    if isinstance(cfg_depth, int) and not isinstance(cfg_depth, bool):
        max_call_depth = cfg_depth
    if args.max_depth is not None:
        max_call_depth = args.max_depth
    if max_call_depth < 1:
        raise argparse.ArgumentTypeError(f"macro call depth must be positive: {max_call_depth}")

    title = args.title
    if title is None and isinstance(cfg_render.get("title"), str):
        title = cfg_render["title"]

    # CSS files: config < CLI
    css_files: list[str] = []
    cfg_css = cfg_render.get("css")
    if isinstance(cfg_css, list):
        css_files.extend(str(f) for f in cfg_css)
    css_files.extend(args.css)

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        keep_comments=keep_comments,
        max_call_depth=max_call_depth,
        title=title,
        css_files=css_files,
        strict=args.strict,
        watch=args.watch,
        debug=args.debug,
    )


def compile_file(options: CliOptions) -> tuple[str, list[StructuralError]]:
    """Read, parse and render a DrafTeX file; return the HTML and structural errors."""
    from draftex.debug import dump_tokens, dump_tree
    from draftex.expand import expand_document
    from draftex.lexer import tokenize
    from draftex.render import render

    source = options.input_file.read_text(encoding="utf-8")
    filename = str(options.input_file)
    tree = tokenize(source, filename)

    if options.debug:
        dump_tokens(tree)

    doc = expand_document(
        tree,
        source,
        keep_comments=options.keep_comments,
        max_call_depth=options.max_call_depth,
    )

    if options.debug:
        dump_tree(doc)

    html = render(doc, title=options.title, css_files=options.css_files)
    return html, doc.diagnostics


def _report(diagnostics: list[StructuralError], filename: str) -> None:
    for diag in diagnostics:
        print(diag.format(filename), file=sys.stderr)


def _write(options: CliOptions, html: str) -> None:
    if options.output_file:
        options.output_file.write_text(html, encoding="utf-8")
    else:
        sys.stdout.write(html)
        sys.stdout.flush()


def watch_loop(options: CliOptions) -> None:
    """Poll input file for changes, recompile on each modification."""
    last_mtime = 0.0
    print(f"Watching {options.input_file} for changes...", file=sys.stderr)
    try:
        while True:
            try:
                mtime = options.input_file.stat().st_mtime
            except OSError:
                time.sleep(0.5)
                continue
            if mtime != last_mtime:
                last_mtime = mtime
                try:
                    html, diagnostics = compile_file(options)
                    _report(diagnostics, str(options.input_file))
                    _write(options, html)
                    print(f"Compiled {options.input_file}", file=sys.stderr)
                except LexError as exc:
                    print(exc.format(str(options.input_file)), file=sys.stderr)
                except (OSError, UnicodeDecodeError) as exc:
                    print(f"error: {exc}", file=sys.stderr)
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        options = resolve_options(args)
    except argparse.ArgumentTypeError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 2

    if options.watch:
        watch_loop(options)
        return 0

    try:
        html, diagnostics = compile_file(options)
    except LexError as exc:
        print(exc.format(str(options.input_file)), file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    _report(diagnostics, str(options.input_file))
    _write(options, html)

    if diagnostics and options.strict:
        return 2
    return 0
