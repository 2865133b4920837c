"""Command-line interface for storymark."""

from __future__ import annotations

import argparse
import logging
import sys
import time
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from storymark.errors import ConfigError, Diagnostic, Severity
from storymark.registry import DEFAULT_REGISTRY, StyleRegistry

logger = logging.getLogger(__name__)

MODES = ("viewer", "preview", "editable", "dsl")
DEFAULT_MODE = "viewer"
CONFIG_NAME = "storymark.toml"


@dataclass(frozen=True, slots=True)
class CliOptions:
    """Parsed CLI options."""

    input_file: Path
    output_file: Path | None
    mode: str
    registry: StyleRegistry
    with_css: bool
    strict: bool
    watch: bool
    debug: bool


@dataclass(frozen=True, slots=True)
class ConvertResult:
    output: str
    source: str
    diagnostics: list[Diagnostic]


def build_parser() -> argparse.ArgumentParser:
    """Build the argument parser (separate function for testability)."""
    p = argparse.ArgumentParser(
        prog="storymark",
        description="Render and convert story markup page text",
    )
    p.add_argument("input", help="Input file (DSL text, or editor HTML with --mode dsl)")
    p.add_argument("-o", "--output", help="Output file (default: stdout)")
    p.add_argument(
        "-m",
        "--mode",
        choices=MODES,
        default=None,
        help=(
            "viewer: animated HTML; preview: static HTML; editable: editor HTML; "
            f"dsl: editor HTML back to DSL (default: {DEFAULT_MODE})"
        ),
    )
    p.add_argument(
        "--config",
        metavar="FILE",
        help=f"Config file (default: auto-discover {CONFIG_NAME})",
    )
    p.add_argument(
        "--css",
        action="store_true",
        help="Include inline CSS on editor HTML spans (editable mode)",
    )
    p.add_argument("--strict", action="store_true", help="Exit 1 when warnings are reported")
    p.add_argument("--watch", action="store_true", help="Watch for changes and reconvert")
    p.add_argument("--debug", action="store_true", help="Dump the parse tree to stderr")
    p.add_argument("-v", "--verbose", action="store_true", help="Log progress to stderr")
    return p


def load_config(config_path: Path | None, input_dir: Path) -> dict[str, Any]:
    """Load a TOML config file, returning an empty dict on missing/absent file."""
    path = config_path if config_path is not None else input_dir / CONFIG_NAME

    if not path.is_file():
        return {}

    logger.debug("loading config from %s", path)
    try:
        with open(path, "rb") as f:
            return tomllib.load(f)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigError(f"invalid TOML: {exc}", path) from None


def resolve_options(args: argparse.Namespace) -> CliOptions:
    """Merge config file and CLI args into CliOptions.

    Precedence: config file < CLI flags.
    """
    input_file = Path(args.input)
    input_dir = input_file.parent
    if not input_dir.parts:
        input_dir = Path(".")

    config_path = Path(args.config) if args.config else input_dir / CONFIG_NAME
    config = load_config(config_path, input_dir)

    output_cfg = config.get("output", {})
    if not isinstance(output_cfg, dict):
        raise ConfigError("[output] must be a table", config_path)

    # Mode: config < CLI
    mode = output_cfg.get("mode", DEFAULT_MODE)
    if mode not in MODES:
        raise ConfigError(f"output.mode must be one of {', '.join(MODES)}", config_path)
    if args.mode is not None:
        mode = args.mode

    # Flags: either source turns them on
    with_css = bool(output_cfg.get("css", False)) or args.css
    strict = bool(output_cfg.get("strict", False)) or args.strict

    try:
        registry = DEFAULT_REGISTRY.with_overrides(config)
    except ConfigError as exc:
        raise ConfigError(exc.message, config_path) from None

    output_file = Path(args.output) if args.output else None

    return CliOptions(
        input_file=input_file,
        output_file=output_file,
        mode=mode,
        registry=registry,
        with_css=with_css,
        strict=strict,
        watch=args.watch,
        debug=args.debug,
    )


def convert_file(options: CliOptions) -> ConvertResult:
    """Read the input file and convert it according to the selected mode."""
    from storymark.debug import dump_tree
    from storymark.editable import dsl_to_editable, editable_to_dsl
    from storymark.lint import check_document
    from storymark.parser import Parser
    from storymark.render import Renderer, to_html
    from storymark.resolver import StyleResolver

    source = options.input_file.read_text(encoding="utf-8")
    resolver = StyleResolver(options.registry)

    if options.mode == "dsl":
        return ConvertResult(editable_to_dsl(source) + "\n", source, [])

    parser = Parser(source, str(options.input_file))
    doc = parser.parse()
    diagnostics = sorted(
        [*parser.diagnostics, *check_document(doc, options.registry)],
        key=lambda d: d.span.start.offset,
    )

    if options.debug:
        dump_tree(doc)

    if options.mode == "editable":
        output = dsl_to_editable(source, resolver=resolver if options.with_css else None)
    else:
        renderer = Renderer(resolver, animate=options.mode == "viewer")
        output = to_html(renderer.render(doc))

    return ConvertResult(output + "\n", source, diagnostics)


def report(result: ConvertResult, options: CliOptions) -> int:
    """Print diagnostics to stderr; return the exit code they imply."""
    warnings = 0
    for diag in result.diagnostics:
        if diag.severity is Severity.WARNING:
            warnings += 1
        print(diag.format(result.source, str(options.input_file)), file=sys.stderr)
    if options.strict and warnings:
        return 1
    return 0


def write_output(output: str, options: CliOptions) -> None:
    if options.output_file:
        options.output_file.write_text(output, encoding="utf-8")
    else:
        sys.stdout.write(output)
        sys.stdout.flush()


def watch_loop(options: CliOptions) -> None:
    """Poll input file for changes, reconvert on each modification."""
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
                    result = convert_file(options)
                except OSError as exc:
                    print(f"error: {exc}", file=sys.stderr)
                else:
                    report(result, options)
                    write_output(result.output, options)
                    print(f"Converted {options.input_file}", file=sys.stderr)
            time.sleep(0.5)
    except KeyboardInterrupt:
        pass


def main(argv: list[str] | None = None) -> int:
    """CLI entry point. Returns exit code (0/1/2). Does not call sys.exit()."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose or args.debug:
        logging.basicConfig(
            level=logging.DEBUG if args.debug else logging.INFO,
            format="%(levelname)s %(name)s: %(message)s",
            stream=sys.stderr,
        )

    try:
        options = resolve_options(args)
    except ConfigError as exc:
        print(str(exc), file=sys.stderr)
        return 2

    if options.watch:
        watch_loop(options)
        return 0

    try:
        result = convert_file(options)
    except OSError as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1

    code = report(result, options)
    write_output(result.output, options)
    return code
