#!/usr/bin/env python3
"""
iconforge: CLI for the sidecar font build

Commands:
  iconforge build IN OUT   # run one build in an isolated worker
  iconforge paths          # show which interpreter/worker script would be used
"""
from __future__ import annotations

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict

from iconforge.core.bridge import SidecarBridge
from iconforge.core.configuration import load_settings
from iconforge.core.dispatcher import HostCommands
from iconforge.core.errors import IconforgeError
from iconforge.core.models import RunFailure, parse_result
from iconforge.generator.options import AssetType, FontType
from iconforge.utils.logging_config import setup_logging


def _options_from_args(args: argparse.Namespace) -> Dict[str, Any]:
    return {
        "inputDir": str(Path(args.input_dir).resolve()),
        "outputDir": str(Path(args.output_dir).resolve()),
        "name": args.name,
        "fontTypes": args.font_types or [],
        "assetTypes": args.asset_types or [],
        "prefix": args.prefix,
        "tag": args.tag,
        "fontsUrl": args.fonts_url,
        "configPath": str(Path(args.config_path).resolve()) if args.config_path else None,
    }


def render_result(result: Dict[str, Any]) -> str:
    """Render a run result as rich tables; returns the captured text."""
    from rich.console import Console
    from rich.table import Table
    from rich.text import Text

    console = Console(record=True, width=120)
    parsed = parse_result(result)
    if isinstance(parsed, RunFailure):
        console.print(Text("Build failed", style="bold red"))
        console.print(parsed.error)
        if parsed.stderr:
            console.print(Text("stderr:", style="yellow"))
            console.print(parsed.stderr)
        return console.export_text()

    data = parsed.data
    glyph_count = len(data.codepoints or {})
    table = Table(title=f"Build succeeded: {glyph_count} glyphs", show_lines=False)
    table.add_column("File", overflow="fold")
    table.add_column("Bytes", justify="right")
    for wr in data.write_results:
        table.add_row(wr.write_path or "-", "-" if wr.bytes is None else str(wr.bytes))
    console.print(table)
    return console.export_text()


def cmd_build(args: argparse.Namespace) -> int:
    try:
        settings = load_settings(Path(args.settings) if args.settings else None)
    except IconforgeError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    setup_logging(
        level=args.log_level or settings.logging.level,
        log_file=Path(settings.logging.file) if settings.logging.file else None,
        console_level=settings.logging.console_level,
        stream=sys.stderr,
    )
    host = HostCommands(bridge=SidecarBridge(settings))
    result = host.run_font_build_sync(_options_from_args(args))
    if args.json:
        print(json.dumps(result, indent=2, ensure_ascii=False))
    else:
        render_result(result)
    logging.getLogger("iconforge").info("build finished ok=%s", result.get("ok"))
    return 0 if result.get("ok") else 1


def cmd_paths(args: argparse.Namespace) -> int:
    try:
        settings = load_settings(Path(args.settings) if args.settings else None)
        if args.packaged is not None:
            settings.runtime.packaged = args.packaged
        paths = SidecarBridge(settings).resolve_paths()
    except IconforgeError as e:
        print(f"error: {e}", file=sys.stderr)
        return 1
    print(f"executable:  {paths.executable_path}")
    print(f"worker:      {paths.worker_script_path}")
    print(f"working dir: {paths.working_directory}")
    return 0


def main(argv=None):
    parser = argparse.ArgumentParser(prog="iconforge", description="Build icon fonts in an isolated worker process")
    parser.add_argument("--settings", default=None, help="Host settings YAML (default: $ICONFORGE_CONFIG or built-in)")
    sub = parser.add_subparsers(dest="cmd")

    p_build = sub.add_parser("build", help="Build fonts from a folder of SVG icons")
    p_build.add_argument("input_dir", help="Folder with SVG icons")
    p_build.add_argument("output_dir", help="Destination folder")
    p_build.add_argument("--name", default=None, help="Font name (default: icons)")
    p_build.add_argument("--font-type", dest="font_types", action="append", choices=[t.value for t in FontType],
                         help="Font format to emit; can repeat")
    p_build.add_argument("--asset-type", dest="asset_types", action="append", choices=[t.value for t in AssetType],
                         help="Asset to emit; can repeat")
    p_build.add_argument("--prefix", default=None, help="CSS class prefix (default: icon)")
    p_build.add_argument("--tag", default=None, help="HTML tag for icons (default: i)")
    p_build.add_argument("--fonts-url", default=None, help="Base URL of fonts in generated CSS")
    p_build.add_argument("--config-path", default=None, help="JSON/YAML/Python file with extra generator options")
    p_build.add_argument("--json", action="store_true", help="Print the raw result JSON")
    p_build.add_argument("--log-level", choices=["DEBUG", "INFO", "WARNING", "ERROR"], default=None)
    p_build.set_defaults(func=cmd_build)

    p_paths = sub.add_parser("paths", help="Show the resolved worker runtime")
    p_paths.add_argument("--packaged", dest="packaged", action="store_true", default=None,
                         help="Resolve as a packaged build")
    p_paths.add_argument("--dev", dest="packaged", action="store_false", help="Resolve as a development run")
    p_paths.set_defaults(func=cmd_paths)

    args = parser.parse_args(argv)
    if not hasattr(args, "func"):
        parser.print_help()
        return 1
    return int(args.func(args))


if __name__ == "__main__":
    sys.exit(main())
