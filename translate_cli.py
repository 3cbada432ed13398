"""Command-line front end for the translation resolver.

Resolves one text and prints the result as JSON. Maintenance options report or clear the
translation memory. Translation always exits with status 0, even when the result is degraded;
argument errors exit with 2.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import asdict
from pathlib import Path
from typing import TYPE_CHECKING, NoReturn

from config.loader import Config, ConfigLoader, ConfigLoaderError
from core.trans.manager import ResolutionEngine
from core.version import VERSION
from models.translation_models import TranslationOptions
from utils.logger_utils import LoggerUtils

if TYPE_CHECKING:
    from collections.abc import Sequence

    from models.translation_models import TranslationResult


def check_python_version() -> None:
    """Check if Python version is 3.13 or later.

    Raises:
        RuntimeError: If Python version is below 3.13.
    """
    if sys.version_info < (3, 13):
        msg = "Python 3.13 or later is required"
        raise RuntimeError(msg)


class _ArgumentParser(argparse.ArgumentParser):
    def error(self, message: str) -> NoReturn:
        print(f"\n{message}\n", file=sys.stderr)
        self.print_help(sys.stderr)
        raise SystemExit(2)


def parse_arguments(argv: Sequence[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Returns:
        argparse.Namespace: Parsed arguments.
    """
    parser = _ArgumentParser(
        description="Resolve a translation through cache, memory, providers and the local dictionary",
        epilog="Example: python translate_cli.py 'hello world' --target fr",
    )
    parser.add_argument("text", nargs="?", metavar="TEXT", help="Text to translate")
    parser.add_argument("-t", "--target", dest="target", metavar="LANG", help="Target language code")
    parser.add_argument("-s", "--source", dest="source", metavar="LANG", default="auto", help="Source language code")
    parser.add_argument("-c", "--config", dest="config", metavar="FILE", help="INI configuration file")

    network = parser.add_mutually_exclusive_group()
    network.add_argument("--offline", dest="offline", action="store_const", const=True, help="Force offline mode")
    network.add_argument("--online", dest="offline", action="store_const", const=False, help="Force online mode")

    parser.add_argument("--skip-cache", action="store_true", help="Bypass the in-memory cache")
    parser.add_argument("--skip-memory", action="store_true", help="Bypass the translation memory")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    parser.add_argument("--stats", action="store_true", help="Print cache and memory statistics")
    parser.add_argument("--clear-memory", action="store_true", help="Delete every translation memory entry")
    parser.add_argument("--export-memory", dest="export_memory", metavar="FILE", help="Export memory as JSON lines")
    parser.add_argument("--version", action="version", version=f"%(prog)s {VERSION}")

    args: argparse.Namespace = parser.parse_args(argv)
    maintenance: bool = args.stats or args.clear_memory or bool(args.export_memory)
    if args.text is None and not maintenance:
        parser.error("TEXT is required unless --stats, --clear-memory or --export-memory is given")
    if args.text is not None and not args.target:
        parser.error("--target is required when TEXT is given")
    return args


def load_config(args: argparse.Namespace) -> Config:
    """Load the configuration file (or defaults) and apply CLI overrides.

    Raises:
        ConfigLoaderError: If the configuration file cannot be loaded.
    """
    script_name: str = Path(sys.argv[0]).stem
    if args.config:
        return ConfigLoader(config_filename=args.config, script_name=script_name, debug=args.debug).config
    return ConfigLoader.from_defaults(script_name=script_name, debug=args.debug).config


async def run(args: argparse.Namespace, config: Config) -> int:
    """Run the requested operations against a fresh engine.

    Returns:
        int: Process exit status.
    """
    engine: ResolutionEngine = ResolutionEngine(config)
    await engine.initialize()
    try:
        if args.clear_memory:
            cleared: bool = await engine.clear_memory()
            print("Translation memory cleared." if cleared else "Translation memory could not be cleared.")

        if args.text is not None:
            options: TranslationOptions = TranslationOptions(
                skip_cache=args.skip_cache,
                skip_memory=args.skip_memory,
                offline_mode_override=args.offline,
            )
            result: TranslationResult = await engine.translate(args.text, args.target, args.source, options)
            print(result.to_json(ensure_ascii=False, indent=2))

        if args.export_memory:
            exported: int = await engine.export_memory(Path(args.export_memory))
            if exported < 0:
                print(f"Failed to export translation memory to '{args.export_memory}'", file=sys.stderr)
            else:
                print(f"Exported {exported} memory entries to '{args.export_memory}'")

        if args.stats:
            stats: dict[str, object] = {
                "cache": asdict(engine.cache_stats()),
                "memory": asdict(await engine.memory_stats()),
                "offline_mode": engine.get_offline_mode(),
            }
            print(json.dumps(stats, ensure_ascii=False, indent=2, default=str))
    finally:
        await engine.close()
    return 0


def main(argv: Sequence[str] | None = None) -> int:
    """Main entry point.

    Performs the following steps:
    1. Check Python version
    2. Parse command-line arguments
    3. Load configuration and set up logging
    4. Resolve the translation and/or run maintenance operations
    """
    check_python_version()
    args: argparse.Namespace = parse_arguments(argv)
    try:
        config: Config = load_config(args)
    except ConfigLoaderError as err:
        print("\nError: Failed to load configuration file.", file=sys.stderr)
        print(f"Details: {err}", file=sys.stderr)
        return 1

    LoggerUtils.setup(log_file=config.GENERAL.LOG_FILE, debug=config.GENERAL.DEBUG)
    return asyncio.run(run(args, config))


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        print("\nCancelled by user.", file=sys.stderr)
        sys.exit(130)
