#!/usr/bin/env python3
"""
tailer - Main Entry Point
Follow one or more files from the terminal, like `tail -F`
"""
import argparse
import sys
from typing import List, Optional

from rich.console import Console
from rich.markup import escape
from rich.text import Text

from .config import TailConfig, load_settings
from .diagnostics import configure_logging
from .errors import ConfigurationError, StartError, StopError
from .filters.patterns import parse_filter_query
from .follow.follower import Follower
from .follow.multi import MultiTail
from .plugins.coloring import THEMES, Coloring
from .shutdown import process_shutdown, shutdown


def build_parser(settings) -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="tailer",
        description="Follow growing files, surviving rotation and truncation.",
    )
    parser.add_argument("files", nargs="+", help="files to follow")
    parser.add_argument("-n", "--lines", type=int, default=settings.backfill_lines,
                        help="trailing lines to show on start (default: %(default)s)")
    parser.add_argument("-s", "--interval", type=float, default=settings.poll_interval,
                        help="poll interval in seconds (default: %(default)s)")
    parser.add_argument("-b", "--buffer", type=int, default=settings.buffer_size,
                        help="delivery queue capacity (default: %(default)s)")
    parser.add_argument("-a", "--alias", action="append", default=[],
                        help="alias for the Nth file; repeat in file order")
    parser.add_argument("-f", "--filter", default="",
                        help="only show matching lines, e.g. 'error&&db||warn'")
    parser.add_argument("--theme", choices=sorted(THEMES), default=settings.theme,
                        help="color log levels with a theme")
    parser.add_argument("--log-level", default=settings.log_level,
                        help="diagnostic log level (default: %(default)s)")
    parser.add_argument("--log-file", default=settings.log_file,
                        help="write diagnostics to a file instead of stderr")
    return parser


def build_source(args):
    """Create a Follower for one file, or a MultiTail for several"""
    plugins = [Coloring(args.theme)] if args.theme else []
    followers = []
    for i, path in enumerate(args.files):
        alias = args.alias[i] if i < len(args.alias) else None
        config = TailConfig.build(
            poll_interval=args.interval,
            buffer_size=args.buffer,
            backfill_lines=args.lines,
            patterns=parse_filter_query(args.filter),
            alias=alias,
            plugins=plugins,
        )
        followers.append(Follower(path, config=config))
    if len(followers) == 1:
        return followers[0]
    return MultiTail(*followers, buffer_size=args.buffer)


def run(args, console: Optional[Console] = None) -> int:
    console = console or Console(highlight=False)
    try:
        source = build_source(args)
    except ConfigurationError as e:
        console.print(f"[red]configuration error:[/red] {escape(str(e))}", markup=True)
        return 2

    try:
        source.start()
    except StartError as e:
        console.print(f"[red]{escape(str(e))}[/red]", markup=True)
        return 1

    status = 0
    try:
        for line in source.lines(cancel=process_shutdown):
            console.print(Text.from_ansi(line), soft_wrap=True)
    except KeyboardInterrupt:
        shutdown()
    finally:
        try:
            source.stop()
        except StopError as e:
            console.print(f"[red]{escape(str(e))}[/red]", markup=True)
            status = 1
    return status


def main(argv: Optional[List[str]] = None) -> int:
    try:
        settings = load_settings()
    except ConfigurationError as e:
        print(f"tailer: {e}", file=sys.stderr)
        return 2
    args = build_parser(settings).parse_args(argv)
    configure_logging(args.log_level, args.log_file)
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
