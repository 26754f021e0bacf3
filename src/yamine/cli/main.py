#!/usr/bin/env python3
"""
YAMINE CLI
----------
Command-line surface for the combiner. Translates flags into a single
RunConfig (one RunMode, one Encoding) and hands it to the CombineEngine.

By default the process exits with status 0 even when the combination
fails; the failure is only reported as an error message. Pass --exit-code
to get a non-zero status instead.

Author: Yamine Maintainers
Date: 2026-10-18
"""

import sys
import argparse
import logging
from typing import List, Optional

from rich.console import Console
from rich.logging import RichHandler

from yamine.cli.formatter import PreviewFormatter
from yamine.core.engine import CombineEngine, EXIT_OK
from yamine.core.models import Encoding, RunConfig, RunMode, SplitMode

VERSION = "0.3.0"

# stdout carries the combined output; everything else goes to stderr
console = Console(stderr=True)


def _non_negative_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"'{value}' is not an integer") from None
    if number < 0:
        raise argparse.ArgumentTypeError(f"'{value}' must be zero or greater")
    return number


def _positive_int(value: str) -> int:
    number = _non_negative_int(value)
    if number == 0:
        raise argparse.ArgumentTypeError(f"'{value}' must be at least 1")
    return number


def _encoding(value: str) -> Encoding:
    try:
        return Encoding.parse(value)
    except ValueError as e:
        raise argparse.ArgumentTypeError(str(e)) from None


class YamineCLI:
    """
    CLI wrapper that turns user flags into an engine run.
    """

    def __init__(self, formatter: Optional[PreviewFormatter] = None):
        self.parser = argparse.ArgumentParser(
            prog="yamine",
            description="Combine JSON/YAML files into a single YAML or JSON file",
            formatter_class=argparse.RawDescriptionHelpFormatter,
            epilog="Without --write or --std-out, yamine only previews what it would do."
        )
        self.formatter = formatter or PreviewFormatter()
        self._setup_args()

    def _setup_args(self):
        """Configures the command-line flags."""
        self.parser.add_argument("-V", "--version", action="version", version=f"yamine v{VERSION}")
        self.parser.add_argument("paths", nargs="*", metavar="FILES_OR_FOLDERS",
                                 help="file(s) or folder(s) you want to combine")
        self.parser.add_argument("--stdin", action="store_true",
                                 help="read a YAML stream from STDIN instead of files")
        self.parser.add_argument("-d", "--depth", type=_non_negative_int, default=1,
                                 help="number of folder levels to recurse into (default: 1)")
        self.parser.add_argument("-o", "--output", default="combined.yaml",
                                 help="output file name (default: combined.yaml)")

        modes = self.parser.add_mutually_exclusive_group()
        modes.add_argument("--dry-run", dest="mode", action="store_const", const=RunMode.PREVIEW,
                           help="show what would be combined (default mode)")
        modes.add_argument("-w", "--write", dest="mode", action="store_const", const=RunMode.WRITE,
                           help="write the combined output file")
        modes.add_argument("-s", "--std-out", dest="mode", action="store_const", const=RunMode.STDOUT,
                           help="print the combined output to STDOUT")
        self.parser.set_defaults(mode=RunMode.PREVIEW)

        self.parser.add_argument("-f", "--format", type=_encoding, default=Encoding.YAML_STREAM,
                                 help="output format: 'yaml' (default), 'json-array' or 'k8s-json'")
        self.parser.add_argument("--split", choices=[m.value for m in SplitMode], default=SplitMode.SYNTAX.value,
                                 help="how YAML documents are split: 'syntax' (default) or 'marker'")
        self.parser.add_argument("--hidden", action="store_true",
                                 help="include hidden files and folders")
        self.parser.add_argument("--no-ignore", dest="use_ignore_files", action="store_false",
                                 help="do not honour .ignore and .gitignore files")
        self.parser.add_argument("--coerce-keys", action="store_true",
                                 help="convert non-string scalar keys to strings for JSON output")
        self.parser.add_argument("-j", "--jobs", type=_positive_int, default=1,
                                 help="number of files parsed in parallel (default: 1)")
        self.parser.add_argument("--log-level", default="WARNING",
                                 choices=["DEBUG", "INFO", "WARNING", "ERROR"],
                                 help="diagnostic verbosity (default: WARNING)")
        self.parser.add_argument("--exit-code", action="store_true",
                                 help="exit with status 1 when combining fails")

    def build_config(self, args: argparse.Namespace) -> RunConfig:
        return RunConfig(
            roots=tuple(args.paths),
            max_depth=args.depth,
            output=args.output,
            mode=args.mode,
            encoding=args.format,
            split_mode=SplitMode(args.split),
            include_hidden=args.hidden,
            use_ignore_files=args.use_ignore_files,
            coerce_keys=args.coerce_keys,
            jobs=args.jobs,
        )

    def configure_logging(self, level: str):
        logging.basicConfig(
            level=level,
            format="%(message)s",
            handlers=[RichHandler(console=console, show_path=False)]
        )
        logging.getLogger("yamine").setLevel(level)

    def run(self, argv: Optional[List[str]] = None) -> int:
        """Primary entry point. Returns the process exit status."""
        argv = sys.argv[1:] if argv is None else argv
        args = self.parser.parse_args(argv)

        if args.paths and args.stdin:
            self.parser.error("FILES_OR_FOLDERS and --stdin cannot be combined")
        if not args.paths and not args.stdin:
            self.parser.print_help()
            return EXIT_OK

        self.configure_logging(args.log_level)
        config = self.build_config(args)

        engine = CombineEngine(
            config,
            logger=logging.getLogger("yamine.engine"),
            previewer=self.formatter.render_plan
        )
        status = engine.run()

        return status if args.exit_code else EXIT_OK


def main():
    """Application entry point with interrupt handling."""
    try:
        sys.exit(YamineCLI().run())
    except KeyboardInterrupt:
        console.print("\n[bold red]Terminated by user.[/bold red]")
        sys.exit(1)


if __name__ == "__main__":
    main()
