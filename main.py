"""
Main entry point for the folder comparison tool.

This module handles:
- Command line argument parsing
- Logging configuration
- Settings loading and recent folder bookkeeping
- Rendering comparison results to the terminal or as JSON
"""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from enum import Enum, auto
from pathlib import Path
from typing import Optional, List, TextIO

from dircompare.core.diff.text_diff import DiffAlgorithm
from dircompare.core.models import DiffNode, DiffTag, FileDiff, Node
from dircompare.services.comparison import ComparisonService
from dircompare.services.settings import SettingsManager


# =============================================================================
# Constants
# =============================================================================

APP_NAME = "dircompare"
APP_VERSION = "1.0.0"

# Exit codes follow diff(1)
EXIT_IDENTICAL = 0
EXIT_DIFFERENT = 1
EXIT_ERROR = 2

MARKERS = {
    DiffTag.ADDED: '+',
    DiffTag.REMOVED: '-',
    DiffTag.MODIFIED: '*',
    DiffTag.UNCHANGED: ' ',
}


# =============================================================================
# Enums
# =============================================================================

class StartupMode(Enum):
    """What the command line asks for."""
    FOLDER_COMPARE = auto()
    FILE_COMPARE = auto()
    TREE = auto()


@dataclass
class CommandLineArgs:
    """Parsed command line arguments."""
    mode: StartupMode = StartupMode.TREE
    left_path: Optional[str] = None
    right_path: Optional[str] = None
    settings_file: Optional[str] = None
    log_level: Optional[str] = None
    log_file: Optional[str] = None
    workers: Optional[int] = None
    algorithm: Optional[DiffAlgorithm] = None
    json_output: bool = False
    changed_only: bool = False
    remember: bool = True


# =============================================================================
# Logging Setup
# =============================================================================

class LogFormatter(logging.Formatter):
    """Custom log formatter with colors for console."""

    COLORS = {
        logging.INFO: '\033[32m',      # Green
        logging.WARNING: '\033[33m',   # Yellow
        logging.ERROR: '\033[31m',     # Red
        logging.CRITICAL: '\033[35m',  # Magenta
    }
    RESET = '\033[0m'

    def __init__(self, use_colors: bool = True):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        formatted = super().format(record)

        if self.use_colors:
            color = self.COLORS.get(record.levelno, '')
            return f"{color}{formatted}{self.RESET}"

        return formatted


def setup_logging(level: str = "INFO", log_file: Optional[Path] = None) -> logging.Logger:
    """
    Configure application logging.

    Logs go to stderr so stdout carries only results.

    Args:
        level: Log level string
        log_file: Optional file path for logging

    Returns:
        Root logger instance
    """
    numeric_level = getattr(logging, level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)
    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(numeric_level)
    console_handler.setFormatter(LogFormatter(use_colors=True))
    root_logger.addHandler(console_handler)

    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)

        file_handler = logging.FileHandler(
            log_file,
            encoding='utf-8'
        )
        file_handler.setLevel(numeric_level)
        file_handler.setFormatter(LogFormatter(use_colors=False))
        root_logger.addHandler(file_handler)

    return root_logger


# =============================================================================
# Argument Parsing
# =============================================================================

def parse_arguments(args: Optional[List[str]] = None) -> CommandLineArgs:
    """
    Parse command line arguments.

    Args:
        args: Arguments to parse (defaults to sys.argv)

    Returns:
        Parsed arguments
    """
    parser = argparse.ArgumentParser(
        prog=APP_NAME,
        description="Compare two folder trees and the files inside them",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s new_folder old_folder         Compare two folders
  %(prog)s new.txt old.txt               Line diff of two files
  %(prog)s folder                        Show the filtered tree of one folder
        """
    )

    parser.add_argument(
        'left',
        help='Left (new) file or folder'
    )
    parser.add_argument(
        'right',
        nargs='?',
        help='Right (old) file or folder to compare against'
    )

    # Output
    parser.add_argument(
        '--json',
        action='store_true',
        help='Print the result as JSON'
    )
    parser.add_argument(
        '--changed-only',
        action='store_true',
        help='Only show entries that differ'
    )

    # Comparison
    parser.add_argument(
        '-w', '--workers',
        type=int,
        default=None,
        help='Threads used to scan each folder'
    )
    parser.add_argument(
        '--algorithm',
        choices=[a.name.lower() for a in DiffAlgorithm],
        default=None,
        help='Line diff algorithm'
    )

    # Configuration
    parser.add_argument(
        '-c', '--settings',
        help='Settings file path'
    )
    parser.add_argument(
        '--no-remember',
        action='store_true',
        help='Do not add the folders to the recent folder list'
    )

    # Logging
    parser.add_argument(
        '--log-level',
        choices=['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'],
        default=None,
        help='Log level'
    )
    parser.add_argument(
        '--log-file',
        help='Also write logs to this file'
    )

    parser.add_argument(
        '--version',
        action='version',
        version=f'{APP_NAME} {APP_VERSION}'
    )

    parsed = parser.parse_args(args)

    result = CommandLineArgs()
    result.left_path = parsed.left
    result.right_path = parsed.right
    result.settings_file = parsed.settings
    result.log_level = parsed.log_level
    result.log_file = parsed.log_file
    result.workers = parsed.workers
    result.json_output = parsed.json
    result.changed_only = parsed.changed_only
    result.remember = not parsed.no_remember

    if parsed.algorithm:
        result.algorithm = DiffAlgorithm[parsed.algorithm.upper()]

    # Determine mode
    if parsed.right is None:
        result.mode = StartupMode.TREE
    elif Path(parsed.left).is_file() and Path(parsed.right).is_file():
        result.mode = StartupMode.FILE_COMPARE
    else:
        result.mode = StartupMode.FOLDER_COMPARE

    return result


# =============================================================================
# Rendering
# =============================================================================

def render_tree(
    node: Node | DiffNode,
    out: TextIO,
    changed_only: bool = False,
    prefix: str = ""
) -> None:
    """Print a tree with one line per entry and a diff marker column."""
    if isinstance(node, DiffNode):
        if changed_only and not node.has_differences:
            return
        marker = MARKERS[node.tag]
        children = node.children
    else:
        marker = ' '
        children = getattr(node, 'children', ())

    suffix = '/' if node.is_directory else ''
    out.write(f"[{marker}] {prefix}{node.name}{suffix}\n")

    for child in children:
        render_tree(child, out, changed_only, prefix + "    ")


def render_file_diff(diff: FileDiff, out: TextIO) -> None:
    """Print line runs with +/-/space prefixes."""
    if diff.is_binary:
        out.write("Binary files differ or cannot be compared as text\n")
        return

    for change in diff.changes:
        marker = MARKERS[change.tag]
        for line in change.value.splitlines():
            out.write(f"{marker} {line}\n")


# =============================================================================
# Main Function
# =============================================================================

def run(args: CommandLineArgs, out: Optional[TextIO] = None) -> int:
    """
    Execute one comparison and write the result.

    Returns:
        Exit code
    """
    out = out or sys.stdout
    settings_manager = SettingsManager(Path(args.settings_file) if args.settings_file else None)
    settings = settings_manager.settings

    if args.workers is not None:
        settings.scan.max_workers = max(1, args.workers)
    if args.algorithm is not None:
        settings.text.algorithm = args.algorithm

    service = ComparisonService.from_settings(settings)

    if args.mode == StartupMode.FILE_COMPARE:
        diff = service.diff_files(args.left_path, args.right_path)
        if diff is None:
            logging.error(f"Could not diff {args.left_path} and {args.right_path}")
            return EXIT_ERROR

        if args.json_output:
            json.dump(diff.to_dict(), out, indent=2)
            out.write('\n')
        else:
            render_file_diff(diff, out)
        return EXIT_IDENTICAL if diff.is_identical else EXIT_DIFFERENT

    if args.mode == StartupMode.FOLDER_COMPARE:
        left, right = Path(args.left_path), Path(args.right_path)
        if (left.is_file() and right.is_dir()) or (left.is_dir() and right.is_file()):
            logging.error(f"Cannot compare a file with a folder: {left} and {right}")
            return EXIT_ERROR

    tree = service.build_and_compare(args.left_path, args.right_path)
    if tree is None:
        logging.error(f"Could not open {args.left_path}")
        return EXIT_ERROR

    if args.remember:
        for path in (args.left_path, args.right_path):
            if path and Path(path).is_dir():
                settings_manager.add_recent_folder(str(Path(path).absolute()))

    if args.json_output:
        json.dump(tree.to_dict(), out, indent=2)
        out.write('\n')
    else:
        render_tree(tree, out, args.changed_only)

    if isinstance(tree, DiffNode):
        return EXIT_IDENTICAL if not tree.has_differences else EXIT_DIFFERENT
    if args.mode == StartupMode.FOLDER_COMPARE:
        logging.error(f"Could not open {args.right_path} for comparison")
        return EXIT_ERROR
    return EXIT_IDENTICAL


def main(argv: Optional[List[str]] = None) -> int:
    """
    Application main entry point.

    Returns:
        Exit code (0 when identical, 1 when different, 2 on error)
    """
    args = parse_arguments(argv)

    settings_level = None
    if args.log_level is None and args.settings_file:
        settings_level = SettingsManager(Path(args.settings_file)).settings.log_level

    setup_logging(
        args.log_level or settings_level or "WARNING",
        Path(args.log_file) if args.log_file else None
    )
    logging.debug(f"Starting {APP_NAME} v{APP_VERSION}")

    try:
        return run(args)
    except KeyboardInterrupt:
        return EXIT_ERROR


if __name__ == "__main__":
    sys.exit(main())
