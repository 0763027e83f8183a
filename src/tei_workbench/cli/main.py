"""Main CLI entry point for the tei-workbench command-line tool.

Runs the syntax check, the profile check or the canonical formatter over
files on disk, reporting in text or JSON.
"""

import argparse
import json
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from tei_workbench import __version__
from tei_workbench.api.operations import check_structure, check_syntax, format_xml
from tei_workbench.shared.config import ConfigError, EditorConfig
from tei_workbench.shared.logging import configure_logging, get_logger
from tei_workbench.shared.messages import SUPPORTED_LOCALES

DEFAULT_LOGGING_LEVEL = "WARNING"


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self) -> None:
        self.editor_config = EditorConfig.default()
        self.output_format = "text"
        self.logging_level = DEFAULT_LOGGING_LEVEL
        self.quiet = False

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON file.

        The file holds an ``EditorConfig`` dictionary, optionally with an
        ``output_format`` key. A missing file leaves the defaults in place.
        The log level follows ``global_.logging_level`` only when the file
        sets it; otherwise the command line keeps logging at WARNING.
        """
        config = cls()
        if config_path.exists():
            try:
                data = json.loads(config_path.read_text(encoding="utf-8"))
                if not isinstance(data, dict):
                    raise ValueError("configuration must be a JSON object")
                output_format = data.pop("output_format", config.output_format)
                editor_config = EditorConfig.from_dict(data)
            except (OSError, ValueError, ConfigError) as e:
                print(f"Warning: Could not load config file: {e}", file=sys.stderr)
                return config
            config.output_format = output_format
            config.editor_config = editor_config
            if "logging_level" in data.get("global_", {}):
                config.logging_level = editor_config.global_.logging_level
        return config


class DocumentProcessor:
    """Runs one workbench operation over files."""

    def __init__(self, config: CLIConfig) -> None:
        self.config = config
        self.logger = get_logger(__name__, None, "cli_processor")

    def _read(self, file_path: Path) -> str:
        return file_path.read_text(encoding="utf-8")

    def check_file(self, file_path: Path, structure: bool = False) -> Dict[str, Any]:
        """Check a single file and return a result dictionary."""
        try:
            text = self._read(file_path)
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning("Failed to read file", extra={"file": str(file_path)})
            return {"file": str(file_path), "success": False, "error": str(e), "messages": []}

        check = check_structure if structure else check_syntax
        report = check(text, self.config.editor_config)
        return {
            "file": str(file_path),
            "success": report.success,
            "messages": [message.to_dict() for message in report.messages],
        }

    def format_file(self, file_path: Path) -> Dict[str, Any]:
        """Format a single file and return a result dictionary."""
        try:
            text = self._read(file_path)
        except (OSError, UnicodeDecodeError) as e:
            self.logger.warning("Failed to read file", extra={"file": str(file_path)})
            return {"file": str(file_path), "success": False, "error": str(e)}

        result = format_xml(text, self.config.editor_config)
        if not result.success:
            return {
                "file": str(file_path),
                "success": False,
                "error": result.error.message,
                "detail": result.error.detail,
            }
        return {
            "file": str(file_path),
            "success": True,
            "output": result.formatted_output,
            "changed": result.formatted_output != text,
        }


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="tei-workbench",
        description="Check and canonically format TEI XML documents"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Syntax command
    syntax_parser = subparsers.add_parser("syntax", help="Check XML well-formedness")
    syntax_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="XML files to check"
    )
    syntax_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default=None,
        help="Output format (default: text)"
    )

    # Validate command
    validate_parser = subparsers.add_parser("validate", help="Check files against the profile")
    validate_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="XML files to validate"
    )
    validate_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default=None,
        help="Output format (default: text)"
    )

    # Format command
    format_parser = subparsers.add_parser("format", help="Canonically reformat a file")
    format_parser.add_argument(
        "path",
        type=Path,
        help="XML file to format"
    )
    destination = format_parser.add_mutually_exclusive_group()
    destination.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    destination.add_argument(
        "--in-place", "-i",
        action="store_true",
        help="Rewrite the input file"
    )

    # Global options
    parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path"
    )
    parser.add_argument(
        "--locale",
        choices=list(SUPPORTED_LOCALES),
        help="Language of reported messages"
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Verbose output"
    )
    parser.add_argument(
        "--quiet", "-q",
        action="store_true",
        help="Quiet output"
    )

    return parser


def format_results(results: List[Dict[str, Any]], format_type: str) -> str:
    """Format check results for output."""
    if format_type == "json":
        return json.dumps(results, indent=2, ensure_ascii=False)

    if not results:
        return "No results to display."

    lines = []
    passed = sum(1 for r in results if r.get("success", False))
    lines.append(f"Checked {len(results)} files, {passed} passed")
    lines.append("-" * 60)

    for result in results:
        status = "✓" if result.get("success", False) else "✗"
        lines.append(f"{status} {result['file']}")
        if "error" in result:
            lines.append(f"   Error: {result['error']}")
        for message in result.get("messages", []):
            lines.append(f"   {message['kind'].capitalize()}: {message['text']}")

    return "\n".join(lines)


def _load_config(args: argparse.Namespace) -> CLIConfig:
    config = CLIConfig()
    if args.config:
        config = CLIConfig.from_file(args.config)
    if args.locale:
        config.editor_config = config.editor_config.override(global___locale=args.locale)
    if args.verbose:
        config.logging_level = "DEBUG"
    elif args.quiet:
        config.logging_level = "ERROR"
    config.quiet = args.quiet
    return config


def cmd_check(args: argparse.Namespace, config: CLIConfig, structure: bool) -> int:
    """Handle syntax and validate commands."""
    if args.format:
        config.output_format = args.format

    processor = DocumentProcessor(config)
    results = [processor.check_file(path, structure=structure) for path in args.paths]

    if not config.quiet or config.output_format == "json":
        print(format_results(results, config.output_format))

    passed = sum(1 for r in results if r.get("success", False))
    return 0 if results and passed == len(results) else 1


def cmd_format(args: argparse.Namespace, config: CLIConfig) -> int:
    """Handle format command."""
    processor = DocumentProcessor(config)
    result = processor.format_file(args.path)

    if not result["success"]:
        print(f"Error: {result['error']}", file=sys.stderr)
        if result.get("detail"):
            print(f"   {result['detail']}", file=sys.stderr)
        return 1

    target = args.path if args.in_place else args.output
    if target is None:
        sys.stdout.write(result["output"])
        return 0

    try:
        target.write_text(result["output"], encoding="utf-8")
    except OSError as e:
        print(f"Error writing output: {e}", file=sys.stderr)
        return 1
    if not config.quiet:
        print(f"Formatted {args.path} -> {target}", file=sys.stderr)
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    config = _load_config(args)
    configure_logging(config.logging_level)

    # Route to appropriate command handler
    try:
        if args.command == "syntax":
            return cmd_check(args, config, structure=False)
        elif args.command == "validate":
            return cmd_check(args, config, structure=True)
        elif args.command == "format":
            return cmd_format(args, config)
        else:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
