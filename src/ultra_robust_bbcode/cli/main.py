"""Main CLI entry point for the ultra-robust-bbcode command-line tool.

Provides rendering (to HTML or plain text) and structural validation of
BBCode files, with JSON configuration files and machine-readable output.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from ultra_robust_bbcode import __version__
from ultra_robust_bbcode.api import BBCodeParser
from ultra_robust_bbcode.hooks import CensorHook
from ultra_robust_bbcode.shared.config import ParserConfig
from ultra_robust_bbcode.shared.logging import get_logger

BBCODE_SUFFIXES = {".bbcode", ".bb", ".txt"}


class CLIConfig:
    """Configuration management for CLI operations."""

    def __init__(self):
        self.parser_config = ParserConfig()
        self.output_format = "html"
        self.censor: List[str] = []

    @classmethod
    def from_file(cls, config_path: Path) -> "CLIConfig":
        """Load CLI configuration from a JSON file.

        Recognised keys: ``preset`` ("trusted" or "untrusted"),
        ``escape_html``, ``output_format`` and ``censor`` (list of words).
        Unreadable files produce a warning and the defaults.
        """
        config = cls()
        if config_path.exists():
            try:
                with config_path.open() as f:
                    data = json.load(f)

                preset = data.get("preset")
                if preset == "trusted":
                    config.parser_config = ParserConfig.trusted_input()
                elif preset == "untrusted":
                    config.parser_config = ParserConfig.untrusted_input()

                if "escape_html" in data:
                    config.parser_config = config.parser_config.override(
                        render__escape_html=bool(data["escape_html"])
                    )
                config.output_format = data.get("output_format", config.output_format)
                config.censor = list(data.get("censor", config.censor))

            except (OSError, ValueError, TypeError) as e:
                print(f"Warning: Could not load config file: {e}", file=sys.stderr)

        return config


class BBCodeProcessor:
    """Core BBCode processing logic for CLI operations."""

    def __init__(self, config: CLIConfig):
        self.config = config
        hooks = [CensorHook(config.censor)] if config.censor else []
        self.parser = BBCodeParser(config=config.parser_config, hooks=hooks)
        self.logger = get_logger(__name__, None, "cli_processor")

    def process_single_file(self, file_path: Path, strip: bool = False) -> Dict[str, Any]:
        """Render a single file and return a JSON-friendly summary."""
        try:
            content = file_path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            self.logger.exception("Failed to read file", extra={"file": str(file_path)})
            return {
                "file": str(file_path),
                "success": False,
                "error": str(e),
                "processing_time_ms": 0
            }

        result = self.parser.strip(content) if strip else self.parser.parse(content)
        return {
            "file": str(file_path),
            "success": result.success,
            "output": result.output,
            "node_count": result.node_count,
            "repair_count": result.repair_count,
            "repairs": result.get_repair_summary(),
            "processing_time_ms": result.performance.processing_time_ms,
            "diagnostics": [
                {
                    "severity": diag.severity.name,
                    "message": diag.message,
                    "component": diag.component
                } for diag in result.diagnostics
            ],
        }

    def find_bbcode_files(self, path: Path, recursive: bool = False) -> Iterator[Path]:
        """Find BBCode files in path.

        An explicitly named file is always processed; directories are
        searched for files with a BBCode-like suffix.
        """
        if path.is_file():
            yield path
        elif path.is_dir():
            pattern = "**/*" if recursive else "*"
            for candidate in sorted(path.glob(pattern)):
                if candidate.is_file() and candidate.suffix.lower() in BBCODE_SUFFIXES:
                    yield candidate

    def batch_process(
        self, paths: List[Path], recursive: bool = False, strip: bool = False
    ) -> List[Dict[str, Any]]:
        """Process every file found under ``paths``."""
        results = []
        for path in paths:
            if not path.exists():
                results.append({
                    "file": str(path),
                    "success": False,
                    "error": "File not found",
                    "processing_time_ms": 0
                })
                continue
            for file_path in self.find_bbcode_files(path, recursive):
                results.append(self.process_single_file(file_path, strip))
        return results


def create_argument_parser() -> argparse.ArgumentParser:
    """Create the main argument parser."""
    parser = argparse.ArgumentParser(
        prog="ultra-robust-bbcode",
        description="Ultra-robust BBCode renderer with structural repair"
    )

    parser.add_argument("--version", action="version", version=__version__)

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # Render command
    render_parser = subparsers.add_parser("render", help="Render BBCode files")
    render_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="BBCode files or directories to render"
    )
    render_parser.add_argument(
        "--recursive", "-r",
        action="store_true",
        help="Recursively process directories"
    )
    render_parser.add_argument(
        "--strip",
        action="store_true",
        help="Remove markup instead of rendering HTML"
    )
    render_parser.add_argument(
        "--format", "-f",
        choices=["html", "json"],
        default=None,
        help="Output format (default: html)"
    )
    render_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Output file (default: stdout)"
    )
    render_parser.add_argument(
        "--no-escape",
        action="store_true",
        help="Do not HTML-escape the input (trusted content only)"
    )
    render_parser.add_argument(
        "--config", "-c",
        type=Path,
        help="Configuration file path"
    )

    # Validate command
    validate_parser = subparsers.add_parser(
        "validate", help="Check BBCode files for structural problems"
    )
    validate_parser.add_argument(
        "paths",
        nargs="+",
        type=Path,
        help="BBCode files to validate"
    )
    validate_parser.add_argument(
        "--format", "-f",
        choices=["json", "text"],
        default="text",
        help="Output format"
    )

    # Global options
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
    """Format processing results for output."""
    if format_type == "json":
        return json.dumps(results, indent=2)

    return "\n".join(result.get("output", "") for result in results if result["success"])


def cmd_render(args: argparse.Namespace) -> int:
    """Handle render command."""
    config = CLIConfig()
    if args.config and args.config.exists():
        config = CLIConfig.from_file(args.config)

    # Apply command-line overrides
    if args.no_escape:
        config.parser_config = config.parser_config.override(render__escape_html=False)
    if args.format:
        config.output_format = args.format

    processor = BBCodeProcessor(config)
    results = processor.batch_process(args.paths, args.recursive, args.strip)

    for result in results:
        if not result["success"]:
            print(f"Failed: {result['file']}: {result.get('error', '')}", file=sys.stderr)

    formatted_output = format_results(results, config.output_format)

    if args.output:
        try:
            args.output.write_text(formatted_output, encoding="utf-8")
            if not args.quiet:
                print(f"Results written to {args.output}", file=sys.stderr)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
    else:
        print(formatted_output)

    if not results:
        return 1

    successful = sum(1 for r in results if r.get("success", False))
    return 0 if successful == len(results) else 1


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command.

    A file is valid when it renders successfully without any structural
    repair.
    """
    processor = BBCodeProcessor(CLIConfig())
    results = []

    for path in args.paths:
        if not path.is_file():
            results.append({
                "file": str(path),
                "valid": False,
                "error": "File not found"
            })
            continue

        result = processor.process_single_file(path)
        validation_result = {
            "file": str(path),
            "valid": result["success"] and result.get("repair_count", 0) == 0,
            "repair_count": result.get("repair_count", 0),
            "warnings": len([d for d in result.get("diagnostics", [])
                             if d.get("severity") == "WARNING"]),
        }

        if not validation_result["valid"]:
            validation_result["error_details"] = [
                d["message"] for d in result.get("diagnostics", [])
                if d.get("severity") in ("WARNING", "ERROR", "CRITICAL")
            ][:5]
            if "error" in result:
                validation_result["error_details"].append(result["error"])

        results.append(validation_result)

    if args.format == "json":
        print(json.dumps(results, indent=2))
    else:
        valid_count = sum(1 for r in results if r.get("valid", False))
        print(f"Validated {len(results)} files, {valid_count} valid")
        print("-" * 50)

        for result in results:
            status = "OK  " if result.get("valid", False) else "FAIL"
            print(f"{status} {result['file']}")

            if "error" in result:
                print(f"   Error: {result['error']}")
            for error in result.get("error_details", [])[:3]:
                print(f"   Problem: {error}")

    valid_count = sum(1 for r in results if r.get("valid", False))
    return 0 if valid_count == len(results) else 1


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = create_argument_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        return 1

    # Set up logging verbosity
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    elif args.quiet:
        logging.basicConfig(level=logging.ERROR)

    try:
        if args.command == "render":
            return cmd_render(args)
        elif args.command == "validate":
            return cmd_validate(args)
        else:
            print(f"Unknown command: {args.command}", file=sys.stderr)
            return 1

    except KeyboardInterrupt:
        print("\nOperation interrupted by user", file=sys.stderr)
        return 130  # Standard exit code for SIGINT


if __name__ == "__main__":
    sys.exit(main())
