"""CLI entry point for pagecore.

This module acts as the central entry point for the project's CLI tools.
It delegates commands to the library: create, validate, edit and compile
page documents, export schemas, and run the test suite.
"""

import argparse
import json
import subprocess
import sys
from pathlib import Path

from dotenv import load_dotenv

from pagecore.config import EnvVar, get_default_adapter_name, get_environment, get_log_level
from pagecore.core import get_logger, setup_logging

# Load environment variables from .env file
load_dotenv()

logger = get_logger("cli")


# =============================================================================
# I/O helpers
# =============================================================================


def _read_text(source: str) -> str:
    """Read a file path, or stdin for "-"."""
    if source == "-":
        return sys.stdin.read()
    return Path(source).read_text(encoding="utf-8")


def _write_text(text: str, output: Path | None) -> None:
    """Write to ``output`` or stdout."""
    if output is None:
        sys.stdout.write(text)
        if not text.endswith("\n"):
            sys.stdout.write("\n")
        return
    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(text, encoding="utf-8")
    logger.info(f"Wrote {output}")


def _add_output_argument(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--output",
        "-o",
        type=Path,
        default=None,
        help="Output file path (prints to stdout if not specified)",
    )


# =============================================================================
# Document Commands
# =============================================================================


def cmd_new(args: argparse.Namespace) -> int:
    """Create an empty document."""
    from pagecore.ir import dump_document, new_document

    state = None
    if args.state:
        try:
            state = json.loads(args.state)
        except json.JSONDecodeError as e:
            logger.error(f"--state is not valid JSON: {e}")
            return 1
        if not isinstance(state, dict):
            logger.error("--state must be a JSON object")
            return 1

    version = get_environment(EnvVar.PAGECORE_DOCUMENT_VERSION)
    doc = new_document(title=args.title, lang=args.lang, state=state, version=version)
    _write_text(dump_document(doc), args.output)
    return 0


def cmd_validate(args: argparse.Namespace) -> int:
    """Validate a document and print its diagnostics."""
    from pagecore.ir import DocumentError, load_document
    from pagecore.validation import has_errors, validate_document

    try:
        doc = load_document(_read_text(args.document))
    except (OSError, UnicodeDecodeError, DocumentError) as e:
        logger.error(f"Cannot load document: {e}")
        return 1

    diagnostics = validate_document(doc)
    if args.json:
        payload = [
            {"severity": d.severity.value, "path": d.path, "message": d.message, "code": d.code}
            for d in diagnostics
        ]
        _write_text(json.dumps(payload, indent=2), None)
    else:
        for diagnostic in diagnostics:
            print(diagnostic)
        errors = sum(1 for d in diagnostics if d.is_error)
        print(f"{errors} error(s), {len(diagnostics) - errors} warning(s)")

    return 1 if has_errors(diagnostics) else 0


def cmd_apply(args: argparse.Namespace) -> int:
    """Apply an op batch to a document."""
    from pagecore.ir import DocumentError, dump_document, load_document
    from pagecore.ops import apply_core_ops
    from pagecore.schema import hydrate_core_ops

    try:
        doc = load_document(_read_text(args.document))
        ops = json.loads(_read_text(args.ops))
        if args.hydrate:
            ops = hydrate_core_ops(ops)
        updated = apply_core_ops(doc, ops)
    except (OSError, UnicodeDecodeError, DocumentError, TypeError, json.JSONDecodeError) as e:
        logger.error(f"Apply failed: {e}")
        return 1

    _write_text(dump_document(updated), args.output)
    return 0


def cmd_compile(args: argparse.Namespace) -> int:
    """Compile a document to HTML."""
    from pagecore.compiler import compile_with_report
    from pagecore.ir import DocumentError, load_document

    adapter = args.adapter or get_default_adapter_name()
    try:
        doc = load_document(_read_text(args.document))
        result = compile_with_report(doc, adapter)
    except (OSError, UnicodeDecodeError, DocumentError) as e:
        logger.error(f"Compile failed: {e}")
        return 1
    except KeyError as e:
        logger.error(str(e.args[0]) if e.args else str(e))
        return 1

    _write_text(result.html, args.output)
    logger.info(
        f"Compiled with '{adapter}' (runtime: {'yes' if result.runtime_embedded else 'no'}, "
        f"presets: {', '.join(result.presets_used) or 'none'})"
    )
    return 0


def handle_document_command(command: str, argv: list[str]) -> int:
    """Handle new / validate / apply / compile."""
    parser = argparse.ArgumentParser(prog=f"python . {command}")

    if command == "new":
        parser.description = "Create an empty page document"
        parser.add_argument("--title", "-t", type=str, default=None, help="Page title")
        parser.add_argument("--lang", type=str, default=None, help="Page language (e.g. en)")
        parser.add_argument(
            "--state", type=str, default=None, help="Initial state as a JSON object"
        )
        _add_output_argument(parser)
        parser.set_defaults(func=cmd_new)
    elif command == "validate":
        parser.description = "Validate a page document"
        parser.add_argument("document", type=str, help="Document JSON path, or - for stdin")
        parser.add_argument("--json", action="store_true", help="Print diagnostics as JSON")
        parser.set_defaults(func=cmd_validate)
    elif command == "apply":
        parser.description = "Apply a JSON array of ops to a document"
        parser.add_argument("document", type=str, help="Document JSON path")
        parser.add_argument("ops", type=str, help="Ops JSON path, or - for stdin")
        parser.add_argument(
            "--hydrate",
            action="store_true",
            help="Ops use the generation wire form (JSON-encoded string fields)",
        )
        _add_output_argument(parser)
        parser.set_defaults(func=cmd_apply)
    else:
        parser.description = "Compile a document to a standalone HTML page"
        parser.add_argument("document", type=str, help="Document JSON path, or - for stdin")
        parser.add_argument(
            "--adapter",
            "-a",
            type=str,
            default=None,
            help="Adapter name (default: PAGECORE_ADAPTER)",
        )
        _add_output_argument(parser)
        parser.set_defaults(func=cmd_compile)

    args = parser.parse_args(argv)
    return args.func(args)


# =============================================================================
# Schema and Adapter Commands
# =============================================================================


def cmd_schema(args: argparse.Namespace) -> int:
    """Print a schema export."""
    from pagecore.schema import export_document_schema, export_llm_schema, export_ops_schema

    exports = {
        "ops": export_ops_schema,
        "document": export_document_schema,
        "llm": export_llm_schema,
    }
    _write_text(json.dumps(exports[args.kind](), indent=2), args.output)
    return 0


def handle_schema_command(argv: list[str]) -> int:
    """Handle schema exports."""
    parser = argparse.ArgumentParser(
        prog="python . schema",
        description="Export JSON schemas for builders and tooling",
    )
    parser.add_argument(
        "kind",
        choices=["ops", "document", "llm"],
        help="ops: generation schema, document: full IR schema, llm: prompt bundle",
    )
    _add_output_argument(parser)
    args = parser.parse_args(argv)
    return cmd_schema(args)


def cmd_adapters(_argv: list[str]) -> int:
    """List registered adapters."""
    from pagecore.adapters import list_adapters

    default = get_default_adapter_name()
    for name in list_adapters():
        marker = " (default)" if name == default else ""
        print(f"{name}{marker}")
    return 0


# =============================================================================
# Development Commands
# =============================================================================


def cmd_test(extra_args: list[str]) -> int:
    """Run pytest with provided arguments and test tier options.

    Usage:
        python . dev test                # Run all tests
        python . dev test --unit         # Run only unit tests
        python . dev test --integration  # Run CLI subprocess tests
        python . dev test -k "compile"   # Run tests matching pattern
    """
    tier_markers = {
        "--unit": ["-m", "unit"],
        "--integration": ["-m", "integration"],
        "--all": [],
    }

    pytest_args: list[str] = []
    remaining_args: list[str] = []

    for arg in extra_args:
        if arg in tier_markers:
            pytest_args.extend(tier_markers[arg])
        else:
            remaining_args.append(arg)

    cmd = [sys.executable, "-m", "pytest", *pytest_args, *remaining_args]
    logger.info(f"Running: {' '.join(cmd)}")

    try:
        return subprocess.call(cmd)
    except KeyboardInterrupt:
        return 130


def handle_dev_command(argv: list[str]) -> int:
    """Handle development workflow commands.

    Usage:
        python . dev test [args]       # Run pytest
    """
    if not argv:
        print("Development workflow commands")
        print("\nUsage: python . dev {command} [args]")
        print("\nCommands:")
        print("  test       Run pytest with tier options")
        print("\nExamples:")
        print("  python . dev test --unit           # Fast unit tests")
        print("  python . dev test --integration    # CLI tests")
        return 1

    subcommand = argv[0]
    subargs = argv[1:]

    dev_commands = {
        "test": lambda: cmd_test(subargs),
    }

    if subcommand in dev_commands:
        return dev_commands[subcommand]()

    logger.error(f"Unknown dev command: {subcommand}")
    return handle_dev_command([])


# =============================================================================
# Main
# =============================================================================


def show_help() -> None:
    """Display CLI help message."""
    print("Usage: python . {command} [args]")
    print("\n=== Documents ===")
    print("  new        Create an empty page document")
    print("  validate   Report diagnostics for a document")
    print("  apply      Apply a batch of ops to a document")
    print("  compile    Compile a document to HTML")
    print("\n=== Tooling ===")
    print("  schema     Export ops, document or LLM schemas")
    print("  adapters   List compiler adapters")
    print("\n=== Development ===")
    print("  dev        Development workflows (test)")
    print("\nExamples:")
    print("  python . new --title 'Landing' -o page.json")
    print("  python . apply page.json ops.json --hydrate -o page.json")
    print("  python . validate page.json")
    print("  python . compile page.json --adapter none -o page.html")
    print("  python . schema ops")
    print("  python . dev test --unit")


def main() -> int:
    """Main entry point for the CLI."""
    if len(sys.argv) < 2:
        show_help()
        return 1

    command = sys.argv[1]
    rest_args = sys.argv[2:]

    if command in ("-h", "--help"):
        show_help()
        return 0

    if command == "dev":
        return handle_dev_command(rest_args)

    commands = {
        "new": lambda: handle_document_command("new", rest_args),
        "validate": lambda: handle_document_command("validate", rest_args),
        "apply": lambda: handle_document_command("apply", rest_args),
        "compile": lambda: handle_document_command("compile", rest_args),
        "schema": lambda: handle_schema_command(rest_args),
        "adapters": lambda: cmd_adapters(rest_args),
    }

    if command in commands:
        setup_logging(get_log_level())
        return commands[command]()

    logger.error(f"Unknown command: {command}")
    show_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
