"""assocdoc CLI: normalize association documents and run inventory gatherers."""

import argparse
import json
import sys
from importlib.metadata import version as get_version, PackageNotFoundError
from pathlib import Path
from typing import Optional


def _add_association_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--association",
        type=Path,
        required=True,
        help="Path to the raw association JSON (ID, CreateDate, Association, ...)"
    )
    parser.add_argument(
        "--document",
        type=Path,
        default=None,
        help="Path to the document text (overrides the association's Document)"
    )
    parser.add_argument(
        "--parameters",
        type=Path,
        default=None,
        help="Path to a JSON parameter mapping (overrides the association's Parameters)"
    )
    parser.add_argument(
        "--strict",
        action="store_true",
        default=None,
        help="Fail when a legacy parameter matches no step"
    )


def _write_output(content: str, out: Optional[Path], quiet: bool) -> None:
    if out is not None:
        out.parent.mkdir(parents=True, exist_ok=True)
        out.write_text(content + "\n", encoding="utf-8")
        if not quiet:
            print(f"[OK] Written: {out}", file=sys.stderr)
    else:
        print(content)


def main(argv=None):
    """Main CLI entry point for assocdoc commands."""
    try:
        assocdoc_version = get_version("assocdoc")
    except PackageNotFoundError:
        assocdoc_version = "dev"

    parser = argparse.ArgumentParser(
        prog="assocdoc",
        description="assocdoc: Normalize versioned association documents into document state"
    )
    parser.add_argument("--version", action="version", version=f"assocdoc {assocdoc_version}")
    # Common arguments
    parent_parser = argparse.ArgumentParser(add_help=False)
    parent_parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress all non-error output."
    )
    parent_parser.add_argument(
        "--log-format",
        choices=["console", "json"],
        default=None,
        help="Log rendering (defaults to ASSOCDOC_LOG_FORMAT or console)"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # normalize command
    normalize_parser = subparsers.add_parser(
        "normalize",
        help="Normalize a raw association into document state JSON",
        parents=[parent_parser]
    )
    _add_association_arguments(normalize_parser)
    normalize_parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Output file for document state JSON (defaults to stdout)"
    )

    # preflight command
    preflight_parser = subparsers.add_parser(
        "preflight",
        help="Check a raw association and report errors and warnings",
        parents=[parent_parser]
    )
    _add_association_arguments(preflight_parser)
    preflight_parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Output file for the preflight result JSON (defaults to stdout)"
    )

    # detect-version command
    detect_parser = subparsers.add_parser(
        "detect-version",
        help="Print the schema version declared by a document",
        parents=[parent_parser]
    )
    detect_parser.add_argument(
        "--document",
        type=Path,
        required=True,
        help="Path to the document text"
    )

    # gather command group
    gather_parser = subparsers.add_parser(
        "gather",
        help="Inventory gatherers"
    )
    gather_subparsers = gather_parser.add_subparsers(dest="gather_command", help="Available gatherers")

    # gather services command
    gather_services_parser = gather_subparsers.add_parser(
        "services",
        help="Gather Windows service inventory",
        parents=[parent_parser]
    )
    gather_services_parser.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Output file for inventory items JSON (defaults to stdout)"
    )

    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    from .settings import get_settings
    from ._internal.logging import configure_logging

    settings = get_settings()
    if getattr(args, "log_format", None):
        settings = settings.model_copy(update={"log_format": args.log_format})
    if getattr(args, "quiet", False):
        settings = settings.model_copy(update={"log_level": "ERROR"})
    configure_logging(settings)

    if args.command in ("normalize", "preflight"):
        from .api import load_raw_association, normalize, preflight
        from ._internal.canonical_json import canonical_dumps
        from ._internal.logging import bind_context, clear_context

        try:
            raw = load_raw_association(args.association, args.document, args.parameters)
            bind_context(command_id=raw.id, instance_id=raw.association.instance_id)
            if args.command == "normalize":
                document_state = normalize(raw, settings=settings, strict=args.strict)
                _write_output(document_state.canonical_json(), args.out, args.quiet)
                sys.exit(0)

            result = preflight(raw, settings=settings, strict=args.strict)
            _write_output(canonical_dumps(result.model_dump(mode="json")), args.out, args.quiet)
            if not args.quiet:
                status = "OK" if result.ok else "FAILED"
                print(f"[{status}] Preflight complete", file=sys.stderr)
                print(f"  Errors: {len(result.errors)}", file=sys.stderr)
                print(f"  Warnings: {len(result.warnings)}", file=sys.stderr)
            sys.exit(0 if result.ok else 1)
        except FileNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except ValueError as e:
            # NormalizationError and its subclasses are ValueErrors
            code = getattr(e, "code", None)
            prefix = f"{code.value}: " if code is not None else ""
            print(f"Error: {prefix}{e}", file=sys.stderr)
            sys.exit(1)
        finally:
            clear_context()
    elif args.command == "detect-version":
        from .api import detect_schema_version

        try:
            text = args.document.read_text(encoding="utf-8")
            print(detect_schema_version(text).value)
            sys.exit(0)
        except FileNotFoundError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
        except ValueError as e:
            print(f"Error: {e}", file=sys.stderr)
            sys.exit(1)
    elif args.command == "gather":
        if args.gather_command != "services":
            gather_parser.print_help()
            sys.exit(1)

        from .inventory import GatherContext, GathererConfig, ServiceGatherer
        from .inventory.model import dump_items

        gatherer = ServiceGatherer()
        result = gatherer.run(GatherContext(), GathererConfig())
        _write_output(json.dumps(dump_items(result.items), indent=2), args.out, args.quiet)
        if result.error is not None:
            print(f"Error: {result.error}", file=sys.stderr)
            sys.exit(1)
        sys.exit(0)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
