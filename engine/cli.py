"""
featuregen command line.
Reads declaration records from JSON, generates the modules and writes them to disk.
"""
import argparse
import json
import sys
from pathlib import Path
from typing import Any, List, Optional

from pydantic import ValidationError

from config import settings
from core.declarations import DeclarationRecord, GrpcInterfaceRecord
from core.diagnostics import NamingCollisionError
from core.grpc_stubs import GrpcStubGenerator
from core.output import Output
from core.pipeline import FeatureToggleGenerator, GenerationResult
from utils.logger import Logger

EXIT_OK = 0
EXIT_DIAGNOSTICS = 1
EXIT_FAILED = 2


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(prog="featuregen", description="featuregen - Feature toggle code generator")
    subparsers = parser.add_subparsers(dest="command", required=True)

    toggles = subparsers.add_parser("toggles", help="Generate the feature toggle package")
    toggles.add_argument("records", help="JSON file with a list of declaration records")
    toggles.add_argument(
        "--package",
        default=settings.DEFAULT_PACKAGE,
        help="Package for declarations without one (default: DEFAULT_PACKAGE)"
    )

    grpc = subparsers.add_parser("grpc", help="Generate gRPC interface implementations")
    grpc.add_argument("records", help="JSON file with a list of gRPC interface records")
    grpc.add_argument(
        "--package",
        default=settings.DEFAULT_PACKAGE,
        help="Package for interfaces without one (default: DEFAULT_PACKAGE)"
    )

    for command in (toggles, grpc):
        command.add_argument(
            "--out",
            default=settings.OUTPUT_DIR,
            help="Output root directory (default: OUTPUT_DIR)"
        )
        command.add_argument(
            "--dry-run",
            action="store_true",
            help="List the generated files without writing them"
        )

    serve = subparsers.add_parser("serve", help="Run the HTTP API")
    serve.add_argument("--host", default="0.0.0.0")
    serve.add_argument("--port", type=int, default=8000)
    serve.add_argument("--reload", action="store_true")

    return parser.parse_args(argv)


def load_records(path: str) -> List[Any]:
    """
    Load a JSON list of records; an object with a single list value
    ('declarations' or 'interfaces') is accepted as well.
    """
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    if isinstance(data, dict):
        data = data.get("declarations", data.get("interfaces"))
    if not isinstance(data, list):
        raise ValueError(f"{path} does not contain a list of records")
    return data


def _report(result: GenerationResult, output: Output, out: str, dry_run: bool) -> int:
    for diagnostic in result.diagnostics:
        print(str(diagnostic), file=sys.stderr)

    if dry_run:
        for generated in result.files:
            print(generated.path)
    else:
        output.write(result.files, out)

    return EXIT_DIAGNOSTICS if result.has_errors else EXIT_OK


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point for the command line."""
    args = parse_args(argv)
    logger = Logger(debug_mode=settings.DEBUG_LOGGING, level=settings.LOG_LEVEL)

    if args.command == "serve":
        import uvicorn
        uvicorn.run("api:app", host=args.host, port=args.port, reload=args.reload)
        return EXIT_OK

    try:
        raw_records = load_records(args.records)
        if args.command == "toggles":
            records = [DeclarationRecord.model_validate(raw) for raw in raw_records]
        else:
            records = [GrpcInterfaceRecord.model_validate(raw) for raw in raw_records]
    except (OSError, ValueError, ValidationError) as e:
        print(f"Error reading {args.records}: {e}", file=sys.stderr)
        logger.log_error(str(e), "cli", {"records": args.records})
        return EXIT_FAILED

    if args.command == "toggles":
        generator = FeatureToggleGenerator(logger, args.package, settings.GENERATION_WORKERS)
    else:
        generator = GrpcStubGenerator(
            logger,
            default_package=args.package,
            client_module=settings.GRPC_CLIENT_MODULE,
            interface_suffix=settings.GRPC_INTERFACE_SUFFIX,
            client_suffix=settings.GRPC_CLIENT_SUFFIX
        )

    try:
        result = generator.generate(records)
    except NamingCollisionError as e:
        for diagnostic in e.diagnostics:
            print(str(diagnostic), file=sys.stderr)
        logger.log_error(str(e), "cli")
        return EXIT_FAILED

    try:
        return _report(result, Output(logger), args.out, args.dry_run)
    except OSError as e:
        print(f"Error writing to {args.out}: {e}", file=sys.stderr)
        return EXIT_FAILED


if __name__ == "__main__":
    sys.exit(main())
