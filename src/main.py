# src/main.py — v3
"""CLI entry point — generate, stats, invalidate commands.

Usage:
    reportcache generate student <input.json> -o <out.pdf> [options]
    reportcache generate semester <input.json> -o <out.pdf> [options]
    reportcache stats
    reportcache invalidate (--student ID | --semester S --year Y | --all --yes)

Storage backend, prefix, TTL and logging come from .env (STORAGE_BACKEND,
LOG_FORMAT, LOG_FILE etc.).
The default in-memory backend forgets everything when the command exits.
"""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from reportcache.version import __version__

logger = logging.getLogger(__name__)


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    try:
        args.settings = _load_settings()
    except Exception as exc:
        _setup_logging(args.verbose)
        logger.error("Invalid configuration: %s", exc)
        return 1
    _setup_logging(args.verbose, args.settings)

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    try:
        return asyncio.run(args.func(args))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        return 130
    except Exception as exc:
        logger.error("Fatal error: %s", exc, exc_info=args.verbose)
        return 1


def _build_parser() -> argparse.ArgumentParser:
    """Build CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="reportcache",
        description=f"reportcache v{__version__} — cached PDF report generation",
    )
    parser.add_argument(
        "--version", action="version", version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable debug logging",
    )

    subparsers = parser.add_subparsers(dest="command")

    # --- generate ---
    p_generate = subparsers.add_parser(
        "generate", help="Generate (or fetch cached) report PDF",
    )
    p_generate.add_argument(
        "kind", choices=["student", "semester"], help="Report kind",
    )
    p_generate.add_argument("input", type=Path, help="Report input JSON file")
    p_generate.add_argument(
        "-o", "--output", type=Path, required=True,
        help="Where to write the PDF",
    )
    p_generate.add_argument(
        "--skip-cache", action="store_true",
        help="Always regenerate (result is still cached)",
    )
    p_generate.add_argument(
        "--ttl", type=int, default=None,
        help="Cache TTL in seconds for this lookup (0 = never expires)",
    )
    p_generate.add_argument(
        "--timeout-ms", type=int, default=None,
        help="Generation timeout in milliseconds",
    )
    p_generate.set_defaults(func=_cmd_generate)

    # --- stats ---
    p_stats = subparsers.add_parser("stats", help="Show cache statistics")
    p_stats.set_defaults(func=_cmd_stats)

    # --- invalidate ---
    p_invalidate = subparsers.add_parser(
        "invalidate", help="Drop cached reports",
    )
    target = p_invalidate.add_mutually_exclusive_group(required=True)
    target.add_argument("--student", default=None, help="Student ID")
    target.add_argument("--semester", default=None, help="Semester label")
    target.add_argument(
        "--all", action="store_true", help="Drop every cached report",
    )
    p_invalidate.add_argument(
        "--year", default=None, help="Academic year, e.g. 2024/2025",
    )
    p_invalidate.add_argument(
        "--yes", action="store_true", help="Confirm --all",
    )
    p_invalidate.set_defaults(func=_cmd_invalidate)

    return parser


def _load_settings():
    from reportcache.config.settings import load_settings

    return load_settings()


def _load_services(settings=None):
    """Build services from .env settings."""
    from reportcache.api.container import create_services

    return create_services(settings or _load_settings())


def _load_report_input(kind: str, path: Path, settings=None):
    """Parse the input JSON and derive its cache parameters.

    teacher_name and school_name fall back to the configured defaults.
    """
    from reportcache.cache.keys import generate_data_hash
    from reportcache.cache.models import CacheKey
    from reportcache.generation.models import SemesterReportInput, StudentReportInput

    raw = json.loads(path.read_text(encoding="utf-8"))
    if settings is not None:
        raw.setdefault("teacher_name", settings.teacher_name)
        raw.setdefault("school_name", settings.school_name)
    if kind == "student":
        report_input = StudentReportInput.model_validate(raw)
        params = CacheKey.for_student(
            report_input.student.id, data_hash=generate_data_hash(report_input)
        )
    else:
        report_input = SemesterReportInput.model_validate(raw)
        params = CacheKey.for_semester(
            report_input.semester,
            report_input.academic_year,
            data_hash=generate_data_hash(report_input),
        )
    return report_input, params


async def _cmd_generate(args: argparse.Namespace) -> int:
    """Generate a report and write it to disk."""
    input_path: Path = args.input
    if not input_path.exists():
        logger.error("File not found: %s", input_path)
        return 1

    report_input, params = _load_report_input(args.kind, input_path, args.settings)
    services = _load_services(args.settings)
    result = await services.report_service.generate_report(
        report_input,
        params,
        skip_cache=args.skip_cache,
        ttl_seconds=args.ttl,
        timeout_ms=args.timeout_ms,
    )

    args.output.parent.mkdir(parents=True, exist_ok=True)
    args.output.write_bytes(result.content)

    source = "cache" if result.from_cache else f"generated in {result.generation_time_ms}ms"
    print("\nReport written:")
    print(f"  Output:     {args.output}")
    print(f"  Cache key:  {result.cache_key}")
    print(f"  Size:       {result.size_bytes} bytes")
    print(f"  Source:     {source}")
    return 0


async def _cmd_stats(args: argparse.Namespace) -> int:
    """Print cache statistics as JSON."""
    services = _load_services(args.settings)
    stats = await services.report_service.get_cache_stats()
    print(stats.model_dump_json(indent=2))
    return 0


async def _cmd_invalidate(args: argparse.Namespace) -> int:
    """Invalidate cached reports by student, semester or everything."""
    if args.semester and not args.year:
        logger.error("--semester requires --year")
        return 2
    if args.all and not args.yes:
        logger.error("Refusing to drop every cached report without --yes")
        return 2

    services = _load_services(args.settings)
    cache = services.cache_manager
    if args.student:
        count = await cache.invalidate_student(args.student)
    elif args.semester:
        count = await cache.invalidate_semester(args.semester, args.year)
    else:
        count = await cache.invalidate_all()

    print(f"Invalidated {count} cached report(s)")
    return 0


def _setup_logging(verbose: bool, settings=None) -> None:
    """Configure logging for CLI usage.

    Format, file and rotation come from settings (LOG_*); -v forces DEBUG.
    Without settings, falls back to plain text on stderr.
    """
    from reportcache.logging.logger import setup_logging, setup_logging_from_settings

    level = "DEBUG" if verbose else None
    if settings is None:
        setup_logging(level=level or "INFO", log_format="text")
    else:
        setup_logging_from_settings(settings, level=level)
    # Quiet noisy libraries
    logging.getLogger("botocore").setLevel(logging.WARNING)
    logging.getLogger("boto3").setLevel(logging.WARNING)


if __name__ == "__main__":
    sys.exit(main())
