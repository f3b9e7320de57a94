"""CLI entry point for the LinkedIn lead generator."""

import argparse
import asyncio
import logging
import signal
import sqlite3
import sys
from typing import Any

from pydantic import ValidationError

from src.core.config import Settings
from src.core.db import get_preset, init_db, list_presets, save_preset, set_company_blacklisted
from src.core.schemas import SearchSpecification
from src.export import ExportError, build_sink
from src.platforms.linkedin.adapter import open_linkedin_extractor
from src.queue.dispatcher import JobDispatcher
from src.service.jobs import (
    CancelRejectedError,
    JobNotFoundError,
    JobView,
    build_job_runner,
    cancel_job,
    check_health,
    export_job,
    get_job_status,
    list_jobs,
    submit_job,
)

CRITERIA_FIELDS = (
    "keywords", "location", "experience", "job_type",
    "industry", "company_size", "exclude_agencies", "max_pages",
)


def _add_criteria_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("--keywords", help="Job search keywords, e.g. 'python developer'")
    parser.add_argument("--location", help="Search location, e.g. 'London'")
    parser.add_argument("--experience", choices=["entry", "mid", "senior"])
    parser.add_argument(
        "--job-type",
        dest="job_type",
        choices=["full-time", "part-time", "contract", "temporary", "internship", "volunteer"],
    )
    parser.add_argument("--industry")
    parser.add_argument("--company-size", dest="company_size")
    parser.add_argument(
        "--include-agencies",
        dest="exclude_agencies",
        action="store_const",
        const=False,
        default=None,
        help="Keep listings posted by recruitment agencies",
    )
    parser.add_argument(
        "--max-pages",
        dest="max_pages",
        type=int,
        help="Result pages to scan, 1-20 (default: 5)",
    )


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        description="LinkedIn lead generator - find hiring companies and export qualified leads",
    )
    parser.add_argument(
        "--config",
        default="config/settings.yaml",
        help="Path to settings YAML file (default: config/settings.yaml)",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose (DEBUG) logging",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    # --- submit ---
    submit_parser = subparsers.add_parser("submit", help="Queue a lead generation job")
    _add_criteria_args(submit_parser)
    submit_parser.add_argument(
        "--preset",
        help="Start from a saved search preset; explicit flags override it",
    )

    # --- status / cancel / export ---
    status_parser = subparsers.add_parser("status", help="Show a job's status and progress")
    status_parser.add_argument("job_id")
    cancel_parser = subparsers.add_parser("cancel", help="Cancel a pending or running job")
    cancel_parser.add_argument("job_id")
    export_parser = subparsers.add_parser("export", help="Re-run the export of a finished job")
    export_parser.add_argument("job_id")

    # --- list ---
    list_parser = subparsers.add_parser("list", help="List active and recent jobs")
    list_parser.add_argument("--limit", type=int, default=50)
    list_parser.add_argument("--completed-limit", dest="completed_limit", type=int, default=10)

    # --- worker ---
    subparsers.add_parser("worker", help="Run queued jobs until interrupted")

    # --- preset save|list ---
    preset_parser = subparsers.add_parser("preset", help="Manage saved search presets")
    preset_sub = preset_parser.add_subparsers(dest="preset_command", required=True)
    preset_save = preset_sub.add_parser("save", help="Save search criteria under a name")
    preset_save.add_argument("name")
    _add_criteria_args(preset_save)
    preset_save.add_argument("--description", default="")
    preset_save.add_argument("--default", dest="is_default", action="store_true",
                             help="Use this preset when submit gets no criteria")
    preset_sub.add_parser("list", help="List saved presets")

    # --- blacklist ---
    blacklist_parser = subparsers.add_parser("blacklist", help="Never generate leads for a company")
    blacklist_parser.add_argument("name")
    blacklist_parser.add_argument("--remove", action="store_true", help="Lift the blacklist")

    # --- health ---
    subparsers.add_parser("health", help="Check database connectivity")

    return parser.parse_args(argv)


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def criteria_from_args(args: argparse.Namespace, base: dict[str, Any] | None = None) -> dict[str, Any]:
    """Overlay the criteria flags that were given on top of base."""
    criteria = dict(base or {})
    for field in CRITERIA_FIELDS:
        value = getattr(args, field, None)
        if value is not None:
            criteria[field] = value
    return criteria


def print_job(view: JobView) -> None:
    print(f"Job {view.id}: {view.status.value} ({view.progress}%)")
    if view.search is not None:
        print(f"  Search: '{view.search.keywords}' in '{view.search.location}'")
    print(f"  Listings found: {view.total_listings_found}")
    print(f"  Leads generated: {view.leads_generated}")
    if view.queue_state:
        print(f"  Queue: {view.queue_state} (attempts: {view.attempts_made})")
    if view.error_message:
        print(f"  Error: {view.error_message}")
    if view.completed_at:
        print(f"  Finished: {view.completed_at:%Y-%m-%d %H:%M:%S}")


def cmd_submit(args: argparse.Namespace, conn: sqlite3.Connection, settings: Settings) -> None:
    preset = get_preset(conn, args.preset)
    if args.preset and preset is None:
        msg = f"Preset not found: {args.preset}"
        raise LookupError(msg)
    base = preset.criteria.model_dump() if preset is not None and (args.preset or not args.keywords) else None
    dispatcher = JobDispatcher(conn, settings.queue)
    result = submit_job(conn, dispatcher, criteria_from_args(args, base))
    print(f"{result.message}: {result.job_id} ({result.status.value})")


def cmd_status(args: argparse.Namespace, conn: sqlite3.Connection, settings: Settings) -> None:
    view = get_job_status(conn, JobDispatcher(conn, settings.queue), args.job_id)
    if view is None:
        msg = f"Job not found: {args.job_id}"
        raise JobNotFoundError(msg)
    print_job(view)


def cmd_cancel(args: argparse.Namespace, conn: sqlite3.Connection, settings: Settings) -> None:
    view = cancel_job(conn, JobDispatcher(conn, settings.queue), args.job_id)
    print(f"Job {view.id} cancelled ({view.leads_generated} leads kept)")


def cmd_list(args: argparse.Namespace, conn: sqlite3.Connection, settings: Settings) -> None:
    buckets = list_jobs(
        conn, JobDispatcher(conn, settings.queue), args.limit, args.completed_limit,
    )
    print(f"Active jobs: {len(buckets.active)}")
    for view in buckets.active:
        print(f"  {view.id}  {view.status.value:<9} {view.progress:>3}%  "
              f"'{view.search.keywords if view.search else ''}'")
    print(f"Recent finished jobs: {len(buckets.completed)}")
    for view in buckets.completed:
        print(f"  {view.id}  {view.status.value:<9} {view.leads_generated} leads")


def cmd_export(args: argparse.Namespace, conn: sqlite3.Connection, settings: Settings) -> None:
    sink = build_sink(settings.export)
    destination = asyncio.run(export_job(conn, sink, args.job_id))
    if destination is None:
        print(f"Job {args.job_id} has no leads to export")
    else:
        print(f"Exported to {destination.url}")


def cmd_preset(args: argparse.Namespace, conn: sqlite3.Connection, settings: Settings) -> None:
    if args.preset_command == "save":
        criteria = SearchSpecification.model_validate(criteria_from_args(args))
        preset = save_preset(
            conn, args.name, criteria,
            description=args.description, is_default=args.is_default,
        )
        default = " (default)" if preset.is_default else ""
        print(f"Saved preset '{preset.name}'{default}")
        return

    presets = list_presets(conn)
    if not presets:
        print("No presets saved")
    for preset in presets:
        default = " *" if preset.is_default else ""
        print(f"  {preset.name}{default}: '{preset.criteria.keywords}' in "
              f"'{preset.criteria.location}'  {preset.description}")


def cmd_blacklist(args: argparse.Namespace, conn: sqlite3.Connection, settings: Settings) -> None:
    affected = set_company_blacklisted(conn, args.name, not args.remove)
    if args.remove and affected == 0:
        print(f"Company '{args.name}' was not blacklisted")
        return
    state = "no longer blacklisted" if args.remove else "blacklisted"
    print(f"Company '{args.name}' is {state}")


def cmd_health(args: argparse.Namespace, conn: sqlite3.Connection, settings: Settings) -> None:
    report = check_health(conn)
    print(f"Status: {report.status}")
    print(f"Database: {report.database} ({report.jobs} jobs)")
    if report.status != "ok":
        sys.exit(1)


async def run_worker(conn: sqlite3.Connection, settings: Settings) -> None:
    """Work the queue until SIGINT/SIGTERM; the job in progress is finished first."""
    sink = build_sink(settings.export)
    runner = build_job_runner(conn, settings, sink, open_linkedin_extractor)
    dispatcher = JobDispatcher(conn, settings.queue, runner)

    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop.set)

    await dispatcher.run_forever(stop)


COMMANDS = {
    "submit": cmd_submit,
    "status": cmd_status,
    "cancel": cmd_cancel,
    "list": cmd_list,
    "export": cmd_export,
    "preset": cmd_preset,
    "blacklist": cmd_blacklist,
    "health": cmd_health,
}


def main(argv: list[str] | None = None) -> None:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        settings = Settings.load(args.config)
    except (FileNotFoundError, ValueError) as e:
        print(f"Error loading config: {e}", file=sys.stderr)
        sys.exit(1)

    conn = init_db(settings.database.path)
    try:
        if args.command == "worker":
            asyncio.run(run_worker(conn, settings))
        else:
            COMMANDS[args.command](args, conn, settings)
    except ValidationError as e:
        print(f"Invalid search criteria:\n{e}", file=sys.stderr)
        sys.exit(2)
    except (LookupError, CancelRejectedError, ExportError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)
    finally:
        conn.close()


if __name__ == "__main__":
    main()
