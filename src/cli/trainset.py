# =============================================================================
# src/cli/trainset.py - Training-Set CLI
# =============================================================================
#
# Operator command line for one bot's training set. Every invocation selects
# a bot (--bot), loads its documents, runs one command, and exits.
#
# Supported subcommands:
#
#   list      - Show the documents (and the retrain schedule banner)
#   add-file  - Upload one or more PDF / Word / TXT / CSV files
#   add-text  - Add a text document
#   add-qa    - Add a question/answer pair
#   scrape    - Scrape a single page, or crawl a whole site with --full-site
#   video     - Extract a YouTube transcript
#   retrain   - Re-ingest documents by id, or --all
#   delete    - Delete documents by id, or --all (asks first unless --yes)
#   schedule  - show / set the recurring retrain schedule
#
# Notifications are printed as they are pushed: successes on stdout,
# errors on stderr. Exit code is 0 on success and 1 on any failure.
#
# Usage examples:
#   python -m src.cli --bot 7 list
#   python -m src.cli --bot 7 add-file handbook.pdf faq.csv
#   python -m src.cli --bot 7 scrape https://example.com --full-site
#   python -m src.cli --bot 7 delete 12 13 --yes
#   python -m src.cli --bot 7 schedule set --frequency daily --time 04:30
# =============================================================================

"""Standalone CLI for managing a bot's training set.

Usage::

    python -m src.cli --bot 7 list
    python -m src.cli --bot 7 add-text --title "Opening hours" --content "9-5"
    python -m src.cli --bot 7 retrain --all
    python -m src.cli --bot 7 schedule set --frequency weekly --time 02:00
"""

from __future__ import annotations

import argparse
import asyncio
import mimetypes
import sys
from pathlib import Path

from src.config.loader import load_settings
from src.config.settings import Settings
from src.interfaces.content_backend import IContentBackend
from src.models.notification import Notification
from src.models.submission import UploadedFile
from src.services.bulk_coordinator import bulk_delete_prompt, single_delete_prompt
from src.services.document_formatter import DocumentFormatter
from src.services.workspace import TrainingSetWorkspace
from src.utils.errors import (
    DispatchError,
    LoadError,
    OperationInProgressError,
    TrainingSetError,
    ValidationError,
)
from src.utils.logging import configure_logging


def _print_notification(notification: Notification) -> None:
    if notification.is_error:
        print(f"Error: {notification.message}", file=sys.stderr)
    else:
        print(notification.message)


def _confirm(prompt: str) -> bool:
    answer = input(f"{prompt} [y/N] ").strip().lower()
    return answer in ("y", "yes")


def _read_file(path: str) -> UploadedFile:
    file_path = Path(path)
    media_type, _ = mimetypes.guess_type(file_path.name)
    return UploadedFile(
        filename=file_path.name,
        content=file_path.read_bytes(),
        media_type=media_type,
    )


# ---------------------------------------------------------------------------
# Subcommand handlers
# ---------------------------------------------------------------------------


async def _handle_list(args: argparse.Namespace, workspace: TrainingSetWorkspace) -> int:
    schedule = await workspace.open_schedule()
    formatter = DocumentFormatter()
    for line in formatter.format_table(
        workspace.registry.documents,
        workspace.registry.selected_ids,
        schedule,
    ):
        print(line)
    return 0


async def _handle_add_file(args: argparse.Namespace, workspace: TrainingSetWorkspace) -> int:
    try:
        files = [_read_file(path) for path in args.paths]
    except OSError as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    await workspace.upload_files(files)
    return 0


async def _handle_add_text(args: argparse.Namespace, workspace: TrainingSetWorkspace) -> int:
    if args.from_file:
        try:
            content = Path(args.from_file).read_text(encoding="utf-8")
        except OSError as exc:
            print(f"Error: {exc}", file=sys.stderr)
            return 1
    else:
        content = args.content or ""
    await workspace.add_text(content, title=args.title or "")
    return 0


async def _handle_add_qa(args: argparse.Namespace, workspace: TrainingSetWorkspace) -> int:
    await workspace.add_qa(args.question, args.answer)
    return 0


async def _handle_scrape(args: argparse.Namespace, workspace: TrainingSetWorkspace) -> int:
    await workspace.scrape_website(args.url, full_site=args.full_site)
    return 0


async def _handle_video(args: argparse.Namespace, workspace: TrainingSetWorkspace) -> int:
    await workspace.extract_video(args.url)
    return 0


async def _handle_retrain(args: argparse.Namespace, workspace: TrainingSetWorkspace) -> int:
    ids = workspace.registry.ids if args.all else args.ids
    if not ids:
        print("Nothing to retrain.")
        return 0
    await workspace.retrain(ids)
    return 0


async def _handle_delete(args: argparse.Namespace, workspace: TrainingSetWorkspace) -> int:
    """Delete documents after confirmation.

    A single id goes through the single-document path (its own prompt and
    notification); several ids or ``--all`` go through the bulk path.
    """
    ids = sorted(workspace.registry.ids) if args.all else list(dict.fromkeys(args.ids))
    if not ids:
        print("Nothing to delete.")
        return 0

    if len(ids) == 1 and not args.all:
        document = workspace.registry.get(ids[0])
        if document is None:
            print(f"Error: Document {ids[0]} is not loaded", file=sys.stderr)
            return 1
        if not args.yes and not _confirm(single_delete_prompt(document)):
            print("Aborted.")
            return 0
        await workspace.delete_document(document.id)
        return 0

    if not args.yes and not _confirm(bulk_delete_prompt(len(ids))):
        print("Aborted.")
        return 0
    await workspace.delete(ids)
    return 0


async def _handle_schedule(args: argparse.Namespace, workspace: TrainingSetWorkspace) -> int:
    schedule = await workspace.open_schedule()

    if args.schedule_command == "show":
        print(schedule.describe() or "Auto-retrain: off")
        return 0

    try:
        workspace.schedule.set_frequency(args.frequency)
        if args.time:
            workspace.schedule.set_time(args.time)
    except ValidationError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    await workspace.schedule.save()
    return 0


_HANDLERS = {
    "list": _handle_list,
    "add-file": _handle_add_file,
    "add-text": _handle_add_text,
    "add-qa": _handle_add_qa,
    "scrape": _handle_scrape,
    "video": _handle_video,
    "retrain": _handle_retrain,
    "delete": _handle_delete,
    "schedule": _handle_schedule,
}


async def execute(
    args: argparse.Namespace,
    app_settings: Settings,
    backend: IContentBackend | None = None,
) -> int:
    """Run one parsed command against *backend* and return the exit code.

    When *backend* is omitted an :class:`HttpContentBackend` is built from
    *app_settings* and closed afterwards.
    """
    owned_backend = None
    if backend is None:
        from src.providers.backend.http_backend import HttpContentBackend

        owned_backend = HttpContentBackend(app_settings)
        backend = owned_backend

    customer_id = args.customer if args.customer is not None else app_settings.customer_id
    workspace = TrainingSetWorkspace(customer_id, backend, app_settings)
    workspace.notifications.register_listener(_print_notification)

    try:
        await workspace.switch_bot(args.bot)
        return await _HANDLERS[args.command](args, workspace)
    except (ValidationError, DispatchError, LoadError):
        # Already reported through a notification.
        return 1
    except (OperationInProgressError, KeyError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except TrainingSetError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        return 1
    finally:
        if owned_backend is not None:
            await owned_backend.aclose()


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the training-set CLI."""
    parser = argparse.ArgumentParser(
        prog="python -m src.cli",
        description="Manage a bot's training set.",
    )
    parser.add_argument("--bot", required=True, type=int, help="Bot id to operate on")
    parser.add_argument(
        "--customer",
        type=int,
        default=None,
        help="Customer id (default: CUSTOMER_ID from the environment)",
    )
    parser.add_argument(
        "--config",
        default="config/config.yaml",
        help="Optional YAML config file (default: config/config.yaml)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Training-set commands")

    # -- list --
    subparsers.add_parser("list", help="List documents")

    # -- add-file --
    file_parser = subparsers.add_parser("add-file", help="Upload PDF / Word / TXT / CSV files")
    file_parser.add_argument("paths", nargs="+", help="Files to upload")

    # -- add-text --
    text_parser = subparsers.add_parser("add-text", help="Add a text document")
    text_parser.add_argument("--title", default="", help="Document title")
    source = text_parser.add_mutually_exclusive_group(required=True)
    source.add_argument("--content", help="Text content")
    source.add_argument("--from-file", dest="from_file", help="Read the content from a file")

    # -- add-qa --
    qa_parser = subparsers.add_parser("add-qa", help="Add a question/answer pair")
    qa_parser.add_argument("--question", required=True, help="Question text")
    qa_parser.add_argument("--answer", required=True, help="Answer text")

    # -- scrape --
    scrape_parser = subparsers.add_parser("scrape", help="Scrape a web page or crawl a site")
    scrape_parser.add_argument("url", help="Page or site URL")
    scrape_parser.add_argument(
        "--full-site",
        action="store_true",
        dest="full_site",
        help="Crawl the whole site instead of a single page",
    )

    # -- video --
    video_parser = subparsers.add_parser("video", help="Extract a YouTube transcript")
    video_parser.add_argument("url", help="YouTube URL")

    # -- retrain / delete --
    for name, help_text in (
        ("retrain", "Re-ingest documents from their source"),
        ("delete", "Delete documents (irreversible)"),
    ):
        bulk_parser = subparsers.add_parser(name, help=help_text)
        bulk_parser.add_argument("ids", nargs="*", type=int, default=[], help="Document ids")
        bulk_parser.add_argument("--all", action="store_true", help="Every loaded document")
        if name == "delete":
            bulk_parser.add_argument(
                "--yes", "-y", action="store_true", help="Skip confirmation prompt"
            )

    # -- schedule --
    schedule_parser = subparsers.add_parser("schedule", help="Show or set the retrain schedule")
    schedule_sub = schedule_parser.add_subparsers(dest="schedule_command", required=True)
    schedule_sub.add_parser("show", help="Show the current schedule")
    set_parser = schedule_sub.add_parser("set", help="Set the schedule")
    set_parser.add_argument(
        "--frequency",
        required=True,
        choices=["none", "daily", "weekly", "monthly"],
        help="How often URL-backed documents are re-scraped",
    )
    set_parser.add_argument("--time", help="Time of day, HH:MM 24-hour UTC")

    return parser


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------


def main(argv: list[str] | None = None) -> None:
    """CLI entry point: parse, load settings, run one command, exit."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(1)
    if args.command in ("retrain", "delete") and bool(args.ids) == bool(args.all):
        parser.error(f"{args.command}: give document ids or --all (not both)")

    try:
        app_settings = load_settings(args.config)
    except TrainingSetError as exc:
        print(f"Error: {exc.message}", file=sys.stderr)
        sys.exit(1)
    configure_logging(log_level=app_settings.log_level)

    exit_code = asyncio.run(execute(args, app_settings))
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
