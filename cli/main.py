"""Main CLI entry point for mailtrace."""

import argparse
import json
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from mailtrace.config.config_loader import ConfigError, ConfigLoader
from mailtrace.models.email_record import EmailStatus
from mailtrace.services.email_parser.base import EmailParseError
from mailtrace.services.processing.email_processor import EmailProcessor
from mailtrace.services.reporting.timeline_formatter import TimelineFormatter
from mailtrace.services.sources import open_source
from mailtrace.storage.audit_log import AuditLog
from mailtrace.storage.database import DatabaseConnection, EmailRepository, StorageError


def configure_logging(verbose: bool = False) -> None:
    """Send diagnostic logs to stderr; DEBUG when verbose, WARNING otherwise."""
    logger.remove()
    logger.add(
        sys.stderr,
        level="DEBUG" if verbose else "WARNING",
        format="<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | {message}",
    )


def open_repository(config) -> EmailRepository:
    db = DatabaseConnection(config.storage.get_database_path())
    db.execute_schema()
    return EmailRepository(db)


def process_paths(
    paths: list[Path],
    config_path: Optional[Path] = None,
    verbose: bool = False,
) -> tuple[int, int, int]:
    """
    Parse and store every message found under the given paths.

    Args:
        paths: .eml files, mbox files or Maildir directories
        config_path: Optional custom config file path
        verbose: Print each processed message

    Returns:
        Tuple of (messages_seen, messages_stored, failures)
    """
    config = ConfigLoader(config_path).load_app_config()

    processor = EmailProcessor(
        repository=open_repository(config),
        audit_log=AuditLog(config.storage.get_audit_log_path()),
        ingestion=config.ingestion,
    )
    formatter = TimelineFormatter(config.model_dump())

    seen = stored = failures = 0

    for path in paths:
        try:
            source = open_source(path)
            for email_id, raw_text in source.iter_messages(path):
                seen += 1
                try:
                    record = processor.process(raw_text, email_id)
                except StorageError as e:
                    failures += 1
                    print(f"Error storing {email_id}: {e}")
                    continue

                if record is not None:
                    stored += 1
                    if verbose:
                        print(f"\n## {email_id}")
                        print(formatter.format_report(record.parsed))
        except (FileNotFoundError, EmailParseError) as e:
            failures += 1
            print(f"Error reading {path}: {e}")

    print("---")
    print(f"Processed {seen} messages, {stored} stored, {failures} failures")
    return seen, stored, failures


def cmd_parse(args) -> int:
    """Parse one message and print its timeline."""
    config = ConfigLoader(args.config).load_app_config()
    processor = EmailProcessor()

    path = Path(args.email)
    source = open_source(path)
    for email_id, raw_text in source.iter_messages(path):
        parsed = processor.parse(raw_text)
        if args.json:
            print(json.dumps(parsed.to_dict(), indent=2, ensure_ascii=False))
        else:
            print(f"\n## {email_id}")
            print(TimelineFormatter(config.model_dump()).format_report(parsed))
    return 0


def cmd_process(args) -> int:
    _, _, failures = process_paths([Path(p) for p in args.paths], args.config, args.verbose)
    return 1 if failures else 0


def cmd_list(args) -> int:
    config = ConfigLoader(args.config).load_app_config()
    page = open_repository(config).find_all(page=args.page, limit=args.limit)

    for record in page.emails:
        parsed = record.parsed
        print(
            f"{record.email_id}\t{record.status.value}\t{parsed.esp_type}\t"
            f"{parsed.hop_count} hops\t{parsed.subject}"
        )
    print(f"Page {page.page}/{max(page.total_pages, 1)} ({page.total} emails)")
    return 0


def cmd_show(args) -> int:
    config = ConfigLoader(args.config).load_app_config()
    record = open_repository(config).get(args.email_id)
    print(json.dumps(record.to_dict(), indent=2, ensure_ascii=False))
    return 0


def cmd_stats(args) -> int:
    config = ConfigLoader(args.config).load_app_config()
    stats = open_repository(config).stats()
    for name, value in stats.items():
        print(f"{name}: {value}")
    return 0


def cmd_done(args) -> int:
    config = ConfigLoader(args.config).load_app_config()
    open_repository(config).update_status(args.email_id, EmailStatus.DONE)
    AuditLog(config.storage.get_audit_log_path()).log_event(
        "email_status_updated", args.email_id, {"status": EmailStatus.DONE.value}
    )
    print(f"Marked {args.email_id} as done")
    return 0


def cmd_delete(args) -> int:
    config = ConfigLoader(args.config).load_app_config()
    open_repository(config).delete(args.email_id)
    AuditLog(config.storage.get_audit_log_path()).log_event("email_deleted", args.email_id)
    print(f"Deleted {args.email_id}")
    return 0


def cmd_init_db(args) -> int:
    """Initialize database command."""
    config = ConfigLoader(args.config).load_app_config()

    db = DatabaseConnection(config.storage.get_database_path())
    db.execute_schema()
    db.migrate()

    print(f"Database initialized at: {config.storage.get_database_path()}")
    return 0


def cmd_export(args) -> int:
    """Export audit events command."""
    config = ConfigLoader(args.config).load_app_config()

    audit_log = AuditLog(config.storage.get_audit_log_path())
    output_path = Path(args.output) if args.output else Path("mailtrace_events.json")

    count = audit_log.export_events(output_path)

    print(f"Exported {count} events to: {output_path}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="mailtrace - email delivery timeline analysis")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    common = argparse.ArgumentParser(add_help=False)
    common.add_argument("--config", type=Path, help="Custom config file path")
    common.add_argument("--verbose", action="store_true", help="Enable verbose logging")

    parse_parser = subparsers.add_parser("parse", parents=[common], help="Parse a message and print its timeline")
    parse_parser.add_argument("email", help="Email file, mbox or Maildir")
    parse_parser.add_argument("--json", action="store_true", help="Print the parsed result as JSON")
    parse_parser.set_defaults(handler=cmd_parse)

    process_parser = subparsers.add_parser("process", parents=[common], help="Parse and store messages")
    process_parser.add_argument("paths", nargs="+", help="Email files, mbox files or Maildir directories")
    process_parser.set_defaults(handler=cmd_process)

    list_parser = subparsers.add_parser("list", parents=[common], help="List stored emails")
    list_parser.add_argument("--page", type=int, default=1)
    list_parser.add_argument("--limit", type=int, default=50)
    list_parser.set_defaults(handler=cmd_list)

    for name, handler, help_text in (
        ("show", cmd_show, "Show a stored email as JSON"),
        ("done", cmd_done, "Mark a stored email as done"),
        ("delete", cmd_delete, "Delete a stored email"),
    ):
        id_parser = subparsers.add_parser(name, parents=[common], help=help_text)
        id_parser.add_argument("email_id")
        id_parser.set_defaults(handler=handler)

    stats_parser = subparsers.add_parser("stats", parents=[common], help="Show processing statistics")
    stats_parser.set_defaults(handler=cmd_stats)

    init_parser = subparsers.add_parser("init-db", parents=[common], help="Initialize database")
    init_parser.set_defaults(handler=cmd_init_db)

    export_parser = subparsers.add_parser("export", parents=[common], help="Export audit events")
    export_parser.add_argument("--output", type=Path, help="Output file path")
    export_parser.set_defaults(handler=cmd_export)

    return parser


def main(argv: Optional[list[str]] = None) -> int:
    """CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 1

    configure_logging(args.verbose)

    try:
        return args.handler(args)
    except (ConfigError, StorageError, EmailParseError, FileNotFoundError) as e:
        print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
