"""Connect to an IMAP server and extract every DMARC report it holds.

Reports usually arrive as an XML file inside a zip archive or a gzip
stream; each one is written to the output directory under its original
name.
"""

from __future__ import annotations

import argparse
import getpass
from typing import Callable, Optional

from loguru import logger
from pydantic import ValidationError

from imap_dmarc_extractor.application.ports.email_source import MailboxSession
from imap_dmarc_extractor.application.use_cases.extract_reports import (
    EXIT_FATAL,
    EXIT_USAGE,
    ExtractReportsUseCase,
)
from imap_dmarc_extractor.domain.errors import MailboxError
from imap_dmarc_extractor.infrastructure.email.providers.imap.client import (
    ImapConfig,
    ImapMailboxSession,
    parse_server,
)
from imap_dmarc_extractor.infrastructure.log_config import configure_logging
from imap_dmarc_extractor.infrastructure.settings import LOG_LEVELS, Settings, get_settings
from imap_dmarc_extractor.infrastructure.storage.factory import build_report_store


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="imap-dmarc-extractor",
        description="Extract DMARC reports (zip or gzip attachments) from an IMAP mailbox.",
    )
    parser.add_argument("server", help="IMAP server as host[:port], e.g. mail.example.com:993")
    parser.add_argument("account", help="Username for the IMAP account")
    parser.add_argument(
        "path",
        nargs="?",
        default=None,
        help="Directory where reports are stored (default: OUTPUT_DIR setting)",
    )
    parser.add_argument("-p", "--password", help="Password for the IMAP account (prompted if omitted)")
    parser.add_argument("--folder", default=None, help="Mailbox folder to read (default: INBOX)")
    parser.add_argument(
        "--sniff",
        action="store_true",
        default=None,
        help="Detect zip archives sent as application/octet-stream by their magic bytes",
    )
    parser.add_argument(
        "--collision-policy",
        choices=["overwrite", "skip", "rename"],
        default=None,
        help="What to do when a report file already exists (default: overwrite)",
    )
    parser.add_argument("--store", choices=["local", "s3"], default=None, help="Report storage backend")
    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=None,
        help="Log level (default: LOG_LEVEL or INFO)",
    )
    return parser


def apply_overrides(settings: Settings, args: argparse.Namespace) -> Settings:
    """CLI flags take precedence over environment/.env values."""
    overrides = {
        "output_dir": args.path,
        "imap_folder": args.folder,
        "sniff_octet_stream": args.sniff,
        "collision_policy": args.collision_policy,
        "report_store": args.store,
        "log_level": args.log_level,
    }
    return settings.model_copy(update={k: v for k, v in overrides.items() if v is not None})


def resolve_password(args: argparse.Namespace, settings: Settings, prompt: Callable[[str], str]) -> str:
    if args.password:
        return args.password
    if settings.imap_password is not None:
        return settings.imap_password.get_secret_value()
    return prompt("Password: ")


def main(
    argv: list[str] | None = None,
    session_factory: Callable[[ImapConfig], MailboxSession] = ImapMailboxSession,
    prompt: Callable[[str], str] = getpass.getpass,
    settings: Optional[Settings] = None,
) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if settings is None:
        try:
            settings = get_settings()
        except ValidationError as e:
            print(f"Invalid configuration: {e}")
            return EXIT_USAGE
    settings = apply_overrides(settings, args)
    configure_logging(settings.log_level)

    try:
        host, port = parse_server(args.server, default_port=settings.imap_port)
    except ValueError as e:
        parser.error(str(e))

    try:
        store = build_report_store(settings)
    except ValueError as e:
        logger.error(str(e))
        return EXIT_USAGE

    password = resolve_password(args, settings, prompt)

    print(f"Will connect to {host} on port {port} with account '{args.account}'")
    cfg = ImapConfig(
        host=host,
        port=port,
        account=args.account,
        password=password,
        folder=settings.imap_folder,
        timeout=settings.imap_timeout,
    )
    session = session_factory(cfg)

    uc = ExtractReportsUseCase(
        session=session,
        store=store,
        sniff_octet_stream=settings.sniff_octet_stream,
    )
    try:
        summary = uc.run()
    except MailboxError as e:
        logger.error(str(e))
        return EXIT_FATAL

    print("Finished!")
    if summary.skipped:
        print(f"{summary.skipped} of {summary.total} messages skipped; see log for details")
    return summary.exit_code


if __name__ == "__main__":
    raise SystemExit(main())
