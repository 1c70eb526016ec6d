"""Command-line interface for the production report.

Provides subcommands: `annual`, `quarterly`, `monthly`, `pdf` and
`clear-cache`. Each command is implemented as a `cmd_*` function that accepts
an argparse namespace and a loaded `ReportSession`.

The report source is chosen with `--csv PATH`, `--url URL` or `--feed-url URL`;
without one of them the dataset cached by the previous load is used.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import pandas as pd

from production_report import cache
from production_report.config import get_settings
from production_report.errors import ReportError
from production_report.logging_config import configure_logging
from production_report.pipeline import ReportSession
from production_report.report.export_pdf import export_pdf
from production_report.report.model import ReportModel
from production_report.report.tables import annual_table, monthly_table, quarterly_tables

log = logging.getLogger(__name__)


# --------------------------------------------------
# Helpers
# --------------------------------------------------
def _print_table(frame: pd.DataFrame, title: str | None = None) -> None:
    if title:
        print(title)
    print(frame.to_string(index=False))
    print()


def load_report(session: ReportSession, args: argparse.Namespace) -> ReportModel:
    """Load the report from the source selected on the command line.

    Raises:
        ReportError: if the source cannot be read or parsed, or nothing is
            cached when no source is given.
    """
    if args.csv is not None:
        return session.load_file(args.csv)
    if args.url is not None:
        return session.load_url(args.url)
    if args.feed_url is not None:
        return session.load_feed(args.feed_url)

    model = session.load_cached()
    if model is None:
        raise ReportError("No source given and no cached dataset. Use --csv, --url or --feed-url.")
    return model


# --------------------------------------------------
# Commands
# --------------------------------------------------
def cmd_annual(session: ReportSession, args: argparse.Namespace) -> None:
    model = load_report(session, args)
    _print_table(annual_table(model), "Годовой отчет")


def cmd_quarterly(session: ReportSession, args: argparse.Namespace) -> None:
    model = load_report(session, args)
    for quarter, frame in quarterly_tables(model).items():
        if args.quarter and quarter != args.quarter:
            continue
        _print_table(frame, quarter)


def cmd_monthly(session: ReportSession, args: argparse.Namespace) -> None:
    model = load_report(session, args)
    if args.workshop not in model.workshops:
        raise ReportError(f"Workshop {args.workshop} has no data in {model.source_name}.")
    _print_table(monthly_table(model, args.workshop), f"Цех {args.workshop}")


def cmd_pdf(session: ReportSession, args: argparse.Namespace) -> None:
    model = load_report(session, args)
    if model.is_empty:
        raise ReportError("No data to export.")
    s = session.settings
    out_dir = args.out_dir or s.output_dir
    path = export_pdf(model, out_dir, s.pdf_font_path)
    print(path)


def cmd_clear_cache(session: ReportSession, _: argparse.Namespace) -> None:
    removed = cache.clear_dataset(session.settings.cache_path)
    log.info("Cache %s", "cleared" if removed else "was already empty")


COMMANDS = {
    "annual": cmd_annual,
    "quarterly": cmd_quarterly,
    "monthly": cmd_monthly,
    "pdf": cmd_pdf,
    "clear-cache": cmd_clear_cache,
}


# --------------------------------------------------
# CLI
# --------------------------------------------------
def _add_source_args(p: argparse.ArgumentParser) -> None:
    src = p.add_mutually_exclusive_group()
    src.add_argument("--csv", type=Path, default=None, help="local CSV file")
    src.add_argument("--url", default=None, help="CSV resource to fetch")
    src.add_argument("--feed-url", default=None, help="spreadsheet JSON feed to fetch")
    p.add_argument("--no-cache", action="store_true", help="do not cache the loaded dataset")


def build_parser() -> argparse.ArgumentParser:
    """Build and return the top-level argument parser for the CLI.

    Returns:
        Configured argparse.ArgumentParser instance.
    """
    p = argparse.ArgumentParser(prog="production-report")
    p.add_argument("-v", "--verbose", action="store_true", help="debug logging")
    sub = p.add_subparsers(dest="cmd", required=True)

    _add_source_args(sub.add_parser("annual"))

    p_quarterly = sub.add_parser("quarterly")
    _add_source_args(p_quarterly)
    p_quarterly.add_argument("--quarter", choices=["Q1", "Q2", "Q3", "Q4"], default=None)

    p_monthly = sub.add_parser("monthly")
    _add_source_args(p_monthly)
    p_monthly.add_argument("--workshop", type=int, required=True)

    p_pdf = sub.add_parser("pdf")
    _add_source_args(p_pdf)
    p_pdf.add_argument("--out-dir", type=Path, default=None)

    sub.add_parser("clear-cache")

    return p


def main(argv: list[str] | None = None) -> int:
    """CLI entry point: parse args, configure logging and dispatch commands."""
    args = build_parser().parse_args(argv)
    settings = get_settings()
    configure_logging(settings.log_path, logging.DEBUG if args.verbose else logging.INFO)

    session = ReportSession(settings, use_cache=not getattr(args, "no_cache", False))
    try:
        COMMANDS[args.cmd](session, args)
    except ReportError as e:
        log.error("%s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
