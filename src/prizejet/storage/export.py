"""Export utilities for campaign entries."""

import csv
import io
import re
from pathlib import Path
from typing import Iterable

from prizejet.logging_config import get_logger
from prizejet.storage.models import Entry

logger = get_logger(__name__)

CSV_HEADERS = ["Name", "Email", "Points", "Referrer", "Date Joined", "IP Address"]


def entries_to_csv(entries: Iterable[Entry]) -> str:
    """Render entries as CSV text.

    The referrer column only says whether the entry came in through a
    referral; it never names the referrer.

    Args:
        entries: Entry records

    Returns:
        CSV document with a header row
    """
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(CSV_HEADERS)

    count = 0
    for entry in entries:
        writer.writerow([
            entry.name,
            entry.email,
            entry.points,
            "Yes" if entry.referrer_id else "No",
            entry.created_at.strftime("%Y-%m-%d %H:%M:%S"),
            entry.ip_address or "",
        ])
        count += 1

    logger.info("csv_export_rendered", count=count)
    return buffer.getvalue()


def export_filename(title: str) -> str:
    """File name for a campaign's entry export, e.g. ``Summer_Giveaway_entries.csv``."""
    return re.sub(r"\s+", "_", title.strip()) + "_entries.csv"


def export_to_csv(entries: list[Entry], output_path: Path) -> None:
    """Write entries to a CSV file.

    Args:
        entries: Entry records
        output_path: Output file path
    """
    if not entries:
        logger.warning("no_entries_to_export")

    output_path.write_text(entries_to_csv(entries), encoding="utf-8")
    logger.info("csv_export_completed", path=str(output_path), count=len(entries))
