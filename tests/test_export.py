"""
Tests for CSV export
"""

from datetime import datetime
from types import SimpleNamespace

from prizejet.storage.export import CSV_HEADERS, entries_to_csv, export_filename, export_to_csv


def make_entry(name, email, points=1, referrer_id=None, ip_address="198.51.100.4"):
    return SimpleNamespace(
        name=name,
        email=email,
        points=points,
        referrer_id=referrer_id,
        created_at=datetime(2026, 10, 3, 9, 5, 7),
        ip_address=ip_address,
    )


def test_header_and_rows():
    entries = [
        make_entry("Ann", "ann@example.com", points=11),
        make_entry("Bob", "bob@example.com", referrer_id="ann-id", ip_address=None),
    ]

    lines = entries_to_csv(entries).splitlines()

    assert lines[0] == ",".join(CSV_HEADERS)
    assert lines[1] == "Ann,ann@example.com,11,No,2026-10-03 09:05:07,198.51.100.4"
    assert lines[2] == "Bob,bob@example.com,1,Yes,2026-10-03 09:05:07,"


def test_fields_with_commas_are_quoted():
    csv_text = entries_to_csv([make_entry('Lee, "Ann"', "ann@example.com")])

    assert csv_text.splitlines()[1].startswith('"Lee, ""Ann""",')


def test_empty_export_has_header_only():
    assert entries_to_csv([]) == ",".join(CSV_HEADERS) + "\n"


def test_export_filename():
    assert export_filename("Summer Giveaway  2026") == "Summer_Giveaway_2026_entries.csv"


def test_export_to_file(tmp_path):
    path = tmp_path / "entries.csv"

    export_to_csv([make_entry("Ann", "ann@example.com")], path)

    assert path.read_text(encoding="utf-8").startswith("Name,Email,Points,Referrer,Date Joined,IP Address\n")
