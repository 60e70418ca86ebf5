from __future__ import annotations

import pytest

from climail import MailHeader
from climail.ingestion import parse_header_block
from tests.helpers import make_header


def test_from_fields_builds_decoded_header() -> None:
    header = MailHeader.from_fields(
        7,
        {
            "From": "a@x.com",
            "To": "b@x.com",
            "Subject": "=?UTF-8?q?Hi_there?=",
            "Date": "Wed, 04 Dec 2019 10:02:08 +0000",
        },
    )

    assert header.id == 7
    assert header.subject == "Hi there"
    assert header.from_address == "a@x.com"
    assert header.to_address == "b@x.com"
    assert header.timestamp is not None

    expected = f"{'04.12.2019, 10:02:08':<20} |  {'a@x.com':<60} |  {'Hi there':<100}"
    assert header.get_info() == expected
    assert len(header.get_info()) == 20 + 4 + 60 + 4 + 100


def test_from_fields_uses_placeholders_for_missing_fields() -> None:
    header = MailHeader.from_fields(3, {})

    assert header.to_address == "<to>"
    assert header.from_address == "<from>"
    assert header.subject == "<subject>"
    assert header.timestamp is None
    assert header.get_info().startswith("<date>")


def test_from_fields_unparsable_date_gives_no_timestamp() -> None:
    header = MailHeader.from_fields(3, {"Date": "yesterday"})

    assert header.timestamp is None


def test_from_fields_strips_line_breaks_from_subject() -> None:
    header = MailHeader.from_fields(1, {"Subject": "A long\r\n subject"})

    assert header.subject == "A long subject"


def test_get_info_truncates_long_columns() -> None:
    header = make_header(1, subject="x" * 150)

    assert header.get_info().endswith("x" * 96 + " ...")


def test_headers_are_equal_by_id() -> None:
    first = make_header(1, subject="First")
    same_id = make_header(1, subject="Other", date=None)
    other_id = make_header(2, subject="First")

    assert first == same_id
    assert hash(first) == hash(same_id)
    assert first != other_id


@pytest.mark.parametrize(
    ("older", "newer"),
    [
        ("Wed, 04 Dec 2019 10:02:08 +0000", "Thu, 04 Dec 2020 10:02:08 +0000"),
        ("Wed, 04 Dec 2019 10:02:08 +0000", "Sat, 04 Jan 2020 10:02:08 +0000"),
        ("Mon, 04 Nov 2019 10:02:08 +0000", "Wed, 04 Dec 2019 10:02:08 +0000"),
        ("Wed, 04 Dec 2019 10:02:08 +0000", "Thu, 05 Dec 2019 10:02:08 +0000"),
        ("Wed, 04 Dec 2019 10:02:08 +0000", "Wed, 04 Dec 2019 11:02:08 +0000"),
        ("Wed, 04 Dec 2019 10:02:08 +0000", "Wed, 04 Dec 2019 10:03:08 +0000"),
        ("Wed, 04 Dec 2019 10:02:08 +0000", "Wed, 04 Dec 2019 10:02:09 +0000"),
    ],
)
def test_ordering_follows_timestamp_fields(older: str, newer: str) -> None:
    a = make_header(1, date=older)
    b = make_header(2, date=newer)

    assert a.compare(b) == -1
    assert b.compare(a) == 1
    assert a < b
    assert b > a


def test_ordering_honours_utc_offset() -> None:
    # 09:00 UTC sent from a +0200 sender
    earlier = make_header(1, date="Wed, 04 Dec 2019 11:00:00 +0200")
    later = make_header(2, date="Wed, 04 Dec 2019 10:00:00 +0000")

    assert earlier.compare(later) == -1
    assert later.compare(earlier) == 1
    assert [h.id for h in sorted([later, earlier], reverse=True)] == [2, 1]


def test_same_instant_in_different_offsets_compares_equal() -> None:
    a = make_header(1, date="Wed, 04 Dec 2019 12:30:00 +0230")
    b = make_header(2, date="Wed, 04 Dec 2019 10:00:00 +0000")

    assert a.compare(b) == 0


def test_equal_timestamps_compare_equal() -> None:
    a = make_header(1)
    b = make_header(2)

    assert a.compare(b) == 0
    assert not a < b
    assert not b < a
    assert a <= b and a >= b


def test_timestamp_presence_ordering_is_antisymmetric() -> None:
    dated = make_header(1)
    undated = make_header(2, date=None)

    assert dated.compare(undated) == 1
    assert undated.compare(dated) == -1
    assert dated > undated
    assert undated < dated
    assert not undated > dated


def test_headers_without_timestamp_compare_equal() -> None:
    a = make_header(1, date=None)
    b = make_header(2, date=None)

    assert a.compare(b) == 0
    assert b.compare(a) == 0


def test_sorting_newest_first_puts_undated_last() -> None:
    undated = make_header(1, date=None)
    old = make_header(2, date="Wed, 04 Dec 2019 10:02:08 +0000")
    new = make_header(3, date="Thu, 05 Dec 2019 10:02:08 +0000")

    ordered = sorted([undated, old, new], reverse=True)

    assert [h.id for h in ordered] == [3, 2, 1]


def test_parse_header_block_folds_continuations() -> None:
    block = (
        "Return-Path: <sender@example.test>\r\n"
        "From: Sender <sender@example.test>\r\n"
        "Subject: =?UTF-8?q?Part_one?=\r\n"
        " continued\r\n"
        "Date: Wed, 04 Dec 2019 10:02:08 +0000\r\n"
        "\r\n"
        "Body: not a header\r\n"
    )

    fields = parse_header_block(block)

    assert fields["From"] == "Sender <sender@example.test>"
    assert fields["Subject"] == "=?UTF-8?q?Part_one?=\n continued"
    assert fields["Date"] == "Wed, 04 Dec 2019 10:02:08 +0000"
    assert "Body" not in fields

    header = MailHeader.from_fields(4, fields)
    assert header.subject == "Part one continued"
    assert header.timestamp is not None
