"""
Unit tests for the record builder and record serialization.
"""

import json

import pytest
from pathlib import Path

import sys
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from domain.entities import RawCalendarEntry, AttendanceRecord
from domain.record_builder import build_attendance_records, normalize_entry


class TestNormalizeEntry:
    """Tests for normalize_entry and RawCalendarEntry.from_api."""

    def test_from_api_maps_wire_names(self):
        entry = RawCalendarEntry.from_api({
            "attDate": "2026-01-05",
            "isrest": 0,
            "firstDate": "2026-01-05 09:00:00",
            "endDate": "2026-01-05 20:00:00",
            "exp": "迟到",
            "resultList": ["半天事由", 3],
        })
        assert entry.date == "2026-01-05"
        assert entry.clock_in == "2026-01-05 09:00:00"
        assert entry.clock_out == "2026-01-05 20:00:00"
        assert entry.remark == "迟到"
        assert entry.result_items == ["半天事由", 3]

    def test_from_api_missing_fields(self):
        entry = RawCalendarEntry.from_api({"attDate": "2026-01-05", "isrest": None})
        assert entry.is_rest == 0
        assert entry.clock_in is None
        assert entry.result_items == []

    def test_remark2_from_first_result_item(self):
        record = normalize_entry(RawCalendarEntry(date="2026-01-05", result_items=[42, "x"]))
        assert record.remark2 == "42"
        assert record.month == "2026-01"

    def test_remark2_none_without_items(self):
        record = normalize_entry(RawCalendarEntry(date="2026-01-05"))
        assert record.remark2 is None


class TestBuildAttendanceRecords:
    """Tests for build_attendance_records."""

    def test_maps_and_deduplicates(self):
        """Duplicate dates keep the first entry; other months are dropped."""
        records = build_attendance_records(
            [
                {
                    "attDate": "2026-01-01",
                    "isrest": 0,
                    "firstDate": "2026-01-01 09:00:00",
                    "endDate": "2026-01-01 18:00:00",
                    "exp": None,
                    "resultList": [],
                },
                {"attDate": "2026-01-01", "isrest": 0},
                {"attDate": "2026-02-01", "isrest": 0},
            ],
            "2026-01"
        )
        assert len(records) == 1
        assert records[0].date == "2026-01-01"
        assert records[0].work_hours == 9.0
        assert records[0].effective_workday == 1
        assert records[0].missing_clock is False

    def test_keeps_input_order(self):
        entries = [
            RawCalendarEntry(date="2026-01-03", is_rest=1),
            RawCalendarEntry(date="2026-01-01", is_rest=1),
            RawCalendarEntry(date="2026-01-02", is_rest=1),
        ]
        records = build_attendance_records(entries, "2026-01")
        assert [r.date for r in records] == ["2026-01-03", "2026-01-01", "2026-01-02"]

    def test_month_filter_applies_before_dedup(self):
        entries = [
            RawCalendarEntry(date="2025-12-31", is_rest=1),
            RawCalendarEntry(date="2026-01-02", is_rest=0),
            RawCalendarEntry(
                date="2026-01-02", is_rest=0,
                clock_in="2026-01-02 09:00:00", clock_out="2026-01-02 18:00:00"
            ),
        ]
        records = build_attendance_records(entries, "2026-01")
        assert len(records) == 1
        assert records[0].missing_clock is True
        assert records[0].work_hours == 0

    def test_derived_fields(self):
        entries = [
            RawCalendarEntry(
                date="2026-01-05", clock_in="2026-01-05 09:00:00",
                clock_out="2026-01-05 13:00:00", remark="病假"
            ),
            RawCalendarEntry(date="2026-01-06", is_rest=1, clock_in="2026-01-06 09:00:00"),
            RawCalendarEntry(date="2026-01-07", remark="其他", result_items=["上午半天"]),
        ]
        sick, rest, other = build_attendance_records(entries, "2026-01")

        assert sick.work_hours == 4.0
        assert sick.effective_workday == 0.5

        assert rest.work_hours == 0
        assert rest.missing_clock is False
        assert rest.effective_workday == 0

        assert other.missing_clock is True
        assert other.effective_workday == 0.5

    def test_empty_input(self):
        assert build_attendance_records([], "2026-01") == []

    def test_idempotent(self):
        entries = [
            RawCalendarEntry(date="2026-01-05", clock_in="2026-01-05 09:00:00",
                             clock_out="2026-01-05 20:00:00"),
        ]
        assert build_attendance_records(entries, "2026-01") == \
            build_attendance_records(entries, "2026-01")


class TestRecordSerialization:
    """Records survive a JSON round trip."""

    def test_json_round_trip(self):
        records = build_attendance_records(
            [
                RawCalendarEntry(date="2026-01-05", clock_in="2026-01-05 09:00:00",
                                 clock_out="2026-01-05 20:30:00", remark="迟到"),
                RawCalendarEntry(date="2026-01-06", result_items=["半天"]),
                RawCalendarEntry(date="2026-01-07", is_rest=1),
            ],
            "2026-01"
        )
        payload = json.dumps([r.to_dict() for r in records], ensure_ascii=False)
        restored = [AttendanceRecord.from_dict(item) for item in json.loads(payload)]
        assert restored == records

    def test_null_rest_flag_is_working_day(self):
        """A cached null isRest must not turn the day into a rest day."""
        record = AttendanceRecord.from_dict({"date": "2026-01-05", "isRest": None})
        assert record.is_rest == 0
        assert record.month == "2026-01"

    def test_to_dict_keys(self):
        record = AttendanceRecord(date="2026-01-05", month="2026-01")
        assert list(record.to_dict().keys()) == [
            "date", "month", "isRest", "clockIn", "clockOut", "remark",
            "remark2", "workHours", "effectiveWorkday", "missingClock",
        ]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
