"""Tests for time sheet retention."""

from pathlib import Path

import pytest  # type: ignore[import-not-found]

from chessclock.core.errors import InvalidFileNameError
from chessclock.core.models import StartEvent
from chessclock.core.retention import Retention
from chessclock.core.storage import EventLog

# 2023-01-01 00:00:00 UTC
JAN_1 = 1672531200
DAY = 86400


class TestRetention:
    """Test Retention policy."""

    def test_rejects_non_positive_max(self) -> None:
        """Test max_files must be positive."""
        with pytest.raises(ValueError):
            Retention(0)

    def test_append_prunes_oldest_files(self, tmp_path: Path) -> None:
        """Test seven existing sheets are cut to the five newest on the next append."""
        log_dir = tmp_path / "logs"
        log_dir.mkdir()
        for day in range(1, 8):
            (log_dir / f"2023_01_0{day}.log").write_text("", encoding="utf-8")

        log = EventLog(log_dir, max_files=5)
        ts = JAN_1 + 7 * DAY + 60
        log.append(ts, StartEvent(ts, "WORK"))

        names = sorted(p.name for p in log_dir.iterdir())
        assert names == [
            "2023_01_04.log",
            "2023_01_05.log",
            "2023_01_06.log",
            "2023_01_07.log",
            "2023_01_08.log",
        ]
        assert log.list_day_keys() == [JAN_1 + d * DAY for d in range(3, 8)]

    def test_keeps_most_recent_days(self, tmp_path: Path) -> None:
        """Test the retained set is always the newest days seen so far."""
        log = EventLog(tmp_path / "logs", max_files=3)
        seen = []
        for day in [4, 1, 6, 2, 9, 3, 7]:
            ts = JAN_1 + day * DAY
            log.append(ts, StartEvent(ts, "WORK"))
            seen.append(ts)
            retained = log.list_day_keys()
            assert len(retained) <= 3
            assert retained == sorted(seen)[-3:]

    def test_enforce_reports_removed_days(self, tmp_path: Path) -> None:
        """Test enforce returns what it deleted."""
        log = EventLog(tmp_path / "logs", max_files=10)
        for day in range(4):
            ts = JAN_1 + day * DAY
            log.append(ts, StartEvent(ts, "WORK"))

        removed = Retention(2).enforce(log)

        assert removed == [JAN_1, JAN_1 + DAY]
        assert log.list_day_keys() == [JAN_1 + 2 * DAY, JAN_1 + 3 * DAY]

    def test_enforce_under_limit_is_noop(self, tmp_path: Path) -> None:
        """Test nothing is removed below the limit."""
        log = EventLog(tmp_path / "logs", max_files=5)
        log.append(JAN_1, StartEvent(JAN_1, "WORK"))

        assert log.retention.enforce(log) == []
        assert log.list_day_keys() == [JAN_1]

    def test_misnamed_file_stops_retention(self, tmp_path: Path) -> None:
        """Test a day file without zero padding is refused instead of retried."""
        log_dir = tmp_path / "logs"
        log_dir.mkdir()
        (log_dir / "2023_1_1.log").write_text("", encoding="utf-8")

        log = EventLog(log_dir, max_files=1)
        with pytest.raises(InvalidFileNameError):
            log.append(JAN_1 + DAY, StartEvent(JAN_1 + DAY, "WORK"))

        assert (log_dir / "2023_1_1.log").exists()
