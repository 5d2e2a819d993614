from datetime import date, datetime

import pytest

from src.access_control.access_logs.service import AccessLogService
from src.access_control.core.enums import AccessType
from src.access_control.core.exceptions import ValidationError
from tests.fakes import InMemoryAccessLogs


def test_record_attempt_fills_defaults(fixed_now):
    repo = InMemoryAccessLogs()
    svc = AccessLogService(repo)

    svc.record_attempt(identity=None, display_name=None, access_granted=False, now=fixed_now)

    entry = repo.entries[0]
    assert entry.identity == "UNKNOWN"
    assert entry.display_name == "Unknown"
    assert entry.device_id == "UNKNOWN"
    assert entry.access_type == AccessType.CARD
    assert entry.log_date == fixed_now.date()


def test_access_granted_must_be_boolean(fixed_now):
    svc = AccessLogService(InMemoryAccessLogs())

    with pytest.raises(ValidationError):
        svc.record_attempt(identity="E001", display_name="Ada", access_granted="yes", now=fixed_now)


def test_stats_and_top_denied():
    repo = InMemoryAccessLogs()
    svc = AccessLogService(repo)
    attempts = [("E001", True), ("E001", False), ("E002", False), ("E002", False), ("E003", True)]
    for i, (ident, granted) in enumerate(attempts):
        svc.record_attempt(
            identity=ident,
            display_name=f"Person {ident}",
            access_granted=granted,
            access_type="face",
            now=datetime(2026, 2, 2, 8, i),
        )
    svc.record_attempt(identity="E009", display_name="Old", access_granted=False, now=datetime(2026, 1, 2, 8))

    stats = svc.stats(start_date=date(2026, 2, 1), end_date=date(2026, 2, 28))

    assert stats.total_attempts == 5
    assert stats.granted == 2
    assert stats.denied == 3
    assert stats.success_rate == 40.0
    assert stats.top_denied[0].identity == "E002"
    assert stats.top_denied[0].denied_count == 2


def test_list_logs_filters_and_pages():
    repo = InMemoryAccessLogs()
    svc = AccessLogService(repo)
    for minute in range(5):
        svc.record_attempt(identity="E001", display_name="Ada", access_granted=True, now=datetime(2026, 2, 2, 8, minute))
    svc.record_attempt(identity="E002", display_name="Bob", access_granted=True, now=datetime(2026, 2, 2, 9))

    page = svc.list_logs(identity="E001", page=1, limit=2)

    assert page.total == 5
    assert page.total_pages == 3
    assert [log.logged_at.minute for log in page.logs] == [4, 3]
