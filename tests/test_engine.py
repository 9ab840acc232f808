"""Tests for *trialkey.engine*."""

from datetime import datetime, timedelta, timezone
from pathlib import Path
from unittest.mock import patch

import pytest

from trialkey.config import EngineSettings
from trialkey.engine import EntitlementEngine, activate_license, get_status
from trialkey.errors import INVALID_KEY_MESSAGE, InvalidLicenseKeyError, StorageError
from trialkey.keys import derive_license_key
from trialkey.models import EntitlementRecord
from trialkey.storage import LICENSE_FILENAME, load_record, save_record

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

NOW = datetime(2025, 6, 15, 10, 0, tzinfo=timezone.utc)
EMAIL = "a@b.com"


class FakeClock:
    def __init__(self, now: datetime = NOW):
        self.now = now

    def __call__(self) -> datetime:
        return self.now

    def advance(self, **kwargs) -> None:
        self.now += timedelta(**kwargs)


def _engine(clock: FakeClock = None) -> EntitlementEngine:
    return EntitlementEngine(clock=clock or FakeClock())


def _seed(root: Path, first_seen: datetime) -> None:
    save_record(root, EntitlementRecord.fresh(first_seen))


# ---------------------------------------------------------------------------
# initialize
# ---------------------------------------------------------------------------

def test_initialize_creates_record_on_first_run(tmp_path: Path) -> None:
    record = _engine().initialize(tmp_path)
    assert record.first_seen == NOW
    assert not record.is_activated
    assert load_record(tmp_path) == record


def test_initialize_is_idempotent(tmp_path: Path) -> None:
    clock = FakeClock()
    engine = _engine(clock)
    first = engine.initialize(tmp_path)

    clock.advance(days=3)
    with patch("trialkey.engine.save_record") as save:
        second = engine.initialize(tmp_path)

    save.assert_not_called()
    assert second.first_seen == first.first_seen == NOW


def test_initialize_propagates_storage_error(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("")
    with pytest.raises(StorageError):
        _engine().initialize(blocker / "data")


# ---------------------------------------------------------------------------
# status – trial arithmetic
# ---------------------------------------------------------------------------

def test_fresh_install_reports_full_trial(tmp_path: Path) -> None:
    status = _engine().status(tmp_path)
    assert status.is_trial is True
    assert status.is_licensed is False
    assert status.days_remaining == 30
    assert status.trial_expired is False
    assert status.first_run_date == NOW


@pytest.mark.parametrize(
    "age, expected",
    [
        (timedelta(0), 30),
        (timedelta(hours=1), 29),
        (timedelta(days=15), 15),
        (timedelta(days=29), 1),
        (timedelta(days=29, hours=23, minutes=59), 1),
        (timedelta(days=30), 0),
        (timedelta(days=31), 0),
        (timedelta(days=400), 0),
    ],
)
def test_trial_countdown(tmp_path: Path, age: timedelta, expected: int) -> None:
    _seed(tmp_path, NOW - age)
    status = _engine().status(tmp_path)
    assert status.days_remaining == expected
    assert status.trial_expired is (expected == 0)
    assert status.is_trial is True


def test_first_seen_in_future_is_not_negative(tmp_path: Path) -> None:
    _seed(tmp_path, NOW + timedelta(days=5))
    assert _engine().status(tmp_path).days_remaining == 35


@pytest.mark.parametrize(
    "first_seen",
    [
        datetime(9999, 12, 31, tzinfo=timezone.utc),
        datetime(1, 1, 1, tzinfo=timezone.utc),
    ],
)
def test_extreme_first_run_dates_do_not_crash(tmp_path: Path, first_seen: datetime) -> None:
    """Dates at the edge of the datetime range still yield a status."""
    _seed(tmp_path, first_seen)
    engine = EntitlementEngine(settings=EngineSettings(trial_days=3650), clock=FakeClock())

    status = engine.status(tmp_path)

    assert status.is_trial is True
    assert status.first_run_date == first_seen
    assert status.trial_expired is (first_seen < NOW)
    assert engine.activate(tmp_path, EMAIL, derive_license_key(EMAIL)).is_licensed is True


def test_trial_length_comes_from_settings(tmp_path: Path) -> None:
    _seed(tmp_path, NOW - timedelta(days=10))
    engine = EntitlementEngine(settings=EngineSettings(trial_days=14), clock=FakeClock())
    assert engine.status(tmp_path).days_remaining == 4


def test_naive_clock_is_treated_as_utc(tmp_path: Path) -> None:
    engine = EntitlementEngine(clock=lambda: NOW.replace(tzinfo=None))
    assert engine.status(tmp_path).days_remaining == 30


def test_status_recovers_from_corrupt_file(tmp_path: Path) -> None:
    (tmp_path / LICENSE_FILENAME).write_bytes(b"\x89PNG\r\n\x1a\n\x00\x00garbage")
    status = _engine().status(tmp_path)
    assert status.is_trial is True
    assert status.days_remaining == 30
    assert load_record(tmp_path) is not None


# ---------------------------------------------------------------------------
# status – licensed
# ---------------------------------------------------------------------------

def test_licensed_overrides_expired_trial(tmp_path: Path) -> None:
    record = EntitlementRecord(
        first_seen=NOW - timedelta(days=365),
        license_key="ANY-STORED-KEY",
        license_email=EMAIL,
        activated_at=NOW - timedelta(days=100),
    )
    save_record(tmp_path, record)

    status = _engine().status(tmp_path)
    assert status.is_licensed is True
    assert status.is_trial is False
    assert status.days_remaining == -1
    assert status.trial_expired is False
    assert status.first_run_date == record.first_seen


# ---------------------------------------------------------------------------
# activate
# ---------------------------------------------------------------------------

def test_activation_end_to_end(tmp_path: Path) -> None:
    status = _engine().activate(tmp_path, EMAIL, derive_license_key(EMAIL))
    assert status.is_licensed is True
    assert status.days_remaining == -1

    # A fresh engine reads it back from disk.
    assert _engine().status(tmp_path).is_licensed is True


def test_activation_stores_normalized_values(tmp_path: Path) -> None:
    clock = FakeClock()
    _engine(clock).status(tmp_path)
    clock.advance(days=40)

    key = derive_license_key(EMAIL).lower()
    _engine(clock).activate(tmp_path, "  A@B.com ", key)

    record = load_record(tmp_path)
    assert record.license_key == key.upper()
    assert record.license_email == EMAIL
    assert record.activated_at == NOW + timedelta(days=40)
    assert record.first_seen == NOW


def test_activation_after_expiry(tmp_path: Path) -> None:
    _seed(tmp_path, NOW - timedelta(days=60))
    engine = _engine()
    assert engine.status(tmp_path).trial_expired is True
    assert engine.activate(tmp_path, EMAIL, derive_license_key(EMAIL)).is_licensed is True


def test_invalid_activation_leaves_record_unchanged(tmp_path: Path) -> None:
    engine = _engine()
    engine.status(tmp_path)
    before = (tmp_path / LICENSE_FILENAME).read_text()

    with pytest.raises(InvalidLicenseKeyError) as info:
        engine.activate(tmp_path, EMAIL, "WRONG-KEY1-ABCD-1234")

    assert str(info.value) == INVALID_KEY_MESSAGE
    assert (tmp_path / LICENSE_FILENAME).read_text() == before


def test_invalid_activation_does_not_create_record(tmp_path: Path) -> None:
    with pytest.raises(InvalidLicenseKeyError):
        _engine().activate(tmp_path, EMAIL, "WRONG-KEY1-ABCD-1234")
    assert not (tmp_path / LICENSE_FILENAME).exists()


def test_wrong_email_and_wrong_key_share_message(tmp_path: Path) -> None:
    engine = _engine()
    with pytest.raises(InvalidLicenseKeyError) as wrong_key:
        engine.activate(tmp_path, EMAIL, derive_license_key("other@b.com"))
    with pytest.raises(InvalidLicenseKeyError) as wrong_email:
        engine.activate(tmp_path, "other@b.com", derive_license_key(EMAIL))
    assert str(wrong_key.value) == str(wrong_email.value)


def test_activation_propagates_storage_error(tmp_path: Path) -> None:
    engine = _engine()
    engine.status(tmp_path)
    with patch("trialkey.storage._write_text", side_effect=PermissionError("read-only")):
        with pytest.raises(StorageError, match="read-only"):
            engine.activate(tmp_path, EMAIL, derive_license_key(EMAIL))
    assert _engine().status(tmp_path).is_licensed is False


# ---------------------------------------------------------------------------
# Module-level conveniences
# ---------------------------------------------------------------------------

def test_module_level_helpers(tmp_path: Path) -> None:
    assert get_status(tmp_path).is_trial is True
    status = activate_license(tmp_path, EMAIL, derive_license_key(EMAIL))
    assert status.is_licensed is True
    assert get_status(tmp_path).is_licensed is True
