"""Trial and licence state for one installation.

The engine is what the host command layer calls.  Every operation is a
synchronous load-modify-save against the record in *root_dir*:

* ``status`` – current trial/licence status, creating the record on first run.
* ``activate`` – verify an (email, key) pair and persist the activation.

Once a record carries an activation it is trusted as-is; the stored key is
not re-verified on each status check.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional

from .codec import Base64Codec, RecordCodec
from .config import EngineSettings
from .errors import InvalidLicenseKeyError
from .keys import normalize_email, verify_license_key
from .logger import get_logger
from .models import UNLIMITED_DAYS, EntitlementRecord, EntitlementStatus
from .storage import load_record, save_record

log = get_logger("engine")

Clock = Callable[[], datetime]


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class EntitlementEngine:
    def __init__(
        self,
        settings: Optional[EngineSettings] = None,
        clock: Optional[Clock] = None,
        codec: Optional[RecordCodec] = None,
    ):
        self.settings = settings or EngineSettings()
        self.clock = clock or utc_now
        self.codec = codec or Base64Codec()

    def now(self) -> datetime:
        """Current instant from the clock, as an aware UTC datetime."""
        now = self.clock()
        if now.tzinfo is None:
            return now.replace(tzinfo=timezone.utc)
        return now.astimezone(timezone.utc)

    @property
    def trial_length(self) -> timedelta:
        return timedelta(days=self.settings.trial_days)

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------

    def load(self, root_dir: Path) -> Optional[EntitlementRecord]:
        return load_record(root_dir, self.codec)

    def save(self, root_dir: Path, record: EntitlementRecord) -> None:
        save_record(root_dir, record, self.codec)

    def initialize(self, root_dir: Path, now: Optional[datetime] = None) -> EntitlementRecord:
        """Return the stored record, creating and saving a fresh one if needed.

        An existing, readable record is returned untouched.  A corrupt one is
        replaced, which restarts the trial window.
        """
        record = self.load(root_dir)
        if record is not None:
            return record

        record = EntitlementRecord.fresh(now or self.now())
        self.save(root_dir, record)
        log.info("Started trial for %s at %s", root_dir, record.first_seen.isoformat())
        return record

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------

    def evaluate(self, record: EntitlementRecord, now: datetime) -> EntitlementStatus:
        """Derive the status of *record* at instant *now*."""
        if record.is_activated:
            return EntitlementStatus(
                is_trial=False,
                is_licensed=True,
                days_remaining=UNLIMITED_DAYS,
                trial_expired=False,
                first_run_date=record.first_seen,
            )

        # Timedelta-only arithmetic; stored dates near datetime.max cannot overflow.
        remaining = (record.first_seen - now) + self.trial_length
        if remaining.total_seconds() > 0:
            # A partial day left still counts as one.
            days_remaining = max(1, remaining.days)
        else:
            days_remaining = 0

        return EntitlementStatus(
            is_trial=True,
            is_licensed=False,
            days_remaining=days_remaining,
            trial_expired=days_remaining == 0,
            first_run_date=record.first_seen,
        )

    def status(self, root_dir: Path) -> EntitlementStatus:
        now = self.now()
        record = self.initialize(root_dir, now)
        return self.evaluate(record, now)

    # ------------------------------------------------------------------
    # Activation
    # ------------------------------------------------------------------

    def activate(self, root_dir: Path, email: str, license_key: str) -> EntitlementStatus:
        """Activate *root_dir* with (*email*, *license_key*).

        Raises :class:`InvalidLicenseKeyError` without touching the record
        when the pair does not verify, and :class:`StorageError` when the
        activation cannot be written.
        """
        if not verify_license_key(email, license_key):
            log.warning("Rejected activation attempt for %s", normalize_email(email))
            raise InvalidLicenseKeyError()

        now = self.now()
        record = self.initialize(root_dir, now)
        record = record.model_copy(
            update={
                "license_key": license_key.upper(),
                "license_email": normalize_email(email),
                "activated_at": now,
            }
        )
        self.save(root_dir, record)
        log.info("Activated license for %s", record.license_email)

        return self.status(root_dir)


# ---------------------------------------------------------------------------
# Host-facing conveniences
# ---------------------------------------------------------------------------

def get_status(root_dir: Path, engine: Optional[EntitlementEngine] = None) -> EntitlementStatus:
    return (engine or EntitlementEngine()).status(root_dir)


def activate_license(
    root_dir: Path,
    email: str,
    license_key: str,
    engine: Optional[EntitlementEngine] = None,
) -> EntitlementStatus:
    return (engine or EntitlementEngine()).activate(root_dir, email, license_key)


__all__ = ["EntitlementEngine", "get_status", "activate_license", "utc_now"]
