"""Data models for trialkey using Pydantic.

``EntitlementRecord`` is the only thing persisted; ``EntitlementStatus`` is
derived from it on every status check and handed to the host as JSON.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

from pydantic import BaseModel, Field, field_validator, model_validator

# ``days_remaining`` value reported for a licensed installation.
UNLIMITED_DAYS = -1

_ACTIVATION_FIELDS = ("license_key", "activated_at", "license_email")


def _as_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    try:
        return value.astimezone(timezone.utc)
    except OverflowError as exc:
        raise ValueError(f"timestamp out of range in UTC: {value.isoformat()}") from exc


# --- Persisted record -----------------------------------------------------

class EntitlementRecord(BaseModel):
    """One per installation; stored as ``first_run`` / ``license_*`` JSON."""

    first_seen: datetime = Field(alias="first_run")
    license_key: Optional[str] = None
    activated_at: Optional[datetime] = None
    license_email: Optional[str] = None

    model_config = {
        "frozen": True,
        "populate_by_name": True,
        "extra": "ignore",
    }

    @model_validator(mode="before")
    @classmethod
    def _drop_partial_activation(cls, data: Any) -> Any:
        # Activation fields are all-or-nothing; a half-written set is discarded.
        if isinstance(data, dict):
            present = [data.get(name) is not None for name in _ACTIVATION_FIELDS]
            if any(present) and not all(present):
                data = {k: v for k, v in data.items() if k not in _ACTIVATION_FIELDS}
        return data

    @field_validator("first_seen", "activated_at")
    @classmethod
    def _normalize_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        if value is None:
            return None
        return _as_utc(value)

    @classmethod
    def fresh(cls, now: datetime) -> "EntitlementRecord":
        """A trial record starting at *now* with no activation."""
        return cls(first_seen=now)

    @property
    def is_activated(self) -> bool:
        return self.license_key is not None and self.activated_at is not None


# --- Derived status -------------------------------------------------------

class EntitlementStatus(BaseModel):
    is_trial: bool
    is_licensed: bool
    days_remaining: int
    trial_expired: bool
    first_run_date: datetime

    model_config = {"frozen": True}


__all__ = ["EntitlementRecord", "EntitlementStatus", "UNLIMITED_DAYS"]
