"""Development-only hooks for exercising trial and licence states.

This module is deliberately outside the ``trialkey`` package: release builds
package ``trialkey`` alone, so these hooks do not exist in a shipped
artifact.  Every hook overwrites the record unconditionally.
"""

from __future__ import annotations

from datetime import timedelta
from pathlib import Path
from typing import Optional

from trialkey.engine import EntitlementEngine
from trialkey.keys import derive_license_key
from trialkey.logger import get_logger
from trialkey.models import EntitlementRecord, EntitlementStatus

log = get_logger("dev")


def _engine(engine: Optional[EntitlementEngine]) -> EntitlementEngine:
    return engine or EntitlementEngine()


def force_expire(root_dir: Path, engine: Optional[EntitlementEngine] = None) -> EntitlementRecord:
    """Replace the record with a trial that ran out a day ago."""
    engine = _engine(engine)
    first_seen = engine.now() - engine.trial_length - timedelta(days=1)
    record = EntitlementRecord.fresh(first_seen)
    engine.save(root_dir, record)
    log.warning("DEV: forced trial expiry in %s", root_dir)
    return record


def reset_trial(root_dir: Path, engine: Optional[EntitlementEngine] = None) -> EntitlementRecord:
    """Replace the record with a brand-new trial starting now."""
    engine = _engine(engine)
    record = EntitlementRecord.fresh(engine.now())
    engine.save(root_dir, record)
    log.warning("DEV: reset trial in %s", root_dir)
    return record


def activate_dev_license(
    root_dir: Path, engine: Optional[EntitlementEngine] = None
) -> EntitlementStatus:
    """Activate with the configured developer email and its derived key."""
    engine = _engine(engine)
    email = engine.settings.dev_email
    log.warning("DEV: activating developer license for %s", email)
    return engine.activate(root_dir, email, derive_license_key(email))


__all__ = ["force_expire", "reset_trial", "activate_dev_license"]
