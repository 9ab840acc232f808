"""Exception hierarchy for trialkey.

Only :class:`StorageError` and :class:`InvalidLicenseKeyError` ever reach a
caller.  :class:`RecordDecodeError` is raised by codecs and swallowed by the
store, which treats an unreadable record the same as a missing one.
"""

from __future__ import annotations


class EntitlementError(Exception):
    """Base class for every error raised by trialkey."""


class StorageError(EntitlementError):
    """The record could not be written (directory creation or file write)."""


class RecordDecodeError(EntitlementError):
    """The persisted record is corrupt or unreadable."""


INVALID_KEY_MESSAGE = "Invalid license key. Please check your email and key and try again."


class InvalidLicenseKeyError(EntitlementError):
    """The (email, key) pair failed verification.

    The message never says which half was wrong.
    """

    def __init__(self, message: str = INVALID_KEY_MESSAGE):
        super().__init__(message)


__all__ = [
    "EntitlementError",
    "StorageError",
    "RecordDecodeError",
    "InvalidLicenseKeyError",
    "INVALID_KEY_MESSAGE",
]
