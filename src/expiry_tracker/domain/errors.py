"""Error types for the expiry tracker."""


class ExpiryTrackerError(Exception):
    """Base error for the expiry tracker."""


class PermissionDeniedError(ExpiryTrackerError):
    """Notification permission was not granted."""


class SchedulingFailureError(ExpiryTrackerError):
    """The notification platform rejected a schedule or cancel call."""


class InvalidSettingsError(ExpiryTrackerError):
    """Stored notification settings could not be parsed."""
