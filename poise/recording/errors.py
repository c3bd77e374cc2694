"""Exceptions raised by the session recorder."""


class RecorderError(Exception):
    """Base class for recorder failures."""


class PermissionDeniedError(RecorderError):
    """The sensor did not authorize recording."""


class AlreadyRunningError(RecorderError):
    """start() was called while a recording is in progress."""
