"""Error types raised by the ride logger core.

Every error here is local and recoverable: the core never leaves ledger or
session state half-mutated when one of these is raised.
"""


class RideLoggerError(Exception):
    """Base class for all ride logger errors."""


class UnknownCondition(RideLoggerError):
    """A toggle/reset target that isn't in the configured categories."""

    def __init__(self, category, condition=None):
        self.category = category
        self.condition = condition
        if condition is None:
            msg = f"Unknown category '{category}'"
        else:
            msg = f"Unknown condition '{condition}' in category '{category}'"
        super().__init__(msg)


class UnknownField(RideLoggerError):
    """A session form field name that isn't configured."""

    def __init__(self, name):
        self.name = name
        super().__init__(f"Unknown form field '{name}'")


class NoActiveSession(RideLoggerError):
    """Export was requested before any condition was ever toggled."""

    def __init__(self):
        super().__init__("No session has been started yet, toggle a condition first")


class DeliveryFailed(RideLoggerError):
    """The report couldn't be handed off as a file.  ``__cause__`` holds the
    underlying platform error."""

    def __init__(self, file_name, cause=None):
        self.file_name = file_name
        self.cause = cause
        detail = f": {cause}" if cause is not None else ""
        super().__init__(f"Could not deliver report '{file_name}'{detail}")
