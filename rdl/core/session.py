from dataclasses import dataclass
from datetime import datetime, timedelta
from enum import Enum
from rdl.common.logger import log
from rdl.core.clock import Clock
from rdl.core.errors import NoActiveSession

# Urgent banners are told to disappear after this many seconds.
URGENT_CLEAR_SECONDS = 5.0


class Severity(Enum):
    INFO = "info"
    URGENT = "urgent"


# One configured minute mark. Fires at most once per session.
@dataclass(frozen=True)
class Threshold:
    minute: int
    severity: Severity
    message: str


# What the presenter should show when a threshold fires. `clear_after` is advisory: None means leave the banner up
# until something replaces it, a number means hide it after that many seconds.
@dataclass(frozen=True)
class Notification:
    severity: Severity
    message: str
    minute: int
    clear_after: float | None = None


DEFAULT_THRESHOLDS = (
    Threshold(30, Severity.INFO, "⏰ 30 minutes reached!"),
    Threshold(40, Severity.URGENT, "⏰ 40 minutes reached!"),
)


# Start/end/duration of a session as it goes into the report.
@dataclass(frozen=True)
class SessionWindow:
    start: datetime
    end: datetime
    duration_ms: int


# Tracks when the drive started and which minute alerts already fired. The session starts lazily on the first
# condition toggle and then stays fixed for the rest of the run; neither category resets nor stop-all clear it.
class SessionTracker:

    def __init__(self, clock: Clock | None = None, thresholds=DEFAULT_THRESHOLDS,
                 urgent_clear_seconds=URGENT_CLEAR_SECONDS):
        self._clock = clock or Clock()
        self.thresholds = tuple(sorted(thresholds, key=lambda t: t.minute))
        self.urgent_clear_seconds = urgent_clear_seconds
        self._started_mono = None
        self._started_wall = None
        self._fired = set()

    @property
    def started(self):
        return self._started_mono is not None

    @property
    def started_at(self):
        return self._started_wall

    # Returns True only on the call that actually started the session.
    def ensure_started(self):
        if self.started:
            return False
        self._started_mono = self._clock.now_ms()
        self._started_wall = self._clock.wall()
        log.info(f"Session started at {self._started_wall.isoformat()}")
        return True

    def elapsed_ms(self, at=None):
        if not self.started:
            return 0
        now = self._clock.now_ms() if at is None else at
        return max(0, now - self._started_mono)

    def elapsed_minutes(self):
        return self.elapsed_ms() // 60000

    # Called once per presenter tick. Returns the first threshold that matches the current whole minute and hasn't
    # fired yet, marking it as fired.
    def check_thresholds(self) -> Notification | None:
        if not self.started:
            return None
        minutes = self.elapsed_minutes()
        for threshold in self.thresholds:
            if threshold.minute in self._fired or threshold.minute != minutes:
                continue
            self._fired.add(threshold.minute)
            clear_after = self.urgent_clear_seconds if threshold.severity is Severity.URGENT else None
            log.info(f"Session threshold reached: {threshold.minute} min ({threshold.severity.value})")
            return Notification(threshold.severity, threshold.message, threshold.minute, clear_after)
        return None

    # The session's bounds for export, with the end pinned to the monotonic instant `at_ms` (defaults to now). The
    # wall end time is derived from the start so it agrees with the measured duration.
    def window(self, at_ms=None) -> SessionWindow:
        if not self.started:
            raise NoActiveSession()
        duration = self.elapsed_ms(at_ms)
        end = self._started_wall + timedelta(milliseconds=duration)
        return SessionWindow(start=self._started_wall, end=end, duration_ms=duration)
