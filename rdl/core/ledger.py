from dataclasses import dataclass, field
from rdl.common.logger import log
from rdl.core.categories import CategorySet, ConditionKey
from rdl.core.clock import Clock

# How long the presenter should keep a "Stopped" highlight on a row that was just closed.
STOPPED_HIGHLIGHT_SECONDS = 2.0

# What a single toggle did. `stopped` lists every key that went from running to idle during the call (siblings
# pushed out by exclusivity, plus the key itself on the toggle-off path).
@dataclass(frozen=True)
class ToggleResult:
    key: ConditionKey
    started: bool
    stopped: frozenset = field(default_factory=frozenset)
    highlight_seconds: float = STOPPED_HIGHLIGHT_SECONDS


# The accounting core. Holds which conditions are running right now (with their monotonic start in ms) and the
# total already banked per condition from every closed interval. Banking is always additive: closing an interval
# adds its delta to the total, it never overwrites, so any number of start/stop cycles sum up correctly.
class TimerLedger:

    def __init__(self, categories: CategorySet, clock: Clock | None = None):
        self.categories = categories
        self._clock = clock or Clock()
        self._running: dict[ConditionKey, int] = {}
        self._accumulated: dict[ConditionKey, int] = {}

    def _now(self, at=None):
        return self._clock.now_ms() if at is None else at

    # Closes the open interval on `key` and banks it. Caller guarantees the key is running.
    def _close(self, key, now):
        started_at = self._running.pop(key)
        delta = max(0, now - started_at)
        self._accumulated[key] = self._accumulated.get(key, 0) + delta
        log.debug(f"Stopped '{key.label}' after {delta} ms, total now {self._accumulated[key]} ms")

    #region === Mutations ===

    # Flips one condition. Any other running condition in the same category is stopped first, regardless of what
    # was clicked, so a category can never end up with two conditions running.
    def toggle(self, category, condition) -> ToggleResult:
        key = self.categories.key(category, condition)
        now = self._now()
        stopped = set()

        for sibling in self.categories.keys(category):
            if sibling != key and sibling in self._running:
                self._close(sibling, now)
                stopped.add(sibling)

        if key in self._running:
            self._close(key, now)
            stopped.add(key)
            started = False
        else:
            self._running[key] = now
            started = True
            log.debug(f"Started '{key.label}' at mono {now} ms")

        return ToggleResult(key=key, started=started, stopped=frozenset(stopped))

    # Hard reset for one category: running entries are dropped WITHOUT banking, and banked totals are discarded.
    # Other categories are untouched.
    def reset_category(self, category):
        keys = self.categories.keys(category)
        for key in keys:
            self._running.pop(key, None)
            self._accumulated.pop(key, None)
        log.info(f"Reset category '{category}' ({len(keys)} conditions cleared)")

    # Banks every open interval and leaves nothing running. Returns the keys that were stopped.
    def stop_all(self, at=None):
        now = self._now(at)
        stopped = list(self._running)
        for key in stopped:
            self._close(key, now)
        if stopped:
            log.debug(f"Stop all closed {len(stopped)} running conditions")
        return frozenset(stopped)

    #endregion === Mutations ===

    #region === Queries ===

    # Banked total plus the currently open interval. Read-only, the presenter calls this every tick.
    def total_elapsed(self, key: ConditionKey, at=None) -> int:
        total = self._accumulated.get(key, 0)
        started_at = self._running.get(key)
        if started_at is not None:
            total += max(0, self._now(at) - started_at)
        return total

    def is_running(self, key: ConditionKey) -> bool:
        return key in self._running

    def running_keys(self):
        return list(self._running)

    # The single running condition of a category, or None.
    def running_in(self, category):
        for key in self.categories.keys(category):
            if key in self._running:
                return key
        return None

    def accumulated(self):
        return dict(self._accumulated)

    # Totals exactly as they'd read after stop_all(at), in the order stop_all would leave the banked log: keys that
    # already have banked time first, then running keys that never closed an interval, in the order they started.
    def snapshot(self, at=None):
        now = self._now(at)
        order = list(self._accumulated)
        order.extend(key for key in self._running if key not in self._accumulated)
        return [(key, self.total_elapsed(key, at=now)) for key in order]

    #endregion === Queries ===
