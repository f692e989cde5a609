"""The ride recorder: application root for one logging run.

Owns the ledger, the session tracker, the metadata form and the comment, and
is the only thing the presenter talks to.  Every operation is synchronous and
runs on the caller's thread.
"""

from rdl.common.logger import log
from rdl.core.clock import Clock
from rdl.core.config import Settings
from rdl.core.errors import DeliveryFailed, NoActiveSession, UnknownField
from rdl.core.ledger import TimerLedger, ToggleResult
from rdl.core.report import build_report
from rdl.core.session import SessionTracker


class RideRecorder:

    def __init__(self, settings: Settings, clock: Clock | None = None):
        self.settings = settings
        self.categories = settings.categories
        self._clock = clock or Clock()
        self.ledger = TimerLedger(self.categories, self._clock)
        self.session = SessionTracker(
            self._clock,
            thresholds=settings.thresholds,
            urgent_clear_seconds=settings.urgent_clear_seconds,
        )
        self._form = {name: "" for name in settings.form_fields}
        self.comment = ""

    # ------------------------------------------------------------------ #
    #  Timer intents                                                       #
    # ------------------------------------------------------------------ #

    def toggle(self, category, condition) -> ToggleResult:
        """Flip a condition, starting the session on the first valid toggle."""
        # Validate before anything else so a bad target never starts a session
        self.categories.key(category, condition)
        self.session.ensure_started()
        result = self.ledger.toggle(category, condition)
        log.info(
            f"Toggled '{result.key.label}' {'on' if result.started else 'off'}"
            + (f", stopped {sorted(k.label for k in result.stopped)}" if result.stopped else "")
        )
        return result

    def reset_category(self, category):
        self.ledger.reset_category(category)

    def stop_all(self):
        stopped = self.ledger.stop_all()
        log.info(f"Stop all: {len(stopped)} conditions stopped")
        return stopped

    # ------------------------------------------------------------------ #
    #  Read side for the presenter                                         #
    # ------------------------------------------------------------------ #

    def total_elapsed(self, key):
        return self.ledger.total_elapsed(key)

    def is_running(self, key):
        return self.ledger.is_running(key)

    def elapsed_minutes(self):
        return self.session.elapsed_minutes()

    def check_thresholds(self):
        return self.session.check_thresholds()

    # ------------------------------------------------------------------ #
    #  Session metadata                                                    #
    # ------------------------------------------------------------------ #

    def set_field(self, name, value):
        if name not in self._form:
            raise UnknownField(name)
        self._form[name] = value

    def form_fields(self):
        return dict(self._form)

    # ------------------------------------------------------------------ #
    #  Export                                                              #
    # ------------------------------------------------------------------ #

    def export(self, deliver):
        """Build the report and hand it to ``deliver(file_name, mime_type, payload)``.

        Everything is measured at a single instant.  Open intervals are only
        folded into the ledger once delivery succeeded; on DeliveryFailed the
        ledger and session are exactly as they were, so the caller can retry.
        """
        if not self.session.started:
            log.warning("Export requested before any session was started")
            raise NoActiveSession()

        now = self._clock.now_ms()
        window = self.session.window(at_ms=now)
        snapshot = self.ledger.snapshot(at=now)
        report = build_report(window, self.form_fields(), snapshot, self.comment,
                              generated_at=self._clock.wall())

        try:
            deliver(report.file_name, report.mime_type, report.payload)
        except DeliveryFailed:
            log.error(f"Export of '{report.file_name}' failed, ledger left untouched")
            raise
        except OSError as e:
            log.error(f"Export of '{report.file_name}' failed, ledger left untouched", exc_info=True)
            raise DeliveryFailed(report.file_name, e) from e

        self.ledger.stop_all(at=now)
        log.info(f"Exported '{report.file_name}' with {len(report.rows)} rows, session {window.duration_ms} ms")
        return report
