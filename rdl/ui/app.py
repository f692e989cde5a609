import sys
import time
from PySide6.QtCore import Qt, QTimer
from PySide6.QtWidgets import (
    QApplication,
    QGridLayout,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QScrollArea,
    QVBoxLayout,
    QWidget,
)
from rdl.common.logger import log
from rdl.core import config
from rdl.core.delivery import FileDelivery
from rdl.core.errors import DeliveryFailed, NoActiveSession
from rdl.core.recorder import RideRecorder
from rdl.core.report import format_duration
from rdl.core.session import Severity
from rdl.ui.theme import THEME, build_stylesheet, button_css
from rdl.ui.widgets import build_action_bar, build_condition_row, build_form_panel


# ---------------------------------------------------------------------------
# Main window
# ---------------------------------------------------------------------------

# Main window of the ride logger. Only ever reads recorder state and forwards clicks/edits to it; all timing lives in
# the core and the 1 s tick just re-reads totals.
class MainWindow(QMainWindow):

    def __init__(self, recorder: RideRecorder, delivery: FileDelivery):
        super().__init__()
        self.setWindowTitle("Ride Data Logger")
        self.recorder = recorder
        self.delivery = delivery
        self.theme = THEME

        if recorder.settings.always_on_top:
            self.setWindowFlags(self.windowFlags() | Qt.WindowStaysOnTopHint)

        self._rows = {}             # ConditionKey -> widget dict
        self._stopped_until = {}    # ConditionKey -> monotonic deadline of the "Stopped" highlight
        self._banner_until = None   # monotonic deadline for an auto-clearing banner, or None

        # -- Build UI skeleton --
        central = QWidget()
        self.setCentralWidget(central)
        outer = QVBoxLayout(central)
        outer.setContentsMargins(0, 0, 0, 0)

        self._banner = QLabel("")
        self._banner.setObjectName("banner")
        self._banner.setAlignment(Qt.AlignCenter)
        self._banner.setVisible(False)
        outer.addWidget(self._banner)

        scroll = QScrollArea()
        scroll.setWidgetResizable(True)
        outer.addWidget(scroll)
        body = QWidget()
        scroll.setWidget(body)
        self._main_lay = QVBoxLayout(body)
        self._main_lay.setContentsMargins(25, 25, 25, 25)
        self._main_lay.setSpacing(20)

        title = QLabel("\U0001F697 Ride Data Logger")
        title.setObjectName("title")
        title.setAlignment(Qt.AlignCenter)
        self._main_lay.addWidget(title)

        form, self._inputs = build_form_panel(
            recorder.settings.form_fields, recorder.form_fields(), on_edit=self._on_field_edit)
        self._main_lay.addWidget(form)

        self._build_table()

        self._comment = QPlainTextEdit()
        self._comment.setPlaceholderText("\U0001F4DD Enter comments here...")
        self._comment.setFixedHeight(80)
        self._comment.textChanged.connect(self._on_comment_edit)
        self._main_lay.addWidget(self._comment)

        bar, self._actions = build_action_bar(
            self.theme, recorder.categories,
            on_reset=self._on_reset_category,
            on_stop_all=self._on_stop_all,
            on_export=self._on_export,
        )
        self._main_lay.addWidget(bar)

        self.setStyleSheet(build_stylesheet(self.theme))
        self._update_all_displays()
        self.resize(900, 900)

        # -- Tick timer (1 s) --
        self._timer = QTimer(self)
        self._timer.timeout.connect(self._tick)
        self._timer.start(1000)

    # ------------------------------------------------------------------ #
    #  Table building                                                      #
    # ------------------------------------------------------------------ #

    def _build_table(self):
        table = QWidget()
        table.setObjectName("tablePanel")
        grid = QGridLayout(table)
        grid.setContentsMargins(10, 10, 10, 10)
        grid.setHorizontalSpacing(10)
        grid.setVerticalSpacing(4)

        for col, heading in enumerate(("Category", "Condition", "Time", "Status")):
            lbl = QLabel(heading)
            lbl.setAlignment(Qt.AlignCenter)
            lbl.setStyleSheet(f"background-color: {self.theme['border']}; padding: 10px; font-weight: bold;")
            grid.addWidget(lbl, 0, col)

        row_index = 1
        for category in self.recorder.categories:
            for i, key in enumerate(self.recorder.categories.keys(category)):
                self._rows[key] = build_condition_row(
                    grid, row_index, key, show_category=(i == 0), on_toggle=self._on_toggle)
                row_index += 1

        self._main_lay.addWidget(table)

    # ------------------------------------------------------------------ #
    #  User intents                                                        #
    # ------------------------------------------------------------------ #

    def _on_toggle(self, key):
        result = self.recorder.toggle(key.category, key.condition)
        deadline = time.monotonic() + result.highlight_seconds
        for stopped in result.stopped:
            self._stopped_until[stopped] = deadline
        if result.started:
            self._stopped_until.pop(key, None)
        for sibling in self.recorder.categories.keys(key.category):
            self._update_display(sibling)

    def _on_reset_category(self, category):
        self.recorder.reset_category(category)
        for key in self.recorder.categories.keys(category):
            self._stopped_until.pop(key, None)
            self._update_display(key)

    def _on_stop_all(self):
        self.recorder.stop_all()
        self._update_all_displays()

    def _on_field_edit(self, name, value):
        self.recorder.set_field(name, value)

    def _on_comment_edit(self):
        self.recorder.comment = self._comment.toPlainText()

    def _on_export(self):
        try:
            report = self.recorder.export(self.delivery)
        except NoActiveSession:
            QMessageBox.warning(self, "No Session", "Please start a session first!")
            return
        except DeliveryFailed as e:
            QMessageBox.critical(self, "Export Failed",
                                 f"Could not save the report, nothing was lost. Try again.\n\n{e}")
            return
        self._update_all_displays()
        QMessageBox.information(self, "Exported",
                                f"Saved '{report.file_name}' to:\n{self.delivery.directory}")

    # ------------------------------------------------------------------ #
    #  Display helpers                                                     #
    # ------------------------------------------------------------------ #

    def _update_display(self, key, now=None):
        w = self._rows.get(key)
        if w is None:
            return
        now = time.monotonic() if now is None else now
        t = self.theme
        running = self.recorder.is_running(key)
        recent = self._stopped_until.get(key, 0) > now

        w["time"].setText(format_duration(self.recorder.total_elapsed(key)))
        w["button"].setText(f"{key.condition} ⏱" if running else key.condition)
        w["button"].setStyleSheet(button_css(t["button_running"] if running else t["button_idle"]))
        w["status"].setText("Running" if running else ("Stopped" if recent else ""))

        row_bg = t["row_stopped"] if recent else (t["row_running"] if running else t["row_idle"])
        status_fg = t["status_running"] if running else t["muted_text"]
        w["category"].setStyleSheet(f"background-color: {row_bg}; color: {t['category_text']};")
        w["time"].setStyleSheet(f"background-color: {row_bg};")
        w["status"].setStyleSheet(f"background-color: {row_bg}; color: {status_fg};")

    def _update_all_displays(self):
        now = time.monotonic()
        for key in self._rows:
            self._update_display(key, now)

    def _show_banner(self, notification):
        color = self.theme["banner_urgent"] if notification.severity is Severity.URGENT else self.theme["banner_info"]
        self._banner.setText(notification.message)
        self._banner.setStyleSheet(f"background-color: {color};")
        self._banner.setVisible(True)
        self._banner_until = (time.monotonic() + notification.clear_after
                              if notification.clear_after is not None else None)

    # ------------------------------------------------------------------ #
    #  Tick                                                                #
    # ------------------------------------------------------------------ #

    def _tick(self):
        now = time.monotonic()
        for key in self._rows:
            if self.recorder.is_running(key) or key in self._stopped_until:
                self._update_display(key, now)
        # Expired highlights were repainted above, drop them now
        for key in [k for k, until in self._stopped_until.items() if until <= now]:
            del self._stopped_until[key]

        notification = self.recorder.check_thresholds()
        if notification is not None:
            self._show_banner(notification)
        elif self._banner_until is not None and now >= self._banner_until:
            self._banner.setVisible(False)
            self._banner_until = None

    def closeEvent(self, event):
        if any(self.recorder.is_running(k) for k in self._rows):
            answer = QMessageBox.question(
                self, "Quit", "Conditions are still running and nothing is saved until you export. Quit anyway?")
            if answer != QMessageBox.Yes:
                event.ignore()
                return
        log.info("Main window closed")
        event.accept()


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def main():
    app = QApplication(sys.argv)
    settings = config.load_config()
    recorder = RideRecorder(settings)
    window = MainWindow(recorder, FileDelivery(settings.export_dir))
    window.show()
    sys.exit(app.exec())
