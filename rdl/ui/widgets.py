"""Widget builders for the main window: form panel, condition rows and
the action bar.

Each builder returns a (container, widget_dict) tuple so the window can
keep references to the sub-widgets it updates on every tick.
"""

from PySide6.QtCore import Qt
from PySide6.QtWidgets import (
    QGridLayout,
    QHBoxLayout,
    QLabel,
    QLineEdit,
    QPushButton,
    QWidget,
)

from rdl.core.report import format_duration
from rdl.ui.theme import button_css


def placeholder_for(field_name):
    """'RSUStartDate' -> 'RSU Start Date' for input placeholders."""
    out = []
    for i, ch in enumerate(field_name):
        if i and ch.isupper() and not field_name[i - 1].isupper():
            out.append(" ")
        out.append(ch)
    return "".join(out)


def build_form_panel(form_fields, values, on_edit, columns=3):
    """Build the session metadata inputs, one QLineEdit per configured field.

    Returns (container, {field_name: QLineEdit}).
    """
    panel = QWidget()
    panel.setObjectName("formPanel")
    grid = QGridLayout(panel)
    grid.setContentsMargins(15, 15, 15, 15)
    grid.setSpacing(10)

    inputs = {}
    for i, name in enumerate(form_fields):
        edit = QLineEdit(values.get(name, ""))
        edit.setPlaceholderText(placeholder_for(name))
        edit.textChanged.connect(lambda text, n=name: on_edit(n, text))
        grid.addWidget(edit, i // columns, i % columns)
        inputs[name] = edit
    return panel, inputs


def build_condition_row(grid, row_index, key, show_category, on_toggle):
    """Add one condition row (category, toggle button, time, status) to ``grid``.

    Returns a widget dict for the row.
    """
    category_lbl = QLabel(key.category if show_category else "")
    category_lbl.setObjectName("categoryLabel")
    grid.addWidget(category_lbl, row_index, 0)

    toggle_btn = QPushButton(key.condition)
    toggle_btn.setCursor(Qt.PointingHandCursor)
    toggle_btn.clicked.connect(lambda _=False: on_toggle(key))
    grid.addWidget(toggle_btn, row_index, 1)

    time_lbl = QLabel(format_duration(0))
    time_lbl.setAlignment(Qt.AlignCenter)
    grid.addWidget(time_lbl, row_index, 2)

    status_lbl = QLabel("")
    status_lbl.setAlignment(Qt.AlignCenter)
    grid.addWidget(status_lbl, row_index, 3)

    return {
        "category": category_lbl, "button": toggle_btn,
        "time": time_lbl, "status": status_lbl,
    }


def build_action_bar(theme, categories, on_reset, on_stop_all, on_export):
    """Build the reset-per-category, Stop All and Export buttons.

    Returns (container, widget_dict).
    """
    bar = QWidget()
    lay = QHBoxLayout(bar)
    lay.setContentsMargins(0, 0, 0, 0)
    lay.setSpacing(10)
    lay.addStretch(1)

    reset_btns = {}
    for category in categories:
        btn = QPushButton(f"Reset {category}")
        btn.setStyleSheet(button_css(theme["reset_button"], radius=8, padding="10px 15px"))
        btn.clicked.connect(lambda _=False, c=category: on_reset(c))
        lay.addWidget(btn)
        reset_btns[category] = btn

    stop_btn = QPushButton("⏹ Stop All")
    stop_btn.setStyleSheet(button_css(theme["stop_all_button"], radius=10, padding="15px 25px"))
    stop_btn.clicked.connect(on_stop_all)
    lay.addWidget(stop_btn)

    export_btn = QPushButton("\U0001F4C1 Export CSV")
    export_btn.setStyleSheet(button_css(theme["export_button"], radius=10, padding="15px 25px"))
    export_btn.clicked.connect(on_export)
    lay.addWidget(export_btn)
    lay.addStretch(1)

    return bar, {"reset": reset_btns, "stop_all": stop_btn, "export": export_btn}
