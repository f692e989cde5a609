"""Dark theme and Qt stylesheet for the ride logger window."""

THEME = {
    "bg": "#0d0d0d",
    "panel": "#1a1a1a",
    "input_bg": "#222222",
    "border": "#333333",
    "text": "#f5f5f5",
    "muted_text": "#aaaaaa",
    "title": "#ff3333",
    "category_text": "#ff6666",
    "row_idle": "#111111",
    "row_running": "#332222",
    "row_stopped": "#664400",
    "button_idle": "#27ae60",
    "button_running": "#e74c3c",
    "status_running": "#00ff99",
    "reset_button": "#ff9900",
    "stop_all_button": "#c0392b",
    "export_button": "#2980b9",
    "banner_info": "#ffcc00",
    "banner_urgent": "#ff4444",
}

FONT_FAMILY = "Segoe UI"


def build_stylesheet(t=THEME):
    return (
        f"QMainWindow, QWidget {{ background-color: {t['bg']}; color: {t['text']};"
        f"  font-family: '{FONT_FAMILY}', sans-serif; font-size: 14px; }}"
        f"QLabel {{ background: transparent; }}"
        f"QLineEdit, QPlainTextEdit {{"
        f"  color: {t['text']};"
        f"  background-color: {t['input_bg']};"
        f"  border: 1px solid {t['border']};"
        f"  border-radius: 8px;"
        f"  padding: 8px;"
        f"}}"
        f"QPushButton {{"
        f"  color: white;"
        f"  border: none;"
        f"  border-radius: 5px;"
        f"  padding: 8px 12px;"
        f"}}"
        f"#formPanel, #tablePanel {{ background-color: {t['panel']}; border-radius: 10px; }}"
        f"#title {{ color: {t['title']}; font-size: 26px; font-weight: bold; }}"
        f"#categoryLabel {{ color: {t['category_text']}; }}"
        f"#banner {{ color: black; font-size: 18px; font-weight: bold; padding: 12px; }}"
        f"QToolTip {{"
        f"  background-color: {t['bg']};"
        f"  color: {t['text']};"
        f"  border: 1px solid {t['border']};"
        f"}}"
    )


def button_css(color, radius=5, padding="8px 12px"):
    return f"background-color: {color}; border-radius: {radius}px; padding: {padding};"
