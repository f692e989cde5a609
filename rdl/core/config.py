import json
import re
from dataclasses import dataclass
from pathlib import Path
from rdl.common.logger import log
from rdl.common.setup import PATHS
from rdl.core.categories import CategorySet, DEFAULT_CATEGORIES
from rdl.core.session import DEFAULT_THRESHOLDS, URGENT_CLEAR_SECONDS, Severity, Threshold

#region === Defaults and Paths ===

CONFIG_PATH = PATHS.config_file

# Names end up as CSV cells in the report
_RESERVED = re.compile(r"[,\r\n]")

DEFAULT_FORM_FIELDS = ["Driver", "Annotator", "Date", "Vehicle", "RSUNo", "RSUStartDate", "DriveId"]

# Helper to return a truly fresh, default config dict (the on-disk shape).
def build_default_config():
    return {
        "categories": {category: list(conditions) for category, conditions in DEFAULT_CATEGORIES.items()},
        "form_fields": list(DEFAULT_FORM_FIELDS),
        "thresholds": [
            {"minute": t.minute, "severity": t.severity.value, "message": t.message} for t in DEFAULT_THRESHOLDS
        ],
        "urgent_clear_seconds": URGENT_CLEAR_SECONDS,
        "export_dir": None,
        "always_on_top": False,
    }

# The validated, typed view of config.json that the rest of the program works with.
@dataclass(frozen=True)
class Settings:
    categories: CategorySet
    form_fields: tuple
    thresholds: tuple
    urgent_clear_seconds: float
    export_dir: Path
    always_on_top: bool

    @staticmethod
    def default():
        return settings_from_dict(build_default_config())[0]

#endregion === Defaults and Paths ===

#region === Validation ===

def _parse_categories(raw):
    if not isinstance(raw, dict):
        raise ValueError("categories must be an object")
    for conditions in raw.values():
        if not isinstance(conditions, list):
            raise ValueError("each category must map to a list of conditions")
    return CategorySet(raw)

def _parse_form_fields(raw):
    if not isinstance(raw, list) or not all(isinstance(f, str) and f.strip() for f in raw):
        raise ValueError("form_fields must be a list of non-empty strings")
    if any(_RESERVED.search(f) for f in raw):
        raise ValueError("form_fields can't contain commas or line breaks")
    if len(set(raw)) != len(raw):
        raise ValueError("form_fields contains duplicates")
    return tuple(raw)

def _parse_thresholds(raw):
    if not isinstance(raw, list):
        raise ValueError("thresholds must be a list")
    thresholds = []
    for entry in raw:
        minute = entry.get("minute") if isinstance(entry, dict) else None
        if not isinstance(minute, int) or isinstance(minute, bool) or minute <= 0:
            raise ValueError(f"invalid threshold {entry!r}")
        if any(t.minute == minute for t in thresholds):
            raise ValueError(f"threshold minute {minute} is listed twice")
        thresholds.append(Threshold(
            minute=minute,
            severity=Severity(entry.get("severity", "info")),
            message=str(entry.get("message") or f"⏰ {minute} minutes reached!"),
        ))
    return tuple(thresholds)

def _parse_clear_seconds(raw):
    if isinstance(raw, bool) or not isinstance(raw, (int, float)) or raw < 0:
        raise ValueError("urgent_clear_seconds must be a non-negative number")
    return float(raw)

def _parse_export_dir(raw):
    if raw is None:
        return PATHS.exports
    if not isinstance(raw, str) or not raw.strip():
        raise ValueError("export_dir must be null or a path string")
    return Path(raw).expanduser()

def _parse_bool(raw):
    if not isinstance(raw, bool):
        raise ValueError("expected true/false")
    return raw

_PARSERS = {
    "categories": _parse_categories,
    "form_fields": _parse_form_fields,
    "thresholds": _parse_thresholds,
    "urgent_clear_seconds": _parse_clear_seconds,
    "export_dir": _parse_export_dir,
    "always_on_top": _parse_bool,
}

# Turns a raw config dict into Settings. Every key that's missing or fails validation is replaced by its default,
# and the names of those keys come back alongside so the caller can warn about them.
def settings_from_dict(raw):
    defaults = build_default_config()
    values = {}
    defaulted_values = set()
    for key, parser in _PARSERS.items():
        if key in raw:
            try:
                values[key] = parser(raw[key])
                continue
            except (ValueError, TypeError, AttributeError) as e:
                log.debug(f"Config key '{key}' rejected: {e}")
        defaulted_values.add(key)
        values[key] = parser(defaults[key])
    return Settings(**values), defaulted_values

#endregion === Validation ===

#region === Saving and Loading ===

# Loads config.json, validating each key and falling back to defaults where needed. A missing file is written out
# with defaults so the operator has something to edit; an unreadable file falls back to defaults entirely.
def load_config(path: Path | None = None) -> Settings:
    path = Path(path) if path is not None else CONFIG_PATH
    if not path.exists():
        log.info(f"No config found at '{path}', writing defaults.")
        save_config(build_default_config(), path)
        return Settings.default()
    try:
        with open(path, "r", encoding="utf-8") as f:
            raw = json.load(f)
        if not isinstance(raw, dict):
            raise TypeError("config root must be an object")
    # ValueError covers JSONDecodeError and UnicodeDecodeError
    except (ValueError, OSError, TypeError):
        log.warning(f"Could not read config at '{path}', falling back to defaults.", exc_info=True)
        return Settings.default()

    settings, defaulted = settings_from_dict(raw)
    if defaulted:
        log.warning(f"Loaded config from '{path}', but with missing or invalid values that were defaulted: {', '.join(sorted(defaulted))}")
    else:
        log.info(f"Successfully loaded config from '{path}'.")
    return settings

# Writes a raw config dict to disk.
def save_config(config, path: Path | None = None):
    path = Path(path) if path is not None else CONFIG_PATH
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(config, f, indent=2, ensure_ascii=False)
    log.info(f"Saved config to '{path}'")

#endregion === Saving and Loading ===
