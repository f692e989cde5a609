"""Tests for rdl.core.config: loading, defaulting and validation of config.json."""

import json
import shutil
import tempfile
import unittest
from pathlib import Path


class TestConfig(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.mkdtemp()
        self.path = Path(self.tmpdir) / "config.json"

    def tearDown(self):
        shutil.rmtree(self.tmpdir, ignore_errors=True)

    def _write(self, data):
        with open(self.path, "w", encoding="utf-8") as f:
            if isinstance(data, str):
                f.write(data)
            else:
                json.dump(data, f)

    def test_missing_file_writes_defaults(self):
        from rdl.core.config import build_default_config, load_config
        settings = load_config(self.path)
        self.assertTrue(self.path.exists())
        with open(self.path, encoding="utf-8") as f:
            self.assertEqual(json.load(f), build_default_config())
        self.assertEqual(settings.categories.categories[0], "Weather")
        self.assertEqual(settings.form_fields[0], "Driver")
        self.assertEqual([t.minute for t in settings.thresholds], [30, 40])
        self.assertEqual(settings.urgent_clear_seconds, 5.0)
        self.assertFalse(settings.always_on_top)

    def test_default_export_dir_is_data_exports(self):
        from rdl.common.setup import PATHS
        from rdl.core.config import Settings
        self.assertEqual(Settings.default().export_dir, PATHS.exports)

    def test_custom_values_are_used(self):
        from rdl.core.config import load_config
        from rdl.core.session import Severity
        self._write({
            "categories": {"Surface": ["Dry", "Wet"]},
            "form_fields": ["Driver", "Route"],
            "thresholds": [{"minute": 15, "severity": "urgent", "message": "15!"}],
            "urgent_clear_seconds": 3,
            "export_dir": str(Path(self.tmpdir) / "out"),
            "always_on_top": True,
        })
        settings = load_config(self.path)
        self.assertEqual(settings.categories.as_dict(), {"Surface": ["Dry", "Wet"]})
        self.assertEqual(settings.form_fields, ("Driver", "Route"))
        self.assertEqual(settings.thresholds[0].severity, Severity.URGENT)
        self.assertEqual(settings.thresholds[0].message, "15!")
        self.assertEqual(settings.urgent_clear_seconds, 3.0)
        self.assertEqual(settings.export_dir, Path(self.tmpdir) / "out")
        self.assertTrue(settings.always_on_top)

    def test_invalid_keys_fall_back_individually(self):
        from rdl.core.config import DEFAULT_FORM_FIELDS, settings_from_dict
        settings, defaulted = settings_from_dict({
            "categories": {"Weather": ["Rain", "Rain"]},
            "form_fields": ["Driver", 3],
            "thresholds": [{"minute": "soon"}],
            "urgent_clear_seconds": -1,
            "always_on_top": "yes",
        })
        self.assertEqual(defaulted, {
            "categories", "form_fields", "thresholds", "urgent_clear_seconds", "export_dir", "always_on_top"})
        self.assertEqual(settings.form_fields, tuple(DEFAULT_FORM_FIELDS))
        self.assertIn("Weather", settings.categories)

    def test_unknown_severity_is_rejected(self):
        from rdl.core.config import settings_from_dict
        _, defaulted = settings_from_dict({"thresholds": [{"minute": 5, "severity": "panic"}]})
        self.assertIn("thresholds", defaulted)

    def test_threshold_message_defaults(self):
        from rdl.core.config import settings_from_dict
        settings, defaulted = settings_from_dict({"thresholds": [{"minute": 12}]})
        self.assertNotIn("thresholds", defaulted)
        self.assertEqual(settings.thresholds[0].message, "⏰ 12 minutes reached!")

    def test_corrupted_file_falls_back(self):
        from rdl.core.config import load_config
        self._write("{not json!!")
        settings = load_config(self.path)
        self.assertEqual(len(settings.categories), 5)

    def test_invalid_utf8_falls_back(self):
        from rdl.core.config import load_config
        with open(self.path, "wb") as f:
            f.write(b'{"always_on_top": true, "x": "\xff\xfe"}')
        settings = load_config(self.path)
        self.assertFalse(settings.always_on_top)
        self.assertEqual(len(settings.categories), 5)

    def test_duplicate_threshold_minutes_are_rejected(self):
        from rdl.core.config import settings_from_dict
        settings, defaulted = settings_from_dict({"thresholds": [
            {"minute": 30, "severity": "info"},
            {"minute": 30, "severity": "urgent"},
        ]})
        self.assertIn("thresholds", defaulted)
        self.assertEqual([t.minute for t in settings.thresholds], [30, 40])

    def test_names_with_csv_separators_are_rejected(self):
        from rdl.core.config import settings_from_dict
        _, defaulted = settings_from_dict({
            "categories": {"Weather": ["Rain, heavy", "Dry"]},
            "form_fields": ["Driver", "Route,Leg"],
        })
        self.assertTrue({"categories", "form_fields"} <= defaulted)

    def test_non_object_root_falls_back(self):
        from rdl.core.config import load_config
        self._write([1, 2, 3])
        settings = load_config(self.path)
        self.assertEqual(settings.form_fields[-1], "DriveId")

    def test_save_and_load_roundtrip(self):
        from rdl.core.config import build_default_config, load_config, save_config
        cfg = build_default_config()
        cfg["categories"]["Traffic"].append("Stop and Go")
        save_config(cfg, self.path)
        settings = load_config(self.path)
        self.assertEqual(settings.categories.conditions("Traffic"), ("Flow", "Jam", "Stop and Go"))


if __name__ == "__main__":
    unittest.main()
