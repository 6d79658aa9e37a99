# -*- coding: utf-8 -*-
import json
import logging
import os
import tempfile
import unittest

from mandelzoom.__main__ import build_parser, settings_from_args
from mandelzoom.log import set_log_handlers
from mandelzoom.settings import DEFAULTS, load_settings, validate_settings


class Test_load_settings(unittest.TestCase):

    def setUp(self):
        self.tmpdir = tempfile.TemporaryDirectory()
        self.path = os.path.join(self.tmpdir.name, "settings.json")

    def tearDown(self):
        self.tmpdir.cleanup()

    def write(self, text):
        with open(self.path, "w") as f:
            f.write(text)

    def test_overrides(self):
        self.write(json.dumps({"width": 640, "backend": "arbitrary"}))
        settings = load_settings(self.path)
        self.assertEqual(settings["width"], 640)
        self.assertEqual(settings["backend"], "arbitrary")
        self.assertEqual(settings["height"], DEFAULTS["height"])

    def test_missing_file(self):
        with self.assertLogs("mandelzoom.settings", level="WARNING"):
            settings = load_settings(self.path)
        self.assertEqual(settings, DEFAULTS)

    def test_invalid_json(self):
        self.write("{width: 640")
        with self.assertLogs("mandelzoom.settings", level="WARNING"):
            settings = load_settings(self.path)
        self.assertEqual(settings, DEFAULTS)

    def test_directory_path(self):
        with self.assertLogs("mandelzoom.settings", level="WARNING"):
            settings = load_settings(self.tmpdir.name)
        self.assertEqual(settings, DEFAULTS)

    def test_undecodable_file(self):
        with open(self.path, "wb") as f:
            f.write(b'{"width": "\xff\xfe"}')
        with self.assertLogs("mandelzoom.settings", level="WARNING"):
            settings = load_settings(self.path)
        self.assertEqual(settings, DEFAULTS)

    def test_unknown_key(self):
        self.write(json.dumps({"colormap": "hot", "fps": 30}))
        with self.assertLogs("mandelzoom.settings", level="WARNING") as cm:
            settings = load_settings(self.path)
        self.assertIn("colormap", cm.output[0])
        self.assertNotIn("colormap", settings)
        self.assertEqual(settings["fps"], 30)

    def test_defaults_are_not_shared(self):
        settings = load_settings(self.path + ".absent")
        settings["centre"] = [0.0, 0.0]
        self.assertEqual(DEFAULTS["centre"], [-0.5, 0.0])


class Test_validate_settings(unittest.TestCase):

    def test_defaults_are_valid(self):
        self.assertEqual(validate_settings(dict(DEFAULTS)), DEFAULTS)

    def test_bad_values(self):
        bad = [
            {"width": 0},
            {"workers": -2},
            {"centre": [0.0]},
            {"backend": "quad"},
            {"partition": "spiral"},
            {"verbosity": "loud"},
        ]
        for override in bad:
            settings = dict(DEFAULTS, **override)
            with self.assertRaises(ValueError):
                validate_settings(settings)


class Test_command_line(unittest.TestCase):

    def test_arguments_override_settings(self):
        args = build_parser().parse_args([
            "--settings", os.path.join(tempfile.gettempdir(), "no-such-settings.json"),
            "--size", "640", "480",
            "--centre", "-0.75", "0.1",
            "--backend", "arbitrary",
            "-j", "3",
        ])
        with self.assertLogs("mandelzoom.settings", level="WARNING"):
            settings = settings_from_args(args)
        self.assertEqual((settings["width"], settings["height"]), (640, 480))
        self.assertEqual(settings["centre"], [-0.75, 0.1])
        self.assertEqual(settings["backend"], "arbitrary")
        self.assertEqual(settings["workers"], 3)
        self.assertEqual(settings["zoom"], DEFAULTS["zoom"])

    def test_unknown_backend_rejected(self):
        with self.assertRaises(SystemExit):
            build_parser().parse_args(["--backend", "quad"])


class Test_log_handlers(unittest.TestCase):

    def tearDown(self):
        logger = logging.getLogger("mandelzoom")
        for handler in logger.handlers[:]:
            logger.removeHandler(handler)
        logger.setLevel(logging.NOTSET)

    def test_levels(self):
        logger = set_log_handlers("debug @ console")
        self.assertEqual(logger.name, "mandelzoom")
        self.assertEqual(logger.level, logging.DEBUG)
        set_log_handlers("warn @ console")
        self.assertEqual(logger.level, logging.WARNING)
        self.assertEqual(len(logger.handlers), 1)

    def test_unknown_verbosity(self):
        with self.assertRaises(ValueError):
            set_log_handlers("debug2 @ console + log")


if __name__ == "__main__":
    unittest.main()
