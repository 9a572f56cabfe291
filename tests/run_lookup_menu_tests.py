#!/usr/bin/env python3
"""Lookup / config menu test runner.

Runs lightweight, local tests for:
- Credential source wiring (pass / env / config) in the lookup menu
- Lookup session flow: authenticate once, dispatch actions, report errors
- Config menu update flow (secret masking, cancelled prompts)

This runner avoids network calls; Spotify is replaced with fakes.

Usage:
  python3 -m tests.run_lookup_menu_tests

"""

from __future__ import annotations

import os
import sys
import tempfile
import types
import unittest
from dataclasses import dataclass
from pathlib import Path
from typing import Any
from unittest import mock

# Ensure imports like `utils.*` and `menus.*` work even when executed from repo root.
PROJECT_ROOT = Path(__file__).resolve().parents[1]
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from spotify_client import AuthError, ApiError, Configuration, TrackId
from spotify_client.models import Album, Artist, SearchResults, Track


# -------------------------
# Simple questionary mocks
# -------------------------

@dataclass
class _Askable:
    """Mimic questionary prompt objects that return a value from .ask() / .ask_async()."""

    value: Any

    def ask(self):
        return self.value

    async def ask_async(self):
        return self.value


class _QuestionaryMock:
    """A minimal questionary stub that returns queued answers and captures args."""

    def __init__(self):
        self._queue: list[Any] = []
        self.select_messages: list[str] = []
        self.text_messages: list[str] = []

    def queue(self, *answers: Any) -> None:
        self._queue.extend(list(answers))

    def _pop(self) -> Any:
        if not self._queue:
            raise AssertionError("QuestionaryMock queue exhausted")
        return self._queue.pop(0)

    def select(self, message: str, choices: list[Any]):
        self.select_messages.append(message)
        return _Askable(self._pop())

    def text(self, message: str, default: str = ""):
        self.text_messages.append(message)
        return _Askable(self._pop())

    def password(self, message: str):
        return _Askable(self._pop())

    def confirm(self, message: str, default: bool = True):
        return _Askable(self._pop())


class _PatchModuleAttr:
    """Context manager to temporarily patch module attributes."""

    def __init__(self, module: types.ModuleType, attr: str, value: Any):
        self.module = module
        self.attr = attr
        self.value = value
        self._old = None

    def __enter__(self):
        self._old = getattr(self.module, self.attr)
        setattr(self.module, self.attr, self.value)

    def __exit__(self, exc_type, exc, tb):
        setattr(self.module, self.attr, self._old)


# -------------------------
# Spotify fakes
# -------------------------

TRACK_ID = "6D6Pybzey0shI8U9ttRAPx"


class _FakeClient:
    def __init__(self):
        self.calls: list = []
        self.closed = False
        self.fail_with = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc, tb):
        self.closed = True

    async def track(self, track_id, market=None):
        self.calls.append(("track", track_id, market))
        if self.fail_with is not None:
            raise self.fail_with
        return Track(
            id=track_id.id,
            name="Song",
            artists=[Artist(id="a", name="Artist")],
            album=Album(id="al", name="Album", release_date="2020-01-01"),
            duration_ms=185000,
        )

    async def search(self, query, market=None):
        self.calls.append(("search", query, market))
        return SearchResults()


class _FakeHandler:
    def __init__(self, client=None, error=None):
        self.client = client or _FakeClient()
        self.error = error
        self.configs: list = []

    async def client_new(self, config):
        self.configs.append(config)
        if self.error is not None:
            raise self.error
        return self.client


# -------------------------
# Tests
# -------------------------


class TestBuildConfiguration(unittest.TestCase):
    def test_pass_source(self):
        import menus.lookup_menu as lm

        with mock.patch.object(lm.Configuration, "from_pass", return_value=Configuration("id", "secret")) as from_pass:
            lm.build_configuration(
                {
                    "credential_source": "pass",
                    "spotify_pass_client_id_key": "k/id",
                    "spotify_pass_client_secret_key": "k/secret",
                    "spotify_market": "DE",
                }
            )
        from_pass.assert_called_once_with("k/id", "k/secret", settings={"spotify_market": "DE"})

    def test_env_source(self):
        import menus.lookup_menu as lm

        with mock.patch.object(lm.Configuration, "from_env", return_value=Configuration("id", "secret")) as from_env:
            lm.build_configuration({"credential_source": "env", "spotify_env_file": ""})
        from_env.assert_called_once_with(env_file=None, settings={})

    def test_config_source(self):
        import menus.lookup_menu as lm

        config = lm.build_configuration(
            {"credential_source": "config", "spotify_client_id": "id", "spotify_client_secret": "secret"}
        )
        self.assertEqual(config.client_id, "id")
        self.assertEqual(config.client_secret, "secret")


class TestLookupSession(unittest.IsolatedAsyncioTestCase):
    settings = {"credential_source": "config", "spotify_client_id": "id", "spotify_client_secret": "secret", "spotify_market": ""}

    async def test_track_lookup_then_back(self):
        import menus.lookup_menu as lm

        q = _QuestionaryMock()
        q.queue("Look up a track", f"spotify:track:{TRACK_ID}", "se", "Back")
        handler = _FakeHandler()

        with _PatchModuleAttr(lm, "questionary", q), mock.patch("builtins.print") as printed:
            await lm.lookup_session(self.settings, handler=handler)

        self.assertEqual(len(handler.configs), 1)
        name, track_id, market = handler.client.calls[0]
        self.assertEqual(name, "track")
        self.assertEqual(track_id, TrackId.from_id(TRACK_ID))
        self.assertEqual(str(market), "SE")
        self.assertTrue(handler.client.closed)
        output = " ".join(str(c.args[0]) for c in printed.call_args_list if c.args)
        self.assertIn("Song", output)
        self.assertIn("3:05", output)

    async def test_api_errors_do_not_end_session(self):
        import menus.lookup_menu as lm

        q = _QuestionaryMock()
        q.queue("Look up a track", TRACK_ID, "", "Look up a track", "not-an-id", "Back")
        handler = _FakeHandler()
        handler.client.fail_with = ApiError("Spotify API error 404: Non existing id", status=404)

        errors = []
        with (
            _PatchModuleAttr(lm, "questionary", q),
            _PatchModuleAttr(lm, "log_error", errors.append),
        ):
            await lm.lookup_session(self.settings, handler=handler)

        self.assertEqual(len(errors), 2)
        self.assertIn("404", errors[0])
        self.assertIn("Invalid Spotify track id", errors[1])
        self.assertTrue(handler.client.closed)

    async def test_auth_failure_returns_without_prompting(self):
        import menus.lookup_menu as lm

        q = _QuestionaryMock()
        errors = []
        handler = _FakeHandler(error=AuthError("Missing Spotify client_id and client_secret."))

        with (
            _PatchModuleAttr(lm, "questionary", q),
            _PatchModuleAttr(lm, "log_error", errors.append),
        ):
            await lm.lookup_session(self.settings, handler=handler)

        self.assertEqual(q.select_messages, [])
        self.assertEqual(len(errors), 1)
        self.assertIn("Could not connect", errors[0])

    async def test_empty_search_reports_no_results(self):
        import menus.lookup_menu as lm

        q = _QuestionaryMock()
        q.queue("Search", "nothing matches this", None)
        handler = _FakeHandler()
        infos = []

        with (
            _PatchModuleAttr(lm, "questionary", q),
            _PatchModuleAttr(lm, "log_info", infos.append),
        ):
            await lm.lookup_session(self.settings, handler=handler)

        self.assertEqual(handler.client.calls, [("search", "nothing matches this", None)])
        self.assertEqual(infos, ["No results."])


class TestConfigMenu(unittest.TestCase):
    def setUp(self):
        import config as cli_config

        self._td = tempfile.TemporaryDirectory()
        self.addCleanup(self._td.cleanup)
        patcher = mock.patch.object(cli_config, "CONFIG_PATH", os.path.join(self._td.name, "config.json"))
        patcher.start()
        self.addCleanup(patcher.stop)
        cli_config.save_config(dict(cli_config.DEFAULT_CONFIG))
        self.cli_config = cli_config

    def test_update_secret_uses_password_prompt(self):
        import menus.config_menu as cm

        q = _QuestionaryMock()
        q.queue("spotify_client_secret", "hunter2")
        successes = []

        with (
            _PatchModuleAttr(cm, "questionary", q),
            _PatchModuleAttr(cm, "log_success", successes.append),
            mock.patch("builtins.print"),
        ):
            config = cm.update_setting_menu(dict(self.cli_config.DEFAULT_CONFIG))

        self.assertEqual(config["spotify_client_secret"], "hunter2")
        self.assertNotIn("hunter2", successes[0])
        self.assertEqual(self.cli_config.load_config()["spotify_client_secret"], "hunter2")

    def test_cancelled_prompt_keeps_value(self):
        import menus.config_menu as cm

        q = _QuestionaryMock()
        q.queue("spotify_language", None)

        with _PatchModuleAttr(cm, "questionary", q), mock.patch("builtins.print"):
            config = cm.update_setting_menu(dict(self.cli_config.DEFAULT_CONFIG, spotify_language="de"))

        self.assertEqual(config["spotify_language"], "de")

    def test_blank_optional_value_is_stored_as_null(self):
        import menus.config_menu as cm

        q = _QuestionaryMock()
        q.queue("spotify_proxy", "  ")

        with _PatchModuleAttr(cm, "questionary", q), mock.patch("builtins.print"):
            config = cm.update_setting_menu(dict(self.cli_config.DEFAULT_CONFIG, spotify_proxy="http://proxy:8080"))

        self.assertIsNone(config["spotify_proxy"])
        self.assertIsNone(self.cli_config.load_config()["spotify_proxy"])


if __name__ == "__main__":
    unittest.main(verbosity=2)
