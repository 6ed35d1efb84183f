"""Application shell, developer commands and web front end"""

import argparse
import logging
import random
import sys

import pytest

from taleloom import cli
from taleloom.app import App
from taleloom.args import parse_main_args
from taleloom.engine import ActionStatus, Mode
from taleloom.log import setup_logging
from taleloom.requirements import Requirement
from taleloom.webapp import WebAppState, create_web_app

from conftest import EXAMPLE_WORLD


@pytest.fixture()
def app(capsys) -> App:
    app = App(argparse.Namespace(dev=True, world=EXAMPLE_WORLD))
    app.engine.get_intro()
    return app


class TestArgs:

    def test_defaults(self) -> None:
        args = parse_main_args([])
        assert args.world.name == "example.yaml"
        assert args.speed == "normal"
        assert not args.dev
        assert args.seed is None
        assert args.log_level == "WARNING"

    def test_options(self) -> None:
        args = parse_main_args(["--dev", "--speed", "quick", "--no-delay", "--seed", "3"])
        assert args.dev and args.no_delay
        assert args.speed == "quick"
        assert args.seed == 3

    def test_invalid_speed(self) -> None:
        with pytest.raises(SystemExit):
            parse_main_args(["--speed", "warp"])


class TestApp:

    def test_banner(self, capsys) -> None:
        App(argparse.Namespace(dev=True, world=EXAMPLE_WORLD))
        out = capsys.readouterr().out
        assert "The Lighthouse" in out
        assert "Developer mode enabled." in out
        assert "WORLD VALIDATION FAILED" not in out

    def test_game_commands_pass_through(self, app: App) -> None:
        result = app.handle_raw_command("b")
        assert result.message.startswith("[i]OIL SHED")

    def test_goto(self, app: App) -> None:
        result = app.handle_raw_command("/goto lamp_room")
        assert result.status is ActionStatus.OK
        assert app.state.focus is app.state.resolve("lamp_room")

    def test_goto_unknown(self, app: App) -> None:
        assert app.handle_raw_command("/goto lantern").status is ActionStatus.INVALID
        assert app.handle_raw_command("/goto").status is ActionStatus.INVALID

    def test_state(self, app: App) -> None:
        message = app.handle_raw_command("/state").message
        assert "Focus: shore (tags: tide_low)" in message
        assert "Inventory: nothing" in message

    def test_run_walkthrough(self, app: App) -> None:
        result = app.handle_raw_command("/run walkthrough")
        assert result.status is ActionStatus.OK
        assert "ERROR:" not in result.message
        assert result.message.endswith("Script completed.")
        assert "lit" in app.state.resolve("lighthouse").tags
        assert app.state.focus is app.state.resolve("lighthouse")

    def test_run_rejects_outside_paths(self, app: App) -> None:
        assert app.handle_raw_command("/run ../../secret").message == "Invalid filename"
        assert app.handle_raw_command("/run missing").message == "No script found."

    def test_dev_commands_disabled(self, capsys) -> None:
        app = App(argparse.Namespace(dev=False, world=EXAMPLE_WORLD))
        result = app.handle_raw_command("/goto shed")
        assert result.status is ActionStatus.INVALID
        assert result.message == "Unknown command '/goto'."


class TestWebApp:

    def test_get_and_post(self, app: App) -> None:
        client = create_web_app(app, WebAppState(rng=random.Random(0))).test_client()

        response = client.get("/")
        assert response.status_code == 200
        assert b"ROCKY SHORE" in response.data
        assert b"[i]" not in response.data

        response = client.post("/", data={"command": "b"})
        assert response.status_code == 200
        assert b"&gt; b" in response.data
        assert b"OIL SHED" in response.data


class TestCli:

    def test_session(self, monkeypatch, capsys) -> None:
        inputs = iter(["b", "dance", "", "quit"])
        monkeypatch.setattr("sys.argv", ["taleloom", "--world", str(EXAMPLE_WORLD), "--no-delay", "--no-color"])
        monkeypatch.setattr("builtins.input", lambda prompt="": next(inputs))
        cli.main()
        out = capsys.readouterr().out
        assert "ROCKY SHORE" in out
        assert "[1] Search the rocks" in out
        assert "OIL SHED" in out
        assert "Unknown command 'dance'." in out

    def test_end_of_input(self, monkeypatch, capsys) -> None:
        def eof(prompt: str = "") -> str:
            raise EOFError

        monkeypatch.setattr("sys.argv", ["taleloom", "--world", str(EXAMPLE_WORLD), "--no-delay", "--no-color"])
        monkeypatch.setattr("builtins.input", eof)
        cli.main()
        assert "ROCKY SHORE" in capsys.readouterr().out

    def test_missing_world(self, monkeypatch, capsys, tmp_path) -> None:
        monkeypatch.setattr("sys.argv", ["taleloom", "--world", str(tmp_path / "missing.yaml")])
        with pytest.raises(SystemExit) as exc_info:
            cli.main()
        assert exc_info.value.code == 1
        assert "Cannot start" in capsys.readouterr().out


class TestWebAppRefresh:

    @pytest.fixture()
    def client(self, app: App):
        return create_web_app(app, WebAppState(rng=random.Random(0))).test_client()

    def test_refresh_does_not_change_the_world(self, app: App, client) -> None:
        shore = app.state.resolve("shore")
        first = client.get("/").data
        count = shore.evaluation_count
        tags = list(shore.tags)
        second = client.get("/").data
        assert second == first
        assert shore.evaluation_count == count
        assert list(shore.tags) == tags

    def test_refresh_keeps_last_response(self, app: App, client) -> None:
        client.get("/")
        posted = client.post("/", data={"command": "i"}).data
        assert b"INVENTORY" in posted
        assert client.get("/").data == posted
        assert client.post("/", data={"command": "x"}).status_code == 200
        assert b"ROCKY SHORE" in client.get("/").data

    def test_first_visit_starts_exploring(self, app: App, client) -> None:
        app.engine.mode = Mode.INVENTORY
        client.get("/")
        assert app.engine.mode is Mode.EXPLORE

    def test_story_error_shown_in_page(self, app: App, client) -> None:
        client.get("/")
        app.state.resolve("shore").interactions[0].requirement = Requirement("ghost.tag")
        response = client.post("/", data={"command": "l"})
        assert response.status_code == 200
        assert b"STORY ERROR" in response.data
        assert b"ghost" in response.data


class TestSetupLogging:

    def test_logs_to_stderr(self, monkeypatch) -> None:
        root = logging.getLogger()
        monkeypatch.setattr(root, "handlers", [])
        monkeypatch.setattr(root, "level", root.level)
        setup_logging("debug")
        assert root.level == logging.DEBUG
        assert root.handlers[0].stream is sys.stderr
        root.handlers[0].close()
