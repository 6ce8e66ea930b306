"""
Tests for the command-line follower
"""
import io
import os
import threading
import time
from unittest.mock import patch

import pytest
from rich.console import Console

from tailer.config import Settings
from tailer.errors import ConfigurationError
from tailer.follow.follower import Follower
from tailer.follow.multi import MultiTail
from tailer.main import build_parser, build_source, main, run
from tailer.plugins.coloring import Coloring
from tailer.shutdown import ShutdownSignal

from conftest import write


def parse(*argv):
    return build_parser(Settings()).parse_args(list(argv))


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.05)
    return False


@pytest.fixture
def log_path(temp_dir_manager):
    path = os.path.join(temp_dir_manager, "app.log")
    write(path, "INFO first\nERROR second\n", mode="w")
    return path


class TestBuildSource:

    def test_single_file(self, log_path):
        source = build_source(parse(log_path, "-n", "1", "-s", "0.2"))
        assert isinstance(source, Follower)
        assert source.config.backfill_lines == 1
        assert source.config.poll_interval == 0.2

    def test_several_files_are_merged_with_aliases(self, log_path, temp_dir_manager):
        other = os.path.join(temp_dir_manager, "db.log")
        source = build_source(parse(log_path, other, "-a", "app", "-a", "database"))
        assert isinstance(source, MultiTail)
        assert [s.alias for s in source.sources] == ["app", "database"]

    def test_missing_aliases_default_to_file_names(self, log_path, temp_dir_manager):
        other = os.path.join(temp_dir_manager, "db.log")
        source = build_source(parse(log_path, other, "-a", "app"))
        assert [s.alias for s in source.sources] == ["app", "db.log"]

    def test_filter_and_theme(self, log_path):
        source = build_source(parse(log_path, "-f", "error&&db||warn", "--theme", "molokai"))
        assert source.config.patterns == [["error", "db"], ["warn"]]
        assert isinstance(source.config.plugins[0], Coloring)


class TestRun:

    def test_prints_lines_until_shutdown(self, log_path):
        output = io.StringIO()
        console = Console(file=output, width=200)
        signal = ShutdownSignal()
        result = []

        with patch("tailer.main.process_shutdown", signal):
            thread = threading.Thread(
                target=lambda: result.append(run(parse(log_path, "-s", "0.05"), console)),
                daemon=True,
            )
            thread.start()
            write(log_path, "WARN third\n")
            assert wait_for(lambda: "WARN third" in output.getvalue())
            signal.fire()
            thread.join(5)

        assert result == [0]
        assert output.getvalue().splitlines() == ["INFO first", "ERROR second", "WARN third"]

    def test_configuration_error(self, log_path):
        output = io.StringIO()
        assert run(parse(log_path, "-s", "0"), Console(file=output)) == 2
        assert "configuration error" in output.getvalue()

    def test_start_error(self, temp_dir_manager):
        output = io.StringIO()
        missing = os.path.join(temp_dir_manager, "missing.log")
        assert run(parse(missing), Console(file=output, width=200)) == 1
        assert "failed to start following" in output.getvalue()


class TestMain:

    @patch("tailer.main.run", return_value=0)
    @patch("tailer.main.configure_logging")
    @patch("tailer.main.load_settings", return_value=Settings(backfill_lines=3))
    def test_main_wires_settings_into_arguments(self, _settings, configure, run_mock, log_path):
        assert main([log_path, "--log-level", "DEBUG"]) == 0
        configure.assert_called_once_with("DEBUG", None)
        args = run_mock.call_args[0][0]
        assert args.lines == 3
        assert args.files == [log_path]

    @patch("tailer.main.load_settings",
           side_effect=ConfigurationError("invalid value for TAILER_BUFFER_SIZE: 'x'"))
    def test_bad_environment(self, _settings, capsys, log_path):
        assert main([log_path]) == 2
        assert "TAILER_BUFFER_SIZE" in capsys.readouterr().err
