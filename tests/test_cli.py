from unittest import mock

import pytest
import toml
from click.testing import CliRunner

from webwatcher import cli


@pytest.fixture
def temp_config(tmp_path):
    config_data = {
        "browser": {"profile_dir": str(tmp_path / ".chrome")},
        "watch": {"settle_window": 0.5},
    }
    config_file = tmp_path / "webwatcher.toml"
    with open(config_file, "w") as f:
        toml.dump(config_data, f)
    return str(config_file)


def test_show_config(temp_config):
    runner = CliRunner()
    result = runner.invoke(cli.main, ["--config", temp_config, "show-config"])
    assert result.exit_code == 0
    assert "settle_window" in result.output
    assert "0.5" in result.output


def test_missing_config_aborts(tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli.main, ["--config", str(tmp_path / "nope.toml"), "show-config"])
    assert result.exit_code != 0
    assert "Error loading configuration" in result.output


def test_run_without_browser(temp_config, tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli.main, ["--config", temp_config, "run", "--browser", str(tmp_path / "nope")])
    assert result.exit_code == 1
    assert "Chrome is not installed in your computer!" in result.output


def test_run_launches_then_watches(temp_config, tmp_path):
    exe = tmp_path / "chrome"
    exe.write_text("")
    profile = tmp_path / ".chrome"
    runner = CliRunner()
    with mock.patch("webwatcher.cli.browser.launch_browser") as launch, \
            mock.patch("webwatcher.cli.browser.describe_process", return_value={"PID": 1}), \
            mock.patch("webwatcher.cli.monitor.watch_directory") as watch_directory:
        result = runner.invoke(cli.main, ["--config", temp_config, "run", "--browser", str(exe), "--settle", "0.3"])
    assert result.exit_code == 0, result.output
    launch.assert_called_once_with(str(exe), str(profile), ["--new-window"])
    root_path, observer, formatter = watch_directory.call_args[0]
    assert root_path == str(profile)
    assert observer.settle_window == 0.3
    assert formatter.label_width == len("UNLINKDIR")


def test_watch_missing_directory(temp_config, tmp_path):
    runner = CliRunner()
    result = runner.invoke(cli.main, ["--config", temp_config, "watch", str(tmp_path / "missing")])
    assert result.exit_code == 1
    assert "does not exist" in result.output


def test_watch_uses_config_and_polling_flag(temp_config, tmp_path):
    runner = CliRunner()
    with mock.patch("webwatcher.cli.monitor.watch_directory") as watch_directory:
        result = runner.invoke(cli.main, ["--config", temp_config, "watch", str(tmp_path), "--polling"])
    assert result.exit_code == 0, result.output
    observer = watch_directory.call_args[0][1]
    assert observer.settle_window == 0.5
    assert observer.use_polling is True
