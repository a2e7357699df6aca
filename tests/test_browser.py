import os
from unittest import mock

import pytest

from webwatcher import browser


@pytest.mark.parametrize("platform, expected", [
    ("win32", "C:\\Program Files\\Google\\Chrome\\Application\\chrome.exe"),
    ("darwin", "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome"),
    ("linux", "/usr/bin/google-chrome"),
    ("linux2", "/usr/bin/google-chrome"),
    ("freebsd13", None),
])
def test_resolve_browser_executable(platform, expected):
    assert browser.resolve_browser_executable(platform) == expected


def test_is_browser_installed(tmp_path):
    exe = tmp_path / "chrome"
    assert browser.is_browser_installed(str(exe)) is False
    exe.write_text("#!/bin/sh\n")
    assert browser.is_browser_installed(str(exe)) is True
    assert browser.is_browser_installed(None) is False


def test_build_command(tmp_path):
    profile = tmp_path / ".chrome"
    command = browser.build_command("/usr/bin/google-chrome", str(profile))
    assert command == ["/usr/bin/google-chrome", "--new-window", f"--user-data-dir={profile}"]


def test_launch_requires_executable(tmp_path):
    with pytest.raises(browser.BrowserNotInstalled):
        browser.launch_browser(str(tmp_path / "nope"), str(tmp_path / ".chrome"))


def test_launch_creates_profile_and_spawns(tmp_path):
    exe = tmp_path / "chrome"
    exe.write_text("")
    profile = tmp_path / ".chrome"
    with mock.patch("webwatcher.browser.subprocess.Popen") as popen:
        proc = browser.launch_browser(str(exe), str(profile), ["--incognito"])
    assert proc is popen.return_value
    assert profile.is_dir()
    args, kwargs = popen.call_args
    assert args[0] == [str(exe), "--incognito", f"--user-data-dir={profile}"]
    assert kwargs["stdout"] == browser.subprocess.DEVNULL


def test_describe_process_running():
    info = browser.describe_process(os.getpid())
    assert info["PID"] == os.getpid()
    assert "Name" in info
    assert "Started At" in info


def test_describe_process_exited():
    with mock.patch("webwatcher.browser.psutil.Process", side_effect=browser.psutil.NoSuchProcess(42)):
        info = browser.describe_process(42)
    assert info == {"PID": 42, "Status": "exited"}
