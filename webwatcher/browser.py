"""
Browser lookup and launch.

Everything platform specific lives here so the observer and the formatter
never branch on the operating system.
"""

import logging
import os
import subprocess
import sys
import time
from typing import List, Optional, Sequence

import psutil

logger = logging.getLogger(__name__)

CHROME_EXECUTABLES = {
    "win32": "C:\\Program Files\\Google\\Chrome\\Application\\chrome.exe",
    "darwin": "/Applications/Google Chrome.app/Contents/MacOS/Google Chrome",
    "linux": "/usr/bin/google-chrome",
}

DEFAULT_BROWSER_ARGS = ["--new-window"]


class BrowserNotInstalled(Exception):
    """Raised when no browser executable can be found."""

    pass


def resolve_browser_executable(platform: str = sys.platform) -> Optional[str]:
    """
    Map a platform identifier to the usual Chrome install location.

    Args:
        platform: A ``sys.platform`` value; "linux2" style suffixes are
            accepted.

    Returns:
        str or None: Executable path, or None for unknown platforms.
    """
    for prefix, executable in CHROME_EXECUTABLES.items():
        if platform.startswith(prefix):
            return executable
    return None


def is_browser_installed(executable: Optional[str]) -> bool:
    return bool(executable) and os.path.isfile(executable)


def build_command(executable: str, profile_dir: str, args: Sequence[str] = DEFAULT_BROWSER_ARGS) -> List[str]:
    return [executable, *args, f"--user-data-dir={os.path.abspath(profile_dir)}"]


def launch_browser(executable: str, profile_dir: str, args: Sequence[str] = DEFAULT_BROWSER_ARGS) -> subprocess.Popen:
    """
    Spawn the browser on an isolated profile directory.

    The profile directory is created first so it can be watched right away.
    The browser's own output is discarded to keep stdout for the audit trail.

    Raises:
        BrowserNotInstalled: If the executable does not exist.
    """
    if not is_browser_installed(executable):
        raise BrowserNotInstalled(f"Browser executable not found: {executable}")

    os.makedirs(profile_dir, exist_ok=True)
    command = build_command(executable, profile_dir, args)
    logger.info(f"Launching browser: {' '.join(command)}")
    return subprocess.Popen(
        command,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
    )


def describe_process(pid: int) -> dict:
    """
    Collect basic information about the launched browser process.

    Returns:
        dict: PID, name, status and start time; only the PID if the process
            has already exited.
    """
    info = {"PID": pid}
    try:
        proc = psutil.Process(pid)
        info["Name"] = proc.name()
        info["Status"] = proc.status()
        info["Started At"] = time.strftime(
            "%Y-%m-%d %H:%M:%S", time.localtime(proc.create_time())
        )
    except psutil.NoSuchProcess:
        info["Status"] = "exited"
    return info
