"""
WebWatcher: an audit trail of what a browser writes to its own profile.

Launches a browser on an isolated profile directory and prints one aligned,
colorized line per filesystem mutation under that directory.
"""

__version__ = "0.1.0"
