import copy
import os

import toml

DEFAULT_CONFIG_PATH = "./webwatcher.toml"
ENV_CONFIG_DIR_VAR = "WEBWATCHER_CONFIG_DIR"
CONFIG_FILENAME = "webwatcher.toml"

DEFAULT_CONFIG = {
    "browser": {
        "executable": "",
        "profile_dir": ".chrome",
        "args": ["--new-window"],
    },
    "watch": {
        "settle_window": 2.0,
        "poll_interval": 0.1,
        "max_settle": 10.0,
        "use_polling": False,
    },
    "logging": {
        "level": "WARNING",
        "log_dir": "",
    },
}


def merge_config(base, overrides):
    """
    Recursively merge overrides into a copy of base.

    Args:
        base (dict): Default values.
        overrides (dict): Values read from a config file.

    Returns:
        dict: The merged configuration.
    """
    merged = copy.deepcopy(base)
    for key, value in overrides.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = merge_config(merged[key], value)
        else:
            merged[key] = value
    return merged


def find_config_path(cli_config_path=None):
    """
    Work out which configuration file to read.

    Precedence:
      1. cli_config_path if provided.
      2. Environment variable WEBWATCHER_CONFIG_DIR (looking for webwatcher.toml).
      3. Default to ./webwatcher.toml.

    Returns:
        tuple: (path, explicit) where explicit is False only for the default.
    """
    if cli_config_path:
        return cli_config_path, True
    if os.environ.get(ENV_CONFIG_DIR_VAR):
        return os.path.join(os.environ[ENV_CONFIG_DIR_VAR], CONFIG_FILENAME), True
    return DEFAULT_CONFIG_PATH, False


def load_config(cli_config_path=None):
    """
    Load configuration from a TOML file on top of the built-in defaults.

    A missing default file means "use the defaults"; a missing file that was
    asked for explicitly is an error.

    Returns:
        dict: The configuration settings.
    """
    config_path, explicit = find_config_path(cli_config_path)

    if not os.path.exists(config_path):
        if explicit:
            raise FileNotFoundError(f"Configuration file not found: {config_path}")
        config_data = merge_config(DEFAULT_CONFIG, {})
        config_data["__config_path__"] = None
        return config_data

    with open(config_path, "r") as f:
        config_data = merge_config(DEFAULT_CONFIG, toml.load(f))

    config_data["__config_path__"] = config_path
    return config_data
