"""Configuration utilities for linban."""

import os
import pathlib
import re

import yaml
from rich.prompt import Prompt

from linban import utils

from . import defaults

# Keys persisted under the ``general`` section of the config file
GENERAL_KEYS = [
    "api_key",
    "default_team",
    "request_timeout",
    "issue_limit",
    "verbose",
]


def make_config(config: dict, config_file: pathlib.Path) -> dict:
    """Merge flags, environment and file, asking for the API key if missing."""
    config = read_config(config, pathlib.Path(config_file))

    if not config.get("api_key"):
        config["api_key"] = Prompt.ask(
            "Enter your Linear API key (or pass key prefixed by pass::)",
            password=True,
        )
        write_config(config, pathlib.Path(config_file))
        utils.log(f"Configuration saved to {config_file}")
        config["api_key"] = _resolve_secret(config["api_key"])

    return config


def _resolve_secret(value: str | None) -> str | None:
    if value and re.match(r"(pass|passage)::", value):
        kind, entry = value.split("::", 1)
        return utils.get_pass_key(kind, entry)
    return value


def read_config(ret: dict, config_file: pathlib.Path) -> dict:
    """Read configuration from yaml file.

    Values already present in ``ret`` (command line flags) win over the
    ``LINEAR_API_KEY`` environment variable, which wins over the file.
    """

    if not ret.get("api_key") and os.environ.get("LINEAR_API_KEY"):
        ret["api_key"] = os.environ["LINEAR_API_KEY"]

    def checks():
        ret["api_key"] = _resolve_secret(ret.get("api_key"))

        if ret.get("request_timeout") is None:
            ret["request_timeout"] = defaults.REQUEST_TIMEOUT
        ret["request_timeout"] = float(ret["request_timeout"])

        if ret.get("issue_limit") is None:
            ret["issue_limit"] = defaults.ISSUE_LIMIT
        ret["issue_limit"] = int(ret["issue_limit"])

        if "default_team" not in ret:
            ret["default_team"] = None

        if "verbose" not in ret or ret["verbose"] is None:
            ret["verbose"] = False

    if not config_file.exists():
        checks()
        return ret

    with config_file.open() as file:
        config = yaml.safe_load(file) or {}

    general = config.get("general") or {}
    for key in GENERAL_KEYS:
        if ret.get(key) is None and general.get(key) is not None:
            ret[key] = general[key]

    checks()
    return ret


def write_config(config, config_file: pathlib.Path):
    """Write configuration to yaml file"""
    config_file.parent.mkdir(parents=True, exist_ok=True)

    yaml_config: dict[str, dict] = {"general": {}}
    if config_file.exists():
        with config_file.open() as file:
            yaml_config = yaml.safe_load(file) or {"general": {}}
        yaml_config.setdefault("general", {})

    for key in GENERAL_KEYS:
        if config.get(key):
            yaml_config["general"][key] = config[key]

    with config_file.open("w") as file:
        yaml.safe_dump(yaml_config, file)
