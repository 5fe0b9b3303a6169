"""
Formula Update Automation
Copyright (C) 2024 HOMESERVER LLC

This program is free software: you can redistribute it and/or modify
it under the terms of the GNU General Public License as published by
the Free Software Foundation, either version 3 of the License, or
(at your option) any later version.

This program is distributed in the hope that it will be useful,
but WITHOUT ANY WARRANTY; without even the implied warranty of
MERCHANTABILITY or FITNESS FOR A PARTICULAR PURPOSE.  See the
GNU General Public License for more details.

You should have received a copy of the GNU General Public License
along with this program.  If not, see <https://www.gnu.org/licenses/>.
"""

"""
Configuration and invocation inputs for the formula updater.

Package defaults live in index.json next to this file. Invocation inputs come
from command-line flags first and GitHub Actions INPUT_* variables second.
"""

import copy
import json
import os
import posixpath
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .components.errors import ConfigurationError
from .utils.index import log_message

CONFIG_PATH = Path(__file__).parent / "index.json"

DEFAULT_CONFIG: Dict[str, Any] = {
    "metadata": {
        "schema_version": "1.0.0",
        "module_name": "formula_updater",
        "debug": False
    },
    "config": {
        "base_branch": "main",
        "branch_prefix": "pr-",
        "commit_message": "Update to {version}",
        "pr_title": "Update {file} to {version}",
        "pr_body": "Update {file} formula version and sha256",
        "author": {
            "name": "GitHub Action",
            "email": "action@github.com"
        },
        "api_url": "https://api.github.com",
        "request_timeout": 30,
        "git_timeout": 300,
        "strict_fields": False,
        "temp_prefix": "formula-updater-"
    }
}

# Action input names, in the order they are documented
INPUT_NAMES = ("file", "owner", "repo", "version", "token", "field", "sha256", "fields")
REQUIRED_INPUTS = ("file", "owner", "repo", "version", "token")


def load_config(config_path: Optional[Path] = None) -> Dict[str, Any]:
    """
    Load configuration from the package's index.json file.
    Returns:
        dict: Configuration data merged over the built-in defaults
    """
    config_path = Path(config_path) if config_path else CONFIG_PATH
    merged = copy.deepcopy(DEFAULT_CONFIG)
    try:
        with open(config_path, 'r') as f:
            data = json.load(f)
    except Exception as e:
        log_message(f"Failed to load config from {config_path}, using defaults: {e}", "WARNING")
        return merged

    for section in ("metadata", "config"):
        merged[section].update(data.get(section, {}))

    author = dict(DEFAULT_CONFIG["config"]["author"])
    author.update(data.get("config", {}).get("author", {}))
    merged["config"]["author"] = author
    return merged


def get_action_input(name: str, environ: Optional[Mapping[str, str]] = None) -> str:
    """
    Read a GitHub Actions input the way the runner exposes it.

    The runner sets INPUT_<NAME> with the name upper-cased and spaces turned
    into underscores. Values are whitespace-stripped; a missing input is "".
    """
    if environ is None:
        environ = os.environ
    key = "INPUT_" + name.replace(" ", "_").upper()
    return environ.get(key, "").strip()


def normalize_formula_path(file_path: str) -> str:
    """
    Turn the file input into a clean path relative to the repository root.

    A leading slash means "from the repository root". Paths that would escape
    the clone are rejected.
    """
    cleaned = posixpath.normpath(file_path.replace("\\", "/").lstrip("/"))
    if cleaned in (".", "") or cleaned == ".." or cleaned.startswith("../"):
        raise ConfigurationError(f"Formula path must point to a file inside the repository: {file_path!r}")
    return cleaned


@dataclass
class UpdateInputs:
    """Resolved invocation parameters for a single run."""

    file: str
    owner: str
    repo: str
    version: str
    token: str
    field: str = ""
    sha256: str = ""
    fields: str = ""

    @property
    def variant(self) -> str:
        return "fields" if self.fields else "single"

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def resolve_inputs(cli_values: Optional[Mapping[str, Optional[str]]] = None,
                   environ: Optional[Mapping[str, str]] = None) -> UpdateInputs:
    """
    Merge command-line values over action inputs and validate the result.

    Args:
        cli_values: Values given on the command line, keyed by input name
        environ: Environment to read INPUT_* variables from (defaults to os.environ)

    Returns:
        UpdateInputs: The validated inputs

    Raises:
        ConfigurationError: If a required input is missing or the variant is ambiguous
    """
    cli_values = cli_values or {}
    values = {}
    for name in INPUT_NAMES:
        cli_value = cli_values.get(name)
        if cli_value is not None and str(cli_value).strip():
            values[name] = str(cli_value).strip()
        else:
            values[name] = get_action_input(name, environ)

    missing = [name for name in REQUIRED_INPUTS if not values[name]]
    if missing:
        raise ConfigurationError(f"Missing required input(s): {', '.join(missing)}")

    has_single = bool(values["field"] or values["sha256"])
    if values["fields"] and has_single:
        raise ConfigurationError("Use either 'fields' or 'field'/'sha256', not both")
    if not values["fields"]:
        if not has_single:
            raise ConfigurationError("No hash given: set 'fields' or both 'field' and 'sha256'")
        if not (values["field"] and values["sha256"]):
            raise ConfigurationError("'field' and 'sha256' must be given together")

    values["file"] = normalize_formula_path(values["file"])
    return UpdateInputs(**values)
