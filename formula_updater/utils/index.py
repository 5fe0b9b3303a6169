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

import json
import logging
import sys
import os
from pathlib import Path
from typing import Iterable, Optional

REDACTED = "***"

LOG_FORMAT = '[%(asctime)s] [%(levelname)s] %(message)s'
LOG_DATE_FORMAT = '%Y-%m-%d %H:%M:%S'


def log_message(message, level="INFO"):
    """
    Log a message through the shared logging setup.
    Args:
        message (str): The message to log.
        level (str): Log level ('DEBUG', 'INFO', 'WARNING', 'ERROR').
    """
    if level == "ERROR":
        logging.error(message)
    elif level == "WARNING":
        logging.warning(message)
    elif level == "DEBUG":
        logging.debug(message)
    else:
        logging.info(message)


def setup_logging(debug: bool = False, secrets: Iterable[Optional[str]] = ()) -> None:
    """
    Log to stdout only; the CI runner owns log capture.

    Args:
        debug: Enable DEBUG output
        secrets: Values masked in the logged command line
    """
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(logging.DEBUG if debug else logging.INFO)
    console_handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root_logger = logging.getLogger()
    root_logger.setLevel(logging.DEBUG if debug else logging.INFO)
    for h in list(root_logger.handlers):
        root_logger.removeHandler(h)
    root_logger.addHandler(console_handler)
    # urllib3 connection chatter is not useful in CI output
    logging.getLogger("urllib3").setLevel(logging.WARNING)
    logging.info("=" * 80)
    logging.info("FORMULA UPDATE SESSION STARTED")
    logging.info(f"Command: {redact(' '.join(sys.argv), secrets)}")
    logging.info(f"Working Directory: {os.getcwd()}")
    logging.info(f"Python Version: {sys.version.split()[0]}")
    logging.info("=" * 80)


def redact(text: str, secrets: Iterable[Optional[str]]) -> str:
    """Replace every occurrence of the given secrets in text."""
    if not text:
        return text
    for secret in secrets:
        if secret:
            text = text.replace(secret, REDACTED)
    return text


def get_package_version(package_path: Optional[str] = None) -> str:
    """
    Get the schema version from the package's index.json file.

    Args:
        package_path (str): Directory holding index.json (defaults to the package root)

    Returns:
        str: The schema version from index.json, or "unknown" if not found
    """
    if package_path is None:
        package_path = Path(__file__).resolve().parent.parent
    try:
        index_path = Path(package_path) / "index.json"
        with open(index_path, 'r') as f:
            config = json.load(f)
            return config.get("metadata", {}).get("schema_version", "unknown")
    except Exception as e:
        log_message(f"Failed to read package version from {package_path}: {e}", "ERROR")
        return "unknown"
