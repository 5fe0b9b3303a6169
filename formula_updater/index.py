#!/usr/bin/env python3
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
Formula update command line.

Usage:
    formula-updater --file Formula/tool.rb --owner me --repo homebrew-tools --formula-version 1.3.0 --field sha256 --sha256 <hash>
    formula-updater --fields '{"arm": "arm64-<hash>", "intel": "x86_64-<hash>"}' ...

Inputs not given on the command line are read from GitHub Actions INPUT_*
environment variables, so the same entry point serves as the action runner.
"""

import argparse
import os
import sys
import traceback
from typing import Any, Dict, List, Mapping, Optional

from .components import FormulaPublisher
from .components.errors import ConfigurationError
from .config import load_config, resolve_inputs
from .utils.index import log_message, setup_logging, get_package_version

EXIT_SUCCESS = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2
EXIT_INTERRUPTED = 130


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="formula-updater",
        description="Update a formula's version and hash fields and open a pull request"
    )
    parser.add_argument("--file", help="Formula path inside the repository")
    parser.add_argument("--owner", help="Account or organization owning the repository")
    parser.add_argument("--repo", help="Repository name")
    parser.add_argument("--formula-version", dest="formula_version",
                        help="Version string to write into the formula")
    parser.add_argument("--token", help="Access token (prefer INPUT_TOKEN in CI)")
    parser.add_argument("--field", help="Field name for a single hash")
    parser.add_argument("--sha256", help="Hash value for --field")
    parser.add_argument("--fields", help="JSON object of '<key>-<hash>' values")

    parser.add_argument("--base-branch", default=None,
                        help="Branch the pull request targets (default: from index.json)")
    parser.add_argument("--api-url", default=None,
                        help="GitHub API URL (default: GITHUB_API_URL or index.json)")
    parser.add_argument("--check-only", action="store_true",
                        help="Rewrite in a temporary clone and show the diff, don't commit or push")
    parser.add_argument("--debug", action="store_true",
                        help="Enable debug logging")
    parser.add_argument("--version", action="store_true",
                        help="Show the formula updater version and exit")
    return parser


def apply_overrides(config: Dict[str, Any], args: argparse.Namespace,
                    environ: Optional[Mapping[str, str]] = None) -> Dict[str, Any]:
    """Apply command-line and runner overrides on top of the loaded config."""
    if environ is None:
        environ = os.environ
    settings = config.setdefault("config", {})
    if args.base_branch:
        settings["base_branch"] = args.base_branch
    if args.api_url:
        settings["api_url"] = args.api_url
    elif environ.get("GITHUB_API_URL"):
        settings["api_url"] = environ["GITHUB_API_URL"]
    if args.debug:
        config.setdefault("metadata", {})["debug"] = True
    return config


def main(argv: Optional[List[str]] = None) -> None:
    """
    Main entry point for the formula updater.
    Exits 0 on success, 1 when a step fails, 2 on invalid input.
    """
    args = build_parser().parse_args(argv)

    if args.version:
        print(f"formula-updater {get_package_version()}")
        sys.exit(EXIT_SUCCESS)

    try:
        config = apply_overrides(load_config(), args)
        setup_logging(debug=config.get("metadata", {}).get("debug", False), secrets=[args.token])

        inputs = resolve_inputs({
            "file": args.file,
            "owner": args.owner,
            "repo": args.repo,
            "version": args.formula_version,
            "token": args.token,
            "field": args.field,
            "sha256": args.sha256,
            "fields": args.fields,
        })
        log_message(f"Using {inputs.variant} variant for {inputs.full_name}:{inputs.file}")

        result = FormulaPublisher(inputs, config).update(check_only=args.check_only)
        if not result.get("success"):
            log_message("Exiting due to failed update", "ERROR")
            sys.exit(EXIT_FAILURE)

        if result.get("pull_request"):
            log_message(f"Pull request: {result['pull_request'].get('url')}")
        log_message(f"Formula update completed in {result.get('duration', 0)}s")
        sys.exit(EXIT_SUCCESS)

    except ConfigurationError as e:
        log_message(f"Invalid input: {e}", "ERROR")
        sys.exit(EXIT_USAGE)
    except KeyboardInterrupt:
        log_message("Formula update interrupted by user", "WARNING")
        sys.exit(EXIT_INTERRUPTED)
    except Exception as e:
        log_message(f"Unhandled error in formula update: {e}", "ERROR")
        traceback.print_exc()
        sys.exit(EXIT_FAILURE)


if __name__ == "__main__":
    main()
