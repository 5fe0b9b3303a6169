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
Formula Publisher Component

Runs a complete formula update in a fixed order:
- Build the field -> hash mapping
- Look up the repository and clone it into a fresh temporary directory
- Check out the update branch and rewrite the formula
- Commit, push and open the pull request

The first failing step ends the run. Nothing is rolled back: a pushed branch
stays on the remote if the pull request cannot be opened.
"""

import os
import tempfile
import time
from typing import Any, Dict, Optional

from formula_updater.utils.index import log_message
from .errors import FormulaUpdateError
from .field_mapping import parse_fields, single_field_mapping, validate_field_keys
from .git_operations import GitOperations
from .github_api import GitHubClient
from .line_rewriter import check_formula, rewrite_file


class FormulaPublisher:
    """Updates one formula file and files a pull request with the change."""

    def __init__(self, inputs, config: Dict[str, Any],
                 client: Optional[GitHubClient] = None, git: Optional[GitOperations] = None):
        self.inputs = inputs
        self.config = config
        self.settings = config.get('config', {})

        self._owns_client = client is None
        self.client = client or GitHubClient(
            inputs.token,
            api_url=self.settings.get('api_url'),
            timeout=self.settings.get('request_timeout', 30)
        )
        self.git = git or GitOperations(config)
        self.git.set_credentials(inputs.owner, inputs.token)

    def _render(self, template_key: str) -> str:
        template = self.settings.get(template_key, '')
        return template.format(
            version=self.inputs.version,
            file=self.inputs.file,
            owner=self.inputs.owner,
            repo=self.inputs.repo
        )

    @property
    def branch_name(self) -> str:
        return f"{self.settings.get('branch_prefix', 'pr-')}{self.inputs.version}"

    @property
    def base_branch(self) -> str:
        return self.settings.get('base_branch', 'main')

    def build_field_mapping(self) -> Dict[str, str]:
        """Build and validate the field -> hash mapping for this run."""
        if self.inputs.variant == "fields":
            mapping = parse_fields(self.inputs.fields)
        else:
            mapping = single_field_mapping(self.inputs.field, self.inputs.sha256)
        validate_field_keys(mapping, strict=self.settings.get('strict_fields', False))
        return mapping

    def update(self, check_only: bool = False) -> Dict[str, Any]:
        """
        Perform the formula update.

        Args:
            check_only: Rewrite the formula in the temporary clone and log the
                diff, but do not commit, push or open a pull request

        Returns:
            Dict containing update results with success status and details
        """
        start_time = time.time()

        log_message("=" * 60)
        log_message(f"UPDATING {self.inputs.file} IN {self.inputs.full_name} TO {self.inputs.version}")
        log_message("=" * 60)

        result = {
            "success": False,
            "message": "",
            "error": None,
            "step": None,
            "branch": self.branch_name,
            "changed_lines": 0,
            "commit": None,
            "pull_request": None,
            "duration": 0
        }

        try:
            log_message("Step 1: Building field mapping...")
            fields = self.build_field_mapping()

            log_message("Step 2: Resolving repository...")
            repository = self.client.get_repository(self.inputs.owner, self.inputs.repo)

            with tempfile.TemporaryDirectory(prefix=self.settings.get('temp_prefix', 'formula-updater-')) as temp_dir:
                repo_path = os.path.join(temp_dir, self.inputs.repo)

                log_message("Step 3: Cloning repository...")
                self.git.clone_repository(repository['clone_url'], repo_path)

                formula_path = os.path.join(repo_path, self.inputs.file)
                check_formula(formula_path)

                log_message(f"Step 4: Creating branch {self.branch_name}...")
                self.git.checkout_new_branch(repo_path, self.branch_name)

                log_message("Step 5: Rewriting formula...")
                rewrite = rewrite_file(formula_path, self.inputs.version, fields, display_path=self.inputs.file)
                result["changed_lines"] = rewrite.changed_lines
                if not rewrite.changed:
                    log_message(f"No lines in {self.inputs.file} matched; the commit will be empty", "WARNING")

                if check_only:
                    for line in rewrite.diff():
                        log_message(line)
                    result["success"] = True
                    result["message"] = f"Check only: {rewrite.changed_lines} line(s) would change"
                    log_message(result["message"])
                    return result

                log_message("Step 6: Committing changes...")
                self.git.stage_all(repo_path)
                result["commit"] = self.git.commit(repo_path, self._render('commit_message'))

                log_message("Step 7: Pushing branch...")
                self.git.push_branch(repo_path, self.branch_name)

            log_message("Step 8: Opening pull request...")
            pull_request = self.client.create_pull_request(
                self.inputs.owner,
                self.inputs.repo,
                title=self._render('pr_title'),
                head=self.branch_name,
                base=self.base_branch,
                body=self._render('pr_body'),
                maintainer_can_modify=True
            )
            result["pull_request"] = {
                "number": pull_request.get("number"),
                "url": pull_request.get("html_url")
            }
            result["success"] = True
            result["message"] = f"Opened pull request for {self.inputs.file} {self.inputs.version}"
            log_message(f"✓ {result['message']}")

        except FormulaUpdateError as e:
            result["error"] = str(e)
            result["step"] = e.step
            result["message"] = f"Formula update failed at step '{e.step}'"
            log_message(f"Cannot complete step '{e.step}': {e}", "ERROR")

        finally:
            result["duration"] = round(time.time() - start_time, 2)
            if self._owns_client:
                self.client.close()

        return result
