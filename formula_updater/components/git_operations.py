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
Git Operations Component

Handles all git work for a formula update:
- Cloning the target repository
- Creating and checking out the update branch
- Staging and committing the rewritten formula
- Pushing the branch with basic authentication
"""

import base64
import os
import subprocess
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from formula_updater.utils.index import log_message, redact
from .errors import GitOperationError


def basic_auth_header(username: str, password: str) -> str:
    """Build an HTTP Authorization header value for basic authentication."""
    credentials = f"{username}:{password}".encode("utf-8")
    return "Basic " + base64.b64encode(credentials).decode("ascii")


def format_git_date(when: datetime) -> str:
    """Format a timestamp in git's internal '<epoch> <offset>' date format."""
    if when.tzinfo is None:
        when = when.replace(tzinfo=timezone.utc)
    offset = when.utcoffset()
    minutes = int(offset.total_seconds() // 60)
    sign = "+" if minutes >= 0 else "-"
    minutes = abs(minutes)
    return f"{int(when.timestamp())} {sign}{minutes // 60:02d}{minutes % 60:02d}"


class GitOperations:
    """Runs the git command line for formula updates."""

    def __init__(self, config: Dict[str, Any]):
        self.config = config
        settings = config.get('config', {})
        self.timeout = settings.get('git_timeout', 300)
        author = settings.get('author', {})
        self.author_name = author.get('name', 'GitHub Action')
        self.author_email = author.get('email', 'action@github.com')
        self._auth_header: Optional[str] = None
        self._secrets: List[str] = []

    def set_credentials(self, username: str, password: str) -> None:
        """Remember the push credentials; they are redacted from every log line."""
        self._auth_header = basic_auth_header(username, password)
        self._secrets = [password, self._auth_header]

    def _auth_args(self) -> List[str]:
        if not self._auth_header:
            return []
        return ['-c', f'http.extraHeader=Authorization: {self._auth_header}']

    def _run(self, args: List[str], step: str, cwd: Optional[str] = None,
             env: Optional[Dict[str, str]] = None, auth: bool = False) -> subprocess.CompletedProcess:
        """
        Run a git command and raise on failure.

        Args:
            args: Arguments after 'git'
            step: Step name reported on failure
            cwd: Repository directory
            env: Extra environment variables
            auth: Send the basic authentication header

        Returns:
            subprocess.CompletedProcess: The finished command

        Raises:
            GitOperationError: If git is missing, times out or exits non-zero
        """
        command = ['git'] + (self._auth_args() if auth else []) + args
        printable = redact(' '.join(command), self._secrets)
        log_message(f"[GIT] Running: {printable}", "DEBUG")

        run_env = os.environ.copy()
        # Never wait on a credential prompt in CI
        run_env['GIT_TERMINAL_PROMPT'] = '0'
        if env:
            run_env.update(env)

        try:
            result = subprocess.run(
                command,
                cwd=cwd,
                env=run_env,
                capture_output=True,
                text=True,
                timeout=self.timeout
            )
        except FileNotFoundError:
            raise GitOperationError("git executable not found", step=step)
        except subprocess.TimeoutExpired:
            raise GitOperationError(f"'{printable}' timed out after {self.timeout}s", step=step)

        if result.returncode != 0:
            output = (result.stderr or result.stdout or '').strip()
            raise GitOperationError(
                f"'{printable}' failed ({result.returncode}): {redact(output, self._secrets)}",
                step=step
            )
        return result

    def clone_repository(self, clone_url: str, dest: str) -> str:
        """
        Clone the repository into dest, which must be empty or absent.

        Returns:
            str: Path to the clone
        """
        log_message(f"[GIT] Cloning repository: {clone_url}")
        self._run(['clone', clone_url, dest], step="clone", auth=True)
        log_message(f"[GIT] ✓ Repository cloned to: {dest}")
        return dest

    def checkout_new_branch(self, repo_path: str, branch: str) -> None:
        """Create the branch at HEAD and check it out, replacing any local branch of that name."""
        log_message(f"[GIT] Checking out new branch: {branch}")
        self._run(['checkout', '--force', '-B', branch], step="checkout", cwd=repo_path)

    def stage_all(self, repo_path: str) -> None:
        self._run(['add', '--all', '.'], step="commit", cwd=repo_path)

    def commit(self, repo_path: str, message: str, when: Optional[datetime] = None) -> str:
        """
        Commit the staged changes with the configured author identity.

        Args:
            repo_path: Repository directory
            message: Commit message
            when: Commit timestamp (defaults to now)

        Returns:
            str: The new commit SHA
        """
        when = when or datetime.now(timezone.utc)
        git_date = format_git_date(when)
        identity = {
            'GIT_AUTHOR_NAME': self.author_name,
            'GIT_AUTHOR_EMAIL': self.author_email,
            'GIT_AUTHOR_DATE': git_date,
            'GIT_COMMITTER_NAME': self.author_name,
            'GIT_COMMITTER_EMAIL': self.author_email,
            'GIT_COMMITTER_DATE': git_date,
        }
        self._run(['commit', '--allow-empty', '-m', message], step="commit", cwd=repo_path, env=identity)
        sha = self.get_head_commit(repo_path)
        log_message(f"[GIT] ✓ Committed {sha[:12]}: {message}")
        return sha

    def get_head_commit(self, repo_path: str) -> str:
        result = self._run(['rev-parse', 'HEAD'], step="commit", cwd=repo_path)
        return result.stdout.strip()

    def push_branch(self, repo_path: str, branch: str, remote: str = 'origin') -> None:
        """Push the branch to the remote under the same name."""
        if not self._auth_header:
            raise GitOperationError("No push credentials configured", step="push")
        refspec = f"refs/heads/{branch}:refs/heads/{branch}"
        log_message(f"[GIT] Pushing {branch} to {remote}")
        self._run(['push', remote, refspec], step="push", cwd=repo_path, auth=True)
        log_message(f"[GIT] ✓ Pushed {branch}")
