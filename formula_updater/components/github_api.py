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
GitHub API Component

Thin REST client for the two calls a formula update needs:
- Repository lookup (clone URL)
- Pull request creation
"""

from typing import Any, Dict, Optional

import requests

from formula_updater.utils.index import log_message, redact
from .errors import GitHubAPIError

DEFAULT_API_URL = "https://api.github.com"
API_VERSION = "2022-11-28"
USER_AGENT = "formula-updater"


class GitHubClient:
    """Authenticated GitHub REST API client."""

    def __init__(self, token: str, api_url: str = DEFAULT_API_URL, timeout: int = 30,
                 session: Optional[requests.Session] = None):
        self.token = token
        self.api_url = (api_url or DEFAULT_API_URL).rstrip('/')
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'Accept': 'application/vnd.github+json',
            'Authorization': f'Bearer {token}',
            'X-GitHub-Api-Version': API_VERSION,
            'User-Agent': USER_AGENT,
        })

    def _request(self, method: str, path: str, step: str, **kwargs) -> Dict[str, Any]:
        """
        Send a request and return the decoded JSON body.

        Raises:
            GitHubAPIError: On connection errors, timeouts or non-2xx responses
        """
        url = f"{self.api_url}{path}"
        log_message(f"[GITHUB] {method} {url}", "DEBUG")
        try:
            response = self.session.request(method, url, timeout=self.timeout, **kwargs)
        except requests.RequestException as e:
            raise GitHubAPIError(f"{method} {path} failed: {redact(str(e), [self.token])}", step=step)

        if not response.ok:
            raise GitHubAPIError(
                f"{method} {path} returned {response.status_code}: {self._error_detail(response)}",
                step=step,
                status_code=response.status_code
            )

        try:
            return response.json()
        except ValueError as e:
            raise GitHubAPIError(f"{method} {path} returned invalid JSON: {e}", step=step,
                                 status_code=response.status_code)

    @staticmethod
    def _error_detail(response: requests.Response) -> str:
        """Pull the message and validation errors out of a GitHub error body."""
        try:
            body = response.json()
        except ValueError:
            return response.text.strip() or response.reason or "no details"
        if not isinstance(body, dict):
            return str(body)
        detail = body.get('message', '') or response.reason or ''
        errors = body.get('errors') or []
        extra = [e.get('message') or e.get('code', '') for e in errors if isinstance(e, dict)]
        if extra:
            detail = f"{detail} ({'; '.join(m for m in extra if m)})"
        return detail

    def get_repository(self, owner: str, repo: str) -> Dict[str, Any]:
        """
        Fetch repository metadata.

        Returns:
            dict: Repository payload (clone_url, default_branch, ...)
        """
        data = self._request('GET', f"/repos/{owner}/{repo}", step="repository")
        if not data.get('clone_url'):
            raise GitHubAPIError(f"Repository {owner}/{repo} has no clone URL", step="repository")
        log_message(f"[GITHUB] ✓ Found repository {data.get('full_name', f'{owner}/{repo}')}")
        return data

    def create_pull_request(self, owner: str, repo: str, title: str, head: str, base: str,
                            body: str = "", maintainer_can_modify: bool = True) -> Dict[str, Any]:
        """
        Open a pull request from head into base.

        Returns:
            dict: Pull request payload (number, html_url, ...)
        """
        payload = {
            'title': title,
            'head': head,
            'base': base,
            'body': body,
            'maintainer_can_modify': maintainer_can_modify,
        }
        data = self._request('POST', f"/repos/{owner}/{repo}/pulls", step="pull_request", json=payload)
        log_message(f"[GITHUB] ✓ Opened pull request #{data.get('number')}: {data.get('html_url')}")
        return data

    def close(self) -> None:
        self.session.close()
