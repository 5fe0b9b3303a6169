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
Exceptions raised by the formula update components.

Every failure is fatal for the run. Each exception carries the step it
happened in so the publisher can report a single line naming the operation.
"""


class FormulaUpdateError(Exception):
    """Base exception for formula update failures."""

    default_step = "update"

    def __init__(self, message: str, step: str = None):
        super().__init__(message)
        self.step = step or self.default_step


class ConfigurationError(FormulaUpdateError):
    """Invalid or incomplete invocation parameters."""

    default_step = "inputs"


class FieldMappingError(FormulaUpdateError):
    """The field/hash input could not be turned into a mapping."""

    default_step = "fields"


class FormulaFileError(FormulaUpdateError):
    """The formula file could not be opened, read or written."""

    default_step = "rewrite"


class GitOperationError(FormulaUpdateError):
    """A git command failed."""

    default_step = "git"


class GitHubAPIError(FormulaUpdateError):
    """A GitHub REST API call failed."""

    default_step = "github"

    def __init__(self, message: str, step: str = None, status_code: int = None):
        super().__init__(message, step)
        self.status_code = status_code
