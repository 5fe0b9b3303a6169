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
Formula update components.

Component-based formula update system: field mapping, line rewriting,
git and GitHub access, and the publisher that runs them in order.
"""

from .errors import (
    FormulaUpdateError,
    ConfigurationError,
    FieldMappingError,
    FormulaFileError,
    GitOperationError,
    GitHubAPIError
)
from .field_mapping import parse_fields, single_field_mapping, find_overlapping_keys, validate_field_keys
from .line_rewriter import rewrite_line, rewrite_lines, rewrite_text, rewrite_file, FormulaRewrite
from .git_operations import GitOperations
from .github_api import GitHubClient
from .publisher import FormulaPublisher

__all__ = [
    'FormulaUpdateError',
    'ConfigurationError',
    'FieldMappingError',
    'FormulaFileError',
    'GitOperationError',
    'GitHubAPIError',
    'parse_fields',
    'single_field_mapping',
    'find_overlapping_keys',
    'validate_field_keys',
    'rewrite_line',
    'rewrite_lines',
    'rewrite_text',
    'rewrite_file',
    'FormulaRewrite',
    'GitOperations',
    'GitHubClient',
    'FormulaPublisher'
]
