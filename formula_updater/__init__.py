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
Formula updater package.

Bumps the version and hash fields of a package formula in a GitHub
repository and opens a pull request with the change.
"""

from .utils.index import log_message
from .config import load_config, resolve_inputs, UpdateInputs
from .components import FormulaPublisher, parse_fields, rewrite_text

__all__ = [
    'log_message',
    'load_config',
    'resolve_inputs',
    'UpdateInputs',
    'FormulaPublisher',
    'parse_fields',
    'rewrite_text'
]
