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
Line Rewriter Component

Rewrites a formula file line by line:
- Lines containing "version" get every numeric-dot token replaced by the new version
- Lines containing a field key get every quoted alphanumeric token replaced by that key's hash

Both rules may apply to the same line. Everything else is written back untouched.
"""

import difflib
import re
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Union

from formula_updater.utils.index import log_message
from .errors import FormulaFileError

VERSION_MARKER = "version"
VERSION_PATTERN = re.compile(r"\d+\.*\d*\.*\d*", re.ASCII)
HASH_PATTERN = re.compile(r'"[a-zA-Z0-9]*"')
LINE_SEPARATOR = "\n"

# Undecodable bytes round-trip unchanged
FILE_ENCODING = "utf-8"
FILE_ERRORS = "surrogateescape"


def find_hash(line: str, fields: Dict[str, str]) -> Optional[str]:
    """Return the hash of the first key (in mapping order) found in the line."""
    for key, hash_value in fields.items():
        if key in line:
            return hash_value
    return None


def rewrite_line(line: str, version: str, fields: Dict[str, str]) -> str:
    """
    Apply the version and hash rules to a single line.

    Field keys are matched against the line as it was read, so a version
    substitution never changes which hash applies. Replacements are literal:
    backslashes or group references in the version or hash are never expanded.
    """
    hash_value = find_hash(line, fields)

    if VERSION_MARKER in line:
        line = VERSION_PATTERN.sub(lambda _: version, line)

    if hash_value is not None:
        quoted = f'"{hash_value}"'
        line = HASH_PATTERN.sub(lambda _: quoted, line)

    return line


def rewrite_lines(lines: List[str], version: str, fields: Dict[str, str]) -> List[str]:
    """Rewrite every line; the result always has the same length as the input."""
    return [rewrite_line(line, version, fields) for line in lines]


def rewrite_text(text: str, version: str, fields: Dict[str, str]) -> str:
    """Split on newlines, rewrite, and join back with the same separator."""
    return LINE_SEPARATOR.join(rewrite_lines(text.split(LINE_SEPARATOR), version, fields))


@dataclass
class FormulaRewrite:
    """Before/after view of one rewritten formula file."""

    path: str
    original_lines: List[str] = field(default_factory=list)
    updated_lines: List[str] = field(default_factory=list)

    @property
    def changed_lines(self) -> int:
        return sum(1 for old, new in zip(self.original_lines, self.updated_lines) if old != new)

    @property
    def changed(self) -> bool:
        return self.changed_lines > 0

    def diff(self) -> List[str]:
        """Unified diff of the rewrite, without trailing newlines."""
        return list(difflib.unified_diff(
            self.original_lines,
            self.updated_lines,
            fromfile=f"a/{self.path}",
            tofile=f"b/{self.path}",
            lineterm=""
        ))


def check_formula(path: Union[str, Path]) -> None:
    """
    Make sure the formula file exists and can be opened for reading.

    Raises:
        FormulaFileError: If the file cannot be opened
    """
    try:
        with open(path, 'r', encoding=FILE_ENCODING, errors=FILE_ERRORS, newline=''):
            pass
    except OSError as e:
        raise FormulaFileError(f"Cannot open {path}: {e}", step="open")
    log_message(f"[FORMULA] Found formula file: {path}")


def read_formula(path: Union[str, Path]) -> str:
    """Read the whole file with newline translation disabled."""
    try:
        with open(path, 'r', encoding=FILE_ENCODING, errors=FILE_ERRORS, newline='') as f:
            return f.read()
    except OSError as e:
        raise FormulaFileError(f"Cannot read {path}: {e}")


def write_formula(path: Union[str, Path], text: str) -> None:
    """Overwrite the file completely with text."""
    try:
        with open(path, 'w', encoding=FILE_ENCODING, errors=FILE_ERRORS, newline='') as f:
            f.write(text)
    except OSError as e:
        raise FormulaFileError(f"Cannot update {path}: {e}")


def rewrite_file(path: Union[str, Path], version: str, fields: Dict[str, str],
                 display_path: Optional[str] = None) -> FormulaRewrite:
    """
    Rewrite a formula file in place.

    Args:
        path: File to rewrite
        version: Version string to inject
        fields: Field key -> hash mapping
        display_path: Name used in logs and diffs (defaults to path)

    Returns:
        FormulaRewrite: Original and updated lines

    Raises:
        FormulaFileError: If the file cannot be read or written
    """
    display_path = display_path or str(path)
    original = read_formula(path)
    original_lines = original.split(LINE_SEPARATOR)
    updated_lines = rewrite_lines(original_lines, version, fields)
    write_formula(path, LINE_SEPARATOR.join(updated_lines))

    result = FormulaRewrite(display_path, original_lines, updated_lines)
    if result.changed:
        log_message(f"[FORMULA] ✓ Updated {result.changed_lines} line(s) in {display_path}")
    else:
        log_message(f"[FORMULA] No lines changed in {display_path}", "WARNING")
    return result
