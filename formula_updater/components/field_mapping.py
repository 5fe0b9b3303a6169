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
Field Mapping Component

Builds the field -> hash mapping used by the line rewriter:
- Multi-field input: a JSON object whose values look like "<key>-<hash>"
- Single-field input: one field name and one hash value

The outer JSON keys are labels only. The left segment of each value is the
substring looked up in formula lines.
"""

import json
from typing import Dict, List, Tuple

from formula_updater.utils.index import log_message
from .errors import FieldMappingError

SEPARATOR = "-"


def _strip_quotes(value: str) -> str:
    if value.startswith('"'):
        value = value[1:]
    if value.endswith('"'):
        value = value[:-1]
    return value


def split_field_value(value: str) -> Tuple[str, str]:
    """
    Split a "<key>-<hash>" value into its two segments.

    Args:
        value: Raw value from the fields object

    Returns:
        Tuple[str, str]: (match key, hash value)

    Raises:
        FieldMappingError: If the value is not exactly two non-empty segments
    """
    parts = _strip_quotes(value).split(SEPARATOR)
    if len(parts) != 2:
        raise FieldMappingError(
            f"Field value {value!r} must be '<key>{SEPARATOR}<hash>' with exactly one '{SEPARATOR}'"
        )
    key, hash_value = parts
    if not key or not hash_value:
        raise FieldMappingError(f"Field value {value!r} has an empty key or hash")
    return key, hash_value


def parse_fields(fields: str) -> Dict[str, str]:
    """
    Decode the multi-field input into a field -> hash mapping.

    Args:
        fields: JSON object such as {"arm": "arm64-<hash>", "intel": "x86_64-<hash>"}

    Returns:
        Dict[str, str]: Mapping from match key to hash, in input order

    Raises:
        FieldMappingError: On malformed JSON, non-string values or duplicate keys
    """
    try:
        decoded = json.loads(fields)
    except (TypeError, ValueError) as e:
        raise FieldMappingError(f"Cannot decode fields value: {e}")

    if not isinstance(decoded, dict):
        raise FieldMappingError(f"Fields value must be a JSON object, got {type(decoded).__name__}")
    if not decoded:
        raise FieldMappingError("Fields value is an empty object")

    mapping: Dict[str, str] = {}
    for label, value in decoded.items():
        if not isinstance(value, str):
            raise FieldMappingError(f"Field {label!r} must be a string, got {type(value).__name__}")
        key, hash_value = split_field_value(value)
        if key in mapping:
            raise FieldMappingError(f"Field key {key!r} appears more than once")
        mapping[key] = hash_value
        log_message(f"[FIELDS] {label}: lines containing {key!r} -> {hash_value}", "DEBUG")

    log_message(f"[FIELDS] Parsed {len(mapping)} field(s): {', '.join(mapping)}")
    return mapping


def single_field_mapping(field: str, sha256: str) -> Dict[str, str]:
    """Build the one-entry mapping of the single-field variant."""
    if not field or not sha256:
        raise FieldMappingError("Both a field name and a hash value are required")
    return {field: sha256}


def find_overlapping_keys(mapping: Dict[str, str]) -> List[Tuple[str, str]]:
    """
    Find keys that are substrings of other keys.

    A line matching the longer key also matches the shorter one, so the first
    key in mapping order decides which hash that line gets.

    Returns:
        List[Tuple[str, str]]: (shorter, longer) pairs
    """
    overlaps = []
    keys = list(mapping)
    for key in keys:
        for other in keys:
            if key != other and key in other:
                overlaps.append((key, other))
    return overlaps


def validate_field_keys(mapping: Dict[str, str], strict: bool = False) -> None:
    """
    Report overlapping keys; raise when strict.

    Raises:
        FieldMappingError: If strict and any key is a substring of another
    """
    overlaps = find_overlapping_keys(mapping)
    for shorter, longer in overlaps:
        message = f"[FIELDS] Key {shorter!r} is contained in {longer!r}; the first key listed wins on shared lines"
        log_message(message, "ERROR" if strict else "WARNING")
    if strict and overlaps:
        raise FieldMappingError(f"{len(overlaps)} overlapping field key(s) with strict_fields enabled")
