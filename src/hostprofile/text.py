"""Text primitives shared by the platform parsers."""

import re
from typing import Iterable, List, Optional, Pattern, Union

from .errors import LabelNotFound, ParseFailure


# Sentinel for a value the host did not (or could not) report
UNKNOWN = 'unknown'

_INTEGER = re.compile(r'[0-9]+')
_DOTTED_NUMBER = re.compile(r'[0-9]+(?:\.[0-9]+)+')


def split_trim(message: str) -> List[str]:
    """Split text into lines with surrounding whitespace removed."""
    return [line.strip() for line in message.split('\n')]


def find_label_line(lines: Iterable[str], label: str) -> str:
    """
    Return the first line that starts with ``label:``.

    Raises:
        LabelNotFound: no line carries the label
    """
    pattern = re.compile(rf'^{re.escape(label)}\s*:')
    for line in lines:
        if pattern.match(line):
            return line
    raise LabelNotFound(label)


def find_label_value(lines: Iterable[str], label: str) -> str:
    """Return the text after ``label:`` on the first matching line."""
    line = find_label_line(lines, label)
    return line.split(':', 1)[1].strip()


def first_integer(text: str, field: str = 'integer') -> int:
    """
    Extract the first run of decimal digits from mixed text.

    Raises:
        ParseFailure: the text has no digits
    """
    match = _INTEGER.search(text)
    if not match:
        raise ParseFailure(field, text)
    return int(match.group(0))


def to_int(value: str, field: str = 'integer') -> int:
    """Parse a whole (trimmed) value as an integer."""
    try:
        return int(value.strip())
    except ValueError:
        raise ParseFailure(field, value)


def first_dotted_number(text: str) -> Optional[str]:
    """Return the first dotted-numeric token (e.g. "11.4.0"), or None."""
    match = _DOTTED_NUMBER.search(text)
    return match.group(0) if match else None


def first_match(pattern: Union[str, Pattern], text: str, group: Union[int, str] = 0) -> Optional[str]:
    """Return a group of the first regex match in text, or None."""
    match = re.search(pattern, text)
    if not match:
        return None
    return match.group(group)


def first_line(text: str) -> str:
    """Return the first line of text (empty string for empty text)."""
    return text.split('\n', 1)[0].strip()
