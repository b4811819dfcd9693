"""A1 notation helpers."""

import re

from ..errors import InvalidArgumentError

_CELL_PATTERN = re.compile(r"^([A-Za-z]+)(\d+)$")


def column_letter(col: int) -> str:
    """Convert a 0-based column index to column letter(s). 0=A, 25=Z, 26=AA."""
    if col < 0:
        raise InvalidArgumentError(f"Column index must be >= 0, got {col}")
    letters = []
    n = col + 1
    while n > 0:
        n, remainder = divmod(n - 1, 26)
        letters.append(chr(ord("A") + remainder))
    return "".join(reversed(letters))


def column_index(letters: str) -> int:
    """Convert column letter(s) to a 0-based index. A=0, Z=25, AA=26."""
    if not letters or not letters.isalpha():
        raise InvalidArgumentError(f"Invalid column letters: {letters!r}")
    result = 0
    for char in letters.upper():
        result = result * 26 + (ord(char) - ord("A") + 1)
    return result - 1


def to_a1(row: int, col: int) -> str:
    """Build the A1 address for a 0-based (row, col) pair, e.g. (9, 27) -> AB10."""
    if row < 0:
        raise InvalidArgumentError(f"Row index must be >= 0, got {row}")
    return f"{column_letter(col)}{row + 1}"


def parse_a1(cell: str) -> tuple[int, int]:
    """Parse an A1 address into a 0-based (row, col) pair."""
    match = _CELL_PATTERN.match(cell or "")
    if not match or int(match.group(2)) < 1:
        raise InvalidArgumentError(f"Invalid cell notation: {cell}")
    return int(match.group(2)) - 1, column_index(match.group(1))


def cell_range(tab_name: str, row: int, col: int) -> str:
    """Range string addressing a single cell of a tab."""
    return f"{tab_name}!{to_a1(row, col)}"
