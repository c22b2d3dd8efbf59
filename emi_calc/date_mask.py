"""Masked ``dd/mm/yyyy`` date entry.

The field keeps only the digits the user typed (``DDMMYYYY``, at most eight)
and derives everything else from them: the masked display, the caret
position and a validity classification. Separators are never part of the
buffer, so they can never be typed over or deleted.

The caret is a position in the 10-character display. It is translated to a
digit index with a fixed table, edited in digit space, and translated back.
All functions are pure; callers hold the ``(digits, caret)`` pair and feed
each keystroke in order.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Tuple

from .utils import is_real_date

logger = logging.getLogger(__name__)

DATE_MASK = "dd/mm/yyyy"
DIGIT_SLOTS = (0, 1, 3, 4, 6, 7, 8, 9)
MAX_DIGITS = len(DIGIT_SLOTS)
END_POS = len(DATE_MASK)
DIGITS = "0123456789"

# display position -> digit index; a slash maps to the digit slot after it
_POS_TO_INDEX = (0, 1, 2, 2, 3, 4, 4, 5, 6, 7, MAX_DIGITS)


class DateStatus(str, Enum):
    EMPTY = "empty"
    IN_PROGRESS = "inprogress"
    VALID = "valid"
    INVALID = "invalid"


@dataclass(frozen=True)
class DateValidation:
    status: DateStatus
    message: str = ""


@dataclass(frozen=True)
class MaskedDateState:
    """What the surrounding form sees of the field.

    ``iso`` is ``None`` until the digits form a real date; the form treats
    that as "not ready to submit".
    """

    display: str
    caret: int
    status: DateStatus
    message: str
    iso: Optional[str]


def display_pos_to_digit_index(pos: int) -> int:
    if pos <= 0:
        return 0
    if pos >= END_POS:
        return MAX_DIGITS
    return _POS_TO_INDEX[pos]


def digit_index_to_display_pos(index: int) -> int:
    if index <= 0:
        return 0
    if index >= MAX_DIGITS:
        return END_POS
    return DIGIT_SLOTS[index]


def render(digits: str) -> str:
    """Overlay the typed digits onto the ``dd/mm/yyyy`` scaffold."""
    scaffold = list(DATE_MASK)
    for slot, char in zip(DIGIT_SLOTS, digits[:MAX_DIGITS]):
        scaffold[slot] = char
    return "".join(scaffold)


def is_ascii_digits(text: str) -> bool:
    # str.isdigit() also accepts "²" and other Unicode digits
    return bool(text) and all(ch in DIGITS for ch in text)


def clean_digits(value: object) -> str:
    """Keep the ASCII digits of ``value``, at most ``MAX_DIGITS`` of them."""
    return "".join(ch for ch in str(value or "") if ch in DIGITS)[:MAX_DIGITS]


def insert_digit(digits: str, caret: int, char: str) -> Tuple[str, int]:
    """Type ``char`` at ``caret``.

    Inside the buffer the digit under the caret is overwritten; at or past
    the end it is appended while there is room. Anything that is not a
    single decimal digit is ignored.
    """
    if len(char) != 1 or char not in DIGITS:
        return digits, caret
    index = display_pos_to_digit_index(caret)
    if index < len(digits):
        digits = digits[:index] + char + digits[index + 1:]
    elif len(digits) < MAX_DIGITS:
        index = len(digits)
        digits = digits + char
    else:
        return digits, caret
    return digits, digit_index_to_display_pos(index + 1)


def delete_digit_before(digits: str, caret: int) -> Tuple[str, int]:
    """Backspace: remove the digit left of the caret."""
    index = min(display_pos_to_digit_index(caret), len(digits))
    if index == 0:
        return digits, caret
    index -= 1
    return digits[:index] + digits[index + 1:], digit_index_to_display_pos(index)


def delete_digit_at(digits: str, caret: int) -> Tuple[str, int]:
    """Delete: remove the digit under the caret."""
    index = display_pos_to_digit_index(caret)
    if index >= len(digits):
        return digits, caret
    return digits[:index] + digits[index + 1:], digit_index_to_display_pos(index)


def move_caret(caret: int, delta: int) -> int:
    return max(0, min(END_POS, caret + delta))


def digits_to_iso(digits: str) -> Optional[str]:
    """Return ``YYYY-MM-DD`` for a complete, real ``DDMMYYYY`` buffer."""
    if len(digits) != MAX_DIGITS or not is_ascii_digits(digits):
        return None
    day, month, year = int(digits[0:2]), int(digits[2:4]), int(digits[4:8])
    if not is_real_date(year, month, day):
        return None
    return f"{year:04d}-{month:02d}-{day:02d}"


def iso_to_digits(iso_date: Optional[str]) -> str:
    """Turn ``YYYY-MM-DD`` into a ``DDMMYYYY`` buffer, ``""`` if malformed."""
    if not iso_date:
        return ""
    parts = iso_date.split("-")
    if len(parts) != 3 or not all(parts):
        return ""
    year, month, day = parts
    return day + month + year


def classify(digits: str) -> DateValidation:
    """Classify a partial buffer, flagging a bad digit as soon as it is typed."""
    if not digits:
        return DateValidation(DateStatus.EMPTY)

    if int(digits[0]) > 3:
        return DateValidation(DateStatus.INVALID, "Invalid day")
    if len(digits) >= 2:
        day = int(digits[0:2])
        if day == 0 or day > 31:
            return DateValidation(DateStatus.INVALID, "Invalid day")
    if len(digits) >= 3 and int(digits[2]) > 1:
        return DateValidation(DateStatus.INVALID, "Invalid month")
    if len(digits) >= 4:
        month = int(digits[2:4])
        if month == 0 or month > 12:
            return DateValidation(DateStatus.INVALID, "Invalid month")

    if len(digits) == MAX_DIGITS:
        if digits_to_iso(digits):
            return DateValidation(DateStatus.VALID, "Valid Date")
        return DateValidation(DateStatus.INVALID, "Invalid date")

    return DateValidation(DateStatus.IN_PROGRESS)


def field_state(digits: str, caret: int) -> MaskedDateState:
    validation = classify(digits)
    return MaskedDateState(
        display=render(digits),
        caret=caret,
        status=validation.status,
        message=validation.message,
        iso=digits_to_iso(digits) if validation.status is DateStatus.VALID else None,
    )


def apply_key(digits: str, caret: int, key: str) -> Tuple[str, int]:
    """Process a single keystroke and return the new ``(digits, caret)``.

    Understands digits, ``Backspace``, ``Delete``, ``ArrowLeft``,
    ``ArrowRight``, ``Home`` and ``End`` (case-insensitive). Other keys leave
    the state untouched.
    """
    if len(key) == 1:
        return insert_digit(digits, caret, key)
    name = key.lower()
    if name == "backspace":
        return delete_digit_before(digits, caret)
    if name == "delete":
        return delete_digit_at(digits, caret)
    if name == "arrowleft":
        return digits, move_caret(caret, -1)
    if name == "arrowright":
        return digits, move_caret(caret, 1)
    if name == "home":
        return digits, 0
    if name == "end":
        return digits, digit_index_to_display_pos(len(digits))
    logger.debug("Ignoring unsupported key %r", key)
    return digits, caret


def replay_keys(
    keys: Iterable[str], digits: str = "", caret: Optional[int] = None
) -> Tuple[str, MaskedDateState]:
    """Feed ``keys`` through the field in order.

    Returns the final digit buffer together with the field state. The caret
    starts at the end of ``digits`` unless given.
    """
    if caret is None:
        caret = digit_index_to_display_pos(len(digits))
    for key in keys:
        digits, caret = apply_key(digits, caret, key)
    return digits, field_state(digits, caret)
