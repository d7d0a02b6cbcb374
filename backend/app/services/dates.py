import re
from datetime import date

CANONICAL_DATE_PATTERN = re.compile(r"^\d{4}-\d{2}-\d{2}$")


class InvalidPracticeDateError(ValueError):
    def __init__(self, value: object) -> None:
        super().__init__(f"invalid practice date {value!r}, expected YYYY-MM-DD")
        self.value = value


def parse_canonical_date(value: str) -> date:
    if not isinstance(value, str) or not CANONICAL_DATE_PATTERN.match(value):
        raise InvalidPracticeDateError(value)
    try:
        return date.fromisoformat(value)
    except ValueError as exc:
        raise InvalidPracticeDateError(value) from exc


def to_canonical_date(value: date) -> str:
    return value.isoformat()
