"""Field normalization for raw profile records.

Persisted records come from different layers (ORM rows, API payloads,
YAML fixtures) and disagree on key style, date formats and how codes are
spelled. The Normalizer coerces single fields into the types the value
objects expect and never raises on malformed optional input.
"""

import logging
import re
from collections.abc import Mapping
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional, Type, TypeVar

from nannymatch.profile.models import Coordinates, Day, Shift

logger = logging.getLogger(__name__)

E = TypeVar("E", bound=Enum)

_CAMEL_BOUNDARY = re.compile(r"(?<!^)(?=[A-Z])")


def snake_case(name: str) -> str:
    """Convert a camelCase key to snake_case."""
    return _CAMEL_BOUNDARY.sub("_", name).lower()


def get_field(record: Any, name: str, default: Any = None) -> Any:
    """Read a field from a mapping or an object, camelCase or snake_case.

    Args:
        record: Mapping or attribute-bearing object (e.g. an ORM row)
        name: Field name in camelCase
        default: Value returned when neither spelling is present

    Returns:
        The field value, or default
    """
    if record is None:
        return default
    for key in (name, snake_case(name)):
        if isinstance(record, Mapping):
            if key in record:
                return record[key]
        elif hasattr(record, key):
            return getattr(record, key)
    return default


class Normalizer:
    """Coerces raw field values into value-object field types."""

    DATE_FORMATS = [
        "%Y-%m-%d",           # ISO format
        "%d/%m/%Y",           # Brazilian format
        "%Y/%m/%d",           # ISO with slashes
        "%d-%m-%Y",           # Brazilian with dashes
        "%Y-%m-%dT%H:%M:%S",  # ISO datetime without zone
    ]

    DAY_NAMES = {day.value.lower(): day for day in Day}

    COLLECTION_TYPES = (list, tuple, set, frozenset)

    # Hour windows covered by each shift, used for time-range schedules
    MORNING_HOURS = (6, 12)
    AFTERNOON_HOURS = (12, 18)
    NIGHT_HOURS = (18, 23)

    def normalize_date(self, value: Any) -> Optional[date]:
        """Convert dates, datetimes and common date strings to a date.

        Args:
            value: Date-like value

        Returns:
            date instance or None if parsing fails
        """
        if value is None or value == "":
            return None

        if isinstance(value, datetime):
            return value.date()

        if isinstance(value, date):
            return value

        if isinstance(value, str):
            text = value.strip()
            try:
                return datetime.fromisoformat(text.replace("Z", "+00:00")).date()
            except ValueError:
                pass

            for fmt in self.DATE_FORMATS:
                try:
                    return datetime.strptime(text, fmt).date()
                except ValueError:
                    continue

        logger.warning(f"Could not parse date: {value!r}")
        return None

    def normalize_datetime(self, value: Any) -> Optional[datetime]:
        """Convert a timestamp to an aware UTC datetime."""
        if value is None or value == "":
            return None

        parsed: Optional[datetime] = None
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, date):
            parsed = datetime(value.year, value.month, value.day)
        elif isinstance(value, str):
            try:
                parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
            except ValueError:
                logger.warning(f"Could not parse timestamp: {value!r}")
                return None

        if parsed is None:
            logger.warning(f"Could not parse timestamp: {value!r}")
            return None

        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed

    def normalize_bool(self, value: Any) -> Optional[bool]:
        """Convert booleans and their usual string spellings."""
        if value is None:
            return None
        if isinstance(value, bool):
            return value
        if isinstance(value, (int, float)):
            return bool(value)
        if isinstance(value, str):
            text = value.strip().lower()
            if text in ("true", "yes", "sim", "1"):
                return True
            if text in ("false", "no", "nao", "não", "0"):
                return False
        logger.warning(f"Could not parse boolean: {value!r}")
        return None

    def normalize_int(self, value: Any, minimum: Optional[int] = None) -> Optional[int]:
        """Convert to int, dropping values below minimum."""
        if value is None or value == "" or isinstance(value, bool):
            return None
        try:
            number = int(value)
        except (TypeError, ValueError, OverflowError):
            logger.warning(f"Could not parse integer: {value!r}")
            return None
        if minimum is not None and number < minimum:
            logger.warning(f"Integer {number} below minimum {minimum}, ignoring")
            return None
        return number

    def normalize_float(
        self,
        value: Any,
        minimum: Optional[float] = None,
        maximum: Optional[float] = None,
    ) -> Optional[float]:
        """Convert to float, dropping values outside [minimum, maximum]."""
        if value is None or value == "" or isinstance(value, bool):
            return None
        try:
            number = float(value)
        except (TypeError, ValueError):
            logger.warning(f"Could not parse number: {value!r}")
            return None
        if number != number:  # NaN
            return None
        if minimum is not None and number < minimum:
            return None
        if maximum is not None and number > maximum:
            return None
        return number

    def normalize_code(self, value: Any, enum_cls: Type[E]) -> Optional[E]:
        """Map a raw code onto a closed enumeration.

        Unknown codes are logged and dropped.
        """
        if value is None or value == "":
            return None
        if isinstance(value, enum_cls):
            return value
        text = str(value.value if isinstance(value, Enum) else value).strip().upper()
        try:
            return enum_cls(text)
        except ValueError:
            logger.warning(f"Unknown {enum_cls.__name__} code: {value!r}")
            return None

    def normalize_codes(self, values: Any, enum_cls: Type[E]) -> frozenset:
        """Map a collection of raw codes onto a frozenset of enum members."""
        return frozenset(self.normalize_ordered_codes(values, enum_cls))

    def normalize_ordered_codes(self, values: Any, enum_cls: Type[E]) -> tuple:
        """Map raw codes to enum members keeping first-seen order, without duplicates."""
        if not values:
            return ()
        if isinstance(values, (str, Enum)):
            values = [values]
        elif not isinstance(values, self.COLLECTION_TYPES):
            logger.warning(f"Expected a list of {enum_cls.__name__} codes, got {values!r}")
            return ()

        ordered: list = []
        for raw in values:
            code = self.normalize_code(raw, enum_cls)
            if code is not None and code not in ordered:
                ordered.append(code)
        return tuple(ordered)

    def normalize_ids(self, values: Any) -> tuple[int, ...]:
        """Normalize an ordered sequence of integer identifiers."""
        if not values:
            return ()
        if not isinstance(values, self.COLLECTION_TYPES):
            logger.warning(f"Expected a list of ids, got {values!r}")
            return ()
        ids = []
        for raw in values:
            number = self.normalize_int(raw)
            if number is not None:
                ids.append(number)
        return tuple(ids)

    def normalize_coordinates(self, address: Any) -> Optional[Coordinates]:
        """Extract coordinates from an address record.

        Accepts latitude/longitude or lat/lng keys. Returns None when either
        value is missing or out of range.
        """
        if address is None:
            return None

        latitude = get_field(address, "latitude", get_field(address, "lat"))
        longitude = get_field(address, "longitude", get_field(address, "lng"))

        lat = self.normalize_float(latitude, -90.0, 90.0)
        lng = self.normalize_float(longitude, -180.0, 180.0)
        if lat is None or lng is None:
            return None

        return Coordinates(latitude=lat, longitude=lng)

    def months_between(self, start: date, end: date) -> Optional[int]:
        """Whole months elapsed from start to end (None when start is in the future)."""
        months = (end.year - start.year) * 12 + (end.month - start.month)
        if end.day < start.day:
            months -= 1
        return months if months >= 0 else None

    def normalize_availability(self, schedule: Any) -> Optional[frozenset[tuple[Day, Shift]]]:
        """Convert a stored availability schedule into (day, shift) slots.

        Handles three shapes:
        - a list of "MONDAY_MORNING" style slot codes
        - {"monday": {"enabled": true, "periods": ["morning", ...]}, ...}
        - {"monday": {"enabled": true, "startTime": "08:00", "endTime": "18:00"}, ...}

        Args:
            schedule: Raw availability JSON

        Returns:
            Frozenset of slots, or None when no usable schedule exists
        """
        if not schedule:
            return None

        slots: set[tuple[Day, Shift]] = set()

        if isinstance(schedule, (list, tuple, set, frozenset)):
            for raw in schedule:
                slot = self._parse_slot_code(raw)
                if slot is not None:
                    slots.add(slot)
            return frozenset(slots) if slots else None

        if not isinstance(schedule, Mapping):
            logger.warning(f"Unsupported availability schedule type: {type(schedule).__name__}")
            return None

        for raw_day, day_data in schedule.items():
            day = self.DAY_NAMES.get(str(raw_day).strip().lower())
            if day is None or not isinstance(day_data, Mapping):
                continue
            if not day_data.get("enabled"):
                continue

            periods = day_data.get("periods")
            if periods:
                for shift in self.normalize_codes(periods, Shift):
                    slots.add((day, shift))
                continue

            for shift in self._shifts_for_window(
                day_data.get("startTime") or "08:00",
                day_data.get("endTime") or "18:00",
            ):
                slots.add((day, shift))

        return frozenset(slots) if slots else None

    def _parse_slot_code(self, raw: Any) -> Optional[tuple[Day, Shift]]:
        """Parse "MONDAY_MORNING" into (Day.MONDAY, Shift.MORNING)."""
        text = str(raw).strip().upper()
        day_text, _, shift_text = text.partition("_")
        day = self.DAY_NAMES.get(day_text.lower())
        try:
            shift = Shift(shift_text)
        except ValueError:
            shift = None
        if day is None or shift is None:
            logger.warning(f"Unknown availability slot: {raw!r}")
            return None
        return day, shift

    def _shifts_for_window(self, start_time: str, end_time: str) -> list[Shift]:
        """Shifts touched by an HH:MM time window."""
        start_hour = self._parse_hour(start_time)
        end_hour = self._parse_hour(end_time)
        if start_hour is None or end_hour is None:
            return []

        shifts = []
        if start_hour < self.MORNING_HOURS[1] and end_hour > self.MORNING_HOURS[0]:
            shifts.append(Shift.MORNING)
        if start_hour < self.AFTERNOON_HOURS[1] and end_hour > self.AFTERNOON_HOURS[0]:
            shifts.append(Shift.AFTERNOON)
        if start_hour < self.NIGHT_HOURS[1] and end_hour > self.NIGHT_HOURS[0]:
            shifts.append(Shift.NIGHT)
        if end_hour <= self.MORNING_HOURS[0] or start_hour >= self.NIGHT_HOURS[1]:
            shifts.append(Shift.OVERNIGHT)
        return shifts

    def _parse_hour(self, time_str: Any) -> Optional[int]:
        try:
            return int(str(time_str).split(":")[0])
        except ValueError:
            logger.warning(f"Could not parse time: {time_str!r}")
            return None
