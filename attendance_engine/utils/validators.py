"""Validation utilities for request bodies."""
from datetime import date
from typing import Any, Dict, FrozenSet, List, Optional, Tuple

from attendance_engine.models.attendance import CheckInMethod
from attendance_engine.utils.errors import ValidationError


class Validator:
    """Validation helper class."""

    @staticmethod
    def require_json(data: Any) -> Dict:
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")
        return data

    @staticmethod
    def require_int(data: Dict, field: str, positive: bool = True) -> int:
        """Read an integer field, rejecting booleans and strings."""
        value = data.get(field)
        if value is None:
            raise ValidationError(f"Missing required field: {field}")
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValidationError(f"{field} must be an integer")
        if positive and value <= 0:
            raise ValidationError(f"{field} must be positive")
        return value

    @staticmethod
    def parse_methods(data: Dict) -> FrozenSet[CheckInMethod]:
        """Accept ``method: "FACE"``, ``method: "FACE+WIFI"`` or ``methods: [...]``."""
        raw = data.get('methods')
        if raw is None:
            raw = data.get('method')
        if raw is None:
            raise ValidationError("Missing required field: method")

        if isinstance(raw, str):
            raw = raw.split('+')
        if not isinstance(raw, list) or not raw:
            raise ValidationError("method must be a string or a non-empty list")

        methods = set()
        for item in raw:
            try:
                methods.add(CheckInMethod(str(item).strip().upper()))
            except ValueError:
                allowed = ', '.join(m.value for m in CheckInMethod)
                raise ValidationError(f"Unknown method {item!r}. Allowed: {allowed}")

        if CheckInMethod.QR in methods and len(methods) > 1:
            raise ValidationError("QR cannot be combined with other methods")
        return frozenset(methods)

    @staticmethod
    def parse_coordinates(data: Dict) -> Optional[Tuple[float, float]]:
        coords = data.get('coordinates')
        if coords is None:
            return None
        if not isinstance(coords, dict):
            raise ValidationError("coordinates must be an object")

        try:
            lat = float(coords['latitude'])
            lng = float(coords['longitude'])
        except (KeyError, TypeError, ValueError):
            raise ValidationError("coordinates require numeric latitude and longitude")

        if not -90 <= lat <= 90 or not -180 <= lng <= 180:
            raise ValidationError("coordinates out of range")
        return lat, lng

    @staticmethod
    def parse_face_sample(data: Dict) -> Optional[List[float]]:
        sample = data.get('faceSample')
        if sample is None:
            return None
        if not isinstance(sample, list) or not sample:
            raise ValidationError("faceSample must be a non-empty list of numbers")
        if not all(isinstance(v, (int, float)) and not isinstance(v, bool) for v in sample):
            raise ValidationError("faceSample must be a non-empty list of numbers")
        return [float(v) for v in sample]

    @staticmethod
    def parse_day(value: Optional[str]) -> Optional[date]:
        if not value:
            return None
        try:
            return date.fromisoformat(value)
        except ValueError:
            raise ValidationError("day must be an ISO date (YYYY-MM-DD)")
