"""WiFi/GPS geofence verification adapters."""
import math
import time
from typing import List, Optional, Tuple

from attendance_engine.services.verdict import Verdict

Coordinates = Tuple[float, float]

SSID_MATCH_CONFIDENCE = 0.8


def is_valid_coordinate(lat: float, lng: float) -> bool:
    """Check latitude/longitude ranges."""
    try:
        return -90 <= lat <= 90 and -180 <= lng <= 180
    except TypeError:
        return False


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """Calculate distance between two GPS points in meters."""
    R = 6371000  # Earth radius in meters

    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    delta_lat = math.radians(lat2 - lat1)
    delta_lon = math.radians(lon2 - lon1)

    a = (math.sin(delta_lat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) *
         math.sin(delta_lon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return R * c


class GeofenceVerifier:
    """Interface: decide whether the caller is physically in the room."""

    def verify(self, observed_ssid: Optional[str], expected_ssid: str,
               observed_coordinates: Optional[Coordinates] = None,
               expected_coordinates: Optional[Coordinates] = None,
               radius_meters: Optional[float] = None) -> Verdict:
        raise NotImplementedError


class HaversineGeofenceVerifier(GeofenceVerifier):
    """
    SSID must match exactly. When both observed and expected coordinates are
    known, the observed point must also lie within ``radius_meters`` of the
    room centre; both checks have to agree.
    """

    def __init__(self, default_radius_meters: float = 100.0):
        self.default_radius_meters = default_radius_meters

    def verify(self, observed_ssid, expected_ssid, observed_coordinates=None,
               expected_coordinates=None, radius_meters=None):
        if not observed_ssid:
            return Verdict(matched=False, confidence=0.0, message='No WiFi network detected')

        if observed_ssid != expected_ssid:
            return Verdict(
                matched=False,
                confidence=0.0,
                message=f'Wrong WiFi network. Expected: {expected_ssid}, Found: {observed_ssid}'
            )

        if observed_coordinates is None or expected_coordinates is None:
            return Verdict(
                matched=True,
                confidence=SSID_MATCH_CONFIDENCE,
                message='WiFi location validation successful'
            )

        if not is_valid_coordinate(*observed_coordinates):
            return Verdict(matched=False, confidence=0.0, message='Invalid coordinates provided')

        radius = radius_meters or self.default_radius_meters
        distance = calculate_distance(*observed_coordinates, *expected_coordinates)

        if distance > radius:
            return Verdict(
                matched=False,
                confidence=round(SSID_MATCH_CONFIDENCE * 0.5, 4),
                distance=round(distance, 2),
                message=f'Outside the room radius ({distance:.0f}m > {radius:.0f}m)'
            )

        # Closer to the centre earns up to the remaining confidence
        boost = (1 - SSID_MATCH_CONFIDENCE) * (1 - distance / radius)
        return Verdict(
            matched=True,
            confidence=round(SSID_MATCH_CONFIDENCE + boost, 4),
            distance=round(distance, 2),
            message='WiFi and GPS location validation successful'
        )


class StaticGeofenceVerifier(GeofenceVerifier):
    """Deterministic fake returning a fixed verdict, optionally after a delay."""

    def __init__(self, matched: bool = True, confidence: float = 0.9, delay_seconds: float = 0.0):
        self.verdict = Verdict(matched=matched, confidence=confidence, message='Static geofence verdict')
        self.delay_seconds = delay_seconds
        self.calls: List[tuple] = []

    def verify(self, observed_ssid, expected_ssid, observed_coordinates=None,
               expected_coordinates=None, radius_meters=None) -> Verdict:
        self.calls.append((observed_ssid, expected_ssid, observed_coordinates, expected_coordinates))
        if self.delay_seconds:
            time.sleep(self.delay_seconds)
        return self.verdict
