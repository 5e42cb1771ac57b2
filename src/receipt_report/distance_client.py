import logging
import os
from dataclasses import dataclass
from typing import Optional

import requests
from dotenv import load_dotenv

from .errors import InvalidAddress, NoRouteFound, ServiceUnavailable

load_dotenv()

logger = logging.getLogger(__name__)

METERS_PER_MILE = 1609.34
METERS_PER_KILOMETER = 1000.0


@dataclass
class DistanceResult:
    distance_value: float
    distance_unit_label: str
    duration_label: str


class DistanceClient:
    """Driving distance between two addresses via the Distance Matrix API."""

    def __init__(self, api_key: Optional[str] = None, timeout: float = 10.0):
        self.api_key = api_key or os.getenv("GOOGLE_PLACES_API_KEY")
        self.base_url = "https://maps.googleapis.com/maps/api/distancematrix/json"
        self.timeout = timeout

    def distance(self, start_address: str, end_address: str, units: str = "imperial") -> DistanceResult:
        if not (start_address or "").strip() or not (end_address or "").strip():
            raise InvalidAddress("Start address and end address are required")
        if units not in ("imperial", "metric"):
            raise ValueError("units must be 'imperial' or 'metric'")
        if not self.api_key:
            raise ServiceUnavailable("Distance API key not configured (GOOGLE_PLACES_API_KEY)")

        params = {
            "origins": start_address,
            "destinations": end_address,
            "units": units,
            "key": self.api_key,
        }
        try:
            r = requests.get(self.base_url, params=params, timeout=self.timeout)
            r.raise_for_status()
            data = r.json()
        except (requests.RequestException, ValueError) as e:
            raise ServiceUnavailable(f"Distance service request failed: {e}") from e

        status = data.get("status")
        if status != "OK":
            logger.warning("distance API status %s: %s", status, data.get("error_message"))
            if status in ("INVALID_REQUEST", "NOT_FOUND"):
                raise InvalidAddress(f"Distance API rejected the addresses: {status}")
            raise ServiceUnavailable(f"Distance API error: {status}")

        try:
            element = data["rows"][0]["elements"][0]
        except (KeyError, IndexError, TypeError):
            element = None
        if not element or element.get("status") != "OK":
            raise NoRouteFound(
                "No route found between the specified addresses. Please check the addresses and try again."
            )

        meters = float(element["distance"]["value"])
        if units == "imperial":
            value, label = meters / METERS_PER_MILE, "mi"
        else:
            value, label = meters / METERS_PER_KILOMETER, "km"
        duration = (element.get("duration") or {}).get("text", "")
        logger.info("distance %s -> %s: %.2f %s (%s)", start_address, end_address, value, label, duration)
        return DistanceResult(distance_value=round(value, 2), distance_unit_label=label, duration_label=duration)
