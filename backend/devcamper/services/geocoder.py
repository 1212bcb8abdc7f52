"""
DevCamper Backend — Geocoding Service
=======================================

What:  Resolves a street address or postal code to coordinates and address
       parts through a MapQuest-compatible HTTP API.
How:   httpx.AsyncClient for the request; tenacity retries transient
       failures (connection errors, timeouts, 5xx) with exponential backoff
       and jitter.
Who:   BootcampService on create/update (address → location) and radius
       search (zipcode → center point).

Outcomes (returned as Result, never raised):
    Ok(GeoLocation)                → provider returned at least one location
    Err(GeocodingError)            → provider answered but found nothing (400)
    Err(GeocoderUnavailableError)  → retries exhausted, provider error or a
                                     malformed payload (503)

Provider response shape (MapQuest address endpoint):
    {"results": [{"locations": [{
        "latLng": {"lat": 42.35, "lng": -71.06},
        "street": "233 Bay State Rd", "adminArea5": "Boston",
        "adminArea3": "MA", "postalCode": "02215", "adminArea1": "US"
    }]}]}
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional

import httpx
from tenacity import (
    AsyncRetrying,
    RetryError,
    before_sleep_log,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from devcamper.config import Settings
from devcamper.exceptions import GeocoderUnavailableError, GeocodingError
from devcamper.result import Err, Ok, Result

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeoLocation:
    latitude: float
    longitude: float
    formatted_address: Optional[str] = None
    street: Optional[str] = None
    city: Optional[str] = None
    state: Optional[str] = None
    zipcode: Optional[str] = None
    country: Optional[str] = None

    def as_columns(self) -> Dict[str, Any]:
        """Column values for Bootcamp's flattened location fields."""
        return {
            "latitude": self.latitude,
            "longitude": self.longitude,
            "formatted_address": self.formatted_address,
            "street": self.street,
            "city": self.city,
            "state": self.state,
            "zipcode": self.zipcode,
            "country": self.country,
        }


def _is_transient(exc: BaseException) -> bool:
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        return exc.response.status_code >= 500 or exc.response.status_code == 429
    return False


def _format_address(location: Dict[str, Any]) -> str:
    parts = [
        location.get("street"),
        location.get("adminArea5"),
        " ".join(p for p in (location.get("adminArea3"), location.get("postalCode")) if p),
        location.get("adminArea1"),
    ]
    return ", ".join(p for p in parts if p)


class Geocoder:
    """
    Async geocoding client.

    Args:
        settings: provides provider URL, API key, timeout and retry policy
        client:   optional pre-built httpx.AsyncClient (tests pass one with
                  an httpx.MockTransport)
    """

    def __init__(self, settings: Settings, client: Optional[httpx.AsyncClient] = None):
        self.settings = settings
        self._client = client or httpx.AsyncClient(timeout=settings.geocoder_timeout)

    async def geocode(self, query: str) -> Result[GeoLocation]:
        try:
            payload = await self._fetch(query)
        except (RetryError, httpx.HTTPError) as e:
            logger.error("Geocoder request for '%s' failed: %s", query, str(e))
            return Err(GeocoderUnavailableError(context={"query": query, "error": str(e)}))
        except ValueError as e:
            logger.error("Geocoder returned a non-JSON body for '%s': %s", query, str(e))
            return Err(GeocoderUnavailableError(context={"query": query, "error": "invalid JSON"}))

        try:
            location = self._first_location(payload)
            if location is None:
                logger.warning("Geocoder found no match for '%s'", query)
                return Err(GeocodingError(message=f"Could not geocode '{query}'"))
            return Ok(self._to_geolocation(location))
        except (AttributeError, KeyError, TypeError, ValueError) as e:
            # Provider answered with something other than the documented shape
            logger.error("Unexpected geocoder payload for '%s': %r", query, e)
            return Err(GeocoderUnavailableError(context={"query": query, "error": repr(e)}))

    @staticmethod
    def _to_geolocation(location: Dict[str, Any]) -> GeoLocation:
        lat_lng = location["latLng"]
        return GeoLocation(
            latitude=float(lat_lng["lat"]),
            longitude=float(lat_lng["lng"]),
            formatted_address=_format_address(location),
            street=location.get("street") or None,
            city=location.get("adminArea5") or None,
            state=location.get("adminArea3") or None,
            zipcode=location.get("postalCode") or None,
            country=location.get("adminArea1") or None,
        )

    async def _fetch(self, query: str) -> Dict[str, Any]:
        params = {"key": self.settings.geocoder_api_key, "location": query}
        async for attempt in AsyncRetrying(
            retry=retry_if_exception(_is_transient),
            stop=stop_after_attempt(self.settings.retry_max_attempts),
            wait=wait_exponential_jitter(
                initial=self.settings.retry_min_wait,
                max=self.settings.retry_max_wait,
                jitter=1,
            ),
            before_sleep=before_sleep_log(logger, logging.WARNING),
            reraise=True,
        ):
            with attempt:
                response = await self._client.get(self.settings.geocoder_provider_url, params=params)
                response.raise_for_status()
                return response.json()

    @staticmethod
    def _first_location(payload: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        for result in payload.get("results") or []:
            for location in result.get("locations") or []:
                if location.get("latLng"):
                    return location
        return None

    async def aclose(self) -> None:
        await self._client.aclose()
