"""Geocoding service for address to coordinate conversion."""

from .geocoding_service import GeocodeResult, GeocodingError, GeocodingService

__all__ = ["GeocodeResult", "GeocodingError", "GeocodingService"]
