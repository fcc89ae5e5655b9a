"""Services package"""

from .geocoding.geocoding_service import GeocodeResult, GeocodingError, GeocodingService
from .mailer import Mailer, MailerError, SmtpSettings

__all__ = [
    "GeocodeResult",
    "GeocodingError",
    "GeocodingService",
    "Mailer",
    "MailerError",
    "SmtpSettings",
]
