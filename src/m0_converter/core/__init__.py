"""
Core services: HTTP access to the geographic reference API.
"""

from .http_client import GeoAPIError, GeoFeatureClient, RequestHandler, ResponseHandler

__all__ = [
    'GeoAPIError',
    'GeoFeatureClient',
    'RequestHandler',
    'ResponseHandler',
]
