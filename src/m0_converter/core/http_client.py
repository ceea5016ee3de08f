"""
HTTP request helpers for the geographic reference API.

This module provides HTTP request utilities for the geographic reference
client, with consistent error handling.

Classes:
    RequestHandler: Centralized HTTP request handling with error handling
    ResponseHandler: Response parsing and error handling
    GeoFeatureClient: Fetches regions and departements
"""

import json
import logging
from typing import Any, Dict, List, Literal, Optional

import requests

logger = logging.getLogger(__name__)

# Type aliases
HttpMethod = Literal["GET"]
GeoItem = Dict[str, str]

GEO_ITEM_FIELDS = ("code", "intitule", "uri")


class GeoAPIError(Exception):
    """Exception raised for geographic API errors.

    Attributes:
        status_code: HTTP status code
        error_code: Short error code
        message: Human-readable error message
    """

    def __init__(self, status_code: int, error_code: str, message: str):
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        super().__init__(f"[{error_code}] {message} (HTTP {status_code})")


class RequestHandler:
    """Centralized HTTP request handling with error handling.

    Handles common request patterns including:
    - Timeout handling
    - Connection error handling
    - Consistent logging format

    Example:
        >>> handler = RequestHandler(default_timeout=10)
        >>> response = handler.execute(
        ...     "GET", url, "List regions",
        ...     headers={"accept": "application/json"}
        ... )
    """

    def __init__(self, default_timeout: int = 30):
        """Initialize the request handler.

        Args:
            default_timeout: Default request timeout in seconds
        """
        self._default_timeout = default_timeout

    def execute(
        self,
        method: HttpMethod,
        url: str,
        operation_name: str,
        timeout: Optional[int] = None,
        **kwargs: Any
    ) -> requests.Response:
        """Execute an HTTP request with error handling.

        Args:
            method: HTTP method (only GET is used)
            url: URL to request
            operation_name: Description of operation (for logging)
            timeout: Request timeout in seconds (uses default if not specified)
            **kwargs: Additional arguments to pass to requests

        Returns:
            Response object

        Raises:
            GeoAPIError: On any request failure with consistent error codes
        """
        timeout = timeout or self._default_timeout

        try:
            logger.debug(f"{operation_name}: {method} {url}")
            return requests.request(method, url, timeout=timeout, **kwargs)

        except requests.exceptions.Timeout:
            logger.error(f"{operation_name}: Request timeout after {timeout}s")
            raise GeoAPIError(
                status_code=408,
                error_code='RequestTimeout',
                message=f'{operation_name} timed out after {timeout} seconds'
            )

        except requests.exceptions.ConnectionError as e:
            logger.error(f"{operation_name}: Connection error: {e}")
            raise GeoAPIError(
                status_code=503,
                error_code='ConnectionError',
                message=f'{operation_name} failed to connect to the geographic API: {e}'
            )

        except requests.exceptions.RequestException as e:
            logger.error(f"{operation_name}: Request error: {e}")
            raise GeoAPIError(
                status_code=500,
                error_code='RequestError',
                message=f'{operation_name} request failed: {e}'
            )


class ResponseHandler:
    """Handles API response parsing and error handling.

    Example:
        >>> items = ResponseHandler.handle(response)
    """

    @staticmethod
    def handle(response: requests.Response) -> Any:
        """Handle API response and raise appropriate errors.

        Args:
            response: The HTTP response to handle

        Returns:
            Parsed JSON body

        Raises:
            GeoAPIError: On error responses or invalid JSON
        """
        if response.status_code == 200:
            try:
                return response.json()
            except (json.JSONDecodeError, ValueError) as e:
                logger.error(f"Failed to parse JSON response: {e}")
                logger.debug(f"Response text: {response.text[:500]}")
                raise GeoAPIError(
                    status_code=response.status_code,
                    error_code='InvalidResponse',
                    message=f'Server returned invalid JSON: {e}'
                )

        raise GeoAPIError(
            status_code=response.status_code,
            error_code='HttpError',
            message=response.text[:500] or response.reason or 'Unexpected response',
        )


class GeoFeatureClient:
    """Client for the regions and departements of the geographic API.

    Example:
        >>> client = GeoFeatureClient("http://api.example.org/")
        >>> client.get_regions()[0]
        {'code': '84', 'intitule': 'Auvergne-Rhône-Alpes', 'uri': 'http://id.insee.fr/geo/region/...'}
    """

    ACCEPT_HEADERS = {"accept": "application/json"}
    ALL_DATES = {"date": "*"}

    def __init__(self, api_url: str, timeout: int = 30, request_handler: Optional[RequestHandler] = None):
        if not api_url:
            raise ValueError("Geographic API URL is required")
        self._api_url = api_url if api_url.endswith("/") else api_url + "/"
        self._handler = request_handler or RequestHandler(default_timeout=timeout)

    def get_items(self, path: str) -> List[GeoItem]:
        """
        GET a list of geographic items.

        Raises:
            GeoAPIError: On HTTP failure, invalid JSON, or an unexpected body.
        """
        url = self._api_url + path
        response = self._handler.execute(
            "GET", url, f"Get {path}", headers=self.ACCEPT_HEADERS, params=self.ALL_DATES
        )
        body = ResponseHandler.handle(response)
        if not isinstance(body, list):
            raise GeoAPIError(
                status_code=response.status_code,
                error_code='InvalidResponse',
                message=f'Expected a JSON array from {url}',
            )

        items: List[GeoItem] = []
        for item in body:
            if not isinstance(item, dict) or any(field not in item for field in GEO_ITEM_FIELDS):
                logger.warning(f"Ignoring malformed item from {path}: {item}")
                continue
            items.append({field: str(item[field]) for field in GEO_ITEM_FIELDS})
        logger.info(f"Retrieved {len(items)} items from {path}")
        return items

    def get_regions(self) -> List[GeoItem]:
        return self.get_items("geo/regions")

    def get_departements(self) -> List[GeoItem]:
        return self.get_items("geo/departements")
