"""
Custom exceptions for Shop Insights.

Defines application-specific exception classes for remote API failures,
ingestion mapping errors, validation failures and database problems.
"""

from typing import Optional, Dict, Any


class ShopInsightsError(Exception):
    """Base exception for all Shop Insights errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        """
        Initialize exception with message and optional details.

        Args:
            message: Error message
            details: Additional error details
        """
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(ShopInsightsError):
    """Raised when configuration is invalid or missing."""
    pass


class ValidationError(ShopInsightsError):
    """Raised when request data validation fails."""

    def __init__(self, message: str, field: Optional[str] = None,
                 value: Optional[Any] = None):
        details = {}
        if field:
            details["field"] = field
        if value is not None:
            details["value"] = str(value)

        super().__init__(message, details)
        self.field = field
        self.value = value


class APIError(ShopInsightsError):
    """Base class for remote API errors."""

    def __init__(self, message: str, status_code: Optional[int] = None,
                 response_data: Optional[Any] = None):
        """
        Initialize API error.

        Args:
            message: Error message
            status_code: HTTP status code
            response_data: API response data
        """
        details = {}
        if status_code:
            details["status_code"] = status_code
        if response_data:
            details["response_data"] = response_data

        super().__init__(message, details)
        self.status_code = status_code
        self.response_data = response_data


class ShopAPIError(APIError):
    """Raised when a commerce platform API call fails."""

    def __init__(self, message: str, endpoint: Optional[str] = None,
                 status_code: Optional[int] = None,
                 response_data: Optional[Any] = None):
        super().__init__(message, status_code, response_data)
        self.endpoint = endpoint

        if endpoint:
            self.details["endpoint"] = endpoint


class RecordMappingError(ShopInsightsError):
    """Raised when a remote record cannot be mapped onto the local schema."""

    def __init__(self, message: str, entity: Optional[str] = None,
                 external_id: Optional[str] = None):
        details = {}
        if entity:
            details["entity"] = entity
        if external_id:
            details["external_id"] = external_id

        super().__init__(message, details)
        self.entity = entity
        self.external_id = external_id


class TenantNotFoundError(ShopInsightsError):
    """Raised when a tenant id does not exist."""

    def __init__(self, tenant_id: int):
        super().__init__(f"Tenant {tenant_id} not found", {"tenant_id": tenant_id})
        self.tenant_id = tenant_id


class SchedulingError(ShopInsightsError):
    """Raised when the periodic scheduler cannot be started."""
    pass


class DatabaseError(ShopInsightsError):
    """Raised when database operations fail."""

    def __init__(self, message: str, operation: Optional[str] = None,
                 table: Optional[str] = None):
        details = {}
        if operation:
            details["operation"] = operation
        if table:
            details["table"] = table

        super().__init__(message, details=details)
        self.operation = operation
        self.table = table


def handle_api_error(response, endpoint: Optional[str] = None) -> None:
    """
    Raise ShopAPIError describing a non-success HTTP response.

    Args:
        response: httpx response object
        endpoint: API endpoint that was called

    Raises:
        ShopAPIError with a message matching the status class.
    """
    status_code = getattr(response, 'status_code', None)

    try:
        response_data = response.json()
    except ValueError:
        response_data = None

    if status_code == 401:
        message = "API authentication failed - check the access token"
    elif status_code == 403:
        message = "API access forbidden - check app scopes"
    elif status_code == 404:
        message = "API endpoint not found - check the shop URL"
    elif status_code == 429:
        message = "API rate limit exceeded"
    elif status_code is not None and status_code >= 500:
        message = f"Server error: {status_code}"
    else:
        message = f"API request failed: {status_code}"

    raise ShopAPIError(
        message,
        endpoint=endpoint,
        status_code=status_code,
        response_data=response_data,
    )
