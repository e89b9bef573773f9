from fastapi import status


class BaseAppException(Exception):
    """Base class for all app-specific exceptions."""
    def __init__(
        self,
        message: str,
        status_code: int = status.HTTP_400_BAD_REQUEST,
        details: dict = None,
    ):
        self.message = message
        self.status_code = status_code
        self.details = details or {}
        super().__init__(message)

class BusinessValidationException(BaseAppException):
    """Invalid input or business rule violation."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status.HTTP_422_UNPROCESSABLE_ENTITY, details)

class ConfigurationException(BaseAppException):
    """Required configuration is missing or malformed."""
    def __init__(self, message: str, details: dict = None):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR, details)

class UpstreamRequestException(BaseAppException):
    """Non-success response from the Google Ads API (through the Connect proxy)."""
    def __init__(
        self,
        message: str = "Google Ads API request failed",
        upstream_status: int = None,
        body=None,
        details: dict = None,
    ):
        super().__init__(message, status.HTTP_502_BAD_GATEWAY, details)
        self.upstream_status = upstream_status
        self.body = body

class UpstreamAuthException(UpstreamRequestException):
    """Upstream rejected our credentials (401/403) or the token refresh failed."""

class BatchJobCreationException(BaseAppException):
    """Batch job creation returned no resource name."""
    def __init__(self, message: str = "Failed to create batch job", details: dict = None):
        super().__init__(message, status.HTTP_502_BAD_GATEWAY, details)

class CurrencyResolutionException(BaseAppException):
    """Account currency could not be determined."""
    def __init__(self, message: str = "Failed to resolve account currency", details: dict = None):
        super().__init__(message, status.HTTP_502_BAD_GATEWAY, details)

class ExchangeRateException(BaseAppException):
    """Exchange rate lookup failed or lacked the target currency."""
    def __init__(self, message: str = "Failed to fetch exchange rate", details: dict = None):
        super().__init__(message, status.HTTP_502_BAD_GATEWAY, details)

class InternalServerException(BaseAppException):
    """Unexpected error in backend logic."""
    def __init__(self, message: str = "Internal server error"):
        super().__init__(message, status.HTTP_500_INTERNAL_SERVER_ERROR)
