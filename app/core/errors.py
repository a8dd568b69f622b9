from typing import Any, Dict, Optional

from fastapi import HTTPException, status


class APIError(HTTPException):
    def __init__(self, status_code: int, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(status_code=status_code, detail=message)
        self.details = details


class NotFoundError(APIError):
    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__(status.HTTP_404_NOT_FOUND, message, details)


class ConfigurationError(APIError):
    """Missing credentials; raised before any external call is made."""

    def __init__(self, message: str):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


class GenerationInProgressError(APIError):
    def __init__(self, trip_id: str):
        super().__init__(
            status.HTTP_409_CONFLICT,
            "Itinerary generation already in progress for this trip.",
            {"tripId": trip_id},
        )


class UpstreamRateLimitedError(APIError):
    def __init__(self):
        super().__init__(status.HTTP_429_TOO_MANY_REQUESTS, "Rate limited. Please try again in a moment.")


class UpstreamUsageLimitError(APIError):
    def __init__(self):
        super().__init__(status.HTTP_402_PAYMENT_REQUIRED, "AI usage limit reached. Please add credits.")


class UpstreamError(APIError):
    def __init__(self, message: str = "AI gateway error"):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, message)


class InvalidResponseFormatError(APIError):
    def __init__(self, details: Optional[Dict[str, Any]] = None):
        super().__init__(status.HTTP_500_INTERNAL_SERVER_ERROR, "Invalid AI response format", details)


def error_content(message: str, details: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
    content: Dict[str, Any] = {"error": message}
    if details:
        content["details"] = details
    return content
