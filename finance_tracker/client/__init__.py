"""Request facade for the presentation layer."""

from finance_tracker.client.api_client import (
    ApiRequestError,
    FinanceApiClient,
    create_api_client,
    detect_native_bridge,
)

__all__ = [
    "ApiRequestError",
    "FinanceApiClient",
    "create_api_client",
    "detect_native_bridge",
]
