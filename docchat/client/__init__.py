"""HTTP client for the gateway routes, shared by the UI and tests."""

from docchat.client.api_client import ApiClient

__all__ = ["ApiClient"]
