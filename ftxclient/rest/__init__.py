"""REST API client."""

from .client import RESTClient, encode_body

__all__ = ["RESTClient", "encode_body"]
