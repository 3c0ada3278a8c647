"""Request construction for PI Web API data endpoints."""

from .uri_builder import build_query_uri, build_resource_url

__all__ = ["build_query_uri", "build_resource_url"]
