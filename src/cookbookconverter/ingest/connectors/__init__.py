"""Connectors for fetching recipe images."""

from cookbookconverter.ingest.connectors.base import (
    ConnectorError,
    ConnectorResponse,
    ImageFetcher,
    ImageFetchError,
)
from cookbookconverter.ingest.connectors.http_connector import HttpImageConnector

__all__ = [
    "ConnectorError",
    "ConnectorResponse",
    "HttpImageConnector",
    "ImageFetchError",
    "ImageFetcher",
]
