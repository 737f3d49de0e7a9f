"""Base connector interface for image sources."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class ConnectorResponse:
    """Standardized response from connector calls."""

    content: bytes
    status_code: int
    url: str
    headers: dict[str, str] = field(default_factory=dict)

    @property
    def is_success(self) -> bool:
        """Only a plain 200 counts as a usable image."""
        return self.status_code == 200


class ConnectorError(Exception):
    """Base exception for connector errors."""

    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ImageFetchError(ConnectorError):
    """Raised when an image cannot be downloaded."""

    def __init__(self, message: str, url: str, status_code: int | None = None):
        super().__init__(message, status_code=status_code)
        self.url = url


class ImageFetcher(ABC):
    """Abstract base class for anything that can download an image by URL."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return connector name for logging and identification."""
        pass

    @abstractmethod
    async def fetch(self, url: str) -> ConnectorResponse:
        """
        Download a single image.

        Args:
            url: Absolute image URL.

        Returns:
            ConnectorResponse with the raw body, whatever the status code.

        Raises:
            ImageFetchError: On transport failures.
        """
        pass
