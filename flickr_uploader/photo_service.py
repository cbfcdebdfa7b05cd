"""
Remote photo service interface and factory.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Optional, Sequence, Tuple, Type
import time

from .config import AppConfig, Album
from .logging_setup import get_logger

logger = get_logger(__name__)


class PhotoService(ABC):
    """Abstract base class for photo hosting services."""

    @staticmethod
    def get_service(config: AppConfig) -> 'PhotoService':
        """
        Factory method to get the photo service for the configuration.

        Args:
            config: Application configuration

        Returns:
            An instance of a PhotoService subclass
        """
        from .flickr_service import FlickrService
        return FlickrService(config)

    def __init__(self, config: AppConfig):
        """
        Initialize the service.

        Args:
            config: Application configuration
        """
        self.config = config
        self.max_retries = max(1, config.max_retries)

    # Exceptions worth retrying; subclasses set these for their transport
    retryable_errors: Tuple[Type[BaseException], ...] = ()

    def call_with_retries(self, request_func: Callable[[], Any]) -> Any:
        """
        Call an idempotent API function, retrying on transient errors.

        Non-retryable exceptions propagate to the caller.

        Args:
            request_func: Function to call

        Returns:
            The function's return value

        Raises:
            The last transient error if every attempt failed
        """
        for attempt in range(self.max_retries):
            try:
                return request_func()
            except self.retryable_errors as e:
                logger.error(f"Error in API call (attempt {attempt + 1}): {str(e)}")
                if attempt >= self.max_retries - 1:
                    raise
                logger.info(f"Retrying in {2 ** attempt} seconds")
                time.sleep(2 ** attempt)

    @abstractmethod
    def upload(self, path: str, title: str, description: str, tags: Sequence[str]) -> Optional[str]:
        """
        Upload an image.

        Args:
            path: Path to the image file
            title: Photo title
            description: Photo description, may be empty
            tags: Tags, already formatted for the service

        Returns:
            The new photo id if successful, None otherwise
        """

    @abstractmethod
    def set_date_posted(self, photo_id: str, date: datetime) -> bool:
        """Set the date the photo appears in the photostream."""

    @abstractmethod
    def add_to_album(self, photo_id: str, album: Album) -> bool:
        """Add a photo to an album."""

    @abstractmethod
    def photo_url(self, photo_id: str) -> str:
        """Web page of a photo."""

    @abstractmethod
    def photostream_url(self) -> str:
        """Web page of the user's photostream."""

    def edit_url(self, photo_ids: Sequence[str]) -> str:
        """Web page to edit the given photos, empty if not supported."""
        return ""
