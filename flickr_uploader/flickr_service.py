"""
Flickr implementation of the photo service.
"""

from datetime import datetime
from typing import Optional, Sequence

import flickrapi
import requests
from flickrapi.auth import FlickrAccessToken
from flickrapi.exceptions import FlickrError

from .config import AppConfig, Album
from .photo_service import PhotoService
from .logging_setup import get_logger

logger = get_logger(__name__)

FLICKR_PHOTOS_URL = "https://www.flickr.com/photos"

# Flickr error returned by photosets.addPhoto when the photo is already in the set
PHOTO_ALREADY_IN_SET = 3


class FlickrService(PhotoService):
    """Flickr API implementation of the photo service."""

    retryable_errors = (requests.ConnectionError, requests.Timeout)

    # Uploads are visible to everyone, as a photo, not hidden from search, safe
    UPLOAD_DEFAULTS = {
        'is_public': '1',
        'is_friend': '1',
        'is_family': '1',
        'content_type': '1',
        'hidden': '1',
        'safety_level': '1',
    }

    def __init__(self, config: AppConfig, flickr: Optional[flickrapi.FlickrAPI] = None):
        """
        Initialize the Flickr service.

        Args:
            config: Application configuration
            flickr: Pre-built API client; by default one is created from the stored token
        """
        super().__init__(config)
        self.username = config.flickr.username or config.flickr.user_nsid

        if flickr is None:
            token = FlickrAccessToken(
                config.flickr.oauth_token,
                config.flickr.oauth_secret,
                'write',
                username=config.flickr.username,
                user_nsid=config.flickr.user_nsid,
            )
            flickr = flickrapi.FlickrAPI(
                config.flickr.api_key,
                config.flickr.api_secret,
                token=token,
                store_token=False,
                format='parsed-json',
            )
        self.flickr = flickr

    def upload(self, path: str, title: str, description: str, tags: Sequence[str]) -> Optional[str]:
        params = dict(self.UPLOAD_DEFAULTS)
        params['title'] = title
        params['tags'] = ' '.join(tags)
        if description:
            params['description'] = description

        try:
            # The upload endpoint only answers in XML
            response = self.flickr.upload(filename=path, format='etree', **params)
        except FlickrError as e:
            logger.error(f"Flickr rejected the upload of {path}: {str(e)}")
            return None
        except requests.RequestException as e:
            logger.error(f"Flickr upload network error: {str(e)}")
            return None
        except OSError as e:
            logger.error(f"Unable to read {path}: {str(e)}")
            return None

        photo_id = response.findtext('photoid')
        if not photo_id:
            logger.error(f"Flickr upload of {path} returned no photo id")
            return None
        return photo_id.strip()

    def set_date_posted(self, photo_id: str, date: datetime) -> bool:
        date_posted = str(int(date.timestamp()))
        try:
            self.call_with_retries(
                lambda: self.flickr.photos.setDates(photo_id=photo_id, date_posted=date_posted)
            )
            return True
        except (FlickrError, requests.RequestException) as e:
            logger.error(f"Failed to update photo {photo_id}'s date posted: {str(e)}")
            return False

    def add_to_album(self, photo_id: str, album: Album) -> bool:
        try:
            self.call_with_retries(
                lambda: self.flickr.photosets.addPhoto(photoset_id=album.id, photo_id=photo_id)
            )
            return True
        except FlickrError as e:
            if str(getattr(e, 'code', '')) == str(PHOTO_ALREADY_IN_SET):
                logger.debug(f"Photo {photo_id} is already in set {album}")
                return True
            logger.error(f"Failed adding photo to the set {album}: {str(e)}")
            return False
        except requests.RequestException as e:
            logger.error(f"Failed adding photo to the set {album}: {str(e)}")
            return False

    def photo_url(self, photo_id: str) -> str:
        return f"{FLICKR_PHOTOS_URL}/{self.username}/{photo_id}"

    def photostream_url(self) -> str:
        return f"{FLICKR_PHOTOS_URL}/{self.username}"

    def edit_url(self, photo_ids: Sequence[str]) -> str:
        return f"{FLICKR_PHOTOS_URL}/upload/edit/?ids={','.join(photo_ids)}"
