import unittest
import xml.etree.ElementTree as ET
from datetime import datetime
from unittest.mock import MagicMock, patch

import requests
from flickrapi.exceptions import FlickrError

from flickr_uploader.config import AppConfig, Album
from flickr_uploader.flickr_service import FlickrService
from flickr_uploader.photo_service import PhotoService


class TestFlickrService(unittest.TestCase):
    """Test cases for the FlickrService class."""

    def setUp(self):
        """Set up test fixtures."""
        self.config = AppConfig()
        self.config.flickr.api_key = "key"
        self.config.flickr.api_secret = "secret"
        self.config.flickr.oauth_token = "token"
        self.config.flickr.oauth_secret = "token-secret"
        self.config.flickr.username = "akrabat"
        self.config.max_retries = 2

        self.mock_flickr = MagicMock()
        self.service = FlickrService(self.config, flickr=self.mock_flickr)

    @patch('flickr_uploader.flickr_service.flickrapi.FlickrAPI')
    def test_client_built_from_stored_token(self, mock_api_class):
        service = PhotoService.get_service(self.config)

        self.assertIsInstance(service, FlickrService)
        args, kwargs = mock_api_class.call_args
        self.assertEqual(args, ("key", "secret"))
        self.assertFalse(kwargs['store_token'])
        self.assertEqual(kwargs['token'].token, "token")
        self.assertEqual(kwargs['token'].token_secret, "token-secret")

    def test_upload(self):
        self.mock_flickr.upload.return_value = ET.fromstring(
            '<rsp stat="ok"><photoid>49912345678</photoid></rsp>'
        )

        photo_id = self.service.upload("/p/IMG_1.jpg", "Sunset", "Nice", ['"new york"', '"cat"'])

        self.assertEqual(photo_id, "49912345678")
        kwargs = self.mock_flickr.upload.call_args[1]
        self.assertEqual(kwargs['filename'], "/p/IMG_1.jpg")
        self.assertEqual(kwargs['format'], 'etree')
        self.assertEqual(kwargs['title'], "Sunset")
        self.assertEqual(kwargs['description'], "Nice")
        self.assertEqual(kwargs['tags'], '"new york" "cat"')
        self.assertEqual(kwargs['is_public'], '1')
        self.assertEqual(kwargs['safety_level'], '1')

    def test_upload_without_description(self):
        self.mock_flickr.upload.return_value = ET.fromstring(
            '<rsp stat="ok"><photoid>1</photoid></rsp>'
        )
        self.service.upload("/p/IMG_1.jpg", "IMG_1", "", [])
        self.assertNotIn('description', self.mock_flickr.upload.call_args[1])

    def test_upload_errors_return_none(self):
        for error in (FlickrError("Error: 5: Filetype was not recognised"),
                      requests.ConnectionError("down"),
                      OSError("no such file")):
            self.mock_flickr.upload.side_effect = error
            self.assertIsNone(self.service.upload("/p/IMG_1.jpg", "t", "", []))

    def test_set_date_posted(self):
        date = datetime(2020, 7, 14, 19, 45, 3)

        self.assertTrue(self.service.set_date_posted("1", date))

        self.mock_flickr.photos.setDates.assert_called_once_with(
            photo_id="1", date_posted=str(int(date.timestamp()))
        )

    @patch('flickr_uploader.photo_service.time.sleep')
    def test_set_date_posted_retries_network_errors(self, mock_sleep):
        self.mock_flickr.photos.setDates.side_effect = [requests.ConnectionError("down"), {}]

        self.assertTrue(self.service.set_date_posted("1", datetime(2020, 1, 1)))
        self.assertEqual(self.mock_flickr.photos.setDates.call_count, 2)
        mock_sleep.assert_called_once_with(1)

    @patch('flickr_uploader.photo_service.time.sleep')
    def test_set_date_posted_gives_up(self, mock_sleep):
        self.mock_flickr.photos.setDates.side_effect = requests.ConnectionError("down")
        self.assertFalse(self.service.set_date_posted("1", datetime(2020, 1, 1)))
        self.assertEqual(self.mock_flickr.photos.setDates.call_count, 2)

    def test_set_date_posted_api_error_not_retried(self):
        self.mock_flickr.photos.setDates.side_effect = FlickrError("Error: 1: Photo not found")
        self.assertFalse(self.service.set_date_posted("1", datetime(2020, 1, 1)))
        self.assertEqual(self.mock_flickr.photos.setDates.call_count, 1)

    def test_add_to_album(self):
        album = Album(id="72157", name="Family")
        self.assertTrue(self.service.add_to_album("1", album))
        self.mock_flickr.photosets.addPhoto.assert_called_once_with(photoset_id="72157", photo_id="1")

    def test_add_to_album_already_in_set(self):
        self.mock_flickr.photosets.addPhoto.side_effect = FlickrError("Error: 3: Photo already in set", code=3)
        self.assertTrue(self.service.add_to_album("1", Album(id="72157", name="Family")))

    def test_add_to_album_failure(self):
        self.mock_flickr.photosets.addPhoto.side_effect = FlickrError("Error: 1: Photoset not found", code=1)
        self.assertFalse(self.service.add_to_album("1", Album(id="0", name="Gone")))

    def test_urls(self):
        self.assertEqual(self.service.photo_url("42"), "https://www.flickr.com/photos/akrabat/42")
        self.assertEqual(self.service.photostream_url(), "https://www.flickr.com/photos/akrabat")
        self.assertEqual(
            self.service.edit_url(["1", "2"]),
            "https://www.flickr.com/photos/upload/edit/?ids=1,2",
        )


if __name__ == '__main__':
    unittest.main()
