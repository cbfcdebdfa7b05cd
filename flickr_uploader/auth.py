"""
Flickr OAuth authorisation.
"""

from typing import Callable

import flickrapi

from .config import AppConfig, ConfigError, save_config
from .logging_setup import get_logger

logger = get_logger(__name__)


class AuthManager:
    """
    Runs the out-of-band OAuth flow and stores the access token in the configuration.
    """

    def __init__(self, config: AppConfig, config_path: str, input_func: Callable[[str], str] = input):
        """
        Initialize the auth manager.

        Args:
            config: Application configuration holding the API key and secret
            config_path: Where to save the configuration afterwards
            input_func: Reads the verifier code from the user
        """
        if not config.flickr.api_key or not config.flickr.api_secret:
            raise ConfigError("flickr.api_key and flickr.api_secret need to be configured")
        self.config = config
        self.config_path = config_path
        self.input_func = input_func

    def _client(self) -> flickrapi.FlickrAPI:
        return flickrapi.FlickrAPI(
            self.config.flickr.api_key,
            self.config.flickr.api_secret,
            store_token=False,
        )

    def authenticate(self) -> AppConfig:
        """
        Ask the user to authorise the application and save the resulting token.

        Returns:
            The updated configuration
        """
        flickr = self._client()
        flickr.get_request_token(oauth_callback='oob')
        authorize_url = flickr.auth_url(perms='write')

        print("Open this URL in your browser and authorise the application:")
        print(authorize_url)
        verifier = self.input_func("Verifier code: ").strip()
        if not verifier:
            raise ConfigError("No verifier code entered")

        flickr.get_access_token(verifier)
        token = flickr.token_cache.token

        self.config.flickr.oauth_token = token.token
        self.config.flickr.oauth_secret = token.token_secret
        self.config.flickr.username = token.username
        self.config.flickr.user_nsid = token.user_nsid

        save_config(self.config, self.config_path)
        logger.info(f"Authenticated as {token.username}. Configuration saved to {self.config_path}")
        return self.config
