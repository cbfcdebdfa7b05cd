"""
Logging configuration for the Flickr uploader.
"""

import logging
import os
import sys
from .config import AppConfig


def setup_logging(config: AppConfig) -> None:
    """
    Configure logging based on settings.

    Args:
        config: Application configuration
    """
    log_level = getattr(logging, config.log_level.upper(), logging.INFO)
    if config.debug_mode:
        log_level = logging.DEBUG
    log_format = '%(asctime)s - %(levelname)s - %(message)s'

    log_file = config.log_file

    if log_file:
        log_dir = os.path.dirname(log_file)
        if log_dir and not os.path.exists(log_dir):
            os.makedirs(log_dir, exist_ok=True)

        logging.basicConfig(
            filename=log_file,
            level=log_level,
            format=log_format
        )

        # Operator output still goes to the console
        console = logging.StreamHandler(sys.stdout)
        console.setLevel(log_level)
        console.setFormatter(logging.Formatter('%(message)s'))
        logging.getLogger('').addHandler(console)
    else:
        logging.basicConfig(
            level=log_level,
            format=log_format
        )

    # Set level for third-party loggers to reduce noise
    for name in ('urllib3', 'requests', 'flickrapi', 'requests_oauthlib', 'oauthlib'):
        logging.getLogger(name).setLevel(logging.WARNING)

    if config.debug_mode:
        logging.debug("Debug mode enabled")
        logging.debug(f"Python version: {sys.version}")
        logging.debug(f"Platform: {sys.platform}")
        logging.debug(f"Configuration summary:")
        logging.debug(f"  Config directory: {config.config_dir}")
        logging.debug(f"  exiftool: {config.cmd.exiftool}")
        logging.debug(f"  Rules: {len(config.rules)}")
        logging.debug(f"  Ledger in image directory: {config.upload.store_upload_list_in_image_dir}")
        logging.debug(f"  Set date posted: {config.upload.set_date_posted}")


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger with the specified name.

    Args:
        name: Name for the logger

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
