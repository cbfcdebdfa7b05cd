"""
Command-line interface for the Flickr uploader.
"""

import sys
import argparse
from typing import List, Optional

from .config import AppConfig, ConfigError, default_config_path, load_config, validate_for_upload
from .logging_setup import setup_logging, get_logger
from .batch_processor import BatchUploader
from .auth import AuthManager

logger = get_logger(__name__)

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_CONFIG_ERROR = 2


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parse command-line arguments.

    Returns:
        Parsed arguments namespace
    """
    parser = argparse.ArgumentParser(
        description="Upload images to Flickr"
    )

    parser.add_argument(
        "--config",
        default=default_config_path(),
        help="Path to configuration JSON file (default: %(default)s)"
    )

    parser.add_argument(
        "--debug",
        action="store_true",
        help="Enable debug mode regardless of config setting"
    )

    subparsers = parser.add_subparsers(dest="command")
    subparsers.required = True

    upload = subparsers.add_parser(
        "upload",
        help="Upload images to Flickr",
        description=(
            "Upload images to Flickr. Sets the date posted to the capture time, "
            "sets tags from the image keywords and applies the configured rules."
        ),
    )
    upload.add_argument("files", nargs="*", help="Image files to upload")
    upload.add_argument(
        "-f", "--force",
        action="store_true",
        help="Force upload of file even if already uploaded"
    )
    upload.add_argument(
        "-n", "--dry-run",
        action="store_true",
        help="Show what would have been uploaded"
    )

    subparsers.add_parser(
        "authenticate",
        help="Authorise this application with Flickr"
    )

    return parser.parse_args(argv)


def process_arguments(args: argparse.Namespace, config: AppConfig) -> AppConfig:
    """
    Process command-line arguments and override config values.

    Args:
        args: Parsed arguments
        config: Loaded configuration

    Returns:
        Updated configuration
    """
    if args.debug:
        config.debug_mode = True
    if getattr(args, 'force', False):
        config.force = True
    if getattr(args, 'dry_run', False):
        config.dry_run = True

    return config


def run_upload(args: argparse.Namespace, config: AppConfig) -> int:
    if not args.files:
        logger.error("Error: At least one file must be specified.")
        return EXIT_CONFIG_ERROR

    validate_for_upload(config)

    # Per-file failures are logged and reported in the summary
    uploader = BatchUploader(config)
    uploader.run(args.files)
    return EXIT_OK


def run_cli(argv: Optional[List[str]] = None) -> int:
    """
    Run the command-line interface.

    Returns:
        Exit code (0 for success, 2 for configuration errors, 1 for other failures)
    """
    args = parse_arguments(argv)
    config = None

    try:
        config = load_config(args.config)
        config = process_arguments(args, config)
        setup_logging(config)

        if args.command == "authenticate":
            AuthManager(config, args.config).authenticate()
            return EXIT_OK

        return run_upload(args, config)

    except ConfigError as e:
        if config is None:
            # Logging is not configured yet
            print(f"Error: {e}", file=sys.stderr)
        else:
            logger.error(f"Error: {e}")
        logger.debug(f"Config file: {args.config}")
        return EXIT_CONFIG_ERROR
    except Exception as e:
        logger.error(f"Script execution failed: {str(e)}")
        if config is not None and config.debug_mode:
            import traceback
            logger.error(f"Traceback: {traceback.format_exc()}")
        return EXIT_FAILURE
