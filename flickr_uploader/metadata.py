"""
Reading and editing embedded image metadata.
"""

import json
import os
import subprocess
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from .config import AppConfig
from .keywords import unique
from .logging_setup import get_logger

logger = get_logger(__name__)

EXIF_DATE_FORMAT = '%Y:%m:%d %H:%M:%S'


@dataclass(frozen=True)
class ImageInfo:
    """Metadata of one image, as read from the file."""
    title: str = ""
    description: str = ""
    keywords: Tuple[str, ...] = ()
    date: Optional[datetime] = None


class MetadataExtractor(ABC):
    """Interface to a tool that reads and edits embedded image metadata."""

    @abstractmethod
    def extract_metadata(self, path: str) -> Optional[ImageInfo]:
        """
        Read title, description, keywords and capture date from an image.

        Args:
            path: Path to the image

        Returns:
            ImageInfo if successful, None otherwise
        """

    @abstractmethod
    def strip_keywords(self, path: str, keywords: Sequence[str]) -> bool:
        """
        Remove keywords from the image file in place.

        Args:
            path: Path to the image
            keywords: Keywords to remove

        Returns:
            True if successful, False otherwise
        """


class ExifToolExtractor(MetadataExtractor):
    """Metadata access through the exiftool command."""

    READ_TAGS = [
        '-Title', '-ObjectName',
        '-Description', '-Caption-Abstract', '-ImageDescription',
        '-Keywords', '-Subject',
        '-DateTimeOriginal', '-CreateDate',
    ]

    def __init__(self, config: AppConfig):
        """
        Initialize the exiftool wrapper.

        Args:
            config: Application configuration
        """
        self.exiftool = config.cmd.exiftool
        self.timeout = config.tool_timeout
        self.default_flags = ['-overwrite_original']

    def _run(self, args: List[str], cwd: Optional[str] = None) -> Optional[subprocess.CompletedProcess]:
        cmd = [self.exiftool] + args
        logger.debug(f"Running: {' '.join(cmd)}")
        try:
            return subprocess.run(
                cmd, capture_output=True, text=True, cwd=cwd, timeout=self.timeout
            )
        except subprocess.TimeoutExpired:
            logger.error(f"exiftool timed out after {self.timeout} seconds")
        except OSError as e:
            logger.error(f"Unable to run exiftool ({self.exiftool}): {e}")
        return None

    def extract_metadata(self, path: str) -> Optional[ImageInfo]:
        result = self._run(['-j', '-d', EXIF_DATE_FORMAT] + self.READ_TAGS + [path])
        if result is None:
            return None

        if result.returncode != 0:
            logger.error(f"Error reading metadata from {path}: {result.stderr.strip()}")
            return None

        try:
            # Keep numeric-looking values as exiftool printed them
            data = json.loads(result.stdout, parse_float=str, parse_int=str)
        except json.JSONDecodeError as e:
            logger.error(f"Error parsing metadata for {path}: {e}")
            return None

        if not data:
            logger.error(f"No metadata returned for {path}")
            return None

        return self.parse_metadata(data[0])

    @staticmethod
    def parse_metadata(metadata: Dict[str, Any]) -> ImageInfo:
        """
        Convert one exiftool JSON record into an ImageInfo.

        Args:
            metadata: Dictionary of tag name to value

        Returns:
            ImageInfo
        """
        def first_text(*tags):
            for tag in tags:
                value = metadata.get(tag)
                if value not in (None, ""):
                    return str(value).strip()
            return ""

        keywords = []
        for tag in ('Keywords', 'Subject'):
            value = metadata.get(tag)
            if value is None:
                continue
            if not isinstance(value, list):
                value = [value]
            keywords.extend(str(v) for v in value if str(v) != "")

        date = None
        date_str = first_text('DateTimeOriginal', 'CreateDate')
        if date_str:
            try:
                date = datetime.strptime(date_str, EXIF_DATE_FORMAT)
            except ValueError:
                logger.debug(f"Ignoring unparseable date: {date_str}")

        return ImageInfo(
            title=first_text('Title', 'ObjectName'),
            description=first_text('Description', 'Caption-Abstract', 'ImageDescription'),
            keywords=tuple(unique(keywords)),
            date=date,
        )

    def strip_keywords(self, path: str, keywords: Sequence[str]) -> bool:
        # exiftool -overwrite_original -keywords-=one -subject-=one FILENAME
        args = list(self.default_flags)
        for keyword in unique(keywords):
            args.append(f'-keywords-={keyword}')
            args.append(f'-subject-={keyword}')
        args.append(os.path.basename(path))

        result = self._run(args, cwd=os.path.dirname(os.path.abspath(path)))
        if result is None:
            return False

        if result.returncode != 0:
            logger.error(f"Error removing keywords from {path}: {result.stderr.strip()}")
            return False

        return True
