"""
Record of uploaded files, used to avoid uploading the same image twice.
"""

import json
import os
import tempfile
from typing import Dict, Optional

from .config import AppConfig
from .logging_setup import get_logger

logger = get_logger(__name__)

LEDGER_BASENAME = "flickr-uploader-uploaded-files.json"


class LedgerError(Exception):
    """Base class for ledger failures."""


class LedgerParseError(LedgerError):
    """The ledger file exists but does not hold a filename to photo id mapping."""


class LedgerWriteError(LedgerError):
    """The ledger file could not be written."""


def ledger_path(image_path: str, store_in_image_dir: bool, config_dir: str) -> str:
    """
    Location of the ledger that covers ``image_path``.

    Args:
        image_path: Path of the image being uploaded
        store_in_image_dir: Keep a hidden ledger next to the image instead of a central one
        config_dir: Directory holding the central ledger

    Returns:
        Path to the ledger file
    """
    if store_in_image_dir:
        directory = os.path.dirname(os.path.abspath(image_path))
        return os.path.join(directory, "." + LEDGER_BASENAME)
    return os.path.join(config_dir, LEDGER_BASENAME)


class UploadLedger:
    """
    Mapping of image base filename to Flickr photo id, backed by a JSON file.

    Entries are never overwritten: the first recorded photo id for a filename wins.
    """

    def __init__(self, path: str, fail_on_corrupt: bool = False):
        """
        Initialize the ledger and read the current file contents.

        Args:
            path: Path to the ledger JSON file
            fail_on_corrupt: Raise LedgerParseError instead of starting empty
                when the file cannot be parsed
        """
        self.path = path
        self.fail_on_corrupt = fail_on_corrupt
        self._entries = self._load()

    @classmethod
    def for_image(cls, image_path: str, config: AppConfig) -> 'UploadLedger':
        """Open the ledger responsible for ``image_path``."""
        path = ledger_path(
            image_path,
            config.upload.store_upload_list_in_image_dir,
            config.config_dir,
        )
        return cls(path, fail_on_corrupt=config.upload.fail_on_corrupt_ledger)

    def _load(self) -> Dict[str, str]:
        if not os.path.exists(self.path):
            return {}

        try:
            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            if not isinstance(data, dict) or not all(
                isinstance(k, str) and isinstance(v, str) for k, v in data.items()
            ):
                raise ValueError("expected a JSON object of filename to photo id")
            return data
        except (OSError, ValueError) as e:
            # json.JSONDecodeError is a ValueError
            if self.fail_on_corrupt:
                raise LedgerParseError(f"Unable to read upload ledger {self.path}: {e}")
            logger.error(f"Unable to read upload ledger {self.path}, starting empty: {e}")
            return {}

    def lookup(self, filename: str) -> Optional[str]:
        """
        Photo id recorded for ``filename``.

        Args:
            filename: Image filename; only its base name is used

        Returns:
            The recorded photo id, or None if the file has not been uploaded
        """
        return self._entries.get(os.path.basename(filename))

    def record_if_absent(self, filename: str, photo_id: str) -> bool:
        """
        Record an upload and persist the ledger.

        Args:
            filename: Image filename; only its base name is used
            photo_id: Flickr photo id

        Returns:
            True if the entry was added, False if the filename was already recorded

        Raises:
            LedgerWriteError: If the ledger could not be saved
        """
        key = os.path.basename(filename)
        if key in self._entries:
            return False

        self._entries[key] = photo_id
        self.flush()
        return True

    def flush(self) -> None:
        """
        Write the whole ledger to disk.

        The file is written to a temporary file in the same directory and then
        renamed over the ledger so that a crash never leaves a truncated file.

        Raises:
            LedgerWriteError: If the ledger could not be saved
        """
        directory = os.path.dirname(self.path) or "."
        tmp_path = None
        try:
            os.makedirs(directory, exist_ok=True)
            fd, tmp_path = tempfile.mkstemp(
                prefix=".tmp-", suffix=".json", dir=directory
            )
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(self._entries, f, indent=2, ensure_ascii=False)
            os.chmod(tmp_path, 0o664)
            os.replace(tmp_path, self.path)
            tmp_path = None
        except OSError as e:
            raise LedgerWriteError(
                f"Unable to write {os.path.basename(self.path)}: {e}"
            )
        finally:
            if tmp_path and os.path.exists(tmp_path):
                os.remove(tmp_path)

    def entries(self) -> Dict[str, str]:
        """Copy of all recorded entries."""
        return dict(self._entries)

    def __contains__(self, filename: str) -> bool:
        return self.lookup(filename) is not None

    def __len__(self) -> int:
        return len(self._entries)
