"""
Sequential upload of a list of files.
"""

import time
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .config import AppConfig
from .metadata import ExifToolExtractor, MetadataExtractor
from .photo_service import PhotoService
from .uploader import Uploader, UploadOutcome, UploadResult
from .logging_setup import get_logger

logger = get_logger(__name__)


@dataclass
class UploadStats:
    """Class to track upload statistics."""
    total_files: int = 0
    uploaded: int = 0
    already_uploaded: int = 0
    dry_run: int = 0
    failed: int = 0
    metadata_errors: int = 0
    upload_errors: int = 0
    warnings: int = 0
    photo_ids: List[str] = field(default_factory=list)
    start_time: float = 0
    total_time: float = 0

    def to_dict(self) -> Dict[str, Any]:
        """Convert stats to dictionary."""
        result = {k: v for k, v in self.__dict__.items()}
        result['photo_ids'] = list(self.photo_ids)
        return result


class BatchUploader:
    """Uploads files one at a time, in the order given."""

    def __init__(
        self,
        config: AppConfig,
        extractor: Optional[MetadataExtractor] = None,
        service: Optional[PhotoService] = None,
    ):
        """
        Initialize the batch uploader.

        Args:
            config: Application configuration
            extractor: Metadata tool; exiftool by default
            service: Photo service; built from the configuration by default
        """
        self.config = config
        self.extractor = extractor or ExifToolExtractor(config)
        self.service = service or PhotoService.get_service(config)
        self.uploader = Uploader(config, self.extractor, self.service)
        self.stats = UploadStats()

    def _record(self, result: UploadResult) -> None:
        stats = self.stats
        if result.uploaded:
            stats.uploaded += 1
            stats.photo_ids.append(result.photo_id)
        elif result.outcome == UploadOutcome.ALREADY_UPLOADED:
            stats.already_uploaded += 1
        elif result.outcome == UploadOutcome.DRY_RUN:
            stats.dry_run += 1
        else:
            stats.failed += 1
            if result.outcome == UploadOutcome.METADATA_ERROR:
                stats.metadata_errors += 1
            elif result.outcome == UploadOutcome.UPLOAD_ERROR:
                stats.upload_errors += 1
        stats.warnings += len(result.errors)

    def run(self, files: List[str]) -> Dict[str, Any]:
        """
        Upload every file.

        Args:
            files: Image paths, processed in order

        Returns:
            Dictionary with upload statistics
        """
        self.stats = UploadStats(total_files=len(files))
        self.stats.start_time = time.time()

        for path in files:
            try:
                result = self.uploader.upload_file(path)
            except Exception as e:
                logger.error(f"Error processing {path}: {str(e)}")
                if self.config.debug_mode:
                    import traceback
                    logger.error(f"Traceback: {traceback.format_exc()}")
                self.stats.failed += 1
                continue
            self._record(result)

        self.stats.total_time = time.time() - self.stats.start_time
        self._log_summary()
        return self.stats.to_dict()

    def _log_summary(self) -> None:
        """Log what happened and where to find the uploaded photos."""
        stats = self.stats
        logger.info("All Done")
        logger.info(
            f"Uploaded: {stats.uploaded}, already uploaded: {stats.already_uploaded}, "
            f"dry run: {stats.dry_run}, failed: {stats.failed} "
            f"({stats.total_time:.1f}s)"
        )
        if stats.warnings:
            logger.warning(f"{stats.warnings} follow-up step(s) reported errors, see above")
        logger.info(f"View: {self.service.photostream_url()}")

        if stats.photo_ids:
            edit_url = self.service.edit_url(stats.photo_ids)
            if edit_url:
                logger.info(f"Edit: {edit_url}")
