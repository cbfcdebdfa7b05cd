"""
Upload a single image: dedup check, metadata, rules, upload and follow-up edits.
"""

import os
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, List, Optional

from .config import AppConfig
from .ledger import UploadLedger, LedgerError, LedgerWriteError
from .metadata import ImageInfo, MetadataExtractor
from .photo_service import PhotoService
from .rules import RuleResult, evaluate_rules
from .logging_setup import get_logger

logger = get_logger(__name__)


class UploadOutcome(Enum):
    """How processing of a file ended."""
    SUCCESS = "success"
    FORCED = "forced"
    ALREADY_UPLOADED = "already_uploaded"
    METADATA_ERROR = "metadata_error"
    LEDGER_ERROR = "ledger_error"
    DRY_RUN = "dry_run"
    UPLOAD_ERROR = "upload_error"


@dataclass
class UploadResult:
    """Result of processing one file."""
    filename: str
    outcome: UploadOutcome
    photo_id: str = ""
    rule_result: Optional[RuleResult] = None
    errors: List[str] = field(default_factory=list)

    @property
    def uploaded(self) -> bool:
        return self.outcome in (UploadOutcome.SUCCESS, UploadOutcome.FORCED)


def build_title(info: ImageInfo, path: str) -> str:
    """Title for the photo: the embedded title, else the filename without extension."""
    title = info.title.strip()
    if not title:
        title = os.path.splitext(os.path.basename(path))[0]
    return title


def format_tags(keywords: List[str]) -> List[str]:
    """Quote each keyword so Flickr keeps multi-word keywords as one tag."""
    tags = []
    for keyword in keywords:
        # Flickr has no escape for a quote inside a quoted tag
        keyword = keyword.replace('"', '').strip()
        if keyword:
            tags.append(f'"{keyword}"')
    return tags


class Uploader:
    """Runs the upload pipeline for one file at a time."""

    def __init__(
        self,
        config: AppConfig,
        extractor: MetadataExtractor,
        service: PhotoService,
        ledger_factory: Optional[Callable[[str], UploadLedger]] = None,
    ):
        """
        Initialize the uploader.

        Args:
            config: Application configuration, including the force and dry-run flags
            extractor: Metadata reader/editor
            service: Remote photo service
            ledger_factory: Returns the ledger for an image path; defaults to
                UploadLedger.for_image with this configuration
        """
        self.config = config
        self.extractor = extractor
        self.service = service
        self.ledger_factory = ledger_factory or self._ledger_for_image

    def _ledger_for_image(self, path: str) -> UploadLedger:
        return UploadLedger.for_image(path, self.config)

    def upload_file(self, path: str) -> UploadResult:
        """
        Process a single image file.

        Args:
            path: Path to the image

        Returns:
            UploadResult; ``photo_id`` is empty unless the image was uploaded
        """
        logger.info(f"Processing {path}")
        forced = False

        # 1) Has this image been uploaded before?
        try:
            ledger = self.ledger_factory(path)
        except LedgerError as e:
            logger.error(str(e))
            return UploadResult(path, UploadOutcome.LEDGER_ERROR, errors=[str(e)])

        uploaded_photo_id = ledger.lookup(path)
        if uploaded_photo_id:
            if not self.config.force:
                logger.info("This image has already been uploaded to Flickr.")
                logger.info(f"View this photo: {self.service.photo_url(uploaded_photo_id)}")
                return UploadResult(path, UploadOutcome.ALREADY_UPLOADED)
            logger.info("This image has already been uploaded to Flickr. Forcing upload.")
            forced = True

        # 2) Read embedded metadata
        info = self.extractor.extract_metadata(path)
        if info is None:
            logger.error(f"Unable to read metadata from {path}, skipping")
            return UploadResult(path, UploadOutcome.METADATA_ERROR)

        # 3) Apply rules
        rule_result = evaluate_rules(info.keywords, self.config.rules)
        result = UploadResult(path, UploadOutcome.SUCCESS, rule_result=rule_result)

        if rule_result.has_actions:
            logger.info("Actions:")
            for line in rule_result.describe():
                logger.info(line)

        # 4) Stop before changing anything
        if self.config.dry_run:
            logger.info("Would upload photo to Flickr")
            result.outcome = UploadOutcome.DRY_RUN
            return result

        # 5) Remove stripped keywords from the file itself
        if rule_result.keywords_to_remove:
            if not self.extractor.strip_keywords(path, rule_result.keywords_to_remove):
                message = f"Failed to remove keywords from {path}"
                logger.error(message)
                result.errors.append(message)

        # 6) Upload
        logger.info("Uploading photo to Flickr")
        title = build_title(info, path)
        photo_id = self.service.upload(
            path, title, info.description, format_tags(rule_result.keywords_to_add)
        )
        if not photo_id:
            logger.error(f"Upload of {path} failed")
            result.outcome = UploadOutcome.UPLOAD_ERROR
            return result

        result.photo_id = photo_id
        if forced:
            result.outcome = UploadOutcome.FORCED
        logger.info(f"Uploaded photo '{title}'")

        # 7) Remember the upload
        try:
            ledger.record_if_absent(path, photo_id)
        except LedgerWriteError as e:
            message = f"Photo {photo_id} was uploaded but not recorded: {e}"
            logger.error(message)
            result.errors.append(message)

        # 8) Follow-up edits, each one best effort
        self._post_upload(result, info)

        logger.info(f"View this photo: {self.service.photo_url(photo_id)}")
        return result

    def _post_upload(self, result: UploadResult, info: ImageInfo) -> None:
        photo_id = result.photo_id

        # Put the photo at its capture date in the photostream
        if self.config.upload.set_date_posted and info.date is not None:
            if not self.service.set_date_posted(photo_id, info.date):
                result.errors.append(f"Failed to set date posted for photo {photo_id}")

        for album in result.rule_result.albums_to_add:
            if self.service.add_to_album(photo_id, album):
                logger.info(f"Added photo {photo_id} to set {album}")
            else:
                result.errors.append(f"Failed adding photo {photo_id} to the set {album}")
