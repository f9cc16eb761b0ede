"""
Photo Editor Service

Upload and crop flow for the photo on one recipe form:

    idle -> uploading -> cropping -> idle (save or cancel)
    uploading -> idle on any failure

Each transition is driven by one request. Failures never escape as
exceptions: they come back as a Notification and the previously set
photo is left in place.
"""

import logging
from collections import namedtuple
from datetime import timedelta

from constants import CROP_ASPECT, MAX_IMAGE_DIMENSION, JPEG_QUALITY, UPLOAD_TIMEOUT_SECONDS
from models import db, PhotoDraft
from models.base import utcnow, as_utc
from models.photo_draft import STATE_IDLE, STATE_UPLOADING, STATE_CROPPING
from utils.image_handler import (
    ImageValidationError, CropRegion, process_upload, process_crop,
)

logger = logging.getLogger(__name__)


class Notification(namedtuple('Notification', 'title description status')):
    """User-facing message; status is 'success', 'info', 'warning' or 'error'."""

    __slots__ = ()

    @property
    def category(self):
        """Flash category used by the templates."""
        return 'danger' if self.status == 'error' else self.status


UPLOAD_BUSY = Notification(
    'Upload in progress', 'Please wait until the current photo has been processed.', 'warning')
NO_PHOTO = Notification('No photo', 'Upload a photo before cropping.', 'warning')
NOT_CROPPING = Notification('Nothing to crop', 'Start cropping the photo first.', 'warning')


class PhotoEditor:
    """
    Drives the editor state stored on a PhotoDraft.

    Args:
        draft: PhotoDraft of the form being edited
        max_dimension: Bound for the longer side of stored photos
        quality: JPEG quality of stored photos
        upload_timeout: Seconds after which an unfinished upload no longer
            holds the busy flag
    """

    def __init__(self, draft, max_dimension=MAX_IMAGE_DIMENSION, quality=JPEG_QUALITY,
                 upload_timeout=UPLOAD_TIMEOUT_SECONDS):
        self.draft = draft
        self.max_dimension = max_dimension
        self.quality = quality
        self.upload_timeout = timedelta(seconds=upload_timeout)

    @property
    def state(self):
        """
        Editor state. An upload whose request died before finishing would
        leave the draft 'uploading' for good; past the timeout it reads as idle.
        """
        if self.draft.state == STATE_UPLOADING and self._upload_abandoned():
            return STATE_IDLE
        return self.draft.state

    def _upload_abandoned(self):
        started = as_utc(self.draft.updated_at)
        return started is None or utcnow() - started > self.upload_timeout

    @property
    def photo_url(self):
        return self.draft.photo_url

    @property
    def is_busy(self):
        return self.state == STATE_UPLOADING

    @property
    def crop_region(self):
        """Current selector position, or the default one."""
        draft = self.draft
        if None in (draft.crop_x, draft.crop_y, draft.crop_width, draft.crop_height):
            return CropRegion.default()
        return CropRegion(draft.crop_x, draft.crop_y, draft.crop_width, draft.crop_height, '%')

    def _reset_crop(self):
        default = CropRegion.default()
        self.draft.crop_x = default.x
        self.draft.crop_y = default.y
        self.draft.crop_width = default.width
        self.draft.crop_height = default.height

    def _set_state(self, state):
        self.draft.state = state
        self.draft.updated_at = utcnow()
        db.session.commit()

    def upload(self, upload):
        """
        Process a newly selected photo and open the crop selector on it.

        Args:
            upload: UploadedImage

        Returns:
            Notification
        """
        if self.is_busy:
            return UPLOAD_BUSY

        # Committed first so a concurrent request for this draft sees the busy flag
        self._set_state(STATE_UPLOADING)

        try:
            photo_url = process_upload(upload, self.max_dimension, self.quality)
        except ImageValidationError as e:
            logger.info('Photo upload rejected for draft %s: %s', self.draft.id, e)
            self._set_state(STATE_IDLE)
            return Notification(e.title, str(e), 'error')

        self.draft.photo_url = photo_url
        self._reset_crop()
        self._set_state(STATE_CROPPING)
        return Notification('Success', 'Image processed successfully', 'success')

    def begin_crop(self):
        """Re-open the crop selector on the current photo at the default position."""
        if self.is_busy:
            return UPLOAD_BUSY
        if not self.draft.photo_url:
            return NO_PHOTO

        self._reset_crop()
        self._set_state(STATE_CROPPING)
        return None

    def save_crop(self, region, displayed_size=None):
        """
        Replace the photo with the selected region.

        Args:
            region: CropRegion relative to the displayed photo
            displayed_size: (width, height) the photo was shown at; only
                needed for pixel regions

        Returns:
            Notification
        """
        if self.draft.state != STATE_CROPPING:
            return NOT_CROPPING

        try:
            cropped = process_crop(
                self.draft.photo_url, region, displayed_size,
                self.max_dimension, self.quality, aspect=CROP_ASPECT,
            )
        except ImageValidationError as e:
            logger.info('Crop rejected for draft %s: %s', self.draft.id, e)
            return Notification(e.title, str(e), 'error')

        self.draft.photo_url = cropped
        if region.unit == '%':
            self.draft.crop_x, self.draft.crop_y = region.x, region.y
            self.draft.crop_width, self.draft.crop_height = region.width, region.height
        self._set_state(STATE_IDLE)
        return Notification('Success', 'Photo cropped', 'success')

    def cancel_crop(self):
        """Leave the crop selector, keeping the photo as it was."""
        if self.draft.state == STATE_CROPPING:
            self._set_state(STATE_IDLE)
        return None

    def remove_photo(self):
        if self.is_busy:
            return UPLOAD_BUSY

        self.draft.photo_url = None
        self._set_state(STATE_IDLE)
        return None


def open_draft(identity, recipe=None):
    """
    Start a fresh draft for a recipe form, seeded with the recipe's photo.

    Older drafts of the same user for the same recipe are discarded.
    """
    recipe_id = recipe.id if recipe is not None else None
    PhotoDraft.query.filter_by(owner_id=identity.user_id, recipe_id=recipe_id).delete()

    draft = PhotoDraft(
        owner_id=identity.user_id,
        recipe_id=recipe_id,
        state=STATE_IDLE,
        photo_url=recipe.photo_url if recipe is not None else None,
    )
    db.session.add(draft)
    db.session.commit()
    return draft


def get_draft(identity, draft_id):
    """Return the user's draft with this id, or None."""
    try:
        draft_id = int(draft_id)
    except (TypeError, ValueError):
        return None

    draft = db.session.get(PhotoDraft, draft_id)
    if draft is None or draft.owner_id != identity.user_id:
        return None
    return draft


def discard_draft(draft):
    db.session.delete(draft)
    db.session.commit()
