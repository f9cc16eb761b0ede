"""Tests for the upload/crop state machine in services.photo_editor."""

from datetime import datetime, timedelta, timezone

import pytest

from models import db, PhotoDraft
from services import identity_for
from services.photo_editor import (
    PhotoEditor, open_draft, get_draft, discard_draft,
    UPLOAD_BUSY, NO_PHOTO, NOT_CROPPING,
)
from utils.image_handler import UploadedImage, CropRegion


@pytest.fixture
def editor(identity):
    return PhotoEditor(open_draft(identity))


@pytest.fixture
def jpeg_upload(make_image):
    return UploadedImage(make_image(4000, 3000), 'image/jpeg')


def test_new_draft_is_idle_without_photo(editor):
    assert editor.state == 'idle'
    assert editor.photo_url is None
    assert editor.crop_region == CropRegion.default()


def test_upload_opens_cropping(editor, jpeg_upload, open_data_uri):
    note = editor.upload(jpeg_upload)

    assert note.status == 'success'
    assert editor.state == 'cropping'
    assert open_data_uri(editor.photo_url).size == (1200, 900)
    assert editor.crop_region == CropRegion.default()


def test_invalid_upload_returns_to_idle_and_keeps_photo(editor, jpeg_upload, make_image):
    editor.upload(jpeg_upload)
    editor.cancel_crop()
    previous = editor.photo_url

    note = editor.upload(UploadedImage(make_image(10, 10, 'GIF'), 'image/gif'))

    assert note.status == 'error'
    assert note.title == 'Invalid Image'
    assert note.category == 'danger'
    assert editor.state == 'idle'
    assert editor.photo_url == previous


def test_corrupt_upload_is_reported(editor):
    note = editor.upload(UploadedImage(b'not really a jpeg', 'image/jpeg'))

    assert note.status == 'error'
    assert note.title == 'Processing Failed'
    assert editor.state == 'idle'
    assert editor.photo_url is None


def test_upload_is_refused_while_busy(editor, jpeg_upload):
    editor.draft.state = 'uploading'
    db.session.commit()

    assert editor.upload(jpeg_upload) is UPLOAD_BUSY
    assert editor.begin_crop() is UPLOAD_BUSY
    assert editor.remove_photo() is UPLOAD_BUSY
    assert editor.state == 'uploading'
    assert editor.photo_url is None


def test_save_crop_replaces_photo(editor, jpeg_upload, open_data_uri):
    editor.upload(jpeg_upload)

    note = editor.save_crop(CropRegion.default())

    assert note.status == 'success'
    assert editor.state == 'idle'
    width, height = open_data_uri(editor.photo_url).size
    assert width / height == pytest.approx(0.75, abs=0.01)


def test_failed_crop_stays_in_cropping(editor, jpeg_upload):
    editor.upload(jpeg_upload)
    before = editor.photo_url

    note = editor.save_crop(CropRegion(80, 0, 50, 50))

    assert note.status == 'error'
    assert note.title == 'Crop Failed'
    assert editor.state == 'cropping'
    assert editor.photo_url == before


def test_cancel_crop_keeps_uploaded_photo(editor, jpeg_upload):
    editor.upload(jpeg_upload)
    uploaded = editor.photo_url

    assert editor.cancel_crop() is None
    assert editor.state == 'idle'
    assert editor.photo_url == uploaded


def test_save_crop_requires_cropping_state(editor, jpeg_upload):
    assert editor.save_crop(CropRegion.default()) is NOT_CROPPING

    editor.upload(jpeg_upload)
    editor.cancel_crop()
    assert editor.save_crop(CropRegion.default()) is NOT_CROPPING


def test_begin_crop_needs_a_photo(editor):
    assert editor.begin_crop() is NO_PHOTO
    assert editor.state == 'idle'


def test_begin_crop_resets_selector(editor, jpeg_upload):
    editor.upload(jpeg_upload)
    editor.save_crop(CropRegion(0, 0, 30, 40))
    assert editor.crop_region == CropRegion(0, 0, 30, 40)

    assert editor.begin_crop() is None
    assert editor.state == 'cropping'
    assert editor.crop_region == CropRegion.default()


def test_pixel_crop_uses_displayed_size(editor, jpeg_upload, open_data_uri):
    editor.upload(jpeg_upload)

    # 1200x900 photo shown at 600x450
    editor.save_crop(CropRegion(0, 0, 300, 400, 'px'), displayed_size=(600, 450))

    assert open_data_uri(editor.photo_url).size == (600, 800)


def test_remove_photo(editor, jpeg_upload):
    editor.upload(jpeg_upload)
    editor.remove_photo()
    assert editor.photo_url is None
    assert editor.state == 'idle'


def test_open_draft_seeds_recipe_photo_and_replaces_old_drafts(identity):
    class StoredRecipe:
        id = None
        photo_url = 'data:image/jpeg;base64,/9j/'

    first_id = open_draft(identity).id
    second = open_draft(identity, StoredRecipe())

    assert second.photo_url == StoredRecipe.photo_url
    assert db.session.get(PhotoDraft, first_id) is None
    assert PhotoDraft.query.filter_by(owner_id=identity.user_id).count() == 1


def test_get_draft_only_returns_own_drafts(identity, make_user):
    draft = open_draft(identity)
    other = identity_for(make_user('baker'))

    assert get_draft(identity, str(draft.id)) is draft
    assert get_draft(other, draft.id) is None
    assert get_draft(identity, 'nope') is None
    assert get_draft(identity, None) is None


def test_discard_draft(identity):
    draft = open_draft(identity)
    draft_id = draft.id
    discard_draft(draft)
    assert db.session.get(PhotoDraft, draft_id) is None


def test_abandoned_upload_releases_busy_flag(editor, jpeg_upload):
    editor.draft.state = 'uploading'
    editor.draft.updated_at = datetime.now(timezone.utc) - timedelta(minutes=10)
    db.session.commit()

    assert editor.is_busy is False
    assert editor.state == 'idle'

    note = editor.upload(jpeg_upload)

    assert note.status == 'success'
    assert editor.state == 'cropping'


def test_recent_upload_keeps_busy_flag(identity):
    draft = open_draft(identity)
    draft.state = 'uploading'
    draft.updated_at = datetime.now(timezone.utc) - timedelta(minutes=10)
    db.session.commit()

    assert PhotoEditor(draft, upload_timeout=3600).is_busy is True
