"""
Photo Draft Model

Server-side state of the photo editor for one open recipe form, kept
between requests: the current encoded photo and the editor state.
"""

from .base import db, utcnow

# Editor states
STATE_IDLE = 'idle'
STATE_UPLOADING = 'uploading'
STATE_CROPPING = 'cropping'


class PhotoDraft(db.Model):
    """
    Photo being edited on a recipe form.

    state doubles as the busy flag: while it is 'uploading' no other
    upload is accepted for this draft. updated_at lets the editor release
    a flag left behind by a request that died mid-upload.
    """
    id = db.Column(db.Integer, primary_key=True)
    owner_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    recipe_id = db.Column(db.Integer, db.ForeignKey('recipe.id', ondelete='CASCADE'), nullable=True)
    state = db.Column(db.String(20), nullable=False, default=STATE_IDLE)
    photo_url = db.Column(db.Text, nullable=True)
    # Last state change
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    # Crop selector position, in percent of the displayed image
    crop_x = db.Column(db.Float, nullable=True)
    crop_y = db.Column(db.Float, nullable=True)
    crop_width = db.Column(db.Float, nullable=True)
    crop_height = db.Column(db.Float, nullable=True)
