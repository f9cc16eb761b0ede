"""
Recipe Model

Contains the Recipe document: name, ordered ingredient rows, instructions,
an optional encoded photo, visibility and tags.
"""

from .base import db, utcnow


class Recipe(db.Model):
    """
    Recipe shared by a user.

    ingredients is an ordered list of {'name', 'amount', 'unit'} dicts and
    tags an ordered list of lower-case strings; both are stored as JSON.
    photo_url holds a JPEG data URI produced by the image pipeline.
    """
    id = db.Column(db.Integer, primary_key=True)
    name = db.Column(db.String(100), nullable=False, index=True)
    ingredients = db.Column(db.JSON, nullable=False, default=list)
    instructions = db.Column(db.Text, nullable=False, default='')
    photo_url = db.Column(db.Text, nullable=True)
    is_public = db.Column(db.Boolean, nullable=False, default=False, index=True)
    tags = db.Column(db.JSON, nullable=False, default=list)
    created_by_id = db.Column(db.Integer, db.ForeignKey('user.id', ondelete='CASCADE'), nullable=False, index=True)
    created_at = db.Column(db.DateTime(timezone=True), default=utcnow)
    updated_at = db.Column(db.DateTime(timezone=True), default=utcnow, onupdate=utcnow)

    created_by = db.relationship('User', backref=db.backref('recipes', lazy=True, cascade='all, delete-orphan'))

    def has_tag(self, tag):
        return tag in (self.tags or [])

    def update_from_record(self, record):
        """Copy a sanitized form record onto this recipe."""
        self.name = record['name']
        self.ingredients = record['ingredients']
        self.instructions = record['instructions']
        self.photo_url = record['photo_url']
        self.is_public = record['is_public']
        self.tags = record['tags']
