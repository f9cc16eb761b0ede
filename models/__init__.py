"""
Models Package

Exports all database models and the db instance for use throughout the application.
"""

from .base import db

from .user import User
from .recipe import Recipe
from .photo_draft import PhotoDraft

__all__ = [
    'db',
    'User',
    'Recipe',
    'PhotoDraft',
]
