"""
Constants Package

Exports validation limits and image settings.
"""

from .validation import (
    MAX_LENGTHS,
    MIN_USERNAME_LENGTH,
    USERNAME_PATTERN,
    MIN_PASSWORD_LENGTH,
    DEFAULT_INGREDIENT_UNIT,
    VALID_VIEW_MODES,
    STRIPPED_CONTENT_TAGS,
)

from .images import (
    MAX_IMAGE_SIZE,
    ALLOWED_IMAGE_TYPES,
    ALLOWED_FORMATS,
    MAX_IMAGE_DIMENSION,
    JPEG_QUALITY,
    UPLOAD_TIMEOUT_SECONDS,
    OUTPUT_MIME_TYPE,
    DATA_URI_PREFIX,
    CROP_ASPECT,
    DEFAULT_CROP,
)

__all__ = [
    # Validation
    'MAX_LENGTHS',
    'MIN_USERNAME_LENGTH',
    'USERNAME_PATTERN',
    'MIN_PASSWORD_LENGTH',
    'DEFAULT_INGREDIENT_UNIT',
    'VALID_VIEW_MODES',
    'STRIPPED_CONTENT_TAGS',
    # Images
    'MAX_IMAGE_SIZE',
    'ALLOWED_IMAGE_TYPES',
    'ALLOWED_FORMATS',
    'MAX_IMAGE_DIMENSION',
    'JPEG_QUALITY',
    'UPLOAD_TIMEOUT_SECONDS',
    'OUTPUT_MIME_TYPE',
    'DATA_URI_PREFIX',
    'CROP_ASPECT',
    'DEFAULT_CROP',
]
