"""
Image Validation and Processing Module

Turns an uploaded recipe photo into a compact JPEG data URI:
validate -> decode -> downscale -> encode, and later crop -> encode.
Every image is re-encoded through PIL, which also strips hidden data.
"""

import base64
import binascii
import logging
import math
from collections import namedtuple
from io import BytesIO

from PIL import Image, ImageOps

from constants import (
    MAX_IMAGE_SIZE, ALLOWED_IMAGE_TYPES, ALLOWED_FORMATS,
    MAX_IMAGE_DIMENSION, JPEG_QUALITY, DATA_URI_PREFIX, DEFAULT_CROP,
)

logger = logging.getLogger(__name__)

# Percentage regions are rounded by the browser; allow this much overshoot
CROP_TOLERANCE_PX = 1


class ImageValidationError(Exception):
    """Raised when an image cannot be accepted or processed."""
    title = 'Invalid Image'


class InvalidImage(ImageValidationError):
    """Wrong file type or file too large; the user must pick another file."""
    title = 'Invalid Image'


class DecodeError(ImageValidationError):
    """The bytes are not a readable image of a supported type."""
    title = 'Processing Failed'


class CropError(ImageValidationError):
    """The crop region is empty or outside the image."""
    title = 'Crop Failed'


class ProcessingFailure(ImageValidationError):
    """Unexpected failure while resizing or encoding."""
    title = 'Processing Failed'


class UploadedImage:
    """A user-selected file: raw bytes plus its declared MIME type and size."""

    def __init__(self, data, mime_type, size_bytes=None):
        self.data = data
        self.mime_type = (mime_type or '').lower()
        self.size_bytes = len(data) if size_bytes is None else size_bytes

    @classmethod
    def from_file_storage(cls, file_storage):
        """Build from werkzeug's FileStorage (Flask's request.files)."""
        file_storage.stream.seek(0)
        content = file_storage.read()
        return cls(content, file_storage.mimetype)

    def __repr__(self):
        return f'<UploadedImage {self.mime_type} {self.size_bytes} bytes>'


class CropRegion(namedtuple('CropRegion', 'x y width height unit', defaults=('%',))):
    """
    Rectangle selected on the displayed image.

    unit is '%' (relative to the displayed size) or 'px' (displayed pixels).
    """

    __slots__ = ()

    @classmethod
    def default(cls):
        return cls(**DEFAULT_CROP)

    @classmethod
    def from_form(cls, form):
        """
        Read crop_x, crop_y, crop_width, crop_height and crop_unit from a form.

        Raises:
            CropError: If a coordinate is missing or not a number
        """
        try:
            return cls(
                x=float(form['crop_x']),
                y=float(form['crop_y']),
                width=float(form['crop_width']),
                height=float(form['crop_height']),
                unit=form.get('crop_unit', '%'),
            )
        except (KeyError, TypeError, ValueError):
            raise CropError('Crop area is missing or malformed')


def _round_half_up(value):
    return int(math.floor(value + 0.5))


def validate_image(upload):
    """
    Check the declared type and size of an upload. Nothing is decoded.

    Raises:
        InvalidImage: If the type is not JPEG/PNG/WebP or the file exceeds 5MB
    """
    if upload.mime_type not in ALLOWED_IMAGE_TYPES:
        raise InvalidImage('Please upload a JPEG, PNG, or WebP image')
    if upload.size_bytes > MAX_IMAGE_SIZE:
        raise InvalidImage('Image size should be less than 5MB')


def decode_image(image_data):
    """
    Decode raw bytes into a PIL image.

    Args:
        image_data: Raw image bytes

    Returns:
        PIL.Image.Image with EXIF orientation applied

    Raises:
        DecodeError: If the bytes are corrupt, of an unsupported format,
            or a decompression bomb
    """
    try:
        # Verify it's actually an image (detects corrupted/fake files)
        img = Image.open(BytesIO(image_data))
        img.verify()

        # Re-open after verify (verify() leaves file in uncertain state)
        img = Image.open(BytesIO(image_data))

        if img.format not in ALLOWED_FORMATS:
            raise DecodeError(
                f"Unsupported image format: {img.format}. "
                f"Allowed formats: {', '.join(sorted(ALLOWED_FORMATS))}"
            )

        img.load()
        return ImageOps.exif_transpose(img)

    except DecodeError:
        raise
    except Image.DecompressionBombError:
        raise DecodeError('Image appears to be a decompression bomb (too large when decoded)')
    except Exception as e:
        raise DecodeError(f'Invalid or corrupted image: {e}')


def decode_data_uri(data_uri):
    """
    Decode a base64 image data URI, e.g. a photo stored by this pipeline.

    Raises:
        DecodeError: If the value is not a base64 image data URI
    """
    if not data_uri or not isinstance(data_uri, str):
        raise DecodeError('No image to decode')

    header, _, payload = data_uri.partition(',')
    if not header.startswith('data:image/') or not header.endswith(';base64'):
        raise DecodeError('Not an image data URI')

    try:
        image_data = base64.b64decode(payload, validate=True)
    except (binascii.Error, ValueError):
        raise DecodeError('Image data is not valid base64')

    return decode_image(image_data)


def fit_within(width, height, max_dimension=MAX_IMAGE_DIMENSION):
    """
    Scale (width, height) so the longer side is at most max_dimension.

    The shorter side follows the same ratio, rounded to the nearest pixel.
    Sizes already within bounds are returned unchanged; never upscales.
    """
    if width > height:
        if width > max_dimension:
            height = _round_half_up(height * max_dimension / width)
            width = max_dimension
    else:
        if height > max_dimension:
            width = _round_half_up(width * max_dimension / height)
            height = max_dimension

    # A 1px-wide strip must not round away to nothing
    return max(width, 1), max(height, 1)


def downscale(image, max_dimension=MAX_IMAGE_DIMENSION):
    """Resize so the longer side is at most max_dimension. Returns the same image if it fits."""
    size = fit_within(image.width, image.height, max_dimension)
    if size == image.size:
        return image

    logger.debug('Downscaling %sx%s to %sx%s', image.width, image.height, *size)
    return image.resize(size, Image.Resampling.LANCZOS)


def encode_image(image, quality=JPEG_QUALITY):
    """
    Encode an image as a JPEG data URI.

    Transparent and palette images are flattened onto white.

    Raises:
        ProcessingFailure: If PIL cannot encode the image
    """
    try:
        if image.mode in ('RGBA', 'LA', 'P'):
            rgba = image.convert('RGBA')
            background = Image.new('RGB', image.size, (255, 255, 255))
            background.paste(rgba, mask=rgba.split()[-1])
            image = background
        elif image.mode != 'RGB':
            image = image.convert('RGB')

        buffer = BytesIO()
        image.save(buffer, 'JPEG', quality=quality, optimize=True)
    except Exception as e:
        raise ProcessingFailure(f'Failed to compress image: {e}')

    return DATA_URI_PREFIX + base64.b64encode(buffer.getvalue()).decode('ascii')


def resolve_crop(region, displayed_size, aspect=None):
    """
    Convert a crop region into a pixel box on the displayed image.

    With an aspect ratio (width / height) the box is shrunk about its
    centre until it matches, as the interactive selector does.

    Returns:
        (x, y, width, height) in displayed pixels

    Raises:
        CropError: If the region is empty or lies outside the displayed image
    """
    displayed_width, displayed_height = displayed_size

    if region.unit == '%':
        x = region.x * displayed_width / 100
        y = region.y * displayed_height / 100
        width = region.width * displayed_width / 100
        height = region.height * displayed_height / 100
    elif region.unit == 'px':
        x, y, width, height = region.x, region.y, region.width, region.height
    else:
        raise CropError(f'Unknown crop unit: {region.unit}')

    if width <= 0 or height <= 0:
        raise CropError('Crop area must have a positive width and height')

    if (x < -CROP_TOLERANCE_PX or y < -CROP_TOLERANCE_PX
            or x + width > displayed_width + CROP_TOLERANCE_PX
            or y + height > displayed_height + CROP_TOLERANCE_PX):
        raise CropError('Crop area lies outside the image')

    # Absorb the tolerated overshoot
    x = max(0.0, x)
    y = max(0.0, y)
    width = min(width, displayed_width - x)
    height = min(height, displayed_height - y)
    if width <= 0 or height <= 0:
        raise CropError('Crop area lies outside the image')

    if aspect:
        if width / height > aspect:
            new_width = height * aspect
            x += (width - new_width) / 2
            width = new_width
        else:
            new_height = width / aspect
            y += (height - new_height) / 2
            height = new_height

    return x, y, width, height


def crop_image(image, region, displayed_size=None, max_dimension=MAX_IMAGE_DIMENSION, aspect=None):
    """
    Cut a region selected on the displayed image out of the full-resolution image.

    Args:
        image: The natural (full-resolution) image
        region: CropRegion relative to the displayed image
        displayed_size: (width, height) the image was shown at; defaults
            to the natural size
        max_dimension: Bound for the longer side of the result
        aspect: Optional width / height ratio to enforce

    Returns:
        The cropped image, downscaled to max_dimension

    Raises:
        CropError: If the region is degenerate or out of bounds
    """
    natural_width, natural_height = image.size
    if displayed_size is None:
        displayed_size = image.size

    displayed_width, displayed_height = displayed_size
    if displayed_width <= 0 or displayed_height <= 0:
        raise CropError('Displayed image size must be positive')

    x, y, width, height = resolve_crop(region, displayed_size, aspect)

    scale_x = natural_width / displayed_width
    scale_y = natural_height / displayed_height

    left = min(natural_width, _round_half_up(x * scale_x))
    top = min(natural_height, _round_half_up(y * scale_y))
    right = min(natural_width, _round_half_up((x + width) * scale_x))
    bottom = min(natural_height, _round_half_up((y + height) * scale_y))

    if right <= left or bottom <= top:
        raise CropError('Crop area is too small')

    logger.debug('Cropping box %s from %sx%s image', (left, top, right, bottom), natural_width, natural_height)
    return downscale(image.crop((left, top, right, bottom)), max_dimension)


def process_upload(upload, max_dimension=MAX_IMAGE_DIMENSION, quality=JPEG_QUALITY):
    """
    Validate, decode, downscale and encode an uploaded photo.

    Args:
        upload: UploadedImage
        max_dimension: Bound for the longer side (default 1200)
        quality: JPEG quality (default 85)

    Returns:
        str: JPEG data URI

    Raises:
        ImageValidationError: InvalidImage before any decode is attempted,
            DecodeError for bad bytes, ProcessingFailure for anything else
    """
    validate_image(upload)

    try:
        image = decode_image(upload.data)
        image = downscale(image, max_dimension)
        return encode_image(image, quality)
    except ImageValidationError:
        raise
    except Exception as e:
        logger.error('Unexpected error processing %r', upload, exc_info=True)
        raise ProcessingFailure(f'Failed to process image: {e}')


def process_crop(data_uri, region, displayed_size=None, max_dimension=MAX_IMAGE_DIMENSION,
                 quality=JPEG_QUALITY, aspect=None):
    """
    Crop a previously encoded photo and encode the result.

    Returns:
        str: JPEG data URI whose longer side is at most max_dimension

    Raises:
        ImageValidationError: DecodeError, CropError or ProcessingFailure
    """
    try:
        image = decode_data_uri(data_uri)
        cropped = crop_image(image, region, displayed_size, max_dimension, aspect)
        return encode_image(cropped, quality)
    except ImageValidationError:
        raise
    except Exception as e:
        logger.error('Unexpected error cropping photo', exc_info=True)
        raise ProcessingFailure(f'Failed to crop image: {e}')
