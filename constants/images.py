"""
Image Constants

Limits and encoding parameters for recipe photos.
"""

# Maximum upload size (5MB)
MAX_IMAGE_SIZE = 5 * 1024 * 1024

# Accepted MIME types for uploads
ALLOWED_IMAGE_TYPES = ('image/jpeg', 'image/png', 'image/webp')

# Pillow format names matching ALLOWED_IMAGE_TYPES
ALLOWED_FORMATS = {'JPEG', 'PNG', 'WEBP'}

# Longer side of every stored photo, in pixels
MAX_IMAGE_DIMENSION = 1200

# JPEG quality for stored photos (1-100)
JPEG_QUALITY = 85

# An upload still marked in progress after this long is treated as abandoned
UPLOAD_TIMEOUT_SECONDS = 120

# Output format of the pipeline
OUTPUT_MIME_TYPE = 'image/jpeg'
DATA_URI_PREFIX = f'data:{OUTPUT_MIME_TYPE};base64,'

# Crop selector: width:height of the photo card
CROP_ASPECT = 3 / 4

# Selector position when cropping starts, in percent of the displayed image
DEFAULT_CROP = {'x': 25, 'y': 0, 'width': 50, 'height': 66.67, 'unit': '%'}
