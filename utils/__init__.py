# Utility modules for Recipe Box
from .image_handler import (
    process_upload, process_crop,
    UploadedImage, CropRegion,
    ImageValidationError, InvalidImage, DecodeError, CropError, ProcessingFailure,
)
from .sanitizer import (
    sanitize_text, sanitize_field, sanitize_recipe_name, sanitize_instructions,
    sanitize_ingredient_name, sanitize_ingredient_unit, sanitize_amount,
    sanitize_tag, is_encoded_photo,
)
