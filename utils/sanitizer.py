"""
XSS Prevention / Input Sanitization Module

Strips markup from user input before it is stored, so every text field
can later be rendered as plain text.
"""

import base64
import binascii
import logging
import re
import warnings

from bs4 import BeautifulSoup, MarkupResemblesLocatorWarning, ParserRejectedMarkup
from bs4.element import PreformattedString

from constants import MAX_LENGTHS, STRIPPED_CONTENT_TAGS, DATA_URI_PREFIX

logger = logging.getLogger(__name__)

# Short inputs such as "pasta.jpg" make bs4 think it was handed a filename
warnings.filterwarnings('ignore', category=MarkupResemblesLocatorWarning)

# Control characters except tab, newline and carriage return, plus lone surrogates
CONTROL_CHARS = re.compile(r'[\x00-\x08\x0b\x0c\x0e-\x1f\x7f-\x9f\ud800-\udfff]')

MARKUP_DELIMITERS = re.compile(r'[<>]')

# Used only when html.parser rejects the input
CONTENT_ELEMENTS = re.compile(
    r'<(%s)\b[^>]*>.*?(?:</\1\s*>|$)' % '|'.join(STRIPPED_CONTENT_TAGS),
    re.IGNORECASE | re.DOTALL,
)
TAG_SPANS = re.compile(r'<[^<>]*>')

AMOUNT_DISALLOWED = re.compile(r'[^0-9.]')


def _strip_markup_without_parser(text):
    """Regex fallback for input html.parser cannot tokenize, e.g. 'a<![ b'."""
    text = CONTENT_ELEMENTS.sub('', text)
    text = TAG_SPANS.sub('', text)
    return MARKUP_DELIMITERS.sub('', text)


def strip_markup(text):
    """
    Remove all tags and attributes, keeping only the text content.

    Script-like elements are dropped together with their content;
    comments, CDATA sections and doctypes are dropped entirely.
    """
    text = CONTROL_CHARS.sub('', text)

    try:
        soup = BeautifulSoup(text, 'html.parser')
    except ParserRejectedMarkup:
        logger.debug('html.parser rejected input, stripping tags by pattern')
        return _strip_markup_without_parser(text)

    for element in soup.find_all(STRIPPED_CONTENT_TAGS):
        element.decompose()

    for node in soup.find_all(string=lambda s: isinstance(s, PreformattedString)):
        node.extract()

    text = soup.get_text()

    # Entities such as &lt;script&gt; or &#0; decode back into unsafe characters
    text = MARKUP_DELIMITERS.sub('', text)

    return CONTROL_CHARS.sub('', text)


def sanitize_text(text, max_length=MAX_LENGTHS['instructions']):
    """
    Sanitize text for safe storage and plain-text display.

    Markup is stripped first, the result is truncated to max_length
    characters and then trimmed. Never raises.

    Args:
        text: The text to sanitize (can be None)
        max_length: Maximum allowed length after stripping

    Returns:
        Sanitized string, possibly empty
    """
    if text is None:
        return ''

    if not isinstance(text, str):
        text = str(text)

    if max_length <= 0:
        return ''

    text = strip_markup(text)

    return text[:max_length].strip()


def sanitize_field(field, text):
    """Sanitize text using the length limit registered for a recipe field."""
    return sanitize_text(text, MAX_LENGTHS[field])


def sanitize_recipe_name(name):
    return sanitize_field('name', name)


def sanitize_instructions(instructions):
    """
    Sanitize recipe instructions.

    Newlines inside the text are preserved for formatting.
    """
    return sanitize_field('instructions', instructions)


def sanitize_ingredient_name(name):
    return sanitize_field('ingredient_name', name)


def sanitize_ingredient_unit(unit):
    return sanitize_field('ingredient_unit', unit)


def sanitize_amount(value):
    """
    Keep only digits and decimal points in an ingredient amount.

    No markup is expected here so the value is not parsed; repeated
    decimal points are kept as typed ("12a.3.4" -> "12.3.4").
    """
    if value is None:
        return ''

    if not isinstance(value, str):
        value = str(value)

    return AMOUNT_DISALLOWED.sub('', value)


def sanitize_tag(tag):
    """Sanitize a single tag and fold it to lower case."""
    return sanitize_field('tag', tag).lower()


def is_encoded_photo(value):
    """
    Check that a photo value is a JPEG data URI as produced by the image pipeline.

    Used to reject arbitrary URLs or markup posted in place of a photo.
    """
    if not value or not isinstance(value, str):
        return False

    if not value.startswith(DATA_URI_PREFIX):
        return False

    try:
        payload = base64.b64decode(value[len(DATA_URI_PREFIX):], validate=True)
    except (binascii.Error, ValueError):
        return False

    # JPEG start-of-image marker
    return payload[:2] == b'\xff\xd8'
