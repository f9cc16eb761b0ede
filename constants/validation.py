"""
Validation Constants

Contains the length limits and whitelist values applied to user input
before it is handed to the database.
"""

# Maximum field lengths, measured after markup has been stripped
MAX_LENGTHS = {
    'name': 100,
    'instructions': 5000,
    'ingredient_name': 50,
    'ingredient_unit': 10,
    'tag': 20,
    'username': 20,
}

# Username rules for sign-up
MIN_USERNAME_LENGTH = 3
USERNAME_PATTERN = r'^[a-zA-Z0-9_]+$'

MIN_PASSWORD_LENGTH = 6

# Unit pre-filled on a new ingredient row
DEFAULT_INGREDIENT_UNIT = 'g'

# Recipe list views
VALID_VIEW_MODES = {'my', 'public'}

# Elements removed together with their content when sanitizing text
STRIPPED_CONTENT_TAGS = (
    'script', 'style', 'iframe', 'object', 'embed', 'template', 'noscript',
)
