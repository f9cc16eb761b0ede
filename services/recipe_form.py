"""
Recipe Form Service

Collects raw form values into sanitized recipe fields: the ordered tag and
ingredient collections and the record handed to the database.
"""

from constants import DEFAULT_INGREDIENT_UNIT
from utils.sanitizer import (
    sanitize_recipe_name, sanitize_instructions, sanitize_ingredient_name,
    sanitize_ingredient_unit, sanitize_amount, sanitize_tag,
)

INGREDIENT_SANITIZERS = {
    'name': sanitize_ingredient_name,
    'amount': sanitize_amount,
    'unit': sanitize_ingredient_unit,
}

TRUTHY_VALUES = {'on', 'true', '1', 'yes', 'y'}


class TagList:
    """Ordered, lower-case tags without duplicates."""

    def __init__(self, tags=None):
        self._tags = []
        for tag in tags or []:
            self.add(tag)

    def add(self, raw_tag):
        """
        Sanitize and append a tag.

        Returns:
            bool: False if the tag was empty after sanitizing or already present
        """
        tag = sanitize_tag(raw_tag)
        if not tag or tag in self._tags:
            return False
        self._tags.append(tag)
        return True

    def remove(self, tag):
        tag = sanitize_tag(tag)
        if tag in self._tags:
            self._tags.remove(tag)
            return True
        return False

    def to_list(self):
        return list(self._tags)

    def __contains__(self, tag):
        return sanitize_tag(tag) in self._tags

    def __iter__(self):
        return iter(self._tags)

    def __len__(self):
        return len(self._tags)


class IngredientList:
    """Ordered ingredient rows, each {'name', 'amount', 'unit'}."""

    def __init__(self, rows=None):
        self._rows = []
        for row in rows or []:
            self.add(row.get('name', ''), row.get('amount', ''), row.get('unit', ''))

    def add(self, name='', amount='', unit=DEFAULT_INGREDIENT_UNIT):
        self._rows.append({
            'name': sanitize_ingredient_name(name),
            'amount': sanitize_amount(amount),
            'unit': sanitize_ingredient_unit(unit),
        })

    def remove(self, index):
        """Delete the row at index. Out-of-range indexes are ignored."""
        if 0 <= index < len(self._rows):
            del self._rows[index]
            return True
        return False

    def update(self, index, field, value):
        self._rows[index][field] = INGREDIENT_SANITIZERS[field](value)

    def to_list(self):
        return [dict(row) for row in self._rows]

    def __getitem__(self, index):
        return self._rows[index]

    def __iter__(self):
        return iter(self._rows)

    def __len__(self):
        return len(self._rows)


class RecipeForm:
    """
    State of the add/edit recipe form.

    Every text value is sanitized as it enters; photo_url is never taken
    from the submitted form, only from the photo editor's draft.
    """

    def __init__(self, name='', instructions='', ingredients=None, tags=None,
                 is_public=False, photo_url=None):
        self.name = sanitize_recipe_name(name)
        self.instructions = sanitize_instructions(instructions)
        self.ingredients = IngredientList(ingredients)
        self.tags = TagList(tags)
        self.is_public = bool(is_public)
        self.photo_url = photo_url or None

    @classmethod
    def empty(cls):
        form = cls()
        form.ingredients.add()
        return form

    @classmethod
    def from_recipe(cls, recipe):
        return cls(
            name=recipe.name,
            instructions=recipe.instructions,
            ingredients=recipe.ingredients,
            tags=recipe.tags,
            is_public=recipe.is_public,
            photo_url=recipe.photo_url,
        )

    @classmethod
    def from_form(cls, form, photo_url=None):
        """
        Build from submitted form data (a werkzeug MultiDict).

        Ingredient rows arrive as parallel ingredient_name / ingredient_amount /
        ingredient_unit lists, tags as repeated 'tags' values.
        """
        names = form.getlist('ingredient_name')
        amounts = form.getlist('ingredient_amount')
        units = form.getlist('ingredient_unit')

        rows = []
        for index, name in enumerate(names):
            rows.append({
                'name': name,
                'amount': amounts[index] if index < len(amounts) else '',
                'unit': units[index] if index < len(units) else '',
            })

        return cls(
            name=form.get('name', ''),
            instructions=form.get('instructions', ''),
            ingredients=rows,
            tags=form.getlist('tags'),
            is_public=form.get('is_public', '').lower() in TRUTHY_VALUES,
            photo_url=photo_url,
        )

    def errors(self):
        """Reasons the form cannot be saved yet; empty when it can."""
        errors = []
        if not self.name:
            errors.append('Recipe name is required')
        if not self.instructions:
            errors.append('Instructions are required')
        if any(not row['name'] for row in self.ingredients):
            errors.append('Every ingredient needs a name')
        return errors

    def to_record(self):
        """Field values for the Recipe document. Empty amounts are stored as '0'."""
        ingredients = []
        for row in self.ingredients:
            ingredients.append({
                'name': row['name'],
                'amount': row['amount'] or '0',
                'unit': row['unit'],
            })

        return {
            'name': self.name,
            'ingredients': ingredients,
            'instructions': self.instructions,
            'photo_url': self.photo_url,
            'is_public': self.is_public,
            'tags': self.tags.to_list(),
        }
