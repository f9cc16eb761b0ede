"""
Services Package

Business logic modules for the recipe application.
"""

from .identity import (
    Identity,
    ANONYMOUS,
    identity_for,
    load_identity,
    can_view,
    can_edit,
    can_delete,
)

from .recipe_form import (
    TagList,
    IngredientList,
    RecipeForm,
)

from .photo_editor import (
    Notification,
    PhotoEditor,
    open_draft,
    get_draft,
    discard_draft,
)

from .recipes import (
    PermissionDenied,
    list_recipes,
    filter_by_tag,
    collect_tags,
    create_recipe,
    update_recipe,
    set_visibility,
    delete_recipe,
)

__all__ = [
    # Identity
    'Identity',
    'ANONYMOUS',
    'identity_for',
    'load_identity',
    'can_view',
    'can_edit',
    'can_delete',
    # Recipe form
    'TagList',
    'IngredientList',
    'RecipeForm',
    # Photo editor
    'Notification',
    'PhotoEditor',
    'open_draft',
    'get_draft',
    'discard_draft',
    # Recipes
    'PermissionDenied',
    'list_recipes',
    'filter_by_tag',
    'collect_tags',
    'create_recipe',
    'update_recipe',
    'set_visibility',
    'delete_recipe',
]
