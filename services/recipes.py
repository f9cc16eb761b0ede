"""
Recipe Service

Reads and writes Recipe documents on behalf of an identity. Records passed
in have already been sanitized by the recipe form.
"""

import logging

from models import db, Recipe, PhotoDraft
from utils.sanitizer import sanitize_tag, is_encoded_photo
from .identity import can_edit, can_delete

logger = logging.getLogger(__name__)


class PermissionDenied(Exception):
    """Raised when an identity may not perform an operation on a recipe."""
    pass


def list_recipes(identity, view_mode='public'):
    """
    Recipes for one of the two list views, newest first.

    Args:
        identity: Identity of the viewer
        view_mode: 'my' for the viewer's own recipes, 'public' for shared ones

    Returns:
        list of Recipe; empty for 'my' when nobody is signed in
    """
    if view_mode == 'my':
        if not identity.is_authenticated:
            return []
        query = Recipe.query.filter_by(created_by_id=identity.user_id)
    else:
        query = Recipe.query.filter_by(is_public=True)

    return query.order_by(Recipe.created_at.desc(), Recipe.id.desc()).all()


def filter_by_tag(recipes, tag):
    """Recipes carrying tag; the tag is sanitized like a new one. No tag keeps all."""
    tag = sanitize_tag(tag) if tag else ''
    if not tag:
        return list(recipes)
    return [r for r in recipes if r.has_tag(tag)]


def collect_tags(recipes):
    """Sorted distinct tags used by the given recipes."""
    tags = set()
    for recipe in recipes:
        tags.update(recipe.tags or [])
    return sorted(tags)


def _checked_photo(record):
    photo_url = record.get('photo_url')
    if photo_url and not is_encoded_photo(photo_url):
        logger.warning('Dropping photo that was not produced by the image pipeline')
        photo_url = None
    return dict(record, photo_url=photo_url)


def create_recipe(identity, record):
    """Store a new recipe owned by identity."""
    if not identity.is_authenticated:
        raise PermissionDenied('Log in to add recipes')

    recipe = Recipe(created_by_id=identity.user_id)
    recipe.update_from_record(_checked_photo(record))
    db.session.add(recipe)
    db.session.commit()
    logger.info('User %s created recipe %s', identity.user_id, recipe.id)
    return recipe


def update_recipe(identity, recipe, record):
    """Overwrite a recipe's fields. Only its creator may do this."""
    if not can_edit(identity, recipe):
        raise PermissionDenied('Only the creator can edit this recipe')

    recipe.update_from_record(_checked_photo(record))
    db.session.commit()
    logger.info('User %s updated recipe %s', identity.user_id, recipe.id)
    return recipe


def delete_recipe(identity, recipe):
    """Delete a recipe and any photo drafts pointing at it. Admins only."""
    if not can_delete(identity, recipe):
        raise PermissionDenied('Only admins can delete recipes')

    PhotoDraft.query.filter_by(recipe_id=recipe.id).delete()
    db.session.delete(recipe)
    db.session.commit()
    logger.info('Admin %s deleted recipe %s', identity.user_id, recipe.id)


def set_visibility(identity, recipe, is_public):
    """
    Share or unshare a recipe. Only its creator may do this.

    Setting the state it already has is a no-op, so a repeated submit
    of the same toggle leaves the recipe as the first one did.
    """
    if not can_edit(identity, recipe):
        raise PermissionDenied('Only the creator can change sharing')

    is_public = bool(is_public)
    if recipe.is_public != is_public:
        recipe.is_public = is_public
        db.session.commit()
        logger.info('User %s made recipe %s %s', identity.user_id, recipe.id,
                    'public' if is_public else 'private')
    return recipe
