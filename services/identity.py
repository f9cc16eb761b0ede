"""
Identity Service

The signed-in user as an explicit value. Views load it once per request
and pass it to whatever needs to know who is acting.
"""

from collections import namedtuple

from models import db, User


class Identity(namedtuple('Identity', 'user_id username email is_admin')):
    """Who is making the request. user_id is None for anonymous visitors."""

    __slots__ = ()

    @property
    def is_authenticated(self):
        return self.user_id is not None


ANONYMOUS = Identity(user_id=None, username=None, email=None, is_admin=False)


def identity_for(user):
    if user is None:
        return ANONYMOUS
    return Identity(user.id, user.username, user.email, bool(user.is_admin))


def load_identity(user_id):
    """Look up the identity for a session's user id; unknown ids are anonymous."""
    if user_id is None:
        return ANONYMOUS
    return identity_for(db.session.get(User, user_id))


def can_view(identity, recipe):
    return recipe.is_public or can_edit(identity, recipe) or identity.is_admin


def can_edit(identity, recipe):
    """Only the creator may edit a recipe."""
    return identity.is_authenticated and identity.user_id == recipe.created_by_id


def can_delete(identity, recipe):
    """Only admins may delete, whoever created the recipe."""
    return identity.is_authenticated and identity.is_admin
