"""
User Model

Accounts for the auth collaborator: credentials, display name and admin flag.
"""

from werkzeug.security import generate_password_hash, check_password_hash

from .base import db


class User(db.Model):
    """Registered user. Admins may delete any recipe."""
    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), unique=True, nullable=False, index=True)
    username = db.Column(db.String(20), unique=True, nullable=False, index=True)
    password_hash = db.Column(db.String(255), nullable=False)
    is_admin = db.Column(db.Boolean, nullable=False, default=False)

    def set_password(self, password):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password):
        return check_password_hash(self.password_hash, password)
