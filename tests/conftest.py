"""
Shared fixtures: a testing app with an in-memory database, users, and
synthetic images built with PIL.
"""

import base64
import os
import sys
from io import BytesIO

import pytest
from PIL import Image

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from app import create_app, init_db
from models import db, User
from services import identity_for


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        init_db()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    def _make_user(username='cook', email=None, password='secret1', is_admin=False):
        user = User(email=email or f'{username}@example.com', username=username, is_admin=is_admin)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()
        return user
    return _make_user


@pytest.fixture
def identity(make_user):
    return identity_for(make_user())


@pytest.fixture
def login(client):
    def _login(user):
        with client.session_transaction() as sess:
            sess['user_id'] = user.id
    return _login


@pytest.fixture
def make_image():
    """Encoded image bytes of the given size, format and mode."""
    def _make_image(width, height, fmt='JPEG', mode='RGB', color=(200, 120, 40)):
        if mode == 'RGBA' and len(color) == 3:
            color = color + (128,)
        image = Image.new(mode, (width, height), color)
        buffer = BytesIO()
        image.save(buffer, fmt)
        return buffer.getvalue()
    return _make_image


@pytest.fixture
def open_data_uri():
    """Decode a data URI back into a PIL image."""
    def _open(data_uri):
        payload = data_uri.split(',', 1)[1]
        return Image.open(BytesIO(base64.b64decode(payload)))
    return _open
