import logging
import re
import sqlite3
from functools import wraps

import click
from flask import (
    Flask, Blueprint, render_template, request, redirect, url_for, flash,
    session, g, abort, current_app,
)
from flask_migrate import Migrate
from sqlalchemy import event
from sqlalchemy.engine import Engine
from werkzeug.exceptions import RequestEntityTooLarge

from config import get_config
from constants import (
    MAX_LENGTHS, MIN_USERNAME_LENGTH, USERNAME_PATTERN, MIN_PASSWORD_LENGTH,
    VALID_VIEW_MODES, ALLOWED_IMAGE_TYPES,
)
from models import db, User, Recipe
from services import (
    load_identity, can_view, can_edit, can_delete,
    RecipeForm, PhotoEditor, Notification, open_draft, get_draft, discard_draft,
    PermissionDenied, list_recipes, filter_by_tag, collect_tags, create_recipe,
    update_recipe, set_visibility, delete_recipe,
)
from services.recipe_form import TRUTHY_VALUES
from utils.image_handler import UploadedImage, CropRegion, CropError
from utils.sanitizer import sanitize_tag

bp = Blueprint('main', __name__)
migrate = Migrate()


def safe_float(value, default=None, min_val=None, max_val=None):
    """Safely parse a float value with optional bounds."""
    try:
        result = float(value) if value else default
        if result is None:
            return default
        if min_val is not None:
            result = max(min_val, result)
        if max_val is not None:
            result = min(max_val, result)
        return result
    except (ValueError, TypeError):
        return default


def safe_int(value, default=None):
    try:
        return int(value)
    except (ValueError, TypeError):
        return default


def login_required(view):
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not g.identity.is_authenticated:
            flash('Please log in to continue', 'warning')
            return redirect(url_for('main.login', next=request.path))
        return view(*args, **kwargs)
    return wrapped


def flash_notification(notification):
    if notification is not None:
        flash(f'{notification.title}: {notification.description}', notification.category)


def same_site_path(url, default):
    """Return url if it is a path on this site, else default."""
    if not url or not url.startswith('/') or url.startswith('//'):
        return default
    return url


@bp.before_app_request
def load_current_identity():
    g.identity = load_identity(session.get('user_id'))


@bp.app_context_processor
def inject_identity():
    return {'identity': g.get('identity'), 'max_lengths': MAX_LENGTHS}


@bp.app_errorhandler(RequestEntityTooLarge)
def request_too_large(e):
    current_app.logger.warning('Request to %s exceeded MAX_CONTENT_LENGTH', request.path)
    flash('Image size should be less than 5MB', 'danger')
    return redirect(request.referrer or url_for('main.recipes_list'))


# ============================================
# ROUTES - AUTH
# ============================================

def validate_username(username):
    """Return an error message for an unacceptable username, else ''."""
    if len(username) < MIN_USERNAME_LENGTH:
        return f'Username must be at least {MIN_USERNAME_LENGTH} characters'
    if len(username) > MAX_LENGTHS['username']:
        return f"Username must be less than {MAX_LENGTHS['username']} characters"
    if not re.match(USERNAME_PATTERN, username):
        return 'Username can only contain letters, numbers, and underscores'
    return ''


@bp.route('/signup', methods=['GET', 'POST'])
def signup():
    if request.method == 'POST':
        email = request.form.get('email', '').strip().lower()
        username = request.form.get('username', '').strip()
        password = request.form.get('password', '')

        error = validate_username(username)
        if not error and not email:
            error = 'Email is required'
        if not error and len(password) < MIN_PASSWORD_LENGTH:
            error = f'Password must be at least {MIN_PASSWORD_LENGTH} characters'
        if not error and User.query.filter_by(username=username).first():
            error = 'Username is already taken'
        if not error and User.query.filter_by(email=email).first():
            error = 'An account with this email already exists'

        if error:
            flash(error, 'danger')
            return render_template('signup.html', email=email, username=username)

        user = User(email=email, username=username, is_admin=False)
        user.set_password(password)
        db.session.add(user)
        db.session.commit()

        session.clear()
        session['user_id'] = user.id
        flash(f'Welcome, {user.username}!', 'success')
        return redirect(url_for('main.recipes_list', view='my'))

    return render_template('signup.html', email='', username='')


@bp.route('/login', methods=['GET', 'POST'])
def login():
    if request.method == 'POST':
        email = request.form.get('email', '').strip().lower()
        password = request.form.get('password', '')

        user = User.query.filter_by(email=email).first()
        if user is None or not user.check_password(password):
            flash('Invalid email or password', 'danger')
            return render_template('login.html', email=email)

        session.clear()
        session['user_id'] = user.id

        return redirect(same_site_path(request.args.get('next'), url_for('main.recipes_list', view='my')))

    return render_template('login.html', email='')


@bp.route('/logout', methods=['POST'])
def logout():
    session.clear()
    flash('Logged out', 'info')
    return redirect(url_for('main.recipes_list'))


@bp.route('/profile', methods=['GET', 'POST'])
@login_required
def profile():
    if request.method == 'POST':
        new_password = request.form.get('new_password', '')
        if len(new_password) < MIN_PASSWORD_LENGTH:
            flash(f'Password must be at least {MIN_PASSWORD_LENGTH} characters', 'danger')
        else:
            user = db.session.get(User, g.identity.user_id)
            user.set_password(new_password)
            db.session.commit()
            flash('Password has been updated', 'success')
        return redirect(url_for('main.profile'))

    return render_template('profile.html')


# ============================================
# ROUTES - RECIPES
# ============================================

@bp.route('/')
def index():
    return redirect(url_for('main.recipes_list'))


@bp.route('/recipes')
def recipes_list():
    view_mode = request.args.get('view', 'public')
    if view_mode not in VALID_VIEW_MODES:
        view_mode = 'public'

    tag = sanitize_tag(request.args.get('tag', ''))

    recipes = list_recipes(g.identity, view_mode)
    tags = collect_tags(recipes)
    recipes = filter_by_tag(recipes, tag)

    return render_template('recipes.html', recipes=recipes, tags=tags,
                           view_mode=view_mode, selected_tag=tag,
                           can_edit=can_edit, can_delete=can_delete)


@bp.route('/recipe/<int:id>')
def recipe_view(id):
    recipe = Recipe.query.get_or_404(id)
    if not can_view(g.identity, recipe):
        abort(404)

    return render_template('recipe_view.html', recipe=recipe,
                           can_edit=can_edit(g.identity, recipe),
                           can_delete=can_delete(g.identity, recipe))


@bp.route('/recipe/add', methods=['GET', 'POST'])
@login_required
def recipe_add():
    return handle_recipe_form(recipe=None)


@bp.route('/recipe/<int:id>/edit', methods=['GET', 'POST'])
@login_required
def recipe_edit(id):
    recipe = Recipe.query.get_or_404(id)
    if not can_edit(g.identity, recipe):
        abort(403)
    return handle_recipe_form(recipe=recipe)


@bp.route('/recipe/<int:id>/share', methods=['POST'])
@login_required
def recipe_share(id):
    recipe = Recipe.query.get_or_404(id)

    # The button posts the requested state; without one the flag is toggled
    requested = request.form.get('is_public')
    is_public = (not recipe.is_public) if requested is None else requested in TRUTHY_VALUES

    try:
        set_visibility(g.identity, recipe, is_public)
    except PermissionDenied:
        abort(403)

    flash(f"Recipe is now {'public' if recipe.is_public else 'private'}", 'success')
    return redirect(same_site_path(request.form.get('next'), url_for('main.recipe_view', id=recipe.id)))


@bp.route('/recipe/<int:id>/delete', methods=['POST'])
@login_required
def recipe_delete(id):
    recipe = Recipe.query.get_or_404(id)
    name = recipe.name

    try:
        delete_recipe(g.identity, recipe)
    except PermissionDenied:
        abort(403)

    flash(f'Recipe "{name}" deleted!', 'success')
    return redirect(url_for('main.recipes_list', view=request.args.get('view', 'public')))


# ============================================
# RECIPE FORM
# ============================================

def handle_recipe_form(recipe):
    """
    Add/edit form. Every button posts the whole form with an 'action' value,
    so typed text survives photo, ingredient and tag edits.
    """
    if request.method == 'GET':
        draft = open_draft(g.identity, recipe)
        form = RecipeForm.from_recipe(recipe) if recipe else RecipeForm.empty()
        return render_recipe_form(form, PhotoEditor(draft), recipe)

    draft = get_draft(g.identity, request.form.get('draft_id'))
    if draft is None:
        # Expired or foreign draft: start over with the stored photo
        draft = open_draft(g.identity, recipe)

    editor = PhotoEditor(
        draft,
        max_dimension=current_app.config['IMAGE_MAX_DIMENSION'],
        quality=current_app.config['IMAGE_QUALITY'],
        upload_timeout=current_app.config['UPLOAD_TIMEOUT_SECONDS'],
    )
    form = RecipeForm.from_form(request.form, photo_url=draft.photo_url)

    action, _, argument = request.form.get('action', 'save').partition(':')

    if action == 'save':
        return save_recipe_form(form, editor, recipe)

    if action == 'upload_photo':
        file = request.files.get('photo')
        if file is None or file.filename == '':
            flash('No image selected', 'warning')
        else:
            flash_notification(editor.upload(UploadedImage.from_file_storage(file)))
    elif action == 'begin_crop':
        flash_notification(editor.begin_crop())
    elif action == 'save_crop':
        flash_notification(save_crop(editor))
    elif action == 'cancel_crop':
        flash_notification(editor.cancel_crop())
    elif action == 'remove_photo':
        flash_notification(editor.remove_photo())
    elif action == 'add_ingredient':
        form.ingredients.add()
    elif action == 'remove_ingredient':
        index = safe_int(argument)
        if index is not None:
            form.ingredients.remove(index)
    elif action == 'add_tag':
        form.tags.add(request.form.get('new_tag', ''))
    elif action == 'remove_tag':
        form.tags.remove(argument)
    else:
        abort(400)

    form.photo_url = editor.photo_url
    return render_recipe_form(form, editor, recipe)


def save_crop(editor):
    try:
        region = CropRegion.from_form(request.form)
    except CropError as e:
        return Notification(e.title, str(e), 'error')

    width = safe_float(request.form.get('display_width'), min_val=0)
    height = safe_float(request.form.get('display_height'), min_val=0)
    displayed_size = (width, height) if width and height else None
    return editor.save_crop(region, displayed_size)


def save_recipe_form(form, editor, recipe):
    if editor.is_busy:
        flash('Please wait until the photo has been processed', 'warning')
        return render_recipe_form(form, editor, recipe)

    errors = form.errors()
    if errors:
        for error in errors:
            flash(error, 'danger')
        return render_recipe_form(form, editor, recipe)

    try:
        if recipe is None:
            recipe = create_recipe(g.identity, form.to_record())
            flash(f'Recipe "{recipe.name}" created!', 'success')
        else:
            update_recipe(g.identity, recipe, form.to_record())
            flash(f'Recipe "{recipe.name}" updated!', 'success')
    except PermissionDenied:
        abort(403)

    discard_draft(editor.draft)
    return redirect(url_for('main.recipe_view', id=recipe.id))


def render_recipe_form(form, editor, recipe):
    return render_template('recipe_form.html', form=form, editor=editor, recipe=recipe,
                           accepted_types=','.join(ALLOWED_IMAGE_TYPES))


# ============================================
# CLI
# ============================================

@bp.cli.command('init-db')
def init_db_command():
    """Create all tables."""
    init_db()
    click.echo('Initialized the database.')


@bp.cli.command('create-admin')
@click.argument('email')
def create_admin_command(email):
    """Grant admin rights to an existing user."""
    user = User.query.filter_by(email=email.strip().lower()).first()
    if user is None:
        raise click.ClickException(f'No user with email {email}')
    user.is_admin = True
    db.session.commit()
    click.echo(f'{user.username} is now an admin.')


# ============================================
# INITIALIZE APP & DATABASE
# ============================================

# Enable SQLite foreign key enforcement
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_connection, connection_record):
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


def init_db():
    db.create_all()


def create_app(config_name=None):
    app = Flask(__name__)
    app.config.from_object(get_config(config_name))

    logging.basicConfig(
        level=app.config['LOG_LEVEL'],
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )

    db.init_app(app)
    migrate.init_app(app, db)
    app.register_blueprint(bp, cli_group=None)

    return app


app = create_app()


if __name__ == '__main__':
    with app.app_context():
        init_db()
    # host='0.0.0.0' allows access from other devices on the network
    app.run(debug=True, host='0.0.0.0', port=5000, use_reloader=False)
