from flask import Blueprint, current_app, render_template, request, redirect, url_for, flash, session, g
from functools import wraps
from sqlalchemy.exc import SQLAlchemyError

from .models import db, User, RegistrationError, UsernameTaken, register_user, authenticate

auth_bp = Blueprint('auth', __name__)

STORE_UNAVAILABLE = 'Accounts are unavailable right now, please try again.'


@auth_bp.before_app_request
def load_logged_in_user():
    uid = session.get('user_id')
    g.user = None
    if uid is None:
        return
    try:
        g.user = db.session.get(User, uid)
    except SQLAlchemyError:
        # store is down; serve this request anonymously but keep the cookie
        db.session.rollback()
        current_app.logger.exception('Could not load user %s', uid)
        return
    if g.user is None:
        # account behind the cookie is gone; treat as anonymous
        session.pop('user_id', None)


def login_user(user):
    session.clear()
    session['user_id'] = user.id
    g.user = user


def logout_user():
    session.clear()
    g.user = None


def _safe_next(target):
    if target and target.startswith('/') and not target.startswith('//'):
        return target
    return url_for('secrets')


@auth_bp.route('/register', methods=['GET', 'POST'])
def register():
    if request.method == 'GET':
        return render_template('register.html')
    username = (request.form.get('username') or '').strip()
    password = request.form.get('password') or ''
    try:
        user = register_user(username, password)
    except UsernameTaken:
        current_app.logger.info('Registration rejected, username %r already exists', username)
        flash('That username is already registered.', 'error')
        return redirect(url_for('auth.register'))
    except RegistrationError as e:
        flash(str(e), 'error')
        return redirect(url_for('auth.register'))
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('Registration of %r failed', username)
        flash(STORE_UNAVAILABLE, 'error')
        return redirect(url_for('auth.register'))
    login_user(user)
    return redirect(url_for('secrets'))


@auth_bp.route('/login', methods=['GET', 'POST'])
def login():
    if request.method == 'GET':
        return render_template('login.html')
    username = (request.form.get('username') or '').strip()
    password = request.form.get('password') or ''
    try:
        user = authenticate(username, password)
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('Login lookup for %r failed', username)
        flash(STORE_UNAVAILABLE, 'error')
        return redirect(url_for('auth.login'))
    if user is None:
        current_app.logger.info('Failed login for %r', username)
        flash('Invalid username or password.', 'error')
        return redirect(url_for('auth.login'))
    login_user(user)
    return redirect(_safe_next(request.args.get('next')))


@auth_bp.route('/logout')
def logout():
    logout_user()
    return redirect(url_for('home'))


def login_required(view):
    """Decorator for route handlers that require an authenticated user."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if g.get('user') is None:
            # preserve requested path in `next` so user can return after login
            return redirect(url_for('auth.login', next=request.path))
        return view(*args, **kwargs)
    return wrapped
