"""
Google sign-in, using :mod:`authlib`.

The provider only tells us who the visitor is; the local account is resolved
with :func:`snaps.models.find_or_create` keyed on the Google account id.
"""
from authlib.integrations.flask_client import OAuth, OAuthError
from flask import Blueprint, current_app, flash, redirect, url_for
from sqlalchemy.exc import SQLAlchemyError

from .auth import login_user
from .models import db, find_or_create

oauth_bp = Blueprint('oauth', __name__, url_prefix='/auth/google')

GOOGLE_SCOPE = 'profile'
EXTENSION_KEY = 'authlib.integrations.flask_client'


def init_app(app):
    # One registry per app: authlib caches clients by name.
    oauth = OAuth(app)
    oauth.register(
        name='google',
        client_id=app.config.get('GOOGLE_CLIENT_ID'),
        client_secret=app.config.get('GOOGLE_CLIENT_SECRET'),
        authorize_url='https://accounts.google.com/o/oauth2/v2/auth',
        access_token_url='https://oauth2.googleapis.com/token',
        api_base_url='https://www.googleapis.com/oauth2/v3/',
        client_kwargs={'scope': GOOGLE_SCOPE},
    )
    return oauth


def google():
    return current_app.extensions[EXTENSION_KEY].google


def _configured():
    return bool(current_app.config.get('GOOGLE_CLIENT_ID') and current_app.config.get('GOOGLE_CLIENT_SECRET'))


def fetch_profile():
    """Exchange the callback's authorization code and return the userinfo claims."""
    client = google()
    token = client.authorize_access_token()
    resp = client.get('userinfo', token=token)
    resp.raise_for_status()
    return resp.json()


@oauth_bp.route('')
def login():
    if not _configured():
        flash('Google sign-in is not configured.', 'error')
        return redirect(url_for('auth.login'))
    callback = current_app.config.get('GOOGLE_CALLBACK_URL') or url_for('oauth.callback', _external=True)
    return google().authorize_redirect(callback)


@oauth_bp.route('/secrets')
def callback():
    try:
        profile = fetch_profile()
    except (OAuthError, OSError, ValueError) as e:
        current_app.logger.warning('Google sign-in failed: %s', e)
        return redirect(url_for('auth.login'))
    google_id = profile.get('sub') or profile.get('id')
    if not google_id:
        current_app.logger.warning('Google profile without an account id: %r', profile)
        return redirect(url_for('auth.login'))
    current_app.logger.info('Google sign-in for account %s', google_id)
    try:
        user = find_or_create(str(google_id), email=profile.get('email'))
    except SQLAlchemyError:
        db.session.rollback()
        current_app.logger.exception('Could not resolve Google account %s', google_id)
        flash('Sign-in is unavailable right now, please try again.', 'error')
        return redirect(url_for('auth.login'))
    login_user(user)
    return redirect(url_for('secrets'))
