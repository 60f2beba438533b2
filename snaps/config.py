"""Flask configuration.

Every value is read from the environment (and a local .env file) when this
module is first imported.
"""
import os
import secrets

from dotenv import load_dotenv

load_dotenv()

SECRET_KEY = os.environ.get('SECRET_KEY', secrets.token_urlsafe(32))
"""Signs the session cookie. Without it, sessions do not survive a restart."""

SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URI', 'sqlite:///snaps.db')
SQLALCHEMY_TRACK_MODIFICATIONS = False

GOOGLE_CLIENT_ID = os.environ.get('CLIENT_ID')
GOOGLE_CLIENT_SECRET = os.environ.get('CLIENT_SECRET')
GOOGLE_CALLBACK_URL = os.environ.get('GOOGLE_CALLBACK_URL')
"""Absolute OAuth redirect URI. When unset it is built from the request host."""

UPLOAD_FOLDER = os.environ.get('UPLOAD_FOLDER')
"""Where uploaded images are written; defaults to ``<instance>/uploads``."""

MAX_CONTENT_LENGTH = int(os.environ.get('MAX_CONTENT_LENGTH', 16 * 1024 * 1024))

GALLERY_REQUIRES_LOGIN = os.environ.get('GALLERY_REQUIRES_LOGIN', '0').lower() in ('1', 'true', 'yes')

LOG_LEVEL = os.environ.get('LOG_LEVEL', 'INFO')
