import os
import random
import time

from flask import Blueprint, current_app, send_from_directory
from werkzeug.utils import secure_filename

uploads_bp = Blueprint('uploads', __name__, url_prefix='/uploads')

FIELD_NAME = 'mypic'


def upload_folder():
    folder = current_app.config.get('UPLOAD_FOLDER') or os.path.join(current_app.instance_path, 'uploads')
    os.makedirs(folder, exist_ok=True)
    return folder


def unique_filename(original):
    """Return ``<original>-<epoch millis>-<random int>`` for a client-supplied name.

    The name is reduced to ASCII by :func:`secure_filename`. When nothing of the
    stem survives, as with a name written entirely in a non-Latin script, the
    stem becomes ``upload`` and the extension is kept.
    """
    stem, ext = os.path.splitext(original or '')
    if secure_filename(stem):
        base = secure_filename(original)
    else:
        base = secure_filename('upload' + ext)
    suffix = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
    return f"{base}-{suffix}"


def save_upload(file):
    """Write a single uploaded file to the upload folder, returning its stored name.

    Returns None when the form carried no file.
    """
    if file is None or not file.filename:
        return None
    filename = unique_filename(file.filename)
    file.save(os.path.join(upload_folder(), filename))
    current_app.logger.info('Stored upload %s', filename)
    return filename


@uploads_bp.route('/<path:filename>')
def uploaded_file(filename):
    return send_from_directory(upload_folder(), filename)
