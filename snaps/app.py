import os
import logging

from flask import Flask, render_template, request, redirect, url_for, flash, g
from sqlalchemy.exc import SQLAlchemyError
from werkzeug.exceptions import RequestEntityTooLarge

from . import config as default_config
from . import oauth
from .auth import auth_bp, login_required
from .models import db, attach_image, list_gallery
from .uploads import uploads_bp, save_upload, FIELD_NAME


def create_app(config=None):
    app = Flask(__name__, instance_relative_config=True)
    app.config.from_object(default_config)
    if config:
        app.config.update(config)

    app.logger.setLevel(getattr(logging, str(app.config['LOG_LEVEL']).upper(), logging.INFO))
    os.makedirs(app.instance_path, exist_ok=True)

    db.init_app(app)
    oauth.init_app(app)

    with app.app_context():
        db.create_all()

    # ---------------- Routes ----------------
    @app.route('/')
    def home():
        return render_template('home.html')

    def secrets():
        result = list_gallery()
        if not result.ok:
            app.logger.error('Could not load gallery: %s', result.error)
            return render_template('secrets.html', users=[], error=result.error), 503
        return render_template('secrets.html', users=result.users, error=None)

    if app.config['GALLERY_REQUIRES_LOGIN']:
        secrets = login_required(secrets)
    app.add_url_rule('/secrets', 'secrets', secrets)

    @app.route('/submit', methods=['GET', 'POST'])
    @login_required
    def submit():
        if request.method == 'GET':
            return render_template('submit.html')
        filename = save_upload(request.files.get(FIELD_NAME))
        if filename:
            try:
                attach_image(g.user, filename)
            except SQLAlchemyError:
                db.session.rollback()
                app.logger.exception('Could not save image %s for user %s', filename, g.user.id)
                flash('Your picture could not be saved, please try again.', 'error')
        return redirect(url_for('secrets'))

    @app.errorhandler(RequestEntityTooLarge)
    def upload_too_large(e):
        flash('That file is too large.', 'error')
        return redirect(url_for('submit'))

    # ---------------- Blueprints ----------------
    app.register_blueprint(auth_bp)
    app.register_blueprint(oauth.oauth_bp)
    app.register_blueprint(uploads_bp)

    return app


def main():
    create_app().run(port=3000)
