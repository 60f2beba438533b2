import pytest

from snaps import create_app
from snaps.models import db, User, register_user


@pytest.fixture()
def app(tmp_path):
    app = create_app({
        'TESTING': True,
        'SECRET_KEY': f'fake set in {__file__}',
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'UPLOAD_FOLDER': str(tmp_path / 'uploads'),
        'GOOGLE_CLIENT_ID': 'test-client-id',
        'GOOGLE_CLIENT_SECRET': 'test-client-secret',
    })
    with app.app_context():
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def user(app):
    return register_user('alice', 'correct horse')


@pytest.fixture()
def logged_in(client, user):
    client.post('/login', data={'username': 'alice', 'password': 'correct horse'})
    return user


def make_user(username, image=None):
    user = User(username=username, image=image)
    db.session.add(user)
    db.session.commit()
    return user
