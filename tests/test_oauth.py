"""Tests for Google sign-in."""

from unittest import mock
from urllib.parse import urlparse, parse_qs

from authlib.integrations.flask_client import OAuthError
from sqlalchemy.exc import OperationalError

from snaps import create_app
from snaps.models import User, find_or_create


def test_find_or_create_is_idempotent(app):
    """The same Google account id always resolves to the same local user."""
    first = find_or_create('g-123')
    second = find_or_create('g-123')

    assert first.id == second.id
    assert User.query.filter_by(google_id='g-123').count() == 1


def test_find_or_create_distinct_ids(app):
    assert find_or_create('g-1').id != find_or_create('g-2').id


def test_login_redirects_to_google(client):
    """Starting sign-in sends the browser to Google asking for the profile scope."""
    response = client.get('/auth/google')

    assert response.status_code == 302
    location = urlparse(response.headers['Location'])
    assert location.netloc == 'accounts.google.com'
    params = parse_qs(location.query)
    assert params['scope'] == ['profile']
    assert params['client_id'] == ['test-client-id']
    assert params['redirect_uri'] == ['http://localhost/auth/google/secrets']


def test_login_uses_configured_callback(tmp_path):
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'UPLOAD_FOLDER': str(tmp_path),
        'GOOGLE_CLIENT_ID': 'cid',
        'GOOGLE_CLIENT_SECRET': 'csecret',
        'GOOGLE_CALLBACK_URL': 'http://localhost:3000/auth/google/secrets',
    })
    response = app.test_client().get('/auth/google')

    params = parse_qs(urlparse(response.headers['Location']).query)
    assert params['redirect_uri'] == ['http://localhost:3000/auth/google/secrets']


def test_login_without_credentials(tmp_path):
    """Without client credentials the visitor is sent back to the login form."""
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite://',
        'UPLOAD_FOLDER': str(tmp_path),
        'GOOGLE_CLIENT_ID': None,
        'GOOGLE_CLIENT_SECRET': None,
    })
    response = app.test_client().get('/auth/google')

    assert response.headers['Location'] == '/login'


@mock.patch('snaps.oauth.fetch_profile')
def test_callback_creates_and_reuses_user(mock_fetch, client):
    """Two sign-ins with one Google id log into a single local account."""
    mock_fetch.return_value = {'sub': 'g-123', 'name': 'Alice'}

    response = client.get('/auth/google/secrets?code=abc&state=xyz')
    assert response.status_code == 302
    assert response.headers['Location'] == '/secrets'
    with client.session_transaction() as sess:
        first_id = sess['user_id']

    client.get('/logout')
    client.get('/auth/google/secrets?code=def&state=uvw')
    with client.session_transaction() as sess:
        assert sess['user_id'] == first_id
    assert User.query.filter_by(google_id='g-123').count() == 1


@mock.patch('snaps.oauth.fetch_profile')
def test_callback_provider_failure(mock_fetch, client):
    """A provider error sends the visitor to the login form without a session."""
    mock_fetch.side_effect = OAuthError(error='access_denied')

    response = client.get('/auth/google/secrets?error=access_denied')

    assert response.status_code == 302
    assert response.headers['Location'] == '/login'
    with client.session_transaction() as sess:
        assert 'user_id' not in sess
    assert User.query.count() == 0


@mock.patch('snaps.oauth.fetch_profile')
def test_callback_profile_without_id(mock_fetch, client):
    mock_fetch.return_value = {'name': 'Nobody'}

    response = client.get('/auth/google/secrets?code=abc')

    assert response.headers['Location'] == '/login'
    assert User.query.count() == 0


def test_find_or_create_lost_race(app):
    """When another request inserts the account first, its row is returned."""
    existing = find_or_create('g-123')
    existing_id = existing.id
    missed = mock.MagicMock()
    missed.filter_by.return_value.first.return_value = None
    missed.filter_by.return_value.one.return_value = existing
    with mock.patch.object(User, 'query', missed):
        user = find_or_create('g-123')

    assert user.id == existing_id
    missed.filter_by.return_value.one.assert_called_once_with()
    assert User.query.filter_by(google_id='g-123').count() == 1


@mock.patch('snaps.oauth.find_or_create')
@mock.patch('snaps.oauth.fetch_profile')
def test_callback_store_failure(mock_fetch, mock_find, client):
    """A store error while resolving the account sends the visitor to login."""
    mock_fetch.return_value = {'sub': 'g-123'}
    mock_find.side_effect = OperationalError('INSERT', {}, Exception('db down'))

    response = client.get('/auth/google/secrets?code=abc')

    assert response.status_code == 302
    assert response.headers['Location'] == '/login'
    with client.session_transaction() as sess:
        assert 'user_id' not in sess
