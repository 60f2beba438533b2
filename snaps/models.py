from typing import List, NamedTuple, Optional

from flask_sqlalchemy import SQLAlchemy
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from werkzeug.security import generate_password_hash, check_password_hash

db = SQLAlchemy()


class RegistrationError(Exception):
    pass


class UsernameTaken(RegistrationError):
    pass


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(120))
    username = db.Column(db.String(80), unique=True)
    password_hash = db.Column(db.String(255))
    # Set only for accounts created through Google sign-in
    google_id = db.Column(db.String(255), unique=True)
    image = db.Column(db.String(255))

    def check_password(self, password):
        if not self.password_hash:
            return False
        return check_password_hash(self.password_hash, password)

    def __repr__(self):
        return f'<User {self.id} {self.username or self.google_id}>'


class GalleryResult(NamedTuple):
    """Outcome of a gallery lookup: the users on success, a reason on failure."""

    users: List[User]
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def register_user(username: str, password: str, email: Optional[str] = None) -> User:
    """Create a local account with a salted password hash.

    Raises :class:`UsernameTaken` when the username is already registered.
    """
    if not username or not password:
        raise RegistrationError('Username and password are required.')
    if User.query.filter_by(username=username).first():
        raise UsernameTaken(username)
    user = User(username=username, email=email,
                password_hash=generate_password_hash(password))
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError as e:
        # lost a race with a concurrent registration of the same name
        db.session.rollback()
        raise UsernameTaken(username) from e
    return user


def authenticate(username: str, password: str) -> Optional[User]:
    if not username or not password:
        return None
    user = User.query.filter_by(username=username).first()
    if user and user.check_password(password):
        return user
    return None


def find_or_create(google_id: str, email: Optional[str] = None) -> User:
    """Resolve a Google account id to a local user, creating it on first sight."""
    user = User.query.filter_by(google_id=google_id).first()
    if user is not None:
        return user
    user = User(google_id=google_id, email=email)
    db.session.add(user)
    try:
        db.session.commit()
    except IntegrityError:
        db.session.rollback()
        return User.query.filter_by(google_id=google_id).one()
    return user


def list_gallery() -> GalleryResult:
    try:
        users = User.query.filter(User.image.isnot(None)).order_by(User.id).all()
    except SQLAlchemyError as e:
        db.session.rollback()
        return GalleryResult(users=[], error=str(e))
    return GalleryResult(users=users)


def attach_image(user: User, filename: str) -> None:
    user.image = filename
    db.session.commit()
