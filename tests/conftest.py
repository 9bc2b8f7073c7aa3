"""Test configuration and fixtures for the Artechway blog."""

import io
from datetime import datetime, timedelta, timezone
from typing import Generator
from unittest.mock import MagicMock, patch

import pytest
from flask import Flask
from flask.testing import FlaskClient
from PIL import Image
from sqlalchemy.pool import StaticPool

from artechway import create_app
from artechway.extensions import db
from artechway.models import Category, Post, Tag, User
from artechway.utils.crypto import hash_password


@pytest.fixture
def app() -> Generator[Flask, None, None]:
    """Create and configure a test Flask application."""
    test_config = {
        'TESTING': True,
        'WTF_CSRF_ENABLED': False,  # Disable CSRF for testing
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SQLALCHEMY_TRACK_MODIFICATIONS': False,
        'SQLALCHEMY_ENGINE_OPTIONS': {
            'poolclass': StaticPool,
            'connect_args': {'check_same_thread': False}
        },
        'DATABASE_FALLBACK': False,
        'SECRET_KEY': 'test-secret-key',
        'SESSION_COOKIE_SECURE': False,
        'RATELIMIT_ENABLED': False,  # Disable rate limiting for tests
        'CACHE_TYPE': 'SimpleCache',
        'CACHE_DEFAULT_TIMEOUT': 300,
        'GEMINI_API_KEY': 'test-gemini-key',
        'AI_ENABLED': True,
        'RELATED_POSTS_STRATEGY': 'category',
        'HTTP_CLIENT_ALLOWED_DOMAINS': [],
    }

    app = create_app(test_config)

    with app.app_context():
        db.create_all()
        yield app

        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app: Flask) -> FlaskClient:
    """Create a test client."""
    return app.test_client()


@pytest.fixture
def runner(app: Flask):
    """Create a test CLI runner."""
    return app.test_cli_runner()


@pytest.fixture
def test_admin_user(app: Flask):
    """Create the single admin account."""
    admin_user = User(
        username='testadmin',
        email='admin@example.com',
        display_name='Test Admin',
        password_hash=hash_password('adminpassword'),
        is_admin=True,
        created_at=datetime.now(timezone.utc)
    )
    db.session.add(admin_user)
    db.session.commit()
    db.session.refresh(admin_user)
    yield admin_user


@pytest.fixture
def test_category(app: Flask):
    """Create a test category."""
    category = Category(
        name='Web Development',
        slug='web-development',
        description='Frontend, backend and everything between',
        display_order=0,
        created_at=datetime.now(timezone.utc)
    )
    db.session.add(category)
    db.session.commit()
    db.session.refresh(category)
    yield category


@pytest.fixture
def test_post(app: Flask, test_category: Category, test_admin_user: User):
    """Create a test blog post with two tags."""
    post = Post(
        title='Test Post',
        slug='test-post',
        author_name='Test Admin',
        content='## Intro\n\nThis is a **test** post body.\n\nSecond paragraph.',
        excerpt='Test post excerpt',
        category_id=test_category.id,
        author_id=test_admin_user.id,
        created_at=datetime.now(timezone.utc)
    )
    post.tags = [Tag(name='AI', slug='ai'), Tag(name='Next.js', slug='nextjs')]
    db.session.add(post)
    db.session.commit()
    db.session.refresh(post)
    yield post


@pytest.fixture
def make_post(app: Flask):
    """Factory for posts with controllable creation time (minutes ago)."""
    def _make(title: str, category: Category | None = None, minutes_ago: int = 0, tags=(), content=None):
        post = Post(
            title=title,
            slug=title.lower().replace(' ', '-'),
            author_name='Writer',
            content=content or f'Body of {title}.',
            excerpt=f'Excerpt of {title}',
            category_id=category.id if category else None,
            created_at=datetime.now(timezone.utc) - timedelta(minutes=minutes_ago),
        )
        for name in tags:
            slug = name.lower().replace(' ', '-')
            tag = db.session.execute(db.select(Tag).filter_by(slug=slug)).scalar_one_or_none()
            post.tags.append(tag or Tag(name=name, slug=slug))
        db.session.add(post)
        db.session.commit()
        return post

    return _make


@pytest.fixture
def authenticated_admin_client(client: FlaskClient, test_admin_user: User) -> FlaskClient:
    """Create a client with an authenticated admin session."""
    with client.session_transaction() as sess:
        sess['_user_id'] = str(test_admin_user.id)
        sess['_fresh'] = True
    return client


@pytest.fixture
def png_bytes() -> bytes:
    """A small valid PNG image."""
    buf = io.BytesIO()
    Image.new('RGB', (40, 30), (120, 80, 200)).save(buf, format='PNG')
    return buf.getvalue()


def _make_ai_response(text=None, image=None, mime="image/png"):
    """Build an object shaped like a google-genai GenerateContentResponse."""
    response = MagicMock()
    response.text = text
    if image is None:
        response.candidates = []
        return response
    part = MagicMock()
    part.inline_data.data = image
    part.inline_data.mime_type = mime
    candidate = MagicMock()
    candidate.content.parts = [part]
    response.candidates = [candidate]
    return response


@pytest.fixture
def ai_response():
    """Factory for fake Gemini responses."""
    return _make_ai_response


@pytest.fixture
def mock_genai():
    """Patch the Gemini client factory; tests set generate_content return values."""
    client = MagicMock()
    with patch('artechway.services.ai.get_client', return_value=client):
        yield client


class AuthActions:
    """Helper class for authentication actions in tests."""

    def __init__(self, client: FlaskClient):
        self._client = client

    def login(self, username: str = 'testadmin', password: str = 'adminpassword'):
        return self._client.post('/auth/login', data={
            'username': username,
            'password': password
        })

    def logout(self):
        return self._client.get('/auth/logout')


@pytest.fixture
def auth(client: FlaskClient) -> AuthActions:
    """Authentication helper fixture."""
    return AuthActions(client)
