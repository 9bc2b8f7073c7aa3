"""Tests for the service layer: authentication, AI flows and post helpers."""

import io
from unittest.mock import patch

import pytest
from google.genai import errors as genai_errors
from werkzeug.datastructures import FileStorage

from artechway.extensions import db
from artechway.repositories.blog import list_all_posts
from artechway.schemas.ai import (
    GenerateBlogImageInput,
    GenerateBlogPostInput,
    SuggestRelatedPostsInput,
)
from artechway.services import ai
from artechway.services.auth import authenticate
from artechway.services.posts import (
    UNCATEGORIZED,
    apply_post_image,
    build_home_sections,
    default_excerpt,
    post_image_url,
    related_posts,
    serialize_post,
)
from artechway.utils.http_client import HTTPClient, RemoteFetchError


def _api_error():
    return genai_errors.APIError(500, {'error': {'code': 500, 'message': 'boom', 'status': 'INTERNAL'}})


class TestAuthenticate:
    """Password login with lockout."""

    def test_success_records_login(self, test_admin_user):
        user, err = authenticate('testadmin', 'adminpassword')
        assert err is None
        assert user is test_admin_user
        assert user.last_login is not None
        assert user.failed_login_attempts == 0

    def test_unknown_user(self, app):
        user, err = authenticate('nobody', 'whatever')
        assert user is None
        assert err == 'Invalid username or password'

    def test_failures_count_down_then_lock(self, test_admin_user):
        _, err = authenticate('testadmin', 'wrong')
        assert err == 'Invalid username or password. 2 attempts remaining before account lockout.'
        _, err = authenticate('testadmin', 'wrong')
        assert '1 attempts remaining' in err
        _, err = authenticate('testadmin', 'wrong')
        assert 'Account has been locked for 15 minutes' in err

        user, err = authenticate('testadmin', 'adminpassword')
        assert user is None
        assert err.startswith('Account locked due to 3 failed login attempts.')
        assert 'try again in' in err

    def test_success_resets_failure_count(self, test_admin_user):
        authenticate('testadmin', 'wrong')
        authenticate('testadmin', 'adminpassword')
        assert test_admin_user.failed_login_attempts == 0


class TestGenerateBlogPost:
    """Text generation flow."""

    def test_returns_content(self, app, mock_genai, ai_response):
        mock_genai.models.generate_content.return_value = ai_response(text='{"content": "# Hello\\n\\nBody"}')
        out = ai.generate_blog_post(GenerateBlogPostInput(title='Hello'))
        assert out.content == '# Hello\n\nBody'
        kwargs = mock_genai.models.generate_content.call_args.kwargs
        assert kwargs['model'] == app.config['AI_TEXT_MODEL']
        assert 'Title: Hello' in kwargs['contents']

    def test_accepts_fenced_json(self, app, mock_genai, ai_response):
        mock_genai.models.generate_content.return_value = ai_response(text='```json\n{"content": "Body"}\n```')
        assert ai.generate_blog_post(GenerateBlogPostInput(title='Hello')).content == 'Body'

    def test_accepts_bare_string(self, app, mock_genai, ai_response):
        mock_genai.models.generate_content.return_value = ai_response(text='"Just text"')
        assert ai.generate_blog_post(GenerateBlogPostInput(title='Hello')).content == 'Just text'

    @pytest.mark.parametrize('text', ['', '{"content": "   "}', 'not json', '{"other": 1}'])
    def test_unusable_output_raises(self, app, mock_genai, ai_response, text):
        mock_genai.models.generate_content.return_value = ai_response(text=text)
        with pytest.raises(ai.GenerationError):
            ai.generate_blog_post(GenerateBlogPostInput(title='Hello'))

    def test_api_error_wrapped(self, app, mock_genai):
        mock_genai.models.generate_content.side_effect = _api_error()
        with pytest.raises(ai.GenerationError, match='AI request failed'):
            ai.generate_blog_post(GenerateBlogPostInput(title='Hello'))

    @pytest.mark.parametrize('exc', [ConnectionError('network down'), TimeoutError('read timed out')])
    def test_transport_error_wrapped(self, app, mock_genai, exc):
        mock_genai.models.generate_content.side_effect = exc
        with pytest.raises(ai.GenerationError, match='AI service unreachable') as excinfo:
            ai.generate_blog_post(GenerateBlogPostInput(title='Hello'))
        assert excinfo.value.__cause__ is exc

    def test_unavailable_without_key(self, app):
        app.config['GEMINI_API_KEY'] = None
        assert ai.ai_enabled() is False
        with pytest.raises(ai.AIUnavailableError):
            ai.generate_blog_post(GenerateBlogPostInput(title='Hello'))

    def test_unavailable_when_disabled(self, app):
        app.config['AI_ENABLED'] = False
        with pytest.raises(ai.AIUnavailableError):
            ai.get_client()


class TestGenerateBlogImage:
    """Image generation flow."""

    def test_returns_bytes_and_data_uri(self, app, mock_genai, ai_response, png_bytes):
        mock_genai.models.generate_content.return_value = ai_response(image=png_bytes)
        out = ai.generate_blog_image(GenerateBlogImageInput(title='Hello', content='About things'))
        assert out.image_data == png_bytes
        assert out.mime_type == 'image/png'
        assert out.image_url.startswith('data:image/png;base64,')
        assert 'Hello' in mock_genai.models.generate_content.call_args.kwargs['contents']

    def test_no_image_raises(self, app, mock_genai, ai_response):
        mock_genai.models.generate_content.return_value = ai_response(text='Sorry, no image')
        with pytest.raises(ai.GenerationError, match='Image generation failed.'):
            ai.generate_blog_image(GenerateBlogImageInput(title='Hello'))


class TestSuggestRelatedPosts:
    """Related-title suggestion flow."""

    def test_filters_unknown_and_duplicate_titles(self, app, mock_genai, ai_response):
        mock_genai.models.generate_content.return_value = ai_response(text='["B", "Unknown", "B", "A"]')
        titles = ai.suggest_related_posts(
            SuggestRelatedPostsInput(current_article_content='x', available_posts=['A', 'B', 'C'])
        )
        assert titles == ['B', 'A']

    def test_truncates_to_limit(self, app, mock_genai, ai_response):
        mock_genai.models.generate_content.return_value = ai_response(text='{"titles": ["A", "B", "C"]}')
        titles = ai.suggest_related_posts(
            SuggestRelatedPostsInput(current_article_content='x', available_posts=['A', 'B', 'C']),
            limit=2,
        )
        assert titles == ['A', 'B']

    def test_empty_available_list_skips_model(self, app, mock_genai):
        titles = ai.suggest_related_posts(SuggestRelatedPostsInput(current_article_content='x', available_posts=[]))
        assert titles == []
        mock_genai.models.generate_content.assert_not_called()

    def test_non_list_output_raises(self, app, mock_genai, ai_response):
        mock_genai.models.generate_content.return_value = ai_response(text='42')
        with pytest.raises(ai.GenerationError):
            ai.suggest_related_posts(SuggestRelatedPostsInput(current_article_content='x', available_posts=['A']))


class TestHomeSections:
    """Home page grouping."""

    def test_empty(self, app):
        sections = build_home_sections([])
        assert sections.is_empty
        assert sections.trending == []
        assert not sections.categories

    def test_featured_trending_and_groups(self, make_post, test_category):
        from artechway.repositories.blog import create_category
        design = create_category(name='Design', slug='design', description=None, display_order=1)
        make_post('P1', category=test_category, minutes_ago=1)
        make_post('P2', minutes_ago=2)
        make_post('P3', minutes_ago=3)
        make_post('P4', minutes_ago=4)
        make_post('P5', category=design, minutes_ago=5)
        make_post('P6', category=test_category, minutes_ago=6)
        make_post('P7', minutes_ago=7)

        sections = build_home_sections(list_all_posts(), category_order=['Web Development', 'AI'])
        assert sections.featured.title == 'P1'
        assert [p.title for p in sections.trending] == ['P2', 'P3', 'P4']
        assert list(sections.categories) == ['Web Development', 'Design', UNCATEGORIZED]
        assert [p.title for p in sections.categories['Web Development']] == ['P6']
        assert [p.title for p in sections.categories[UNCATEGORIZED]] == ['P7']


class TestExcerpt:
    """Excerpt defaults."""

    def test_explicit_excerpt_wins(self):
        assert default_excerpt('Body text', '  Given  ') == 'Given'

    def test_derived_from_content(self):
        assert default_excerpt('## Title\n\nFirst paragraph.\n\nSecond.') == 'First paragraph.'

    def test_empty_content(self):
        assert default_excerpt('') is None


class TestRelatedPosts:
    """Related post strategies."""

    def test_category_strategy(self, make_post, test_category):
        current = make_post('Current', category=test_category, minutes_ago=1)
        make_post('Sibling', category=test_category, minutes_ago=2)
        make_post('Stranger', minutes_ago=3)
        assert [p.title for p in related_posts(current)] == ['Sibling']

    def test_ai_strategy_uses_suggestions_and_caches(self, make_post, test_category, mock_genai, ai_response):
        current = make_post('Current', category=test_category, minutes_ago=1)
        make_post('Sibling', category=test_category, minutes_ago=2)
        make_post('Stranger', minutes_ago=3)
        mock_genai.models.generate_content.return_value = ai_response(text='["Stranger"]')

        assert [p.title for p in related_posts(current, strategy='ai')] == ['Stranger']
        assert [p.title for p in related_posts(current, strategy='ai')] == ['Stranger']
        assert mock_genai.models.generate_content.call_count == 1

    def test_ai_failure_falls_back_to_category(self, make_post, test_category, mock_genai):
        current = make_post('Current', category=test_category, minutes_ago=1)
        make_post('Sibling', category=test_category, minutes_ago=2)
        mock_genai.models.generate_content.side_effect = _api_error()
        assert [p.title for p in related_posts(current, strategy='ai')] == ['Sibling']

    def test_ai_transport_failure_falls_back_to_category(self, make_post, test_category, mock_genai):
        current = make_post('Current', category=test_category, minutes_ago=1)
        make_post('Sibling', category=test_category, minutes_ago=2)
        mock_genai.models.generate_content.side_effect = ConnectionError('network down')
        assert [p.title for p in related_posts(current, strategy='ai')] == ['Sibling']

    def test_ai_unavailable_falls_back_to_category(self, app, make_post, test_category):
        app.config['GEMINI_API_KEY'] = None
        current = make_post('Current', category=test_category, minutes_ago=1)
        make_post('Sibling', category=test_category, minutes_ago=2)
        assert [p.title for p in related_posts(current, strategy='ai')] == ['Sibling']

    def test_ai_empty_suggestions_fall_back(self, make_post, test_category, mock_genai, ai_response):
        current = make_post('Current', category=test_category, minutes_ago=1)
        make_post('Sibling', category=test_category, minutes_ago=2)
        mock_genai.models.generate_content.return_value = ai_response(text='[]')
        assert [p.title for p in related_posts(current, strategy='ai')] == ['Sibling']


class TestPostImages:
    """Header image sources."""

    def test_upload(self, test_post, png_bytes):
        upload = FileStorage(stream=io.BytesIO(png_bytes), filename='header.png', content_type='image/png')
        apply_post_image(test_post, upload=upload)
        assert test_post.image_data
        assert test_post.image_mime == 'image/png'

    def test_invalid_upload_rejected(self, test_post):
        upload = FileStorage(stream=io.BytesIO(b'not an image'), filename='header.png')
        with pytest.raises(ValueError, match='invalid_image'):
            apply_post_image(test_post, upload=upload)
        assert test_post.image_data is None

    def test_remote_url(self, test_post, png_bytes):
        with patch.object(HTTPClient, 'fetch_image', return_value=(png_bytes, 'image/png')) as fetch:
            apply_post_image(test_post, image_url=' https://images.example.com/a.png ')
        assert fetch.call_args.args[0] == 'https://images.example.com/a.png'
        assert test_post.image_mime == 'image/png'

    def test_remote_url_blocked(self, test_post):
        with pytest.raises(RemoteFetchError):
            apply_post_image(test_post, image_url='http://169.254.169.254/latest')

    def test_generate(self, test_post, mock_genai, ai_response, png_bytes):
        mock_genai.models.generate_content.return_value = ai_response(image=png_bytes)
        apply_post_image(test_post, generate=True)
        assert test_post.image_data
        assert test_post.image_mime == 'image/png'

    def test_upload_wins_over_url(self, test_post, png_bytes):
        upload = FileStorage(stream=io.BytesIO(png_bytes), filename='header.png')
        with patch.object(HTTPClient, 'fetch_image') as fetch:
            apply_post_image(test_post, upload=upload, image_url='https://images.example.com/a.png')
        fetch.assert_not_called()

    def test_nothing_to_do(self, test_post):
        assert apply_post_image(test_post) is test_post
        assert test_post.image_data is None

    def test_image_url_placeholder_and_media(self, app, test_post, png_bytes):
        assert post_image_url(test_post) == app.config['PLACEHOLDER_IMAGE_URL']
        test_post.image_data = png_bytes
        test_post.image_mime = 'image/png'
        db.session.commit()
        with app.test_request_context():
            assert post_image_url(test_post).startswith(f'/media/posts/{test_post.hex_id}')


class TestSerializePost:
    """JSON shape used by the API."""

    def test_serialize(self, app, test_post):
        data = serialize_post(test_post)
        assert data['title'] == 'Test Post'
        assert data['tags'] == ['AI', 'Next.js']
        assert data['category'] == {'name': 'Web Development', 'slug': 'web-development'}
        assert 'content' not in data
        assert serialize_post(test_post, include_content=True)['content'].startswith('## Intro')
