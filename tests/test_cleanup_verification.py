"""
Test to verify that test data is properly cleaned up after tests complete.
This ensures no test data persists in the database.
"""

from sqlalchemy import text

from artechway.extensions import db
from artechway.models import User

TABLES = ('users', 'categories', 'tags', 'posts', 'post_tags', 'comments')


def _count(table):
    return db.session.execute(text(f"SELECT COUNT(*) FROM {table}")).scalar()


class TestDatabaseCleanup:
    """Test cases to verify database cleanup after tests."""

    def test_database_starts_empty(self, app):
        """Verify database starts empty for each test."""
        for table in TABLES:
            assert _count(table) == 0, f"{table} should be empty"

    def test_create_and_verify_cleanup(self, app, test_post):
        """Data created by fixtures exists during the test."""
        assert _count('users') == 1
        assert _count('posts') == 1
        assert _count('post_tags') == 2

    def test_database_cleaned_after_previous_test(self, app):
        """Verify database was cleaned after the previous test."""
        for table in TABLES:
            assert _count(table) == 0, "Database should be cleaned between tests"

    def test_no_admin_user_persists(self, app):
        """The admin fixture does not leak into later tests."""
        assert db.session.execute(db.select(User).filter_by(username='testadmin')).scalar_one_or_none() is None
