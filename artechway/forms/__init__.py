from __future__ import annotations

# Re-export common forms for convenience
from .auth import LoginForm  # noqa: F401
from .categories import CategoryForm, DeleteCategoryForm  # noqa: F401
from .comments import CommentForm  # noqa: F401
from .posts import DeletePostForm, PostForm  # noqa: F401

__all__ = [
    # auth
    "LoginForm",
    # categories
    "CategoryForm",
    "DeleteCategoryForm",
    # comments
    "CommentForm",
    # posts
    "PostForm",
    "DeletePostForm",
]
