from __future__ import annotations

# Re-export common schema classes for convenient imports
from .ai import (  # noqa: F401
    GenerateBlogImageInput,
    GenerateBlogImageOutput,
    GenerateBlogPostInput,
    GenerateBlogPostOutput,
    SuggestRelatedPostsInput,
)
from .auth import LoginRequest  # noqa: F401
from .categories import CategoryCreate, CategoryUpdate  # noqa: F401
from .posts import PostCreate, PostUpdate  # noqa: F401

__all__ = [
    # ai
    "GenerateBlogImageInput",
    "GenerateBlogImageOutput",
    "GenerateBlogPostInput",
    "GenerateBlogPostOutput",
    "SuggestRelatedPostsInput",
    # auth
    "LoginRequest",
    # categories
    "CategoryCreate",
    "CategoryUpdate",
    # posts
    "PostCreate",
    "PostUpdate",
]
