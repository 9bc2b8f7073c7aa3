"""Request/response payloads for the generative AI flows."""
from __future__ import annotations

from pydantic import BaseModel, Field


class GenerateBlogPostInput(BaseModel):
    title: str = Field(min_length=1, max_length=200, description="The title of the blog post to generate.")


class GenerateBlogPostOutput(BaseModel):
    content: str = Field(description="The generated content of the blog post.")


class GenerateBlogImageInput(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    content: str = ""


class GenerateBlogImageOutput(BaseModel):
    image_url: str = Field(description="The generated image as a data URI.")
    image_data: bytes = Field(repr=False)
    mime_type: str


class SuggestRelatedPostsInput(BaseModel):
    current_article_content: str
    available_posts: list[str] = Field(default_factory=list)
