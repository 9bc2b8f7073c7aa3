from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from artechway.utils.slug import slugify
from artechway.utils.text import parse_tags


class PostCreate(BaseModel):
    title: str = Field(min_length=1, max_length=200)
    slug: str | None = Field(default=None, max_length=220)
    content: str = ""
    author_name: str | None = Field(default=None, max_length=120)
    excerpt: str | None = Field(default=None, max_length=300)
    category_id: int | None = None
    tags: list[str] = Field(default_factory=list)
    image_hint: str | None = Field(default=None, max_length=120)
    image_url: str | None = None
    generate_content: bool = False
    generate_image: bool = False

    @field_validator("title")
    @classmethod
    def title_strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("title must not be blank")
        return v

    @field_validator("slug")
    @classmethod
    def slug_lower(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return slugify(v) or None

    @field_validator("tags", mode="before")
    @classmethod
    def split_tags(cls, v):
        # Accept "a, b" as well as ["a", "b"]
        if v is None:
            return []
        if isinstance(v, str):
            return parse_tags(v)
        return parse_tags(",".join(str(t) for t in v))

    @model_validator(mode="after")
    def slug_not_empty(self) -> "PostCreate":
        if not self.resolved_slug():
            raise ValueError("title must contain at least one letter or digit to build a URL")
        return self

    def resolved_slug(self) -> str:
        return self.slug or slugify(self.title)


class PostUpdate(PostCreate):
    pass
