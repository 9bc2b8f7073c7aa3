from __future__ import annotations

from pydantic import BaseModel, Field, field_validator, model_validator

from artechway.utils.slug import slugify


class CategoryCreate(BaseModel):
    name: str = Field(min_length=1, max_length=80)
    slug: str | None = Field(default=None, max_length=120)
    description: str | None = None
    display_order: int = 0

    @field_validator("name")
    @classmethod
    def name_strip(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name must not be blank")
        return v

    @field_validator("slug")
    @classmethod
    def slug_lower(cls, v: str | None) -> str | None:
        if v is None:
            return None
        return slugify(v) or None

    @model_validator(mode="after")
    def slug_not_empty(self) -> "CategoryCreate":
        if not self.resolved_slug():
            raise ValueError("name must contain at least one letter or digit to build a URL")
        return self

    def resolved_slug(self) -> str:
        return self.slug or slugify(self.name)


class CategoryUpdate(CategoryCreate):
    pass
