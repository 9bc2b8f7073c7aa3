"""Generative AI flows backed by Gemini.

Each flow is a thin request/response wrapper: it renders a prompt from a
pydantic input model, calls the model once and validates what comes back.
"""
from __future__ import annotations

import json
import re

import structlog
from flask import current_app
from google import genai
from google.genai import errors as genai_errors
from google.genai import types
from pydantic import ValidationError

from artechway.schemas.ai import (
    GenerateBlogImageInput,
    GenerateBlogImageOutput,
    GenerateBlogPostInput,
    GenerateBlogPostOutput,
    SuggestRelatedPostsInput,
)
from artechway.utils.image import to_data_uri

logger = structlog.get_logger(__name__)

_CLIENT_KEY = "genai_client"
_FENCE = re.compile(r"^```(?:json)?\s*|\s*```$", re.IGNORECASE)


class AIError(Exception):
    """Base class for generative AI failures."""


class AIUnavailableError(AIError):
    """AI is disabled or no API key is configured."""


class GenerationError(AIError):
    """The model call failed or returned nothing usable."""


BLOG_POST_PROMPT = """You are an expert blogger specializing in web development, AI, and social media marketing.

You will generate a blog post based on the title provided. The blog post should be informative, engaging, and well-structured, written in markdown.

Title: {title}

Return a JSON object with a 'content' key holding the blog post."""

BLOG_IMAGE_PROMPT = (
    'Generate a high-quality, visually appealing blog post header image for an article titled "{title}". '
    "The article is about: {summary}... "
    "The image should be abstract and artistic, suitable for a tech blog. "
    "Do not include any text in the image."
)

RELATED_POSTS_PROMPT = """You are a blog post recommendation expert. Given the content of the current article and a list of available blog posts, suggest related articles that the user might find interesting.

Current Article Content:
{content}

Available Blog Posts:
{titles}

Suggest up to {limit} related articles from the available posts. Return only a JSON array of their exact titles."""


def ai_enabled() -> bool:
    cfg = current_app.config
    return bool(cfg.get("AI_ENABLED", True) and cfg.get("GEMINI_API_KEY"))


def get_client() -> genai.Client:
    """Return the Gemini client for the current app, creating it on first use."""
    if not current_app.config.get("AI_ENABLED", True):
        raise AIUnavailableError("AI features are disabled.")
    api_key = current_app.config.get("GEMINI_API_KEY")
    if not api_key:
        raise AIUnavailableError("No Gemini API key configured.")
    client = current_app.extensions.get(_CLIENT_KEY)
    if client is None:
        client = genai.Client(api_key=api_key)
        current_app.extensions[_CLIENT_KEY] = client
    return client


def _parse_json(text: str | None):
    cleaned = _FENCE.sub("", (text or "").strip())
    if not cleaned:
        raise GenerationError("The model returned an empty response.")
    try:
        return json.loads(cleaned)
    except json.JSONDecodeError as e:
        raise GenerationError("The model returned malformed JSON.") from e


def _generate(model: str, prompt: str, config: types.GenerateContentConfig):
    client = get_client()
    try:
        return client.models.generate_content(model=model, contents=prompt, config=config)
    except genai_errors.APIError as e:
        logger.error("ai_call_failed", model=model, status=e.code, error=str(e))
        raise GenerationError(f"AI request failed: {e}") from e
    except Exception as e:
        # Transport and client errors (timeouts, refused connections) surface as AIError too
        logger.error("ai_call_failed", model=model, error_type=type(e).__name__, error=str(e))
        raise GenerationError(f"AI service unreachable: {type(e).__name__}") from e


def generate_blog_post(data: GenerateBlogPostInput) -> GenerateBlogPostOutput:
    """Write a full markdown post body for ``data.title``."""
    model = current_app.config["AI_TEXT_MODEL"]
    logger.info("generate_blog_post", title=data.title, model=model)
    response = _generate(
        model,
        BLOG_POST_PROMPT.format(title=data.title),
        types.GenerateContentConfig(response_mime_type="application/json"),
    )
    payload = _parse_json(response.text)
    if isinstance(payload, str):
        payload = {"content": payload}
    try:
        output = GenerateBlogPostOutput.model_validate(payload)
    except ValidationError as e:
        raise GenerationError("The model response had no content.") from e
    if not output.content.strip():
        raise GenerationError("The model returned empty content.")
    return output


def generate_blog_image(data: GenerateBlogImageInput) -> GenerateBlogImageOutput:
    """Render a header image for a post and return it as bytes plus a data URI."""
    model = current_app.config["AI_IMAGE_MODEL"]
    logger.info("generate_blog_image", title=data.title, model=model)
    prompt = BLOG_IMAGE_PROMPT.format(title=data.title, summary=data.content[:200])
    response = _generate(
        model,
        prompt,
        types.GenerateContentConfig(response_modalities=["TEXT", "IMAGE"]),
    )
    for candidate in response.candidates or []:
        content = candidate.content
        for part in (content.parts if content else None) or []:
            inline = part.inline_data
            if inline and inline.data:
                mime = inline.mime_type or "image/png"
                return GenerateBlogImageOutput(
                    image_url=to_data_uri(inline.data, mime),
                    image_data=inline.data,
                    mime_type=mime,
                )
    logger.warning("generate_blog_image_empty", title=data.title)
    raise GenerationError("Image generation failed.")


def suggest_related_posts(data: SuggestRelatedPostsInput, limit: int = 3) -> list[str]:
    """Pick titles from ``data.available_posts`` related to the current article.

    Only titles that appear verbatim in the available list are returned, in
    the model's order, without duplicates.
    """
    if not data.available_posts:
        return []
    model = current_app.config["AI_TEXT_MODEL"]
    titles = "\n".join(f"- {title}" for title in data.available_posts)
    response = _generate(
        model,
        RELATED_POSTS_PROMPT.format(content=data.current_article_content, titles=titles, limit=limit),
        types.GenerateContentConfig(response_mime_type="application/json"),
    )
    payload = _parse_json(response.text)
    if isinstance(payload, dict):
        payload = payload.get("titles") or payload.get("suggestions") or []
    if not isinstance(payload, list):
        raise GenerationError("The model did not return a list of titles.")

    known = set(data.available_posts)
    picked: list[str] = []
    for item in payload:
        title = str(item).strip()
        if title in known and title not in picked:
            picked.append(title)
    logger.info("suggest_related_posts", available=len(known), suggested=len(picked))
    return picked[:limit]
