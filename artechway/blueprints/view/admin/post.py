from __future__ import annotations

from flask import current_app, flash, redirect, render_template, request, url_for
from flask_login import current_user
from pydantic import ValidationError

from artechway.decorators import admin_required
from artechway.forms.posts import NO_CATEGORY, DeletePostForm, PostForm
from artechway.repositories.blog import (
    create_post,
    delete_post,
    get_post_by_hex_id,
    list_categories,
    list_posts,
    update_post,
)
from artechway.schemas.ai import GenerateBlogPostInput
from artechway.schemas.posts import PostCreate, PostUpdate
from artechway.services import ai
from artechway.services.posts import apply_post_image, default_excerpt
from artechway.utils.http_client import RemoteFetchError

from artechway.blueprints.admin import bp


def _fill_generated_content(form: PostForm) -> None:
    """Populate the content field from the title and mark the form as AI-assisted."""
    try:
        result = ai.generate_blog_post(GenerateBlogPostInput(title=form.title.data.strip()))
    except ai.AIError as e:
        current_app.logger.warning(f"Content generation failed: {e}")
        flash(f"Could not generate content: {e}", "error")
        return
    form.content.data = result.content
    form.ai_generated.data = "1"
    flash("Draft generated. Review it before saving.", "success")


def _payload_from_form(form: PostForm, schema):
    return schema.model_validate({
        "title": form.title.data,
        "content": form.content.data or "",
        "author_name": (form.author.data or "").strip() or None,
        "excerpt": form.excerpt.data or None,
        "category_id": form.category_id.data or None,
        "tags": form.tags.data or "",
        "image_hint": (form.image_hint.data or "").strip() or None,
        "image_url": (form.image_url.data or "").strip() or None,
        "generate_image": bool(form.generate_image.data),
    })


def _attach_image(post, form: PostForm, payload) -> None:
    try:
        apply_post_image(
            post,
            upload=form.image.data,
            image_url=payload.image_url,
            generate=payload.generate_image,
        )
    except (ValueError, RemoteFetchError, ai.AIError) as e:
        current_app.logger.warning(f"Header image not saved for post {post.hex_id}: {e}")
        flash(f"Post saved but the header image failed: {e}", "warning")


def _render_form(form: PostForm, title: str, action_url: str, post=None):
    return render_template(
        "admin/post_form.html",
        form=form,
        post=post,
        title=title,
        action_url=action_url,
        ai_available=ai.ai_enabled(),
    )


@bp.route("/posts/new", methods=["GET", "POST"])
@admin_required
def post_new():
    """HTML form to create new blog post"""
    form = PostForm()
    form.set_category_choices(list_categories())
    if request.method == "GET":
        form.author.data = current_user.byline or current_app.config["DEFAULT_AUTHOR"]
        form.category_id.data = NO_CATEGORY

    action_url = url_for("admin.post_new")
    if form.validate_on_submit():
        if form.generate_content.data:
            _fill_generated_content(form)
            return _render_form(form, "Create New Blog Post", action_url)
        if not (form.content.data or "").strip():
            flash("Content is required. Write it or generate a draft from the title.", "error")
            return _render_form(form, "Create New Blog Post", action_url)
        try:
            payload = _payload_from_form(form, PostCreate)
            new_post = create_post(
                title=payload.title,
                slug=payload.resolved_slug(),
                content=payload.content,
                author_name=payload.author_name or current_app.config["DEFAULT_AUTHOR"],
                excerpt=default_excerpt(payload.content, payload.excerpt),
                category_id=payload.category_id,
                author_id=current_user.id,
                tag_names=payload.tags,
                image_hint=payload.image_hint,
                ai_generated=form.ai_generated.data == "1",
            )
        except ValidationError as e:
            flash(f"Invalid post data: {e.errors()[0]['msg']}", "error")
            return _render_form(form, "Create New Blog Post", action_url)
        except ValueError as e:
            if str(e) == "slug_conflict":
                flash("A post with this title already exists. Please choose a different title.", "error")
            else:
                flash(f"Error creating post: {str(e)}", "error")
            return _render_form(form, "Create New Blog Post", action_url)

        _attach_image(new_post, form, payload)
        current_app.logger.info(f"Post created: {new_post.slug}")
        flash(f'Blog post "{new_post.title}" created successfully!', "success")
        return redirect(url_for("admin.post_edit", post_hex_id=new_post.hex_id))

    return _render_form(form, "Create New Blog Post", action_url)


@bp.route("/posts/<string:post_hex_id>/edit", methods=["GET", "POST"])
@admin_required
def post_edit(post_hex_id: str):
    """HTML form to edit existing blog post"""
    post = get_post_by_hex_id(post_hex_id)
    if not post:
        flash("Post not found.", "error")
        return redirect(url_for("admin.posts_list"))

    form = PostForm()
    form.set_category_choices(list_categories())
    if request.method == "GET":
        form.title.data = post.title
        form.content.data = post.content
        form.author.data = post.author_name
        form.excerpt.data = post.excerpt
        form.category_id.data = post.category_id or NO_CATEGORY
        form.tags.data = ", ".join(post.tag_names)
        form.image_hint.data = post.image_hint
        form.ai_generated.data = "1" if post.ai_generated else ""

    title = f"Edit: {post.title}"
    action_url = url_for("admin.post_edit", post_hex_id=post.hex_id)
    if form.validate_on_submit():
        if form.generate_content.data:
            _fill_generated_content(form)
            return _render_form(form, title, action_url, post=post)
        if not (form.content.data or "").strip():
            flash("Content is required.", "error")
            return _render_form(form, title, action_url, post=post)
        try:
            payload = _payload_from_form(form, PostUpdate)
            update_post(
                post,
                title=payload.title,
                slug=payload.resolved_slug(),
                content=payload.content,
                author_name=payload.author_name or post.author_name,
                excerpt=default_excerpt(payload.content, payload.excerpt),
                category_id=payload.category_id,
                tag_names=payload.tags,
                image_hint=payload.image_hint,
                ai_generated=form.ai_generated.data == "1",
            )
        except ValidationError as e:
            flash(f"Invalid post data: {e.errors()[0]['msg']}", "error")
            return _render_form(form, title, action_url, post=post)
        except ValueError as e:
            if str(e) == "slug_conflict":
                flash("A post with this title already exists. Please choose a different title.", "error")
            else:
                flash(f"Error updating post: {str(e)}", "error")
            return _render_form(form, title, action_url, post=post)

        _attach_image(post, form, payload)
        flash(f'Blog post "{post.title}" updated successfully!', "success")
        return redirect(url_for("admin.post_edit", post_hex_id=post.hex_id))

    return _render_form(form, title, action_url, post=post)


@bp.route("/posts")
@admin_required
def posts_list():
    """List all blog posts for admin management"""
    page = max(1, request.args.get("page", 1, type=int))
    per_page = 10
    posts, total = list_posts(page=page, per_page=per_page)
    return render_template(
        "admin/posts_list.html",
        posts=posts,
        total=total,
        page=page,
        pages=max(1, (total + per_page - 1) // per_page),
        title="Manage Blog Posts",
        delete_form=DeletePostForm(),
    )


@bp.post("/posts/<string:post_hex_id>/delete")
@admin_required
def post_delete(post_hex_id: str):
    form = DeletePostForm()
    if not form.validate_on_submit():
        flash("Invalid delete request.", "error")
        return redirect(url_for("admin.posts_list"))
    post = get_post_by_hex_id(post_hex_id)
    if not post:
        flash("Post not found.", "error")
        return redirect(url_for("admin.posts_list"))
    title = post.title
    delete_post(post)
    current_app.logger.info(f"Post deleted: {post_hex_id}")
    flash(f'Post "{title}" deleted.', "success")
    return redirect(url_for("admin.posts_list"))
