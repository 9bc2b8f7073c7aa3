from __future__ import annotations

from flask import flash, redirect, render_template, url_for

from artechway.decorators import admin_required
from artechway.forms.categories import CategoryForm, DeleteCategoryForm
from artechway.repositories.blog import (
    create_category,
    delete_category,
    get_category_by_hex_id,
    list_categories,
    update_category,
)
from artechway.utils.slug import slugify

from artechway.blueprints.admin import bp

DUPLICATE_MESSAGE = "A category with this name already exists."
NO_SLUG_MESSAGE = "Category name must contain at least one letter or digit."


def _form_fields(form: CategoryForm) -> dict:
    name = form.name.data.strip()
    return {
        "name": name,
        "slug": slugify(name),
        "description": (form.description.data or "").strip() or None,
        "display_order": form.display_order.data or 0,
    }


def _back_to_list():
    return redirect(url_for("admin.categories_list"))


@bp.route("/categories")
@admin_required
def categories_list():
    return render_template(
        "admin/categories_list.html",
        title="Manage Categories",
        categories=list_categories(),
        delete_form=DeleteCategoryForm(),
    )


@bp.route("/categories/new", methods=["GET", "POST"])
@admin_required
def category_new():
    form = CategoryForm()
    if form.validate_on_submit():
        fields = _form_fields(form)
        if not fields["slug"]:
            flash(NO_SLUG_MESSAGE, "error")
            return render_template("admin/category_form.html", form=form, title="Add New Category")
        try:
            cat = create_category(**fields)
        except ValueError:
            flash(DUPLICATE_MESSAGE, "error")
        else:
            flash(f'Category "{cat.name}" created.', "success")
            return _back_to_list()
    return render_template("admin/category_form.html", form=form, title="Add New Category")


@bp.route("/categories/<string:category_hex_id>/edit", methods=["GET", "POST"])
@admin_required
def category_edit(category_hex_id: str):
    cat = get_category_by_hex_id(category_hex_id)
    if cat is None:
        flash("Category not found.", "error")
        return _back_to_list()

    form = CategoryForm(obj=cat)
    if form.validate_on_submit():
        fields = _form_fields(form)
        if not fields["slug"]:
            flash(NO_SLUG_MESSAGE, "error")
            return render_template("admin/category_form.html", form=form, title=f"Edit Category: {cat.name}")
        try:
            update_category(cat, **fields)
        except ValueError:
            flash(DUPLICATE_MESSAGE, "error")
        else:
            flash(f'Category "{cat.name}" updated.', "success")
            return _back_to_list()
    return render_template("admin/category_form.html", form=form, title=f"Edit Category: {cat.name}")


@bp.post("/categories/<string:category_hex_id>/delete", endpoint="category_delete_view")
@admin_required
def category_delete_view(category_hex_id: str):
    if not DeleteCategoryForm().validate_on_submit():
        flash("Invalid delete request.", "error")
        return _back_to_list()
    cat = get_category_by_hex_id(category_hex_id)
    if cat is None:
        flash("Category not found.", "error")
        return _back_to_list()
    name = cat.name
    delete_category(cat)
    flash(f'Category "{name}" deleted. Its posts are now uncategorized.', "success")
    return _back_to_list()
