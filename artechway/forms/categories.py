from __future__ import annotations

from flask_wtf import FlaskForm
from wtforms import HiddenField, IntegerField, StringField, SubmitField, TextAreaField
from wtforms.validators import DataRequired, Length, NumberRange, Optional


class CategoryForm(FlaskForm):
    name = StringField(
        'Category Name',
        validators=[
            DataRequired(message='Category name is required'),
            Length(min=1, max=80, message='Category name must be between 1 and 80 characters')
        ],
        render_kw={'placeholder': 'e.g. Web Development'}
    )
    description = TextAreaField(
        'Description',
        validators=[
            Optional(),
            Length(max=500, message='Description must be less than 500 characters')
        ],
        render_kw={'placeholder': 'Optional category description', 'rows': 3}
    )
    display_order = IntegerField(
        'Display Order',
        default=0,
        validators=[Optional(), NumberRange(min=0, max=1000)],
    )
    submit = SubmitField('Save Category')


class DeleteCategoryForm(FlaskForm):
    category_id = HiddenField()
    submit = SubmitField('Delete')
