from __future__ import annotations

from flask_wtf import FlaskForm
from wtforms import StringField, SubmitField, TextAreaField
from wtforms.validators import DataRequired, Length, Optional


class CommentForm(FlaskForm):
    author_name = StringField(
        'Name',
        validators=[Optional(), Length(max=80)],
        render_kw={'placeholder': 'Guest User'}
    )
    content = TextAreaField(
        'Comment',
        validators=[
            DataRequired(message='Comment cannot be empty'),
            Length(min=1, max=2000, message='Comments are limited to 2000 characters')
        ],
        render_kw={'rows': 3, 'placeholder': 'Share your thoughts...'}
    )
    submit = SubmitField('Post Comment')
