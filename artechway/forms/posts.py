from __future__ import annotations

from flask_wtf import FlaskForm
from flask_wtf.file import FileAllowed, FileField
from wtforms import BooleanField, HiddenField, SelectField, StringField, SubmitField, TextAreaField
from wtforms.validators import URL, DataRequired, Length, Optional

NO_CATEGORY = 0


class PostForm(FlaskForm):
    """Create/edit form for a blog post.

    ``generate_content`` is a second submit button: when pressed the view
    fills ``content`` from the title and re-renders instead of saving.
    """
    title = StringField(
        'Title',
        validators=[
            DataRequired(message='Title is required'),
            Length(min=1, max=200, message='Title must be between 1 and 200 characters')
        ],
        render_kw={'placeholder': 'Enter blog post title'}
    )
    content = TextAreaField(
        'Content',
        validators=[Optional()],
        render_kw={'rows': 18, 'placeholder': 'Write in Markdown, or generate a draft from the title'}
    )
    author = StringField(
        'Author',
        validators=[Optional(), Length(max=120)],
    )
    category_id = SelectField(
        'Category',
        coerce=int,
        choices=[],  # Will be populated dynamically
        default=NO_CATEGORY,
    )
    tags = StringField(
        'Tags',
        validators=[Optional(), Length(max=500)],
        render_kw={'placeholder': 'Comma separated, e.g. AI, Web Development'}
    )
    excerpt = TextAreaField(
        'Excerpt',
        validators=[Optional(), Length(max=300, message='Excerpt must be at most 300 characters')],
        render_kw={'placeholder': 'Leave empty to use the first paragraph', 'rows': 3}
    )
    image = FileField(
        'Header Image',
        validators=[FileAllowed(['jpg', 'jpeg', 'png', 'webp'], 'Only image files are allowed!')],
        render_kw={'accept': 'image/*'}
    )
    image_url = StringField(
        'Image URL',
        validators=[Optional(), URL(message='Enter a valid http(s) URL'), Length(max=2048)],
        render_kw={'placeholder': 'https://...'}
    )
    image_hint = StringField(
        'Image Hint',
        validators=[Optional(), Length(max=120)],
        render_kw={'placeholder': 'Two or three words describing the image'}
    )
    ai_generated = HiddenField(default="")
    generate_image = BooleanField('Generate header image with AI')
    generate_content = SubmitField('Generate content')
    submit = SubmitField('Save Post')

    def set_category_choices(self, categories) -> None:
        self.category_id.choices = [(NO_CATEGORY, 'No category')] + [(c.id, c.name) for c in categories]


class DeletePostForm(FlaskForm):
    post_id = HiddenField()
    submit = SubmitField('Delete')
