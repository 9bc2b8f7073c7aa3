from __future__ import annotations

# Import routes to register them with the blog blueprint
from artechway.blueprints.view.user import home  # noqa: F401
from artechway.blueprints.view.user import blog  # noqa: F401
from artechway.blueprints.view.user import post  # noqa: F401
from artechway.blueprints.view.user import category  # noqa: F401
from artechway.blueprints.view.user import tag  # noqa: F401
from artechway.blueprints.view.user import media  # noqa: F401
