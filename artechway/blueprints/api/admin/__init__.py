from __future__ import annotations

from artechway.blueprints.api.admin import blog  # noqa: F401
from artechway.blueprints.api.admin import ai  # noqa: F401
from artechway.blueprints.api.admin import category  # noqa: F401
