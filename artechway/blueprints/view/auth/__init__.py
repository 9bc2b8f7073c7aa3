from __future__ import annotations

from artechway.blueprints.view.auth import login  # noqa: F401
from artechway.blueprints.view.auth import logout  # noqa: F401
