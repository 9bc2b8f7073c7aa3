"""Query and persistence helpers. Views and services import from the submodules."""
