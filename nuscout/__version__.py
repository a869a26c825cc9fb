"""Single source of truth for the nuscout version.

Packaging metadata in ``pyproject.toml`` must be kept in step with
``__version__``.
"""

__version__ = "0.1.0.dev0"
