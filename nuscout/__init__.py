"""
nuscout: NuGet registry search and lock-file asset resolution.

Two subsystems make up the library:

- :mod:`nuscout.core.aggregator` searches prioritized NuGet V3 registries,
  falling back from one source to the next, and
  :mod:`nuscout.core.session` drives it from an interactive search box.
- :mod:`nuscout.core.lock_file` turns a ``project.assets.json`` manifest
  into the compile, runtime and analyzer assemblies of one framework.

The ``nuscout`` command in :mod:`nuscout.cli` exposes both.
"""

from nuscout.__version__ import __version__

__all__ = ["__version__"]
