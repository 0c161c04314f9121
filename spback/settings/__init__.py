"""
Django settings package for the spback project.

Pick a module with DJANGO_SETTINGS_MODULE (``spback.settings.development``,
``spback.settings.testing`` or ``spback.settings.production``). Importing the
package itself loads development settings.
"""

import os

os.environ.setdefault("DJANGO_SETTINGS_MODULE", "spback.settings.development")

if os.environ["DJANGO_SETTINGS_MODULE"] == "spback.settings":
    from .development import *  # noqa: F403,F401
