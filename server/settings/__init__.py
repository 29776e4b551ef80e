"""
Main entry point for ``django`` settings.

Settings are split into components and environments with
``django-split-settings``. ``DJANGO_ENV`` selects the environment file,
``development`` is used when it is not set.
"""

from os import environ

import django_stubs_ext
from split_settings.tools import include, optional

# Runtime support for generic admin and manager annotations:
django_stubs_ext.monkeypatch()

# Managing environment via `DJANGO_ENV` variable:
environ.setdefault('DJANGO_ENV', 'development')
_ENV = environ['DJANGO_ENV']

_base_settings = (
    'components/common.py',
    'components/logging.py',
    'components/storages.py',
    'components/auth.py',
    # Select the right env:
    f'environments/{_ENV}.py',
    # Optionally override some settings:
    optional('environments/local.py'),
)

include(*_base_settings)
