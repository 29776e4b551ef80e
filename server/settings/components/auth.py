"""Authentication settings: bearer tokens for the JSON API."""

from server.settings.components import config

# HS256 keys must be at least 32 bytes long
JWT_SECRET = config(
    'JWT_SECRET',
    default='insecure-development-jwt-secret-change-me',
)
JWT_ALGORITHM = 'HS256'

# Token lifetime in seconds (one day by default)
JWT_EXPIRES_IN = config('JWT_EXPIRES_IN', cast=int, default=86400)

AUTH_PASSWORD_VALIDATORS = [
    {
        'NAME': 'django.contrib.auth.password_validation.MinimumLengthValidator',
        'OPTIONS': {'min_length': 6},
    },
]
