"""Request validation for registration and login."""

from typing import Final

from django import forms

_NAME_MAX_LENGTH: Final = 255
_PASSWORD_MIN_LENGTH: Final = 6


class RegisterUserForm(forms.Form):
    """Body of POST /user/create."""

    name = forms.CharField(max_length=_NAME_MAX_LENGTH)
    email = forms.EmailField()
    password = forms.CharField(min_length=_PASSWORD_MIN_LENGTH, strip=False)


class LoginForm(forms.Form):
    """Body of POST /auth/login."""

    email = forms.EmailField()
    password = forms.CharField(strip=False)
