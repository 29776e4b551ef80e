"""Database models for users app."""

import uuid
from typing import Any, ClassVar, Final, final

from django.contrib.auth.models import (
    AbstractBaseUser,
    BaseUserManager,
    PermissionsMixin,
)
from django.db import models
from typing_extensions import override

_NAME_MAX_LENGTH: Final = 255


class UserManager(BaseUserManager):
    """Manager creating email-keyed users."""

    use_in_migrations = True

    def create_user(
        self,
        email: str,
        password: str | None = None,
        **extra_fields: Any,
    ) -> 'User':
        """Create a user with a hashed password.

        Args:
            email: Login email, must be unique.
            password: Raw password, hashed before saving.
            **extra_fields: Other model fields (``name``, flags).

        Returns:
            Created User instance.

        Raises:
            ValueError: If email is empty.
        """
        if not email:
            raise ValueError('Email is required')

        user = self.model(email=self.normalize_email(email), **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(
        self,
        email: str,
        password: str | None = None,
        **extra_fields: Any,
    ) -> 'User':
        """Create a user with admin access."""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        return self.create_user(email, password, **extra_fields)


@final
class User(AbstractBaseUser, PermissionsMixin):
    """Registered account owning folders and files.

    Email is the login identifier. The password column stores the
    Django password hash, never the raw value.
    """

    id = models.UUIDField(
        primary_key=True,
        default=uuid.uuid4,
        editable=False,
    )

    email = models.EmailField(unique=True)

    name = models.CharField(max_length=_NAME_MAX_LENGTH)

    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects: ClassVar[UserManager] = UserManager()

    USERNAME_FIELD = 'email'
    EMAIL_FIELD = 'email'
    REQUIRED_FIELDS: ClassVar[list[str]] = ['name']

    class Meta:
        """Model metadata."""

        verbose_name = 'User'  # type: ignore[mutable-override]
        verbose_name_plural = 'Users'  # type: ignore[mutable-override]
        ordering: ClassVar[list[str]] = ['email']

    @override
    def __str__(self) -> str:
        """String representation."""
        return self.email
