"""JSON API helpers shared by all apps.

``api_view`` is the single place where domain exceptions are turned
into HTTP responses:

- AuthenticationError -> 401
- PermissionDenied -> 403
- ObjectDoesNotExist -> 404
- ValidationError -> 400
- StorageError -> 502
- FolderHierarchyCorruptedError -> 500
"""

import json
import logging
from collections.abc import Callable, Sequence
from functools import wraps
from http import HTTPStatus
from typing import Any

from django.core.exceptions import (
    ObjectDoesNotExist,
    PermissionDenied,
    ValidationError,
)
from django.forms import Form
from django.http import HttpRequest, HttpResponse, JsonResponse
from django.views.decorators.csrf import csrf_exempt
from django.views.decorators.http import require_http_methods

from server.apps.files.exceptions import (
    FolderHierarchyCorruptedError,
    StorageError,
)
from server.apps.users.exceptions import AuthenticationError

logger = logging.getLogger(__name__)

_View = Callable[..., HttpResponse]


def error_response(
    status: HTTPStatus,
    message: str,
    errors: dict[str, list[str]] | None = None,
) -> JsonResponse:
    """Render an error body.

    Args:
        status: HTTP status to return.
        message: Human readable reason.
        errors: Optional per-field form errors.

    Returns:
        JsonResponse with ``message`` and ``statusCode`` keys.
    """
    body: dict[str, Any] = {'message': message, 'statusCode': status.value}
    if errors:
        body['errors'] = errors
    return JsonResponse(body, status=status)


def _validation_response(error: ValidationError) -> JsonResponse:
    if hasattr(error, 'error_dict'):
        errors = {
            field: [str(message) for message in messages]
            for field, messages in error.message_dict.items()
        }
        return error_response(
            HTTPStatus.BAD_REQUEST,
            'Validation failed',
            errors,
        )
    return error_response(HTTPStatus.BAD_REQUEST, ' '.join(error.messages))


def api_view(methods: Sequence[str]) -> Callable[[_View], _View]:
    """Turn a function into a CSRF-exempt JSON endpoint.

    Args:
        methods: Allowed HTTP methods.

    Returns:
        Decorator mapping domain exceptions to error responses.
    """
    def decorator(view: _View) -> _View:
        @wraps(view)
        def wrapper(
            request: HttpRequest,
            *args: Any,
            **kwargs: Any,
        ) -> HttpResponse:
            try:
                return view(request, *args, **kwargs)
            except AuthenticationError as error:
                return error_response(HTTPStatus.UNAUTHORIZED, error.message)
            except PermissionDenied as error:
                return error_response(
                    HTTPStatus.FORBIDDEN,
                    str(error) or 'Forbidden',
                )
            except ObjectDoesNotExist as error:
                return error_response(
                    HTTPStatus.NOT_FOUND,
                    str(error) or 'Not found',
                )
            except ValidationError as error:
                return _validation_response(error)
            except StorageError as error:
                logger.warning('Storage failure on %s: %s', request.path, error)
                return error_response(HTTPStatus.BAD_GATEWAY, str(error))
            except FolderHierarchyCorruptedError:
                logger.exception('Corrupted folder tree on %s', request.path)
                return error_response(
                    HTTPStatus.INTERNAL_SERVER_ERROR,
                    'Folder hierarchy is corrupted',
                )

        return csrf_exempt(require_http_methods(list(methods))(wrapper))

    return decorator


def parse_json(request: HttpRequest) -> dict[str, Any]:
    """Decode a JSON object request body.

    Args:
        request: Incoming request.

    Returns:
        Decoded object, empty dict for an empty body.

    Raises:
        ValidationError: If the body is not a JSON object.
    """
    if not request.body:
        return {}

    try:
        payload = json.loads(request.body)
    except (UnicodeDecodeError, json.JSONDecodeError) as error:
        raise ValidationError('Request body must be valid JSON') from error

    if not isinstance(payload, dict):
        raise ValidationError('Request body must be a JSON object')
    return payload


def validated(form: Form) -> dict[str, Any]:
    """Return cleaned data of a bound form.

    Args:
        form: Bound form instance.

    Returns:
        ``form.cleaned_data``.

    Raises:
        ValidationError: With per-field errors if the form is invalid.
    """
    if not form.is_valid():
        raise ValidationError(form.errors.as_data())
    return form.cleaned_data


def rename_keys(payload: dict[str, Any], aliases: dict[str, str]) -> dict[str, Any]:
    """Map camelCase wire keys onto form field names.

    Args:
        payload: Raw request payload.
        aliases: Wire key to field name mapping; other keys pass through.

    Returns:
        Payload keyed by form field names.
    """
    return {aliases.get(key, key): value for key, value in payload.items()}


def provided(data: dict[str, Any], cleaned: dict[str, Any]) -> dict[str, Any]:
    """Restrict cleaned data to keys the client actually sent.

    Forms fill every declared field; partial updates must only touch the
    ones present in the request.

    Args:
        data: Request data keyed by form field names.
        cleaned: Cleaned form data.

    Returns:
        Cleaned values for keys present in ``data``.
    """
    return {key: value for key, value in cleaned.items() if key in data}
