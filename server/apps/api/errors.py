"""Translation of domain exceptions into JSON error responses."""

import functools
import logging
from collections.abc import Callable
from http import HTTPStatus
from typing import Any

from django.core.exceptions import ObjectDoesNotExist, ValidationError
from django.db import DatabaseError
from django.http import HttpRequest, HttpResponse, JsonResponse

from server.apps.files.exceptions import (
    LabelGenerationError,
    NameConflictError,
    StorageOperationError,
)

logger = logging.getLogger(__name__)

View = Callable[..., HttpResponse]


def error_response(
    message: str,
    status: HTTPStatus,
    errors: dict[str, str] | None = None,
) -> JsonResponse:
    """Build the ``{"error": ...}`` body used by every failing endpoint.

    Args:
        message: Human readable message.
        status: HTTP status.
        errors: Optional per-name details (conflicts).

    Returns:
        JSON response.
    """
    body: dict[str, Any] = {'error': message}
    if errors:
        body['errors'] = errors
    return JsonResponse(body, status=status)


def json_errors(view: View) -> View:
    """Map domain exceptions raised by a view to HTTP error responses.

    NotFound -> 404, NameConflictError -> 409, ValidationError -> 400,
    storage, rendering and database failures -> 500.
    """

    @functools.wraps(view)
    def wrapper(
        request: HttpRequest,
        *args: Any,
        **kwargs: Any,
    ) -> HttpResponse:
        try:
            return view(request, *args, **kwargs)
        except ObjectDoesNotExist as error:
            return error_response(
                str(error) or 'Not found',
                HTTPStatus.NOT_FOUND,
            )
        except NameConflictError as error:
            return error_response(str(error), HTTPStatus.CONFLICT, error.errors)
        except ValidationError as error:
            return error_response(
                ' '.join(error.messages),
                HTTPStatus.BAD_REQUEST,
            )
        except (
            LabelGenerationError,
            StorageOperationError,
            OSError,
            DatabaseError,
        ) as error:
            logger.exception(
                'Request failed: %s %s',
                request.method,
                request.path,
            )
            return error_response(str(error), HTTPStatus.INTERNAL_SERVER_ERROR)

    return wrapper
