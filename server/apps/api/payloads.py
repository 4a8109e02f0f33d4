"""Uniform access to form, multipart and JSON request bodies."""

import json
from collections.abc import Mapping
from typing import Any, Final, final

from django.core.exceptions import ValidationError
from django.core.files.uploadedfile import UploadedFile
from django.http import HttpRequest, QueryDict
from django.utils.datastructures import MultiValueDict

_JSON_CONTENT_TYPE: Final = 'application/json'
_MULTIPART_CONTENT_TYPE: Final = 'multipart/form-data'


@final
class Payload:
    """Request fields and uploaded files, whatever the body encoding."""

    def __init__(
        self,
        fields: Mapping[str, Any],
        files: MultiValueDict | None = None,
    ) -> None:
        """Initialize payload.

        Args:
            fields: QueryDict for form bodies, dict for JSON bodies.
            files: Uploaded files keyed by field name.
        """
        self._fields = fields
        self._files = files or MultiValueDict()

    def __contains__(self, key: str) -> bool:
        """Whether the client sent this field at all."""
        return key in self._fields

    def get(self, key: str, default: Any = None) -> Any:
        """Get a single field value."""
        return self._fields.get(key, default)

    def getlist(self, key: str) -> list[str]:
        """Get every value of a repeated field (or a JSON list)."""
        if isinstance(self._fields, QueryDict):
            return self._fields.getlist(key)
        value = self._fields.get(key)
        if value is None:
            return []
        if isinstance(value, list):
            return [str(item) for item in value]
        return [str(value)]

    def get_values(self, key: str) -> list[str] | str:
        """Get a field as sent: a string for one value, else a list.

        A repeated form field or a JSON array comes back as a list; a lone
        form value or a JSON string comes back as the string itself.
        """
        if isinstance(self._fields, QueryDict):
            values = self._fields.getlist(key)
            if len(values) == 1:
                return values[0]
            return values
        value = self._fields.get(key)
        if isinstance(value, str):
            return value
        return self.getlist(key)

    def get_id(self, key: str) -> int | None:
        """Get a primary key field as an int.

        Args:
            key: Field name.

        Returns:
            The id, or None when the field is missing or blank.

        Raises:
            ValidationError: If the value is not an integer.
        """
        value = self._fields.get(key)
        if value is None or value == '':
            return None
        if isinstance(value, bool):
            raise ValidationError(f'{key} must be a number')
        try:
            return int(value)
        except (TypeError, ValueError) as error:
            raise ValidationError(f'{key} must be a number') from error

    def file(self, key: str) -> UploadedFile | None:
        """Get an uploaded file."""
        return self._files.get(key)


def parse_payload(request: HttpRequest) -> Payload:
    """Read the body of a POST or PUT request.

    Django only parses POST bodies itself; multipart and form-encoded PUT
    bodies are parsed here the same way.

    Args:
        request: Incoming request.

    Returns:
        Parsed payload.

    Raises:
        ValidationError: If a JSON body is malformed.
    """
    if request.content_type == _JSON_CONTENT_TYPE:
        try:
            fields = json.loads(request.body or b'{}')
        except ValueError as error:
            raise ValidationError('Invalid JSON body') from error
        if not isinstance(fields, dict):
            raise ValidationError('JSON body must be an object')
        return Payload(fields)

    if request.method == 'POST':
        return Payload(request.POST, request.FILES)

    if request.content_type == _MULTIPART_CONTENT_TYPE:
        fields, files = request.parse_file_upload(request.META, request)
        return Payload(fields, files)
    return Payload(QueryDict(request.body, encoding=request.encoding))
