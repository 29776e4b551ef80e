"""Request validation for folder and file endpoints."""

from typing import Any, ClassVar, Final

from django import forms
from django.conf import settings
from django.core.files.uploadedfile import UploadedFile

_NAME_MAX_LENGTH: Final = 255
_COLOR_MAX_LENGTH: Final = 32


class _PartialForm(forms.Form):
    """Form whose fields may all be omitted but not blanked."""

    non_blank: ClassVar[tuple[str, ...]] = ()

    def clean(self) -> dict[str, Any]:
        cleaned_data = super().clean()
        for field in self.non_blank:
            if field in self.data and not cleaned_data.get(field):
                self.add_error(field, 'This field may not be blank.')
        return cleaned_data


class FolderCreateForm(forms.Form):
    """Body of POST /folder/create."""

    name = forms.CharField(max_length=_NAME_MAX_LENGTH)
    description = forms.CharField(required=False, empty_value=None)
    color = forms.CharField(
        max_length=_COLOR_MAX_LENGTH,
        required=False,
        empty_value=None,
    )
    parent_id = forms.UUIDField(required=False)


class FolderUpdateForm(_PartialForm):
    """Body of PUT /folder/<id>."""

    non_blank = ('name',)

    name = forms.CharField(max_length=_NAME_MAX_LENGTH, required=False)
    description = forms.CharField(required=False, empty_value=None)
    color = forms.CharField(
        max_length=_COLOR_MAX_LENGTH,
        required=False,
        empty_value=None,
    )
    parent_id = forms.UUIDField(required=False)


class FileUploadForm(forms.Form):
    """Multipart body (and query string) of POST /files/upload."""

    file = forms.FileField(allow_empty_file=True)
    folder_id = forms.UUIDField(required=False)
    description = forms.CharField(required=False, empty_value=None)

    def clean_file(self) -> UploadedFile:
        """Reject files larger than FILE_UPLOAD_MAX_SIZE."""
        uploaded = self.cleaned_data['file']
        if uploaded.size > settings.FILE_UPLOAD_MAX_SIZE:
            raise forms.ValidationError(
                'File exceeds the maximum size of %(limit)d bytes.',
                params={'limit': settings.FILE_UPLOAD_MAX_SIZE},
            )
        return uploaded


class FileUpdateForm(_PartialForm):
    """Body of PUT /files/<id>."""

    non_blank = ('name',)

    name = forms.CharField(max_length=_NAME_MAX_LENGTH, required=False)
    description = forms.CharField(required=False, empty_value=None)
    folder_id = forms.UUIDField(required=False)


class FileMoveForm(forms.Form):
    """Body of PUT /files/<id>/move; a missing folderId means root."""

    folder_id = forms.UUIDField(required=False)
