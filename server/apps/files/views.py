"""JSON endpoints for folders and files.

Each request builds its own storage backend and managers; no client is
shared between requests.
"""

from http import HTTPStatus
from typing import Any
from uuid import UUID

from django.http import HttpRequest, JsonResponse

from server.apps.files.forms import (
    FileMoveForm,
    FileUpdateForm,
    FileUploadForm,
    FolderCreateForm,
    FolderUpdateForm,
)
from server.apps.files.infrastructure.metadata import detect_mime_type
from server.apps.files.infrastructure.storage import build_storage
from server.apps.files.logic.file_operations import FileManager
from server.apps.files.logic.folder_operations import FolderManager
from server.apps.files.serializers import (
    file_to_dict,
    folder_to_dict,
    folder_tree_entry,
    folder_with_contents,
)
from server.apps.users.decorators import jwt_required
from server.common.api import (
    api_view,
    parse_json,
    provided,
    rename_keys,
    validated,
)

_FOLDER_ALIASES = {'parentId': 'parent_id'}
_FILE_ALIASES = {'folderId': 'folder_id'}


def _folders() -> FolderManager:
    return FolderManager(build_storage())


def _files() -> FileManager:
    return FileManager(build_storage())


def _json_list(items: list[dict[str, Any]]) -> JsonResponse:
    return JsonResponse(items, safe=False)


# Folders


@api_view(['POST'])
@jwt_required
def create_folder(request: HttpRequest) -> JsonResponse:
    """Create a folder at the root or under a parent."""
    data = validated(
        FolderCreateForm(rename_keys(parse_json(request), _FOLDER_ALIASES)),
    )
    folder = _folders().create(
        name=data['name'],
        owner_id=request.user.id,
        description=data['description'],
        color=data['color'],
        parent_id=data['parent_id'],
    )
    return JsonResponse(folder_to_dict(folder), status=HTTPStatus.CREATED)


@api_view(['GET'])
@jwt_required
def list_folders(request: HttpRequest) -> JsonResponse:
    """List all folders of the caller."""
    folders = _folders().find_all(request.user.id)
    return _json_list([folder_tree_entry(folder) for folder in folders])


@api_view(['GET'])
@jwt_required
def list_root_folders(request: HttpRequest) -> JsonResponse:
    """List the caller's folders without parent."""
    folders = _folders().find_root_folders(request.user.id)
    return _json_list([
        folder_with_contents(folder, full=True) for folder in folders
    ])


@api_view(['GET', 'PUT', 'DELETE'])
@jwt_required
def folder_detail(request: HttpRequest, folder_id: UUID) -> JsonResponse:
    """Get, update or delete one folder."""
    manager = _folders()

    if request.method == 'PUT':
        payload = rename_keys(parse_json(request), _FOLDER_ALIASES)
        patch = provided(payload, validated(FolderUpdateForm(payload)))
        folder = manager.update(folder_id, patch, request.user.id)
        return JsonResponse(folder_to_dict(folder))

    if request.method == 'DELETE':
        manager.delete(folder_id, request.user.id)
        return JsonResponse({'message': 'Folder deleted successfully'})

    folder = manager.find_by_id(folder_id, request.user.id)
    return JsonResponse(folder_with_contents(folder))


# Files


@api_view(['POST'])
@jwt_required
def upload_file(request: HttpRequest) -> JsonResponse:
    """Upload multipart ``file`` to the root or to ``folderId``."""
    fields = rename_keys(
        {**request.GET.dict(), **request.POST.dict()},
        _FILE_ALIASES,
    )
    data = validated(FileUploadForm(fields, request.FILES))
    uploaded = data['file']

    file_instance = _files().upload_file(
        content=uploaded.read(),
        original_name=uploaded.name,
        mime_type=uploaded.content_type or detect_mime_type(uploaded.name),
        owner_id=request.user.id,
        folder_id=data['folder_id'],
        description=data['description'],
    )
    return JsonResponse(
        file_to_dict(file_instance, timestamps=False),
        status=HTTPStatus.CREATED,
    )


@api_view(['GET'])
@jwt_required
def list_files(request: HttpRequest) -> JsonResponse:
    """List all files of the caller."""
    files = _files().find_all(request.user.id)
    return _json_list([file_to_dict(item, with_folder=True) for item in files])


@api_view(['GET'])
@jwt_required
def list_root_files(request: HttpRequest) -> JsonResponse:
    """List the caller's files that are in no folder."""
    files = _files().find_root_files(request.user.id)
    return _json_list([file_to_dict(item, with_folder=True) for item in files])


@api_view(['GET'])
@jwt_required
def list_folder_files(request: HttpRequest, folder_id: UUID) -> JsonResponse:
    """List files directly inside a folder."""
    files = _files().find_by_folder(folder_id, request.user.id)
    return _json_list([file_to_dict(item, with_folder=True) for item in files])


@api_view(['GET', 'PUT', 'DELETE'])
@jwt_required
def file_detail(request: HttpRequest, file_id: UUID) -> JsonResponse:
    """Get, update or delete one file."""
    manager = _files()

    if request.method == 'PUT':
        payload = rename_keys(parse_json(request), _FILE_ALIASES)
        patch = provided(payload, validated(FileUpdateForm(payload)))
        file_instance = manager.update(file_id, patch, request.user.id)
        return JsonResponse(file_to_dict(file_instance, timestamps=False))

    if request.method == 'DELETE':
        manager.delete(file_id, request.user.id)
        return JsonResponse({'message': 'File deleted successfully'})

    file_instance = manager.find_by_id(file_id, request.user.id)
    return JsonResponse(file_to_dict(file_instance))


@api_view(['GET'])
@jwt_required
def download_url(request: HttpRequest, file_id: UUID) -> JsonResponse:
    """Return a presigned download URL for a file."""
    url = _files().generate_download_url(file_id, request.user.id)
    return JsonResponse({'downloadUrl': url})


@api_view(['PUT'])
@jwt_required
def move_file(request: HttpRequest, file_id: UUID) -> JsonResponse:
    """Move a file to ``folderId``, or to the root when it is absent."""
    payload = rename_keys(parse_json(request), _FILE_ALIASES)
    data = validated(FileMoveForm(payload))
    _files().move_to_folder(file_id, data['folder_id'], request.user.id)
    return JsonResponse({'message': 'File moved successfully'})
