"""JSON representations of folders and files.

Keys are camelCase to match the public API. Timestamps and owner IDs
are left out of the projections returned by create/update endpoints.
"""

from typing import Any

from server.apps.files.models import File, Folder


def _isoformat(instance: File | Folder) -> dict[str, str]:
    return {
        'createdAt': instance.created_at.isoformat(),
        'updatedAt': instance.updated_at.isoformat(),
    }


def _optional_id(value: Any) -> str | None:
    return None if value is None else str(value)


def folder_to_dict(folder: Folder, *, full: bool = False) -> dict[str, Any]:
    """Public projection of a folder.

    Args:
        folder: Folder instance.
        full: Also include owner and timestamps.

    Returns:
        JSON-serializable dict.
    """
    data: dict[str, Any] = {
        'id': str(folder.id),
        'name': folder.name,
        'description': folder.description,
        'color': folder.color,
        'parentId': _optional_id(folder.parent_id),
    }
    if full:
        data['userId'] = str(folder.user_id)
        data.update(_isoformat(folder))
    return data


def file_to_dict(
    file_instance: File,
    *,
    timestamps: bool = True,
    with_folder: bool = False,
) -> dict[str, Any]:
    """Public projection of a file record.

    Args:
        file_instance: File instance.
        timestamps: Include created/updated timestamps.
        with_folder: Embed the containing folder (None at root).

    Returns:
        JSON-serializable dict.
    """
    data: dict[str, Any] = {
        'id': str(file_instance.id),
        'name': file_instance.name,
        'originalName': file_instance.original_name,
        'description': file_instance.description,
        'mimeType': file_instance.mime_type,
        'size': file_instance.size,
        'storageUrl': file_instance.storage_url,
        'storageKey': file_instance.storage_key,
        'extension': file_instance.extension,
        'metadata': file_instance.metadata,
        'userId': str(file_instance.user_id),
        'folderId': _optional_id(file_instance.folder_id),
    }
    if timestamps:
        data.update(_isoformat(file_instance))
    if with_folder:
        folder = file_instance.folder
        data['folder'] = None if folder is None else folder_to_dict(folder)
    return data


def folder_with_contents(folder: Folder, *, full: bool = False) -> dict[str, Any]:
    """Folder with its direct children and files.

    Expects ``children`` and ``files`` to be prefetched.

    Args:
        folder: Folder instance.
        full: Include owner and timestamps of the folder and children.

    Returns:
        JSON-serializable dict.
    """
    data = folder_to_dict(folder, full=full)
    data['children'] = [
        folder_to_dict(child, full=full) for child in folder.children.all()
    ]
    data['files'] = [file_to_dict(item) for item in folder.files.all()]
    return data


def folder_tree_entry(folder: Folder) -> dict[str, Any]:
    """Folder listing entry: files plus a summary of each child.

    Expects ``files`` and ``children__files`` to be prefetched.

    Args:
        folder: Folder instance.

    Returns:
        JSON-serializable dict.
    """
    data = folder_to_dict(folder)
    data['files'] = [file_to_dict(item) for item in folder.files.all()]
    data['children'] = [
        {
            'id': str(child.id),
            'name': child.name,
            'parentId': _optional_id(child.parent_id),
            'userId': str(child.user_id),
            'files': [file_to_dict(item) for item in child.files.all()],
        }
        for child in folder.children.all()
    ]
    return data
