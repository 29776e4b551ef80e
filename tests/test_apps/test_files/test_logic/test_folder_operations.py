"""Tests for folder hierarchy business logic."""

import uuid

import pytest
from django.core.exceptions import PermissionDenied, ValidationError

from server.apps.files.exceptions import (
    FolderHierarchyCorruptedError,
    StorageError,
)
from server.apps.files.logic import folder_operations
from server.apps.files.models import File, Folder


@pytest.fixture
def chain(user, folder_manager):
    """Folders A -> B -> C, each the parent of the next."""
    folder_a = folder_manager.create('A', user.id)
    folder_b = folder_manager.create('B', user.id, parent_id=folder_a.id)
    folder_c = folder_manager.create('C', user.id, parent_id=folder_b.id)
    return folder_a, folder_b, folder_c


@pytest.mark.django_db
def test_create_root_folder(user, folder_manager):
    """Test folder without parent is created at the root."""
    folder = folder_manager.create(
        'Documents',
        user.id,
        description='Work',
        color='#3B82F6',
    )

    assert folder.parent_id is None
    assert folder.user_id == user.id
    assert folder.color == '#3B82F6'
    assert folder.is_root


@pytest.mark.django_db
def test_create_with_parent(user, folder_manager):
    """Test folder is created under an owned parent."""
    parent = folder_manager.create('Parent', user.id)

    child = folder_manager.create('Child', user.id, parent_id=parent.id)

    assert child.parent_id == parent.id


@pytest.mark.django_db
def test_create_with_missing_parent(user, folder_manager):
    """Test unknown parent is reported as not found."""
    with pytest.raises(Folder.DoesNotExist, match='Parent folder not found'):
        folder_manager.create('Child', user.id, parent_id=uuid.uuid4())

    assert Folder.objects.count() == 0


@pytest.mark.django_db
def test_create_under_foreign_parent(user, other_user, folder_manager):
    """Test parent of another user is forbidden."""
    foreign = folder_manager.create('Theirs', other_user.id)

    with pytest.raises(PermissionDenied):
        folder_manager.create('Mine', user.id, parent_id=foreign.id)

    assert not Folder.objects.filter(user=user).exists()


@pytest.mark.django_db
def test_update_fields(user, folder_manager):
    """Test rename and recolor keep untouched fields."""
    folder = folder_manager.create('Old', user.id, description='Keep me')

    updated = folder_manager.update(
        folder.id,
        {'name': 'New', 'color': '#000000'},
        user.id,
    )

    updated.refresh_from_db()
    assert updated.name == 'New'
    assert updated.color == '#000000'
    assert updated.description == 'Keep me'


@pytest.mark.django_db
def test_update_self_parent(user, folder_manager):
    """Test folder cannot become its own parent."""
    folder = folder_manager.create('Loop', user.id)

    with pytest.raises(ValidationError, match='Folder cannot be its own parent'):
        folder_manager.update(folder.id, {'parent_id': folder.id}, user.id)


@pytest.mark.django_db
def test_update_circular_reference(user, folder_manager, chain):
    """Test moving A under its grandchild C is rejected."""
    folder_a, _, folder_c = chain

    with pytest.raises(ValidationError, match='Cannot create circular reference'):
        folder_manager.update(folder_a.id, {'parent_id': folder_c.id}, user.id)

    folder_a.refresh_from_db()
    assert folder_a.parent_id is None


@pytest.mark.django_db
def test_update_move_to_sibling_branch(user, folder_manager, chain):
    """Test moving C under A is allowed."""
    folder_a, _, folder_c = chain

    moved = folder_manager.update(
        folder_c.id,
        {'parent_id': folder_a.id},
        user.id,
    )

    assert moved.parent_id == folder_a.id


@pytest.mark.django_db
def test_update_move_to_root(user, folder_manager, chain):
    """Test null parent moves the folder to the root."""
    _, folder_b, _ = chain

    folder_manager.update(folder_b.id, {'parent_id': None}, user.id)

    folder_b.refresh_from_db()
    assert folder_b.parent_id is None
    root_names = {
        folder.name for folder in folder_manager.find_root_folders(user.id)
    }
    assert root_names == {'A', 'B'}


@pytest.mark.django_db
def test_update_foreign_folder(user, other_user, folder_manager):
    """Test updating another user's folder is forbidden."""
    foreign = folder_manager.create('Theirs', other_user.id)

    with pytest.raises(PermissionDenied):
        folder_manager.update(foreign.id, {'name': 'Mine'}, user.id)


@pytest.mark.django_db
def test_update_missing_folder(user, folder_manager):
    """Test updating unknown folder is reported as not found."""
    with pytest.raises(Folder.DoesNotExist, match='Folder not found'):
        folder_manager.update(uuid.uuid4(), {'name': 'Nope'}, user.id)


@pytest.mark.django_db
def test_update_detects_corrupted_loop(user, folder_manager, chain):
    """Test a stored parent loop stops the walk instead of spinning."""
    folder_a, _, folder_c = chain
    # Loop A -> B -> C -> A written around the application checks
    Folder.objects.filter(id=folder_a.id).update(parent_id=folder_c.id)
    outsider = folder_manager.create('Outsider', user.id)

    with pytest.raises(FolderHierarchyCorruptedError):
        folder_manager.update(
            outsider.id,
            {'parent_id': folder_c.id},
            user.id,
        )


@pytest.mark.django_db
def test_update_depth_limit(user, folder_manager, chain, monkeypatch):
    """Test chains longer than the depth limit are treated as corrupted."""
    _, _, folder_c = chain
    outsider = folder_manager.create('Outsider', user.id)
    monkeypatch.setattr(folder_operations, 'MAX_FOLDER_DEPTH', 2)

    with pytest.raises(FolderHierarchyCorruptedError):
        folder_manager.update(
            outsider.id,
            {'parent_id': folder_c.id},
            user.id,
        )


@pytest.mark.django_db
def test_delete_cascades_subtree(
    user,
    folder_manager,
    file_manager,
    chain,
    bucket,
    django_capture_on_commit_callbacks,
):
    """Test deleting A removes B, C, their files and stored objects."""
    folder_a, folder_b, folder_c = chain
    kept = folder_manager.create('Kept', user.id)
    file_manager.upload_file(b'b', 'b.txt', 'text/plain', user.id, folder_b.id)
    file_manager.upload_file(b'c', 'c.txt', 'text/plain', user.id, folder_c.id)
    kept_file = file_manager.upload_file(
        b'k',
        'k.txt',
        'text/plain',
        user.id,
        kept.id,
    )

    with django_capture_on_commit_callbacks(execute=True):
        folder_manager.delete(folder_a.id, user.id)

    assert list(Folder.objects.values_list('id', flat=True)) == [kept.id]
    assert list(File.objects.values_list('id', flat=True)) == [kept_file.id]
    stored_keys = [summary.key for summary in bucket.objects.all()]
    assert stored_keys == [kept_file.storage_key]


@pytest.mark.django_db
def test_delete_survives_storage_failure(
    user,
    folder_manager,
    file_manager,
    storage,
    monkeypatch,
    django_capture_on_commit_callbacks,
):
    """Test records are removed even when purging objects fails."""
    folder = folder_manager.create('Doomed', user.id)
    file_manager.upload_file(b'x', 'x.txt', 'text/plain', user.id, folder.id)

    def failing_delete(name):
        raise StorageError('delete', name)

    monkeypatch.setattr(storage, 'delete', failing_delete)

    with django_capture_on_commit_callbacks(execute=True):
        folder_manager.delete(folder.id, user.id)

    assert not Folder.objects.exists()
    assert not File.objects.exists()


@pytest.mark.django_db
def test_delete_foreign_folder(user, other_user, folder_manager):
    """Test deleting another user's folder is forbidden."""
    foreign = folder_manager.create('Theirs', other_user.id)

    with pytest.raises(PermissionDenied):
        folder_manager.delete(foreign.id, user.id)

    assert Folder.objects.filter(id=foreign.id).exists()


@pytest.mark.django_db
def test_find_by_id(user, folder_manager, file_manager, chain):
    """Test folder is returned with direct children and files."""
    folder_a, folder_b, _ = chain
    file_manager.upload_file(b'a', 'a.txt', 'text/plain', user.id, folder_a.id)

    found = folder_manager.find_by_id(folder_a.id, user.id)

    assert [child.id for child in found.children.all()] == [folder_b.id]
    assert [item.name for item in found.files.all()] == ['a.txt']


@pytest.mark.django_db
def test_find_all_is_scoped_to_owner(user, other_user, folder_manager, chain):
    """Test listings only contain the owner's folders."""
    folder_manager.create('Theirs', other_user.id)

    names = {folder.name for folder in folder_manager.find_all(user.id)}
    roots = [folder.name for folder in folder_manager.find_root_folders(user.id)]

    assert names == {'A', 'B', 'C'}
    assert roots == ['A']


@pytest.mark.django_db
def test_create_below_depth_limit(user, folder_manager, chain, monkeypatch):
    """Test a folder one level past the depth limit is rejected."""
    _, folder_b, folder_c = chain
    monkeypatch.setattr(folder_operations, 'MAX_FOLDER_DEPTH', 3)

    with pytest.raises(ValidationError, match='Folder tree is too deep'):
        folder_manager.create('D', user.id, parent_id=folder_c.id)

    sibling = folder_manager.create('C2', user.id, parent_id=folder_b.id)
    assert sibling.parent_id == folder_b.id
    assert not Folder.objects.filter(name='D').exists()


@pytest.mark.django_db
def test_reparent_past_depth_limit(user, folder_manager, chain, monkeypatch):
    """Test a move that pushes the subtree past the limit is rejected."""
    folder_a, folder_b, _ = chain
    branch = folder_manager.create('X', user.id)
    folder_manager.create('Y', user.id, parent_id=branch.id)
    monkeypatch.setattr(folder_operations, 'MAX_FOLDER_DEPTH', 3)

    with pytest.raises(ValidationError, match='Folder tree is too deep'):
        folder_manager.update(branch.id, {'parent_id': folder_b.id}, user.id)

    branch.refresh_from_db()
    assert branch.parent_id is None

    moved = folder_manager.update(
        branch.id,
        {'parent_id': folder_a.id},
        user.id,
    )
    assert moved.parent_id == folder_a.id


@pytest.mark.django_db
def test_delete_tree_at_depth_limit(
    user,
    folder_manager,
    chain,
    monkeypatch,
    django_capture_on_commit_callbacks,
):
    """Test a tree exactly as deep as the limit is deleted whole."""
    folder_a, _, _ = chain
    monkeypatch.setattr(folder_operations, 'MAX_FOLDER_DEPTH', 3)

    with django_capture_on_commit_callbacks(execute=True):
        folder_manager.delete(folder_a.id, user.id)

    assert not Folder.objects.exists()


@pytest.mark.django_db
def test_update_into_foreign_parent(user, other_user, folder_manager):
    """Test reparenting under another user's folder is forbidden."""
    folder = folder_manager.create('Mine', user.id)
    foreign = folder_manager.create('Theirs', other_user.id)

    with pytest.raises(PermissionDenied, match='Parent folder does not belong'):
        folder_manager.update(folder.id, {'parent_id': foreign.id}, user.id)

    folder.refresh_from_db()
    assert folder.parent_id is None
