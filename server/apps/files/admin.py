"""Django admin configuration for files app."""

from typing import Final

from django.contrib import admin
from django.db.models import QuerySet
from django.http import HttpRequest
from django.utils.html import format_html

from server.apps.files.models import File, Folder

_KILOBYTE: Final = 1024


def _format_bytes(size: int) -> str:
    """Format bytes in human-readable format.

    Args:
        size: Size in bytes.

    Returns:
        Formatted size string (e.g., '1.5 MB', '234 KB').
    """
    if size < _KILOBYTE:
        return f'{size} B'
    if size < _KILOBYTE ** 2:
        return f'{size / _KILOBYTE:.1f} KB'
    if size < _KILOBYTE ** 3:
        return f'{size / _KILOBYTE ** 2:.1f} MB'
    return f'{size / _KILOBYTE ** 3:.1f} GB'


class FileInline(admin.TabularInline):
    """Files directly inside a folder."""

    model = File
    fields = ('name', 'mime_type', 'size', 'created_at')
    readonly_fields = fields
    extra = 0
    show_change_link = True


@admin.register(Folder)
class FolderAdmin(admin.ModelAdmin[Folder]):
    """Admin interface for Folder model."""

    list_display = [
        'name',
        'user',
        'parent',
        'color_display',
        'created_at',
    ]

    list_filter = [
        'created_at',
        'user',
    ]

    search_fields = [
        'name',
        'description',
    ]

    raw_id_fields = ['user', 'parent']

    readonly_fields = ['created_at', 'updated_at']

    inlines = [FileInline]

    fieldsets = (
        ('Folder Information', {
            'fields': ('name', 'description', 'color'),
        }),
        ('Placement', {
            'fields': ('user', 'parent'),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
        }),
    )

    def color_display(self, obj: Folder) -> str:
        """Display color swatch with hex code.

        Args:
            obj: Folder instance.

        Returns:
            HTML formatted color swatch and code.
        """
        if obj.color:
            return format_html(
                '<span style="background-color: {color}; '
                'padding: 2px 10px; border: 1px solid #ccc;">'
                '&nbsp;</span> {color}',
                color=obj.color,
            )
        return '-'
    color_display.short_description = 'Color'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[Folder]:
        """Optimize queryset with select_related."""
        return super().get_queryset(request).select_related('user', 'parent')


@admin.register(File)
class FileAdmin(admin.ModelAdmin[File]):
    """Admin interface for File model."""

    list_display = [
        'name',
        'user',
        'folder',
        'size_display',
        'mime_type',
        'created_at',
    ]

    list_filter = [
        'mime_type',
        'created_at',
        'user',
    ]

    search_fields = [
        'name',
        'original_name',
        'storage_key',
    ]

    raw_id_fields = ['user', 'folder']

    # Content lives in object storage; the key is fixed at upload
    readonly_fields = [
        'original_name',
        'mime_type',
        'size',
        'storage_url',
        'storage_key',
        'extension',
        'created_at',
        'updated_at',
    ]

    fieldsets = (
        ('File Information', {
            'fields': ('name', 'description', 'user', 'folder'),
        }),
        ('Storage', {
            'fields': (
                'original_name',
                'mime_type',
                'size',
                'extension',
                'storage_key',
                'storage_url',
            ),
        }),
        ('Metadata', {
            'fields': ('metadata',),
        }),
        ('Timestamps', {
            'fields': ('created_at', 'updated_at'),
        }),
    )

    def size_display(self, obj: File) -> str:
        """Display file size in human-readable format.

        Args:
            obj: File instance.

        Returns:
            Formatted size string.
        """
        return _format_bytes(obj.size)
    size_display.short_description = 'Size'  # type: ignore[attr-defined]

    def get_queryset(self, request: HttpRequest) -> QuerySet[File]:
        """Optimize queryset with select_related."""
        return super().get_queryset(request).select_related('user', 'folder')
