from django.urls import path

from server.apps.files import views

app_name = 'files'

urlpatterns = [
    # Folders
    path('folder/create', views.create_folder, name='folder_create'),
    path('folder/all', views.list_folders, name='folder_all'),
    path('folder/root', views.list_root_folders, name='folder_root'),
    path('folder/<uuid:folder_id>', views.folder_detail, name='folder_detail'),

    # Files
    path('files', views.list_files, name='file_list'),
    path('files/upload', views.upload_file, name='file_upload'),
    path('files/root', views.list_root_files, name='file_root'),
    path(
        'files/folder/<uuid:folder_id>',
        views.list_folder_files,
        name='file_folder_list',
    ),
    path('files/<uuid:file_id>', views.file_detail, name='file_detail'),
    path(
        'files/<uuid:file_id>/download-url',
        views.download_url,
        name='file_download_url',
    ),
    path('files/<uuid:file_id>/move', views.move_file, name='file_move'),
]
