"""Business logic layer for files app.

This package contains all business logic for folders and files:
- Folder tree rules: ownership, cycle prevention, cascading delete
- File placement, upload, move, delete and download URLs

All business logic should be implemented here, separate from
models (data layer) and infrastructure (external systems).
"""
