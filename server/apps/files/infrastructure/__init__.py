"""Infrastructure layer for files app.

This package contains integrations with external systems:
- S3-compatible object storage (MinIO/S3/R2)
- Storage key derivation and MIME type detection

Keep infrastructure concerns separate from business logic.
"""
