"""Infrastructure layer for users app.

Token signing and verification live here, separate from the
registration and login rules in ``logic``.
"""
