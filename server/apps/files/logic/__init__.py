"""Business logic layer for files app.

This package contains all business logic of the organizer:
- Project and section lifecycle (create, rename, delete)
- File upload, update, delete, listing and search
- QR label generation and rename cascades
- Zip exports

All business logic should be implemented here, separate from
models (data layer) and infrastructure (filesystem, rendering).
"""
