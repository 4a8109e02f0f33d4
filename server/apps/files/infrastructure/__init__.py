"""Infrastructure layer for files app.

This package contains integrations with external systems:
- Local filesystem storage backend and the uploads tree layout
- QR code and label PDF rendering
- Zip archives

Keep infrastructure concerns separate from business logic.
"""
