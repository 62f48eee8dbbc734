"""
Catalog backend package.

Products and tasks exposed over a FastAPI HTTP interface, each backed by an
in-memory or SQLite repository. Build an application with
``catalog_api.main.create_app`` or serve the module-level ``catalog_api.main:app``.
"""
