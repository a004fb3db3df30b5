"""
High-level use cases for the fauna API.

Each service module orchestrates repositories/adapters to implement business
rules (store an upload, publish a fact-sheet, list convocatorias, etc.).

Routers (FastAPI endpoints) call these services instead of manipulating the
JSON files directly.
"""
