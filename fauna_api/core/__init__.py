"""
Core utilities shared across the fauna API.

This package hosts:
- configuration helpers (env vars, storage paths, limits)
- the error taxonomy and its FastAPI handlers
- cross-cutting HTTP helpers (middlewares, rate limiting, password hashing)

Routers and services depend on these primitives instead of reading the
environment or building error responses themselves.
"""
