"""
Snippet Manager Backend: Application Package
============================================

What: Multi-user code-snippet manager (snippets, tags, folders) over HTTP.
Who:  Imported by uvicorn (`snippet_manager.main:app`), pytest and the CLI entry point.

Architecture Note:
    ┌─────────────────────────────────────┐
    │     Routes + Middleware (HTTP)      │  ← status codes, auth gate
    ├─────────────────────────────────────┤
    │     Services (credentials)          │  ← hashing, login
    ├─────────────────────────────────────┤
    │     Stores (persistence contracts)  │  ← UserStore, SnippetStore, ...
    ├─────────────────────────────────────┤
    │     Models & Schemas (data)         │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │     Database (async sessions)       │  ← one transaction per store call
    └─────────────────────────────────────┘

    Handlers depend on the abstract stores in `stores.base` only, so the
    SQLAlchemy implementations can be swapped without touching routes.
"""

__version__ = "1.0.0"
