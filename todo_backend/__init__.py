"""
Todo Backend — Application Package
====================================

Minimal authenticated todo API: email/password login with auto-provisioning,
opaque expiring session tokens, and owner-scoped todo items.

    ┌─────────────────────────────────────┐
    │           Routes (API Layer)        │  ← HTTP concerns only
    ├─────────────────────────────────────┤
    │  Dependencies (auth gate, DI graph) │  ← token → user ID
    ├─────────────────────────────────────┤
    │         Services (Business Logic)   │  ← auth, sessions, todos
    ├─────────────────────────────────────┤
    │       Models & Schemas (Data)       │  ← SQLAlchemy ORM + Pydantic
    ├─────────────────────────────────────┤
    │        Database (Persistence)       │  ← Async SQLAlchemy sessions
    └─────────────────────────────────────┘
"""

__version__ = "1.0.0"
