"""
sessionkit - Server-side HTTP sessions for FastAPI

Issues opaque session identifiers in cookies and keeps the session data
server side, in a pluggable store.

Architecture:
- Each module is self-contained with clear interfaces
- Stores are completely replaceable
- The session entity never talks to a store directly
- All communication through defined interfaces

Modules:
- codec: Identifier generation/hashing and session data encoding
- storage: Store contract and backends (memory, sqlite, redis)
- session: Per-request session entity and flash messages
- middleware: Per-request lifecycle (load, attach, commit, cookie)
- api: Demo application models
"""

__version__ = "1.0.0"
