"""Database layer - engine and base classes."""

from compliance_kernel.db.base import UUID, Base, TrackedBase, UUIDString
from compliance_kernel.db.engine import (
    build_engine,
    create_tables,
    database_url_from_env,
    session_scope,
)

__all__ = [
    "build_engine",
    "session_scope",
    "create_tables",
    "database_url_from_env",
    "Base",
    "TrackedBase",
    "UUIDString",
    "UUID",
]
