"""Core application modules."""
from clinic_stock.core.config import settings, get_settings
from clinic_stock.core.database import Base, get_db, get_db_context, init_db, close_db
from clinic_stock.core.security import (
    ActingUser,
    create_access_token,
    decode_token,
    get_acting_user,
    require_roles
)

__all__ = [
    "settings",
    "get_settings",
    "Base",
    "get_db",
    "get_db_context",
    "init_db",
    "close_db",
    "ActingUser",
    "create_access_token",
    "decode_token",
    "get_acting_user",
    "require_roles",
]
