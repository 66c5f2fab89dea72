from __future__ import annotations

import enum


class AccountRole(str, enum.Enum):
    USER = "user"
    ADMIN = "admin"
