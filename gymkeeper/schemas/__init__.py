"""
Schemas module
"""

from gymkeeper.schemas.token import TokenPayload, TokenResponse
from gymkeeper.schemas.tenant import (
    PasswordChange, ProfileUpdate, TenantCreate, TenantLogin, TenantResponse
)

__all__ = [
    "TokenPayload",
    "TokenResponse",
    "PasswordChange",
    "ProfileUpdate",
    "TenantCreate",
    "TenantLogin",
    "TenantResponse",
]
