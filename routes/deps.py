import secrets
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from jose import JWTError, jwt
from datetime import datetime, timedelta, timezone
from typing import Optional
from constants import Roles
from models.profile import ProfileModel
from stores.equipment import EquipmentStore
from stores.inventory import InventoryStore
from stores.profiles import ProfileStore
from stores.subscriptions import SubscriptionStore
from logging_config import get_logger
from config import config

logger = get_logger("auth")

# Config from central config
SECRET_KEY = config.SECRET_KEY
ALGORITHM = config.ALGORITHM
ACCESS_TOKEN_EXPIRE_MINUTES = config.ACCESS_TOKEN_EXPIRE_MINUTES

# Tokens are issued by the hosted auth provider; this service only verifies them
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="auth/v1/token")

SERVICE_ROLE = "service_role"


def create_access_token(data: dict, expires_delta: Optional[timedelta] = None):
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (expires_delta or timedelta(minutes=ACCESS_TOKEN_EXPIRE_MINUTES))
    to_encode.update({"exp": expire})
    encoded_jwt = jwt.encode(to_encode, SECRET_KEY, algorithm=ALGORITHM)
    return encoded_jwt


# ─── Storage collaborators ───────────────────────────────────────────────────
# Overridden in tests through app.dependency_overrides

def get_subscription_store() -> SubscriptionStore:
    return SubscriptionStore()


def get_profile_store() -> ProfileStore:
    return ProfileStore()


def get_equipment_store() -> EquipmentStore:
    return EquipmentStore()


def get_inventory_store() -> InventoryStore:
    return InventoryStore()


# ─── Authentication ──────────────────────────────────────────────────────────

async def _profile_from_token(token: str, profiles: ProfileStore) -> ProfileModel:
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )
    try:
        payload = jwt.decode(token, SECRET_KEY, algorithms=[ALGORITHM], options={"verify_aud": False})
        user_id: str = payload.get("sub")
        if user_id is None:
            logger.warning("Token decoded but missing 'sub' claim")
            raise credentials_exception
    except JWTError as e:
        logger.warning(f"JWT decode failed: {e}")
        raise credentials_exception

    profile = await profiles.get(user_id)
    if profile is None:
        logger.warning(f"Token valid but profile not found", extra={"data": {"user_id": user_id}})
        raise credentials_exception

    return profile


async def get_current_user(
    token: str = Depends(oauth2_scheme),
    profiles: ProfileStore = Depends(get_profile_store),
) -> ProfileModel:
    return await _profile_from_token(token, profiles)


# ─── Centralized RBAC Helpers ────────────────────────────────────────────────

def require_role(*allowed_roles):
    """Dependency that checks if the current user has one of the allowed roles."""
    async def checker(current_user: ProfileModel = Depends(get_current_user)):
        if current_user.role not in allowed_roles:
            logger.warning(
                f"Access denied: requires {allowed_roles}",
                extra={"data": {"user_id": current_user.id, "role": current_user.role}}
            )
            raise HTTPException(status_code=403, detail="Insufficient permissions")
        return current_user
    return checker


# Any signed-in user whose account has been approved (not "pending")
require_approved_user = require_role(Roles.ADMIN, Roles.MANAGER, Roles.USER)


async def require_sender(
    token: str = Depends(oauth2_scheme),
    profiles: ProfileStore = Depends(get_profile_store),
) -> str:
    """
    Callers allowed to push to other users: the service role key (schedulers,
    server-side functions) or an admin/manager. Returns the caller identity.
    """
    if config.SERVICE_ROLE_KEY and secrets.compare_digest(token.encode(), config.SERVICE_ROLE_KEY.encode()):
        return SERVICE_ROLE

    profile = await _profile_from_token(token, profiles)
    if profile.role not in (Roles.ADMIN, Roles.MANAGER):
        logger.warning(
            "Access denied: push sending requires admin or manager",
            extra={"data": {"user_id": profile.id, "role": profile.role}}
        )
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    return profile.id
