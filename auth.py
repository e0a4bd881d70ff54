# Ally Connector - Auth (JWT + capability checks at system context)
from datetime import datetime, timedelta, timezone
from fastapi import Request, HTTPException, Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_settings
from ally.models import CallerScope
from database.models import CAP_ALLOW, SYSTEM_CONTEXT_ID, RoleAssignment, RoleCapability, User

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")
bearer = HTTPBearer(auto_error=False)

ALGORITHM = "HS256"
ACCESS_EXPIRE_MINUTES = 60
# Bcrypt limit: password must be <= 72 bytes
MAX_PASSWORD_BYTES = 72


def _truncate_password(password: str) -> str:
    """Bcrypt accepts max 72 bytes; truncate to avoid ValueError."""
    if not password:
        return password
    enc = password.encode("utf-8")
    if len(enc) <= MAX_PASSWORD_BYTES:
        return password
    return enc[:MAX_PASSWORD_BYTES].decode("utf-8", errors="ignore")


def get_secret():
    return get_settings().secret_key


def verify_password(plain: str, hashed: str) -> bool:
    return pwd_context.verify(_truncate_password(plain), hashed)


def hash_password(plain: str) -> str:
    return pwd_context.hash(_truncate_password(plain))


def create_access_token(data: dict) -> str:
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(minutes=ACCESS_EXPIRE_MINUTES)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, get_secret(), algorithm=ALGORITHM)


def decode_token(token: str) -> dict | None:
    try:
        return jwt.decode(token, get_secret(), algorithms=[ALGORITHM])
    except JWTError:
        return None


async def require_auth(
    request: Request,
    credentials: HTTPAuthorizationCredentials | None = Depends(bearer),
) -> CallerScope:
    """Set request.state.caller and return it; 401 if not authenticated."""
    payload = decode_token(credentials.credentials) if credentials else None
    if not payload or "sub" not in payload:
        raise HTTPException(status_code=401, detail="Not authenticated")
    try:
        user_id = int(payload["sub"])
    except (TypeError, ValueError):
        raise HTTPException(status_code=401, detail="Not authenticated")
    caller = CallerScope(user_id=user_id, username=payload.get("username"))
    request.state.caller = caller
    return caller


async def has_capability(session: AsyncSession, user_id: int, capability: str) -> bool:
    """Site admins hold every capability; others need an allowing role at system context."""
    r = await session.execute(select(User.is_siteadmin).where(User.id == user_id))
    is_admin = r.scalar_one_or_none()
    if is_admin is None:
        return False
    if is_admin:
        return True
    r = await session.execute(
        select(RoleCapability.id)
        .join(RoleAssignment, RoleAssignment.roleid == RoleCapability.roleid)
        .where(
            RoleAssignment.userid == user_id,
            RoleAssignment.contextid == SYSTEM_CONTEXT_ID,
            RoleCapability.contextid == SYSTEM_CONTEXT_ID,
            RoleCapability.capability == capability,
            RoleCapability.permission == CAP_ALLOW,
        )
        .limit(1)
    )
    return r.scalar_one_or_none() is not None


async def require_capability(session: AsyncSession, caller: CallerScope, capability: str) -> None:
    if not await has_capability(session, caller.user_id, capability):
        raise HTTPException(status_code=403, detail=f"Missing capability {capability}")
