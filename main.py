# Ally Connector - accessibility auditing web services for the LMS
# Run: python -m uvicorn main:app --reload --port 8000
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from config import get_settings
from database.database import init_db, get_db, dispose_db
from database.models import User
from auth import verify_password, create_access_token
from ally.audit import get_audit_sample, start_audit_logger, shutdown_audit_logger
from ally.componentsupport import ComponentRegistry
from server.webservice import router as webservice_router

logger = logging.getLogger(__name__)


class LoginRequest(BaseModel):
    username: str
    password: str


class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user_id: int


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Component naming is checked here, before anything else starts
    app.state.component_registry = ComponentRegistry()
    settings = get_settings()
    await init_db(settings.database_url)
    start_audit_logger(settings.audit_log_file)
    logger.info("Ally connector started (database %s)", settings.database_url)
    yield
    shutdown_audit_logger()
    await dispose_db()


app = FastAPI(
    title="Ally Connector",
    description="Course content enumeration for accessibility processing",
    lifespan=lifespan,
)


@app.post("/api/login", response_model=LoginResponse)
async def login(body: LoginRequest, session: AsyncSession = Depends(get_db)):
    """Login: username and password. Returns a JWT for the web services."""
    r = await session.execute(select(User).where(User.username == body.username))
    user = r.scalar_one_or_none()
    if not user or not verify_password(body.password, user.password_hash):
        raise HTTPException(status_code=401, detail="Invalid username or password")
    token = create_access_token({"sub": str(user.id), "username": user.username})
    return LoginResponse(access_token=token, user_id=user.id)


app.include_router(webservice_router)


@app.get("/api/audit/sample")
async def audit_sample():
    """Recent audit log entries."""
    return {"entries": get_audit_sample(20)}


@app.get("/health")
async def health():
    return {"status": "ok"}


if __name__ == "__main__":
    import os
    import uvicorn
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
    host = os.environ.get("UVICORN_HOST", "127.0.0.1")
    port = int(os.environ.get("PORT", "8000"))
    uvicorn.run("main:app", host=host, port=port, reload=False)
