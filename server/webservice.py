# Ally Connector - web services (course files, component content)
import logging
import uuid
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from auth import require_auth, require_capability
from config import Settings, get_settings
from database.database import get_db
from database.repository import (
    SqlComponentPresence,
    SqlContextProvider,
    SqlFileStore,
    SqlIdentityProvider,
    SqlRecordStore,
)
from ally import AuthorResolver, CallerScope, CourseFilesEnumerator, FileDescriptor, ContentDescriptor, ComponentType
from ally.audit import AuditLogEntry, log_audit
from ally.componentsupport import BoundComponents, ComponentRegistry
from ally.errors import AllyError, ConfigurationError, NotFoundError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/webservice", tags=["Web services"])

REQUIRED_CAPABILITIES = ("moodle/course:view", "moodle/course:viewhiddencourses")


class CourseFilesRequest(BaseModel):
    ids: list[int] = Field(default_factory=list, description="List of course IDs")


class ComponentContentRequest(BaseModel):
    component: str
    table: str
    field: str
    id: int


def get_author_resolver(
    session: AsyncSession = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> AuthorResolver:
    return AuthorResolver(SqlIdentityProvider(session, settings.author_roles))


def get_registry(request: Request) -> ComponentRegistry:
    """The registry built at startup."""
    return request.app.state.component_registry


def get_components(
    session: AsyncSession = Depends(get_db),
    authors: AuthorResolver = Depends(get_author_resolver),
    registry: ComponentRegistry = Depends(get_registry),
) -> BoundComponents:
    return registry.bind(SqlRecordStore(session), authors, SqlComponentPresence(session))


async def require_service_access(
    caller: CallerScope = Depends(require_auth),
    session: AsyncSession = Depends(get_db),
) -> CallerScope:
    for capability in REQUIRED_CAPABILITIES:
        await require_capability(session, caller, capability)
    return caller


def _http_error(exc: AllyError) -> HTTPException:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=404, detail=str(exc))
    if isinstance(exc, ConfigurationError):
        return HTTPException(status_code=400, detail=str(exc))
    return HTTPException(status_code=500, detail=str(exc))


@router.post("/course_files", response_model=list[FileDescriptor])
async def course_files(
    body: CourseFilesRequest,
    caller: CallerScope = Depends(require_service_access),
    session: AsyncSession = Depends(get_db),
    authors: AuthorResolver = Depends(get_author_resolver),
):
    """Files in the given courses to process for accessibility."""
    trace_id = str(uuid.uuid4())
    enumerator = CourseFilesEnumerator(authors, SqlContextProvider(session), SqlFileStore(session))
    try:
        files = await enumerator.enumerate(body.ids)
    except AllyError as e:
        log_audit(AuditLogEntry(
            trace_id=trace_id, user_id=caller.user_id, service="course_files",
            request=body.model_dump(), outcome="error", error=str(e),
        ))
        raise _http_error(e)
    log_audit(AuditLogEntry(
        trace_id=trace_id, user_id=caller.user_id, service="course_files",
        request=body.model_dump(), result_count=len(files),
    ))
    return files


@router.post("/component_content", response_model=ContentDescriptor)
async def component_content(
    body: ComponentContentRequest,
    caller: CallerScope = Depends(require_service_access),
    components: BoundComponents = Depends(get_components),
):
    """Where a component's table/field content keeps its files, and which module owns it."""
    trace_id = str(uuid.uuid4())
    try:
        component = components.get(body.component)
        component.validate_component_table_field(body.table, body.field)
        instanceid = None
        if component.component_type() is ComponentType.MOD:
            instanceid = await component.resolve_module_instance_id(body.table, body.id)
        descriptor = ContentDescriptor(
            component=body.component,
            componenttype=component.component_type(),
            table=body.table,
            field=body.field,
            id=body.id,
            filearea=component.get_file_area(body.table, body.field),
            fileitem=component.get_file_item(body.table, body.field, body.id),
            filepath=component.get_file_path(body.table, body.field, body.id),
            instanceid=instanceid,
        )
    except AllyError as e:
        logger.warning("component_content %s failed: %s", body.component, e)
        log_audit(AuditLogEntry(
            trace_id=trace_id, user_id=caller.user_id, service="component_content",
            request=body.model_dump(), outcome="error", error=str(e),
        ))
        raise _http_error(e)
    log_audit(AuditLogEntry(
        trace_id=trace_id, user_id=caller.user_id, service="component_content",
        request=body.model_dump(), result_count=1,
    ))
    return descriptor
