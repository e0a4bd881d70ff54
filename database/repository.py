# Ally Connector - host collaborators backed by the LMS database
import logging
from typing import AsyncIterator, Iterable

from sqlalchemy import or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from ally import models as ally_models
from ally.errors import ContextNotFoundError, RecordNotFoundError
from ally.models import AuthorScope, Context, ContextLevel, Row
from .models import Base, ContextRecord, File, Plugin, Role, RoleAssignment, User

logger = logging.getLogger(__name__)

# Directory entries share the files table with real files
DIRECTORY_FILENAME = "."


def to_context(record: ContextRecord) -> Context:
    return Context(
        id=record.id,
        contextlevel=ContextLevel(record.contextlevel),
        instanceid=record.instanceid,
        path=record.path or f"/{record.id}",
    )


class SqlIdentityProvider:
    """Site admins and author role assignments from the users/role tables."""

    def __init__(self, session: AsyncSession, author_roles: Iterable[str]):
        self.session = session
        self.author_roles = list(author_roles)

    async def admin_ids(self) -> set[int]:
        r = await self.session.execute(select(User.id).where(User.is_siteadmin.is_(True)))
        return set(r.scalars().all())

    async def role_ids(self) -> set[int]:
        if not self.author_roles:
            return set()
        r = await self.session.execute(select(Role.id).where(Role.shortname.in_(self.author_roles)))
        return set(r.scalars().all())

    async def role_assignments_for_context(self, context: Context) -> list[ally_models.RoleAssignment]:
        """Assignments in the context itself and every parent context."""
        r = await self.session.execute(
            select(RoleAssignment)
            .where(RoleAssignment.contextid.in_(context.parent_ids(include_self=True)))
            .order_by(RoleAssignment.id)
        )
        return [
            ally_models.RoleAssignment(userid=ra.userid, roleid=ra.roleid, contextid=ra.contextid)
            for ra in r.scalars().all()
        ]


class SqlContextProvider:
    def __init__(self, session: AsyncSession):
        self.session = session
        self._cache: dict[int, Context] = {}

    async def preload(self, course_ids: Iterable[int]) -> None:
        missing = [cid for cid in course_ids if cid not in self._cache]
        if not missing:
            return
        r = await self.session.execute(
            select(ContextRecord).where(
                ContextRecord.contextlevel == ContextLevel.COURSE,
                ContextRecord.instanceid.in_(missing),
            )
        )
        records = r.scalars().all()
        for record in records:
            self._cache[record.instanceid] = to_context(record)
        logger.debug("preloaded %d of %d requested course contexts", len(records), len(missing))

    async def course_context(self, course_id: int) -> Context:
        if course_id in self._cache:
            return self._cache[course_id]
        r = await self.session.execute(
            select(ContextRecord).where(
                ContextRecord.contextlevel == ContextLevel.COURSE,
                ContextRecord.instanceid == course_id,
            )
        )
        record = r.scalar_one_or_none()
        if record is None:
            raise ContextNotFoundError(course_id)
        context = self._cache[course_id] = to_context(record)
        return context


class SqlFileStore:
    """Files in a context and its children, limited to approved authors.

    A file is in scope when its author is a site admin or holds one of the
    author roles somewhere on the path of the file's context.
    """

    def __init__(self, session: AsyncSession):
        self.session = session

    async def _author_contexts(self, context: Context, role_ids: Iterable[int]) -> dict[int, set[int]]:
        role_ids = list(role_ids)
        if not role_ids:
            return {}
        r = await self.session.execute(
            select(RoleAssignment.userid, RoleAssignment.contextid)
            .join(ContextRecord, RoleAssignment.contextid == ContextRecord.id)
            .where(
                RoleAssignment.roleid.in_(role_ids),
                or_(
                    ContextRecord.id.in_(context.parent_ids(include_self=True)),
                    ContextRecord.path.like(f"{context.path}/%"),
                ),
            )
        )
        authors: dict[int, set[int]] = {}
        for userid, contextid in r.all():
            authors.setdefault(userid, set()).add(contextid)
        return authors

    async def files_in_context(self, context: Context, scope: AuthorScope) -> AsyncIterator[File]:
        authors = await self._author_contexts(context, scope.role_ids)
        r = await self.session.execute(
            select(File, ContextRecord.path)
            .join(ContextRecord, File.contextid == ContextRecord.id)
            .where(
                or_(ContextRecord.id == context.id, ContextRecord.path.like(f"{context.path}/%")),
                File.filename != DIRECTORY_FILENAME,
            )
            .order_by(File.id)
        )
        for file, path in r.all():
            if file.userid in scope.admin_ids:
                yield file
                continue
            path_ids = {int(part) for part in (path or "").split("/") if part}
            if authors.get(file.userid, set()) & path_ids:
                yield file


class SqlRecordStore:
    """Generic row lookup by table name and id."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def get_record(self, table: str, record_id: int) -> Row:
        t = Base.metadata.tables.get(table)
        if t is None or record_id is None:
            raise RecordNotFoundError(table, record_id)
        r = await self.session.execute(select(t).where(t.c.id == record_id))
        values = r.mappings().one_or_none()
        if values is None:
            raise RecordNotFoundError(table, record_id)
        return Row(table, dict(values))


class SqlComponentPresence:
    def __init__(self, session: AsyncSession):
        self.session = session

    async def is_component_installed(self, name: str) -> bool:
        r = await self.session.execute(select(Plugin.id).where(Plugin.component == name))
        return r.scalar_one_or_none() is not None
