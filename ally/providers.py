# Ally Connector - collaborator interfaces supplied by the host application
from typing import AsyncIterator, Iterable, Protocol

from .models import AuthorScope, Context, RoleAssignment, Row


class IdentityProvider(Protocol):
    async def admin_ids(self) -> set[int]: ...

    async def role_ids(self) -> set[int]: ...

    async def role_assignments_for_context(self, context: Context) -> list[RoleAssignment]: ...


class ContextProvider(Protocol):
    async def course_context(self, course_id: int) -> Context:
        """Raise ContextNotFoundError when the course has no context."""
        ...

    async def preload(self, course_ids: Iterable[int]) -> None: ...


class StoredFile(Protocol):
    pathnamehash: str
    contenthash: str
    filename: str
    mimetype: str | None
    timemodified: int


class FileStore(Protocol):
    def files_in_context(self, context: Context, scope: AuthorScope) -> AsyncIterator[StoredFile]:
        """Yield in-scope files for `context`, in storage order."""
        ...


class RecordStore(Protocol):
    async def get_record(self, table: str, record_id: int) -> Row:
        """Raise RecordNotFoundError when there is no such row."""
        ...


class ComponentPresence(Protocol):
    async def is_component_installed(self, name: str) -> bool: ...
