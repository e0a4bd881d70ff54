# Ally Connector - protocol objects shared by the resolver, registry and enumerator
from datetime import datetime, timezone
from enum import Enum, IntEnum
from typing import Any
from pydantic import BaseModel, ConfigDict, Field


class ContextLevel(IntEnum):
    SYSTEM = 10
    USER = 30
    COURSECAT = 40
    COURSE = 50
    MODULE = 70
    BLOCK = 80


class ComponentType(str, Enum):
    CORE = "core"
    MOD = "mod"
    BLOCK = "block"


# --- Context (owned by the host, read only here) ---
class Context(BaseModel):
    """A scope in the host hierarchy: system > course > module."""
    model_config = ConfigDict(frozen=True)

    id: int
    contextlevel: ContextLevel
    instanceid: int
    path: str = Field(..., description="Slash separated ancestor ids, e.g. /1/2/15")

    def parent_ids(self, include_self: bool = False) -> list[int]:
        ids = [int(part) for part in self.path.split("/") if part]
        if not include_self and ids and ids[-1] == self.id:
            ids = ids[:-1]
        return ids


class RoleAssignment(BaseModel):
    model_config = ConfigDict(frozen=True)

    userid: int
    roleid: int
    contextid: int


# --- Author scope (computed once per request) ---
class AuthorScope(BaseModel):
    model_config = ConfigDict(frozen=True)

    admin_ids: frozenset[int] = frozenset()
    role_ids: frozenset[int] = frozenset()


class Row:
    """Read access to a fetched table row by field name."""

    __slots__ = ("table", "_values")

    def __init__(self, table: str, values: dict[str, Any]):
        self.table = table
        self._values = dict(values)

    @property
    def id(self) -> int | None:
        return self.field("id")

    def field(self, name: str) -> Any | None:
        """Value of `name`, or None when the row has no such field."""
        return self._values.get(name)

    def __repr__(self):
        return f"<Row(table={self.table}, id={self.id})>"


# --- Output records ---
class FileDescriptor(BaseModel):
    id: str = Field(..., pattern=r"^[A-Za-z0-9]+$", description="File path name SHA1 hash")
    courseid: int = Field(..., description="Course ID of the file")
    name: str = Field(..., description="File name")
    mimetype: str | None = Field(default=None, description="File mime type")
    contenthash: str = Field(..., pattern=r"^[A-Za-z0-9]+$", description="File content SHA1 hash")
    timemodified: str = Field(..., description="Last modified time of the file (ISO 8601)")


class ContentDescriptor(BaseModel):
    """Where a (component, table, field, id) piece of content lives."""
    component: str
    componenttype: ComponentType
    table: str
    field: str
    id: int
    filearea: str | None = None
    fileitem: int = 0
    filepath: str = "/"
    instanceid: int | None = None


# --- Caller identity for the web service surface ---
class CallerScope(BaseModel):
    user_id: int
    username: str | None = None


def iso_8601(timestamp: int) -> str:
    """Unix timestamp to an ISO 8601 string in UTC."""
    return datetime.fromtimestamp(timestamp, tz=timezone.utc).isoformat()
