# Ally Connector - content enumeration and resolution core
from .models import (
    AuthorScope,
    CallerScope,
    ComponentType,
    ContentDescriptor,
    Context,
    ContextLevel,
    FileDescriptor,
    RoleAssignment,
    Row,
)
from .errors import (
    AllyError,
    ComponentNotFoundError,
    ConfigurationError,
    ContextNotFoundError,
    DataError,
    NotFoundError,
    PreconditionError,
    RecordNotFoundError,
)
from .authors import AuthorResolver
from .course_files import CourseFilesEnumerator

__all__ = [
    "AuthorScope",
    "CallerScope",
    "ComponentType",
    "ContentDescriptor",
    "Context",
    "ContextLevel",
    "FileDescriptor",
    "RoleAssignment",
    "Row",
    "AllyError",
    "ComponentNotFoundError",
    "ConfigurationError",
    "ContextNotFoundError",
    "DataError",
    "NotFoundError",
    "PreconditionError",
    "RecordNotFoundError",
    "AuthorResolver",
    "CourseFilesEnumerator",
]
