# Ally Connector database
from .models import (
    Base,
    User,
    Role,
    ContextRecord,
    RoleAssignment,
    RoleCapability,
    Plugin,
    File,
    Course,
    CourseSection,
    BlockInstance,
    Assign,
    Forum,
    ForumDiscussion,
    ForumPost,
    Page,
    Label,
    Book,
    BookChapter,
)
from .database import get_db, init_db, dispose_db

__all__ = [
    "Base",
    "User",
    "Role",
    "ContextRecord",
    "RoleAssignment",
    "RoleCapability",
    "Plugin",
    "File",
    "Course",
    "CourseSection",
    "BlockInstance",
    "Assign",
    "Forum",
    "ForumDiscussion",
    "ForumPost",
    "Page",
    "Label",
    "Book",
    "BookChapter",
    "get_db",
    "init_db",
    "dispose_db",
]
