# Ally Connector - host LMS database models
from sqlalchemy import Boolean, Column, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import declarative_base

from ally.models import ContextLevel


Base = declarative_base()

CAP_ALLOW = 1
SYSTEM_CONTEXT_ID = 1


class User(Base):
    __tablename__ = "users"
    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(String(64), unique=True, nullable=False, index=True)
    password_hash = Column(String(256), nullable=False)
    full_name = Column(String(128), nullable=True)
    is_siteadmin = Column(Boolean, nullable=False, default=False)

    def __repr__(self):
        return f"<User(id={self.id}, username={self.username})>"


class Role(Base):
    __tablename__ = "role"
    id = Column(Integer, primary_key=True, autoincrement=True)
    shortname = Column(String(100), unique=True, nullable=False)
    name = Column(String(255), nullable=True)

    def __repr__(self):
        return f"<Role(id={self.id}, shortname={self.shortname})>"


class ContextRecord(Base):
    __tablename__ = "context"
    __table_args__ = (UniqueConstraint("contextlevel", "instanceid"),)
    id = Column(Integer, primary_key=True, autoincrement=True)
    contextlevel = Column(Integer, nullable=False)  # ally.models.ContextLevel
    instanceid = Column(Integer, nullable=False)
    path = Column(String(255), nullable=True, index=True)
    depth = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<ContextRecord(id={self.id}, level={ContextLevel(self.contextlevel).name}, path={self.path})>"


class RoleAssignment(Base):
    __tablename__ = "role_assignments"
    id = Column(Integer, primary_key=True, autoincrement=True)
    roleid = Column(Integer, ForeignKey("role.id"), nullable=False)
    contextid = Column(Integer, ForeignKey("context.id"), nullable=False, index=True)
    userid = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)


class RoleCapability(Base):
    __tablename__ = "role_capabilities"
    id = Column(Integer, primary_key=True, autoincrement=True)
    roleid = Column(Integer, ForeignKey("role.id"), nullable=False)
    contextid = Column(Integer, ForeignKey("context.id"), nullable=False)
    capability = Column(String(255), nullable=False)
    permission = Column(Integer, nullable=False, default=CAP_ALLOW)


class Plugin(Base):
    """Installed components by frankenstyle name, e.g. mod_forum."""
    __tablename__ = "plugins"
    id = Column(Integer, primary_key=True, autoincrement=True)
    component = Column(String(100), unique=True, nullable=False)
    version = Column(String(20), nullable=True)


class File(Base):
    __tablename__ = "files"
    id = Column(Integer, primary_key=True, autoincrement=True)
    contenthash = Column(String(40), nullable=False)
    pathnamehash = Column(String(40), unique=True, nullable=False)
    contextid = Column(Integer, ForeignKey("context.id"), nullable=False, index=True)
    component = Column(String(100), nullable=False)
    filearea = Column(String(50), nullable=False)
    itemid = Column(Integer, nullable=False, default=0)
    filepath = Column(String(255), nullable=False, default="/")
    filename = Column(String(255), nullable=False)
    userid = Column(Integer, ForeignKey("users.id"), nullable=True)
    mimetype = Column(String(100), nullable=True)
    filesize = Column(Integer, nullable=False, default=0)
    timecreated = Column(Integer, nullable=False, default=0)
    timemodified = Column(Integer, nullable=False, default=0)

    def __repr__(self):
        return f"<File(id={self.id}, filename={self.filename}, contextid={self.contextid})>"


# --- Course content tables ---
class Course(Base):
    __tablename__ = "course"
    id = Column(Integer, primary_key=True, autoincrement=True)
    fullname = Column(String(254), nullable=False)
    shortname = Column(String(255), unique=True, nullable=False)
    summary = Column(Text, nullable=True)
    visible = Column(Boolean, nullable=False, default=True)


class CourseSection(Base):
    __tablename__ = "course_sections"
    id = Column(Integer, primary_key=True, autoincrement=True)
    course = Column(Integer, ForeignKey("course.id"), nullable=False)
    section = Column(Integer, nullable=False, default=0)
    summary = Column(Text, nullable=True)


class BlockInstance(Base):
    __tablename__ = "block_instances"
    id = Column(Integer, primary_key=True, autoincrement=True)
    blockname = Column(String(40), nullable=False)
    parentcontextid = Column(Integer, ForeignKey("context.id"), nullable=False)
    configdata = Column(Text, nullable=True)


class Assign(Base):
    __tablename__ = "assign"
    id = Column(Integer, primary_key=True, autoincrement=True)
    course = Column(Integer, ForeignKey("course.id"), nullable=False)
    name = Column(String(255), nullable=False)
    intro = Column(Text, nullable=True)


class Forum(Base):
    __tablename__ = "forum"
    id = Column(Integer, primary_key=True, autoincrement=True)
    course = Column(Integer, ForeignKey("course.id"), nullable=False)
    name = Column(String(255), nullable=False)
    intro = Column(Text, nullable=True)


class ForumDiscussion(Base):
    __tablename__ = "forum_discussions"
    id = Column(Integer, primary_key=True, autoincrement=True)
    course = Column(Integer, ForeignKey("course.id"), nullable=False)
    forum = Column(Integer, ForeignKey("forum.id"), nullable=False)
    name = Column(String(255), nullable=False)
    userid = Column(Integer, ForeignKey("users.id"), nullable=True)


class ForumPost(Base):
    __tablename__ = "forum_posts"
    id = Column(Integer, primary_key=True, autoincrement=True)
    discussion = Column(Integer, ForeignKey("forum_discussions.id"), nullable=False)
    parent = Column(Integer, nullable=False, default=0)
    userid = Column(Integer, ForeignKey("users.id"), nullable=True)
    subject = Column(String(255), nullable=True)
    message = Column(Text, nullable=True)


class Page(Base):
    __tablename__ = "page"
    id = Column(Integer, primary_key=True, autoincrement=True)
    course = Column(Integer, ForeignKey("course.id"), nullable=False)
    name = Column(String(255), nullable=False)
    intro = Column(Text, nullable=True)
    content = Column(Text, nullable=True)


class Label(Base):
    __tablename__ = "label"
    id = Column(Integer, primary_key=True, autoincrement=True)
    course = Column(Integer, ForeignKey("course.id"), nullable=False)
    name = Column(String(255), nullable=False)
    intro = Column(Text, nullable=True)


class Book(Base):
    __tablename__ = "book"
    id = Column(Integer, primary_key=True, autoincrement=True)
    course = Column(Integer, ForeignKey("course.id"), nullable=False)
    name = Column(String(255), nullable=False)
    intro = Column(Text, nullable=True)


class BookChapter(Base):
    __tablename__ = "book_chapters"
    id = Column(Integer, primary_key=True, autoincrement=True)
    bookid = Column(Integer, ForeignKey("book.id"), nullable=False)
    title = Column(String(255), nullable=False)
    content = Column(Text, nullable=True)
