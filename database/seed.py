# Ally Connector - seed database with a demo site
import asyncio
import hashlib
from functools import lru_cache

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ally.models import ContextLevel
from auth import hash_password
from . import database
from .database import init_db
from .models import (
    CAP_ALLOW,
    Assign,
    BlockInstance,
    Book,
    BookChapter,
    ContextRecord,
    Course,
    CourseSection,
    File,
    Forum,
    ForumDiscussion,
    ForumPost,
    Label,
    Page,
    Plugin,
    Role,
    RoleAssignment,
    RoleCapability,
    User,
)

DEMO_TIMEMODIFIED = 1700000000

_demo_hash = lru_cache(maxsize=None)(hash_password)


def sha1(value: str) -> str:
    return hashlib.sha1(value.encode("utf-8")).hexdigest()


def make_file(file_id, contextid, component, filearea, filename, userid, mimetype, itemid=0, filepath="/"):
    return File(
        id=file_id,
        contenthash=sha1(f"content:{filename}"),
        pathnamehash=sha1(f"/{contextid}/{component}/{filearea}/{itemid}{filepath}{filename}"),
        contextid=contextid,
        component=component,
        filearea=filearea,
        itemid=itemid,
        filepath=filepath,
        filename=filename,
        userid=userid,
        mimetype=mimetype,
        filesize=1024,
        timecreated=DEMO_TIMEMODIFIED,
        timemodified=DEMO_TIMEMODIFIED,
    )


async def populate(session: AsyncSession) -> None:
    """Two courses with teachers, a manager, a student and their files."""
    # Users: 1 admin, 2 editing teacher, 3 student, 4 manager, 5 non-editing teacher
    session.add_all([
        User(id=1, username="admin", password_hash=_demo_hash("admin123"), full_name="Admin User", is_siteadmin=True),
        User(id=2, username="teacher1", password_hash=_demo_hash("teach1"), full_name="Alice Teacher"),
        User(id=3, username="student1", password_hash=_demo_hash("stu1"), full_name="Charlie Student"),
        User(id=4, username="manager1", password_hash=_demo_hash("manage1"), full_name="Mona Manager"),
        User(id=5, username="teacher2", password_hash=_demo_hash("teach2"), full_name="Bob Assistant"),
    ])
    session.add_all([
        Role(id=1, shortname="manager", name="Manager"),
        Role(id=2, shortname="coursecreator", name="Course creator"),
        Role(id=3, shortname="editingteacher", name="Teacher"),
        Role(id=4, shortname="teacher", name="Non-editing teacher"),
        Role(id=5, shortname="student", name="Student"),
    ])

    # Context tree: system 1 > course 2 (ctx 2) > assign (ctx 4), forum (ctx 5)
    #                        > course 3 (ctx 3) > page (ctx 6)
    session.add_all([
        ContextRecord(id=1, contextlevel=ContextLevel.SYSTEM, instanceid=0, path="/1", depth=1),
        ContextRecord(id=2, contextlevel=ContextLevel.COURSE, instanceid=2, path="/1/2", depth=2),
        ContextRecord(id=3, contextlevel=ContextLevel.COURSE, instanceid=3, path="/1/3", depth=2),
        ContextRecord(id=4, contextlevel=ContextLevel.MODULE, instanceid=1, path="/1/2/4", depth=3),
        ContextRecord(id=5, contextlevel=ContextLevel.MODULE, instanceid=2, path="/1/2/5", depth=3),
        ContextRecord(id=6, contextlevel=ContextLevel.MODULE, instanceid=3, path="/1/3/6", depth=3),
    ])
    await session.flush()

    session.add_all([
        RoleAssignment(userid=4, roleid=1, contextid=1),
        RoleAssignment(userid=2, roleid=3, contextid=2),
        RoleAssignment(userid=5, roleid=4, contextid=3),
        RoleAssignment(userid=3, roleid=5, contextid=2),
        RoleAssignment(userid=3, roleid=5, contextid=3),
    ])
    session.add_all([
        RoleCapability(roleid=1, contextid=1, capability="moodle/course:view", permission=CAP_ALLOW),
        RoleCapability(roleid=1, contextid=1, capability="moodle/course:viewhiddencourses", permission=CAP_ALLOW),
    ])
    session.add_all([
        Plugin(component="core"),
        Plugin(component="mod_assign"),
        Plugin(component="mod_forum"),
        Plugin(component="mod_page"),
        Plugin(component="mod_label"),
        Plugin(component="block_html"),
    ])

    session.add_all([
        Course(id=2, fullname="Introduction to Accessibility", shortname="A11Y101", summary="<p>Welcome</p>"),
        Course(id=3, fullname="Inclusive Design", shortname="A11Y201", summary="<p>Design for all</p>"),
    ])
    await session.flush()
    session.add_all([
        CourseSection(id=1, course=2, section=0, summary="<p>General</p>"),
        CourseSection(id=2, course=3, section=0, summary="<p>General</p>"),
        BlockInstance(id=1, blockname="html", parentcontextid=2, configdata="<p>Notice</p>"),
        Assign(id=1, course=2, name="Essay", intro="<p>Write an essay</p>"),
        Forum(id=1, course=2, name="Announcements", intro="<p>News</p>"),
        Page(id=1, course=3, name="Lecture notes", intro="<p>Notes</p>", content="<p>Slides</p>"),
        Label(id=1, course=3, name="Reminder", intro="<p>Due friday</p>"),
        Book(id=1, course=3, name="Handbook", intro="<p>Read me</p>"),
    ])
    await session.flush()
    session.add_all([
        ForumDiscussion(id=1, course=2, forum=1, name="Welcome", userid=2),
        BookChapter(id=1, bookid=1, title="Chapter 1", content="<p>Start</p>"),
    ])
    await session.flush()
    session.add(ForumPost(id=1, discussion=1, parent=0, userid=3, subject="Hi", message="<p>Hello</p>"))

    session.add_all([
        make_file(1, 2, "course", "summary", "syllabus.pdf", 2, "application/pdf"),
        make_file(2, 4, "mod_assign", "intro", "instructions.docx", 2,
                  "application/vnd.openxmlformats-officedocument.wordprocessingml.document"),
        make_file(3, 5, "mod_forum", "post", "essay.pdf", 3, "application/pdf", itemid=1),
        make_file(4, 5, "mod_forum", "intro", ".", 2, None),
        make_file(5, 6, "mod_page", "content", "lecture.pptx", 1,
                  "application/vnd.openxmlformats-officedocument.presentationml.presentation"),
        make_file(6, 3, "course", "summary", "notes.pdf", 5, "application/pdf"),
        make_file(7, 2, "course", "summary", "handbook.pdf", 4, "application/pdf"),
    ])
    await session.flush()


async def seed():
    await init_db()
    async with database.async_session() as session:
        # Check if already seeded
        r = await session.execute(select(User).limit(1))
        if r.scalar_one_or_none():
            print("Database already seeded. Skip.")
            return
        await populate(session)
        await session.commit()
    print("Seed completed.")


if __name__ == "__main__":
    asyncio.run(seed())
