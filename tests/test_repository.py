"""Tests for the database backed collaborators, run against the demo site."""

import logging

import pytest
from sqlalchemy import inspect
from sqlalchemy.ext.asyncio import AsyncSession

from auth import has_capability
from ally.authors import AuthorResolver
from ally.componentsupport import ComponentRegistry
from ally.course_files import CourseFilesEnumerator
from ally.errors import ContextNotFoundError, RecordNotFoundError
from ally.models import AuthorScope, ContextLevel, RoleAssignment
from database.repository import (
    SqlComponentPresence,
    SqlContextProvider,
    SqlFileStore,
    SqlIdentityProvider,
    SqlRecordStore,
)
from database import database as db
from database.seed import DEMO_TIMEMODIFIED

AUTHOR_ROLES = ["manager", "coursecreator", "editingteacher"]


@pytest.fixture
def identity(db_session: AsyncSession) -> SqlIdentityProvider:
    return SqlIdentityProvider(db_session, AUTHOR_ROLES)


@pytest.mark.asyncio
async def test_admin_and_role_ids(identity: SqlIdentityProvider):
    assert await identity.admin_ids() == {1}
    assert await identity.role_ids() == {1, 2, 3}


@pytest.mark.asyncio
async def test_no_author_roles_configured(db_session: AsyncSession):
    assert await SqlIdentityProvider(db_session, []).role_ids() == set()


@pytest.mark.asyncio
async def test_course_context(db_session: AsyncSession):
    context = await SqlContextProvider(db_session).course_context(2)
    assert context.id == 2
    assert context.contextlevel is ContextLevel.COURSE
    assert context.instanceid == 2
    assert context.parent_ids() == [1]
    assert context.parent_ids(include_self=True) == [1, 2]


@pytest.mark.asyncio
async def test_missing_course_context(db_session: AsyncSession):
    provider = SqlContextProvider(db_session)
    await provider.preload([2, 99])
    with pytest.raises(ContextNotFoundError):
        await provider.course_context(99)


@pytest.mark.asyncio
async def test_preloaded_contexts_match_lookups(db_session: AsyncSession):
    preloaded = SqlContextProvider(db_session)
    await preloaded.preload([2, 3])
    direct = SqlContextProvider(db_session)
    for course_id in (2, 3):
        assert await preloaded.course_context(course_id) == await direct.course_context(course_id)


@pytest.mark.asyncio
async def test_preload_logs_rows_found(db_session: AsyncSession, caplog):
    provider = SqlContextProvider(db_session)
    await provider.preload([2])
    with caplog.at_level(logging.DEBUG, logger="database.repository"):
        await provider.preload([2, 3, 99])
    assert "preloaded 1 of 2 requested course contexts" in caplog.text


@pytest.mark.asyncio
async def test_role_assignments_include_parent_contexts(db_session: AsyncSession, identity: SqlIdentityProvider):
    context = await SqlContextProvider(db_session).course_context(2)
    assignments = await identity.role_assignments_for_context(context)
    assert assignments == [
        RoleAssignment(userid=4, roleid=1, contextid=1),
        RoleAssignment(userid=2, roleid=3, contextid=2),
        RoleAssignment(userid=3, roleid=5, contextid=2),
    ]


@pytest.mark.asyncio
async def test_approved_authors_per_course(db_session: AsyncSession, identity: SqlIdentityProvider):
    resolver = AuthorResolver(identity)
    contexts = SqlContextProvider(db_session)
    assert await resolver.approved_author_ids(await contexts.course_context(2)) == {1, 2, 4}
    # teacher2 only holds the non-editing teacher role in course 3
    assert await resolver.approved_author_ids(await contexts.course_context(3)) == {1, 4}


@pytest.mark.asyncio
async def test_file_store_filters_by_author(db_session: AsyncSession):
    contexts = SqlContextProvider(db_session)
    store = SqlFileStore(db_session)
    scope = AuthorScope(admin_ids=frozenset({1}), role_ids=frozenset({1, 2, 3}))

    course2 = [f.filename async for f in store.files_in_context(await contexts.course_context(2), scope)]
    # student post and the directory entry are left out
    assert course2 == ["syllabus.pdf", "instructions.docx", "handbook.pdf"]

    course3 = [f.filename async for f in store.files_in_context(await contexts.course_context(3), scope)]
    assert course3 == ["lecture.pptx"]


@pytest.mark.asyncio
async def test_file_store_admins_only(db_session: AsyncSession):
    contexts = SqlContextProvider(db_session)
    store = SqlFileStore(db_session)
    scope = AuthorScope(admin_ids=frozenset({1}))
    assert [f async for f in store.files_in_context(await contexts.course_context(2), scope)] == []
    assert [f.filename async for f in store.files_in_context(await contexts.course_context(3), scope)] == [
        "lecture.pptx"
    ]


@pytest.mark.asyncio
async def test_enumerate_demo_site(db_session: AsyncSession, identity: SqlIdentityProvider):
    enumerator = CourseFilesEnumerator(
        AuthorResolver(identity), SqlContextProvider(db_session), SqlFileStore(db_session)
    )
    result = await enumerator.enumerate([2, 3])
    assert [(f.courseid, f.name) for f in result] == [
        (2, "syllabus.pdf"),
        (2, "instructions.docx"),
        (2, "handbook.pdf"),
        (3, "lecture.pptx"),
    ]
    assert all(len(f.id) == 40 and len(f.contenthash) == 40 for f in result)
    assert {f.timemodified for f in result} == {"2023-11-14T22:13:20+00:00"}
    assert DEMO_TIMEMODIFIED == 1700000000


@pytest.mark.asyncio
async def test_record_store(db_session: AsyncSession):
    records = SqlRecordStore(db_session)
    discussion = await records.get_record("forum_discussions", 1)
    assert discussion.id == 1
    assert discussion.field("forum") == 1
    assert discussion.field("forumid") is None
    with pytest.raises(RecordNotFoundError):
        await records.get_record("assign", 99)
    with pytest.raises(RecordNotFoundError):
        await records.get_record("no_such_table", 1)


@pytest.mark.asyncio
async def test_component_presence(db_session: AsyncSession):
    presence = SqlComponentPresence(db_session)
    assert await presence.is_component_installed("mod_forum")
    assert not await presence.is_component_installed("mod_book")


@pytest.mark.asyncio
async def test_registry_against_database(db_session: AsyncSession, identity: SqlIdentityProvider):
    registry = ComponentRegistry.build(
        SqlRecordStore(db_session), AuthorResolver(identity), SqlComponentPresence(db_session)
    )
    assert await registry.get("forum").resolve_module_instance_id("forum_posts", 1) == 1
    assert await registry.get("book").resolve_module_instance_id("book_chapters", 1) == 1
    assert not await registry.get("book").is_installed()
    assert await registry.get("course").is_installed()


@pytest.mark.parametrize("user_id,expected", [(1, True), (4, True), (2, False), (3, False), (99, False)])
@pytest.mark.asyncio
async def test_has_capability(db_session: AsyncSession, user_id, expected):
    assert await has_capability(db_session, user_id, "moodle/course:viewhiddencourses") is expected


@pytest.mark.asyncio
async def test_init_db_switches_to_configured_url(tmp_path, monkeypatch):
    # restored after the test
    monkeypatch.setattr(db, "engine", db.engine)
    monkeypatch.setattr(db, "async_session", db.async_session)
    url = f"sqlite+aiosqlite:///{tmp_path / 'host.db'}"

    await db.init_db(url)
    try:
        assert db.engine.url.database == str(tmp_path / "host.db")
        async with db.engine.connect() as conn:
            tables = await conn.run_sync(lambda sync_conn: inspect(sync_conn).get_table_names())
        assert {"context", "files", "role_assignments", "plugins"} <= set(tables)
    finally:
        await db.dispose_db()
