"""Tests for the component support base class."""

import pytest

from ally.authors import AuthorResolver
from ally.componentsupport import ComponentBase
from ally.errors import ConfigurationError, PreconditionError, RecordNotFoundError
from ally.models import ComponentType

from .fakes import COURSE_A, FakePresence, FakeRecordStore


class AssignmentComponent(ComponentBase):
    identifier = "assignment_component"
    table_fields = {
        "assignment": ("intro", "name"),
        "assignment_submissions": ("text",),
    }

    @classmethod
    def component_type(cls):
        return ComponentType.MOD


class NewsComponent(ComponentBase):
    identifier = "news_component"
    table_fields = {"news": ("body",)}

    @classmethod
    def component_type(cls):
        return ComponentType.BLOCK


class BrokenName(ComponentBase):
    identifier = "assignment"

    @classmethod
    def component_type(cls):
        return ComponentType.MOD


@pytest.fixture
def records() -> FakeRecordStore:
    return FakeRecordStore({
        "assignment": {7: {"id": 7, "name": "Essay"}},
        "assignment_submissions": {
            1: {"id": 1, "assignmentid": 7, "text": "x"},
            2: {"id": 2, "assignment": 7, "text": "y"},
            3: {"id": 3, "userid": 5, "text": "z"},
            4: {"id": 4, "assignmentid": 0, "assignment": None},
            5: {"id": 5, "assignmentid": 99},
        },
    })


@pytest.fixture
def component(records, authors: AuthorResolver) -> AssignmentComponent:
    return AssignmentComponent(records, authors, FakePresence({"mod_assignment"}))


def test_component_name_strips_suffix():
    assert AssignmentComponent.get_component_name() == "assignment"
    assert AssignmentComponent.frankenstyle() == "mod_assignment"


def test_invalid_identifier_is_a_configuration_error():
    with pytest.raises(ConfigurationError, match="Invalid component class BrokenName"):
        BrokenName.get_component_name()


def test_component_type_is_mandatory():
    class Untyped(ComponentBase):
        identifier = "untyped_component"

    with pytest.raises(TypeError):
        Untyped(None, None, None)


def test_get_table_fields(component: AssignmentComponent):
    assert component.get_table_fields("assignment") == ("intro", "name")
    assert component.get_table_fields("unknown") == ()


@pytest.mark.parametrize("table,field", [
    ("assignment", "intro"),
    ("assignment", "name"),
    ("assignment_submissions", "text"),
])
def test_validate_allowed_fields(component: AssignmentComponent, table, field):
    component.validate_component_table_field(table, field)


def test_validate_unknown_table(component: AssignmentComponent):
    with pytest.raises(ConfigurationError, match="Table forum is not allowed"):
        component.validate_component_table_field("forum", "intro")


def test_validate_unknown_field(component: AssignmentComponent):
    with pytest.raises(ConfigurationError, match="Field grade is not allowed for the table assignment"):
        component.validate_component_table_field("assignment", "grade")


def test_file_area_defaults_to_whitelisted_field(component: AssignmentComponent):
    assert component.get_file_area("assignment", "intro") == "intro"
    assert component.get_file_area("assignment", "other") is None
    assert component.get_file_area("forum", "intro") is None


def test_file_item_and_path_defaults(component: AssignmentComponent):
    assert component.get_file_item("assignment", "intro", 7) == 0
    assert component.get_file_path("assignment", "intro", 7) == "/"


@pytest.mark.asyncio
async def test_is_installed(records, authors):
    assert await AssignmentComponent(records, authors, FakePresence({"mod_assignment"})).is_installed()
    assert not await AssignmentComponent(records, authors, FakePresence({"mod_forum"})).is_installed()


@pytest.mark.asyncio
async def test_approved_authors_delegate_to_resolver(component: AssignmentComponent):
    assert await component.get_approved_author_ids_for_context(COURSE_A) == {1, 2, 10}
    assert await component.user_is_approved_author_type(10, COURSE_A)
    assert not await component.user_is_approved_author_type(11, COURSE_A)


@pytest.mark.parametrize("record_id", [7, 12345, 0])
@pytest.mark.asyncio
async def test_resolve_primary_table_returns_id_without_lookup(component, records, record_id):
    assert await component.resolve_module_instance_id("assignment", record_id) == record_id
    assert records.lookups == []


@pytest.mark.asyncio
async def test_resolve_via_component_id_field(component, records):
    assert await component.resolve_module_instance_id("assignment_submissions", 1) == 7
    assert records.lookups == [("assignment_submissions", 1), ("assignment", 7)]


@pytest.mark.asyncio
async def test_resolve_falls_back_to_bare_component_field(component):
    assert await component.resolve_module_instance_id("assignment_submissions", 2) == 7


@pytest.mark.parametrize("record_id", [3, 4])
@pytest.mark.asyncio
async def test_resolve_unlinked_subtable_needs_override(component, record_id):
    with pytest.raises(ConfigurationError) as excinfo:
        await component.resolve_module_instance_id("assignment_submissions", record_id)
    message = str(excinfo.value)
    assert '"assignment_submissions"' in message
    assert f"with id {record_id}" in message
    assert "override" in message


@pytest.mark.asyncio
async def test_resolve_revalidates_instance_in_primary_table(component):
    with pytest.raises(RecordNotFoundError):
        await component.resolve_module_instance_id("assignment_submissions", 5)


@pytest.mark.parametrize("table", ["news", "assignment", "anything"])
@pytest.mark.asyncio
async def test_resolve_requires_module_component(records, authors, table):
    news = NewsComponent(records, authors, FakePresence())
    with pytest.raises(PreconditionError, match=r"not a module \(news\)"):
        await news.resolve_module_instance_id(table, 1)
    assert records.lookups == []
