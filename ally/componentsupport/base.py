# Ally Connector - base class for per content type component support
import re
from abc import ABC, abstractmethod
from typing import ClassVar

from ally.authors import AuthorResolver
from ally.errors import ConfigurationError, PreconditionError
from ally.models import ComponentType, Context
from ally.providers import ComponentPresence, RecordStore

COMPONENT_IDENTIFIER = re.compile(r"^([a-z][a-z0-9_]*?)_component$")


class ComponentBase(ABC):
    """Describes where one content type keeps its html content and files.

    Subclasses declare an `identifier` ending in `_component` and a
    `table_fields` whitelist of the table/field pairs that may be processed.
    The file and module instance hooks work for regular layouts and can be
    overridden for anything more complicated.
    """

    identifier: ClassVar[str] = ""
    table_fields: ClassVar[dict[str, tuple[str, ...]]] = {}

    def __init__(self, records: RecordStore, authors: AuthorResolver, presence: ComponentPresence):
        self._records = records
        self._authors = authors
        self._presence = presence

    @classmethod
    @abstractmethod
    def component_type(cls) -> ComponentType:
        """One of ComponentType.CORE, MOD or BLOCK."""

    @classmethod
    def get_component_name(cls) -> str:
        match = COMPONENT_IDENTIFIER.match(cls.identifier or "")
        if not match:
            raise ConfigurationError(f"Invalid component class {cls.__name__} (identifier {cls.identifier!r})")
        return match.group(1)

    @classmethod
    def frankenstyle(cls) -> str:
        if cls.component_type() is ComponentType.CORE:
            return "core"
        return f"{cls.component_type().value}_{cls.get_component_name()}"

    async def is_installed(self) -> bool:
        return await self._presence.is_component_installed(self.frankenstyle())

    def get_table_fields(self, table: str) -> tuple[str, ...]:
        return self.table_fields.get(table, ())

    def validate_component_table_field(self, table: str, field: str) -> None:
        if not self.table_fields.get(table):
            raise ConfigurationError(f"Table {table} is not allowed for the requested component content")
        if field not in self.table_fields[table]:
            raise ConfigurationError(f"Field {field} is not allowed for the table {table}")

    async def get_approved_author_ids_for_context(self, context: Context) -> frozenset[int]:
        """Ids of approved content authors - teachers, managers, admins."""
        return await self._authors.approved_author_ids(context)

    async def user_is_approved_author_type(self, userid: int, context: Context) -> bool:
        return await self._authors.is_approved_author(userid, context)

    def get_file_area(self, table: str, field: str) -> str | None:
        if field in self.get_table_fields(table):
            return field
        return None

    def get_file_item(self, table: str, field: str, record_id: int) -> int:
        return 0

    def get_file_path(self, table: str, field: str, record_id: int) -> str:
        return "/"

    async def resolve_module_instance_id(self, table: str, record_id: int) -> int:
        """Module instance id owning `table` row `record_id`.

        Only works for the module's own table and tables holding a direct
        `<component>id` or `<component>` reference to it. Tables further down
        need an override in the component.
        """
        component = self.get_component_name()

        if self.component_type() is not ComponentType.MOD:
            raise PreconditionError(
                f"Attempt to get a module instance for a component that is not a module ({component})"
            )

        if table == component:
            return record_id

        record = await self._records.get_record(table, record_id)
        instanceid = record.field(f"{component}id") or record.field(component)
        if not instanceid:
            raise ConfigurationError(
                f'Unable to resolve component from subtable "{table}" with id {record_id}. '
                f'A developer needs to override the method "resolve_module_instance_id" in the '
                f'component {component} so that it can cope with the table "{table}".'
            )
        componentrecord = await self._records.get_record(component, instanceid)
        return componentrecord.id

    def __repr__(self):
        return f"<{type(self).__name__}(component={self.get_component_name()})>"
