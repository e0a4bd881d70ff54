# Ally Connector - error taxonomy


class AllyError(Exception):
    """Base class for every error raised by the connector core."""


class ConfigurationError(AllyError):
    """Descriptor misconfiguration or an attempt to process disallowed content.

    Fatal to the current operation and never retried: fixing it needs a code
    change in the component registry, not a runtime retry.
    """


class PreconditionError(ConfigurationError):
    """An operation was called on a component that cannot support it."""


class NotFoundError(AllyError):
    """A context, record or component lookup came back empty."""


class ContextNotFoundError(NotFoundError):
    def __init__(self, course_id: int):
        super().__init__(f"Course context not found for course {course_id}")
        self.course_id = course_id


class RecordNotFoundError(NotFoundError):
    def __init__(self, table: str, record_id: int):
        super().__init__(f"Record {record_id} not found in table {table}")
        self.table = table
        self.record_id = record_id


class ComponentNotFoundError(NotFoundError):
    def __init__(self, name: str):
        super().__init__(f"Component {name} is not registered")
        self.name = name


class DataError(AllyError):
    """Host data that cannot be reported, e.g. a malformed stored file hash."""
