# Ally Connector - component support registry
import logging
from typing import Iterable, Iterator

from ally.authors import AuthorResolver
from ally.errors import ComponentNotFoundError, ConfigurationError
from ally.providers import ComponentPresence, RecordStore

from .base import ComponentBase
from .components import (
    AssignComponent,
    BlockHtmlComponent,
    BookComponent,
    CourseComponent,
    ForumComponent,
    LabelComponent,
    PageComponent,
)

logger = logging.getLogger(__name__)

# Every content type the connector knows how to process
COMPONENT_CLASSES: tuple[type[ComponentBase], ...] = (
    CourseComponent,
    BlockHtmlComponent,
    AssignComponent,
    ForumComponent,
    PageComponent,
    LabelComponent,
    BookComponent,
)


class ComponentRegistry:
    """Component support classes keyed by component name.

    Built once at startup, which is where component naming is checked, and
    read only afterwards. `bind` hands out instances wired to the host
    collaborators of a single request.
    """

    def __init__(self, classes: Iterable[type[ComponentBase]] | None = None):
        if classes is None:
            classes = COMPONENT_CLASSES
        registered: dict[str, type[ComponentBase]] = {}
        for component_class in classes:
            # Raises ConfigurationError for identifiers not ending in _component
            name = component_class.get_component_name()
            if name in registered:
                raise ConfigurationError(f"Component {name} is registered twice")
            registered[name] = component_class
        self._classes = registered
        logger.debug("component registry built: %s", ", ".join(registered))

    @classmethod
    def build(
        cls,
        records: RecordStore,
        authors: AuthorResolver,
        presence: ComponentPresence,
        classes: Iterable[type[ComponentBase]] | None = None,
    ) -> "BoundComponents":
        return cls(classes).bind(records, authors, presence)

    def bind(self, records: RecordStore, authors: AuthorResolver, presence: ComponentPresence) -> "BoundComponents":
        return BoundComponents(
            {name: component_class(records, authors, presence) for name, component_class in self._classes.items()}
        )

    def component_class(self, name: str) -> type[ComponentBase]:
        try:
            return self._classes[name]
        except KeyError:
            raise ComponentNotFoundError(name) from None

    def names(self) -> list[str]:
        return list(self._classes)

    def __contains__(self, name: str) -> bool:
        return name in self._classes

    def __len__(self) -> int:
        return len(self._classes)


class BoundComponents:
    """Registry instances sharing one set of host collaborators."""

    def __init__(self, components: dict[str, ComponentBase]):
        self._components = components

    def get(self, name: str) -> ComponentBase:
        try:
            return self._components[name]
        except KeyError:
            raise ComponentNotFoundError(name) from None

    def names(self) -> list[str]:
        return list(self._components)

    async def installed(self) -> list[ComponentBase]:
        return [c for c in self._components.values() if await c.is_installed()]

    def __contains__(self, name: str) -> bool:
        return name in self._components

    def __iter__(self) -> Iterator[ComponentBase]:
        return iter(self._components.values())

    def __len__(self) -> int:
        return len(self._components)


__all__ = [
    "ComponentBase",
    "ComponentRegistry",
    "BoundComponents",
    "COMPONENT_CLASSES",
    "AssignComponent",
    "BlockHtmlComponent",
    "BookComponent",
    "CourseComponent",
    "ForumComponent",
    "LabelComponent",
    "PageComponent",
]
