# Ally Connector - content types with html content and embedded files
from ally.models import ComponentType

from .base import ComponentBase


class CourseComponent(ComponentBase):
    identifier = "course_component"
    table_fields = {
        "course": ("summary",),
        "course_sections": ("summary",),
    }

    @classmethod
    def component_type(cls):
        return ComponentType.CORE

    def get_file_area(self, table, field):
        if table == "course_sections" and field == "summary":
            return "section"
        return super().get_file_area(table, field)

    def get_file_item(self, table, field, record_id):
        if table == "course_sections":
            return record_id
        return 0


class BlockHtmlComponent(ComponentBase):
    identifier = "html_component"
    table_fields = {
        "block_instances": ("configdata",),
    }

    @classmethod
    def component_type(cls):
        return ComponentType.BLOCK

    def get_file_area(self, table, field):
        # html blocks keep their files in a single "content" area
        if super().get_file_area(table, field):
            return "content"
        return None


class AssignComponent(ComponentBase):
    identifier = "assign_component"
    table_fields = {
        "assign": ("intro",),
    }

    @classmethod
    def component_type(cls):
        return ComponentType.MOD


class ForumComponent(ComponentBase):
    identifier = "forum_component"
    table_fields = {
        "forum": ("intro",),
        "forum_posts": ("message",),
    }

    @classmethod
    def component_type(cls):
        return ComponentType.MOD

    def get_file_area(self, table, field):
        if table == "forum_posts" and field == "message":
            return "post"
        return super().get_file_area(table, field)

    def get_file_item(self, table, field, record_id):
        if table == "forum_posts":
            return record_id
        return 0

    async def resolve_module_instance_id(self, table, record_id):
        # Posts sit two levels below the forum, reached through their discussion
        if table == "forum_posts":
            post = await self._records.get_record("forum_posts", record_id)
            return await super().resolve_module_instance_id("forum_discussions", post.field("discussion"))
        return await super().resolve_module_instance_id(table, record_id)


class PageComponent(ComponentBase):
    identifier = "page_component"
    table_fields = {
        "page": ("intro", "content"),
    }

    @classmethod
    def component_type(cls):
        return ComponentType.MOD


class LabelComponent(ComponentBase):
    identifier = "label_component"
    table_fields = {
        "label": ("intro",),
    }

    @classmethod
    def component_type(cls):
        return ComponentType.MOD


class BookComponent(ComponentBase):
    identifier = "book_component"
    table_fields = {
        "book": ("intro",),
        "book_chapters": ("content",),
    }

    @classmethod
    def component_type(cls):
        return ComponentType.MOD

    def get_file_area(self, table, field):
        if table == "book_chapters" and field == "content":
            return "chapter"
        return super().get_file_area(table, field)

    def get_file_item(self, table, field, record_id):
        if table == "book_chapters":
            return record_id
        return 0
