# Ally Connector - course files to process for accessibility
import logging
from typing import AsyncIterator, Sequence

from pydantic import ValidationError

from .authors import AuthorResolver
from .errors import DataError
from .models import AuthorScope, Context, FileDescriptor, iso_8601
from .providers import ContextProvider, FileStore

logger = logging.getLogger(__name__)


class CourseFilesEnumerator:
    """Lists the files approved authors placed in a set of courses.

    Contexts are resolved in the order the course ids were given; within a
    course, files come back in whatever order the file store yields them.
    """

    def __init__(
        self,
        authors: AuthorResolver,
        contexts: ContextProvider,
        files: FileStore,
        preload: bool = True,
    ):
        self._authors = authors
        self._contexts = contexts
        self._files = files
        self._preload = preload

    async def enumerate(self, course_ids: Sequence[int]) -> list[FileDescriptor]:
        if not course_ids:
            return []
        scope = await self._authors.author_scope()
        if self._preload:
            await self._contexts.preload(course_ids)

        result: list[FileDescriptor] = []
        for course_id in course_ids:
            # ContextNotFoundError aborts the whole batch
            context = await self._contexts.course_context(course_id)
            async for descriptor in self.files_for_context(context, scope):
                result.append(descriptor)
        logger.info("enumerated %d files across %d courses", len(result), len(course_ids))
        return result

    async def files_for_context(self, context: Context, scope: AuthorScope) -> AsyncIterator[FileDescriptor]:
        async for file in self._files.files_in_context(context, scope):
            try:
                descriptor = FileDescriptor(
                    id=file.pathnamehash,
                    # The context decides which course a file is reported under
                    courseid=context.instanceid,
                    name=file.filename,
                    mimetype=file.mimetype,
                    contenthash=file.contenthash,
                    timemodified=iso_8601(file.timemodified),
                )
            except ValidationError as e:
                raise DataError(
                    f"Stored file {file.filename!r} in context {context.id} cannot be reported: "
                    f"{e.error_count()} invalid field(s)"
                ) from e
            yield descriptor
