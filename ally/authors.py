# Ally Connector - approved content authors (admins + author role holders)
import logging

from .models import AuthorScope, Context
from .providers import IdentityProvider

logger = logging.getLogger(__name__)


class AuthorResolver:
    """Answers who counts as a content author in a context.

    Admin ids and author role ids are fetched once and reused for the life of
    the resolver; invalidation belongs to the host.
    """

    def __init__(self, identity: IdentityProvider):
        self._identity = identity
        self._admin_ids: frozenset[int] | None = None
        self._role_ids: frozenset[int] | None = None

    async def admin_ids(self) -> frozenset[int]:
        if self._admin_ids is None:
            self._admin_ids = frozenset(await self._identity.admin_ids())
        return self._admin_ids

    async def role_ids(self) -> frozenset[int]:
        if self._role_ids is None:
            self._role_ids = frozenset(await self._identity.role_ids())
        return self._role_ids

    async def author_scope(self) -> AuthorScope:
        return AuthorScope(admin_ids=await self.admin_ids(), role_ids=await self.role_ids())

    async def approved_author_ids(self, context: Context) -> frozenset[int]:
        admins = await self.admin_ids()
        roleids = await self.role_ids()
        assignments = await self._identity.role_assignments_for_context(context)
        # Malformed assignment rows can carry a zero or empty user id
        userids = {ra.userid for ra in assignments if ra.userid and ra.roleid in roleids}
        logger.debug("context %s: %d admins, %d role authors", context.id, len(admins), len(userids))
        return admins | userids

    async def is_approved_author(self, userid: int, context: Context) -> bool:
        return userid in await self.approved_author_ids(context)
