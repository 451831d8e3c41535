from dataclasses import dataclass
from typing import Optional

from sqlalchemy import select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ribbon.features.links.models.link import Link, LinkResponse
from ribbon.platform.exceptions import PersistenceError
from ribbon.platform.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class LinkRecord:
    """Detached snapshot of a `links` row, valid for one page render."""

    slug: str
    recipient_name: str
    creator_name: str
    theme_id: int
    icon_url: Optional[str]
    is_anonymous: bool
    response: LinkResponse

    @classmethod
    def from_model(cls, link: Link) -> "LinkRecord":
        return cls(
            slug=link.slug,
            recipient_name=link.recipient_name,
            creator_name=link.creator_name,
            theme_id=link.theme_id,
            icon_url=link.icon_url,
            is_anonymous=bool(link.is_anonymous),
            response=LinkResponse(link.response),
        )


class LinkStore:
    """
    Row-level access to the `links` table.

    Each call opens its own session, so one store can be shared by every
    flow in the process. Database failures surface as PersistenceError.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession], conditional_update: bool = False):
        self.session_factory = session_factory
        self.conditional_update = conditional_update

    async def insert(
        self,
        *,
        slug: str,
        recipient_name: str,
        creator_name: str,
        theme_id: int,
        icon_url: Optional[str],
        is_anonymous: bool,
    ) -> LinkRecord:
        link = Link(
            slug=slug,
            recipient_name=recipient_name,
            creator_name=creator_name,
            theme_id=theme_id,
            icon_url=icon_url,
            is_anonymous=is_anonymous,
            response=LinkResponse.unset,
        )
        async with self.session_factory() as db:
            db.add(link)
            try:
                await db.commit()
            except SQLAlchemyError as exc:
                logger.exception(f"Failed to insert link {slug}", exc_info=exc)
                await db.rollback()
                raise PersistenceError("Database error: could not save your link") from exc
            return LinkRecord.from_model(link)

    async def get_by_slug(self, slug: str) -> Optional[LinkRecord]:
        async with self.session_factory() as db:
            try:
                result = await db.execute(select(Link).where(Link.slug == slug))
            except SQLAlchemyError as exc:
                logger.exception(f"Failed to load link {slug}", exc_info=exc)
                raise PersistenceError() from exc
            link = result.scalar_one_or_none()
            return LinkRecord.from_model(link) if link else None

    async def update_response(self, slug: str, response: LinkResponse) -> None:
        stmt = update(Link).where(Link.slug == slug)
        if self.conditional_update:
            stmt = stmt.where(Link.response == LinkResponse.unset)
        stmt = stmt.values(response=response)

        async with self.session_factory() as db:
            try:
                result = await db.execute(stmt)
                await db.commit()
            except SQLAlchemyError as exc:
                logger.exception(f"Failed to record response for link {slug}", exc_info=exc)
                await db.rollback()
                raise PersistenceError() from exc

        if self.conditional_update and result.rowcount == 0:
            logger.warning(f"Link {slug} already has a response; {response.value} not written")
            raise PersistenceError()
        logger.info(f"Link {slug} response set to {response.value}")
