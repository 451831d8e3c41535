"""
Recipient side of a link.

A ResponseFlow lives for one page load. It starts in PROMPTING and ends in
ACCEPTED or DECLINED; the first three declines only grow the reluctance
counter, the fourth one is written. Accept and the final decline share one
in-flight flag so at most one write is outstanding.
"""

import asyncio
import enum
from typing import Callable, Optional

from ribbon.features.links.models.link import LinkResponse
from ribbon.features.links.services.link_store import LinkRecord, LinkStore
from ribbon.features.links.services.themes import Theme, resolve_theme
from ribbon.platform.config import settings
from ribbon.platform.exceptions import NotFoundError, PersistenceError
from ribbon.platform.logger import get_logger

logger = get_logger(__name__)

RETRY_MESSAGE = "Something went wrong. Please try again."


class ResponseState(str, enum.Enum):
    PROMPTING = "prompting"
    ACCEPTED = "accepted"
    DECLINED = "declined"


class Reluctance(enum.IntEnum):
    """How many times the decline button has been pressed without effect."""

    NO = 0
    REALLY = 1
    SURE = 2
    OKAY = 3

    @property
    def label(self) -> str:
        return _RELUCTANCE_LABELS[self]

    @property
    def scale(self) -> float:
        return 1 - self.value * 0.25

    def next(self) -> "Reluctance":
        return Reluctance(min(self.value + 1, Reluctance.OKAY))


_RELUCTANCE_LABELS = {
    Reluctance.NO: "No",
    Reluctance.REALLY: "Really?",
    Reluctance.SURE: "Sure?",
    Reluctance.OKAY: "Okay…",
}


class ResponseFlow:
    def __init__(
        self,
        store: LinkStore,
        record: LinkRecord,
        *,
        reveal_delay: float = settings.REVEAL_DELAY_SECONDS,
        on_celebrate: Optional[Callable[[Theme], object]] = None,
    ):
        self.store = store
        self.record = record
        self.theme = resolve_theme(record.theme_id)
        self.reveal_delay = reveal_delay
        self.on_celebrate = on_celebrate

        self.state = ResponseState.PROMPTING
        self.reluctance = Reluctance.NO
        self.in_flight = False
        self.celebrated = False
        self.identity_revealed = False
        self.error_message: Optional[str] = None
        self.reveal_task: Optional[asyncio.Task] = None

    @classmethod
    async def load(cls, store: LinkStore, slug: str, **kwargs) -> "ResponseFlow":
        record = await store.get_by_slug(slug)
        if record is None:
            logger.info(f"Link {slug} not found")
            raise NotFoundError()
        return cls(store, record, **kwargs)

    @property
    def is_terminal(self) -> bool:
        return self.state is not ResponseState.PROMPTING

    @property
    def reveals_creator(self) -> bool:
        return self.record.is_anonymous and bool(self.record.creator_name)

    @property
    def visible_creator_name(self) -> Optional[str]:
        """Creator name as the recipient may currently see it."""
        if not self.record.is_anonymous:
            return self.record.creator_name
        return self.record.creator_name if self.identity_revealed else None

    async def accept(self) -> ResponseState:
        if self.in_flight or self.is_terminal:
            return self.state
        self.error_message = None

        if not await self._write(LinkResponse.accept):
            return self.state

        self.state = ResponseState.ACCEPTED
        self._celebrate()
        if self.reveals_creator:
            self.reveal_task = asyncio.create_task(self._reveal_after_delay())
        return self.state

    async def decline(self) -> ResponseState:
        if self.in_flight or self.is_terminal:
            return self.state
        self.error_message = None

        if self.reluctance < Reluctance.OKAY:
            self.reluctance = self.reluctance.next()
            return self.state

        if await self._write(LinkResponse.decline):
            self.state = ResponseState.DECLINED
        return self.state

    async def _write(self, response: LinkResponse) -> bool:
        self.in_flight = True
        written = False
        try:
            await self.store.update_response(self.record.slug, response)
            written = True
        except PersistenceError:
            self.error_message = RETRY_MESSAGE
        finally:
            # the flag stays set after a successful write; the flow is terminal
            if not written:
                self.in_flight = False
        return written

    def _celebrate(self) -> None:
        if self.celebrated:
            return
        self.celebrated = True
        if self.on_celebrate is not None:
            self.on_celebrate(self.theme)

    async def _reveal_after_delay(self) -> None:
        await asyncio.sleep(self.reveal_delay)
        self.identity_revealed = True
