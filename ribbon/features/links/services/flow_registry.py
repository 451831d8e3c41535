from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable

from ribbon.features.links.flows.creation import CreationFlow
from ribbon.features.links.flows.response import ResponseFlow
from ribbon.features.links.services.link_store import LinkStore
from ribbon.platform.utils.file_upload import IconStorage


@dataclass
class SessionFlows:
    creation: CreationFlow
    responses: OrderedDict[str, ResponseFlow] = field(default_factory=OrderedDict)


class FlowRegistry:
    """
    Keeps each browser session's flows between requests.

    Sessions are evicted least-recently-used once `max_sessions` is reached,
    and within a session only the `max_links_per_session` most recently used
    links keep their response flow.
    """

    def __init__(
        self,
        store: LinkStore,
        storage: IconStorage,
        *,
        origin: str,
        reveal_delay: float,
        min_interval: float,
        max_image_bytes: int,
        max_sessions: int = 5000,
        max_links_per_session: int = 20,
        clock: Callable[[], float] | None = None,
    ):
        self.store = store
        self.storage = storage
        self.origin = origin
        self.reveal_delay = reveal_delay
        self.min_interval = min_interval
        self.max_image_bytes = max_image_bytes
        self.max_sessions = max_sessions
        self.max_links_per_session = max_links_per_session
        self.clock = clock
        self._sessions: OrderedDict[str, SessionFlows] = OrderedDict()

    def __len__(self) -> int:
        return len(self._sessions)

    def session(self, session_id: str) -> SessionFlows:
        flows = self._sessions.get(session_id)
        if flows is None:
            flows = SessionFlows(creation=self._new_creation_flow())
            self._sessions[session_id] = flows
            while len(self._sessions) > self.max_sessions:
                self._sessions.popitem(last=False)
        else:
            self._sessions.move_to_end(session_id)
        return flows

    def creation_flow(self, session_id: str) -> CreationFlow:
        return self.session(session_id).creation

    async def open_response_flow(self, session_id: str, slug: str) -> ResponseFlow:
        """A fresh page load: always reads the record again."""
        flow = await ResponseFlow.load(self.store, slug, reveal_delay=self.reveal_delay)
        responses = self.session(session_id).responses
        responses[slug] = flow
        responses.move_to_end(slug)
        while len(responses) > self.max_links_per_session:
            responses.popitem(last=False)
        return flow

    async def response_flow(self, session_id: str, slug: str) -> ResponseFlow:
        responses = self.session(session_id).responses
        flow = responses.get(slug)
        if flow is None:
            return await self.open_response_flow(session_id, slug)
        responses.move_to_end(slug)
        return flow

    def _new_creation_flow(self) -> CreationFlow:
        kwargs = {}
        if self.clock is not None:
            kwargs["clock"] = self.clock
        return CreationFlow(
            self.store,
            self.storage,
            origin=self.origin,
            min_interval=self.min_interval,
            max_image_bytes=self.max_image_bytes,
            **kwargs,
        )
