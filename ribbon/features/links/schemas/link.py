from typing import Optional

from pydantic import BaseModel, ConfigDict

from ribbon.features.links.flows.response import ResponseFlow, ResponseState
from ribbon.features.links.models.link import LinkResponse
from ribbon.platform.schemas import APIResponse


class ThemeOut(BaseModel):
    id: int
    name: str
    primary: str
    secondary: str
    accent: str
    emoji: str
    background: str

    model_config = ConfigDict(from_attributes=True)


class CreatedLinkOut(BaseModel):
    slug: str
    url: str
    share_message: str
    icon_url: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class LinkOut(BaseModel):
    slug: str
    recipient_name: str
    creator_name: Optional[str] = None
    is_anonymous: bool
    icon_url: Optional[str] = None
    response: LinkResponse
    theme: ThemeOut


class PromptOut(BaseModel):
    """What the recipient's page should currently show."""

    state: ResponseState
    decline_label: str
    decline_scale: float
    decline_attempts: int
    celebrated: bool
    creator_name: Optional[str] = None
    reveal_delay_seconds: Optional[float] = None
    error: Optional[str] = None
    link: LinkOut

    @classmethod
    def from_flow(cls, flow: ResponseFlow) -> "PromptOut":
        record = flow.record
        return cls(
            state=flow.state,
            decline_label=flow.reluctance.label,
            decline_scale=flow.reluctance.scale,
            decline_attempts=int(flow.reluctance),
            celebrated=flow.celebrated,
            creator_name=flow.visible_creator_name,
            reveal_delay_seconds=(
                flow.reveal_delay
                if flow.state is ResponseState.ACCEPTED and flow.reveals_creator and not flow.identity_revealed
                else None
            ),
            error=flow.error_message,
            link=LinkOut(
                slug=record.slug,
                recipient_name=record.recipient_name,
                creator_name=flow.visible_creator_name,
                is_anonymous=record.is_anonymous,
                icon_url=record.icon_url,
                response=_current_response(flow),
                theme=ThemeOut.model_validate(flow.theme),
            ),
        )


def _current_response(flow: ResponseFlow) -> LinkResponse:
    if flow.state is ResponseState.ACCEPTED:
        return LinkResponse.accept
    if flow.state is ResponseState.DECLINED:
        return LinkResponse.decline
    return flow.record.response


class CreatedLinkResponse(APIResponse[CreatedLinkOut]):
    pass


class PromptResponse(APIResponse[PromptOut]):
    pass
