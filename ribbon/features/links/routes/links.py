from typing import Optional

from fastapi import APIRouter, Depends, File, Form, UploadFile, status

from ribbon.features.links.dependencies.session import (
    get_flow_registry,
    get_session_flows,
    get_session_id,
)
from ribbon.features.links.flows.creation import LinkForm
from ribbon.features.links.schemas.link import (
    CreatedLinkOut,
    CreatedLinkResponse,
    PromptOut,
    PromptResponse,
)
from ribbon.features.links.services.flow_registry import FlowRegistry, SessionFlows
from ribbon.features.links.services.themes import DEFAULT_THEME_ID
from ribbon.platform.response import api_response
from ribbon.platform.schemas import ErrorResponse
from ribbon.platform.utils.file_upload import read_upload

router = APIRouter(prefix="/links", tags=["Links"])

_errors = {
    400: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    429: {"model": ErrorResponse},
    502: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}


@router.post(
    "",
    response_model=CreatedLinkResponse,
    status_code=status.HTTP_201_CREATED,
    responses=_errors,
    summary="Create a shareable link",
)
async def create_link(
    recipient_name: str = Form(""),
    creator_name: str = Form(""),
    theme_id: str = Form(str(DEFAULT_THEME_ID)),
    is_anonymous: bool = Form(False),
    image: Optional[UploadFile] = File(None),
    flows: SessionFlows = Depends(get_session_flows),
):
    """
    Create a link for the current session.

    Submissions from one session must be at least a few seconds apart. The
    optional image is cropped to a square icon before it is stored.
    """
    form = LinkForm(
        recipient_name=recipient_name,
        creator_name=creator_name,
        theme_id=theme_id,
        is_anonymous=is_anonymous,
        image=await read_upload(image),
    )
    created = await flows.creation.create_link(form)

    return api_response(
        data=CreatedLinkOut.model_validate(created),
        message="Link created successfully",
        status_code=status.HTTP_201_CREATED,
    )


@router.get("/{slug}", response_model=PromptResponse, responses=_errors, summary="Open a link")
async def open_link(
    slug: str,
    registry: FlowRegistry = Depends(get_flow_registry),
    session_id: str = Depends(get_session_id),
):
    flow = await registry.open_response_flow(session_id, slug)
    return api_response(data=PromptOut.from_flow(flow), message="Link retrieved successfully")


@router.post("/{slug}/accept", response_model=PromptResponse, responses=_errors, summary="Say yes")
async def accept_link(
    slug: str,
    registry: FlowRegistry = Depends(get_flow_registry),
    session_id: str = Depends(get_session_id),
):
    flow = await registry.response_flow(session_id, slug)
    await flow.accept()
    return _prompt_response(PromptOut.from_flow(flow))


@router.post("/{slug}/decline", response_model=PromptResponse, responses=_errors, summary="Say no")
async def decline_link(
    slug: str,
    registry: FlowRegistry = Depends(get_flow_registry),
    session_id: str = Depends(get_session_id),
):
    """The first three calls only make the "No" button smaller; the fourth is recorded."""
    flow = await registry.response_flow(session_id, slug)
    await flow.decline()
    return _prompt_response(PromptOut.from_flow(flow))


def _prompt_response(prompt: PromptOut):
    if prompt.error:
        return api_response(
            data=prompt,
            message=prompt.error,
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
        )
    return api_response(data=prompt, message=f"Link is {prompt.state.value}")
