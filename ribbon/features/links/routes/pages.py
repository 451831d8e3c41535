from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile, status
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from ribbon.features.links.dependencies.session import (
    get_flow_registry,
    get_session_flows,
    get_session_id,
)
from ribbon.features.links.flows.creation import LinkForm
from ribbon.features.links.flows.response import ResponseFlow
from ribbon.features.links.services.flow_registry import FlowRegistry, SessionFlows
from ribbon.features.links.services.themes import DEFAULT_THEME_ID, THEMES
from ribbon.platform.exceptions import NotFoundError, PersistenceError, RibbonError
from ribbon.platform.logger import get_logger
from ribbon.platform.utils.file_upload import read_upload

logger = get_logger(__name__)

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent.parent / "templates"))

router = APIRouter(tags=["Pages"], include_in_schema=False)


@router.get("/", response_class=HTMLResponse)
async def generator_page(request: Request, flows: SessionFlows = Depends(get_session_flows)):
    return _render_generator(request, flows)


@router.post("/", response_class=HTMLResponse)
async def submit_generator(
    request: Request,
    recipient_name: str = Form(""),
    creator_name: str = Form(""),
    theme_id: str = Form(str(DEFAULT_THEME_ID)),
    is_anonymous: bool = Form(False),
    image: Optional[UploadFile] = File(None),
    flows: SessionFlows = Depends(get_session_flows),
):
    form = LinkForm(
        recipient_name=recipient_name,
        creator_name=creator_name,
        theme_id=theme_id,
        is_anonymous=is_anonymous,
        image=None,
    )
    try:
        form.image = await read_upload(image)
        await flows.creation.create_link(form)
    except RibbonError as exc:
        return _render_generator(request, flows, form=form, status_code=exc.status_code)
    return _render_generator(request, flows, status_code=status.HTTP_201_CREATED)


@router.post("/reset")
async def reset_generator(flows: SessionFlows = Depends(get_session_flows)):
    flows.creation.reset()
    return RedirectResponse(url="/", status_code=status.HTTP_303_SEE_OTHER)


@router.get("/be-mine/{slug}", response_class=HTMLResponse)
async def landing_page(
    request: Request,
    slug: str,
    registry: FlowRegistry = Depends(get_flow_registry),
    session_id: str = Depends(get_session_id),
):
    try:
        flow = await registry.open_response_flow(session_id, slug)
    except (NotFoundError, PersistenceError) as exc:
        return _render_not_found(request, exc)
    return _render_landing(request, flow)


@router.post("/be-mine/{slug}/accept", response_class=HTMLResponse)
async def accept_page(
    request: Request,
    slug: str,
    registry: FlowRegistry = Depends(get_flow_registry),
    session_id: str = Depends(get_session_id),
):
    try:
        flow = await registry.response_flow(session_id, slug)
    except (NotFoundError, PersistenceError) as exc:
        return _render_not_found(request, exc)
    await flow.accept()
    return _render_landing(request, flow)


@router.post("/be-mine/{slug}/decline", response_class=HTMLResponse)
async def decline_page(
    request: Request,
    slug: str,
    registry: FlowRegistry = Depends(get_flow_registry),
    session_id: str = Depends(get_session_id),
):
    try:
        flow = await registry.response_flow(session_id, slug)
    except (NotFoundError, PersistenceError) as exc:
        return _render_not_found(request, exc)
    await flow.decline()
    return _render_landing(request, flow)


def _render_generator(
    request: Request,
    flows: SessionFlows,
    form: Optional[LinkForm] = None,
    status_code: int = status.HTTP_200_OK,
):
    creation = flows.creation
    return templates.TemplateResponse(
        request,
        "generator.html",
        {
            "themes": list(THEMES.values()),
            "form": form,
            "result": creation.result,
            "error": creation.error_message,
        },
        status_code=status_code,
    )


def _render_landing(request: Request, flow: ResponseFlow):
    return templates.TemplateResponse(
        request,
        "landing.html",
        {"flow": flow, "link": flow.record, "theme": flow.theme},
        status_code=status.HTTP_503_SERVICE_UNAVAILABLE if flow.error_message else status.HTTP_200_OK,
    )


def _render_not_found(request: Request, exc: RibbonError):
    if isinstance(exc, PersistenceError):
        logger.error(f"Could not load link for {request.url.path}: {exc.message}")
    return templates.TemplateResponse(request, "not_found.html", {}, status_code=exc.status_code)
