from fastapi import Request

from ribbon.features.links.services.flow_registry import FlowRegistry, SessionFlows


def get_flow_registry(request: Request) -> FlowRegistry:
    return request.app.state.flow_registry


def get_session_id(request: Request) -> str:
    return request.state.session_id


def get_session_flows(request: Request) -> SessionFlows:
    return get_flow_registry(request).session(get_session_id(request))
