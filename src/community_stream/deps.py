"""FastAPI dependency injection: app.state.container holds singletons; Depends() resolves them."""
from typing import Annotated

from fastapi import Depends, Request, WebSocket

from community_stream.config import Settings
from community_stream.container import Container
from community_stream.realtime import SessionRegistry
from community_stream.services import (AccessEvaluator, CommunityStatsService,
                                       MessageBroadcaster, StreamService,
                                       UserService)


def get_container(request: Request) -> Container:
    """Resolve the app's DI container (created at startup)."""
    return request.app.state.container


def get_container_ws(websocket: WebSocket) -> Container:
    """Resolve the DI container for WebSocket routes."""
    return websocket.scope["app"].state.container


def get_settings(request: Request) -> Settings:
    return get_container(request).settings()


def get_user_service(request: Request) -> UserService:
    return get_container(request).user_service()


def get_stream_service(request: Request) -> StreamService:
    return get_container(request).stream_service()


def get_stats_service(request: Request) -> CommunityStatsService:
    return get_container(request).stats_service()


def get_access_evaluator(request: Request) -> AccessEvaluator:
    return get_container(request).access_evaluator()


def get_message_broadcaster(request: Request) -> MessageBroadcaster:
    return get_container(request).message_broadcaster()


def get_message_broadcaster_ws(websocket: WebSocket) -> MessageBroadcaster:
    return get_container_ws(websocket).message_broadcaster()


def get_session_registry_ws(websocket: WebSocket) -> SessionRegistry:
    return get_container_ws(websocket).session_registry()


# Type aliases for route injection
SettingsDep = Annotated[Settings, Depends(get_settings)]
UserServiceDep = Annotated[UserService, Depends(get_user_service)]
StreamServiceDep = Annotated[StreamService, Depends(get_stream_service)]
StatsServiceDep = Annotated[CommunityStatsService, Depends(get_stats_service)]
AccessEvaluatorDep = Annotated[AccessEvaluator, Depends(get_access_evaluator)]
MessageBroadcasterDep = Annotated[MessageBroadcaster, Depends(get_message_broadcaster)]
MessageBroadcasterWs = Annotated[MessageBroadcaster, Depends(get_message_broadcaster_ws)]
SessionRegistryWs = Annotated[SessionRegistry, Depends(get_session_registry_ws)]
