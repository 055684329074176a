"""Dishka FastAPI integration opening a Scope.REQUEST container per request."""

from starlette.requests import Request
from starlette.types import ASGIApp, Receive, Scope, Send

from dishka import AsyncContainer

from observatory.util.di.scope import Scope as ObservatoryScope


class ContainerMiddleware:
    """ASGI middleware that enters a Scope.REQUEST container for each HTTP request.

    Mirrors dishka.integrations.starlette.ContainerMiddleware, but targets our
    own scope hierarchy instead of dishka.Scope.REQUEST.
    """

    def __init__(self, app: ASGIApp) -> None:
        self.app = app

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            return await self.app(scope, receive, send)

        request = Request(scope, receive=receive, send=send)
        async with request.app.state.dishka_container(scope=ObservatoryScope.REQUEST) as request_container:
            request.state.dishka_container = request_container
            return await self.app(scope, receive, send)


def setup_dishka(container: AsyncContainer, app) -> None:
    """Attach the container and the per-request middleware to ``app``."""
    app.add_middleware(ContainerMiddleware)
    app.state.dishka_container = container
