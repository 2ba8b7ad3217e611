"""从 app.state 取出 ApiContainer 的依赖"""

from __future__ import annotations

from fastapi import Request

from src.interfaces.api.container import ApiContainer


def get_container(request: Request) -> ApiContainer:
    container = getattr(request.app.state, "container", None)
    if container is None:
        raise RuntimeError("ApiContainer is not initialized; the application lifespan did not run")
    return container
