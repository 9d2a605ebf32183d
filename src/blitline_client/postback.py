"""
Postback support: where the service should report job completion, and an
endpoint that receives those reports.

The service POSTs a JSON document ``{"results": {...}}`` to the job's
postback URL once every function has run. ``create_postback_router`` turns
that into a typed PostbackResult and hands it to application code:

    app = FastAPI()
    app.include_router(create_postback_router(store_results))
"""

from __future__ import annotations

import logging
from typing import Any, Callable, Dict, Optional, Protocol, runtime_checkable

from fastapi import APIRouter

from .models import PostbackEnvelope, PostbackResult

logger = logging.getLogger(__name__)

DEFAULT_POSTBACK_PATH = "/blitline/postback"


@runtime_checkable
class PostbackUrlProvider(Protocol):
    """Supplies the postback URL for a new job; consulted once per job builder."""

    def get_postback_url(self) -> Optional[str]:
        ...


class StaticPostbackUrlProvider:
    def __init__(self, url: str) -> None:
        self.url = url

    def get_postback_url(self) -> Optional[str]:
        return self.url

    def __repr__(self) -> str:
        return f"StaticPostbackUrlProvider({self.url!r})"


class CallablePostbackUrlProvider:
    """Adapts any zero-argument callable, e.g. one that reads the current public hostname."""

    def __init__(self, supplier: Callable[[], Optional[str]]) -> None:
        self.supplier = supplier

    def get_postback_url(self) -> Optional[str]:
        return self.supplier()

    def __repr__(self) -> str:
        return f"CallablePostbackUrlProvider({self.supplier!r})"


def create_postback_router(
    handler: Callable[[PostbackResult], Any],
    path: str = DEFAULT_POSTBACK_PATH,
) -> APIRouter:
    """
    Build a router that accepts completion postbacks from the service.

    Args:
        handler: Called with each parsed PostbackResult
        path: Route path; must match the path of the URL handed out by the
            configured PostbackUrlProvider

    Returns:
        An APIRouter to include in a FastAPI application

    Note:
        Bodies that do not match the postback schema are rejected by FastAPI
        with 422 before the handler runs.
    """
    router = APIRouter()

    @router.post(path)
    def receive_postback(payload: PostbackEnvelope) -> Dict[str, str]:
        results = payload.results
        if results.is_successful:
            logger.info(f"Blitline job {results.job_id} completed with {len(results.images)} image(s)")
        else:
            logger.warning(f"Blitline job {results.job_id} failed: {results.error}")
        handler(results)
        return {"status": "received"}

    return router
