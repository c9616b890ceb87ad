"""
Public SSR route - every non-API request for a tenant site.

Catch-all; must be registered after every other router. Adapts the
Starlette request into RequestInfo and the pipeline's SsrResponse back
into an HTML, redirect or plain response.
"""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse, RedirectResponse, Response

from chameleon.api.deps import get_pipeline
from chameleon.components.ssr import RequestInfo, SsrPipeline, SsrResponse

router = APIRouter()


def raw_request_path(request: Request) -> str:
    """The request path still percent-encoded; scope["path"] is already decoded."""
    raw = request.scope.get("raw_path")
    if not raw:
        return request.url.path
    return raw.decode("latin-1").split("?", 1)[0]


def request_info_from(request: Request) -> RequestInfo:
    """Build RequestInfo from an incoming request."""
    return RequestInfo(
        path=raw_request_path(request),
        query_string=request.url.query,
        headers=dict(request.headers),
        transport_host=request.url.netloc or None,
    )


def to_response(result: SsrResponse) -> Response:
    """Convert a pipeline result to a FastAPI response."""
    if result.location is not None:
        return RedirectResponse(url=result.location, status_code=result.status_code)
    if result.media_type == "text/html":
        return HTMLResponse(content=result.body, status_code=result.status_code)
    return Response(
        content=result.body, status_code=result.status_code, media_type=result.media_type
    )


@router.get(
    "/{path:path}",
    response_class=HTMLResponse,
    summary="Tenant site SSR",
    description="Server-side rendered tenant page, sitemap.xml or robots.txt.",
    include_in_schema=False,
)
async def ssr_catch_all(
    path: str,
    request: Request,
    pipeline: SsrPipeline = Depends(get_pipeline),
) -> Response:
    """Serve a public tenant route."""
    result = await pipeline.handle(request_info_from(request))
    return to_response(result)
