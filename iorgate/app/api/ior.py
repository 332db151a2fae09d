"""
Reference namespace (/ior).

Serves script loads only: a request whose ``sec-fetch-dest`` header is
``script`` has its reference resolved to a file under the web root and
is redirected there. Everything else is NotFound. Component data is
never returned from this namespace.
"""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import RedirectResponse

from iorgate.addressing import IOR_ROOT, parse_url
from iorgate.app.dependencies import get_resolver
from iorgate.errors import NotFound
from iorgate.runtime import ComponentResolver, ResourcePath

logger = logging.getLogger(__name__)

FETCH_DEST_HEADER = "sec-fetch-dest"
SCRIPT_DEST = "script"

router = APIRouter(tags=["ior"])


@router.get(IOR_ROOT + "{reference:path}", summary="Redirect a script reference to its file")
async def redirect_reference(
    request: Request,
    resolver: ComponentResolver = Depends(get_resolver),
) -> RedirectResponse:
    if request.headers.get(FETCH_DEST_HEADER) != SCRIPT_DEST:
        raise NotFound(f"{request.url.path} is only served to script loads")

    ref = parse_url(request.url.path)
    target = await resolver.load(ref)
    if not isinstance(target, ResourcePath):
        raise NotFound(f"{ref} does not resolve to a script resource")

    location = target.relative_url()
    logger.info(f"[ior] {ref} -> {location}")
    return RedirectResponse(location, status_code=302)
