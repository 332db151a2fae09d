"""
Persisted-component namespace (/UDE).

    GET    /UDE/<address>   snapshot of the resolved component
    POST   /UDE             create, id from body or generated
    POST   /UDE/<address>   create, id from body or address
    PUT    /UDE/<address>   replace model
    PATCH  /UDE/<address>   add aliases
    DELETE /UDE/<address>   delete, {"delete": "ok"}

Any other verb under /UDE answers 405 UnsupportedOperation.

Every response, including errors, is JSON.
"""

from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from iorgate.addressing import UDE_ROOT, AddressReference, parse_url
from iorgate.app.dependencies import get_bridge
from iorgate.bridge import PersistenceBridge
from iorgate.errors import MalformedPayload, MalformedReference, UnsupportedOperation

logger = logging.getLogger(__name__)

router = APIRouter(prefix=UDE_ROOT, tags=["ude"], default_response_class=JSONResponse)


def _address(request: Request) -> AddressReference:
    ref = parse_url(request.url.path)
    if ref.is_root:
        raise MalformedReference("No component address given")
    return ref


async def _json_body(request: Request) -> Any:
    try:
        return await request.json()
    except ValueError as e:
        raise MalformedPayload("Request body is not valid JSON") from e


@router.get("/{address:path}", summary="Read a component snapshot")
async def read_component(
    request: Request,
    bridge: PersistenceBridge = Depends(get_bridge),
) -> JSONResponse:
    snapshot = await bridge.read(_address(request))
    return JSONResponse(snapshot)


@router.post("", summary="Create a component", status_code=201)
@router.post("/{address:path}", summary="Create a component at an address", status_code=201)
async def create_component(
    request: Request,
    bridge: PersistenceBridge = Depends(get_bridge),
) -> JSONResponse:
    ref = parse_url(request.url.path)
    body = await _json_body(request)
    snapshot = await bridge.create(body, ref)
    logger.info(f"[ude] Created {snapshot['id']}")
    return JSONResponse(snapshot, status_code=201)


@router.put("/{address:path}", summary="Replace a component's model")
async def update_component(
    request: Request,
    bridge: PersistenceBridge = Depends(get_bridge),
) -> JSONResponse:
    ref = _address(request)
    body = await _json_body(request)
    return JSONResponse(await bridge.update(ref, body))


@router.patch("/{address:path}", summary="Add aliases to a component")
async def alias_component(
    request: Request,
    bridge: PersistenceBridge = Depends(get_bridge),
) -> JSONResponse:
    ref = _address(request)
    body = await _json_body(request)
    return JSONResponse(await bridge.add_alias(ref, body))


@router.delete("/{address:path}", summary="Delete a component")
async def delete_component(
    request: Request,
    bridge: PersistenceBridge = Depends(get_bridge),
) -> JSONResponse:
    return JSONResponse(await bridge.delete(_address(request)))


@router.api_route("", methods=["HEAD", "OPTIONS"], include_in_schema=False)
@router.api_route("/{address:path}", methods=["HEAD", "OPTIONS"], include_in_schema=False)
async def unsupported_verb(request: Request) -> JSONResponse:
    # keeps HEAD and OPTIONS off the static mount
    raise UnsupportedOperation(f"{request.method} is not supported on {request.url.path}")
