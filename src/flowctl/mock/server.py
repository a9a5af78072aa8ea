"""Mock of the n8n public workflows API for offline testing."""

from __future__ import annotations

from typing import Any

import uvicorn
from fastapi import APIRouter, Depends, FastAPI, HTTPException, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from flowctl.clients.n8n import API_KEY_HEADER, WORKFLOWS_PATH
from flowctl.core.logging import StructuredLogger
from flowctl.mock.store import WorkflowStore

logger = StructuredLogger(__name__)

DEFAULT_HOST = "127.0.0.1"
DEFAULT_PORT = 5678
INVALID_API_KEY = "invalid-key"

# Paths served without an API key
PUBLIC_PATHS = frozenset({"/health"})


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Logs each request with its response status."""

    async def dispatch(self, request: Request, call_next):
        response = await call_next(request)
        logger.info(
            f"{request.method} {request.url.path}",
            status_code=response.status_code,
        )
        return response


class ApiKeyMiddleware(BaseHTTPMiddleware):
    """Rejects requests without a usable API key before they are routed.

    Unknown paths and unsupported methods answer 401/403 too, not 404/405.
    """

    async def dispatch(self, request: Request, call_next):
        if request.url.path in PUBLIC_PATHS:
            return await call_next(request)
        api_key = request.headers.get(API_KEY_HEADER)
        if not api_key:
            return JSONResponse(
                {"detail": f"Missing {API_KEY_HEADER} header"},
                status_code=status.HTTP_401_UNAUTHORIZED,
            )
        if api_key == INVALID_API_KEY:
            return JSONResponse({"detail": "Invalid API key"}, status_code=status.HTTP_403_FORBIDDEN)
        return await call_next(request)


def get_store(request: Request) -> WorkflowStore:
    return request.app.state.store


async def _json_object(request: Request) -> dict[str, Any]:
    """Read the request body as a JSON object; an empty body reads as {}."""
    raw = await request.body()
    if not raw:
        return {}
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid JSON body")
    if not isinstance(body, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request body must be a JSON object")
    return body


def _not_found(workflow_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Workflow not found: {workflow_id}")


router = APIRouter(prefix=WORKFLOWS_PATH)


@router.get("")
async def list_workflows(store: WorkflowStore = Depends(get_store)):
    return {"data": store.list()}


@router.get("/{workflow_id}")
async def get_workflow(workflow_id: str, store: WorkflowStore = Depends(get_store)):
    workflow = store.get(workflow_id)
    if workflow is None:
        raise _not_found(workflow_id)
    return workflow


@router.post("", status_code=status.HTTP_201_CREATED)
async def create_workflow(request: Request, store: WorkflowStore = Depends(get_store)):
    body = await _json_object(request)
    return store.create(body)


@router.put("/{workflow_id}")
@router.patch("/{workflow_id}")
async def update_workflow(
    workflow_id: str,
    request: Request,
    store: WorkflowStore = Depends(get_store),
):
    if workflow_id not in store:
        raise _not_found(workflow_id)
    body = await _json_object(request)
    return store.update(workflow_id, body)


@router.delete("/{workflow_id}")
async def delete_workflow(workflow_id: str, store: WorkflowStore = Depends(get_store)):
    if not store.delete(workflow_id):
        raise _not_found(workflow_id)
    return {"success": True}


def create_app(seed: bool = True, store: WorkflowStore | None = None) -> FastAPI:
    """Create the mock API application.

    Args:
        seed: Start with the ``test-workflow-1`` workflow
        store: Existing store to serve (a fresh one is created otherwise)
    """
    app = FastAPI(title="Mock n8n API", version="1.0.0")
    app.state.store = store if store is not None else WorkflowStore(seed=seed)

    # add_middleware prepends; CORS stays outermost since preflights carry no key
    app.add_middleware(ApiKeyMiddleware)
    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", API_KEY_HEADER],
    )

    @app.get("/health")
    async def health():
        return {"status": "ok"}

    app.include_router(router)
    return app


def run_server(host: str = DEFAULT_HOST, port: int = DEFAULT_PORT, seed: bool = True) -> None:
    """Serve the mock API until interrupted."""
    logger.info("Starting mock n8n API", host=host, port=port)
    uvicorn.run(create_app(seed=seed), host=host, port=port, log_level="info")
