import logging
from pathlib import Path
from typing import Any, List, Optional

from fastapi import FastAPI, HTTPException, Body
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse

from models import (
    SnapshotResponse, KeyInfo, BatchImportResponse, BatchDeleteResponse,
    snapshot_to_response,
)
from config import Config, get_config, create_infra_adapters, create_usage_fetcher
from domain.errors import (
    NoCredentialsError, CredentialError, InvalidCredentialError,
    DuplicateCredentialError, CredentialNotFoundError,
)
from ports.usage import UsageFetcherPort
from use_cases.aggregate_usage import AggregateUsageUseCase
from use_cases.manage_credentials import CredentialManager

logger = logging.getLogger(__name__)

STATIC_DIR = Path(__file__).parent / "static"


def _credential_http_error(e: CredentialError) -> HTTPException:
    if isinstance(e, DuplicateCredentialError):
        return HTTPException(status_code=409, detail=str(e))
    if isinstance(e, CredentialNotFoundError):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


def create_app(
    cfg: Optional[Config] = None,
    adapters: Optional[dict] = None,
    fetcher: Optional[UsageFetcherPort] = None,
) -> FastAPI:
    """Build the monitor app.

    ``adapters`` and ``fetcher`` override the ones built from config, which
    lets tests run against an in-memory store and a fake upstream.
    """
    cfg = cfg or get_config()
    app = FastAPI(title="Usage Allowance Monitor")

    _infra = adapters or create_infra_adapters(cfg)
    _store = _infra["credential_store"]
    _fetcher = fetcher or create_usage_fetcher(cfg)
    _use_case = AggregateUsageUseCase(
        fetcher=_fetcher,
        balance_sink=_infra["balance_sink"],
        credential_store=_store,
        max_concurrency=cfg.max_concurrency,
    )
    _manager = CredentialManager(_store)

    if cfg.allowed_origins:
        app.add_middleware(
            CORSMiddleware,
            allow_origins=cfg.allowed_origins,
            allow_methods=["GET", "POST", "DELETE", "OPTIONS"],
            allow_headers=["Content-Type"],
        )

    @app.on_event("shutdown")
    async def shutdown_event():
        await _fetcher.aclose()

    @app.get("/")
    async def dashboard():
        return FileResponse(STATIC_DIR / "index.html", media_type="text/html")

    @app.get("/api/data", response_model=SnapshotResponse)
    async def get_data():
        try:
            snapshot = await _use_case.execute()
        except NoCredentialsError as e:
            logger.error(f"Error fetching aggregated data: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        return snapshot_to_response(snapshot, cfg.display_utc_offset_hours)

    @app.get("/api/keys", response_model=List[KeyInfo])
    async def list_keys():
        return [KeyInfo(id=cid, key=masked) for cid, masked in _manager.list_masked()]

    @app.post("/api/keys")
    async def add_keys(body: Any = Body(...)):
        """Add one key (JSON object) or import many (JSON array)."""
        try:
            if isinstance(body, list):
                result = _manager.import_batch(body)
                return BatchImportResponse(
                    added=result.added,
                    skipped=result.skipped,
                    errors=result.errors or None,
                )
            if not isinstance(body, dict):
                raise InvalidCredentialError("id and key are required")
            _manager.add(body.get("id"), body.get("key"))
            return {"success": True}
        except CredentialError as e:
            raise _credential_http_error(e)
        except OSError as e:
            logger.error(f"Error adding keys: {e}")
            raise HTTPException(status_code=500, detail=str(e))

    @app.post("/api/keys/batch-delete", response_model=BatchDeleteResponse)
    async def batch_delete_keys(body: Any = Body(None)):
        if not isinstance(body, dict) or "ids" not in body:
            raise HTTPException(status_code=400, detail="ids array is required")
        try:
            result = _manager.delete_batch(body["ids"])
        except CredentialError as e:
            raise _credential_http_error(e)
        return BatchDeleteResponse(
            deleted=result.deleted,
            not_found=result.not_found,
            errors=result.errors or None,
        )

    @app.delete("/api/keys/{credential_id}")
    async def delete_key(credential_id: str):
        try:
            _manager.delete(credential_id)
        except CredentialError as e:
            raise _credential_http_error(e)
        except OSError as e:
            logger.error(f"Error deleting key: {e}")
            raise HTTPException(status_code=500, detail=str(e))
        return {"success": True}

    @app.get("/health")
    async def health_check():
        return {
            "status": "ok",
            "credential_count": _manager.count(),
            "config": cfg.as_dict(),
        }

    return app
