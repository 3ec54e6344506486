from __future__ import annotations

import logging
import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field

# Add parent directory to path for garden module import
sys.path.insert(0, str(Path(__file__).resolve().parent.parent))
from garden import ContentIndex, GeneratorError, NotFoundError, load_config

# Configure logging
logging.basicConfig(
    level=os.environ.get("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)

DEFAULT_PORT = int(os.environ.get("GARDEN_PORT", "8800"))


class RebuildResponse(BaseModel):
    pages_count: int
    failed_count: int
    failed: List[Dict[str, str]] = Field(default_factory=list)
    stats: Dict[str, Any]


def _build_failure(exc: Exception) -> HTTPException:
    logger.error(f"Index build failed: {exc}")
    return HTTPException(status_code=500, detail=f"Index build failed: {exc}")


def create_app(index: ContentIndex) -> FastAPI:
    """Create the HTTP app serving one content index.

    Routes map onto the static-site contract:
        GET  /api/paths                list_paths()
        GET  /api/pages                list_pages()
        GET  /api/pages/{slug}         get_page_props(slug)
        GET  /api/props/{key}          get_paths_by_prop(key)
        GET  /api/props/{key}/{value}  pages carrying that value
        POST /api/rebuild              rebuild from disk
    """
    app = FastAPI(title="Garden Relations", version="1.0.0")
    app.state.index = index

    # For production, set CORS_ORIGINS="https://yourdomain.com,https://app.yourdomain.com"
    cors_origins_str = os.environ.get("CORS_ORIGINS", "*")
    if cors_origins_str == "*":
        allowed_origins = ["*"]
    else:
        allowed_origins = [origin.strip() for origin in cors_origins_str.split(",") if origin.strip()]
        logger.info(f"CORS allowed origins: {allowed_origins}")

    app.add_middleware(
        CORSMiddleware,
        allow_origins=allowed_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.get("/health")
    def health_check() -> Dict[str, Any]:
        return {"status": "ok", "built": index.is_built}

    @app.get("/api/paths")
    def list_paths() -> Dict[str, Any]:
        try:
            paths = index.list_paths()
        except (GeneratorError, FileNotFoundError) as exc:
            raise _build_failure(exc) from exc
        return {"paths": paths}

    @app.get("/api/pages")
    def list_pages(include_content: Optional[bool] = None) -> Dict[str, Any]:
        try:
            pages = index.list_pages(include_content=include_content)
        except (GeneratorError, FileNotFoundError) as exc:
            raise _build_failure(exc) from exc
        return {"pages": pages, "total": len(pages)}

    @app.get("/api/pages/{slug:path}")
    def get_page_props(slug: str) -> Dict[str, Any]:
        try:
            return index.get_page_props(slug)
        except NotFoundError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc
        except (GeneratorError, FileNotFoundError) as exc:
            raise _build_failure(exc) from exc

    @app.get("/api/props/{key}")
    def get_paths_by_prop(key: str) -> Dict[str, Any]:
        try:
            values = index.get_paths_by_prop(key)
        except (GeneratorError, FileNotFoundError) as exc:
            raise _build_failure(exc) from exc
        return {"key": key, "values": values}

    @app.get("/api/props/{key}/{value}")
    def get_pages_by_prop(key: str, value: str) -> Dict[str, Any]:
        try:
            pages = index.get_pages_by_prop(key, value)
        except (GeneratorError, FileNotFoundError) as exc:
            raise _build_failure(exc) from exc
        if not pages:
            raise HTTPException(status_code=404, detail=f"No pages with {key}={value!r}")
        return {"key": key, "value": value, "pages": pages}

    @app.post("/api/rebuild", response_model=RebuildResponse)
    def rebuild() -> RebuildResponse:
        logger.info("Rebuilding content index")
        try:
            stats = index.rebuild()
        except (GeneratorError, FileNotFoundError) as exc:
            raise _build_failure(exc) from exc
        return RebuildResponse(
            pages_count=stats["pages_count"],
            failed_count=stats["failed_count"],
            failed=[{"path": path, "error": error} for path, error in index.failed],
            stats=stats,
        )

    return app


app = create_app(ContentIndex(load_config()))


def run_server(host: str = "0.0.0.0", port: int = DEFAULT_PORT, reload: bool = False) -> None:
    try:
        import uvicorn
    except ModuleNotFoundError as exc:  # pragma: no cover - runtime guard
        raise SystemExit(
            "Missing dependency 'uvicorn'. Install it with 'pip install uvicorn[standard]' and retry."
        ) from exc

    uvicorn.run(
        "app:app",
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    run_server(port=DEFAULT_PORT, reload=False)
