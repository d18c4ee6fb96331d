from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from catalog_stats import __version__
from catalog_stats.api.health import router as health_router
from catalog_stats.api.library import router as library_router
from catalog_stats.api.schemas import ErrorResponse
from catalog_stats.api.stats import router as stats_router
from catalog_stats.core import CatalogStatsError, configure_logging, log_error

configure_logging()

app = FastAPI(
    title="Catalog Stats API",
    version=__version__,
    description="Library pages and listening statistics for the music player.",
)


@app.exception_handler(CatalogStatsError)
async def catalog_stats_error_handler(request: Request, exc: CatalogStatsError) -> JSONResponse:
    log_error(f"{request.url.path} failed ({exc.kind}): {exc}")
    body = ErrorResponse(error=exc.kind, detail=str(exc))
    return JSONResponse(status_code=exc.http_status, content=body.model_dump(mode="json"))


app.include_router(health_router, tags=["health"])
app.include_router(library_router, prefix="/library", tags=["library"])
app.include_router(stats_router, prefix="/stats", tags=["stats"])
