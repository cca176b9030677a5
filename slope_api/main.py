import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException

from slope_api.config import settings
from slope_api.errors import ErrorDetail, ErrorResponse, TerrainAnalysisError
from slope_api.logging_utils import configure_logging, log_event
from slope_api.routes import internal_router, slope_router
from slope_api.routes.slope import close_elevation_client

configure_logging(settings.log_level)
LOGGER = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    close_elevation_client()


app = FastAPI(title=settings.app_name, version=settings.version, lifespan=lifespan)

app.include_router(internal_router)
app.include_router(slope_router)


@app.exception_handler(TerrainAnalysisError)
async def terrain_error_handler(request: Request, exc: TerrainAnalysisError) -> JSONResponse:
    log_event(
        LOGGER,
        "api.error",
        exc.message,
        level="warning",
        path=request.url.path,
        code=exc.code,
    )
    return JSONResponse(
        status_code=exc.status_code,
        content=jsonable_encoder(exc.to_response()),
    )


@app.exception_handler(HTTPException)
async def http_error_handler(request: Request, exc: HTTPException) -> JSONResponse:
    body = ErrorResponse(code=f"http_{exc.status_code}", message=str(exc.detail))
    return JSONResponse(status_code=exc.status_code, content=jsonable_encoder(body), headers=exc.headers)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        ErrorDetail(loc=list(err.get("loc", ())), msg=str(err.get("msg", "")), type=str(err.get("type", "")))
        for err in exc.errors()
    ]
    body = ErrorResponse(code="validation_error", message="Invalid request parameters", details=details)
    return JSONResponse(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        content=jsonable_encoder(body),
    )
