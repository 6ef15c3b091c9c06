"""FastAPI application for the City Data dashboard backend."""

import logging
from contextlib import asynccontextmanager

import httpx
import uvicorn
from fastapi import Depends, FastAPI, Query, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

import config
from errors import CityDataError
from models import CityReport, ErrorResponse
from ratelimit import RateLimiter
from report import build_report

logging.basicConfig(level=config.LOG_LEVEL, format="%(asctime)s %(levelname)s %(name)s: %(message)s")
logger = logging.getLogger(__name__)

limiter = RateLimiter(max_requests=config.RATE_LIMIT_MAX, window_s=config.RATE_LIMIT_WINDOW_S)


@asynccontextmanager
async def lifespan(app: FastAPI):
    app.state.http = httpx.AsyncClient(
        timeout=config.HTTP_TIMEOUT_S,
        headers={"User-Agent": config.USER_AGENT},
        follow_redirects=True,
    )
    logger.info("HTTP client ready")
    yield
    await app.state.http.aclose()


app = FastAPI(title="City Data", version="1.0.0", lifespan=lifespan)

app.add_middleware(
    CORSMiddleware,
    allow_origins=config.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


class RateLimitExceeded(Exception):
    def __init__(self, headers: dict[str, str]):
        self.headers = headers


@app.exception_handler(CityDataError)
async def city_data_error_handler(request: Request, exc: CityDataError):
    if exc.status_code >= 500:
        logger.error("Request failed: %s", exc)
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


@app.exception_handler(Exception)
async def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unexpected error handling %s", request.url.path)
    return JSONResponse(status_code=500, content={"error": str(exc)})


@app.exception_handler(RateLimitExceeded)
async def rate_limit_handler(request: Request, exc: RateLimitExceeded):
    return JSONResponse(status_code=429, content={"error": config.RATE_LIMIT_MESSAGE}, headers=exc.headers)


# ---------- Dependencies ----------

def get_rate_limiter() -> RateLimiter:
    return limiter


def get_http_client(request: Request) -> httpx.AsyncClient:
    return request.app.state.http


def get_dataset_path() -> str:
    return config.DATASET_PATH


async def enforce_rate_limit(
    request: Request,
    response: Response,
    rate_limiter: RateLimiter = Depends(get_rate_limiter),
):
    """Count the request against the caller's IP; reject once over the limit."""
    client_key = request.client.host if request.client else "unknown"
    result = rate_limiter.check(client_key)
    headers = result.headers()
    if not result.allowed:
        headers["Retry-After"] = headers["RateLimit-Reset"]
        raise RateLimitExceeded(headers)
    response.headers.update(headers)


# ---------- Health check ----------

@app.get("/health")
async def health():
    return {"status": "ok"}


# ---------- City report ----------

@app.get(
    "/api",
    response_model=CityReport,
    responses={400: {"model": ErrorResponse}, 429: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    dependencies=[Depends(enforce_rate_limit)],
)
async def city_report(
    city: str | None = Query(None, description="City name, e.g. Delhi"),
    client: httpx.AsyncClient = Depends(get_http_client),
    dataset_path: str = Depends(get_dataset_path),
):
    return await build_report(client, city, dataset_path)


if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=config.PORT)
