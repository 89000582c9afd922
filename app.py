import logging
import os

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.profile.router import router as profile_router
from api.profile.schemas import collect_validation_errors
from errors import ValidationFailed

load_dotenv()
logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO").upper(),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)
logger = logging.getLogger(__name__)

app = FastAPI(title="Developer Profile API", version="1.0.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=[],              # keep empty when using regex
    allow_origin_regex=".*",       # matches any origin
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    failure = ValidationFailed(collect_validation_errors(exc.errors()))
    logger.info("Rejected %s %s: %s", request.method, request.url.path, failure)
    return JSONResponse(status_code=400, content={"errors": failure.errors})


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    # Dict details are the response body, e.g. {"msg": "..."}.
    content = exc.detail if isinstance(exc.detail, dict) else {"msg": exc.detail}
    return JSONResponse(status_code=exc.status_code, content=content, headers=exc.headers)


@app.get("/health")
def health() -> dict[str, str]:
    return {"status": "ok"}


app.include_router(profile_router)
