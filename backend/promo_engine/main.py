from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from promo_engine.core.config import settings
from promo_engine.core.errors import ConflictError, PromotionError
from promo_engine.core.logging_config import configure_logging
from promo_engine.db.session import create_tables

configure_logging(settings.LOG_LEVEL)


@asynccontextmanager
async def lifespan(app: FastAPI):
    create_tables()
    yield


app = FastAPI(
    title="Promotions API",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins_list,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(PromotionError)
async def promotion_error_handler(request: Request, exc: PromotionError):
    content = {"detail": exc.detail, "code": exc.code}
    if isinstance(exc, ConflictError):
        content["conflicts"] = exc.conflicts
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    errors = jsonable_encoder(exc.errors())
    return JSONResponse(status_code=422, content={"detail": errors, "code": "validation_error"})


# Import routers after app creation to avoid circular imports
from promo_engine.api import products, promotions  # noqa: E402

app.include_router(products.router)
app.include_router(promotions.router)


@app.get("/")
def root():
    return {"status": "ok", "service": "promotions-api"}


@app.get("/api/health")
def health_check():
    return {
        "status": "healthy",
        "env": settings.ENV
    }
