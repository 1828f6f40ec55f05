# bazar/main.py
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .db import close_pool
from .db.store import DataStore, PostgresStore
from .errors import BazarError
from .routes import admin, auth, cart, catalog, checkout, orders, products, profiles
from .services.cart import CartRegistry
from .services.storage import FirebaseStorage, ObjectStorage
from .settings import settings

logging.basicConfig(level=settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("Lih Bazar API starting up")
    if not settings.auth_jwt_secret:
        logger.warning("AUTH_JWT_SECRET is not set; every request is anonymous")
    yield
    logger.info("Lih Bazar API shutting down")
    await close_pool()


def create_app(
    store: Optional[DataStore] = None,
    storage: Optional[ObjectStorage] = None,
) -> FastAPI:
    app = FastAPI(title="Lih Bazar Storefront API", lifespan=lifespan)

    # carts live here for the life of the process
    app.state.carts = CartRegistry()
    app.state.store = store if store is not None else PostgresStore()
    app.state.storage = storage if storage is not None else FirebaseStorage()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(products.router)
    app.include_router(catalog.router)
    app.include_router(cart.router)
    app.include_router(checkout.router)
    app.include_router(orders.router)
    app.include_router(profiles.router)
    app.include_router(auth.router)
    app.include_router(admin.router)

    @app.exception_handler(BazarError)
    async def _bazar_error(request: Request, exc: BazarError):
        if exc.status_code >= 500:
            logger.error("%s %s failed: %s", request.method, request.url.path, exc.detail)
        return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})

    @app.get("/", tags=["health"])
    def root():
        return {"message": "Lih Bazar API is running"}

    @app.get("/health", tags=["health"])
    def health():
        return {"status": "ok", "carts": len(app.state.carts)}

    return app


app = create_app()
