from contextlib import asynccontextmanager
from fastapi import FastAPI
from storefront.api.routers import public_routers, admin_routers
from storefront.api.__init__ import cur_version
from storefront.auth.session import get_session_codec
from storefront.common.custom_exceptions import register_all_exceptions
from storefront.common.logging_setup import setup_logging, shutdown_logging
from storefront.config.admin_config import admin_config
from storefront.db.connection import async_engine
from storefront.middlewares.request_id_middleware import RequestIdMiddleware


@asynccontextmanager
async def app_lifespan(app: FastAPI):
    logger = setup_logging()
    # refuses to start with a missing or short SESSION_SECRET
    app.state.session_codec = get_session_codec()
    logger.info("app.startup", extra={"env": admin_config.ENV, "admin_enabled": admin_config.ENABLE_ADMIN})

    try:
        yield
    finally:
        await async_engine.dispose()
        shutdown_logging()


def create_app():
    app = FastAPI(
        title="Storefront",
        version=cur_version,
        lifespan=app_lifespan)

    app.include_router(public_routers)

    if admin_config.ENABLE_ADMIN:
        app.include_router(admin_routers)      # mounts /api/admin

    app.add_middleware(RequestIdMiddleware)
    register_all_exceptions(app)

    return app

app = create_app()
