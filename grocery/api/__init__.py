# grocery/api/__init__.py
from fastapi import FastAPI

from grocery.api.routers import auth, carts, catalog, health, orders, profile


def register_routers(app: FastAPI) -> FastAPI:
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(profile.router)
    app.include_router(catalog.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    return app
