# grocery/main.py
from fastapi import FastAPI
import uvicorn

from grocery.api import register_routers
from grocery.data.database import Base, init_db
from grocery.utils.logging import configure_logging, get_logger

# row policy listeners
import grocery.security.policies  # noqa: F401

logger = get_logger(__name__)


def create_app(create_tables: bool = True) -> FastAPI:
    configure_logging()

    if create_tables:
        try:
            init_db()
        except Exception as e:
            logger.error(f"Failed to create tables: {e}")
            raise
        logger.info(f"Database ready, tables: {sorted(Base.metadata.tables)}")

    app = FastAPI(
        title="Grocery Store",
        version="1.0.0",
    )
    return register_routers(app)


if __name__ == "__main__":
    uvicorn.run(create_app(), host="0.0.0.0", port=8000)
