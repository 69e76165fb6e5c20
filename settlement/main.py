# settlement/main.py
from fastapi import FastAPI
import uvicorn

from settlement.api.routers import carts, gift_cards, health, orders, users
from settlement.data.database import Base, engine
from settlement.utils.logging import get_logger

# import wszystkich modeli przed create_all
import settlement.data.models  # noqa: F401

logger = get_logger(__name__)


def create_app() -> FastAPI:
    logger.info(f"Models registered in Base.metadata: {list(Base.metadata.tables.keys())}")
    try:
        Base.metadata.create_all(bind=engine)
    except Exception as e:
        logger.error(f"Failed to create tables: {e}")
        raise

    app = FastAPI(
        title="Cart Settlement Service",
        version="1.0.0",
    )

    app.include_router(health.router)
    app.include_router(users.router)
    app.include_router(carts.router)
    app.include_router(orders.router)
    app.include_router(gift_cards.router)

    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host="0.0.0.0", port=8000)
