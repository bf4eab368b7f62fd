# stockpanel/main.py
import logging
import uvicorn
from fastapi import Depends, FastAPI
from stockpanel.core.config import settings
from stockpanel.core.logging_config import configure_logging
from stockpanel.core.middleware import setup_middleware
from stockpanel.db import get_db
from stockpanel.routers import auth, catalog, dashboard, profile, reservations, sales, stock

logger = logging.getLogger(__name__)

def create_app() -> FastAPI:
    configure_logging(settings.log_level)

    app = FastAPI(
        title=settings.app_name,
        docs_url="/docs" if settings.debug else None,
        redoc_url="/redoc" if settings.debug else None,
    )
    setup_middleware(app)

    app.include_router(auth.router)
    app.include_router(stock.router)
    app.include_router(sales.router)
    app.include_router(reservations.router)
    app.include_router(dashboard.router)
    app.include_router(profile.router)
    app.include_router(catalog.router)

    @app.get("/ping")
    async def ping_db(db=Depends(get_db)):
        res = await db.command("ping")
        return {"mongo_ok": res.get("ok")}

    logger.info("%s ready (db=%s, stock writes=%s)", settings.app_name, settings.db_name, settings.stock_write_mode)
    return app

app = create_app()

if __name__ == "__main__":
    uvicorn.run("stockpanel.main:app", host="0.0.0.0", port=8000, reload=settings.debug)
