from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI  # noqa: E402

from apis.campaign_api import router as campaign_router  # noqa: E402
from apis.google_ads_api import listing_router  # noqa: E402
from apis.google_ads_api import router as google_ads_router  # noqa: E402
from config.logging_config import setup_logging  # noqa: E402
from core.infrastructure.lifecycle import lifespan  # noqa: E402
from core.infrastructure.request_logging_middleware import RequestLoggingMiddleware  # noqa: E402
from core.metadata import APP_TITLE, VERSION  # noqa: E402
from exceptions.handlers import setup_exception_handlers  # noqa: E402

setup_logging()

app = FastAPI(title=APP_TITLE, version=VERSION, lifespan=lifespan)

app.add_middleware(RequestLoggingMiddleware)

app.include_router(campaign_router)
app.include_router(google_ads_router)
app.include_router(listing_router)

setup_exception_handlers(app)


@app.get("/health")
async def health():
    return {"status": "ok", "version": VERSION}


if __name__ == "__main__":
    import uvicorn

    from config.settings import get_settings

    uvicorn.run("main:app", host="0.0.0.0", port=get_settings().port)
