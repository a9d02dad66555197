import logging
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles

import character_generator.routers.api as api_router
import character_generator.routers.websocket as websocket_router
from character_generator.config import CORS_ORIGINS, LOG_LEVEL
from character_generator.deps import attach_session_cookie, lifespan

STATIC_DIR = Path(__file__).parent / "static"


def create_app() -> FastAPI:

    logging.basicConfig(
        level=LOG_LEVEL,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    app = FastAPI(title="AI Character Generator", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def session_cookie_middleware(request: Request, call_next):
        response = await call_next(request)
        attach_session_cookie(request, response)
        return response

    app.include_router(api_router.get_router(), prefix="/api")
    app.include_router(websocket_router.get_router(), prefix="/api")
    app.mount("/static", StaticFiles(directory=STATIC_DIR), name="static")

    @app.get("/", include_in_schema=False)
    async def index():
        return FileResponse(STATIC_DIR / "index.html")

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(app, host="0.0.0.0", port=8000)
