"""FastAPI application factory."""

from fastapi import FastAPI

app = FastAPI(title="DictAssist", docs_url=None, redoc_url=None)

from dictassist.web.routes import api  # noqa: E402

app.include_router(api.router)
