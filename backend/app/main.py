"""
Packcheck backend service - readiness and packaging plans over HTTP.
"""

from fastapi import FastAPI

from app.routes import packaging
from app.routes import readiness
from readiness import get_version

app = FastAPI(title="Packcheck", version=get_version())

app.include_router(readiness.router)
app.include_router(packaging.router)


@app.get("/")
async def root():
    return {"service": "packcheck", "status": "running", "version": get_version()}
