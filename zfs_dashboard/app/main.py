import logging

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from zfs_dashboard.app.api.v1.routers import logs, stats
from zfs_dashboard.app.core.lifespan import lifespan
from zfs_dashboard.utils.loggersetup import configure_logging


configure_logging()
log = logging.getLogger("zfs_dashboard.app.main")

app = FastAPI(lifespan=lifespan, title="ZFS Dashboard", version="0.1.0")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # tighten in prod
    allow_methods=["*"],
    allow_headers=["*"],
)


async def get_healthz() -> dict[str, str]:
    return {"status": "ok"}


app.get("/healthz")(get_healthz)
app.include_router(stats.router, prefix="/api/v1")
app.include_router(logs.router, prefix="/api/v1")
