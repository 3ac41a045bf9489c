import logging

from fastapi import APIRouter, Depends, Query

from zfs_dashboard.app.core.stores import get_stats_store
from zfs_dashboard.app.stats.models import Dataset, StoreStatus, UsageOut
from zfs_dashboard.app.stats.store import StatsStore

log = logging.getLogger("zfs_dashboard.v1.routers.stats")

router = APIRouter(prefix="/stats", tags=["stats"])


@router.get("", name="get_stats", response_model=StoreStatus)
async def get_stats(store: StatsStore = Depends(get_stats_store)) -> StoreStatus:
    return store.status()


@router.post("/refresh", name="refresh_stats", response_model=StoreStatus)
async def refresh_stats(store: StatsStore = Depends(get_stats_store)) -> StoreStatus:
    log.info("stats_refresh_requested")
    await store.refresh_stats()
    return store.status()


@router.get(
    "/pools/{pool}/filesystems",
    name="list_pool_filesystems",
    response_model=list[Dataset],
)
async def list_pool_filesystems(
    pool: str, store: StatsStore = Depends(get_stats_store)
) -> list[Dataset]:
    return store.get_filesystems_by_pool(pool)


@router.get("/snapshots", name="list_dataset_snapshots", response_model=list[Dataset])
async def list_dataset_snapshots(
    dataset: str = Query(..., min_length=1),
    store: StatsStore = Depends(get_stats_store),
) -> list[Dataset]:
    # Dataset names contain "/" so they travel as a query parameter
    return store.get_snapshots_by_dataset(dataset)


@router.get("/usage", name="get_usage", response_model=UsageOut)
async def get_usage(
    used: str = Query(...),
    available: str = Query(...),
) -> UsageOut:
    return UsageOut(
        used=used,
        available=available,
        percentage=StatsStore.get_usage_percentage(used, available),
    )
