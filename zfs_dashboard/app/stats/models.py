"""Pydantic models for ZFS stats payloads and store status."""

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field


class PropertySource(BaseModel):
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    source_type: str = Field(alias="type")
    data: str = ""


class Property(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    source: PropertySource | None = None


class DatasetProperties(BaseModel):
    """Size and mount properties as reported by ``zfs list -j``."""

    model_config = ConfigDict(frozen=True, extra="allow")

    used: Property
    available: Property
    referenced: Property
    mountpoint: Property


class Dataset(BaseModel):
    """One filesystem, snapshot or bookmark record."""

    model_config = ConfigDict(frozen=True, extra="allow", populate_by_name=True)

    name: str
    dataset_type: str = Field(default="FILESYSTEM", alias="type")
    pool: str
    createtxg: str = ""
    dataset: str | None = None
    snapshot_name: str | None = None
    properties: DatasetProperties


class ZfsStats(BaseModel):
    """One fetched statistics payload."""

    model_config = ConfigDict(frozen=True, extra="allow")

    pools: list[str] = Field(default_factory=list)
    filesystems: list[Dataset]
    snapshots: list[Dataset]
    bookmarks: list[Dataset] = Field(default_factory=list)
    total_used: str = "0B"
    total_available: str = "0B"


class StoreStatus(BaseModel):
    """Observable state of the stats store."""

    model_config = ConfigDict(frozen=True)

    stats: ZfsStats | None = None
    loading: bool = False
    error: str | None = None
    last_updated: datetime | None = None


class UsageOut(BaseModel):
    used: str
    available: str
    percentage: int
