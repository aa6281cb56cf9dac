from .point_store import (
    PointStore as PointStore,
    StoreEvent as StoreEvent,
    StoreListener as StoreListener,
)
