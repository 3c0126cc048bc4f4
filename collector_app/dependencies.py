"""
FastAPI dependencies for dependency injection.

The hit storage client is built once by main() and attached to
app.state; routes receive it through these functions, never through a
module-level global. Tests swap it with app.dependency_overrides.
"""

from fastapi import Depends, Request

from collector_app.services.hit_service import HitService
from collector_app.storage.strategies import HitStorageStrategy


def get_hit_storage(request: Request) -> HitStorageStrategy:
    """Storage client owned by the running app"""
    return request.app.state.hit_storage


def get_hit_service(storage: HitStorageStrategy = Depends(get_hit_storage)) -> HitService:
    return HitService(storage=storage)
