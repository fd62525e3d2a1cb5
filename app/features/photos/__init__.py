"""Photos module: the create-only photo store and lookup endpoint."""

from app.features.photos.models import Photo
from app.features.photos.routes import router
from app.features.photos.schemas import PhotoRecord, PhotoResponse
from app.features.photos.store import PhotoStore, SqlPhotoStore, get_photo_store

__all__ = [
    "Photo",
    "PhotoRecord",
    "PhotoResponse",
    "PhotoStore",
    "SqlPhotoStore",
    "get_photo_store",
    "router",
]
