"""Photo lookup routes."""

from fastapi import APIRouter, Depends

from app.core.exceptions import NotFoundError
from app.features.photos.schemas import PhotoResponse
from app.features.photos.store import PhotoStore, get_photo_store

router = APIRouter(prefix="/photos", tags=["photos"])


@router.get(
    "/{photo_id}",
    response_model=PhotoResponse,
    summary="Get an imported photo by its feed entry id",
)
async def get_photo(
    photo_id: str,
    store: PhotoStore = Depends(get_photo_store),
) -> PhotoResponse:
    """Return the stored photo record.

    Raises:
        NotFoundError: If no photo with this id has been imported.
    """
    record = await store.get(photo_id)
    if record is None:
        raise NotFoundError(
            message=f"Photo not found: {photo_id}",
            details={"photo_id": photo_id},
        )
    return PhotoResponse.model_validate(record.model_dump())
