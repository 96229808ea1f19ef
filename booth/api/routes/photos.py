from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import FileResponse

from booth.api.dependencies import get_photo_store
from booth.services.storage import LocalPhotoStore

router = APIRouter(prefix="/photos", tags=["photos"])


@router.get("/{filename}")
async def download_photo(filename: str, store: LocalPhotoStore = Depends(get_photo_store)):
    filepath = store.path_for(filename)
    if filepath is None:
        raise HTTPException(status_code=404, detail="Photo not found")

    return FileResponse(filepath, media_type="image/jpeg", filename=filename)


@router.get("/")
async def list_photos(store: LocalPhotoStore = Depends(get_photo_store)):
    return {"photos": store.list_photos()}
