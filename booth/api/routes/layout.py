from fastapi import APIRouter, Depends, HTTPException, Query

from booth.api.dependencies import get_app_settings
from booth.config import Settings
from booth.models.session import LayoutRecord
from booth.services.layout import compute_layout

router = APIRouter(prefix="/layout", tags=["layout"])


@router.get("", response_model=LayoutRecord)
async def get_layout(
        width: float = Query(..., gt=0),
        height: float = Query(..., gt=0),
        shots: int = Query(3, ge=1),
        settings: Settings = Depends(get_app_settings),
):
    try:
        return compute_layout(width, height, shots, ratio=settings.aspect_width / settings.aspect_height)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))
