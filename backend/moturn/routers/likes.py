import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.exc import SQLAlchemyError

from moturn.auth.dependencies import get_current_user
from moturn.models.item import ItemWithDetails, LikeToggle
from moturn.storage import storage

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/likes", tags=["Likes"])


@router.get("", response_model=List[ItemWithDetails])
def list_likes(user=Depends(get_current_user)):
    try:
        return storage.get_likes_by_user(user)
    except SQLAlchemyError:
        logger.exception("Error fetching likes")
        raise HTTPException(status_code=500, detail="Failed to fetch likes")


@router.post("/{item_id}", response_model=LikeToggle)
def toggle_like(item_id: int, user=Depends(get_current_user)):
    """Like the item, or unlike it if the caller already does."""
    try:
        if not storage.get_item_by_id(item_id):
            raise HTTPException(status_code=404, detail="Item not found")
        return storage.toggle_like(user, item_id)
    except SQLAlchemyError:
        logger.exception(f"Error toggling like on item {item_id}")
        raise HTTPException(status_code=500, detail="Failed to toggle like")
