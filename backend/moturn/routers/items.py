import logging
from typing import List, Optional

from fastapi import APIRouter, Body, Depends, File, Form, HTTPException, Query, UploadFile
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from moturn.auth.dependencies import get_current_user, get_optional_user
from moturn.models.item import ItemCreate, ItemRead, ItemStatusUpdate, ItemWithDetails
from moturn.storage import storage
from moturn.utils.images import MAX_IMAGES, InvalidImageError, store_image
from moturn.validation import invalid, parse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/items", tags=["Items"])


@router.get("", response_model=List[ItemWithDetails])
def list_items(
    category_id: Optional[int] = Query(None, alias="categoryId"),
    region_code: Optional[str] = Query(None, alias="regionCode"),
    search: Optional[str] = None,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
):
    try:
        return storage.get_items(
            category_id=category_id,
            region_code=region_code,
            search=search,
            limit=limit,
            offset=(page - 1) * limit,
        )
    except SQLAlchemyError:
        logger.exception("Error fetching items")
        raise HTTPException(status_code=500, detail="Failed to fetch items")


@router.get("/mine", response_model=List[ItemWithDetails])
def list_my_items(user=Depends(get_current_user)):
    try:
        return storage.get_items_by_seller(user)
    except SQLAlchemyError:
        logger.exception(f"Error fetching items of {user}")
        raise HTTPException(status_code=500, detail="Failed to fetch items")


@router.get("/{item_id}", response_model=ItemWithDetails)
def get_item(item_id: int, user: Optional[str] = Depends(get_optional_user)):
    try:
        item = storage.get_item_by_id(item_id, user)
        if not item:
            raise HTTPException(status_code=404, detail="Item not found")
        storage.update_item_views(item_id)
    except SQLAlchemyError:
        logger.exception(f"Error fetching item {item_id}")
        raise HTTPException(status_code=500, detail="Failed to fetch item")
    return item


@router.post("", response_model=ItemRead)
async def create_item(
    title: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    price: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None, alias="categoryId"),
    region_code: Optional[str] = Form(None, alias="regionCode"),
    is_negotiable: Optional[str] = Form(None, alias="isNegotiable"),
    status: Optional[str] = Form(None),
    images: Optional[List[UploadFile]] = File(None),
    user=Depends(get_current_user),
):
    fields = {
        "title": title,
        "description": description,
        "price": price,
        "category_id": category_id,
        "region_code": region_code or None,
        "is_negotiable": is_negotiable,
        "status": status,
    }
    data = parse(ItemCreate, {k: v for k, v in fields.items() if v is not None}, "Invalid item data")

    if not await run_in_threadpool(storage.get_category, data.category_id):
        raise invalid("Invalid item data", [{"loc": ["categoryId"], "msg": "Category not found"}])

    uploads = [f for f in (images or []) if f.filename]
    if len(uploads) > MAX_IMAGES:
        raise invalid("Invalid item data", [{"loc": ["images"], "msg": f"At most {MAX_IMAGES} images"}])

    image_urls = []
    for upload in uploads:
        content = await upload.read()
        try:
            image_urls.append(await run_in_threadpool(store_image, content))
        except InvalidImageError as e:
            raise invalid("Invalid item data", [{"loc": ["images", upload.filename], "msg": str(e)}])

    try:
        item = await run_in_threadpool(storage.create_item, user, data, image_urls)
    except SQLAlchemyError:
        logger.exception("Error creating item")
        raise HTTPException(status_code=500, detail="Failed to create item")
    logger.info(f"Item {item.id} listed by {user} with {len(image_urls)} images")
    return item


@router.patch("/{item_id}/status", response_model=ItemRead)
def update_item_status(item_id: int, payload: dict = Body(...), user=Depends(get_current_user)):
    data = parse(ItemStatusUpdate, payload, "Invalid item data")
    try:
        item = storage.get_item_by_id(item_id)
        if not item:
            raise HTTPException(status_code=404, detail="Item not found")
        if item.seller_id != user:
            raise HTTPException(status_code=403, detail="Only the seller can change this item")
        updated = storage.update_item_status(item_id, data.status)
    except SQLAlchemyError:
        logger.exception(f"Error updating status of item {item_id}")
        raise HTTPException(status_code=500, detail="Failed to update item")
    logger.info(f"Item {item_id} marked {data.status} by {user}")
    return updated
