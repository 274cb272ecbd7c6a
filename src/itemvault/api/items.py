"""Item API routes.

Learn: Every route here is mounted behind get_current_identity (see
api/__init__.py) and works through an ItemService bound to the caller's
OwnershipGuard. Create and update accept either a JSON body or a
multipart form with an optional "image" file, matching what the mobile
client sends.
"""

import json
from typing import Optional

import pydantic
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession
from starlette.datastructures import UploadFile

from itemvault.auth.dependencies import get_ownership_guard
from itemvault.auth.ownership import OwnershipGuard
from itemvault.db.engine import get_db
from itemvault.errors import ValidationError, describe_validation_error
from itemvault.schemas.auth import MessageResponse
from itemvault.schemas.item import (
    ItemCreate,
    ItemListResponse,
    ItemRead,
    ItemResponse,
    ItemUpdate,
)
from itemvault.services.item_service import ItemService, parse_item_id

router = APIRouter(prefix="/items")

ATTACHMENT_FIELD = "image"
_FORM_TYPES = ("multipart/form-data", "application/x-www-form-urlencoded")


def _svc(
    request: Request,
    db: AsyncSession = Depends(get_db),
    guard: OwnershipGuard = Depends(get_ownership_guard),
) -> ItemService:
    return ItemService(db, guard, storage=request.app.state.file_storage)


async def _read_upload(upload: UploadFile, max_bytes: int) -> tuple[str, bytes]:
    # Size guard: read one byte past the limit and reject if we got it
    content = await upload.read(max_bytes + 1)
    if len(content) > max_bytes:
        raise ValidationError(f"Attachment must be {max_bytes} bytes or smaller")
    return upload.filename, content


async def _read_payload(
    request: Request, schema: type[pydantic.BaseModel]
) -> tuple[pydantic.BaseModel, Optional[tuple[str, bytes]]]:
    """Parse a JSON or form body into schema, plus the optional attachment."""
    content_type = request.headers.get("content-type", "")
    attachment = None

    if content_type.startswith(_FORM_TYPES):
        max_bytes = request.app.state.settings.max_upload_bytes
        form = await request.form()
        data = {}
        for key, value in form.multi_items():
            if isinstance(value, UploadFile):
                if key == ATTACHMENT_FIELD and value.filename:
                    attachment = await _read_upload(value, max_bytes)
            else:
                data[key] = value
    else:
        raw = await request.body()
        try:
            data = json.loads(raw) if raw else {}
        except ValueError:
            raise ValidationError("Malformed JSON body")
        if not isinstance(data, dict):
            raise ValidationError("Request body must be a JSON object")

    try:
        body = schema.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(describe_validation_error(e.errors()))
    return body, attachment


# ─── Collection ─────────────────────────────────────────


@router.post("", response_model=ItemResponse, status_code=201)
async def create_item(request: Request, svc: ItemService = Depends(_svc)):
    body, attachment = await _read_payload(request, ItemCreate)
    item = await svc.create_item(body, attachment)
    return ItemResponse(
        message="Item created successfully",
        item=ItemRead.model_validate(item),
    )


@router.get("", response_model=ItemListResponse)
async def list_items(svc: ItemService = Depends(_svc)):
    items = await svc.list_items()
    return ItemListResponse(items=[ItemRead.model_validate(i) for i in items])


# ─── Single item ────────────────────────────────────────


@router.get("/{item_id}", response_model=ItemResponse)
async def get_item(item_id: str, svc: ItemService = Depends(_svc)):
    item = await svc.get_item(parse_item_id(item_id))
    return ItemResponse(item=ItemRead.model_validate(item))


@router.put("/{item_id}", response_model=ItemResponse)
async def update_item(
    item_id: str, request: Request, svc: ItemService = Depends(_svc)
):
    parsed_id = parse_item_id(item_id)
    body, attachment = await _read_payload(request, ItemUpdate)
    item = await svc.update_item(parsed_id, body, attachment)
    return ItemResponse(
        message="Item updated successfully",
        item=ItemRead.model_validate(item),
    )


@router.delete("/{item_id}", response_model=MessageResponse)
async def delete_item(item_id: str, svc: ItemService = Depends(_svc)):
    await svc.delete_item(parse_item_id(item_id))
    return MessageResponse(message="Item deleted successfully")
