"""Image upload, metadata and file-serving endpoints."""

import logging
from typing import Optional

from fastapi import APIRouter, File, Form, Query, UploadFile
from fastapi.responses import FileResponse

from portfolio_cms.api.auth import CurrentUser
from portfolio_cms.api.deps import DbSession, Pagination
from portfolio_cms.api.schemas.common import MessageResponse, Paginated
from portfolio_cms.api.schemas.media import ImageRead, ImageUpdate, ImageVariantRead
from portfolio_cms.core.config import settings
from portfolio_cms.core.enums import ImageCategory
from portfolio_cms.core.exceptions import NotFoundError
from portfolio_cms.core.models import Image
from portfolio_cms.services.images import ImageService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/images", tags=["Images"])


async def _image_read(service: ImageService, image: Image) -> ImageRead:
    variants = await service.variants(image.id)
    return ImageRead.model_validate(
        {
            **image.to_dict(),
            "variants": [ImageVariantRead.model_validate(v) for v in variants],
        }
    )


@router.post("", response_model=ImageRead, status_code=201)
async def upload_image(
    user: CurrentUser,
    session: DbSession,
    file: UploadFile = File(...),
    title: Optional[str] = Form(None),
    alt_text: Optional[str] = Form(None),
    caption: Optional[str] = Form(None),
    category: ImageCategory = Form(ImageCategory.GENERAL),
    is_public: bool = Form(True),
):
    """Upload one image (multipart) and render its size variants."""
    # One byte past the limit is enough to reject oversized uploads
    content = await file.read(settings.max_upload_bytes + 1)
    service = ImageService(session)
    image = await service.upload(
        user.id,
        file.filename or "upload",
        content,
        file.content_type,
        {
            "title": title,
            "alt_text": alt_text,
            "caption": caption,
            "category": category.value,
            "is_public": is_public,
        },
    )
    logger.info("Image %s uploaded by %s", image.id, user.id)
    return await _image_read(service, image)


@router.get("", response_model=Paginated[ImageRead])
async def list_images(
    user: CurrentUser,
    session: DbSession,
    params: Pagination,
    category: Optional[ImageCategory] = Query(None),
    is_public: Optional[bool] = Query(None),
):
    service = ImageService(session)
    result = await service.list_for_user(
        user.id,
        category=category.value if category else None,
        is_public=is_public,
        search=params.search,
        page=params.page,
        size=params.size,
    )
    data = [await _image_read(service, image) for image in result.items]
    return Paginated[ImageRead](data=data, total=result.total)


@router.get("/stats")
async def image_stats(user: CurrentUser, session: DbSession) -> dict:
    return await ImageService(session).stats(user.id)


@router.get("/files/{filename}")
async def serve_file(filename: str, session: DbSession):
    path, mimetype = await ImageService(session).resolve_file(filename)
    if not path.is_file():
        raise NotFoundError(f"Image file {filename} not found")
    return FileResponse(path, media_type=mimetype)


@router.get("/{image_id}", response_model=ImageRead)
async def get_image(image_id: str, user: CurrentUser, session: DbSession):
    service = ImageService(session)
    return await _image_read(service, await service.get_owned(image_id, user))


@router.patch("/{image_id}", response_model=ImageRead)
async def update_image(
    image_id: str, body: ImageUpdate, user: CurrentUser, session: DbSession
):
    service = ImageService(session)
    image = await service.get_owned(image_id, user)
    image = await service.update(image, body.model_dump(exclude_unset=True))
    return await _image_read(service, image)


@router.delete("/{image_id}", response_model=MessageResponse)
async def delete_image(image_id: str, user: CurrentUser, session: DbSession):
    service = ImageService(session)
    await service.delete_image(await service.get_owned(image_id, user))
    return MessageResponse(message="Image deleted successfully")
