"""Image uploads, Pillow-based metadata extraction and resized variants.

Files are written under ``<upload_dir>/images``; variants are WEBP copies
scaled to fixed widths (never enlarged) with the aspect ratio preserved.
Pillow work runs in a worker thread so the event loop is not blocked.
"""

from __future__ import annotations

import asyncio
import io
import mimetypes
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

from PIL import Image as PILImage
from PIL import UnidentifiedImageError
from sqlalchemy import delete, func, select

from portfolio_cms.core.config import settings
from portfolio_cms.core.enums import ImageSize, ImageStatus
from portfolio_cms.core.exceptions import NotFoundError, ValidationError
from portfolio_cms.core.models import Image, ImageVariant
from portfolio_cms.services.base import DEFAULT_PAGE_SIZE, BaseService, Page

ALLOWED_MIMETYPES = {
    "image/jpeg": ".jpg",
    "image/png": ".png",
    "image/gif": ".gif",
    "image/webp": ".webp",
    "image/svg+xml": ".svg",
}
# Vector images are stored as-is
RASTER_MIMETYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}

VARIANT_WIDTHS: dict[ImageSize, int] = {
    ImageSize.THUMBNAIL: 150,
    ImageSize.SMALL: 300,
    ImageSize.MEDIUM: 600,
    ImageSize.LARGE: 1200,
}
VARIANT_FORMAT = "webp"
VARIANT_QUALITY = 80

URL_PREFIX = "/api/v1/images/files"


@dataclass
class RenderedVariant:
    size: ImageSize
    filename: str
    width: int
    height: int
    content: bytes


@dataclass
class ProcessedImage:
    width: int
    height: int
    dominant_color: str
    metadata: dict[str, Any]
    variants: list[RenderedVariant]


def images_dir() -> Path:
    path = Path(settings.upload_dir) / "images"
    path.mkdir(parents=True, exist_ok=True)
    return path


def dominant_color(img: PILImage.Image) -> str:
    """Most frequent colour of a downscaled palette copy, as ``#rrggbb``."""
    sample = img.convert("RGB")
    sample.thumbnail((64, 64))
    paletted = sample.quantize(colors=8)
    palette = paletted.getpalette() or []
    count, index = max(paletted.getcolors() or [(0, 0)])
    r, g, b = palette[index * 3 : index * 3 + 3] or (0, 0, 0)
    return f"#{r:02x}{g:02x}{b:02x}"


def process_image(content: bytes, stem: str) -> ProcessedImage:
    """Read dimensions and colour, then render every size variant."""
    try:
        with PILImage.open(io.BytesIO(content)) as img:
            img.load()
            width, height = img.size
            metadata = {
                "format": img.format,
                "mode": img.mode,
                "has_alpha": "A" in img.getbands(),
                "is_animated": bool(getattr(img, "is_animated", False)),
            }
            color = dominant_color(img)
            base = img.convert("RGBA" if metadata["has_alpha"] else "RGB")
    except (UnidentifiedImageError, OSError) as exc:
        raise ValidationError(f"Unreadable image: {exc}")

    variants = []
    for size, target in VARIANT_WIDTHS.items():
        scaled = base.copy()
        # thumbnail() keeps the aspect ratio and never enlarges
        scaled.thumbnail((target, max(1, round(height * target / width))))
        buffer = io.BytesIO()
        scaled.save(buffer, format="WEBP", quality=VARIANT_QUALITY)
        variants.append(
            RenderedVariant(
                size=size,
                filename=f"{stem}-{size.value}.{VARIANT_FORMAT}",
                width=scaled.width,
                height=scaled.height,
                content=buffer.getvalue(),
            )
        )
    return ProcessedImage(width, height, color, metadata, variants)


class ImageService(BaseService[Image]):
    model = Image
    label = "Image"
    search_fields = ("title", "original_name", "alt_text")

    async def upload(
        self,
        user_id: str,
        original_name: str,
        content: bytes,
        mimetype: Optional[str],
        fields: dict[str, Any] | None = None,
    ) -> Image:
        mimetype = mimetype or mimetypes.guess_type(original_name)[0] or ""
        if mimetype not in ALLOWED_MIMETYPES:
            raise ValidationError(
                f"Unsupported file type {mimetype or 'unknown'}; "
                f"allowed: {', '.join(sorted(ALLOWED_MIMETYPES))}"
            )
        if not content:
            raise ValidationError("Uploaded file is empty")
        if len(content) > settings.max_upload_bytes:
            raise ValidationError(
                f"File exceeds the {settings.max_upload_bytes} byte upload limit"
            )

        stem = f"image-{uuid.uuid4().hex}"
        filename = stem + ALLOWED_MIMETYPES[mimetype]
        target = images_dir() / filename
        await asyncio.to_thread(target.write_bytes, content)

        image = Image(
            user_id=user_id,
            original_name=original_name,
            filename=filename,
            path=str(target),
            mimetype=mimetype,
            size=len(content),
            status=ImageStatus.PROCESSING.value,
            url=f"{URL_PREFIX}/{filename}",
            **(fields or {}),
        )
        self.session.add(image)
        await self.session.flush()

        if mimetype in RASTER_MIMETYPES:
            try:
                processed = await asyncio.to_thread(process_image, content, stem)
            except ValidationError:
                target.unlink(missing_ok=True)
                await self.session.rollback()
                raise
            image.width = processed.width
            image.height = processed.height
            image.dominant_color = processed.dominant_color
            image.metadata_json = processed.metadata
            for variant in processed.variants:
                await self._store_variant(image, variant)
        image.status = ImageStatus.READY.value

        image = await self.save(image)
        self.log.info(
            "image_uploaded", image_id=image.id, size=image.size, mimetype=mimetype
        )
        return image

    async def _store_variant(self, image: Image, variant: RenderedVariant) -> None:
        path = images_dir() / variant.filename
        await asyncio.to_thread(path.write_bytes, variant.content)
        self.session.add(
            ImageVariant(
                image_id=image.id,
                size=variant.size.value,
                format=VARIANT_FORMAT,
                filename=variant.filename,
                path=str(path),
                mimetype=f"image/{VARIANT_FORMAT}",
                width=variant.width,
                height=variant.height,
                file_size=len(variant.content),
                quality=VARIANT_QUALITY,
                url=f"{URL_PREFIX}/{variant.filename}",
            )
        )

    async def variants(self, image_id: str) -> list[ImageVariant]:
        stmt = (
            select(ImageVariant)
            .where(ImageVariant.image_id == image_id)
            .order_by(ImageVariant.width)
        )
        return list((await self.session.execute(stmt)).scalars().all())

    async def list_for_user(
        self,
        user_id: str,
        *,
        category: str | None = None,
        is_public: bool | None = None,
        search: str | None = None,
        page: int = 1,
        size: int = DEFAULT_PAGE_SIZE,
    ) -> Page[Image]:
        filters = {"user_id": user_id, "category": category, "is_public": is_public}
        return await self.list(filters=filters, search=search, page=page, size=size)

    async def delete_image(self, image: Image) -> None:
        """Remove the original, its variants, and the database rows."""
        variants = await self.variants(image.id)
        for path in [image.path, *(v.path for v in variants)]:
            await asyncio.to_thread(Path(path).unlink, missing_ok=True)
        await self.session.execute(
            delete(ImageVariant).where(ImageVariant.image_id == image.id)
        )
        await self.permanent_delete(image)

    async def resolve_file(self, filename: str) -> tuple[Path, str]:
        """Map a public filename to its path on disk and mimetype."""
        image = (
            await self.session.execute(
                self.base_query().where(Image.filename == filename)
            )
        ).scalar_one_or_none()
        if image is not None:
            return Path(image.path), image.mimetype
        variant = (
            await self.session.execute(
                select(ImageVariant).where(ImageVariant.filename == filename)
            )
        ).scalar_one_or_none()
        if variant is not None:
            return Path(variant.path), variant.mimetype
        raise NotFoundError(f"Image file {filename} not found")

    async def stats(self, user_id: str) -> dict[str, Any]:
        stmt = (
            select(Image.category, func.count(Image.id), func.coalesce(func.sum(Image.size), 0))
            .where(Image.user_id == user_id, Image.deleted_at.is_(None))
            .group_by(Image.category)
        )
        by_category = {
            category: {"count": count, "total_bytes": int(total)}
            for category, count, total in await self.session.execute(stmt)
        }
        return {
            "total_images": sum(c["count"] for c in by_category.values()),
            "total_bytes": sum(c["total_bytes"] for c in by_category.values()),
            "by_category": by_category,
        }
