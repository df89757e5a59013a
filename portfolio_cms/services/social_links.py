"""Social profile links."""

from __future__ import annotations

from typing import Any

from sqlalchemy import select, update

from portfolio_cms.core.exceptions import ConflictError
from portfolio_cms.core.models import SocialLink
from portfolio_cms.services.base import BaseService


class SocialLinkService(BaseService[SocialLink]):
    model = SocialLink
    label = "Social link"
    search_fields = ("platform", "label", "username", "url")

    def default_order(self) -> list[Any]:
        return [SocialLink.display_order, SocialLink.platform]

    async def _ensure_platform_free(
        self, user_id: str, platform: str, exclude_id: str | None = None
    ) -> None:
        stmt = select(SocialLink.id).where(
            SocialLink.user_id == user_id, SocialLink.platform == platform
        )
        if exclude_id:
            stmt = stmt.where(SocialLink.id != exclude_id)
        if (await self.session.execute(stmt)).first() is not None:
            raise ConflictError(f"A {platform} link already exists for this user")

    async def create_link(self, user_id: str, data: dict[str, Any]) -> SocialLink:
        await self._ensure_platform_free(user_id, data["platform"])
        if data.get("display_order") is None:
            existing = await self.all_for_user(user_id)
            data = {**data, "display_order": len(existing)}
        return await self.create(data, user_id=user_id)

    async def update_link(self, link: SocialLink, data: dict[str, Any]) -> SocialLink:
        if data.get("platform") and data["platform"] != link.platform:
            await self._ensure_platform_free(link.user_id, data["platform"], link.id)
        return await self.update(link, data)

    async def navigation(self, user_id: str) -> list[SocialLink]:
        return await self.all_for_user(user_id, is_active=True, show_in_nav=True)

    async def track_click(self, link: SocialLink) -> SocialLink:
        link.click_count = (link.click_count or 0) + 1
        return await self.save(link)

    async def toggle_active(self, link: SocialLink) -> SocialLink:
        link.is_active = not link.is_active
        return await self.save(link)

    async def bulk_set_active(
        self, user_id: str, ids: list[str], is_active: bool
    ) -> int:
        result = await self.session.execute(
            update(SocialLink)
            .where(SocialLink.user_id == user_id, SocialLink.id.in_(ids))
            .values(is_active=is_active)
        )
        await self.session.commit()
        return result.rowcount
