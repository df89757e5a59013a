"""Page-view tracking, portfolio summaries, realtime stats, referrers, funnels
and visitor journeys.

Visitors are identified by a client-supplied ``visitor_id`` (a random id the
public site keeps in local storage). Each tracked view upserts the
per-portfolio visitor aggregate and recomputes its engagement score:

    min(total_time / 300 * 40, 40) + scroll_depth / 100 * 30 + min(visits * 5, 30)
"""

from __future__ import annotations

import uuid
from collections import Counter, defaultdict
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Optional
from urllib.parse import urlparse

from sqlalchemy import func, select
from user_agents import parse as parse_ua

from portfolio_cms.core.enums import AnalyticsPeriod, DeviceType
from portfolio_cms.core.exceptions import NotFoundError, ValidationError
from portfolio_cms.core.models import PageView, Portfolio, Visitor
from portfolio_cms.services.base import BaseService

PERIOD_DELTAS = {
    AnalyticsPeriod.DAY.value: timedelta(hours=24),
    AnalyticsPeriod.WEEK.value: timedelta(days=7),
    AnalyticsPeriod.MONTH.value: timedelta(days=30),
    AnalyticsPeriod.QUARTER.value: timedelta(days=90),
}
TOP_N = 10
TOP_REFERRERS = 20
ACTIVE_WINDOW = timedelta(minutes=5)
CURRENT_PAGES_WINDOW = timedelta(minutes=10)
UNKNOWN_FAMILY = "Other"


@dataclass
class ClientInfo:
    device_type: str
    browser: Optional[str]
    operating_system: Optional[str]
    is_bot: bool


def _family(name: str) -> Optional[str]:
    # ua-parser reports unrecognised agents as "Other"
    return None if name == UNKNOWN_FAMILY else name


def parse_user_agent(user_agent: Optional[str]) -> ClientInfo:
    ua = parse_ua(user_agent or "")
    if ua.is_tablet:
        device = DeviceType.TABLET.value
    elif ua.is_mobile:
        device = DeviceType.MOBILE.value
    else:
        device = DeviceType.DESKTOP.value
    return ClientInfo(
        device_type=device,
        browser=_family(ua.browser.family),
        operating_system=_family(ua.os.family),
        is_bot=ua.is_bot,
    )


def referrer_domain(referrer: Optional[str]) -> Optional[str]:
    if not referrer:
        return None
    try:
        host = urlparse(referrer).hostname
    except ValueError:
        return None
    return host or None


def engagement_score(total_time: int, scroll_depth: int, visit_count: int) -> float:
    time_score = min(total_time / 300 * 40, 40)
    scroll_score = min(max(scroll_depth, 0), 100) / 100 * 30
    visit_score = min(visit_count * 5, 30)
    return round(time_score + scroll_score + visit_score)


class AnalyticsService(BaseService[PageView]):
    model = PageView
    label = "Page view"

    async def track_page_view(
        self,
        data: dict[str, Any],
        *,
        user_agent: Optional[str] = None,
        ip_address: Optional[str] = None,
    ) -> dict[str, Any]:
        portfolio = await self.session.get(Portfolio, data["portfolio_id"])
        if portfolio is None or portfolio.deleted_at is not None:
            raise NotFoundError(f"Portfolio with ID {data['portfolio_id']} not found")

        user_agent = data.get("user_agent") or user_agent
        client = parse_user_agent(user_agent)
        visitor_key = data.get("visitor_id") or uuid.uuid4().hex
        session_key = data.get("session_id") or uuid.uuid4().hex
        time_on_page = max(int(data.get("time_on_page") or 0), 0)
        scroll_depth = min(max(int(data.get("scroll_depth") or 0), 0), 100)
        now = datetime.now(timezone.utc)

        visitor = (
            await self.session.execute(
                select(Visitor).where(
                    Visitor.visitor_id == visitor_key,
                    Visitor.portfolio_id == portfolio.id,
                )
            )
        ).scalar_one_or_none()
        is_new = visitor is None

        if is_new:
            visitor = Visitor(
                visitor_id=visitor_key,
                portfolio_id=portfolio.id,
                user_id=portfolio.user_id,
                first_visit=now,
                last_visit=now,
                visit_count=1,
                page_views=1,
                total_time_spent=time_on_page,
                first_referrer=data.get("referrer"),
                last_referrer=data.get("referrer"),
                first_landing_page=data["page_path"],
                last_landing_page=data["page_path"],
                primary_device=client.device_type,
                primary_browser=client.browser,
                primary_os=client.operating_system,
                is_bot=client.is_bot,
            )
            self.session.add(visitor)
        else:
            visitor.visit_count += 1
            visitor.page_views += 1
            visitor.total_time_spent += time_on_page
            visitor.last_visit = now
            visitor.last_referrer = data.get("referrer")
            visitor.last_landing_page = data["page_path"]
        visitor.engagement_score = engagement_score(
            visitor.total_time_spent, scroll_depth, visitor.visit_count
        )

        view = PageView(
            portfolio_id=portfolio.id,
            user_id=portfolio.user_id,
            visitor_id=visitor_key,
            session_id=session_key,
            page_path=data["page_path"],
            page_title=data.get("page_title"),
            referrer=data.get("referrer"),
            referrer_domain=referrer_domain(data.get("referrer")),
            user_agent=user_agent,
            ip_address=ip_address,
            device_type=client.device_type,
            browser=client.browser,
            operating_system=client.operating_system,
            language=data.get("language"),
            time_on_page=time_on_page,
            scroll_depth=scroll_depth,
            is_bot=client.is_bot,
            is_unique_visitor=is_new,
            is_returning_visitor=not is_new,
            utm_source=data.get("utm_source"),
            utm_medium=data.get("utm_medium"),
            utm_campaign=data.get("utm_campaign"),
        )
        self.session.add(view)
        portfolio.view_count = (portfolio.view_count or 0) + 1
        portfolio.last_viewed_at = now
        await self.session.commit()

        self.log.debug(
            "page_view_tracked",
            portfolio_id=portfolio.id,
            path=view.page_path,
            new_visitor=is_new,
        )
        return {
            "success": True,
            "analytics_id": view.id,
            "is_new_visitor": is_new,
            "visitor_id": visitor_key,
            "session_id": session_key,
        }

    async def portfolio_summary(
        self, portfolio_id: str, period: str = AnalyticsPeriod.MONTH.value
    ) -> dict[str, Any]:
        if period not in PERIOD_DELTAS:
            raise ValidationError(
                f"Unknown period {period}; choose one of {', '.join(PERIOD_DELTAS)}"
            )
        end = datetime.now(timezone.utc)
        start = end - PERIOD_DELTAS[period]
        rows = await self.session.execute(
            select(PageView).where(
                PageView.portfolio_id == portfolio_id,
                PageView.created_at >= start,
                PageView.is_bot.is_(False),
            )
        )
        views = list(rows.scalars().all())

        sessions: Counter[str] = Counter(v.session_id for v in views)
        bounces = sum(1 for count in sessions.values() if count == 1)
        daily: dict[str, dict[str, Any]] = defaultdict(
            lambda: {"views": 0, "visitors": set()}
        )
        for v in views:
            bucket = daily[v.created_at.date().isoformat()]
            bucket["views"] += 1
            bucket["visitors"].add(v.visitor_id)

        def _top(values) -> list[dict[str, Any]]:
            return [
                {"name": name, "count": count}
                for name, count in Counter(values).most_common(TOP_N)
            ]

        return {
            "summary": {
                "total_views": len(views),
                "unique_visitors": len({v.visitor_id for v in views}),
                "avg_time_on_page": (
                    round(sum(v.time_on_page for v in views) / len(views), 2)
                    if views
                    else 0
                ),
                "bounce_rate": (
                    round(bounces / len(sessions) * 100, 2) if sessions else 0
                ),
                "period": period,
                "date_range": {"start": start.isoformat(), "end": end.isoformat()},
            },
            "top_pages": [
                {"page_path": item["name"], "views": item["count"]}
                for item in _top(v.page_path for v in views)
            ],
            "traffic_sources": [
                {"source": item["name"], "visits": item["count"]}
                for item in _top(v.referrer_domain or "direct" for v in views)
            ],
            "device_breakdown": dict(Counter(v.device_type for v in views)),
            "browser_breakdown": dict(Counter(v.browser or "unknown" for v in views)),
            "time_series": [
                {
                    "date": day,
                    "views": bucket["views"],
                    "unique_visitors": len(bucket["visitors"]),
                }
                for day, bucket in sorted(daily.items())
            ],
        }

    # ------------------------------------------------------------------
    # Drill-down reports
    # ------------------------------------------------------------------
    def _views_since(self, portfolio_id: str, since: datetime):
        return select(PageView).where(
            PageView.portfolio_id == portfolio_id,
            PageView.created_at >= since,
            PageView.is_bot.is_(False),
        ).subquery()

    async def realtime(self, portfolio_id: str) -> dict[str, Any]:
        now = datetime.now(timezone.utc)

        async def count(since: datetime, distinct_visitors: bool = False) -> int:
            views = self._views_since(portfolio_id, since)
            column = func.count(func.distinct(views.c.visitor_id)) if distinct_visitors else func.count()
            return (await self.session.execute(select(column).select_from(views))).scalar_one()

        recent = self._views_since(portfolio_id, now - CURRENT_PAGES_WINDOW)
        rows = await self.session.execute(
            select(recent.c.page_path, func.count().label("active_users"))
            .group_by(recent.c.page_path)
            .order_by(func.count().desc(), recent.c.page_path)
            .limit(TOP_N)
        )
        return {
            "active_visitors": await count(now - ACTIVE_WINDOW, distinct_visitors=True),
            "last_hour_views": await count(now - timedelta(hours=1)),
            "last_24_hours_views": await count(now - timedelta(hours=24)),
            "current_pages": [
                {"page_path": path, "active_users": active} for path, active in rows.all()
            ],
            "timestamp": now.isoformat(),
        }

    async def top_referrers(self, portfolio_id: str, days: int = 30) -> list[dict[str, Any]]:
        views = self._views_since(
            portfolio_id, datetime.now(timezone.utc) - timedelta(days=days)
        )
        rows = await self.session.execute(
            select(
                views.c.referrer_domain,
                func.count().label("visits"),
                func.count(func.distinct(views.c.visitor_id)).label("unique_visitors"),
                func.avg(views.c.time_on_page).label("avg_time_on_page"),
            )
            .where(views.c.referrer_domain.is_not(None))
            .group_by(views.c.referrer_domain)
            .order_by(func.count().desc(), views.c.referrer_domain)
            .limit(TOP_REFERRERS)
        )
        return [
            {
                "referrer_domain": domain,
                "visits": visits,
                "unique_visitors": unique,
                "avg_time_on_page": round(float(avg or 0), 2),
            }
            for domain, visits, unique, avg in rows.all()
        ]

    async def conversion_funnel(
        self, portfolio_id: str, steps: list[str], days: int = 30
    ) -> list[dict[str, Any]]:
        """Unique visitors per step path, each rated against the step before it."""
        steps = [step.strip() for step in steps if step.strip()]
        if not steps:
            raise ValidationError("At least one funnel step is required")
        views = self._views_since(
            portfolio_id, datetime.now(timezone.utc) - timedelta(days=days)
        )
        rows = await self.session.execute(
            select(views.c.page_path, func.count(func.distinct(views.c.visitor_id)))
            .where(views.c.page_path.in_(steps))
            .group_by(views.c.page_path)
        )
        visitors_by_path = dict(rows.all())

        funnel = []
        previous: Optional[int] = None
        for index, path in enumerate(steps, start=1):
            visitors = visitors_by_path.get(path, 0)
            if previous is None:
                rate = 100.0
            else:
                rate = visitors / previous * 100 if previous else 0.0
            funnel.append(
                {
                    "step": index,
                    "page_path": path,
                    "visitors": visitors,
                    "conversion_rate": round(rate, 2),
                    "dropoff_rate": round(100 - rate, 2),
                }
            )
            previous = visitors
        return funnel

    async def visitor_journey(self, portfolio_id: str, visitor_id: str) -> dict[str, Any]:
        visitor = (
            await self.session.execute(
                select(Visitor).where(
                    Visitor.visitor_id == visitor_id,
                    Visitor.portfolio_id == portfolio_id,
                )
            )
        ).scalar_one_or_none()
        if visitor is None:
            raise NotFoundError(f"Visitor {visitor_id} not found")
        rows = await self.session.execute(
            select(PageView)
            .where(
                PageView.portfolio_id == portfolio_id,
                PageView.visitor_id == visitor_id,
            )
            .order_by(PageView.created_at)
        )
        journey = list(rows.scalars().all())
        return {
            "visitor": visitor,
            "journey": journey,
            "total_pages": len(journey),
            "total_time": sum(v.time_on_page or 0 for v in journey),
            "first_visit": journey[0].created_at if journey else None,
            "last_visit": journey[-1].created_at if journey else None,
        }
