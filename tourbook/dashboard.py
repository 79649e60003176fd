from __future__ import annotations

import asyncio
import contextlib
from collections.abc import Awaitable, Callable
from functools import lru_cache
from typing import Any

from loguru import logger

from tourbook import settings
from tourbook.client import ApiClient, get_api_client
from tourbook.envelope import unwrap
from tourbook.errors import ApiError
from tourbook.normalize import (
    normalize_buyers,
    normalize_dashboard_stats,
    normalize_package_stats,
    normalize_status_distribution,
    normalize_trips,
)
from tourbook.schemas import Buyer, DashboardPayload, DashboardStats, PackageStat, TripRow

DASHBOARD_PATH = "/admin/dashboard"

# Shown until the backend answers at least once.
SEED_DASHBOARD = DashboardPayload(
    stats=DashboardStats(total_booking=200, profit=20_000_000, active_buyers=489),
    packages=[
        PackageStat(name="Paket Tour Korea", percentage=75),
        PackageStat(name="Paket Tour Japan", percentage=55),
        PackageStat(name="Paket Tour Eropa", percentage=35),
    ],
    buyers=[
        Buyer(name="Sonya Nur Fadillah", total_booking=22, total_reviews=20),
        Buyer(name="Elsa Marta Saputri", total_booking=20, total_reviews=20),
        Buyer(name="Rinda Dwi Rahmawati", total_booking=18, total_reviews=18),
        Buyer(name="Mutiara Rengganis", total_booking=15, total_reviews=15),
        Buyer(name="Anisya Putri Niken", total_booking=12, total_reviews=12),
        Buyer(name="Farikh Assalsabila", total_booking=10, total_reviews=10),
    ],
    status={"pending": 42, "confirmed": 86, "cancelled": 12, "done": 70},
    trips=[
        TripRow(buyer="Sonya Nur", tour="Uzbekistan", price=21_500_000),
        TripRow(buyer="Elsa Marta", tour="Japan", price=17_000_000),
        TripRow(buyer="Rinda Dwi", tour="Eropa", price=25_000_000),
    ],
)


def merge_dashboard(raw: Any, previous: DashboardPayload) -> DashboardPayload:
    """
    Take each section from ``raw`` when it is usable, else keep ``previous``.
    Lists and the status mapping must be non-empty to replace what we have.
    """
    body = raw if isinstance(raw, dict) else {}
    stats = normalize_dashboard_stats(body.get("stats"))
    packages = normalize_package_stats(body.get("packages"))
    buyers = normalize_buyers(body.get("buyers"))
    status = normalize_status_distribution(body.get("status"))
    trips = normalize_trips(body.get("trips"))
    return DashboardPayload(
        stats=stats or previous.stats,
        packages=packages or previous.packages,
        buyers=buyers or previous.buyers,
        status=status or previous.status,
        trips=trips or previous.trips,
    )


class DashboardReader:
    """
    Fetches admin aggregates. Never raises and never returns a partial
    payload: stale data is preferred over blanks.
    """

    def __init__(self, api: ApiClient, seed: DashboardPayload = SEED_DASHBOARD) -> None:
        self.api = api
        self._current: DashboardPayload | None = None
        self._seed = seed

    @property
    def current(self) -> DashboardPayload:
        return self._current or self._seed

    async def fetch_dashboard(self) -> DashboardPayload:
        try:
            data = await self.api.get_json(DASHBOARD_PATH)
        except ApiError as exc:
            logger.warning("Failed to load dashboard, keeping previous data: {}", exc.message)
            return self.current
        self._current = merge_dashboard(unwrap(data), self.current)
        return self._current


UpdateCallback = Callable[[DashboardPayload], Awaitable[None] | None]


class DashboardPoller:
    """
    Calls the reader once on start() and then every ``interval`` seconds.

    stop() cancels the loop; a fetch that completes after stop() is dropped
    instead of being handed to ``on_update``. A failing fetch or callback is
    logged and polling carries on.
    """

    def __init__(
        self,
        reader: DashboardReader,
        on_update: UpdateCallback,
        interval: float = settings.DASHBOARD_POLL_INTERVAL,
    ) -> None:
        self.reader = reader
        self.on_update = on_update
        self.interval = interval
        self._task: asyncio.Task | None = None
        self._generation = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._generation += 1
        self._task = asyncio.create_task(self._run(self._generation))

    async def stop(self) -> None:
        self._generation += 1
        task, self._task = self._task, None
        if task is None:
            return
        task.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await task

    async def _run(self, generation: int) -> None:
        while True:
            try:
                payload = await self.reader.fetch_dashboard()
                if generation != self._generation:
                    logger.debug("Discarding dashboard response from a stopped poller")
                    return
                result = self.on_update(payload)
                if asyncio.iscoroutine(result):
                    await result
            except Exception:
                logger.warning("Dashboard poll failed, retrying next interval", exc_info=True)
            await asyncio.sleep(self.interval)

    async def __aenter__(self) -> DashboardPoller:
        self.start()
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.stop()


@lru_cache(maxsize=1)
def get_dashboard_reader() -> DashboardReader:
    return DashboardReader(get_api_client())
