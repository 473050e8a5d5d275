import asyncio
import unittest

from drivegallery.cache import ResourceCache
from drivegallery.errors import UpstreamListingError
from drivegallery.tests.fakes import FakeClock


class CountingLoader:
    def __init__(self):
        self.calls = 0
        self.fail = False
        self.gate: asyncio.Event | None = None

    async def __call__(self):
        self.calls += 1
        if self.gate is not None:
            await self.gate.wait()
        if self.fail:
            raise UpstreamListingError("upstream down")
        return [f"pass-{self.calls}"]


class ResourceCacheTests(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.clock = FakeClock()
        self.loader = CountingLoader()
        self.cache = ResourceCache(
            "galleries", self.loader, ttl_seconds=600, clock=self.clock
        )

    async def test_first_read_populates_entry(self):
        self.assertIsNone(self.cache.entry.data)
        data = await self.cache.get()
        self.assertEqual(data, ["pass-1"])
        self.assertEqual(self.cache.entry.last_updated, self.clock.now)

    async def test_reads_within_window_return_same_object(self):
        first = await self.cache.get()
        self.clock.advance(599)
        second = await self.cache.get()
        self.assertIs(first, second)
        self.assertEqual(self.loader.calls, 1)

    async def test_stale_read_refreshes_once(self):
        first = await self.cache.get()
        self.clock.advance(600)
        second = await self.cache.get()
        third = await self.cache.get()
        self.assertEqual(self.loader.calls, 2)
        self.assertIsNot(first, second)
        self.assertIs(second, third)
        self.assertEqual(self.cache.entry.data, ["pass-2"])

    async def test_force_refresh_bypasses_fresh_entry(self):
        await self.cache.get()
        data = await self.cache.get(force_refresh=True)
        self.assertEqual(data, ["pass-2"])
        self.assertEqual(self.loader.calls, 2)

    async def test_failed_refresh_keeps_previous_entry(self):
        await self.cache.get()
        previous = self.cache.entry
        self.clock.advance(601)
        self.loader.fail = True
        with self.assertRaises(UpstreamListingError):
            await self.cache.get()
        self.assertIs(self.cache.entry, previous)

    async def test_failure_on_empty_cache_caches_nothing(self):
        self.loader.fail = True
        with self.assertRaises(UpstreamListingError):
            await self.cache.get()
        self.assertIsNone(self.cache.entry.data)
        self.assertIsNone(self.cache.entry.last_updated)

    async def test_concurrent_misses_share_one_refresh(self):
        self.loader.gate = asyncio.Event()
        waiters = [asyncio.create_task(self.cache.get()) for _ in range(5)]
        await asyncio.sleep(0)
        self.loader.gate.set()
        results = await asyncio.gather(*waiters)
        self.assertEqual(self.loader.calls, 1)
        for result in results:
            self.assertIs(result, results[0])

    async def test_cancelled_waiter_does_not_cancel_shared_refresh(self):
        self.loader.gate = asyncio.Event()
        first = asyncio.create_task(self.cache.get())
        second = asyncio.create_task(self.cache.get())
        await asyncio.sleep(0)

        first.cancel()
        with self.assertRaises(asyncio.CancelledError):
            await first

        self.loader.gate.set()
        self.assertEqual(await second, ["pass-1"])
        self.assertEqual(self.loader.calls, 1)
        self.assertEqual(self.cache.entry.data, ["pass-1"])

    async def test_status_reports_age(self):
        status = self.cache.status()
        self.assertFalse(status.cached)
        self.assertIsNone(status.ageSeconds)

        await self.cache.get()
        self.clock.advance(42)
        status = self.cache.status()
        self.assertTrue(status.cached)
        self.assertTrue(status.fresh)
        self.assertEqual(status.ageSeconds, 42)
        self.assertEqual(status.count, 1)
        self.assertIsNotNone(status.lastUpdated)


if __name__ == "__main__":
    unittest.main()
