"""
Tests for LatestWinsScheduler.

Focus on supersession per key and discarding stale results.
"""

import asyncio

from pairwise_judging.assistant.latest_wins import LatestWinsScheduler


class TestLatestWinsScheduler:
    """Test LatestWinsScheduler behavior through public interface."""

    def test_newer_request_cancels_pending_one(self) -> None:
        # Arrange
        delivered: list[str] = []

        async def scenario() -> tuple[bool, bool]:
            gate = asyncio.Event()
            scheduler = LatestWinsScheduler()

            async def slow() -> str:
                await gate.wait()
                return "stale"

            async def fast() -> str:
                return "fresh"

            # Act
            first = scheduler.submit("p1", slow, on_result=delivered.append)
            second = scheduler.submit("p1", fast, on_result=delivered.append)
            gate.set()
            await scheduler.wait_idle()
            return first.cancelled(), second.cancelled()

        first_cancelled, second_cancelled = asyncio.run(scenario())

        # Assert
        assert first_cancelled
        assert not second_cancelled
        assert delivered == ["fresh"]

    def test_stale_result_is_discarded_when_cancel_is_ignored(self) -> None:
        """A request that finishes after being superseded never reaches on_result."""
        # Arrange
        delivered: list[str] = []

        async def scenario() -> str | None:
            scheduler = LatestWinsScheduler()
            started = asyncio.Event()
            gate = asyncio.Event()

            async def stubborn() -> str:
                started.set()
                try:
                    await gate.wait()
                except asyncio.CancelledError:
                    pass  # finishes anyway, like a reply already in flight
                return "stale"

            async def fresh() -> str:
                await gate.wait()
                return "fresh"

            # Act
            stale_task = scheduler.submit("p1", stubborn, on_result=delivered.append)
            await started.wait()
            _ = scheduler.submit("p1", fresh, on_result=delivered.append)
            gate.set()
            await scheduler.wait_idle()
            return stale_task.result()

        stale_result = asyncio.run(scenario())

        # Assert
        assert stale_result == "stale"
        assert delivered == ["fresh"]

    def test_other_keys_are_not_affected(self) -> None:
        # Arrange
        delivered: list[tuple[str, int]] = []

        async def scenario() -> None:
            scheduler = LatestWinsScheduler()

            async def value(n: int) -> int:
                await asyncio.sleep(0)
                return n

            # Act
            _ = scheduler.submit("p1", lambda: value(1), on_result=lambda r: delivered.append(("p1", r)))
            _ = scheduler.submit("p2", lambda: value(2), on_result=lambda r: delivered.append(("p2", r)))
            await scheduler.wait_idle()

        asyncio.run(scenario())

        # Assert
        assert sorted(delivered) == [("p1", 1), ("p2", 2)]

    def test_failures_are_logged_not_raised(self) -> None:
        # Arrange
        delivered: list[object] = []

        async def scenario() -> object:
            scheduler = LatestWinsScheduler()

            async def broken() -> str:
                raise RuntimeError("service down")

            task = scheduler.submit("p1", broken, on_result=delivered.append)
            return await task

        # Act
        result = asyncio.run(scenario())

        # Assert
        assert result is None
        assert delivered == []

    def test_pending_and_cancel(self) -> None:
        async def scenario() -> tuple[bool, bool, bool, bool]:
            scheduler = LatestWinsScheduler()
            gate = asyncio.Event()

            async def blocked() -> None:
                await gate.wait()

            _ = scheduler.submit("p1", blocked)
            await asyncio.sleep(0)
            was_pending = scheduler.pending("p1")
            cancelled = scheduler.cancel("p1")
            await scheduler.wait_idle()
            return was_pending, cancelled, scheduler.pending("p1"), scheduler.cancel("p1")

        was_pending, cancelled, still_pending, cancelled_again = asyncio.run(scenario())

        assert was_pending
        assert cancelled
        assert not still_pending
        assert not cancelled_again

    def test_cancel_all(self) -> None:
        async def scenario() -> list[bool]:
            scheduler = LatestWinsScheduler()
            gate = asyncio.Event()

            async def blocked() -> None:
                await gate.wait()

            tasks = [scheduler.submit(key, blocked) for key in ("a", "b", "c")]
            scheduler.cancel_all()
            await scheduler.wait_idle()
            return [task.cancelled() for task in tasks]

        assert asyncio.run(scenario()) == [True, True, True]
