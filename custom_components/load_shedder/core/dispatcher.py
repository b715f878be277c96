"""Bounded concurrency outbound command queue."""

from __future__ import annotations

import asyncio
from collections import deque
from typing import Awaitable, Callable, Coroutine, Deque, Optional, Set, Tuple

from .logger import log_debug, log_warning, journal_event
from .models import CommandRequest, CommandResult

IssueCommand = Callable[[CommandRequest], Awaitable[CommandResult]]
TaskFactory = Callable[[Coroutine], asyncio.Task]


class CallDispatcher:
    """Issue commands with at most max_parallel_calls in flight.

    Requests beyond the cap wait in submission order. Failures are logged and
    dropped; nothing is retried.
    """

    def __init__(
        self,
        issue_command: IssueCommand,
        max_parallel_calls: int,
        create_task: Optional[TaskFactory] = None,
    ):
        if max_parallel_calls < 1:
            raise ValueError("max_parallel_calls must be at least 1")
        self._issue_command = issue_command
        self._max_parallel_calls = max_parallel_calls
        self._create_task = create_task
        self._queue: Deque[Tuple[CommandRequest, asyncio.Future]] = deque()
        self._tasks: Set[asyncio.Task] = set()
        self._in_flight = 0

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def queued(self) -> int:
        return len(self._queue)

    @property
    def max_parallel_calls(self) -> int:
        return self._max_parallel_calls

    def submit(self, request: CommandRequest) -> asyncio.Future:
        """Queue a request and return a future resolving to its result."""
        future = asyncio.get_running_loop().create_future()
        self._queue.append((request, future))
        self._release()
        return future

    def _release(self) -> None:
        while self._queue and self._in_flight < self._max_parallel_calls:
            request, future = self._queue.popleft()
            self._in_flight += 1
            coro = self._run(request, future)
            if self._create_task is not None:
                task = self._create_task(coro)
            else:
                task = asyncio.get_running_loop().create_task(coro)
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _run(self, request: CommandRequest, future: asyncio.Future) -> None:
        device = request.device
        try:
            result = await self._issue_command(request)
        except asyncio.CancelledError:
            if not future.done():
                future.cancel()
            raise
        except Exception as exc:  # pylint: disable=broad-except
            result = CommandResult(success=False, error_message=str(exc))
        finally:
            self._in_flight -= 1
            self._release()

        if result.success:
            log_debug(f"Turn {device.name} {request.direction}: success")
        else:
            log_warning(
                f"Turn {device.name} {request.direction} failed: "
                f"code={result.error_code} message={result.error_message}"
            )
            journal_event(
                "command_failed",
                {
                    "device": device.name,
                    "direction": str(request.direction),
                    "reason": str(request.reason),
                    "error_code": result.error_code,
                    "error_message": result.error_message,
                },
            )

        if not future.done():
            future.set_result(result)

    async def async_drain(self) -> None:
        """Wait until every queued and in-flight request has completed."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
