import asyncio
import weakref

import outcome

from .._abc import Scheduler
from . import _task
from ._settlement import Settlement

__all__ = ["AsyncioScheduler"]

# One scheduler per loop, so tasks created by current_scheduler() inside the
# same loop all share it.
_loop_schedulers = weakref.WeakKeyDictionary()


class AsyncioScheduler(Scheduler):
    """A scheduler that defers callbacks onto an :mod:`asyncio` event loop.

    :meth:`call_soon` and :meth:`call_later` map directly onto the loop's
    methods of the same names, and :meth:`current_time` is
    :meth:`asyncio.AbstractEventLoop.time`. None of the methods are
    thread-safe: use them from the loop's own thread.

    Args:
      loop: the loop to use. Defaults to the running loop.
      unhandled_rejection_hook: optional ``hook(task, reason)``, see
          :meth:`~taskall.abc.Scheduler.report_unhandled_rejection`.

    """

    def __init__(self, loop=None, unhandled_rejection_hook=None):
        if loop is None:
            loop = asyncio.get_running_loop()
        # _loop_schedulers maps loop -> scheduler, so a strong reference here
        # would keep every loop alive forever
        self._loop_ref = weakref.ref(loop)
        self.unhandled_rejection_hook = unhandled_rejection_hook
        # keep asyncio tasks alive until they finish
        self._running = set()

    def __repr__(self):
        return "<AsyncioScheduler for {!r}>".format(self._loop_ref())

    @property
    def loop(self):
        """The event loop this scheduler defers onto.

        Raises:
          RuntimeError: if the loop has already been garbage collected.

        """
        loop = self._loop_ref()
        if loop is None:
            raise RuntimeError("the event loop behind {!r} is gone".format(self))
        return loop

    @property
    def closed(self):
        loop = self._loop_ref()
        return loop is None or loop.is_closed()

    @classmethod
    def for_running_loop(cls):
        """Return the shared scheduler for the running loop, creating it if
        needed.

        """
        loop = asyncio.get_running_loop()
        try:
            return _loop_schedulers[loop]
        except KeyError:
            scheduler = _loop_schedulers[loop] = cls(loop)
            return scheduler

    def call_soon(self, fn, *args):
        self.loop.call_soon(fn, *args)

    def call_later(self, delay, fn, *args):
        self.loop.call_later(max(0.0, delay), fn, *args)

    def current_time(self):
        return self.loop.time()

    def start_soon(self, async_fn, *args):
        """Run ``async_fn(*args)`` as an asyncio task, and return a
        :class:`~taskall.Task` that settles with its result.

        If the coroutine raises, the task is rejected with the exception.

        """
        task, resolver = _task.open_task(scheduler=self)

        async def runner():
            result = await outcome.acapture(async_fn, *args)
            resolver.settle(Settlement.from_outcome(result))

        aio_task = self.loop.create_task(runner())
        self._running.add(aio_task)
        aio_task.add_done_callback(self._running.discard)
        return task
