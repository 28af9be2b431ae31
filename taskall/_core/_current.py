from contextlib import contextmanager
from contextvars import ContextVar

import sniffio

from .._abc import Scheduler
from ._exceptions import NoSchedulerError
from ._asyncio import AsyncioScheduler

__all__ = ["current_scheduler", "use_scheduler"]

_current = ContextVar("taskall.current_scheduler", default=None)


def current_scheduler():
    """Return the scheduler that new tasks should use by default.

    That's the scheduler installed with :func:`use_scheduler`, if there is
    one. Otherwise, if we're running inside asyncio, it's the
    :class:`AsyncioScheduler` for the running loop.

    Raises:
      NoSchedulerError: if neither applies.

    """
    scheduler = _current.get()
    if scheduler is not None:
        return scheduler
    try:
        library = sniffio.current_async_library()
    except sniffio.AsyncLibraryNotFoundError:
        library = None
    if library == "asyncio":
        return AsyncioScheduler.for_running_loop()
    raise NoSchedulerError(
        "no scheduler installed and no supported async library running "
        "(detected: {!r})".format(library)
    )


@contextmanager
def use_scheduler(scheduler):
    """Install ``scheduler`` as the current scheduler inside a ``with``
    block.

    Example::

        scheduler = ManualScheduler()
        with use_scheduler(scheduler):
            task = fulfilled(1)
        assert task.scheduler is scheduler

    """
    if not isinstance(scheduler, Scheduler):
        raise TypeError(
            "expected a taskall.abc.Scheduler, not {!r}".format(
                type(scheduler)
            )
        )
    token = _current.set(scheduler)
    try:
        yield scheduler
    finally:
        _current.reset(token)
