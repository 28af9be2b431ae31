import logging
from functools import partial

import attr

from ._current import current_scheduler
from ._normalize import normalize
from ._exceptions import NoSchedulerError
from ._task import Task, _fulfilled_unbound, fulfilled, open_task

__all__ = ["all_of"]

AGGREGATE_LOGGER = logging.getLogger("taskall.aggregate")

# Marks a slot whose input hasn't reported yet. Inputs can be any
# Subscribable, and a misbehaving one may call back more than once.
_PENDING = object()


@attr.s(eq=False, hash=False, repr=False)
class _Aggregation:
    """Mutable state for one call to :func:`all_of`.

    Nothing outside the call ever sees this object. Each input writes only
    its own slot, at most once, and only while ``settled`` is False;
    ``settled`` flips exactly once, at which point the outcome is fixed.
    Any callback after the first from the same input is ignored.

    """

    scheduler = attr.ib()
    resolver = attr.ib()
    slots = attr.ib()
    remaining = attr.ib()
    settled = attr.ib(default=False)

    def on_fulfilled(self, index, value):
        if self.settled or self.slots[index] is not _PENDING:
            return
        self.slots[index] = value
        self.remaining -= 1
        if self.remaining == 0:
            self.settled = True
            AGGREGATE_LOGGER.debug(
                "all %d inputs of %r fulfilled", len(self.slots), self.resolver.task
            )
            self.scheduler.call_soon(self.resolver.fulfill, self.slots)

    def on_rejected(self, index, reason):
        if self.settled or self.slots[index] is not _PENDING:
            return
        # Must flip before anything else runs, so later settlements in the
        # same pass are ignored.
        self.settled = True
        AGGREGATE_LOGGER.debug(
            "input %d of %r rejected, failing fast", index, self.resolver.task
        )
        self.scheduler.call_soon(self.resolver.reject, reason)


def _pick_scheduler(items):
    for item in items:
        if isinstance(item, Task):
            return item.scheduler
    if not items:
        # the empty result can bind a scheduler later, when it needs one
        try:
            return current_scheduler()
        except NoSchedulerError:
            return None
    return current_scheduler()


def all_of(tasks, *, scheduler=None):
    """Wait for every task in ``tasks``, keeping their results in order.

    Returns a new :class:`Task` that fulfills with a list of every input's
    value once all of them have fulfilled, with ``result[i]`` always coming
    from ``tasks[i]`` no matter which order they finished in. As soon as any
    input rejects, the returned task rejects with that exact reason, without
    waiting for the others; anything that settles after that is ignored.
    The other inputs aren't cancelled, they just keep running.

    Inputs that aren't :class:`~taskall.abc.Subscribable` are treated as
    already-fulfilled tasks and end up in the result unchanged.

    If ``tasks`` is empty, the returned task is fulfilled with ``[]`` right
    away, before :func:`all_of` returns. That works even with no scheduler
    available; the task then binds to :func:`current_scheduler` the first
    time it needs to notify anyone. Otherwise it is always still pending
    when :func:`all_of` returns, even if every input had already settled:
    the result settles on a later turn of the scheduler.

    Args:
      tasks: an iterable of tasks and/or plain values.
      scheduler (taskall.abc.Scheduler): where the returned task delivers its
          notifications. Defaults to the scheduler of the first input that's a
          :class:`Task`, and then to :func:`current_scheduler`.

    Returns:
      Task: fulfills with a :class:`list`, or rejects with the first reason
      observed.

    """
    items = list(tasks)
    if scheduler is None:
        scheduler = _pick_scheduler(items)

    if not items:
        if scheduler is None:
            return _fulfilled_unbound([])
        return fulfilled([], scheduler=scheduler)

    result, resolver = open_task(scheduler=scheduler)
    state = _Aggregation(
        scheduler=scheduler,
        resolver=resolver,
        slots=[_PENDING] * len(items),
        remaining=len(items),
    )
    AGGREGATE_LOGGER.debug("%r waiting on %d inputs", result, len(items))
    for index, item in enumerate(items):
        task = normalize(item, scheduler=scheduler)
        task.subscribe(
            partial(state.on_fulfilled, index),
            partial(state.on_rejected, index),
        )
    return result
