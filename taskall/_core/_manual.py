import itertools
from collections import deque
from math import inf

import attr
from sortedcontainers import SortedDict

from .._abc import Scheduler, SCHEDULER_LOGGER
from ._exceptions import SchedulerClosedError

__all__ = ["ManualScheduler"]


@attr.s(frozen=True)
class _SchedulerStatistics:
    callbacks_pending = attr.ib()
    timers_pending = attr.ib()
    seconds_to_next_deadline = attr.ib()


################################################################
# The glorious ManualScheduler
################################################################


# Prior art:
#   https://twistedmatrix.com/documents/current/api/twisted.internet.task.Clock.html
class ManualScheduler(Scheduler):
    """A scheduler that only does anything when you tell it to, with a
    virtual clock. Suitable for writing tests, or for driving tasks from
    inside some other loop.

    Callbacks queued with :meth:`call_soon` sit in a FIFO run queue until
    you call :meth:`run_pass`, :meth:`run_until_idle`, :meth:`advance` or
    :meth:`run_all`. Callbacks queued with :meth:`call_later` sit in a timer
    queue ordered by deadline, and become runnable when the virtual clock
    reaches their deadline. The clock only moves through :meth:`advance` and
    :meth:`run_all`.

    If a callback raises, the exception is logged on the
    ``taskall.scheduler`` logger and the remaining callbacks still run.

    Args:
      start_time (float): the initial virtual time.
      unhandled_rejection_hook: optional ``hook(task, reason)``, see
          :meth:`~taskall.abc.Scheduler.report_unhandled_rejection`.

    """

    def __init__(self, start_time=0.0, unhandled_rejection_hook=None):
        self._time = float(start_time)
        self._runq = deque()
        # {(deadline, counter): (fn, args)}
        # the counter breaks ties so timers with equal deadlines fire in the
        # order they were scheduled
        self._timers = SortedDict()
        self._counter = itertools.count()
        self._closed = False
        self.unhandled_rejection_hook = unhandled_rejection_hook

    def __repr__(self):
        return "<ManualScheduler, time={:.7f}, {} runnable @ {:#x}>".format(
            self._time, len(self._runq), id(self)
        )

    def _check_open(self):
        if self._closed:
            raise SchedulerClosedError("this scheduler has been closed")

    def call_soon(self, fn, *args):
        self._check_open()
        self._runq.append((fn, args))

    def call_later(self, delay, fn, *args):
        self._check_open()
        deadline = self._time + max(0.0, float(delay))
        self._timers[(deadline, next(self._counter))] = (fn, args)

    def current_time(self):
        return self._time

    def close(self):
        """Refuse any further callbacks.

        Callbacks and timers that are already queued can still be run.

        """
        self._closed = True

    @property
    def closed(self):
        return self._closed

    def statistics(self):
        """Returns an object containing debugging information.

        Currently the following fields are defined:

        * ``callbacks_pending`` (int): callbacks on the run queue.
        * ``timers_pending`` (int): timers that haven't fired yet.
        * ``seconds_to_next_deadline`` (float): virtual time until the
          earliest timer, or :data:`~math.inf` if there are none.

        """
        if self._timers:
            next_deadline, _ = self._timers.keys()[0]
            seconds_to_next_deadline = next_deadline - self._time
        else:
            seconds_to_next_deadline = inf
        return _SchedulerStatistics(
            callbacks_pending=len(self._runq),
            timers_pending=len(self._timers),
            seconds_to_next_deadline=seconds_to_next_deadline,
        )

    def _move_due_timers(self):
        while self._timers:
            (deadline, _), _ = self._timers.peekitem(0)
            if deadline > self._time:
                break
            _, callback = self._timers.popitem(0)
            self._runq.append(callback)

    def run_pass(self):
        """Run every callback that is runnable right now.

        Anything that becomes runnable during this pass has to wait until the
        next one.

        Returns:
          int: the number of callbacks that ran.

        """
        self._move_due_timers()
        batch = list(self._runq)
        self._runq.clear()
        for fn, args in batch:
            try:
                fn(*args)
            except Exception:
                SCHEDULER_LOGGER.exception(
                    "Exception raised when calling %r from ManualScheduler", fn
                )
        return len(batch)

    def run_until_idle(self):
        """Run passes until nothing is runnable at the current time.

        Never moves the clock.

        Returns:
          int: the number of callbacks that ran.

        """
        count = 0
        while True:
            ran = self.run_pass()
            if not ran:
                return count
            count += ran

    def advance(self, seconds):
        """Move the virtual clock forward by ``seconds``, firing any timers
        that come due on the way.

        Each timer fires with the clock set to its own deadline, and
        everything it makes runnable runs before the clock moves on.

        Raises:
          ValueError: if you try to pass a negative value for ``seconds``.

        """
        if seconds < 0:
            raise ValueError("time can't go backwards")
        target = self._time + seconds
        self.run_until_idle()
        while self._timers:
            next_deadline, _ = self._timers.keys()[0]
            if next_deadline > target:
                break
            self._time = max(self._time, next_deadline)
            self.run_until_idle()
        self._time = target

    def run_all(self):
        """Run until there are no callbacks and no timers left, jumping the
        clock from timer to timer.

        """
        self.run_until_idle()
        while self._timers:
            next_deadline, _ = self._timers.keys()[0]
            self._time = max(self._time, next_deadline)
            self.run_until_idle()
