import asyncio
import enum

import attr
import outcome

from .._abc import Subscribable
from .._util import NoPublicConstructor
from ._current import current_scheduler
from ._exceptions import (
    AlreadySettledError, RejectionError, SchedulerClosedError, WouldBlock
)
from ._settlement import Fulfilled, Rejected, Settlement

__all__ = [
    "TaskState",
    "Task",
    "Resolver",
    "open_task",
    "fulfilled",
    "rejected",
    "fulfill_after",
    "reject_after",
    "from_call",
]


class TaskState(enum.Enum):
    """:class:`enum.Enum` describing where a :class:`Task` is in its life.

    .. data:: PENDING
              FULFILLED
              REJECTED

    """

    PENDING = "pending"
    FULFILLED = "fulfilled"
    REJECTED = "rejected"


@attr.s(eq=False, hash=False, repr=False)
class Task(Subscribable, metaclass=NoPublicConstructor):
    """A value that's available now, or will be later.

    A task starts out :attr:`TaskState.PENDING` and settles at most once,
    becoming either fulfilled with a value or rejected with a reason. Only
    the :class:`Resolver` that came out of :func:`open_task` alongside it can
    settle it.

    You can't construct these directly; use :func:`open_task` or one of the
    helpers like :func:`fulfilled`.

    """

    # None only for tasks created with no scheduler around; bound on first use
    _scheduler = attr.ib()
    _settlement = attr.ib(default=None, init=False)
    # [(on_fulfilled, on_rejected)], only while pending
    _subscribers = attr.ib(factory=list, init=False)
    # set once anyone has subscribed, or unwrapped the task
    _handled = attr.ib(default=False, init=False)

    def __repr__(self):
        return "<Task {} @ {:#x}>".format(self.state.value, id(self))

    @property
    def scheduler(self):
        """The :class:`~taskall.abc.Scheduler` this task delivers its
        notifications through.

        A task made without any scheduler available (only the empty
        :func:`~taskall.all_of` does this) picks up :func:`current_scheduler`
        the first time it needs one.

        """
        if self._scheduler is None:
            self._scheduler = current_scheduler()
        return self._scheduler

    @property
    def state(self):
        """The current :class:`TaskState`."""
        if self._settlement is None:
            return TaskState.PENDING
        if type(self._settlement) is Fulfilled:
            return TaskState.FULFILLED
        return TaskState.REJECTED

    @property
    def settlement(self):
        """The :class:`Fulfilled` or :class:`Rejected` this task settled
        with, or None if it's still pending.

        """
        return self._settlement

    def subscribe(self, on_fulfilled, on_rejected):
        """Arrange for ``on_fulfilled(value)`` or ``on_rejected(reason)`` to be
        called once this task settles.

        Exactly one of the two gets called, exactly once, and always from a
        later turn of :attr:`scheduler`, even if the task has already
        settled. Every subscriber sees the same settlement; subscribers are
        notified in the order they subscribed.

        """
        self._handled = True
        if self._settlement is None:
            self._subscribers.append((on_fulfilled, on_rejected))
        else:
            self.scheduler.call_soon(
                self._settlement.notify, on_fulfilled, on_rejected
            )

    def unwrap(self):
        """Return the value this task was fulfilled with, or raise the reason
        it was rejected with.

        Raises:
          WouldBlock: if the task is still pending.
          RejectionError: if the task was rejected with a reason that isn't an
              exception.

        """
        if self._settlement is None:
            raise WouldBlock
        self._handled = True
        return self._settlement.unwrap()

    def then(self, on_fulfilled=None, on_rejected=None):
        """Return a new task derived from this one.

        When this task fulfills, the new task is settled from
        ``on_fulfilled(value)``; when it rejects, from
        ``on_rejected(reason)``. A handler's return value fulfills the new
        task, unless it's a :class:`~taskall.abc.Subscribable`, in which case
        the new task follows it instead. If the handler raises, the new task
        is rejected with the exception. A handler left as None passes the
        settlement through untouched.

        """
        derived, resolver = open_task(scheduler=self.scheduler)

        def run_handler(handler, arg):
            result = outcome.capture(handler, arg)
            if type(result) is outcome.Value and isinstance(
                result.value, Subscribable
            ):
                if result.value is derived:
                    resolver.reject(TypeError("a task can't follow itself"))
                else:
                    result.value.subscribe(resolver.fulfill, resolver.reject)
            else:
                resolver.settle(Settlement.from_outcome(result))

        def handle_fulfilled(value):
            if on_fulfilled is None:
                resolver.fulfill(value)
            else:
                run_handler(on_fulfilled, value)

        def handle_rejected(reason):
            if on_rejected is None:
                resolver.reject(reason)
            else:
                run_handler(on_rejected, reason)

        self.subscribe(handle_fulfilled, handle_rejected)
        return derived

    def recover(self, on_rejected):
        """Shorthand for ``then(None, on_rejected)``.

        Useful for keeping one failing input from failing a whole
        :func:`~taskall.all_of`::

            all_of([a, b.recover(lambda reason: None), c])

        """
        return self.then(None, on_rejected)

    def __await__(self):
        # Notifications still go through self.scheduler, so awaiting a task
        # that lives on a ManualScheduler only finishes if something drives
        # that scheduler.
        future = asyncio.get_running_loop().create_future()

        def on_fulfilled(value):
            if not future.done():
                future.set_result(value)

        def on_rejected(reason):
            if not future.done():
                if not isinstance(reason, BaseException):
                    reason = RejectionError(reason)
                future.set_exception(reason)

        self.subscribe(on_fulfilled, on_rejected)
        return (yield from future.__await__())

    def _settle(self, settlement):
        if self._settlement is not None:
            raise AlreadySettledError(
                "{!r} has already settled".format(self)
            )
        # Refuse before changing anything: a settled task whose subscribers
        # were never told would be stuck that way.
        if self._scheduler is not None and self._scheduler.closed:
            raise SchedulerClosedError(
                "can't settle {!r}, its scheduler is closed".format(self)
            )
        self._settlement = settlement
        subscribers, self._subscribers = self._subscribers, []
        for on_fulfilled, on_rejected in subscribers:
            self.scheduler.call_soon(
                settlement.notify, on_fulfilled, on_rejected
            )
        if type(settlement) is Rejected and not self._handled:
            # give whoever is holding the task until the next turn to
            # subscribe before calling it unhandled
            self.scheduler.call_soon(self._check_handled)

    def _check_handled(self):
        if not self._handled:
            self.scheduler.report_unhandled_rejection(
                self, self._settlement.reason
            )


@attr.s(eq=False, hash=False, repr=False)
class Resolver(metaclass=NoPublicConstructor):
    """The write end of a :class:`Task`.

    .. attribute:: task

       The task this resolver settles.

    """

    task = attr.ib()

    def __repr__(self):
        return "<Resolver for {!r}>".format(self.task)

    def fulfill(self, value):
        """Fulfill the task with ``value``, exactly as given.

        Raises:
          AlreadySettledError: if the task has already settled.
          SchedulerClosedError: if the task's scheduler is closed. The task
              stays pending.

        """
        self.task._settle(Fulfilled(value))

    def reject(self, reason):
        """Reject the task with ``reason``, exactly as given.

        Raises:
          AlreadySettledError: if the task has already settled.

        """
        self.task._settle(Rejected(reason))

    def settle(self, settlement):
        """Settle the task with a :class:`Fulfilled` or :class:`Rejected`.

        Raises:
          AlreadySettledError: if the task has already settled.

        """
        if not isinstance(settlement, Settlement):
            raise TypeError(
                "expected Fulfilled or Rejected, not {!r}".format(
                    type(settlement)
                )
            )
        self.task._settle(settlement)


def open_task(*, scheduler=None):
    """Create a pending task, plus the resolver that settles it.

    Args:
      scheduler (taskall.abc.Scheduler): where the task delivers its
          notifications. Defaults to :func:`current_scheduler`.

    Returns:
      A pair ``(task, resolver)``.

    """
    if scheduler is None:
        scheduler = current_scheduler()
    task = Task._create(scheduler)
    return task, Resolver._create(task)


def fulfilled(value, *, scheduler=None):
    """Return a task that's already fulfilled with ``value``."""
    task, resolver = open_task(scheduler=scheduler)
    resolver.fulfill(value)
    return task


def rejected(reason, *, scheduler=None):
    """Return a task that's already rejected with ``reason``."""
    task, resolver = open_task(scheduler=scheduler)
    resolver.reject(reason)
    return task


def fulfill_after(delay, value, *, scheduler=None):
    """Return a task that fulfills with ``value`` after ``delay`` seconds on
    its scheduler's clock.

    """
    task, resolver = open_task(scheduler=scheduler)
    task.scheduler.call_later(delay, resolver.fulfill, value)
    return task


def reject_after(delay, reason, *, scheduler=None):
    """Return a task that rejects with ``reason`` after ``delay`` seconds on
    its scheduler's clock.

    """
    task, resolver = open_task(scheduler=scheduler)
    task.scheduler.call_later(delay, resolver.reject, reason)
    return task


def from_call(fn, *args, scheduler=None):
    """Call ``fn(*args)`` right now, and return an already-settled task
    holding what it returned or raised.

    """
    task, resolver = open_task(scheduler=scheduler)
    resolver.settle(Settlement.from_outcome(outcome.capture(fn, *args)))
    return task


def _fulfilled_unbound(value):
    # Fulfilled with no scheduler attached yet. Settling a task that has no
    # subscribers never touches the scheduler, so it only gets bound (through
    # Task.scheduler) once someone subscribes or derives from it.
    task = Task._create(None)
    Resolver._create(task).fulfill(value)
    return task
