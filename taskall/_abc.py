import logging
from abc import ABCMeta, abstractmethod

__all__ = ["Scheduler", "Subscribable"]

# Rejections that nobody ever subscribed to end up here, unless the scheduler
# was given a hook.
UNHANDLED_LOGGER = logging.getLogger("taskall.unhandled")
# Used to log exceptions in unhandled-rejection hooks
SCHEDULER_LOGGER = logging.getLogger("taskall.scheduler")


# We use ABCMeta instead of ABC, plus set __slots__=(), so as not to force a
# __dict__ onto subclasses.
class Scheduler(metaclass=ABCMeta):
    """The interface for deferring callbacks to a later turn.

    Every notification a task hands out goes through one of these, which is
    what lets a task settle "asynchronously" without any particular event
    loop underneath. Implementations must never run a callback inline from
    inside :meth:`call_soon` or :meth:`call_later`, and must run callbacks
    one at a time.

    Implementations may set an ``unhandled_rejection_hook`` attribute; see
    :meth:`report_unhandled_rejection`.

    """

    __slots__ = ()

    unhandled_rejection_hook = None

    @abstractmethod
    def call_soon(self, fn, *args):
        """Arrange for ``fn(*args)`` to be called on a later turn.

        Callbacks queued with :meth:`call_soon` run in the order they were
        queued.

        """

    @abstractmethod
    def call_later(self, delay, fn, *args):
        """Arrange for ``fn(*args)`` to be called once ``delay`` seconds have
        passed on this scheduler's clock.

        Args:
          delay (float): seconds to wait. Negative delays are treated as 0.

        """

    @abstractmethod
    def current_time(self):
        """Return the current time, according to this scheduler's clock.

        Returns:
            float: The current time.

        """

    @property
    def closed(self):
        """True once this scheduler refuses new callbacks.

        Tasks check this before settling, so a settlement is never recorded
        without its notifications being queued.

        """
        return False

    def report_unhandled_rejection(self, task, reason):
        """Called when ``task`` was rejected and nobody subscribed to it.

        If the scheduler has an ``unhandled_rejection_hook``, it's called as
        ``hook(task, reason)``. Otherwise the rejection is logged on the
        ``taskall.unhandled`` logger.

        """
        hook = self.unhandled_rejection_hook
        if hook is None:
            if isinstance(reason, BaseException):
                exc_info = (type(reason), reason, reason.__traceback__)
            else:
                exc_info = None
            UNHANDLED_LOGGER.error(
                "Unhandled rejection in %r: %r", task, reason, exc_info=exc_info
            )
            return
        try:
            hook(task, reason)
        except Exception:
            SCHEDULER_LOGGER.exception(
                "Exception raised when calling unhandled rejection hook %r",
                hook,
            )


class Subscribable(metaclass=ABCMeta):
    """The capability of being a task: something you can subscribe to.

    :func:`~taskall.all_of` only treats an input as a task if it's an
    instance of this class. Everything else is treated as a plain value. If
    you have your own task type, either inherit from this class or call
    ``Subscribable.register(YourTask)``.

    """

    __slots__ = ()

    @abstractmethod
    def subscribe(self, on_fulfilled, on_rejected):
        """Arrange for exactly one of the callbacks to be called, once.

        ``on_fulfilled(value)`` if the task fulfills, ``on_rejected(reason)``
        if it rejects. The call must always happen on a later turn of the
        task's scheduler, even if the task has already settled.

        """
