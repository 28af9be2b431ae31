import abc

import attr
import outcome

from ._exceptions import RejectionError

__all__ = ["Settlement", "Fulfilled", "Rejected"]


class Settlement(metaclass=abc.ABCMeta):
    """The terminal state of a task: either :class:`Fulfilled` or
    :class:`Rejected`.

    """

    __slots__ = ()

    @abc.abstractmethod
    def unwrap(self):
        """Return the fulfillment value, or raise the rejection reason.

        Reasons that aren't exceptions are raised wrapped in a
        :exc:`RejectionError`.

        """

    @abc.abstractmethod
    def notify(self, on_fulfilled, on_rejected):
        """Call whichever of the two callbacks matches this settlement."""

    @staticmethod
    def from_outcome(result):
        """Convert an :class:`outcome.Outcome` into a settlement.

        An :class:`outcome.Value` becomes :class:`Fulfilled`, an
        :class:`outcome.Error` becomes :class:`Rejected` with the exception
        as the reason.

        """
        if type(result) is outcome.Value:
            return Fulfilled(result.value)
        if type(result) is outcome.Error:
            return Rejected(result.error)
        raise TypeError(
            "expected outcome.Value or outcome.Error, not {!r}".format(
                type(result)
            )
        )


@attr.s(slots=True, frozen=True)
class Fulfilled(Settlement):
    value = attr.ib()

    def unwrap(self):
        return self.value

    def notify(self, on_fulfilled, on_rejected):
        on_fulfilled(self.value)


# Reasons are opaque: compare them by identity, the way exceptions compare.
@attr.s(slots=True, frozen=True, eq=False)
class Rejected(Settlement):
    reason = attr.ib()

    def unwrap(self):
        if isinstance(self.reason, BaseException):
            raise self.reason
        raise RejectionError(self.reason)

    def notify(self, on_fulfilled, on_rejected):
        on_rejected(self.reason)

    def __eq__(self, other):
        if type(other) is not Rejected:
            return NotImplemented
        return self.reason is other.reason

    def __hash__(self):
        return hash((Rejected, id(self.reason)))
