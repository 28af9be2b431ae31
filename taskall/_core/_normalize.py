import attr

from .._abc import Subscribable
from ._task import fulfilled

__all__ = ["Plain", "normalize"]


@attr.s(slots=True, frozen=True)
class Plain:
    """Marks ``value`` as a plain value for :func:`normalize`, even if it
    happens to be a :class:`~taskall.abc.Subscribable`.

    ``all_of([Plain(task)])`` fulfills with ``[task]``, the task object
    itself, rather than waiting for it.

    """

    value = attr.ib()


def normalize(item, *, scheduler):
    """Turn one input of :func:`~taskall.all_of` into something to subscribe
    to.

    A :class:`~taskall.abc.Subscribable` is returned as it is. Anything else
    (or anything wrapped in :class:`Plain`) becomes a task on ``scheduler``
    that's already fulfilled with that exact object: no copying, no
    conversion, and no poking at its attributes to guess whether it's
    task-like.

    """
    if type(item) is Plain:
        return fulfilled(item.value, scheduler=scheduler)
    if isinstance(item, Subscribable):
        return item
    return fulfilled(item, scheduler=scheduler)
