import logging

import pytest

from ... import _core
from ..._abc import Subscribable
from .._task import TaskState


def test_all_of_empty_is_synchronous(scheduler):
    result = _core.all_of([], scheduler=scheduler)
    assert result.state is TaskState.FULFILLED
    assert result.unwrap() == []
    # nothing had to go through the scheduler
    assert scheduler.statistics().callbacks_pending == 0


def test_all_of_empty_needs_no_scheduler(scheduler):
    result = _core.all_of([])
    assert result.state is TaskState.FULFILLED
    assert result.unwrap() == []
    # it only needs one once somebody wants to hear about it
    with pytest.raises(_core.NoSchedulerError):
        result.scheduler
    record = []
    with _core.use_scheduler(scheduler):
        result.subscribe(record.append, record.append)
    assert result.scheduler is scheduler
    scheduler.run_until_idle()
    assert record == [[]]


def test_all_of_empty_uses_current_scheduler(scheduler):
    with _core.use_scheduler(scheduler):
        result = _core.all_of(iter(()))
    assert result.scheduler is scheduler
    assert result.unwrap() == []


def test_all_of_preserves_order(scheduler):
    resolvers = []
    tasks = []
    for _ in range(4):
        task, resolver = _core.open_task(scheduler=scheduler)
        tasks.append(task)
        resolvers.append(resolver)
    result = _core.all_of(tasks)
    assert result.scheduler is scheduler

    # finish in scrambled order, one turn at a time
    for i in [2, 0, 3, 1]:
        assert result.state is TaskState.PENDING
        resolvers[i].fulfill("value {}".format(i))
        scheduler.run_until_idle()
    assert result.unwrap() == ["value 0", "value 1", "value 2", "value 3"]


def test_all_of_pending_even_if_inputs_already_settled(scheduler):
    inputs = [_core.fulfilled(i, scheduler=scheduler) for i in range(3)]
    result = _core.all_of(inputs)
    assert result.state is TaskState.PENDING

    failing = _core.all_of([_core.rejected("early", scheduler=scheduler)])
    assert failing.state is TaskState.PENDING

    scheduler.run_until_idle()
    assert result.unwrap() == [0, 1, 2]
    assert failing.settlement.reason == "early"


def test_all_of_plain_values_kept_as_is(scheduler):
    marker = object()
    mutable = [1, 2]
    result = _core.all_of([marker, mutable, None], scheduler=scheduler)
    assert result.state is TaskState.PENDING
    scheduler.run_until_idle()
    values = result.unwrap()
    assert values[0] is marker
    assert values[1] is mutable
    assert values[2] is None


def test_all_of_rejects_with_reason_verbatim(scheduler):
    reason = ValueError("first failure")
    slow = _core.fulfill_after(10, "slow", scheduler=scheduler)
    failing = _core.reject_after(1, reason, scheduler=scheduler)
    result = _core.all_of([slow, failing])

    scheduler.advance(1)
    # didn't wait for the slow one
    assert result.state is TaskState.REJECTED
    assert result.settlement.reason is reason
    assert slow.state is TaskState.PENDING


def test_all_of_rejection_not_later_than_input(scheduler):
    failing, resolver = _core.open_task(scheduler=scheduler)
    never, _ = _core.open_task(scheduler=scheduler)
    result = _core.all_of([never, failing])
    record = []
    failing.subscribe(lambda v: None, lambda r: record.append("input"))
    result.subscribe(lambda v: None, lambda r: record.append("aggregate"))

    resolver.reject("x")
    scheduler.run_until_idle()
    assert record == ["input", "aggregate"]
    assert scheduler.current_time() == 0.0


def test_all_of_outcome_is_fixed_once_settled(scheduler):
    first, first_resolver = _core.open_task(scheduler=scheduler)
    second, second_resolver = _core.open_task(scheduler=scheduler)
    third, third_resolver = _core.open_task(scheduler=scheduler)
    result = _core.all_of([first, second, third])
    result.subscribe(lambda v: None, lambda r: None)

    first_resolver.reject("first")
    scheduler.run_until_idle()
    assert result.settlement.reason == "first"

    # settling the others afterwards changes nothing
    second_resolver.reject("second")
    third_resolver.fulfill("third")
    scheduler.run_until_idle()
    assert result.state is TaskState.REJECTED
    assert result.settlement.reason == "first"

    # ...but the inputs themselves still settled, and other subscribers see it
    record = []
    third.subscribe(record.append, record.append)
    scheduler.run_until_idle()
    assert record == ["third"]


def test_all_of_late_fulfillment_does_not_touch_result(scheduler):
    slow, slow_resolver = _core.open_task(scheduler=scheduler)
    result = _core.all_of([slow, _core.rejected("fast", scheduler=scheduler)])
    scheduler.run_until_idle()
    assert result.settlement.reason == "fast"
    slow_resolver.fulfill("too late")
    scheduler.run_until_idle()
    assert result.settlement.reason == "fast"


def test_all_of_same_pass_rejections_follow_dispatch_order(scheduler):
    a, a_resolver = _core.open_task(scheduler=scheduler)
    b, b_resolver = _core.open_task(scheduler=scheduler)
    result = _core.all_of([a, b])
    # b's notification is queued first, so b wins even though a comes first
    # in the input
    b_resolver.reject("b")
    a_resolver.reject("a")
    scheduler.run_until_idle()
    assert result.settlement.reason == "b"


def test_all_of_composes(scheduler):
    inner = _core.all_of(
        [1, _core.fulfill_after(1, 2, scheduler=scheduler)], scheduler=scheduler
    )
    outer = _core.all_of([inner, 3, _core.all_of([], scheduler=scheduler)])
    assert outer.scheduler is scheduler
    scheduler.run_all()
    assert outer.unwrap() == [[1, 2], 3, []]


def test_all_of_result_is_a_list(scheduler):
    result = _core.all_of((x for x in "abc"), scheduler=scheduler)
    scheduler.run_until_idle()
    assert result.unwrap() == ["a", "b", "c"]


def test_all_of_explicit_scheduler_wins(scheduler):
    other = _core.ManualScheduler()
    task = _core.fulfilled(1, scheduler=other)
    result = _core.all_of([task], scheduler=scheduler)
    assert result.scheduler is scheduler
    # the input's notification comes from its own scheduler
    other.run_until_idle()
    assert result.state is TaskState.PENDING
    scheduler.run_until_idle()
    assert result.unwrap() == [1]


def test_all_of_foreign_subscribable(scheduler):
    class ForeignTask:
        def __init__(self, value):
            self.value = value

        def subscribe(self, on_fulfilled, on_rejected):
            scheduler.call_soon(on_fulfilled, self.value)

    Subscribable.register(ForeignTask)
    result = _core.all_of([ForeignTask("x"), "y"], scheduler=scheduler)
    scheduler.run_until_idle()
    assert result.unwrap() == ["x", "y"]


def test_all_of_ignores_repeated_fulfillment(scheduler):
    class Stutter:
        # reports its value twice
        def subscribe(self, on_fulfilled, on_rejected):
            scheduler.call_soon(on_fulfilled, "once")
            scheduler.call_soon(on_fulfilled, "twice")

    Subscribable.register(Stutter)
    never, _ = _core.open_task(scheduler=scheduler)
    result = _core.all_of([Stutter(), never])
    scheduler.run_until_idle()
    # one input is still pending, so the result must be too
    assert result.state is TaskState.PENDING

    result = _core.all_of([Stutter(), "plain"], scheduler=scheduler)
    scheduler.run_until_idle()
    assert result.unwrap() == ["once", "plain"]


def test_all_of_ignores_rejection_after_fulfillment(scheduler):
    class ChangesItsMind:
        def subscribe(self, on_fulfilled, on_rejected):
            scheduler.call_soon(on_fulfilled, "kept")
            scheduler.call_soon(on_rejected, "ignored")

    Subscribable.register(ChangesItsMind)
    other, other_resolver = _core.open_task(scheduler=scheduler)
    result = _core.all_of([ChangesItsMind(), other])
    scheduler.run_until_idle()
    assert result.state is TaskState.PENDING

    other_resolver.fulfill("other")
    scheduler.run_until_idle()
    assert result.unwrap() == ["kept", "other"]


def test_all_of_recover_escape_hatch(scheduler):
    flaky = _core.reject_after(1, KeyError("flaky"), scheduler=scheduler)
    result = _core.all_of(
        [
            _core.fulfill_after(2, "ok", scheduler=scheduler),
            flaky.recover(lambda reason: "fallback"),
        ]
    )
    scheduler.run_all()
    assert result.unwrap() == ["ok", "fallback"]


def test_all_of_logs_debug(scheduler, caplog):
    with caplog.at_level(logging.DEBUG, logger="taskall.aggregate"):
        result = _core.all_of(
            [1, _core.rejected("r", scheduler=scheduler)], scheduler=scheduler
        )
        scheduler.run_until_idle()
    assert result.state is TaskState.REJECTED
    messages = [r.getMessage() for r in caplog.records if r.name == "taskall.aggregate"]
    assert any("waiting on 2 inputs" in m for m in messages)
    assert any("input 1" in m and "failing fast" in m for m in messages)
