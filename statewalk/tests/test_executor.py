"""
Tests for the action executor.

Tests:
- Completed actions are accepted without retry
- Free skips never touch the costly retry budget, and have their own cap
- Costly skips are bounded and end in NoValidAction
- Other errors propagate unchanged
- Draw groups are closed on every exit path
"""

import pytest

from ..errors import (
    AssertionFailure,
    EntropyExhausted,
    NoValidAction,
    NO_VALID_ACTION_MSG,
)
from ..machine.action import Action, ActionCatalog, OutcomeKind
from ..machine.executor import ACTION_LABEL, ActionExecutor, run_action


class TestRunAction:
    """Tests for outcome classification of a single action."""

    def test_completed(self, log, random_ctx):
        outcome = run_action(log.succeed("ok"), random_ctx)
        assert outcome.kind == OutcomeKind.COMPLETED
        assert outcome.completed

    def test_skip_without_draws_is_free(self, log, random_ctx):
        outcome = run_action(log.free_skip("a"), random_ctx)
        assert outcome.kind == OutcomeKind.INAPPLICABLE
        assert not outcome.consumed_entropy
        assert outcome.is_free_skip
        assert outcome.reason == "precondition"

    def test_skip_after_draw_is_costly(self, log, random_ctx):
        outcome = run_action(log.costly_skip("a"), random_ctx)
        assert outcome.kind == OutcomeKind.INAPPLICABLE
        assert outcome.consumed_entropy
        assert not outcome.is_free_skip

    def test_reject(self, random_ctx):
        outcome = run_action(Action("r", lambda ctx: ctx.reject("nope")), random_ctx)
        assert outcome.kind == OutcomeKind.REJECTED
        assert outcome.reason == "nope"

    def test_error_is_fatal(self, log, random_ctx):
        error = KeyError("boom")
        outcome = run_action(log.raising("bad", error), random_ctx)
        assert outcome.kind == OutcomeKind.FATAL
        assert outcome.error is error
        with pytest.raises(KeyError):
            outcome.raise_if_fatal()

    def test_deferred_failure_is_fatal(self, random_ctx):
        outcome = run_action(Action("e", lambda ctx: ctx.error("wrong")), random_ctx)
        assert outcome.kind == OutcomeKind.FATAL
        assert isinstance(outcome.error, AssertionFailure)
        assert "wrong" in str(outcome.error)


class TestExecuteStep:
    """Tests for one executor step."""

    def test_completed_action_runs_once(self, log, random_ctx):
        executor = ActionExecutor(ActionCatalog([log.succeed("ok")]))

        assert executor.execute_step(random_ctx) is True
        assert log.calls == ["ok"]
        assert random_ctx.steps == ["ok"]

    def test_free_skips_do_not_use_costly_budget(self, log, replay_ctx):
        """An instantly inapplicable action never uses the costly retry budget."""
        catalog = ActionCatalog([log.free_skip("A"), log.succeed("B")])
        executor = ActionExecutor(catalog, max_costly_retries=1)
        ctx = replay_ctx([0] * 150 + [1])

        assert executor.execute_step(ctx) is True
        assert log.count("A") == 150
        assert log.count("B") == 1
        assert ctx.steps == ["B"]

    def test_every_step_ends_on_valid_action(self, log, random_ctx):
        catalog = ActionCatalog([log.free_skip("A"), log.succeed("B")])
        executor = ActionExecutor(catalog)

        for _ in range(20):
            assert executor.execute_step(random_ctx) is True

        assert random_ctx.steps == ["B"] * 20

    def test_costly_skips_exhaust_after_limit(self, log, random_ctx):
        executor = ActionExecutor(ActionCatalog([log.costly_skip("A")]))

        with pytest.raises(NoValidAction) as exc_info:
            executor.execute_step(random_ctx)

        assert exc_info.value.attempts == 100
        assert log.count("A") == 100
        assert NO_VALID_ACTION_MSG in str(exc_info.value)
        assert random_ctx.steps == []

    def test_costly_skips_below_limit_then_success(self, log, replay_ctx):
        catalog = ActionCatalog([log.costly_skip("A"), log.succeed("B")])
        executor = ActionExecutor(catalog)
        ctx = replay_ctx([0, 5] * 99 + [1])

        assert executor.execute_step(ctx) is True
        assert log.count("A") == 99
        assert ctx.steps == ["B"]

    def test_free_skips_do_not_advance_costly_counter(self, log, replay_ctx):
        catalog = ActionCatalog([log.free_skip("F"), log.costly_skip("C")])
        executor = ActionExecutor(catalog, max_costly_retries=3)
        ctx = replay_ctx([1, 7, 0, 0, 1, 7, 0, 1, 7])

        with pytest.raises(NoValidAction):
            executor.execute_step(ctx)

        assert log.count("C") == 3
        assert log.count("F") == 3
        assert ctx.source.remaining == 0

    def test_no_retry_after_completion(self, log, replay_ctx):
        catalog = ActionCatalog([log.costly_skip("A"), log.succeed("B")])
        executor = ActionExecutor(catalog)
        ctx = replay_ctx([0, 3, 1, 1])

        assert executor.execute_step(ctx) is True
        assert log.calls == ["A", "B"]
        assert ctx.source.remaining == 1

    def test_rejected_step_returns_false(self, replay_ctx):
        catalog = ActionCatalog([Action("r", lambda ctx: ctx.reject())])
        ctx = replay_ctx([0])

        assert ActionExecutor(catalog).execute_step(ctx) is False
        assert ctx.steps == []

    def test_other_errors_propagate_unchanged(self, log, random_ctx):
        error = RuntimeError("system under test broke")
        catalog = ActionCatalog([log.raising("bad", error), log.succeed("ok")])

        with pytest.raises(RuntimeError) as exc_info:
            for _ in range(50):
                ActionExecutor(catalog).execute_step(random_ctx)

        assert exc_info.value is error
        assert log.count("bad") == 1

    def test_assertion_propagates(self, random_ctx):
        def broken(ctx):
            assert 1 + 1 == 3, "math is broken"

        with pytest.raises(AssertionError, match="math is broken"):
            ActionExecutor(ActionCatalog([Action("broken", broken)])).execute_step(random_ctx)

    def test_exhausted_entropy_propagates(self, log, replay_ctx):
        """Free skips forever stop once the source runs dry."""
        executor = ActionExecutor(ActionCatalog([log.free_skip("A")]))
        ctx = replay_ctx([0] * 10)

        with pytest.raises(EntropyExhausted):
            executor.execute_step(ctx)

        assert log.count("A") == 10

    def test_free_skips_are_bounded(self, log, random_ctx):
        """A catalog where every action skips for free still ends."""
        catalog = ActionCatalog([log.free_skip("pop"), log.free_skip("peek")])
        executor = ActionExecutor(catalog, max_free_retries=50)

        with pytest.raises(NoValidAction) as exc_info:
            executor.execute_step(random_ctx)

        assert exc_info.value.attempts == 50
        assert len(log.calls) == 50
        assert random_ctx.source.depth == 0

    def test_free_cap_leaves_costly_counter_alone(self, log, replay_ctx):
        catalog = ActionCatalog([log.free_skip("F"), log.costly_skip("C"), log.succeed("B")])
        executor = ActionExecutor(catalog, max_costly_retries=2, max_free_retries=3)
        ctx = replay_ctx([1, 4, 0, 0, 2])

        assert executor.execute_step(ctx) is True
        assert log.calls == ["C", "F", "F", "B"]


class TestDrawGroups:
    """Tests for group bookkeeping around each attempt."""

    def test_one_group_per_attempt(self, log, replay_ctx):
        catalog = ActionCatalog([log.costly_skip("A"), log.succeed("B")])
        ctx = replay_ctx([0, 4, 1])

        ActionExecutor(catalog).execute_step(ctx)

        groups = ctx.source.groups
        assert [g.label for g in groups] == [ACTION_LABEL, ACTION_LABEL]
        assert [g.discarded for g in groups] == [True, False]
        assert [g.size for g in groups] == [2, 1]
        assert not any(g.user_facing for g in groups)

    def test_groups_closed_after_fatal(self, log, random_ctx):
        catalog = ActionCatalog([log.raising("bad", ValueError("x"))])

        with pytest.raises(ValueError):
            ActionExecutor(catalog).execute_step(random_ctx)

        assert random_ctx.source.depth == 0
        assert all(not g.is_open for g in random_ctx.source.groups)

    def test_groups_closed_after_no_valid_action(self, log, random_ctx):
        executor = ActionExecutor(ActionCatalog([log.costly_skip("A")]), max_costly_retries=5)

        with pytest.raises(NoValidAction):
            executor.execute_step(random_ctx)

        assert random_ctx.source.depth == 0
        assert len(random_ctx.source.groups) == 5

    def test_groups_closed_after_exhaustion(self, log, replay_ctx):
        ctx = replay_ctx([])

        with pytest.raises(EntropyExhausted):
            ActionExecutor(ActionCatalog([log.succeed("ok")])).execute_step(ctx)

        assert ctx.source.depth == 0

    def test_unclosed_inner_group_does_not_hide_skip(self, log, replay_ctx):
        """An action that opens a group and skips is still just inapplicable."""
        def draw_then_bail(ctx):
            ctx.source.begin_group("value")
            ctx.skip("bailing out mid-draw")

        catalog = ActionCatalog([Action("a", draw_then_bail), log.succeed("b")])
        ctx = replay_ctx([0, 1])

        assert ActionExecutor(catalog).execute_step(ctx) is True
        assert ctx.steps == ["b"]
        assert ctx.source.depth == 0

        labels = [(g.label, g.discarded) for g in ctx.source.groups]
        assert labels == [(ACTION_LABEL, True), ("value", True), (ACTION_LABEL, False)]

    def test_interrupt_is_not_discarded(self, replay_ctx):
        def interrupt(ctx):
            raise KeyboardInterrupt

        ctx = replay_ctx([0])

        with pytest.raises(KeyboardInterrupt):
            ActionExecutor(ActionCatalog([Action("stop", interrupt)])).execute_step(ctx)

        assert ctx.source.depth == 0
        assert ctx.source.groups[0].discarded is False
