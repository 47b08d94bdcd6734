# agent.py
# Step engine for the browser agent.
#
# The Agent is the kernel. The model is a passive responder; this class owns
# the control loop, action dispatch, the transcript and error recovery.
#
# Control flow per step:
#   browser snapshot + history + task → prompt → completion request
#   → plan parse → ordered per-action dispatch → post-action snapshot
#   → one HistoryRecord appended
#
# All terminal output is delegated to display.py. No formatting here.

import json
import time
from typing import Callable, Iterable

from playwright.sync_api import Error as PlaywrightError

from browser_pilot import display
from browser_pilot.actions import browser_actions
from browser_pilot.browser import BrowserSession
from browser_pilot.completion import (
    CompletionClient,
    CompletionRequestError,
    RateLimitExceeded,
    TokenLimitExceeded,
)
from browser_pilot.history import HistoryLog
from browser_pilot.messages import Messages, compose_messages
from browser_pilot.models import (
    ActionInvocationResult,
    ActionRecord,
    HistoryRecord,
    Plan,
    PlannedAction,
)
from browser_pilot.registry import Action, ActionRegistry
from browser_pilot.signals import Signal

DEFAULT_MAX_STEPS = 100

# Seconds to wait before the next loop iteration after a failed request.
RATE_LIMIT_DELAY = 60.0
RETRY_DELAY = 1.0

ACTION_NOT_FOUND = "Action '{name}' not found"
ACTION_NOT_EXECUTED = "Not executed: the agent stopped before this action ran"


# ---------------------------------------------------------------------------
# Exceptions
# ---------------------------------------------------------------------------


class PlanParseError(Exception):
    """Raised when the model response is not a valid plan document."""


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def parse_plan(response: str) -> Plan:
    """
    Parse a model response as a plan.

    The response must be a bare JSON document without tags or markdown fences.
    Raises PlanParseError on any parse or validation failure.
    """
    try:
        data = json.loads(response)
        return Plan.model_validate(data)
    except (json.JSONDecodeError, ValueError) as exc:
        raise PlanParseError(f"Plan content is invalid: {exc}") from exc


def _describe_error(exc: BaseException) -> str:
    return f"{type(exc).__name__}: {exc}"


# ---------------------------------------------------------------------------
# Agent
# ---------------------------------------------------------------------------


class Agent:
    """
    Drives a browser toward a natural-language task.

    Example:
        agent = Agent(
            task="Find the weather in Paris",
            session=BrowserSession(context, browser),
            completion=CompletionClient(api_key="sk-..."),
        )
        agent.stopped.connect(lambda: print("stopped"))
        agent.start()
    """

    def __init__(
        self,
        task: str,
        session: BrowserSession,
        completion: CompletionClient,
        *,
        actions: Iterable[Action] = (),
        history: HistoryLog | None = None,
        max_steps: int = DEFAULT_MAX_STEPS,
        close_browser_on_done: bool = True,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self._task = task
        self._session = session
        self._completion = completion
        self._history = history if history is not None else HistoryLog()
        self._max_steps = max_steps
        self._close_browser_on_done = close_browser_on_done
        self._sleep = sleep

        self._registry = ActionRegistry(browser_actions(session, self.mark_done, sleep))
        for action in actions:
            self._registry.register(action)

        self._running = False
        self._step_count = 0
        self._stop_done = False

        self.stopped = Signal("stopped")
        self.completed = Signal("completed")

    # ------------------------------------------------------------------
    # State
    # ------------------------------------------------------------------

    @property
    def running(self) -> bool:
        return self._running

    @property
    def step_count(self) -> int:
        return self._step_count

    @property
    def max_steps(self) -> int:
        return self._max_steps

    @property
    def task(self) -> str:
        return self._task

    @property
    def actions(self) -> ActionRegistry:
        return self._registry

    @property
    def history(self) -> HistoryLog:
        return self._history

    def mark_done(self) -> None:
        """Terminal signal: the current plan stops after the running action."""
        self._running = False

    # ------------------------------------------------------------------
    # Prompt
    # ------------------------------------------------------------------

    def compose_messages(self) -> Messages:
        state = self._session.snapshot()
        return compose_messages(self._task, self._registry, self._history.records, state)

    # ------------------------------------------------------------------
    # Dispatch
    # ------------------------------------------------------------------

    def _invoke(self, planned: PlannedAction) -> ActionInvocationResult:
        action = self._registry.resolve(planned.name)
        if action is None:
            display.action_not_found(planned.name)
            return ActionInvocationResult(
                success=False, result=ACTION_NOT_FOUND.format(name=planned.name)
            )

        display.action_executing(planned.name, planned.args)
        try:
            result = action.invoke(planned.args)
        except Exception as exc:
            error = _describe_error(exc)
            display.action_failed(planned.name, error)
            return ActionInvocationResult(success=False, result=error)

        display.action_succeeded(planned.name, result)
        return ActionInvocationResult(success=True, result=result)

    def execute_plan(self, plan: Plan) -> list[ActionInvocationResult]:
        """
        Run the plan's actions strictly in order.

        A failing action never prevents the next one from running. Once
        `running` is false no further action is issued; the remaining slots
        are filled so results stay aligned with the plan.
        """
        results: list[ActionInvocationResult] = []
        for index, planned in enumerate(plan.actions):
            if not self._running:
                remaining = len(plan.actions) - index
                display.actions_interrupted(remaining)
                results.extend(
                    ActionInvocationResult(success=False, result=ACTION_NOT_EXECUTED)
                    for _ in range(remaining)
                )
                break
            results.append(self._invoke(planned))
        return results

    # ------------------------------------------------------------------
    # Step
    # ------------------------------------------------------------------

    def _purge_history(self) -> None:
        evicted = self._history.purge()
        if evicted:
            display.history_purged(evicted, len(self._history))

    def step(self) -> HistoryRecord | None:
        """
        One loop iteration: request a plan, execute it, record the outcome.

        Returns the appended record, or None when the request failed or the
        response was not a plan. Only TokenLimitExceeded stops the run; any
        other error costs a short backoff and the loop carries on.
        """
        try:
            return self._run_step()
        except Exception as exc:
            display.request_failed(_describe_error(exc), RETRY_DELAY)
            self._sleep(RETRY_DELAY)
            return None

    def _run_step(self) -> HistoryRecord | None:
        messages = self.compose_messages()

        display.calling_model(len(self._history))
        try:
            response = self._completion.complete(
                messages.system,
                ["\n".join(messages.history), messages.current_state],
            )
        except RateLimitExceeded as exc:
            display.rate_limited(str(exc), RATE_LIMIT_DELAY)
            self._purge_history()
            self._sleep(RATE_LIMIT_DELAY)
            return None
        except TokenLimitExceeded as exc:
            display.token_limit_exceeded(str(exc))
            self._running = False
            self._sleep(RETRY_DELAY)
            return None
        except CompletionRequestError as exc:
            display.request_failed(str(exc), RETRY_DELAY)
            self._sleep(RETRY_DELAY)
            return None

        try:
            plan = parse_plan(response)
        except PlanParseError as exc:
            display.plan_parse_failed(response, str(exc))
            return None

        display.plan_parsed(plan)
        results = self.execute_plan(plan)

        state = self._session.snapshot()
        record = HistoryRecord(
            tabs=tuple(state.tabs),
            current_tab_index=state.current_tab_index,
            state=plan.state,
            actions=tuple(
                ActionRecord(
                    name=planned.name,
                    args=planned.args,
                    success=outcome.success,
                    result=outcome.result,
                )
                for planned, outcome in zip(plan.actions, results, strict=True)
            ),
        )
        self._history.append(record)
        display.history_recorded(record, len(self._history))
        return record

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self) -> None:
        """
        Run steps until the task is done, a fatal error occurs or the step
        bound is reached. A no-op while already running.
        """
        if self._running:
            return
        self._running = True
        self._step_count = 0
        self._stop_done = False
        self.stopped.reset()
        self.completed.reset()

        display.banner(self._task, str(getattr(self._completion, "model", "")), self._max_steps)

        try:
            while self._running and self._step_count < self._max_steps:
                display.step_start(self._step_count, self._max_steps)
                try:
                    self.step()
                finally:
                    self._step_count += 1
        finally:
            self.stop()

        display.completed(len(self._history))
        self.completed.emit()

    def stop(self) -> None:
        """
        End the run. Releases the browser, or leaves it open showing the full
        prompt transcript. Runs at most once per run.
        """
        if self._stop_done:
            return
        self._stop_done = True
        self._running = False

        if self._close_browser_on_done:
            try:
                self._session.close()
            except PlaywrightError as exc:
                display.cleanup_failed("release the browser", str(exc))
        else:
            self._show_debug_page()

        display.stopped(self._step_count)
        self.stopped.emit()

    def _show_debug_page(self) -> None:
        try:
            transcript = self.compose_messages().transcript()
            self._session.open_new_tab()
            self._session.go_to_data_url(transcript, "text/plain")
        except PlaywrightError as exc:
            display.cleanup_failed("open the debug transcript page", str(exc))
