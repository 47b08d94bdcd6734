# models.py
# Data contracts for the browser agent.
# No business logic lives here, only schema and validation.

from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

GoalEvaluation = Literal["Success", "Fail", "Unknown"]


# ---------------------------------------------------------------------------
# Model output
# ---------------------------------------------------------------------------


class PlanState(BaseModel):
    """The model's assessment of where the task stands."""

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    previous_goal_evaluation: GoalEvaluation = Field(..., alias="previousGoalEvaluation")
    evaluation_reason: str = Field(default="", alias="evaluationReason")
    memory: str = Field(default="")
    next_goal: str = Field(default="", alias="nextGoal")


class PlannedAction(BaseModel):
    """A single action the model wants executed."""

    name: str = Field(..., description="Action name, the dispatch key into the registry.")
    args: dict[str, Any] = Field(default_factory=dict, description="Arguments by parameter name.")


class Plan(BaseModel):
    """A complete step plan emitted by the model."""

    state: PlanState
    actions: list[PlannedAction]


# ---------------------------------------------------------------------------
# Execution
# ---------------------------------------------------------------------------


class ActionInvocationResult(BaseModel):
    """Outcome of one invocation, positionally aligned with the plan's actions."""

    success: bool
    result: Any = None


class Tab(BaseModel):
    model_config = ConfigDict(frozen=True)

    url: str
    title: str


class BrowserState(BaseModel):
    """Transient browser snapshot, recomputed every step."""

    url: str = ""
    title: str = ""
    tabs: list[Tab] = Field(default_factory=list)
    current_tab_index: int = Field(default=-1, description="0-based; -1 when no tab is visible.")
    content: str = Field(default="", description="Sanitized markup of the current page.")


# ---------------------------------------------------------------------------
# History
# ---------------------------------------------------------------------------


class ActionRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str
    args: dict[str, Any] = Field(default_factory=dict)
    success: bool
    result: Any = None


class HistoryRecord(BaseModel):
    """Immutable transcript entry produced after each completed step."""

    model_config = ConfigDict(frozen=True)

    time: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    tabs: tuple[Tab, ...] = ()
    current_tab_index: int = -1
    state: PlanState
    actions: tuple[ActionRecord, ...] = ()
