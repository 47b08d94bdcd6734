# messages.py
# Prompt composition. Pure string rendering with no I/O or browser access.
#
# Identical inputs always produce identical text, so everything here can be
# tested without a live browser or model.

import json
from typing import Any, Sequence

from pydantic import BaseModel

from browser_pilot.models import BrowserState, HistoryRecord, Tab
from browser_pilot.registry import ActionRegistry

NOTHING_RETURNED = "Nothing was returned."

SYSTEM_PROMPT = """\
# Role:
You are a browser automation agent. You accomplish the task below by \
emitting structured commands that are executed against a live browser.

# Procedure:
1.	Analyze the current page content and the tab list.
2.	Plan the sequence of actions that moves the task forward.
3.	Respond with a single valid JSON object containing:
- Your state assessment: the evaluation of the previous goal, the memory \
of what has been done so far, and the next goal.
- The actions to execute, in the order they must run.
- Never wrap the JSON inside a markdown code block.

# Notes:
1.	The response must follow the exact JSON structure below. Do not add comments to it.
2.	When passing a selector to an action:
   - Use CSS selector syntax.
   - Prefer unique identifying attributes such as id, name or a specific class.
   - Class names must be exact, otherwise the selector will fail.
   - Use only the most specific class name when an element has several.
3.	If an action fails:
   - Do not repeat the actions that ran before the failure; continue from the point of failure.
   - Do not refresh the page immediately; look for the element you meant to interact with first.
   - Only refresh the page when the failure is caused by a page load problem.
4.	Never hallucinate:
   - Do not invent actions that are not listed below.
   - Do not select elements that do not exist on the page.
5.	If you encounter a CAPTCHA, sleep for 15 seconds before continuing.
6.	A timeout while waiting for a selector means the element does not exist. \
Check the selector before retrying.
7.	Do not close tabs when the task is complete; call the "done" action instead.

# Response Structure:
{schema}

# Defined Actions:
{actions}

# Task:
{task}"""

RESPONSE_SCHEMA = {
    "state": {
        "previousGoalEvaluation": "Success | Fail | Unknown — was the previous goal achieved?",
        "evaluationReason": "Why the previous goal was evaluated this way.",
        "memory": "Everything that has been done and must be retained until the task ends.",
        "nextGoal": "A brief description of what to do next.",
    },
    "actions": [
        {"name": "open_new_tab", "args": {}},
        {"name": "go_to_url", "args": {"url": "https://www.example.com"}},
    ],
}


class Messages(BaseModel):
    """The three prompt blocks for one step."""

    system: str
    history: list[str]
    current_state: str

    def transcript(self) -> str:
        return "\n".join([self.system, *self.history, self.current_state])


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _format_tabs(tabs: Sequence[Tab]) -> str:
    return "\n".join(f"{i}. {tab.url} ({tab.title})" for i, tab in enumerate(tabs, start=1))


def _format_args(args: dict[str, Any]) -> str:
    return ", ".join(f"{key}: {json.dumps(value, default=str)}" for key, value in args.items())


def _format_actions(registry: ActionRegistry) -> str:
    entries: list[str] = []
    for action in registry.describe():
        if action.parameters:
            params = "\n" + "\n".join(
                f"{i}. {param.name} ({param.type})"
                + ("" if param.required else f", optional, default {json.dumps(param.default, default=str)}")
                for i, param in enumerate(action.parameters, start=1)
            )
        else:
            params = "None"
        entries.append(
            f"-\t**{action.name}**:\nDescription: {action.description}\nParameters: {params}"
        )
    return "\n".join(entries)


# ---------------------------------------------------------------------------
# Message blocks
# ---------------------------------------------------------------------------


def create_system_message(task: str, registry: ActionRegistry) -> str:
    return SYSTEM_PROMPT.format(
        schema=json.dumps(RESPONSE_SCHEMA, indent=2),
        actions=_format_actions(registry),
        task=task,
    )


def create_history_message(index: int, record: HistoryRecord) -> str:
    """Render one history record. `index` is 0-based; output is 1-based."""
    lines = [
        f"# History Record #{index + 1}",
        "",
        "## Time:",
        record.time.isoformat(timespec="milliseconds"),
        "",
        "## Tabs:",
        _format_tabs(record.tabs),
        "",
        "## Current Tab Index:",
        str(record.current_tab_index + 1),
        "",
        "## State:",
        f"Previous goal: {record.state.previous_goal_evaluation} — {record.state.evaluation_reason}",
        f"Memory: {record.state.memory}",
        f"Next goal: {record.state.next_goal}",
        "",
        "## Actions Taken:",
    ]
    for i, action in enumerate(record.actions, start=1):
        lines.append(f"{i}.\t{action.name}({_format_args(action.args)})")
        if not action.success:
            lines.append(f"\tFailed: {action.result}")
        elif action.result is None:
            lines.append(f"\tReturned: {NOTHING_RETURNED}")
        else:
            lines.append(f"\tReturned: {action.result}")
    return "\n".join(lines) + "\n"


def create_current_state_message(state: BrowserState) -> str:
    return "\n".join(
        [
            "# Current State:",
            "## Current Title and URL:",
            f"{state.title} ({state.url})",
            "",
            "## Available Tabs:",
            _format_tabs(state.tabs),
            "",
            "## Current Page Content:",
            state.content,
        ]
    )


def compose_messages(
    task: str,
    registry: ActionRegistry,
    history: Sequence[HistoryRecord],
    state: BrowserState,
) -> Messages:
    return Messages(
        system=create_system_message(task, registry),
        history=[create_history_message(i, record) for i, record in enumerate(history)],
        current_state=create_current_state_message(state),
    )
