import json
from datetime import datetime, timezone

from browser_pilot.messages import (
    NOTHING_RETURNED,
    compose_messages,
    create_current_state_message,
    create_history_message,
    create_system_message,
)
from browser_pilot.models import ActionRecord, BrowserState, HistoryRecord, PlanState, Tab
from browser_pilot.registry import Action, ActionParameter, ActionRegistry


def _registry() -> ActionRegistry:
    return ActionRegistry(
        [
            Action(name="done", description="Finish the task", callback=lambda: None),
            Action(
                name="go_to_url",
                description="Go to the given url",
                parameters=(ActionParameter(name="url", type="string"),),
                callback=lambda url: None,
            ),
            Action(
                name="input_text",
                description="Type text",
                parameters=(
                    ActionParameter(name="selector"),
                    ActionParameter(name="value"),
                    ActionParameter(name="clear", type="boolean", required=False, default=True),
                ),
                callback=lambda selector, value, clear: None,
            ),
        ]
    )


def _record() -> HistoryRecord:
    return HistoryRecord(
        time=datetime(2024, 1, 2, 3, 4, 5, tzinfo=timezone.utc),
        tabs=(Tab(url="https://a.test", title="A"), Tab(url="https://b.test", title="B")),
        current_tab_index=1,
        state=PlanState(
            previous_goal_evaluation="Success",
            evaluation_reason="Loaded",
            memory="Opened B",
            next_goal="Click login",
        ),
        actions=(
            ActionRecord(name="go_to_url", args={"url": "https://b.test"}, success=True),
            ActionRecord(name="scroll", args={"amount": 200}, success=True, result="ok"),
            ActionRecord(
                name="click_element",
                args={"selector": "#x"},
                success=False,
                result="TimeoutError: boom",
            ),
        ),
    )


# ---------------------------------------------------------------------------
# System message
# ---------------------------------------------------------------------------


def test_system_message_lists_actions_in_registration_order():
    message = create_system_message("Buy milk", _registry())

    done_at = message.index("**done**")
    url_at = message.index("**go_to_url**")
    input_at = message.index("**input_text**")
    assert done_at < url_at < input_at
    assert "-\t**done**:\nDescription: Finish the task\nParameters: None" in message
    assert (
        "-\t**go_to_url**:\nDescription: Go to the given url\nParameters: \n1. url (string)"
        in message
    )
    assert "3. clear (boolean), optional, default true" in message


def test_system_message_ends_with_task():
    message = create_system_message("Buy milk", _registry())
    assert message.endswith("# Task:\nBuy milk")
    assert '"previousGoalEvaluation"' in message


def test_system_message_is_deterministic():
    assert create_system_message("t", _registry()) == create_system_message("t", _registry())


# ---------------------------------------------------------------------------
# History message
# ---------------------------------------------------------------------------


def test_history_message_renders_record():
    expected = (
        "# History Record #3\n"
        "\n"
        "## Time:\n"
        "2024-01-02T03:04:05.000+00:00\n"
        "\n"
        "## Tabs:\n"
        "1. https://a.test (A)\n"
        "2. https://b.test (B)\n"
        "\n"
        "## Current Tab Index:\n"
        "2\n"
        "\n"
        "## State:\n"
        "Previous goal: Success — Loaded\n"
        "Memory: Opened B\n"
        "Next goal: Click login\n"
        "\n"
        "## Actions Taken:\n"
        '1.\tgo_to_url(url: "https://b.test")\n'
        f"\tReturned: {NOTHING_RETURNED}\n"
        "2.\tscroll(amount: 200)\n"
        "\tReturned: ok\n"
        '3.\tclick_element(selector: "#x")\n'
        "\tFailed: TimeoutError: boom\n"
    )
    assert create_history_message(2, _record()) == expected


# ---------------------------------------------------------------------------
# Current state message
# ---------------------------------------------------------------------------


def test_current_state_message():
    state = BrowserState(
        url="https://b.test",
        title="B",
        tabs=[Tab(url="https://a.test", title="A"), Tab(url="https://b.test", title="B")],
        current_tab_index=1,
        content="<html>\n <body>\n </body>\n</html>",
    )
    assert create_current_state_message(state) == (
        "# Current State:\n"
        "## Current Title and URL:\n"
        "B (https://b.test)\n"
        "\n"
        "## Available Tabs:\n"
        "1. https://a.test (A)\n"
        "2. https://b.test (B)\n"
        "\n"
        "## Current Page Content:\n"
        "<html>\n <body>\n </body>\n</html>"
    )


def test_compose_messages_numbers_history_and_builds_transcript():
    messages = compose_messages("Buy milk", _registry(), [_record(), _record()], BrowserState())

    assert messages.history[0].startswith("# History Record #1")
    assert messages.history[1].startswith("# History Record #2")
    transcript = messages.transcript()
    assert transcript.startswith(messages.system)
    assert transcript.endswith(messages.current_state)


def test_system_message_renders_unserialisable_default():
    marker = object()
    registry = ActionRegistry(
        [
            Action(
                name="tag",
                description="Tag things",
                parameters=(ActionParameter(name="label", required=False, default=marker),),
                callback=lambda label: None,
            )
        ]
    )

    message = create_system_message("t", registry)

    assert f"1. label (string), optional, default {json.dumps(str(marker))}" in message
