# actions.py
# Built-in action table: every browser operation the model may request.
#
# Each entry declares its name, ordered parameters and description up front.
# Callbacks close over the session; the agent never calls these directly,
# it dispatches through the registry.

from typing import Callable

from browser_pilot import display
from browser_pilot.browser import BrowserSession
from browser_pilot.registry import Action, ActionParameter


def _param(name: str, type_: str, **kwargs) -> ActionParameter:
    return ActionParameter(name=name, type=type_, **kwargs)


def browser_actions(
    session: BrowserSession,
    finish: Callable[[], None],
    sleep: Callable[[float], None],
) -> list[Action]:
    """
    Build the default action set.

    `finish` ends the run (the "done" action); `sleep` blocks for a number
    of seconds and is shared with the agent's own backoff.
    """

    def open_new_tab() -> None:
        display.browser_action("Opening new tab")
        session.open_new_tab()

    def go_to_url(url: str) -> None:
        display.browser_action(f"Navigating to URL: {url}")
        session.go_to_url(url)

    def go_to_data_url(content: str, content_type: str) -> None:
        display.browser_action(f"Rendering {len(content)} characters as {content_type}")
        session.go_to_data_url(content, content_type)

    def done() -> None:
        display.browser_action("Marking task as complete")
        finish()

    def close_tab() -> None:
        display.browser_action("Closing current tab")
        session.close_tab()

    def go_back() -> None:
        display.browser_action("Going back to previous page")
        session.go_back()

    def refresh() -> None:
        display.browser_action("Refreshing current page")
        session.reload()

    def switch_tab(index: int) -> None:
        display.browser_action(f"Switching to tab {index}")
        session.switch_tab(int(index))

    def scroll(amount: int) -> None:
        direction = "down" if amount > 0 else "up"
        display.browser_action(f"Scrolling {direction} {abs(amount)}px")
        session.scroll(amount)

    def click_element(selector: str) -> None:
        display.browser_action(f"Clicking element: {selector}")
        session.click(selector)

    def input_text(selector: str, value: str, clear_before_input: bool) -> None:
        display.browser_action(f"Inputting text into {selector}")
        session.type_text(selector, value, clear_first=bool(clear_before_input))

    def send_key(selector: str, key: str) -> None:
        display.browser_action(f"Sending key {key} to element: {selector}")
        session.press_key(selector, key)

    def sleep_action(ms: int) -> None:
        display.browser_action(f"Sleeping for {ms}ms")
        sleep(ms / 1000)

    return [
        Action(
            name="open_new_tab",
            description="Open a new tab and bring it to the front",
            callback=open_new_tab,
        ),
        Action(
            name="go_to_url",
            description="Go to the given url in the current tab",
            parameters=(_param("url", "string"),),
            callback=go_to_url,
        ),
        Action(
            name="go_to_data_url",
            description=(
                "Go to a page displaying the given content, "
                'supported content types are: "text/html" and "text/plain"'
            ),
            parameters=(_param("content", "string"), _param("content_type", "string")),
            callback=go_to_data_url,
        ),
        Action(
            name="done",
            description="Marks the task as complete, breaking the execution loop.",
            callback=done,
        ),
        Action(name="close_tab", description="Close the current tab", callback=close_tab),
        Action(name="go_back", description="Navigate back to the previous page", callback=go_back),
        Action(name="refresh", description="Refreshes the current page", callback=refresh),
        Action(
            name="switch_tab",
            description="Switch to the tab at the given index (1-based)",
            parameters=(_param("index", "number"),),
            callback=switch_tab,
        ),
        Action(
            name="scroll",
            description=(
                "Scroll the page by the specified number of pixels, "
                "positive is down, negative is up"
            ),
            parameters=(_param("amount", "number"),),
            callback=scroll,
        ),
        Action(
            name="click_element",
            description="Clicks the element matching the given selector",
            parameters=(_param("selector", "string"),),
            callback=click_element,
        ),
        Action(
            name="input_text",
            description="Types the value into the element matching the given selector",
            parameters=(
                _param("selector", "string"),
                _param("value", "string"),
                _param("clear_before_input", "boolean", required=False, default=True),
            ),
            callback=input_text,
        ),
        Action(
            name="send_key",
            description="Send a key press event to the element matching the given selector",
            parameters=(_param("selector", "string"), _param("key", "string")),
            callback=send_key,
        ),
        Action(
            name="sleep",
            description=(
                "Pauses the action loop for the given number of milliseconds. "
                "Be conservative with your sleep calls, they should only be used when necessary."
            ),
            parameters=(_param("ms", "number"),),
            callback=sleep_action,
        ),
    ]
