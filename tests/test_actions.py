from unittest.mock import MagicMock

from browser_pilot.actions import browser_actions
from browser_pilot.registry import ActionRegistry


def _registry():
    session, finish, sleep = MagicMock(), MagicMock(), MagicMock()
    return ActionRegistry(browser_actions(session, finish, sleep)), session, finish, sleep


def test_default_action_names():
    registry, _, _, _ = _registry()
    assert [d.name for d in registry.describe()] == [
        "open_new_tab",
        "go_to_url",
        "go_to_data_url",
        "done",
        "close_tab",
        "go_back",
        "refresh",
        "switch_tab",
        "scroll",
        "click_element",
        "input_text",
        "send_key",
        "sleep",
    ]


def test_done_calls_finish():
    registry, session, finish, _ = _registry()
    registry.resolve("done").invoke({})
    finish.assert_called_once_with()
    session.assert_not_called()


def test_sleep_converts_milliseconds():
    registry, _, _, sleep = _registry()
    registry.resolve("sleep").invoke({"ms": 1500})
    sleep.assert_called_once_with(1.5)


def test_input_text_clears_by_default():
    registry, session, _, _ = _registry()
    registry.resolve("input_text").invoke({"value": "milk", "selector": "#q"})
    session.type_text.assert_called_once_with("#q", "milk", clear_first=True)


def test_input_text_respects_clear_flag():
    registry, session, _, _ = _registry()
    registry.resolve("input_text").invoke(
        {"selector": "#q", "value": "milk", "clear_before_input": False}
    )
    session.type_text.assert_called_once_with("#q", "milk", clear_first=False)


def test_navigation_actions_delegate_to_session():
    registry, session, _, _ = _registry()
    registry.resolve("open_new_tab").invoke({})
    registry.resolve("go_to_url").invoke({"url": "https://a.test"})
    registry.resolve("go_to_data_url").invoke({"content_type": "text/html", "content": "<p>x</p>"})
    registry.resolve("switch_tab").invoke({"index": 2.0})
    registry.resolve("refresh").invoke({})

    session.open_new_tab.assert_called_once_with()
    session.go_to_url.assert_called_once_with("https://a.test")
    session.go_to_data_url.assert_called_once_with("<p>x</p>", "text/html")
    session.switch_tab.assert_called_once_with(2)
    session.reload.assert_called_once_with()


def test_element_actions_delegate_to_session():
    registry, session, _, _ = _registry()
    registry.resolve("click_element").invoke({"selector": "#go"})
    registry.resolve("send_key").invoke({"key": "Enter", "selector": "#q"})
    registry.resolve("scroll").invoke({"amount": -300})

    session.click.assert_called_once_with("#go")
    session.press_key.assert_called_once_with("#q", "Enter")
    session.scroll.assert_called_once_with(-300)
