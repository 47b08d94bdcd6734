# run.py
# Entry point. Config and wiring only, no logic lives here.

import time

from playwright.sync_api import sync_playwright
from rich.prompt import Prompt

from browser_pilot.agent import Agent
from browser_pilot.browser import BrowserSession
from browser_pilot.completion import CompletionClient
from browser_pilot.config import Settings

# How long a kept-open browser stays up after the agent stops.
LINGER_SECONDS = 10


def main() -> None:
    settings = Settings.from_env()
    task = Prompt.ask("Enter task prompt").strip()

    completion = CompletionClient(
        api_key=settings.api_key,
        model=settings.model_id,
        max_tokens=settings.max_tokens,
        base_url=settings.api_base_url,
        organization=settings.api_organization,
        project=settings.api_project,
    )

    with sync_playwright() as p:
        browser = p.chromium.launch(headless=settings.headless)
        context = browser.new_context()
        context.new_page()

        agent = Agent(
            task=task,
            session=BrowserSession(context, browser),
            completion=completion,
            max_steps=settings.max_steps,
            close_browser_on_done=settings.close_browser_on_done,
        )
        agent.start()

        if not settings.close_browser_on_done:
            time.sleep(LINGER_SECONDS)
            browser.close()


if __name__ == "__main__":
    main()
