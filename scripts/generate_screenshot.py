#!/usr/bin/env python3
"""Generate a deterministic README screenshot with fake array-job data."""

import asyncio
import os
import sys
from pathlib import Path

# Force colorful rendering in CI and remote shells where NO_COLOR/TERM=dumb is set.
os.environ.pop("NO_COLOR", None)
os.environ["TERM"] = "xterm-256color"
os.environ["COLORTERM"] = "truecolor"
os.environ["SJOBS_FAKE_DATA"] = "1"

REPO_ROOT = Path(__file__).resolve().parent.parent
sys.path.insert(0, str(REPO_ROOT / "src"))

from rich.terminal_theme import MONOKAI  # noqa: E402
from sjobs_dashboard import SlurmJobsDashboard  # noqa: E402


async def _capture() -> None:
    app = SlurmJobsDashboard(refresh_rate=0)
    app.ansi_theme_dark = MONOKAI
    app.ansi_theme_light = MONOKAI

    output = Path("docs/sjobs-screenshot.svg")
    output.parent.mkdir(parents=True, exist_ok=True)

    async with app.run_test(size=(170, 45)) as pilot:
        await pilot.pause(0.5)
        # Open the first array group and select it so the screenshot shows both.
        for _ in range(2):
            await pilot.press("j")
        await pilot.press("e", "space")
        await pilot.pause(0.3)
        app.save_screenshot(filename=output.name, path=str(output.parent))

    print(output)


if __name__ == "__main__":
    asyncio.run(_capture())
