import base64
import logging
import os
import shutil
import subprocess
from typing import Sequence

logger = logging.getLogger(__name__)

_LOCAL_COMMANDS = [
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["pbcopy"],
]


def osc52_sequence(text: str, term: str = "", in_tmux: bool = False) -> str:
    """Terminal escape that asks the (possibly remote) terminal to set the clipboard."""
    payload = base64.b64encode(text.encode("utf-8")).decode("ascii")
    osc = f"\x1b]52;c;{payload}\x07"
    if in_tmux or "screen" in term or "tmux" in term:
        osc = f"\x1bPtmux;\x1b{osc}\x1b\\"
    return osc


def _copy_with_local_command(text: str) -> bool:
    for cmd in _LOCAL_COMMANDS:
        if not shutil.which(cmd[0]):
            continue
        try:
            result = subprocess.run(
                cmd,
                input=text.encode("utf-8"),
                stderr=subprocess.DEVNULL,
                timeout=2,
            )
        except (OSError, subprocess.SubprocessError):
            logger.debug("%s failed", cmd[0], exc_info=True)
            continue
        if result.returncode == 0:
            return True
    return False


def copy_to_clipboard(text: str) -> bool:
    """
    Copies text via OSC 52 (works over SSH), then via a local clipboard
    tool when one is installed. True if either route worked.
    """
    success = False
    try:
        osc = osc52_sequence(
            text, os.environ.get("TERM", ""), bool(os.environ.get("TMUX"))
        )
        os.write(1, osc.encode("utf-8"))
        success = True
    except OSError:
        logger.debug("OSC 52 write failed", exc_info=True)

    return _copy_with_local_command(text) or success


def copy_job_ids(job_ids: Sequence[str]) -> bool:
    if not job_ids:
        return False
    return copy_to_clipboard(" ".join(job_ids))
