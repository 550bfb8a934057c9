from __future__ import annotations

import subprocess

COPY_COMMANDS = (
    ["wl-copy"],
    ["xclip", "-selection", "clipboard"],
    ["xsel", "--clipboard", "--input"],
    ["pbcopy"],
    ["clip.exe"],
)


def copy_to_clipboard(text: str) -> tuple[bool, str]:
    """Copy text to the system clipboard. Returns (success, message)."""
    last_error = ""
    for cmd in COPY_COMMANDS:
        try:
            subprocess.run(cmd, input=text, text=True, check=True, timeout=2,
                           stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
            return (True, "Copied to clipboard")
        except FileNotFoundError:
            continue
        except (subprocess.CalledProcessError, subprocess.TimeoutExpired) as e:
            last_error = f"{cmd[0]}: {e}"[:40]

    if last_error:
        return (False, f"Copy failed: {last_error}")
    return (False, "No clipboard tool (need wl-copy/xclip/xsel/pbcopy)")
