"""NetBird VPN status module for Waybar.

Installs a status wrapper printing Waybar JSON, ``nb-up``/``nb-down``
helpers that refresh the bar immediately, a ``custom/netbird`` module in
``config.jsonc`` and its styles in ``style.css``. Both Waybar files are
edited through managed blocks so re-running only replaces what omarchyctl
owns.
"""

import logging
import re
from pathlib import Path

from omarchyctl.core.errors import PreconditionError
from omarchyctl.core.paths import get_user_bin_dir, get_user_config_home
from omarchyctl.models.step import StepResult, StepStatus
from omarchyctl.utils.shell import run_best_effort
from omarchyctl.utils.textedit import (
    backup_once,
    read_text,
    replace_managed_block,
    upsert_managed_block,
    write_if_changed,
)

logger = logging.getLogger(__name__)

MODULE_NAME = "custom/netbird"
BACKUP_SUFFIX = ".bak_netbird"

MODULE_BEGIN = "// BEGIN NETBIRD MODULE (managed)"
MODULE_END = "// END NETBIRD MODULE (managed)"
CSS_BEGIN = "/* BEGIN NETBIRD STYLES (managed) */"
CSS_END = "/* END NETBIRD STYLES (managed) */"

STATUS_WRAPPER = """\
#!/usr/bin/env bash
# Always output JSON Waybar understands.
# Match "Signal: Connected" to avoid false positives like "0/0 Connected".
export PATH="$HOME/.local/bin:/usr/local/bin:/usr/bin:/bin:$PATH"

NB="$(command -v netbird || true)"
if [[ -z "$NB" ]]; then
  echo '{"text":"󰌿","class":"disconnected"}'
  exit 0
fi

if "$NB" status 2>/dev/null | grep -q 'Signal: Connected'; then
  echo '{"text":"󰌾","class":"connected"}'
else
  echo '{"text":"󰌿","class":"disconnected"}'
fi
"""

HELPER_TEMPLATE = """\
#!/usr/bin/env bash
netbird {verb} "$@"
pkill -RTMIN+5 waybar 2>/dev/null || true
"""

DEFAULT_CONFIG = """\
{
  "layer": "top",
  "position": "top",
  "modules-right": ["clock"]
}
"""

MODULE_BLOCK = f"""\
  {MODULE_BEGIN}
  "{MODULE_NAME}": {{
    "exec": "~/.local/bin/waybar-netbird",
    "return-type": "json",
    "format": "{{text}}",
    "interval": 10,
    "signal": 5
  }}
  {MODULE_END}
"""

CSS_BLOCK = f"""\
{CSS_BEGIN}
#custom-netbird {{
  padding: 0 20px;
}}
#custom-netbird.connected {{
  color: #8ec07c;
}}
#custom-netbird.disconnected {{
  color: #fb4934;
}}
{CSS_END}
"""

_MODULES_RIGHT = re.compile(r'"modules-right"\s*:\s*\[')


def waybar_config_dir() -> Path:
    """``~/.config/waybar``."""
    return get_user_config_home() / "waybar"


def _code_length(line: str) -> int:
    """Length of ``line`` without a trailing ``//`` comment and whitespace."""
    in_string = False
    i = 0
    while i < len(line):
        char = line[i]
        if char == "\\" and in_string:
            i += 2
            continue
        if char == '"':
            in_string = not in_string
        elif not in_string and line.startswith("//", i):
            break
        i += 1
    return len(line[:i].rstrip())


def _with_trailing_comma(head: str) -> str:
    """Add a comma after the last member in ``head``, skipping comment lines."""
    lines = head.split("\n")
    for index in range(len(lines) - 1, -1, -1):
        line = lines[index]
        end = _code_length(line)
        if end == 0 or line.lstrip().startswith(("/*", "*")):
            continue
        if line[end - 1] not in "{,":
            lines[index] = f"{line[:end]},{line[end:]}"
        break
    return "\n".join(lines)


def insert_module_block(text: str) -> str:
    """Insert or replace the managed module block in config.jsonc content.

    A new block goes right before the final ``}`` of the top-level object,
    with a separating comma after the last member when it lacks one.
    Comments between that member and the brace are kept as they are.

    Raises:
        PreconditionError: If the config has no closing brace.
    """
    replaced = replace_managed_block(text, MODULE_BEGIN, MODULE_END, MODULE_BLOCK)
    if replaced is not None:
        return replaced

    close = text.rfind("}")
    if close == -1:
        raise PreconditionError("Waybar config is not a JSON object")

    head = _with_trailing_comma(text[:close].rstrip())
    return f"{head}\n{MODULE_BLOCK}{text[close:]}"


def ensure_in_modules_right(text: str) -> str:
    """Put ``custom/netbird`` first in ``modules-right``.

    Adds a ``modules-right`` array at the top of the object when the config
    has none; leaves the array alone when the module is already listed.
    """
    match = _MODULES_RIGHT.search(text)
    if match is None:
        logger.warning("No modules-right found; adding one with %s", MODULE_NAME)
        return text.replace("{", f'{{\n  "modules-right": ["{MODULE_NAME}"],', 1)

    end = text.find("]", match.end())
    entries = text[match.end() : end if end != -1 else len(text)]
    if f'"{MODULE_NAME}"' in entries:
        return text

    rest = text[match.end() :].lstrip(" ")
    if not entries.strip():
        separator = ""
    elif rest.startswith("\n"):
        separator = ","
    else:
        separator = ", "
    return f'{text[: match.end()]}"{MODULE_NAME}"{separator}{rest}'


def render_waybar_config(text: str) -> str:
    """Apply the module block and modules-right entry to config.jsonc content."""
    return ensure_in_modules_right(insert_module_block(text))


def render_waybar_style(text: str) -> str:
    """Insert or replace the managed NetBird styles."""
    return upsert_managed_block(text, CSS_BEGIN, CSS_END, CSS_BLOCK)


def install_scripts(bin_dir: Path | None = None) -> bool:
    """Write the status wrapper and the nb-up/nb-down helpers.

    Returns:
        True if any script was created or changed.
    """
    bin_dir = bin_dir or get_user_bin_dir()
    scripts = {
        "waybar-netbird": STATUS_WRAPPER,
        "nb-up": HELPER_TEMPLATE.format(verb="up"),
        "nb-down": HELPER_TEMPLATE.format(verb="down"),
    }
    changed = False
    for name, content in scripts.items():
        changed |= write_if_changed(bin_dir / name, content, mode=0o755)
    return changed


def setup_waybar_netbird(*, reload: bool = True) -> list[StepResult]:
    """Install the NetBird module into Waybar and reload it.

    Raises:
        PreconditionError: If the existing config is not a JSON object.
    """
    results = [
        StepResult.from_changed(
            "scripts", install_scripts(), "waybar-netbird, nb-up and nb-down in ~/.local/bin"
        )
    ]

    config_dir = waybar_config_dir()
    config = config_dir / "config.jsonc"
    style = config_dir / "style.css"

    for path in (config, style):
        backup = backup_once(path, BACKUP_SUFFIX)
        if backup is not None:
            logger.info("Backed up %s to %s", path.name, backup)

    current = read_text(config) if config.exists() else DEFAULT_CONFIG
    results.append(
        StepResult.from_changed(
            "config", write_if_changed(config, render_waybar_config(current)), str(config)
        )
    )
    results.append(
        StepResult.from_changed(
            "style", write_if_changed(style, render_waybar_style(read_text(style))), str(style)
        )
    )

    if reload:
        reloaded = run_best_effort(["pkill", "-SIGUSR2", "waybar"])
        results.append(
            StepResult(
                name="reload",
                status=StepStatus.CHANGED if reloaded else StepStatus.SKIPPED,
                message="Waybar reloaded" if reloaded else "Waybar is not running",
            )
        )
    return results
