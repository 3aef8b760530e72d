"""Zsh, Oh My Zsh and plugin setup.

Installs zsh with the native package manager, installs Oh My Zsh
non-interactively, clones the autosuggestions and syntax-highlighting
plugins, configures ``.zshrc`` and makes zsh the login shell.
"""

import logging
import os
import re
import shutil
from datetime import datetime
from pathlib import Path

from omarchyctl.core.errors import PreconditionError
from omarchyctl.core.settings import ZshSettings
from omarchyctl.models.step import StepResult, StepStatus
from omarchyctl.operators import detect_native_operator
from omarchyctl.operators.base import Operator
from omarchyctl.utils.shell import command_exists, run_command, run_interactive_checked, which
from omarchyctl.utils.textedit import (
    ensure_block,
    read_text,
    set_line,
    timestamped_backup,
    write_if_changed,
)

logger = logging.getLogger(__name__)

BASE_PACKAGES = ["zsh", "git", "curl"]

SYNTAX_HIGHLIGHTING_PLUGIN = "zsh-syntax-highlighting"

OH_MY_ZSH_SOURCE = 'export ZSH="$HOME/.oh-my-zsh"\nsource $ZSH/oh-my-zsh.sh'

_HIGHLIGHTING_SCRIPT = (
    "${ZSH_CUSTOM:-$HOME/.oh-my-zsh/custom}/plugins/zsh-syntax-highlighting/"
    "zsh-syntax-highlighting.zsh"
)

SYNTAX_HIGHLIGHTING_BLOCK = f"""\
# Ensure zsh-syntax-highlighting is sourced last
if [ -f "{_HIGHLIGHTING_SCRIPT}" ]; then
  source "{_HIGHLIGHTING_SCRIPT}"
fi
"""


def oh_my_zsh_dir() -> Path:
    """Oh My Zsh installation directory (``~/.oh-my-zsh``)."""
    return Path.home() / ".oh-my-zsh"


def zsh_custom_dir() -> Path:
    """``$ZSH_CUSTOM``, defaulting to ``~/.oh-my-zsh/custom``."""
    custom = os.environ.get("ZSH_CUSTOM")
    return Path(custom) if custom else oh_my_zsh_dir() / "custom"


def zshrc_path() -> Path:
    """The user's ``~/.zshrc``."""
    return Path.home() / ".zshrc"


def install_base_packages(operator: Operator | None = None) -> StepResult:
    """Install zsh, git and curl with the first detected package manager."""
    operator = operator or detect_native_operator()
    if operator is None:
        return StepResult(
            name="base-packages",
            status=StepStatus.SKIPPED,
            message="Could not detect a known package manager. "
            "Ensure zsh, git, and curl are installed.",
        )

    missing = [name for name in BASE_PACKAGES if not operator.is_installed(name)]
    if not missing:
        return StepResult.from_changed("base-packages", False, "zsh, git and curl present")

    logger.info("Installing %s with %s", ", ".join(missing), operator.executable)
    results = operator.install(BASE_PACKAGES)
    failed = [r for r in results if r.failed]
    if failed:
        return StepResult(name="base-packages", status=StepStatus.FAILED, error=failed[0].error)
    return StepResult.from_changed(
        "base-packages", True, f"Installed {', '.join(missing)} with {operator.executable}"
    )


def install_oh_my_zsh(settings: ZshSettings) -> StepResult:
    """Install Oh My Zsh without starting zsh, changing shell or touching .zshrc.

    Raises:
        PreconditionError: If curl is missing.
        CommandFailedError: If downloading or running the installer fails.
    """
    target = oh_my_zsh_dir()
    if target.is_dir():
        return StepResult.from_changed("oh-my-zsh", False, f"Already installed at {target}")

    if not command_exists("curl"):
        raise PreconditionError("curl is required to install Oh My Zsh")

    script = run_command(["curl", "-fsSL", settings.installer_url], check=True).stdout
    run_interactive_checked(
        ["sh", "-c", script],
        env={"RUNZSH": "no", "CHSH": "no", "KEEP_ZSHRC": "yes"},
    )
    return StepResult.from_changed("oh-my-zsh", True, "Installed Oh My Zsh")


def ensure_zshrc(now: datetime | None = None) -> StepResult:
    """Back up an existing .zshrc, or create one from the Oh My Zsh template.

    Raises:
        PreconditionError: If there is no .zshrc and no template to copy.
    """
    zshrc = zshrc_path()
    if zshrc.is_file():
        backup = timestamped_backup(zshrc, "pre-omz", now)
        return StepResult.from_changed("zshrc", True, f"Backed up existing .zshrc to {backup}")

    template = oh_my_zsh_dir() / "templates" / "zshrc.zsh-template"
    if not template.is_file():
        raise PreconditionError(f"Oh My Zsh template not found: {template}")
    shutil.copyfile(template, zshrc)
    return StepResult.from_changed("zshrc", True, "Created new .zshrc from template")


def install_plugins(settings: ZshSettings) -> StepResult:
    """Clone missing custom plugins into ``$ZSH_CUSTOM/plugins``.

    Raises:
        CommandFailedError: If a clone fails.
    """
    plugins_dir = zsh_custom_dir() / "plugins"
    plugins_dir.mkdir(parents=True, exist_ok=True)

    cloned: list[str] = []
    for name, url in settings.custom_plugins.items():
        target = plugins_dir / name
        if target.is_dir():
            logger.debug("%s already present", name)
            continue
        logger.info("Installing %s plugin", name)
        run_command(["git", "clone", url, str(target)], check=True, timeout=300.0)
        cloned.append(name)

    if cloned:
        return StepResult.from_changed("zsh-plugins", True, f"Cloned {', '.join(cloned)}")
    return StepResult.from_changed("zsh-plugins", False, "All plugins present")


def ordered_plugins(plugins: list[str]) -> list[str]:
    """Move zsh-syntax-highlighting to the end of the plugin list."""
    rest = [p for p in plugins if p != SYNTAX_HIGHLIGHTING_PLUGIN]
    if len(rest) != len(plugins):
        rest.append(SYNTAX_HIGHLIGHTING_PLUGIN)
    return rest


def render_zshrc(text: str, theme: str, plugins: list[str]) -> str:
    """Apply theme, plugins and sourcing rules to .zshrc content.

    Args:
        text: Current .zshrc content.
        theme: Oh My Zsh theme name.
        plugins: Plugins to enable.

    Returns:
        Updated content; identical input yields identical output.
    """
    text = set_line(text, r"ZSH_THEME=", f'ZSH_THEME="{theme}"')
    text = set_line(text, r"[ \t]*plugins=", f"plugins=({' '.join(ordered_plugins(plugins))})")
    if not re.search(r"source \$ZSH/oh-my-zsh\.sh", text):
        text = ensure_block(text, OH_MY_ZSH_SOURCE, OH_MY_ZSH_SOURCE)
    return ensure_block(text, "zsh-syntax-highlighting.zsh", SYNTAX_HIGHLIGHTING_BLOCK)


def configure_zshrc(settings: ZshSettings) -> StepResult:
    """Write theme and plugin configuration into .zshrc."""
    zshrc = zshrc_path()
    content = render_zshrc(read_text(zshrc), settings.theme, settings.plugins)
    changed = write_if_changed(zshrc, content)
    return StepResult.from_changed(
        "zshrc-config",
        changed,
        f"Theme {settings.theme}, plugins: {', '.join(ordered_plugins(settings.plugins))}",
    )


def make_default_shell(shells_file: Path = Path("/etc/shells")) -> StepResult:
    """Register zsh in /etc/shells and make it the user's login shell.

    Raises:
        CommandFailedError: If updating /etc/shells or chsh fails.
    """
    zsh_path = which("zsh")
    if zsh_path is None:
        return StepResult(
            name="default-shell",
            status=StepStatus.SKIPPED,
            message="zsh not found on PATH. Aborting default shell change.",
        )

    changed = False
    if zsh_path not in read_text(shells_file).splitlines():
        logger.info("Adding %s to %s (requires sudo)", zsh_path, shells_file)
        run_command(
            ["sudo", "tee", "-a", str(shells_file)],
            check=True,
            input_text=f"{zsh_path}\n",
        )
        changed = True

    if os.environ.get("SHELL") == zsh_path:
        return StepResult.from_changed("default-shell", changed, "zsh is already the default shell")

    logger.info("Changing default shell to zsh for user %s", os.environ.get("USER", "?"))
    run_interactive_checked(["chsh", "-s", zsh_path])
    return StepResult.from_changed(
        "default-shell",
        True,
        "Default shell changed. Log out and back in, or start zsh now with: zsh",
    )
