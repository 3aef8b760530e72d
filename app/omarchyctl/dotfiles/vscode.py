"""Visual Studio Code install, extensions and Vim key handling."""

import json
import logging
from pathlib import Path

from omarchyctl.core.errors import PreconditionError
from omarchyctl.core.paths import get_user_config_home
from omarchyctl.core.settings import VSCodeSettings
from omarchyctl.models.step import StepResult, StepStatus
from omarchyctl.operators.yay import YayOperator
from omarchyctl.utils.shell import command_exists, run_command, which
from omarchyctl.utils.textedit import read_text, write_if_changed

logger = logging.getLogger(__name__)

# Binary names in order of preference
CODE_BINARIES = ["code", "visual-studio-code", "codium", "vscodium"]


def find_code_binary() -> str | None:
    """Return the first VS Code CLI found on PATH."""
    for name in CODE_BINARIES:
        path = which(name)
        if path is not None:
            return path
    return None


def list_extensions(code_bin: str) -> set[str]:
    """Installed extension IDs, lower-cased; empty if the CLI fails."""
    result = run_command([code_bin, "--list-extensions"], timeout=60.0)
    if not result.success:
        logger.debug("Could not list extensions: %s", result.stderr.strip())
        return set()
    return {line.strip().lower() for line in result.stdout.splitlines() if line.strip()}


def install_vscode_with_vim(settings: VSCodeSettings, yay: YayOperator | None = None) -> StepResult:
    """Install VS Code from the AUR and add the Vim keybindings extension.

    Bootstraps yay-bin first when yay is missing.

    Raises:
        PreconditionError: If yay cannot be bootstrapped.
        CommandFailedError: If building yay fails.
    """
    if not command_exists("pacman"):
        return StepResult(
            name="vscode",
            status=StepStatus.SKIPPED,
            message="Not an Arch/Omarchy system. Skipping VS Code install.",
        )

    yay = yay or YayOperator()
    changed = yay.bootstrap()

    if not yay.is_installed(settings.package):
        results = yay.install([settings.package])
        if any(r.failed for r in results):
            return StepResult(
                name="vscode",
                status=StepStatus.FAILED,
                error=f"Failed to install {settings.package}.",
            )
        changed = True

    code_bin = which("code")
    if code_bin is None:
        logger.warning("'code' CLI not found on PATH after install. You may need to re-login.")
    elif settings.vim_extension.lower() not in list_extensions(code_bin):
        logger.info("Installing Vim keybindings extension for VS Code")
        result = run_command(
            [code_bin, "--install-extension", settings.vim_extension, "--force"],
            timeout=300.0,
        )
        if result.success:
            changed = True
        else:
            logger.warning("Could not install %s extension.", settings.vim_extension)

    return StepResult.from_changed(
        "vscode", changed, f"{settings.package} with {settings.vim_extension}"
    )


def install_vscode_extensions(settings: VSCodeSettings) -> StepResult:
    """Install configured extensions that are not present yet.

    Raises:
        PreconditionError: If no VS Code CLI is on PATH.
        CommandFailedError: If an extension fails to install.
    """
    code_bin = find_code_binary()
    if code_bin is None:
        raise PreconditionError("VS Code not found. Please install VS Code first.")

    installed = list_extensions(code_bin)
    added: list[str] = []
    for extension in settings.extensions:
        if extension.lower() in installed:
            continue
        logger.info("Installing VS Code extension %s", extension)
        run_command(
            [code_bin, "--install-extension", extension, "--force"],
            check=True,
            timeout=300.0,
        )
        added.append(extension)

    if added:
        return StepResult.from_changed("vscode-extensions", True, f"Installed {', '.join(added)}")
    return StepResult.from_changed("vscode-extensions", False, "All extensions present")


def settings_path() -> Path:
    """VS Code user ``settings.json``."""
    return get_user_config_home() / "Code" / "User" / "settings.json"


def merge_vim_settings(text: str, handle_keys: dict[str, bool], dispatch: str) -> str | None:
    """Merge Vim key handling into ``settings.json`` content.

    Args:
        text: Current file content; empty when the file does not exist.
        handle_keys: Value for ``vim.handleKeys``.
        dispatch: Value for ``keyboard.dispatch``.

    Returns:
        New content, or None when ``vim.handleKeys`` is already configured.

    Raises:
        PreconditionError: If the existing file is not plain JSON.
    """
    if not text.strip():
        data: dict[str, object] = {}
    else:
        if '"vim.handleKeys"' in text:
            return None
        try:
            data = json.loads(text)
        except json.JSONDecodeError as e:
            msg = f"settings.json is not plain JSON ({e}); add vim.handleKeys manually"
            raise PreconditionError(msg) from e
        if not isinstance(data, dict):
            raise PreconditionError("settings.json must contain a JSON object")

    data["vim.handleKeys"] = handle_keys
    data["keyboard.dispatch"] = dispatch
    return json.dumps(data, indent=2) + "\n"


def setup_vscode_settings(settings: VSCodeSettings) -> StepResult:
    """Let VS Code keep its Ctrl shortcuts while VSCodeVim is active."""
    path = settings_path()
    merged = merge_vim_settings(
        read_text(path), settings.vim_handle_keys, settings.keyboard_dispatch
    )
    if merged is None:
        return StepResult.from_changed(
            "vscode-settings", False, "vim.handleKeys already present, leaving settings unchanged"
        )
    write_if_changed(path, merged)
    return StepResult.from_changed("vscode-settings", True, f"Updated {path}")
