"""Workstation bootstrap steps run by ``omarchyctl setup``.

Each step checks before it mutates, so the whole sequence can be re-run
safely on a machine that is already set up.
"""

from omarchyctl.core.settings import Settings
from omarchyctl.core.steps import Step
from omarchyctl.dotfiles.chromium import setup_chromium_workspace_fix
from omarchyctl.dotfiles.texlive import install_texlive
from omarchyctl.dotfiles.uv import install_uv
from omarchyctl.dotfiles.vscode import (
    install_vscode_extensions,
    install_vscode_with_vim,
    setup_vscode_settings,
)
from omarchyctl.dotfiles.zsh import (
    configure_zshrc,
    ensure_zshrc,
    install_base_packages,
    install_oh_my_zsh,
    install_plugins,
    make_default_shell,
)
from omarchyctl.packages.listfile import install_packages_from_list


def build_setup_steps(settings: Settings) -> list[Step]:
    """Build the ordered bootstrap steps from user settings."""
    return [
        Step("base-packages", "Install zsh, git and curl", install_base_packages),
        Step("oh-my-zsh", "Install Oh My Zsh unattended", lambda: install_oh_my_zsh(settings.zsh)),
        Step("zshrc", "Back up or create ~/.zshrc", ensure_zshrc),
        Step(
            "zsh-plugins",
            "Clone autosuggestions and syntax highlighting",
            lambda: install_plugins(settings.zsh),
        ),
        Step(
            "zshrc-config",
            f"Set theme {settings.zsh.theme} and plugins",
            lambda: configure_zshrc(settings.zsh),
        ),
        Step("default-shell", "Make zsh the login shell", make_default_shell),
        Step("chromium", "Install Chromium wrapper and flags", setup_chromium_workspace_fix),
        Step(
            "vscode",
            f"Install {settings.vscode.package} with Vim keybindings",
            lambda: install_vscode_with_vim(settings.vscode),
        ),
        Step(
            "vscode-extensions",
            "Install VS Code extensions",
            lambda: install_vscode_extensions(settings.vscode),
        ),
        Step(
            "vscode-settings",
            "Configure vim.handleKeys in settings.json",
            lambda: setup_vscode_settings(settings.vscode),
        ),
        Step("uv", "Install uv", install_uv),
        Step(
            "package-list",
            f"Install packages from {settings.setup.package_list}",
            lambda: install_packages_from_list(settings.setup.package_list_path),
        ),
        Step(
            "texlive",
            "Install TeX Live split packages",
            lambda: install_texlive(settings.texlive),
        ),
    ]


__all__ = ["build_setup_steps"]
