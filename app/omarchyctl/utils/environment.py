"""systemd user environment helpers.

GUI applications started by the session manager read variables from
``~/.config/environment.d/*.conf``; the running user manager only sees
changes after ``systemctl --user import-environment``.
"""

from omarchyctl.core.paths import get_environment_d_dir
from omarchyctl.utils.shell import run_best_effort
from omarchyctl.utils.textedit import write_if_changed


def write_environment_file(name: str, assignments: list[str]) -> bool:
    """Write ``~/.config/environment.d/<name>`` with one assignment per line.

    Args:
        name: File name, e.g. ``"uv-path.conf"``.
        assignments: Lines such as ``"PATH=$HOME/.cargo/bin:$PATH"``.

    Returns:
        True if the file was created or changed.
    """
    content = "".join(f"{line}\n" for line in assignments)
    return write_if_changed(get_environment_d_dir() / name, content)


def import_user_environment(*names: str) -> bool:
    """Push variables into the systemd user manager (best-effort)."""
    return run_best_effort(["systemctl", "--user", "import-environment", *names])
