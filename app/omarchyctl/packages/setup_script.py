"""Git-tracked setup script maintenance.

``omarchyctl pkg add`` installs a package right away and records an
idempotent installer function for it in the setup script, so a fresh
machine can be rebuilt by running that script. The function is appended
inside ``# BEGIN AUTO`` / ``# END AUTO`` markers, then the change is
committed and pushed.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass
from pathlib import Path

from omarchyctl.core.errors import CommandFailedError, PreconditionError
from omarchyctl.core.settings import SetupRepoSettings
from omarchyctl.models.step import StepResult, StepStatus
from omarchyctl.operators.yay import YayOperator
from omarchyctl.packages.listfile import add_to_package_list
from omarchyctl.utils.shell import CommandResult, run_command, run_interactive
from omarchyctl.utils.textedit import read_text, write_text_atomic

logger = logging.getLogger(__name__)

# Exit code used by the runner snippet when the function is not defined
_MISSING_FUNCTION_EXIT = 3

INSTALLER_TEMPLATE = """\
{func}() {{
  # Local helpers mirror your script's style if present; otherwise fall back to echo
  info() {{ command -v info >/dev/null 2>&1 && info "$@" || printf "[INFO] %s\\n" "$*"; }}
  warn() {{ command -v warn >/dev/null 2>&1 && warn "$@" || printf "[WARN] %s\\n" "$*"; }}
  err()  {{ command -v err  >/dev/null 2>&1 && err  "$@" || printf "[ERR ] %s\\n" "$*" >&2; }}

  if ! command -v yay >/dev/null 2>&1; then
    err "yay is not installed. Please install yay first."
    return 1
  fi

  # Idempotent check: if already installed, skip; otherwise install.
  if yay -Qi "{package}" >/dev/null 2>&1; then
    info "'{package}' already installed — skipping."
  else
    info "Installing '{package}'..."
    yay -S --needed --noconfirm "{package}" || {{
      err "Failed to install '{package}'."
      return 1
    }}
  fi

  info "'{package}' installation verified."
}}
"""

COMMIT_BODY_TEMPLATE = """\
Adds idempotent installer function {func}:
- Uses yay -S --needed for safe re-runs
- Skips if package already installed (yay -Qi)
- Matches setup-omarchy function style

Also installs '{package}' immediately."""


def installer_function_name(package: str) -> str:
    """Derive the installer function name for a package.

    Every character that is not ASCII alphanumeric becomes ``_``.

    Example:
        >>> installer_function_name("visual-studio-code-bin")
        'install_visual_studio_code_bin'
    """
    return "install_" + re.sub(r"[^A-Za-z0-9]", "_", package)


def has_installer_function(text: str, func: str) -> bool:
    """Check whether a function definition ``func()`` exists in script text."""
    return re.search(rf"^\s*{re.escape(func)}\(\)", text, re.MULTILINE) is not None


def render_installer_block(package: str) -> str:
    """Render the marked block holding the installer function for a package."""
    func = installer_function_name(package)
    return (
        f"\n# BEGIN AUTO: {func}\n"
        f"# Idempotent installer for '{package}' (added by omarchyctl pkg add)\n"
        + INSTALLER_TEMPLATE.format(func=func, package=package)
        + f"# END AUTO: {func}\n"
    )


def extract_installer_block(text: str, func: str) -> str | None:
    """Return the ``BEGIN AUTO``/``END AUTO`` block for ``func``, if present."""
    pattern = re.compile(
        rf"^# BEGIN AUTO: {re.escape(func)}\n(.*?)^# END AUTO: {re.escape(func)}$",
        re.MULTILINE | re.DOTALL,
    )
    match = pattern.search(text)
    return match.group(1) if match else None


def commit_message(package: str) -> tuple[str, str]:
    """Build the commit subject and body for an added installer."""
    func = installer_function_name(package)
    subject = f"setup: add {func} for '{package}' via yay --needed"
    return subject, COMMIT_BODY_TEMPLATE.format(func=func, package=package)


@dataclass
class SetupRepo:
    """The git repository holding the setup script and package list.

    Attributes:
        path: Repository directory.
        script: Setup script inside the repository.
        package_list: Package list inside the repository.
        remote: Name of the remote changes are pushed to.
    """

    path: Path
    script: Path
    package_list: Path
    remote: str = "origin"

    @classmethod
    def from_settings(cls, settings: SetupRepoSettings) -> SetupRepo:
        """Build a SetupRepo from the ``[setup]`` settings section."""
        return cls(
            path=settings.repo_path,
            script=settings.setup_script_path,
            package_list=settings.package_list_path,
            remote=settings.remote,
        )

    def check(self) -> None:
        """Verify the repository and setup script exist.

        Raises:
            PreconditionError: If either is missing.
        """
        if not self.path.is_dir():
            raise PreconditionError(f"Repo not found: {self.path}")
        if not self.script.is_file():
            raise PreconditionError(f"Setup script not found: {self.script}")

    def _git(self, *args: str, check: bool = True) -> CommandResult:
        return run_command(["git", "-C", str(self.path), *args], check=check, timeout=120.0)

    def ensure_installer(self, package: str) -> bool:
        """Append the installer function for ``package`` unless present.

        Returns:
            True if the setup script was modified.
        """
        func = installer_function_name(package)
        text = read_text(self.script)
        if has_installer_function(text, func):
            logger.info("Function %s already exists in setup script", func)
            return False

        if text and not text.endswith("\n"):
            text += "\n"
        write_text_atomic(self.script, text + render_installer_block(package))
        logger.info("Appended installer function %s to %s", func, self.script)
        return True

    def run_installer(self, package: str) -> bool:
        """Run the installer function for ``package`` in bash.

        Only the managed block is evaluated; sourcing the whole script
        would also run its ``main``.

        Returns:
            True if the function ran, False if it is not defined.

        Raises:
            CommandFailedError: If the function fails.
        """
        func = installer_function_name(package)
        block = extract_installer_block(read_text(self.script), func)
        if block is None:
            return False

        snippet = (
            f"{block}\n"
            f'if declare -f "$1" >/dev/null 2>&1; then "$1"; '
            f"else exit {_MISSING_FUNCTION_EXIT}; fi"
        )
        args = ["bash", "-c", snippet, "omarchyctl", func]
        returncode = run_interactive(args, cwd=str(self.path))
        if returncode == _MISSING_FUNCTION_EXIT:
            return False
        if returncode != 0:
            raise CommandFailedError(["bash", "-c", func], returncode)
        return True

    def commit(self, package: str, paths: list[Path]) -> bool:
        """Stage ``paths`` and commit them with a descriptive message.

        Returns:
            True if a commit was created, False if nothing was staged.

        Raises:
            CommandFailedError: If a git command fails.
        """
        self._git("add", *[str(p) for p in paths])

        staged = run_command(
            ["git", "-C", str(self.path), "diff", "--cached", "--quiet"],
            timeout=60.0,
        )
        if staged.success:
            return False

        subject, body = commit_message(package)
        self._git("commit", "-m", subject, "-m", body)
        return True

    def has_remote(self) -> bool:
        """Check whether the configured remote exists."""
        result = run_command(["git", "-C", str(self.path), "remote"], timeout=30.0)
        return result.success and self.remote in result.stdout.split()

    def push(self) -> bool:
        """Push HEAD to the configured remote.

        Returns:
            True if pushed, False if the remote is not configured.

        Raises:
            CommandFailedError: If the push fails.
        """
        if not self.has_remote():
            return False
        run_command(
            ["git", "-C", str(self.path), "push", self.remote, "HEAD"],
            check=True,
            timeout=300.0,
        )
        return True


def add_package(
    package: str,
    repo: SetupRepo,
    *,
    run_after: bool = False,
    push: bool = True,
    add_to_list: bool = False,
    operator: YayOperator | None = None,
) -> list[StepResult]:
    """Install a package now and record it in the setup repository.

    Steps, stopping at the first error:

    1. install the package with ``yay -S --needed``;
    2. append the installer function to the setup script (skip if present);
    3. optionally run that function;
    4. optionally add the package to the package list;
    5. commit the change (skip if nothing changed);
    6. push to the remote if it is configured.

    Args:
        package: Package name.
        repo: Setup repository.
        run_after: Run the installer function after adding it.
        push: Push the commit.
        add_to_list: Also record the package in the package list.
        operator: Yay operator to use.

    Returns:
        Step results in execution order.

    Raises:
        PreconditionError: If yay, the repo or the setup script are missing.
        CommandFailedError: If installing, running, committing or pushing fails.
    """
    operator = operator or YayOperator()
    operator.require()
    repo.check()

    results: list[StepResult] = []

    install = operator.install([package])
    if any(r.failed for r in install):
        raise CommandFailedError(
            ["yay", "-S", "--needed", "--noconfirm", package],
            1,
            install[0].error or "",
        )
    results.append(
        StepResult(name="install", status=StepStatus.CHANGED, message=f"Installed '{package}'")
    )

    func = installer_function_name(package)
    appended = repo.ensure_installer(package)
    results.append(
        StepResult.from_changed(
            "installer-function",
            appended,
            f"Appended {func}" if appended else f"{func} already present",
        )
    )

    if run_after:
        ran = repo.run_installer(package)
        results.append(
            StepResult(
                name="run-installer",
                status=StepStatus.CHANGED if ran else StepStatus.SKIPPED,
                message=f"Ran {func}" if ran else f"{func} not found in setup script",
            )
        )

    staged = [repo.script]
    if add_to_list:
        listed = add_to_package_list(repo.package_list, package)
        staged.append(repo.package_list)
        results.append(
            StepResult.from_changed(
                "package-list",
                listed,
                f"Added to {repo.package_list.name}" if listed else "Already listed",
            )
        )

    committed = repo.commit(package, staged)
    results.append(
        StepResult(
            name="commit",
            status=StepStatus.CHANGED if committed else StepStatus.SKIPPED,
            message=(
                commit_message(package)[0]
                if committed
                else "No changes to commit (function likely already present)."
            ),
        )
    )

    if push:
        pushed = repo.push()
        results.append(
            StepResult(
                name="push",
                status=StepStatus.CHANGED if pushed else StepStatus.SKIPPED,
                message=(
                    f"Pushed to {repo.remote}"
                    if pushed
                    else f"No '{repo.remote}' remote configured. "
                    f"Tip: cd {repo.path} && git remote add {repo.remote} <your-repo-url>"
                ),
            )
        )

    return results
