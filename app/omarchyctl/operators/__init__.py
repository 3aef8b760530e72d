"""Package operators for executing installation actions.

This module provides abstract and concrete implementations of package
operators for different package managers, plus detection of the native
manager on the current machine.
"""

from omarchyctl.operators.apt import AptOperator
from omarchyctl.operators.base import Operator
from omarchyctl.operators.dnf import DnfOperator
from omarchyctl.operators.pacman import PacmanOperator
from omarchyctl.operators.yay import YayOperator
from omarchyctl.operators.zypper import ZypperOperator


def get_native_operators() -> list[Operator]:
    """Get native package operators in detection order.

    Pacman comes first so Arch/Omarchy machines never fall through to a
    foreign manager that happens to be installed.
    """
    return [PacmanOperator(refresh=True), AptOperator(), DnfOperator(), ZypperOperator()]


def detect_native_operator() -> Operator | None:
    """Return the first available native package operator, or None."""
    for operator in get_native_operators():
        if operator.is_available():
            return operator
    return None


__all__ = [
    "AptOperator",
    "DnfOperator",
    "Operator",
    "PacmanOperator",
    "YayOperator",
    "ZypperOperator",
    "detect_native_operator",
    "get_native_operators",
]
