"""Package source model.

Identifies which package manager an operation is dispatched to.
"""

from enum import Enum


class PackageSource(Enum):
    """Enumeration of supported package managers.

    PACMAN and YAY are the native Arch/Omarchy tools; APT, DNF and ZYPPER
    are only used for bootstrapping shell prerequisites on other distros.
    """

    PACMAN = "pacman"
    YAY = "yay"
    APT = "apt"
    DNF = "dnf"
    ZYPPER = "zypper"
