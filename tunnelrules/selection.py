"""
Per-app tunnel selection on top of the rule engine.

Users pick apps to include in or exclude from the tunnel. Apps that match a
rule are managed by policy, so they are filtered out of what the user
controls.
"""

from __future__ import annotations

from enum import Enum
from typing import Callable, Collection, Iterable

from .resolver import PackageVersionResolver
from .rules.manager import RuleSetManager

AppTunneledChecker = Callable[[str], bool]


class TunnelMode(str, Enum):
    ALL_APPS = "all_apps"
    INCLUDE_APPS = "include_apps"
    EXCLUDE_APPS = "exclude_apps"


def app_tunneled_checker(mode: TunnelMode, apps: Collection[str] | None) -> AppTunneledChecker:
    """
    Build a predicate telling whether an app's traffic goes through the tunnel.

    Args:
        mode: Tunnel mode in effect
        apps: The include list (INCLUDE_APPS) or exclude list (EXCLUDE_APPS)
    """
    selected = frozenset(apps) if apps is not None else None

    def is_tunneled(package_id: str) -> bool:
        if mode is TunnelMode.EXCLUDE_APPS:
            return selected is None or package_id not in selected
        if mode is TunnelMode.INCLUDE_APPS:
            return selected is not None and package_id in selected
        return True

    return is_tunneled


def user_controllable_apps(
    selected: Iterable[str],
    manager: RuleSetManager,
    resolver: PackageVersionResolver,
    *,
    self_package: str | None = None,
) -> set[str]:
    """
    Filter a user selection down to the apps the user actually controls.

    Drops packages that are not installed and packages whose installed
    version matches any exclude or include rule. `self_package` is never
    returned.
    """
    controllable: set[str] = set()
    for package_id in selected:
        if package_id == self_package:
            continue
        version_code = resolver.resolve(package_id)
        if version_code is None:
            continue
        if manager.matches_any(package_id, version_code):
            continue
        controllable.add(package_id)
    return controllable
