"""Node package manager boundary.

Detects which package manager to use, creates ``package.json`` and installs
the composed dependency lists.  Everything here shells out through
:func:`expressgen.utils.run_command`; the manifest fix-up after an npm install
is a pure function over the parsed ``package.json``.
"""

from __future__ import annotations

import os
import re
from collections.abc import Mapping, Sequence
from enum import Enum
from pathlib import Path
from typing import Any

from expressgen.errors import InstallError, PackageManagerInitError
from expressgen.utils import console, load_json, print_warning, run_command, save_json


class PackageManager(str, Enum):
    """Supported Node package managers."""
    NPM = "npm"
    YARN = "yarn"
    PNPM = "pnpm"


# Probed in this order when the user agent gives no hint; npm is the fallback.
PROBE_ORDER: tuple[PackageManager, ...] = (PackageManager.PNPM, PackageManager.YARN)

USER_AGENT_VAR = "npm_config_user_agent"


# ---------------------------------------------------------------------------
# Detection
# ---------------------------------------------------------------------------


def manager_from_user_agent(user_agent: str | None) -> PackageManager | None:
    """Map an ``npm_config_user_agent`` value (``pnpm/8.6.0 npm/? ...``) to a manager."""
    if not user_agent:
        return None
    for manager in (PackageManager.PNPM, PackageManager.YARN, PackageManager.NPM):
        if user_agent.startswith(manager.value):
            return manager
    return None


async def is_available(manager: PackageManager) -> bool:
    """Return ``True`` if ``<manager> --version`` runs successfully."""
    try:
        returncode, _, _ = await run_command([manager.value, "--version"])
    except OSError:
        return False
    return returncode == 0


async def detect_package_manager(env: Mapping[str, str] | None = None) -> PackageManager:
    """Pick the package manager for this run.

    The user agent set by ``npm exec`` / ``pnpm dlx`` / ``yarn dlx`` wins;
    otherwise pnpm and yarn are probed in turn and npm is the default.
    """
    env = os.environ if env is None else env
    hinted = manager_from_user_agent(env.get(USER_AGENT_VAR))
    if hinted is not None:
        return hinted

    for manager in PROBE_ORDER:
        if await is_available(manager):
            return manager
    return PackageManager.NPM


# ---------------------------------------------------------------------------
# package.json initialisation
# ---------------------------------------------------------------------------


def init_command(manager: PackageManager) -> list[str]:
    # pnpm init has no -y flag
    if manager is PackageManager.PNPM:
        return ["pnpm", "init"]
    return [manager.value, "init", "-y"]


async def _try_init(project_dir: Path, manager: PackageManager) -> bool:
    try:
        returncode, _, _ = await run_command(init_command(manager), cwd=project_dir)
    except OSError:
        return False
    return returncode == 0


async def init_manifest(project_dir: str | Path, manager: PackageManager) -> PackageManager:
    """Create ``package.json`` in *project_dir*.

    Falls back to ``npm init -y`` when the preferred manager fails.

    Returns:
        The manager that actually created the manifest.

    Raises:
        PackageManagerInitError: If npm fails too.
    """
    project_dir = Path(project_dir)
    if await _try_init(project_dir, manager):
        return manager

    if manager is not PackageManager.NPM:
        print_warning(f"[!] Failed to initialize with {manager.value}. Falling back to npm...")
        if await _try_init(project_dir, PackageManager.NPM):
            console.print("  [green]+[/green] Successfully initialized with npm.")
            return PackageManager.NPM

    raise PackageManagerInitError(f"Failed to initialize package.json in {project_dir}")


# ---------------------------------------------------------------------------
# Installation
# ---------------------------------------------------------------------------


def build_install_command(
    manager: PackageManager,
    dependencies: Sequence[str],
    dev_dependencies: Sequence[str],
) -> list[str]:
    """Build the batch-install command line for *manager*.

    npm installs everything in one pass without ``--save-dev``; the dev
    packages are moved afterwards by :func:`reclassify_dev_dependencies`.
    """
    if manager is PackageManager.YARN:
        cmd = ["yarn", "add", "--silent", *dependencies]
        if dev_dependencies:
            cmd += ["--dev", *dev_dependencies]
        return cmd
    if manager is PackageManager.PNPM:
        cmd = ["pnpm", "add", "--reporter", "silent", *dependencies]
        if dev_dependencies:
            cmd += ["-D", *dev_dependencies]
        return cmd
    return ["npm", "install", "--silent", "--no-audit", "--no-fund", *dependencies, *dev_dependencies]


async def install_all(
    project_dir: str | Path,
    dependencies: Sequence[str],
    dev_dependencies: Sequence[str],
    manager: PackageManager,
    timeout: int | None = None,
) -> None:
    """Install every dependency with one package-manager invocation.

    Raises:
        InstallError: If the install exits non-zero.
    """
    project_dir = Path(project_dir)
    cmd = build_install_command(manager, dependencies, dev_dependencies)
    try:
        returncode, _, stderr = await run_command(cmd, cwd=project_dir, timeout=timeout)
    except OSError as exc:
        raise InstallError(manager.value, -1, str(exc)) from exc
    if returncode != 0:
        raise InstallError(manager.value, returncode, stderr)

    if manager is PackageManager.NPM and dev_dependencies:
        manifest_path = project_dir / "package.json"
        manifest = load_json(manifest_path)
        await save_json(reclassify_dev_dependencies(manifest, dev_dependencies), manifest_path)


# ---------------------------------------------------------------------------
# Manifest section fix-up
# ---------------------------------------------------------------------------

# First matching rule wins; a spec no rule matches is left alone.
_PACKAGE_NAME_RULES: tuple[tuple[str, re.Pattern[str]], ...] = (
    # @scope/name, @scope/name@1.2.3
    ("scoped", re.compile(r"^(?P<name>@[^/@\s]+/[^/@\s]+)(?:@\S*)?$")),
    # name, name@^4, name@latest
    ("unscoped", re.compile(r"^(?P<name>[^@/\s][^@\s]*)(?:@\S*)?$")),
)


def package_name(spec: str) -> str | None:
    """Strip the version suffix from a package spec.

    ``@types/node@^20`` -> ``@types/node``, ``jest@29`` -> ``jest``.
    Returns ``None`` for specs that match no rule.
    """
    for _, pattern in _PACKAGE_NAME_RULES:
        match = pattern.match(spec.strip())
        if match:
            return match.group("name")
    return None


def reclassify_dev_dependencies(
    manifest: dict[str, Any], dev_dependencies: Sequence[str]
) -> dict[str, Any]:
    """Move requested dev packages out of ``dependencies``.

    Returns a new manifest dict.  Names that are not present under
    ``dependencies`` (or that cannot be parsed) are ignored.
    """
    updated = dict(manifest)
    runtime = dict(updated.get("dependencies") or {})
    dev = dict(updated.get("devDependencies") or {})

    for spec in dev_dependencies:
        name = package_name(spec)
        if name and name in runtime:
            dev[name] = runtime.pop(name)

    updated["dependencies"] = runtime
    updated["devDependencies"] = dev
    return updated
