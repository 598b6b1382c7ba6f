"""Shared pytest fixtures for the expressgen test suite.

Provides reusable fixtures for:
- Option models for the common language/database combinations
- A scripted stand-in for ``run_command`` that records every subprocess
  call and simulates ``<manager> init`` / ``<manager> install``
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Callable

import pytest

from expressgen.options import Database, Language, ProjectOptions


# ---------------------------------------------------------------------------
# Option models
# ---------------------------------------------------------------------------


@pytest.fixture
def make_options() -> Callable[..., ProjectOptions]:
    """Factory for ``ProjectOptions`` that skips filesystem validation."""

    def _make(
        name: str = "demo",
        language: Language = Language.TYPESCRIPT,
        database: Database = Database.NONE,
        testing: bool = False,
        docs: bool = False,
    ) -> ProjectOptions:
        return ProjectOptions(
            project_name=name,
            language=language,
            database=database,
            include_testing=testing,
            include_api_docs=docs,
        )

    return _make


@pytest.fixture
def demo_options(make_options) -> ProjectOptions:
    """TypeScript + Mongoose + Jest, no Swagger."""
    return make_options(
        language=Language.TYPESCRIPT,
        database=Database.MONGOOSE,
        testing=True,
        docs=False,
    )


@pytest.fixture
def full_js_options(make_options) -> ProjectOptions:
    """JavaScript + Sequelize + Jest + Swagger."""
    return make_options(
        language=Language.JAVASCRIPT,
        database=Database.SEQUELIZE,
        testing=True,
        docs=True,
    )


# ---------------------------------------------------------------------------
# Subprocess stand-in
# ---------------------------------------------------------------------------


class FakeRunner:
    """Async replacement for ``expressgen.utils.run_command``.

    ``results`` maps a program name, or ``"program subcommand"``, to a
    ``(returncode, stdout, stderr)`` tuple; anything unmapped succeeds.
    Missing programs listed in ``missing`` raise ``FileNotFoundError``.
    A successful ``init`` writes a minimal ``package.json`` into ``cwd``;
    a successful npm ``install`` records every package under
    ``dependencies`` the way ``npm install <pkgs>`` does.
    """

    def __init__(self) -> None:
        self.calls: list[dict[str, Any]] = []
        self.results: dict[str, tuple[int, str, str]] = {}
        self.missing: set[str] = set()

    def _lookup(self, cmd: list[str]) -> tuple[int, str, str]:
        if len(cmd) > 1 and f"{cmd[0]} {cmd[1]}" in self.results:
            return self.results[f"{cmd[0]} {cmd[1]}"]
        return self.results.get(cmd[0], (0, "", ""))

    async def __call__(
        self,
        cmd: list[str],
        cwd: str | Path | None = None,
        timeout: int | None = None,
        env: dict[str, str] | None = None,
    ) -> tuple[int, str, str]:
        self.calls.append({"cmd": list(cmd), "cwd": cwd, "timeout": timeout})
        if cmd[0] in self.missing:
            raise FileNotFoundError(cmd[0])

        result = self._lookup(cmd)
        if result[0] == 0 and cwd is not None:
            manifest = Path(cwd) / "package.json"
            if cmd[1:2] == ["init"]:
                manifest.write_text(
                    json.dumps({"name": Path(cwd).name, "version": "1.0.0",
                                "scripts": {"test": "echo \"Error: no test specified\" && exit 1"}}),
                    encoding="utf-8",
                )
            elif cmd[:2] == ["npm", "install"] and manifest.exists():
                data = json.loads(manifest.read_text(encoding="utf-8"))
                deps = data.setdefault("dependencies", {})
                for spec in cmd[2:]:
                    if not spec.startswith("--"):
                        deps[spec] = "^1.0.0"
                manifest.write_text(json.dumps(data), encoding="utf-8")
        return result

    def commands(self) -> list[list[str]]:
        return [c["cmd"] for c in self.calls]


@pytest.fixture
def fake_runner() -> FakeRunner:
    return FakeRunner()
