"""Project composition and scaffolding.

``ProjectGenerator.compose`` is the pure core: it turns a ``ProjectOptions``
into the in-memory file set, the merged dependency manifest, and the fixed
directory skeleton.  The async helpers below it are the only places that
touch the filesystem, and the pipeline calls them in order.
"""

from __future__ import annotations

import asyncio
from pathlib import Path, PurePosixPath
from typing import Any

from pydantic import BaseModel, Field, field_validator

from expressgen.options import Database, ProjectOptions
from expressgen.scaffolder.artifacts import ArtifactBuilder
from expressgen.scaffolder.catalog import DependencyManifest, collect_dependencies
from expressgen.utils import load_json, save_json, write_text_file


SRC_DIRECTORIES: tuple[str, ...] = (
    "routes",
    "middlewares",
    "controllers",
    "services",
    "utils",
    "config",
    "interfaces",
    "models",
    "errors",
    "email",
)

MANIFEST_FILE = "package.json"


# ---------------------------------------------------------------------------
# Composition result
# ---------------------------------------------------------------------------


class ComposedProject(BaseModel):
    """Everything needed to materialise one project, built before any write."""

    files: dict[str, str] = Field(
        default_factory=dict,
        description="Relative POSIX path -> file content, in write order",
    )
    dependencies: DependencyManifest = Field(default_factory=DependencyManifest)
    directories: list[str] = Field(default_factory=list)

    @field_validator("files")
    @classmethod
    def _paths_stay_inside_project(cls, files: dict[str, str]) -> dict[str, str]:
        for path in files:
            pure = PurePosixPath(path)
            if not path or pure.is_absolute() or ".." in pure.parts:
                raise ValueError(f"Generated path must be relative to the project root: {path!r}")
        return files


# ---------------------------------------------------------------------------
# Manifest amendment
# ---------------------------------------------------------------------------


def build_scripts(options: ProjectOptions) -> dict[str, str]:
    """Script table for the generated ``package.json``."""
    scripts: dict[str, str] = {}
    if options.is_typescript:
        scripts["dev"] = "ts-node-dev --respawn --transpile-only src/index.ts"
        scripts["build"] = "tsc"
        scripts["start"] = "node dist/index.js"
    else:
        scripts["dev"] = "nodemon src/index.js"
        scripts["start"] = "node src/index.js"

    if options.include_testing:
        scripts["test"] = "jest --passWithNoTests"

    if options.include_api_docs:
        if options.is_typescript:
            scripts["swagger"] = "ts-node src/swagger.ts"
        else:
            scripts["swagger"] = "node src/swagger.js"
    return scripts


def amend_manifest(manifest: dict[str, Any], options: ProjectOptions) -> dict[str, Any]:
    """Point ``main`` at the entry point and replace the script table.

    Returns a new dict; every other key of *manifest* is kept as-is.
    """
    updated = dict(manifest)
    updated["main"] = f"src/index.{options.extension}"
    updated["scripts"] = build_scripts(options)
    return updated


# ---------------------------------------------------------------------------
# Generator
# ---------------------------------------------------------------------------


class ProjectGenerator:
    """Composes and writes an Express.js project skeleton."""

    def __init__(self, options: ProjectOptions, builder: ArtifactBuilder | None = None) -> None:
        self.options = options
        self.builder = builder or ArtifactBuilder()

    # -- Pure composition --------------------------------------------------

    def compose(self) -> ComposedProject:
        """Build the file set, dependency manifest and directory list.

        Deterministic: the same options always yield an identical result.
        Conditional artifacts are left out entirely when disabled.
        """
        return ComposedProject(
            files=self._compose_files(),
            dependencies=collect_dependencies(self.options),
            directories=[f"src/{name}" for name in SRC_DIRECTORIES],
        )

    def _compose_files(self) -> dict[str, str]:
        opts = self.options
        ext = opts.extension
        b = self.builder

        files: dict[str, str] = {
            ".gitignore": b.gitignore(),
            ".env": b.env_file(opts),
            ".prettierrc.json": b.prettier_config(),
            ".eslintrc.json": b.eslint_config(opts),
            f"src/index.{ext}": b.entry_point(opts),
        }

        if opts.is_typescript:
            files["tsconfig.json"] = b.tsconfig()

        connector = b.db_connector(opts)
        if connector is not None:
            files[f"src/config/db.{ext}"] = connector
        if opts.database is Database.PRISMA:
            files["prisma/schema.prisma"] = b.prisma_schema()

        if opts.include_testing:
            files["jest.config.js"] = b.jest_config(opts)

        if opts.include_api_docs:
            files[f"src/swagger.{ext}"] = b.swagger_bootstrap(opts)

        return files

    # -- Filesystem side effects -------------------------------------------

    async def create_directories(self, root: Path, project: ComposedProject) -> None:
        """Create the project root and the fixed ``src/`` skeleton."""
        await asyncio.to_thread(root.mkdir, parents=True, exist_ok=True)

        async def _mkdir(d: str) -> None:
            await asyncio.to_thread((root / d).mkdir, parents=True, exist_ok=True)

        await asyncio.gather(*[_mkdir(d) for d in project.directories])

    async def write_files(self, root: Path, project: ComposedProject) -> list[Path]:
        """Write every composed file under *root*; returns the written paths."""
        written: list[Path] = []
        for rel_path, content in project.files.items():
            out = root / rel_path
            await asyncio.to_thread(write_text_file, out, content)
            written.append(out)
        return written

    async def update_manifest(self, root: Path) -> dict[str, Any]:
        """Rewrite the initialised ``package.json`` with entry point and scripts."""
        manifest_path = root / MANIFEST_FILE
        manifest = amend_manifest(load_json(manifest_path), self.options)
        await save_json(manifest, manifest_path)
        return manifest
