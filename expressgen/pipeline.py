"""expressgen pipeline orchestrator.

Runs one generation, strictly in order:

1. compose the project in memory (options were validated before this point)
2. create the directory skeleton
3. initialise ``package.json`` with the detected package manager
4. write every generated file
5. amend ``package.json`` (entry point + scripts)
6. install dependencies
7. report

Any failure aborts the remaining steps.  Nothing is rolled back.

Usage::

    expressgen
    expressgen --projectName=demo --language=TypeScript --database=Mongoose \\
        --includeJest=true --includeSwagger=false
"""

from __future__ import annotations

import argparse
import asyncio
import sys
import time
from collections.abc import Awaitable
from dataclasses import dataclass
from pathlib import Path
from typing import Any, TypeVar

from pydantic import ValidationError as PydanticValidationError
from rich.tree import Tree

from expressgen.config import Config
from expressgen.errors import ExpressgenError, ValidationError
from expressgen.options import CLI_KEYS, Database, ProjectOptions, parse_cli_options, prompt_options
from expressgen.package_manager import (
    PackageManager,
    detect_package_manager,
    init_manifest,
    install_all,
)
from expressgen.scaffolder.generator import SRC_DIRECTORIES, ComposedProject, ProjectGenerator
from expressgen.utils import (
    console,
    create_progress,
    format_duration,
    print_error,
    print_success,
    print_warning,
)

T = TypeVar("T")


# ---------------------------------------------------------------------------
# Run context
# ---------------------------------------------------------------------------


@dataclass
class RunContext:
    """State threaded through a single generation run."""

    options: ProjectOptions
    config: Config
    started_at: float
    package_manager: PackageManager | None = None

    @property
    def project_root(self) -> Path:
        return self.config.output_dir / self.options.project_name

    def elapsed(self) -> float:
        return time.monotonic() - self.started_at


# ---------------------------------------------------------------------------
# Pipeline
# ---------------------------------------------------------------------------


class Pipeline:
    """Drives one project generation from validated options to installed deps."""

    def __init__(self, context: RunContext, generator: ProjectGenerator | None = None) -> None:
        self.context = context
        self.generator = generator or ProjectGenerator(context.options)

    async def run(self) -> Path:
        """Execute every step and return the generated project root.

        Raises:
            PackageManagerInitError: ``package.json`` could not be created.
            InstallError: The install subprocess failed.
            OSError: A directory or file could not be written.
        """
        ctx = self.context
        root = ctx.project_root
        project = self.generator.compose()

        await self._step(
            "Creating project structure...",
            "Project structure created.",
            self.generator.create_directories(root, project),
        )

        manager = ctx.config.package_manager or await detect_package_manager()
        ctx.package_manager = await self._step(
            "Initializing package.json...",
            "Package.json initialized.",
            init_manifest(root, manager),
        )

        await self._step(
            "Generating project files...",
            "Project files generated.",
            self._write_project(root, project),
        )
        if ctx.options.database is Database.PRISMA:
            console.print('   Tip: Run "npx prisma generate" after defining your models')

        if ctx.config.skip_install:
            print_warning("Skipping dependency installation.")
        else:
            await self._step(
                f"Installing dependencies with {ctx.package_manager.value}...",
                "Dependencies installed.",
                install_all(
                    root,
                    project.dependencies.dependencies,
                    project.dependencies.dev_dependencies,
                    ctx.package_manager,
                    timeout=ctx.config.install_timeout,
                ),
            )

        self._report(project)
        return root

    async def _write_project(self, root: Path, project: ComposedProject) -> None:
        await self.generator.write_files(root, project)
        await self.generator.update_manifest(root)

    async def _step(self, description: str, done: str, work: Awaitable[T]) -> T:
        """Await *work* behind a spinner and print *done* when it succeeds."""
        with create_progress() as progress:
            progress.add_task(description, total=None)
            result = await work
        print_success(f"+ {done}")
        return result

    # -- Reporting ---------------------------------------------------------

    def _report(self, project: ComposedProject) -> None:
        ctx = self.context
        name = ctx.options.project_name
        console.print()
        print_success(
            f'Project "{name}" created successfully in {format_duration(ctx.elapsed())}!'
        )
        console.print()
        console.print(build_layout_tree(name, project))
        console.print()

        manager = ctx.package_manager or PackageManager.NPM
        run_prefix = "npm run" if manager is PackageManager.NPM else manager.value
        console.print("[bold]Get started with:[/bold]")
        console.print(f"   cd {name}")
        console.print(f"   {run_prefix} dev")
        console.print()


def build_layout_tree(name: str, project: ComposedProject) -> Tree:
    """Rich tree of the generated layout: ``src/`` skeleton plus root files."""
    tree = Tree(f"[bold]{name}/[/bold]")
    src = tree.add("src/")
    for directory in SRC_DIRECTORIES:
        src.add(f"{directory}/")
    for path in sorted(p for p in project.files if "/" not in p):
        tree.add(path)
    tree.add("package.json")
    return tree


# ---------------------------------------------------------------------------
# CLI entry point
# ---------------------------------------------------------------------------


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="expressgen",
        description="Express.js project generator",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Run without arguments for interactive mode. All five option keys\n"
            "must be given to skip the prompts.\n\n"
            "Examples:\n"
            "  expressgen\n"
            "  expressgen --projectName=demo --language=TypeScript --database=Prisma "
            "--includeJest=true --includeSwagger=true\n"
        ),
    )
    parser.add_argument("--projectName", default=None, help="Project directory name")
    parser.add_argument("--language", default=None, help="TypeScript or JavaScript")
    parser.add_argument("--database", default=None, help="Mongoose, Sequelize, Prisma or None")
    parser.add_argument("--includeJest", default=None, help="true or false")
    parser.add_argument("--includeSwagger", default=None, help="true or false")
    parser.add_argument(
        "--output", "-o",
        default=None,
        help="Parent directory for the new project (default: current directory)",
    )
    parser.add_argument(
        "--skip-install",
        action="store_true",
        help="Write files and package.json without installing dependencies",
    )
    return parser


def normalize_argv(argv: list[str]) -> list[str]:
    """Accept bare ``key=value`` tokens as well as ``--key=value``."""
    normalized: list[str] = []
    for token in argv:
        key, sep, _ = token.partition("=")
        if sep and not token.startswith("-") and key in CLI_KEYS:
            token = f"--{token}"
        normalized.append(token)
    return normalized


def resolve_options(args: dict[str, Any], base_dir: Path) -> ProjectOptions:
    """Use the CLI values when complete, otherwise prompt for everything."""
    options = parse_cli_options(args, base_dir)
    if options is None:
        options = prompt_options(base_dir, console=console)
    return options


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for ``expressgen`` / ``python -m expressgen``."""
    parser = build_arg_parser()
    # Keys the generator does not know are ignored, not rejected.
    args, _ = parser.parse_known_args(normalize_argv(sys.argv[1:] if argv is None else argv))

    try:
        config = Config.from_env()
    except (PydanticValidationError, ValueError) as exc:
        print_error(f"Error: invalid configuration: {exc}")
        sys.exit(1)
    if args.output:
        config = config.model_copy(update={"output_dir": Path(args.output)})
    if args.skip_install:
        config = config.model_copy(update={"skip_install": True})

    console.print("[bold cyan]Express.js Project Generator[/bold cyan]\n")
    started_at = time.monotonic()

    try:
        options = resolve_options(vars(args), config.output_dir)
    except ValidationError as exc:
        print_error(f"Error: {exc}")
        sys.exit(1)
    except (KeyboardInterrupt, EOFError):
        print_error("Aborted.")
        sys.exit(1)

    context = RunContext(options=options, config=config, started_at=started_at)
    try:
        asyncio.run(Pipeline(context).run())
    except (ExpressgenError, OSError, ValueError) as exc:
        print_error(f"Error creating project: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    main()
