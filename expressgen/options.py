"""User choices that drive project generation.

A ``ProjectOptions`` instance is built exactly once per run, either from
command-line ``key=value`` pairs or from an interactive prompt sequence, and
is never mutated afterwards.  Both acquisition modes funnel through
:func:`build_options` so the same logical answers always yield an identical
model.
"""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field
from rich.console import Console
from rich.prompt import Confirm, Prompt

from expressgen.errors import (
    EmptyNameError,
    InvalidDatabaseError,
    InvalidLanguageError,
    InvalidNameError,
    NameCollisionError,
    ValidationError,
)


DEFAULT_PROJECT_NAME = "my-express-app"

_NAME_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

# CLI keys, in the order they are documented.
CLI_KEYS: tuple[str, ...] = (
    "projectName",
    "language",
    "database",
    "includeJest",
    "includeSwagger",
)


class Language(str, Enum):
    """Source language of the generated service."""
    TYPESCRIPT = "TypeScript"
    JAVASCRIPT = "JavaScript"


class Database(str, Enum):
    """Database integration wired into the generated service."""
    MONGOOSE = "Mongoose"
    SEQUELIZE = "Sequelize"
    PRISMA = "Prisma"
    NONE = "None"


class ProjectOptions(BaseModel):
    """Validated, immutable set of generation choices."""

    model_config = ConfigDict(frozen=True)

    project_name: str = Field(..., description="Directory and package name")
    language: Language = Field(..., description="TypeScript or JavaScript")
    database: Database = Field(default=Database.NONE)
    include_testing: bool = Field(default=True, description="Add Jest + Supertest")
    include_api_docs: bool = Field(default=True, description="Add Swagger docs")

    @property
    def is_typescript(self) -> bool:
        return self.language is Language.TYPESCRIPT

    @property
    def extension(self) -> str:
        """Source file extension: ``ts`` or ``js``."""
        return "ts" if self.is_typescript else "js"

    @property
    def has_database(self) -> bool:
        return self.database is not Database.NONE


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------


def validate_project_name(name: str | None, base_dir: str | Path = ".") -> None:
    """Check a project name, raising the first rule it breaks.

    Rules, in order: non-empty, allowed characters only, and no existing
    filesystem entry at ``base_dir / name``.
    """
    if not name or not name.strip():
        raise EmptyNameError()
    if not _NAME_PATTERN.match(name):
        raise InvalidNameError(name)
    if (Path(base_dir) / name).exists():
        raise NameCollisionError(name)


def build_options(
    project_name: str | None,
    language: str | Language | None,
    database: str | Database | None,
    include_testing: bool | str,
    include_api_docs: bool | str,
    base_dir: str | Path = ".",
) -> ProjectOptions:
    """Validate raw answers and build a :class:`ProjectOptions`.

    Raises:
        ValidationError: One of its subclasses, for the first failing rule.
    """
    validate_project_name(project_name, base_dir)

    try:
        lang = Language(language)
    except ValueError:
        raise InvalidLanguageError(str(language)) from None

    try:
        db = Database(database if database is not None else Database.NONE)
    except ValueError:
        raise InvalidDatabaseError(str(database)) from None

    return ProjectOptions(
        project_name=project_name,
        language=lang,
        database=db,
        include_testing=_as_bool(include_testing),
        include_api_docs=_as_bool(include_api_docs),
    )


def _as_bool(value: bool | str) -> bool:
    """Interpret a CLI flag: only the string ``true`` counts as true."""
    if isinstance(value, bool):
        return value
    return str(value).strip().lower() == "true"


# ---------------------------------------------------------------------------
# Acquisition modes
# ---------------------------------------------------------------------------


def has_all_cli_options(args: dict[str, Any]) -> bool:
    """Return ``True`` when every CLI key was supplied."""
    return all(args.get(key) is not None for key in CLI_KEYS)


def parse_cli_options(
    args: dict[str, Any], base_dir: str | Path = "."
) -> ProjectOptions | None:
    """Non-interactive mode.

    Returns ``None`` unless all five keys are present.  A partial set is not
    merged with prompts; the caller falls back to :func:`prompt_options` for
    the whole option set.
    """
    if not has_all_cli_options(args):
        return None
    return build_options(
        project_name=args["projectName"],
        language=args["language"],
        database=args["database"],
        include_testing=args["includeJest"],
        include_api_docs=args["includeSwagger"],
        base_dir=base_dir,
    )


def prompt_options(
    base_dir: str | Path = ".", console: Console | None = None
) -> ProjectOptions:
    """Interactive mode: ask for every option in sequence."""
    console = console or Console()

    while True:
        name = Prompt.ask(
            "What is the name of your project?",
            default=DEFAULT_PROJECT_NAME,
            console=console,
        )
        try:
            validate_project_name(name, base_dir)
            break
        except ValidationError as exc:
            console.print(f"[bold red]{exc}[/bold red]")

    language = Prompt.ask(
        "Choose a language",
        choices=[lang.value for lang in Language],
        default=Language.TYPESCRIPT.value,
        console=console,
    )
    database = Prompt.ask(
        "Choose a database",
        choices=[db.value for db in Database],
        default=Database.MONGOOSE.value,
        console=console,
    )
    include_jest = Confirm.ask("Include Jest for testing?", default=True, console=console)
    include_swagger = Confirm.ask(
        "Include Swagger for API documentation?", default=True, console=console
    )

    return build_options(
        project_name=name,
        language=language,
        database=database,
        include_testing=include_jest,
        include_api_docs=include_swagger,
        base_dir=base_dir,
    )
