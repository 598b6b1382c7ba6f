"""Exception hierarchy for expressgen.

Validation errors are raised before anything touches the filesystem.  The
remaining errors come from the package-manager boundary and abort the run.
Filesystem failures are not wrapped: they propagate as ``OSError``.
"""

from __future__ import annotations


class ExpressgenError(Exception):
    """Base class for every error raised by expressgen."""


# ---------------------------------------------------------------------------
# Option validation
# ---------------------------------------------------------------------------


class ValidationError(ExpressgenError):
    """Raised when the user's choices cannot form a valid option set."""


class EmptyNameError(ValidationError):
    def __init__(self) -> None:
        super().__init__("Project name cannot be empty")


class InvalidNameError(ValidationError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(
            "Project name can only contain letters, numbers, hyphens, and underscores"
        )


class NameCollisionError(ValidationError):
    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f'Directory "{name}" already exists')


class InvalidLanguageError(ValidationError):
    def __init__(self, language: str) -> None:
        self.language = language
        super().__init__(
            f"Invalid language \"{language}\". Choose 'TypeScript' or 'JavaScript'."
        )


class InvalidDatabaseError(ValidationError):
    def __init__(self, database: str) -> None:
        self.database = database
        super().__init__(
            f"Invalid database \"{database}\". "
            "Choose 'Mongoose', 'Sequelize', 'Prisma' or 'None'."
        )


# ---------------------------------------------------------------------------
# Package manager boundary
# ---------------------------------------------------------------------------


class PackageManagerInitError(ExpressgenError):
    """Raised when ``package.json`` could not be created, even with npm."""


class InstallError(ExpressgenError):
    """Raised when the dependency install subprocess exits non-zero."""

    def __init__(self, manager: str, returncode: int, stderr: str = "") -> None:
        self.manager = manager
        self.returncode = returncode
        self.stderr = stderr
        message = f"{manager} install failed (exit code {returncode})"
        if stderr:
            message = f"{message}: {stderr}"
        super().__init__(message)
