"""Dependency catalog.

Static lookup tables mapping option combinations to npm package lists.
Each lookup returns a :class:`DependencySet`; :func:`collect_dependencies`
merges them in a fixed order (language, database, testing, documentation)
into the manifest handed to the package manager.
"""

from __future__ import annotations

from collections.abc import Iterable

from pydantic import BaseModel, Field

from expressgen.options import Database, Language, ProjectOptions


class DependencySet(BaseModel):
    """Runtime and development packages contributed by one concern."""

    dependencies: list[str] = Field(default_factory=list)
    dev_dependencies: list[str] = Field(default_factory=list)


class DependencyManifest(BaseModel):
    """Merged, de-duplicated dependency lists for a whole project."""

    dependencies: list[str] = Field(default_factory=list)
    dev_dependencies: list[str] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Catalog tables
# ---------------------------------------------------------------------------

_RUNTIME_BASE = ["express", "dotenv"]

_LANGUAGE_DEV_BASE = [
    "nodemon",
    "eslint",
    "eslint-config-prettier",
    "eslint-plugin-prettier",
    "prettier",
]

# TypeScript keeps the JavaScript toolchain and layers the compiler on top.
_TYPESCRIPT_DEV = [
    "typescript",
    "ts-node",
    "ts-node-dev",
    "@types/express",
    "@types/node",
    "@typescript-eslint/eslint-plugin",
    "@typescript-eslint/parser",
]

# database -> (runtime, dev, typescript-only dev)
_DATABASE: dict[Database, tuple[list[str], list[str], list[str]]] = {
    Database.NONE: ([], [], []),
    Database.MONGOOSE: (["mongoose"], [], []),
    Database.SEQUELIZE: (["sequelize", "pg", "pg-hstore"], [], ["@types/sequelize"]),
    Database.PRISMA: (["@prisma/client"], ["prisma"], []),
}

_TESTING_DEV = ["jest", "supertest"]
_TESTING_TS_DEV = ["@types/jest", "@types/supertest", "ts-jest"]

_API_DOC_RUNTIME = ["swagger-jsdoc", "swagger-ui-express"]
_API_DOC_TS_DEV = ["@types/swagger-jsdoc", "@types/swagger-ui-express"]


# ---------------------------------------------------------------------------
# Lookups
# ---------------------------------------------------------------------------


def language_deps(language: Language) -> DependencySet:
    dev = list(_LANGUAGE_DEV_BASE)
    if language is Language.TYPESCRIPT:
        dev += _TYPESCRIPT_DEV
    return DependencySet(dependencies=list(_RUNTIME_BASE), dev_dependencies=dev)


def database_deps(language: Language, database: Database) -> DependencySet:
    runtime, dev, ts_dev = _DATABASE[database]
    if language is Language.TYPESCRIPT:
        dev = dev + ts_dev
    return DependencySet(dependencies=list(runtime), dev_dependencies=list(dev))


def testing_deps(language: Language) -> DependencySet:
    dev = list(_TESTING_DEV)
    if language is Language.TYPESCRIPT:
        dev += _TESTING_TS_DEV
    return DependencySet(dev_dependencies=dev)


def api_doc_deps(language: Language) -> DependencySet:
    dev = list(_API_DOC_TS_DEV) if language is Language.TYPESCRIPT else []
    return DependencySet(dependencies=list(_API_DOC_RUNTIME), dev_dependencies=dev)


def collect_dependencies(options: ProjectOptions) -> DependencyManifest:
    """Merge every applicable lookup for *options* into one manifest."""
    sets = [
        language_deps(options.language),
        database_deps(options.language, options.database),
    ]
    if options.include_testing:
        sets.append(testing_deps(options.language))
    if options.include_api_docs:
        sets.append(api_doc_deps(options.language))

    return DependencyManifest(
        dependencies=_unique(pkg for s in sets for pkg in s.dependencies),
        dev_dependencies=_unique(pkg for s in sets for pkg in s.dev_dependencies),
    )


def _unique(items: Iterable[str]) -> list[str]:
    """De-duplicate while keeping first-seen order."""
    return list(dict.fromkeys(items))
