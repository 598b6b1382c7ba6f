"""Per-artifact content builders.

Each public method of :class:`ArtifactBuilder` produces the full text of one
generated file as a function of :class:`ProjectOptions`.  Source files are
rendered from Jinja2 templates; JSON config files are built as dicts and
serialised with the same 2-space layout npm uses.  None of these methods can
fail for a valid option set.
"""

from __future__ import annotations

from typing import Any

from expressgen.options import Database, ProjectOptions
from expressgen.scaffolder.templates import TemplateRenderer
from expressgen.utils import dump_json


DEFAULT_PORT = 8080

_DB_TEMPLATES: dict[Database, str] = {
    Database.MONGOOSE: "db/mongoose.j2",
    Database.SEQUELIZE: "db/sequelize.j2",
    Database.PRISMA: "db/prisma.j2",
}


class ArtifactBuilder:
    """Builds the content of every file the generator can emit."""

    def __init__(self, renderer: TemplateRenderer | None = None) -> None:
        self.renderer = renderer or TemplateRenderer()

    def context(self, options: ProjectOptions) -> dict[str, Any]:
        """Template context shared by every rendered artifact."""
        return {
            "typescript": options.is_typescript,
            "ext": options.extension,
            "database": options.database.value,
            "api_docs": options.include_api_docs,
            "port": DEFAULT_PORT,
        }

    # -- Always emitted ----------------------------------------------------

    def entry_point(self, options: ProjectOptions) -> str:
        return self.renderer.render("index.j2", self.context(options))

    def gitignore(self) -> str:
        return self.renderer.render("gitignore.j2", {})

    def env_file(self, options: ProjectOptions) -> str:
        return self.renderer.render("env.j2", self.context(options))

    def eslint_config(self, options: ProjectOptions) -> str:
        """``.eslintrc.json``; the TypeScript variant adds the type-aware parser."""
        config: dict[str, Any] = {}
        if options.is_typescript:
            config["parser"] = "@typescript-eslint/parser"
            config["extends"] = [
                "eslint:recommended",
                "plugin:@typescript-eslint/recommended",
                "prettier",
            ]
            config["plugins"] = ["@typescript-eslint", "prettier"]
            unused_vars_rule = "@typescript-eslint/no-unused-vars"
        else:
            config["extends"] = ["eslint:recommended", "prettier"]
            config["plugins"] = ["prettier"]
            unused_vars_rule = "no-unused-vars"

        config["parserOptions"] = {"ecmaVersion": 2020, "sourceType": "module"}
        config["rules"] = {
            "prettier/prettier": "error",
            unused_vars_rule: ["error", {"argsIgnorePattern": "^_"}],
        }
        config["env"] = {"node": True, "es6": True}
        return dump_json(config)

    def prettier_config(self) -> str:
        return dump_json(
            {
                "semi": True,
                "trailingComma": "es5",
                "singleQuote": True,
                "printWidth": 80,
                "tabWidth": 2,
            }
        )

    # -- Conditional -------------------------------------------------------

    def tsconfig(self) -> str:
        return dump_json(
            {
                "compilerOptions": {
                    "target": "ES2020",
                    "module": "commonjs",
                    "lib": ["ES2020"],
                    "outDir": "./dist",
                    "rootDir": "./src",
                    "strict": True,
                    "esModuleInterop": True,
                    "skipLibCheck": True,
                    "forceConsistentCasingInFileNames": True,
                    "resolveJsonModule": True,
                    "moduleResolution": "node",
                },
                "include": ["src/**/*"],
                "exclude": ["node_modules", "dist"],
            }
        )

    def db_connector(self, options: ProjectOptions) -> str | None:
        """``src/config/db.<ext>``, or ``None`` when no database is selected."""
        template = _DB_TEMPLATES.get(options.database)
        if template is None:
            return None
        return self.renderer.render(template, self.context(options))

    def prisma_schema(self) -> str:
        return self.renderer.render("schema.prisma.j2", {})

    def jest_config(self, options: ProjectOptions) -> str:
        return self.renderer.render("jest.config.js.j2", self.context(options))

    def swagger_bootstrap(self, options: ProjectOptions) -> str:
        return self.renderer.render("swagger.j2", self.context(options))
