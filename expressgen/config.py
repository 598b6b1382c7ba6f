"""expressgen configuration.

Runtime settings that are not part of the generated project itself: where
projects are created, which package manager to force, and how the install
step behaves.  Uses a Pydantic v2 model so values are validated at
construction time and can be read from environment variables.
"""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from expressgen.package_manager import PackageManager


class Config(BaseModel):
    """Global expressgen configuration.

    Created once by the CLI entry point and carried on the ``RunContext``.
    """

    output_dir: Path = Field(
        default=Path("."),
        description="Parent directory in which the project folder is created",
    )
    package_manager: PackageManager | None = Field(
        default=None,
        description="Force a package manager instead of detecting one",
    )
    install_timeout: int | None = Field(
        default=None,
        ge=1,
        description="Seconds before the install subprocess is killed (no limit if unset)",
    )
    skip_install: bool = Field(
        default=False,
        description="Generate files and package.json but do not install dependencies",
    )

    @classmethod
    def from_env(cls) -> "Config":
        """Build a ``Config`` from environment variables.

        Recognised variables (all optional):
            EXPRESSGEN_OUTPUT_DIR, EXPRESSGEN_PACKAGE_MANAGER,
            EXPRESSGEN_INSTALL_TIMEOUT, EXPRESSGEN_SKIP_INSTALL.
        """
        kwargs: dict[str, Any] = {}
        if os.environ.get("EXPRESSGEN_OUTPUT_DIR"):
            kwargs["output_dir"] = Path(os.environ["EXPRESSGEN_OUTPUT_DIR"])
        if os.environ.get("EXPRESSGEN_PACKAGE_MANAGER"):
            kwargs["package_manager"] = os.environ["EXPRESSGEN_PACKAGE_MANAGER"].strip().lower()
        if os.environ.get("EXPRESSGEN_INSTALL_TIMEOUT"):
            kwargs["install_timeout"] = int(os.environ["EXPRESSGEN_INSTALL_TIMEOUT"])
        if os.environ.get("EXPRESSGEN_SKIP_INSTALL"):
            kwargs["skip_install"] = os.environ["EXPRESSGEN_SKIP_INSTALL"].strip().lower() in (
                "1",
                "true",
                "yes",
            )
        return cls(**kwargs)
