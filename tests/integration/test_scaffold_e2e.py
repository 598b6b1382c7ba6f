"""End-to-end generation tests.

These run the real CLI entry point against a temporary output directory.
Only the package-manager subprocesses are replaced (by the ``fake_runner``
fixture), so no Node toolchain is required.
"""

from __future__ import annotations

import json
from pathlib import Path
from unittest.mock import patch

import pytest

from expressgen.pipeline import main
from expressgen.scaffolder.generator import SRC_DIRECTORIES

RUN = "expressgen.package_manager.run_command"


def _generate(tmp_path: Path, fake_runner, **opts: str) -> Path:
    argv = [f"--{key}={value}" for key, value in opts.items()]
    with patch(RUN, new=fake_runner), \
            patch.dict("os.environ", {"npm_config_user_agent": "npm/10.2.4 node/v20.11.0"}):
        main([*argv, "--output", str(tmp_path)])
    return tmp_path / opts["projectName"]


def _files(root: Path) -> set[str]:
    return {p.relative_to(root).as_posix() for p in root.rglob("*") if p.is_file()}


@pytest.mark.integration
class TestScaffoldEndToEnd:
    def test_typescript_mongoose_jest(self, tmp_path: Path, fake_runner):
        root = _generate(
            tmp_path, fake_runner,
            projectName="demo", language="TypeScript", database="Mongoose",
            includeJest="true", includeSwagger="false",
        )

        assert _files(root) == {
            ".gitignore",
            ".env",
            ".prettierrc.json",
            ".eslintrc.json",
            "tsconfig.json",
            "jest.config.js",
            "package.json",
            "src/index.ts",
            "src/config/db.ts",
        }
        assert "mongodb://" in (root / ".env").read_text(encoding="utf-8")
        assert not (root / "prisma").exists()
        for d in SRC_DIRECTORIES:
            assert (root / "src" / d).is_dir()

        manifest = json.loads((root / "package.json").read_text(encoding="utf-8"))
        assert manifest["main"] == "src/index.ts"
        assert manifest["scripts"]["test"] == "jest --passWithNoTests"
        assert "swagger" not in manifest["scripts"]
        assert "mongoose" in manifest["dependencies"]
        assert "ts-jest" in manifest["devDependencies"]
        assert "ts-jest" not in manifest["dependencies"]

    def test_javascript_prisma_swagger_no_jest(self, tmp_path: Path, fake_runner):
        root = _generate(
            tmp_path, fake_runner,
            projectName="api_2", language="JavaScript", database="Prisma",
            includeJest="false", includeSwagger="true",
        )

        files = _files(root)
        assert {"src/index.js", "src/config/db.js", "src/swagger.js", "prisma/schema.prisma"} <= files
        assert "tsconfig.json" not in files
        assert "jest.config.js" not in files

        manifest = json.loads((root / "package.json").read_text(encoding="utf-8"))
        assert manifest["scripts"] == {
            "dev": "nodemon src/index.js",
            "start": "node src/index.js",
            "swagger": "node src/swagger.js",
        }
        assert "prisma" in manifest["devDependencies"]
        assert "@prisma/client" in manifest["dependencies"]
        assert "swagger-ui-express" in manifest["dependencies"]

    def test_install_command_receives_composed_lists(self, tmp_path: Path, fake_runner):
        _generate(
            tmp_path, fake_runner,
            projectName="svc", language="TypeScript", database="Sequelize",
            includeJest="true", includeSwagger="true",
        )
        install = fake_runner.commands()[-1]
        assert install[:5] == ["npm", "install", "--silent", "--no-audit", "--no-fund"]
        assert install.index("express") < install.index("typescript")
        assert "@types/sequelize" in install
        assert fake_runner.calls[-1]["cwd"] == tmp_path / "svc"

    def test_same_answers_same_output(self, tmp_path: Path, fake_runner):
        opts = dict(language="JavaScript", database="Sequelize", includeJest="true", includeSwagger="true")
        first = _generate(tmp_path, fake_runner, projectName="one", **opts)
        second = _generate(tmp_path, fake_runner, projectName="two", **opts)
        for rel in _files(first) - {"package.json"}:
            assert (first / rel).read_bytes() == (second / rel).read_bytes()

    def test_failed_install_exits_non_zero_and_keeps_files(self, tmp_path: Path, fake_runner):
        fake_runner.results["npm install"] = (1, "", "ERESOLVE")
        with pytest.raises(SystemExit) as excinfo:
            _generate(
                tmp_path, fake_runner,
                projectName="broken", language="JavaScript", database="None",
                includeJest="false", includeSwagger="false",
            )
        assert excinfo.value.code == 1
        assert (tmp_path / "broken" / "src" / "index.js").exists()
