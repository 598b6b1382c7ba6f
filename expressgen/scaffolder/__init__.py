"""expressgen scaffolder -- composes Express.js project skeletons.

This package turns a ``ProjectOptions`` into the files, directories and
dependency lists of a new backend service.  Composition is pure and happens
entirely in memory; writing is a separate, explicit step.

Quick usage::

    from expressgen.options import build_options
    from expressgen.scaffolder import ProjectGenerator

    options = build_options("demo", "TypeScript", "Mongoose", True, False)
    project = ProjectGenerator(options).compose()
    project.files["src/index.ts"]
"""

from expressgen.scaffolder.artifacts import ArtifactBuilder
from expressgen.scaffolder.catalog import DependencyManifest, DependencySet, collect_dependencies
from expressgen.scaffolder.generator import (
    ComposedProject,
    ProjectGenerator,
    amend_manifest,
)
from expressgen.scaffolder.templates import TemplateRenderer

__all__ = [
    "ArtifactBuilder",
    "ComposedProject",
    "DependencyManifest",
    "DependencySet",
    "ProjectGenerator",
    "TemplateRenderer",
    "amend_manifest",
    "collect_dependencies",
]
