"""Project files — dataclasses, parsing, validation, resolution, serialization."""

from .models import PROJECT_VERSION, ProjectFile, ResolvedProject, ProjectError
from .parsing import parse_project
from .validation import validate_project, prune_project, resolve_project
from .serialization import project_to_dict

__all__ = [
    # Models
    "PROJECT_VERSION", "ProjectFile", "ResolvedProject", "ProjectError",
    # Parsing / Validation / Serialization
    "parse_project", "validate_project", "prune_project", "resolve_project",
    "project_to_dict",
]
