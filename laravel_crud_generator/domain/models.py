"""
Core domain models for the Laravel CRUD generator.

These models describe one generation run: the naming and placement context
shared by every render, the column specs fed to the migration, and the
targets and results exchanged between the orchestrator and the file mutator.
"""

import re
from dataclasses import dataclass, field
from enum import Enum
from pathlib import PurePath, PurePosixPath
from typing import Any, Dict, List, Optional, Tuple, Union

from ..constants import Namespaces, ProjectPaths
from ..exceptions import InvalidNameError
from .naming import NamingContext, resolve


class DtoKind(Enum):
    """The four transfer objects generated per entity."""

    STORE = "Store"
    UPDATE = "Update"
    DELETE = "Delete"
    LIST = "List"


class MutationMode(Enum):
    """How a rendered artifact is applied to its target file."""

    CREATE_IF_ABSENT = "create_if_absent"
    INSERT_BEFORE_MARKER = "insert_before_marker"
    APPEND_IF_ABSENT = "append_if_absent"
    ANCHORED_BLOCK_INSERT = "anchored_block_insert"


class StepStatus(Enum):
    """Outcome of one generation step."""

    CREATED = "created"
    PATCHED = "patched"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class ColumnSpec:
    """A migration column derived from a schema field."""

    name: str
    sql_type: str
    nullable: bool = False


_SUB_PATH_SEGMENT_RE = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")


def normalize_sub_path(sub_path: Optional[str]) -> Tuple[str, ...]:
    """
    Split a controller sub-namespace into its segments.

    Both ``Api/V1`` and ``Api\\V1`` give ``("Api", "V1")``; leading and
    trailing separators are ignored.
    """
    if not sub_path:
        return ()
    segments = tuple(s for s in re.split(r"[\\/]+", sub_path.strip().strip("\\/")) if s)
    for segment in segments:
        if not _SUB_PATH_SEGMENT_RE.match(segment):
            raise InvalidNameError(
                f"Invalid controller sub-path segment '{segment}'", name=sub_path
            )
    return segments


@dataclass(frozen=True)
class GenerationContext:
    """
    Naming forms plus the namespaces and file locations of every artifact.

    Paths are relative to the project root and always use forward slashes.
    """

    naming: NamingContext
    controller_segments: Tuple[str, ...] = ()

    @classmethod
    def build(cls, name: str, controller_sub_path: Optional[str] = None) -> "GenerationContext":
        return cls(naming=resolve(name), controller_segments=normalize_sub_path(controller_sub_path))

    # --- Namespaces ---

    @property
    def controller_namespace(self) -> str:
        return "\\".join((Namespaces.CONTROLLERS,) + self.controller_segments)

    @property
    def controller_fqn(self) -> str:
        return f"{self.controller_namespace}\\{self.naming.controller_name}"

    def dto_namespace(self, layer: str = Namespaces.DTO_SERVICE_LAYER) -> str:
        return f"{Namespaces.DTOS}\\{layer}\\{self.naming.model_name}"

    def dto_class(self, kind: DtoKind) -> str:
        return f"{kind.value}{self.naming.model_name}DTO"

    # --- Paths ---

    @property
    def model_path(self) -> PurePosixPath:
        return PurePosixPath(ProjectPaths.MODELS_DIR) / f"{self.naming.model_name}.php"

    @property
    def migrations_dir(self) -> PurePosixPath:
        return PurePosixPath(ProjectPaths.MIGRATIONS_DIR)

    @property
    def controller_path(self) -> PurePosixPath:
        directory = PurePosixPath(ProjectPaths.CONTROLLERS_DIR, *self.controller_segments)
        return directory / f"{self.naming.controller_name}.php"

    @property
    def service_path(self) -> PurePosixPath:
        return PurePosixPath(ProjectPaths.SERVICES_DIR) / f"{self.naming.service_name}.php"

    @property
    def resource_path(self) -> PurePosixPath:
        return PurePosixPath(ProjectPaths.RESOURCES_DIR) / f"{self.naming.resource_name}.php"

    @property
    def responses_helper_path(self) -> PurePosixPath:
        return PurePosixPath(ProjectPaths.HELPERS_DIR) / ProjectPaths.RESPONSES_HELPER_NAME

    def dto_path(self, kind: DtoKind, layer: str = Namespaces.DTO_SERVICE_LAYER) -> PurePosixPath:
        return (
            PurePosixPath(ProjectPaths.DTOS_DIR, layer, self.naming.model_name)
            / f"{self.dto_class(kind)}.php"
        )


@dataclass(frozen=True)
class ArtifactTarget:
    """
    One file edit: where, what, and how.

    ``marker`` is mode specific: a regex whose presence means the content is
    already there (INSERT_BEFORE_MARKER), a plain substring with the same
    meaning (APPEND_IF_ABSENT), or unused.
    """

    path: Union[str, PurePath]
    content: str
    mode: MutationMode
    marker: Optional[str] = None
    # CREATE_IF_ABSENT only: whether a forced run may replace an existing file
    overwritable: bool = True


@dataclass
class MutationResult:
    """Result of applying one ArtifactTarget."""

    status: StepStatus
    path: str
    message: str = ""


@dataclass
class StepResult:
    """Outcome of one step of the generation plan."""

    step: str
    status: StepStatus
    path: Optional[str] = None
    message: str = ""
    error: Optional[Exception] = None

    @property
    def failed(self) -> bool:
        return self.status is StepStatus.FAILED

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'step': self.step,
            'status': self.status.value,
            'path': self.path,
            'message': self.message,
            'error': str(self.error) if self.error else None,
        }


@dataclass
class GenerationReport:
    """Ordered step results of one generation run."""

    model_name: str
    steps: List[StepResult] = field(default_factory=list)

    def add(self, result: StepResult) -> StepResult:
        self.steps.append(result)
        return result

    @property
    def failed_step(self) -> Optional[StepResult]:
        return next((step for step in self.steps if step.failed), None)

    @property
    def succeeded(self) -> bool:
        """True when no step failed; skipped steps still count as success."""
        return self.failed_step is None

    def counts(self) -> Dict[str, int]:
        counts = {status.value: 0 for status in StepStatus}
        for step in self.steps:
            counts[step.status.value] += 1
        return counts
