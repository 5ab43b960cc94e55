"""
Generation orchestrator.

Runs the generation plan for one entity, strictly in order:

    model -> migration -> controller -> service -> DTOs
          -> response helper -> resource -> route

Every step reports created, patched, skipped or failed. A failed step halts
the rest of the plan; skipped steps never do, which is what makes re-running
the generator on an already scaffolded entity safe. Effects of steps that
completed before a failure stay in place.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .colored_logging import log_highlight, log_progress, log_success
from .compiler import TemplateCompiler
from .config import GeneratorConfig
from .constants import Namespaces, ProjectPaths
from .domain.models import (
    ArtifactTarget,
    DtoKind,
    GenerationContext,
    GenerationReport,
    MutationMode,
    MutationResult,
    StepResult,
    StepStatus,
)
from .exceptions import (
    CrudGeneratorError,
    InvalidNameError,
    MigrationFileNotFoundError,
    ModelFileNotFoundError,
    RouteFileNotFoundError,
)
from .file_mutator import FileMutator, insert_before_closing_brace, insert_columns_before_timestamps
from .schema import SchemaDefinition, load_schema


logger = logging.getLogger(__name__)

Step = Tuple[str, Callable[[], MutationResult]]


class CrudGenerator:
    """Scaffolds the CRUD package of one entity inside a Laravel project."""

    def __init__(
        self,
        config: GeneratorConfig,
        compiler: Optional[TemplateCompiler] = None,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.config = config
        self.compiler = compiler or TemplateCompiler()
        self.mutator = FileMutator(config.root, force=config.force)
        self.clock = clock

    def generate(self) -> GenerationReport:
        """Run the whole plan and return the per-step report."""
        report = GenerationReport(model_name=self.config.name)

        try:
            context = GenerationContext.build(self.config.name, self.config.controller_route)
        except InvalidNameError as e:
            self._fail(report, "naming", e)
            return report
        report.model_name = context.naming.model_name

        try:
            schema = load_schema(
                self.config.schema_path,
                context.naming.model_name,
                aliases=(context.naming.base_name,),
                project_root=self.config.root,
            )
        except (CrudGeneratorError, OSError) as e:
            self._fail(report, "schema", e)
            return report

        for step_name, step in self.plan(context, schema):
            log_progress(logger, f"Generating {step_name}...")
            try:
                result = step()
            except (CrudGeneratorError, OSError) as e:
                self._fail(report, step_name, e)
                logger.error(f"Halting generation after failed step '{step_name}'")
                break
            self._record(report, step_name, result)

        return report

    def plan(self, context: GenerationContext, schema: SchemaDefinition) -> List[Step]:
        """The ordered generation steps for one entity."""
        steps: List[Step] = [
            ("model", lambda: self.generate_model(context, schema)),
            ("migration", lambda: self.generate_migration(context, schema)),
            ("controller", lambda: self._create(
                context.controller_path, self.compiler.render_controller(context, schema))),
            ("service", lambda: self._create(
                context.service_path, self.compiler.render_service(context, schema))),
        ]
        for kind in DtoKind:
            for layer in Namespaces.DTO_LAYERS:
                steps.append((
                    f"dto:{layer}/{context.dto_class(kind)}",
                    self._dto_step(context, schema, kind, layer),
                ))
        steps.extend([
            ("responses helper", lambda: self._create(
                context.responses_helper_path,
                self.compiler.render_responses_helper(context, schema),
                overwritable=False,
            )),
            ("resource", lambda: self._create(
                context.resource_path, self.compiler.render_resource(context, schema))),
            ("route", lambda: self.register_route(context, schema)),
        ])
        return steps

    # --- Steps ---

    def generate_model(self, context: GenerationContext, schema: SchemaDefinition) -> MutationResult:
        """Inject the CRUD methods into the model, creating the model first if allowed."""
        methods = self.compiler.render_model_methods(context, schema)
        path = self.mutator.resolve(context.model_path)

        if not path.is_file():
            if not self.config.create_stubs:
                raise ModelFileNotFoundError(f"Model file not found: {path}", path=path)
            skeleton = self.compiler.render_model(context, schema)
            return self._create(context.model_path, insert_before_closing_brace(skeleton, methods))

        marker = rf"function\s+store{context.naming.model_name}\s*\("
        return self.mutator.apply(ArtifactTarget(
            path=context.model_path,
            content=methods,
            mode=MutationMode.INSERT_BEFORE_MARKER,
            marker=marker,
        ))

    def find_migration(self, context: GenerationContext) -> Optional[Path]:
        """The oldest migration named ``*_create_<table>_table.php``, if any."""
        migrations_dir = self.mutator.resolve(context.migrations_dir)
        if not migrations_dir.is_dir():
            return None
        matches = sorted(migrations_dir.glob(f"*_{context.naming.migration_name}.php"))
        return matches[0] if matches else None

    def generate_migration(self, context: GenerationContext, schema: SchemaDefinition) -> MutationResult:
        """Insert one column per schema field before the migration's timestamps call."""
        columns = self.compiler.migration_column_lines(context, schema)
        migration = self.find_migration(context)

        if migration is None:
            if self.config.create_stubs:
                file_name = f"{self.clock().strftime(ProjectPaths.MIGRATION_TIMESTAMP_FORMAT)}_{context.naming.migration_name}.php"
                content = self.compiler.render_migration(context, schema)
                if columns:
                    content = insert_columns_before_timestamps(content, columns)
                return self._create(context.migrations_dir / file_name, content)
            if columns:
                raise MigrationFileNotFoundError(
                    f"Migration file for {context.naming.model_name} not found",
                    path=self.mutator.resolve(context.migrations_dir) / f"*_{context.naming.migration_name}.php",
                )
            return MutationResult(StepStatus.SKIPPED, str(context.migrations_dir), "no migration and no schema fields")

        if not columns:
            return MutationResult(
                StepStatus.SKIPPED, self._relative(migration), "no schema fields to add"
            )
        return self.mutator.apply(ArtifactTarget(
            path=migration,
            content="\n".join(columns),
            mode=MutationMode.ANCHORED_BLOCK_INSERT,
        ))

    def register_route(self, context: GenerationContext, schema: SchemaDefinition) -> MutationResult:
        """Append the apiResource route unless the controller is already routed."""
        route_file = self.config.route_file
        if not route_file.is_file():
            raise RouteFileNotFoundError(f"Route file not found at: {route_file}", path=route_file)

        return self.mutator.apply(ArtifactTarget(
            path=route_file,
            content=self.compiler.render_route_line(context, schema),
            mode=MutationMode.APPEND_IF_ABSENT,
            marker=context.controller_fqn,
        ))

    # --- Helpers ---

    def _dto_step(self, context, schema, kind: DtoKind, layer: str) -> Callable[[], MutationResult]:
        def step() -> MutationResult:
            content = self.compiler.render_dto(kind, context, schema, layer=layer)
            return self._create(context.dto_path(kind, layer), content)
        return step

    def _create(self, path, content: str, overwritable: bool = True) -> MutationResult:
        return self.mutator.apply(ArtifactTarget(
            path=path,
            content=content,
            mode=MutationMode.CREATE_IF_ABSENT,
            overwritable=overwritable,
        ))

    def _relative(self, path: Path) -> str:
        try:
            return path.relative_to(self.mutator.project_root).as_posix()
        except ValueError:
            return str(path)

    def _record(self, report: GenerationReport, step_name: str, result: MutationResult) -> None:
        step = report.add(StepResult(
            step=step_name, status=result.status, path=result.path, message=result.message
        ))
        if step.status is StepStatus.SKIPPED:
            log_highlight(logger, f"Skipping {step_name}: {step.path} ({step.message})")
        else:
            log_success(logger, f"{step.status.value.capitalize()} {step_name}: {step.path}")

    def _fail(self, report: GenerationReport, step_name: str, error: Exception) -> None:
        path = getattr(error, "path", None) or getattr(error, "filename", None)
        report.add(StepResult(
            step=step_name,
            status=StepStatus.FAILED,
            path=str(path) if path else None,
            message=getattr(error, "message", None) or str(error),
            error=error,
        ))
        logger.error(f"Step '{step_name}' failed: {error}")


def generate_crud(config: GeneratorConfig) -> GenerationReport:
    """Convenience wrapper: run the full plan for ``config``."""
    log_progress(logger, f"Generating CRUD package for '{config.name}'...")
    return CrudGenerator(config).generate()
