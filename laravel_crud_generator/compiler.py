"""
Template compiler for the Laravel CRUD generator.

Each artifact kind has one render method taking the generation context and
the schema and returning PHP source text. Renders are pure; writing the text
to disk is the file mutator's job.
"""

import logging
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from jinja2 import Environment, FileSystemLoader, StrictUndefined

from .constants import DtoDefaults, Namespaces, ResponseMessages
from .domain.columns import map_columns
from .domain.models import DtoKind, GenerationContext
from .schema import SchemaDefinition


logger = logging.getLogger(__name__)

# Define the path to the templates directory relative to this file
TEMPLATE_DIR = Path(__file__).parent / "templates"


def php_string(value: Any) -> str:
    """Escape a value for use inside a single-quoted PHP string."""
    return str(value).replace("\\", "\\\\").replace("'", "\\'")


def setup_jinja_env(template_dir: Path = TEMPLATE_DIR) -> Environment:
    """Sets up and returns the Jinja2 environment."""
    env = Environment(
        loader=FileSystemLoader(str(template_dir)),
        autoescape=False,  # PHP source, not markup
        trim_blocks=True,  # Remove first newline after a block tag
        lstrip_blocks=True,  # Strip leading whitespace from lines with block tags
        keep_trailing_newline=True,
        undefined=StrictUndefined,
    )
    env.filters["php_string"] = php_string
    return env


# --- DTO rule derivation ---

def store_rules(schema: Mapping[str, str]) -> Dict[str, str]:
    """Store DTO rules are exactly the schema's field rules."""
    return dict(schema)


def update_rules(schema: Mapping[str, str]) -> Dict[str, str]:
    """Update DTO rules: a mandatory id first, then the schema's field rules."""
    rules = {DtoDefaults.ID_FIELD: DtoDefaults.ID_RULE}
    rules.update(schema)
    return rules


def delete_rules(schema: Mapping[str, str]) -> Dict[str, str]:
    return {DtoDefaults.ID_FIELD: DtoDefaults.ID_RULE}


def list_rules(schema: Mapping[str, str]) -> Dict[str, str]:
    """Pagination rules, independent of the schema."""
    return {
        DtoDefaults.PER_PAGE_FIELD: DtoDefaults.PAGINATION_RULE,
        DtoDefaults.PAGE_FIELD: DtoDefaults.PAGINATION_RULE,
    }


DTO_RULES: Dict[DtoKind, Callable[[Mapping[str, str]], Dict[str, str]]] = {
    DtoKind.STORE: store_rules,
    DtoKind.UPDATE: update_rules,
    DtoKind.DELETE: delete_rules,
    DtoKind.LIST: list_rules,
}

DTO_TEMPLATES: Dict[DtoKind, str] = {
    DtoKind.STORE: "dto_store.php.j2",
    DtoKind.UPDATE: "dto_update.php.j2",
    DtoKind.DELETE: "dto_delete.php.j2",
    DtoKind.LIST: "dto_list.php.j2",
}

DTO_STUB_TEMPLATE = "dto_stub.php.j2"


def dto_rules(kind: DtoKind, schema: Mapping[str, str]) -> Dict[str, str]:
    return DTO_RULES[kind](schema)


class TemplateCompiler:
    """Renders every artifact of the CRUD package."""

    def __init__(self, env: Optional[Environment] = None):
        self.env = env or setup_jinja_env()

    def _render(self, template_name: str, context: GenerationContext, **extra: Any) -> str:
        variables = self._base_variables(context)
        variables.update(extra)
        logger.debug(f"Rendering template '{template_name}' for {context.naming.model_name}")
        return self.env.get_template(template_name).render(variables)

    @staticmethod
    def _base_variables(context: GenerationContext) -> Dict[str, Any]:
        dto_kinds = [kind.value for kind in (DtoKind.LIST, DtoKind.STORE, DtoKind.UPDATE, DtoKind.DELETE)]
        return {
            "naming": context.naming,
            "namespaces": {
                "models": Namespaces.MODELS,
                "controllers": Namespaces.CONTROLLERS,
                "services": Namespaces.SERVICES,
                "helpers": Namespaces.HELPERS,
                "resources": Namespaces.RESOURCES,
            },
            "controller_namespace": context.controller_namespace,
            "controller_fqn": context.controller_fqn,
            "dto_namespace": context.dto_namespace(Namespaces.DTO_SERVICE_LAYER),
            "dto_kinds": dto_kinds,
            "dto_classes": {kind.value: context.dto_class(kind) for kind in DtoKind},
            "messages": {
                "LIST": ResponseMessages.LIST,
                "CREATE": ResponseMessages.CREATE,
                "UPDATE": ResponseMessages.UPDATE,
                "DELETE": ResponseMessages.DELETE,
            },
        }

    # --- Model and migration ---

    def render_model(self, context: GenerationContext, schema: SchemaDefinition) -> str:
        """Model class skeleton, as ``make:model`` would create it."""
        return self._render("model.php.j2", context, fields=list(schema))

    def render_model_methods(self, context: GenerationContext, schema: SchemaDefinition) -> str:
        """Static store/update/delete/list methods injected into the model."""
        return self._render("model_methods.php.j2", context)

    def render_migration(self, context: GenerationContext, schema: SchemaDefinition) -> str:
        """Create-table migration skeleton ending in a timestamps call."""
        return self._render("migration.php.j2", context)

    def render_migration_columns(self, context: GenerationContext, schema: SchemaDefinition) -> str:
        """One column definition per schema field, in schema order, unindented."""
        rendered = self._render("migration_columns.php.j2", context, columns=map_columns(schema.fields))
        return rendered.rstrip("\n")

    def migration_column_lines(self, context: GenerationContext, schema: SchemaDefinition) -> List[str]:
        block = self.render_migration_columns(context, schema)
        return block.split("\n") if block else []

    # --- HTTP layer ---

    def render_controller(self, context: GenerationContext, schema: SchemaDefinition) -> str:
        return self._render("controller.php.j2", context)

    def render_service(self, context: GenerationContext, schema: SchemaDefinition) -> str:
        return self._render("service.php.j2", context)

    def render_resource(self, context: GenerationContext, schema: SchemaDefinition) -> str:
        return self._render("resource.php.j2", context)

    def render_responses_helper(self, context: GenerationContext, schema: SchemaDefinition) -> str:
        """Shared response envelope helper; does not depend on the entity."""
        return self._render("responses_helper.php.j2", context)

    def render_route_line(self, context: GenerationContext, schema: SchemaDefinition) -> str:
        return self._render("route.php.j2", context).strip()

    # --- DTOs ---

    def render_dto(
        self,
        kind: DtoKind,
        context: GenerationContext,
        schema: SchemaDefinition,
        layer: str = Namespaces.DTO_SERVICE_LAYER,
    ) -> str:
        """
        Render one transfer object.

        Service-layer DTOs carry the rules of their kind; model-layer DTOs
        are empty-rule stubs.
        """
        if layer == Namespaces.DTO_SERVICE_LAYER:
            template_name = DTO_TEMPLATES[kind]
            rules = dto_rules(kind, schema.fields)
        else:
            template_name = DTO_STUB_TEMPLATE
            rules = {}

        return self._render(
            template_name,
            context,
            dto_namespace=context.dto_namespace(layer),
            dto_class=context.dto_class(kind),
            rules=rules,
            excluded_fields=DtoDefaults.UPDATE_EXCLUDED_FIELDS,
            pagination={
                "per_page_field": DtoDefaults.PER_PAGE_FIELD,
                "page_field": DtoDefaults.PAGE_FIELD,
                "default_per_page": DtoDefaults.DEFAULT_PER_PAGE,
                "default_page": DtoDefaults.DEFAULT_PAGE,
            },
        )
