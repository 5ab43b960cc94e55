"""
Domain module for the Laravel CRUD generator.

Naming rules, column mapping and the value objects of a generation run,
free of any file-system access.
"""

from .naming import (
    NamingContext,
    resolve,
    to_snake_case,
    to_kebab_case,
    to_studly_case,
    lcfirst,
    pluralize,
    plural_studly,
    validate_entity_name,
)

from .models import (
    ArtifactTarget,
    ColumnSpec,
    DtoKind,
    GenerationContext,
    GenerationReport,
    MutationMode,
    MutationResult,
    StepResult,
    StepStatus,
)

from .columns import (
    map_column,
    map_columns,
    rule_tokens,
)

__all__ = [
    # Naming
    'NamingContext',
    'resolve',
    'to_snake_case',
    'to_kebab_case',
    'to_studly_case',
    'lcfirst',
    'pluralize',
    'plural_studly',
    'validate_entity_name',

    # Core models
    'ArtifactTarget',
    'ColumnSpec',
    'DtoKind',
    'GenerationContext',
    'GenerationReport',
    'MutationMode',
    'MutationResult',
    'StepResult',
    'StepStatus',

    # Column mapping
    'map_column',
    'map_columns',
    'rule_tokens',
]
