"""
Schema loading and inspection.

A schema source is a YAML or JSON document mapping model names to flat
``field: rule`` mappings::

    Product:
      name: required|string|max:255
      price: nullable|numeric

The document shape is validated with pydantic; each rule must carry at most
one nullability token and at most one type token.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

import yaml
from pydantic import StrictStr, TypeAdapter, ValidationError

from .constants import RuleTokens, SchemaFormats
from .domain.columns import map_column, rule_tokens
from .domain.models import ColumnSpec
from .exceptions import SchemaFileNotFoundError, SchemaFormatError


logger = logging.getLogger(__name__)

_SCHEMA_DOCUMENT = TypeAdapter(Dict[str, Dict[str, StrictStr]])


@dataclass(frozen=True)
class SchemaDefinition:
    """Ordered field -> rule mapping for one model."""

    model_name: str = ""
    fields: Dict[str, str] = field(default_factory=dict)

    def __iter__(self) -> Iterator[str]:
        return iter(self.fields)

    def __len__(self) -> int:
        return len(self.fields)

    def __bool__(self) -> bool:
        return bool(self.fields)

    def items(self) -> List[Tuple[str, str]]:
        return list(self.fields.items())

    def rules(self) -> Dict[str, str]:
        """A copy of the field rules, safe to extend."""
        return dict(self.fields)

    def tokens(self, field_name: str):
        return rule_tokens(self.fields[field_name])

    def is_nullable(self, field_name: str) -> bool:
        return RuleTokens.NULLABLE in self.tokens(field_name)

    def columns(self) -> List[ColumnSpec]:
        return [map_column(name, rule) for name, rule in self.fields.items()]


def validate_rule(field_name: str, rule: str, path: Any = None) -> None:
    """
    Enforce the one-nullability / one-type invariant of a rule string.

    Raises:
        SchemaFormatError: if the rule repeats either kind of token
    """
    tokens = rule_tokens(rule)
    nullability = sorted(tokens & RuleTokens.NULLABILITY)
    types = sorted(tokens & RuleTokens.TYPES)
    if len(nullability) > 1:
        raise SchemaFormatError(
            f"Rule '{rule}' has conflicting nullability tokens {nullability}",
            path=path, field=field_name,
        )
    if len(types) > 1:
        raise SchemaFormatError(
            f"Rule '{rule}' has more than one type token {types}",
            path=path, field=field_name,
        )


def parse_schema(
    document: Any,
    model_name: str,
    aliases: Tuple[str, ...] = (),
    path: Any = None,
) -> SchemaDefinition:
    """
    Validate a loaded schema document and pick the entry for ``model_name``.

    ``aliases`` are tried in order when ``model_name`` has no entry. A missing
    entry yields an empty schema.
    """
    if document is None:
        return SchemaDefinition(model_name=model_name)

    try:
        models = _SCHEMA_DOCUMENT.validate_python(document)
    except ValidationError as e:
        error = e.errors()[0]
        location = " -> ".join(str(item) for item in error.get("loc", ())) or "Top Level"
        raise SchemaFormatError(
            f"Schema must map model names to flat 'field: rule' mappings "
            f"({location}: {error.get('msg', 'invalid value')})",
            path=path,
        ) from e

    for fields in models.values():
        for field_name, rule in fields.items():
            validate_rule(field_name, rule, path=path)

    for key in (model_name,) + tuple(aliases):
        if key in models:
            logger.debug(f"Using schema entry '{key}' with {len(models[key])} field(s)")
            return SchemaDefinition(model_name=model_name, fields=dict(models[key]))

    logger.warning(f"Schema has no entry for '{model_name}'; generating without fields")
    return SchemaDefinition(model_name=model_name)


def read_schema_document(path: Path) -> Any:
    """Parse a YAML or JSON schema file, chosen by extension."""
    suffix = path.suffix.lower()
    if suffix not in SchemaFormats.ALL:
        raise SchemaFormatError(
            f"Unsupported schema file type '{suffix or path.name}'",
            path=path,
            suggestions=[f"Use one of: {', '.join(sorted(SchemaFormats.ALL))}"],
        )

    try:
        text = path.read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise SchemaFormatError(f"Schema file is not valid UTF-8: {e}", path=path) from e

    try:
        if suffix in SchemaFormats.JSON:
            return json.loads(text)
        return yaml.safe_load(text)
    except (json.JSONDecodeError, yaml.YAMLError) as e:
        raise SchemaFormatError(f"Could not parse schema file: {e}", path=path) from e


def load_schema(
    source: Optional[Union[str, Path]],
    model_name: str,
    aliases: Tuple[str, ...] = (),
    project_root: Union[str, Path] = ".",
) -> SchemaDefinition:
    """
    Load the schema for one model.

    Relative ``source`` paths are resolved against ``project_root``. With no
    source the schema is empty and generation proceeds without fields.

    Raises:
        SchemaFileNotFoundError: if ``source`` does not exist
        SchemaFormatError: if the file is not a mapping of flat mappings
    """
    if not source:
        return SchemaDefinition(model_name=model_name)

    path = Path(source)
    if not path.is_absolute():
        path = Path(project_root) / path

    if not path.is_file():
        raise SchemaFileNotFoundError(f"Schema file not found: {path}", path=path)

    logger.info(f"Using schema from: {path}")
    document = read_schema_document(path)
    if document is None:
        raise SchemaFormatError("Schema file is empty", path=path)
    return parse_schema(document, model_name, aliases=aliases, path=path)
