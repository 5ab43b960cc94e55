"""
Naming convention utilities for the Laravel CRUD generator.

Every generated file name, class name, table name and route depends on the
forms derived here, so all of them are pure functions of the model name:

    model_name     studly form of the input, never singularized
    table_name     snake form of the plural studly name
    route_slug     kebab form of the plural studly name
    variable_name  model_name with a lower-case first letter

Pluralization only touches the last word of the studly name. The word is
looked up in a fixed uncountable set, then in a fixed irregular table (which
also carries the Latin and Greek plurals Laravel uses, e.g. index -> indices),
and only then handed to the inflect engine's regular noun rules.
"""

import re
from dataclasses import dataclass

import inflect

from ..constants import Pluralization
from ..exceptions import InvalidNameError


# Initialize inflect engine for pluralization
p = inflect.engine()

_WORD_SEPARATORS_RE = re.compile(r"[_\-\s]+")
_VALID_NAME_RE = re.compile(r"^[A-Za-z][A-Za-z0-9_\- ]*$")
_LAST_STUDLY_WORD_RE = re.compile(r"[A-Z]?[^A-Z]*$")


def to_snake_case(name: str) -> str:
    """
    Convert CamelCase or PascalCase to snake_case.

    Example:
        >>> to_snake_case("OrderItems")
        'order_items'
        >>> to_snake_case("XMLHttpRequest")
        'xml_http_request'
    """
    if not isinstance(name, str):
        raise TypeError(f"Expected string, got {type(name).__name__}")

    name = re.sub("(.)([A-Z][a-z]+)", r"\1_\2", name)
    name = re.sub("__([A-Z])", r"_\1", name)
    name = re.sub("([a-z0-9])([A-Z])", r"\1_\2", name)
    return name.lower()


def to_kebab_case(name: str) -> str:
    """Convert CamelCase to kebab-case, e.g. ``OrderItems`` -> ``order-items``."""
    return to_snake_case(name).replace("_", "-")


def to_studly_case(name: str) -> str:
    """
    Convert a separated or camel-cased name to StudlyCase.

    Only the first letter of each word is touched, so already studly input
    is returned unchanged.

    Example:
        >>> to_studly_case("order_item")
        'OrderItem'
        >>> to_studly_case("orderItem")
        'OrderItem'
    """
    words = [word for word in _WORD_SEPARATORS_RE.split(name) if word]
    return "".join(word[0].upper() + word[1:] for word in words)


def lcfirst(name: str) -> str:
    """Lower-case the first character of ``name``."""
    return name[:1].lower() + name[1:]


def regular_plural(word: str) -> str:
    """Plain English suffix: ``es`` after sibilants, ``s`` otherwise."""
    if word.endswith(Pluralization.ES_SUFFIX_ENDINGS):
        return word + "es"
    return word + "s"


def pluralize(word: str) -> str:
    """
    Pluralize a single word.

    Uncountable words come back unchanged and irregular words resolve through
    the fixed exception table. Words inflect would read as pronouns or
    determiners (``it``, ``this``) take the plain suffix. Everything else
    follows inflect's regular noun rules. The capitalisation of the first
    letter is preserved.

    Example:
        >>> pluralize("Person")
        'People'
        >>> pluralize("category")
        'categories'
    """
    if not word:
        return ""

    lower = word.lower()
    if lower in Pluralization.UNCOUNTABLE:
        plural = lower
    elif lower in Pluralization.IRREGULAR:
        plural = Pluralization.IRREGULAR[lower]
    elif lower in Pluralization.NON_NOUNS:
        plural = regular_plural(lower)
    else:
        plural = p.plural_noun(lower) or lower + "s"

    if word[0].isupper():
        plural = plural[0].upper() + plural[1:]
    return plural


def plural_studly(name: str) -> str:
    """Pluralize the last word of a studly name: ``OrderItem`` -> ``OrderItems``."""
    match = _LAST_STUDLY_WORD_RE.search(name)
    prefix, last = name[:match.start()], match.group(0)
    return prefix + pluralize(last)


def validate_entity_name(name: str) -> str:
    """
    Check that ``name`` can be turned into every derived form.

    Returns the stripped name.

    Raises:
        InvalidNameError: on empty, path-like or non-identifier input
    """
    if not isinstance(name, str) or not name.strip():
        raise InvalidNameError("Entity name must not be empty", name=name)

    name = name.strip()
    if "/" in name or "\\" in name or ".." in name:
        raise InvalidNameError(
            "Entity name must not contain path separators", name=name
        )
    if not _VALID_NAME_RE.match(name):
        raise InvalidNameError(
            "Entity name must start with a letter and contain only letters, "
            "digits, underscores, hyphens or spaces",
            name=name,
        )
    return name


@dataclass(frozen=True)
class NamingContext:
    """Every identifier derived from one entity name."""

    base_name: str
    model_name: str
    plural_name: str
    table_name: str
    route_slug: str
    variable_name: str

    @property
    def service_name(self) -> str:
        return f"{self.model_name}Service"

    @property
    def resource_name(self) -> str:
        return f"{self.model_name}Resource"

    @property
    def controller_name(self) -> str:
        return f"{self.model_name}Controller"

    @property
    def migration_name(self) -> str:
        return f"create_{self.table_name}_table"


def resolve(base_name: str) -> NamingContext:
    """
    Derive the naming context for an entity.

    Example:
        >>> ctx = resolve("order_item")
        >>> ctx.model_name, ctx.table_name, ctx.route_slug, ctx.variable_name
        ('OrderItem', 'order_items', 'order-items', 'orderItem')
    """
    base_name = validate_entity_name(base_name)
    model_name = to_studly_case(base_name)
    plural_name = plural_studly(model_name)

    return NamingContext(
        base_name=base_name,
        model_name=model_name,
        plural_name=plural_name,
        table_name=to_snake_case(plural_name),
        route_slug=to_kebab_case(plural_name),
        variable_name=lcfirst(model_name),
    )
