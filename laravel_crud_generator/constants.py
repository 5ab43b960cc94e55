"""
Centralized constants for the Laravel CRUD generator.

Paths, namespaces, rule-token tables and default values used by the
naming resolver, the column mapper, the template compiler and the
orchestrator live here so that they can be tuned in a single place.
"""

from typing import Dict, FrozenSet, List, Tuple


# =============================================================================
# CORE CONFIGURATION
# =============================================================================

class DefaultConfig:
    """Default configuration values."""

    PROJECT_ROOT = "."
    API_ROUTE_FILE = "routes/api.php"
    CONFIG_FILE_NAME = "crud-generator.yaml"

    FORCE_OVERWRITE = False
    CREATE_STUBS = True


class ProjectPaths:
    """Locations of generated artifacts, relative to the project root."""

    MODELS_DIR = "app/Models"
    MIGRATIONS_DIR = "database/migrations"
    CONTROLLERS_DIR = "app/Http/Controllers"
    SERVICES_DIR = "app/Services"
    DTOS_DIR = "app/DTOs"
    HELPERS_DIR = "app/Helpers"
    RESOURCES_DIR = "app/Http/Resources"

    RESPONSES_HELPER_NAME = "ResponsesHelper.php"

    # Laravel's make:migration prefix, e.g. 2024_01_31_120000
    MIGRATION_TIMESTAMP_FORMAT = "%Y_%m_%d_%H%M%S"


class Namespaces:
    """PHP namespaces of the generated classes."""

    MODELS = "App\\Models"
    CONTROLLERS = "App\\Http\\Controllers"
    SERVICES = "App\\Services"
    DTOS = "App\\DTOs"
    HELPERS = "App\\Helpers"
    RESOURCES = "App\\Http\\Resources"

    # DTO layers: one set of transfer objects per layer
    DTO_SERVICE_LAYER = "Service"
    DTO_MODEL_LAYER = "Model"
    DTO_LAYERS: Tuple[str, ...] = (DTO_MODEL_LAYER, DTO_SERVICE_LAYER)


# =============================================================================
# NAMING
# =============================================================================

class Pluralization:
    """Fixed exception tables consulted before the regular inflection rules."""

    IRREGULAR: Dict[str, str] = {
        "person": "people",
        "child": "children",
        "man": "men",
        "woman": "women",
        "mouse": "mice",
        "goose": "geese",
        "tooth": "teeth",
        "foot": "feet",
        "ox": "oxen",
        "criterion": "criteria",
        "index": "indices",
        "matrix": "matrices",
        "vertex": "vertices",
        "cactus": "cacti",
        "fungus": "fungi",
        "nucleus": "nuclei",
        "radius": "radii",
        "stimulus": "stimuli",
        "syllabus": "syllabi",
        "alumnus": "alumni",
        "analysis": "analyses",
        "axis": "axes",
        "crisis": "crises",
        "thesis": "theses",
    }

    UNCOUNTABLE: FrozenSet[str] = frozenset({
        "audio",
        "data",
        "equipment",
        "feedback",
        "information",
        "metadata",
        "money",
        "news",
        "series",
        "sheep",
        "species",
    })

    # Words inflect treats as pronouns or determiners; they get the regular
    # English suffix instead
    NON_NOUNS: FrozenSet[str] = frozenset({
        "i", "me", "my", "mine", "you", "your", "yours", "he", "him", "his",
        "she", "her", "hers", "it", "its", "we", "us", "our", "ours", "they",
        "them", "their", "theirs", "this", "that", "these", "those", "a", "an",
    })

    # Endings that take "es" in the regular English suffix
    ES_SUFFIX_ENDINGS: Tuple[str, ...] = ("s", "x", "z", "ch", "sh")


# =============================================================================
# SCHEMA RULE TOKENS
# =============================================================================

class RuleTokens:
    """Validation-rule tokens understood by the column mapper."""

    SEPARATOR = "|"
    PARAMETER_SEPARATOR = ":"

    NULLABLE = "nullable"
    REQUIRED = "required"
    NULLABILITY: FrozenSet[str] = frozenset({NULLABLE, REQUIRED})

    STRING = "string"
    INTEGER = "integer"
    NUMERIC = "numeric"
    BOOLEAN = "boolean"
    DATE = "date"
    TYPES: FrozenSet[str] = frozenset({STRING, INTEGER, NUMERIC, BOOLEAN, DATE})


class ColumnTypes:
    """Laravel Blueprint column methods produced by the column mapper."""

    STRING = "string"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    DATE = "date"

    DEFAULT = STRING


# Ordered: the first token found in a rule decides the column type
RULE_TOKEN_COLUMN_TYPES: List[Tuple[str, str]] = [
    (RuleTokens.INTEGER, ColumnTypes.INTEGER),
    (RuleTokens.NUMERIC, ColumnTypes.FLOAT),
    (RuleTokens.BOOLEAN, ColumnTypes.BOOLEAN),
    (RuleTokens.DATE, ColumnTypes.DATE),
]


# =============================================================================
# DTO DEFAULTS
# =============================================================================

class DtoDefaults:
    """Rules and defaults baked into the generated transfer objects."""

    ID_FIELD = "id"
    ID_RULE = "required|int"

    PER_PAGE_FIELD = "per_page"
    PAGE_FIELD = "page"
    PAGINATION_RULE = "nullable|int"
    DEFAULT_PER_PAGE = 15
    DEFAULT_PAGE = 1

    # Keys stripped from the validated payload before an update
    UPDATE_EXCLUDED_FIELDS: Tuple[str, ...] = ("id", "profile_types_ids")


class ResponseMessages:
    """Translation keys used by the generated controller."""

    LIST = "defaults.response.success.list_successfully"
    CREATE = "defaults.response.success.create_successfully"
    UPDATE = "defaults.response.success.update_successfully"
    DELETE = "defaults.response.success.delete_successfully"


# =============================================================================
# SCHEMA SOURCES
# =============================================================================

class SchemaFormats:
    """File extensions accepted for schema sources."""

    YAML: FrozenSet[str] = frozenset({".yml", ".yaml"})
    JSON: FrozenSet[str] = frozenset({".json"})
    ALL: FrozenSet[str] = YAML | JSON
