"""Validation models and utilities for package docs MCP tools."""

from typing import Annotated, Literal, Optional

from pydantic import Field
from pydantic.functional_validators import AfterValidator


# Search limits
DEFAULT_SEARCH_LIMIT = 10
MAX_SEARCH_LIMIT = 50

# Describe output
DEFAULT_MAX_SECTIONS = 20
MAX_SECTIONS = 100


def validate_non_empty_string(value: str) -> str:
    """Validate that a string is not empty after stripping whitespace."""
    stripped = value.strip()
    if not stripped:
        raise ValueError("Value cannot be empty or whitespace only")
    return stripped


def validate_ecosystem_name(value: str) -> str:
    """Lowercase an ecosystem name; support is checked by the resolver."""
    return validate_non_empty_string(value).lower()


def validate_optional_string(value: Optional[str]) -> Optional[str]:
    """Strip optional strings; blank becomes None."""
    if value is None:
        return None
    stripped = value.strip()
    return stripped or None


EcosystemName = Annotated[
    str,
    AfterValidator(validate_ecosystem_name),
    Field(
        ...,
        min_length=1,
        description="Package ecosystem: 'go', 'python', 'npm', 'rust' or 'swift'. Case-insensitive.",
    ),
]

PackageName = Annotated[
    str,
    AfterValidator(validate_non_empty_string),
    Field(
        ...,
        min_length=1,
        description=(
            "Package identifier as the ecosystem spells it. Examples: 'encoding/json', "
            "'requests', '@types/node', 'serde', 'apple/swift-nio'."
        ),
    ),
]

SymbolName = Annotated[
    Optional[str],
    AfterValidator(validate_optional_string),
    Field(default=None, description="Symbol inside the package, e.g. 'Marshal' or 'Session.get'"),
]

VersionSpec = Annotated[
    Optional[str],
    AfterValidator(validate_optional_string),
    Field(default=None, description="Exact package version. Null means latest/installed."),
]

ProjectPath = Annotated[
    Optional[str],
    AfterValidator(validate_optional_string),
    Field(
        default=None,
        description="Project directory for local lookups (node_modules, .build/checkouts, .npmrc).",
    ),
]

SearchQuery = Annotated[
    str,
    AfterValidator(validate_non_empty_string),
    Field(
        ...,
        min_length=1,
        description="Free-text query. Examples: 'timeout', 'connect', 'retry policy'. Case-insensitive.",
    ),
]

SearchLimit = Annotated[
    int,
    Field(
        default=DEFAULT_SEARCH_LIMIT,
        ge=1,
        le=MAX_SEARCH_LIMIT,
        description=f"Maximum number of results (1-{MAX_SEARCH_LIMIT}).",
    ),
]

FuzzyFlag = Annotated[
    bool,
    Field(default=True, description="Allow approximate matches when no exact match exists"),
]

SectionFilter = Annotated[
    Optional[Literal["description", "usage", "api", "example", "other"]],
    Field(default=None, description="Only return sections with this label"),
]

MaxSections = Annotated[
    int,
    Field(default=DEFAULT_MAX_SECTIONS, ge=1, le=MAX_SECTIONS, description="Maximum sections to return"),
]
