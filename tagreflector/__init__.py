"""
tagreflector - A durable image tag cache with latest-tag selection policies.

Scanners record the tags they find in image repositories; policies pick
the tag that should be deployed.

Quick Start:
    from tagreflector import TagStore, Tag, SemVer, Numerical, RegexFilter, select_latest

    store = TagStore()
    store.set("library/nginx", [Tag("1.25.3", "sha256:..."), Tag("latest")])

    tag = select_latest(store.get("library/nginx"), SemVer("1.25.x"))
    print(tag.name, tag.digest)

    # With a filter that rewrites tags before ordering
    f = RegexFilter(r"^main-[a-f0-9]+-(?P<ts>\\d+)$", "$ts")
    tag = select_latest(store.get("my/app"), Numerical("ASC"), f)

Domain Objects:
    Tag - Image tag name with its digest

Storage:
    TagStore - Per-repository tag records in SQLite

Policies:
    Alphabetical, Numerical, SemVer - latest-tag strategies
    RegexFilter - pre-filter with name rewriting

Services:
    SelectionService - store + filter + policy for one selection rule
"""

__version__ = "0.1.0"

# Domain objects
from .domain import Tag

# Storage
from .database import TagStore

# Policies
from .policy import (
    Policer,
    Alphabetical,
    Numerical,
    SemVer,
    RegexFilter,
    PolicyChoice,
    build_policy,
)

# Services
from .services import (
    FilterSpec,
    SelectionRule,
    SelectionService,
    select_latest,
)

# Errors
from .errors import (
    TagReflectorError,
    PolicyConfigError,
    EmptyInputError,
    TagParseError,
    NoMatchError,
    DecodeError,
)

# Configuration
from .config import load_config, save_config

__all__ = [
    # Version
    "__version__",
    # Domain objects
    "Tag",
    # Storage
    "TagStore",
    # Policies
    "Policer",
    "Alphabetical",
    "Numerical",
    "SemVer",
    "RegexFilter",
    "PolicyChoice",
    "build_policy",
    # Services
    "FilterSpec",
    "SelectionRule",
    "SelectionService",
    "select_latest",
    # Errors
    "TagReflectorError",
    "PolicyConfigError",
    "EmptyInputError",
    "TagParseError",
    "NoMatchError",
    "DecodeError",
    # Configuration
    "load_config",
    "save_config",
]
