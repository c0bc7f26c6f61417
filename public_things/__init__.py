"""Public Things API - read-only access to concepts and their relationships"""
__version__ = "0.1.0"

# Core types (lightweight - import directly)
from .errors import (
    ThingsError,
    InvalidUUIDError,
    UpstreamError,
    InconsistentDataError,
    BatchResolutionError,
)
from .models import Thing, Concept
from .relationships import RelationshipSet, SUPPORTED_RELATIONSHIPS
from .store import ConceptStore, create_concept_store
from .resolver import ThingResolver, Resolution

__all__ = [
    # Errors
    "ThingsError",
    "InvalidUUIDError",
    "UpstreamError",
    "InconsistentDataError",
    "BatchResolutionError",
    # Models
    "Thing",
    "Concept",
    "RelationshipSet",
    "SUPPORTED_RELATIONSHIPS",
    # Stores and resolution
    "ConceptStore",
    "create_concept_store",
    "ThingResolver",
    "Resolution",
    # Server (lazy)
    "create_app",
    "ThingsAPIServer",
]


def __getattr__(name: str):
    """Lazy loading for the web server so store-only usage doesn't import FastAPI.

    Note: Imported objects are cached in globals() for subsequent access.
    """
    lazy_imports = {
        "create_app": ".api",
        "ThingsAPIServer": ".api",
    }

    if name in lazy_imports:
        import importlib
        module = importlib.import_module(lazy_imports[name], package=__name__)
        value = getattr(module, name)
        globals()[name] = value
        return value

    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
