"""
formsmith - Dynamic Form Schema Engine

Build form schemas with typed fields, validation rules and derived fields,
store them, and validate submissions with dependency-aware derivation.
"""

# Import main classes for clean public API
from .core import (
    FormBuilder,
    FormConfig,
    FormError,
    FormSession,
    FormValidator,
    PersistenceFailure,
    SchemaDefinitionError,
    ValidationHooks,
    ValidationResult,
    validate,
)
from .schemas import FieldDefinition, FormSchema, ValidationRules
from .storage import InMemorySchemaStore, SQLiteSchemaStore, create_store

__version__ = "0.1.0"

__all__ = [
    'FieldDefinition',
    'ValidationRules',
    'FormSchema',
    'FormBuilder',
    'FormSession',
    'FormValidator',
    'ValidationResult',
    'ValidationHooks',
    'FormConfig',
    'FormError',
    'SchemaDefinitionError',
    'PersistenceFailure',
    'InMemorySchemaStore',
    'SQLiteSchemaStore',
    'create_store',
    'validate',
]
