"""
Core functionality for the formsmith engine.
"""

from .config import FormConfig
from .exceptions import (
    ConfigurationError,
    CyclicDependency,
    DanglingParentReference,
    FormError,
    FormulaEvaluationError,
    PersistenceFailure,
    SchemaDefinitionError,
    SchemaEditError,
    UnresolvedFormulaReference,
    ValidationFailure,
)
from .hooks import ValidationHooks
from .validator import BatchValidationResult, FormValidator, ValidationResult, validate
from .session import FormSession, SubmissionResult
from .builder import FormBuilder

__all__ = [
    'FormConfig',
    'FormError',
    'SchemaEditError',
    'SchemaDefinitionError',
    'CyclicDependency',
    'DanglingParentReference',
    'UnresolvedFormulaReference',
    'FormulaEvaluationError',
    'PersistenceFailure',
    'ConfigurationError',
    'ValidationFailure',
    'ValidationHooks',
    'FormValidator',
    'ValidationResult',
    'BatchValidationResult',
    'validate',
    'FormSession',
    'SubmissionResult',
    'FormBuilder',
]
