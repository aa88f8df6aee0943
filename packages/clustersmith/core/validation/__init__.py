"""Validation collaborators.

Pure functions from a config document to a list of field-scoped errors.
Assets call them during generate and raise ``InvalidConfigError`` on any
non-empty result.
"""

from clustersmith.core.validation.field import (
    ErrorType,
    FieldError,
    FieldErrorList,
    FieldPath,
    from_validation_error,
)
from clustersmith.core.validation.installconfig import (
    PLATFORM_VALIDATORS,
    Validator,
    validate_aws,
    validate_common,
    validate_gcp,
    validate_install_config,
)

__all__ = [
    "ErrorType",
    "FieldError",
    "FieldErrorList",
    "FieldPath",
    "PLATFORM_VALIDATORS",
    "from_validation_error",
    "Validator",
    "validate_aws",
    "validate_common",
    "validate_gcp",
    "validate_install_config",
]
