"""
gpkern - Parameterised covariance functions for Gaussian-process models

Kernels are built from named feature columns and constrained parameters,
then evaluated on pandas DataFrames with JAX.
"""

__version__ = "0.1.0"

# Errors and warnings
from .errors import (
    KernelError,
    InvalidConfigurationError,
    MissingColumnError,
    TypeMismatchError,
    InvalidModeError,
    DiagonalOffsetWarning,
)

# Data access
from .data.features import Features, get_features

# Kernel framework
from .kernels.parameters import Constraint, Parameter, pos, unc
from .kernels.base import Kernel, KernelInstance, create_kernel
from .kernels.registry import (
    KernelFamily,
    register_family,
    get_family,
    available_families,
    construct_kernel,
)

# Kernel families
from .kernels.linear import lin

# High-level API
from .api import KernelConfig

__all__ = [
    # Version
    "__version__",
    # Errors
    "KernelError",
    "InvalidConfigurationError",
    "MissingColumnError",
    "TypeMismatchError",
    "InvalidModeError",
    "DiagonalOffsetWarning",
    # Data
    "Features",
    "get_features",
    # Framework
    "Constraint",
    "Parameter",
    "pos",
    "unc",
    "Kernel",
    "KernelInstance",
    "create_kernel",
    "KernelFamily",
    "register_family",
    "get_family",
    "available_families",
    "construct_kernel",
    # Families
    "lin",
    # High-level API
    "KernelConfig",
]
