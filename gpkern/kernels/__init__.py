"""Kernel framework and kernel families for gpkern."""

from .parameters import Constraint, Parameter, constrain, unconstrain, pos, unc
from .base import Kernel, KernelInstance, create_kernel, check_symmetric
from .registry import (
    KernelFamily,
    register_family,
    get_family,
    available_families,
    construct_kernel,
)
from .linear import lin, linear_eval, linear_diagonal

__all__ = [
    "Constraint",
    "Parameter",
    "constrain",
    "unconstrain",
    "pos",
    "unc",
    "Kernel",
    "KernelInstance",
    "create_kernel",
    "check_symmetric",
    "KernelFamily",
    "register_family",
    "get_family",
    "available_families",
    "construct_kernel",
    "lin",
    "linear_eval",
    "linear_diagonal",
]
