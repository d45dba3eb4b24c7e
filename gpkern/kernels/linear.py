"""Linear kernel implementation."""

import warnings
from typing import Dict, Optional, Sequence, Union

import jax
import jax.numpy as jnp
import numpy as np
from jaxtyping import Array, Float

from ..data.features import Dataset, get_features
from ..errors import DiagonalOffsetWarning, InvalidConfigurationError
from .base import KernelInstance, check_symmetric
from .parameters import ArrayLike, Constraint, Parameter
from .registry import KernelFamily, construct_kernel, register_family


def linear_eval(
    kernel: KernelInstance,
    data: Dataset,
    newdata: Optional[Dataset] = None,
    diag: bool = False
) -> Float[Array, "n m"]:
    """
    Evaluate a linear kernel.

    k(x, x') = σ² (x - c)ᵀ(x' - c)

    Parameters:
        kernel: Linear KernelInstance (parameters ``sigma`` and ``c``)
        data: Primary dataset, n rows
        newdata: Secondary dataset, m rows; None for self-covariance
        diag: Only compute self-variances

    Returns:
        Covariance matrix of shape (n, m), or an (n, n) diagonal matrix
        when ``diag`` is True
    """
    if diag:
        check_symmetric(newdata)

    x, y = get_features(kernel, data, newdata)

    sigma = kernel.parameters['sigma'].get()
    c = kernel.parameters['c'].get()

    if diag:
        return jnp.diag(_self_variances(x, sigma, c, stacklevel=4))

    # Centre on the offset
    x = x - c
    y = y - c

    return sigma ** 2 * jnp.dot(x, y.T)


def linear_diagonal(
    kernel: KernelInstance,
    data: Dataset
) -> Float[Array, "n"]:
    """
    Self-variances of a linear kernel as a vector.

    Same values as the diagonal of ``kernel(data, diag=True)``.
    """
    x, _ = get_features(kernel, data)
    sigma = kernel.parameters['sigma'].get()
    c = kernel.parameters['c'].get()
    return _self_variances(x, sigma, c, stacklevel=3)


def _self_variances(
    x: Float[Array, "n d"],
    sigma: Float[Array, ""],
    c: Float[Array, "d"],
    stacklevel: int
) -> Float[Array, "n"]:
    # Row sums of squares are taken about zero, not about c; see
    # DiagonalOffsetWarning. stacklevel points the warning at the caller of
    # the public entry point.
    try:
        offset_used = bool(jnp.any(c != 0))
    except jax.errors.ConcretizationTypeError:
        # c is abstract under jit, so there is nothing to compare
        offset_used = False
    if offset_used:
        warnings.warn(
            "Diagonal-only evaluation of the linear kernel ignores the offset c "
            f"(c={np.asarray(c).tolist()}); the values are sigma^2 * ||x||^2 and "
            "differ from the diagonal of the full matrix, sigma^2 * ||x - c||^2.",
            DiagonalOffsetWarning,
            stacklevel=stacklevel
        )

    return sigma ** 2 * jnp.sum(x ** 2, axis=1)


def _linear_defaults(columns: Sequence[str]) -> Dict[str, ArrayLike]:
    return {'sigma': 1.0, 'c': np.zeros(len(columns))}


def _linear_prepare(columns: Sequence[str], values: Dict[str, ArrayLike]) -> Dict[str, ArrayLike]:
    values = dict(values)
    d = len(columns)
    c = values['c']

    if isinstance(c, Parameter):
        if c.shape != (d,):
            raise InvalidConfigurationError(
                f"Offset c must have one entry per column ({d}), got shape {c.shape}"
            )
        return values

    try:
        c = np.asarray(c, dtype=float)
    except (TypeError, ValueError) as e:
        raise InvalidConfigurationError(f"Offset c must be numeric, got {c!r}") from e
    if c.ndim == 0:
        c = np.full(d, float(c))
    if c.shape != (d,):
        raise InvalidConfigurationError(
            f"Offset c must have one entry per column ({d}), got shape {c.shape}"
        )
    values['c'] = c
    return values


LINEAR = KernelFamily(
    name='lin',
    evaluate=linear_eval,
    constraints={'sigma': Constraint.POSITIVE, 'c': Constraint.UNCONSTRAINED},
    defaults=_linear_defaults,
    prepare=_linear_prepare,
)

register_family(LINEAR)


def lin(
    columns: Union[str, Sequence[str]],
    sigma: ArrayLike = 1.0,
    c: Optional[ArrayLike] = None
) -> KernelInstance:
    """
    Construct a linear kernel.

    k(x, x') = σ² (x - c)ᵀ(x' - c)

    where x are the covariates the kernel is active on, c sets the value(s)
    of x through which all realisations pass, and σ² is a prior over the
    slopes of the realisations.

    Parameters:
        columns: Feature column name(s)
        sigma: Positive scale
        c: Offset, one entry per column (a scalar is broadcast); zeros by default

    Returns:
        Callable KernelInstance

    Example:
        k = lin(["temperature", "pressure"])
        K = k(df)
    """
    parameters = {'sigma': sigma}
    if c is not None:
        parameters['c'] = c
    return construct_kernel('lin', columns, **parameters)
