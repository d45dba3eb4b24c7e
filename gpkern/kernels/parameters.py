"""Constrained kernel parameters."""

from __future__ import annotations

from enum import Enum
from typing import Union

import jax.numpy as jnp
import numpy as np
from jax.tree_util import register_pytree_node_class
from jaxtyping import Array, Float

from ..errors import InvalidConfigurationError

ArrayLike = Union[float, int, np.ndarray, Array, list, tuple]


class Constraint(str, Enum):
    """Domain a parameter's value must stay in."""

    UNCONSTRAINED = "unconstrained"
    POSITIVE = "positive"


def _as_float_array(value: ArrayLike) -> Float[Array, "..."]:
    try:
        array = np.asarray(value)
    except (TypeError, ValueError) as e:
        raise InvalidConfigurationError(f"Parameter value must be numeric, got {value!r}") from e
    if array.dtype.kind not in "iuf":
        raise InvalidConfigurationError(
            f"Parameter value must be real-valued numeric, got {value!r} (dtype {array.dtype})"
        )
    return jnp.asarray(array.astype(float))


def constrain(constraint: Constraint, raw: Float[Array, "..."]) -> Float[Array, "..."]:
    """
    Map a raw (working) value onto the constrained domain.

    POSITIVE uses exp, a smooth increasing bijection from the reals onto the
    positive reals, so any raw value an optimiser proposes stays valid.
    exp underflows to zero for very negative raw values, so the result is
    floored at the smallest normal float of its dtype.
    Applied elementwise to vectors.
    """
    if constraint is Constraint.POSITIVE:
        return jnp.maximum(jnp.exp(raw), jnp.finfo(jnp.result_type(raw, float)).tiny)
    return raw


def unconstrain(constraint: Constraint, value: Float[Array, "..."]) -> Float[Array, "..."]:
    """Inverse of :func:`constrain`."""
    if constraint is Constraint.POSITIVE:
        return jnp.log(value)
    return value


@register_pytree_node_class
class Parameter:
    """
    A kernel hyperparameter stored as a raw value plus its constraint.

    The raw value is what an external optimiser works on and may be rebound
    freely; ``get()`` always returns a value inside the constraint's domain.

    Parameters:
        raw: Working (unconstrained) value, scalar or vector
        constraint: Constraint applied by ``get()``
    """

    def __init__(self, raw: ArrayLike, constraint: Constraint = Constraint.UNCONSTRAINED):
        self.raw = raw if _is_array(raw) else _as_float_array(raw)
        self.constraint = Constraint(constraint)

    @classmethod
    def make(cls, initial_value: ArrayLike, constraint: Constraint) -> "Parameter":
        """
        Build a parameter from a value given in the constrained space.

        Parameters:
            initial_value: Starting value, e.g. sigma=1.0
            constraint: Constraint for this parameter

        Returns:
            Parameter whose ``get()`` returns ``initial_value``
        """
        constraint = Constraint(constraint)
        value = _as_float_array(initial_value)
        if constraint is Constraint.POSITIVE and not bool(jnp.all(value > 0)):
            raise InvalidConfigurationError(
                f"Positive parameter needs a value > 0, got {np.asarray(initial_value).tolist()}"
            )
        return cls(unconstrain(constraint, value), constraint)

    def get(self) -> Float[Array, "..."]:
        """Current constrained value."""
        return constrain(self.constraint, self.raw)

    @property
    def value(self) -> Float[Array, "..."]:
        return self.get()

    @property
    def shape(self):
        return jnp.shape(self.raw)

    def set_raw(self, raw: ArrayLike) -> None:
        """Rebind the working value (what a fitting loop updates)."""
        raw = raw if _is_array(raw) else _as_float_array(raw)
        if jnp.shape(raw) != self.shape:
            raise InvalidConfigurationError(
                f"Raw value has shape {jnp.shape(raw)}, expected {self.shape}"
            )
        self.raw = raw

    def set(self, value: ArrayLike) -> None:
        """Rebind through the inverse transform, from a constrained value."""
        self.set_raw(Parameter.make(value, self.constraint).raw)

    def copy(self) -> "Parameter":
        return Parameter(self.raw, self.constraint)

    def tree_flatten(self):
        return (self.raw,), self.constraint

    @classmethod
    def tree_unflatten(cls, aux, children):
        obj = object.__new__(cls)
        obj.raw = children[0]
        obj.constraint = aux
        return obj

    def __repr__(self) -> str:
        return f"Parameter(value={np.asarray(self.get()).tolist()}, constraint={self.constraint.value})"


def _is_array(value) -> bool:
    # leaves passed through jax transformations are tracers, not numpy data
    return hasattr(value, "shape") and hasattr(value, "dtype") and not isinstance(value, np.ndarray)


def pos(value: ArrayLike = 1.0) -> Parameter:
    """Positive parameter with initial value ``value``."""
    return Parameter.make(value, Constraint.POSITIVE)


def unc(value: ArrayLike = 0.0) -> Parameter:
    """Unconstrained parameter with initial value ``value``."""
    return Parameter.make(value, Constraint.UNCONSTRAINED)
