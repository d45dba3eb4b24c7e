"""Base kernel protocol and the generic kernel constructor."""

from types import MappingProxyType
from typing import Callable, Dict, Mapping, Optional, Protocol, Sequence, Tuple, Union, runtime_checkable

import numpy as np
import pandas as pd
from jaxtyping import Array, Float

from ..data.features import Dataset
from ..errors import InvalidConfigurationError, InvalidModeError
from .parameters import ArrayLike, Constraint, Parameter

EvaluateFn = Callable[..., Float[Array, "n m"]]
ParameterSpec = Union[Parameter, Tuple[ArrayLike, Constraint]]


@runtime_checkable
class Kernel(Protocol):
    """Protocol for covariance functions evaluated on tabular data."""

    def __call__(
        self,
        data: Dataset,
        newdata: Optional[Dataset] = None,
        diag: bool = False
    ) -> Float[Array, "n m"]:
        """
        Compute the covariance matrix between ``data`` and ``newdata``.

        Parameters:
            data: Primary dataset, n rows
            newdata: Secondary dataset, m rows; None for self-covariance
            diag: Only compute self-variances (requires newdata=None)

        Returns:
            Covariance matrix of shape (n, m), or (n, n) diagonal matrix
        """
        ...

    @property
    def columns(self) -> Tuple[str, ...]:
        """Feature columns the kernel acts on."""
        ...


class KernelInstance:
    """
    A kernel family bound to feature columns and parameters.

    The family name and columns are fixed for the lifetime of the instance.
    Parameter raw values may be rebound in place by a fitting loop; the
    framework does no locking, so updates must not overlap evaluations.

    Calling the instance delegates to ``evaluate(self, data, newdata, diag)``.

    Parameters:
        family: Kernel family name, e.g. "lin"
        columns: Ordered, unique feature column names
        parameters: Mapping of parameter name to Parameter
        evaluate: Evaluation function of the family
    """

    def __init__(
        self,
        family: str,
        columns: Sequence[str],
        parameters: Mapping[str, Parameter],
        evaluate: EvaluateFn
    ):
        self._family = family
        self._columns = tuple(columns)
        self._parameters: Dict[str, Parameter] = dict(parameters)
        self._evaluate = evaluate

    @property
    def family(self) -> str:
        return self._family

    @property
    def columns(self) -> Tuple[str, ...]:
        return self._columns

    @property
    def parameters(self) -> Mapping[str, Parameter]:
        """Read-only view of the parameters; each Parameter is mutable."""
        return MappingProxyType(self._parameters)

    @property
    def evaluate(self) -> EvaluateFn:
        return self._evaluate

    def __call__(
        self,
        data: Dataset,
        newdata: Optional[Dataset] = None,
        diag: bool = False
    ) -> Float[Array, "n m"]:
        return self._evaluate(self, data, newdata, diag)

    def parameter_values(self) -> Dict[str, Float[Array, "..."]]:
        """Constrained values of all parameters."""
        return {name: p.get() for name, p in self._parameters.items()}

    def raw_parameters(self) -> Dict[str, Float[Array, "..."]]:
        """Raw (optimiser-facing) values of all parameters."""
        return {name: p.raw for name, p in self._parameters.items()}

    def set_raw_parameters(self, raw: Mapping[str, ArrayLike]) -> None:
        """
        Rebind raw values in place.

        Only the names given are updated. Unknown names raise
        InvalidConfigurationError before anything is changed.
        """
        self._check_names(raw)
        for name, value in raw.items():
            self._parameters[name].set_raw(value)

    def with_raw_parameters(self, raw: Mapping[str, ArrayLike]) -> "KernelInstance":
        """
        Copy of this kernel with some raw values replaced.

        The original is left untouched, which makes this the form to use
        inside ``jax.grad`` or when other threads are evaluating.
        """
        self._check_names(raw)
        parameters = {}
        for name, p in self._parameters.items():
            if name in raw:
                parameters[name] = Parameter(raw[name], p.constraint)
            else:
                parameters[name] = p.copy()
        return KernelInstance(self._family, self._columns, parameters, self._evaluate)

    def summary(self) -> pd.DataFrame:
        """Table of parameters with their constraint, raw and constrained values."""
        rows = []
        for name, p in self._parameters.items():
            rows.append({
                'parameter': name,
                'constraint': p.constraint.value,
                'raw': np.asarray(p.raw).tolist(),
                'value': np.asarray(p.get()).tolist(),
            })
        return pd.DataFrame(rows, columns=['parameter', 'constraint', 'raw', 'value'])

    def _check_names(self, raw: Mapping[str, ArrayLike]) -> None:
        unknown = [name for name in raw if name not in self._parameters]
        if unknown:
            raise InvalidConfigurationError(
                f"Unknown parameters {unknown} for '{self._family}' kernel. "
                f"Available: {list(self._parameters)}"
            )

    def __repr__(self) -> str:
        values = ", ".join(
            f"{name}={np.asarray(value).tolist()}"
            for name, value in self.parameter_values().items()
        )
        return f"KernelInstance(family='{self._family}', columns={list(self._columns)}, {values})"


def normalise_columns(columns: Union[str, Sequence[str]]) -> Tuple[str, ...]:
    if isinstance(columns, str):
        columns = [columns]
    try:
        columns = tuple(columns)
    except TypeError:
        raise InvalidConfigurationError(
            f"columns must be a column name or a sequence of names, got {columns!r}"
        ) from None

    if len(columns) == 0:
        raise InvalidConfigurationError("columns must contain at least one column name")
    bad = [c for c in columns if not isinstance(c, str) or c == ""]
    if bad:
        raise InvalidConfigurationError(f"column names must be non-empty strings, got {bad}")
    duplicates = sorted({c for c in columns if columns.count(c) > 1})
    if duplicates:
        raise InvalidConfigurationError(f"columns contain duplicates: {duplicates}")
    return columns


def _build_parameter(name: str, spec: ParameterSpec) -> Parameter:
    if isinstance(spec, Parameter):
        return spec
    if isinstance(spec, tuple) and len(spec) == 2:
        value, constraint = spec
        try:
            constraint = Constraint(constraint)
        except ValueError:
            raise InvalidConfigurationError(
                f"Unknown constraint {constraint!r} for parameter '{name}'"
            ) from None
        return Parameter.make(value, constraint)
    raise InvalidConfigurationError(
        f"Parameter '{name}' must be a Parameter or a (value, constraint) pair, got {spec!r}"
    )


def create_kernel(
    family: str,
    columns: Union[str, Sequence[str]],
    parameters: Mapping[str, ParameterSpec],
    evaluate: EvaluateFn
) -> KernelInstance:
    """
    Bind a kernel family to columns and parameters.

    Parameters:
        family: Family name
        columns: A column name, or an ordered sequence of unique names
        parameters: Parameter name to Parameter, or to (initial value, constraint)
        evaluate: ``evaluate(instance, data, newdata, diag)`` for the family

    Returns:
        Callable KernelInstance

    Raises:
        InvalidConfigurationError: empty or duplicate columns, bad parameter specs
    """
    columns = normalise_columns(columns)
    built = {}
    for name, spec in parameters.items():
        if not isinstance(name, str):
            raise InvalidConfigurationError(f"Parameter names must be strings, got {name!r}")
        built[name] = _build_parameter(name, spec)
    return KernelInstance(family, columns, built, evaluate)


def check_symmetric(newdata: Optional[Dataset]) -> None:
    """Diagonal-only evaluation is only defined for self-covariance."""
    if newdata is not None:
        raise InvalidModeError(
            "diag=True requires newdata=None; the diagonal of a "
            "cross-covariance matrix is not defined"
        )
