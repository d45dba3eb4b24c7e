"""Registry of kernel families, looked up by name."""

from dataclasses import dataclass
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Union

from ..errors import InvalidConfigurationError
from .base import EvaluateFn, KernelInstance, normalise_columns, create_kernel
from .parameters import ArrayLike, Constraint, Parameter


@dataclass(frozen=True)
class KernelFamily:
    """
    Everything needed to construct kernels of one family.

    Attributes:
        name: Registry key, e.g. "lin"
        evaluate: ``evaluate(instance, data, newdata, diag)``
        constraints: Parameter name to Constraint
        defaults: ``defaults(columns)`` giving the initial value of every parameter
        prepare: Optional ``prepare(columns, values)`` that checks and reshapes
            the merged initial values before parameters are built
    """
    name: str
    evaluate: EvaluateFn
    constraints: Mapping[str, Constraint]
    defaults: Callable[[Sequence[str]], Dict[str, ArrayLike]]
    prepare: Optional[Callable[[Sequence[str], Dict[str, ArrayLike]], Dict[str, ArrayLike]]] = None


_REGISTRY: Dict[str, KernelFamily] = {}


def register_family(family: KernelFamily, override: bool = False) -> None:
    if family.name in _REGISTRY and not override:
        raise InvalidConfigurationError(
            f"Kernel family '{family.name}' already registered. "
            f"Use override=True to replace."
        )
    _REGISTRY[family.name] = family


def get_family(name: str) -> KernelFamily:
    try:
        return _REGISTRY[name]
    except KeyError:
        raise InvalidConfigurationError(
            f"Unknown kernel family '{name}'. "
            f"Available: {available_families()}"
        ) from None


def available_families() -> List[str]:
    return sorted(_REGISTRY)


def construct_kernel(
    family: str,
    columns: Union[str, Sequence[str]],
    **initial_parameters: ArrayLike
) -> KernelInstance:
    """
    Construct a kernel of a registered family.

    Parameters not given take the family's defaults. Values are in the
    constrained space (e.g. ``sigma=2.0``); a ready-made Parameter is used
    as is.

    Example:
        k = construct_kernel("lin", ["temperature", "pressure"], sigma=0.5)
    """
    spec = get_family(family)
    columns = normalise_columns(columns)

    unknown = [name for name in initial_parameters if name not in spec.constraints]
    if unknown:
        raise InvalidConfigurationError(
            f"Unknown parameters {unknown} for '{family}' kernel. "
            f"Available: {list(spec.constraints)}"
        )

    values = dict(spec.defaults(columns))
    values.update(initial_parameters)
    if spec.prepare is not None:
        values = spec.prepare(columns, values)

    parameters = {}
    for name, constraint in spec.constraints.items():
        value = values[name]
        if isinstance(value, Parameter):
            if value.constraint is not constraint:
                raise InvalidConfigurationError(
                    f"Parameter '{name}' of '{family}' kernel must be {constraint.value}, "
                    f"got {value.constraint.value}"
                )
            parameters[name] = value
        else:
            parameters[name] = (value, constraint)

    return create_kernel(spec.name, columns, parameters, spec.evaluate)
