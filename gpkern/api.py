"""High-level configuration API for gpkern."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping

import numpy as np

from .errors import InvalidConfigurationError
from .kernels.base import KernelInstance, normalise_columns
from .kernels.registry import construct_kernel, get_family


@dataclass
class KernelConfig:
    """
    Declarative description of a kernel.

    Example usage:

        # Describe the kernel
        config = KernelConfig(
            family="lin",
            columns=["temperature", "pressure"],
            parameters={"sigma": 0.5}
        )

        # Build and evaluate it
        kernel = config.build()
        K = kernel(df)

        # Capture fitted values for later
        fitted = KernelConfig.from_kernel(kernel).to_dict()

    Parameters:
        family: Registered kernel family name
        columns: Feature column name(s)
        parameters: Initial parameter values in the constrained space;
            anything missing takes the family default
    """
    family: str
    columns: List[str]
    parameters: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        """Validate family and columns early."""
        get_family(self.family)
        self.columns = list(normalise_columns(self.columns))
        self.parameters = dict(self.parameters)

    def build(self) -> KernelInstance:
        """Construct the kernel this config describes."""
        return construct_kernel(self.family, self.columns, **self.parameters)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'family': self.family,
            'columns': list(self.columns),
            'parameters': {
                name: np.asarray(value).tolist()
                for name, value in self.parameters.items()
            },
        }

    @classmethod
    def from_dict(cls, config: Mapping[str, Any]) -> 'KernelConfig':
        missing = [key for key in ('family', 'columns') if key not in config]
        if missing:
            raise InvalidConfigurationError(f"Kernel config is missing {missing}")
        return cls(
            family=config['family'],
            columns=config['columns'],
            parameters=config.get('parameters', {})
        )

    @classmethod
    def from_kernel(cls, kernel: KernelInstance) -> 'KernelConfig':
        """Config reproducing ``kernel`` with its current parameter values."""
        return cls(
            family=kernel.family,
            columns=list(kernel.columns),
            parameters={
                name: np.asarray(value)
                for name, value in kernel.parameter_values().items()
            }
        )
