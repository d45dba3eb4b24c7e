"""Feature extraction from tabular datasets."""

from typing import Mapping, NamedTuple, Optional, Sequence, Union

import jax.numpy as jnp
import numpy as np
import pandas as pd
from jaxtyping import Array, Float

from ..errors import MissingColumnError, TypeMismatchError

Dataset = Union[pd.DataFrame, Mapping[str, Sequence[float]]]


class Features(NamedTuple):
    """Feature matrices for one kernel evaluation."""
    x: Float[Array, "n d"]  # rows of the primary dataset
    y: Float[Array, "m d"]  # rows of the secondary dataset, or x itself


def column_values(data: Dataset, name: str) -> np.ndarray:
    """
    Look up a single numeric column by name.

    Parameters:
        data: DataFrame or mapping of column name to values
        name: Column to look up

    Returns:
        1-d float array with one entry per row

    Raises:
        MissingColumnError: ``name`` is not a column of ``data``
        TypeMismatchError: the column is not numeric
    """
    if isinstance(data, pd.DataFrame):
        if name not in data.columns:
            raise MissingColumnError(name, data.columns)
        series = data[name]
        if isinstance(series, pd.DataFrame):
            raise TypeMismatchError(f"Column '{name}' is duplicated in data")
        # pandas gives empty columns object dtype
        if len(series) == 0:
            return np.zeros(0)
        if (
            pd.api.types.is_bool_dtype(series)
            or pd.api.types.is_complex_dtype(series)
            or not pd.api.types.is_numeric_dtype(series)
        ):
            raise TypeMismatchError(
                f"Column '{name}' must be real-valued numeric, got dtype {series.dtype}"
            )
        return series.to_numpy(dtype=float)

    if isinstance(data, Mapping):
        if name not in data:
            raise MissingColumnError(name, data.keys())
        values = np.asarray(data[name])
        if values.ndim != 1:
            raise TypeMismatchError(
                f"Column '{name}' must be one-dimensional, got shape {values.shape}"
            )
        # an empty list comes back as float64, so zero-row columns pass
        if values.dtype.kind not in "iuf":
            raise TypeMismatchError(
                f"Column '{name}' must be numeric, got dtype {values.dtype}"
            )
        return values.astype(float)

    raise TypeMismatchError(
        f"Unsupported dataset type {type(data).__name__}; "
        "expected a pandas DataFrame or a mapping of columns"
    )


def feature_matrix(data: Dataset, columns: Sequence[str]) -> Float[Array, "n d"]:
    """
    Stack the selected columns of ``data`` into an (n, d) matrix.

    Columns appear in the order given. A dataset with no rows gives a
    (0, d) matrix.
    """
    values = [column_values(data, name) for name in columns]

    lengths = {len(v) for v in values}
    if len(lengths) > 1:
        raise ValueError(
            f"Columns {list(columns)} have different lengths: {[len(v) for v in values]}"
        )

    return jnp.asarray(np.stack(values, axis=1))


def get_features(
    kernel,
    data: Dataset,
    newdata: Optional[Dataset] = None
) -> Features:
    """
    Extract the kernel's feature columns from one or two datasets.

    When ``newdata`` is None this is a self-covariance evaluation and ``y``
    is ``x``. An empty ``newdata`` is still a second dataset.

    Parameters:
        kernel: Anything with a ``columns`` attribute (usually a KernelInstance)
        data: Primary dataset
        newdata: Optional secondary dataset

    Returns:
        Features(x, y)
    """
    x = feature_matrix(data, kernel.columns)
    if newdata is None:
        return Features(x, x)
    return Features(x, feature_matrix(newdata, kernel.columns))
