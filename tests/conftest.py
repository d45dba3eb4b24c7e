"""Shared fixtures for tests."""

import pytest
import jax.random as random
import numpy as np
import pandas as pd

from gpkern.kernels.linear import lin


@pytest.fixture
def rng_key():
    """Random number generator key."""
    return random.PRNGKey(42)


@pytest.fixture
def temperature_data():
    """Three observations of a single feature."""
    return pd.DataFrame({'temperature': [1.0, 2.0, 3.0]})


@pytest.fixture
def weather_data(rng_key):
    """Two datasets over the same columns with different row counts."""
    key1, key2 = random.split(rng_key)
    X = np.asarray(random.normal(key1, (10, 3)))
    Y = np.asarray(random.normal(key2, (7, 3)))
    columns = ['temperature', 'pressure', 'humidity']

    data = pd.DataFrame(X, columns=columns)
    data['station'] = [f"station_{i}" for i in range(len(data))]
    newdata = pd.DataFrame(Y, columns=columns)
    return data, newdata


@pytest.fixture
def weather_columns():
    return ['temperature', 'pressure', 'humidity']


@pytest.fixture
def lin_kernel(weather_columns):
    """Linear kernel with a non-trivial scale and offset."""
    return lin(weather_columns, sigma=1.5, c=[0.5, -1.0, 2.0])
