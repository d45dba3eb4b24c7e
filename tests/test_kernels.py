"""Tests for the linear kernel."""

import warnings

import pytest
import jax
import jax.numpy as jnp
import numpy as np
import pandas as pd

from gpkern.errors import DiagonalOffsetWarning, InvalidModeError, MissingColumnError
from gpkern.data.features import feature_matrix
from gpkern.kernels.linear import lin, linear_diagonal


def test_temperature_self_covariance(temperature_data):
    """sigma=1, c=0 on [1, 2, 3] gives the outer product."""
    kernel = lin('temperature', sigma=1.0, c=[0.0])
    K = kernel(temperature_data)

    expected = jnp.array([[1.0, 2.0, 3.0],
                          [2.0, 4.0, 6.0],
                          [3.0, 6.0, 9.0]])
    assert jnp.allclose(K, expected)


def test_temperature_diagonal(temperature_data):
    kernel = lin('temperature', sigma=1.0, c=[0.0])
    K = kernel(temperature_data, diag=True)

    assert jnp.allclose(K, jnp.diag(jnp.array([1.0, 4.0, 9.0])))


def test_temperature_sigma_two(temperature_data):
    """sigma=2 gives four times the sigma=1 matrix."""
    K1 = lin('temperature', sigma=1.0)(temperature_data)
    K2 = lin('temperature', sigma=2.0)(temperature_data)

    assert jnp.allclose(K2, 4.0 * K1, rtol=1e-5)


def test_linear_kernel_properties(lin_kernel, weather_data):
    """Self-covariance should be symmetric positive semi-definite."""
    data, _ = weather_data
    K = lin_kernel(data)

    # Symmetric
    assert jnp.allclose(K, K.T, atol=1e-5)

    # Positive semi-definite (eigenvalues >= 0, up to float32 error)
    eigenvalues = jnp.linalg.eigvalsh(K)
    assert jnp.all(eigenvalues >= -1e-3 * jnp.max(jnp.abs(eigenvalues)))


def test_full_diagonal_matches_definition(lin_kernel, weather_data, weather_columns):
    """Diagonal of the full matrix is sigma^2 * ||x - c||^2."""
    data, _ = weather_data
    K = lin_kernel(data)

    X = feature_matrix(data, weather_columns)
    c = jnp.array([0.5, -1.0, 2.0])
    expected = 1.5 ** 2 * jnp.sum((X - c) ** 2, axis=1)

    assert jnp.allclose(jnp.diag(K), expected, rtol=1e-4)


def test_zero_offset_is_dot_product(weather_data, weather_columns):
    data, newdata = weather_data
    K = lin(weather_columns)(data, newdata)

    X = feature_matrix(data, weather_columns)
    Y = feature_matrix(newdata, weather_columns)
    assert jnp.allclose(K, X @ Y.T, atol=1e-5)


def test_doubling_sigma_quadruples(weather_data, weather_columns):
    data, newdata = weather_data
    c = [0.1, 0.2, 0.3]
    K1 = lin(weather_columns, sigma=0.7, c=c)(data, newdata)
    K2 = lin(weather_columns, sigma=1.4, c=c)(data, newdata)

    assert jnp.allclose(K2, 4.0 * K1, rtol=1e-4, atol=1e-5)


def test_cross_covariance_shape(lin_kernel, weather_data):
    data, newdata = weather_data
    assert lin_kernel(data, newdata).shape == (10, 7)
    assert lin_kernel(newdata, data).shape == (7, 10)


def test_cross_covariance_transposes(lin_kernel, weather_data):
    data, newdata = weather_data
    assert jnp.allclose(lin_kernel(data, newdata), lin_kernel(newdata, data).T, atol=1e-5)


def test_diagonal_shape(lin_kernel, weather_data):
    data, _ = weather_data
    with pytest.warns(DiagonalOffsetWarning):
        K = lin_kernel(data, diag=True)

    assert K.shape == (10, 10)
    assert jnp.allclose(K - jnp.diag(jnp.diag(K)), 0.0)


def test_diagonal_with_newdata_fails(lin_kernel, weather_data):
    data, newdata = weather_data
    with pytest.raises(InvalidModeError):
        lin_kernel(data, newdata, diag=True)


def test_diagonal_ignores_offset(weather_data, weather_columns):
    """
    The diagonal fast path uses sigma^2 * ||x||^2 even when c != 0, and
    warns that it differs from the full matrix diagonal.
    """
    data, _ = weather_data
    c = [0.5, -1.0, 2.0]
    kernel = lin(weather_columns, sigma=1.5, c=c)

    with pytest.warns(DiagonalOffsetWarning):
        K_diag = kernel(data, diag=True)

    X = feature_matrix(data, weather_columns)
    fast = 1.5 ** 2 * jnp.sum(X ** 2, axis=1)
    full = jnp.diag(kernel(data))

    assert jnp.allclose(jnp.diag(K_diag), fast, rtol=1e-4)
    assert not jnp.allclose(jnp.diag(K_diag), full, rtol=1e-4)


def test_diagonal_matches_full_when_offset_zero(weather_data, weather_columns):
    data, _ = weather_data
    kernel = lin(weather_columns, sigma=0.8)

    with warnings.catch_warnings():
        warnings.simplefilter("error", DiagonalOffsetWarning)
        K_diag = kernel(data, diag=True)

    assert jnp.allclose(jnp.diag(K_diag), jnp.diag(kernel(data)), rtol=1e-4)


def test_offset_warning_points_at_caller(lin_kernel, weather_data):
    data, _ = weather_data

    with pytest.warns(DiagonalOffsetWarning) as record:
        lin_kernel(data, diag=True)
    assert record[0].filename == __file__

    with pytest.warns(DiagonalOffsetWarning) as record:
        linear_diagonal(lin_kernel, data)
    assert record[0].filename == __file__


def test_linear_diagonal_vector(temperature_data):
    kernel = lin('temperature', sigma=2.0)
    d = linear_diagonal(kernel, temperature_data)

    assert d.shape == (3,)
    assert jnp.allclose(d, jnp.array([4.0, 16.0, 36.0]), rtol=1e-5)


def test_empty_dataset():
    """Zero-row datasets give empty matrices of the right shape."""
    kernel = lin('temperature')
    empty = pd.DataFrame({'temperature': pd.Series([], dtype=float)})
    data = pd.DataFrame({'temperature': [1.0, 2.0]})

    assert kernel(empty).shape == (0, 0)
    assert kernel(empty, diag=True).shape == (0, 0)
    assert kernel(empty, data).shape == (0, 2)
    assert kernel(data, empty).shape == (2, 0)


def test_missing_column_on_evaluation(temperature_data):
    kernel = lin(['temperature', 'pressure'])
    with pytest.raises(MissingColumnError):
        kernel(temperature_data)


def test_extra_columns_ignored(weather_data):
    """Only the configured columns enter the kernel."""
    data, _ = weather_data
    K = lin('pressure')(data)
    p = data['pressure'].to_numpy()
    assert jnp.allclose(K, np.outer(p, p), atol=1e-5)


def test_parameter_updates_take_effect(temperature_data):
    """Rebinding raw values in place changes later evaluations."""
    kernel = lin('temperature')
    K1 = kernel(temperature_data)

    kernel.parameters['sigma'].set(3.0)
    K2 = kernel(temperature_data)

    assert jnp.allclose(K2, 9.0 * K1, rtol=1e-5)


def test_gradient_wrt_raw_sigma(temperature_data):
    """With sigma = exp(r), dK/dr = 2K."""
    kernel = lin('temperature', sigma=1.3)
    raw_sigma = kernel.raw_parameters()['sigma']

    def total(r):
        return jnp.sum(kernel.with_raw_parameters({'sigma': r})(temperature_data))

    grad = jax.grad(total)(raw_sigma)
    assert jnp.allclose(grad, 2.0 * total(raw_sigma), rtol=1e-4)


def test_diagonal_under_jit(temperature_data):
    """Diagonal evaluation traces when the offset is abstract."""
    kernel = lin('temperature')

    @jax.jit
    def diag_values(c):
        return jnp.diag(kernel.with_raw_parameters({'c': c})(temperature_data, diag=True))

    assert jnp.allclose(diag_values(jnp.array([1.0])), jnp.array([1.0, 4.0, 9.0]))
