import numpy as np
import pytest

from uncertain_fitting import InvalidSupportError, RiemannSum
from uncertain_fitting.measurements import ratio_with_uncertainty, reading_uncertainty


@pytest.mark.parametrize("resolution", [1.0, 0.5, 10.0])
def test_reading_uncertainty_matches_uniform_width(resolution):
    assert reading_uncertainty(resolution) == pytest.approx(0.2 * resolution / np.sqrt(3.0), rel=1e-9)


def test_reading_uncertainty_span_and_strategy():
    assert reading_uncertainty(1.0, span=1.0) == pytest.approx(1.0 / np.sqrt(12.0), rel=1e-9)
    coarse = reading_uncertainty(1.0, strategy=RiemannSum(n=2000))
    assert coarse == pytest.approx(0.2 / np.sqrt(3.0), rel=1e-2)
    assert reading_uncertainty(1.0, strategy="newton_cotes") == pytest.approx(0.2 / np.sqrt(3.0), rel=1e-9)


@pytest.mark.parametrize("resolution", [0.0, -1.0])
def test_reading_uncertainty_needs_positive_resolution(resolution):
    with pytest.raises(InvalidSupportError):
        reading_uncertainty(resolution)


def test_ratio_with_uncertainty():
    ratio, sigma = ratio_with_uncertainty(1.0, 2.0, 0.05, 0.1)
    assert float(ratio) == pytest.approx(0.5)
    assert float(sigma) == pytest.approx(np.sqrt(0.00125))

    ratio, sigma = ratio_with_uncertainty([-3.0, 4.0], [1.5, 2.0], 0.0, [0.0, 0.0])
    np.testing.assert_allclose(ratio, [2.0, 2.0])
    np.testing.assert_allclose(sigma, [0.0, 0.0])
