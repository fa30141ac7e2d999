import numpy as np
import pytest

from uncertain_fitting import (
    DataEntry,
    MonteCarloResult,
    OptimizerError,
    SgdConfig,
    fit_with_std_dev,
    from_arrays,
    models,
)
from uncertain_fitting.montecarlo import perturb

X = np.array([1.0, 2.0, 3.0, 4.0])


def _proportional_data(sigma, k=2.0):
    return from_arrays(X, k * X, uncertainty=sigma)


def test_zero_uncertainty_gives_no_spread():
    res = fit_with_std_dev(_proportional_data(0.0), 20, models.proportional(), 100, SgdConfig(), seed=0)

    assert res.n_trials == 20
    assert res["k"].value == pytest.approx(2.0, abs=1e-6)
    assert res["k"].stderr < 1e-6


def test_trials_start_from_independent_points():
    # With no noise and no iterations the samples are just the random starts.
    res = fit_with_std_dev(_proportional_data(0.0), 50, models.proportional(), 0, seed=1)
    assert np.unique(res.samples[:, 0]).size == 50
    assert 0.5 < res["k"].stderr < 1.5


def test_spread_grows_with_uncertainty():
    sigmas = [0.05, 0.2, 0.8]
    stds = [
        fit_with_std_dev(_proportional_data(s), 50, models.proportional(), 100, SgdConfig(), seed=7)["k"].stderr
        for s in sigmas
    ]

    assert stds[0] < stds[1] < stds[2]
    # slope estimate is linear in the noise, and equal seeds give equal draws
    assert stds[2] / stds[0] == pytest.approx(16.0, rel=1e-4)
    # analytic spread of the least-squares slope: sigma / sqrt(sum x^2)
    assert stds[1] == pytest.approx(0.2 / np.sqrt(30.0), rel=0.35)


def test_x_uncertainty_is_resampled():
    data = [DataEntry(x, 2.0 * x, 0.0, 0.1) for x in X]
    res = fit_with_std_dev(data, 30, models.proportional(), 100, seed=3)
    assert res["k"].stderr > 1e-3


def test_mean_and_std_match_samples():
    res = fit_with_std_dev(_proportional_data(0.3), 25, models.proportional(), 100, seed=11)
    np.testing.assert_allclose(res.mean, res.samples.mean(axis=0))
    np.testing.assert_allclose(res.std_dev, res.samples.std(axis=0, ddof=1))

    res0 = fit_with_std_dev(_proportional_data(0.3), 25, models.proportional(), 100, seed=11, ddof=0)
    np.testing.assert_allclose(res0.std_dev, res0.samples.std(axis=0))


def test_same_seed_is_reproducible_and_worker_independent():
    data = _proportional_data(0.2)
    a = fit_with_std_dev(data, 16, models.proportional(), 100, seed=5)
    b = fit_with_std_dev(data, 16, models.proportional(), 100, seed=5, workers=4)
    c = fit_with_std_dev(data, 16, models.proportional(), 100, seed=6)

    np.testing.assert_array_equal(a.samples, b.samples)
    assert not np.array_equal(a.samples, c.samples)


def test_rng_can_drive_the_streams():
    data = _proportional_data(0.2)
    a = fit_with_std_dev(data, 8, models.proportional(), 50, rng=np.random.default_rng(3))
    b = fit_with_std_dev(data, 8, models.proportional(), 50, rng=np.random.default_rng(3))
    np.testing.assert_array_equal(a.samples, b.samples)

    with pytest.raises(TypeError, match="either seed or rng"):
        fit_with_std_dev(data, 8, models.proportional(), 50, seed=1, rng=np.random.default_rng(3))


def test_two_parameter_model():
    x = np.linspace(0.0, 1.0, 20)
    data = from_arrays(x, 2.0 * x - 1.0, uncertainty=0.05)
    res = fit_with_std_dev(data, 30, models.straight_line(), 1500, SgdConfig(), seed=2, workers=3)

    table = res.as_array()
    assert table.shape == (2, 2)
    assert res["m"].value == pytest.approx(2.0, abs=0.05)
    assert res["b"].value == pytest.approx(-1.0, abs=0.05)
    assert np.all(res.std_dev > 0.0)
    np.testing.assert_allclose(table[:, 0], res.mean)
    np.testing.assert_allclose(table[:, 1], res.std_dev)


def test_exponential_with_noise():
    x = np.arange(10) / 10.0
    data = from_arrays(x, np.exp(0.3 * x), uncertainty=0.01)
    res = fit_with_std_dev(data, 10, models.exponential(), 1000, seed=4)
    assert res["k"].value == pytest.approx(0.3, abs=0.02)
    assert 0.0 < res["k"].stderr < 0.05


@pytest.mark.parametrize("workers", [None, 3])
def test_failed_trial_aborts_the_estimate(workers):
    with pytest.raises(OptimizerError):
        fit_with_std_dev(
            _proportional_data(0.1),
            6,
            models.proportional(),
            500,
            SgdConfig(learning_rate=10.0),
            seed=0,
            workers=workers,
        )


def test_argument_validation():
    data = _proportional_data(0.1)
    with pytest.raises(ValueError, match="trials"):
        fit_with_std_dev(data, 0, models.proportional(), 10)
    with pytest.raises(ValueError, match="workers"):
        fit_with_std_dev(data, 2, models.proportional(), 10, workers=0)
    with pytest.raises(ValueError, match="> 0"):
        fit_with_std_dev(_proportional_data(0.0), 2, models.proportional(), 10, weighting="inverse_variance")


def test_single_trial_warns_and_reports_nan_spread():
    with pytest.warns(UserWarning, match="cannot estimate a spread"):
        res = fit_with_std_dev(_proportional_data(0.1), 1, models.proportional(), 100, seed=0)
    assert np.isnan(res["k"].stderr)
    assert "no spread" in res.summary()


def test_result_access():
    res = fit_with_std_dev(_proportional_data(0.1), 10, models.proportional(), 100, seed=0)
    assert isinstance(res, MonteCarloResult)
    assert len(res) == 1
    assert res[0] == res["k"] == res[-1]
    assert res["k"]["value"] == res["k"].value
    assert res["k"]["stderr"] == res["k"].stderr
    assert set(res.as_dict()) == {"k"}
    with pytest.raises(KeyError):
        res["m"]
    with pytest.raises(IndexError):
        res[3]

    text = res.summary()
    assert "10 trials" in text
    assert "k =" in text


def test_result_as_ufloat():
    pytest.importorskip("uncertainties")
    res = fit_with_std_dev(_proportional_data(0.1), 10, models.proportional(), 100, seed=0)
    u = res["k"].u
    assert u.nominal_value == pytest.approx(res["k"].value)
    assert u.std_dev == pytest.approx(res["k"].stderr)


def test_perturb_leaves_exact_entries_alone():
    rng = np.random.default_rng(0)
    x = np.array([1.0, 2.0, 3.0])
    y = np.array([4.0, 5.0, 6.0])
    xt, yt = perturb(x, y, np.array([0.0, 1.0, 0.0]), np.zeros(3), rng)

    np.testing.assert_array_equal(xt, x)
    assert yt[0] == 4.0 and yt[2] == 6.0
    assert yt[1] != 5.0


def test_spawned_generators_are_independent_and_reproducible():
    from uncertain_fitting.util import spawn_generators

    a = [g.standard_normal(3) for g in spawn_generators(4, seed=9)]
    b = [g.standard_normal(3) for g in spawn_generators(4, seed=9)]
    np.testing.assert_array_equal(np.stack(a), np.stack(b))
    assert len({tuple(v) for v in a}) == 4


def test_summary_hides_rounding_level_spread():
    res = MonteCarloResult(
        param_names=("k",),
        samples=np.array([[123.456], [123.456]]),
        mean=np.array([123.456]),
        std_dev=np.array([1.6e-14]),
    )
    line = res.summary().splitlines()[1]
    assert line.strip() == "k = 123.456 (no spread)"

    zero = fit_with_std_dev(_proportional_data(0.0), 20, models.proportional(), 100, SgdConfig(), seed=0)
    assert "(no spread)" in zero.summary()
