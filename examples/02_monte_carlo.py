import numpy as np
import matplotlib.pyplot as plt

from uncertain_fitting import SgdConfig, fit_with_std_dev, from_arrays, models, plot_fit

rng = np.random.default_rng(0)
x = np.arange(10) / 10.0
sigma = 0.02
y = np.exp(0.3 * x) + rng.normal(0.0, sigma, size=x.size)

data = from_arrays(x, y, uncertainty=sigma)
model = models.exponential()

res = fit_with_std_dev(data, 10, model, 1000, SgdConfig(), seed=1, workers=4)
print(res.summary())
print(res.as_array())

fig, ax = plot_fit(data, model, res, show_params=True)
ax.set_xlabel("x")
ax.set_ylabel("y")
ax.legend()
plt.show()
