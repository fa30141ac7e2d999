import numpy as np

from uncertain_fitting import Model, SgdConfig, fit, loss, models

# y = k x through the origin, k = -2
dataset = [(0.0, 0.0), (1.0, -2.0), (3.0, -6.0), (4.0, -8.0)]
model = models.proportional()

k = fit(dataset, model, 100, SgdConfig(learning_rate=1e-2))
print("k =", k[0], " loss =", loss(dataset, model, k))

# Same fit with momentum; a numeric gradient is used when none is supplied.
numeric = Model.from_function(lambda x, k: k * x, name="numeric line")
k_momentum = fit(dataset, numeric, 100, SgdConfig(learning_rate=1e-2, momentum=("nesterov", 0.5)))
print("k (nesterov, numeric gradient) =", k_momentum[0])

assert np.isclose(k[0], -2.0, atol=1e-6)
