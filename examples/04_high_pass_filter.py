import numpy as np
import matplotlib.pyplot as plt

from uncertain_fitting import (
    SgdConfig,
    fit_with_std_dev,
    from_arrays,
    models,
    plot_fit,
    ratio_with_uncertainty,
    reading_uncertainty,
)

# Units: w in 1e4 rad/s, rc in 1e-4 s, so R = 1 kOhm, C = 100 nF gives rc = 1.
RC_TRUE = 1.0
hp = models.high_pass_filter()

rng = np.random.default_rng(0)
f_hz = np.geomspace(100.0, 8000.0, 12)
w = 2.0 * np.pi * f_hz / 1e4

# Oscilloscope readings in divisions, quantised to 0.2 div.
u_in_res = 1.0  # V/div
u_out_res = np.where(hp.eval(w, [RC_TRUE]) < 0.3, 0.2, 1.0)
u_in_div = np.full(w.shape, 4.0)
true_out = hp.eval(w, [RC_TRUE]) * u_in_div * u_in_res
u_out_div = np.round((true_out / u_out_res + rng.normal(0.0, 0.03, w.size)) * 5.0) / 5.0

u_in = u_in_div * u_in_res
u_out = u_out_div * u_out_res
alpha, alpha_sigma = ratio_with_uncertainty(
    u_out,
    u_in,
    np.array([reading_uncertainty(r) for r in u_out_res]),
    reading_uncertainty(u_in_res),
)

data = from_arrays(w, alpha, uncertainty=alpha_sigma)
res = fit_with_std_dev(data, 40, hp, 3000, SgdConfig(learning_rate=1e-2), seed=0, workers=4)
print(res.summary())
print("closed-form rc:", models.rc_from_gain(w, alpha))
print(f"rc = {res['rc'].value * 1e-4:.3e} s +/- {res['rc'].stderr * 1e-4:.1e} s (R*C = 1.0e-04 s)")

wg = np.geomspace(w.min(), w.max() * 2, 400)
fig, ax = plot_fit(data, hp, res, xg=wg, show_params=True)
ax.plot(wg, hp.eval(wg, [RC_TRUE]), "k:", lw=1, label="R*C")
ax.set_xscale("log")
ax.set_xlabel("w [1e4 rad/s]")
ax.set_ylabel("alpha")
ax.legend()
plt.show()
