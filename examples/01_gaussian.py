import logging

import numpy as np

from marquardt import models

logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")

model = models.gaussian()

rng = np.random.default_rng(0)
x = np.arange(1.0, 101.0)
y = model([2000.0, 45.0, 8.0], x) + rng.normal(0.0, 1.0, size=x.size)

res = model.fit((x, y), {"w": 1500.0, "mean": 40.0, "stddev": 10.0})
params, stderr, chi2 = res

print(res.summary())
print("within 3 sigma of truth:", res.within([2000.0, 45.0, 8.0]).all())
print("chi2 below 99% quantile:", res.passes_chi_squared(0.99))
