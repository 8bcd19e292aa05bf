import numpy as np

from marquardt import fit_many, models

model = models.gaussian()
rng = np.random.default_rng(1)
x = np.arange(1.0, 81.0)

means = [20.0, 32.0, 44.0, 56.0]
datasets = [(x, model([300.0, m, 5.0], x) + rng.normal(0.0, 0.5, size=x.size)) for m in means]
# One dataset too short to constrain three parameters.
datasets.append([(1.0, 0.0), (2.0, 1.0)])

for item in fit_many(model, datasets, {"w": 250.0, "mean": 38.0, "stddev": 12.0}):
    if item.success:
        mean, err = item.result.named()["mean"]
        print(f"dataset {item.index}: mean = {mean:.3f} +/- {err:.3f}")
    else:
        print(f"dataset {item.index}: {type(item.error).__name__}: {item.error}")
