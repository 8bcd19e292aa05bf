import matplotlib.pyplot as plt
import numpy as np

from marquardt import models
from marquardt.plotting import plot_fit

model = models.gaussian()

rng = np.random.default_rng(3)
x = np.arange(1.0, 81.0)
y = model([600.0, 35.0, 6.0], x) + rng.normal(0.0, 0.8, size=x.size)

res = model.fit((x, y), [500.0, 30.0, 8.0])
print(res.summary())

fig, (ax, rax) = plot_fit(
    x=x,
    y=y,
    model=model,
    result=res,
    residuals=True,
    show_params=True,
    line_kwargs={"color": "C3"},
)
ax.set_ylabel("count")
rax.set_xlabel("multiplicity")
plt.show()
