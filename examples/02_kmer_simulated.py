import numpy as np

from marquardt import LevenbergMarquardt, models

model = models.kmer_mixture()
true = [0.6, 1.2, 120.0, 25.0]

rng = np.random.default_rng(7)
x = np.arange(2.0, 301.0)
y = model(true, x)
y = y + rng.normal(0.0, 0.01 * np.sqrt(y) + 1e-3, size=x.size)

# Drive the iteration by hand to watch the damping adapt.
solver = LevenbergMarquardt(model, [0.5, 1.0, 100.0, 30.0], (x, y))
st = solver.start()
while not st.terminal:
    st = solver.advance(st)
    print(f"iter {st.iteration:3d}  objective {st.objective:.6g}  lambda {st.damping:.1e}")
print(st.state.value, "-", st.reason)

res = solver.evaluate()
for name, (value, err) in res.named().items():
    print(f"{name:>7s} = {value:.5g} +/- {err:.2g}")
