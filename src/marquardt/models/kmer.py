from __future__ import annotations

import numpy as np
import scipy.stats

from ..errors import DomainError
from ..model import Model

# Total mass the model spreads over multiplicities >= 2.
KMER_MASS = 1000.0


def kmer_mixture_func(params, x):
    """Poisson/Gaussian mixture for k-mer multiplicity histograms.

    Error k-mers follow Poisson(lam); genuine k-mers follow N(mean, stddev).
    The mixture is renormalised so that multiplicities >= 2 carry KMER_MASS,
    matching histograms prepared by `histogram_dataset`.
    """
    mix, lam, mean, stddev = params
    if stddev <= 0.0 or lam <= 0.0:
        raise DomainError(
            f"kmer_mixture: lam and stddev must be > 0; got lam={lam}, stddev={stddev}"
        )

    def mass(v):
        return mix * scipy.stats.poisson.pmf(v, lam) + (1.0 - mix) * scipy.stats.norm.pdf(
            v, loc=mean, scale=stddev
        )

    low = mass(0) + mass(1)
    if low >= 1.0:
        raise DomainError("kmer_mixture: no mass left above multiplicity 1.")
    scale = KMER_MASS / (1.0 - low)
    return scale * mass(np.asarray(x, dtype=float))


def kmer_mixture(*, name: str = "kmer coverage") -> Model:
    """Return the k-mer coverage Model.

    Parameters in the model
    -----------------------
    mix    : fraction of error (Poisson) k-mers
    lam    : Poisson rate of the error component (> 0)
    mean   : mean coverage of genuine k-mers
    stddev : coverage spread of genuine k-mers (> 0)
    """
    return Model.from_function(
        kmer_mixture_func, ("mix", "lam", "mean", "stddev"), name=name
    )
