from .gaussian import gaussian, gaussian_func
from .kmer import kmer_mixture, kmer_mixture_func

__all__ = ["gaussian", "gaussian_func", "kmer_mixture", "kmer_mixture_func"]
