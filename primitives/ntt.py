"""Number Theoretic Transform over the BN254 scalar field."""


import galois
import numpy as np

from primitives.field import FF, P, SHIFT, inv_mod

# --- NTT Engine ---

class NTT:
    """NTT engine for polynomial operations over the BN254 scalar field.

    FF is built with primitive element 5, so galois.ntt evaluates on the
    powers of get_omega(n_bits).
    """

    def __init__(self, domain_size: int) -> None:
        """Initialize NTT engine for given domain size."""
        assert domain_size > 0, "Domain size must be positive"
        assert (domain_size & (domain_size - 1)) == 0, "Domain size must be power of 2"

        self.n = domain_size
        self.n_bits = _log2(domain_size)

        # Coset shift arrays (computed lazily)
        self.r: np.ndarray | None = None
        self.r_: np.ndarray | None = None

    def _compute_r(self) -> None:
        """Compute coset shift arrays r[i] = g^i and r_[i] = g^-i."""
        self.r = _precompute_roots(SHIFT, self.n)
        self.r_ = _precompute_roots(inv_mod(SHIFT), self.n)

    def ntt(self, coeffs: np.ndarray) -> np.ndarray:
        """Forward NTT: coefficients -> evaluations on the subgroup."""
        return galois.ntt(self._pad(coeffs))

    def intt(self, evals: np.ndarray) -> np.ndarray:
        """Inverse NTT: evaluations on the subgroup -> coefficients."""
        return galois.intt(self._pad(evals))

    def coset_ntt(self, coeffs: np.ndarray) -> np.ndarray:
        """Evaluate on the coset g*H instead of H."""
        if self.r is None:
            self._compute_r()
        return self.ntt(self._pad(coeffs) * self.r)

    def coset_intt(self, evals: np.ndarray) -> np.ndarray:
        """Interpolate from evaluations on the coset g*H."""
        if self.r_ is None:
            self._compute_r()
        return self.intt(evals) * self.r_

    def vanishing_on_coset(self) -> int:
        """Z_H(x) = x^n - 1 is constant on g*H: returns g^n - 1."""
        return (pow(SHIFT, self.n, P) - 1) % P

    def _pad(self, values: np.ndarray) -> np.ndarray:
        if len(values) > self.n:
            raise ValueError(f"Expected at most {self.n} values, got {len(values)}")
        padded = FF.Zeros(self.n)
        padded[:len(values)] = FF(values)
        return padded


# --- Helpers ---

def _log2(size: int) -> int:
    """Compute log2 of size (must be power of 2)."""
    assert size != 0
    res = 0
    while size != 1:
        size >>= 1
        res += 1
    return res


def _precompute_roots(omega: int, n_roots: int) -> np.ndarray:
    """Precompute powers: roots[k] = omega^k."""
    powers = [1] * n_roots
    for i in range(1, n_roots):
        powers[i] = powers[i - 1] * omega % P
    return FF(powers)
