"""
Log-space hypergeometric tail test for comparing methylation between two samples.

Given methylated/unmethylated read counts for a reference and a comparison
sample, the probability that the comparison sample is more methylated than the
reference is the tail of a hypergeometric distribution

    P(k) = C(N1, k) C(N2, n - k) / C(N1 + N2, n)

where N1 = meth_cmp + unmeth_cmp - 1, N2 = meth_ref + unmeth_ref - 1 and
n = meth_ref + meth_cmp - 1, summed over k < meth_cmp. Every term is computed
and accumulated as a log-probability so that large read depths neither
overflow the binomial coefficients nor underflow the individual terms.
"""
import math
from collections import namedtuple
from typing import Iterator, Optional, Tuple

from scipy.special import gammaln

LOG_ZERO: float = 0.0
"""sentinel for an empty log-space sum (no probability mass accumulated yet)"""


def log_sum_log(p: float, q: float) -> float:
    """
    add two probabilities given in log space

    the value 0 is used as the empty sentinel rather than log(1)

    Example:
        >>> round(math.exp(log_sum_log(math.log(0.25), math.log(0.5))), 6)
        0.75
        >>> log_sum_log(0, -1.5)
        -1.5
    """
    if p == LOG_ZERO:
        return q
    elif q == LOG_ZERO:
        return p
    larger = p if p > q else q
    smaller = q if p > q else p
    return larger + math.log1p(math.exp(smaller - larger))


class LogDomainAccumulator:
    """
    running sum of probabilities held as a log-probability
    """

    def __init__(self):
        self.value = LOG_ZERO
        self.terms = 0

    def add(self, log_term: float) -> float:
        self.value = log_sum_log(self.value, log_term)
        self.terms += 1
        return self.value

    def probability(self) -> float:
        """
        the accumulated probability. 0 when no terms were added
        """
        if not self.terms:
            return 0.0
        return min(1.0, max(0.0, math.exp(self.value)))


def ln_choose(n: int, r: int) -> Optional[float]:
    """
    log of the binomial coefficient C(n, r)

    Returns:
        None when r is outside of [0, n], the coefficient is zero

    Example:
        >>> round(ln_choose(5, 2), 6) == round(math.log(10), 6)
        True
        >>> ln_choose(3, 4) is None
        True
    """
    if n < 0 or r < 0 or r > n:
        return None
    return float(gammaln(n + 1) - gammaln(r + 1) - gammaln(n - r + 1))


def _check_totals(meth_ref: int, unmeth_ref: int, meth_cmp: int, unmeth_cmp: int):
    for count in [meth_ref, unmeth_ref, meth_cmp, unmeth_cmp]:
        if count < 0:
            raise ValueError(
                'read counts cannot be negative', meth_ref, unmeth_ref, meth_cmp, unmeth_cmp
            )
    if meth_ref + unmeth_ref < 1 or meth_cmp + unmeth_cmp < 1:
        raise ValueError(
            'each sample requires at least one read (after pseudocounts)',
            meth_ref + unmeth_ref,
            meth_cmp + unmeth_cmp,
        )


def log_hyper_g_greater(
    meth_ref: int, unmeth_ref: int, meth_cmp: int, unmeth_cmp: int, k: int
) -> Optional[float]:
    """
    log-probability of the k-th term of the hypergeometric distribution used by the tail test

    Returns:
        None when any of the binomial coefficients is zero (k outside the support)
    """
    first = ln_choose(meth_cmp + unmeth_cmp - 1, k)
    second = ln_choose(meth_ref + unmeth_ref - 1, meth_ref + meth_cmp - 1 - k)
    whole = ln_choose(meth_ref + unmeth_ref + meth_cmp + unmeth_cmp - 2, meth_ref + meth_cmp - 1)
    if first is None or second is None or whole is None:
        return None
    return first + second - whole


def tail_range(meth_ref: int, unmeth_ref: int, meth_cmp: int, unmeth_cmp: int) -> range:
    """
    values of k summed over by the tail test

    Example:
        >>> tail_range(3, 2, 5, 1)
        range(3, 5)
    """
    return range(max(0, meth_cmp - unmeth_ref), meth_cmp)


def hyper_g_terms(
    meth_ref: int, unmeth_ref: int, meth_cmp: int, unmeth_cmp: int
) -> Iterator[Tuple[int, float]]:
    """
    every non-zero term of the distribution (not only the tail) as (k, log-probability) pairs
    """
    _check_totals(meth_ref, unmeth_ref, meth_cmp, unmeth_cmp)
    upper = min(meth_ref + meth_cmp - 1, meth_cmp + unmeth_cmp - 1)
    for k in range(max(0, meth_cmp - unmeth_ref), upper + 1):
        term = log_hyper_g_greater(meth_ref, unmeth_ref, meth_cmp, unmeth_cmp, k)
        if term is not None:
            yield k, term


def test_greater_population(
    meth_ref: int, unmeth_ref: int, meth_cmp: int, unmeth_cmp: int
) -> float:
    """
    probability that the comparison sample is more methylated than the reference sample

    Args:
        meth_ref: methylated reads of the reference sample
        unmeth_ref: unmethylated reads of the reference sample
        meth_cmp: methylated reads of the comparison sample
        unmeth_cmp: unmethylated reads of the comparison sample

    Returns:
        float: probability between 0 and 1

    Raises:
        ValueError: a count is negative or a sample has no reads

    Note:
        counts are expected to already include any pseudocount
    """
    _check_totals(meth_ref, unmeth_ref, meth_cmp, unmeth_cmp)
    acc = LogDomainAccumulator()
    for k in tail_range(meth_ref, unmeth_ref, meth_cmp, unmeth_cmp):
        term = log_hyper_g_greater(meth_ref, unmeth_ref, meth_cmp, unmeth_cmp, k)
        if term is not None:
            acc.add(term)
    return acc.probability()


class ContingencyTable(
    namedtuple('ContingencyTable', ['meth_a', 'unmeth_a', 'meth_b', 'unmeth_b'])
):
    """
    methylated and unmethylated read counts of two samples at a single position
    """

    @classmethod
    def from_counts(cls, meth_a, unmeth_a, meth_b, unmeth_b, pseudocount=1):
        """
        build the table adding the pseudocount to every cell

        Example:
            >>> ContingencyTable.from_counts(8, 2, 0, 0)
            ContingencyTable(meth_a=9, unmeth_a=3, meth_b=1, unmeth_b=1)
        """
        if pseudocount < 0:
            raise ValueError('pseudocount cannot be negative', pseudocount)
        return cls(
            *[int(count + pseudocount) for count in [meth_a, unmeth_a, meth_b, unmeth_b]]
        )

    @property
    def total_a(self) -> int:
        return self.meth_a + self.unmeth_a

    @property
    def total_b(self) -> int:
        return self.meth_b + self.unmeth_b

    def probability_a_greater(self) -> float:
        """
        probability that sample A is more methylated than sample B (B is used as the reference)
        """
        return test_greater_population(self.meth_b, self.unmeth_b, self.meth_a, self.unmeth_a)
