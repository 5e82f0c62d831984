"""
pairs the methylation calls of two sorted samples by position and scores each pair
"""
from typing import Iterable, Iterator, Optional

from .call import DifferentialCall, MethylationCall, build_label
from .constants import DEFAULTS, LABEL_FORMAT
from .stats import ContingencyTable
from .util import logger


class SortedPositionMerge:
    """
    walks two position-sorted sequences of methylation calls with a single forward
    cursor into the second sequence. Both inputs must share the same ordering
    (chromosome name, then start). The cursor never moves backwards, so each input
    is read exactly once

    Attributes:
        cursor: number of calls consumed from the second sequence
        matched: number of positions found in both sequences
        emitted: number of differential calls produced
        skipped: number of positions of the first sequence which were not reported
    """

    def __init__(
        self,
        calls_a: Iterable[MethylationCall],
        calls_b: Iterable[MethylationCall],
        pseudocount: float = DEFAULTS.pseudocount,
        all_loci: bool = DEFAULTS.all_loci,
        label_format: str = DEFAULTS.label_format,
    ):
        if pseudocount < 0:
            raise ValueError('pseudocount cannot be negative', pseudocount)
        self.calls_a = calls_a
        self.calls_b = calls_b
        self.pseudocount = pseudocount
        self.all_loci = all_loci
        self.label_format = LABEL_FORMAT.enforce(label_format)
        self.cursor = 0
        self.matched = 0
        self.emitted = 0
        self.skipped = 0

    def _score(
        self, call_a: MethylationCall, meth_b: int, unmeth_b: int
    ) -> Optional[DifferentialCall]:
        table = ContingencyTable.from_counts(
            call_a.methylated, call_a.unmethylated, meth_b, unmeth_b, self.pseudocount
        )
        if not table.total_a or not table.total_b:
            logger.debug(f'no reads after pseudocounts at {call_a.chr}:{call_a.start}')
            return None
        return DifferentialCall(
            call_a.chr,
            call_a.start,
            call_a.end,
            build_label(
                call_a.methylated, call_a.unmethylated, meth_b, unmeth_b, self.label_format
            ),
            table.probability_a_greater(),
        )

    def __iter__(self) -> Iterator[DifferentialCall]:
        iter_b = iter(self.calls_b)
        current_b = next(iter_b, None)
        last_chr = None

        for call_a in self.calls_a:
            if call_a.chr != last_chr:
                logger.info(f'[PROCESSING] {call_a.chr}')
                last_chr = call_a.chr

            while current_b is not None and current_b.key < call_a.key:
                current_b = next(iter_b, None)
                self.cursor += 1

            result = None
            if current_b is not None and current_b.key == call_a.key:
                self.matched += 1
                if self.all_loci or (call_a.total > 0 and current_b.total > 0):
                    result = self._score(call_a, current_b.methylated, current_b.unmethylated)
            elif self.all_loci:
                result = self._score(call_a, 0, 0)

            if result is None:
                self.skipped += 1
            else:
                self.emitted += 1
                yield result


def merge_calls(
    calls_a: Iterable[MethylationCall],
    calls_b: Iterable[MethylationCall],
    pseudocount: float = DEFAULTS.pseudocount,
    all_loci: bool = DEFAULTS.all_loci,
    label_format: str = DEFAULTS.label_format,
) -> Iterator[DifferentialCall]:
    """
    compute the probability that methylation is higher in the first sample for each of its positions

    Args:
        calls_a: sorted calls of the first sample
        calls_b: sorted calls of the second sample
        pseudocount: added to each read count of both samples before testing
        all_loci: report positions without coverage in one or both samples
        label_format (LABEL_FORMAT): content of the name column of the output

    Returns:
        the differential calls, in the order of the first sample
    """
    return iter(SortedPositionMerge(calls_a, calls_b, pseudocount, all_loci, label_format))
