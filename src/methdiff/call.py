from collections import namedtuple
from typing import Optional, Tuple

from .constants import CONTEXT_LABEL, LABEL_FORMAT, PROBABILITY_FORMAT, STRAND


class MethylationCall:
    """
    read counts supporting the methylated and unmethylated state of a single
    cytosine. coordinates are given as 0-indexed (BED style)
    """

    chr: str
    start: int
    end: int
    methylated: int
    unmethylated: int
    strand: str
    name: Optional[str]

    @property
    def key(self) -> Tuple[str, int]:
        return (self.chr, self.start)

    def __init__(
        self,
        chr: str,
        start: int,
        methylated: int = 0,
        unmethylated: int = 0,
        end: Optional[int] = None,
        strand: str = STRAND.POS,
        name: Optional[str] = None,
    ):
        """
        Args:
            chr: the chromosome
            start: the position of the cytosine
            methylated: number of reads supporting a methylated call
            unmethylated: number of reads supporting an unmethylated call
            end: end of the BED interval, defaults to start + 1
            strand (STRAND): the strand
            name: the label the call was loaded with

        Examples:
            >>> MethylationCall('chr1', 100, 8, 2)
            >>> MethylationCall('chr1', 100, methylated=8, unmethylated=2, strand='-')
        """
        if methylated < 0 or unmethylated < 0:
            raise ValueError(
                'read counts cannot be negative', chr, start, methylated, unmethylated
            )
        self.chr = str(chr)
        self.start = int(start)
        self.end = self.start + 1 if end is None else int(end)
        self.methylated = int(methylated)
        self.unmethylated = int(unmethylated)
        self.strand = STRAND.enforce(strand)
        self.name = name

    @property
    def total(self) -> int:
        return self.methylated + self.unmethylated

    def same_chrom(self, other) -> bool:
        return self.chr == other.chr

    def __lt__(self, other):
        return self.key < other.key

    def __repr__(self):
        return 'MethylationCall({}:{}{} meth={} unmeth={})'.format(
            self.chr, self.start, self.strand, self.methylated, self.unmethylated
        )

    def __eq__(self, other):
        if not hasattr(other, 'key'):
            return False
        return (self.key, self.methylated, self.unmethylated) == (
            other.key,
            getattr(other, 'methylated', None),
            getattr(other, 'unmethylated', None),
        )


def build_label(
    meth_a: int, unmeth_a: int, meth_b: int, unmeth_b: int, label_format=LABEL_FORMAT.TOTALS
) -> str:
    """
    Builds the name column of an output record from the raw (unadjusted) read counts

    Example:
        >>> build_label(8, 2, 2, 7)
        'CpG:10:9'
        >>> build_label(8, 2, 2, 7, LABEL_FORMAT.COUNTS)
        'CpG:8:2:2:7'
    """
    LABEL_FORMAT.enforce(label_format)
    if label_format == LABEL_FORMAT.COUNTS:
        fields = [meth_a, unmeth_a, meth_b, unmeth_b]
    else:
        fields = [meth_a + unmeth_a, meth_b + unmeth_b]
    return ':'.join([CONTEXT_LABEL] + [str(f) for f in fields])


class DifferentialCall(
    namedtuple('DifferentialCall', ['chr', 'start', 'end', 'label', 'probability'])
):
    """
    the probability that methylation at a position is higher in the first sample than the second
    """

    def __new__(cls, chr, start, end, label, probability):
        if not 0 <= probability <= 1:
            raise ValueError('probability must be between 0 and 1', probability)
        return super(DifferentialCall, cls).__new__(cls, chr, start, end, label, probability)

    def to_bed_line(self) -> str:
        """
        Example:
            >>> DifferentialCall('chr1', 100, 101, 'CpG:10:10', 0.5).to_bed_line()
            'chr1\\t100\\t101\\tCpG:10:10\\t0.5'
        """
        probability = PROBABILITY_FORMAT.format(self.probability)
        return '\t'.join([self.chr, str(self.start), str(self.end), self.label, probability])
