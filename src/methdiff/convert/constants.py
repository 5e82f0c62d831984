from ..constants import MethdiffNamespace


INPUT_FORMAT = MethdiffNamespace(BED='bed', METH='meth')
"""
Supported encodings of per-position methylation counts

Attributes:
    BED: BED6, the name holds the read count (``CpG:<reads>``) and the score the methylation level
    METH: methylation-count format, ``chrom pos strand context level reads``
"""

BED_COLUMNS = ['chr', 'start', 'end', 'name', 'score', 'strand']
METH_COLUMNS = ['chr', 'start', 'strand', 'context', 'level', 'reads']

CHUNK_SIZE: int = 100000
"""number of lines read at a time from an input file"""
