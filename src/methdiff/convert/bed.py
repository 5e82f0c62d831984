import re
from typing import List

import numpy as np
import pandas as pd

from ..call import MethylationCall
from ..constants import STRAND
from ..error import MalformedRecordError

READ_COUNT_PATTERN = re.compile(r'^[^:]*:(\d+)')


def parse_read_count(name: str) -> int:
    """
    pull the number of reads from the name column of a BED line

    Example:
        >>> parse_read_count('CpG:12')
        12
        >>> parse_read_count('CpG:12:4')
        12
    """
    match = READ_COUNT_PATTERN.match(str(name))
    if not match:
        raise ValueError('name does not contain a read count (expected <label>:<reads>)', name)
    return int(match.group(1))


def convert_frame(df: pd.DataFrame, filename: str, line_offset: int = 0) -> List[MethylationCall]:
    """
    Converts the rows of a BED6 file to methylation calls

    Files are expected in the legacy CpG BED format

    Extracted BED Columns
    - chr: chromosome name
    - start: position of the cytosine
    - end: end of the interval
    - name: label ending in the number of reads covering the site (CpG:<reads>)
    - score: fraction of the covering reads which are methylated
    - strand: strand of the site

    The methylated read count is the integer part of score * reads
    """
    try:
        totals = df['name'].apply(parse_read_count).to_numpy(dtype=np.int64)
    except ValueError as err:
        raise MalformedRecordError(f'{filename}: {err}')
    levels = df['score'].to_numpy(dtype=float)
    if np.any((levels < 0) | (levels > 1)):
        line_no = line_offset + int(np.argmax((levels < 0) | (levels > 1))) + 1
        raise MalformedRecordError(
            f'{filename}: methylation level must be between 0 and 1 (line {line_no})'
        )
    methylated = np.floor(levels * totals).astype(np.int64)
    unmethylated = totals - methylated

    calls = []
    for row, meth, unmeth in zip(df.itertuples(index=False), methylated, unmethylated):
        calls.append(
            MethylationCall(
                row.chr,
                row.start,
                int(meth),
                int(unmeth),
                end=row.end,
                strand=row.strand if row.strand in STRAND.values() else STRAND.NS,
                name=row.name,
            )
        )
    return calls
