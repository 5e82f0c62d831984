from typing import List

import numpy as np
import pandas as pd

from ..call import MethylationCall
from ..constants import STRAND
from ..error import MalformedRecordError


def convert_frame(df: pd.DataFrame, filename: str, line_offset: int = 0) -> List[MethylationCall]:
    """
    Converts the rows of a methylation-count file to methylation calls

    Extracted Columns
    - chr: chromosome name
    - start: position of the cytosine
    - strand: strand of the site
    - context: sequence context (ex. CpG)
    - level: fraction of the covering reads which are methylated
    - reads: number of reads covering the site

    The methylated read count is level * reads rounded to the nearest integer
    """
    totals = df['reads'].to_numpy(dtype=np.int64)
    levels = df['level'].to_numpy(dtype=float)
    invalid = (levels < 0) | (levels > 1) | (totals < 0)
    if np.any(invalid):
        line_no = line_offset + int(np.argmax(invalid)) + 1
        raise MalformedRecordError(
            f'{filename}: expected a methylation level between 0 and 1 and a non-negative '
            f'read count (line {line_no})'
        )
    methylated = np.floor(levels * totals + 0.5).astype(np.int64)
    unmethylated = totals - methylated

    calls = []
    for row, meth, unmeth in zip(df.itertuples(index=False), methylated, unmethylated):
        calls.append(
            MethylationCall(
                row.chr,
                row.start,
                int(meth),
                int(unmeth),
                strand=row.strand if row.strand in STRAND.values() else STRAND.NS,
                name=row.context,
            )
        )
    return calls
