from collections import namedtuple
from typing import Iterable, Iterator, List, Optional

import numpy as np
import pandas as pd

from ..call import MethylationCall
from ..constants import STRAND
from ..error import MalformedRecordError, UnknownFileTypeError
from ..util import logger
from .bed import convert_frame as _convert_bed_frame
from .constants import BED_COLUMNS, CHUNK_SIZE, INPUT_FORMAT, METH_COLUMNS
from .meth import convert_frame as _convert_meth_frame


def _is_int(value: str) -> bool:
    try:
        int(value)
    except ValueError:
        return False
    return True


def detect_file_type(filename: str) -> str:
    """
    Guess the encoding of an input file from its first data line

    Raises:
        UnknownFileTypeError: the line matches none of the supported formats
    """
    with open(filename, 'r') as fh:
        for line in fh:
            if not line.strip() or line.startswith('#'):
                continue
            fields = line.split()
            if len(fields) >= 6 and _is_int(fields[1]) and _is_int(fields[2]) and ':' in fields[3]:
                return INPUT_FORMAT.BED
            if len(fields) >= 6 and _is_int(fields[1]) and fields[2] in STRAND.values():
                return INPUT_FORMAT.METH
            raise UnknownFileTypeError(
                f'{filename}: could not determine the input format from the line: {line.strip()}'
            )
    logger.warning(f'no records found in {filename}, assuming {INPUT_FORMAT.BED}')
    return INPUT_FORMAT.BED


def iter_calls(
    filename: str, file_type: Optional[str] = None, chunksize: int = CHUNK_SIZE
) -> Iterator[MethylationCall]:
    """
    Reads the methylation calls of an input file lazily, chunksize lines at a time

    Args:
        filename: path to the input file
        file_type (INPUT_FORMAT): encoding of the file, detected from the content when not given
    """
    if file_type is None:
        file_type = detect_file_type(filename)
    INPUT_FORMAT.enforce(file_type)

    if file_type == INPUT_FORMAT.BED:
        columns = BED_COLUMNS
        dtype = {'chr': str, 'start': np.int64, 'end': np.int64, 'name': str, 'score': float}
        convert_frame = _convert_bed_frame
    else:
        columns = METH_COLUMNS
        dtype = {'chr': str, 'start': np.int64, 'context': str, 'level': float, 'reads': np.int64}
        convert_frame = _convert_meth_frame

    try:
        reader = pd.read_csv(
            filename,
            sep=r'\s+',
            header=None,
            names=columns,
            usecols=range(len(columns)),
            comment='#',
            dtype={**dtype, 'strand': str},
            chunksize=chunksize,
        )
        line_offset = 0
        for df in reader:
            yield from convert_frame(df, filename, line_offset)
            line_offset += df.shape[0]
    except pd.errors.EmptyDataError:
        return
    except (ValueError, TypeError) as err:
        raise MalformedRecordError(f'{filename}: {err}')


def read_calls(filename: str, file_type: Optional[str] = None) -> List[MethylationCall]:
    logger.info(f'loading: {filename}')
    calls = list(iter_calls(filename, file_type))
    logger.info(f'loaded {len(calls)} methylation calls')
    return calls


class SortCheck(namedtuple('SortCheck', ['ok', 'index', 'previous', 'current'])):
    """
    result of checking the order of a sequence of calls. When the order is broken
    index is the position of the first call which sorts before its predecessor
    """

    def __bool__(self):
        return bool(self.ok)


def check_sorted(calls: Iterable[MethylationCall]) -> SortCheck:
    """
    check that calls are ordered by chromosome name and then start position

    Example:
        >>> result = check_sorted([MethylationCall('chr1', 10), MethylationCall('chr1', 5)])
        >>> result.ok, result.index
        (False, 1)
    """
    previous = None
    for index, call in enumerate(calls):
        if previous is not None and call.key < previous.key:
            return SortCheck(False, index, previous, call)
        previous = call
    return SortCheck(True, None, None, None)
