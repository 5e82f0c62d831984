import errno
import logging
import os
import sys
import time
from glob import glob
from typing import Iterable, Optional

from braceexpand import braceexpand

logger = logging.getLogger('methdiff')


def cast_boolean(input_value):
    value = str(input_value).lower()
    if value in ['t', 'true', '1', 'y', 'yes', '+']:
        return True
    elif value in ['f', 'false', '0', 'n', 'no', '-']:
        return False
    raise TypeError('casting to boolean failed', input_value)


def bash_expands(*expressions):
    """
    expand a file glob expression, allowing bash-style brackets.

    Returns:
        list: a list of files

    Example:
        >>> bash_expands('./{test,doc}/*py')
        [...]
    """
    result = []
    for expression in expressions:
        eresult = []
        for name in braceexpand(expression):
            for fname in glob(name):
                eresult.append(fname)
        if not eresult:
            raise FileNotFoundError('The expression does not match any files', expression)
        result.extend(eresult)
    return [os.path.abspath(f) for f in result]


def filepath(path):
    try:
        file_list = bash_expands(path)
    except FileNotFoundError:
        raise TypeError('File does not exist', path)
    else:
        if len(file_list) > 1:
            raise TypeError('File pattern match multiple files and expected only one', path)
    return file_list[0]


def log_arguments(args):
    """
    output the arguments to the console

    Args:
        args (Namespace): the namespace to print arguments for
    """
    logger.info('arguments')

    indent = ' '

    for arg, val in sorted(args.__dict__.items()):
        if any([isinstance(val, typ) for typ in [str, int, float, bool, tuple]]) or val is None:
            logger.info(f'{indent}{arg} = {repr(val)}')
        else:
            logger.info(f'{indent}{arg} = {object.__repr__(val)}')


def mkdirp(dirname):
    """
    Make a directory or path of directories. An existing directory is not an error
    """
    logger.info(f"creating output directory: '{dirname}'")
    try:
        os.makedirs(dirname)
    except OSError as exc:
        if exc.errno == errno.EEXIST and os.path.isdir(dirname):
            pass
        else:
            raise exc
    return dirname


def write_differential_calls(calls: Iterable, filename: Optional[str] = None) -> int:
    """
    write differential calls as BED lines, one call per line, as they are produced

    Args:
        calls: the DifferentialCall objects to write
        filename: path to the output file. Writes to stdout when not given

    Returns:
        the number of lines written
    """
    count = 0
    if filename:
        if os.path.dirname(filename):
            mkdirp(os.path.dirname(filename))
        logger.info(f'writing: {filename}')
        with open(filename, 'w') as fh:
            for call in calls:
                fh.write(call.to_bed_line() + '\n')
                count += 1
    else:
        for call in calls:
            sys.stdout.write(call.to_bed_line() + '\n')
            count += 1
    return count


def format_run_time(start_time: int) -> str:
    """
    Example:
        >>> format_run_time(int(time.time()) - 3725)
        '1:02:05'
    """
    duration = int(time.time()) - start_time
    hours = duration - duration % 3600
    minutes = duration - hours - (duration - hours) % 60
    seconds = duration - hours - minutes
    return '{}:{:02d}:{:02d}'.format(hours // 3600, minutes // 60, seconds)
