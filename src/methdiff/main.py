#!python
import argparse
import logging
import platform
import sys
import time
from typing import List, Optional

from . import __version__
from . import config as _config
from . import util as _util
from .constants import DEFAULTS, EXIT_ERROR, EXIT_OK, PROGNAME, non_negative_float
from .convert import check_sorted, detect_file_type, read_calls
from .convert.constants import INPUT_FORMAT
from .error import MalformedRecordError, UnknownFileTypeError
from .merge import SortedPositionMerge
from .util import filepath


def create_parser(argv):
    parser = argparse.ArgumentParser(
        prog=PROGNAME,
        formatter_class=_config.CustomHelpFormatter,
        add_help=False,
        description='Computes the probability that individual CpGs have higher methylation in '
        'file 1 than in file 2',
    )
    required = parser.add_argument_group('required arguments')
    optional = parser.add_argument_group('optional arguments')
    optional.add_argument('-h', '--help', action='help', help='show this help message and exit')
    optional.add_argument(
        '--version',
        action='version',
        version='%(prog)s version ' + __version__,
        help='Outputs the version number',
    )
    required.add_argument(
        'inputs',
        nargs='*',
        type=filepath,
        metavar='FILEPATH',
        help='the two sorted CpG files (first, second) to compare',
    )
    optional.add_argument(
        '-p',
        '--pseudo',
        dest='pseudocount',
        type=non_negative_float,
        default=DEFAULTS.pseudocount,
        help=DEFAULTS.define('pseudocount'),
    )
    optional.add_argument(
        '-o',
        '--out',
        default=None,
        metavar='FILEPATH',
        help='output file (BED format). Defaults to stdout',
    )
    all_loci_env = DEFAULTS.get_env_name('all_loci')
    loci = optional.add_mutually_exclusive_group()
    loci.add_argument(
        '-A',
        '--all',
        dest='all_loci',
        action='store_true',
        default=DEFAULTS.all_loci,
        help=DEFAULTS.define('all_loci')
        + ' The default for this argument is configured by setting the environment variable '
        + all_loci_env,
    )
    loci.add_argument(
        '--no-all',
        dest='all_loci',
        action='store_false',
        default=DEFAULTS.all_loci,
        help=f'report only positions covered in both samples (overrides {all_loci_env}=true)',
    )
    _config.augment_parser(['label_format'], optional)
    optional.add_argument(
        '--input_format',
        type=INPUT_FORMAT,
        default=None,
        help='encoding of both input files. Detected from the file content when not given',
    )
    optional.add_argument(
        '-v', '--verbose', action='store_true', default=False, help='print more run info'
    )
    optional.add_argument('--log', help='redirect logging to a log file', default=None)
    optional.add_argument(
        '--log_level',
        help='level of logging to output. Defaults to INFO when verbose and WARNING otherwise',
        choices=['DEBUG', 'INFO', 'WARNING'],
        default=None,
    )
    return parser, parser.parse_args(argv)


def load_sorted_calls(filename: str, input_format: Optional[str] = None):
    """
    load the calls of an input file. BED inputs are also checked for their order

    Returns:
        a tuple of the calls and the SortCheck result (None when the order was not checked)
    """
    file_type = input_format or detect_file_type(filename)
    calls = read_calls(filename, file_type)
    if file_type != INPUT_FORMAT.BED:
        return calls, None
    return calls, check_sorted(calls)


def main(argv: Optional[List[str]] = None):
    """
    sets up the parser, loads and compares the two input files

    Args:
        argv: List of arguments, defaults to command line arguments

    Returns:
        int: the exit code
    """
    if argv is None:  # need to do at run time or patching will not behave as expected
        argv = sys.argv[1:]
    start_time = int(time.time())
    parser, args = create_parser(argv)

    if len(args.inputs) != 2:
        parser.print_help(sys.stderr)
        return EXIT_OK

    log_conf = {
        'format': '{asctime} [{levelname}] {message}',
        'style': '{',
        'level': args.log_level or ('INFO' if args.verbose else 'WARNING'),
    }

    original_logging_handlers = logging.root.handlers[:]
    for handler in logging.root.handlers[:]:
        logging.root.removeHandler(handler)
    if args.log:
        log_conf['filename'] = args.log
    logging.basicConfig(**log_conf)

    _util.logger.info(f'{PROGNAME}: {__version__}')
    _util.logger.info(f'hostname: {platform.node()}')
    _util.log_arguments(args)

    try:
        samples = []
        for filename in args.inputs:
            calls, check = load_sorted_calls(filename, args.input_format)
            if check is not None and not check:
                _util.logger.error(
                    f'ERROR:\tCpGs not sorted in file "{filename}" '
                    f'(record {check.index + 1}: {check.current!r} follows {check.previous!r})'
                )
                return EXIT_ERROR
            samples.append(calls)
        calls_a, calls_b = samples
        _util.logger.info(f'CPG COUNT A: {len(calls_a)}')
        _util.logger.info(f'CPG COUNT B: {len(calls_b)}')

        merger = SortedPositionMerge(
            calls_a,
            calls_b,
            pseudocount=args.pseudocount,
            all_loci=args.all_loci,
            label_format=args.label_format,
        )
        _util.write_differential_calls(merger, args.out)
        _util.logger.info(
            f'matched {merger.matched} positions, reported {merger.emitted}, '
            f'skipped {merger.skipped}'
        )
        _util.logger.info(f'run time (hh/mm/ss): {_util.format_run_time(start_time)}')
        return EXIT_OK
    except (MalformedRecordError, UnknownFileTypeError) as err:
        _util.logger.error(f'ERROR:\t{err}')
        return EXIT_ERROR
    except MemoryError:
        _util.logger.error('ERROR: could not allocate memory')
        return EXIT_ERROR
    except Exception as err:
        if args.log:
            logging.exception(err)  # capture the error in the logging output file
        raise err
    finally:
        for handler in logging.root.handlers[:]:
            logging.root.removeHandler(handler)
        for handler in original_logging_handlers:
            logging.root.addHandler(handler)


if __name__ == '__main__':
    sys.exit(main())
