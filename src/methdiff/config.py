import argparse

from .constants import DEFAULTS, LABEL_FORMAT, non_negative_float
from .convert.constants import INPUT_FORMAT
from .util import cast_boolean, filepath


class CustomHelpFormatter(argparse.ArgumentDefaultsHelpFormatter):
    """
    subclass the default help formatter to stop default printing for required arguments
    """

    def _format_args(self, action, default_metavar):
        if action.metavar is None:
            action.metavar = get_metavar(action.type)
        return super(CustomHelpFormatter, self)._format_args(action, default_metavar)

    def _get_help_string(self, action):
        if action.required or not action.option_strings:
            return action.help
        return super(CustomHelpFormatter, self)._get_help_string(action)

    def add_arguments(self, actions):
        # sort the arguments alphanumerically so they print in the help that way
        actions = sorted(actions, key=lambda x: getattr(x, 'option_strings'))
        super(CustomHelpFormatter, self).add_arguments(actions)


def get_metavar(arg_type):
    """
    For a given argument type, returns the metavar string to use in add_argument

    Example:
        >>> get_metavar(bool)
        '{True,False}'
    """
    if arg_type in [bool, cast_boolean]:
        return '{True,False}'
    elif arg_type in [non_negative_float, float]:
        return 'FLOAT'
    elif arg_type == int:
        return 'INT'
    elif arg_type == filepath:
        return 'FILEPATH'
    elif arg_type == LABEL_FORMAT:
        return '{' + ','.join(LABEL_FORMAT.values()) + '}'
    elif arg_type == INPUT_FORMAT:
        return '{' + ','.join(INPUT_FORMAT.values()) + '}'
    return None


def augment_parser(arguments, parser):
    """
    Adds options whose defaults, types and help messages come from the DEFAULTS namespace
    """
    for arg in arguments:
        help_msg = DEFAULTS.define(arg, '')
        if DEFAULTS.is_env_overwritable(arg):
            help_msg += (
                ' The default for this argument is configured by setting the environment variable '
                + DEFAULTS.get_env_name(arg)
            )
        parser.add_argument(
            '--{}'.format(arg), default=DEFAULTS[arg], type=DEFAULTS.type(arg), help=help_msg
        )
