"""
module responsible for small utility functions and constants used throughout the methdiff package
"""
import argparse
import os

from .util import cast_boolean

PROGNAME: str = 'methdiff'
EXIT_OK: int = 0
EXIT_ERROR: int = 1


class MethdiffNamespace:
    """
    Namespace of named values. Values may carry a definition (used in the help menu),
    a casting function and, when flagged, an environment variable which overrides them

    Example:
        >>> STRAND = MethdiffNamespace(POS='+', NEG='-')
        >>> STRAND.POS
        '+'
        >>> STRAND.enforce('-')
        '-'
    """

    ENV_PREFIX = 'METHDIFF'

    def __init__(self, **kwargs):
        object.__setattr__(self, '_defns', {})
        object.__setattr__(self, '_types', {})
        object.__setattr__(self, '_members', {})
        object.__setattr__(self, '_env_overwritable', set())
        for attr, value in kwargs.items():
            self.add(attr, value)

    def get_env_name(self, attr):
        """
        Example:
            >>> MethdiffNamespace(pseudocount=1).get_env_name('pseudocount')
            'METHDIFF_PSEUDOCOUNT'
        """
        return '{}_{}'.format(self.ENV_PREFIX, attr).upper()

    def is_env_overwritable(self, attr):
        return attr in self._env_overwritable

    def __getattribute__(self, attr):
        try:
            return object.__getattribute__(self, attr)
        except AttributeError:
            members = object.__getattribute__(self, '_members')
            if attr not in members:
                raise
        env_name = self.get_env_name(attr)
        if self.is_env_overwritable(attr) and env_name in os.environ:
            return self.type(attr)(os.environ[env_name].strip())
        return members[attr]

    def __getitem__(self, attr):
        return getattr(self, attr)

    def __setattr__(self, attr, value):
        if attr.startswith('_'):
            raise ValueError('cannot set private', attr)
        self._members[attr] = value

    def values(self):
        return [self[attr] for attr in self._members]

    def enforce(self, value):
        """
        Returns:
            the input value, when it is one of the values of this namespace

        Raises:
            KeyError: the value is not a member
        """
        if value not in self.values():
            raise KeyError('value {} is not a valid member of '.format(repr(value)), self.values())
        return value

    def __call__(self, value):
        # allows the namespace to be used as an argparse type
        try:
            return self.enforce(value)
        except KeyError:
            raise TypeError(
                'Invalid value {} for {}. Must be a valid member: {}'.format(
                    repr(value), self.__class__.__name__, self.values()
                )
            )

    def type(self, attr):
        return self._types[attr]

    def define(self, attr, *default):
        """
        Get the definition of an attribute. The default (when given) is returned for attributes
        added without one

        Raises:
            KeyError: the attribute has no definition and no default was given
        """
        if attr in self._defns:
            return self._defns[attr]
        if default:
            return default[0]
        raise KeyError('no definition for', attr)

    def add(self, attr, value, defn=None, cast_type=None, env_overwritable=False):
        """
        Add an attribute to the namespace

        Args:
            attr (str): name of the attribute
            value: the value of the attribute
            defn (str): definition used in generating help menus
            cast_type (callable): casts the environment variable value, defaults to type(value)
            env_overwritable (bool): the attribute is overridden by its environment variable
        """
        if attr in self._members:
            raise AttributeError('Cannot respecify existing attribute', attr, self._members[attr])
        cast_type = cast_type or type(value)
        self._types[attr] = cast_boolean if cast_type == bool else cast_type
        if defn:
            self._defns[attr] = defn
        if env_overwritable:
            self._env_overwritable.add(attr)
        setattr(self, attr, value)


class WeakMethdiffNamespace(MethdiffNamespace):
    def is_env_overwritable(self, attr):
        return True


def non_negative_float(num):
    """
    cast input to a float

    Raises:
        argparse.ArgumentTypeError: the input cannot be cast to a float or is negative
    """
    try:
        num = float(num)
    except ValueError:
        raise argparse.ArgumentTypeError('Must be a non-negative number')
    if num < 0:
        raise argparse.ArgumentTypeError('Must be a non-negative number')
    return num


LABEL_FORMAT = MethdiffNamespace(TOTALS='totals', COUNTS='counts')
"""
holds controlled vocabulary for the name column of the output BED file

Attributes:
    TOTALS: ``CpG:<total reads A>:<total reads B>``
    COUNTS: ``CpG:<methylated A>:<unmethylated A>:<methylated B>:<unmethylated B>``
"""

CONTEXT_LABEL: str = 'CpG'
"""prefix used for the name column of output records"""

PROBABILITY_FORMAT: str = '{:.6g}'
"""output precision of probabilities (six significant digits)"""

STRAND = MethdiffNamespace(POS='+', NEG='-', NS='?')

DEFAULTS = WeakMethdiffNamespace()
"""
- :term:`pseudocount`
- :term:`label_format`
- :term:`all_loci`
"""
DEFAULTS.add(
    'pseudocount',
    1.0,
    defn='number added to each of the methylated and unmethylated read counts of both samples '
    'before testing',
    cast_type=non_negative_float,
)
DEFAULTS.add(
    'label_format',
    LABEL_FORMAT.TOTALS,
    defn='content of the name column of the output: total reads per sample (totals) or the four '
    'raw read counts (counts)',
    cast_type=LABEL_FORMAT,
)
DEFAULTS.add(
    'all_loci',
    False,
    defn='report every position of the first file, including positions without coverage in either '
    'sample',
)
