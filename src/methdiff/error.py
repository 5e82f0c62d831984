class MalformedRecordError(Exception):
    """
    raised when a line of an input file cannot be converted to a methylation call
    """

    pass


class UnknownFileTypeError(Exception):
    pass
