"""Exceptions raised while reading usage text or command-line arguments."""


class DocoptLanguageError(Exception):
    """The usage text itself could not be parsed."""


class DocoptArgumentError(Exception):
    """The supplied arguments do not fit the usage text."""


class DocoptExitHelp(Exception):
    """The arguments asked for help and parsing stopped early."""

    def __init__(self, message: str = "Docopt --help argument encountered"):
        super().__init__(message)


class DocoptExitVersion(Exception):
    """The arguments asked for the version and parsing stopped early."""

    def __init__(self, message: str = "Docopt --version argument encountered"):
        super().__init__(message)