"""Exception taxonomy.

Everything raised on purpose by :mod:`aptcfd` derives from
:class:`MethodError`. The split that matters to callers is between
:class:`ProtocolError` (problems with the apt-facing streams, handled by the
method loop) and :class:`AcquireError` (problems with one download, reported
back to apt as a ``400 URI Failure`` and otherwise ignored).
"""


class MethodError(Exception):
    """Base class for all apt method errors."""


# Protocol stream errors

class ProtocolError(MethodError):
    """ An error raised while reading or writing protocol messages. The
        *message* attribute holds the :class:`aptcfd.protocol.message.Message`
        that was committed alongside the error, if any; for a truncated
        stream this is the partially read message.
    """

    def __init__(self, text, message=None):
        MethodError.__init__(self, text)
        self.message = message


class ParseError(ProtocolError):
    """Malformed protocol input. Parsing resumes at the next line."""


class MessageErrors(ParseError):
    """ Several errors occurred before a message completed. The individual
        exceptions are kept, in order, in the *errors* attribute.
    """

    header = 'Errors while reading message:'

    def __init__(self, errors, message=None):

        lines = [self.header]
        for error in errors:
            lines.append('  ' + str(error))

        ParseError.__init__(self, '\n'.join(lines), message)
        self.errors = tuple(errors)


    def contains(self, error_class):
        """ Return True if any of the aggregated errors is an instance of
            *error_class*.
        """

        for error in self.errors:
            if isinstance(error, error_class):
                return True

        return False


class CodecError(ProtocolError):
    """An I/O failure on a protocol stream."""


class EndOfStream(CodecError, EOFError):
    """The input stream was closed between messages."""


class ClosedPipe(CodecError):
    """The other end of a protocol stream went away."""


class Interrupted(CodecError):
    """The input stream ended in the middle of a message."""


# Acquire errors

class AcquireError(MethodError):
    """A single acquire failed; the method carries on with the next one."""


class CredentialError(AcquireError):
    """No credential could be resolved for a host."""


class TransportError(AcquireError):
    """The HTTP request failed, or returned a non-2xx status."""


class StorageError(AcquireError):
    """The destination file could not be created or written."""


# Process launcher errors

class LaunchError(MethodError):
    """ An external command could not be started, or exited non-zero. The
        exit status, if known, is stored in *returncode*.
    """

    def __init__(self, text, returncode=None):
        MethodError.__init__(self, text)
        self.returncode = returncode


class LaunchTimeout(LaunchError):
    """An external command outlived its deadline and was killed."""


class ConfigurationError(MethodError):
    """A ``601 Configuration`` message could not be applied."""
