""" Reader half of the method protocol codec. A :class:`MessageReader` turns
    lines from apt into :class:`aptcfd.protocol.message.Message` instances.
"""

from ..errors import (
    ClosedPipe,
    CodecError,
    EndOfStream,
    Interrupted,
    MessageErrors,
    ParseError,
)
from .message import Message, parse_header


# Reader states.

AWAITING_HEADER = 'awaiting-header'
IN_MESSAGE = 'in-message'

# Line kinds, as classified by _classify().

END = 'end'
BLANK = 'blank'
FIELD = 'field'
TEXT = 'text'


def _classify(line):

    if line == '':
        # readline() only returns an empty string at the end of the stream;
        # a blank line in the input is at least '\n'.
        return END

    if line.strip() == '':
        return BLANK

    if ':' in line:
        return FIELD

    return TEXT



class MessageReader:
    """ Read apt messages from a text *stream* one line at a time. The reader
        is a two-state machine: it is either waiting for the header line of
        a new message, or in the middle of a message, collecting fields until
        a blank line ends it. Every (state, line kind) combination has an
        entry in :attr:`transitions`; the name stored there is the method
        that handles the line.

        Errors are raised as exceptions. When a message is committed at the
        same time as an error occurs the message is attached to the error
        as its *message* attribute.
    """

    transitions = {
        (AWAITING_HEADER, END):   '_end',
        (AWAITING_HEADER, BLANK): '_start',
        (AWAITING_HEADER, FIELD): '_start',
        (AWAITING_HEADER, TEXT):  '_start',
        (IN_MESSAGE, END):        '_interrupt',
        (IN_MESSAGE, BLANK):      '_commit',
        (IN_MESSAGE, FIELD):      '_field',
        (IN_MESSAGE, TEXT):       '_restart',
    }

    def __init__(self, stream):

        self.stream = stream
        self.state = AWAITING_HEADER

        self._header = None
        self._fields = None


    def _readline(self):

        try:
            return self.stream.readline()
        except UnicodeDecodeError as e:
            raise ParseError('Undecodable input: %s' % (e))
        except BrokenPipeError as e:
            raise ClosedPipe(str(e))
        except ValueError as e:
            # Raised by a file object that has been closed.
            raise ClosedPipe(str(e))
        except OSError as e:
            raise CodecError('Error reading from input: %s' % (e))


    def read_line(self):
        """ Read exactly one line from the input and act on it. Returns the
            committed :class:`Message` if this line completed one, otherwise
            returns None.
        """

        line = self._readline()
        kind = _classify(line)
        handler = self.transitions[(self.state, kind)]
        handler = getattr(self, handler)
        return handler(line)


    def read_message(self):
        """ Call :func:`read_line` until a :class:`Message` is available, and
            return it. Recoverable :class:`ParseError` exceptions are held
            until the message completes or the stream ends; a single error is
            re-raised as-is, several are raised together as one
            :class:`aptcfd.errors.MessageErrors`. Either way the message,
            complete or partial, rides along as the *message* attribute
            of the exception.
        """

        errors = list()

        while True:
            try:
                message = self.read_line()
            except ParseError as e:
                if e.message is None:
                    errors.append(e)
                    continue
                errors.append(e)
                message = e.message
                break
            except CodecError as e:
                if errors:
                    errors.append(e)
                    message = e.message
                    break
                raise

            if message is not None:
                break

        if len(errors) == 0:
            return message

        if len(errors) == 1:
            error = errors[0]
            error.message = message
            raise error

        raise MessageErrors(errors, message)


    # Transition handlers. Each receives the raw line.

    def _commit(self, line=None):
        """ Return the message being built and reset to the idle state.
        """

        code, description = self._header
        message = Message(code, description, self._fields)

        self.state = AWAITING_HEADER
        self._header = None
        self._fields = None

        return message


    def _end(self, line):
        raise EndOfStream('End of input')


    def _field(self, line):

        key, value = line.split(':', 1)
        key = key.strip()
        value = value.strip()

        self._fields[key] = value


    def _interrupt(self, line):

        # A message with no fields could be a complete message whose
        # terminating blank line was lost; report it as a plain end of stream.
        # If fields were read the stream was cut off part way through.

        had_fields = len(self._fields) > 0
        message = self._commit()

        if had_fields:
            raise Interrupted('Input ended before the end of the message', message)
        else:
            raise EndOfStream('End of input', message)


    def _restart(self, line):

        try:
            header = parse_header(line)
        except ParseError:
            raise ParseError('Invalid field format in "%s"' % (line.strip()))

        message = self._commit()
        self._begin(header)

        raise ParseError('New message started without old message ending', message)


    def _start(self, line):

        header = parse_header(line)
        self._begin(header)


    def _begin(self, header):

        self._header = (header.status_code, header.description)
        self._fields = dict()
        self.state = IN_MESSAGE


# end of class MessageReader


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
