""" A class representation of an apt method protocol message, plus the
    small supporting types used to construct one.
"""

import collections
import enum
import types

from ..errors import ParseError


Field = collections.namedtuple('Field', ('key', 'value'))


class Capability(enum.IntFlag):
    """ Optional protocol features a method can announce in its
        ``100 Capabilities`` message. The numeric values have no meaning
        on the wire, only the flag names do.
    """

    SINGLE_INSTANCE = 0x01
    PIPELINE = 0x02
    SEND_CONFIG = 0x04
    LOCAL_ONLY = 0x08
    NEEDS_CLEANUP = 0x10
    REMOVABLE = 0x20
    AUX_REQUESTS = 0x40
    DEFAULT = SEND_CONFIG



class Message:
    """ The :class:`Message` provides a very thin encapsulation of what it
        means to be a message in the apt method protocol: a numeric
        *status_code*, a human-readable *description*, and a mapping of
        *fields*. On the wire this is one header line, one line per field,
        and a terminating blank line.

        The field mapping is read-only once the :class:`Message` is
        constructed; the ordering of fields carries no meaning, and two
        messages with the same code, description and fields compare equal.
        Fields may be provided as a mapping, as :class:`Field` pairs, or
        both.

        :ivar status_code: The unsigned, non-zero status code.
        :ivar description: The trimmed, non-empty description.
        :ivar fields: A read-only mapping of field names to values.
    """

    def __init__(self, status_code, description, *fields, **kwargs):

        status_code = int(status_code)
        if status_code <= 0:
            raise ValueError('status code must be a positive integer: ' + repr(status_code))

        description = str(description).strip()
        if description == '':
            raise ValueError('message description cannot be empty')

        mapping = dict()
        for field in fields:
            try:
                items = field.items()
            except AttributeError:
                key, value = field
                mapping[key] = value
            else:
                mapping.update(items)

        mapping.update(kwargs)

        self.status_code = status_code
        self.description = description
        self.fields = types.MappingProxyType(mapping)


    def __contains__(self, key):
        return key in self.fields


    def __eq__(self, other):
        if not isinstance(other, Message):
            return NotImplemented

        return (self.status_code == other.status_code and
                self.description == other.description and
                dict(self.fields) == dict(other.fields))


    def __getitem__(self, key):
        return self.fields[key]


    def __hash__(self):
        return hash((self.status_code, self.description, frozenset(self.fields.items())))


    def __repr__(self):
        return 'Message(%d, %r, %r)' % (self.status_code, self.description, dict(self.fields))


    def get(self, key, default=None):
        return self.fields.get(key, default)


# end of class Message



def parse_header(line):
    """ Parse a header line such as ``600 URI Acquire`` and return the
        corresponding :class:`Message`, with no fields. Leading and trailing
        whitespace is ignored, as is extra whitespace between the status code
        and the description. A :class:`aptcfd.errors.ParseError` is raised
        if the line is empty, has no description, or does not start with
        a positive integer status code.
    """

    line = line.strip()
    if line == '':
        raise ParseError('Not a header spec: Empty line')

    parts = line.split(' ', 1)
    if len(parts) != 2:
        raise ParseError('Not a header spec: "%s"' % (line))

    code, description = parts
    code = code.strip()

    # int() is more forgiving than the protocol; it accepts signs and
    # underscores. Only plain digits are a valid status code.

    if not code.isdigit() or not code.isascii():
        raise ParseError('Could not parse Status Code: "%s"' % (code))

    code = int(code)
    if code == 0:
        raise ParseError('Status Code must be non-zero in "%s"' % (line))

    description = description.strip()
    if description == '':
        raise ParseError('Empty description header for "%s"' % (line))

    return Message(code, description)


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
