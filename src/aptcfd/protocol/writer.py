""" Writer half of the method protocol codec. Each public method of
    :class:`MessageWriter` emits one complete message kind; the field order
    within each message is fixed, apt relies on it.
"""

from ..errors import ClosedPipe, CodecError
from . import fields
from .message import Capability


# Capability flags in the order they appear in a Capabilities message.

_capability_fields = (
    (Capability.SEND_CONFIG, 'Send-Config'),
    (Capability.PIPELINE, 'Pipeline'),
    (Capability.SINGLE_INSTANCE, 'Single-Instance'),
    (Capability.LOCAL_ONLY, 'Local-Only'),
    (Capability.NEEDS_CLEANUP, 'Needs-Cleanup'),
    (Capability.REMOVABLE, 'Removable'),
    (Capability.AUX_REQUESTS, 'AuxRequests'),
)


def _format(text, args):
    if args:
        return text % args
    return text


def _oneline(value):
    # A newline inside a value would end the field, or the whole message.
    return ' '.join(str(value).splitlines())



class MessageWriter:
    """ Write apt messages to a text *stream*. The writer holds no state
        beyond the stream itself; every message is flushed as soon as it
        is complete, since apt waits on each one.
    """

    def __init__(self, stream):
        self.stream = stream


    def _send(self, code, *lines):
        """ Write the header for status *code*, each of the (key, value)
            pairs in *lines*, and the terminating blank line.
        """

        chunks = list()
        chunks.append('%d %s\n' % (code, fields.descriptions[code]))

        for key, value in lines:
            chunks.append('%s: %s\n' % (key, _oneline(value)))

        chunks.append('\n')
        self._write(''.join(chunks))


    def _write(self, text):

        try:
            self.stream.write(text)
            self.stream.flush()
        except BrokenPipeError as e:
            raise ClosedPipe(str(e))
        except ValueError as e:
            # Raised by a file object that has been closed.
            raise ClosedPipe(str(e))
        except OSError as e:
            raise CodecError('Error writing to output: %s' % (e))


    def write_message(self, message):
        """ Write an arbitrary :class:`aptcfd.protocol.message.Message`.
            Fields with an empty key or value are skipped. This is less
            particular than the dedicated methods below, which know the
            canonical field order for each message kind.
        """

        chunks = list()
        chunks.append('%d %s\n' % (message.status_code, message.description))

        for key, value in message.fields.items():
            if key != '' and value != '':
                chunks.append('%s: %s\n' % (key, _oneline(value)))

        chunks.append('\n')
        self._write(''.join(chunks))


    def capabilities(self, version, caps=Capability.DEFAULT):
        """ Write a ``100 Capabilities`` message. The *version* must be
            non-empty; *caps* is a :class:`Capability` flag set, and may be
            zero, though it should probably include at least
            :attr:`Capability.SEND_CONFIG`.
        """

        lines = [(fields.VERSION, version)]

        for flag, name in _capability_fields:
            if caps & flag:
                lines.append((name, fields.TRUE))

        self._send(fields.CAPABILITIES, *lines)


    def log(self, text, *args):
        self._send(fields.LOG, (fields.MESSAGE, _format(text, args)))


    def status(self, text, *args):
        self._send(fields.STATUS, (fields.MESSAGE, _format(text, args)))


    def redirect(self, uri, new_uri, alt_uris='', used_mirror=False):

        lines = [(fields.URI, uri), (fields.NEW_URI, new_uri)]

        if used_mirror:
            lines.append((fields.USED_MIRROR, fields.TRUE))
        if alt_uris:
            lines.append((fields.ALT_URIS, alt_uris))

        self._send(fields.REDIRECT, *lines)


    def warning(self, text, *args):
        self._send(fields.WARNING, (fields.MESSAGE, _format(text, args)))


    def start_uri(self, uri, resume_point='', size=0, used_mirror=False):
        """ Write a ``200 URI Start`` message. A *size* of zero means the
            size is unknown, and is omitted.
        """

        lines = [(fields.URI, uri)]

        if resume_point:
            lines.append((fields.RESUME_POINT, resume_point))
        if size and size > 0:
            lines.append((fields.SIZE, '%d' % (size)))
        if used_mirror:
            lines.append((fields.USED_MIRROR, fields.TRUE))

        self._send(fields.URI_START, *lines)


    def finish_uri(self, uri, filename, resume_point='', alt_ims_hit='',
                   ims_hit=False, used_mirror=False, *extra):
        """ Write a ``201 URI Done`` message. Any *extra* fields, typically
            the digests of the downloaded file, are appended in the order
            given.
        """

        lines = [(fields.URI, uri), (fields.FILENAME, filename)]

        if resume_point:
            lines.append((fields.RESUME_POINT, resume_point))
        if ims_hit:
            lines.append((fields.IMS_HIT, fields.TRUE))
        if alt_ims_hit:
            lines.append((fields.ALT_IMS_HIT, alt_ims_hit))
        if used_mirror:
            lines.append((fields.USED_MIRROR, fields.TRUE))

        lines.extend(extra)

        self._send(fields.URI_DONE, *lines)


    def aux_request(self, uri, aux_uri='', short_desc='', long_desc='',
                    maximum_size=0, used_mirror=False):

        lines = [(fields.URI, uri)]

        if aux_uri:
            lines.append((fields.AUX_URI, aux_uri))
        if maximum_size and maximum_size > 0:
            lines.append((fields.MAXIMUM_SIZE, '%d' % (maximum_size)))
        if short_desc:
            lines.append((fields.AUX_SHORTDESC, short_desc))
        if long_desc:
            lines.append((fields.AUX_DESCRIPTION, long_desc))
        if used_mirror:
            lines.append((fields.USED_MIRROR, fields.TRUE))

        self._send(fields.AUX_REQUEST, *lines)


    def failed_uri(self, uri, message='', fail_reason='', transient=False,
                   used_mirror=False):
        """ Write a ``400 URI Failure`` message. If *uri* is empty the
            message is the malformed variant carrying only *message*;
            otherwise *message* is ignored. The *fail_reason* is only sent
            if the failure is not *transient*.
        """

        if not uri:
            self._send(fields.URI_FAILURE, (fields.MESSAGE, message))
            return

        lines = [(fields.URI, uri)]

        if transient:
            lines.append((fields.TRANSIENT_FAILURE, fields.TRUE))
        else:
            lines.append((fields.FAIL_REASON, fail_reason))
        if used_mirror:
            lines.append((fields.USED_MIRROR, fields.TRUE))

        self._send(fields.URI_FAILURE, *lines)


    def general_failure(self, text, *args):
        self._send(fields.GENERAL_FAILURE, (fields.MESSAGE, _format(text, args)))


    def media_change(self, media, drive):
        self._send(fields.MEDIA_CHANGE, (fields.MEDIA, media), (fields.DRIVE, drive))


# end of class MessageWriter


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
