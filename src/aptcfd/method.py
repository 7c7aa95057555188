""" The apt method itself: announce capabilities, then read and handle
    messages from apt until it closes the input stream.
"""

import logging

import requests

from . import config
from .access.token import Resolver
from .access.urlwriter import URLWriter
from .acquire import Acquire
from .errors import (
    ClosedPipe,
    CodecError,
    ConfigurationError,
    EndOfStream,
    Interrupted,
    MessageErrors,
    ParseError,
    ProtocolError,
)
from .protocol import fields
from .protocol.message import Capability
from .protocol.reader import MessageReader
from .protocol.writer import MessageWriter

logger = logging.getLogger(__name__)

version = '0.1'


class Method:
    """ The :class:`Method` binds a protocol reader on *input* and a writer on
        *output* to the handlers for the messages apt sends. Requests are
        handled strictly one at a time: a message is read, handled to
        completion, and only then is the next message read.

        The optional *directory*, *launcher*, *resolver* and *session*
        arguments override the service token directory, the process launcher
        used to run cloudflared, the credential resolver as a whole, and the
        :class:`requests.Session` used for downloads.
    """

    capabilities = Capability.SEND_CONFIG | Capability.SINGLE_INSTANCE
    url_prefix = 'Visit this URL to authenticate: '

    def __init__(self, output, input, directory=None, launcher=None, resolver=None, session=None):

        self.writer = MessageWriter(output)
        self.reader = MessageReader(input)

        if resolver is None:
            stderr = URLWriter(self.writer, self.url_prefix)
            resolver = Resolver(directory, launcher, sudo_user=config.sudo_user(), stderr=stderr)

        if session is None:
            session = requests.Session()

        self.acquirer = Acquire(self.writer, resolver, session)

        self.handlers = dict()
        self.handlers[fields.ACQUIRE] = self.handle_acquire
        self.handlers[fields.CONFIGURATION] = self.handle_configuration


    def run(self):
        """ Announce our capabilities, then handle messages until the input
            is exhausted. Returns True if the method finished cleanly, and
            False if it stopped because of an unrecoverable error.
        """

        try:
            self.writer.capabilities(version, self.capabilities)
        except ClosedPipe:
            logger.debug('output closed before capabilities were sent')
            return True
        except CodecError as e:
            logger.error('%s', e)
            return False

        while True:
            try:
                message = self.reader.read_message()
            except ProtocolError as e:

                # For a group of errors it is the last one that stopped
                # the read.

                final = e
                if isinstance(e, MessageErrors):
                    final = e.errors[-1]

                if isinstance(final, (EndOfStream, ClosedPipe)):
                    if e.message is not None:
                        logger.warning('input ended, discarding unterminated %r', e.message)
                    return True

                if isinstance(final, Interrupted):
                    logger.warning('discarding partial message %r: %s', e.message, e)
                    continue

                if not isinstance(final, ParseError):
                    logger.error('%s', e)
                    return False

                logger.warning('%s', e)
                message = e.message
                if message is None:
                    continue

            try:
                self.dispatch(message)
            except ClosedPipe:
                logger.debug('output closed, exiting')
                return True
            except CodecError as e:
                logger.error('%s', e)
                return False
            except ConfigurationError as e:
                logger.error('%s', e)
                return False


    def dispatch(self, message):

        logger.debug('received %r', message)

        try:
            handler = self.handlers[message.status_code]
        except KeyError:
            self.writer.general_failure('Unhandled Message')
            return

        handler(message)


    def handle_acquire(self, message):
        self.acquirer.run(message)


    def handle_configuration(self, message):
        """ Apply a ``601 Configuration`` message. Nothing in apt's
            configuration affects this method yet, so this only
            confirms the message was received.
        """

        try:
            self.parse_config(message)
        except ConfigurationError as e:
            self.writer.general_failure('Unable to parse configuration: %s', e)
            raise


    def parse_config(self, message):
        logger.debug('ignoring %d configuration fields', len(message.fields))


# end of class Method



def run(output, input, **kwargs):
    """ Run a :class:`Method` over the *output* and *input* streams, and
        return the process exit status.
    """

    method = Method(output, input, **kwargs)

    if method.run():
        return 0
    return 1


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
