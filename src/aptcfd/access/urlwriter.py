import logging
import urllib.parse

logger = logging.getLogger(__name__)


class URLWriter:
    """ A file-like sink that passes URLs through to apt as ``101 Log``
        messages, and drops everything else. cloudflared prints the login URL
        the user needs to visit on its standard error, surrounded by other
        chatter; this picks the URL out so it reaches the operator.

        Input is buffered until a newline arrives; each complete line that
        looks like an http(s) URL is written via *writer* with *prefix*
        prepended.
    """

    def __init__(self, writer, prefix=''):

        self.writer = writer
        self.prefix = prefix
        self.buffer = list()


    def write(self, data):

        if isinstance(data, bytes):
            data = data.decode('utf-8', 'replace')

        lines = data.split('\n')

        # Everything but the last piece was terminated by a newline.

        for line in lines[:-1]:
            self.buffer.append(line)
            self._commit()

        self.buffer.append(lines[-1])
        return len(data)


    def flush(self):
        pass


    def _commit(self):
        """ Check the buffered line for a URL, write it if there is one, and
            clear the buffer regardless.
        """

        line = ''.join(self.buffer).strip()
        self.buffer = list()

        if not line.startswith('http'):
            return

        try:
            parsed = urllib.parse.urlsplit(line)
        except ValueError:
            return

        if parsed.scheme in ('http', 'https') and parsed.netloc:
            logger.debug('relaying URL from helper: %s', line)
            self.writer.log(self.prefix + line)


# end of class URLWriter


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
