""" Handling for a single ``600 URI Acquire`` request: rewrite the URI,
    find a credential, download the file, and report back to apt.
"""

from __future__ import annotations

import hashlib
import logging
import os
import urllib.parse
from typing import Dict, Iterator, List, Optional

import requests

from .access.launcher import Deadline
from .errors import AcquireError, StorageError, TransportError
from .protocol import fields
from .protocol.message import Field, Message

logger = logging.getLogger(__name__)


# URI schemes handled by this method, and what they are fetched as. The
# boolean indicates whether use of the scheme deserves a warning.

schemes = {
    'cfd+https': ('https', False),
    'cfd': ('https', True),
}


class Digests:
    """ Running digests of a download. apt verifies the downloaded file
        against whichever of these the repository metadata lists, so all
        of them are computed in one pass over the data.
    """

    def __init__(self):

        # MD5 and SHA1 are here for apt's benefit, not for security.

        self.md5 = hashlib.md5(usedforsecurity=False)
        self.sha1 = hashlib.sha1(usedforsecurity=False)
        self.sha256 = hashlib.sha256()
        self.sha512 = hashlib.sha512()


    def update(self, chunk: bytes) -> None:
        self.md5.update(chunk)
        self.sha1.update(chunk)
        self.sha256.update(chunk)
        self.sha512.update(chunk)


    def hexdigests(self) -> Dict[str, str]:

        digests = dict()
        digests['md5'] = self.md5.hexdigest()
        digests['sha1'] = self.sha1.hexdigest()
        digests['sha256'] = self.sha256.hexdigest()
        digests['sha512'] = self.sha512.hexdigest()
        return digests


# end of class Digests



class DownloadResult:
    """ The outcome of a completed download: the hex *digests* of the body,
        keyed by algorithm name, and the number of bytes written (*size*).
    """

    def __init__(self, digests: Dict[str, str], size: int):
        self.digests = digests
        self.size = size


    def fields(self) -> List[Field]:
        """ Return the digest fields for a ``201 URI Done`` message, in the
            order apt has always received them.
        """

        digests = self.digests

        return [
            Field(fields.MD5_HASH, digests['md5']),
            Field(fields.MD5SUM_HASH, digests['md5']),
            Field(fields.SHA1_HASH, digests['sha1']),
            Field(fields.SHA256_HASH, digests['sha256']),
            Field(fields.SHA512_HASH, digests['sha512']),
        ]


# end of class DownloadResult



def content_length(response: requests.Response) -> int:
    """ Return the declared length of the response body, or zero if it was
        not declared or cannot be parsed.
    """

    header = response.headers.get('Content-Length') or ''

    try:
        size = int(header, base=10)
    except ValueError:
        return 0

    if size < 0:
        return 0

    return size



def host_of(uri: urllib.parse.SplitResult) -> str:
    """ Return the host (and port, if any) of *uri*, without user info.
    """

    return uri.netloc.rpartition('@')[2]



class Acquire:
    """ Fetch files on behalf of apt. Progress and results are reported via
        *writer*, a :class:`aptcfd.protocol.writer.MessageWriter`;
        credentials come from *resolver*, a
        :class:`aptcfd.access.token.Resolver`; and the HTTP requests are made
        with *session*, a :class:`requests.Session`.

        A credential is resolved afresh for every request, and is never
        cached between requests.

        Files are downloaded to a temporary name next to the destination,
        and only renamed into place once the body has been received in full.
        A failed download never leaves a partial file behind.
    """

    chunk_size = 16 * 1024
    credential_timeout = 20
    http_timeout = 60
    partial_suffix = '.partial'

    def __init__(self, writer, resolver, session: Optional[requests.Session] = None):

        if session is None:
            session = requests.Session()

        self.writer = writer
        self.resolver = resolver
        self.session = session


    def run(self, message: Message) -> Optional[DownloadResult]:
        """ Handle one acquire *message*. Every outcome is reported to apt;
            the return value is the :class:`DownloadResult` on success, or
            None if the acquire failed.
        """

        requested = message.get(fields.URI, '')
        filename = message.get(fields.FILENAME, '')

        if requested == '':
            logger.warning('acquire request without a URI: %r', message)
            self.writer.failed_uri('', message='Acquire request is missing a URI')
            return None

        try:
            uri = urllib.parse.urlsplit(requested)

            # The port is only validated when it is accessed.
            uri.port
        except ValueError as e:
            # apt insists that a URI is started before it can fail.
            self.writer.start_uri(requested)
            self.writer.failed_uri(requested, fail_reason='URI Parse Failure: %s' % (e))
            return None

        try:
            return self.acquire(uri, requested, filename)
        except AcquireError as e:
            logger.warning('acquire of %s failed: %s', requested, e)
            self.writer.failed_uri(requested, fail_reason=str(e))
            return None


    def acquire(self, uri: urllib.parse.SplitResult, requested: str, filename: str) -> DownloadResult:
        """ Download *uri* to *filename*, reporting the start and finish of
            the transfer. The *requested* URI is the one apt asked for, and
            is what it expects to see in the responses. Raises
            :class:`aptcfd.errors.AcquireError` on failure; the caller is
            responsible for reporting it.
        """

        try:
            url = self.rewrite(uri)

            if filename == '':
                raise StorageError('no Filename given for %s' % (requested))

            response = self.request(url, host_of(uri))
        except AcquireError:
            self.writer.start_uri(requested)
            raise

        with response:
            self.writer.start_uri(requested, size=content_length(response))
            result = self.download(response, filename)

        logger.debug('acquired %s: %d bytes to %s', requested, result.size, filename)

        self.writer.finish_uri(requested, filename, '', '', False, False, *result.fields())
        return result


    def rewrite(self, uri: urllib.parse.SplitResult) -> str:
        """ Return the URL to actually request for *uri*, swapping the
            method's own scheme for the real one.
        """

        try:
            scheme, warn = schemes[uri.scheme]
        except KeyError:
            raise TransportError("invalid URI Scheme: '%s'" % (uri.scheme))

        if warn:
            self.writer.warning("URI Scheme '%s' should not be used. Defaulting to cfd+https", uri.scheme)

        if host_of(uri) == '':
            raise TransportError('no host in URI: %s' % (urllib.parse.urlunsplit(uri)))

        uri = uri._replace(scheme=scheme)
        return urllib.parse.urlunsplit(uri)


    def request(self, url: str, host: str) -> requests.Response:
        """ Resolve a credential for *host*, and use it to issue a GET for
            *url*. Returns the streaming :class:`requests.Response` if the
            server answered with a 2xx status.
        """

        deadline = Deadline(self.credential_timeout)

        try:
            credential = self.resolver.resolve('https', host, deadline)
        finally:
            deadline.cancel()

        # requests validates the URL and headers while preparing; a rejected
        # URL or header value fails this acquire like any transport error.

        try:
            request = requests.Request('GET', url, headers=credential.headers())
            prepped = self.session.prepare_request(request)
            response = self.session.send(prepped, stream=True, timeout=self.http_timeout)
        except requests.RequestException as e:
            raise TransportError('GET for %s failed: %s' % (url, e))

        logger.debug('HTTP GET %s -> %d', url, response.status_code)

        if response.status_code < 200 or response.status_code >= 300:
            response.close()
            raise TransportError('GET for %s failed with %d %s' % (url, response.status_code, response.reason))

        return response


    def download(self, response: requests.Response, filename: str) -> DownloadResult:
        """ Stream the body of *response* into *filename*, digesting it on
            the way through.
        """

        partial = filename + self.partial_suffix

        try:
            result = self._stream(response, partial)
        except Exception:
            # Clean up the partially downloaded file.
            try:
                os.unlink(partial)
            except FileNotFoundError:
                pass
            except OSError as e:
                logger.warning('cannot remove partial download %s: %s', partial, e)
            raise

        try:
            os.replace(partial, filename)
        except OSError as e:
            raise StorageError("error renaming '%s' to '%s': %s" % (partial, filename, e))

        return result


    def _chunks(self, response: requests.Response) -> Iterator[bytes]:

        try:
            for chunk in response.iter_content(self.chunk_size):
                yield chunk
        except (requests.RequestException, OSError) as e:
            raise TransportError('error reading response body: %s' % (e))


    def _stream(self, response: requests.Response, partial: str) -> DownloadResult:

        digests = Digests()
        size = 0

        try:
            handle = open(partial, 'wb')
        except OSError as e:
            raise StorageError("error opening file '%s': %s" % (partial, e))

        # Closing flushes the last buffered chunk, so it can fail just like
        # a write. _chunks() turns read errors into TransportError; any
        # OSError seen here is local.

        try:
            for chunk in self._chunks(response):
                digests.update(chunk)
                handle.write(chunk)
                size += len(chunk)

            handle.close()
        except OSError as e:
            raise StorageError("error writing file '%s': %s" % (partial, e))
        finally:
            if not handle.closed:
                try:
                    handle.close()
                except OSError as e:
                    logger.warning('error closing %s: %s', partial, e)

        return DownloadResult(digests.hexdigests(), size)


# end of class Acquire


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
