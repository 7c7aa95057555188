""" Cloudflare Access credentials. A request to a protected host needs either
    a service token (a long-lived client id and secret, stored on disk) or a
    user token (a short-lived JWT obtained interactively via cloudflared).
    The :class:`Resolver` tries the former first, then the latter.
"""

import logging
import os
import shlex

from .. import config
from ..errors import CredentialError, LaunchError, LaunchTimeout
from .launcher import SubprocessLauncher

logger = logging.getLogger(__name__)


class ServiceToken:
    """ A Cloudflare Access service token. The *id* is the client id, of the
        form ``<id>.<host>``; the *secret* is the client secret.
    """

    kind = 'service'

    def __init__(self, id, secret):
        self.id = id
        self.secret = secret


    def __eq__(self, other):
        if not isinstance(other, ServiceToken):
            return NotImplemented
        return self.id == other.id and self.secret == other.secret


    def __repr__(self):
        # Never show the secret.
        return 'ServiceToken(%r)' % (self.id)


    def headers(self):
        """ Return the request headers that authenticate with this token.
        """

        headers = dict()
        headers['Cf-Access-Client-Id'] = self.id
        headers['Cf-Access-Client-Secret'] = self.secret
        return headers


# end of class ServiceToken



class UserToken:
    """ A Cloudflare Access user token: the *jwt* printed by
        ``cloudflared access token``.
    """

    kind = 'bearer'

    def __init__(self, jwt):
        self.jwt = jwt


    def __eq__(self, other):
        if not isinstance(other, UserToken):
            return NotImplemented
        return self.jwt == other.jwt


    def __repr__(self):
        return 'UserToken(...)'


    def headers(self):
        return {'Cf-Access-Token': self.jwt}


# end of class UserToken



def parse_service_token(data):
    """ Convert the two-line contents of a service token file into a
        :class:`ServiceToken`. The file is expected to contain::

            ${CLIENT_ID}
            ${CLIENT_SECRET}

        Whitespace around the whole text and around each line is ignored.
        A :class:`aptcfd.errors.CredentialError` is raised if there are not
        exactly two lines.
    """

    lines = data.strip().split('\n')

    if len(lines) != 2:
        raise CredentialError('parse expected two lines of input, got %d' % (len(lines)))

    id, secret = lines
    return ServiceToken(id.strip(), secret.strip())



def load_service_token(filename):
    """ Read and parse the service token stored in *filename*. Raises
        :class:`OSError` if the file cannot be read.
    """

    with open(filename, 'r') as handle:
        data = handle.read()

    return parse_service_token(data)



class Resolver:
    """ Find a credential for a host. The *directory* holds service token
        files, one per host, named ``<host>-Service-Token``; if no usable
        file exists the user is asked to log in via cloudflared, which is
        run through *launcher*.

        *stderr* receives cloudflared's standard error during the login
        step, which is where it prints the URL the user must visit. If
        *sudo_user* is set both cloudflared invocations are wrapped in
        ``su <sudo_user> -c``, so that cloudflared runs with the invoking
        user's token cache rather than root's.
    """

    failure_sentinel = 'Unable'

    def __init__(self, directory=None, launcher=None, program=None, sudo_user=None, stderr=None):

        if directory is None:
            directory = config.directory()

        if launcher is None:
            launcher = SubprocessLauncher()

        if program is None:
            program = config.program()

        self.directory = directory
        self.launcher = launcher
        self.program = program
        self.stderr = stderr
        self.sudo_user = sudo_user


    def resolve(self, scheme, host, deadline):
        """ Return a credential for *host*, trying a service token before
            falling back to cloudflared. The *scheme* is the one the request
            will actually use (https, not cfd+https). Any cloudflared
            invocation is bound by *deadline*. Raises
            :class:`aptcfd.errors.CredentialError` if no credential
            can be found.
        """

        token = self.find_service_token(host)

        if token is not None:
            logger.debug('using service token %s for %s', token.id, host)
            return token

        return self.find_user_token(scheme + '://' + host, deadline)


    def find_service_token(self, host):
        """ Return the :class:`ServiceToken` stored for *host*, or None if
            there isn't a usable one.
        """

        if not self.directory:
            return None

        filename = os.path.join(self.directory, host + '-Service-Token')

        try:
            return load_service_token(filename)
        except FileNotFoundError:
            logger.debug('no service token at %s', filename)
        except (OSError, UnicodeDecodeError) as e:
            logger.debug('cannot read service token at %s: %s', filename, e)
        except CredentialError as e:
            logger.debug('malformed service token at %s: %s', filename, e)

        return None


    def find_user_token(self, baseuri, deadline):
        """ Log in to *baseuri* with cloudflared, then ask it for the token.
            The login step may block while the user authenticates in a
            browser; both steps share *deadline*.
        """

        login = self._command('access', 'login', baseuri)
        token = self._command('access', 'token', '--app', baseuri)

        logger.debug('logging in to %s', baseuri)

        try:
            self.launcher.run(login, deadline, stderr=self.stderr)
        except LaunchTimeout as e:
            raise CredentialError('timed out logging in to %s: %s' % (baseuri, e))
        except LaunchError as e:
            raise CredentialError('unable to log in to %s: %s' % (baseuri, e))

        try:
            output = self.launcher.run(token, deadline)
        except LaunchTimeout as e:
            raise CredentialError('timed out fetching token for %s: %s' % (baseuri, e))
        except LaunchError as e:
            raise CredentialError('unable to fetch token for %s: %s' % (baseuri, e))

        output = output.strip()

        if output == '':
            raise CredentialError('no output from `%s access token`' % (self.program))

        # cloudflared reports some failures on stdout with a zero exit status.

        if output.startswith(self.failure_sentinel):
            raise CredentialError('bad output from `%s access token`: unable to get token' % (self.program))

        # A token is a single word; anything else would end up verbatim in
        # a request header.

        if len(output.split()) != 1:
            raise CredentialError('bad output from `%s access token`: expected a single token' % (self.program))

        return UserToken(output)


    def _command(self, *arguments):

        if self.sudo_user:
            command = [self.program]
            command.extend(arguments)
            command = ' '.join(shlex.quote(argument) for argument in command)
            return ['su', self.sudo_user, '-c', command]

        command = [self.program]
        command.extend(arguments)
        return command


# end of class Resolver


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
