""" Stand-ins for the outside world: cloudflared, the network, and the
    service token directory. Used by the fixtures defined in conftest.py
    and directly by the tests that need to script them.
"""

import io

import requests
import requests.adapters
import requests.structures
import urllib3.exceptions

import aptcfd


class Outcome:
    """ How one fake cloudflared invocation should behave: print *output* on
        stdout and *stderr* on stderr, take *sleep* seconds, and exit with
        *exit_code*.
    """

    def __init__(self, exit_code=0, output='', stderr='', sleep=0):
        self.exit_code = exit_code
        self.output = output
        self.stderr = stderr
        self.sleep = sleep


# end of class Outcome



class FakeLauncher(aptcfd.access.ProcessLauncher):
    """ Each call to run() consumes the next scripted :class:`Outcome`; a
        call with nothing scripted exits cleanly with no output. Every
        command line is recorded in *calls*.
    """

    def __init__(self, *outcomes):
        self.reset(*outcomes)


    def reset(self, *outcomes):
        self.outcomes = list(outcomes)
        self.calls = list()


    def run(self, arguments, deadline, stderr=None):

        self.calls.append(list(arguments))

        if self.outcomes:
            outcome = self.outcomes.pop(0)
        else:
            outcome = Outcome()

        if outcome.sleep > 0:
            if deadline.wait(outcome.sleep):
                raise aptcfd.errors.LaunchTimeout('fake process hung')

        if stderr is not None and outcome.stderr:
            stderr.write(outcome.stderr)

        if outcome.exit_code != 0:
            raise aptcfd.errors.LaunchError('fake process failed', outcome.exit_code)

        return outcome.output


# end of class FakeLauncher



class BrokenBody:
    """ A response body that yields *data* and then fails the way urllib3
        does when a connection drops mid-transfer.
    """

    def __init__(self, data):
        self.data = data


    def stream(self, chunk_size, decode_content=True):
        yield self.data
        raise urllib3.exceptions.ProtocolError('Connection broken: reset by peer')


    def close(self):
        pass


# end of class BrokenBody



class FakeAdapter(requests.adapters.BaseAdapter):
    """ A requests transport adapter that answers every request with the
        next scripted response, without touching the network. A scripted
        exception is raised instead of being returned. Every prepared
        request is recorded in *requests*.
    """

    def __init__(self):
        requests.adapters.BaseAdapter.__init__(self)
        self.responses = list()
        self.requests = list()


    def add(self, status=200, body=b'', headers=None, reason='OK', raw=None):

        if headers is None:
            headers = dict()
            headers['Content-Length'] = str(len(body))

        if raw is None:
            raw = io.BytesIO(body)

        self.responses.append((status, reason, headers, raw))


    def fail(self, exception):
        self.responses.append(exception)


    def send(self, request, stream=False, timeout=None, verify=True, cert=None, proxies=None):

        self.requests.append(request)
        scripted = self.responses.pop(0)

        if isinstance(scripted, Exception):
            raise scripted

        status, reason, headers, raw = scripted

        response = requests.Response()
        response.status_code = status
        response.reason = reason
        response.headers = requests.structures.CaseInsensitiveDict(headers)
        response.raw = raw
        response.url = request.url
        response.request = request
        response.connection = self
        return response


    def close(self):
        pass


# end of class FakeAdapter



def write_token(directory, host, id='client.example.com', secret='s3cr3t'):
    """ Store a service token for *host* in *directory*.
    """

    filename = directory / (host + '-Service-Token')
    filename.write_text('%s\n%s\n' % (id, secret))
    return filename


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
