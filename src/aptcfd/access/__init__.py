""" Cloudflare Access credential handling: service tokens on disk, user
    tokens from cloudflared, and the process launcher used to run it.
"""

from . import launcher
from . import token
from . import urlwriter

from .launcher import Deadline, ProcessLauncher, SubprocessLauncher
from .token import Resolver, ServiceToken, UserToken, parse_service_token
from .urlwriter import URLWriter

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
