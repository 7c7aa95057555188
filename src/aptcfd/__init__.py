""" Python implementation of an apt transport method for repositories behind
    Cloudflare Access. apt hands ``cfd+https://`` URIs to this method, which
    authenticates with a service token or a cloudflared user token, downloads
    the file, and reports its digests back to apt.
"""

# Submodules used by multiple other components.

from . import errors
from . import config
from . import protocol
from . import access

# Primary public-facing interfaces.

from . import acquire
from . import method

from .acquire import Acquire
from .method import Method

# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
