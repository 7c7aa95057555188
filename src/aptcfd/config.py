""" Environment-derived settings. apt starts its methods with a sanitized
    environment and often as root, so every value here has a fallback.
"""

import os
import pwd


default_program = 'cloudflared'


def directory(default=None):
    """ Return the directory where service tokens are stored, one file per
        host. This defaults to ``$HOME/.cloudflared/cfd``, but can be
        overridden by calling this method with a valid path, or by setting
        the ``APT_CFD_HOME`` environment variable. Note that changes to the
        environment variable will be ignored unless it is set prior to the
        first invocation of this method.

        apt runs methods as root, but ``$HOME`` is usually preserved by sudo,
        so it is preferred over the password database entry for the current
        user.
    """

    if default is not None:
        default = str(default)
        default = os.path.expandvars(default)

        if os.path.isabs(default):
            pass
        else:
            raise ValueError('the token directory must be an absolute path')

        os.environ['APT_CFD_HOME'] = default
        directory.found = default


    found = directory.found

    if found is not None:
        return found

    try:
        found = os.environ['APT_CFD_HOME']
    except KeyError:
        pass
    else:
        directory.found = found
        return found

    home = os.environ.get('HOME', '').strip()

    if home == '':
        try:
            home = pwd.getpwuid(os.getuid()).pw_dir
        except KeyError:
            raise RuntimeError('APT_CFD_HOME and HOME environment variables not set, cannot determine token directory')

    found = os.path.join(home, '.cloudflared', 'cfd')

    directory.found = found
    return found

directory.found = None



def program():
    """ Return the name or path of the cloudflared executable, which can be
        overridden with the ``APT_CFD_CLOUDFLARED`` environment variable.
    """

    found = os.environ.get('APT_CFD_CLOUDFLARED', '').strip()

    if found == '':
        found = default_program

    return found



def sudo_user():
    """ Return the name of the user that invoked apt via sudo, or None. When
        set, cloudflared is run as that user so that it can reuse their
        browser session and token cache.
    """

    user = os.environ.get('SUDO_USER', '').strip()

    if user == '':
        return None

    return user


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
