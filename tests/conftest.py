import pytest
import requests

import fakes


@pytest.fixture
def launcher():
    return fakes.FakeLauncher()


@pytest.fixture
def adapter():
    return fakes.FakeAdapter()


@pytest.fixture
def session(adapter):

    session = requests.Session()
    session.mount('https://', adapter)
    session.mount('http://', adapter)

    yield session

    session.close()


@pytest.fixture
def tokens(tmp_path):
    """ An empty service token directory.
    """

    directory = tmp_path / 'tokens'
    directory.mkdir()
    return directory


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
