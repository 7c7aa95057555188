"""Protocol constants.

Keep these in one place to avoid stringly-typed message handling.
"""

# Status codes sent by the method.

CAPABILITIES = 100
LOG = 101
STATUS = 102
REDIRECT = 103
WARNING = 104

URI_START = 200
URI_DONE = 201

AUX_REQUEST = 351

URI_FAILURE = 400
GENERAL_FAILURE = 401
MEDIA_CHANGE = 403

# Status codes sent by apt.

ACQUIRE = 600
CONFIGURATION = 601

descriptions = {
    CAPABILITIES: 'Capabilities',
    LOG: 'Log',
    STATUS: 'Status',
    REDIRECT: 'Redirect',
    WARNING: 'Warning',
    URI_START: 'URI Start',
    URI_DONE: 'URI Done',
    AUX_REQUEST: 'Aux Request',
    URI_FAILURE: 'URI Failure',
    GENERAL_FAILURE: 'General Failure',
    MEDIA_CHANGE: 'Media Change',
    ACQUIRE: 'URI Acquire',
    CONFIGURATION: 'Configuration',
}

# Field names.

ALT_IMS_HIT = 'Alt-IMS-Hit'
ALT_URIS = 'Alt-URIs'
AUX_DESCRIPTION = 'Aux-Description'
AUX_SHORTDESC = 'Aux-ShortDesc'
AUX_URI = 'Aux-URI'
DRIVE = 'Drive'
FAIL_REASON = 'FailReason'
FILENAME = 'Filename'
IMS_HIT = 'IMS-Hit'
MAXIMUM_SIZE = 'MaximumSize'
MEDIA = 'Media'
MESSAGE = 'Message'
NEW_URI = 'New-URI'
RESUME_POINT = 'Resume-Point'
SIZE = 'Size'
TRANSIENT_FAILURE = 'Transient-Failure'
URI = 'URI'
USED_MIRROR = 'UsedMirror'
VERSION = 'Version'

# Digest fields reported in a URI Done message.

MD5_HASH = 'MD5-Hash'
MD5SUM_HASH = 'MD5Sum-Hash'
SHA1_HASH = 'SHA1-Hash'
SHA256_HASH = 'SHA256-Hash'
SHA512_HASH = 'SHA512-Hash'

TRUE = 'true'
