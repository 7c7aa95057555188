from . import fields
from . import message
from . import reader
from . import writer

from .message import Capability, Field, Message, parse_header
from .reader import MessageReader
from .writer import MessageWriter


"""
apt Method Protocol Layer
=========================

This package implements the line-oriented protocol apt uses to drive its
download methods over standard input and output. It knows nothing about
HTTP, credentials, or files on disk.

---------------------------------------------------------------------

Wire Format
-----------

    <status-code> <description>\\n
    <Key>: <Value>\\n          (zero or more)
    \\n

---------------------------------------------------------------------

Layer Overview
--------------

Method loop (aptcfd.method)
    │
    ▼
Reader / Writer (reader.py, writer.py)
    - MessageReader: two-state machine, one line at a time
    - MessageWriter: one method per message kind, fixed field order

    │
    ▼
Message Model (message.py)
    - Message: status code, description, read-only field mapping
    - Field, Capability

    │
    ▼
Field Vocabulary (fields.py)
    Canonical status codes and field names

---------------------------------------------------------------------
"""


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
