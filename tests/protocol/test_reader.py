import io

import aptcfd
import pytest

from aptcfd.errors import (
    EndOfStream,
    Interrupted,
    MessageErrors,
    ParseError,
)
from aptcfd.protocol import Message, MessageReader, MessageWriter
from aptcfd.protocol import reader as reader_module


def reader_for(text):
    return MessageReader(io.StringIO(text))


def test_transitions():

    states = (reader_module.AWAITING_HEADER, reader_module.IN_MESSAGE)
    kinds = (reader_module.END, reader_module.BLANK, reader_module.FIELD, reader_module.TEXT)

    for state in states:
        for kind in kinds:
            handler = MessageReader.transitions[(state, kind)]
            assert hasattr(MessageReader, handler)

    assert len(MessageReader.transitions) == len(states) * len(kinds)


def test_read_message():

    reader = reader_for('600 URI Acquire\n'
                        'URI: cfd://example.com/pool/blah.deb\n'
                        'Filename: /tmp/blah.deb\n'
                        '\n')

    message = reader.read_message()

    assert message.status_code == 600
    assert message.description == 'URI Acquire'
    assert message['URI'] == 'cfd://example.com/pool/blah.deb'
    assert message['Filename'] == '/tmp/blah.deb'

    with pytest.raises(EndOfStream) as caught:
        reader.read_message()

    assert caught.value.message is None


def test_filename_only():

    reader = reader_for('600 Acquire URI\nFilename: /tmp/blah.deb\n\n')

    message = reader.read_message()
    assert message == Message(600, 'Acquire URI', {'Filename': '/tmp/blah.deb'})


def test_read_line():

    reader = reader_for('601 Configuration\n'
                        'Config-Item: Acquire::cfd::Timeout=20\n'
                        '\n')

    assert reader.read_line() is None
    assert reader.state == reader_module.IN_MESSAGE
    assert reader.read_line() is None

    message = reader.read_line()
    assert message == Message(601, 'Configuration', {'Config-Item': 'Acquire::cfd::Timeout=20'})
    assert reader.state == reader_module.AWAITING_HEADER


def test_field_whitespace():

    reader = reader_for('600 URI Acquire\n'
                        '  URI :  cfd+https://example.com:8443/a  \n'
                        'Empty:\n'
                        '\n')

    message = reader.read_message()

    # Only the first colon separates the key from the value.

    assert message['URI'] == 'cfd+https://example.com:8443/a'
    assert message['Empty'] == ''


def test_several_messages():

    reader = reader_for('601 Configuration\n'
                        'Config-Item: APT::Architecture=amd64\n'
                        '\n'
                        '600 URI Acquire\n'
                        'URI: cfd://example.com/a\n'
                        'Filename: /tmp/a\n'
                        '\n'
                        '600 URI Acquire\n'
                        'URI: cfd://example.com/b\n'
                        'Filename: /tmp/b\n'
                        '\n')

    assert reader.read_message().status_code == 601
    assert reader.read_message()['URI'] == 'cfd://example.com/a'
    assert reader.read_message()['URI'] == 'cfd://example.com/b'

    with pytest.raises(EndOfStream):
        reader.read_message()


def test_empty_input():

    reader = reader_for('')

    with pytest.raises(EndOfStream) as caught:
        reader.read_message()

    assert caught.value.message is None

    # Reading past the end keeps saying so.

    with pytest.raises(EndOfStream):
        reader.read_message()


def test_missing_description():

    reader = reader_for('600\n'
                        '601 Configuration\n'
                        '\n')

    with pytest.raises(ParseError) as caught:
        reader.read_message()

    assert not isinstance(caught.value, MessageErrors)
    assert caught.value.message == Message(601, 'Configuration')


def test_interrupted():

    reader = reader_for('600 URI Acquire\n'
                        'Filename: /tmp/blah.deb\n')

    with pytest.raises(Interrupted) as caught:
        reader.read_message()

    assert caught.value.message == Message(600, 'URI Acquire', Filename='/tmp/blah.deb')

    with pytest.raises(EndOfStream) as caught:
        reader.read_message()

    assert caught.value.message is None


def test_header_only():

    reader = reader_for('600 URI Acquire\n')

    with pytest.raises(EndOfStream) as caught:
        reader.read_message()

    assert not isinstance(caught.value, Interrupted)
    assert caught.value.message == Message(600, 'URI Acquire')

    with pytest.raises(EndOfStream) as caught:
        reader.read_message()

    assert caught.value.message is None


def test_bad_field():

    reader = reader_for('600 URI Acquire\n'
                        'URI: cfd://example.com/a\n'
                        'this is not a field\n'
                        'Filename: /tmp/a\n'
                        '\n')

    with pytest.raises(ParseError) as caught:
        reader.read_message()

    error = caught.value
    assert not isinstance(error, MessageErrors)
    assert 'Invalid field format' in str(error)

    # The bad line is skipped; the rest of the message is intact.

    assert error.message == Message(600, 'URI Acquire', URI='cfd://example.com/a', Filename='/tmp/a')


def test_bad_field_then_end():

    reader = reader_for('600 URI Acquire\n'
                        'URI: cfd://example.com/a\n'
                        'garbage\n')

    with pytest.raises(MessageErrors) as caught:
        reader.read_message()

    error = caught.value
    assert len(error.errors) == 2
    assert isinstance(error.errors[0], ParseError)
    assert isinstance(error.errors[1], Interrupted)
    assert error.contains(Interrupted)
    assert not error.contains(EndOfStream)
    assert error.message == Message(600, 'URI Acquire', URI='cfd://example.com/a')

    text = str(error)
    assert text.startswith(MessageErrors.header)
    assert 'Invalid field format' in text

    with pytest.raises(EndOfStream):
        reader.read_message()


def test_new_message_without_end():

    reader = reader_for('600 URI Acquire\n'
                        'URI: cfd://example.com/a\n'
                        '601 Configuration\n'
                        'Config-Item: APT::Architecture=amd64\n'
                        '\n')

    with pytest.raises(ParseError) as caught:
        reader.read_message()

    assert 'without old message ending' in str(caught.value)
    assert caught.value.message == Message(600, 'URI Acquire', URI='cfd://example.com/a')

    # The interrupting header starts the next message.

    message = reader.read_message()
    assert message == Message(601, 'Configuration', {'Config-Item': 'APT::Architecture=amd64'})


def test_undecodable_input():

    stream = io.TextIOWrapper(io.BytesIO(b'600 URI Acquire\nURI: \xff\xfe\n\n'), encoding='utf-8')
    reader = MessageReader(stream)

    with pytest.raises(ParseError):
        reader.read_message()


def test_closed_input():

    stream = io.StringIO('600 URI Acquire\n')
    stream.close()
    reader = MessageReader(stream)

    with pytest.raises(aptcfd.errors.ClosedPipe):
        reader.read_message()


def test_writer_round_trip():

    stream = io.StringIO()
    writer = MessageWriter(stream)

    writer.start_uri('cfd://example.com/a', size=1024)
    writer.finish_uri('cfd://example.com/a', '/tmp/a', '', '', False, False,
                      ('SHA256-Hash', 'e3b0c442'))

    stream.seek(0)
    reader = MessageReader(stream)

    start = reader.read_message()
    assert start == Message(200, 'URI Start', URI='cfd://example.com/a', Size='1024')

    done = reader.read_message()
    assert done.status_code == 201
    assert done['Filename'] == '/tmp/a'
    assert done['SHA256-Hash'] == 'e3b0c442'


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
