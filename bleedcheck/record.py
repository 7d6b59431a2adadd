# Released under Gnu GPL v2.0, see LICENSE file for details

"""Encoding and decoding of the TLS record layer framing."""

import logging

from tlslite.constants import ContentType
from tlslite.messages import RecordHeader3
from tlslite.utils.codec import Parser

from .errors import EncodingError

# length of the record header: type, major version, minor version, length
RECORD_HEADER_LENGTH = 5

# largest payload a record can declare (u16 length field)
MAX_RECORD_LENGTH = 2**16 - 1

# largest plaintext fragment allowed in SSLv3 up to TLS 1.2
MAX_FRAGMENT_LENGTH = 2**14


def encode_record(content_type, version, payload):
    """
    Wrap a protocol message in a single record.

    :param int content_type: type of the protocol message, see
        :py:class:`~tlslite.constants.ContentType`
    :param tuple(int,int) version: record layer protocol version
    :param payload: protocol message
    :type payload: bytes-like
    :rtype: bytearray
    :raises EncodingError: when the payload doesn't fit in a single record
    """
    if len(payload) > MAX_RECORD_LENGTH:
        raise EncodingError("Record payload too long: {0} bytes, maximum is "
                            "{1}".format(len(payload), MAX_RECORD_LENGTH))
    header = RecordHeader3().create(version, content_type, len(payload))
    return header.write() + bytearray(payload)


def split_records(content_type, version, data,
                  max_fragment=MAX_FRAGMENT_LENGTH):
    """
    Wrap a protocol message in as many records as necessary.

    Empty message is sent as a single zero-length record.

    :rtype: list(bytearray)
    """
    if not data:
        return [encode_record(content_type, version, bytearray())]
    return [encode_record(content_type, version, data[i:i + max_fragment])
            for i in range(0, len(data), max_fragment)]


def parse_header(data):
    """
    Parse the record header from received bytes.

    :param bytearray data: the 5 bytes of the header
    :rtype: ~tlslite.messages.RecordHeader3
    """
    header = RecordHeader3().parse(Parser(data))
    logging.debug("Received record: %s, version %d.%d, length %d",
                  ContentType.toStr(header.type), header.version[0],
                  header.version[1], header.length)
    return header


def decode_header(connection, deadline=None):
    """
    Read a record header from connection.

    The payload of the record is left in the stream.

    :param connection: source of the data, needs to provide the
        :py:meth:`~bleedcheck.transport.Connection.read` method
    :param float deadline: time after which the read is abandoned, see
        :py:meth:`~bleedcheck.transport.Connection.read`
    :rtype: ~tlslite.messages.RecordHeader3
    :return: header with the ``type``, ``version`` and ``length`` fields
        set to the values declared by the peer
    :raises TransportError: when the header couldn't be read in full
    """
    return parse_header(connection.read(RECORD_HEADER_LENGTH,
                                        deadline=deadline))
