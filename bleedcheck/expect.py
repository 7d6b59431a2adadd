# Released under Gnu GPL v2.0, see LICENSE file for details

"""Reading and processing of received TLS messages"""

import logging
import time

from tlslite.constants import ContentType, HandshakeType, \
        HeartbeatMessageType
from tlslite.defragmenter import Defragmenter
from tlslite.utils.codec import Parser

from .constants import ProbePhase, DEFAULT_MAX_RECORDS
from .errors import ProtocolMismatch, TransportTimeout
from .messages import HEARTBEAT_HEADER_LENGTH
from .record import decode_header, parse_header, RECORD_HEADER_LENGTH
from .tree import TreeNode


class Expect(TreeNode):
    """Base class for objects handling message readers"""

    def is_expect(self):
        """Flag to tell that the object is a message reader"""
        return True

    def is_command(self):
        """Flag to tell that the object is a message reader"""
        return False

    def is_generator(self):
        """Flag to tell that the object is a message reader"""
        return False

    def process(self, state):
        """
        Read and process messages from the connection.

        :type state: ~bleedcheck.runner.ConnectionState
        """
        raise NotImplementedError("Subclasses need to implement this!")


class ExpectServerHelloDone(Expect):
    """
    Read and discard server handshake messages up to the ServerHelloDone.

    Contents of the handshake messages are not inspected, only their types
    and lengths are used. Records of other content types are skipped.
    Messages split across records or sharing a single record are supported.

    :ivar int max_records: how many records may be received before giving up
    :ivar float timeout: how long to wait for the ServerHelloDone, in
        seconds, None for no limit other than the socket timeout
    """

    phase = ProbePhase.handshaking

    def __init__(self, max_records=DEFAULT_MAX_RECORDS, timeout=None):
        super(ExpectServerHelloDone, self).__init__()
        self.max_records = max_records
        self.timeout = timeout

    def process(self, state):
        """
        Wait for the end of the server's first handshake flight.

        :raises ProtocolMismatch: when the server didn't send ServerHelloDone
            within the configured limits
        :raises TransportError: when the connection failed
        """
        connection = state.connection
        defragmenter = Defragmenter()
        defragmenter.add_dynamic_size(ContentType.handshake, 1, 3)
        deadline = None
        if self.timeout is not None:
            deadline = time.time() + self.timeout

        for _ in range(self.max_records):
            try:
                header = decode_header(connection, deadline)
                data = connection.read(header.length, deadline=deadline)
            except TransportTimeout:
                if deadline is not None and time.time() >= deadline:
                    raise self._deadline_exceeded()
                raise

            if header.type != ContentType.handshake:
                logging.debug("Ignoring %s record",
                              ContentType.toStr(header.type))
            else:
                defragmenter.add_data(ContentType.handshake, data)
                if self._process_messages(state, defragmenter):
                    return

            if deadline is not None and time.time() > deadline:
                raise self._deadline_exceeded()

        raise ProtocolMismatch("No ServerHelloDone in first {0} records"
                               .format(self.max_records))

    def _deadline_exceeded(self):
        return ProtocolMismatch("Server did not finish handshake in {0} "
                                "seconds".format(self.timeout))

    @staticmethod
    def _process_messages(state, defragmenter):
        """Consume complete handshake messages, return True on the last."""
        while True:
            ret = defragmenter.get_message()
            if ret is None:
                return False
            _, msg = ret
            hs_type = msg[0]
            state.handshake_types.append(hs_type)
            logging.debug("Discarding %s message, length %d",
                          HandshakeType.toStr(hs_type), len(msg) - 4)
            if hs_type == HandshakeType.server_hello_done:
                return True

    def __repr__(self):
        """Return human readable representation of the object."""
        return self._repr(["max_records", "timeout"])


class HeartbeatResponse(object):
    """
    Heartbeat message received from the server.

    :ivar int message_type: see
        :py:class:`~tlslite.constants.HeartbeatMessageType`
    :ivar int declared_length: payload length declared by the server
    :ivar bytearray payload: payload bytes that were actually received,
        up to ``declared_length`` of them
    :ivar int record_length: length of the record that carried the message
    """

    def __init__(self, message_type, declared_length, payload,
                 record_length):
        self.message_type = message_type
        self.declared_length = declared_length
        self.payload = payload
        self.record_length = record_length

    @property
    def truncated(self):
        """True if the connection ended before the whole payload arrived."""
        return len(self.payload) < self.declared_length

    def __repr__(self):
        return ("HeartbeatResponse(message_type={0}, declared_length={1}, "
                "received={2}, record_length={3})").format(
                    HeartbeatMessageType.toStr(self.message_type),
                    self.declared_length, len(self.payload),
                    self.record_length)


class ExpectHeartbeat(Expect):
    """
    Read the reply to a heartbeat request.

    Reads exactly as many payload bytes as the server declares in its
    message, irrespective of the length declared in the request.
    Saves the result as ``heartbeat_response`` in the connection state.
    """

    phase = ProbePhase.heartbeating

    def process(self, state):
        """
        Read a single heartbeat message.

        :raises ProtocolMismatch: when the server didn't reply with a
            heartbeat record in the allotted time
        :raises TransportError: when the connection failed
        """
        connection = state.connection
        try:
            data = connection.read(1)
        except TransportTimeout:
            raise ProtocolMismatch("No response to heartbeat request")
        # a stall after the record started is a truncated reply
        data += connection.read(RECORD_HEADER_LENGTH - 1)
        header = parse_header(data)

        if header.type != ContentType.heartbeat:
            raise ProtocolMismatch(
                "Expected heartbeat record, received {0}"
                .format(ContentType.toStr(header.type)), header.type)

        parser = Parser(connection.read(HEARTBEAT_HEADER_LENGTH))
        message_type = parser.get(1)
        declared_length = parser.get(2)
        if message_type != HeartbeatMessageType.heartbeat_response:
            logging.warning("Unexpected heartbeat message type: %s",
                            HeartbeatMessageType.toStr(message_type))

        payload = connection.read(declared_length, exact=False)
        state.heartbeat_response = HeartbeatResponse(message_type,
                                                     declared_length,
                                                     payload,
                                                     header.length)
        logging.debug("Received %r", state.heartbeat_response)

    def __repr__(self):
        return "ExpectHeartbeat()"
