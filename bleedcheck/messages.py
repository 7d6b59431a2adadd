# Released under Gnu GPL v2.0, see LICENSE file for details

"""Objects for generating TLS messages to send."""

import logging
import time

from tlslite.constants import ContentType, HeartbeatMessageType, \
        HeartbeatMode
from tlslite.extensions import HeartbeatExtension
from tlslite.messages import ClientHello
from tlslite.utils.codec import Writer
from tlslite.utils.cryptomath import getRandomBytes

from .ciphers import DEFAULT_CIPHER_SUITES, cipher_suite_name
from .constants import ProbePhase, DEFAULT_DECLARED_LENGTH
from .errors import EncodingError
from .record import MAX_FRAGMENT_LENGTH
from .transport import Connection
from .tree import TreeNode

# the cipher suite list length is a u16 count of bytes
MAX_CIPHER_SUITES = (2**16 - 1) // 2

# message type and payload length fields of a heartbeat message
HEARTBEAT_HEADER_LENGTH = 3


class Command(TreeNode):
    """Command objects."""

    def is_command(self):
        """Define object as a command node."""
        return True

    def is_expect(self):
        """Define object as a command node."""
        return False

    def is_generator(self):
        """Define object as a command node."""
        return False

    def process(self, state):
        """Change the state of the connection."""
        raise NotImplementedError("Subclasses need to implement this!")


class Connect(Command):
    """Object used to connect to a TCP server."""

    phase = ProbePhase.connecting

    def __init__(self, hostname, port, version=(3, 3), timeout=5):
        """
        Provide minimal settings needed to connect to other peer.

        :param str hostname: host name of the server to connect to
        :param int port: :term:`TCP` port number to connect to
        :param tuple(int,int) version: the protocol version used in the
            record layer
        :param float timeout: amount of time to wait while connecting or
            expecting a message before aborting the connection, in seconds
        """
        super(Connect, self).__init__()
        self.hostname = hostname
        self.port = port
        self.version = version
        self.timeout = timeout

    def process(self, state):
        """Connect to a server."""
        state.connection = Connection.open(self.hostname, self.port,
                                           self.timeout)
        state.record_version = self.version

    def __repr__(self):
        """Return human readable representation of the object."""
        return self._repr(["hostname", "port", "version", "timeout"])


class Close(Command):
    """Object used to close a TCP connection."""

    phase = ProbePhase.closed

    def process(self, state):
        """Close currently open connection."""
        if state.connection is not None:
            state.connection.close()

    def __repr__(self):
        return "Close()"


class MessageGenerator(TreeNode):
    """
    Message generator objects.

    :ivar int content_type: record layer content type of the generated
        message
    """

    content_type = None

    def is_command(self):
        """Define object as a generator node."""
        return False

    def is_expect(self):
        """Define object as a generator node."""
        return False

    def is_generator(self):
        """Define object as a generator node."""
        return True

    def generate(self, state):
        """Return the encoded protocol message ready to write to socket."""
        raise NotImplementedError("Subclasses need to implement this!")

    def post_send(self, state):
        """Modify the state after sending the message."""
        # since most messages don't require any post-send modifications
        # create a no-op default action
        pass


class ClientHelloGenerator(MessageGenerator):
    """
    Generator for the Client Hello message.

    The message advertises the provided cipher suites, only the null
    compression method and has a single extension: heartbeat with the
    peer_allowed_to_send mode. Session ID is always empty.

    :ivar list(int) ciphers: cipher suite identifiers to advertise
    :ivar tuple(int,int) version: protocol version proposed to the server
    :ivar bytearray random: client random value, 32 bytes long
    :ivar msg: the last generated :py:class:`~tlslite.messages.ClientHello`
    """

    phase = ProbePhase.handshaking
    content_type = ContentType.handshake

    def __init__(self, ciphers=None, version=(3, 3), random=None,
                 gmt_unix_time=None):
        """
        Set up the object for generation of Client Hello messages.

        :param ciphers: cipher suite identifiers, in order of preference,
            the 211 suites of :py:data:`DEFAULT_CIPHER_SUITES` by default
        :param tuple(int,int) version: protocol version, TLS 1.2 by default
        :param bytearray random: value of the random field, generated
            from the current time and random bytes if unset
        :param int gmt_unix_time: timestamp to place in the first 4 bytes of
            the generated random value, current time if unset
        :raises EncodingError: when the parameters can't be encoded in a
            Client Hello
        """
        super(ClientHelloGenerator, self).__init__()
        if ciphers is None:
            ciphers = DEFAULT_CIPHER_SUITES
        if not ciphers:
            raise EncodingError("At least one cipher suite must be "
                                "advertised")
        if len(ciphers) > MAX_CIPHER_SUITES:
            raise EncodingError("Too many cipher suites: {0}, maximum is {1}"
                                .format(len(ciphers), MAX_CIPHER_SUITES))
        if any(not 0 <= i <= 0xFFFF for i in ciphers):
            raise EncodingError("Cipher suite identifiers must fit in two "
                                "bytes")
        if random is None:
            random = self.make_random(gmt_unix_time)
        if len(random) != 32:
            raise EncodingError("Client random must be 32 bytes long, got {0}"
                                .format(len(random)))

        self.ciphers = list(ciphers)
        self.version = version
        self.random = bytearray(random)
        self.msg = None

    @staticmethod
    def make_random(gmt_unix_time=None):
        """
        Create the value for the random field.

        :rtype: bytearray
        :return: 4 byte big-endian timestamp followed by 28 random bytes
        """
        if gmt_unix_time is None:
            gmt_unix_time = int(time.time())
        writer = Writer()
        writer.add(gmt_unix_time & 0xFFFFFFFF, 4)
        return writer.bytes + getRandomBytes(28)

    def generate(self, state):
        """Create a Client Hello message."""
        del state
        heartbeat = HeartbeatExtension().create(
            HeartbeatMode.PEER_ALLOWED_TO_SEND)
        clnt_hello = ClientHello().create(self.version,
                                          self.random,
                                          bytearray(0),
                                          self.ciphers,
                                          extensions=[heartbeat])
        self.msg = clnt_hello
        logging.debug("Generated Client Hello with %d suites, first: %s",
                      len(self.ciphers), cipher_suite_name(self.ciphers[0]))
        return clnt_hello.write()

    def __repr__(self):
        """Human readable representation of the object."""
        return "ClientHelloGenerator(version={0!r}, ciphers=<{1} suites>)"\
            .format(self.version, len(self.ciphers))


class HeartbeatGenerator(MessageGenerator):
    """
    Generator for heartbeat messages with arbitrary payload length field.

    The declared payload length is not derived from the payload, so a
    request that declares more data than it carries can be sent. A server
    affected by CVE-2014-0160 will echo ``declared_length`` bytes back,
    filling the missing part with data from its memory.

    :ivar int message_type: the type of the message to send, see
        :py:class:`~tlslite.constants.HeartbeatMessageType` for values
    :ivar bytearray payload: payload actually sent to the other side
    :ivar int declared_length: value of the payload length field
    :ivar bytearray padding: padding sent after the payload
    """

    phase = ProbePhase.heartbeating
    content_type = ContentType.heartbeat

    def __init__(self, payload=None, declared_length=DEFAULT_DECLARED_LENGTH,
                 message_type=HeartbeatMessageType.heartbeat_request,
                 padding=None):
        """
        Initialise and create instance of object.

        :type payload: bytes-like
        :param payload: data to send, empty by default
        :param int declared_length: length of payload claimed in the
            message, 16381 by default
        :param int message_type: type of message to send, request by default
        :type padding: bytes-like
        :param padding: data to send after the payload, empty by default
        :raises EncodingError: when the declared length doesn't fit the
            length field or the message doesn't fit in a single record
        """
        super(HeartbeatGenerator, self).__init__()
        if payload is None:
            payload = bytearray()
        if padding is None:
            padding = bytearray()
        if not 0 <= declared_length <= 0xFFFF:
            raise EncodingError("Declared payload length must fit in two "
                                "bytes, got {0}".format(declared_length))
        self.message_type = message_type
        self.payload = bytearray(payload)
        self.declared_length = declared_length
        self.padding = bytearray(padding)
        if self.transmitted_size > MAX_FRAGMENT_LENGTH:
            raise EncodingError("Heartbeat message does not fit in a single "
                                "record: {0} bytes"
                                .format(self.transmitted_size))

    @property
    def transmitted_size(self):
        """
        Number of bytes of the heartbeat message actually sent.

        A well-behaved server can't echo back more than that.
        """
        return HEARTBEAT_HEADER_LENGTH + len(self.payload) + \
            len(self.padding)

    def generate(self, state):
        """Create the heartbeat message."""
        del state
        writer = Writer()
        writer.add(self.message_type, 1)
        writer.add(self.declared_length, 2)
        writer.bytes += self.payload
        writer.bytes += self.padding
        return writer.bytes

    def post_send(self, state):
        """Save the size of sent message for comparison with reply."""
        state.heartbeat_sent_size = self.transmitted_size

    def __repr__(self):
        """Human readable representation of the object."""
        return self._repr(["message_type", "declared_length", "payload",
                           "padding"])
