# Released under Gnu GPL v2.0, see LICENSE file for details

import unittest
from unittest import mock

from tlslite.constants import ContentType, HandshakeType, \
        HeartbeatMessageType
from tlslite.messages import ClientHello
from tlslite.utils.codec import Parser

from bleedcheck.messages import Connect, Close, ClientHelloGenerator, \
        HeartbeatGenerator, MessageGenerator, Command, MAX_CIPHER_SUITES
from bleedcheck.ciphers import DEFAULT_CIPHER_SUITES
from bleedcheck.constants import ProbePhase
from bleedcheck.errors import EncodingError
from bleedcheck.record import split_records, decode_header
from bleedcheck.runner import ConnectionState
from bleedcheck.transport import Connection
from tests.mocksock import MockSocket


RANDOM = bytearray(b'\x53\x4a\x84\xa9') + bytearray(range(28))


def reassemble(records):
    """Return the handshake message carried in the records."""
    conn = Connection(MockSocket(bytearray().join(records)))
    data = bytearray()
    for _ in records:
        header = decode_header(conn)
        assert header.type == ContentType.handshake
        data += conn.read(header.length)
    return data


def parse_client_hello(data):
    parser = Parser(data)
    assert parser.get(1) == HandshakeType.client_hello
    return ClientHello().parse(parser)


class TestCommand(unittest.TestCase):
    def test_process(self):
        with self.assertRaises(NotImplementedError):
            Command().process(None)

    def test_node_type(self):
        cmd = Command()

        self.assertTrue(cmd.is_command())
        self.assertFalse(cmd.is_expect())
        self.assertFalse(cmd.is_generator())


class TestConnect(unittest.TestCase):
    def test___init__(self):
        connect = Connect("localhost", 4433)

        self.assertEqual(connect.version, (3, 3))
        self.assertEqual(connect.timeout, 5)
        self.assertEqual(connect.phase, ProbePhase.connecting)

    def test___repr__(self):
        connect = Connect("localhost", 4433)

        self.assertEqual(repr(connect),
                         "Connect(hostname='localhost', port=4433, "
                         "version=(3, 3), timeout=5)")

    @mock.patch('bleedcheck.messages.Connection.open')
    def test_process(self, mock_open):
        state = ConnectionState()
        connect = Connect("localhost", 4433, version=(3, 1), timeout=2)

        connect.process(state)

        mock_open.assert_called_once_with("localhost", 4433, 2)
        self.assertIs(state.connection, mock_open.return_value)
        self.assertEqual(state.record_version, (3, 1))


class TestClose(unittest.TestCase):
    def test_process(self):
        state = ConnectionState()
        sock = MockSocket(b'')
        state.connection = Connection(sock)

        Close().process(state)

        self.assertTrue(sock.closed)

    def test_process_without_connection(self):
        state = ConnectionState()

        Close().process(state)

        self.assertIsNone(state.connection)


class TestMessageGenerator(unittest.TestCase):
    def test_generate(self):
        gen = MessageGenerator()

        self.assertTrue(gen.is_generator())
        with self.assertRaises(NotImplementedError):
            gen.generate(None)


class TestClientHelloGenerator(unittest.TestCase):
    def test___init__(self):
        chg = ClientHelloGenerator()

        self.assertEqual(chg.ciphers, list(DEFAULT_CIPHER_SUITES))
        self.assertEqual(chg.version, (3, 3))
        self.assertEqual(len(chg.random), 32)
        self.assertEqual(chg.phase, ProbePhase.handshaking)
        self.assertEqual(chg.content_type, ContentType.handshake)

    def test___init__with_empty_ciphers(self):
        with self.assertRaises(EncodingError):
            ClientHelloGenerator([])

    def test___init__with_too_many_ciphers(self):
        with self.assertRaises(EncodingError):
            ClientHelloGenerator([0x002f] * (MAX_CIPHER_SUITES + 1))

    def test___init__with_invalid_cipher_id(self):
        with self.assertRaises(EncodingError):
            ClientHelloGenerator([0x10000])

    def test___init__with_short_random(self):
        with self.assertRaises(EncodingError):
            ClientHelloGenerator(random=bytearray(31))

    def test_make_random(self):
        random = ClientHelloGenerator.make_random(0x534a84a9)

        self.assertEqual(len(random), 32)
        self.assertEqual(random[:4], bytearray(b'\x53\x4a\x84\xa9'))

    @mock.patch('bleedcheck.messages.time')
    def test_make_random_uses_current_time(self, mock_time):
        mock_time.time.return_value = 0x01020304

        random = ClientHelloGenerator.make_random()

        self.assertEqual(random[:4], bytearray(b'\x01\x02\x03\x04'))

    def test_generate(self):
        chg = ClientHelloGenerator([0x002f, 0x0035], random=RANDOM)

        data = chg.generate(None)

        self.assertEqual(data,
                         bytearray(b'\x01'              # client_hello
                                   b'\x00\x00\x32'      # length
                                   b'\x03\x03') +       # TLS 1.2
                         RANDOM +
                         bytearray(b'\x00'              # session_id
                                   b'\x00\x04'          # ciphers length
                                   b'\x00\x2f\x00\x35'
                                   b'\x01\x00'          # null compression
                                   b'\x00\x05'          # extensions length
                                   b'\x00\x0f'          # heartbeat
                                   b'\x00\x01'
                                   b'\x01'))            # peer allowed
        self.assertIsInstance(chg.msg, ClientHello)

    def test_generate_with_default_ciphers(self):
        chg = ClientHelloGenerator(random=RANDOM)

        records = split_records(chg.content_type, (3, 3), chg.generate(None))

        self.assertEqual(len(records), 1)
        self.assertEqual(records[0][:9],
                         bytearray(b'\x16\x03\x03\x01\xd8'
                                   b'\x01\x00\x01\xd4'))
        self.assertEqual(records[0][-5:], bytearray(b'\x00\x0f\x00\x01\x01'))

    def test_cipher_list_survives_encoding(self):
        for ciphers in ([0xc02f],
                        list(DEFAULT_CIPHER_SUITES),
                        list(range(MAX_CIPHER_SUITES))):
            chg = ClientHelloGenerator(ciphers)

            records = split_records(chg.content_type, (3, 3),
                                    chg.generate(None))
            clnt_hello = parse_client_hello(reassemble(records))

            self.assertEqual(clnt_hello.cipher_suites, ciphers)
            self.assertEqual(clnt_hello.client_version, (3, 3))
            self.assertEqual(clnt_hello.random, chg.random)
            self.assertEqual(clnt_hello.session_id, bytearray())

    def test_generate_with_large_cipher_list_uses_many_records(self):
        chg = ClientHelloGenerator(list(range(MAX_CIPHER_SUITES)))

        records = split_records(chg.content_type, (3, 3),
                                chg.generate(None))

        self.assertEqual(len(records), 5)
        self.assertTrue(all(len(i) <= 2**14 + 5 for i in records))

    def test___repr__(self):
        chg = ClientHelloGenerator([0x002f])

        self.assertEqual(repr(chg),
                         "ClientHelloGenerator(version=(3, 3), "
                         "ciphers=<1 suites>)")


class TestHeartbeatGenerator(unittest.TestCase):
    def test___init__(self):
        hbg = HeartbeatGenerator()

        self.assertEqual(hbg.payload, bytearray())
        self.assertEqual(hbg.padding, bytearray())
        self.assertEqual(hbg.declared_length, 0x3ffd)
        self.assertEqual(hbg.message_type,
                         HeartbeatMessageType.heartbeat_request)
        self.assertEqual(hbg.transmitted_size, 3)
        self.assertEqual(hbg.phase, ProbePhase.heartbeating)

    def test___init__with_too_large_declared_length(self):
        with self.assertRaises(EncodingError):
            HeartbeatGenerator(declared_length=0x10000)

    def test___init__with_negative_declared_length(self):
        with self.assertRaises(EncodingError):
            HeartbeatGenerator(declared_length=-1)

    def test___init__with_payload_too_big_for_record(self):
        with self.assertRaises(EncodingError):
            HeartbeatGenerator(bytearray(2**14))

    def test_generate(self):
        hbg = HeartbeatGenerator()

        records = split_records(hbg.content_type, (3, 3), hbg.generate(None))

        self.assertEqual(records,
                         [bytearray(b'\x18\x03\x03\x00\x03'
                                    b'\x01\x3f\xfd')])

    def test_generate_with_declared_length_independent_of_payload(self):
        hbg = HeartbeatGenerator(bytearray(b'abc'), declared_length=0x4000,
                                 padding=bytearray(b'\x00' * 16))

        data = hbg.generate(None)

        self.assertEqual(data, bytearray(b'\x01\x40\x00abc') +
                         bytearray(16))
        self.assertEqual(hbg.transmitted_size, 22)

    def test_generate_with_honest_declared_length(self):
        hbg = HeartbeatGenerator(bytearray(b'test'), declared_length=4)

        self.assertEqual(hbg.generate(None), bytearray(b'\x01\x00\x04test'))

    def test_post_send(self):
        state = ConnectionState()
        hbg = HeartbeatGenerator(bytearray(b'abc'))

        hbg.post_send(state)

        self.assertEqual(state.heartbeat_sent_size, 6)

    def test___repr__(self):
        hbg = HeartbeatGenerator(declared_length=5)

        self.assertEqual(repr(hbg),
                         "HeartbeatGenerator(message_type=1, "
                         "declared_length=5, payload=bytearray(b''), "
                         "padding=bytearray(b''))")


if __name__ == '__main__':
    unittest.main()
