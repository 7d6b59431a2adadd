# Released under Gnu GPL v2.0, see LICENSE file for details

"""Check of a single server for the Heartbleed vulnerability."""

import logging

from .ciphers import DEFAULT_CIPHER_SUITES
from .constants import ProbeOutcome, ProbePhase, DEFAULT_DECLARED_LENGTH, \
        DEFAULT_MAX_RECORDS
from .errors import TransportError, ProtocolMismatch
from .expect import ExpectServerHelloDone, ExpectHeartbeat
from .messages import Command, Connect, Close, ClientHelloGenerator, \
        HeartbeatGenerator
from .runner import Runner


class ProbeSettings(object):
    """
    Configuration of the probe

    :ivar str hostname: name or address of the server
    :ivar int port: TCP port of the server, 443 by default
    :ivar float timeout: time limit for connecting and for every read, in
        seconds
    :ivar float handshake_timeout: time limit for receiving the whole first
        server flight, in seconds
    :ivar int max_records: how many records may the server send before
        ServerHelloDone
    :ivar cipher_suites: identifiers of cipher suites to advertise
    :ivar int declared_length: payload length declared in the heartbeat
        request
    :ivar bytearray payload: payload actually sent in the heartbeat request
    :ivar tuple(int,int) version: protocol version used in records and the
        Client Hello
    """

    def __init__(self, hostname, port=443):
        self.hostname = hostname
        self.port = port
        self.timeout = 5
        self.handshake_timeout = 10
        self.max_records = DEFAULT_MAX_RECORDS
        self.cipher_suites = DEFAULT_CIPHER_SUITES
        self.declared_length = DEFAULT_DECLARED_LENGTH
        self.payload = bytearray()
        self.version = (3, 3)


class ProbeResult(object):
    """
    Outcome of a single probe.

    :ivar int outcome: see :py:class:`~bleedcheck.constants.ProbeOutcome`
    :ivar bytearray leaked: bytes the server sent in excess of the request,
        the whole received heartbeat payload, None if none was received
    :ivar str reason: human readable explanation of the outcome
    :ivar int phase: phase in which the probe was aborted, None when it
        completed, see :py:class:`~bleedcheck.constants.ProbePhase`
    """

    def __init__(self, hostname, port, outcome, leaked=None, reason=None,
                 phase=None):
        self.hostname = hostname
        self.port = port
        self.outcome = outcome
        self.leaked = leaked
        self.reason = reason
        self.phase = phase

    @property
    def vulnerable(self):
        return self.outcome == ProbeOutcome.vulnerable

    @property
    def safe(self):
        return self.outcome == ProbeOutcome.safe

    @property
    def indeterminate(self):
        return self.outcome == ProbeOutcome.indeterminate

    @property
    def reachable(self):
        """False if the connection to the server could not be opened."""
        return self.phase != ProbePhase.connecting

    @property
    def leaked_length(self):
        if self.leaked is None:
            return 0
        return len(self.leaked)

    def __repr__(self):
        return ("ProbeResult(hostname={0!r}, port={1}, outcome={2}, "
                "leaked_length={3}, reason={4!r})").format(
                    self.hostname, self.port,
                    ProbeOutcome.toStr(self.outcome), self.leaked_length,
                    self.reason)


def classify_response(response, sent_size):
    """
    Classify the server based on its reply to the crafted heartbeat.

    :param response: the received
        :py:class:`~bleedcheck.expect.HeartbeatResponse`
    :param int sent_size: number of heartbeat message bytes actually sent
    :rtype: tuple(int,str)
    :return: outcome and the reason for it
    """
    received = len(response.payload)
    if response.truncated:
        return (ProbeOutcome.indeterminate,
                "Connection closed after {0} out of {1} declared heartbeat "
                "payload bytes".format(received, response.declared_length))
    if received > sent_size:
        return (ProbeOutcome.vulnerable,
                "Server returned {0} bytes in reply to a {1} byte heartbeat"
                .format(received, sent_size))
    return (ProbeOutcome.safe,
            "Server returned {0} bytes in reply to a {1} byte heartbeat"
            .format(received, sent_size))


class ClassifyHeartbeatResponse(Command):
    """Compare the heartbeat response with what was sent."""

    phase = ProbePhase.classifying

    def process(self, state):
        """Set the outcome in connection state."""
        state.outcome, state.reason = classify_response(
            state.heartbeat_response, state.heartbeat_sent_size)
        state.leaked = state.heartbeat_response.payload

    def __repr__(self):
        return "ClassifyHeartbeatResponse()"


class HeartbleedProbe(object):
    """
    Check a single server for CVE-2014-0160.

    Sends a Client Hello advertising the heartbeat extension, waits for the
    ServerHelloDone and then, without finishing the handshake, sends a
    heartbeat request that declares a much larger payload than it carries.
    Every run uses a new connection.
    """

    def __init__(self, settings):
        """
        :type settings: ProbeSettings
        """
        self.settings = settings

    def build_conversation(self):
        """
        Create the steps of the probe.

        :raises EncodingError: when the messages can't be created with
            current settings
        """
        settings = self.settings
        conversation = Connect(settings.hostname, settings.port,
                               version=settings.version,
                               timeout=settings.timeout)
        node = conversation
        node = node.add_child(ClientHelloGenerator(settings.cipher_suites,
                                                   version=settings.version))
        node = node.add_child(ExpectServerHelloDone(
            max_records=settings.max_records,
            timeout=settings.handshake_timeout))
        node = node.add_child(HeartbeatGenerator(
            settings.payload, declared_length=settings.declared_length))
        node = node.add_child(ExpectHeartbeat())
        node = node.add_child(ClassifyHeartbeatResponse())
        node = node.add_child(Close())
        return conversation

    def run(self):
        """
        Execute the probe.

        :rtype: ProbeResult
        :raises EncodingError: when the settings are invalid, before any
            connection is made
        """
        conversation = self.build_conversation()
        runner = Runner(conversation)
        try:
            runner.run()
        except TransportError as exc:
            result = self._result(ProbeOutcome.indeterminate,
                                  self._describe_failure(runner.state, exc),
                                  phase=runner.state.error_phase)
        except ProtocolMismatch as exc:
            if runner.state.error_phase == ProbePhase.heartbeating:
                # the server ignored or rejected the malformed request
                result = self._result(ProbeOutcome.safe, str(exc))
            else:
                result = self._result(
                    ProbeOutcome.indeterminate,
                    "Target did not respond as expected: {0}".format(exc),
                    phase=runner.state.error_phase)
        else:
            result = self._result(runner.state.outcome, runner.state.reason,
                                  leaked=runner.state.leaked)
        logging.info("%s:%s is %s: %s", self.settings.hostname,
                     self.settings.port, ProbeOutcome.toStr(result.outcome),
                     result.reason)
        return result

    @staticmethod
    def _describe_failure(state, exc):
        if state.error_phase == ProbePhase.connecting:
            return "Could not reach target: {0}".format(exc)
        return "Target did not respond as expected: {0}".format(exc)

    def _result(self, outcome, reason, leaked=None, phase=None):
        return ProbeResult(self.settings.hostname, self.settings.port,
                           outcome, leaked=leaked, reason=reason, phase=phase)
