# Released under Gnu GPL v2.0, see LICENSE file for details
"""Main event loop for running the probe conversation"""

import logging

from .constants import ProbePhase
from .errors import ProbeError
from .record import split_records


class ConnectionState(object):

    """
    Keeps the state of the probed connection

    :ivar connection: the :py:class:`~bleedcheck.transport.Connection` to
        the server, None before connecting

    :ivar phase: the phase of the probe currently executed, see
        :py:class:`~bleedcheck.constants.ProbePhase`

    :ivar handshake_types: types of all handshake messages received

    :ivar heartbeat_response: the
        :py:class:`~bleedcheck.expect.HeartbeatResponse` received from peer

    :ivar outcome: classification of the server, see
        :py:class:`~bleedcheck.constants.ProbeOutcome`
    """

    def __init__(self):
        """Prepare object for keeping connection state"""
        self.connection = None

        # version used in the record layer headers of sent messages
        self.record_version = (3, 3)

        self.phase = None

        # phase in which the conversation was aborted
        self.error_phase = None

        self.handshake_types = []

        # number of heartbeat message bytes put on the wire
        self.heartbeat_sent_size = None

        self.heartbeat_response = None

        # result of classification
        self.outcome = None
        self.reason = None
        self.leaked = None


class Runner(object):
    """Execute the steps of a conversation over a single connection"""

    def __init__(self, conversation):
        """Link conversation with runner"""
        self.conversation = conversation
        self.state = ConnectionState()

    def _enter_phase(self, node):
        if node.phase is None or node.phase == self.state.phase:
            return
        logging.info("Phase: %s", ProbePhase.toStr(node.phase))
        self.state.phase = node.phase

    def run(self):
        """
        Execute conversation

        The connection is closed when the method returns, irrespective of
        the errors encountered.
        """
        node = None
        try:
            for node in self.conversation.walk():
                self._enter_phase(node)
                if node.is_command() or node.is_expect():
                    node.process(self.state)
                elif node.is_generator():
                    data = node.generate(self.state)
                    for record in split_records(node.content_type,
                                                self.state.record_version,
                                                data):
                        logging.debug("Sending record of %d bytes",
                                      len(record))
                        self.state.connection.send(record)
                    # allow generators to perform actions after the message
                    # was sent
                    node.post_send(self.state)
                else:
                    raise AssertionError("Unknown conversation node")
        except ProbeError as exc:
            self.state.error_phase = self.state.phase
            logging.info("Conversation stopped at node %r: %s", node, exc)
            raise
        finally:
            if self.state.connection is not None:
                self.state.connection.close()
            self.state.phase = ProbePhase.closed
