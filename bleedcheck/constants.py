# Released under Gnu GPL v2.0, see LICENSE file for details

"""Constants describing the probe progress and results."""

from tlslite.constants import TLSEnum


class ProbePhase(TLSEnum):
    """Steps of the probe, in the order they are executed."""

    connecting = 0
    handshaking = 1
    heartbeating = 2
    classifying = 3
    closed = 4


class ProbeOutcome(TLSEnum):
    """Classification of the probed server."""

    vulnerable = 0
    safe = 1
    indeterminate = 2


# declared payload length of the crafted heartbeat request; together with
# the message type and length fields it fills a whole 2**14 byte record
DEFAULT_DECLARED_LENGTH = 0x3FFD

# how many records the server may send before the ServerHelloDone
DEFAULT_MAX_RECORDS = 64
