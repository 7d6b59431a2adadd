# Released under Gnu GPL v2.0, see LICENSE file for details

"""Exceptions raised while probing a server."""


class ProbeError(Exception):
    """Base class for all errors raised by the probe."""

    pass


class TransportError(ProbeError):
    """Connection to the peer failed or was closed."""

    pass


class TransportTimeout(TransportError):
    """Peer did not send anything in the allotted time."""

    pass


class EncodingError(ProbeError):
    """Message could not be encoded with the provided settings."""

    pass


class ProtocolMismatch(ProbeError):
    """
    Peer sent something other than what the probe was waiting for.

    :ivar content_type: content type of the record that was received, None
        if the mismatch was not caused by a single record
    """

    def __init__(self, message, content_type=None):
        super(ProtocolMismatch, self).__init__(message)
        self.content_type = content_type
