# Released under Gnu GPL v2.0, see LICENSE file for details

"""Blocking byte-stream connection to the probed server."""

import logging
import socket
import time

from .errors import TransportError, TransportTimeout


class Connection(object):
    """
    Byte stream over a TCP socket with read-exactly-N-bytes semantics.

    All reads use the timeout set on the socket, so no read can block
    indefinitely on a peer that stopped sending.

    :ivar sock: the underlying socket
    """

    def __init__(self, sock):
        """Wrap an already connected socket."""
        self.sock = sock
        self.closed = False

    @classmethod
    def open(cls, hostname, port, timeout=5):
        """
        Connect to a server.

        :param str hostname: name or address of the server
        :param int port: TCP port number
        :param float timeout: time limit for connecting and for every
            subsequent read or write, in seconds
        :raises TransportError: when the connection can't be established
        """
        try:
            sock = socket.create_connection((hostname, port), timeout=timeout)
        except socket.timeout:
            raise TransportTimeout("Timeout when connecting to {0}:{1}"
                                   .format(hostname, port))
        except (socket.error, socket.gaierror) as exc:
            raise TransportError("Can't connect to {0}:{1}: {2}"
                                 .format(hostname, port, exc))
        # we write whole records at a time, don't delay them
        sock.setsockopt(socket.IPPROTO_TCP, socket.TCP_NODELAY, 1)
        logging.debug("Connected to %s:%s", hostname, port)
        return cls(sock)

    def send(self, data):
        """Write all of ``data`` to the peer."""
        try:
            self.sock.sendall(data)
        except socket.timeout:
            raise TransportTimeout("Timeout when sending data to peer")
        except socket.error as exc:
            raise TransportError("Sending data failed: {0}".format(exc))

    def read(self, size, exact=True, deadline=None):
        """
        Read ``size`` bytes from the peer.

        :param int size: number of bytes to read
        :param bool exact: if set, a connection closure or timeout before
            ``size`` bytes are received is an error; if unset, the bytes
            received up to that point are returned instead
        :param float deadline: point in time (as returned by
            :py:func:`time.time`) after which no more data is waited for,
            irrespective of how often the peer sends single bytes
        :rtype: bytearray
        :raises TransportError: when reading fails
        """
        ret = bytearray()
        if deadline is not None:
            timeout = self.sock.gettimeout()
        try:
            while len(ret) < size:
                if deadline is not None:
                    remaining = deadline - time.time()
                    if remaining <= 0:
                        if not exact:
                            break
                        raise TransportTimeout(
                            "Deadline passed, received {0} out of {1} "
                            "bytes".format(len(ret), size))
                    if timeout is not None:
                        remaining = min(timeout, remaining)
                    self.sock.settimeout(remaining)
                data = self._recv(size - len(ret), len(ret), size, exact)
                if data is None:
                    break
                ret += data
        finally:
            if deadline is not None:
                self.sock.settimeout(timeout)
        return ret

    def _recv(self, count, received, size, exact):
        """Single read from socket, None when reading should stop."""
        try:
            data = self.sock.recv(count)
        except socket.timeout:
            if not exact:
                return None
            raise TransportTimeout(
                "Timeout when waiting for peer data, received {0} out "
                "of {1} bytes".format(received, size))
        except socket.error as exc:
            if not exact:
                return None
            raise TransportError("Reading from peer failed: {0}"
                                 .format(exc))
        if not data:
            if not exact:
                return None
            raise TransportError(
                "Unexpected closure from peer, received {0} out of {1} "
                "bytes".format(received, size))
        return data

    def close(self):
        """Release the socket, can be called multiple times."""
        if self.closed:
            return
        self.closed = True
        try:
            self.sock.close()
        except socket.error as exc:
            logging.debug("Closing the socket failed: %s", exc)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_value, traceback):
        self.close()
