"""
Checker for the TLS Heartbeat out-of-bounds read (CVE-2014-0160).

Use :py:class:`bleedcheck.probe.HeartbleedProbe` to check a single server.
The probe creates a conversation out of the objects in
:py:mod:`bleedcheck.messages` (messages sent to the server) and
:py:mod:`bleedcheck.expect` (readers of the server replies) that the
:py:class:`~bleedcheck.runner.Runner` executes over a single connection.
"""
