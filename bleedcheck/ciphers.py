# Released under Gnu GPL v2.0, see LICENSE file for details

"""Cipher suites advertised in the Client Hello."""

from tlslite.constants import CipherSuite


# inclusive ranges of IANA cipher suite identifiers, in the order they are
# advertised; a very broad list makes it likely that the server will find
# at least one suite it is willing to negotiate
CIPHER_SUITE_RANGES = (
    (0x0000, 0x004C),  # NULL_WITH_NULL_NULL .. ECDH_ECDSA_WITH_AES_256_CBC_SHA
    (0x0060, 0x006D),   # RSA_EXPORT1024 .. DH_anon_WITH_AES_256_CBC_SHA256
    (0x0080, 0x00B9),   # GOST .. RSA_PSK_WITH_NULL_SHA384
    (0xC001, 0xC03B),  # ECDH_ECDSA_WITH_NULL_SHA .. ECDHE_PSK_WITH_NULL_SHA384
    (0xFEFE, 0xFEFF),   # SSL_RSA_FIPS_WITH_DES_CBC_SHA, ..._3DES_EDE_CBC_SHA
    (0xFFE0, 0xFFE0),   # SSL_RSA_FIPS_WITH_3DES_EDE_CBC_SHA (Netscape)
)


def expand_ranges(ranges):
    """
    Convert list of inclusive ranges to a flat tuple of identifiers.

    :param ranges: iterable of (first, last) pairs
    :rtype: tuple(int)
    """
    return tuple(code for first, last in ranges
                 for code in range(first, last + 1))


DEFAULT_CIPHER_SUITES = expand_ranges(CIPHER_SUITE_RANGES)


def cipher_suite_name(code):
    """Return the IANA name of the cipher suite or its hex representation."""
    name = CipherSuite.ietfNames.get(code)
    if name is None:
        return "0x{0:04x}".format(code)
    return name
