# Released under Gnu GPL v2.0, see LICENSE file for details

"""Rendering of binary data for human inspection."""

from tlslite.utils.compat import b2a_hex


def _printable(byte):
    if 0x20 <= byte < 0x7f:
        return chr(byte)
    return "."


def hexdump(data, width=16):
    """
    Format binary data as lines of offset, hex bytes and ASCII.

    .. code-block:: text

      00000000  48 65 6c 6c 6f 00                                 |Hello.|

    :param data: data to format
    :type data: bytes-like
    :param int width: number of bytes shown on a single line
    :rtype: str
    """
    data = bytearray(data)
    lines = []
    for offset in range(0, len(data), width):
        chunk = data[offset:offset + width]
        hex_str = b2a_hex(chunk)
        hex_bytes = " ".join(hex_str[i:i + 2]
                             for i in range(0, len(hex_str), 2))
        lines.append("{0:08x}  {1:<{2}}  |{3}|".format(
            offset, hex_bytes, width * 3 - 1,
            "".join(_printable(i) for i in chunk)))
    return "\n".join(lines)
