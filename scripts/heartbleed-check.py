# Released under Gnu GPL v2.0, see LICENSE file for details

"""Check servers for the TLS Heartbeat out-of-bounds read (CVE-2014-0160)"""

import sys

from bleedcheck.common import main


version = 1


if __name__ == "__main__":
    sys.exit(main())
