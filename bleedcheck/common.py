# Released under Gnu GPL v2.0, see LICENSE file for details
"""Common functions for the command line interface"""

import getopt
import logging
import os
import sys

from .constants import ProbeOutcome
from .errors import EncodingError
from .probe import HeartbleedProbe, ProbeSettings
from .utils.hexdump import hexdump


def help_msg():
    """Print help message"""
    print("Usage: <script-name> [-h hostname] [-p port] [host[:port] ...]")
    print(" -h hostname    name of the host to run the test against")
    print("                may be specified multiple times")
    print(" -p port        port number to use for connection, 443 by default")
    print(" host[:port]    additional hosts to check, with optional port")
    print(" -t timeout     time to wait for connection and every message,")
    print("                in seconds, 5 by default")
    print(" -T timeout     time to wait for the end of the server handshake")
    print("                messages, in seconds, 10 by default")
    print(" -n num         maximum number of records the server may send")
    print("                before ServerHelloDone, 64 by default")
    print(" -l length      payload length declared in the heartbeat request,")
    print("                16381 by default")
    print(" -q             don't print the leaked data")
    print(" -v             print debug messages")
    print(" --help         this message")


def port_number(value):
    """Convert text to a TCP port number, checking its range"""
    port = int(value)
    if not 0 < port < 2**16:
        raise ValueError("Port number out of range: {0}".format(value))
    return port


def positive_number(value, option, convert=float):
    """Convert text to a finite number larger than zero"""
    number = convert(value)
    if not 0 < number < float("inf"):
        raise ValueError("Value of {0} must be positive, got {1}"
                         .format(option, value))
    return number


def parse_target(target, default_port):
    """
    Split ``host[:port]`` string into hostname and port.

    IPv6 addresses need to be enclosed in square brackets when a port is
    specified.
    """
    if target.startswith('['):
        host, _, rest = target[1:].partition(']')
        if rest.startswith(':'):
            return host, port_number(rest[1:])
        return host, default_port
    if target.count(':') == 1:
        host, port = target.split(':')
        return host, port_number(port)
    return target, default_port


def handle_user_input(argv=None):
    """
    User input processing

    :rtype: tuple
    :return: list of :py:class:`~bleedcheck.probe.ProbeSettings`, whether to
        print leaked data and whether to print debug messages
    """
    hosts = []
    port = 443
    timeout = 5
    handshake_timeout = 10
    max_records = None
    declared_length = None
    dump = True
    verbose = False

    if argv is None:
        argv = sys.argv[1:]
    opts, args = getopt.getopt(argv, "h:p:t:T:n:l:qv", ["help"])
    for opt, arg in opts:
        if opt == '-h':
            hosts.append(arg)
        elif opt == '-p':
            port = port_number(arg)
        elif opt == '-t':
            timeout = positive_number(arg, opt)
        elif opt == '-T':
            handshake_timeout = positive_number(arg, opt)
        elif opt == '-n':
            max_records = positive_number(arg, opt, int)
        elif opt == '-l':
            declared_length = int(arg, 0)
        elif opt == '-q':
            dump = False
        elif opt == '-v':
            verbose = True
        elif opt == '--help':
            help_msg()
            sys.exit(0)
        else:
            raise ValueError("Unknown option: {0}".format(opt))

    targets = [(host, port) for host in hosts]
    targets.extend(parse_target(arg, port) for arg in args)
    if not targets:
        raise ValueError("No host to check specified")

    settings_list = []
    for hostname, target_port in targets:
        settings = ProbeSettings(hostname, target_port)
        settings.timeout = timeout
        settings.handshake_timeout = handshake_timeout
        if max_records is not None:
            settings.max_records = max_records
        if declared_length is not None:
            settings.declared_length = declared_length
        settings_list.append(settings)

    return settings_list, dump, verbose


def print_result(result, dump=True):
    """Present result of a single probe"""
    if os.name == 'posix':
        print_result_template(result, dump, '\033[91m', '\033[92m',
                              '\033[93m', '\033[0m')
    else:
        print_result_template(result, dump)


def print_result_template(result, dump=True, code_vuln='', code_safe='',
                          code_unknown='', code_end=''):
    """Printing template for probe result"""
    target = "{0}:{1}".format(result.hostname, result.port)
    if result.vulnerable:
        print("[{0}vulnerable{1}]\t{2}: {3}".format(
            code_vuln, code_end, target, result.reason))
        if dump:
            print("Heartbeat response payload ({0} bytes):".format(
                result.leaked_length))
            print(hexdump(result.leaked))
    elif result.safe:
        print("[   {0}safe{1}   ]\t{2}: {3}".format(
            code_safe, code_end, target, result.reason))
    else:
        print("[{0}   ????   {1}]\t{2}: {3}".format(
            code_unknown, code_end, target, result.reason))


def print_statistic(results):
    """Print summary for all probes"""
    counts = dict((outcome, 0) for outcome in
                  (ProbeOutcome.vulnerable, ProbeOutcome.safe,
                   ProbeOutcome.indeterminate))
    for result in results:
        counts[result.outcome] += 1

    print("\nSTATISTICS")
    print("vulnerable:\t{0}".format(counts[ProbeOutcome.vulnerable]))
    print("safe:\t\t{0}".format(counts[ProbeOutcome.safe]))
    print("indeterminate:\t{0}".format(counts[ProbeOutcome.indeterminate]))
    print("unreachable:\t{0}".format(
        sum(1 for result in results if not result.reachable)))


def run_all(settings_list, dump=True):
    """
    Probe all servers one after another and present results

    :rtype: int
    :return: exit status, 0 if all probes completed, 1 otherwise
    """
    results = []
    for settings in settings_list:
        result = HeartbleedProbe(settings).run()
        print_result(result, dump)
        results.append(result)

    if len(results) > 1:
        print_statistic(results)

    if any(result.indeterminate for result in results):
        return 1
    return 0


def main(argv=None):
    """Command line entry point, returns the exit status"""
    try:
        settings_list, dump, verbose = handle_user_input(argv)
    except (getopt.GetoptError, ValueError) as exc:
        print("Error: {0}".format(exc), file=sys.stderr)
        help_msg()
        return 2

    if verbose:
        logging.basicConfig(level=logging.DEBUG,
                            format='[%(levelname)s] %(message)s')

    try:
        return run_all(settings_list, dump)
    except EncodingError as exc:
        print("Error: {0}".format(exc), file=sys.stderr)
        return 2
