""" Entry point for the ``cfd`` apt method. apt runs this program as
    ``/usr/lib/apt/methods/cfd`` and talks to it over stdin and stdout, so
    nothing else may ever be written to stdout.
"""

import argparse
import io
import logging
import sys

from . import method


def parse_arguments(argv=None):

    parser = argparse.ArgumentParser(
        prog='cfd',
        description='apt transport for repositories behind Cloudflare Access')

    parser.add_argument('--debug', action='store_true',
        help='log debugging information')
    parser.add_argument('--log', metavar='FILE', default=None,
        help='write the log to FILE instead of standard error')

    return parser.parse_args(argv)



def setup_logging(arguments):

    if arguments.debug:
        level = logging.DEBUG
    else:
        level = logging.WARNING

    format = '%(asctime)s %(name)s %(levelname)s: %(message)s'

    if arguments.log is None:
        logging.basicConfig(stream=sys.stderr, level=level, format=format)
    else:
        logging.basicConfig(filename=arguments.log, level=level, format=format)



def main(argv=None):

    arguments = parse_arguments(argv)
    setup_logging(arguments)

    # apt speaks UTF-8; don't let a stray byte take the method down.

    if isinstance(sys.stdin, io.TextIOWrapper):
        sys.stdin.reconfigure(errors='replace')

    return method.run(sys.stdout, sys.stdin)



if __name__ == '__main__':
    sys.exit(main())


# vim: set expandtab tabstop=8 softtabstop=4 shiftwidth=4 autoindent:
