
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


""" Provides an assortment of utilities """

import time


# ------------------------------------------------------------------------------
#
def now_ms():
    """ Returns the current time as integer milliseconds since epoch
    """

    return int(time.time() * 1000)


# ------------------------------------------------------------------------------
#
def normalize_ip(ip):
    """ Strips everything up to the last colon, so that an IPv4-mapped IPv6
        address like `::ffff:10.0.0.1` becomes `10.0.0.1`
    """

    if not ip:
        return ''

    return str(ip).rsplit(':', 1)[-1]


# ------------------------------------------------------------------------------
#
def log_error_and_raise(message, exception, logger, **kwargs):

    logger.error(message)
    raise exception(message, **kwargs)


# ------------------------------------------------------------------------------

