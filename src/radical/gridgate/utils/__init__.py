
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


from .misc import now_ms, normalize_ip, log_error_and_raise


# ------------------------------------------------------------------------------

