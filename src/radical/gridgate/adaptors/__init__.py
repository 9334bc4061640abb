
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


# ------------------------------------------------------------------------------

