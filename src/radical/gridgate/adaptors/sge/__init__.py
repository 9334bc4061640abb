
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


from .sge_cli     import SGECommandLine
from .sge_session import SGESession, SGESessionManager


# ------------------------------------------------------------------------------

