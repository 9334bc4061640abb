
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


import os            as _os
import radical.utils as _ru


# ------------------------------------------------------------------------------
#
_pwd = _os.path.dirname(__file__)
version, version_base, version_branch, version_tag, \
         version_detail = _ru.get_version([_pwd])

version_short = version


# ------------------------------------------------------------------------------

