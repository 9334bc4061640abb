
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


# ------------------------------------------------------------------------------
#
from .constants  import *

from .exceptions import GridGateException
from .exceptions import DenialError
from .exceptions import ValidationError
from .exceptions import BadParameter
from .exceptions import UnsupportedAttribute
from .exceptions import InvalidArrayBounds
from .exceptions import BackendUnavailable
from .exceptions import GridEngineError
from .exceptions import ParseError
from .exceptions import ConfigError
from .exceptions import ListFileError
from .exceptions import AlreadyExists
from .exceptions import DoesNotExist
from .exceptions import Timeout

from .config     import Config, ConfigStore
from .lists      import AccessLists
from .audit      import AuditSink, LoggerAuditSink, MemoryAuditSink
from .job        import JobTemplate, Job, JobInfo, JobDescriptor, TaskInfo
from .session    import Session, SessionManager
from .monitor    import JobMonitor
from .admission  import AdmissionController, UserWindow
from .scheduler  import Scheduler
from .broker     import Broker

from .           import adaptors
from .           import utils

from .version    import version, version_short, version_detail

__version__ = version_detail


# ------------------------------------------------------------------------------

