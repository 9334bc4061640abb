
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


################################################################################
#
# Job program status (main status of a job as seen by the broker)

QUEUED                = 'QUEUED';       """ The job waits in a grid engine queue.
                                            """
ON_HOLD               = 'ON_HOLD';      """ The job waits in a queue and is held
                                            back from scheduling.  """
RUNNING               = 'RUNNING';      """ The job (or at least one task of an
                                            array job) is executing.  """
SUSPENDED             = 'SUSPENDED';    """ The job has been suspended.  """
ERROR                 = 'ERROR';        """ The grid engine flagged the job as
                                            erroneous.  This state is final.
                                            """
UNDETERMINED          = 'UNDETERMINED'; """ The state of the job could not be
                                            determined, or an array job still
                                            has active tasks.  """
COMPLETED             = 'COMPLETED';    """ The job left the grid engine.  This
                                            state is final.  """
TERMINATED            = 'TERMINATED';   """ The job was forcibly removed by the
                                            monitor.  This state is final.  """

FINAL                 = [COMPLETED, ERROR, TERMINATED]


################################################################################
#
# Job sub-status (details for completed jobs, taken from accounting)

DONE                  = 'DONE'
FAILED                = 'FAILED'
DELETED               = 'DELETED'


################################################################################
#
# Job types

SINGLE                = 'SINGLE'
ARRAY                 = 'ARRAY'


################################################################################
#
# Control actions

SUSPEND               = 'SUSPEND'
RESUME                = 'RESUME'
HOLD                  = 'HOLD'
RELEASE               = 'RELEASE'
TERMINATE             = 'TERMINATE'

CONTROL_ACTIONS       = [SUSPEND, RESUME, HOLD, RELEASE, TERMINATE]

# pseudo job id addressing every job of a session
JOB_IDS_SESSION_ALL   = 'DRMAA_JOB_IDS_SESSION_ALL'


################################################################################
#
# Timeouts for wait / synchronize

TIMEOUT_WAIT_FOREVER  = -1
TIMEOUT_NO_WAIT       =  0


################################################################################
#
# Admission denial reasons

DENIED_BLACKLISTED    = 'blacklisted'
DENIED_GLOBAL         = 'global capacity'
DENIED_USER           = 'user capacity'
DENIED_CONCURRENCY    = 'concurrent job capacity'


################################################################################
#
# Audit

AUDIT_COLLECTION      = 'requests'


################################################################################
#
# native specification flags the broker handles itself (or refuses)

RESERVED_NATIVE_FLAGS = ['-help', '-sync', '-t', '-verify', '-w']


# ------------------------------------------------------------------------------

