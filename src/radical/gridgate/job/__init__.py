
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


from .template   import JobTemplate, load_job_spec, valid_array_bounds
from .job        import Job, JobInfo
from .descriptor import JobDescriptor, TaskInfo


# ------------------------------------------------------------------------------

