
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


""" The broker's view of a tracked job """

from .. import constants as c


# ------------------------------------------------------------------------------
#
class TaskInfo(object):
    """ Running time bookkeeping for one task of an array job. """

    def __init__(self, task_id, status=None, running_time=0,
                       running_start=None):

        self.task_id       = task_id
        self.status        = status
        self.running_time  = running_time
        self.running_start = running_start


    def as_dict(self):
        return {'taskId'      : self.task_id,
                'status'      : self.status,
                'runningTime' : self.running_time,
                'runningStart': self.running_start}


# ------------------------------------------------------------------------------
#
class JobDescriptor(object):
    """
    A job as tracked by the job monitor.  `submit_date` is the time (epoch
    milliseconds) of the last status change, or of the submission.  SINGLE
    jobs have no task bounds and no task info.
    """

    # --------------------------------------------------------------------------
    #
    def __init__(self, job_id, job_name, session_name, job_type,
                       job_status, submit_date, user=None, sub_status=None,
                       first_task_id=None, last_task_id=None, increment=None):

        self.job_id               = str(job_id)
        self.job_name             = job_name
        self.session_name         = session_name
        self.job_type             = job_type
        self.job_status           = job_status
        self.sub_status           = sub_status
        self.user                 = user
        self.submit_date          = submit_date
        self.total_execution_time = 0
        self.task_info            = list()

        if job_type == c.ARRAY:
            self.first_task_id = first_task_id
            self.last_task_id  = last_task_id
            self.increment     = increment
        else:
            self.first_task_id = None
            self.last_task_id  = None
            self.increment     = None


    # --------------------------------------------------------------------------
    #
    @property
    def is_array(self):
        return self.job_type == c.ARRAY


    def get_task(self, task_id):

        for task in self.task_info:
            if task.task_id == task_id:
                return task

        task = TaskInfo(task_id)
        self.task_info.append(task)

        return task


    # --------------------------------------------------------------------------
    #
    def as_dict(self):
        return {'jobId'             : self.job_id,
                'jobName'           : self.job_name,
                'sessionName'       : self.session_name,
                'jobType'           : self.job_type,
                'jobStatus'         : self.job_status,
                'subStatus'         : self.sub_status,
                'firstTaskId'       : self.first_task_id,
                'lastTaskId'        : self.last_task_id,
                'increment'         : self.increment,
                'taskInfo'          : [t.as_dict() for t in self.task_info],
                'user'              : self.user,
                'submitDate'        : self.submit_date,
                'totalExecutionTime': self.total_execution_time}


    def __repr__(self):
        return 'JobDescriptor(%s, %s, %s)' % (self.job_id, self.job_type,
                                              self.job_status)


# ------------------------------------------------------------------------------

