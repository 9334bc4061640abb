
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


""" Job handles and job accounting information """

import copy


# ------------------------------------------------------------------------------
#
class Job(object):
    """
    A job submitted through a session: its id, the name of the owning session,
    a copy of the template it was created from and, for array jobs, the task
    index range.
    """

    # --------------------------------------------------------------------------
    #
    def __init__(self, job_id, session_name, template, is_array=False,
                       start=None, end=None, incr=None):

        self.job_id       = str(job_id)
        self.session_name = session_name
        self.template     = copy.deepcopy(template)
        self.is_array     = bool(is_array)

        if self.is_array:
            self.start = int(start)
            self.end   = int(end)
            self.incr  = int(incr)
        else:
            self.start = None
            self.end   = None
            self.incr  = None


    # --------------------------------------------------------------------------
    #
    @property
    def task_ids(self):

        if not self.is_array:
            return []

        return list(range(self.start, self.end + 1, self.incr))


    def __repr__(self):

        if self.is_array:
            return 'Job(%s, %s, %d-%d:%d)' % (self.job_id, self.session_name,
                                              self.start, self.end, self.incr)
        return 'Job(%s, %s)' % (self.job_id, self.session_name)


# ------------------------------------------------------------------------------
#
class JobInfo(object):
    """
    Information about a finished job, as reported by the grid engine
    accounting (`qacct`).  For array jobs, `exit_status` and `failed` are
    lists with one entry per task, in task order.
    """

    # --------------------------------------------------------------------------
    #
    def __init__(self, info):

        self.raw_info    = info
        self.job_id      = None
        self.exit_status = None
        self.failed      = None
        self.not_found   = bool(info.get('not_found'))

        if self.not_found:
            self.job_id = info.get('job_id')

        elif 'jobnumber' in info:
            self.job_id      = info['jobnumber']
            self.exit_status = _to_int(info.get('exit_status'))
            self.failed      = info.get('failed')

        else:
            # array job: records keyed by task id
            self.exit_status = list()
            self.failed      = list()
            for task_id in sorted(info, key=lambda t: _to_int(t) or 0):
                rec = info[task_id]
                self.job_id = rec.get('jobnumber')
                self.exit_status.append(_to_int(rec.get('exit_status')))
                self.failed.append(rec.get('failed'))


    # --------------------------------------------------------------------------
    #
    @property
    def is_array(self):
        return isinstance(self.failed, list)


    def has_exited(self):

        if self.not_found:
            return False

        if self.is_array:
            return all(e is not None for e in self.exit_status)

        return self.exit_status is not None


    def has_failed(self):
        '''
        `True` if the job (any task for array jobs) was flagged as failed.
        The grid engine reports `failed` as `0` or as a code plus reason.
        '''

        if self.not_found:
            return False

        if self.is_array:
            return any(_failed(f) for f in self.failed)

        return _failed(self.failed)


    def get_exit_status(self):
        return self.exit_status if self.has_exited() else None


# ------------------------------------------------------------------------------
#
def _to_int(val):

    try:
        return int(str(val).split()[0])
    except (ValueError, IndexError):
        return None


def _failed(val):

    return val is not None and str(val).split(':')[0].strip() != '0'


# ------------------------------------------------------------------------------

