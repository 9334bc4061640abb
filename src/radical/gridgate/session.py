
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


'''
Backend neutral session interface.  A `SessionManager` probes its backend
once, and then creates, hands out and closes named `Session` instances.
Sessions submit and control jobs; backends implement the `_abstract` calls
of both classes.
'''

import time
import asyncio

import radical.utils as ru

from .       import constants  as c
from .       import exceptions as rgge
from .job    import JobInfo


# ------------------------------------------------------------------------------
#
class Session(object):

    # --------------------------------------------------------------------------
    #
    def __init__(self, name, log=None, refresh_interval=1000):

        self.name              = name
        self._log              = log or ru.Logger('radical.gridgate')
        self._jobs             = dict()
        self._deleted          = set()
        self._refresh_interval = refresh_interval


    # --------------------------------------------------------------------------
    #
    # backend specific methods
    #
    async def run_job(self, template):
        raise NotImplementedError('run_job is not implemented')

    async def run_bulk_jobs(self, template, start, end, incr):
        raise NotImplementedError('run_bulk_jobs is not implemented')

    async def get_job_program_status(self, job_ids):
        raise NotImplementedError('get_job_program_status is not implemented')

    async def control(self, job_id, action):
        raise NotImplementedError('control is not implemented')

    async def get_job_accounting(self, job_id):
        raise NotImplementedError('get_job_accounting is not implemented')

    def close(self):
        pass


    # --------------------------------------------------------------------------
    #
    # generic methods
    #
    @property
    def jobs(self):
        return dict(self._jobs)


    def get_job(self, job_id):

        job_id = str(job_id)
        if job_id not in self._jobs:
            raise rgge.DoesNotExist('no job %s in session %s'
                                    % (job_id, self.name))

        return self._jobs[job_id]


    def is_deleted(self, job_id):
        return str(job_id) in self._deleted


    def forget(self, job_id):
        '''
        Drop the handle of a job which is no longer tracked.  Unknown ids are
        ignored.
        '''

        job_id = str(job_id)

        self._jobs.pop(job_id, None)
        self._deleted.discard(job_id)


    # --------------------------------------------------------------------------
    #
    def _resolve_job_ids(self, job_ids):
        '''
        Expand `JOB_IDS_SESSION_ALL` and check that all ids belong to this
        session.
        '''

        if job_ids == c.JOB_IDS_SESSION_ALL:
            return list(self._jobs.keys())

        if isinstance(job_ids, (str, int)):
            job_ids = [job_ids]

        ret = list()
        for job_id in job_ids:
            ret.append(self.get_job(job_id).job_id)

        return ret


    # --------------------------------------------------------------------------
    #
    def _deadline(self, timeout):

        if timeout is None or timeout == c.TIMEOUT_WAIT_FOREVER:
            return None

        return time.monotonic() + timeout / 1000.0


    def _expired(self, deadline):
        return deadline is not None and time.monotonic() >= deadline


    # --------------------------------------------------------------------------
    #
    async def synchronize(self, job_ids, timeout=c.TIMEOUT_WAIT_FOREVER):
        '''
        Return once all given jobs are `COMPLETED` or in `ERROR` state.
        `timeout` is given in milliseconds; `TIMEOUT_WAIT_FOREVER` (or `None`)
        waits indefinitely, `TIMEOUT_NO_WAIT` checks exactly once.  Raises
        `Timeout` if the jobs did not finish in time.

        Returns a list of `{'jobId': ..., 'jobStatus': ...}` dicts.
        '''

        job_ids  = self._resolve_job_ids(job_ids)
        deadline = self._deadline(timeout)

        while True:

            states = await self.get_job_program_status(job_ids)
            done   = [job_id for job_id in job_ids
                      if states[job_id]['mainStatus'] in [c.COMPLETED,
                                                          c.ERROR]]

            if len(done) == len(job_ids):
                return [{'jobId'    : job_id,
                         'jobStatus': states[job_id]} for job_id in job_ids]

            if self._expired(deadline):
                raise rgge.Timeout('jobs not finished in time: %s'
                                   % [j for j in job_ids if j not in done])

            await asyncio.sleep(self._refresh_interval / 1000.0)


    # --------------------------------------------------------------------------
    #
    async def wait(self, job_id, timeout=c.TIMEOUT_WAIT_FOREVER):
        '''
        Wait for a job to finish and return its `JobInfo`, which becomes
        available once the accounting of the grid engine has recorded the job
        (all tasks for array jobs).
        '''

        job      = self.get_job(job_id)
        deadline = self._deadline(timeout)

        if deadline is None:
            remaining = c.TIMEOUT_WAIT_FOREVER
        else:
            remaining = max(0, (deadline - time.monotonic()) * 1000)

        result = await self.synchronize([job.job_id], remaining)
        state  = result[0]['jobStatus']

        while True:

            info = JobInfo(await self.get_job_accounting(job.job_id))

            if not info.not_found:
                if not info.is_array or \
                   len(info.exit_status) >= len(job.task_ids):
                    break

            if self._expired(deadline):
                raise rgge.Timeout('no accounting info for job %s'
                                   % job.job_id)

            await asyncio.sleep(self._refresh_interval / 1000.0)

        if state['mainStatus'] == c.ERROR:
            info.errors = state.get('errors', [])

        info.deleted = self.is_deleted(job.job_id)

        return info


# ------------------------------------------------------------------------------
#
class SessionManager(object):

    # --------------------------------------------------------------------------
    #
    def __init__(self, log=None):

        self._log       = log or ru.Logger('radical.gridgate')
        self._sessions  = dict()
        self._ready     = None
        self._drms_info = None


    # --------------------------------------------------------------------------
    #
    # backend specific methods
    #
    async def _get_backend_info(self):
        raise NotImplementedError('_get_backend_info is not implemented')

    def _create_session(self, name, contact):
        raise NotImplementedError('_create_session is not implemented')


    # --------------------------------------------------------------------------
    #
    @property
    def ready(self):
        '''
        `None` before initialization completed, `True` if the backend could
        be reached, `False` otherwise.
        '''

        if self._ready is None or not self._ready.done():
            return None

        return self._ready.result()


    async def initialize(self):
        '''
        Probe the backend once.  Concurrent and later calls return the result
        of that first probe.
        '''

        if self._ready is not None:
            return await self._ready

        self._ready = asyncio.get_running_loop().create_future()

        try:
            self._drms_info = await self._get_backend_info()

        except rgge.GridGateException as e:
            self._log.error('backend is unavailable: %s' % e)
            self._ready.set_result(False)

        else:
            self._log.info('backend is ready: %s' % self._drms_info)
            self._ready.set_result(True)

        return self._ready.result()


    async def _wait_ready(self):

        if self._ready is None:
            raise rgge.BackendUnavailable('session manager is not initialized')

        if not await self._ready:
            raise rgge.BackendUnavailable('backend could not be reached')


    # --------------------------------------------------------------------------
    #
    def get_drms_info(self):
        return self._drms_info


    def get_version(self):

        if not self._drms_info:
            return None

        return self._drms_info.get('version')


    # --------------------------------------------------------------------------
    #
    async def create_session(self, name, contact=None):

        await self._wait_ready()

        if not name or not isinstance(name, str):
            raise rgge.BadParameter._log(self._log, 'invalid session name %r'
                                                    % (name,))

        if name in self._sessions:
            raise rgge.AlreadyExists._log(self._log, 'session %s exists'
                                                     % name)

        session = self._create_session(name, contact)
        self._sessions[name] = session
        self._log.info('created session %s' % name)

        return session


    async def get_session(self, name):

        await self._wait_ready()

        if name not in self._sessions:
            raise rgge.DoesNotExist('no session %s' % name)

        return self._sessions[name]


    async def get_or_create_session(self, name, contact=None):

        await self._wait_ready()

        if name in self._sessions:
            return self._sessions[name]

        return await self.create_session(name, contact)


    def close_session(self, name):

        session = self._sessions.pop(name, None)
        if session is not None:
            session.close()
            self._log.info('closed session %s' % name)


# ------------------------------------------------------------------------------

