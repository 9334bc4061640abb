
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


''' Job monitor: tracks submitted jobs and enforces their time budgets '''

import asyncio

import radical.utils as ru

from .       import constants  as c
from .       import exceptions as rgge
from .utils  import misc       as rggmisc


# ------------------------------------------------------------------------------
#
class JobMonitor(object):
    '''
    Owns the list of tracked `JobDescriptor`s.  On every `poll()` the status
    of each tracked job is fetched through the session which submitted it:

      - jobs which left the grid engine are COMPLETED and removed;
      - jobs in ERROR are removed (and deleted from the grid engine queue);
      - jobs which wait longer than `maxJobQueuedTime`, or run longer than
        `maxJobRunningTime`, are terminated and removed as TERMINATED.

    For array jobs, the queued budget (`maxArrayJobQueuedTime`) applies to the
    first task, and the running budget (`maxArrayJobRunningTime`) to the sum
    of the running times of all tasks.

    Time is measured from the last observed status change, so all budgets are
    approximate within one polling interval.
    '''

    # --------------------------------------------------------------------------
    #
    def __init__(self, config, log=None):

        self._config    = config
        self._log       = log or ru.Logger('radical.gridgate')
        self._jobs      = dict()     # job_id: (descriptor, session)
        self._callbacks = list()
        self._waiters   = dict()     # job_id: [future, ...]


    # --------------------------------------------------------------------------
    #
    def __len__(self):
        return len(self._jobs)


    def __contains__(self, job_id):
        return str(job_id) in self._jobs


    @property
    def jobs(self):
        return [descr for descr, _ in self._jobs.values()]


    def get(self, job_id):

        job_id = str(job_id)
        if job_id not in self._jobs:
            raise rgge.DoesNotExist('job %s is not tracked' % job_id)

        return self._jobs[job_id][0]


    # --------------------------------------------------------------------------
    #
    def register(self, descriptor, session):

        if descriptor.job_id in self._jobs:
            raise rgge.AlreadyExists('job %s is already tracked'
                                     % descriptor.job_id)

        self._jobs[descriptor.job_id] = (descriptor, session)
        self._log.info('tracking job %s (%s, %s)' % (descriptor.job_id,
                       descriptor.job_type, descriptor.job_status))


    def add_callback(self, cb):
        '''
        `cb(descriptor)` is called once for every job which leaves the
        monitor, with the descriptor in its final state.
        '''

        self._callbacks.append(cb)


    async def wait_for(self, job_id):
        '''
        Wait until the given job leaves the monitor, and return its final
        descriptor.
        '''

        self.get(job_id)

        fut = asyncio.get_running_loop().create_future()
        self._waiters.setdefault(str(job_id), []).append(fut)

        return await fut


    def close(self):

        for futs in self._waiters.values():
            for fut in futs:
                if not fut.done():
                    fut.cancel()
        self._waiters = dict()


    # --------------------------------------------------------------------------
    #
    def _finalize(self, descr, status, sub_status=None, forget=True):

        descr.job_status = status
        descr.sub_status = sub_status

        _, session = self._jobs.pop(descr.job_id, (None, None))
        self._log.info('job %s is %s (%s), removed'
                       % (descr.job_id, status, sub_status))

        if forget and session is not None:
            session.forget(descr.job_id)

        for cb in self._callbacks:
            try:
                cb(descr)
            except Exception:
                self._log.exception('job callback failed for %s'
                                    % descr.job_id)

        for fut in self._waiters.pop(descr.job_id, []):
            if not fut.done():
                fut.set_result(descr)


    # --------------------------------------------------------------------------
    #
    async def _terminate(self, descr, session, reason):

        self._log.info('job %s: %s, terminating' % (descr.job_id, reason))

        try:
            await session.control(descr.job_id, c.TERMINATE)

        except rgge.GridGateException as e:
            # keep tracking, retry on next poll
            self._log.error('could not terminate job %s: %s'
                            % (descr.job_id, e))
            return

        self._finalize(descr, c.TERMINATED, c.DELETED)


    async def _remove_error(self, descr, session, status):

        self._finalize(descr, c.ERROR, status.get('subStatus'), forget=False)

        # clear the job from the grid engine queue
        try:
            await session.control(descr.job_id, c.TERMINATE)

        except rgge.GridGateException as e:
            self._log.warning('could not delete job %s in error state: %s'
                              % (descr.job_id, e))

        session.forget(descr.job_id)


    # --------------------------------------------------------------------------
    #
    async def poll(self, now=None):
        '''
        One poll tick over all tracked jobs.  The status of all jobs of one
        session is fetched with a single query.  Failures are isolated per
        session and per job: a job whose status cannot be fetched stays
        tracked.
        '''

        if not self._jobs:
            return

        if now is None:
            now = rggmisc.now_ms()

        cfg = self._config.current

        # group job ids by owning session, in registration order
        batches = dict()
        for job_id, (_, session) in self._jobs.items():
            batches.setdefault(id(session), (session, list()))[1].append(job_id)

        for session, job_ids in batches.values():

            try:
                states = await session.get_job_program_status(job_ids)

            except Exception:
                self._log.exception('cannot check jobs %s' % job_ids)
                continue

            for job_id in job_ids:

                if job_id not in self._jobs:
                    continue

                descr  = self._jobs[job_id][0]
                status = states.get(job_id)

                try:
                    if status is None:
                        self._finalize(descr, c.COMPLETED)

                    elif descr.is_array:
                        await self._check_array(descr, session, status,
                                                now, cfg)
                    else:
                        await self._check_single(descr, session, status,
                                                 now, cfg)

                except Exception:
                    self._log.exception('cannot check job %s' % job_id)


    # --------------------------------------------------------------------------
    #
    async def _check_single(self, descr, session, status, now, cfg):

        main = status['mainStatus']

        if main == c.COMPLETED:
            self._finalize(descr, c.COMPLETED, status.get('subStatus'))
            return

        if main == c.ERROR:
            await self._remove_error(descr, session, status)
            return

        if main != descr.job_status:
            self._log.info('job %s: %s -> %s' % (descr.job_id,
                                                 descr.job_status, main))
            descr.job_status  = main
            descr.submit_date = now
            return

        elapsed = now - descr.submit_date

        if main == c.RUNNING:
            if elapsed > cfg.maxJobRunningTime:
                await self._terminate(descr, session,
                                      'maximum running time exceeded')

        elif elapsed > cfg.maxJobQueuedTime:
            await self._terminate(descr, session,
                                  'maximum %s time exceeded' % main)


    # --------------------------------------------------------------------------
    #
    def _update_tasks(self, descr, tasks, now):
        '''
        Update running times of array tasks, and the accumulated execution
        time of the job.
        '''

        for task_id in range(descr.first_task_id, descr.last_task_id + 1,
                             descr.increment):

            task   = descr.get_task(task_id)
            t_main = tasks.get(task_id, {}).get('mainStatus')

            if task.status == c.COMPLETED:
                continue

            if t_main == c.RUNNING:

                if task.status != c.RUNNING:
                    self._log.debug('job %s task %s started'
                                    % (descr.job_id, task_id))
                    task.status        = c.RUNNING
                    task.running_start = now

                else:
                    if task.running_start is None:
                        task.running_start = now
                    previous          = task.running_time
                    task.running_time = now - task.running_start
                    descr.total_execution_time += task.running_time - previous

            elif t_main == c.COMPLETED:

                if task.running_start is not None:
                    previous          = task.running_time
                    task.running_time = now - task.running_start
                    descr.total_execution_time += task.running_time - previous

                self._log.debug('job %s task %s completed after %s ms'
                                % (descr.job_id, task_id, task.running_time))
                task.status = c.COMPLETED


    async def _check_array(self, descr, session, status, now, cfg):

        main  = status['mainStatus']
        tasks = status.get('tasksStatus', {})

        if main == c.ERROR:
            await self._remove_error(descr, session, status)
            return

        self._update_tasks(descr, tasks, now)

        if main == c.COMPLETED:
            self._finalize(descr, c.COMPLETED, status.get('subStatus'))
            return

        first = tasks.get(descr.first_task_id, {}).get('mainStatus')
        if first not in [c.COMPLETED, c.RUNNING] and \
           now - descr.submit_date > cfg.maxArrayJobQueuedTime:
            await self._terminate(descr, session,
                                  'maximum %s time exceeded' % first)
            return

        if descr.total_execution_time > cfg.maxArrayJobRunningTime:
            await self._terminate(descr, session,
                                  'maximum running time exceeded')
            return

        if any(t.get('mainStatus') == c.RUNNING for t in tasks.values()):
            current = c.RUNNING
        elif first in [None, c.COMPLETED]:
            current = main
        else:
            current = first

        if current != descr.job_status:
            self._log.info('job %s: %s -> %s' % (descr.job_id,
                                                 descr.job_status, current))
            descr.job_status  = current
            descr.submit_date = now


# ------------------------------------------------------------------------------

