
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


''' Admission control: rate limits, access lists and job submission '''

import os
import asyncio

import radical.utils as ru

from .       import constants  as c
from .       import exceptions as rgge
from .job    import JobDescriptor, TaskInfo, load_job_spec, valid_array_bounds
from .utils  import misc       as rggmisc


# ------------------------------------------------------------------------------
#
def prune_window(requests, now, lifespan):
    '''
    Scanning from the most recent request backwards, the first request older
    than `lifespan` (relative to `now`) is dropped together with all older
    ones.  `requests` is pruned in place; the number of dropped entries is
    returned.
    '''

    for idx in range(len(requests) - 1, -1, -1):
        if now - requests[idx] > lifespan:
            del requests[:idx + 1]
            return idx + 1

    return 0


def classify_job(start, end, incr):
    '''
    ARRAY if the given bounds describe a valid array job, SINGLE otherwise.
    '''

    if valid_array_bounds(start, end, incr):
        return c.ARRAY

    return c.SINGLE


# ------------------------------------------------------------------------------
#
class UserWindow(object):
    ''' Timestamps of the recent accepted requests of one requester. '''

    def __init__(self, ip):

        self.ip       = ip
        self.requests = list()


    @property
    def request_amount(self):
        return len(self.requests)


    @property
    def last_request(self):
        return self.requests[-1] if self.requests else None


    def prune(self, now, lifespan):
        return prune_window(self.requests, now, lifespan)


    def as_dict(self):
        return {'ip'           : self.ip,
                'requests'     : list(self.requests),
                'requestAmount': self.request_amount}


# ------------------------------------------------------------------------------
#
class AdmissionController(object):
    '''
    Decides on incoming requests and submits the jobs of accepted ones.  The
    decision is taken, in this order, by: blacklist, whitelist, global rate,
    per-requester rate, and the ceiling of concurrent jobs (which also applies
    to whitelisted requesters).
    '''

    # --------------------------------------------------------------------------
    #
    def __init__(self, config, lists, session_manager, monitor, audit=None,
                       log=None):

        self._config   = config
        self._lists    = lists
        self._sm       = session_manager
        self._monitor  = monitor
        self._audit    = audit
        self._log      = log or ru.Logger('radical.gridgate')

        self._users    = dict()
        self._global   = list()
        self._pending  = 0
        self._auditing = set()


    # --------------------------------------------------------------------------
    #
    @property
    def users(self):
        return dict(self._users)

    @property
    def global_window(self):
        return list(self._global)

    @property
    def pending(self):
        return self._pending


    # --------------------------------------------------------------------------
    #
    def _deny(self, ip, reason):

        self._log.info('request from %s rejected: %s' % (ip, reason))
        raise rgge.DenialError('request from %s rejected: %s' % (ip, reason),
                               reason=reason)


    def check(self, ip, now, cfg):
        '''
        Apply the admission policy to a request from `ip` at time `now`.
        Prunes the windows, raises `DenialError` on rejection.
        '''

        window = self._users.get(ip)

        prune_window(self._global, now, cfg.requestLifespan)
        if window is not None:
            window.prune(now, cfg.requestLifespan)

        if self._lists.is_blacklisted(ip):
            self._deny(ip, c.DENIED_BLACKLISTED)

        if not self._lists.is_whitelisted(ip):

            if len(self._global) >= cfg.maxRequestsPerSecGlobal:
                self._deny(ip, c.DENIED_GLOBAL)

            if window is not None and \
               window.request_amount >= cfg.maxRequestsPerSecUser:
                self._deny(ip, c.DENIED_USER)

        if len(self._monitor) + self._pending >= cfg.maxConcurrentJobs:
            self._deny(ip, c.DENIED_CONCURRENCY)


    def _record(self, ip, now):

        if ip not in self._users:
            self._log.debug('new requester %s' % ip)
            self._users[ip] = UserWindow(ip)

        self._users[ip].requests.append(now)
        self._global.append(now)


    # --------------------------------------------------------------------------
    #
    def _write_audit(self, record):

        if self._audit is None:
            return

        task = asyncio.get_running_loop().create_task(
                          self._audit.insert(c.AUDIT_COLLECTION, record))

        self._auditing.add(task)
        task.add_done_callback(self._audit_done)


    def _audit_done(self, task):

        self._auditing.discard(task)

        if not task.cancelled() and task.exception() is not None:
            self._log.error('audit insert failed: %s' % task.exception())


    # --------------------------------------------------------------------------
    #
    def expire_users(self, now=None):
        '''
        Forget requesters which have been inactive for longer than
        `userLifespan`.
        '''

        if now is None:
            now = rggmisc.now_ms()

        lifespan = self._config.current.userLifespan

        for ip in list(self._users.keys()):
            last = self._users[ip].last_request
            if last is None or now - last > lifespan:
                self._log.info('removing inactive requester %s' % ip)
                del self._users[ip]


    # --------------------------------------------------------------------------
    #
    async def handle_request(self, request_data):
        '''
        Handle a request `{'ip': ..., 'time': epoch_ms, 'jobPath': ...}`.
        Returns the `JobDescriptor` of the submitted job, or raises
        `DenialError` if the request is rejected by the admission policy.
        Submission failures raise the respective error (`ValidationError`,
        `BackendUnavailable`, `GridEngineError`, ...).
        '''

        ip       = rggmisc.normalize_ip(request_data.get('ip'))
        now      = request_data.get('time')
        job_path = request_data.get('jobPath')

        if now is None:
            now = rggmisc.now_ms()

        self._log.debug('request from %s at %s' % (ip, now))

        await self._config.maybe_reload(now)
        cfg = self._config.current

        # decision and window updates happen without suspension
        self.check(ip, now, cfg)
        self._record(ip, now)
        self._write_audit({'ip': ip, 'time': now})

        self._pending += 1
        try:
            descr, session = await self._submit(job_path, ip, now, cfg)
            self._monitor.register(descr, session)

        finally:
            self._pending -= 1

        self._log.info('request from %s accepted: job %s'
                       % (ip, descr.job_id))
        return descr


    # --------------------------------------------------------------------------
    #
    async def _submit(self, job_path, ip, now, cfg):

        if not job_path:
            raise rgge.BadParameter('request has no job path')

        loop = asyncio.get_running_loop()
        template, start, end, incr = await loop.run_in_executor(
                                        None, load_job_spec, job_path, self._log)

        job_type = classify_job(start, end, incr)
        session  = await self._sm.get_or_create_session(cfg.sessionName)

        if job_type == c.ARRAY:
            job_id = await session.run_bulk_jobs(template, start, end, incr)
        else:
            job_id = await session.run_job(template)

        job    = session.get_job(job_id)
        states = await session.get_job_program_status([job_id])
        status = states[job_id]
        name   = template.jobName or os.path.basename(template.remoteCommand)

        descr = JobDescriptor(job_id, name, session.name, job_type,
                              status['mainStatus'], now, user=ip,
                              sub_status=status.get('subStatus'),
                              first_task_id=job.start, last_task_id=job.end,
                              increment=job.incr)

        if job_type == c.ARRAY:
            tasks = status.get('tasksStatus', {})
            for task_id in job.task_ids:
                task_status = tasks.get(task_id, {}).get('mainStatus')
                descr.task_info.append(TaskInfo(task_id, task_status))

        return descr, session


    # --------------------------------------------------------------------------
    #
    async def wait_for_result(self, job_id):
        '''
        Wait for a submitted job to leave the monitor, return its final
        descriptor.
        '''

        return await self._monitor.wait_for(job_id)


# ------------------------------------------------------------------------------

