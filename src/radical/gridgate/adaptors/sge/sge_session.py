# -*- coding: utf-8 -*-

__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


""" SGE sessions, backed by the SGE command line tools
"""

from ...          import constants  as c
from ...          import exceptions as rgge
from ...          import session    as rggs
from ...job       import Job, valid_array_bounds
from .            import parsers
from .sge_cli     import SGECommandLine


# ------------------------------------------------------------------------------
#
def _sub_status(record):
    '''
    Sub-status of a finished job (or task) from its accounting record.
    '''

    if not record or record.get('not_found'):
        return c.UNDETERMINED

    if str(record.get('failed', '0')).split(':')[0].strip() != '0':
        return c.FAILED

    return c.DONE


def _aggregate_tasks(tasks_status):
    '''
    Job program status of an array job from the status of its tasks.
    '''

    active = [t['mainStatus'] for t in tasks_status.values()
                              if t['mainStatus'] != c.COMPLETED]

    if active:
        return {'mainStatus': parsers.array_job_status(active),
                'subStatus' : None}

    subs = [t['subStatus'] for t in tasks_status.values()]

    if   c.FAILED       in subs: sub = c.FAILED
    elif c.UNDETERMINED in subs: sub = c.UNDETERMINED
    else                       : sub = c.DONE

    return {'mainStatus': c.COMPLETED, 'subStatus': sub}


# ------------------------------------------------------------------------------
#
class SGESession(rggs.Session):

    # --------------------------------------------------------------------------
    #
    def __init__(self, name, cli, log=None, refresh_interval=1000):

        super().__init__(name, log=log, refresh_interval=refresh_interval)

        self._cli = cli


    # --------------------------------------------------------------------------
    #
    def _validate(self, template):

        if not template.remoteCommand:
            raise rgge.BadParameter._log(self._log, 'job template has no '
                                                    'remote command')

        # raises UnsupportedAttribute on reserved flags
        parsers.check_native_specification(template.nativeSpecification)


    # --------------------------------------------------------------------------
    #
    async def run_job(self, template):

        self._validate(template)

        res    = await self._cli.submit(template)
        parsed = parsers.parse_submit_output(res['stdout'])
        job    = Job(parsed['jobId'], self.name, template)

        self._jobs[job.job_id] = job
        self._log.info('submitted job %s in session %s'
                       % (job.job_id, self.name))

        return job.job_id


    # --------------------------------------------------------------------------
    #
    async def run_bulk_jobs(self, template, start, end, incr):

        if not valid_array_bounds(start, end, incr):
            raise rgge.InvalidArrayBounds._log(self._log,
                    'invalid array bounds %s-%s:%s' % (start, end, incr))

        self._validate(template)

        res    = await self._cli.submit(template, start, end, incr)
        parsed = parsers.parse_submit_output(res['stdout'])

        if parsed['start'] is None:
            parsed.update({'start': start, 'end': end, 'incr': incr})

        job = Job(parsed['jobId'], self.name, template, is_array=True,
                  start=parsed['start'], end=parsed['end'],
                  incr=parsed['incr'])

        self._jobs[job.job_id] = job
        self._log.info('submitted array job %s (%d-%d:%d) in session %s'
                       % (job.job_id, job.start, job.end, job.incr, self.name))

        return job.job_id


    # --------------------------------------------------------------------------
    #
    async def get_job_program_status(self, job_ids):
        '''
        Status of the given jobs (or `JOB_IDS_SESSION_ALL`), as a dict
        `{job_id: {'mainStatus': ..., 'subStatus': ...}}`.  Array jobs also
        report `tasksStatus`, a dict of the same structure per task id.  Jobs
        which left the job table are `COMPLETED`, with a sub-status taken
        from the accounting.
        '''

        job_ids = self._resolve_job_ids(job_ids)
        if not job_ids:
            raise rgge.BadParameter('no jobs to query in session %s'
                                    % self.name)

        table = await self._cli.query_status()
        ret   = dict()

        for job_id in job_ids:

            job = self._jobs[job_id]

            if job_id in self._deleted:
                ret[job_id] = {'mainStatus': c.COMPLETED,
                               'subStatus' : c.DELETED}

            elif job.is_array:
                ret[job_id] = await self._array_status(job, table.get(job_id))

            else:
                ret[job_id] = await self._single_status(job, table.get(job_id))

        return ret


    # --------------------------------------------------------------------------
    #
    async def _single_status(self, job, entry):

        if entry is None or 'tasks' in entry:
            acct = await self._cli.query_accounting(job.job_id)
            return {'mainStatus': c.COMPLETED,
                    'subStatus' : _sub_status(acct)}

        status = {'mainStatus': parsers.sge_to_status(entry['jobState']),
                  'subStatus' : None}

        if status['mainStatus'] == c.ERROR:
            details = await self._cli.query_status(job.job_id)
            status['errors'] = details.get('error_reason', [])

        return status


    # --------------------------------------------------------------------------
    #
    async def _array_status(self, job, entry):

        listed    = (entry or {}).get('tasks', {})
        tasks     = dict()
        completed = list()

        for task_id in job.task_ids:

            if task_id in listed:
                main = parsers.sge_to_status(listed[task_id]['jobState'])
                tasks[task_id] = {'mainStatus': main, 'subStatus': None}

            else:
                tasks[task_id] = {'mainStatus': c.COMPLETED,
                                  'subStatus' : None}
                completed.append(task_id)

        if completed:

            acct = await self._cli.query_accounting(job.job_id)

            # a single record comes back unkeyed
            if 'jobnumber' in acct:
                task_id = acct.get('taskid', '')
                task_id = int(task_id) if str(task_id).isdigit() else task_id
                acct    = {task_id: acct}

            for task_id in completed:
                if acct.get('not_found'):
                    tasks[task_id]['subStatus'] = c.UNDETERMINED
                else:
                    tasks[task_id]['subStatus'] = _sub_status(acct.get(task_id))

        status = _aggregate_tasks(tasks)
        status['tasksStatus'] = tasks

        return status


    # --------------------------------------------------------------------------
    #
    async def control(self, job_id, action):
        '''
        Apply a control action to a job of this session, or to all jobs of
        the session (`JOB_IDS_SESSION_ALL`).
        '''

        if action not in c.CONTROL_ACTIONS:
            raise rgge.BadParameter('unknown control action %s' % action)

        job_ids = self._resolve_job_ids(job_id)
        if job_id == c.JOB_IDS_SESSION_ALL:
            job_ids = [j for j in job_ids if j not in self._deleted]

        if not job_ids:
            return None

        out = await self._cli.control(job_ids, action)

        if action == c.TERMINATE:
            self._deleted.update(job_ids)

        return out


    # --------------------------------------------------------------------------
    #
    async def get_job_accounting(self, job_id):

        return await self._cli.query_accounting(self.get_job(job_id).job_id)


# ------------------------------------------------------------------------------
#
class SGESessionManager(rggs.SessionManager):

    # --------------------------------------------------------------------------
    #
    def __init__(self, cli=None, log=None, refresh_interval=1000):

        super().__init__(log=log)

        self._cli              = cli or SGECommandLine(log=self._log)
        self._refresh_interval = refresh_interval


    @property
    def cli(self):
        return self._cli


    async def _get_backend_info(self):

        return await self._cli.get_backend_info()


    def _create_session(self, name, contact):

        return SGESession(name, self._cli, log=self._log,
                          refresh_interval=self._refresh_interval)


# ------------------------------------------------------------------------------

