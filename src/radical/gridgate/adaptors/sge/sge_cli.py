# -*- coding: utf-8 -*-

__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


""" SGE command line execution layer
"""

import radical.utils as ru

from ...             import constants  as c
from ...             import exceptions as rgge
from ...utils        import misc       as rggmisc
from ...utils.shell  import AsyncShell
from .               import parsers


_COMMANDS = ['qsub', 'qstat', 'qacct', 'qdel', 'qmod', 'qhold', 'qrls',
             'qhost']

# control action -> (command, options)
_CONTROL = {
    c.SUSPEND  : ('qmod',  ['-sj']),
    c.RESUME   : ('qmod',  ['-usj']),
    c.HOLD     : ('qhold', []),
    c.RELEASE  : ('qrls',  []),
    c.TERMINATE: ('qdel',  []),
}


# ------------------------------------------------------------------------------
#
class SGECommandLine(object):
    """
    Runs the SGE command line tools and hands their output to the parsers.
    Every command which exits with a non-zero code raises `GridEngineError`,
    except for the documented `qstat -help` and `qacct` quirks.
    """

    # --------------------------------------------------------------------------
    #
    def __init__(self, shell=None, log=None):

        self._log      = log or ru.Logger('radical.gridgate')
        self.shell     = shell or AsyncShell(log=self._log)
        self._commands = {cmd: None for cmd in _COMMANDS}


    # --------------------------------------------------------------------------
    #
    def initialize(self):
        '''
        Find the SGE tools in `$PATH`.
        '''

        for cmd in list(self._commands.keys()):

            path = ru.which(cmd)
            if not path:
                rggmisc.log_error_and_raise('Error finding SGE tools: %s'
                                            % cmd, rgge.BackendUnavailable,
                                            self._log)
            self._commands[cmd] = path

        self._log.info('Found SGE tools: %s' % self._commands)


    def _cmd(self, name):

        return self._commands.get(name) or name


    # --------------------------------------------------------------------------
    #
    async def _run(self, command, cwd=None, check=True):

        ret, out, err = await self.shell.run(command, cwd=cwd)

        if ret != 0 and check:
            message = "Error running '%s': %s" % (' '.join(command),
                                                  (err or out).strip())
            rggmisc.log_error_and_raise(message, rgge.GridEngineError,
                                        self._log, returncode=ret,
                                        stdout=out, stderr=err)

        return ret, out, err


    # --------------------------------------------------------------------------
    #
    async def get_backend_info(self):
        '''
        Check that the grid engine responds (`qhost`) and return its name and
        version, as reported in the first line of `qstat -help`.
        '''

        self.initialize()

        await self._run([self._cmd('qhost')])

        # some qstat versions return '1' after a successfull qstat -help, so
        # the exit code is only considered if no banner can be parsed
        ret, out, err = await self._run([self._cmd('qstat'), '-help'],
                                        check=False)
        try:
            info = parsers.parse_version_banner(out)

        except rgge.ParseError as e:
            if ret != 0:
                raise rgge.GridEngineError('qstat -help failed: %s' % err,
                                           parent=e, returncode=ret,
                                           stdout=out, stderr=err) from e
            raise

        self._log.info('grid engine: %s %s' % (info['name'], info['version']))

        return info


    # --------------------------------------------------------------------------
    #
    async def submit(self, template, start=None, end=None, incr=None):
        '''
        Run `qsub` in the template's working directory.  Returns stdout and
        stderr of the submission.
        '''

        command = parsers.build_submit_command(self._cmd('qsub'), template,
                                               start, end, incr)

        _, out, err = await self._run(command, cwd=template.workingDirectory)

        return {'stdout': out, 'stderr': err}


    # --------------------------------------------------------------------------
    #
    async def query_status(self, job_id=None):
        '''
        Without `job_id`, return the parsed job table of `qstat -g d`,
        otherwise the parsed details of `qstat -j <job_id>`.
        '''

        if job_id is None:
            _, out, _ = await self._run([self._cmd('qstat'), '-g', 'd'])
            return parsers.parse_qstat_table(out)

        _, out, _ = await self._run([self._cmd('qstat'), '-j', str(job_id)])
        return parsers.parse_qstat_job(out)


    # --------------------------------------------------------------------------
    #
    async def query_accounting(self, job_id):
        '''
        Return the parsed `qacct -j <job_id>` output.  Accounting records only
        appear some seconds after a job finished: for unknown jobs,
        `{'job_id': job_id, 'not_found': True}` is returned.
        '''

        ret, out, err = await self._run([self._cmd('qacct'), '-j',
                                         str(job_id)], check=False)

        if 'not found' in (err or ''):
            self._log.debug('no accounting info for %s yet' % job_id)
            return {'job_id': str(job_id), 'not_found': True}

        if ret != 0 or (err or '').strip():
            message = 'Error running qacct for %s: %s' \
                    % (job_id, (err or '').strip())
            rggmisc.log_error_and_raise(message, rgge.GridEngineError,
                                        self._log, returncode=ret,
                                        stdout=out, stderr=err)

        return parsers.parse_qacct(out)


    # --------------------------------------------------------------------------
    #
    async def control(self, job_ids, action):
        '''
        Suspend, resume, hold, release or terminate the given job(s).
        '''

        if action not in _CONTROL:
            raise rgge.BadParameter('unknown control action %s' % action)

        if isinstance(job_ids, (str, int)):
            job_ids = [job_ids]

        if not job_ids:
            raise rgge.BadParameter('no job ids given for %s' % action)

        cmd, opts = _CONTROL[action]
        command   = [self._cmd(cmd)] + opts + [','.join(str(j) for j in job_ids)]

        _, out, _ = await self._run(command)

        self._log.info('%s %s: %s' % (action, job_ids, out.strip()))

        return out


# ------------------------------------------------------------------------------

