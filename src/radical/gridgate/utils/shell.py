
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


import asyncio

import radical.utils as ru

from .. import exceptions as rgge


# ------------------------------------------------------------------------------
#
class AsyncShell(object):
    """
    Runs local commands as asyncio subprocesses.  Commands are given as
    argument lists, no shell is involved.  `run()` suspends the calling task
    until the process exits and reports exit code, stdout and stderr (all
    three returned in a tuple).
    """

    # --------------------------------------------------------------------------
    #
    def __init__(self, log=None, env=None):

        self._log = log or ru.Logger('radical.gridgate')
        self._env = env


    # --------------------------------------------------------------------------
    #
    async def run(self, command, cwd=None):

        self._log.debug('run: %s (cwd: %s)' % (' '.join(command), cwd))

        try:
            proc = await asyncio.create_subprocess_exec(
                                      *command,
                                      cwd=cwd or None,
                                      env=self._env,
                                      stdin=asyncio.subprocess.DEVNULL,
                                      stdout=asyncio.subprocess.PIPE,
                                      stderr=asyncio.subprocess.PIPE)
        except OSError as e:
            raise rgge.GridEngineError('cannot run %s' % command[0],
                                       parent=e) from e

        out, err = await proc.communicate()

        out = out.decode('utf-8', errors='replace')
        err = err.decode('utf-8', errors='replace')

        self._log.debug('ret: %s, out: %r, err: %r' % (proc.returncode,
                                                       out[:1024], err[:1024]))

        return proc.returncode, out, err


# ------------------------------------------------------------------------------

