
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


''' Owner of the broker's periodic tasks '''

import asyncio

import radical.utils as ru

from . import exceptions as rgge


# ------------------------------------------------------------------------------
#
class Scheduler(object):
    '''
    Runs registered coroutine functions periodically on the event loop.  The
    interval (milliseconds) of a task is either a number or a callable which is
    evaluated anew after each run, so that config changes take effect on the
    next cycle.  A failing run is logged and does not stop the task.
    '''

    # --------------------------------------------------------------------------
    #
    def __init__(self, log=None):

        self._log     = log or ru.Logger('radical.gridgate')
        self._entries = dict()
        self._tasks   = dict()
        self._started = False


    # --------------------------------------------------------------------------
    #
    @property
    def running(self):
        return self._started


    def add(self, name, func, interval):

        if name in self._entries:
            raise rgge.AlreadyExists('periodic task %s exists' % name)

        self._entries[name] = (func, interval)

        if self._started:
            self._spawn(name)


    # --------------------------------------------------------------------------
    #
    def _spawn(self, name):

        func, interval = self._entries[name]
        self._tasks[name] = asyncio.get_running_loop().create_task(
                                        self._run(name, func, interval))


    def start(self):

        if self._started:
            return

        self._started = True
        for name in self._entries:
            self._spawn(name)

        self._log.debug('scheduler started: %s' % list(self._entries))


    async def stop(self):

        tasks         = list(self._tasks.values())
        self._tasks   = dict()
        self._started = False

        for task in tasks:
            task.cancel()

        await asyncio.gather(*tasks, return_exceptions=True)

        self._log.debug('scheduler stopped')


    # --------------------------------------------------------------------------
    #
    async def _run(self, name, func, interval):

        while True:

            try:
                await func()

            except asyncio.CancelledError:
                raise

            except Exception:
                self._log.exception('periodic task %s failed' % name)

            delay = interval() if callable(interval) else interval
            await asyncio.sleep(delay / 1000.0)


# ------------------------------------------------------------------------------

