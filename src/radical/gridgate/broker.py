
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


''' The broker: one instance of all components, wired together '''

import asyncio

import radical.utils as ru

from .                    import exceptions as rgge
from .config              import ConfigStore
from .lists               import AccessLists
from .audit               import LoggerAuditSink
from .monitor             import JobMonitor
from .admission           import AdmissionController
from .scheduler           import Scheduler
from .adaptors.sge        import SGESessionManager
from .utils               import misc       as rggmisc


# ------------------------------------------------------------------------------
#
class Broker(object):
    '''
    Owns config, access lists, session manager, job monitor, admission
    controller, audit sink and the scheduler of the periodic tasks (job
    polling, requester expiry, list refresh).  All components live on the
    event loop which runs `start()`.

    Example::

        async def main():
            async with rgg.Broker(config_path='gridgate.json') as broker:
                descr = await broker.handle_request({'ip'     : '10.0.0.1',
                                                     'time'   : now,
                                                     'jobPath': 'job.json'})
                final = await broker.wait_for_result(descr.job_id)
    '''

    # --------------------------------------------------------------------------
    #
    def __init__(self, config_path=None, cfg=None, session_manager=None,
                       audit=None, log=None):

        self._log  = log or ru.Logger('radical.gridgate')
        self._loop = None

        self.config          = ConfigStore(path=config_path, cfg=cfg,
                                           log=self._log)
        self.lists           = AccessLists(log=self._log)
        self.session_manager = session_manager or SGESessionManager(
                                                               log=self._log)
        self.audit           = audit or LoggerAuditSink(log=self._log)
        self.monitor         = JobMonitor(self.config, log=self._log)
        self.admission       = AdmissionController(self.config, self.lists,
                                                   self.session_manager,
                                                   self.monitor,
                                                   audit=self.audit,
                                                   log=self._log)
        self.scheduler       = Scheduler(log=self._log)

        self.scheduler.add('jobs',  self.monitor.poll,
                           lambda: self.config.current.jobPollingInterval)
        self.scheduler.add('users', self._expire_users,
                           lambda: self.config.current.userPollingInterval)
        self.scheduler.add('lists', self.refresh_lists,
                           lambda: self.config.current.listPollingInterval)


    # --------------------------------------------------------------------------
    #
    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.stop()


    # --------------------------------------------------------------------------
    #
    async def start(self):
        '''
        Read config and lists, probe the grid engine, open the configured
        session and start the periodic tasks.  Returns `True` if the grid
        engine is ready; otherwise the broker keeps running but refuses
        submissions.
        '''

        self._loop = asyncio.get_running_loop()

        await self.config.reload(rggmisc.now_ms())
        await self.refresh_lists()

        ready = await self.session_manager.initialize()
        if ready:
            await self.session_manager.get_or_create_session(
                                            self.config.current.sessionName)
        else:
            self._log.error('grid engine is not available, '
                            'submissions will fail')

        self.scheduler.start()
        self._log.info('broker started')

        return ready


    async def stop(self):

        await self.scheduler.stop()
        self.monitor.close()
        self.session_manager.close_session(self.config.current.sessionName)

        self._loop = None
        self._log.info('broker stopped')


    # --------------------------------------------------------------------------
    #
    async def refresh_lists(self):

        cfg = self.config.current
        await self.lists.refresh(cfg.localListPath, cfg.globalListPath)


    async def _expire_users(self):

        self.admission.expire_users()


    # --------------------------------------------------------------------------
    #
    async def handle_request(self, request_data):

        return await self.admission.handle_request(request_data)


    async def wait_for_result(self, job_id):

        return await self.admission.wait_for_result(job_id)


    def submit(self, request_data):
        '''
        Hand a request to the broker from another thread.  Returns a
        `concurrent.futures.Future` for the job descriptor.
        '''

        if self._loop is None:
            raise rgge.BackendUnavailable('broker is not running')

        return asyncio.run_coroutine_threadsafe(
                                  self.handle_request(request_data), self._loop)


# ------------------------------------------------------------------------------

