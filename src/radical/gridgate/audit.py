
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


''' Audit sinks: where accepted requests are recorded '''

import copy

import radical.utils as ru


# ------------------------------------------------------------------------------
#
class AuditSink(object):
    '''
    Interface of a document store.  `insert` is a coroutine; the broker
    schedules it and does not wait for its completion.
    '''

    async def insert(self, collection, record):
        raise NotImplementedError('insert is not implemented')


# ------------------------------------------------------------------------------
#
class LoggerAuditSink(AuditSink):
    '''
    Writes every record to the broker log.  Used when no document store is
    attached.
    '''

    def __init__(self, log=None):

        self._log = log or ru.Logger('radical.gridgate')


    async def insert(self, collection, record):

        self._log.info('audit [%s] %s' % (collection, record))


# ------------------------------------------------------------------------------
#
class MemoryAuditSink(AuditSink):
    '''
    Keeps records in memory, per collection.
    '''

    def __init__(self):

        self.records = dict()


    async def insert(self, collection, record):

        self.records.setdefault(collection, []).append(copy.deepcopy(record))


# ------------------------------------------------------------------------------

