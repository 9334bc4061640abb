
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


''' Broker configuration: defaults, file loading and periodic reloading '''

import asyncio

import radical.utils as ru

from . import exceptions as rgge


# ------------------------------------------------------------------------------
# all durations are in milliseconds
#
DEFAULTS = {
    'maxRequestsPerSecUser'      : 2,
    'maxRequestsPerSecGlobal'    : 4,
    'userLifespan'               : 1000000,
    'requestLifespan'            : 5000,
    'maxConcurrentJobs'          : 1,
    'maxJobRunningTime'          : 10000,
    'maxJobQueuedTime'           : 10000,
    'maxArrayJobRunningTime'     : 10000,
    'maxArrayJobQueuedTime'      : 10000,
    'localListPath'              : '',
    'globalListPath'             : '',
    'minimumInputUpdateInterval' : 10000,
    'jobPollingInterval'         : 1000,
    'userPollingInterval'        : 1000,
    'listPollingInterval'        : 1000,
    'sessionName'                : 'gridgate',
}

_COUNTS    = ['maxRequestsPerSecUser', 'maxRequestsPerSecGlobal',
              'maxConcurrentJobs']
_DURATIONS = ['userLifespan', 'requestLifespan', 'maxJobRunningTime',
              'maxJobQueuedTime', 'maxArrayJobRunningTime',
              'maxArrayJobQueuedTime', 'minimumInputUpdateInterval']
_INTERVALS = ['jobPollingInterval', 'userPollingInterval',
              'listPollingInterval']
_PATHS     = ['localListPath', 'globalListPath']


# ------------------------------------------------------------------------------
#
def _is_number(val):
    return isinstance(val, (int, float)) and not isinstance(val, bool)


# ------------------------------------------------------------------------------
#
class Config(object):
    '''
    A complete, validated set of broker settings.  Instances are never
    mutated: a reload creates a new instance, or keeps the old one.
    '''

    # --------------------------------------------------------------------------
    #
    def __init__(self, cfg=None):

        values = dict(DEFAULTS)
        values.update({k: v for k, v in (cfg or {}).items() if k in DEFAULTS})

        for key in _COUNTS:
            val = values[key]
            if not isinstance(val, int) or isinstance(val, bool) or val < 0:
                raise rgge.ConfigError('%s must be a non-negative integer, '
                                       'not %r' % (key, val))

        for key in _DURATIONS:
            if not _is_number(values[key]) or values[key] < 0:
                raise rgge.ConfigError('%s must be a non-negative duration, '
                                       'not %r' % (key, values[key]))

        for key in _INTERVALS:
            if not _is_number(values[key]) or values[key] <= 0:
                raise rgge.ConfigError('%s must be a positive interval, '
                                       'not %r' % (key, values[key]))

        for key in _PATHS:
            if values[key] is None:
                values[key] = ''
            if not isinstance(values[key], str):
                raise rgge.ConfigError('%s must be a path string, not %r'
                                       % (key, values[key]))

        if not isinstance(values['sessionName'], str) or \
           not values['sessionName']:
            raise rgge.ConfigError('sessionName must be a non-empty string')

        self._values = values
        for key, val in values.items():
            setattr(self, key, val)


    # --------------------------------------------------------------------------
    #
    @classmethod
    def load(cls, path):
        '''
        Read a JSON config file and overlay it on the defaults.  Raises
        `ConfigError` if the file cannot be read or holds invalid values.
        '''

        try:
            cfg = ru.read_json(path)

        except Exception as e:
            raise rgge.ConfigError('cannot read config %s' % path,
                                   parent=e) from e

        if not isinstance(cfg, dict):
            raise rgge.ConfigError('config %s is not a JSON object' % path)

        return cls(cfg)


    # --------------------------------------------------------------------------
    #
    def __getitem__(self, key):
        return self._values[key]


    def as_dict(self):
        return dict(self._values)


    def __repr__(self):
        return 'Config(%s)' % self._values


# ------------------------------------------------------------------------------
#
class ConfigStore(object):
    '''
    Holds the current `Config` and reloads it from `path`, at most once per
    `minimumInputUpdateInterval`.  A failed reload keeps the previous config.
    '''

    # --------------------------------------------------------------------------
    #
    def __init__(self, path=None, cfg=None, log=None):

        self._path      = path
        self._log       = log or ru.Logger('radical.gridgate')
        self._cfg       = cfg or Config()
        self._last_read = None


    @property
    def current(self):
        return self._cfg

    @property
    def path(self):
        return self._path

    @property
    def last_read(self):
        return self._last_read


    # --------------------------------------------------------------------------
    #
    def due(self, now):

        if self._last_read is None:
            return True

        return now - self._last_read >= self._cfg.minimumInputUpdateInterval


    # --------------------------------------------------------------------------
    #
    async def reload(self, now):
        '''
        Read the config file (in the loop's default executor).  Returns `True`
        if a new config has been installed.
        '''

        self._last_read = now

        if not self._path:
            return False

        loop = asyncio.get_running_loop()
        try:
            cfg = await loop.run_in_executor(None, Config.load, self._path)

        except rgge.ConfigError as e:
            self._log.warning('keep previous config: %s' % e)
            return False

        self._cfg = cfg
        self._log.debug('config reloaded from %s' % self._path)

        return True


    # --------------------------------------------------------------------------
    #
    async def maybe_reload(self, now):

        if not self.due(now):
            return False

        return await self.reload(now)


# ------------------------------------------------------------------------------

