
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


''' White- and blacklists of requester identities '''

import re
import asyncio

import radical.utils as ru

from . import exceptions as rgge


WHITELIST = 'whitelist'
BLACKLIST = 'blacklist'

LOCAL     = 'local'
GLOBAL    = 'global'


# ------------------------------------------------------------------------------
#
def read_list_file(path):
    '''
    Read a list file of the form::

        {"whitelist": ["^10\\.0\\.", ...], "blacklist": [...]}

    Both keys are optional.  Raises `ListFileError` if the file cannot be read
    or does not have that shape.
    '''

    try:
        data = ru.read_json(path)

    except Exception as e:
        raise rgge.ListFileError('cannot read list file %s' % path,
                                 parent=e) from e

    if not isinstance(data, dict):
        raise rgge.ListFileError('list file %s is not a JSON object' % path)

    ret = dict()
    for key in [WHITELIST, BLACKLIST]:

        entries = data.get(key) or []
        if not isinstance(entries, list) or \
           not all(isinstance(e, str) for e in entries):
            raise rgge.ListFileError('%s in %s must be a list of strings'
                                     % (key, path))
        ret[key] = entries

    return ret


# ------------------------------------------------------------------------------
#
class AccessLists(object):
    '''
    The union of a local and a global list file.  Each entry is a regular
    expression which is searched for in the (normalized) requester identity.
    If a source cannot be read, its previously read entries stay in effect.
    '''

    # --------------------------------------------------------------------------
    #
    def __init__(self, log=None):

        self._log     = log or ru.Logger('radical.gridgate')
        self._sources = {LOCAL : {WHITELIST: [], BLACKLIST: []},
                         GLOBAL: {WHITELIST: [], BLACKLIST: []}}
        self._white   = list()
        self._black   = list()


    # --------------------------------------------------------------------------
    #
    @property
    def whitelist(self):
        return [p.pattern for p in self._white]

    @property
    def blacklist(self):
        return [p.pattern for p in self._black]


    # --------------------------------------------------------------------------
    #
    def set_source(self, source, entries):
        '''
        Replace the entries of one source (`local` or `global`) and recompile.
        `entries` is a dict as returned by `read_list_file`, or `None` to
        clear the source.
        '''

        if source not in self._sources:
            raise rgge.BadParameter('unknown list source %s' % source)

        entries = entries or dict()
        self._sources[source] = {WHITELIST: list(entries.get(WHITELIST, [])),
                                 BLACKLIST: list(entries.get(BLACKLIST, []))}
        self._compile()


    # --------------------------------------------------------------------------
    #
    def _compile(self):

        for key in [WHITELIST, BLACKLIST]:

            merged = list()
            for source in [LOCAL, GLOBAL]:
                for entry in self._sources[source][key]:
                    if entry not in merged:
                        merged.append(entry)

            compiled = list()
            for entry in merged:
                try:
                    compiled.append(re.compile(entry))
                except re.error as e:
                    self._log.warning('skip invalid %s entry %r: %s'
                                      % (key, entry, e))

            if key == WHITELIST: self._white = compiled
            else               : self._black = compiled


    # --------------------------------------------------------------------------
    #
    async def refresh(self, local_path, global_path):
        '''
        Re-read both list files.  An empty path disables that source.
        '''

        loop = asyncio.get_running_loop()

        for source, path in [(LOCAL, local_path), (GLOBAL, global_path)]:

            if not path:
                self._sources[source] = {WHITELIST: [], BLACKLIST: []}
                continue

            try:
                entries = await loop.run_in_executor(None, read_list_file,
                                                     path)
            except rgge.ListFileError as e:
                self._log.warning('keep previous %s lists: %s' % (source, e))
                continue

            self._sources[source] = entries

        self._compile()


    # --------------------------------------------------------------------------
    #
    def _matches(self, patterns, ip):

        for pattern in patterns:
            if pattern.search(ip):
                return True
        return False


    def is_whitelisted(self, ip):
        return self._matches(self._white, ip)


    def is_blacklisted(self, ip):
        return self._matches(self._black, ip)


# ------------------------------------------------------------------------------

