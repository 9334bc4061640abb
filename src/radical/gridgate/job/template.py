
__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


""" Job template: the submission options of a grid engine job """

import copy

import radical.utils as ru

from .. import exceptions as rgge


# ------------------------------------------------------------------------------
# attribute name : (default, accepted types)
#
_ATTRIBUTES = {
    'remoteCommand'       : (''   , (str,)),
    'args'                : ([]   , (list,)),
    'submitAsHold'        : (False, (bool,)),
    'jobEnvironment'      : ({}   , (dict,)),
    'workingDirectory'    : (''   , (str,)),
    'jobCategory'         : (''   , (str,)),
    'nativeSpecification' : (''   , (str,)),
    'email'               : ([]   , (list,)),
    'blockEmail'          : (True , (bool,)),
    'startTime'           : (''   , (str,)),
    'jobName'             : (''   , (str,)),
    'inputPath'           : (''   , (str,)),
    'outputPath'          : (''   , (str,)),
    'errorPath'           : (''   , (str,)),
    'joinFiles'           : (''   , (str, bool)),
}

# array bounds which may accompany a template in a job-spec file
_BOUNDS = ['start', 'end', 'incr']


# ------------------------------------------------------------------------------
#
class JobTemplate(object):
    """
    The submission options of a job.  A template is created from a dict, where
    keys not known to the template are ignored, and missing keys take their
    default values.  See `qsub(1)` for the meaning of the options, with one
    exception: `nativeSpecification` may carry any `qsub` option but `-help`,
    `-sync`, `-t`, `-verify` and `-w`.
    """

    # --------------------------------------------------------------------------
    #
    def __init__(self, params=None, log=None):

        for name, (default, _) in _ATTRIBUTES.items():
            setattr(self, name, copy.deepcopy(default))

        for key, val in (params or {}).items():

            if key not in _ATTRIBUTES:
                if key not in _BOUNDS and log:
                    log.debug('ignore unknown template attribute %s' % key)
                continue

            if not isinstance(val, _ATTRIBUTES[key][1]):
                raise rgge.BadParameter('invalid type for %s: %r' % (key, val))

            _check_elements(key, val)

            setattr(self, key, copy.deepcopy(val))


    # --------------------------------------------------------------------------
    #
    def as_dict(self):
        return {name: copy.deepcopy(getattr(self, name))
                for name in _ATTRIBUTES}


    def __repr__(self):
        return 'JobTemplate(%s)' % self.remoteCommand


    def __eq__(self, other):
        return isinstance(other, JobTemplate) and \
               self.as_dict() == other.as_dict()


# ------------------------------------------------------------------------------
#
_SCALARS = (str, int, float)


def _is_scalar(val):
    return isinstance(val, _SCALARS) and not isinstance(val, bool)


def _check_elements(key, val):
    '''
    Elements of list and dict attributes end up on the `qsub` command line.
    '''

    if key == 'email':
        bad = [e for e in val if not isinstance(e, str)]

    elif key == 'args':
        bad = [a for a in val if not _is_scalar(a)]

    elif key == 'jobEnvironment':
        bad = [k for k, v in val.items()
                 if not isinstance(k, str) or
                    not (v is None or _is_scalar(v))]
    else:
        return

    if bad:
        raise rgge.BadParameter('invalid entries for %s: %r' % (key, bad))


# ------------------------------------------------------------------------------
#
def _is_int(val):
    return isinstance(val, int) and not isinstance(val, bool)


def valid_array_bounds(start, end, incr):
    '''
    Array job bounds are valid if all are integers with `start > 0`,
    `end >= start` and `start <= incr <= end`.
    '''

    if not (_is_int(start) and _is_int(end) and _is_int(incr)):
        return False

    return start > 0 and end >= start and start <= incr <= end


# ------------------------------------------------------------------------------
#
def load_job_spec(path, log=None):
    '''
    Read a job-spec file and return a tuple `(template, start, end, incr)`.
    The array bounds are `None` if the file does not specify them.
    '''

    try:
        spec = ru.read_json(path)

    except Exception as e:
        raise rgge.BadParameter('cannot read job spec %s' % path,
                                parent=e) from e

    if not isinstance(spec, dict):
        raise rgge.BadParameter('job spec %s is not a JSON object' % path)

    template = JobTemplate(spec, log=log)

    return (template, spec.get('start'), spec.get('end'), spec.get('incr'))


# ------------------------------------------------------------------------------

