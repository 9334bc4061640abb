# -*- coding: utf-8 -*-

__author__    = "RADICAL-GridGate Development Team"
__copyright__ = "Copyright 2024, RADICAL"
__license__   = "MIT"


""" SGE command line: argument building and output parsing.

Nothing in this module runs a process: all functions operate on templates and
on captured command output.
"""

import re
import shlex

from collections import namedtuple

from ...         import constants  as c
from ...         import exceptions as rgge


_QSTAT_DATE_RE   = re.compile(r"^[0-9]{2}/[0-9]{2}/[0-9]{4}$")
_QSTAT_TIME_RE   = re.compile(r"^[0-9]{2}:[0-9]{2}:[0-9]{2}$")
_QACCT_RULE_RE   = re.compile(r"^=+[ \t]*$", re.MULTILINE)
_QSUB_OUTPUT_RE  = re.compile(
    r"^Your job(?:-array)? ([0-9]+)(?:\.([0-9]+)-([0-9]+):([0-9]+))?\b")
_ERROR_REASON_RE = re.compile(r"^error reason\s*[0-9]*$")


# ------------------------------------------------------------------------------
# raw SGE state -> job program status
#
_STATUS_MAP = {
    'qw'    : c.QUEUED,
    'hqw'   : c.ON_HOLD,
    'hRqw'  : c.ON_HOLD,
    'hRwq'  : c.ON_HOLD,
    'r'     : c.RUNNING,
    't'     : c.RUNNING,
    'Rr'    : c.RUNNING,
    'Rt'    : c.RUNNING,
    's'     : c.SUSPENDED,
    'ts'    : c.SUSPENDED,
    'S'     : c.SUSPENDED,
    'tS'    : c.SUSPENDED,
    'T'     : c.SUSPENDED,
    'tT'    : c.SUSPENDED,
    'Rs'    : c.SUSPENDED,
    'Rts'   : c.SUSPENDED,
    'RS'    : c.SUSPENDED,
    'RtS'   : c.SUSPENDED,
    'RT'    : c.SUSPENDED,
    'RtT'   : c.SUSPENDED,
    'Eqw'   : c.ERROR,
    'Ehqw'  : c.ERROR,
    'EhRqw' : c.ERROR,
}


# ------------------------------------------------------------------------------
#
class Version(namedtuple('Version', ['major', 'minor'])):

    def __str__(self):
        return '%s.%s' % (self.major, self.minor)


# ------------------------------------------------------------------------------
#
class SgeKeyValueParser(object):
    """
    Iterates over the `key  value` lines of an accounting record and yields
    `(key, value)` tuples.  Lines ending in a backslash continue on the next
    line.
    """

    KEY_VALUE_RE = re.compile(r"^([^ ]+) +(.+)$")

    def __init__(self, text):

        self._lines = iter((text or '').splitlines())

    def __iter__(self):

        for line in self._lines:

            line = line.rstrip()
            while line.endswith('\\'):
                line = line[:-1] + next(self._lines, '').strip()

            m = self.KEY_VALUE_RE.match(line)
            if m:
                key, value = m.groups()
                yield key, value.strip()

    def as_dict(self):

        return dict(self)


# ------------------------------------------------------------------------------
#
def sge_to_status(sge_state):
    """
    Translates a raw SGE job state to a job program status.  Unknown states
    translate to `UNDETERMINED`.
    """

    return _STATUS_MAP.get(sge_state, c.UNDETERMINED)


def array_job_status(task_states):
    """
    Aggregate status of the tasks of an array job which are still listed by
    `qstat`: `ERROR` if any task is in error, `UNDETERMINED` otherwise.
    `task_states` are job program states, not raw SGE states.
    """

    if c.ERROR in list(task_states):
        return c.ERROR

    return c.UNDETERMINED


# ------------------------------------------------------------------------------
#
def check_native_specification(native):
    """
    Split a native specification into tokens and refuse the flags which are
    reserved (`-help`, `-sync`, `-t`, `-verify`, `-w`).
    """

    if not native:
        return []

    try:
        tokens = shlex.split(native)

    except ValueError as e:
        raise rgge.BadParameter('cannot parse native specification %r'
                                % native, parent=e) from e

    for token in tokens:
        if token in c.RESERVED_NATIVE_FLAGS:
            raise rgge.UnsupportedAttribute('native option %s is not '
                                            'supported' % token)
    return tokens


# ------------------------------------------------------------------------------
#
def build_submit_tokens(template, start=None, end=None, incr=None):
    """
    Map a job template to `qsub` options, in a fixed order: working directory,
    hold, environment, email, start time, name, I/O paths, join files, native
    specification, and finally the array task range.  The remote command and
    its arguments are not included.
    """

    # check native flags before anything else is built
    native = check_native_specification(template.nativeSpecification)
    tokens = list()

    if template.workingDirectory:
        tokens.append('-cwd')

    if template.submitAsHold:
        tokens.append('-h')

    if template.jobEnvironment:
        env = list()
        for key, val in template.jobEnvironment.items():
            if val in [None, '']: env.append(str(key))
            else                : env.append('%s=%s' % (key, val))
        tokens += ['-v', ','.join(env)]

    if template.email:
        tokens += ['-M', ','.join(template.email)]

    if template.blockEmail:
        tokens += ['-m', 'n']

    if template.startTime:
        tokens += ['-a', template.startTime]

    if template.jobName:
        tokens += ['-N', template.jobName]

    if template.inputPath:
        tokens += ['-i', template.inputPath]

    if template.outputPath:
        tokens += ['-o', template.outputPath]

    if template.errorPath:
        tokens += ['-e', template.errorPath]

    if template.joinFiles and template.joinFiles not in ['n', 'no']:
        tokens += ['-j', 'y']

    tokens += native

    if start is not None:
        tokens += ['-t', '%s-%s:%s' % (start, end, incr)]

    return tokens


def build_submit_args(template, start=None, end=None, incr=None):
    """
    Same as `build_submit_tokens`, but returns a shell quoted string.
    """

    return shlex.join(build_submit_tokens(template, start, end, incr))


def build_submit_command(qsub, template, start=None, end=None, incr=None):
    """
    The complete `qsub` command line as list of arguments.
    """

    if not template.remoteCommand:
        raise rgge.BadParameter('job template has no remote command')

    return [qsub] \
         + build_submit_tokens(template, start, end, incr) \
         + [template.remoteCommand] \
         + [str(arg) for arg in template.args]


# ------------------------------------------------------------------------------
#
def parse_submit_output(out):
    """
    Parse the `qsub` reply, like::

        Your job 123 ("sleep.sh") has been submitted
        Your job-array 124.1-10:2 ("array.sh") has been submitted

    into `{'jobId': '124', 'start': 1, 'end': 10, 'incr': 2}` (bounds are
    `None` for single jobs).
    """

    for line in (out or '').splitlines():

        m = _QSUB_OUTPUT_RE.match(line.strip())
        if not m:
            continue

        job_id, start, end, incr = m.groups()
        ret = {'jobId': job_id, 'start': None, 'end': None, 'incr': None}

        if start is not None:
            ret['start'] = int(start)
            ret['end']   = int(end)
            ret['incr']  = int(incr)

        return ret

    raise rgge.ParseError('unexpected qsub output: %r' % out)


# ------------------------------------------------------------------------------
#
def _is_int(token):
    return token.isdigit()


def parse_qstat_table(out):
    """
    Parse the output of `qstat -g d`::

        job-ID  prior   name     user   state submit/start at     queue  slots ja-task-ID
        ---------------------------------------------------------------------------------
            123 0.55500 sleep.sh alice  r     01/02/2020 10:00:00 all.q@n1   1
            124 0.00000 array.sh alice  qw    01/02/2020 10:00:01            1 1

    Single jobs are returned as `{job_id: entry}`, array job tasks as
    `{job_id: {'jobId': job_id, 'tasks': {task_id: entry}}}`.  The queue is
    only listed for scheduled jobs, so array tasks are recognized by their
    trailing numeric `slots` and `ja-task-ID` columns.
    """

    jobs = dict()

    for line in (out or '').splitlines():

        line = line.strip()
        if not line                 or \
           line.startswith('job-ID') or \
           set(line) == set('-'):
            continue

        tokens = line.split()

        date_idx = None
        for idx, token in enumerate(tokens):
            if _QSTAT_DATE_RE.match(token):
                date_idx = idx
                break

        if date_idx is None or date_idx < 2 or \
           len(tokens) < date_idx + 2 or \
           not _QSTAT_TIME_RE.match(tokens[date_idx + 1]):
            raise rgge.ParseError('unexpected qstat line: %r' % line)

        head = tokens[1:date_idx - 1]
        rest = tokens[date_idx + 2:]

        # some tables come without the priority column
        if len(head) < 3:
            head = [None] + head

        entry = {'jobId'      : tokens[0],
                 'jobPriority': head[0],
                 'jobName'    : head[1] if len(head) > 1 else None,
                 'jobOwner'   : head[2] if len(head) > 2 else None,
                 'jobState'   : tokens[date_idx - 1],
                 'submitDate' : '%s %s' % (tokens[date_idx],
                                           tokens[date_idx + 1]),
                 'jobQueue'   : None,
                 'jobSlots'   : None}

        task_id = None
        if len(rest) >= 2 and _is_int(rest[-1]) and _is_int(rest[-2]):
            task_id = int(rest[-1])
            rest    = rest[:-1]

        if rest and not _is_int(rest[0]):
            entry['jobQueue'] = rest[0]
            rest = rest[1:]

        if rest:
            entry['jobSlots'] = rest[0]

        job_id = entry['jobId']
        if task_id is None:
            jobs[job_id] = entry

        else:
            entry['taskId'] = task_id
            if job_id not in jobs or 'tasks' not in jobs[job_id]:
                jobs[job_id] = {'jobId': job_id, 'tasks': dict()}
            jobs[job_id]['tasks'][task_id] = entry

    return jobs


# ------------------------------------------------------------------------------
#
def parse_qstat_job(out):
    """
    Parse the output of `qstat -j <id>`, a block of `key: value` lines below
    a separator line.  Repeated `error reason N` keys are collected, in order,
    into the list `error_reason`.
    """

    job   = dict()
    lines = [line for line in (out or '').splitlines()[1:] if line.strip()]

    for line in lines:

        if ':' not in line:
            continue

        key, value = line.split(':', 1)
        key   = key.strip()
        value = value.strip()

        if _ERROR_REASON_RE.match(key):
            job.setdefault('error_reason', []).append(value)
        else:
            job[key] = value

    return job


# ------------------------------------------------------------------------------
#
def parse_qacct(out):
    """
    Parse the output of `qacct -j <id>`.  Records are separated by `=====`
    lines.  A single record is returned as dict, several records (the tasks
    of an array job) as `{task_id: record}`.
    """

    blocks = [b for b in _QACCT_RULE_RE.split(out or '') if b.strip()]

    if not blocks:
        raise rgge.ParseError('unexpected qacct output: %r' % out)

    records = [SgeKeyValueParser(block).as_dict() for block in blocks]

    if len(records) == 1:
        return records[0]

    ret = dict()
    for rec in records:
        task_id = rec.get('taskid', '')
        ret[int(task_id) if _is_int(task_id) else task_id] = rec

    return ret


# ------------------------------------------------------------------------------
#
def parse_version_banner(out):
    """
    The first line of `qstat -help` names the grid engine and its version,
    like `SGE 8.1.9` or `GE 6.2u5_1`.
    """

    lines = (out or '').strip().splitlines()
    if not lines:
        raise rgge.ParseError('empty version banner')

    parts = lines[0].split()
    if len(parts) < 2:
        raise rgge.ParseError('unexpected version banner: %r' % lines[0])

    vparts = parts[1].split('.')
    major  = vparts[0]
    minor  = vparts[1] if len(vparts) > 1 else '0'

    return {'name': parts[0], 'version': Version(major, minor)}


# ------------------------------------------------------------------------------

