
__author__    = 'RADICAL-GridGate Development Team'
__copyright__ = 'Copyright 2024, RADICAL'
__license__   = 'MIT'


import json
import pytest

from unittest import mock


# ------------------------------------------------------------------------------
# captured SGE command output
#
QSTAT_TABLE = '''\
job-ID  prior   name       user         state submit/start at     queue                          slots ja-task-ID
-----------------------------------------------------------------------------------------------------------------
    123 0.55500 sleep.sh   alice        r     01/02/2020 10:00:00 all.q@node1                        1
    124 0.00000 array.sh   alice        qw    01/02/2020 10:00:01                                    1 1
    124 0.00000 array.sh   alice        r     01/02/2020 10:00:01 all.q@node2                        1 3
    125 0.00000 broken.sh  bob          Eqw   01/02/2020 10:00:02                                    1
'''

QSTAT_JOB = '''\
==============================================================
job_number:                 125
submission_time:            Thu Jan  2 10:00:02 2020
owner:                      bob
job_name:                   broken.sh
error reason    1:          01/02/2020 10:00:05 [1000:4242]: error: can't chdir to /nope
error reason    2:          01/02/2020 10:00:06 [1000:4243]: error: can't open output
scheduling info:            (Collecting of scheduler job information is turned off)
'''

QACCT_SINGLE = '''\
==============================================================
qname        all.q
hostname     node1
owner        alice
jobname      sleep.sh
jobnumber    123
taskid       undefined
qsub_time    Thu Jan  2 10:00:00 2020
failed       0
exit_status  0
'''

QACCT_ARRAY = '''\
==============================================================
qname        all.q
jobname      array.sh
jobnumber    124
taskid       1
failed       0
exit_status  0
==============================================================
qname        all.q
jobname      array.sh
jobnumber    124
taskid       3
failed       100 : assumedly after job
exit_status  137
'''

QACCT_NOT_FOUND = 'error: job id 999 not found\n'

QSTAT_HELP = '''\
SGE 8.1.9
usage: qstat [options]
        [-ext]                            view additional attributes
'''


# ------------------------------------------------------------------------------
#
@pytest.fixture
def sge_output():
    return {'qstat_table'    : QSTAT_TABLE,
            'qstat_job'      : QSTAT_JOB,
            'qacct_single'   : QACCT_SINGLE,
            'qacct_array'    : QACCT_ARRAY,
            'qacct_not_found': QACCT_NOT_FOUND,
            'qstat_help'     : QSTAT_HELP}


@pytest.fixture
def log():
    return mock.Mock()


@pytest.fixture
def job_spec(tmp_path):
    '''
    Returns a function which writes a job-spec file and returns its path.
    '''

    def _write(spec, name='job.json'):
        path = tmp_path / name
        path.write_text(json.dumps(spec))
        return str(path)

    return _write


# ------------------------------------------------------------------------------

