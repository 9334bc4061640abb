#!/usr/bin/env python3

__author__    = 'RADICAL-GridGate Development Team'
__copyright__ = 'Copyright 2024, RADICAL'
__license__   = 'MIT'

"""
Tests for SGE sessions: submission, status mapping, control and wait, with a
mocked command line layer.
"""

import asyncio
import pytest

from unittest import mock

import radical.gridgate as rgg

from radical.gridgate.adaptors.sge import parsers
from radical.gridgate.adaptors.sge import sge_session


# ------------------------------------------------------------------------------
#
def _session():

    cli = mock.Mock()
    cli.submit           = mock.AsyncMock()
    cli.query_status     = mock.AsyncMock()
    cli.query_accounting = mock.AsyncMock()
    cli.control          = mock.AsyncMock(return_value='')

    return sge_session.SGESession('gridgate', cli, log=mock.Mock(),
                                  refresh_interval=1)


def _submitted(text):
    return {'stdout': text, 'stderr': ''}


def _template(**kwargs):

    params = {'remoteCommand': '/bin/sleep', 'args': ['10']}
    params.update(kwargs)

    return rgg.JobTemplate(params)


# ------------------------------------------------------------------------------
#
def test_run_job():

    s = _session()
    s._cli.submit.return_value = _submitted(
                                 'Your job 123 ("sleep") has been submitted')

    job_id = asyncio.run(s.run_job(_template()))

    assert job_id == '123'
    assert s.get_job('123').template.remoteCommand == '/bin/sleep'
    assert not s.get_job(123).is_array
    s._cli.submit.assert_called_once()

    with pytest.raises(rgg.DoesNotExist):
        s.get_job('999')


# ------------------------------------------------------------------------------
#
def test_run_job_invalid():

    s = _session()

    with pytest.raises(rgg.BadParameter):
        asyncio.run(s.run_job(rgg.JobTemplate()))

    with pytest.raises(rgg.UnsupportedAttribute):
        asyncio.run(s.run_job(_template(nativeSpecification='-sync y')))

    # unbalanced quotes
    with pytest.raises(rgg.ValidationError):
        asyncio.run(s.run_job(_template(nativeSpecification='-l h="x')))

    s._cli.submit.assert_not_called()


# ------------------------------------------------------------------------------
#
def test_run_bulk_jobs():

    s = _session()
    s._cli.submit.return_value = _submitted(
                    'Your job-array 124.1-4:2 ("sleep") has been submitted')

    job_id = asyncio.run(s.run_bulk_jobs(_template(), 1, 4, 2))
    job    = s.get_job(job_id)

    assert job_id       == '124'
    assert job.is_array
    assert job.task_ids == [1, 3]
    s._cli.submit.assert_called_once_with(mock.ANY, 1, 4, 2)

    for bounds in [(0, 4, 1), (5, 4, 5), (1, 4, 5), (3, 10, 2)]:
        with pytest.raises(rgg.InvalidArrayBounds):
            asyncio.run(s.run_bulk_jobs(_template(), *bounds))


# ------------------------------------------------------------------------------
#
def test_status_single(sge_output):

    s = _session()
    s._cli.submit.side_effect = [
            _submitted('Your job 123 ("sleep") has been submitted'),
            _submitted('Your job 125 ("broken") has been submitted'),
            _submitted('Your job 126 ("gone") has been submitted')]

    for _ in range(3):
        asyncio.run(s.run_job(_template()))

    table = parsers.parse_qstat_table(sge_output['qstat_table'])

    s._cli.query_status.side_effect = [
            table, parsers.parse_qstat_job(sge_output['qstat_job'])]
    s._cli.query_accounting.return_value = \
            parsers.parse_qacct(sge_output['qacct_single'])

    states = asyncio.run(s.get_job_program_status(['123', '125', '126']))

    assert states['123'] == {'mainStatus': rgg.RUNNING, 'subStatus': None}

    assert states['125']['mainStatus'] == rgg.ERROR
    assert len(states['125']['errors']) == 2

    assert states['126'] == {'mainStatus': rgg.COMPLETED,
                             'subStatus' : rgg.DONE}
    s._cli.query_accounting.assert_called_once_with('126')

    with pytest.raises(rgg.BadParameter):
        asyncio.run(s.get_job_program_status([]))


# ------------------------------------------------------------------------------
#
def test_status_single_failed():

    s = _session()
    s._cli.submit.return_value = _submitted('Your job 7 ("x") has been '
                                            'submitted')
    asyncio.run(s.run_job(_template()))

    s._cli.query_status.return_value     = {}
    s._cli.query_accounting.return_value = {'jobnumber'  : '7',
                                            'failed'     : '1 : assumedly '
                                                           'before job',
                                            'exit_status': '1'}

    states = asyncio.run(s.get_job_program_status(rgg.JOB_IDS_SESSION_ALL))
    assert states['7'] == {'mainStatus': rgg.COMPLETED,
                           'subStatus' : rgg.FAILED}

    s._cli.query_accounting.return_value = {'job_id'   : '7',
                                            'not_found': True}

    states = asyncio.run(s.get_job_program_status('7'))
    assert states['7'] == {'mainStatus': rgg.COMPLETED,
                           'subStatus' : rgg.UNDETERMINED}


# ------------------------------------------------------------------------------
#
def test_status_array(sge_output):

    s = _session()
    s._cli.submit.return_value = _submitted(
                    'Your job-array 124.1-3:1 ("array") has been submitted')
    asyncio.run(s.run_bulk_jobs(_template(), 1, 3, 1))

    table = parsers.parse_qstat_table(sge_output['qstat_table'])
    acct  = {2: {'jobnumber': '124', 'taskid': '2',
                 'failed'   : '0',   'exit_status': '0'}}

    s._cli.query_status.return_value     = table
    s._cli.query_accounting.return_value = acct

    status = asyncio.run(s.get_job_program_status(['124']))['124']
    tasks  = status['tasksStatus']

    # task 1 queued, task 3 running, task 2 left the table
    assert status['mainStatus']   == rgg.UNDETERMINED
    assert tasks[1]['mainStatus'] == rgg.QUEUED
    assert tasks[3]['mainStatus'] == rgg.RUNNING
    assert tasks[2] == {'mainStatus': rgg.COMPLETED, 'subStatus': rgg.DONE}

    # all tasks finished, one of them failed
    s._cli.query_status.return_value     = {}
    s._cli.query_accounting.return_value = \
            parsers.parse_qacct(sge_output['qacct_array'])

    status = asyncio.run(s.get_job_program_status(['124']))['124']

    assert status['mainStatus'] == rgg.COMPLETED
    assert status['subStatus']  == rgg.FAILED
    assert status['tasksStatus'][2]['subStatus'] == rgg.UNDETERMINED
    assert status['tasksStatus'][3]['subStatus'] == rgg.FAILED


def test_status_array_error():

    s = _session()
    s._cli.submit.return_value = _submitted(
                    'Your job-array 130.1-2:1 ("array") has been submitted')
    asyncio.run(s.run_bulk_jobs(_template(), 1, 2, 1))

    s._cli.query_status.return_value = {
            '130': {'jobId': '130',
                    'tasks': {1: {'jobState': 'Eqw'},
                              2: {'jobState': 'r'}}}}

    status = asyncio.run(s.get_job_program_status(['130']))['130']

    assert status['mainStatus'] == rgg.ERROR
    s._cli.query_accounting.assert_not_called()


# ------------------------------------------------------------------------------
#
def test_control():

    s = _session()
    s._cli.submit.side_effect = [
            _submitted('Your job 1 ("a") has been submitted'),
            _submitted('Your job 2 ("b") has been submitted')]

    asyncio.run(s.run_job(_template()))
    asyncio.run(s.run_job(_template()))

    asyncio.run(s.control('1', rgg.SUSPEND))
    s._cli.control.assert_called_with(['1'], rgg.SUSPEND)
    assert not s.is_deleted('1')

    asyncio.run(s.control('1', rgg.TERMINATE))
    assert s.is_deleted('1')

    # deleted jobs are reported as such, without asking the grid engine
    s._cli.query_status.return_value = {}
    states = asyncio.run(s.get_job_program_status(['1']))
    assert states['1'] == {'mainStatus': rgg.COMPLETED,
                           'subStatus' : rgg.DELETED}
    s._cli.query_accounting.assert_not_called()

    # session wide control skips deleted jobs
    asyncio.run(s.control(rgg.JOB_IDS_SESSION_ALL, rgg.TERMINATE))
    s._cli.control.assert_called_with(['2'], rgg.TERMINATE)

    s._cli.control.reset_mock()
    assert asyncio.run(s.control(rgg.JOB_IDS_SESSION_ALL,
                                 rgg.TERMINATE)) is None
    s._cli.control.assert_not_called()

    with pytest.raises(rgg.BadParameter):
        asyncio.run(s.control('1', 'KILL'))

    with pytest.raises(rgg.DoesNotExist):
        asyncio.run(s.control('3', rgg.HOLD))

    # forgotten jobs are no longer known to the session
    s.forget('1')
    s.forget('9')
    assert not s.is_deleted('1')
    assert '1' not in s.jobs
    assert '2'     in s.jobs

    with pytest.raises(rgg.DoesNotExist):
        s.get_job('1')


# ------------------------------------------------------------------------------
#
def test_synchronize_and_wait(sge_output):

    s = _session()
    s._cli.submit.return_value = _submitted('Your job 123 ("a") has been '
                                            'submitted')
    asyncio.run(s.run_job(_template()))

    running = {'123': {'jobId': '123', 'jobState': 'r'}}

    s._cli.query_status.side_effect = [running, running, {}, {}]
    s._cli.query_accounting.side_effect = [
            {'job_id': '123', 'not_found': True},     # status poll
            {'job_id': '123', 'not_found': True},     # first wait poll
            parsers.parse_qacct(sge_output['qacct_single'])]

    info = asyncio.run(s.wait('123'))

    assert info.job_id == '123'
    assert info.get_exit_status() == 0
    assert not info.has_failed()
    assert info.deleted is False


def test_synchronize_timeout():

    s = _session()
    s._cli.submit.return_value = _submitted('Your job 5 ("a") has been '
                                            'submitted')
    asyncio.run(s.run_job(_template()))

    s._cli.query_status.return_value = {'5': {'jobId': '5', 'jobState': 'qw'}}

    with pytest.raises(rgg.Timeout):
        asyncio.run(s.synchronize(['5'], rgg.TIMEOUT_NO_WAIT))

    assert s._cli.query_status.call_count == 1

    with pytest.raises(rgg.Timeout):
        asyncio.run(s.synchronize(['5'], 20))


# ------------------------------------------------------------------------------
#
def test_aggregate_tasks():

    agg = sge_session._aggregate_tasks

    done    = {'mainStatus': rgg.COMPLETED, 'subStatus': rgg.DONE}
    failed  = {'mainStatus': rgg.COMPLETED, 'subStatus': rgg.FAILED}
    unknown = {'mainStatus': rgg.COMPLETED, 'subStatus': rgg.UNDETERMINED}
    running = {'mainStatus': rgg.RUNNING,   'subStatus': None}
    error   = {'mainStatus': rgg.ERROR,     'subStatus': None}

    assert agg({1: done, 2: done})['subStatus']     == rgg.DONE
    assert agg({1: done, 2: unknown})['subStatus']  == rgg.UNDETERMINED
    assert agg({1: unknown, 2: failed})['subStatus'] == rgg.FAILED
    assert agg({1: done, 2: running})['mainStatus'] == rgg.UNDETERMINED
    assert agg({1: error, 2: running})['mainStatus'] == rgg.ERROR
    assert agg({1: done,  2: error})['mainStatus']   == rgg.ERROR
    assert agg({1: error, 2: done})['subStatus']     is None


# ------------------------------------------------------------------------------


if __name__ == '__main__':

    test_run_job()
    test_run_job_invalid()
    test_run_bulk_jobs()
    test_status_single_failed()
    test_status_array_error()
    test_control()
    test_synchronize_timeout()
    test_aggregate_tasks()


# ------------------------------------------------------------------------------

