#!/usr/bin/env python3

__author__    = 'RADICAL-GridGate Development Team'
__copyright__ = 'Copyright 2024, RADICAL'
__license__   = 'MIT'

"""
Tests for job templates, job-spec files and array bounds.
"""

import pytest

from unittest import mock

import radical.gridgate as rgg

from radical.gridgate.job import load_job_spec, valid_array_bounds


# ------------------------------------------------------------------------------
#
def test_template_defaults():

    jt = rgg.JobTemplate()

    assert jt.remoteCommand       == ''
    assert jt.args                == []
    assert jt.submitAsHold        is False
    assert jt.jobEnvironment      == {}
    assert jt.email               == []
    assert jt.blockEmail          is True
    assert jt.joinFiles           == ''
    assert jt.nativeSpecification == ''


# ------------------------------------------------------------------------------
#
def test_template_params():

    log    = mock.Mock()
    params = {'remoteCommand' : '/bin/sleep',
              'args'          : ['10'],
              'jobEnvironment': {'FOO': 'bar'},
              'joinFiles'     : True,
              'start'         : 1,
              'priority'      : 'high'}

    jt = rgg.JobTemplate(params, log=log)

    assert jt.remoteCommand  == '/bin/sleep'
    assert jt.args           == ['10']
    assert jt.jobEnvironment == {'FOO': 'bar'}
    assert jt.joinFiles      is True
    assert not hasattr(jt, 'priority')

    # only the really unknown key is reported
    log.debug.assert_called_once()
    assert 'priority' in log.debug.call_args[0][0]

    # the template holds copies
    params['args'].append('20')
    assert jt.args == ['10']

    assert jt == rgg.JobTemplate(jt.as_dict())
    assert jt != rgg.JobTemplate({'remoteCommand': '/bin/true'})


# ------------------------------------------------------------------------------
#
def test_template_invalid_type():

    with pytest.raises(rgg.BadParameter):
        rgg.JobTemplate({'args': '10 20'})

    with pytest.raises(rgg.BadParameter):
        rgg.JobTemplate({'submitAsHold': 'yes'})

    # list and dict entries are checked, too
    with pytest.raises(rgg.BadParameter):
        rgg.JobTemplate({'email': ['a@b.c', 1]})

    with pytest.raises(rgg.BadParameter):
        rgg.JobTemplate({'args': ['1', ['2']]})

    with pytest.raises(rgg.BadParameter):
        rgg.JobTemplate({'jobEnvironment': {'A': {'B': 'C'}}})

    with pytest.raises(rgg.BadParameter):
        rgg.JobTemplate({'jobEnvironment': {'A': True}})

    jt = rgg.JobTemplate({'args'          : ['1', 2, 3.5],
                          'jobEnvironment': {'A': 1, 'B': None}})
    assert jt.args           == ['1', 2, 3.5]
    assert jt.jobEnvironment == {'A': 1, 'B': None}


# ------------------------------------------------------------------------------
#
def test_valid_array_bounds():

    assert     valid_array_bounds(1, 10, 2)
    assert     valid_array_bounds(1, 1, 1)
    assert     valid_array_bounds(2, 10, 2)
    assert not valid_array_bounds(0, 10, 1)
    assert not valid_array_bounds(5, 4, 5)
    assert not valid_array_bounds(3, 10, 2)
    assert not valid_array_bounds(1, 10, 11)
    assert not valid_array_bounds(None, None, None)
    assert not valid_array_bounds(1, 10, None)
    assert not valid_array_bounds('1', 10, 1)
    assert not valid_array_bounds(True, 10, 1)


# ------------------------------------------------------------------------------
#
def test_load_job_spec(job_spec):

    path = job_spec({'remoteCommand': '/bin/sleep', 'args': ['1'],
                     'start': 1, 'end': 4, 'incr': 1})

    template, start, end, incr = load_job_spec(path)

    assert template.remoteCommand == '/bin/sleep'
    assert (start, end, incr)     == (1, 4, 1)

    path = job_spec({'remoteCommand': '/bin/sleep'}, name='single.json')
    _, start, end, incr = load_job_spec(path)

    assert (start, end, incr) == (None, None, None)

    with pytest.raises(rgg.BadParameter):
        load_job_spec(path + '.missing')

    path = job_spec(['/bin/sleep'], name='list.json')
    with pytest.raises(rgg.BadParameter):
        load_job_spec(path)


# ------------------------------------------------------------------------------


if __name__ == '__main__':

    test_template_defaults()
    test_template_params()
    test_template_invalid_type()
    test_valid_array_bounds()


# ------------------------------------------------------------------------------

