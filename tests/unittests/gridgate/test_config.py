#!/usr/bin/env python3

__author__    = 'RADICAL-GridGate Development Team'
__copyright__ = 'Copyright 2024, RADICAL'
__license__   = 'MIT'

"""
Tests for the broker configuration and its periodic reload.
"""

import json
import asyncio
import pytest

from unittest import mock

import radical.gridgate as rgg

from radical.gridgate.config import DEFAULTS


# ------------------------------------------------------------------------------
#
def test_config_defaults():

    cfg = rgg.Config()

    assert cfg.maxRequestsPerSecUser      == 2
    assert cfg.maxRequestsPerSecGlobal    == 4
    assert cfg.userLifespan               == 1000000
    assert cfg.requestLifespan            == 5000
    assert cfg.maxConcurrentJobs          == 1
    assert cfg.maxJobRunningTime          == 10000
    assert cfg.maxJobQueuedTime           == 10000
    assert cfg.maxArrayJobRunningTime     == 10000
    assert cfg.maxArrayJobQueuedTime      == 10000
    assert cfg.localListPath              == ''
    assert cfg.globalListPath             == ''
    assert cfg.minimumInputUpdateInterval == 10000
    assert cfg.jobPollingInterval         == 1000
    assert cfg['sessionName']             == 'gridgate'
    assert cfg.as_dict()                  == DEFAULTS


# ------------------------------------------------------------------------------
#
def test_config_overlay():

    cfg = rgg.Config({'maxConcurrentJobs': 5,
                      'localListPath'    : None,
                      'unknownKey'       : 'ignored'})

    assert cfg.maxConcurrentJobs     == 5
    assert cfg.localListPath         == ''
    assert cfg.maxRequestsPerSecUser == 2
    assert 'unknownKey' not in cfg.as_dict()


# ------------------------------------------------------------------------------
#
def test_config_invalid():

    for cfg in [{'maxConcurrentJobs'    : -1},
                {'maxConcurrentJobs'    : 1.5},
                {'maxRequestsPerSecUser': True},
                {'requestLifespan'      : -10},
                {'maxJobQueuedTime'     : '10'},
                {'jobPollingInterval'   : 0},
                {'globalListPath'       : 42},
                {'sessionName'          : ''}]:
        with pytest.raises(rgg.ConfigError):
            rgg.Config(cfg)


# ------------------------------------------------------------------------------
#
def test_config_load(tmp_path):

    path = tmp_path / 'gridgate.json'
    path.write_text(json.dumps({'maxJobRunningTime': 60000}))

    cfg = rgg.Config.load(str(path))
    assert cfg.maxJobRunningTime == 60000

    with pytest.raises(rgg.ConfigError):
        rgg.Config.load(str(tmp_path / 'missing.json'))

    path.write_text('[1, 2, 3]')
    with pytest.raises(rgg.ConfigError):
        rgg.Config.load(str(path))


# ------------------------------------------------------------------------------
#
def test_config_store_reload(tmp_path):

    path = tmp_path / 'gridgate.json'
    path.write_text(json.dumps({'maxConcurrentJobs'         : 3,
                                'minimumInputUpdateInterval': 1000}))

    log   = mock.Mock()
    store = rgg.ConfigStore(path=str(path), log=log)

    assert store.due(0)
    assert store.current.maxConcurrentJobs == 1

    assert asyncio.run(store.maybe_reload(0))
    assert store.current.maxConcurrentJobs == 3
    assert store.last_read == 0

    # not due within the update interval
    path.write_text(json.dumps({'maxConcurrentJobs': 7}))
    assert not store.due(999)
    assert not asyncio.run(store.maybe_reload(999))
    assert store.current.maxConcurrentJobs == 3

    assert asyncio.run(store.maybe_reload(1000))
    assert store.current.maxConcurrentJobs == 7


# ------------------------------------------------------------------------------
#
def test_config_store_keeps_previous(tmp_path):

    path = tmp_path / 'gridgate.json'
    path.write_text(json.dumps({'maxConcurrentJobs': 3}))

    log   = mock.Mock()
    store = rgg.ConfigStore(path=str(path), log=log)

    assert asyncio.run(store.reload(0))

    # an invalid value rejects the whole file
    path.write_text(json.dumps({'maxConcurrentJobs': 9,
                                'requestLifespan'  : -1}))
    assert not asyncio.run(store.reload(20000))
    assert store.current.maxConcurrentJobs == 3
    assert store.last_read == 20000
    assert log.warning.called

    path.write_text('{not json')
    assert not asyncio.run(store.reload(40000))
    assert store.current.maxConcurrentJobs == 3


# ------------------------------------------------------------------------------
#
def test_config_store_without_path():

    cfg   = rgg.Config({'maxConcurrentJobs': 2})
    store = rgg.ConfigStore(cfg=cfg, log=mock.Mock())

    assert not asyncio.run(store.reload(0))
    assert store.current is cfg
    assert store.path    is None


# ------------------------------------------------------------------------------


if __name__ == '__main__':

    test_config_defaults()
    test_config_overlay()
    test_config_invalid()
    test_config_store_without_path()


# ------------------------------------------------------------------------------

