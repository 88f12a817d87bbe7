#
# tests/test_deploy_delay.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Unit tests for azwizard.deploy_delay
'''
import logging
import time
from unittest import mock

import pytest

from azwizard.deploy_delay import delay_first_web_app_deploy

# Long enough that an early return is unambiguous
DELAY_LONG = 30.0
# Short enough to keep the full-wait cases quick
DELAY_SHORT = 0.2

def site_client_make(is_function_app=False, is_linux=True, deployments=0):
    '''
    Return a fake SiteClient
    '''
    site_client = mock.Mock(is_function_app=is_function_app, is_linux=is_linux)
    site_client.name = 'site1'
    site_client.kudu_client.return_value.deployment_results.return_value = [{'id' : 'd%d' % idx} for idx in range(deployments)]
    return site_client

def plan_make(tier):
    '''
    Return a fake AppServicePlan with the given sku tier
    '''
    plan = mock.Mock(spec=['sku'])
    plan.sku = mock.Mock(tier=tier)
    return plan

def timed_delay(site_client, plan, delay_secs):
    '''
    Return (result, seconds taken)
    '''
    t0 = time.monotonic()
    ret = delay_first_web_app_deploy(site_client, plan, logger=logging.getLogger('azwizard'), delay_secs=delay_secs)
    return ret, time.monotonic() - t0

def test_function_app_returns_early():
    '''
    Function apps never wait, and Kudu is not consulted
    '''
    site_client = site_client_make(is_function_app=True)
    ret, secs = timed_delay(site_client, plan_make('Basic'), DELAY_LONG)
    assert ret is True
    assert secs < DELAY_LONG / 2
    site_client.kudu_client.assert_not_called()

@pytest.mark.parametrize('tier', [None, '', 'Standard', 'PremiumV2', 'Free'])
def test_non_basic_plan_returns_early(tier):
    '''
    Only Basic plans wait
    '''
    ret, secs = timed_delay(site_client_make(), plan_make(tier), DELAY_LONG)
    assert ret is True
    assert secs < DELAY_LONG / 2

@pytest.mark.parametrize('plan', [None, mock.Mock(spec=['sku'], sku=None)])
def test_missing_plan_returns_early(plan):
    '''
    No plan or no sku means no wait
    '''
    ret, secs = timed_delay(site_client_make(), plan, DELAY_LONG)
    assert ret is True
    assert secs < DELAY_LONG / 2

def test_windows_returns_early():
    '''
    Only Linux sites wait
    '''
    ret, secs = timed_delay(site_client_make(is_linux=False), plan_make('Basic'), DELAY_LONG)
    assert ret is True
    assert secs < DELAY_LONG / 2

def test_prior_deployments_return_early():
    '''
    A site with more than one deployment does not wait
    '''
    site_client = site_client_make(deployments=2)
    ret, secs = timed_delay(site_client, plan_make('Basic'), DELAY_LONG)
    assert ret is True
    assert secs < DELAY_LONG / 2
    site_client.kudu_client.return_value.deployment_results.assert_called_once_with()

@pytest.mark.parametrize('deployments', [0, 1])
def test_first_deploy_waits(deployments):
    '''
    A Linux site on a Basic plan with at most one deployment waits the full delay
    '''
    plan = plan_make('basic')
    ret, secs = timed_delay(site_client_make(deployments=deployments), plan, DELAY_SHORT)
    assert ret is False
    assert secs >= DELAY_SHORT * 0.9

def test_pending_plan_is_resolved():
    '''
    A plan with result() (a poller or future) is resolved before checking the tier
    '''
    poller = mock.Mock(spec=['result'])
    poller.result.return_value = plan_make('Standard')
    ret, secs = timed_delay(site_client_make(), poller, DELAY_LONG)
    assert ret is True
    assert secs < DELAY_LONG / 2
    poller.result.assert_called_once_with()

def test_check_error_returns_early(caplog):
    '''
    An error while checking ends the wait and is logged, not raised
    '''
    site_client = site_client_make()
    site_client.kudu_client.return_value.deployment_results.side_effect = RuntimeError('kudu unavailable')
    plan = plan_make('Basic')
    with caplog.at_level(logging.WARNING, logger='azwizard'):
        ret, secs = timed_delay(site_client, plan, DELAY_LONG)
    assert ret is True
    assert secs < DELAY_LONG / 2
    assert any('kudu unavailable' in r.getMessage() for r in caplog.records if r.levelno == logging.WARNING)

def test_zero_delay():
    '''
    A zero delay never blocks
    '''
    plan = plan_make('Basic')
    ret, secs = timed_delay(site_client_make(), plan, 0)
    assert ret in (True, False)
    assert secs < 5.0
