#
# tests/conftest.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Shared fixtures. Nothing here talks to Azure.
'''
import logging
from unittest import mock

import azure.core.exceptions
import pytest
import requests

import azwizard
from azwizard.clients import ClientFactory
from azwizard.common import Application
from azwizard.context import (Location,
                              WizardContext,
                             )
from azwizard.wizard import Progress

SUBSCRIPTION_ID = '11111111-2222-3333-4444-555555555555'
CONFIG_FILENAME_TEST = '/nonexistent/azwizard-unit-test.yaml'

@pytest.fixture(autouse=True)
def azwizard_reset(monkeypatch):
    '''
    Start each test with an empty config, no Azure client generation,
    and no retry sleeps.
    '''
    azwizard.reset_caches(config_filename=CONFIG_FILENAME_TEST, config_data=dict())
    monkeypatch.setattr(Application, 'LOG_LEVEL_PYTEST', 'debug')
    monkeypatch.setattr(ClientFactory, '_AZ_CLIENT_GEN_MOUSETRAP', True)
    monkeypatch.setattr('azwizard.msapicall.random.uniform', lambda a, b: 0.0)
    monkeypatch.setattr('azwizard.msapicall.time.sleep', lambda secs: None)
    yield
    azwizard.reset_caches(config_filename=CONFIG_FILENAME_TEST, config_data=dict())

def http_error(status_code, error_code=None, message='test error'):
    '''
    Return azure.core.exceptions.HttpResponseError with the given status
    '''
    exc = azure.core.exceptions.HttpResponseError(message=message)
    exc.status_code = status_code
    exc.error_code = error_code
    return exc

def requests_http_error(status_code, body=None):
    '''
    Return requests.HTTPError with a fake response attached
    '''
    resp = mock.Mock(spec=['status_code', 'json', 'headers', 'text'])
    resp.status_code = status_code
    resp.headers = dict()
    resp.text = ''
    if body is None:
        resp.json.side_effect = ValueError('no body')
    else:
        resp.json.return_value = body
    return requests.HTTPError('%d error' % status_code, response=resp)

@pytest.fixture(name='http_error')
def http_error_fixture():
    '''
    Fixture form of http_error()
    '''
    return http_error

@pytest.fixture(name='requests_http_error')
def requests_http_error_fixture():
    '''
    Fixture form of requests_http_error()
    '''
    return requests_http_error

@pytest.fixture(name='clients')
def clients_fixture():
    '''
    Stand-in for ClientFactory with mocked SDK clients
    '''
    clients = mock.Mock(name='clients')
    clients.subscription_id = SUBSCRIPTION_ID
    clients.environment = 'https://management.azure.com'
    clients.logger = logging.getLogger('azwizard')
    return clients

@pytest.fixture(name='ui')
def ui_fixture():
    '''
    Stand-in for WizardUI
    '''
    return mock.Mock(name='ui')

@pytest.fixture(name='progress')
def progress_fixture():
    '''
    Progress that records reports
    '''
    return Progress(logger=logging.getLogger('azwizard'))

@pytest.fixture(name='wizard_context')
def wizard_context_fixture(clients, ui):
    '''
    WizardContext populated with a subscription, a location, and the fakes
    '''
    return WizardContext(subscription_id=SUBSCRIPTION_ID,
                         subscription_display_name='Test Subscription',
                         location=Location('eastus2'),
                         clients=clients,
                         ui=ui)
