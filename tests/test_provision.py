#
# tests/test_provision.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Unit tests for azwizard.provision and the azwizard.common plumbing it uses
'''
from azure.mgmt.resource.resources.models import ResourceGroup
from azure.mgmt.web.models import AppServicePlan
import pytest

import azwizard
from azwizard.btypes import WebsiteOS
from azwizard.exceptions import (ApplicationExit,
                                 ApplicationExitWithNote,
                                 UserCancelledError,
                                )
from azwizard.provision import (EnsureOnly,
                                ProvisionApplication,
                               )

SUB = '11111111-2222-3333-4444-555555555555'

def rg_make(name):
    '''
    Return a ResourceGroup as returned by the service
    '''
    rg = ResourceGroup(location='eastus2')
    rg.name = name
    return rg

def plan_make(name):
    '''
    Return an AppServicePlan as returned by the service
    '''
    plan = AppServicePlan(location='eastus2')
    plan.name = name
    return plan

@pytest.fixture(name='app_kwargs')
def app_kwargs_fixture(clients, ui):
    '''
    Constructor kwargs that keep ProvisionApplication away from Azure
    '''
    return {'subscription_id' : SUB,
            'clients' : clients,
            'ui' : ui,
           }

def test_main_app_setup():
    '''
    Command-line arguments reach the constructor
    '''
    app, _, _, _ = ProvisionApplication.main_app_setup(['--subscription_id', SUB,
                                                        '--resource_group', 'rg1',
                                                        '--location', 'westus',
                                                        '--plan_name', 'plan1',
                                                        '--plan_sku', 'P1v2',
                                                        '--os', 'linux',
                                                        '--ensure_only', 'rg',
                                                        '--suppress_403_handling',
                                                       ])
    assert app.subscription_id == SUB
    assert app.resource_group == 'rg1'
    assert app.location == 'westus'
    assert app.plan_name == 'plan1'
    assert app.plan_sku == 'P1v2'
    assert app.os is WebsiteOS.LINUX
    assert app.ensure_only is EnsureOnly.RG
    assert app.suppress_403_handling is True

def test_config_defaults(app_kwargs):
    '''
    Subscription, location, and sku fall back to the config
    '''
    azwizard.scfg.test_values['subscription_default'] = SUB
    azwizard.scfg.test_values['location_default'] = 'centralus'
    azwizard.scfg.test_values['plan_sku_default'] = 'S1'
    app_kwargs['subscription_id'] = 'default'
    app = ProvisionApplication(**app_kwargs)
    assert app.subscription_id == SUB
    assert app.location == 'centralus'
    assert app.plan_sku == 'S1'

def test_no_subscription(app_kwargs):
    '''
    A subscription is required
    '''
    app_kwargs['subscription_id'] = 'default'
    with pytest.raises(ValueError):
        ProvisionApplication(**app_kwargs)

@pytest.mark.parametrize('kwargs', [{'kube_environment_id' : '/kube'},
                                    {'ensure_only' : 'plan', 'plan_name' : 'plan1'},
                                    {'ensure_only' : 'plan', 'resource_group' : 'rg1'},
                                    {'ensure_only' : 'nope'},
                                    {'os' : 'macos'},
                                    {'resource_group' : 'bad/name'},
                                    {'plan_name' : 'plan_1'},
                                   ])
def test_invalid_arguments(app_kwargs, kwargs):
    '''
    Inconsistent arguments are rejected at construction
    '''
    app_kwargs.update(kwargs)
    with pytest.raises(ValueError):
        ProvisionApplication(**app_kwargs)

def test_context_generate(app_kwargs):
    '''
    The wizard context reflects the arguments
    '''
    app = ProvisionApplication(resource_group='rg1', plan_name='plan1', plan_sku='EP1', custom_location_id='/x/customLocations/cl1', kube_environment_id='/kube', **app_kwargs)
    wizard_context = app.wizard_context_generate()
    assert wizard_context.new_resource_group_name == 'rg1'
    assert wizard_context.location.name == 'eastus2'
    assert wizard_context.new_plan_name == 'plan1'
    assert wizard_context.new_plan_sku.tier == 'ElasticPremium'
    assert wizard_context.new_site_os is WebsiteOS.LINUX
    assert wizard_context.custom_location.kube_environment_id == '/kube'

def test_run_creates_both(app_kwargs, clients):
    '''
    A full run creates the group and then the plan
    '''
    rg_ops = clients.resource_client.resource_groups
    rg_ops.check_existence.return_value = False
    rg_ops.create_or_update.return_value = rg_make('rg1')
    plan_ops = clients.web_client.app_service_plans
    plan_ops.get.return_value = None
    plan_ops.begin_create_or_update.return_value.result.return_value = plan_make('plan1')
    app = ProvisionApplication(resource_group='rg1', plan_name='plan1', **app_kwargs)
    with pytest.raises(ApplicationExit) as exc_info:
        app.main_execute()
    assert exc_info.value.code == 0
    rg_ops.create_or_update.assert_called_once()
    plan_ops.begin_create_or_update.assert_called_once()
    assert plan_ops.begin_create_or_update.call_args[0][:2] == ('rg1', 'plan1')

def test_run_prompts_for_group(app_kwargs, clients, ui):
    '''
    Without a resource group, the user picks one and nothing is created
    '''
    rg_ops = clients.resource_client.resource_groups
    rg_ops.list.return_value = [rg_make('rg-a')]
    ui.show_quick_pick.side_effect = lambda items, placeholder='': items[-1]
    app = ProvisionApplication(**app_kwargs)
    with pytest.raises(ApplicationExit) as exc_info:
        app.main_execute()
    assert exc_info.value.code == 0
    rg_ops.check_existence.assert_not_called()
    rg_ops.create_or_update.assert_not_called()

def test_run_ensure_only_rg(app_kwargs, clients):
    '''
    ensure_only=rg skips the plan
    '''
    rg_ops = clients.resource_client.resource_groups
    rg_ops.check_existence.return_value = True
    rg_ops.get.return_value = rg_make('rg1')
    app = ProvisionApplication(resource_group='rg1', plan_name='plan1', ensure_only='rg', **app_kwargs)
    with pytest.raises(ApplicationExit):
        app.main_execute()
    clients.web_client.app_service_plans.get.assert_not_called()

def test_run_ensure_only_plan(app_kwargs, clients):
    '''
    ensure_only=plan fetches the group rather than ensuring it
    '''
    rg_ops = clients.resource_client.resource_groups
    rg_ops.get.return_value = rg_make('rg1')
    plan_ops = clients.web_client.app_service_plans
    plan_ops.get.return_value = plan_make('plan1')
    app = ProvisionApplication(resource_group='rg1', plan_name='plan1', ensure_only='plan', **app_kwargs)
    with pytest.raises(ApplicationExit):
        app.main_execute()
    rg_ops.check_existence.assert_not_called()
    rg_ops.get.assert_called_once_with('rg1')
    plan_ops.get.assert_called_once_with('rg1', 'plan1')

def test_run_cancelled(app_kwargs, clients, ui):
    '''
    Cancelling a prompt exits 1
    '''
    clients.resource_client.resource_groups.list.return_value = [rg_make('rg-a')]
    ui.show_quick_pick.side_effect = UserCancelledError()
    app = ProvisionApplication(**app_kwargs)
    with pytest.raises(ApplicationExit) as exc_info:
        app.main_execute()
    assert exc_info.value.code == 1
    assert isinstance(exc_info.value, ApplicationExitWithNote)
