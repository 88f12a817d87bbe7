#
# tests/test_app_service_plan_step.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Unit tests for azwizard.app_service_plan_step
'''
from unittest import mock

import azure.core.exceptions
import pytest

from azwizard.app_service_plan_step import (PLAN_KIND_KUBERNETES,
                                            AppServicePlanCreateStep,
                                            app_service_plan_generate,
                                            kube_environment_profile_get,
                                            plan_kind_get,
                                            sku_description_from_name,
                                            try_get_app_service_plan,
                                           )
from azwizard.btypes import WebsiteOS
from azwizard.context import CustomLocation
from azwizard.exceptions import WizardContextMissingValue

KUBE_ENVIRONMENT_ID = '/subscriptions/11111111-2222-3333-4444-555555555555/resourceGroups/arc-rg/providers/Microsoft.Web/kubeEnvironments/kube1'
CUSTOM_LOCATION_ID = '/subscriptions/11111111-2222-3333-4444-555555555555/resourceGroups/arc-rg/providers/Microsoft.ExtendedLocation/customLocations/cl1'

@pytest.fixture(name='plan_context')
def plan_context_fixture(wizard_context):
    '''
    wizard_context ready for the plan step
    '''
    rg = mock.Mock(location='eastus2')
    rg.name = 'rg1'
    wizard_context.resource_group = rg
    wizard_context.new_plan_name = 'plan1'
    wizard_context.new_plan_sku = sku_description_from_name('B1')
    wizard_context.new_site_os = WebsiteOS.LINUX
    return wizard_context

@pytest.fixture(name='plan_ops')
def plan_ops_fixture(clients):
    '''
    clients.web_client.app_service_plans
    '''
    return clients.web_client.app_service_plans

@pytest.mark.parametrize('name,family,tier,capacity', [('B1', 'B', 'Basic', 1),
                                                       ('S2', 'S', 'Standard', 1),
                                                       ('P1v2', 'Pv2', 'PremiumV2', 1),
                                                       ('P1v3', 'Pv3', 'PremiumV3', 1),
                                                       ('P1mv3', 'Pmv3', 'PremiumMV3', 1),
                                                       ('EP1', 'EP', 'ElasticPremium', 1),
                                                       ('Y1', 'Y', 'Dynamic', None),
                                                       ('F1', 'F', 'Free', 1),
                                                       ('WS1', 'WS', 'WorkflowStandard', 1),
                                                      ])
def test_sku_description_from_name(name, family, tier, capacity):
    '''
    Short SKU names expand to family/tier
    '''
    sku = sku_description_from_name(name)
    assert sku.name == name
    assert sku.size == name
    assert sku.family == family
    assert sku.tier == tier
    assert sku.capacity == capacity

@pytest.mark.parametrize('name', ['', 'B', '1', 'Q1', 'P1x2'])
def test_sku_description_from_name_invalid(name):
    '''
    Unparseable or unknown SKUs raise exc_value
    '''
    with pytest.raises(ValueError):
        sku_description_from_name(name)

def test_plan_kind(plan_context):
    '''
    kind follows custom location first, then OS
    '''
    assert plan_kind_get(plan_context) == 'linux'
    plan_context.new_site_os = WebsiteOS.WINDOWS
    assert plan_kind_get(plan_context) == 'app'
    plan_context.custom_location = CustomLocation(CUSTOM_LOCATION_ID, kube_environment_id=KUBE_ENVIRONMENT_ID)
    assert plan_kind_get(plan_context) == PLAN_KIND_KUBERNETES

def test_kube_environment_profile(plan_context):
    '''
    The profile is only present with a custom location, and requires a kube environment
    '''
    assert kube_environment_profile_get(plan_context) is None
    plan_context.custom_location = CustomLocation(CUSTOM_LOCATION_ID, kube_environment_id=KUBE_ENVIRONMENT_ID)
    assert kube_environment_profile_get(plan_context).id == KUBE_ENVIRONMENT_ID
    plan_context.custom_location = CustomLocation(CUSTOM_LOCATION_ID)
    with pytest.raises(ValueError):
        kube_environment_profile_get(plan_context)

def test_plan_generate_linux_basic(plan_context):
    '''
    A Linux plan is reserved and has no elastic worker count
    '''
    plan = app_service_plan_generate(plan_context)
    assert plan.kind == 'linux'
    assert plan.location == 'eastus2'
    assert plan.reserved is True
    assert plan.sku.tier == 'Basic'
    assert plan.maximum_elastic_worker_count is None
    assert plan.kube_environment_profile is None
    assert plan.per_site_scaling is False

def test_plan_generate_elastic_premium(plan_context):
    '''
    Elastic premium plans get maximum_elastic_worker_count 20
    '''
    plan_context.new_plan_sku = sku_description_from_name('EP2')
    plan_context.new_site_os = WebsiteOS.WINDOWS
    plan = app_service_plan_generate(plan_context)
    assert plan.maximum_elastic_worker_count == 20
    assert plan.reserved is False
    assert plan.kind == 'app'

def test_plan_generate_custom_location(plan_context):
    '''
    A custom location plan is a kubernetes plan with per-site scaling
    '''
    plan_context.custom_location = CustomLocation(CUSTOM_LOCATION_ID, kube_environment_id=KUBE_ENVIRONMENT_ID)
    plan = app_service_plan_generate(plan_context)
    assert plan.kind == PLAN_KIND_KUBERNETES
    assert plan.kube_environment_profile.id == KUBE_ENVIRONMENT_ID
    assert plan.per_site_scaling is True

def test_try_get_missing(plan_ops):
    '''
    A missing plan yields None
    '''
    plan_ops.get.side_effect = azure.core.exceptions.ResourceNotFoundError(message='not found')
    assert try_get_app_service_plan(mock.Mock(app_service_plans=plan_ops), 'rg1', 'plan1') is None
    plan_ops.get.assert_called_once_with('rg1', 'plan1')

def test_execute_existing_plan(plan_context, plan_ops, progress):
    '''
    An existing plan is used as-is
    '''
    existing = mock.Mock(name='existing-plan')
    plan_ops.get.return_value = existing
    AppServicePlanCreateStep().execute(plan_context, progress)
    assert plan_context.plan is existing
    plan_ops.get.assert_called_once_with('rg1', 'plan1')
    plan_ops.begin_create_or_update.assert_not_called()
    assert not progress.reports

def test_execute_create_plan(plan_context, plan_ops, progress):
    '''
    A missing plan is created and the created plan is recorded
    '''
    created = mock.Mock(name='created-plan')
    plan_ops.get.side_effect = azure.core.exceptions.ResourceNotFoundError(message='not found')
    plan_ops.begin_create_or_update.return_value.result.return_value = created
    AppServicePlanCreateStep().execute(plan_context, progress)
    assert plan_context.plan is created
    args = plan_ops.begin_create_or_update.call_args[0]
    assert args[0] == 'rg1'
    assert args[1] == 'plan1'
    assert args[2].kind == 'linux'
    assert args[2].sku.name == 'B1'
    assert progress.reports == [{'message' : 'Creating App Service plan "plan1"...', 'increment' : None}]

def test_execute_log_messages(plan_context, plan_ops, progress, caplog):
    '''
    Finding and creating are both logged
    '''
    plan_ops.get.side_effect = azure.core.exceptions.ResourceNotFoundError(message='not found')
    with caplog.at_level('INFO', logger='azwizard'):
        AppServicePlanCreateStep().execute(plan_context, progress)
    messages = [r.getMessage() for r in caplog.records if r.levelname == 'INFO']
    assert messages == ['Ensuring App Service plan "plan1" exists...',
                        'Creating App Service plan "plan1"...',
                        'Successfully created App Service plan "plan1".',
                       ]
    assert [r['message'] for r in progress.reports] == ['Creating App Service plan "plan1"...']

def test_execute_create_error_propagates(plan_context, plan_ops, progress, http_error):
    '''
    A failed create leaves plan unset
    '''
    plan_ops.get.return_value = None
    plan_ops.begin_create_or_update.side_effect = http_error(400, error_code='InvalidParameter')
    with pytest.raises(azure.core.exceptions.HttpResponseError):
        AppServicePlanCreateStep().execute(plan_context, progress)
    assert plan_context.plan is None

def test_execute_requires_resource_group(plan_context, progress):
    '''
    The step cannot run without a resource group
    '''
    plan_context.resource_group = None
    with pytest.raises(WizardContextMissingValue) as exc_info:
        AppServicePlanCreateStep().execute(plan_context, progress)
    assert exc_info.value.name == 'resource_group'

def test_should_execute(plan_context):
    '''
    The step is skipped once a plan is set
    '''
    step = AppServicePlanCreateStep()
    assert step.should_execute(plan_context)
    plan_context.plan = mock.Mock()
    assert not step.should_execute(plan_context)
