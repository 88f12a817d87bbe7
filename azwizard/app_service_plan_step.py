#
# azwizard/app_service_plan_step.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Wizard step that ensures an App Service plan exists
'''
import re

from azure.mgmt.web.models import (AppServicePlan,
                                   KubeEnvironmentProfile,
                                   SkuDescription,
                                  )

from azwizard.base_defaults import (ELASTIC_PREMIUM_FAMILY,
                                    ELASTIC_PREMIUM_MAX_WORKERS,
                                    EXC_VALUE_DEFAULT,
                                   )
from azwizard.btypes import (AppKind,
                             SKU_FAMILY_TIERS,
                             WebsiteOS,
                            )
from azwizard.msapicall import (cw_get,
                                msapicall,
                               )
from azwizard.util import expand_item_pformat
from azwizard.wizard import WizardExecuteStep

PLAN_KIND_KUBERNETES = 'linux,kubernetes'

# 1 family letters 2 size number 3 optional 'm' (memory optimized) 4 optional version (v2, v3)
RE_SKU_NAME_ABS = re.compile(r'^([a-zA-Z]+?)(\d+)([mM]?)([vV]\d+)?$')

def sku_description_from_name(name, exc_value=EXC_VALUE_DEFAULT) -> SkuDescription:
    '''
    Given a short SKU name such as B1, P1v2, P1mv3, or EP1,
    return the corresponding SkuDescription.
    '''
    m = RE_SKU_NAME_ABS.search(name or '')
    if not m:
        raise exc_value("cannot parse App Service plan sku %r" % name)
    letters = m.group(1).upper()
    try:
        tier = SKU_FAMILY_TIERS[letters]
    except KeyError as exc:
        raise exc_value("unknown App Service plan sku family %r in %r" % (letters, name)) from exc
    family = letters
    if m.group(3) or m.group(4):
        suffix = m.group(3).lower() + (m.group(4) or '').lower()
        family += suffix
        tier += suffix.upper()
    size = family[:len(letters)] + m.group(2) + family[len(letters):]
    return SkuDescription(name=size,
                          tier=tier,
                          size=size,
                          family=family,
                          capacity=None if tier == 'Dynamic' else 1)

def plan_kind_get(wizard_context) -> str:
    '''
    Return the kind to use for a new plan
    '''
    if wizard_context.custom_location:
        return PLAN_KIND_KUBERNETES
    if wizard_context.new_site_os == WebsiteOS.LINUX:
        return WebsiteOS.LINUX.value
    return AppKind.APP.value

def kube_environment_profile_get(wizard_context):
    '''
    Return the KubeEnvironmentProfile for a new plan, or None
    without a custom location.
    '''
    custom_location = wizard_context.custom_location
    if not custom_location:
        return None
    if not custom_location.kube_environment_id:
        raise ValueError("custom location %r has no kube environment" % custom_location.id)
    return KubeEnvironmentProfile(id=custom_location.kube_environment_id)

def try_get_app_service_plan(client, resource_group, name, logger=None):
    '''
    Return the named AppServicePlan, or None if it does not exist
    '''
    return cw_get(logger, client.app_service_plans.get, resource_group, name)

def app_service_plan_generate(wizard_context) -> AppServicePlan:
    '''
    Build the AppServicePlan to create from wizard_context
    '''
    sku = wizard_context.require('new_plan_sku')
    is_elastic_premium = (sku.family or '').lower() == ELASTIC_PREMIUM_FAMILY
    return AppServicePlan(kind=plan_kind_get(wizard_context),
                          sku=sku,
                          location=wizard_context.require_attr('location', 'name'),
                          # The plan is a Linux plan iff reserved is true
                          reserved=wizard_context.new_site_os == WebsiteOS.LINUX,
                          maximum_elastic_worker_count=ELASTIC_PREMIUM_MAX_WORKERS if is_elastic_premium else None,
                          kube_environment_profile=kube_environment_profile_get(wizard_context),
                          per_site_scaling=bool(wizard_context.custom_location))

class AppServicePlanCreateStep(WizardExecuteStep):
    '''
    Ensure wizard_context.plan exists, creating it from new_plan_name if necessary.
    '''
    priority = 120

    def execute(self, wizard_context, progress):
        '''
        See WizardExecuteStep.execute()
        '''
        logger = wizard_context.logger
        new_plan_name = wizard_context.require('new_plan_name')
        rg_name = wizard_context.require_attr('resource_group', 'name')

        finding = 'Ensuring App Service plan "%s" exists...' % new_plan_name
        creating = 'Creating App Service plan "%s"...' % new_plan_name
        found = 'Successfully found App Service plan "%s".' % new_plan_name
        created = 'Successfully created App Service plan "%s".' % new_plan_name
        logger.info("%s", finding)

        client = wizard_context.require('clients').web_client
        existing_plan = try_get_app_service_plan(client, rg_name, new_plan_name, logger=logger)

        if existing_plan:
            wizard_context.plan = existing_plan
            logger.info("%s", found)
        else:
            logger.info("%s", creating)
            progress.report(message=creating)
            plan = app_service_plan_generate(wizard_context)
            logger.debug("%s plan:\n%s", type(self).__name__, expand_item_pformat(plan))
            poller = msapicall(logger, client.app_service_plans.begin_create_or_update, rg_name, new_plan_name, plan)
            wizard_context.plan = poller.result()
            logger.info("%s", created)

    def should_execute(self, wizard_context):
        '''
        See WizardExecuteStep.should_execute()
        '''
        return not wizard_context.plan
