#!/usr/bin/env python3
#
# azwizard/provision.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Ensure a resource group and an App Service plan exist, prompting on the
console where the wizard needs a decision.
'''
import enum

import azwizard
from azwizard.app_service_plan_step import (AppServicePlanCreateStep,
                                            sku_description_from_name,
                                           )
from azwizard.azresourceid import RE_PLAN_NAME_ABS
from azwizard.base_defaults import (LOCATION_DEFAULT_FALLBACK,
                                    PLAN_SKU_DEFAULT_FALLBACK,
                                   )
from azwizard.btypes import (EnumMixin,
                             WebsiteOS,
                            )
import azwizard.common
from azwizard.context import (CustomLocation,
                              Location,
                              WizardContext,
                             )
from azwizard.exceptions import (ApplicationExit,
                                 ApplicationExitWithNote,
                                 UserCancelledError,
                                )
from azwizard.msapicall import msapicall
from azwizard.resource_group_steps import (ResourceGroupCreateStep,
                                           ResourceGroupListStep,
                                          )
from azwizard.ui import ConsoleUI
from azwizard.util import expand_item_pformat
from azwizard.wizard import Wizard

class EnsureOnly(EnumMixin, enum.Enum):
    '''
    Restrict a provisioning run to one resource
    '''
    RG = 'rg'
    PLAN = 'plan'

class ProvisionApplication(azwizard.common.ApplicationWithResourceGroup):
    '''
    Run the resource group and App Service plan wizard steps
    '''
    def __init__(self,
                 location='',
                 plan_name='',
                 plan_sku='',
                 os=WebsiteOS.WINDOWS.value,
                 custom_location_id='',
                 kube_environment_id='',
                 suppress_403_handling=False,
                 ensure_only='',
                 ui=None,
                 **kwargs):
        super().__init__(**kwargs)
        self.location = location or azwizard.scfg.get('location_default', '') or LOCATION_DEFAULT_FALLBACK
        self.plan_name = plan_name or ''
        if self.plan_name and (not RE_PLAN_NAME_ABS.search(self.plan_name)):
            raise self.exc_value("invalid plan_name %r" % self.plan_name)
        self.plan_sku = plan_sku or azwizard.scfg.get('plan_sku_default', '') or PLAN_SKU_DEFAULT_FALLBACK
        self.os = WebsiteOS.coerce(os, exc_value=self.exc_value, prefix='os')
        self.custom_location_id = custom_location_id or ''
        self.kube_environment_id = kube_environment_id or ''
        if self.kube_environment_id and (not self.custom_location_id):
            raise self.exc_value("kube_environment_id requires custom_location_id")
        self.suppress_403_handling = suppress_403_handling
        self.ensure_only = EnsureOnly.coerce(ensure_only, exc_value=self.exc_value, prefix='ensure_only') if ensure_only else None
        if (self.ensure_only == EnsureOnly.PLAN) and (not self.resource_group):
            raise self.exc_value("ensure_only=plan requires resource_group")
        if (self.ensure_only == EnsureOnly.PLAN) and (not self.plan_name):
            raise self.exc_value("ensure_only=plan requires plan_name")
        self.ui = ui or ConsoleUI()

    @classmethod
    def main_add_parser_args(cls, ap_parser):
        '''
        See azwizard.common.Application.main_add_parser_args()
        '''
        super().main_add_parser_args(ap_parser)
        group = ap_parser.get_argument_group('provision')
        group.add_argument('--location', type=str, default='',
                           help="Azure location (default location_default from config, otherwise %s)" % LOCATION_DEFAULT_FALLBACK)
        group.add_argument('--plan_name', type=str, default='',
                           help='name of the App Service plan to ensure')
        group.add_argument('--plan_sku', type=str, default='',
                           help="plan sku such as B1 or P1v2 (default plan_sku_default from config, otherwise %s)" % PLAN_SKU_DEFAULT_FALLBACK)
        group.add_argument('--os', type=str, default=WebsiteOS.WINDOWS.value, choices=WebsiteOS.values(),
                           help='operating system of the plan (default %(default)s)')
        group.add_argument('--custom_location_id', type=str, default='',
                           help='Arc custom location resource id')
        group.add_argument('--kube_environment_id', type=str, default='',
                           help='kube environment resource id for custom_location_id')
        group.add_argument('--suppress_403_handling', action='store_true',
                           help='raise permission errors rather than offering existing resource groups')
        group.add_argument('--ensure_only', type=str, default='', choices=[''] + EnsureOnly.values(),
                           help='ensure only the resource group or only the plan')

    def wizard_context_generate(self) -> WizardContext:
        '''
        Return a WizardContext populated from this application
        '''
        custom_location = None
        if self.custom_location_id:
            custom_location = CustomLocation(self.custom_location_id, kube_environment_id=self.kube_environment_id)
        wizard_context = WizardContext(subscription_id=self.subscription_id,
                                       tenant_id=self.tenant_id,
                                       environment=self.environment,
                                       location=Location(self.location),
                                       suppress_403_handling=self.suppress_403_handling,
                                       new_site_os=WebsiteOS.LINUX if custom_location else self.os,
                                       custom_location=custom_location,
                                       ui=self.ui,
                                       clients=self.clients,
                                       logger=self.logger)
        if self.resource_group:
            wizard_context.new_resource_group_name = self.resource_group
        if self.plan_name:
            wizard_context.new_plan_name = self.plan_name
            wizard_context.new_plan_sku = sku_description_from_name(self.plan_sku, exc_value=self.exc_value)
        return wizard_context

    def wizard_generate(self, wizard_context) -> Wizard:
        '''
        Return the Wizard to run for wizard_context
        '''
        prompt_steps = list()
        execute_steps = list()
        if self.ensure_only == EnsureOnly.PLAN:
            wizard_context.resource_group = msapicall(self.logger, self.clients.resource_client.resource_groups.get, self.resource_group)
        else:
            prompt_steps.append(ResourceGroupListStep())
            execute_steps.append(ResourceGroupCreateStep())
        if self.plan_name and (self.ensure_only != EnsureOnly.RG):
            execute_steps.append(AppServicePlanCreateStep())
        return Wizard(wizard_context, prompt_steps=prompt_steps, execute_steps=execute_steps)

    def main_execute(self):
        '''
        See azwizard.common.Application.main_execute()
        '''
        wizard_context = self.wizard_context_generate()
        wizard = self.wizard_generate(wizard_context)
        try:
            ran = wizard.run()
        except UserCancelledError as exc:
            self.logger.warning("%s", exc)
            raise ApplicationExitWithNote(1, str(exc)) from exc
        self.logger.debug("steps executed: %s", ran)
        if wizard_context.resource_group:
            self.logger.info("resource group:\n%s", expand_item_pformat(wizard_context.resource_group))
        if wizard_context.plan:
            self.logger.info("App Service plan:\n%s", expand_item_pformat(wizard_context.plan))
        raise ApplicationExit(0)

def main():
    '''
    Console entrypoint
    '''
    ProvisionApplication.main('__main__')

ProvisionApplication.main(__name__)
