#
# azwizard/resource_group_steps.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Wizard steps for resource groups
'''
import re

from azure.mgmt.resource.resources.models import ResourceGroup

from azwizard.azresourceid import RE_RESOURCE_GROUP_ABS
from azwizard.base_defaults import SANDBOX_QUOTA_ID_PATTERN
from azwizard.context import Location
from azwizard.exceptions import ApplicationException
from azwizard.msapicall import (Caught,
                                cw_list,
                                msapicall,
                               )
from azwizard.ui import (MessageItem,
                         QuickPickItem,
                        )
from azwizard.wizard import (WizardExecuteStep,
                             WizardPromptStep,
                            )

RE_SANDBOX_QUOTA_ID = re.compile(SANDBOX_QUOTA_ID_PATTERN, flags=re.IGNORECASE)

class ResourceGroupListStep(WizardPromptStep):
    '''
    Prompt the user to pick an existing resource group, or
    (unless suppress_create) to name a new one.
    '''
    def __init__(self, suppress_create=False):
        self.suppress_create = suppress_create

    CREATE_NEW_LABEL = '+ Create new resource group'

    def should_prompt(self, wizard_context):
        '''
        See WizardPromptStep.should_prompt()
        '''
        return not (wizard_context.resource_group or wizard_context.new_resource_group_name)

    @staticmethod
    def name_validate(name):
        '''
        Return an error string for an invalid resource group name, else None
        '''
        if not RE_RESOURCE_GROUP_ABS.search(name):
            return "invalid resource group name %r" % name
        return None

    def prompt(self, wizard_context):
        '''
        See WizardPromptStep.prompt()
        '''
        logger = wizard_context.logger
        client = wizard_context.require('clients').resource_client
        ui = wizard_context.require('ui')
        groups = sorted(cw_list(logger, client.resource_groups.list), key=lambda x: x.name.lower())
        items = list()
        if not self.suppress_create:
            items.append(QuickPickItem(self.CREATE_NEW_LABEL))
        items.extend([QuickPickItem(rg.name, description=rg.location, data=rg) for rg in groups])
        if not items:
            raise ApplicationException("no resource groups available in subscription %r" % wizard_context.subscription_label)
        picked = ui.show_quick_pick(items, placeholder='Select a resource group')
        if picked.data is None:
            wizard_context.new_resource_group_name = ui.show_input_box('Enter the name of the new resource group', validate=self.name_validate)
            return
        wizard_context.resource_group = picked.data
        if not wizard_context.location:
            wizard_context.location = Location(picked.data.location)
        logger.info('Selected existing resource group "%s".', picked.data.name)

class ResourceGroupCreateStep(WizardExecuteStep):
    '''
    Ensure wizard_context.resource_group exists, creating it from
    new_resource_group_name and location if necessary.
    '''
    priority = 100

    def execute(self, wizard_context, progress):
        '''
        See WizardExecuteStep.execute()
        '''
        logger = wizard_context.logger
        new_name = wizard_context.require('new_resource_group_name')
        new_location = wizard_context.require_attr('location', 'name')
        client = wizard_context.require('clients').resource_client
        try:
            rg_exists = msapicall(logger, client.resource_groups.check_existence, new_name)
            if rg_exists:
                logger.info('Using existing resource group "%s".', new_name)
                wizard_context.resource_group = msapicall(logger, client.resource_groups.get, new_name)
            else:
                creating_message = 'Creating resource group "%s" in location "%s"...' % (new_name, new_location)
                logger.info("%s", creating_message)
                progress.report(message=creating_message)
                wizard_context.resource_group = msapicall(logger, client.resource_groups.create_or_update, new_name, ResourceGroup(location=new_location))
                logger.info('Successfully created resource group "%s".', new_name)
        except Exception as exc:
            if wizard_context.suppress_403_handling or (not Caught(exc).is_forbidden()):
                raise
            logger.debug("resource group %r forbidden: %r", new_name, exc)
            self._handle_forbidden(wizard_context, client)

    @staticmethod
    def _is_sandbox(subscription):
        '''
        Return whether subscription is a sandbox (sponsored) subscription
        '''
        quota_id = getattr(getattr(subscription, 'subscription_policies', None), 'quota_id', None)
        return bool(quota_id and RE_SANDBOX_QUOTA_ID.search(quota_id))

    def _handle_forbidden(self, wizard_context, resource_client):
        '''
        Creating the resource group returned 403. A sandbox subscription
        with exactly one resource group gets that group. Otherwise,
        ask the user to pick an existing group.
        '''
        logger = wizard_context.logger
        subscription_id = wizard_context.require('subscription_id')
        sub_client = wizard_context.clients.subscription_client
        sub = msapicall(logger, sub_client.subscriptions.get, subscription_id)
        if self._is_sandbox(sub):
            rgs = cw_list(logger, resource_client.resource_groups.list)
            if len(rgs) == 1:
                wizard_context.resource_group = rgs[0]
                logger.info('Using resource group "%s" from sandbox subscription "%s".', rgs[0].name, wizard_context.subscription_label)
                return

        message = 'You do not have permission to create a resource group in subscription "%s".' % wizard_context.subscription_label
        select_existing = MessageItem('Select Existing')
        properties = wizard_context.telemetry.properties
        properties['cancelStep'] = 'RgNoPermissions'
        wizard_context.require('ui').show_warning_message(message, select_existing, modal=True)

        properties.pop('cancelStep', None)
        properties['forbiddenResponse'] = 'SelectExistingRg'
        step = ResourceGroupListStep(suppress_create=True)
        step.prompt(wizard_context)

    def should_execute(self, wizard_context):
        '''
        See WizardExecuteStep.should_execute()
        '''
        return not wizard_context.resource_group
