#
# azwizard/context.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
WizardContext: the state threaded through wizard steps.

The set of attributes is fixed. Every attribute is optional;
steps use require() for the ones they cannot proceed without.
'''
import logging

from azwizard.base_defaults import ARM_ENDPOINT_DEFAULT
from azwizard.exceptions import WizardContextMissingValue
from azwizard.util import getframename

class Location():
    '''
    An Azure location such as eastus2
    '''
    def __init__(self, name, display_name=''):
        self.name = name
        self.display_name = display_name or name

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.name)

class CustomLocation():
    '''
    An Arc custom location bound to a kube environment
    '''
    def __init__(self, id, name='', kube_environment_id=''): # pylint: disable=redefined-builtin
        self.id = id
        self.name = name or id.split('/')[-1]
        self.kube_environment_id = kube_environment_id

    def __repr__(self):
        return "%s(%r, kube_environment_id=%r)" % (type(self).__name__, self.id, self.kube_environment_id)

class Telemetry():
    '''
    Telemetry properties and measurements recorded by steps.
    '''
    def __init__(self):
        self.properties = dict()
        self.measurements = dict()

    def __repr__(self):
        return "%s(properties=%r, measurements=%r)" % (type(self).__name__, self.properties, self.measurements)

class WizardContext():
    '''
    State shared by the steps of one wizard run.
    Assigning an attribute that is not in FIELDS raises AttributeError.
    '''
    FIELDS = ('subscription_id',
              'subscription_display_name',
              'tenant_id',
              'environment',
              'location',
              'new_resource_group_name',
              'resource_group',
              'suppress_403_handling',
              'new_plan_name',
              'new_plan_sku',
              'new_site_os',
              'custom_location',
              'plan',
              'telemetry',
              'ui',
              'clients',
              'logger',
             )

    def __init__(self, **kwargs):
        for name in self.FIELDS:
            object.__setattr__(self, name, None)
        self.environment = ARM_ENDPOINT_DEFAULT
        self.suppress_403_handling = False
        self.telemetry = Telemetry()
        self.logger = logging.getLogger('azwizard')
        for k, v in kwargs.items():
            setattr(self, k, v)

    def __setattr__(self, name, value):
        if name not in self.FIELDS:
            raise AttributeError("%r object has no field %r" % (type(self).__name__, name))
        object.__setattr__(self, name, value)

    def __repr__(self):
        return "%s(%s)" % (type(self).__name__, ', '.join("%s=%r" % (k, getattr(self, k)) for k in self.FIELDS if k not in ('logger', 'ui', 'clients')))

    def require(self, name, step=''):
        '''
        Return the value of name. Raise WizardContextMissingValue
        if it is not populated.
        '''
        if name not in self.FIELDS:
            raise AttributeError("%r object has no field %r" % (type(self).__name__, name))
        value = getattr(self, name)
        if (value is None) or (isinstance(value, str) and (not value)):
            raise WizardContextMissingValue(name, step=step or getframename(1))
        return value

    def require_attr(self, name, attr, step=''):
        '''
        Return getattr(self.name, attr). Raise WizardContextMissingValue if
        either is not populated.
        '''
        value = getattr(self.require(name, step=step or getframename(1)), attr, None)
        if (value is None) or (isinstance(value, str) and (not value)):
            raise WizardContextMissingValue(f"{name}.{attr}", step=step or getframename(1))
        return value

    @property
    def subscription_label(self):
        '''
        Human-facing name for the subscription
        '''
        return self.subscription_display_name or self.subscription_id or ''
