#
# azwizard/azresourceid.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Parse and validate the Azure resource IDs handled here: App Service
sites (including deployment slots) and serverfarms.

naming rules: https://docs.microsoft.com/en-us/azure/azure-resource-manager/management/resource-name-rules
'''
import re
import uuid

from azwizard.base_defaults import EXC_VALUE_DEFAULT
from azwizard.util import re_abs

# regexp conventions:
# X_TXT: The regexp in text form, to be found anywhere within the string.
# X_ABS: compiled(re_abs(X_TXT))

# This is intentionally slightly more restrictive than the rules defined in:
#   https://docs.microsoft.com/en-us/azure/azure-resource-manager/management/resource-name-rules#microsoftresources
# The docs claim a max length of 90, but the SDK seems to enforce 79. Here, we enforce 78.
RE_RESOURCE_GROUP_TXT = r'([a-zA-Z0-9][a-zA-Z0-9\-\._\(\)]{0,78}[a-zA-Z0-9\-_\(\)]{0,1})'
RE_RESOURCE_GROUP_ABS = re.compile(re_abs(RE_RESOURCE_GROUP_TXT))

# App Service plan (serverfarm) names
#   https://docs.microsoft.com/en-us/azure/azure-resource-manager/management/resource-name-rules#microsoftweb
RE_PLAN_NAME_TXT = r'([a-zA-Z0-9\-]{1,60})'
RE_PLAN_NAME_ABS = re.compile(re_abs(RE_PLAN_NAME_TXT))

EXC_DESC_DEFAULT = 'resource_id'

def check_tokens(text, toks, expect_toks, exc_desc=EXC_DESC_DEFAULT, exc_value=EXC_VALUE_DEFAULT):
    '''
    toks is a list of strings
    expect_toks is tuples of (index, value)
    expect each corresponding toks[index].lower() == value.lower()
    '''
    for idx, expect_val in expect_toks:
        tok = toks[idx]
        if tok.lower() != expect_val.lower():
            raise exc_value("invalid %s %r (invalid token[%d] (%r))" % (exc_desc, text, idx, tok))

class AzResourceId():
    '''
    Provider resource ID in Azure, optionally with one child resource.
    Examples:
      /subscriptions/11111111-1111-1111-1111-111111111111/resourceGroups/some-rg/providers/Microsoft.Web/serverfarms/some-plan
      /subscriptions/11111111-1111-1111-1111-111111111111/resourceGroups/some-rg/providers/Microsoft.Web/sites/some-site
      /subscriptions/11111111-1111-1111-1111-111111111111/resourceGroups/some-rg/providers/Microsoft.Web/sites/some-site/slots/staging
    '''
    def __init__(self,
                 subscription_id,
                 resource_group_name,
                 provider_name,
                 resource_type,
                 resource_name,
                 child_type='',
                 child_name='',
                 exc_value=EXC_VALUE_DEFAULT):
        assert issubclass(exc_value, Exception)
        self._exc_value = exc_value
        self.subscription_id = subscription_id
        self.resource_group_name = resource_group_name
        self.provider_name = self._nonempty_str('provider_name', provider_name)
        self.resource_type = self._nonempty_str('resource_type', resource_type)
        self.resource_name = self._nonempty_str('resource_name', resource_name)
        if bool(child_type) != bool(child_name):
            raise self._exc_value("child_type and child_name must be given together")
        self.child_type = child_type or ''
        self.child_name = child_name or ''

    def _nonempty_str(self, name, value):
        '''
        Validate value for attribute name
        '''
        if not isinstance(value, str):
            raise TypeError("%s must be str, not %s" % (name, type(value).__name__))
        if not value:
            raise self._exc_value('invalid %s' % name)
        return value

    @property
    def subscription_id(self):
        '''
        Getter
        '''
        return self._subscription_id

    @subscription_id.setter
    def subscription_id(self, subscription_id):
        '''
        Setter. Canonizes subscription_id as lower-case.
        '''
        if not isinstance(subscription_id, str):
            raise TypeError("subscription_id must be str, not %s" % type(subscription_id).__name__)
        try:
            self._subscription_id = str(uuid.UUID(subscription_id)).lower()
        except ValueError as exc:
            raise self._exc_value("subscription_id is not a UUID") from exc

    @property
    def resource_group_name(self):
        '''
        Getter
        '''
        return self._resource_group_name

    @resource_group_name.setter
    def resource_group_name(self, resource_group_name):
        '''
        Setter
        '''
        if not isinstance(resource_group_name, str):
            raise TypeError("resource_group_name must be str, not %s" % type(resource_group_name).__name__)
        if not RE_RESOURCE_GROUP_ABS.search(resource_group_name):
            raise self._exc_value('invalid resource_group_name')
        self._resource_group_name = resource_group_name

    def __repr__(self):
        ret = "%s(%r, %r, %r, %r, %r" % (type(self).__name__, self.subscription_id, self.resource_group_name, self.provider_name, self.resource_type, self.resource_name)
        if self.child_type:
            ret += ", child_type=%r, child_name=%r" % (self.child_type, self.child_name)
        return ret + ')'

    def __str__(self):
        ret = "/subscriptions/%s/resourceGroups/%s/providers/%s/%s/%s" % (self.subscription_id, self.resource_group_name, self.provider_name, self.resource_type, self.resource_name)
        if self.child_type:
            ret += "/%s/%s" % (self.child_type, self.child_name)
        return ret

    # Accepted token counts for text.split('/')
    ARGS_FROM_TEXT_TOKENS = (9, 11)

    @classmethod
    def values_check(cls, text, ret, provider_name=None, resource_type=None, child_type=None, exc_value=EXC_VALUE_DEFAULT):
        '''
        ret is a ResourceId object derived from text.
        Check ret values against kwargs. child_type='' requires
        that there be no child resource.
        '''
        if provider_name and (provider_name.lower() != ret.provider_name.lower()):
            raise exc_value("unexpected provider_name=%r != %r in %r" % (ret.provider_name, provider_name, text))
        if resource_type and (resource_type.lower() != ret.resource_type.lower()):
            raise exc_value("unexpected resource_type=%r != %r in %r" % (ret.resource_type, resource_type, text))
        if (child_type is not None) and (child_type.lower() != ret.child_type.lower()):
            raise exc_value("unexpected child_type=%r != %r in %r" % (ret.child_type, child_type, text))

    @classmethod
    def from_text(cls,
                  text,
                  exc_desc=EXC_DESC_DEFAULT,
                  exc_value=EXC_VALUE_DEFAULT,
                  **kwargs):
        '''
        Given an Azure resource ID as a string in text, construct an item
        of this type and return it. If exc_value is None, return None
        rather than raising for a value that does not parse.
        '''
        class LocalValueError(ValueError):
            '''
            Used for exc_value in outcalls to intercept errors.
            '''
            # No specialization here.

        if exc_value is None:
            exc_value = LocalValueError

        if not isinstance(text, str):
            raise TypeError("%s.from_text(): text must be str, not %s" % (cls.__name__, type(text).__name__))
        try:
            toks = text.split('/')
            if len(toks) not in cls.ARGS_FROM_TEXT_TOKENS:
                raise exc_value("invalid %s %r" % (exc_desc, text))
            expect_toks = ((0, ''), (1, 'subscriptions'), (3, 'resourcegroups'), (5, 'providers'))
            check_tokens(text, toks, expect_toks, exc_desc=exc_desc, exc_value=exc_value)
            if not all(toks[6:]):
                raise exc_value("invalid %s %r (empty token)" % (exc_desc, text))
            ret = cls(toks[2], toks[4], toks[6], toks[7], toks[8], *toks[9:], exc_value=exc_value)
            cls.values_check(text, ret, exc_value=exc_value, **kwargs)
            return ret
        except LocalValueError:
            return None
