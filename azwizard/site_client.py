#
# azwizard/site_client.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
SiteClient: identity and helpers for one App Service site (web app or function app).
'''
from azwizard.azresourceid import AzResourceId
from azwizard.btypes import (AppKind,
                             WebsiteOS,
                            )
from azwizard.clients import arm_scope
from azwizard.kudu import KuduClient
from azwizard.msapicall import (cw_get,
                                msapicall,
                               )

class SiteClient():
    '''
    Wrap a Site model (azure.mgmt.web.models.Site) together with the
    ClientFactory used to reach it.
    '''
    def __init__(self, site, clients, logger=None):
        self.site = site
        self.clients = clients
        self.logger = logger or clients.logger
        self.azrid = AzResourceId.from_text(site.id, provider_name='Microsoft.Web', resource_type='sites')
        if self.azrid.child_type and (self.azrid.child_type.lower() != 'slots'):
            raise ValueError("unexpected site id %r" % site.id)
        self._kudu_client = None

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.id)

    @classmethod
    def from_name(cls, clients, resource_group, name, logger=None):
        '''
        Fetch the named site and return a SiteClient for it
        '''
        logger = logger or clients.logger
        site = msapicall(logger, clients.web_client.web_apps.get, resource_group, name)
        return cls(site, clients, logger=logger)

    @property
    def id(self):
        '''
        ARM resource id of the site
        '''
        return self.site.id

    @property
    def name(self):
        '''
        Getter
        '''
        return self.site.name

    @property
    def resource_group(self):
        '''
        Getter
        '''
        return self.azrid.resource_group_name

    @property
    def subscription_id(self):
        '''
        Getter
        '''
        return self.azrid.subscription_id

    @property
    def slot(self):
        '''
        Deployment slot name, or '' for the production site
        '''
        return self.azrid.child_name

    @property
    def kind(self):
        '''
        Lower-cased site kind such as 'app,linux' or 'functionapp'
        '''
        return (self.site.kind or '').lower()

    @property
    def is_function_app(self):
        '''
        Return whether this site is a function app
        '''
        return AppKind.FUNCTIONAPP.value in self.kind

    @property
    def is_linux(self):
        '''
        Return whether this site runs on Linux
        '''
        if getattr(self.site, 'reserved', None):
            return True
        return WebsiteOS.LINUX.value in self.kind.split(',')

    @property
    def server_farm_id(self):
        '''
        Getter
        '''
        return self.site.server_farm_id or ''

    @property
    def kudu_url(self):
        '''
        https URL of the scm (Kudu) endpoint.
        Prefer the Repository host from host_name_ssl_states.
        '''
        for state in getattr(self.site, 'host_name_ssl_states', None) or list():
            host_type = getattr(state, 'host_type', None)
            host_type = getattr(host_type, 'value', host_type)
            if host_type and (str(host_type).lower() == 'repository') and state.name:
                return 'https://' + state.name
        for host in getattr(self.site, 'enabled_host_names', None) or list():
            if '.scm.' in host:
                return 'https://' + host
        raise ValueError("%s: cannot determine scm host for site %r" % (type(self).__name__, self.name))

    def kudu_client(self) -> KuduClient:
        '''
        Return a KuduClient for this site
        '''
        if self._kudu_client is None:
            self._kudu_client = KuduClient(self.clients.credential,
                                           self.kudu_url,
                                           arm_scope(self.clients.environment),
                                           logger=self.logger)
        return self._kudu_client

    def get_app_service_plan(self):
        '''
        Return the AppServicePlan hosting this site, or None if it does not exist
        '''
        if not self.server_farm_id:
            return None
        plan_azrid = AzResourceId.from_text(self.server_farm_id, provider_name='Microsoft.Web', resource_type='serverfarms', child_type='')
        return cw_get(self.logger, self.clients.web_client.app_service_plans.get, plan_azrid.resource_group_name, plan_azrid.resource_name)

    def os(self) -> WebsiteOS:
        '''
        Return the WebsiteOS for this site
        '''
        return WebsiteOS.LINUX if self.is_linux else WebsiteOS.WINDOWS
