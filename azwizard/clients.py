#
# azwizard/clients.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Generate and cache Azure clients: track2 ARM SDK clients and a
requests-based client for ARM paths the SDKs do not cover.
'''
import inspect
import logging
import threading

import azure.identity
from azure.mgmt.resource import ResourceManagementClient
from azure.mgmt.subscription import SubscriptionClient
from azure.mgmt.web import WebSiteManagementClient
import requests

from azwizard.base_defaults import (ARM_ENDPOINT_DEFAULT,
                                    ARM_SCOPE_SUFFIX,
                                    EXC_VALUE_DEFAULT,
                                    REST_TIMEOUT_SECS,
                                   )
from azwizard.msapicall import msapicall
from azwizard.util import (getframe,
                           uuid_normalize,
                          )

# Unit tests replace these
RESOURCE_MANAGEMENT_CLIENT = ResourceManagementClient
SUBSCRIPTION_CLIENT = SubscriptionClient
WEB_SITE_MANAGEMENT_CLIENT = WebSiteManagementClient

def arm_scope(environment):
    '''
    Return the token scope for the ARM endpoint environment
    '''
    return environment.rstrip('/') + ARM_SCOPE_SUFFIX

def credential_generate(client_id=None, use_cli=False, logger=None):
    '''
    Generate and return an appropriate credential object.
      client_id: user-assigned managed identity
      use_cli: only the az login credential
      otherwise: DefaultAzureCredential
    '''
    logger = logger or logging.getLogger('azwizard')
    if client_id:
        client_id = uuid_normalize(client_id, key='client_id')
        logger.debug("%s using ManagedIdentityCredential client_id=%s", getframe(0), client_id)
        return azure.identity.ManagedIdentityCredential(client_id=client_id)
    if use_cli:
        logger.debug("%s using AzureCliCredential", getframe(0))
        return azure.identity.AzureCliCredential()
    logger.debug("%s using DefaultAzureCredential", getframe(0))
    return azure.identity.DefaultAzureCredential()

class ClientFactory():
    '''
    Generate SDK clients for one subscription. Clients are constructed
    on first use and cached.
    '''
    def __init__(self,
                 subscription_id,
                 credential=None,
                 environment=ARM_ENDPOINT_DEFAULT,
                 logger=None,
                 exc_value=EXC_VALUE_DEFAULT):
        self.subscription_id = uuid_normalize(subscription_id, key='subscription_id', exc_value=exc_value)
        self._credential = credential
        self.environment = (environment or ARM_ENDPOINT_DEFAULT).rstrip('/')
        self.logger = logger or logging.getLogger('azwizard')
        self._az_client_gen_lock = threading.RLock()
        self._az_resource_client = None
        self._az_subscription_client = None
        self._az_web_client = None
        self._arm_rest_client = None

    # Unit tests force _AZ_CLIENT_GEN_MOUSETRAP
    # to True so we can catch cases where UT code
    # accidently tries to talk to Azure rather than the mocks.
    _AZ_CLIENT_GEN_MOUSETRAP = False

    @property
    def credential(self):
        '''
        Getter. Generates a default credential on first use.
        '''
        with self._az_client_gen_lock:
            if self._credential is None:
                self._credential = credential_generate(logger=self.logger)
            return self._credential

    @staticmethod
    def _instantiate_client(target_class, **kwargs):
        '''
        Instantiate target_class. Extract positional arguments
        from kwargs and get them in the right order. Matches
        strictly by name. Silently discards anything in kwargs
        that does not match in target_class.
        '''
        signature = inspect.signature(target_class)
        cli_args_all = set(signature.parameters.keys())
        cli_args_positional = [name for name, param in signature.parameters.items() if param.default is inspect.Parameter.empty and param.kind in (inspect.Parameter.POSITIONAL_ONLY, inspect.Parameter.POSITIONAL_OR_KEYWORD)]
        use_args = list()
        for key in cli_args_positional:
            if key not in kwargs:
                raise ValueError("missing argument %r" % key)
            use_args.append(kwargs.pop(key))
        # Discard unwanted kwargs
        use_kwargs = {k : v for k, v in kwargs.items() if k in cli_args_all}
        return target_class(*use_args, **use_kwargs)

    def _az_client_gen_do(self, name, client_class, **kwargs):
        '''
        Factory for Azure SDK client of type client_class.
        '''
        assert not self._AZ_CLIENT_GEN_MOUSETRAP
        parameters = {'credential' : self.credential,
                      'subscription_id' : self.subscription_id,
                      'base_url' : self.environment,
                     }
        parameters.update(kwargs)
        self.logger.debug("%s generate %s %s", getframe(0), name, client_class.__name__)
        return self._instantiate_client(client_class, **parameters)

    def _az_client_gen_property(self, name, client_class, **kwargs):
        '''
        Return self.<name>, generating it with _az_client_gen_do() iff necessary.
        '''
        with self._az_client_gen_lock:
            ret = getattr(self, name, None)
            if ret is None:
                ret = self._az_client_gen_do(name, client_class, **kwargs)
                setattr(self, name, ret)
            return ret

    @property
    def resource_client(self) -> ResourceManagementClient:
        '''
        ResourceManagementClient for self.subscription_id
        '''
        return self._az_client_gen_property('_az_resource_client', RESOURCE_MANAGEMENT_CLIENT)

    @property
    def subscription_client(self) -> SubscriptionClient:
        '''
        SubscriptionClient (not bound to a subscription)
        '''
        return self._az_client_gen_property('_az_subscription_client', SUBSCRIPTION_CLIENT)

    @property
    def web_client(self) -> WebSiteManagementClient:
        '''
        WebSiteManagementClient for self.subscription_id
        '''
        return self._az_client_gen_property('_az_web_client', WEB_SITE_MANAGEMENT_CLIENT)

    @property
    def arm_rest_client(self):
        '''
        ArmRestClient for raw ARM requests
        '''
        with self._az_client_gen_lock:
            if self._arm_rest_client is None:
                assert not self._AZ_CLIENT_GEN_MOUSETRAP
                self._arm_rest_client = ArmRestClient(self.credential, environment=self.environment, logger=self.logger)
            return self._arm_rest_client

class BearerSession():
    '''
    requests.Session wrapper that attaches a bearer token for scope to every request.
    '''
    def __init__(self, credential, scope, logger=None, session=None, timeout=REST_TIMEOUT_SECS):
        self.credential = credential
        self.scope = scope
        self.logger = logger or logging.getLogger('azwizard')
        self.session = session or requests.Session()
        self.timeout = timeout

    def _auth_headers(self, headers):
        '''
        Return headers with Authorization added
        '''
        ret = dict(headers or dict())
        token = self.credential.get_token(self.scope)
        ret['Authorization'] = 'Bearer ' + token.token
        return ret

    def request(self, method, url, headers=None, **kwargs):
        '''
        Issue one request. Raises requests.HTTPError for an error status.
        Transport failures and throttling are retried by msapicall.
        '''
        kwargs.setdefault('timeout', self.timeout)
        def _do():
            resp = self.session.request(method, url, headers=self._auth_headers(headers), **kwargs)
            self.logger.debug("%s %s -> %s", method, url, resp.status_code)
            resp.raise_for_status()
            return resp
        return msapicall(self.logger, _do)

class ArmRestClient(BearerSession):
    '''
    Raw requests against the ARM endpoint. Paths are ARM resource
    paths such as a resource id followed by a sub-path.
    '''
    def __init__(self, credential, environment=ARM_ENDPOINT_DEFAULT, logger=None, session=None):
        self.environment = (environment or ARM_ENDPOINT_DEFAULT).rstrip('/')
        super().__init__(credential, arm_scope(self.environment), logger=logger, session=session)

    def url_for(self, path):
        '''
        Return the absolute URL for ARM path
        '''
        if not path.startswith('/'):
            path = '/' + path
        return self.environment + path

    def send_request(self, method, path, **kwargs):
        '''
        Send a request for the ARM path and return the requests.Response
        '''
        return self.request(method, self.url_for(path), **kwargs)
