#
# azwizard/msapicall.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Provide wrappers for retrying Azure calls, and a classifier (Caught)
for errors raised by the track2 SDKs and by raw REST calls made
with requests.
'''
import functools
import http.client
import logging
import random
import time

import azure.core.exceptions
import requests

from azwizard.exceptions import ApplicationException
from azwizard.util import (getframe,
                           indent_pformat,
                          )

LOGGER_NAME_DEFAULT = 'azwizard'

TRANSPORT_EXCEPTIONS = (azure.core.exceptions.ServiceRequestError,
                        azure.core.exceptions.ServiceResponseError,
                        requests.exceptions.ConnectionError,
                        requests.exceptions.Timeout,
                       )

AZURE_SDK_EXCEPTIONS = (azure.core.exceptions.HttpResponseError,
                        requests.exceptions.RequestException,
                       ) + TRANSPORT_EXCEPTIONS

class CallPolicy():
    '''
    Call retry policy
    '''
    def __init__(self,
                 max_attempts_other=5,
                 max_attempts_throttle=100):
        self.max_attempts_other = max_attempts_other
        self.max_attempts_throttle = max_attempts_throttle

class Caught():
    '''
    Capture an exception. Called from the exception context.
    '''
    def __init__(self, exc, callpolicy=None):
        self.callpolicy = callpolicy or CallPolicy()
        assert isinstance(self.callpolicy, CallPolicy)
        self.exc = exc
        self.status_code = getattr(self.exc, 'status_code', None)
        response = getattr(self.exc, 'response', None)
        if (self.status_code is None) and (response is not None):
            self.status_code = getattr(response, 'status_code', None)
        try:
            self.status_code_int = int(self.status_code)
        except Exception:
            self.status_code_int = -1
        self.error_code = None

        if self.is_transport():
            return

        if getattr(exc, 'error_code', None):
            self.error_code = str(exc.error_code)
        elif getattr(getattr(exc, 'error', None), 'code', None):
            self.error_code = str(exc.error.code)
        elif isinstance(exc, requests.exceptions.RequestException) and (response is not None):
            # ARM error body: {"error": {"code": ..., "message": ...}}
            try:
                body = response.json()
            except ValueError:
                body = None
            if isinstance(body, dict) and isinstance(body.get('error', None), dict):
                code = body['error'].get('code', None)
                if code:
                    self.error_code = str(code)

    def is_conflict(self):
        '''
        Return whether this is a "conflict" error.
        '''
        return (self.status_code_int == http.client.CONFLICT) \
          or isinstance(self.exc, azure.core.exceptions.ResourceExistsError)

    def is_forbidden(self):
        '''
        Return whether the caller lacks permission for the operation
        '''
        return self.status_code_int == http.client.FORBIDDEN

    def is_missing(self):
        '''
        Return whether this exception is caused by a missing resource
        '''
        if self.status_code_int == http.client.NOT_FOUND:
            return True
        if isinstance(self.exc, azure.core.exceptions.ResourceNotFoundError):
            return True
        return self.any_code_matches('ResourceGroupNotFound', 'ResourceNotFound')

    def is_precondition_failed(self):
        '''
        Return whether a conditional request (If-Match) did not match
        '''
        return (self.status_code_int == http.client.PRECONDITION_FAILED) \
          or isinstance(self.exc, azure.core.exceptions.ResourceModifiedError)

    def is_server_error(self):
        '''
        Return whether the endpoint reported an internal failure
        '''
        return self.status_code_int >= http.client.INTERNAL_SERVER_ERROR

    def is_throttle(self):
        '''
        Endpoint wants us to throttle
        '''
        return self.status_code_int == http.client.TOO_MANY_REQUESTS

    def is_transport(self):
        '''
        Return whether this exception is a network-level failure
        '''
        return isinstance(self.exc, TRANSPORT_EXCEPTIONS)

    def any_code_matches(self, *args):
        '''
        Return whether any code in args (strings) matches self.error_code.
        '''
        if not self.error_code:
            return False
        return any(self.error_code.lower() == code.lower() for code in args)

    _no_retry_codes = ('AuthorizationFailed',
                       'InvalidParameter',
                       'InvalidResourceReference',
                       'LinkedInvalidPropertyId',
                       'ResourceGroupNotFound',
                      )

    def retry_time(self):
        '''
        Return None if the operation should not retry
        Return 0.0 if the operations should retry immediately
        Return > 0.0 for an amount of time the operation should sleep before retrying
        '''
        if isinstance(self.exc, (ApplicationException, KeyboardInterrupt, SystemExit, TypeError)) \
          or self.any_code_matches(*self._no_retry_codes) \
          or self.is_forbidden() \
          or self.is_missing() \
          or self.is_conflict() \
          or self.is_precondition_failed() \
          :
            return None
        if self.is_transport():
            # typically an Azure network problem of some sort - give it a little extra time to sort out
            return random.uniform(5, 10)
        if self.is_throttle():
            # Do a longer sleep to let things cool down.
            # Jitter the sleep to break up convoys.
            return random.uniform(28, 32)
        if self.is_server_error():
            return random.uniform(1, 3)
        return None

    def reason(self):
        '''
        Bucket failure reasons into a human-readable string.
        '''
        # The ordering here matches the bucketing in retry_time()
        for checker in ('is_forbidden',
                        'is_missing',
                        'is_conflict',
                        'is_precondition_failed',
                        'is_transport',
                        'is_throttle',
                        'is_server_error',
                       ):
            proc = getattr(self, checker)
            if proc():
                return checker
        return None

def msapicall(logger, op, *args, azwizard_callpolicy=None, **kwargs):
    '''
    execute op(*args, **kwargs) and return the result.
    Internally, do some amount of retry on errors.
    '''
    callpolicy = azwizard_callpolicy or CallPolicy()
    logger = logger or logging.getLogger(LOGGER_NAME_DEFAULT)
    last_reason = None
    attempt_all = 0
    attempt_this_reason = 0
    while True:
        try:
            return op(*args, **kwargs)
        except AZURE_SDK_EXCEPTIONS as exc:
            caught = Caught(exc, callpolicy=callpolicy)
            sleep_secs = caught.retry_time()
            if sleep_secs is None:
                raise
            reason = caught.reason()
            attempt_all += 1
            if reason == last_reason:
                attempt_this_reason += 1
            else:
                attempt_this_reason = 1
            last_reason = reason
            if caught.is_throttle():
                max_attempts = callpolicy.max_attempts_throttle
            else:
                max_attempts = callpolicy.max_attempts_other
            if attempt_this_reason >= max_attempts:
                raise
            reason_str = reason or 'other'
            if logger.isEnabledFor(logging.DEBUG):
                logger.warning("%s op=%r count=%s,%s/%s will retry after %s [%s] %r [WILL RETRY]\n%s", getframe(0), op, attempt_all, attempt_this_reason, max_attempts, sleep_secs, reason_str, exc, indent_pformat(vars(exc)))
            else:
                logger.warning("%s op=%r count=%s,%s/%s will retry after %s [%s] %r [WILL RETRY]", getframe(0), op, attempt_all, attempt_this_reason, max_attempts, sleep_secs, reason_str, exc)
            time.sleep(sleep_secs)

def cw_get(logger, call, *args, **kwargs):
    '''
    Rewrap a generic operation that raises on missing-like errors
    and instead returns None.
    '''
    try:
        return msapicall(logger, call, *args, **kwargs)
    except Exception as exc:
        caught = Caught(exc)
        if caught.is_missing():
            return None
        raise

def cw_list(logger, call, *args, **kwargs):
    '''
    Rewrap a generic operation that lists something.
    The underlying SDK op returns an iterator (ItemPaged).
    Both generating the iterator and expanding it to a list are retried.
    When the scope is missing, return an empty list.
    '''
    def _doit(call, *args, **kwargs):
        '''
        Create the iterator and expand it to a list.
        An error restarts the list at the beginning.
        '''
        pager = call(*args, **kwargs)
        if not pager:
            return list()
        return list(pager)
    try:
        return msapicall(logger, functools.partial(_doit, call, *args, **kwargs))
    except Exception as exc:
        caught = Caught(exc)
        if caught.is_missing():
            return list()
        raise
