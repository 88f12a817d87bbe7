#
# azwizard/deploy_delay.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
The first deployment to a Linux web app on a Basic plan can fail if it
starts too soon after the site is created. delay_first_web_app_deploy()
waits a bounded time before that first deployment and returns early
whenever the delay does not apply.
'''
import logging
import threading
import time

from azwizard.base_defaults import (FIRST_DEPLOY_DELAY_SECS,
                                    FIRST_DEPLOY_DELAY_TIER,
                                   )
from azwizard.util import elapsed

def _plan_resolve(plan):
    '''
    plan is None, an AppServicePlan, or something pending with
    result() (LROPoller, concurrent.futures.Future). Return the plan or None.
    '''
    if plan is None:
        return None
    result = getattr(plan, 'result', None)
    if callable(result):
        return result()
    return plan

def _delay_applies(site_client, plan):
    '''
    Return whether the first-deploy delay applies. Return False
    as soon as any check says it does not.
    '''
    if site_client.is_function_app:
        return False
    plan = _plan_resolve(plan)
    tier = getattr(getattr(plan, 'sku', None), 'tier', None)
    if (not tier) or (tier.lower() != FIRST_DEPLOY_DELAY_TIER):
        return False
    if not site_client.is_linux:
        return False
    deployments = len(site_client.kudu_client().deployment_results())
    if deployments > 1:
        return False
    return True

def delay_first_web_app_deploy(site_client, plan, logger=None, delay_secs=FIRST_DEPLOY_DELAY_SECS) -> bool:
    '''
    Block for at most delay_secs. Return early if the target is a
    function app, is not Linux, is not on a Basic plan, or already
    has more than one deployment. An error while checking ends the
    wait; it is logged and never raised.
    Returns True iff the wait ended before delay_secs.
    '''
    logger = logger or logging.getLogger('azwizard')
    done = threading.Event()

    def _check():
        try:
            if not _delay_applies(site_client, plan):
                done.set()
        except Exception as exc:
            logger.warning("first deploy delay check failed (ignoring): %r", exc)
            done.set()

    t0 = time.time()
    checker = threading.Thread(target=_check, name='first-deploy-delay-check', daemon=True)
    checker.start()
    early = done.wait(timeout=delay_secs)
    logger.debug("first deploy delay for %r complete after %.3f (early=%s)", getattr(site_client, 'name', site_client), elapsed(t0), early)
    return early
