#
# azwizard/base_defaults.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Default settings that are not loaded from any configuration.
To keep dependencies simple, use only Python built-in types here.
'''
ARM_ENDPOINT_DEFAULT = 'https://management.azure.com'

# Suffix appended to an ARM endpoint to form the token scope
ARM_SCOPE_SUFFIX = '/.default'

# Elastic Premium plans get an explicit worker ceiling at creation time.
ELASTIC_PREMIUM_FAMILY = 'ep'
ELASTIC_PREMIUM_MAX_WORKERS = 20

EXC_VALUE_DEFAULT = ValueError

# Upper bound on the first-deploy warm-up delay
FIRST_DEPLOY_DELAY_SECS = 10.0

# Only plans in this tier get the first-deploy delay
FIRST_DEPLOY_DELAY_TIER = 'basic'

# api-version for the function host runtime VFS reached through ARM
HOSTRUNTIME_API_VERSION = '2018-11-01'

# Files on Linux sites live under here
LINUX_HOME = '/home'

LOCATION_DEFAULT_FALLBACK = 'eastus2'

# Prefix for item expansion
PF = '  '

PLAN_SKU_DEFAULT_FALLBACK = 'B1'

# Subscriptions whose quota_id matches this are treated as sandbox subscriptions
SANDBOX_QUOTA_ID_PATTERN = 'sponsored'

# Timeout for raw REST calls (connect, read)
REST_TIMEOUT_SECS = (10.0, 60.0)
