#
# azwizard/_scfg.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
"scfg" is roughly "settings configuration".
This manages misc settings read from the defaults section of the config file.
'''
import threading

import azwizard._paths
from azwizard.base_defaults import EXC_VALUE_DEFAULT
from azwizard.btypes import ReadOnlyDict
import azwizard.util

class _Scfg():
    '''
    Manage scfg values
    '''
    def __init__(self):
        self._vlock = threading.RLock()
        self._vfilename = None
        self._vdata = None

        # Hook for unit testing. Do not use this in production.
        self.test_values = dict()

    def reset(self):
        '''
        Discard cached data. Useful for unit testing.
        '''
        with self._vlock:
            self._vfilename = None
            self._vdata = None
            self.test_values = dict()

    def _load_iff_necessary(self, exc_value=EXC_VALUE_DEFAULT):
        '''
        Load data iff not already loaded
        '''
        with self._vlock:
            if self._vdata is None:
                paths = azwizard._paths.paths # pylint: disable=protected-access
                filename = paths.config_filename
                data = paths.config_dict_from_data(filename, paths.config_data, 'defaults', exc_value=exc_value)
                self._vdata = self._data_validate(data, exc_value=exc_value)
                self._vfilename = filename

    def _data_validate(self, data, hnamestack='_dh', unamestack='defaults', exc_value=EXC_VALUE_DEFAULT):
        '''
        data is a dict as loaded from the config.
        Validate the contents and return them. Values with a
        custom handler (_dh__name) go through that handler; dicts
        and lists are validated recursively; scalars are accepted as-is.
        '''
        handler = getattr(self, hnamestack, None)
        if handler:
            return handler(data, unamestack, exc_value)
        if isinstance(data, (bool, float, int, str)):
            return data
        if isinstance(data, dict):
            return ReadOnlyDict({kk : self._data_validate(vv, unamestack=f'{unamestack}[{kk}]', hnamestack=f'{hnamestack}__{kk}', exc_value=exc_value) for kk, vv in data.items()})
        if isinstance(data, list):
            return tuple(self._data_validate(vv, unamestack=f'{unamestack}[{idx}]', hnamestack=f'{hnamestack}__contents', exc_value=exc_value) for idx, vv in enumerate(data))
        raise exc_value("%s has unexpected type %s" % (unamestack, type(data)))

    @staticmethod
    def _dh__tenant_id_default(value, unamestack, exc_value):
        '''
        Validate tenant_id_default as a UUID
        '''
        return azwizard.util.uuid_normalize(value, key=unamestack, exc_value=exc_value)

    @staticmethod
    def _dh__subscription_default(value, unamestack, exc_value):
        '''
        Validate subscription_default as a UUID
        '''
        return azwizard.util.uuid_normalize(value, key=unamestack, exc_value=exc_value)

    @staticmethod
    def _dh__first_deploy_delay_secs(value, unamestack, exc_value):
        '''
        Validate first_deploy_delay_secs as a non-negative number
        '''
        if isinstance(value, bool) or (not isinstance(value, (float, int))) or (value < 0):
            raise exc_value(f"{unamestack} must be a non-negative number, not {value!r}")
        return float(value)

    @staticmethod
    def _key_valid(name):
        '''
        Return whether the given name is valid as a config key
        '''
        if not isinstance(name, str):
            return False
        if not name:
            return False
        if name.startswith('_'):
            return False
        return True

    def __getattr__(self, name):
        if not self._key_valid(name):
            raise AttributeError("%r object has no attribute %r; check configuration file %s" % (type(self).__name__, name, self._vfilename))
        with self._vlock:
            if name in self.test_values:
                return self.test_values[name]
            self._load_iff_necessary()
            if name in self._vdata:
                return self._vdata[name]
            raise AttributeError("%r object has no attribute %r; check configuration file %s" % (type(self).__name__, name, self._vfilename))

    def get(self, name, defaultvalue):
        '''
        If name is set in the config, return the corresponding value.
        If name is not set in the config, return defaultvalue.
        If name is not valid, just returns defaultvalue.
        '''
        if not self._key_valid(name):
            return defaultvalue
        with self._vlock:
            try:
                return self.test_values[name]
            except KeyError:
                pass
            self._load_iff_necessary()
            return self._vdata.get(name, defaultvalue)

scfg = _Scfg()
