#
# azwizard/_paths.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Support for locating and reading the configuration file

Environment variables:
  AZWIZARD_CONFIG - location of the YAML configuration file
'''
import copy
import os
import threading

import yaml

from azwizard.base_defaults import EXC_VALUE_DEFAULT
from azwizard.exceptions import (ApplicationExit,
                                 ConfigNotFoundError,
                                )

ENVIRON_CONFIG = 'AZWIZARD_CONFIG'

class Paths():
    '''
    Manage finding/caching the config path and its contents.
    This is expected to be a singleton in non-unit-testing environments.
    '''
    def __init__(self):
        self._lock = threading.RLock()
        self._config_path = None
        self._config_explicit = False
        self._config_data = None

    def reset(self, config_filename='', config_data=None):
        '''
        Discard cached content. Useful for unit testing.
        '''
        with self._lock:
            self._config_path = None
            self._config_explicit = False
            self._config_data = None
            if config_filename:
                self._config_path_set(config_filename, explicit=True)
            if config_data is not None:
                assert self._config_path
                self._config_data_set(config_data)

    ######################################################################
    # config_filename

    CONFIG_DEFAULT_TUPLE_HOME = ('.azwizard', 'config.yaml')

    @property
    def config_filename(self):
        '''
        Getter for config filename
        '''
        with self._lock:
            if not self._config_path:
                self._config_find()
            return self._config_path

    def config_filename_setdefault(self, path):
        '''
        Set config filename iff it is not already set.
        Returns the new effective value.
        '''
        with self._lock:
            if not self._config_path:
                self._config_path_set(path, explicit=True)
            return self._config_path

    def _config_find(self):
        '''
        Determine the config path to use.
        A path named in the environment is explicit; the
        per-user default is not.
        '''
        path = os.environ.get(ENVIRON_CONFIG, '')
        if path:
            self._config_path_set(path, explicit=True)
        else:
            self._config_path_set(os.path.join(os.path.expanduser('~'), *self.CONFIG_DEFAULT_TUPLE_HOME), explicit=False)

    def _config_path_set(self, path, explicit):
        '''
        Set the config filename
        '''
        with self._lock:
            if not isinstance(path, str):
                raise TypeError("path must be str, not %s" % type(path))
            if not path:
                raise ValueError("invalid (empty) path")
            self._config_path = path
            self._config_explicit = explicit

    ######################################################################
    # config_data

    @property
    def config_data(self):
        '''
        Read, parse, and cache the config file.
        An explicitly-named file must exist. A missing default
        file is treated as empty.
        '''
        with self._lock:
            if self._config_data is not None:
                return self._config_data
            filename = self.config_filename
            try:
                with open(filename, 'r') as f:
                    contents = f.read()
            except FileNotFoundError as exc:
                if self._config_explicit:
                    raise ConfigNotFoundError("config file %r not found" % filename) from exc
                contents = ''
            try:
                data = yaml.safe_load(contents)
            except yaml.error.MarkedYAMLError as exc:
                raise ApplicationExit(f"cannot parse {filename!r}: error line {exc.problem_mark.line} column {exc.problem_mark.column}") from exc
            except yaml.error.YAMLError as exc:
                # yaml.error.YAMLError is more readable with str than repr
                raise ApplicationExit(f"cannot parse {filename!r}: error {exc}") from exc
            if data is None:
                # empty file - interpret it as an empty dict
                data = dict()
            if not isinstance(data, dict):
                raise ApplicationExit(f"content of config file {filename!r} is not a dict")
            self._config_data_set(data)
            return self._config_data

    def _config_data_set(self, data:dict):
        '''
        Use the provided data as the config.
        '''
        assert isinstance(data, dict)
        with self._lock:
            self._config_data = copy.deepcopy(data)

    @staticmethod
    def config_dict_from_data(filename, data, key, exc_value=EXC_VALUE_DEFAULT) -> dict:
        '''
        filename is the name of the file from which data is loaded.
        data is config_data, assumed to be a dict.
        key is a key in the data dict that is expected to be a dict.
        Returns this dict, or an empty dict if not found.
        '''
        assert isinstance(data, dict)
        ret = data.get(key, dict())
        if ret is None:
            return dict()
        if not isinstance(ret, dict):
            raise exc_value(f"{key} in {filename} has type {type(ret)}; expected dict")
        return ret

paths = Paths()
