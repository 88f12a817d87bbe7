#
# tests/test_config.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Unit tests for azwizard._paths and azwizard._scfg
'''
import pytest

import azwizard
from azwizard.exceptions import (ApplicationExit,
                                 ConfigNotFoundError,
                                )

SUB = '11111111-2222-3333-4444-555555555555'

def config_write(tmp_path, text):
    '''
    Write text to a config file and return its path
    '''
    path = tmp_path / 'config.yaml'
    path.write_text(text)
    return str(path)

def test_scfg_from_file(tmp_path):
    '''
    defaults are read and validated
    '''
    filename = config_write(tmp_path, "defaults:\n"
                                      "  subscription_default: '%s'\n"
                                      "  location_default: westus2\n"
                                      "  first_deploy_delay_secs: 3\n" % SUB.upper())
    azwizard.reset_caches(config_filename=filename)
    assert azwizard.scfg.subscription_default == SUB
    assert azwizard.scfg.get('location_default', '') == 'westus2'
    assert azwizard.scfg.get('first_deploy_delay_secs', 10.0) == 3.0
    assert azwizard.scfg.get('plan_sku_default', 'B1') == 'B1'
    with pytest.raises(AttributeError):
        azwizard.scfg.no_such_setting # pylint: disable=pointless-statement

def test_scfg_test_values():
    '''
    test_values override the file
    '''
    azwizard.scfg.test_values['location_default'] = 'northeurope'
    assert azwizard.scfg.get('location_default', '') == 'northeurope'
    assert azwizard.scfg.location_default == 'northeurope'

@pytest.mark.parametrize('text', ["defaults:\n  tenant_id_default: not-a-uuid\n",
                                  "defaults:\n  first_deploy_delay_secs: -1\n",
                                  "defaults:\n  first_deploy_delay_secs: true\n",
                                  "defaults:\n  first_deploy_delay_secs: soon\n",
                                  "defaults: [1, 2]\n",
                                 ])
def test_scfg_invalid(tmp_path, text):
    '''
    Invalid defaults are rejected when loaded
    '''
    azwizard.reset_caches(config_filename=config_write(tmp_path, text))
    with pytest.raises(ValueError):
        azwizard.scfg.get('location_default', '')

def test_config_explicit_missing(tmp_path):
    '''
    An explicitly named config file must exist
    '''
    azwizard.reset_caches(config_filename=str(tmp_path / 'missing.yaml'))
    with pytest.raises(ConfigNotFoundError):
        azwizard.scfg.get('location_default', '')

def test_config_default_missing(tmp_path, monkeypatch):
    '''
    A missing per-user config is treated as empty
    '''
    monkeypatch.delenv('AZWIZARD_CONFIG', raising=False)
    monkeypatch.setenv('HOME', str(tmp_path))
    azwizard.reset_caches()
    assert azwizard.paths.config_filename == str(tmp_path / '.azwizard' / 'config.yaml')
    assert azwizard.scfg.get('location_default', 'dflt') == 'dflt'

def test_config_environment(tmp_path, monkeypatch):
    '''
    AZWIZARD_CONFIG names the config file
    '''
    filename = config_write(tmp_path, "defaults:\n  plan_sku_default: P1v2\n")
    monkeypatch.setenv('AZWIZARD_CONFIG', filename)
    azwizard.reset_caches()
    assert azwizard.paths.config_filename == filename
    assert azwizard.scfg.get('plan_sku_default', '') == 'P1v2'

@pytest.mark.parametrize('text', ["defaults: [\n", "- a\n- b\n"])
def test_config_unparseable(tmp_path, text):
    '''
    Bad YAML and non-dict content are reported
    '''
    azwizard.reset_caches(config_filename=config_write(tmp_path, text))
    with pytest.raises(ApplicationExit):
        azwizard.paths.config_data # pylint: disable=pointless-statement

def test_config_filename_setdefault(tmp_path):
    '''
    setdefault does not replace an existing filename
    '''
    first = str(tmp_path / 'a.yaml')
    azwizard.reset_caches(config_filename=first)
    assert azwizard.paths.config_filename_setdefault(str(tmp_path / 'b.yaml')) == first
