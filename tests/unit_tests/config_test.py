# -*- coding: utf-8 -*-

import pytest

from settle import config

"""### TEST CASES ###
    ## load
    config file exist
    config file does not exist

    ## get
    key does not exist
    get a bool value
    get a bool with invalid value
    get a dict
    get a dict with invalid pair
    get a not typed value

    ## set
    set a not existing key
    set a value then reload the file
    set a dict value
"""


@pytest.fixture(autouse=True)
def clean_config():
    config.reset()
    yield
    config.reset()


@pytest.fixture
def config_file(tmpdir):
    return str(tmpdir.join('conf', 'settle.ini'))


def _write_config(path, content):
    with open(path, 'w') as f:
        f.write('[config]\n' + content)


class TestConfig(object):

    def test_load_existing_file(self, tmpdir):
        path = str(tmpdir.join('settle.ini'))
        _write_config(path, 'scheduler = manual\n')

        assert config.load(path) is True
        assert config.get('scheduler') == 'manual'

    def test_load_missing_file(self, tmpdir):
        assert config.load(str(tmpdir.join('missing.ini'))) is False
        assert config.get('scheduler') == 'thread'

    def test_get_unknown_key(self):
        with pytest.raises(KeyError):
            config.get('foo')

    def test_get_default_values(self):
        assert config.get('scheduler') == 'thread'
        assert config.get('debug_mode') is False
        assert config.get('log_levels') == {}

    def test_get_bool(self, tmpdir):
        path = str(tmpdir.join('settle.ini'))
        _write_config(path, 'debug_mode = yes\n')
        config.load(path)

        assert config.get('debug_mode') is True

    def test_get_invalid_bool(self, tmpdir):
        path = str(tmpdir.join('settle.ini'))
        _write_config(path, 'debug_mode = maybe\n')
        config.load(path)

        assert config.get('debug_mode') is False

    def test_get_dict(self, tmpdir):
        path = str(tmpdir.join('settle.ini'))
        _write_config(path, 'log_levels = settle=info;settle.promise=debug\n')
        config.load(path)

        assert config.get('log_levels') == {'settle': 'info',
                                             'settle.promise': 'debug'}

    def test_get_dict_with_invalid_pair(self, tmpdir):
        path = str(tmpdir.join('settle.ini'))
        _write_config(path, 'log_levels = settle=info;garbage\n')
        config.load(path)

        assert config.get('log_levels') == {'settle': 'info'}

    def test_set_unknown_key(self, config_file):
        with pytest.raises(KeyError):
            config.set('foo', 'bar', config_file)

    def test_set_then_reload(self, config_file):
        config.set('debug_mode', True, config_file)
        config.set('scheduler', 'manual', config_file)
        assert config.get('debug_mode') is True

        config.reset()
        assert config.get('debug_mode') is False

        assert config.load(config_file)
        assert config.get('debug_mode') is True
        assert config.get('scheduler') == 'manual'

    def test_set_dict(self, config_file):
        config.set('log_levels', {'settle': 'DEBUG'}, config_file)
        assert config.get('log_levels') == {'settle': 'DEBUG'}
