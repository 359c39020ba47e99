# -*- coding: utf-8 -*-

"""Manages settings and config file.

Settings are loaded from a configuration file. If they don't exists, default
values are provided.
When an option is set, the config file is updated.

The module can be used without calling ``load()``: the default values are
used until a config file is loaded.
"""

import configparser
import errno
import logging
import os
import os.path

import appdirs

_logger = logging.getLogger(__name__)

_appdirs = appdirs.AppDirs(appname='settle', appauthor=False)


# Default config dict. Values not present in this dict are not valid.
# Each entry contains the type expected, and the default value.
_default_config = {
    'scheduler': {'type': str, 'default': 'thread'},
    'debug_mode': {'type': bool, 'default': False},
    'log_levels': {'type': dict, 'default': {}}
}

# Actual config parser
_config_parser = configparser.ConfigParser()
_config_parser.add_section('config')


def _get_config_file_path():
    return os.path.join(_appdirs.user_config_dir, 'settle.ini')


def load(config_file_path=None):
    """Find and load the config file.

    Args:
        config_file_path (str, optional): path of the file to load. By
            default, the file "settle.ini" of the user config directory.
    Returns:
        boolean: True if the file has been loaded; False otherwise.
    """
    if config_file_path is None:
        config_file_path = _get_config_file_path()

    if not _config_parser.read(config_file_path):
        _logger.debug('Unable to load config file: %s', config_file_path)
        return False
    return True


def get(key):
    """Find and return a configuration entry

    If the entry is not specified in the config file, a default value is
    returned.

    Args:
        key (string): the entry key.
    Returns:
        The corresponding value found.
    Raises:
        KeyError: if the config entry doesn't exists.
    """
    if key not in _default_config:
        raise KeyError(key)
    try:
        if _default_config[key]['type'] is bool:
            return _config_parser.getboolean('config', key)
        elif _default_config[key]['type'] is dict:
            # Dict entries are in the form 'key=value;key2=value2'
            dict_str = _config_parser.get('config', key)
            result = {}
            for pair in filter(None, dict_str.split(';')):
                try:
                    (k, v) = pair.split('=')
                    result[k.strip()] = v.strip()
                except ValueError:
                    _logger.warning('Unable to parse pair key=value: "%s"',
                                    pair)
            return result
        else:
            return _config_parser.get('config', key)
    except configparser.NoOptionError:
        return _default_config[key]['default']
    except ValueError:
        _logger.warning('Invalid value for config entry "%s". The default '
                        'value will be used.', key)
        return _default_config[key]['default']


def set(key, value, config_file_path=None):
    """Set a configuration entry.

    Args:
        key (string): the entry key.
        value: the new value to set. It will be converted to string. Dict
            values are converted to the form 'key=value;key2=value2'.
        config_file_path (str, optional): file to update. By default, the
            file "settle.ini" of the user config directory.
    Raises:
        KeyError: if the config entry is not valid.
    """
    if key not in _default_config:
        raise KeyError(key)
    if isinstance(value, dict):
        value = ';'.join('%s=%s' % pair for pair in value.items())
    _config_parser.set('config', key, str(value))

    if config_file_path is None:
        config_file_path = _get_config_file_path()
    try:
        os.makedirs(os.path.dirname(config_file_path))
    except OSError as e:
        if e.errno != errno.EEXIST:
            _logger.warning('Unable to create the config folder',
                            exc_info=True)
    try:
        with open(config_file_path, 'w') as config_file:
            _config_parser.write(config_file)
        _logger.debug('Config file modified.')
    except IOError:
        _logger.warning('Unable to write in the config file', exc_info=True)


def reset():
    """Forget all the entries loaded or set. Default values are used again."""
    _config_parser.remove_section('config')
    _config_parser.add_section('config')
