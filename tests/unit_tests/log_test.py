# -*- coding: utf-8 -*-

import io
import logging
import sys

import settle
from settle import config
from settle.log import ColoredFormatter, Context, set_debug_mode, \
    set_logs_level

colorFormater = ColoredFormatter()


class TestLogFormating(object):

    def test_colorize_DEBUG(self):
        assert colorFormater._colorize("plop", "DEBUG") == \
            ColoredFormatter._colors['DEBUG'] + "plop" + \
            ColoredFormatter._colors['RESET']

    def test_colorize_unknown_color(self):
        assert colorFormater._colorize("plop", "FOO") == \
            "plop" + ColoredFormatter._colors['RESET']

    def test_format_does_not_alter_the_record(self):
        record = logging.LogRecord('settle', logging.INFO, __file__, 1,
                                   'message', None, None)
        result = colorFormater.format(record)

        assert ColoredFormatter._colors['NAME'] in result
        assert record.name == 'settle'
        assert record.levelname == 'INFO'

    def test_format_exception(self):
        try:
            raise ValueError('bad value')
        except ValueError:
            result = colorFormater.formatException(sys.exc_info())

        assert ColoredFormatter._colors['EXCEPTION_NAME'] + 'ValueError' \
            in result
        assert 'bad value' in result


class TestLogLevels(object):

    def setup_method(self, method):
        self._level = logging.getLogger('settle').level

    def teardown_method(self, method):
        logging.getLogger('settle').setLevel(self._level)
        logging.getLogger('settle.scheduler').setLevel(logging.NOTSET)

    def test_set_debug_mode(self):
        set_debug_mode(True)
        assert logging.getLogger('settle').level == logging.DEBUG

        set_debug_mode(False)
        assert logging.getLogger('settle').level == logging.WARNING

    def test_set_logs_level(self):
        set_logs_level({'settle': 'info', 'settle.scheduler': '10'})

        assert logging.getLogger('settle').level == logging.INFO
        assert logging.getLogger('settle.scheduler').level == logging.DEBUG

    def test_set_invalid_logs_level(self, caplog):
        set_logs_level({'settle': 'not a level'})

        assert 'Invalid log level' in caplog.text

    def test_init_applies_config(self, tmpdir):
        path = str(tmpdir.join('settle.ini'))
        with open(path, 'w') as f:
            f.write('[config]\ndebug_mode = false\n'
                    'log_levels = settle.scheduler=debug\n')

        try:
            settle.init(path)
            assert logging.getLogger('settle').level == logging.WARNING
            assert logging.getLogger('settle.scheduler').level == \
                logging.DEBUG
        finally:
            config.reset()


class TestContext(object):

    def test_context_installs_console_handler(self):
        stream = io.StringIO()
        root_logger = logging.getLogger()
        level = logging.getLogger('settle').level

        try:
            with Context(stream=stream) as context:
                assert context.handler in root_logger.handlers
                logging.getLogger('settle.test').debug('debug message')
            assert context.handler is None
        finally:
            logging.getLogger('settle').setLevel(level)

        assert 'debug message' in stream.getvalue()
        assert 'settle.test' in stream.getvalue()
