#
# azwizard/common.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Application base classes: logging setup, command-line handling,
and subscription/resource group plumbing.
'''
import inspect
import logging
import os
import pprint
import sys
import threading
import traceback

import azwizard
from azwizard.azresourceid import RE_RESOURCE_GROUP_ABS
from azwizard.base_defaults import (ARM_ENDPOINT_DEFAULT,
                                    EXC_VALUE_DEFAULT,
                                   )
from azwizard.btypes import LogTo
from azwizard.clients import (ClientFactory,
                              credential_generate,
                             )
from azwizard.exceptions import ApplicationExit
import azwizard.util
from azwizard.util import (ArgumentParser,
                           expand_item_pformat,
                          )

class Application():
    """
    The base class for an application.

    Child classes typically do this:
    def __init__(self, attr1=None, **kwargs):
        super().__init__(**kwargs)
        self.attr1 = attr1

    @classmethod
    def main_add_parser_args(cls, ap_parser):
        '''
        See azwizard.common.Application.main_add_parser_args()
        '''
        super().main_add_parser_args(ap_parser)
        ap_parser.add_argument(...)

    def main_execute(self):
        '''
        See azwizard.common.Application.main_execute()
        '''
        self.stuff()
        raise ApplicationExit(0)
    """
    def __init__(self,
                 debug=0,
                 exc_value=EXC_VALUE_DEFAULT,
                 log_level=None,
                 log_to=None,
                 logger_stream=None,
                 log_file=None,
                 log_fmt=None,
                 logger=None,
                 **kwargs):
        '''
        debug: Debug level verbosity. In the common case, just using self.logger.debug()
               is sufficient.
        exc_value: Raise this exception for invalid values passed to construction.
        log_level: Used to create logger if none is passed in; otherwise, ignored.
        '''
        self._args_saved = None # See args_process
        self.debug = debug
        self.exc_value = exc_value
        self._log_to = LogTo(log_to if log_to is not None else self.LOG_TO_DEFAULT)
        self._logger_stream = logger_stream if logger_stream is not None else self._stream_for(self._log_to)
        self._log_file = log_file
        self._log_level, self._logger = self._logger_create(log_level, logger, stream=self._logger_stream,
                                                            log_file=self._log_file, log_fmt=log_fmt)
        if kwargs:
            raise TypeError("%s: unexpected keyword arguments %s" % (type(self).__name__, ','.join(kwargs.keys())))

    # Name for the logger of this class. This may be overloaded.
    LOGGER_NAME = 'azwizard'

    # Some standard log formats. Do not overload these in subclasses.
    # Instead, overload LOG_FORMAT.
    LOG_FORMAT_SIMPLE = "%(message)s"

    # Default log format for this class (overload in subclasses as necessary)
    LOG_FORMAT = LOG_FORMAT_SIMPLE

    LOG_LEVEL_DEFAULT = 'info'

    LOG_LEVEL_PYTEST = '' # pytest patches this

    LOG_LEVEL_CHOICES = ('debug', 'info', 'warning', 'error', 'critical')

    LOG_TO_DEFAULT = LogTo.STDOUT.value

    EXIT_VERBOSE_ALWAYS = False

    @property
    def logger(self):
        '''
        Getter
        '''
        return self._logger

    @property
    def log_level(self):
        '''
        Getter
        '''
        return self._log_level

    @staticmethod
    def _stream_for(logto):
        '''
        Return the stream for logto
        '''
        logto = LogTo(logto)
        if logto == LogTo.STDERR:
            return sys.stderr
        return sys.stdout

    @classmethod
    def _logger_create(cls, log_level, logger, stream=None, log_to=None, log_file=None, log_fmt=None):
        '''
        Return (log_level, logger) to use in the caller context.
        '''
        log_to = log_to if log_to is not None else cls.LOG_TO_DEFAULT
        log_fmt = log_fmt if log_fmt is not None else cls.LOG_FORMAT
        stream = stream if stream is not None else cls._stream_for(log_to)
        if log_file:
            pathname, _ = os.path.split(os.path.abspath(log_file))
            if not os.path.isdir(pathname):
                raise ValueError("Path %s must exist and be writeable in order to log to it." % pathname)
            if not os.access(pathname, os.W_OK):
                raise PermissionError("Path %s must be writeable in order to log to it." % pathname)
            logging.basicConfig(format=log_fmt, filename=log_file)
        else:
            logging.basicConfig(format=log_fmt, stream=stream)
        log_level = azwizard.util.log_level_normalize(log_level if log_level is not None else cls.LOG_LEVEL_DEFAULT)
        if cls.LOG_LEVEL_PYTEST:
            log_level = min(azwizard.util.log_level_normalize(cls.LOG_LEVEL_PYTEST), log_level)
        if logger is not None:
            return log_level, logger
        logger = logging.getLogger(name=cls.LOGGER_NAME)
        cls._logging_adjust_other_loggers()
        logger.setLevel(log_level)
        return log_level, logger

    @classmethod
    def _logging_adjust_other_loggers(cls):
        '''
        Adjust log levels in known-noisy loggers. Azure SDKs, I'm looking at you.
        '''
        sup = (('azure.core.pipeline.policies.http_logging_policy', logging.WARNING),
               ('azure.identity', logging.WARNING),
               ('azure.identity._internal.decorators', logging.ERROR),
               ('urllib3.connectionpool', logging.WARNING),
              )
        for logger_name, log_level in sup:
            logger = logging.getLogger(name=logger_name)
            logger.setLevel(log_level)

    @staticmethod
    def debug_default():
        '''
        Return default debug level.
        Intended to be called outside class context.
        Will print() errors and raise ApplicationExit on error.
        '''
        env = os.environ.get('AZWIZARD_DEBUG', '')
        if env:
            try:
                return int(env)
            except ValueError as exc:
                print("invalid value '%s' for AZWIZARD_DEBUG" % env)
                raise ApplicationExit(1) from exc
        return 0

    @classmethod
    def main_add_parser_args(cls, ap_parser):
        '''
        Add command-line arguments.
        Overload this to add your own arguments, and also invoke super().main_add_parser_args(ap_parser)
        '''
        group = ap_parser.get_argument_group('common')
        group.add_argument('--debug', type=int, default=cls.debug_default(),
                           help='debug level')
        if not cls.EXIT_VERBOSE_ALWAYS:
            group.add_argument('--exit_verbose', action="store_true",
                               help='print/log exit status')
        group.add_argument('--log_level', type=str, default=cls.LOG_LEVEL_DEFAULT, choices=cls.LOG_LEVEL_CHOICES,
                           help='log level')
        group.add_argument('--log_to', type=str, default=cls.LOG_TO_DEFAULT, choices=LogTo.values(),
                           help='default log destination')
        group.add_argument('--log_file', type=str, default=None,
                           help='log to the named file instead of stdout or stderr (overrides log_to)')
        group.add_argument('--config_path', type=str, default=None,
                           help='configuration file (default $AZWIZARD_CONFIG or ~/.azwizard/config.yaml)')

    @classmethod
    def main_handle_parser_args(cls, ap_args):
        '''
        ap_args is argparse.Namespace, the result of ArgumentParser.parse_args().
        Perform any transformations necessary.
        '''
        if hasattr(ap_args, 'config_path'):
            if ap_args.config_path:
                azwizard.paths.config_filename_setdefault(ap_args.config_path)
            delattr(ap_args, 'config_path')

    # Names of command-line arguments that are saved in _args_saved
    # rather than passed to the constructor. args_process() unions
    # this through the class hierarchy.
    ARGS_SAVE = tuple()

    @classmethod
    def args_process(cls, args_dict):
        '''
        Return a tuple of (args_dict, args_saved). Both are dicts.
        Values named in ARGS_SAVE anywhere in the class hierarchy
        move from args_dict to args_saved. This is only used in
        the command-line path.
        '''
        args_to_save = set()
        for kls in inspect.getmro(cls):
            try:
                args_to_save.update(getattr(kls, 'ARGS_SAVE'))
            except AttributeError:
                # Past our base class
                break
        args_saved = dict()
        for k in args_to_save:
            try:
                args_saved[k] = args_dict.pop(k)
            except KeyError:
                pass
        return (args_dict, args_saved)

    _args_save_lock = threading.Lock()

    def args_save(self, args_saved):
        '''
        Save the given arguments (passed in dict form).
        '''
        with self._args_save_lock:
            assert self._args_saved is None
            self._args_saved = args_saved
            assert isinstance(self._args_saved, dict)

    @classmethod
    def main_app_setup(cls, cmd_args):
        '''
        Construct application object using the given command-line arguments (iterable of strings).
        This is split out from main_with_args() to support unit testing.
        The caller is responsible for exception handling, logging, etc.
        Returns (app, debug, exit_verbose, logger)
        '''
        ap_parser = ArgumentParser(allow_abbrev=False)
        cls.main_add_parser_args(ap_parser)
        ap_args = ap_parser.parse_args(args=cmd_args)
        cls.main_handle_parser_args(ap_args)
        args_dict = vars(ap_args)
        exit_verbose = args_dict.pop('exit_verbose', cls.EXIT_VERBOSE_ALWAYS)
        args_dict, args_saved = cls.args_process(args_dict)
        args_dict['exc_value'] = ApplicationExit
        app = cls(**args_dict)
        app.args_save(args_saved)
        return (app, app.debug, exit_verbose, app.logger)

    @classmethod
    def main(cls, name):
        '''
        Entrypoint as from the command-line.
        '''
        if name == '__main__':
            cls.main_with_args(sys.argv[1:])
            raise SystemExit(1)

    @classmethod
    def main_with_args(cls, cmd_args):
        '''
        Entrypoint as from the command-line.
        Define args parsing. cmd_args is typically sys.argv[1:].
        Typically, this is not overloaded. Instead, overload main_add_parser_args().
        '''
        c = None
        debug = 1
        exit_verbose = cls.EXIT_VERBOSE_ALWAYS or ('--exit_verbose' in cmd_args)
        logger = None

        try:
            c, debug, exit_verbose, logger = cls.main_app_setup(cmd_args)
            c.main_execute()
            c.logger.error("%s.main_execute returned unexpectedly", type(c).__name__)
            raise ApplicationExit(1)
        except (ApplicationExit, SystemExit) as exc:
            if exit_verbose:
                if logger is not None:
                    if debug > 0:
                        logger.info("exit stack:\n%s", traceback.format_exc())
                    logger.info("exit code %r", exc.code)
                else:
                    print("exit code %r" % exc.code)
            elif not isinstance(exc.code, (bool, int, type(None))):
                if logger is not None:
                    logger.error("%s", exc.code)
                else:
                    print(str(exc.code), file=cls._stream_for(cls.LOG_TO_DEFAULT))
            if isinstance(exc, SystemExit):
                raise
            raise SystemExit(int(bool(exc.code))) from exc
        except BaseException as exc:
            ve = expand_item_pformat(exc)
            if len(ve.splitlines()) > 500:
                ve = pprint.pformat(vars(exc))
            log_level = logging.ERROR if isinstance(exc, Exception) else logging.WARNING
            if logger is not None:
                logger.log(log_level, "%r\n%s\n%s", exc, ve, traceback.format_exc())
            else:
                print("%r\n%s\n%s" % (exc, ve, traceback.format_exc()), flush=True)
        if exit_verbose:
            if logger is not None:
                logger.info("exit code %r", 1)
            else:
                print("exit code %r" % 1, flush=True)
        raise SystemExit(1)

    def main_execute(self):
        '''
        This is invoked by main_with_args() after construction.
        Overload this to do the real work and raise ApplicationExit.
        '''
        raise NotImplementedError("%s does not implement main_execute" % type(self).__name__)

class ApplicationWithSubscription(Application):
    '''
    Application that operates on a subscription
    '''
    def __init__(self,
                 subscription_id=None,
                 tenant_id=None,
                 client_id=None,
                 az_cli_credential=False,
                 environment=ARM_ENDPOINT_DEFAULT,
                 credential=None,
                 clients=None,
                 **kwargs):
        super().__init__(**kwargs)
        if subscription_id == 'default':
            # JIT translate this so we can have 'default' as a command-line
            # default without reading the config before construction.
            subscription_id = azwizard.scfg.get('subscription_default', '')
        if not subscription_id:
            raise self.exc_value("'subscription_id' not specified and no subscription_default configured")
        self.subscription_id = azwizard.util.uuid_normalize(subscription_id, key='subscription_id', exc_value=self.exc_value)
        self.tenant_id = tenant_id or azwizard.scfg.get('tenant_id_default', '')
        self.client_id = client_id or ''
        self.az_cli_credential = az_cli_credential
        self.environment = environment or ARM_ENDPOINT_DEFAULT
        self._credential = credential
        self._clients = clients

    @classmethod
    def main_add_parser_args(cls, ap_parser):
        '''
        See azwizard.common.Application.main_add_parser_args()
        '''
        super().main_add_parser_args(ap_parser)
        group = ap_parser.get_argument_group('subscription')
        group.add_argument('--subscription_id', type=str, default='default',
                           help='subscription ID on which to operate (default %(default)r)')
        group.add_argument('--tenant_id', type=str, default='',
                           help='Azure tenant_id')
        group.add_argument('--client_id', type=str, default='',
                           help='authenticate as this user-assigned managed identity')
        group.add_argument('--az_cli_credential', action='store_true',
                           help='authenticate only with the az login credential')
        group.add_argument('--environment', type=str, default=ARM_ENDPOINT_DEFAULT,
                           help='ARM endpoint (default %(default)s)')

    @property
    def credential(self):
        '''
        Getter. Generates the credential on first use.
        '''
        if self._credential is None:
            self._credential = credential_generate(client_id=self.client_id, use_cli=self.az_cli_credential, logger=self.logger)
        return self._credential

    @property
    def clients(self) -> ClientFactory:
        '''
        Getter. Generates the ClientFactory on first use.
        '''
        if self._clients is None:
            self._clients = ClientFactory(self.subscription_id,
                                          credential=self.credential,
                                          environment=self.environment,
                                          logger=self.logger,
                                          exc_value=self.exc_value)
        return self._clients

class ApplicationWithResourceGroup(ApplicationWithSubscription):
    '''
    Application that operates on a resource group
    '''
    def __init__(self, resource_group='', **kwargs):
        super().__init__(**kwargs)
        self.resource_group = resource_group or ''
        if self.resource_group and (not RE_RESOURCE_GROUP_ABS.search(self.resource_group)):
            raise self.exc_value("invalid resource_group name %r" % self.resource_group)
        if self.RESOURCE_GROUP_REQUIRED and (not self.resource_group):
            raise self.exc_value("'resource_group' not specified")

    RESOURCE_GROUP_HELP = 'resource group for resource group operations'
    RESOURCE_GROUP_REQUIRED = False

    @classmethod
    def main_add_parser_args(cls, ap_parser):
        '''
        See azwizard.common.Application.main_add_parser_args()
        '''
        super().main_add_parser_args(ap_parser)
        group = ap_parser.get_argument_group('resource group')
        group.add_argument('--resource_group', type=str, default='',
                           help=cls.RESOURCE_GROUP_HELP)
