#
# azwizard/command.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Implement the Command class which handles @command decorators.
'''
import functools

from azwizard.util import expand_item_pformat

class Command():
    '''
    Manage decorators for an application.
    These decorators expose actions through the command line
    by defining and decorating the handler without touching
    other argument parsing.
    '''
    def __init__(self):
        self._commands = dict() # key=name value=_Item

    RESERVED_NAMES = ('actions',
                      'handle',
                      'print',
                     )

    @property
    def actions(self):
        '''
        Getter that returns a lexically-sorted list of
        handler names.
        '''
        return sorted(self._commands.keys())

    @classmethod
    def _name_valid(cls, name):
        '''
        Return whether name is usable as a decoration.
        Leading underscores and RESERVED_NAMES are not allowed
        so decorations cannot shadow the internals of this class.
        '''
        if not isinstance(name, str):
            return False
        if not name:
            return False
        if name.startswith('_'):
            return False
        if name in cls.RESERVED_NAMES:
            return False
        return True

    def __getattr__(self, name):
        '''
        If name is not internal to this class, treat it as a decorator.
        '''
        if not self._name_valid(name):
            raise AttributeError("'%s' object has no attribute '%s'" % (type(self).__name__, name))
        return functools.partial(self._decorate, name)

    def _decorate(self, decorator, func):
        '''
        Register func under decorator. For example:
            command = Command()
            @command.simple
            def some_func():
        generates _decorate('simple', some_func)
        '''
        ci = _Item(decorator, func, printable=decorator.startswith('printable'))
        if not self._name_valid(ci.name):
            raise ValueError("may not decorate using reserved name %r" % ci.name)
        if ci.name in self._commands:
            raise ValueError("duplicate command %r" % ci.name)
        self._commands[ci.name] = ci
        return ci.func

    def _handle(self, name, decorators, *args, **kwargs):
        '''
        Try provided decorators until one is found or there is nothing left to try.
        '''
        if isinstance(decorators, str):
            return self._handle_one(name, decorators, *args, **kwargs)
        for decorator in decorators:
            if self._handle_one(name, decorator, *args, **kwargs):
                return True
        return False

    def _handle_one(self, name, decorator, *args, **kwargs):
        '''
        Invoke the registered handler for name.
        If no handler is registered, return False.
        If a handler is registered, return True.
        '''
        ci = self._commands.get(name, None)
        if not (ci and ci.decorator == decorator):
            return False
        ret = ci.func(*args, **kwargs)
        if ci.printable:
            self.print(ret)
        return True

    @staticmethod
    def print(item):
        '''
        print() the given item
        '''
        if isinstance(item, (list, set, tuple)):
            for x in item:
                if isinstance(x, str):
                    print(x)
                else:
                    print(expand_item_pformat(x, prefix=''))
        elif isinstance(item, str):
            print(item)
        else:
            print(expand_item_pformat(item, prefix=''))

    def handle(self, name, decorators, *args, **kwargs):
        '''
        Invoke the registered handler for name.
        decorators may be a single string or something iterable.
        Decorators are tried in order until a match is found.
        Returns whether a handler ran.
        '''
        return self._handle(name, decorators, *args, **kwargs)

class _Item():
    '''
    A single decorated call managed by Command
    '''
    def __init__(self, decorator, func, printable=False):
        self.decorator = decorator
        self.func = func
        self.printable = printable
        self.name = self.func.__name__

    def __repr__(self):
        return "%s(%r, %r, printable=%r)" % (type(self).__name__, self.decorator, self.func, self.printable)
