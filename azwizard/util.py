#
# azwizard/util.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Various utility functions and classes.
'''
import argparse
import collections
import datetime
import enum
import inspect
import logging
import pprint
import sys
import time
import uuid

from azwizard.base_defaults import (EXC_VALUE_DEFAULT,
                                    PF,
                                   )

def re_abs(txt):
    '''
    Given regexp text, return a string that is that
    same regexp with begin and end applied.
    '''
    return '^' + txt + '$'

class ArgumentParser(argparse.ArgumentParser):
    '''
    argparse.ArgumentParser with extended operations
    '''
    def get_argument_group(self, group_name, *args, **kwargs):
        '''
        Return the named argument group, creating it if necessary
        '''
        for ag in self._action_groups:
            if isinstance(ag, argparse._ArgumentGroup) and (ag.title == group_name): # pylint: disable=protected-access
                return ag
        return self.add_argument_group(group_name, *args, **kwargs)

def getframename(idx):
    '''
    Return a string that is the name of the caller
    '''
    f = sys._getframe(idx+1) # pylint: disable=protected-access
    return f.f_code.co_name

def getframe(idx):
    '''
    Return a string of the form caller_name:linenumber.
    idx is the number of frames up the stack, so 1 = immediate caller.
    '''
    f = sys._getframe(idx+1) # pylint: disable=protected-access
    return "%s:%s" % (f.f_code.co_name, f.f_lineno)

def expand_item(item, expand_enum=False, include_callable=True):
    '''
    For printing, dictify an arbitrary item.
    SDK models are expanded through as_dict() when they have one.
    '''
    return _expand_item(item, 0, set(), expand_enum, include_callable)

def _expand_item(item, depth, sawids, expand_enum, include_callable):
    '''
    Recursive portion of expand_item().
    depth: Recursion depth for this logical call.
    sawids: Set of object identities observed here or above in the stack.
            Used to avoid circularity.
    '''
    sawids = set(sawids)
    if id(item) in sawids:
        return "SEEN %r" % item
    sawids.add(id(item))
    depth += 1
    if depth >= 500:
        return item
    if item is None:
        return item
    if isinstance(item, logging.Logger):
        return repr(item)
    if isinstance(item, enum.Enum):
        if expand_enum:
            return item.value
        return item
    if isinstance(item, (bool, bytearray, bytes, complex, datetime.datetime, float, int, memoryview, range, str)):
        return item
    if any([inspect.isclass(item), inspect.isgenerator(item), inspect.ismodule(item), inspect.isroutine(item)]):
        return repr(item)
    r_args = (depth, sawids, expand_enum, include_callable)
    if isinstance(item, (frozenset, list, set, tuple)):
        if include_callable:
            tmp = [_expand_item(x, *r_args) for x in item]
        else:
            tmp = [_expand_item(x, *r_args) for x in item if not callable(x)]
        if isinstance(item, tuple):
            return tuple(tmp)
        return tmp
    if isinstance(item, (collections.OrderedDict, collections.defaultdict)):
        ret = collections.OrderedDict()
    elif isinstance(item, dict):
        ret = dict()
    else:
        ret = dict()
        as_dict = getattr(item, 'as_dict', None)
        if callable(as_dict):
            try:
                item = as_dict()
            except Exception:
                return repr(item)
        else:
            try:
                item = vars(item)
            except Exception:
                return repr(item)
    for k, v in item.items():
        if (not include_callable) and callable(v):
            continue
        ek = _expand_item(k, *r_args)
        ev = _expand_item(v, *r_args)
        try:
            ret[ek] = ev
        except TypeError:
            ret[repr(ek)] = ev
    return ret

def indent_pformat(item, prefix=PF):
    '''
    Like pprint.pformat(item), but prepends prefix to each line.
    '''
    sep = '\n' + prefix
    tmp1 = item if isinstance(item, str) else pprint.pformat(item)
    tmp2 = sep.join(tmp1.splitlines())
    return prefix + tmp2

def expand_item_pformat(item, prefix=PF, expand_enum=False):
    '''
    Like pprint.pformat(expand_item(item)), but prepends prefix to each line.
    '''
    return indent_pformat(expand_item(item, expand_enum=expand_enum), prefix=prefix)

def elapsed(ts0, ts1=None):
    '''
    Return the amount of time elapsed since ts0.
    If ts1 is provided, this is the time elapsed from ts0 to ts1.
    If ts1 is not provided, this is the time elapsed from ts0 to now.
    '''
    if ts1 is None:
        ts1 = time.time()
    return max(ts1 - ts0, 0.0)

def log_level_normalize(log_level) -> int:
    '''
    Given log_level as an int or as a name such as 'info',
    return the numeric level.
    '''
    if isinstance(log_level, bool):
        raise TypeError("invalid log_level type %s" % type(log_level).__name__)
    if isinstance(log_level, int):
        return log_level
    if isinstance(log_level, str):
        tmp = log_level.strip()
        if tmp.isdigit():
            return int(tmp)
        ret = logging.getLevelName(tmp.upper())
        if isinstance(ret, int):
            return ret
        raise ValueError("invalid log_level %r" % log_level)
    raise TypeError("invalid log_level type %s" % type(log_level).__name__)

def uuid_normalize(val, key='uuid', exc_value=EXC_VALUE_DEFAULT) -> str:
    '''
    Return a normalized representation of a uuid.
    Normalized is a string as generated by uuid.UUID.__str__
    '''
    err = f'invalid {key}'
    if isinstance(val, str):
        try:
            return str(uuid.UUID(val.strip()))
        except Exception as exc:
            if exc_value:
                raise exc_value(f"{err}: {exc!r}") from exc
            return ''
    if isinstance(val, uuid.UUID):
        return str(val)
    if exc_value:
        raise exc_value("%s: unexpected type %s" % (err, type(val)))
    return ''
