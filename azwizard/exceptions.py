#
# azwizard/exceptions.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Exception classes shared across azwizard modules
'''

class ApplicationException(Exception):
    '''
    Base class for application exceptions
    '''

class ApplicationExit(ApplicationException):
    '''
    This is interpreted as SystemExit, but it inherits from ApplicationException
    and not SystemExit. That makes it part of the Exception hierarchy
    and not BaseException.
    '''
    def __init__(self, code):
        self.code = code
        super().__init__(str(self.code))

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.code)

    def __str__(self):
        return str(self.code)

class ApplicationExitWithNote(ApplicationExit):
    '''
    Subclass of ApplicationExit with an extra note attached.
    Subclassed rather than making note a kwarg to simplify
    exception handling and chaining.
    '''
    def __init__(self, code, note):
        super().__init__(code)
        self.note = note or ''

    def __repr__(self):
        if self.note:
            return "%s(%r, note=%r)" % (type(self).__name__, self.code, self.note)
        return "%s(%r)" % (type(self).__name__, self.code)

    def __str__(self):
        if self.note:
            return "%s [%s]" % (self.code, self.note)
        return str(self.code)

class ConfigNotFoundError(ApplicationExit):
    '''
    Special case of ApplicationExit used to indicate that
    the exit reason is that the config file is not found.
    '''
    # no specialization here

class WizardContextMissingValue(ApplicationException):
    '''
    A wizard step needs a context value that is not populated.
    '''
    def __init__(self, name, step=''):
        self.name = name
        self.step = step
        if step:
            txt = "%s: wizard context value %r is not set" % (step, name)
        else:
            txt = "wizard context value %r is not set" % name
        super().__init__(txt)

class UserCancelledError(ApplicationException):
    '''
    The user dismissed a prompt
    '''
    def __init__(self, txt='Operation cancelled.'):
        super().__init__(txt)

class SiteClientTypeError(ApplicationException, TypeError):
    '''
    A site operation was handed something that is not a SiteClient
    '''
    # no specialization here
