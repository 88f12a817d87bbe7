#
# azwizard/ui.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
User-facing prompt surface used by wizard steps.
WizardUI defines the operations; ConsoleUI implements them on a terminal.
'''
import sys

from azwizard.exceptions import UserCancelledError

class MessageItem():
    '''
    A button-like choice attached to a message
    '''
    def __init__(self, title):
        self.title = title

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.title)

class QuickPickItem():
    '''
    One choice in a quick pick. data is returned to the caller untouched.
    '''
    def __init__(self, label, description='', data=None):
        self.label = label
        self.description = description
        self.data = data

    def __repr__(self):
        return "%s(%r, description=%r)" % (type(self).__name__, self.label, self.description)

class WizardUI():
    '''
    Base class for prompting. Each operation either returns the
    user's choice or raises UserCancelledError.
    '''
    def show_warning_message(self, message, *items, modal=False):
        '''
        Display message with the given MessageItem choices.
        Return the chosen item.
        '''
        raise NotImplementedError("%s does not implement show_warning_message" % type(self).__name__)

    def show_quick_pick(self, items, placeholder=''):
        '''
        Return the chosen QuickPickItem
        '''
        raise NotImplementedError("%s does not implement show_quick_pick" % type(self).__name__)

    def show_input_box(self, prompt, validate=None):
        '''
        Return the entered text. validate(text) returns an error string or None.
        '''
        raise NotImplementedError("%s does not implement show_input_box" % type(self).__name__)

class ConsoleUI(WizardUI):
    '''
    WizardUI on stdin/stdout. An empty response or EOF cancels.
    '''
    def __init__(self, stdin=None, stdout=None):
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout

    def _readline(self, prompt):
        '''
        Prompt and return one stripped line
        '''
        self.stdout.write(prompt)
        self.stdout.flush()
        line = self.stdin.readline()
        if not line:
            raise UserCancelledError()
        return line.strip()

    def _choose(self, labels, prompt):
        '''
        Present numbered labels and return the chosen index
        '''
        for idx, label in enumerate(labels, start=1):
            self.stdout.write("  %d) %s\n" % (idx, label))
        while True:
            txt = self._readline(prompt)
            if not txt:
                raise UserCancelledError()
            try:
                idx = int(txt)
            except ValueError:
                self.stdout.write("enter a number from 1 to %d\n" % len(labels))
                continue
            if 1 <= idx <= len(labels):
                return idx - 1
            self.stdout.write("enter a number from 1 to %d\n" % len(labels))

    def show_warning_message(self, message, *items, modal=False):
        '''
        See WizardUI.show_warning_message()
        '''
        self.stdout.write("WARNING: %s\n" % message)
        if not items:
            return None
        if modal:
            labels = [x.title for x in items] + ['Cancel']
            idx = self._choose(labels, 'choice: ')
            if idx == len(items):
                raise UserCancelledError()
            return items[idx]
        return items[self._choose([x.title for x in items], 'choice: ')]

    def show_quick_pick(self, items, placeholder=''):
        '''
        See WizardUI.show_quick_pick()
        '''
        if not items:
            raise UserCancelledError('nothing to pick from')
        if placeholder:
            self.stdout.write("%s\n" % placeholder)
        labels = ["%s  %s" % (x.label, x.description) if x.description else x.label for x in items]
        return items[self._choose(labels, 'choice: ')]

    def show_input_box(self, prompt, validate=None):
        '''
        See WizardUI.show_input_box()
        '''
        while True:
            txt = self._readline("%s: " % prompt)
            if not txt:
                raise UserCancelledError()
            err = validate(txt) if validate else None
            if not err:
                return txt
            self.stdout.write("%s\n" % err)
