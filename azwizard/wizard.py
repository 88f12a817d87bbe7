#
# azwizard/wizard.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Minimal wizard driver. Prompt steps gather input; execute steps
perform remote work in priority order.
'''
import logging
import time

from azwizard.util import elapsed

class Progress():
    '''
    Receives progress reports from execute steps.
    Reports are logged and kept in self.reports.
    '''
    def __init__(self, logger=None):
        self.logger = logger or logging.getLogger('azwizard')
        self.reports = list()

    def report(self, message=None, increment=None):
        '''
        Record one progress report
        '''
        self.reports.append({'message' : message, 'increment' : increment})
        if message:
            self.logger.debug("progress: %s", message)

class WizardPromptStep():
    '''
    A step that gathers input from the user
    '''
    def prompt(self, wizard_context):
        '''
        Prompt and update wizard_context
        '''
        raise NotImplementedError("%s does not implement prompt" % type(self).__name__)

    def should_prompt(self, wizard_context): # pylint: disable=unused-argument
        '''
        Return whether prompt() should be invoked
        '''
        return True

class WizardExecuteStep():
    '''
    A step that performs work. Lower priority runs first.
    '''
    priority = 0

    def execute(self, wizard_context, progress):
        '''
        Perform the work of this step
        '''
        raise NotImplementedError("%s does not implement execute" % type(self).__name__)

    def should_execute(self, wizard_context): # pylint: disable=unused-argument
        '''
        Return whether execute() should be invoked
        '''
        return True

class Wizard():
    '''
    Run prompt steps in the order given, then execute steps sorted
    by priority. A step whose predicate is false is skipped.
    Steps run one at a time; exceptions propagate.
    '''
    def __init__(self, wizard_context, prompt_steps=None, execute_steps=None, progress=None):
        self.wizard_context = wizard_context
        self.prompt_steps = list(prompt_steps or list())
        self.execute_steps = list(execute_steps or list())
        self.progress = progress or Progress(logger=wizard_context.logger)

    def prompt(self):
        '''
        Run prompt steps
        '''
        for step in self.prompt_steps:
            if step.should_prompt(self.wizard_context):
                step.prompt(self.wizard_context)

    def execute(self):
        '''
        Run execute steps. Returns the names of the steps that ran.
        '''
        logger = self.wizard_context.logger
        ran = list()
        # sorted() is stable, so equal priorities keep their given order
        for step in sorted(self.execute_steps, key=lambda x: x.priority):
            name = type(step).__name__
            if not step.should_execute(self.wizard_context):
                logger.debug("%s: skip (should_execute is false)", name)
                continue
            t0 = time.time()
            step.execute(self.wizard_context, self.progress)
            logger.debug("%s: complete in %.3f", name, elapsed(t0))
            ran.append(name)
        return ran

    def run(self):
        '''
        Prompt, then execute
        '''
        self.prompt()
        return self.execute()
