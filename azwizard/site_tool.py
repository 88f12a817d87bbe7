#!/usr/bin/env python3
#
# azwizard/site_tool.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Command-line access to the files of one App Service site and to the
first-deploy delay.
'''
import time

import azwizard
from azwizard.base_defaults import FIRST_DEPLOY_DELAY_SECS
from azwizard.command import Command
import azwizard.common
from azwizard.deploy_delay import delay_first_web_app_deploy
from azwizard.exceptions import ApplicationExit
from azwizard.site_client import SiteClient
from azwizard.site_files import (SiteFileMetadata,
                                 get_file,
                                 list_files,
                                 put_file,
                                )
from azwizard.util import elapsed

command = Command()

class SiteTool(azwizard.common.ApplicationWithResourceGroup):
    '''
    Operate on the files of one site
    '''
    def __init__(self,
                 site='',
                 path='',
                 etag='',
                 data_file='',
                 site_client=None,
                 **kwargs):
        super().__init__(**kwargs)
        self.site = site or ''
        self.path = path or ''
        self.etag = etag or None
        self.data_file = data_file or ''
        self._site_client = site_client

    RESOURCE_GROUP_HELP = 'resource group of the site'
    RESOURCE_GROUP_REQUIRED = True

    @classmethod
    def main_add_parser_args(cls, ap_parser):
        '''
        See azwizard.common.Application.main_add_parser_args()
        '''
        super().main_add_parser_args(ap_parser)
        ap_parser.add_argument('action', type=str, choices=command.actions,
                               help='what to do')
        group = ap_parser.get_argument_group('site')
        group.add_argument('--site', type=str, default='',
                           help='name of the web app or function app')
        group.add_argument('--path', type=str, default='',
                           help="file path within the site (directories end with '/')")
        group.add_argument('--etag', type=str, default='',
                           help='etag for a conditional file_put')
        group.add_argument('--data_file', type=str, default='',
                           help='local file whose contents file_put uploads')

    ARGS_SAVE = ('action',
                )

    @property
    def site_client(self) -> SiteClient:
        '''
        Getter. Fetches the site on first use.
        '''
        if self._site_client is None:
            if not self.site:
                raise ApplicationExit("'site' not specified")
            self._site_client = SiteClient.from_name(self.clients, self.resource_group, self.site, logger=self.logger)
        return self._site_client

    def _path_required(self):
        '''
        Return self.path or raise ApplicationExit
        '''
        if not self.path:
            raise ApplicationExit("'path' not specified")
        return self.path

    @command.printable
    def file_get(self):
        '''
        Return the contents of the file at path
        '''
        site_file = get_file(self.site_client, self._path_required())
        self.logger.info("etag %s", site_file.etag)
        return site_file.data

    @command.printable
    def files_list(self):
        '''
        Return the directory listing at path as SiteFileMetadata
        '''
        path = self._path_required()
        if not path.endswith('/'):
            path += '/'
        return [SiteFileMetadata.from_dict(x) for x in list_files(self.site_client, path)]

    @command.printable
    def file_put(self):
        '''
        Upload data_file to path. Returns the new etag.
        '''
        path = self._path_required()
        if not self.data_file:
            raise ApplicationExit("'data_file' not specified")
        with open(self.data_file, 'rb') as f:
            data = f.read()
        return put_file(self.site_client, data, path, etag=self.etag)

    @command.printable
    def deploy_delay(self):
        '''
        Wait out the first-deploy delay for the site
        '''
        delay_secs = azwizard.scfg.get('first_deploy_delay_secs', FIRST_DEPLOY_DELAY_SECS)
        plan = self.site_client.get_app_service_plan()
        t0 = time.time()
        early = delay_first_web_app_deploy(self.site_client, plan, logger=self.logger, delay_secs=delay_secs)
        return {'site' : self.site_client.name,
                'early' : early,
                'elapsed' : round(elapsed(t0), 3),
               }

    def main_execute(self):
        '''
        See azwizard.common.Application.main_execute()
        '''
        action = self._args_saved['action']
        if not self.command.handle(action, 'printable', self):
            self.logger.error("Unknown action '%s'", action)
            raise ApplicationExit(1)
        raise ApplicationExit(0)

    command = None

SiteTool.command = command

def main():
    '''
    Console entrypoint
    '''
    SiteTool.main('__main__')

SiteTool.main(__name__)
