#
# azwizard/kudu.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Client for the Kudu (scm) site-management REST API.
Only the operations used here are implemented: VFS get/put and
the deployments list.
'''
import urllib.parse

from azwizard.clients import BearerSession

class KuduClient(BearerSession):
    '''
    Kudu REST API for one site. base_url is the scm endpoint
    (https://<site>.scm.azurewebsites.net).
    '''
    def __init__(self, credential, base_url, scope, logger=None, session=None):
        super().__init__(credential, scope, logger=logger, session=session)
        self.base_url = base_url.rstrip('/')

    def __repr__(self):
        return "%s(%r)" % (type(self).__name__, self.base_url)

    def url_for(self, path):
        '''
        Return the absolute URL for Kudu API path (for example, api/deployments)
        '''
        return self.base_url + '/' + path.lstrip('/')

    @staticmethod
    def vfs_path(path):
        '''
        Return the api/vfs/ sub-path for file path
        '''
        return 'api/vfs/' + urllib.parse.quote(path.lstrip('/'), safe='/')

    def vfs_get_item(self, path):
        '''
        GET a file or directory listing. Returns requests.Response.
        A directory path must end with '/'.
        '''
        return self.request('GET', self.url_for(self.vfs_path(path)))

    def vfs_put_item(self, data, path, etag=None):
        '''
        PUT a file. With etag, the write is conditional (If-Match) and
        fails with 412 if the file changed. Without etag, the file is
        created or overwritten. Returns requests.Response.
        '''
        headers = dict()
        if etag:
            headers['If-Match'] = etag
        if isinstance(data, str):
            data = data.encode('utf-8')
        return self.request('PUT', self.url_for(self.vfs_path(path)), headers=headers, data=data)

    def deployment_results(self) -> list:
        '''
        Return the list of deployments recorded for the site
        '''
        resp = self.request('GET', self.url_for('api/deployments'))
        ret = resp.json()
        if not isinstance(ret, list):
            return list()
        return ret
