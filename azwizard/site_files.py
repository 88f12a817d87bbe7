#
# azwizard/site_files.py
#
# Copyright (c) Microsoft Corporation. All rights reserved.
# Licensed under the MIT License.
#
'''
Read, list, and write files on an App Service site.

Kudu does not work for Linux consumption function apps, and the ARM
hostruntime VFS does not work for web apps, so reads go through the
hostruntime VFS for function apps and through Kudu for everything else.
Writes always go through Kudu.
'''
import posixpath

from azwizard.base_defaults import (HOSTRUNTIME_API_VERSION,
                                    LINUX_HOME,
                                   )
from azwizard.exceptions import SiteClientTypeError
from azwizard.site_client import SiteClient

class SiteFile():
    '''
    Contents of one remote file plus its etag
    '''
    def __init__(self, data, etag):
        self.data = data
        self.etag = etag

    def __repr__(self):
        return "%s(<%d chars>, etag=%r)" % (type(self).__name__, len(self.data or ''), self.etag)

class SiteFileMetadata():
    '''
    One entry from a VFS directory listing
    '''
    def __init__(self, name, path, mime='', size=None, mtime=None, raw=None):
        self.name = name
        self.path = path
        self.mime = mime
        self.size = size
        self.mtime = mtime
        self.raw = raw if raw is not None else dict()

    def __repr__(self):
        return "%s(%r, %r, mime=%r)" % (type(self).__name__, self.name, self.path, self.mime)

    @classmethod
    def from_dict(cls, d):
        '''
        Build from a listing entry such as
          {"name": "host.json", "path": "/home/site/wwwroot/host.json", "mime": "application/json", "size": 2, "mtime": "..."}
        '''
        return cls(d.get('name', ''),
                   d.get('path', ''),
                   mime=d.get('mime', ''),
                   size=d.get('size', None),
                   mtime=d.get('mtime', None),
                   raw=d)

    @property
    def is_directory(self):
        '''
        Return whether this entry is a directory
        '''
        return self.mime == 'inode/directory'

def hostruntime_vfs_path(site_client, path):
    '''
    Return the ARM path (no host) for path in the function host runtime VFS.
    On Linux, paths are rooted at /home.
    '''
    if site_client.is_linux and (not path.startswith(LINUX_HOME)):
        path = posixpath.join(LINUX_HOME, path.lstrip('/'))
    return f"{site_client.id}/hostruntime/admin/vfs/{path.lstrip('/')}?api-version={HOSTRUNTIME_API_VERSION}"

def _fs_response(site_client, path):
    '''
    GET path and return the requests.Response
    '''
    if getattr(site_client, 'is_function_app', False):
        if not isinstance(site_client, SiteClient):
            raise SiteClientTypeError('Internal Error: Expected client to be of type SiteClient.')
        return site_client.clients.arm_rest_client.send_request('GET', hostruntime_vfs_path(site_client, path))
    return site_client.kudu_client().vfs_get_item(path)

def get_file(site_client, path) -> SiteFile:
    '''
    Return the contents and etag of the file at path
    '''
    resp = _fs_response(site_client, path)
    return SiteFile(resp.text, resp.headers.get('etag', None))

def list_files(site_client, path) -> list:
    '''
    Return the directory listing at path as a list of dicts.
    Anything other than a JSON list yields an empty list.
    '''
    resp = _fs_response(site_client, path)
    try:
        ret = resp.json()
    except ValueError:
        return list()
    if isinstance(ret, list):
        return ret
    return list()

def put_file(site_client, data, path, etag=None):
    '''
    Overwrite or create the file at path. etag is None when creating
    a new file; otherwise the write only succeeds if the file still
    has that etag. Returns the new etag.
    '''
    resp = site_client.kudu_client().vfs_put_item(data, path, etag=etag)
    return resp.headers.get('etag', None)
