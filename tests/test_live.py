import threading
from contextlib import contextmanager

import pytest
import requests
from werkzeug.serving import make_server

from conftest import MEDIA_BYTES


@contextmanager
def _serving(app):
    server = make_server('127.0.0.1', 0, app, threaded=True)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    try:
        yield f'http://127.0.0.1:{server.server_port}'
    finally:
        server.shutdown()
        thread.join()


@pytest.fixture(scope='function')
def base_url(app):
    with _serving(app) as url:
        yield url


def test_streamed_download(base_url):
    with requests.get(f'{base_url}/api/media/clip.mp4', stream=True, timeout=10) as res:
        assert res.status_code == 200
        body = b''.join(res.iter_content(100))

    assert body == MEDIA_BYTES[:1000]
    assert res.headers['Content-Length'] == '1000'


def test_resume_download(base_url):
    url = f'{base_url}/api/media/clip.mp4'
    first = requests.get(url, headers={'Range': 'bytes=0-399'}, timeout=10)
    rest = requests.get(url, headers={'Range': f'bytes={len(first.content)}-'}, timeout=10)

    assert first.status_code == 206
    assert rest.status_code == 206
    assert rest.headers['Content-Range'] == 'bytes 400-999/1000'
    assert first.content + rest.content == MEDIA_BYTES[:1000]


def test_client_disconnect_does_not_break_server(base_url):
    res = requests.get(f'{base_url}/api/media/clip.mp4', stream=True, timeout=10)
    next(res.iter_content(10))
    res.close()

    again = requests.get(f'{base_url}/api/media/clip.mp4', headers={'Range': 'bytes=990-'}, timeout=10)
    assert again.status_code == 206
    assert again.content == MEDIA_BYTES[990:1000]
