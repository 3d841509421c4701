import pytest

from backend.app import app as flask_app


MEDIA_BYTES = bytes(range(256)) * 4  # 1000+ bytes with distinct neighbours


@pytest.fixture(scope='function')
def media_dir(tmp_path):
    (tmp_path / 'clip.mp4').write_bytes(MEDIA_BYTES[:1000])
    (tmp_path / 'empty.bin').write_bytes(b'')
    (tmp_path / 'notes.unknownext').write_bytes(b'0123456789')
    (tmp_path / 'albums').mkdir()
    (tmp_path / 'albums' / 'track.mp3').write_bytes(MEDIA_BYTES[:300])
    return tmp_path


@pytest.fixture(scope='function')
def app(media_dir):
    flask_app.config.update(TESTING=True, MEDIA_DIR=str(media_dir), CHUNK_SIZE=64)
    yield flask_app


@pytest.fixture(scope='function')
def client(app):
    return app.test_client()
