from __future__ import annotations

import io

from fastapi.testclient import TestClient
from PIL import Image
import pytest

from medialib.domain.media import MediaCollection, MediaConversion
from medialib.domain.registry import MediaRegistry
from medialib.presentation import api


def _image_bytes(width: int = 20, height: int = 20) -> bytes:
    img = Image.new('RGB', (width, height), 'white')
    out = io.BytesIO()
    img.save(out, format='PNG')
    return out.getvalue()


@pytest.fixture
def registry(monkeypatch) -> MediaRegistry:
    logo = (
        MediaCollection('logo')
        .accepts_mime_types(['image/jpeg', 'image/png'])
        .register_media_conversions(
            MediaConversion('admin-panel').crop(100, 140),
            MediaConversion('mail').crop(120, 100),
        )
    )
    documents = (
        MediaCollection('documents')
        .accepts_mime_types(['application/pdf'])
        .register_media_conversions(MediaConversion('preview').crop(20, 80))
    )
    registry = MediaRegistry(
        collections=(logo, documents, MediaCollection('avatar')),
        global_conversions=(MediaConversion('thumb').crop(40, 40),),
    )
    monkeypatch.setattr(api, 'registry', registry)
    return registry


def test_health() -> None:
    client = TestClient(api.app)
    res = client.get('/api/health')
    assert res.status_code == 200
    assert res.json()['status'] == 'ok'
    assert res.headers['x-request-id']


def test_request_id_is_echoed() -> None:
    client = TestClient(api.app)
    res = client.get('/api/health', headers={'x-request-id': 'req-1'})
    assert res.headers['x-request-id'] == 'req-1'


def test_rules_for_collection(registry) -> None:
    client = TestClient(api.app)

    assert client.get('/api/collections/logo/rules').json() == {
        'collection': 'logo',
        'rules': 'dimensions:min_width=120,min_height=140',
    }
    assert client.get('/api/collections/avatar/rules').json()['rules'] == 'dimensions:min_width=40,min_height=40'
    assert client.get('/api/collections/documents/rules').json()['rules'] == ''


def test_rules_for_unknown_collection_are_empty(registry) -> None:
    client = TestClient(api.app)
    res = client.get('/api/collections/banner/rules')
    assert res.status_code == 200
    assert res.json()['rules'] == ''


def test_list_collections(registry) -> None:
    client = TestClient(api.app)
    body = client.get('/api/collections').json()

    assert body['global_conversions'] == ['thumb']
    by_name = {item['name']: item for item in body['items']}
    assert by_name['logo']['conversions'] == ['admin-panel', 'mail']
    assert by_name['documents']['image_typed'] is False
    assert by_name['avatar']['mime_types'] == []


def test_validate_accepts_large_enough_image(registry) -> None:
    client = TestClient(api.app)
    res = client.post(
        '/api/collections/logo/validate',
        files={'file': ('a.png', _image_bytes(120, 140), 'image/png')},
    )

    assert res.status_code == 200
    assert res.json() == {
        'width': 120,
        'height': 140,
        'format': 'PNG',
        'rules': 'dimensions:min_width=120,min_height=140',
    }


def test_validate_rejects_small_image(registry) -> None:
    client = TestClient(api.app)
    res = client.post(
        '/api/collections/logo/validate',
        files={'file': ('a.png', _image_bytes(119, 140), 'image/png')},
    )

    assert res.status_code == 422
    assert 'width 119px' in res.json()['detail']


def test_validate_rejects_unaccepted_type(registry) -> None:
    client = TestClient(api.app)
    res = client.post(
        '/api/collections/logo/validate',
        files={'file': ('a.txt', b'hello', 'text/plain')},
    )

    assert res.status_code == 415


def test_validate_unknown_collection(registry) -> None:
    client = TestClient(api.app)
    res = client.post(
        '/api/collections/banner/validate',
        files={'file': ('a.png', _image_bytes(), 'image/png')},
    )

    assert res.status_code == 404


def test_validate_non_image_upload_skips_measurement(registry) -> None:
    client = TestClient(api.app)
    res = client.post(
        '/api/collections/documents/validate',
        files={'file': ('a.pdf', b'%PDF-1.4', 'application/pdf')},
    )

    assert res.status_code == 200
    assert res.json()['width'] is None


def test_validate_rejects_too_large_upload(registry, monkeypatch) -> None:
    monkeypatch.setattr(api.settings, 'max_upload_bytes', 10)
    client = TestClient(api.app)
    res = client.post(
        '/api/collections/avatar/validate',
        files={'file': ('a.png', _image_bytes(), 'image/png')},
    )

    assert res.status_code == 413


def test_metrics_endpoint(registry) -> None:
    client = TestClient(api.app)
    client.get('/api/collections/logo/rules')
    res = client.get('/api/metrics')
    assert res.status_code == 200
    body = res.json()
    assert 'timestamp' in body
    assert body['rules_resolved_total'] >= 1
    assert body['collections_registered'] == 3


def test_prometheus_metrics() -> None:
    client = TestClient(api.app)
    res = client.get('/api/metrics/prometheus')
    assert res.status_code == 200
    assert 'medialib_' in res.text


def test_api_area() -> None:
    assert api._api_area('/api/collections/logo/rules') == 'collections'
    assert api._api_area('/api/health') == 'health'
    assert api._api_area('/api/') == 'root'


def test_rate_limit_returns_429_with_request_id(monkeypatch) -> None:
    monkeypatch.setattr(api.settings, 'rate_limit_per_minute', 1)
    before = api.metrics.counter('rate_limited_health_total')
    client = TestClient(api.app)

    client.get('/api/health')
    res = client.get('/api/health', headers={'x-request-id': 'req-limited'})

    assert res.status_code == 429
    assert res.headers['x-request-id'] == 'req-limited'
    assert 'Rate limit' in res.json()['detail']
    assert api.metrics.counter('rate_limited_health_total') > before
