"""Test attendance and QR endpoints."""
import json
from datetime import timedelta

import pytest

from attendance_engine import db
from attendance_engine.models import AttendanceRecord
from attendance_engine.services.face_verifier import StaticFaceVerifier
from conftest import ROOM_SSID, SESSION_END, auth_headers


@pytest.fixture
def ready(client, class_session, participant, enrollment):
    return client


def check_in(client, user, body):
    return client.post('/api/attendance/check-in', json=body, headers=auth_headers(user))


def issue(client, user, body):
    return client.post('/api/qr/issue', json=body, headers=auth_headers(user))


def test_health_check(client):
    """Test app and blueprint health endpoints."""
    response = client.get('/health')
    assert response.status_code == 200
    assert json.loads(response.data)['status'] == 'healthy'

    response = client.get('/api/attendance/health')
    assert json.loads(response.data)['message'] == 'Attendance service is running'

    response = client.get('/api/qr/health')
    assert json.loads(response.data)['message'] == 'QR service is running'


def test_swagger_spec_is_served(client):
    response = client.get('/api/swagger.json')
    assert response.status_code == 200
    assert '/attendance/check-in' in json.loads(response.data)['paths']


def test_check_in_requires_token(ready, class_session):
    response = ready.post('/api/attendance/check-in', json={'sessionId': class_session.id, 'method': 'WIFI'})
    assert response.status_code == 401
    assert json.loads(response.data)['error'] is True


def test_check_in_with_inactive_user(ready, class_session, participant):
    headers = auth_headers(participant)
    participant.is_active = False
    db.session.commit()

    response = ready.post('/api/attendance/check-in',
                          json={'sessionId': class_session.id, 'method': 'WIFI'}, headers=headers)
    assert response.status_code == 401


def test_wifi_check_in(ready, class_session, participant):
    """Test successful WiFi check-in."""
    response = check_in(ready, participant, {
        'sessionId': class_session.id,
        'method': 'WIFI',
        'observedSSID': ROOM_SSID
    })

    assert response.status_code == 201
    data = json.loads(response.data)
    assert data['error'] is False
    assert data['message'] == 'Attendance recorded successfully. Status: PRESENT'
    assert data['data']['method'] == 'WIFI'
    assert data['data']['status'] == 'PRESENT'
    assert data['data']['date'] == '2026-03-02'


def test_face_and_wifi_check_in(ready, class_session, participant, profile):
    response = check_in(ready, participant, {
        'sessionId': class_session.id,
        'methods': ['face', 'wifi'],
        'faceSample': [0.1, 0.2, 0.3, 0.4],
        'observedSSID': ROOM_SSID,
        'coordinates': {'latitude': 33.3152, 'longitude': 44.3661}
    })

    assert response.status_code == 201
    data = json.loads(response.data)['data']
    assert data['method'] == 'FACE+WIFI'
    assert data['confidence'] == pytest.approx(0.95)


def test_duplicate_check_in_is_conflict(ready, class_session, participant):
    body = {'sessionId': class_session.id, 'method': 'WIFI', 'observedSSID': ROOM_SSID}
    assert check_in(ready, participant, body).status_code == 201

    response = check_in(ready, participant, body)

    assert response.status_code == 409
    data = json.loads(response.data)
    assert data['kind'] == 'DuplicateCheckIn'
    assert AttendanceRecord.query.count() == 1


def test_check_in_not_enrolled(ready, class_session, outsider):
    response = check_in(ready, outsider, {
        'sessionId': class_session.id, 'method': 'WIFI', 'observedSSID': ROOM_SSID
    })

    assert response.status_code == 403
    assert json.loads(response.data)['kind'] == 'NotEnrolled'


def test_check_in_unknown_session(ready, participant):
    response = check_in(ready, participant, {'sessionId': 9999, 'method': 'WIFI', 'observedSSID': ROOM_SSID})

    assert response.status_code == 404
    assert json.loads(response.data)['kind'] == 'SessionInactive'


def test_check_in_after_window(ready, class_session, participant, clock):
    clock.set(SESSION_END + timedelta(minutes=16))

    response = check_in(ready, participant, {
        'sessionId': class_session.id, 'method': 'WIFI', 'observedSSID': ROOM_SSID
    })

    assert response.status_code == 400
    data = json.loads(response.data)
    assert data['kind'] == 'OutOfWindow'
    assert 'closes_at' in data


def test_face_mismatch_reports_confidence(ready, class_session, participant, profile, engine):
    engine.checkin.face_verifier = StaticFaceVerifier(matched=False, confidence=0.42)

    response = check_in(ready, participant, {
        'sessionId': class_session.id, 'method': 'FACE', 'faceSample': [0.1, 0.2, 0.3, 0.4]
    })

    assert response.status_code == 400
    data = json.loads(response.data)
    assert data['kind'] == 'FaceMismatch'
    assert data['confidence'] == pytest.approx(0.42)


def test_wrong_network(ready, class_session, participant):
    response = check_in(ready, participant, {
        'sessionId': class_session.id, 'method': 'WIFI', 'observedSSID': 'Elsewhere'
    })

    assert response.status_code == 400
    assert json.loads(response.data)['kind'] == 'LocationMismatch'


@pytest.mark.parametrize('body', [
    {'method': 'WIFI', 'observedSSID': ROOM_SSID},
    {'sessionId': 'one', 'method': 'WIFI'},
    {'sessionId': 1},
    {'sessionId': 1, 'method': 'SMOKE_SIGNAL'},
    {'sessionId': 1, 'method': 'QR+WIFI', 'qrToken': 'x'},
    {'sessionId': 1, 'method': 'FACE', 'faceSample': 'not-a-list'},
    {'sessionId': 1, 'method': 'WIFI', 'coordinates': {'latitude': 200, 'longitude': 0}},
    {'method': 'QR'},
])
def test_check_in_validation(ready, participant, body):
    """Test check-in request validation."""
    response = check_in(ready, participant, body)

    assert response.status_code == 400
    assert json.loads(response.data)['kind'] == 'ValidationError'


def test_check_in_rejects_non_json_body(ready, participant):
    response = ready.post('/api/attendance/check-in', data='nope', headers=auth_headers(participant))

    assert response.status_code == 400


def test_qr_issue_and_redeem(ready, class_session, owner, participant):
    """Test QR issue by owner and redemption by participant."""
    response = issue(ready, owner, {'sessionId': class_session.id, 'ttlSeconds': 120})

    assert response.status_code == 201
    data = json.loads(response.data)['data']
    assert data['expiresIn'] == 120
    assert data['sessionId'] == class_session.id
    assert data['qrImage'].startswith('data:image/png;base64,')

    response = ready.post('/api/qr/redeem', json={'token': data['token']}, headers=auth_headers(participant))

    assert response.status_code == 201
    body = json.loads(response.data)
    assert body['message'] == 'Attendance recorded successfully via QR code'
    assert body['data']['method'] == 'QR'

    response = ready.post('/api/qr/redeem', json={'token': data['token']}, headers=auth_headers(participant))
    assert response.status_code == 400
    assert json.loads(response.data)['kind'] == 'TokenNotFound'


def test_qr_check_in_through_check_in_endpoint(ready, class_session, owner, participant):
    token = json.loads(issue(ready, owner, {'sessionId': class_session.id}).data)['data']['token']

    response = check_in(ready, participant, {
        'sessionId': class_session.id, 'method': 'QR', 'qrToken': token
    })

    assert response.status_code == 201
    assert json.loads(response.data)['data']['qr_token'] == token


def test_expired_qr_token(ready, class_session, owner, participant, clock):
    token = json.loads(issue(ready, owner, {'sessionId': class_session.id}).data)['data']['token']
    clock.advance(seconds=301)

    response = ready.post('/api/qr/redeem', json={'token': token}, headers=auth_headers(participant))

    assert response.status_code == 400
    assert json.loads(response.data)['kind'] == 'TokenExpired'


def test_qr_issue_requires_owner_role(ready, class_session, participant):
    response = issue(ready, participant, {'sessionId': class_session.id})

    assert response.status_code == 403


def test_qr_issue_for_someone_elses_session(ready, class_session, other_owner):
    response = issue(ready, other_owner, {'sessionId': class_session.id})

    assert response.status_code == 403
    assert json.loads(response.data)['kind'] == 'NotAuthorized'


def test_qr_issue_ttl_out_of_range(ready, class_session, owner):
    response = issue(ready, owner, {'sessionId': class_session.id, 'ttlSeconds': 10})

    assert response.status_code == 400


def test_qr_redeem_requires_token(ready, participant):
    response = ready.post('/api/qr/redeem', json={}, headers=auth_headers(participant))

    assert response.status_code == 400


def test_session_aggregate(ready, class_session, owner, participant):
    check_in(ready, participant, {'sessionId': class_session.id, 'method': 'WIFI', 'observedSSID': ROOM_SSID})

    response = ready.get(f'/api/attendance/sessions/{class_session.id}/aggregate?day=2026-03-02',
                         headers=auth_headers(owner))

    assert response.status_code == 200
    data = json.loads(response.data)['data']
    assert data == {
        'session_id': class_session.id,
        'day': '2026-03-02',
        'enrolled': 1,
        'present': 1,
        'rate': 1.0,
        'updated_at': data['updated_at']
    }


def test_session_aggregate_for_admin(ready, class_session, admin):
    response = ready.get(f'/api/attendance/sessions/{class_session.id}/aggregate', headers=auth_headers(admin))

    assert response.status_code == 200
    assert json.loads(response.data)['data']['present'] == 0


def test_session_aggregate_forbidden_for_participant(ready, class_session, participant):
    response = ready.get(f'/api/attendance/sessions/{class_session.id}/aggregate',
                         headers=auth_headers(participant))

    assert response.status_code == 403


def test_session_aggregate_bad_day(ready, class_session, owner):
    response = ready.get(f'/api/attendance/sessions/{class_session.id}/aggregate?day=yesterday',
                         headers=auth_headers(owner))

    assert response.status_code == 400


def test_session_aggregate_unknown_session(ready, owner):
    response = ready.get('/api/attendance/sessions/9999/aggregate', headers=auth_headers(owner))

    assert response.status_code == 404
