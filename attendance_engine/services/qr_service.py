"""QR session issuance and single-use redemption."""
import base64
import io
import json
import logging
import secrets
from dataclasses import asdict, dataclass
from datetime import datetime, timedelta
from typing import Optional

import qrcode

from attendance_engine.models import AttendanceRecord, CheckInMethod, QRCodeLog, User
from attendance_engine.services.attendance_store import AttendanceStore
from attendance_engine.services.checkin_service import CheckInOrchestrator
from attendance_engine.services.engine_config import EngineConfig
from attendance_engine.services.ephemeral_store import EphemeralStore
from attendance_engine.utils.errors import (
    NotAuthorized, SessionInactive, TokenExpired, TokenNotFound, ValidationError
)

logger = logging.getLogger(__name__)


@dataclass
class QRSession:
    """Ephemeral token as stored in the cache."""
    token: str
    session_id: int
    issuer_id: int
    issued_at: datetime
    expires_at: datetime
    ttl_seconds: int
    single_use: bool = True

    def to_json(self) -> str:
        data = asdict(self)
        data['issued_at'] = self.issued_at.isoformat()
        data['expires_at'] = self.expires_at.isoformat()
        return json.dumps(data, separators=(',', ':'))

    @classmethod
    def from_json(cls, raw: str) -> 'QRSession':
        data = json.loads(raw)
        data['issued_at'] = datetime.fromisoformat(data['issued_at'])
        data['expires_at'] = datetime.fromisoformat(data['expires_at'])
        return cls(**data)

    def is_expired(self, now: datetime) -> bool:
        return now >= self.expires_at


def render_qr_image(data: str) -> str:
    """Render ``data`` as a base64 PNG data URI."""
    qr = qrcode.QRCode(
        version=None,  # Auto-determine size
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=10,
        border=4,
    )
    qr.add_data(data)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buffered = io.BytesIO()
    img.save(buffered, format="PNG")
    img_str = base64.b64encode(buffered.getvalue()).decode()

    return f"data:image/png;base64,{img_str}"


class QRSessionManager:
    """
    Issues and redeems single-use QR tokens.

    Tokens live only in the ephemeral store; the store's TTL reclaims them.
    Redemption consumes the token with an atomic get-and-delete before any
    other check, so of N concurrent redeemers exactly one gets past it, and
    a consumed token is never restored even if admission later fails.
    """

    KEY_PREFIX = 'qr_session'

    def __init__(self, store: AttendanceStore, cache: EphemeralStore,
                 orchestrator: CheckInOrchestrator, config: EngineConfig, clock):
        self.store = store
        self.cache = cache
        self.orchestrator = orchestrator
        self.config = config
        self.clock = clock

    @classmethod
    def cache_key(cls, token: str) -> str:
        return f'{cls.KEY_PREFIX}:{token}'

    def issue_session(self, session_id: int, issuer: User, ttl_seconds: Optional[int] = None) -> QRSession:
        """Create a token for ``session_id``. Only its owner or an admin may."""
        ttl_seconds = self.config.qr_default_ttl_seconds if ttl_seconds is None else ttl_seconds
        if not self.config.qr_min_ttl_seconds <= ttl_seconds <= self.config.qr_max_ttl_seconds:
            raise ValidationError(
                f'ttlSeconds must be between {self.config.qr_min_ttl_seconds} '
                f'and {self.config.qr_max_ttl_seconds}'
            )

        session = self.store.find_active_session(session_id)
        if session is None:
            raise SessionInactive()

        if not issuer.can_manage_session(session):
            logger.info('QR issue denied: user %s does not manage session %s', issuer.id, session_id)
            raise NotAuthorized('You can only generate QR codes for your own sessions')

        now = self.clock.now()
        qr_session = QRSession(
            token=secrets.token_urlsafe(32),
            session_id=session_id,
            issuer_id=issuer.id,
            issued_at=now,
            expires_at=now + timedelta(seconds=ttl_seconds),
            ttl_seconds=ttl_seconds
        )
        self.cache.set_with_ttl(self.cache_key(qr_session.token), qr_session.to_json(), ttl_seconds)

        self.store.log_qr_issued(QRCodeLog(
            token=qr_session.token,
            session_id=session_id,
            issuer_id=issuer.id,
            expires_at=qr_session.expires_at
        ))
        logger.info('QR token issued: session=%s issuer=%s ttl=%ss', session_id, issuer.id, ttl_seconds)
        return qr_session

    def consume_token(self, token: str) -> QRSession:
        """Atomically take ``token`` out of the store. First caller wins."""
        if not token:
            raise TokenNotFound()

        raw = self.cache.get_and_delete_if_present(self.cache_key(token))
        if raw is None:
            raise TokenNotFound()

        qr_session = QRSession.from_json(raw)
        # Cache TTL and stored expiry can drift apart
        if qr_session.is_expired(self.clock.now()):
            raise TokenExpired()
        return qr_session

    def redeem_session(self, token: str, participant_id: int,
                       expected_session_id: Optional[int] = None) -> AttendanceRecord:
        """Spend ``token`` and record a QR attendance for ``participant_id``.

        When ``expected_session_id`` is given it must match the session the
        token was issued for; the token is spent either way.
        """
        qr_session = self.consume_token(token)

        if expected_session_id is not None and expected_session_id != qr_session.session_id:
            logger.info('QR redeem rejected: token for session %s presented for session %s',
                        qr_session.session_id, expected_session_id)
            raise ValidationError('QR code does not belong to this session')

        now = self.clock.now()
        session = self.orchestrator.admit(participant_id, qr_session.session_id, now)
        record = self.orchestrator.record_attendance(
            participant_id=participant_id,
            session=session,
            methods=[CheckInMethod.QR],
            now=now,
            verification={'qr': {
                'issuer_id': qr_session.issuer_id,
                'issued_at': qr_session.issued_at.isoformat()
            }},
            qr_token=qr_session.token
        )
        self.store.mark_qr_redeemed(qr_session.token, participant_id, now)
        return record
