"""Audit log of issued QR codes."""
from attendance_engine import db
from attendance_engine.models.base import BaseModel


class QRCodeLog(BaseModel):
    """One row per issued QR token.

    Validity lives in the ephemeral store only; this table is never consulted
    when a token is redeemed.
    """

    __tablename__ = 'qr_code_logs'

    token = db.Column(db.String(64), unique=True, nullable=False)
    session_id = db.Column(db.Integer, db.ForeignKey('class_sessions.id'), nullable=False, index=True)
    issuer_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False)
    expires_at = db.Column(db.DateTime, nullable=False)
    redeemed_by = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)
    redeemed_at = db.Column(db.DateTime, nullable=True)

    session = db.relationship('ClassSession', backref='qr_code_logs')

    def to_dict(self, exclude: list = None):
        data = super().to_dict(exclude=exclude)
        data['is_redeemed'] = self.redeemed_at is not None
        return data
