"""Location model for geofence verification."""
from attendance_engine import db
from attendance_engine.models.base import BaseModel


class Location(BaseModel):
    """Physical room: expected WiFi network and GPS centre."""

    __tablename__ = 'locations'

    name = db.Column(db.String(255), nullable=False)
    wifi_ssid = db.Column(db.String(32), nullable=False)
    latitude = db.Column(db.Float, nullable=True)
    longitude = db.Column(db.Float, nullable=True)
    radius_meters = db.Column(db.Float, nullable=True)

    sessions = db.relationship('ClassSession', backref='location', lazy='dynamic')

    @property
    def coordinates(self):
        """(latitude, longitude) or None when the room has no GPS fix."""
        if self.latitude is None or self.longitude is None:
            return None
        return self.latitude, self.longitude

    def __repr__(self):
        return f'<Location {self.name}>'
