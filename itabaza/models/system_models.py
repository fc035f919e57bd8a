# /itabaza/models/system_models.py
from datetime import datetime
from itabaza.extensions import db, bcrypt

class RevokedToken(db.Model):
    """Track revoked JWT tokens"""
    __tablename__ = 'revoked_tokens'

    id = db.Column(db.Integer, primary_key=True)
    jti = db.Column(db.String(120), unique=True, nullable=False, index=True)
    revoked_at = db.Column(db.DateTime, default=datetime.utcnow)
    expires_at = db.Column(db.DateTime, nullable=False)

class EmailVerification(db.Model):
    """One-time signup code sent to an email address; only the hash is stored."""
    __tablename__ = 'email_verifications'

    id = db.Column(db.Integer, primary_key=True)
    email = db.Column(db.String(255), nullable=False, index=True)
    otp_hash = db.Column(db.String(255), nullable=False)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    expires_at = db.Column(db.DateTime, nullable=False)
    verified_at = db.Column(db.DateTime)

    def set_otp(self, otp: str) -> None:
        self.otp_hash = bcrypt.generate_password_hash(otp).decode('utf-8')

    def check_otp(self, otp: str) -> bool:
        if not otp or self.verified_at is not None:
            return False
        if datetime.utcnow() > self.expires_at:
            return False
        return bcrypt.check_password_hash(self.otp_hash, otp)
