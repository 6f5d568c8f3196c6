from delivery_admin.extensions import db

class OrderStatusAudit(db.Model):
    __tablename__ = 'order_status_audit'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.Integer, db.ForeignKey('order.id', ondelete="CASCADE"), nullable=False, index=True)
    changed_at = db.Column(db.DateTime(timezone=True), nullable=False, server_default=db.func.current_timestamp())
    old_status = db.Column(db.String(32), nullable=True)
    new_status = db.Column(db.String(32), nullable=False)
    reason = db.Column(db.Text, nullable=True)

    order = db.relationship('Order', backref=db.backref('audit_records', cascade='all, delete-orphan', order_by='OrderStatusAudit.id'))
