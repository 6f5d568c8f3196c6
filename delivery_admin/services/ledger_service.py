"""
Driver payment ledger.

Balances live on one DriverPayment row per driver. Every adjustment is a
single guarded UPDATE (``... WHERE pending_amount >= :amount``) so two
concurrent adjustments can never both spend the same money; each one also
appends an audit row in the same transaction.
"""

import logging
from decimal import Decimal, InvalidOperation
from sqlalchemy import exists, false, func, or_, update
from delivery_admin.extensions import db
from delivery_admin.models.driver import Driver
from delivery_admin.models.driver_earning import DriverEarning
from delivery_admin.models.driver_payment import DriverPayment
from delivery_admin.models.driver_withdrawal import DriverWithdrawal
from delivery_admin.models.payment_transaction import PaymentTransaction, TransactionType
from delivery_admin.services.errors import ServiceError, ValidationError, ConflictError
from delivery_admin.services.pricing_service import to_money

ZERO = Decimal('0.00')


def parse_amount(value):
    """Parse a positive money amount, raising ValidationError otherwise."""
    if isinstance(value, bool):
        raise ValidationError("Amount must be a number.")
    try:
        amount = to_money(value)
    except (InvalidOperation, TypeError, ValueError):
        raise ValidationError("Amount must be a number.")
    if not amount.is_finite():
        raise ValidationError("Amount must be a number.")
    if amount <= 0:
        raise ValidationError("Amount must be greater than zero.")
    return amount


def default_payment(driver_id):
    """Unpersisted zero balance for drivers without a ledger row yet."""
    return DriverPayment(driver_id=driver_id, pending_amount=ZERO, paid_amount=ZERO)


def ledger_drivers():
    """Active drivers, plus soft-deleted drivers that still hold a balance."""
    holds_balance = exists().where(
        DriverPayment.driver_id == Driver.id,
        or_(DriverPayment.pending_amount > 0, DriverPayment.paid_amount > 0),
    )
    return Driver.query_all().filter(or_(Driver.is_deleted == false(), holds_balance))


class LedgerService:
    @staticmethod
    def get_payment(driver_id):
        return DriverPayment.query.filter_by(driver_id=driver_id).first()

    @staticmethod
    def total_withdrawn(driver_id):
        total = (db.session.query(func.coalesce(func.sum(DriverWithdrawal.amount), 0))
                 .filter(DriverWithdrawal.driver_id == driver_id)
                 .scalar())
        return to_money(total or 0)

    @staticmethod
    def get_balances():
        """
        Every active driver with its balances; missing rows read as zero.

        Soft-deleted drivers stay listed until their balances are settled.
        """
        try:
            drivers = ledger_drivers().order_by(Driver.full_name.asc()).all()
            payments = {p.driver_id: p for p in DriverPayment.query.all()}
            withdrawn = dict(
                db.session.query(DriverWithdrawal.driver_id, func.sum(DriverWithdrawal.amount))
                .group_by(DriverWithdrawal.driver_id)
                .all()
            )
            balances = []
            for driver in drivers:
                payment = payments.get(driver.id)
                balances.append({
                    'driver_id': driver.id,
                    'driver_name': driver.full_name,
                    'driver_status': driver.status,
                    'pending_amount': payment.pending_amount if payment else ZERO,
                    'paid_amount': payment.paid_amount if payment else ZERO,
                    'total_withdrawn': to_money(withdrawn.get(driver.id) or 0),
                    'has_ledger': payment is not None,
                    'driver_deleted': driver.is_deleted,
                })
            return balances
        except Exception as e:
            logging.error(f"Error fetching driver balances: {e}", exc_info=True)
            raise ServiceError("Could not fetch driver balances. Please try again later.")

    @staticmethod
    def get_driver_ledger(driver_id):
        try:
            driver = ledger_drivers().filter(Driver.id == driver_id).first()
            if not driver:
                return None
            return {
                'driver': driver,
                'payment': LedgerService.get_payment(driver_id) or default_payment(driver_id),
                'total_withdrawn': LedgerService.total_withdrawn(driver_id),
                'transactions': LedgerService.get_transactions(driver_id),
                'withdrawals': LedgerService.get_withdrawals(driver_id),
                'earnings': (DriverEarning.query.filter_by(driver_id=driver_id)
                             .order_by(DriverEarning.credited_at.desc(), DriverEarning.id.desc()).all()),
            }
        except ServiceError:
            raise
        except Exception as e:
            logging.error(f"Error fetching driver ledger: {e}", exc_info=True)
            raise ServiceError("Could not fetch driver ledger. Please try again later.")

    @staticmethod
    def get_transactions(driver_id=None):
        try:
            query = PaymentTransaction.query
            if driver_id is not None:
                query = query.filter_by(driver_id=driver_id)
            return query.order_by(PaymentTransaction.payment_date.desc(), PaymentTransaction.id.desc()).all()
        except Exception as e:
            logging.error(f"Error fetching payment transactions: {e}", exc_info=True)
            raise ServiceError("Could not fetch payment transactions. Please try again later.")

    @staticmethod
    def get_withdrawals(driver_id=None):
        try:
            query = DriverWithdrawal.query
            if driver_id is not None:
                query = query.filter_by(driver_id=driver_id)
            return query.order_by(DriverWithdrawal.withdrawal_date.desc(), DriverWithdrawal.id.desc()).all()
        except Exception as e:
            logging.error(f"Error fetching withdrawals: {e}", exc_info=True)
            raise ServiceError("Could not fetch withdrawals. Please try again later.")

    @staticmethod
    def make_payment(driver_id, amount, notes=None):
        """
        Move ``amount`` from the driver's pending balance to paid.

        Returns the PaymentTransaction, or None if the driver does not exist.
        Raises ValidationError if the amount is not in (0, pending] and
        ConflictError if a concurrent adjustment spent the balance first.
        """
        amount = parse_amount(amount)
        try:
            driver = ledger_drivers().filter(Driver.id == driver_id).first()
            if not driver:
                return None
            payment = LedgerService.get_payment(driver_id)
            pending = payment.pending_amount if payment else ZERO
            if amount > pending:
                raise ValidationError(f"Payment amount {amount} exceeds pending amount {pending}.")

            result = db.session.execute(
                update(DriverPayment)
                .where(DriverPayment.driver_id == driver_id, DriverPayment.pending_amount >= amount)
                .values(
                    pending_amount=func.round(DriverPayment.pending_amount - amount, 2),
                    paid_amount=func.round(DriverPayment.paid_amount + amount, 2),
                )
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise ConflictError("The driver's balance changed while the payment was being recorded. Please retry.")

            transaction = PaymentTransaction(
                driver_id=driver_id,
                amount=amount,
                transaction_type=TransactionType.PAYMENT.value,
                notes=notes,
            )
            db.session.add(transaction)
            db.session.commit()
            logging.info(f"Recorded payment of {amount} to driver {driver_id}")
            return transaction
        except ServiceError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error recording payment: {e}", exc_info=True)
            raise ServiceError("Could not record payment. Please try again later.")

    @staticmethod
    def record_withdrawal(driver_id, amount, notes=None):
        """
        Reduce the driver's paid balance by ``amount`` (cash handed over).

        Returns the DriverWithdrawal, or None if the driver does not exist.
        """
        amount = parse_amount(amount)
        try:
            driver = ledger_drivers().filter(Driver.id == driver_id).first()
            if not driver:
                return None
            payment = LedgerService.get_payment(driver_id)
            paid = payment.paid_amount if payment else ZERO
            if amount > paid:
                raise ValidationError(f"Withdrawal amount {amount} exceeds paid amount {paid}.")

            result = db.session.execute(
                update(DriverPayment)
                .where(DriverPayment.driver_id == driver_id, DriverPayment.paid_amount >= amount)
                .values(paid_amount=func.round(DriverPayment.paid_amount - amount, 2))
                .execution_options(synchronize_session=False)
            )
            if result.rowcount != 1:
                raise ConflictError("The driver's balance changed while the withdrawal was being recorded. Please retry.")

            withdrawal = DriverWithdrawal(driver_id=driver_id, amount=amount, notes=notes)
            db.session.add(withdrawal)
            db.session.add(PaymentTransaction(
                driver_id=driver_id,
                amount=amount,
                transaction_type=TransactionType.WITHDRAWAL.value,
                notes=notes,
            ))
            db.session.commit()
            logging.info(f"Recorded withdrawal of {amount} for driver {driver_id}")
            return withdrawal
        except ServiceError:
            db.session.rollback()
            raise
        except Exception as e:
            db.session.rollback()
            logging.error(f"Error recording withdrawal: {e}", exc_info=True)
            raise ServiceError("Could not record withdrawal. Please try again later.")

    @staticmethod
    def credit_order_completion(order):
        """
        Credit a completed order's driver amount to the driver's pending balance.

        Runs inside the caller's transaction and does not commit. Returns the
        new DriverEarning, or None when the order has no driver or was
        already credited.
        """
        if order.driver_id is None:
            return None
        if DriverEarning.query.filter_by(order_id=order.id).first() is not None:
            logging.info(f"Order {order.id} already credited; skipping")
            return None

        amount = to_money(order.driver_amount or 0)
        if LedgerService.get_payment(order.driver_id) is None:
            db.session.add(DriverPayment(driver_id=order.driver_id, pending_amount=ZERO, paid_amount=ZERO))
            db.session.flush()

        db.session.execute(
            update(DriverPayment)
            .where(DriverPayment.driver_id == order.driver_id)
            .values(pending_amount=func.round(DriverPayment.pending_amount + amount, 2))
            .execution_options(synchronize_session=False)
        )
        earning = DriverEarning(driver_id=order.driver_id, order_id=order.id, amount=amount)
        db.session.add(earning)
        # Unique order_id: a concurrent credit for the same order fails here
        db.session.flush()
        logging.info(f"Credited {amount} to driver {order.driver_id} for order {order.id}")
        return earning
