import pytest
from decimal import Decimal
from delivery_admin.extensions import db
from delivery_admin.models.driver_payment import DriverPayment
from delivery_admin.models.driver_withdrawal import DriverWithdrawal
from delivery_admin.models.payment_transaction import PaymentTransaction
from delivery_admin.services.driver_service import DriverService
from delivery_admin.services.errors import ValidationError
from delivery_admin.services.ledger_service import LedgerService


@pytest.fixture
def funded_driver(make_driver):
    driver = make_driver()
    payment = DriverPayment.query.filter_by(driver_id=driver.id).one()
    payment.pending_amount = Decimal('100.00')
    payment.paid_amount = Decimal('20.00')
    db.session.commit()
    return driver


def balances(driver_id):
    payment = DriverPayment.query.filter_by(driver_id=driver_id).one()
    return payment.pending_amount, payment.paid_amount


class TestLedger:

    def test_driver_creation_opens_zero_ledger(self, make_driver):
        driver = make_driver()
        assert balances(driver.id) == (Decimal('0.00'), Decimal('0.00'))

    def test_payment_then_withdrawals(self, funded_driver):
        transaction = LedgerService.make_payment(funded_driver.id, 60)
        assert transaction.amount == Decimal('60.00')
        assert transaction.transaction_type == 'payment'
        assert balances(funded_driver.id) == (Decimal('40.00'), Decimal('80.00'))
        assert PaymentTransaction.query.filter_by(transaction_type='payment').count() == 1

        withdrawal = LedgerService.record_withdrawal(funded_driver.id, '50')
        assert withdrawal.amount == Decimal('50.00')
        assert balances(funded_driver.id) == (Decimal('40.00'), Decimal('30.00'))
        assert DriverWithdrawal.query.count() == 1
        assert PaymentTransaction.query.filter_by(transaction_type='withdrawal').count() == 1

        with pytest.raises(ValidationError):
            LedgerService.record_withdrawal(funded_driver.id, '50')
        assert balances(funded_driver.id) == (Decimal('40.00'), Decimal('30.00'))
        assert DriverWithdrawal.query.count() == 1

    @pytest.mark.parametrize('amount', [0, -5, '100.01', 'abc', None])
    def test_invalid_payment_amounts_change_nothing(self, funded_driver, amount):
        with pytest.raises(ValidationError):
            LedgerService.make_payment(funded_driver.id, amount)
        assert balances(funded_driver.id) == (Decimal('100.00'), Decimal('20.00'))
        assert PaymentTransaction.query.count() == 0

    def test_full_pending_can_be_paid(self, funded_driver):
        LedgerService.make_payment(funded_driver.id, '100.00')
        assert balances(funded_driver.id) == (Decimal('0.00'), Decimal('120.00'))

    def test_withdrawal_of_zero_rejected(self, funded_driver):
        with pytest.raises(ValidationError):
            LedgerService.record_withdrawal(funded_driver.id, 0)

    def test_unknown_driver_returns_none(self, app):
        assert LedgerService.make_payment(9999, 10) is None
        assert LedgerService.record_withdrawal(9999, 10) is None

    def test_balances_default_for_missing_row(self, make_driver):
        driver = make_driver()
        DriverPayment.query.filter_by(driver_id=driver.id).delete()
        db.session.commit()

        [balance] = LedgerService.get_balances()
        assert balance['driver_id'] == driver.id
        assert balance['pending_amount'] == Decimal('0.00')
        assert balance['has_ledger'] is False
        # Reading balances never persists the default row
        assert DriverPayment.query.count() == 0

    def test_total_withdrawn(self, funded_driver):
        LedgerService.record_withdrawal(funded_driver.id, 5)
        LedgerService.record_withdrawal(funded_driver.id, '7.25')
        assert LedgerService.total_withdrawn(funded_driver.id) == Decimal('12.25')
        [balance] = LedgerService.get_balances()
        assert balance['total_withdrawn'] == Decimal('12.25')

    def test_history_newest_first(self, funded_driver):
        LedgerService.make_payment(funded_driver.id, 10)
        LedgerService.make_payment(funded_driver.id, 20)
        amounts = [t.amount for t in LedgerService.get_transactions(funded_driver.id)]
        assert amounts == [Decimal('20.00'), Decimal('10.00')]

    def test_deleted_driver_with_balance_can_be_settled(self, funded_driver):
        DriverService.delete(funded_driver.id)

        [balance] = LedgerService.get_balances()
        assert balance['driver_id'] == funded_driver.id
        assert balance['driver_deleted'] is True
        assert LedgerService.get_driver_ledger(funded_driver.id) is not None

        assert LedgerService.make_payment(funded_driver.id, '100.00') is not None
        assert LedgerService.record_withdrawal(funded_driver.id, '120.00') is not None
        assert balances(funded_driver.id) == (Decimal('0.00'), Decimal('0.00'))

        # Settled: the deleted driver drops out of the ledger views
        assert LedgerService.get_balances() == []
        assert LedgerService.make_payment(funded_driver.id, 1) is None

    def test_deleted_driver_without_balance_is_hidden(self, make_driver):
        driver = make_driver()
        DriverService.delete(driver.id)
        assert LedgerService.get_balances() == []
        assert LedgerService.get_driver_ledger(driver.id) is None
