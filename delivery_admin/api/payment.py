from flask import Blueprint, request, jsonify
from delivery_admin.services.ledger_service import LedgerService
from delivery_admin.services.errors import ServiceError, ValidationError
from delivery_admin.schemas.driver_schema import DriverSchema
from delivery_admin.schemas.payment_schema import (
    DriverBalanceSchema, DriverEarningSchema, DriverPaymentSchema, DriverWithdrawalSchema,
    LedgerAdjustmentSchema, PaymentTransactionSchema
)
import logging

payment_bp = Blueprint('payment', __name__)
balance_schema_many = DriverBalanceSchema(many=True)
driver_schema = DriverSchema()
payment_schema = DriverPaymentSchema()
transaction_schema = PaymentTransactionSchema()
transaction_schema_many = PaymentTransactionSchema(many=True)
withdrawal_schema = DriverWithdrawalSchema()
withdrawal_schema_many = DriverWithdrawalSchema(many=True)
earning_schema_many = DriverEarningSchema(many=True)
adjustment_schema = LedgerAdjustmentSchema()

def _driver_id_arg():
    value = request.args.get('driver_id')
    if not value:
        return None
    if not value.isdecimal():
        raise ValidationError(f"Invalid driver_id: {value!r}.")
    return int(value)

@payment_bp.route('/payments/balances', methods=['GET'])
def list_balances():
    try:
        balances = LedgerService.get_balances()
        return jsonify(balance_schema_many.dump(balances)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in list_balances: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@payment_bp.route('/payments/drivers/<int:driver_id>', methods=['GET'])
def get_driver_ledger(driver_id):
    try:
        ledger = LedgerService.get_driver_ledger(driver_id)
        if not ledger:
            return jsonify({'error': 'Driver not found'}), 404
        return jsonify({
            'driver': driver_schema.dump(ledger['driver']),
            'payment': payment_schema.dump(ledger['payment']),
            'total_withdrawn': float(ledger['total_withdrawn']),
            'transactions': transaction_schema_many.dump(ledger['transactions']),
            'withdrawals': withdrawal_schema_many.dump(ledger['withdrawals']),
            'earnings': earning_schema_many.dump(ledger['earnings']),
        }), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in get_driver_ledger: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@payment_bp.route('/payments/drivers/<int:driver_id>/pay', methods=['POST'])
def make_payment(driver_id):
    try:
        data = request.get_json(silent=True)
        errors = adjustment_schema.validate(data)
        if errors:
            return jsonify(errors), 400
        transaction = LedgerService.make_payment(driver_id, data['amount'], notes=data.get('notes'))
        if not transaction:
            return jsonify({'error': 'Driver not found'}), 404
        return jsonify({
            'transaction': transaction_schema.dump(transaction),
            'payment': payment_schema.dump(LedgerService.get_payment(driver_id)),
        }), 201
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in make_payment: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@payment_bp.route('/payments/drivers/<int:driver_id>/withdraw', methods=['POST'])
def record_withdrawal(driver_id):
    try:
        data = request.get_json(silent=True)
        errors = adjustment_schema.validate(data)
        if errors:
            return jsonify(errors), 400
        withdrawal = LedgerService.record_withdrawal(driver_id, data['amount'], notes=data.get('notes'))
        if not withdrawal:
            return jsonify({'error': 'Driver not found'}), 404
        return jsonify({
            'withdrawal': withdrawal_schema.dump(withdrawal),
            'payment': payment_schema.dump(LedgerService.get_payment(driver_id)),
        }), 201
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in record_withdrawal: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@payment_bp.route('/payments/transactions', methods=['GET'])
def list_transactions():
    try:
        transactions = LedgerService.get_transactions(_driver_id_arg())
        return jsonify(transaction_schema_many.dump(transactions)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in list_transactions: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500

@payment_bp.route('/payments/withdrawals', methods=['GET'])
def list_withdrawals():
    try:
        withdrawals = LedgerService.get_withdrawals(_driver_id_arg())
        return jsonify(withdrawal_schema_many.dump(withdrawals)), 200
    except ServiceError as se:
        return jsonify({'error': se.message}), se.status_code
    except Exception as e:
        logging.error(f"Unhandled error in list_withdrawals: {e}", exc_info=True)
        return jsonify({'error': 'An unexpected error occurred. Please try again later.'}), 500
