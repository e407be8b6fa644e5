"""
Payments app for escrowed consultation fees.

This app handles:
- Hosted checkout creation with Flutterwave
- Webhook verification and escrow of verified charges
- Escrow release on appointment completion, refund on cancellation
- Practitioner wallets, withdrawals and payout processing

Related apps:
    - appointments: Lifecycle that triggers release and refund
    - authentication: User model and role permissions
    - notifications: Payment and payout emails

Usage:
    from payments.ledger import wallet_ledger
    from payments.services import EscrowReleaseEngine, PayoutService

    wallet_ledger.get_balance(practitioner.id)
    EscrowReleaseEngine().release(appointment.id)
"""
