"""
CLI interface for the bank ledger.

This module renders the ledger engine's call surface as click commands.
"""

import click
from dataclasses import replace
from decimal import Decimal, InvalidOperation
from typing import Optional

from .config import LOG_FORMATS, LedgerConfig
from .database import DatabaseManager
from .exceptions import AuthorizationError, BankingError
from .ledger import LedgerEngine
from .logging_config import setup_logging
from .models import AccountVariant, AccountView


class BankCLI:
    """CLI wrapper for ledger operations."""

    def __init__(self, db_path: Optional[str] = None, config: Optional[LedgerConfig] = None):
        """Initialize CLI with database."""
        config = config or LedgerConfig()
        if db_path is not None:
            config = replace(config, db_path=db_path)
        self.config = config
        self.db_manager = DatabaseManager(config.db_path, timeout=config.db_timeout)
        self.engine = LedgerEngine(self.db_manager, config)

    def format_currency(self, amount: Decimal) -> str:
        """Format currency for display."""
        sign = "-" if amount < 0 else ""
        return f"{sign}${abs(amount):,.2f}"

    def parse_currency(self, amount_str: str) -> Decimal:
        """Parse currency input."""
        try:
            # Remove $ and commas
            clean_str = amount_str.replace('$', '').replace(',', '').strip()
            return Decimal(clean_str)
        except (InvalidOperation, ValueError):
            raise ValueError(f"Invalid amount: {amount_str}")

    def check_admin_secret(self, secret: str):
        """Gate for administrative commands."""
        if secret != self.config.admin_secret:
            raise AuthorizationError("Incorrect admin secret")

    def describe(self, view: AccountView) -> str:
        return (f"{view.account_id:<24} {view.variant.value:<10} "
                f"{self.format_currency(view.balance):>14}")


@click.group()
@click.option('--db-path', default=None, help='Database file path')
@click.option('--log-level', default=None, help='Log level (DEBUG, INFO, WARNING, ERROR)')
@click.option('--log-format', type=click.Choice(LOG_FORMATS), default=None,
              help='Log output format (written to stderr)')
@click.pass_context
def cli(ctx, db_path, log_level, log_format):
    """Bank Ledger CLI"""
    ctx.ensure_object(dict)
    try:
        config = LedgerConfig.from_env()
    except BankingError as e:
        raise click.UsageError(str(e))

    setup_logging(log_level or config.log_level, log_format or config.log_format)
    ctx.obj['cli'] = BankCLI(db_path, config)


@cli.command()
@click.option('--type', 'variant',
              type=click.Choice([v.value for v in AccountVariant]),
              prompt='Account type', help='Type of account')
@click.option('--initial-balance', default='0.00',
              prompt='Initial balance', help='Opening balance')
@click.option('--account-id', default=None, help='Account id (generated if omitted)')
@click.pass_context
def create_account(ctx, variant, initial_balance, account_id):
    """Open a new account."""
    bank_cli = ctx.obj['cli']

    try:
        amount = bank_cli.parse_currency(initial_balance)
        new_id = bank_cli.engine.create_account(
            AccountVariant(variant), amount, account_id=account_id
        )
        view = bank_cli.engine.find_account(new_id)

        click.echo(f"✅ Account created successfully!")
        click.echo(f"Account ID: {view.account_id}")
        click.echo(f"Type: {view.variant.value}")
        click.echo(f"Balance: {bank_cli.format_currency(view.balance)}")
        click.echo(f"Terms: {view.variant_detail}")

    except (BankingError, ValueError) as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--account-id', prompt='Account ID', help='Account ID')
@click.pass_context
def show_account(ctx, account_id):
    """Show account details."""
    bank_cli = ctx.obj['cli']

    try:
        view = bank_cli.engine.find_account(account_id)
        click.echo(f"\n📊 Account Details")
        click.echo(f"{'='*50}")
        click.echo(f"Account ID: {view.account_id}")
        click.echo(f"Type: {view.variant.value}")
        click.echo(f"Balance: {bank_cli.format_currency(view.balance)}")
        click.echo(f"Terms: {view.variant_detail}")

    except BankingError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--account-id', prompt='Account ID', help='Account ID')
@click.option('--amount', prompt='Deposit amount', help='Amount to deposit')
@click.pass_context
def deposit(ctx, account_id, amount):
    """Deposit money to an account."""
    bank_cli = ctx.obj['cli']

    try:
        deposit_amount = bank_cli.parse_currency(amount)
        new_balance = bank_cli.engine.deposit(account_id, deposit_amount)
        click.echo(f"✅ Deposit successful!")
        click.echo(f"Amount: {bank_cli.format_currency(deposit_amount)}")
        click.echo(f"New Balance: {bank_cli.format_currency(new_balance)}")

    except (BankingError, ValueError) as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--account-id', prompt='Account ID', help='Account ID')
@click.option('--amount', prompt='Withdrawal amount', help='Amount to withdraw')
@click.pass_context
def withdraw(ctx, account_id, amount):
    """Withdraw money from an account."""
    bank_cli = ctx.obj['cli']

    try:
        withdraw_amount = bank_cli.parse_currency(amount)
        new_balance = bank_cli.engine.withdraw(account_id, withdraw_amount)
        click.echo(f"✅ Withdrawal successful!")
        click.echo(f"Amount: {bank_cli.format_currency(withdraw_amount)}")
        click.echo(f"New Balance: {bank_cli.format_currency(new_balance)}")

    except (BankingError, ValueError) as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--from-account', prompt='From Account ID', help='Source account ID')
@click.option('--to-account', prompt='To Account ID', help='Destination account ID')
@click.option('--amount', prompt='Transfer amount', help='Amount to transfer')
@click.pass_context
def transfer(ctx, from_account, to_account, amount):
    """Transfer money between accounts."""
    bank_cli = ctx.obj['cli']

    try:
        transfer_amount = bank_cli.parse_currency(amount)
        bank_cli.engine.transfer(from_account, to_account, transfer_amount)
        from_view = bank_cli.engine.find_account(from_account)
        to_view = bank_cli.engine.find_account(to_account)

        click.echo(f"✅ Transfer successful!")
        click.echo(f"Amount: {bank_cli.format_currency(transfer_amount)}")
        click.echo(f"From Account {from_account} Balance: {bank_cli.format_currency(from_view.balance)}")
        click.echo(f"To Account {to_account} Balance: {bank_cli.format_currency(to_view.balance)}")

    except (BankingError, ValueError) as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--account-id', prompt='Account ID', help='Account ID')
@click.option('--limit', type=int, default=None, help='Show only the most recent N records')
@click.pass_context
def history(ctx, account_id, limit):
    """Show an account's transactions, most recent first."""
    bank_cli = ctx.obj['cli']

    try:
        records = bank_cli.engine.transaction_history(account_id, limit)
        if not records:
            click.echo(f"No transactions for account {account_id}")
            return

        click.echo(f"\n📋 Transactions for {account_id}")
        click.echo(f"{'Date':<28} {'Amount':>14}")
        click.echo(f"{'-'*43}")
        for record in records:
            click.echo(
                f"{record.timestamp.strftime('%Y-%m-%d %H:%M:%S.%f'):<28} "
                f"{bank_cli.format_currency(record.amount):>14}"
            )

    except BankingError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--admin-secret', prompt='Admin secret', hide_input=True, help='Shared admin secret')
@click.pass_context
def list_transactions(ctx, admin_secret):
    """Show the whole transaction log, oldest first (admin)."""
    bank_cli = ctx.obj['cli']

    try:
        bank_cli.check_admin_secret(admin_secret)
        records = bank_cli.engine.all_transactions()
        if not records:
            click.echo("No transactions found.")
            return

        click.echo(f"{'ID':>6} {'Account ID':<24} {'Date':<28} {'Amount':>14}")
        click.echo(f"{'-'*75}")
        for record in records:
            click.echo(
                f"{record.record_id:>6} {record.account_id:<24} "
                f"{record.timestamp.strftime('%Y-%m-%d %H:%M:%S.%f'):<28} "
                f"{bank_cli.format_currency(record.amount):>14}"
            )

    except BankingError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.pass_context
def apply_monthly(ctx):
    """Apply monthly interest and fees to every account."""
    bank_cli = ctx.obj['cli']

    try:
        result = bank_cli.engine.apply_monthly_adjustments()

        click.echo(f"\n📊 Monthly Adjustment Results")
        click.echo(f"{'='*50}")
        click.echo(f"Accounts Adjusted: {result['processed_count']}")
        click.echo(f"Accounts Failed: {result['failed_count']}")

        for item in result['processed']:
            click.echo(
                f"  {item['account_id']}: {bank_cli.format_currency(item['delta'])} "
                f"-> {bank_cli.format_currency(item['balance'])}"
            )

        if result['failed']:
            click.echo(f"\n❌ Failed Adjustments:")
            for item in result['failed']:
                click.echo(f"  {item['account_id']}: {item['error']}")

    except BankingError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.pass_context
def report(ctx):
    """Show total balance, account count and the lowest balance account."""
    bank_cli = ctx.obj['cli']

    try:
        summary = bank_cli.engine.reports.summary()
        click.echo(f"\n💰 Ledger Summary")
        click.echo(f"Total Balance: {bank_cli.format_currency(summary['total_balance'])}")
        click.echo(f"Number of Accounts: {summary['account_count']}")

        minimum = summary['minimum_balance_account']
        if minimum:
            click.echo(f"Minimum Balance Account: {bank_cli.describe(minimum)}")
        else:
            click.echo("No accounts found.")

    except BankingError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--by-balance', is_flag=True, help='Sort by ascending balance')
@click.pass_context
def list_accounts(ctx, by_balance):
    """List accounts."""
    bank_cli = ctx.obj['cli']

    try:
        if by_balance:
            views = bank_cli.engine.accounts_by_balance_ascending()
        else:
            views = bank_cli.engine.list_accounts()

        if not views:
            click.echo("No accounts found.")
            return

        click.echo(f"{'Account ID':<24} {'Type':<10} {'Balance':>14}")
        click.echo(f"{'-'*50}")
        for view in views:
            click.echo(bank_cli.describe(view))

    except BankingError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--admin-secret', prompt='Admin secret', hide_input=True, help='Shared admin secret')
@click.confirmation_option(prompt='Delete ALL accounts? Transaction history is kept.')
@click.pass_context
def reset_accounts(ctx, admin_secret):
    """Delete every account (admin)."""
    bank_cli = ctx.obj['cli']

    try:
        bank_cli.check_admin_secret(admin_secret)
        deleted = bank_cli.engine.reset_all_accounts()
        click.echo(f"✅ All accounts have been deleted ({deleted} removed)")

    except BankingError as e:
        click.echo(f"❌ Error: {e}", err=True)


@cli.command()
@click.option('--admin-secret', prompt='Admin secret', hide_input=True, help='Shared admin secret')
@click.confirmation_option(prompt='Delete ALL transaction records? Accounts are kept.')
@click.pass_context
def reset_transactions(ctx, admin_secret):
    """Delete the whole transaction log (admin)."""
    bank_cli = ctx.obj['cli']

    try:
        bank_cli.check_admin_secret(admin_secret)
        deleted = bank_cli.engine.reset_all_transactions()
        click.echo(f"✅ All transactions have been deleted ({deleted} removed)")

    except BankingError as e:
        click.echo(f"❌ Error: {e}", err=True)


def main():
    """Main entry point for CLI."""
    cli()


if __name__ == '__main__':
    main()
