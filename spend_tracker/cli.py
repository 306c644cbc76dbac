# spend_tracker/cli.py
import logging
import click
from spend_tracker.analysis import (
    ALL_CARDS,
    average_purchase,
    filter_transactions,
    monthly_frame,
    net_spend,
    purchase_count,
    spending_by_category,
    spending_by_month,
)
from spend_tracker.budgets import BudgetLimit, BudgetStore, check_budgets, detect_anomalies
from spend_tracker.config import load_config
from spend_tracker.core.models import AVAILABLE_CATEGORIES, CARDS, MONTHS
from spend_tracker.credits import CreditStore, InvalidCategoryError, InvalidCreditError
from spend_tracker.dataset import duplicate_keys, load_dataset
from spend_tracker.merchants import search_merchants, top_merchants
from spend_tracker.outputs import get_output
from spend_tracker.storage import JsonStorage

LOG_LEVELS = ['DEBUG', 'INFO', 'WARNING', 'ERROR']


class Session:
    """Config plus the lazily built dataset, credit store and budget store for one invocation."""

    def __init__(self, config):
        self.config = config
        self._dataset = None
        self._store = None
        self._budgets = None

    @property
    def dataset(self):
        if self._dataset is None:
            self._dataset = load_dataset(self.config)
        return self._dataset

    @property
    def store(self):
        if self._store is None:
            self._store = CreditStore(self.storage)
        return self._store

    @property
    def storage(self):
        return JsonStorage(self.config.get('storage_dir', '.spend_tracker'))

    @property
    def budgets(self):
        if self._budgets is None:
            try:
                defaults = [BudgetLimit.from_config(b) for b in self.config.get('budgets', [])]
            except ValueError as e:
                raise click.ClickException(str(e))
            self._budgets = BudgetStore(self.storage, defaults)
        return self._budgets

    def find(self, key):
        for tx in self.dataset:
            if tx.key == key:
                return tx
        raise click.ClickException(f"No transaction with key '{key}'")

    def select(self, card, month):
        return filter_transactions(self.dataset, card=card, month=month)


card_option = click.option(
    '--card',
    default=ALL_CARDS,
    type=click.Choice([ALL_CARDS, *CARDS]),
    help='Restrict to one card (default: all)'
)
month_option = click.option(
    '--month',
    default=None,
    type=click.Choice(MONTHS),
    help='Restrict to one month, e.g. Dec'
)


@click.group()
@click.option(
    '--config', 'config_path',
    default=None,
    type=click.Path(exists=True, dir_okay=False),
    help='Path to config.yaml (built-in defaults when omitted)'
)
@click.option(
    '--log-level',
    default='WARNING',
    type=click.Choice(LOG_LEVELS, case_sensitive=False),
    help='Logging verbosity'
)
@click.pass_context
def main(ctx, config_path, log_level):
    """
    Parse card statements into one spending dataset and query it: net spend
    by category and month, merchant search, credits, category overrides and
    budget alerts.
    """
    logging.basicConfig(
        level=getattr(logging, log_level.upper()),
        format='%(asctime)s %(levelname)s %(name)s: %(message)s',
    )
    try:
        cfg = load_config(config_path)
    except ValueError as e:
        raise click.ClickException(str(e))
    ctx.obj = Session(cfg)


@main.command()
@card_option
@month_option
@click.option(
    '--pivot',
    is_flag=True,
    default=False,
    help='Also print net spend as a month x category table'
)
@click.pass_obj
def summary(session, card, month, pivot):
    """Net spend, purchase count and per-category / per-month breakdowns."""
    txs = session.select(card, month)
    store = session.store

    click.echo(f"Year: {session.dataset.year}")
    click.echo(f"Net spend: ${net_spend(txs, store):,.2f}")
    click.echo(f"Purchases: {purchase_count(txs)}")
    click.echo(f"Average purchase: ${average_purchase(txs, store):,.2f}")

    click.echo("\nBy category:")
    for cat, value in spending_by_category(txs, store).items():
        click.echo(f"  {cat:<24} ${value:>12,.2f}")

    click.echo("\nBy month:")
    for name, value in spending_by_month(txs, store):
        click.echo(f"  {name}  ${value:>12,.2f}")

    if pivot:
        click.echo("\nBy month and category:")
        click.echo(monthly_frame(txs, store).round(2).to_string())

    dupes = duplicate_keys(txs)
    for key, cards in dupes.items():
        click.echo(f"⚠️  Possible duplicate on {', '.join(cards)}: {key}", err=True)


@main.command(name='list')
@card_option
@month_option
@click.option('--category', default=None, help='Only show this effective category')
@click.pass_obj
def list_transactions(session, card, month, category):
    """List transactions with their keys and effective values."""
    store = session.store
    for tx in session.select(card, month):
        effective_category = store.effective_category(tx)
        if category and effective_category != category:
            continue
        click.echo(
            f"{tx.key}\t{tx.card}\t{effective_category}\t"
            f"{store.effective_amount(tx):.2f}"
        )


@main.command()
@click.argument('query')
@card_option
@month_option
@click.pass_obj
def search(session, query, card, month):
    """Search merchants by name and show net spend per merchant."""
    results = search_merchants(session.select(card, month), query, session.store)
    if not results:
        click.echo(f"No merchants match '{query}'.")
        return
    for result in results:
        click.echo(f"{result.name:<40} ${result.total:>10,.2f}  ({result.count} txn)")
    click.echo(f"Total: ${sum(r.total for r in results):,.2f}")


@main.command(name='top-merchants')
@card_option
@month_option
@click.option(
    '--sort', 'sort_by',
    default='total',
    type=click.Choice(['total', 'largest']),
    help='Rank by net total or by largest single purchase'
)
@click.option('--limit', default=12, type=click.IntRange(min=1), help='Rows to show')
@click.pass_obj
def top_merchants_command(session, card, month, sort_by, limit):
    """Merchants with the highest net spend."""
    results = top_merchants(session.select(card, month), session.store, sort_by=sort_by)
    for result in results[:limit]:
        click.echo(
            f"{result.name:<30} ${result.total:>10,.2f}  "
            f"largest ${result.largest:,.2f}  ({result.count} txn)"
        )


@main.group()
def credit():
    """Record or clear reimbursements against a transaction."""


@credit.command(name='set')
@click.argument('key')
@click.argument('amount')
@click.pass_obj
def set_credit(session, key, amount):
    tx = session.find(key)
    try:
        value = session.store.set_credit(tx, amount)
    except InvalidCreditError as e:
        raise click.ClickException(str(e))
    click.echo(
        f"Credited ${value:,.2f}; effective amount now "
        f"{session.store.effective_amount(tx):.2f}"
    )


@credit.command(name='clear')
@click.argument('key')
@click.pass_obj
def clear_credit(session, key):
    session.store.remove_credit(key)
    click.echo(f"Cleared credit for {key}")


@main.group()
def category():
    """Reassign or reset a transaction's category."""


@category.command(name='set')
@click.argument('key')
@click.argument('name', metavar='CATEGORY')
@click.pass_obj
def set_category(session, key, name):
    tx = session.find(key)
    try:
        session.store.set_category_override(tx, name)
    except InvalidCategoryError as e:
        raise click.ClickException(str(e))
    click.echo(f"{tx.description}: {tx.category} -> {name}")


@category.command(name='reset')
@click.argument('key')
@click.pass_obj
def reset_category(session, key):
    session.store.remove_category_override(key)
    click.echo(f"Reset category for {key}")


@category.command(name='choices')
def category_choices():
    for name in AVAILABLE_CATEGORIES:
        click.echo(name)


@main.group()
def budget():
    """Set, remove or list monthly category budgets."""


@budget.command(name='set')
@click.argument('name', metavar='CATEGORY')
@click.argument('limit', type=float)
@click.option(
    '--threshold',
    default=80.0,
    type=float,
    help='Warn once spending reaches this percent of the limit'
)
@click.pass_obj
def set_budget(session, name, limit, threshold):
    if name not in AVAILABLE_CATEGORIES:
        raise click.ClickException(
            f"Unknown category {name!r}; choose one of {', '.join(AVAILABLE_CATEGORIES)}"
        )
    try:
        saved = session.budgets.set_budget(name, limit, threshold)
    except ValueError as e:
        raise click.ClickException(str(e))
    click.echo(
        f"Budget for {saved.category}: ${saved.monthly_limit:,.2f} "
        f"(warn at {saved.alert_threshold:.0f}%)"
    )


@budget.command(name='remove')
@click.argument('name', metavar='CATEGORY')
@click.pass_obj
def remove_budget(session, name):
    if not session.budgets.remove_budget(name):
        raise click.ClickException(f"No stored budget for {name!r}")
    click.echo(f"Removed budget for {name}")


@budget.command(name='list')
@click.pass_obj
def list_budgets(session):
    budgets = session.budgets.budgets
    if not budgets:
        click.echo("No budgets.")
        return
    for item in budgets:
        click.echo(
            f"{item.category:<24} ${item.monthly_limit:>10,.2f}  "
            f"warn at {item.alert_threshold:.0f}%"
        )


@main.group(invoke_without_command=True)
@card_option
@month_option
@click.pass_context
def alerts(ctx, card, month):
    """Budget warnings plus recurring and unusually large charges."""
    if ctx.invoked_subcommand is not None:
        return
    session = ctx.obj
    txs = session.select(card, month)
    store = session.budgets

    found = check_budgets(store.budgets, spending_by_category(txs, session.store))
    found.extend(detect_anomalies(txs))
    store.record(found)

    open_alerts = store.open_alerts
    if not open_alerts:
        click.echo("No alerts.")
        return
    for alert in open_alerts:
        click.echo(f"{alert.id}  [{alert.type}] {alert.message}")


@alerts.command(name='dismiss')
@click.argument('alert_id', metavar='ID')
@click.pass_obj
def dismiss_alert(session, alert_id):
    if not session.budgets.dismiss(alert_id):
        raise click.ClickException(f"No open alert with id '{alert_id}'")
    click.echo(f"Dismissed {alert_id}")


@main.command()
@click.option(
    '--output', 'output_format',
    default='csv',
    type=click.Choice(['csv']),
    help='Output target'
)
@click.pass_obj
def export(session, output_format):
    """Write effective transactions to the configured output."""
    outputter = get_output(output_format, session.config)
    path = outputter.write(session.dataset, session.store)
    if path is None:
        click.echo("No transactions to write.")
        return
    click.echo(f"Wrote {len(session.dataset)} transaction(s) to {path}.")
