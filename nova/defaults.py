from datetime import datetime
from typing import Optional

from nova.domain import CategoryRegistry, Transaction, TransactionKind

DEFAULT_CATEGORIES = CategoryRegistry(
    income=("Salaire", "Freelance", "Investissements", "Cadeaux", "Autre"),
    expense=(
        "Logement",
        "Alimentation",
        "Transport",
        "Divertissement",
        "Santé",
        "Shopping",
        "Factures",
        "Autre",
    ),
)

# (id, amount, description, category, day of month, kind)
_SAMPLES = (
    ("1", 60000, "Salaire Mensuel", "Salaire", 1, TransactionKind.INCOME),
    ("2", 25000, "Loyer", "Logement", 3, TransactionKind.EXPENSE),
    ("3", 8500, "Courses Semaine", "Alimentation", 5, TransactionKind.EXPENSE),
    ("4", 15000, "Projet Freelance", "Freelance", 10, TransactionKind.INCOME),
    ("5", 1200, "Abonnement Internet", "Factures", 12, TransactionKind.EXPENSE),
)


def sample_transactions(now: Optional[datetime] = None) -> tuple[Transaction, ...]:
    """First-run transactions spread over the month of `now`."""
    now = now or datetime.now()
    return tuple(
        Transaction(
            id=tid,
            amount=float(amount),
            description=description,
            category=category,
            date=now.replace(day=day),
            kind=kind,
        )
        for tid, amount, description, category, day, kind in _SAMPLES
    )
