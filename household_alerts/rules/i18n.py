"""
Notification Texts

Titles, messages and action labels in Spanish, English and French.

Language tags are matched case-insensitively and only the primary subtag is
used ("es-ES" -> "ES"). An unsupported tag falls back to the fallback
language; a key missing in one language falls back to English and finally
to the key itself, so a text lookup never raises.
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

import structlog


logger = structlog.get_logger(__name__)

SUPPORTED_LANGUAGES = ("ES", "EN", "FR")
BASE_LANGUAGE = "EN"

STRINGS: dict[str, dict[str, str]] = {
    # Budget
    'budget.exceeded.title': {
        'ES': '⚠️ Presupuesto superado',
        'EN': '⚠️ Budget exceeded',
        'FR': '⚠️ Budget dépassé',
    },
    'budget.exceeded.msg': {
        'ES': 'Has superado el límite de "{cat}": {spent} / {limit}',
        'EN': 'You exceeded the "{cat}" budget: {spent} / {limit}',
        'FR': 'Vous avez dépassé le budget "{cat}": {spent} / {limit}',
    },
    'budget.warning.title': {
        'ES': '📊 Presupuesto al {pct}%',
        'EN': '📊 Budget at {pct}%',
        'FR': '📊 Budget à {pct}%',
    },
    'budget.warning.msg': {
        'ES': 'Llevas {spent} de {limit} en "{cat}"',
        'EN': '{spent} of {limit} used in "{cat}"',
        'FR': '{spent} sur {limit} utilisé dans "{cat}"',
    },
    'budget.action': {
        'ES': 'Ver presupuestos',
        'EN': 'View budgets',
        'FR': 'Voir les budgets',
    },
    # Goal
    'goal.completed.title': {
        'ES': '🎉 ¡Meta alcanzada!',
        'EN': '🎉 Goal reached!',
        'FR': '🎉 Objectif atteint !',
    },
    'goal.completed.msg': {
        'ES': 'Has completado la meta "{name}"',
        'EN': 'You completed the goal "{name}"',
        'FR': 'Vous avez atteint l\'objectif "{name}"',
    },
    'goal.deadline.title': {
        'ES': '⏳ Meta próxima a vencer',
        'EN': '⏳ Goal deadline approaching',
        'FR': '⏳ Échéance d\'objectif proche',
    },
    'goal.deadline.msg': {
        'ES': '"{name}" vence en {days} días y llevas {pct}%',
        'EN': '"{name}" is due in {days} days and you\'re at {pct}%',
        'FR': '"{name}" expire dans {days} jours et vous êtes à {pct}%',
    },
    'goal.action': {
        'ES': 'Ver metas',
        'EN': 'View goals',
        'FR': 'Voir les objectifs',
    },
    # Debt
    'debt.due.title': {
        'ES': '💳 Pago de deuda próximo',
        'EN': '💳 Debt payment due',
        'FR': '💳 Paiement de dette proche',
    },
    'debt.due.msg': {
        'ES': 'Vence el pago mínimo de "{name}": {amount}',
        'EN': 'Minimum payment due for "{name}": {amount}',
        'FR': 'Paiement minimum dû pour "{name}": {amount}',
    },
    'debt.action': {
        'ES': 'Ver deudas',
        'EN': 'View debts',
        'FR': 'Voir les dettes',
    },
    # Pantry
    'pantry.empty.title': {
        'ES': '🛒 Sin stock en despensa',
        'EN': '🛒 Pantry item out of stock',
        'FR': '🛒 Article de garde-manger épuisé',
    },
    'pantry.empty.msg': {
        'ES': 'Te has quedado sin "{name}"',
        'EN': 'You\'re out of "{name}"',
        'FR': 'Vous n\'avez plus de "{name}"',
    },
    'pantry.low.title': {
        'ES': '📦 Stock bajo en despensa',
        'EN': '📦 Low pantry stock',
        'FR': '📦 Stock faible en garde-manger',
    },
    'pantry.low.msg': {
        'ES': 'Queda poco de "{name}": {qty} {unit}',
        'EN': 'Low stock of "{name}": {qty} {unit}',
        'FR': 'Stock faible de "{name}": {qty} {unit}',
    },
    'pantry.expiring.title': {
        'ES': '🥫 Producto a punto de caducar',
        'EN': '🥫 Item expiring soon',
        'FR': '🥫 Produit bientôt périmé',
    },
    'pantry.expiring.msg': {
        'ES': '"{name}" caduca en {days} días',
        'EN': '"{name}" expires in {days} days',
        'FR': '"{name}" expire dans {days} jours',
    },
    'pantry.expired.title': {
        'ES': '🚫 Producto caducado',
        'EN': '🚫 Item expired',
        'FR': '🚫 Produit périmé',
    },
    'pantry.expired.msg': {
        'ES': '"{name}" caducó el {date}',
        'EN': '"{name}" expired on {date}',
        'FR': '"{name}" a expiré le {date}',
    },
    'pantry.action': {
        'ES': 'Ver despensa',
        'EN': 'View pantry',
        'FR': 'Voir le garde-manger',
    },
    # Shopping
    'shopping.pending.title': {
        'ES': '🛍️ Lista de compras pendiente',
        'EN': '🛍️ Shopping list pending',
        'FR': '🛍️ Liste de courses en attente',
    },
    'shopping.pending.msg': {
        'ES': 'Tienes {count} artículo(s) por comprar',
        'EN': 'You have {count} item(s) to buy',
        'FR': 'Vous avez {count} article(s) à acheter',
    },
    'shopping.cost.title': {
        'ES': '🧾 Lista de compras elevada',
        'EN': '🧾 Large shopping list',
        'FR': '🧾 Liste de courses importante',
    },
    'shopping.cost.msg': {
        'ES': 'Tu lista pendiente suma unos {amount}',
        'EN': 'Your pending list adds up to about {amount}',
        'FR': 'Votre liste en attente s\'élève à environ {amount}',
    },
    'shopping.action': {
        'ES': 'Ver lista',
        'EN': 'View list',
        'FR': 'Voir la liste',
    },
    # Trip
    'trip.soon.title': {
        'ES': '✈️ Viaje próximo',
        'EN': '✈️ Upcoming trip',
        'FR': '✈️ Voyage imminent',
    },
    'trip.soon.msg': {
        'ES': '"{name}" sale en {days} días',
        'EN': '"{name}" departs in {days} days',
        'FR': '"{name}" part dans {days} jours',
    },
    'trip.overrun.title': {
        'ES': '💸 Presupuesto de viaje superado',
        'EN': '💸 Trip budget exceeded',
        'FR': '💸 Budget de voyage dépassé',
    },
    'trip.overrun.msg': {
        'ES': 'Has gastado {spent} de {budget} en "{name}"',
        'EN': 'You spent {spent} of {budget} on "{name}"',
        'FR': 'Vous avez dépensé {spent} sur {budget} pour "{name}"',
    },
    'trip.action': {
        'ES': 'Ver viajes',
        'EN': 'View trips',
        'FR': 'Voir les voyages',
    },
}

CURRENCY_SYMBOLS = {
    "EUR": "€",
    "USD": "$",
    "GBP": "£",
}


def resolve_language(tag: Optional[str], fallback: str = BASE_LANGUAGE) -> str:
    """
    Map a language tag to a supported language.

    "es", "ES", "es-ES" and "es_MX" all resolve to "ES".
    """
    if tag:
        primary = tag.strip().replace("_", "-").split("-")[0].upper()
        if primary in SUPPORTED_LANGUAGES:
            return primary
    resolved = fallback.upper() if fallback and fallback.upper() in SUPPORTED_LANGUAGES else BASE_LANGUAGE
    logger.debug("language_fallback", requested=tag, resolved=resolved)
    return resolved


def translate(language: str, key: str, **variables) -> str:
    """Look up a text and fill in its {placeholders}."""
    texts = STRINGS.get(key)
    if texts is None:
        return key
    text = texts.get(language) or texts.get(BASE_LANGUAGE) or key
    for name, value in variables.items():
        text = text.replace("{" + name + "}", str(value))
    return text


def format_money(amount: Decimal, currency: str) -> str:
    """
    Whole units, '.' thousands separator, symbol after the number: "1.250 €".
    Unknown currencies keep their ISO code.
    """
    rounded = int(Decimal(amount).quantize(Decimal("1"), rounding=ROUND_HALF_UP))
    grouped = f"{abs(rounded):,}".replace(",", ".")
    sign = "-" if rounded < 0 else ""
    symbol = CURRENCY_SYMBOLS.get((currency or "").upper(), (currency or "").upper())
    return f"{sign}{grouped} {symbol}".rstrip()


def format_quantity(value: Decimal) -> str:
    """Drop trailing zeros: Decimal('2.50') -> '2.5', Decimal('3.0') -> '3'."""
    normalized = Decimal(value).normalize()
    if normalized == normalized.to_integral():
        return str(normalized.quantize(Decimal("1")))
    return format(normalized, "f")
