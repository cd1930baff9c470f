"""Fixed instrument catalog — five instruments per market."""

from collections.abc import Iterable

from daily_trader.domain.models import Instrument, Market

# (id, name, code, price, change, change_percent)
_DOMESTIC = [
    ("1", "Samsung Electronics", "005930", 71500, 1500, 2.14),
    ("2", "SK Hynix", "000660", 128000, -2000, -1.54),
    ("3", "NAVER", "035420", 185000, 3500, 1.93),
    ("4", "Kakao", "035720", 45200, -800, -1.74),
    ("5", "LG Energy Solution", "373220", 412000, 8000, 1.98),
]

_INTERNATIONAL = [
    ("6", "Apple Inc.", "AAPL", 175.43, 3.69, 2.15),
    ("7", "Microsoft Corp.", "MSFT", 378.85, 4.68, 1.25),
    ("8", "Alphabet Inc.", "GOOGL", 138.21, -1.21, -0.87),
    ("9", "Tesla Inc.", "TSLA", 248.5, 10.3, 4.32),
    ("10", "Amazon.com Inc.", "AMZN", 151.94, -3.26, -2.1),
]

_CRYPTO = [
    ("11", "Bitcoin", "BTC", 43250.0, 2320.5, 5.67),
    ("12", "Ethereum", "ETH", 2650.75, -63.45, -2.34),
    ("13", "Binance Coin", "BNB", 315.2, 9.8, 3.21),
    ("14", "Cardano", "ADA", 0.485, -0.023, -4.56),
    ("15", "Solana", "SOL", 98.75, 7.22, 7.89),
]


def default_catalog() -> list[Instrument]:
    """Build a fresh copy of the catalog. Each session owns its own instances."""
    catalog: list[Instrument] = []
    for market, rows in (
        (Market.DOMESTIC, _DOMESTIC),
        (Market.INTERNATIONAL, _INTERNATIONAL),
        (Market.CRYPTO, _CRYPTO),
    ):
        for id_, name, code, price, change, change_percent in rows:
            catalog.append(
                Instrument(
                    id=id_,
                    name=name,
                    code=code,
                    market=market,
                    price=price,
                    change=change,
                    change_percent=change_percent,
                )
            )
    return catalog


def find_instrument(instruments: Iterable[Instrument], key: str) -> Instrument | None:
    """Look up an instrument by catalog id, falling back to its ticker code."""
    by_code: Instrument | None = None
    for instrument in instruments:
        if instrument.id == key:
            return instrument
        if by_code is None and instrument.code.upper() == key.upper():
            by_code = instrument
    return by_code


def group_by_market(instruments: Iterable[Instrument]) -> dict[str, list[Instrument]]:
    """Split the catalog into ``{"domestic": [...], "international": [...], "crypto": [...]}``."""
    grouped: dict[str, list[Instrument]] = {m.value: [] for m in Market}
    for instrument in instruments:
        grouped[instrument.market.value].append(instrument)
    return grouped
