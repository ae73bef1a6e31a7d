"""Watchlist storage.

The refresh loop only reads ``list()``; ``add`` and ``remove`` back the
CLI. A fresh SQLite store starts with a small default watchlist, while a
store the user has emptied stays empty.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

import aiosqlite

from growth_tracker.core.exceptions import WatchlistError
from growth_tracker.core.models import Stock

logger = logging.getLogger(__name__)

DEFAULT_STOCKS: tuple[Stock, ...] = (
    Stock(symbol="AAPL", name="Apple Inc."),
    Stock(symbol="MSFT", name="Microsoft Corporation"),
    Stock(symbol="GOOGL", name="Alphabet Inc."),
    Stock(symbol="AMZN", name="Amazon.com Inc."),
    Stock(symbol="META", name="Meta Platforms Inc."),
)


@runtime_checkable
class WatchlistStore(Protocol):
    """Persistence protocol for the list of tracked stocks."""

    async def list(self) -> list[Stock]:
        """Return tracked stocks in the order they were added."""
        ...

    async def add(self, stock: Stock) -> bool:
        """Track a stock. Returns False if the symbol is already tracked."""
        ...

    async def remove(self, symbol: str) -> bool:
        """Stop tracking a symbol. Returns False if it was not tracked."""
        ...


class InMemoryWatchlistStore:
    """Non-persistent WatchlistStore, for embedding and tests."""

    def __init__(self, stocks: list[Stock] | None = None) -> None:
        self._stocks: dict[str, Stock] = {s.symbol: s for s in stocks or []}

    async def list(self) -> list[Stock]:
        return list(self._stocks.values())

    async def add(self, stock: Stock) -> bool:
        if stock.symbol in self._stocks:
            return False
        self._stocks[stock.symbol] = stock
        return True

    async def remove(self, symbol: str) -> bool:
        return self._stocks.pop(symbol.strip().upper(), None) is not None


class SqliteWatchlistStore:
    """SQLite-backed implementation of WatchlistStore.

    Parameters
    ----------
    db_path : str
        Path to the SQLite database file. Created automatically, seeded
        with ``defaults``, if it doesn't exist.
    defaults : tuple[Stock, ...]
        Stocks inserted when the table is first created.
    """

    def __init__(self, db_path: str, defaults: tuple[Stock, ...] = DEFAULT_STOCKS) -> None:
        self._db_path = db_path
        self._defaults = defaults
        self._initialized = False

    async def _ensure_table(self) -> None:
        """Create the watchlist table, seeding defaults on first creation."""
        if self._initialized:
            return

        Path(self._db_path).parent.mkdir(parents=True, exist_ok=True)
        try:
            async with aiosqlite.connect(self._db_path) as db:
                cursor = await db.execute(
                    "SELECT name FROM sqlite_master WHERE type = 'table' AND name = 'watchlist'"
                )
                exists = await cursor.fetchone() is not None
                if not exists:
                    await db.execute(
                        """CREATE TABLE watchlist (
                            symbol TEXT PRIMARY KEY,
                            name TEXT NOT NULL,
                            sector TEXT,
                            industry TEXT,
                            added_seq INTEGER NOT NULL
                        )"""
                    )
                    await db.executemany(
                        """INSERT INTO watchlist (symbol, name, sector, industry, added_seq)
                           VALUES (?, ?, ?, ?, ?)""",
                        [
                            (s.symbol, s.name, s.sector, s.industry, seq)
                            for seq, s in enumerate(self._defaults)
                        ],
                    )
                    await db.commit()
                    logger.info(
                        "Created watchlist at %s with %d default stocks",
                        self._db_path, len(self._defaults),
                    )
        except aiosqlite.Error as e:
            raise WatchlistError(
                f"Failed to initialize watchlist: {e}",
                context={"operation": "initialize", "path": self._db_path},
            ) from e
        self._initialized = True

    async def list(self) -> list[Stock]:
        await self._ensure_table()
        try:
            async with aiosqlite.connect(self._db_path) as db:
                cursor = await db.execute(
                    "SELECT symbol, name, sector, industry FROM watchlist ORDER BY added_seq"
                )
                rows = await cursor.fetchall()
        except aiosqlite.Error as e:
            raise WatchlistError(
                f"Failed to read watchlist: {e}",
                context={"operation": "list", "path": self._db_path},
            ) from e

        return [
            Stock(symbol=row[0], name=row[1], sector=row[2], industry=row[3])
            for row in rows
        ]

    async def add(self, stock: Stock) -> bool:
        await self._ensure_table()
        try:
            async with aiosqlite.connect(self._db_path) as db:
                cursor = await db.execute(
                    """INSERT OR IGNORE INTO watchlist (symbol, name, sector, industry, added_seq)
                       VALUES (?, ?, ?, ?,
                               (SELECT COALESCE(MAX(added_seq), -1) + 1 FROM watchlist))""",
                    (stock.symbol, stock.name, stock.sector, stock.industry),
                )
                await db.commit()
                added = cursor.rowcount > 0
        except aiosqlite.Error as e:
            raise WatchlistError(
                f"Failed to add {stock.symbol}: {e}",
                context={"operation": "add", "path": self._db_path},
            ) from e

        if added:
            logger.info("Added %s to watchlist", stock.symbol)
        else:
            logger.info("%s is already in the watchlist", stock.symbol)
        return added

    async def remove(self, symbol: str) -> bool:
        await self._ensure_table()
        symbol = symbol.strip().upper()
        try:
            async with aiosqlite.connect(self._db_path) as db:
                cursor = await db.execute("DELETE FROM watchlist WHERE symbol = ?", (symbol,))
                await db.commit()
                removed = cursor.rowcount > 0
        except aiosqlite.Error as e:
            raise WatchlistError(
                f"Failed to remove {symbol}: {e}",
                context={"operation": "remove", "path": self._db_path},
            ) from e

        if removed:
            logger.info("Removed %s from watchlist", symbol)
        return removed
