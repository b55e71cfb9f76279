"""SQLite database schema and models."""

SCHEMA = """
-- Append-only alert log; rows are never updated, only deleted by age
CREATE TABLE IF NOT EXISTS alerts (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    created_at TIMESTAMP NOT NULL,
    alert_type TEXT NOT NULL,
    severity TEXT NOT NULL,
    chain TEXT NOT NULL,
    token TEXT NOT NULL,
    contract_address TEXT,
    ai_summary TEXT NOT NULL,
    -- whale alerts
    amount REAL,
    wallet_address TEXT,
    -- dump alerts
    price_change REAL,
    current_price REAL,
    volume REAL,
    metadata TEXT
);

-- Tokens watched by the dump scan
CREATE TABLE IF NOT EXISTS monitored_tokens (
    symbol TEXT NOT NULL,
    chain TEXT NOT NULL,
    price_source_id TEXT,
    contract_address TEXT,
    enabled INTEGER NOT NULL DEFAULT 1,
    market_cap REAL NOT NULL DEFAULT 0,
    PRIMARY KEY (symbol, chain)
);

-- Indexes for dashboard queries and retention
CREATE INDEX IF NOT EXISTS idx_alerts_created_at ON alerts(created_at);
CREATE INDEX IF NOT EXISTS idx_alerts_chain ON alerts(chain);
CREATE INDEX IF NOT EXISTS idx_alerts_type_severity ON alerts(alert_type, severity);
"""
