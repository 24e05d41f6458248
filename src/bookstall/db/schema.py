# ABOUTME: SQL DDL statements for the bookstall store catalog schema.
# ABOUTME: Defines products, downloads, tags, media attachments, and schema versioning.

SCHEMA_V1 = """
-- Sellable products
CREATE TABLE products (
    id             INTEGER PRIMARY KEY AUTOINCREMENT,
    name           TEXT NOT NULL,
    regular_price  TEXT NOT NULL,
    virtual        INTEGER NOT NULL DEFAULT 0,
    downloadable   INTEGER NOT NULL DEFAULT 0,
    description    TEXT NOT NULL DEFAULT '',
    authors        TEXT,
    published_date TEXT,
    thumbnail_id   INTEGER REFERENCES attachments(id) ON DELETE SET NULL,
    date_created   TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now')),
    date_modified  TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

-- Files granted to buyers of a downloadable product
CREATE TABLE product_downloads (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    product_id INTEGER NOT NULL REFERENCES products(id) ON DELETE CASCADE,
    name       TEXT NOT NULL,
    file_url   TEXT NOT NULL
);

CREATE INDEX idx_product_downloads_product ON product_downloads(product_id);

-- Product tag taxonomy
CREATE TABLE tags (
    id   INTEGER PRIMARY KEY AUTOINCREMENT,
    name TEXT NOT NULL,
    slug TEXT NOT NULL UNIQUE
);

CREATE TABLE product_tags (
    product_id INTEGER NOT NULL REFERENCES products(id) ON DELETE CASCADE,
    tag_id     INTEGER NOT NULL REFERENCES tags(id) ON DELETE CASCADE,
    PRIMARY KEY (product_id, tag_id)
);

-- Media library
CREATE TABLE attachments (
    id         INTEGER PRIMARY KEY AUTOINCREMENT,
    parent_id  INTEGER REFERENCES products(id) ON DELETE SET NULL,
    title      TEXT NOT NULL,
    file_path  TEXT NOT NULL,
    url        TEXT NOT NULL,
    mime_type  TEXT,
    metadata   TEXT,
    date_added TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

CREATE INDEX idx_attachments_parent ON attachments(parent_id) WHERE parent_id IS NOT NULL;

-- Schema versioning for future migrations
CREATE TABLE schema_version (
    version    INTEGER NOT NULL,
    applied_at TEXT NOT NULL DEFAULT (strftime('%Y-%m-%dT%H:%M:%S', 'now'))
);

INSERT INTO schema_version (version) VALUES (1);
"""

# (version, sql) pairs applied in order on top of SCHEMA_V1.
MIGRATIONS: list[tuple[int, str]] = []
