"""Shared fixtures: a temporary SQLite catalog seeded with known products."""

import os
import sqlite3
import tempfile

import pytest

from catalog.clients import SqliteClient
from catalog.services import CatalogQueryService

PLACEHOLDER_PATTERNS = (
    "%Este servidor MCP oferece funcionalidades avançadas%",
    "%Este cliente MCP foi desenvolvido%",
    "%Este agente de IA foi desenvolvido%",
)

CREATE_PRODUCTS_SQL = """
CREATE TABLE products (
    id INTEGER {key},
    product_type TEXT NOT NULL,
    name TEXT NOT NULL,
    name_en TEXT,
    name_pt TEXT,
    description TEXT,
    description_en TEXT,
    description_pt TEXT,
    stars_numeric INTEGER,
    is_active BOOLEAN NOT NULL DEFAULT 1,
    is_featured BOOLEAN NOT NULL DEFAULT 0,
    category TEXT,
    image_url TEXT,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""

INSERT_PRODUCT_SQL = """
INSERT INTO products
    (id, product_type, name, name_pt, description, description_pt,
     stars_numeric, is_active, is_featured, category, image_url, created_at, updated_at)
VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
"""

CREATED = "2025-01-01T00:00:00+00:00"
UPDATED = "2025-06-01T00:00:00+00:00"

# id, type, name, name_pt, description, description_pt, stars, active, featured, category, image_url
SEED_PRODUCTS = [
    (529, "mcp_server", "Google Drive", "Google Drive",
     "Google Drive integration for file access, search and management over MCP.", None,
     120, 1, 0, "File Systems", "https://cdn.example.com/logos/google-drive.png"),
    (554, "mcp_server", "MongoDB MCP Server", "Servidor MCP MongoDB",
     "MCP server for MongoDB databases.",
     "Este servidor MCP oferece funcionalidades avançadas para integração.",
     300, 1, 1, "Databases", None),
    (560, "mcp_server", "GitHub MCP Server", None,
     "Repository management and code search.", "Repository management and code search.",
     300, 1, 0, "Developer Tools", ""),
    (600, "mcp_server", "Retired Server", None, "No longer listed.", None,
     999, 0, 0, "Misc", "/assets/client-logos/retired.png"),
    (700, "mcp_client", "Claude Desktop", "Claude Desktop",
     "Desktop client with MCP support.", "Cliente desktop com suporte MCP.",
     50, 1, 1, "Clients", "https://achai.example.com/assets/client-logos/claude.png"),
    (800, "ai_agent", "AutoGPT", "AutoGPT",
     "Autonomous GPT-4 agent.", "Agente autônomo baseado em GPT-4.",
     500, 1, 0, "Agents", "https://cdn.example.com/logos/autogpt.png"),
    (801, "ai_agent", "BabyAGI", "",
     "Task-driven autonomous agent.", "Agente autônomo orientado a tarefas.",
     500, 1, 0, "Agents", "https://cdn.example.com/logos/babyagi.png"),
    (802, "ai_agent", "CrewAI", None,
     "Framework for orchestrating role-playing agents.", "",
     None, 1, 0, "Agents", None),
]


def create_catalog(path: str, rows=SEED_PRODUCTS, unique_ids: bool = True) -> None:
    """Create and seed a products table in the SQLite file at path."""
    conn = sqlite3.connect(path)
    try:
        conn.execute(CREATE_PRODUCTS_SQL.format(key="PRIMARY KEY" if unique_ids else "NOT NULL"))
        conn.executemany(INSERT_PRODUCT_SQL, [row + (CREATED, UPDATED) for row in rows])
        conn.commit()
    finally:
        conn.close()


@pytest.fixture
def temp_db_path():
    """Create a temporary database file for testing."""
    fd, path = tempfile.mkstemp(suffix=".db")
    os.close(fd)
    os.remove(path)
    yield path
    # Cleanup
    if os.path.exists(path):
        os.remove(path)


@pytest.fixture
def catalog_db(temp_db_path):
    """Path to a freshly seeded SQLite catalog."""
    create_catalog(temp_db_path)
    return temp_db_path


@pytest.fixture
def catalog_client(catalog_db):
    client = SqliteClient(catalog_db)
    yield client
    client.close()


@pytest.fixture
def query_service(catalog_client):
    return CatalogQueryService(
        catalog_client,
        languages=("en", "pt"),
        placeholder_patterns=PLACEHOLDER_PATTERNS,
    )
