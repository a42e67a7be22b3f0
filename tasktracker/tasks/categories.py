"""
Tool: Category Catalog
Purpose: The authoritative set of task categories

The parser ships its own trigger table, but the catalog decides which
categories exist. category_table() builds the parser's table from the
catalog so user-created categories become classifiable.

Usage:
    python -m tasktracker.tasks.categories --action seed
    python -m tasktracker.tasks.categories --action list
    python -m tasktracker.tasks.categories --action create --name Garden --color "#4CAF50"

Output:
    JSON result with success status and data
"""

import argparse
import json
import sqlite3
import sys
from typing import Any, Dict, List, Optional

from tasktracker.logging_config import get_logger, setup_logging
from tasktracker.tasks.manager import generate_id, get_connection, row_to_dict
from tasktracker.voice.config import VocabularyConfig

logger = get_logger(__name__)

# name -> (color, icon)
DEFAULT_CATEGORIES: Dict[str, tuple] = {
    "personal": ("#2196F3", "person"),
    "household": ("#4CAF50", "home"),
    "work": ("#FF9800", "work"),
    "family": ("#E91E63", "family"),
    "health": ("#F44336", "health"),
    "finance": ("#9C27B0", "money"),
}


def seed_default_categories() -> Dict[str, Any]:
    """
    Insert the default categories that are not already present.

    Returns:
        dict with the names that were added
    """
    conn = get_connection()
    cursor = conn.cursor()

    added = []
    for name, (color, icon) in DEFAULT_CATEGORIES.items():
        cursor.execute("""
            INSERT OR IGNORE INTO categories (id, name, color, icon, is_default)
            VALUES (?, ?, ?, ?, 1)
        """, (generate_id(), name, color, icon))
        if cursor.rowcount:
            added.append(name)

    conn.commit()
    conn.close()

    if added:
        logger.info("categories_seeded", added=added)

    return {"success": True, "data": {"added": added}}


def list_categories() -> Dict[str, Any]:
    """
    List all categories, defaults first.

    Returns:
        dict with category list
    """
    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("SELECT * FROM categories ORDER BY is_default DESC, created_at, name")
    categories = [row_to_dict(row) for row in cursor.fetchall()]

    conn.close()

    return {"success": True, "data": {"categories": categories, "total": len(categories)}}


def get_category_by_name(name: str) -> Dict[str, Any]:
    """
    Look up a category by name (case-insensitive).

    Args:
        name: Category name

    Returns:
        dict with category data
    """
    conn = get_connection()
    cursor = conn.cursor()

    cursor.execute("SELECT * FROM categories WHERE name = ?", (name.strip(),))
    category = row_to_dict(cursor.fetchone())

    conn.close()

    if not category:
        return {"success": False, "error": f"Category not found: {name}"}

    return {"success": True, "data": category}


def create_category(
    name: str,
    color: Optional[str] = None,
    icon: Optional[str] = None,
) -> Dict[str, Any]:
    """
    Create a user-defined category.

    Args:
        name: Unique category name
        color: Display color (hex)
        icon: Icon identifier

    Returns:
        dict with category data
    """
    name = (name or "").strip().lower()
    if not name:
        return {"success": False, "error": "Category name is required"}

    category_id = generate_id()

    conn = get_connection()
    cursor = conn.cursor()

    try:
        cursor.execute("""
            INSERT INTO categories (id, name, color, icon, is_default)
            VALUES (?, ?, ?, ?, 0)
        """, (category_id, name, color, icon))
    except sqlite3.IntegrityError:
        conn.close()
        return {"success": False, "error": f"Category already exists: {name}"}

    conn.commit()

    cursor.execute("SELECT * FROM categories WHERE id = ?", (category_id,))
    category = row_to_dict(cursor.fetchone())

    conn.close()

    return {
        "success": True,
        "data": category,
        "message": f"Category created with ID {category_id}",
    }


def category_table(vocabulary: Optional[VocabularyConfig] = None) -> Dict[str, List[str]]:
    """
    Build the parser's category trigger table from the catalog.

    Configured triggers are kept for catalog categories that have them,
    in configured order; other catalog categories trigger on their own
    name. Configured categories missing from the catalog are dropped.

    Args:
        vocabulary: Trigger source (defaults to the built-in vocabulary)

    Returns:
        Ordered mapping of category name -> trigger phrases
    """
    vocabulary = vocabulary or VocabularyConfig()
    names = [c["name"].lower() for c in list_categories()["data"]["categories"]]

    table: Dict[str, List[str]] = {}
    for name, triggers in vocabulary.categories.items():
        if name in names:
            table[name] = list(triggers)
    for name in names:
        if name not in table:
            table[name] = [name]

    return table


def main():
    setup_logging()
    parser = argparse.ArgumentParser(description="Category Catalog")
    parser.add_argument("--action", required=True, choices=["seed", "list", "get", "create", "table"])
    parser.add_argument("--name", help="Category name")
    parser.add_argument("--color", help="Display color")
    parser.add_argument("--icon", help="Icon identifier")
    args = parser.parse_args()

    if args.action in ("get", "create") and not args.name:
        print(json.dumps({"success": False, "error": f"--name required for {args.action}"}))
        sys.exit(1)

    if args.action == "seed":
        result = seed_default_categories()
    elif args.action == "list":
        result = list_categories()
    elif args.action == "get":
        result = get_category_by_name(args.name)
    elif args.action == "create":
        result = create_category(args.name, args.color, args.icon)
    else:
        result = {"success": True, "data": category_table()}

    print(json.dumps(result, indent=2, default=str))
    if not result.get("success"):
        sys.exit(1)


if __name__ == "__main__":
    main()
