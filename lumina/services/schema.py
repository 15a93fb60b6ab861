"""DynamoDB table definitions.

Names are unprefixed; `create_tables` applies the environment prefix the same
way DynamoDBService does.
"""

from typing import Any

SESSION_TTL_ATTRIBUTE = "expires_at"


def _hash_table(key: str) -> dict[str, Any]:
    return {
        "KeySchema": [{"AttributeName": key, "KeyType": "HASH"}],
        "AttributeDefinitions": [{"AttributeName": key, "AttributeType": "S"}],
        "BillingMode": "PAY_PER_REQUEST",
    }


# table name -> (partition key, create_table kwargs)
TABLES: dict[str, dict[str, Any]] = {
    "guests": _hash_table("guest_id"),
    "guest-phones": _hash_table("phone"),
    "venues": _hash_table("venue_id"),
    "ticket-tiers": _hash_table("tier_id"),
    "config": _hash_table("config_id"),
    "rsvps": _hash_table("guest_id"),
    "tickets": _hash_table("ticket_id"),
    "ticket-scans": _hash_table("ticket_id"),
    "admission-sessions": _hash_table("session_id"),
}

TTL_TABLES = {"admission-sessions": SESSION_TTL_ATTRIBUTE}


def partition_key(table: str) -> str:
    """Return the partition key attribute of a table."""
    return str(TABLES[table]["KeySchema"][0]["AttributeName"])


def create_tables(client: Any, prefix: str) -> list[str]:
    """Create every table that does not exist yet.

    Args:
        client: boto3 DynamoDB client
        prefix: Table name prefix (e.g. "lumina-dev")

    Returns:
        Names of the tables that were created
    """
    existing = set(client.list_tables().get("TableNames", []))
    created = []
    for table, definition in TABLES.items():
        name = f"{prefix}-{table}"
        if name in existing:
            continue
        client.create_table(TableName=name, **definition)
        client.get_waiter("table_exists").wait(TableName=name)
        if table in TTL_TABLES:
            client.update_time_to_live(
                TableName=name,
                TimeToLiveSpecification={
                    "AttributeName": TTL_TABLES[table],
                    "Enabled": True,
                },
            )
        created.append(name)
    return created
